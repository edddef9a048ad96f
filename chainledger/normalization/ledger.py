"""Ledger builder: reconstruct double-entry line items from transfers."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Mapping
from decimal import Decimal
from typing import TYPE_CHECKING

from chainledger.decimal_utils import exact
from chainledger.exceptions import ContractSymbolCollisionError
from chainledger.models.ledger import Change, LedgerResult, LineItem, NetChanges
from chainledger.models.transfer import (
    NATIVE_SYMBOL,
    TransactionDetail,
    TransactionReceipt,
    Transfer,
)
from chainledger.normalization.accounts import normalize_address

if TYPE_CHECKING:
    from chainledger.context import RunContext

logger = logging.getLogger(__name__)


class LedgerBuilder:
    """Groups transfers per transaction hash into balanced line items."""

    def __init__(self, context: RunContext):
        self.options = context.options
        self.accounts = context.accounts
        self.tokens = context.tokens

    def build(
        self,
        transfers: Iterable[Transfer],
        receipts: Iterable[TransactionReceipt] = (),
        transactions: Mapping[str, TransactionDetail] | None = None,
        classifier: Callable[[str], str] | None = None,
    ) -> LedgerResult:
        """Build line items from deduplicated, filtered transfers.

        Transfers are processed in ascending timestamp order; ties keep the
        order in which they were discovered. A line item takes the date of
        the first transfer seen for its hash.
        """
        ordered = sorted(transfers, key=lambda transfer: transfer.timestamp)
        line_items: dict[str, LineItem] = {}
        contract_to_token: dict[str, str] = {}

        for transfer in ordered:
            debit = self.accounts.resolve(transfer.from_address)
            credit = self.accounts.resolve(transfer.to_address)
            if not (debit.added or credit.added):
                continue
            if debit is credit:
                continue

            self._register_contract(transfer, contract_to_token)

            item = line_items.get(transfer.hash)
            if item is None:
                item = LineItem(tx=transfer.hash, date=transfer.date)
                line_items[transfer.hash] = item
            item.changes.append(
                Change(
                    tx=transfer.hash,
                    account_debit=debit.account_id,
                    account_credit=credit.account_id,
                    symbol=transfer.symbol,
                    amount=transfer.amount,
                    contract_address=normalize_address(transfer.contract_address),
                    original_tx=transfer,
                )
            )

        self._apply_fees(line_items, receipts)
        if transactions is not None and classifier is not None:
            for tx, item in line_items.items():
                detail = transactions.get(tx)
                if detail is not None:
                    item.operation = classifier(detail.input)

        with exact():
            for item in line_items.values():
                self._aggregate(item)

        return LedgerResult(
            line_items=line_items,
            unknown_accounts=[account.address for account in self.accounts.unknown_accounts()],
            contract_to_token=contract_to_token,
        )

    def _register_contract(self, transfer: Transfer, contract_to_token: dict[str, str]) -> None:
        if transfer.is_native or transfer.token_symbol is None:
            return
        contract = normalize_address(transfer.contract_address)
        known = contract_to_token.get(contract)
        if known is None:
            contract_to_token[contract] = transfer.token_symbol
        elif known != transfer.token_symbol:
            raise ContractSymbolCollisionError(
                transfer.hash, contract, known, transfer.token_symbol
            )

    def _apply_fees(
        self,
        line_items: dict[str, LineItem],
        receipts: Iterable[TransactionReceipt],
    ) -> None:
        """Attach network fees; the largest fee seen per hash wins."""
        best: dict[str, TransactionReceipt] = {}
        for receipt in receipts:
            current = best.get(receipt.hash)
            if current is None or receipt.fee > current.fee:
                best[receipt.hash] = receipt

        for tx, receipt in best.items():
            item = line_items.get(tx)
            if item is None:
                continue
            item.fees = receipt.fee
            item.payer = normalize_address(receipt.from_address)
            if (
                self.options.include_fees
                and item.fees > 0
                and self.accounts.is_tracked(item.payer)
            ):
                fee_sink = self.accounts.get_or_create(self.options.fee_account)
                item.changes.append(
                    Change(
                        tx=tx,
                        account_debit=item.payer,
                        account_credit=fee_sink.account_id,
                        symbol=NATIVE_SYMBOL,
                        amount=item.fees,
                        is_fee=True,
                    )
                )

    def _commodity(self, change: Change) -> str:
        token = self.tokens.is_allowed_contract(change.contract_address)
        if token is not None:
            return token.symbol
        return change.symbol

    def _aggregate(self, item: LineItem) -> None:
        net: NetChanges = {}
        own: NetChanges = {}

        def add(target: NetChanges, account: str, symbol: str, amount: Decimal) -> None:
            deltas = target.setdefault(account, {})
            deltas[symbol] = deltas.get(symbol, Decimal("0")) + amount

        for change in item.changes:
            if change.is_fee:
                continue
            debit_tracked = self.accounts.is_tracked(change.account_debit)
            credit_tracked = self.accounts.is_tracked(change.account_credit)
            if not (debit_tracked or credit_tracked):
                continue
            symbol = self._commodity(change)
            add(net, change.account_debit, symbol, -change.amount)
            add(net, change.account_credit, symbol, change.amount)
            if debit_tracked:
                add(own, change.account_debit, symbol, -change.amount)
            if credit_tracked:
                add(own, change.account_credit, symbol, change.amount)

        item.net_changes = net
        item.self_account_net_changes = own
        item.apparent_swap = self._is_apparent_swap(item)

    @staticmethod
    def _is_apparent_swap(item: LineItem) -> bool:
        """One tracked account, two nonzero deltas of opposite sign.

        Multi-leg routes do not qualify and fall through to the
        deposit/withdrawal path.
        """
        active = item.active_self_accounts()
        if len(active) != 1:
            return False
        (deltas,) = active.values()
        if len(deltas) != 2:
            return False
        first, second = deltas.values()
        return (first > 0) != (second > 0)
