"""Double-entry ledger models: changes, line items and the builder result."""

from collections import defaultdict
from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field

from chainledger.decimal_utils import exact
from chainledger.models.transfer import Transfer

NetChanges = dict[str, dict[str, Decimal]]


class Change(BaseModel):
    """One directional movement: ``amount`` leaves the debit account and
    arrives at the credit account."""

    tx: str
    account_debit: str
    account_credit: str
    symbol: str
    amount: Decimal = Field(ge=0)
    contract_address: str = ""
    is_fee: bool = False
    original_tx: Transfer | None = None


class LineItem(BaseModel):
    """Everything that happened to tracked accounts within one transaction."""

    tx: str
    date: datetime
    changes: list[Change] = Field(default_factory=list)
    fees: Decimal = Decimal("0")
    payer: str | None = None
    operation: str | None = None
    net_changes: NetChanges = Field(default_factory=dict)
    self_account_net_changes: NetChanges = Field(default_factory=dict)
    apparent_swap: bool = False

    def balances(self) -> dict[tuple[str, str], Decimal]:
        """Signed amount per (account, symbol): credit positive, debit negative."""
        totals: dict[tuple[str, str], Decimal] = defaultdict(Decimal)
        with exact():
            for change in self.changes:
                totals[(change.account_debit, change.symbol)] -= change.amount
                totals[(change.account_credit, change.symbol)] += change.amount
        return dict(totals)

    def is_balanced(self) -> bool:
        per_symbol: dict[str, Decimal] = defaultdict(Decimal)
        with exact():
            for (_, symbol), amount in self.balances().items():
                per_symbol[symbol] += amount
        return all(total == 0 for total in per_symbol.values())

    def active_self_accounts(self) -> NetChanges:
        """Tracked accounts with their nonzero deltas only."""
        active: NetChanges = {}
        for account, deltas in self.self_account_net_changes.items():
            nonzero = {symbol: amount for symbol, amount in deltas.items() if amount != 0}
            if nonzero:
                active[account] = nonzero
        return active


class LedgerResult(BaseModel):
    line_items: dict[str, LineItem] = Field(default_factory=dict)
    unknown_accounts: list[str] = Field(default_factory=list)
    contract_to_token: dict[str, str] = Field(default_factory=dict)
