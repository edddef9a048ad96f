"""Tests for double-entry ledger reconstruction."""

from decimal import Decimal

import pytest

from chainledger.engines.classifier import SelectorClassifier
from chainledger.exceptions import ContractSymbolCollisionError
from chainledger.models.transfer import TokenTransfer, TransactionDetail, TransactionReceipt
from chainledger.normalization.ledger import LedgerBuilder

from chain_data import DAY1, DAY2, DAY3, EXCHANGE, POOL, USDC_CONTRACT, WALLET


class TestLedgerBuilder:
    def test_every_line_item_balances(self, context, round_trip):
        result = LedgerBuilder(context).build(round_trip)
        assert list(result.line_items) == ["0xtx1", "0xtx2", "0xtx3"]
        assert all(item.is_balanced() for item in result.line_items.values())

    def test_deposit_is_not_a_swap(self, context, round_trip):
        item = LedgerBuilder(context).build(round_trip).line_items["0xtx1"]
        assert not item.apparent_swap
        assert item.self_account_net_changes == {WALLET: {"USDC": Decimal("100")}}
        assert item.net_changes[EXCHANGE] == {"USDC": Decimal("-100")}

    def test_swap_detected(self, context, round_trip):
        item = LedgerBuilder(context).build(round_trip).line_items["0xtx2"]
        assert item.apparent_swap
        assert item.self_account_net_changes[WALLET]["USDC"] == Decimal("-100")
        assert item.self_account_net_changes[WALLET]["ETH"] == Decimal("0.05")

    def test_untracked_transfers_skipped(self, context, native):
        result = LedgerBuilder(context).build([native("0xa", DAY1, EXCHANGE, POOL, 10**18)])
        assert result.line_items == {}

    def test_self_transfer_skipped(self, context, native):
        result = LedgerBuilder(context).build([native("0xa", DAY1, WALLET, WALLET, 10**18)])
        assert result.line_items == {}

    def test_ordered_by_timestamp(self, context, native):
        result = LedgerBuilder(context).build(
            [native("0xlate", DAY3, EXCHANGE, WALLET, 1), native("0xearly", DAY1, EXCHANGE, WALLET, 1)]
        )
        assert list(result.line_items) == ["0xearly", "0xlate"]

    def test_transfer_between_two_tracked_accounts(self, context, native):
        second = "0x4444444444444444444444444444444444444444"
        context.accounts.mark_added(second, "Savings")
        item = LedgerBuilder(context).build([native("0xa", DAY1, WALLET, second, 10**18)]).line_items["0xa"]
        assert item.self_account_net_changes == {
            WALLET: {"ETH": Decimal("-1")},
            second: {"ETH": Decimal("1")},
        }
        assert not item.apparent_swap

    def test_multi_leg_route_is_not_a_swap(self, context, native, usdc):
        dai = TokenTransfer(
            hash="0xa",
            timestamp=DAY1,
            from_address=POOL,
            to_address=WALLET,
            value=str(5 * 10**18),
            contract_address="0x6b175474e89094c44da98b954eedeac495271d0f",
            token_symbol="DAI",
            token_decimal=18,
        )
        context.tokens.allow(dai.contract_address, "DAI")
        transfers = [
            usdc("0xa", DAY1, WALLET, POOL, 10),
            native("0xa", DAY1, POOL, WALLET, 10**16),
            dai,
        ]
        assert not LedgerBuilder(context).build(transfers).line_items["0xa"].apparent_swap

    def test_unknown_accounts_reported(self, context, native):
        result = LedgerBuilder(context).build([native("0xa", DAY1, EXCHANGE, WALLET, 1)])
        assert result.unknown_accounts == [EXCHANGE]

    def test_contract_symbol_collision(self, context, usdc):
        impostor = TokenTransfer(
            hash="0xb",
            timestamp=DAY2,
            from_address=POOL,
            to_address=WALLET,
            value="1",
            contract_address=USDC_CONTRACT,
            token_symbol="USDC.e",
            token_decimal=6,
        )
        with pytest.raises(ContractSymbolCollisionError) as exc_info:
            LedgerBuilder(context).build([usdc("0xa", DAY1, EXCHANGE, WALLET, 1), impostor])
        assert exc_info.value.known_symbol == "USDC"

    def test_contract_to_token_map(self, context, round_trip):
        result = LedgerBuilder(context).build(round_trip)
        assert result.contract_to_token == {USDC_CONTRACT: "USDC"}


class TestFees:
    def receipts(self):
        return [
            TransactionReceipt(hash="0xtx2", from_address=WALLET, gas_used=100000, effective_gas_price=10**10),
            TransactionReceipt(hash="0xtx2", from_address=WALLET, gas_used=200000, effective_gas_price=10**10),
        ]

    def test_largest_fee_wins(self, context, round_trip):
        item = LedgerBuilder(context).build(round_trip, self.receipts()).line_items["0xtx2"]
        assert item.fees == Decimal("0.002")
        assert item.payer == WALLET

    def test_fee_change_only_when_enabled(self, context, round_trip):
        item = LedgerBuilder(context).build(round_trip, self.receipts()).line_items["0xtx2"]
        assert not any(change.is_fee for change in item.changes)

        context.options.include_fees = True
        item = LedgerBuilder(context).build(round_trip, self.receipts()).line_items["0xtx2"]
        fee_changes = [change for change in item.changes if change.is_fee]
        assert len(fee_changes) == 1
        assert fee_changes[0].account_credit == "fees"
        assert fee_changes[0].amount == Decimal("0.002")
        assert item.is_balanced()

    def test_fee_does_not_break_swap_detection(self, context, round_trip):
        context.options.include_fees = True
        item = LedgerBuilder(context).build(round_trip, self.receipts()).line_items["0xtx2"]
        assert item.apparent_swap


class TestOperationLabels:
    def test_operation_from_selector(self, context, round_trip):
        transactions = {
            "0xtx1": TransactionDetail(hash="0xtx1", from_address=EXCHANGE, input="0xa9059cbb0000"),
            "0xtx2": TransactionDetail(hash="0xtx2", from_address=WALLET, input="0x12345678ff"),
        }
        classifier = SelectorClassifier()
        result = LedgerBuilder(context).build(round_trip, transactions=transactions, classifier=classifier)
        assert result.line_items["0xtx1"].operation == "transfer"
        assert result.line_items["0xtx2"].operation == "0x12345678"
        assert result.line_items["0xtx3"].operation is None
        assert classifier.unknown_selectors() == [("0x12345678", 1)]
