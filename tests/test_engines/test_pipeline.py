"""End-to-end tests for the accounting pipeline."""

from decimal import Decimal
from unittest.mock import MagicMock

import pytest

from chainledger.engines.classifier import SelectorClassifier
from chainledger.engines.pipeline import AccountingPipeline
from chainledger.exceptions import NoInventoryError
from chainledger.models.enums import PositionLabel
from chainledger.models.transfer import TokenTransfer, TransactionDetail, TransactionReceipt

from chain_data import DAY1, DAY2, DAY3, EXCHANGE, SHIB_CONTRACT, WALLET


class TestRoundTrip:
    def test_realized_gain_and_remaining_inventory(self, priced_context, round_trip):
        result = AccountingPipeline(priced_context).run_offline(round_trip)
        eth = result.ledgers["ETH"]
        assert eth.total_gains == Decimal("3")
        assert eth.remaining_inventory == Decimal("0.02")
        assert eth.remaining_inventory_cost == Decimal("40")
        usdc = result.ledgers["USDC"]
        assert usdc.total_gains == Decimal("0")
        assert usdc.remaining_inventory == Decimal("70")
        assert result.failed_symbols == {}

    def test_positions(self, priced_context, round_trip):
        result = AccountingPipeline(priced_context).run_offline(round_trip)
        assert [(p.symbol, p.label) for p in result.positions] == [
            ("ETH", PositionLabel.PROFIT),
            ("USDC", PositionLabel.NONE),
        ]

    def test_holdings(self, priced_context, round_trip):
        result = AccountingPipeline(priced_context).run_offline(round_trip)
        holdings = {h.symbol: h for h in result.holdings}
        assert holdings["ETH"].current_value == Decimal("50")
        assert holdings["ETH"].unrealized == Decimal("10")

    def test_strict_mode_aborts(self, priced_context, native):
        transfers = [native("0xa", DAY1, WALLET, EXCHANGE, 10**18)]
        with pytest.raises(NoInventoryError):
            AccountingPipeline(priced_context).run_offline(transfers)

    def test_lenient_mode_reports_failure(self, priced_context, native, round_trip):
        priced_context.options.strict = False
        transfers = [native("0xa", DAY1 - 10, WALLET, EXCHANGE, 10**18), *round_trip]
        result = AccountingPipeline(priced_context).run_offline(transfers)
        assert set(result.failed_symbols) == {"ETH"}
        assert result.ledgers["USDC"].error is None


class TestFetch:
    def test_fetch_uses_providers(self, priced_context, round_trip):
        priced_context.accounts.mark_added(WALLET, "Main wallet", start_block=100)
        priced_context.options.include_fees = True
        transfers = MagicMock()
        transfers.fetch.return_value = round_trip
        transactions = MagicMock()
        transactions.get_receipt.side_effect = lambda tx: TransactionReceipt(
            hash=tx, from_address=WALLET, gas_used=21000, effective_gas_price=10**9
        )
        transactions.get_transaction.side_effect = lambda tx: TransactionDetail(
            hash=tx, from_address=WALLET, input="0x"
        )
        pipeline = AccountingPipeline(priced_context, transfers, transactions, SelectorClassifier())
        result = pipeline.run()

        transfers.fetch.assert_called_once_with(WALLET, 100)
        assert transactions.get_receipt.call_count == 3
        assert all(item.operation == "Transfer" for item in result.line_items)
        assert result.line_items[1].fees == Decimal("0.000021")

    def test_fetch_requires_provider(self, context):
        with pytest.raises(ValueError):
            AccountingPipeline(context).fetch()


def shib(tx: str, timestamp: int, sender: str, receiver: str, raw: int) -> TokenTransfer:
    return TokenTransfer(
        hash=tx,
        timestamp=timestamp,
        from_address=sender,
        to_address=receiver,
        value=str(raw),
        contract_address=SHIB_CONTRACT,
        token_symbol="SHIB",
        token_decimal=18,
    )


class TestUnpricedCommodity:
    def setup_method(self):
        self.first = 1234567890123456789012345678901
        self.second = 9876543210987654321098765432109

    def test_deposit_without_price_propagates_nan(self, priced_context):
        priced_context.options.allow_unlisted_tokens = True
        result = AccountingPipeline(priced_context).run_offline(
            [shib("0xa", DAY1, EXCHANGE, WALLET, self.first)]
        )
        (movement,) = result.movements
        assert movement.price.is_nan()
        assert movement.cost.is_nan()
        shib_ledger = result.ledgers["SHIB"]
        assert shib_ledger.remaining_inventory_cost.is_nan()
        (holding,) = result.holdings
        assert holding.current_value.is_nan()
        assert result.failed_symbols == {}

    def test_high_supply_amounts_stay_exact(self, priced_context):
        priced_context.options.allow_unlisted_tokens = True
        result = AccountingPipeline(priced_context).run_offline(
            [
                shib("0xa", DAY1, EXCHANGE, WALLET, self.first),
                shib("0xb", DAY2, EXCHANGE, WALLET, self.second),
                shib("0xc", DAY3, WALLET, EXCHANGE, self.first + self.second),
            ]
        )
        deposit = result.movements[0]
        assert deposit.amount == Decimal("1234567890123.456789012345678901")
        shib_ledger = result.ledgers["SHIB"]
        assert shib_ledger.inventory == []
        assert shib_ledger.remaining_inventory == 0
