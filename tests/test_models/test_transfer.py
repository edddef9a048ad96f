"""Tests for transfer, receipt and ledger models."""

from datetime import UTC, datetime
from decimal import Decimal

import pytest
from pydantic import TypeAdapter, ValidationError

from chainledger.models.ledger import Change, LineItem
from chainledger.models.transfer import (
    InternalTransfer,
    MultiTokenTransfer,
    NativeTransfer,
    TokenTransfer,
    TransactionReceipt,
    Transfer,
)


class TestTransfer:
    def test_native_amount_in_ether(self):
        transfer = NativeTransfer(
            hash="0xa", timestamp=0, from_address="0x1", to_address="0x2", value="1500000000000000000"
        )
        assert transfer.is_native
        assert transfer.symbol == "ETH"
        assert transfer.decimals == 18
        assert transfer.amount == Decimal("1.5")

    def test_token_decimals(self):
        transfer = TokenTransfer(
            hash="0xa",
            timestamp=0,
            from_address="0x1",
            to_address="0x2",
            value="2500000",
            contract_address="0xc",
            token_symbol="USDC",
            token_decimal=6,
        )
        assert not transfer.is_native
        assert transfer.amount == Decimal("2.5")

    def test_token_without_decimals_is_whole_units(self):
        transfer = MultiTokenTransfer(
            hash="0xa", timestamp=0, from_address="0x1", to_address="0x2", value="3", contract_address="0xc"
        )
        assert transfer.decimals == 0
        assert transfer.amount == Decimal("3")

    def test_large_values_stay_exact(self):
        raw = str(2**256 - 1)
        transfer = NativeTransfer(hash="0xa", timestamp=0, from_address="0x1", to_address="0x2", value=raw)
        assert len(transfer.amount.as_tuple().digits) == len(raw)

    def test_date_is_utc(self):
        transfer = NativeTransfer(hash="0xa", timestamp=86400, from_address="0x1", to_address="0x2", value="1")
        assert transfer.date == datetime(1970, 1, 2, tzinfo=UTC)

    def test_frozen(self):
        transfer = NativeTransfer(hash="0xa", timestamp=0, from_address="0x1", to_address="0x2", value="1")
        with pytest.raises(ValidationError):
            transfer.value = "2"

    def test_dedup_key_ignores_case_and_kind(self):
        native = NativeTransfer(hash="0xa", timestamp=0, from_address="0xAB", to_address="0xCD", value="10")
        internal = InternalTransfer(hash="0xa", timestamp=5, from_address="0xab", to_address="0xcd", value="10")
        assert native.dedup_key == internal.dedup_key

    def test_discriminated_union(self):
        adapter = TypeAdapter(Transfer)
        transfer = adapter.validate_python(
            {
                "kind": "erc20",
                "hash": "0xa",
                "timestamp": 0,
                "from_address": "0x1",
                "to_address": "0x2",
                "value": "1",
                "contract_address": "0xc",
                "token_symbol": "DAI",
            }
        )
        assert isinstance(transfer, TokenTransfer)


class TestReceipt:
    def test_fee(self):
        receipt = TransactionReceipt(
            hash="0xa", from_address="0x1", gas_used=21000, effective_gas_price=10**9 * 20
        )
        assert receipt.fee == Decimal("0.00042")


class TestLineItem:
    def test_balanced(self):
        item = LineItem(
            tx="0xa",
            date=datetime(2024, 1, 1, tzinfo=UTC),
            changes=[
                Change(tx="0xa", account_debit="0x1", account_credit="0x2", symbol="ETH", amount=Decimal("1")),
                Change(tx="0xa", account_debit="0x2", account_credit="0x1", symbol="DAI", amount=Decimal("5")),
            ],
        )
        assert item.is_balanced()
        assert item.balances()[("0x1", "ETH")] == Decimal("-1")
        assert item.balances()[("0x1", "DAI")] == Decimal("5")

    def test_negative_change_rejected(self):
        with pytest.raises(ValidationError):
            Change(tx="0xa", account_debit="0x1", account_credit="0x2", symbol="ETH", amount=Decimal("-1"))

    def test_active_self_accounts_drops_zero_deltas(self):
        item = LineItem(
            tx="0xa",
            date=datetime(2024, 1, 1, tzinfo=UTC),
            self_account_net_changes={
                "0x1": {"ETH": Decimal("0"), "DAI": Decimal("3")},
                "0x2": {"ETH": Decimal("0")},
            },
        )
        assert item.active_self_accounts() == {"0x1": {"DAI": Decimal("3")}}
