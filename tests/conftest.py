"""Shared test fixtures for chainledger."""

from datetime import UTC, datetime
from decimal import Decimal

import pytest

from chainledger.context import RunContext
from chainledger.engines.pricing import PriceResolver
from chainledger.ingestion.prices import StaticPriceHistory
from chainledger.models.transfer import NativeTransfer, TokenTransfer

from chain_data import DAY1, DAY2, DAY3, EXCHANGE, POOL, USDC_CONTRACT, WALLET


@pytest.fixture
def context() -> RunContext:
    """One tracked wallet and USDC on the allow-list."""
    ctx = RunContext()
    ctx.accounts.mark_added(WALLET, "Main wallet")
    ctx.accounts.label(POOL, "Uniswap pool")
    ctx.tokens.allow(USDC_CONTRACT, "USDC", 6, "USD Coin")
    return ctx


@pytest.fixture
def price_history() -> StaticPriceHistory:
    return StaticPriceHistory(
        history={
            "ETH": [
                (datetime(2024, 1, 2, tzinfo=UTC), Decimal("2000")),
                (datetime(2024, 1, 3, tzinfo=UTC), Decimal("2100")),
            ],
            "BTC": [(datetime(2024, 1, 2, tzinfo=UTC), Decimal("40000"))],
        },
        current={"ETH": Decimal("2500"), "BTC": Decimal("50000")},
    )


@pytest.fixture
def priced_context(context: RunContext, price_history: StaticPriceHistory) -> RunContext:
    context.prices = PriceResolver(price_history, tokens=context.tokens)
    return context


@pytest.fixture
def native():
    def make(tx: str, timestamp: int, sender: str, receiver: str, wei: int) -> NativeTransfer:
        return NativeTransfer(
            hash=tx,
            timestamp=timestamp,
            from_address=sender,
            to_address=receiver,
            value=str(wei),
        )

    return make


@pytest.fixture
def usdc():
    def make(tx: str, timestamp: int, sender: str, receiver: str, units: int) -> TokenTransfer:
        return TokenTransfer(
            hash=tx,
            timestamp=timestamp,
            from_address=sender,
            to_address=receiver,
            value=str(units * 10**6),
            contract_address=USDC_CONTRACT,
            token_symbol="USDC",
            token_decimal=6,
        )

    return make


@pytest.fixture
def round_trip(native, usdc) -> list:
    """Deposit 100 USDC, swap it for 0.05 ETH, then swap 0.03 ETH for 70 USDC."""
    return [
        usdc("0xtx1", DAY1, EXCHANGE, WALLET, 100),
        usdc("0xtx2", DAY2, WALLET, POOL, 100),
        native("0xtx2", DAY2, POOL, WALLET, 5 * 10**16),
        native("0xtx3", DAY3, WALLET, POOL, 3 * 10**16),
        usdc("0xtx3", DAY3, POOL, WALLET, 70),
    ]
