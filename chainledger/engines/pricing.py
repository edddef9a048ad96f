"""Price resolution for commodities at a point in time or now.

Lookup order: stablecoins are pinned to 1; then the primary price history
(queried by symbol, then by each allow-listed contract carrying that
symbol); then the fallback provider; otherwise NaN. Callers that know the
other leg of a swap can substitute ``implied_price``.
"""

from __future__ import annotations

import logging
from datetime import UTC, date, datetime, timedelta
from decimal import Decimal
from typing import TYPE_CHECKING, Protocol

from chainledger.decimal_utils import NAN, ONE, is_nan
from chainledger.exceptions import FetchError
from chainledger.models.transfer import as_utc

if TYPE_CHECKING:
    from chainledger.normalization.tokens import TokenRegistry

logger = logging.getLogger(__name__)

STABLECOINS = frozenset({"USD", "USDC", "USDT", "DAI"})
LOOKBACK = timedelta(days=7)

PriceSeries = list[tuple[datetime, Decimal]]


class PriceHistoryProvider(Protocol):
    def get_historical_prices(
        self, commodity: str, start: datetime, end: datetime
    ) -> PriceSeries: ...

    def get_current_price(self, commodity: str) -> Decimal | None: ...


def implied_price(other_price: Decimal, other_amount: Decimal, amount: Decimal) -> Decimal:
    """Unit price of one swap leg derived from the other leg's value."""
    if is_nan(other_price) or amount == 0:
        return NAN
    return other_price * abs(other_amount) / abs(amount)


class PriceResolver:
    """USD unit prices, memoised per (commodity, UTC day)."""

    def __init__(
        self,
        primary: PriceHistoryProvider | None = None,
        fallback: PriceHistoryProvider | None = None,
        tokens: TokenRegistry | None = None,
        lookback: timedelta = LOOKBACK,
    ):
        self.providers = [p for p in (primary, fallback) if p is not None]
        self.tokens = tokens
        self.lookback = lookback
        self._series: dict[tuple[int, str, date], PriceSeries] = {}
        self._current: dict[str, Decimal] = {}
        self._missing: set[tuple[str, date | None]] = set()

    def price_at(self, commodity: str, when: datetime) -> Decimal:
        if commodity.upper() in STABLECOINS:
            return ONE
        when = as_utc(when)
        for index, provider in enumerate(self.providers):
            for key in self._candidates(commodity):
                price = self._sample_at(index, provider, key, when)
                if price is not None:
                    return price
        self._warn_missing(commodity, when.date())
        return NAN

    def current_price(self, commodity: str) -> Decimal:
        if commodity.upper() in STABLECOINS:
            return ONE
        if commodity in self._current:
            return self._current[commodity]
        price = NAN
        for provider in self.providers:
            found = self._first_current(provider, commodity)
            if found is not None:
                price = found
                break
        if is_nan(price):
            self._warn_missing(commodity, None)
        self._current[commodity] = price
        return price

    def _candidates(self, commodity: str) -> list[str]:
        # Ambiguous symbols: first allow-listed contract with data wins.
        keys = [commodity]
        if self.tokens is not None:
            keys.extend(self.tokens.contracts_for_symbol(commodity))
        return keys

    def _first_current(self, provider: PriceHistoryProvider, commodity: str) -> Decimal | None:
        for key in self._candidates(commodity):
            try:
                price = provider.get_current_price(key)
            except FetchError as exc:
                logger.warning("Current price lookup failed for %s: %s", key, exc)
                continue
            if price is not None:
                return price
        return None

    def _sample_at(
        self,
        index: int,
        provider: PriceHistoryProvider,
        commodity: str,
        when: datetime,
    ) -> Decimal | None:
        series = self._day_series(index, provider, commodity, when.date())
        latest: Decimal | None = None
        for timestamp, price in series:
            if timestamp > when:
                break
            latest = price
        return latest

    def _day_series(
        self,
        index: int,
        provider: PriceHistoryProvider,
        commodity: str,
        day: date,
    ) -> PriceSeries:
        key = (index, commodity, day)
        if key not in self._series:
            day_start = datetime(day.year, day.month, day.day, tzinfo=UTC)
            try:
                series = provider.get_historical_prices(
                    commodity, day_start - self.lookback, day_start + timedelta(days=1)
                )
            except FetchError as exc:
                logger.warning("Price history lookup failed for %s on %s: %s", commodity, day, exc)
                series = []
            self._series[key] = sorted(
                ((as_utc(ts), price) for ts, price in series), key=lambda sample: sample[0]
            )
        return self._series[key]

    def _warn_missing(self, commodity: str, day: date | None) -> None:
        if (commodity, day) in self._missing:
            return
        self._missing.add((commodity, day))
        when = day.isoformat() if day else "now"
        logger.warning("No price for %s (%s); values will be flagged as unpriced", commodity, when)
