"""Price history providers: an in-memory table and a CoinGecko HTTP client."""

import json
from datetime import UTC, datetime
from decimal import Decimal
from pathlib import Path
from typing import Any

from chainledger.decimal_utils import to_decimal
from chainledger.exceptions import ConfigError
from chainledger.ingestion.http import JsonHttpClient
from chainledger.models.transfer import as_utc
from chainledger.normalization.accounts import normalize_address

COINGECKO_URL = "https://api.coingecko.com/api/v3"

DEFAULT_COIN_IDS: dict[str, str] = {
    "BTC": "bitcoin",
    "WBTC": "wrapped-bitcoin",
    "ETH": "ethereum",
    "WETH": "weth",
    "MATIC": "matic-network",
    "LINK": "chainlink",
    "UNI": "uniswap",
    "MANA": "decentraland",
}

PriceSeries = list[tuple[datetime, Decimal]]


def _parse_timestamp(value: Any) -> datetime:
    if isinstance(value, (int, float, Decimal)):
        return datetime.fromtimestamp(int(value), tz=UTC)
    return as_utc(datetime.fromisoformat(str(value).replace("Z", "+00:00")))


class StaticPriceHistory:
    """Price history held in memory, keyed by symbol or contract address."""

    def __init__(
        self,
        history: dict[str, PriceSeries] | None = None,
        current: dict[str, Decimal] | None = None,
    ):
        self.history = {
            normalize_address(k): sorted(v, key=lambda sample: sample[0])
            for k, v in (history or {}).items()
        }
        self.current = {normalize_address(k): v for k, v in (current or {}).items()}

    @classmethod
    def from_json(cls, path: Path) -> "StaticPriceHistory":
        """Load ``{"history": {SYM: [[ts, price], ...]}, "current": {SYM: price}}``.

        Timestamps are unix seconds or ISO-8601 strings.
        """
        if not path.exists():
            raise ConfigError(path, "price file not found")
        try:
            raw = json.loads(path.read_text(), parse_float=Decimal)
        except json.JSONDecodeError as exc:
            raise ConfigError(path, f"invalid JSON: {exc}") from exc
        history = {
            commodity: [(_parse_timestamp(ts), to_decimal(price)) for ts, price in samples]
            for commodity, samples in raw.get("history", {}).items()
        }
        current = {commodity: to_decimal(price) for commodity, price in raw.get("current", {}).items()}
        return cls(history, current)

    def add(self, commodity: str, when: datetime, price: Decimal) -> None:
        series = self.history.setdefault(normalize_address(commodity), [])
        series.append((as_utc(when), price))
        series.sort(key=lambda sample: sample[0])

    def get_historical_prices(self, commodity: str, start: datetime, end: datetime) -> PriceSeries:
        series = self.history.get(normalize_address(commodity), [])
        return [(ts, price) for ts, price in series if start <= ts <= end]

    def get_current_price(self, commodity: str) -> Decimal | None:
        return self.current.get(normalize_address(commodity))


class CoinGeckoClient(JsonHttpClient):
    """USD prices from the CoinGecko public API.

    Symbols are mapped to coin ids through ``coin_ids``; contract addresses
    are looked up on the ethereum platform. Unmapped commodities have no data.
    """

    source = "coingecko"

    def __init__(
        self,
        coin_ids: dict[str, str] | None = None,
        base_url: str = COINGECKO_URL,
        **kwargs: Any,
    ):
        super().__init__(**kwargs)
        self.coin_ids = dict(DEFAULT_COIN_IDS if coin_ids is None else coin_ids)
        self.base_url = base_url.rstrip("/")

    def _coin_path(self, commodity: str) -> str | None:
        if commodity.startswith("0x"):
            return f"/coins/ethereum/contract/{normalize_address(commodity)}"
        coin_id = self.coin_ids.get(commodity.upper())
        if coin_id is None:
            return None
        return f"/coins/{coin_id}"

    def get_historical_prices(self, commodity: str, start: datetime, end: datetime) -> PriceSeries:
        path = self._coin_path(commodity)
        if path is None:
            return []
        payload = self.get_json(
            f"{self.base_url}{path}/market_chart/range",
            params={
                "vs_currency": "usd",
                "from": int(start.timestamp()),
                "to": int(end.timestamp()),
            },
        )
        return [
            (datetime.fromtimestamp(int(ms) // 1000, tz=UTC), to_decimal(price))
            for ms, price in payload.get("prices", [])
        ]

    def get_current_price(self, commodity: str) -> Decimal | None:
        if commodity.startswith("0x"):
            address = normalize_address(commodity)
            payload = self.get_json(
                f"{self.base_url}/simple/token_price/ethereum",
                params={"contract_addresses": address, "vs_currencies": "usd"},
            )
            quote = payload.get(address)
        else:
            coin_id = self.coin_ids.get(commodity.upper())
            if coin_id is None:
                return None
            payload = self.get_json(
                f"{self.base_url}/simple/price",
                params={"ids": coin_id, "vs_currencies": "usd"},
            )
            quote = payload.get(coin_id)
        if not quote or "usd" not in quote:
            return None
        return to_decimal(quote["usd"])
