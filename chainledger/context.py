"""Per-run options and the registries every component reads from."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from pathlib import Path
from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, Field, field_validator

from chainledger.models.enums import OutputFormat
from chainledger.models.transfer import as_utc
from chainledger.normalization.accounts import AccountRegistry, normalize_address
from chainledger.normalization.tokens import TokenRegistry

if TYPE_CHECKING:
    from chainledger.engines.pricing import PriceResolver

DEFAULT_ETHERSCAN_URL = "https://api.etherscan.io/api"
FEE_ACCOUNT = "fees"


class RunOptions(BaseModel):
    model_config = ConfigDict(validate_assignment=True)

    etherscan_api_key: str | None = None
    etherscan_url: str = DEFAULT_ETHERSCAN_URL
    end_block: int | None = None
    start_date: datetime | None = None
    end_date: datetime | None = None
    ignored_symbols: set[str] = Field(default_factory=set)
    include_fees: bool = False
    benchmark: str = "BTC"
    profit_threshold: Decimal = Decimal("0")
    fee_account: str = FEE_ACCOUNT
    strict: bool = True
    allow_unlisted_tokens: bool = False
    output: Path | None = None
    format: OutputFormat | None = None

    @field_validator("start_date", "end_date")
    @classmethod
    def _utc(cls, value: datetime | None) -> datetime | None:
        return as_utc(value) if value is not None else None

    def api_key(self) -> str | None:
        return self.etherscan_api_key or os.environ.get("ETHERSCAN_API_KEY")

    def is_ignored(self, symbol: str | None, contract_address: str = "") -> bool:
        if symbol and symbol in self.ignored_symbols:
            return True
        if contract_address:
            ignored = {normalize_address(entry) for entry in self.ignored_symbols}
            return normalize_address(contract_address) in ignored
        return False


@dataclass
class RunContext:
    """Constructed once per run and passed to every component."""

    options: RunOptions = field(default_factory=RunOptions)
    accounts: AccountRegistry = field(default_factory=AccountRegistry)
    tokens: TokenRegistry = field(default_factory=TokenRegistry)
    prices: PriceResolver | None = None

    def __post_init__(self) -> None:
        if self.prices is None:
            from chainledger.engines.pricing import PriceResolver

            self.prices = PriceResolver(tokens=self.tokens)
        fee_sink = self.accounts.get_or_create(self.options.fee_account)
        if fee_sink.is_unknown:
            fee_sink.label = "Network fees"
