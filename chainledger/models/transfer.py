"""Transfer, transaction and receipt models.

Every transfer kind shares the same projection (hash, timestamp, from, to,
value, contract, symbol, decimals); the ``kind`` field discriminates the
per-kind extras.
"""

from datetime import UTC, datetime
from decimal import Decimal
from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field

from chainledger.decimal_utils import from_base_units
from chainledger.models.enums import TransferKind

NATIVE_SYMBOL = "ETH"
NATIVE_DECIMALS = 18


def utc_datetime(timestamp: int) -> datetime:
    return datetime.fromtimestamp(timestamp, tz=UTC)


def as_utc(value: datetime) -> datetime:
    """Treat naive datetimes as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


class TransferBase(BaseModel):
    model_config = ConfigDict(frozen=True)

    hash: str
    timestamp: int
    from_address: str
    to_address: str
    value: str
    contract_address: str = ""
    token_symbol: str | None = None
    token_decimal: int | None = None

    @property
    def is_native(self) -> bool:
        return not self.contract_address

    @property
    def symbol(self) -> str:
        return self.token_symbol or NATIVE_SYMBOL

    @property
    def decimals(self) -> int:
        if self.token_decimal is not None:
            return self.token_decimal
        return NATIVE_DECIMALS if self.is_native else 0

    @property
    def amount(self) -> Decimal:
        return from_base_units(self.value, self.decimals)

    @property
    def date(self) -> datetime:
        return utc_datetime(self.timestamp)

    @property
    def dedup_key(self) -> tuple[str, str, str, str | None, str]:
        """Identity of a value movement across upstream sources."""
        return (
            self.from_address.lower(),
            self.to_address.lower(),
            str(int(self.value or 0)),
            self.token_symbol,
            self.contract_address.lower(),
        )


class NativeTransfer(TransferBase):
    kind: Literal[TransferKind.NATIVE] = TransferKind.NATIVE


class TokenTransfer(TransferBase):
    kind: Literal[TransferKind.ERC20] = TransferKind.ERC20
    token_name: str | None = None


class MultiTokenTransfer(TransferBase):
    kind: Literal[TransferKind.ERC1155] = TransferKind.ERC1155
    token_id: str = ""


class InternalTransfer(TransferBase):
    kind: Literal[TransferKind.INTERNAL] = TransferKind.INTERNAL
    trace_id: str = ""


Transfer = Annotated[
    NativeTransfer | TokenTransfer | MultiTokenTransfer | InternalTransfer,
    Field(discriminator="kind"),
]


class TransactionDetail(BaseModel):
    hash: str
    from_address: str
    to_address: str | None = None
    input: str = "0x"
    gas_price: int = 0


class TransactionReceipt(BaseModel):
    hash: str
    from_address: str
    gas_used: int
    effective_gas_price: int
    status: int = 1

    @property
    def fee(self) -> Decimal:
        """Network fee in native units (gas used x effective gas price, in wei)."""
        return from_base_units(self.gas_used * self.effective_gas_price, NATIVE_DECIMALS)
