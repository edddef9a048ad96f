"""FIFO inventory state per commodity."""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field

from chainledger.models.enums import MovementType
from chainledger.models.movement import Movement


class InventoryLot(BaseModel):
    model_config = ConfigDict(allow_inf_nan=True)

    symbol: str
    amount: Decimal  # remaining, decremented by later disposals
    price: Decimal
    original: Movement

    @property
    def original_amount(self) -> Decimal:
        return self.original.amount

    @property
    def remaining_cost(self) -> Decimal:
        return self.amount * self.price


class SellRecord(BaseModel):
    """A disposal matched against one acquisition lot."""

    model_config = ConfigDict(allow_inf_nan=True)

    date: datetime
    tx: str
    symbol: str
    type: MovementType
    amount: Decimal
    sell_price: Decimal
    buy_price: Decimal
    gain_per_unit: Decimal
    gain: Decimal
    cost: Decimal
    lot_tx: str
    lot_date: datetime


class SymbolLedger(BaseModel):
    model_config = ConfigDict(allow_inf_nan=True)

    symbol: str
    total_gains: Decimal = Decimal("0")
    total_cost: Decimal = Decimal("0")
    inventory: list[InventoryLot] = Field(default_factory=list)
    sells: list[SellRecord] = Field(default_factory=list)
    remaining_inventory: Decimal = Decimal("0")
    remaining_inventory_cost: Decimal = Decimal("0")
    current_average_buy_price: Decimal = Decimal("0")
    error: str | None = None
