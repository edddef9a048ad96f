"""Directional economic events derived from line items."""

from datetime import datetime
from decimal import Decimal
from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field

from chainledger.models.enums import ACQUISITION_TYPES, MovementType


class Operation(BaseModel):
    # unpriced legs carry NaN price and cost
    model_config = ConfigDict(allow_inf_nan=True)

    type: MovementType
    date: datetime
    tx: str
    address: str
    symbol: str
    amount: Decimal  # signed: negative for SELL/WITHDRAW
    price: Decimal
    cost: Decimal  # |amount| x price

    @property
    def is_acquisition(self) -> bool:
        return self.type in ACQUISITION_TYPES


class TradeOp(Operation):
    """One leg of an apparent swap; ``other_*`` describes the opposite leg."""

    kind: Literal["trade"] = "trade"
    other_symbol: str
    other_amount: Decimal
    other_price: Decimal
    other_cost: Decimal


class LiquidityOp(Operation):
    kind: Literal["liquidity"] = "liquidity"


Movement = Annotated[TradeOp | LiquidityOp, Field(discriminator="kind")]
