"""Report output models."""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict

from chainledger.models.enums import PositionLabel


class PositionReport(BaseModel):
    """Performance of an open lot acquired through a swap."""

    model_config = ConfigDict(allow_inf_nan=True)

    symbol: str
    tx: str
    date: datetime
    address: str
    amount: Decimal
    original_amount: Decimal
    ratio: Decimal
    acquisition_cost: Decimal
    current_price: Decimal
    current_cost: Decimal
    other_symbol: str
    other_amount: Decimal
    sold_part_current_cost: Decimal
    benchmark: str
    benchmark_amount: Decimal
    benchmark_current_cost: Decimal
    vs_usd: Decimal
    vs_usd_pct: Decimal
    vs_hold: Decimal
    vs_hold_pct: Decimal
    vs_benchmark: Decimal
    vs_benchmark_pct: Decimal
    label: PositionLabel
    note: str = ""


class HoldingSummary(BaseModel):
    model_config = ConfigDict(allow_inf_nan=True)

    symbol: str
    amount: Decimal
    cost: Decimal
    average_price: Decimal
    current_price: Decimal
    current_value: Decimal
    unrealized: Decimal
    realized: Decimal
    error: str | None = None
