"""Position reporting: unrealized P&L of open lots and their classification.

For an open lot bought through a swap, three comparisons are made against
the value it has today:

* the USD acquisition cost of the part still held,
* the current value of what was given up for it ("had I not swapped"),
* the benchmark amount the acquisition cost would have bought at the time.
"""

from collections.abc import Mapping
from decimal import Decimal

from chainledger.decimal_utils import ZERO, any_nan, safe_div
from chainledger.engines.pricing import PriceResolver
from chainledger.models.enums import MovementType, PositionLabel
from chainledger.models.inventory import InventoryLot, SymbolLedger
from chainledger.models.movement import TradeOp
from chainledger.models.reports import HoldingSummary, PositionReport

HUNDRED = Decimal("100")


def percent(delta: Decimal, base: Decimal) -> Decimal:
    return safe_div(delta, base) * HUNDRED


class PositionReporter:
    """Derives position and holding reports from finalized FIFO ledgers."""

    def __init__(
        self,
        prices: PriceResolver,
        benchmark: str = "BTC",
        profit_threshold: Decimal = ZERO,
    ):
        self.prices = prices
        self.benchmark = benchmark
        self.profit_threshold = profit_threshold

    def report(self, ledgers: Mapping[str, SymbolLedger]) -> list[PositionReport]:
        """One record per open lot that originated from a BUY."""
        reports: list[PositionReport] = []
        for ledger in ledgers.values():
            for lot in ledger.inventory:
                if lot.original.type != MovementType.BUY or not isinstance(lot.original, TradeOp):
                    continue
                reports.append(self.position(lot))
        return sorted(reports, key=lambda report: report.date)

    def position(self, lot: InventoryLot) -> PositionReport:
        trade: TradeOp = lot.original
        ratio = lot.amount / trade.amount
        acquisition_cost = trade.cost * ratio

        current_price = self.prices.current_price(lot.symbol)
        current_cost = lot.amount * current_price

        other_amount = abs(trade.other_amount) * ratio
        sold_part_current_cost = other_amount * self.prices.current_price(trade.other_symbol)

        benchmark_then = self.prices.price_at(self.benchmark, trade.date)
        benchmark_amount = safe_div(acquisition_cost, benchmark_then)
        benchmark_current_cost = benchmark_amount * self.prices.current_price(self.benchmark)

        label = self.classify(current_cost, acquisition_cost, sold_part_current_cost)
        note = f"Damage control for {trade.other_symbol}" if label == PositionLabel.DAMAGE_CONTROL else ""

        vs_usd = current_cost - acquisition_cost
        vs_hold = current_cost - sold_part_current_cost
        vs_benchmark = current_cost - benchmark_current_cost
        return PositionReport(
            symbol=lot.symbol,
            tx=trade.tx,
            date=trade.date,
            address=trade.address,
            amount=lot.amount,
            original_amount=trade.amount,
            ratio=ratio,
            acquisition_cost=acquisition_cost,
            current_price=current_price,
            current_cost=current_cost,
            other_symbol=trade.other_symbol,
            other_amount=other_amount,
            sold_part_current_cost=sold_part_current_cost,
            benchmark=self.benchmark,
            benchmark_amount=benchmark_amount,
            benchmark_current_cost=benchmark_current_cost,
            vs_usd=vs_usd,
            vs_usd_pct=percent(vs_usd, acquisition_cost),
            vs_hold=vs_hold,
            vs_hold_pct=percent(vs_hold, sold_part_current_cost),
            vs_benchmark=vs_benchmark,
            vs_benchmark_pct=percent(vs_benchmark, benchmark_current_cost),
            label=label,
            note=note,
        )

    def classify(
        self,
        current_cost: Decimal,
        acquisition_cost: Decimal,
        sold_part_current_cost: Decimal,
    ) -> PositionLabel:
        if any_nan(current_cost, acquisition_cost, sold_part_current_cost):
            return PositionLabel.UNPRICED
        if acquisition_cost > current_cost > sold_part_current_cost:
            return PositionLabel.DAMAGE_CONTROL
        if (
            current_cost > acquisition_cost
            and current_cost - sold_part_current_cost > self.profit_threshold
        ):
            return PositionLabel.PROFIT
        if current_cost < acquisition_cost and (
            current_cost - acquisition_cost < current_cost - sold_part_current_cost
        ):
            return PositionLabel.CONTROLLED_LOSS
        if current_cost < acquisition_cost:
            return PositionLabel.LOSS
        return PositionLabel.NONE

    def holdings(self, ledgers: Mapping[str, SymbolLedger]) -> list[HoldingSummary]:
        """Per-commodity remaining inventory valued at the current price."""
        summaries: list[HoldingSummary] = []
        for symbol, ledger in ledgers.items():
            if ledger.remaining_inventory == 0:
                current_price = ZERO
                current_value = ZERO
            else:
                current_price = self.prices.current_price(symbol)
                current_value = ledger.remaining_inventory * current_price
            summaries.append(
                HoldingSummary(
                    symbol=symbol,
                    amount=ledger.remaining_inventory,
                    cost=ledger.remaining_inventory_cost,
                    average_price=ledger.current_average_buy_price,
                    current_price=current_price,
                    current_value=current_value,
                    unrealized=current_value - ledger.remaining_inventory_cost,
                    realized=ledger.total_gains,
                    error=ledger.error,
                )
            )
        return summaries
