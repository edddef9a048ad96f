"""CSV tradesheet: one row per deposit, withdrawal or swap."""

import csv
import io
from collections.abc import Iterable
from decimal import Decimal
from pathlib import Path

from chainledger.models.enums import MovementType
from chainledger.models.movement import Movement, TradeOp

COLUMNS = ["Date", "Type", "Tx", "Buy", "Sell", "BuyUnits", "SellUnits"]


def units(value: Decimal) -> str:
    return f"{abs(value).normalize():f}"


class TradesheetWriter:
    """Swaps emit two movements; the tradesheet folds them back into one row."""

    def rows(self, movements: Iterable[Movement]) -> list[list[str]]:
        rows: list[list[str]] = []
        seen_trades: set[str] = set()
        for movement in movements:
            date = movement.date.isoformat()
            if isinstance(movement, TradeOp):
                if movement.tx in seen_trades:
                    continue
                seen_trades.add(movement.tx)
                if movement.type == MovementType.BUY:
                    bought, bought_units = movement.symbol, movement.amount
                    sold, sold_units = movement.other_symbol, movement.other_amount
                else:
                    bought, bought_units = movement.other_symbol, movement.other_amount
                    sold, sold_units = movement.symbol, movement.amount
                rows.append(
                    [date, "Trade", movement.tx, bought, sold, units(bought_units), units(sold_units)]
                )
            elif movement.type == MovementType.DEPOSIT:
                rows.append([date, "Deposit", movement.tx, movement.symbol, "", units(movement.amount), ""])
            else:
                rows.append([date, "Withdrawal", movement.tx, "", movement.symbol, "", units(movement.amount)])
        return rows

    def render(self, movements: Iterable[Movement]) -> str:
        buffer = io.StringIO()
        writer = csv.writer(buffer, lineterminator="\n")
        writer.writerow(COLUMNS)
        writer.writerows(self.rows(movements))
        return buffer.getvalue()

    def write(self, path: Path, movements: Iterable[Movement]) -> None:
        path.write_text(self.render(movements))
