"""Text report of realized gains, holdings and open swap positions."""

from decimal import Decimal
from pathlib import Path

from jinja2 import Environment, FileSystemLoader

from chainledger.decimal_utils import is_nan
from chainledger.engines.pipeline import PipelineResult

TEMPLATE_DIR = Path(__file__).parent / "templates"


def money(value: Decimal, places: int = 2) -> str:
    """Format a Decimal with thousands separators; unpriced values show as n/a."""
    if is_nan(value):
        return "n/a"
    return f"{value:,.{places}f}"


def quantity(value: Decimal) -> str:
    if is_nan(value):
        return "n/a"
    return f"{value.normalize():f}"


class PositionsReportGenerator:
    """Renders the positions report using a Jinja2 template."""

    def __init__(self) -> None:
        self.env = Environment(loader=FileSystemLoader(str(TEMPLATE_DIR)))
        self.env.filters["money"] = money
        self.env.filters["quantity"] = quantity

    def render(self, result: PipelineResult) -> str:
        template = self.env.get_template("positions.txt")
        return template.render(
            ledgers=sorted(result.ledgers.values(), key=lambda ledger: ledger.symbol),
            holdings=result.holdings,
            positions=result.positions,
            failed=result.failed_symbols,
            unknown_accounts=result.unknown_accounts,
            unknown_selectors=result.unknown_selectors,
        )
