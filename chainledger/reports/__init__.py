"""Report generation for chainledger."""

from chainledger.reports.json_export import export_json, write_json
from chainledger.reports.positions import PositionsReportGenerator
from chainledger.reports.tradesheet import TradesheetWriter

__all__ = [
    "PositionsReportGenerator",
    "TradesheetWriter",
    "export_json",
    "write_json",
]
