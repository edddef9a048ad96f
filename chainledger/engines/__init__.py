"""Accounting engines."""

from chainledger.engines.classifier import SelectorClassifier
from chainledger.engines.lot_matcher import FifoLotMatcher
from chainledger.engines.movements import MovementStreamGenerator
from chainledger.engines.pipeline import AccountingPipeline, PipelineResult
from chainledger.engines.positions import PositionReporter
from chainledger.engines.pricing import PriceResolver

__all__ = [
    "AccountingPipeline",
    "FifoLotMatcher",
    "MovementStreamGenerator",
    "PipelineResult",
    "PositionReporter",
    "PriceResolver",
    "SelectorClassifier",
]
