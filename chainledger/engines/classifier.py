"""Operation labels from the 4-byte selector of a transaction's input data."""

import logging
from collections import Counter
from collections.abc import Mapping

logger = logging.getLogger(__name__)

KNOWN_SELECTORS: dict[str, str] = {
    "0xa9059cbb": "transfer",
    "0x23b872dd": "transferFrom",
    "0x095ea7b3": "approve",
    "0xd0e30db0": "deposit",
    "0x2e1a7d4d": "withdraw",
    "0x7ff36ab5": "swapExactETHForTokens",
    "0x18cbafe5": "swapExactTokensForETH",
    "0x38ed1739": "swapExactTokensForTokens",
    "0xe8e33700": "addLiquidity",
    "0xf305d719": "addLiquidityETH",
    "0xbaa2abde": "removeLiquidity",
    "0x02751cec": "removeLiquidityETH",
    "0x3593564c": "execute",
    "0xac9650d8": "multicall",
    "0x5ae401dc": "multicall",
}

PLAIN_TRANSFER = "Transfer"


class SelectorClassifier:
    """Maps input data to an operation label.

    Unknown selectors degrade to their raw hex and are counted so the most
    frequent ones can be added to the table.
    """

    def __init__(self, table: Mapping[str, str] | None = None):
        self.table = {k.lower(): v for k, v in (table or KNOWN_SELECTORS).items()}
        self.unknown: Counter[str] = Counter()

    def classify(self, input_data: str | None) -> str:
        data = (input_data or "").strip().lower()
        if data in ("", "0x"):
            return PLAIN_TRANSFER
        selector = data[:10]
        label = self.table.get(selector)
        if label is None:
            logger.debug("Unknown selector %s", selector)
            self.unknown[selector] += 1
            return selector
        return label

    __call__ = classify

    def unknown_selectors(self, limit: int | None = None) -> list[tuple[str, int]]:
        return self.unknown.most_common(limit)
