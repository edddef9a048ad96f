"""Transfer normalization: deduplication and filtering."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import TYPE_CHECKING

from chainledger.models.transfer import Transfer

if TYPE_CHECKING:
    from chainledger.context import RunContext

logger = logging.getLogger(__name__)


def _has_value(transfer: Transfer) -> bool:
    try:
        return int(transfer.value or 0) != 0
    except ValueError:
        return False


def merge_transfer(existing: list[Transfer], candidate: Transfer) -> list[Transfer]:
    """Append ``candidate`` unless an equivalent transfer is already present.

    The same movement is reported by several upstream lists (normal,
    internal, token); they collapse on (from, to, value, symbol, contract).
    Zero-value transfers are dropped.
    """
    if not _has_value(candidate):
        return existing
    key = candidate.dedup_key
    if any(transfer.dedup_key == key for transfer in existing):
        return existing
    return [*existing, candidate]


class TransferNormalizer:
    """Collapses raw transfers per transaction hash and applies the run filters."""

    def __init__(self, context: RunContext):
        self.options = context.options
        self.accounts = context.accounts
        self.tokens = context.tokens

    def normalize(self, transfers: Iterable[Transfer]) -> list[Transfer]:
        """Deduplicated, filtered transfers in discovery order."""
        grouped = self.group(transfers)
        return [
            transfer
            for group in grouped.values()
            for transfer in group
            if self.accepts(transfer)
        ]

    def group(self, transfers: Iterable[Transfer]) -> dict[str, list[Transfer]]:
        """Canonical transfer set per transaction hash."""
        grouped: dict[str, list[Transfer]] = {}
        for transfer in transfers:
            grouped[transfer.hash] = merge_transfer(grouped.get(transfer.hash, []), transfer)
        return {tx: group for tx, group in grouped.items() if group}

    def accepts(self, transfer: Transfer) -> bool:
        """Run-wide transfer predicate; applied once, before any aggregation."""
        date = transfer.date
        if self.options.start_date and date < self.options.start_date:
            return False
        if self.options.end_date and date > self.options.end_date:
            return False
        if self.accounts.is_hidden(transfer.from_address):
            logger.debug("Skipping %s: sender %s is hidden", transfer.hash, transfer.from_address)
            return False
        if self.options.is_ignored(transfer.symbol, transfer.contract_address):
            logger.debug("Skipping %s: %s is ignored", transfer.hash, transfer.symbol)
            return False
        if transfer.is_native or self.options.allow_unlisted_tokens:
            return True
        if self.tokens.is_allowed_contract(transfer.contract_address) is not None:
            return True
        if self.accounts.is_tracked(transfer.contract_address):
            return True
        logger.debug(
            "Skipping %s: contract %s (%s) is not allow-listed",
            transfer.hash,
            transfer.contract_address,
            transfer.symbol,
        )
        return False
