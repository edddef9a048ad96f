"""Normalization layer: accounts, transfers and double-entry line items."""

from chainledger.normalization.accounts import AccountRegistry, normalize_address
from chainledger.normalization.ledger import LedgerBuilder
from chainledger.normalization.tokens import TokenRegistry
from chainledger.normalization.transfers import TransferNormalizer, merge_transfer

__all__ = [
    "AccountRegistry",
    "LedgerBuilder",
    "TokenRegistry",
    "TransferNormalizer",
    "merge_transfer",
    "normalize_address",
]
