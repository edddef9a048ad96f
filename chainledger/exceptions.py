"""Custom exceptions for chainledger."""

from decimal import Decimal
from pathlib import Path


class LedgerError(Exception):
    """Base exception for ledger reconstruction errors."""


class DataIntegrityError(LedgerError):
    """Raised when the transfer data contradicts itself; aborts the unit of work."""

    def __init__(self, tx: str, symbol: str, message: str):
        self.tx = tx
        self.symbol = symbol
        super().__init__(f"Data integrity violation in {tx} ({symbol}): {message}")


class ContractSymbolCollisionError(DataIntegrityError):
    """Raised when a contract address is seen with two different token symbols."""

    def __init__(self, tx: str, contract_address: str, known_symbol: str, new_symbol: str):
        self.contract_address = contract_address
        self.known_symbol = known_symbol
        self.new_symbol = new_symbol
        super().__init__(
            tx,
            new_symbol,
            f"contract {contract_address} already registered as {known_symbol}",
        )


class NoInventoryError(DataIntegrityError):
    """Raised when a commodity is sold or withdrawn before anything was acquired."""

    def __init__(self, tx: str, symbol: str, requested: Decimal):
        self.requested = requested
        super().__init__(
            tx, symbol, f"disposal of {requested} with no prior buy or deposit"
        )


class OversoldError(DataIntegrityError):
    """Raised when a disposal exhausts the inventory before it is filled."""

    def __init__(self, tx: str, symbol: str, unfilled: Decimal):
        self.unfilled = unfilled
        super().__init__(
            tx, symbol, f"sold more than held, {unfilled} left unmatched"
        )


class InvalidMovementError(DataIntegrityError):
    """Raised when a movement's sign contradicts its type (unknown tx anomaly)."""

    def __init__(self, tx: str, symbol: str, movement_type: str, amount: Decimal):
        self.movement_type = movement_type
        self.amount = amount
        super().__init__(
            tx, symbol, f"unexpected {movement_type} with amount {amount}"
        )


class FetchError(LedgerError):
    """Raised when an upstream data provider fails after retries."""

    def __init__(self, source: str, message: str):
        self.source = source
        super().__init__(f"Fetch error from {source}: {message}")


class ConfigError(LedgerError):
    """Raised when a config file or run option is invalid."""

    def __init__(self, source: Path | str, message: str, line: int | None = None):
        self.source = source
        self.line = line
        location = f"{source}:{line}" if line is not None else f"{source}"
        super().__init__(f"Config error in {location}: {message}")
