"""Enumerations for chainledger."""

from enum import StrEnum


class TransferKind(StrEnum):
    NATIVE = "native"
    ERC20 = "erc20"
    ERC1155 = "erc1155"
    INTERNAL = "internal"


class MovementType(StrEnum):
    BUY = "BUY"
    SELL = "SELL"
    DEPOSIT = "DEPOSIT"
    WITHDRAW = "WITHDRAW"


ACQUISITION_TYPES = frozenset({MovementType.BUY, MovementType.DEPOSIT})
DISPOSAL_TYPES = frozenset({MovementType.SELL, MovementType.WITHDRAW})


class PositionLabel(StrEnum):
    DAMAGE_CONTROL = "DAMAGE_CONTROL"
    PROFIT = "PROFIT"
    CONTROLLED_LOSS = "CONTROLLED_LOSS"
    LOSS = "LOSS"
    UNPRICED = "UNPRICED"
    NONE = ""


class OutputFormat(StrEnum):
    CSV = "csv"
    JSON = "json"
    POSITIONS = "positions"
