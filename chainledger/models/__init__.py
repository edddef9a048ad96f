"""Data models for chainledger."""

from chainledger.models.account import Account, TokenInfo
from chainledger.models.enums import MovementType, OutputFormat, PositionLabel, TransferKind
from chainledger.models.inventory import InventoryLot, SellRecord, SymbolLedger
from chainledger.models.ledger import Change, LedgerResult, LineItem
from chainledger.models.movement import LiquidityOp, Movement, Operation, TradeOp
from chainledger.models.reports import HoldingSummary, PositionReport
from chainledger.models.transfer import (
    InternalTransfer,
    MultiTokenTransfer,
    NativeTransfer,
    TokenTransfer,
    TransactionDetail,
    TransactionReceipt,
    Transfer,
)

__all__ = [
    "Account",
    "Change",
    "HoldingSummary",
    "InternalTransfer",
    "InventoryLot",
    "LedgerResult",
    "LineItem",
    "LiquidityOp",
    "Movement",
    "MovementType",
    "MultiTokenTransfer",
    "NativeTransfer",
    "Operation",
    "OutputFormat",
    "PositionLabel",
    "PositionReport",
    "SellRecord",
    "SymbolLedger",
    "TokenInfo",
    "TokenTransfer",
    "TradeOp",
    "TransactionDetail",
    "TransactionReceipt",
    "Transfer",
    "TransferKind",
]
