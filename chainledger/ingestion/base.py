"""Provider interfaces for transfer and transaction data."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field

from chainledger.models.transfer import TransactionDetail, TransactionReceipt, Transfer


@dataclass
class ImportResult:
    """Everything fetched for one run, before ledger reconstruction."""

    transfers: list[Transfer] = field(default_factory=list)
    receipts: list[TransactionReceipt] = field(default_factory=list)
    transactions: dict[str, TransactionDetail] = field(default_factory=dict)


class TransferProvider(ABC):
    @abstractmethod
    def fetch(self, address: str, since_block: int = 0) -> list[Transfer]:
        """Return native, token, multi-token and internal transfers touching ``address``."""
        ...


class TransactionProvider(ABC):
    @abstractmethod
    def get_transaction(self, tx_hash: str) -> TransactionDetail | None:
        ...

    @abstractmethod
    def get_receipt(self, tx_hash: str) -> TransactionReceipt | None:
        ...
