"""Data ingestion: explorer and price providers, config files."""

from chainledger.ingestion.base import ImportResult, TransactionProvider, TransferProvider
from chainledger.ingestion.config_file import ConfigLoader
from chainledger.ingestion.etherscan import EtherscanClient
from chainledger.ingestion.prices import CoinGeckoClient, StaticPriceHistory

__all__ = [
    "CoinGeckoClient",
    "ConfigLoader",
    "EtherscanClient",
    "ImportResult",
    "StaticPriceHistory",
    "TransactionProvider",
    "TransferProvider",
]
