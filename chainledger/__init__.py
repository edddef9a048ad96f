"""chainledger: double-entry ledgers and FIFO cost basis from on-chain transfers."""

__version__ = "0.1.0"
