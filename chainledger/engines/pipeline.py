"""Accounting pipeline: transfers in, ledgers and position reports out.

Stages:
1. Fetch transfers for every tracked account (optional; offline runs skip it)
2. Deduplicate and filter
3. Fetch receipts and transaction details for the surviving hashes
4. Build double-entry line items
5. Expand line items into a time-ordered movement stream
6. FIFO-match disposals against acquisitions per commodity
7. Derive positions and holdings from the remaining inventory
"""

import logging
from collections.abc import Iterable, Mapping

from pydantic import BaseModel, Field

from chainledger.context import RunContext
from chainledger.engines.classifier import SelectorClassifier
from chainledger.engines.lot_matcher import FifoLotMatcher
from chainledger.engines.movements import MovementStreamGenerator
from chainledger.engines.positions import PositionReporter
from chainledger.ingestion.base import ImportResult, TransactionProvider, TransferProvider
from chainledger.models.inventory import SymbolLedger
from chainledger.models.ledger import LineItem
from chainledger.models.movement import Movement
from chainledger.models.reports import HoldingSummary, PositionReport
from chainledger.models.transfer import TransactionDetail, TransactionReceipt, Transfer
from chainledger.normalization.ledger import LedgerBuilder
from chainledger.normalization.transfers import TransferNormalizer

logger = logging.getLogger(__name__)


class PipelineResult(BaseModel):
    line_items: list[LineItem] = Field(default_factory=list)
    movements: list[Movement] = Field(default_factory=list)
    ledgers: dict[str, SymbolLedger] = Field(default_factory=dict)
    positions: list[PositionReport] = Field(default_factory=list)
    holdings: list[HoldingSummary] = Field(default_factory=list)
    unknown_accounts: list[str] = Field(default_factory=list)
    unknown_selectors: list[tuple[str, int]] = Field(default_factory=list)
    contract_to_token: dict[str, str] = Field(default_factory=dict)

    @property
    def failed_symbols(self) -> dict[str, str]:
        return {symbol: ledger.error for symbol, ledger in self.ledgers.items() if ledger.error}


class AccountingPipeline:
    """Orchestrates fetch, ledger reconstruction, FIFO matching and reporting."""

    def __init__(
        self,
        context: RunContext,
        transfers: TransferProvider | None = None,
        transactions: TransactionProvider | None = None,
        classifier: SelectorClassifier | None = None,
    ):
        self.context = context
        self.transfers = transfers
        self.transactions = transactions
        self.classifier = classifier
        self.normalizer = TransferNormalizer(context)

    def fetch(self) -> ImportResult:
        if self.transfers is None:
            raise ValueError("A transfer provider is required to fetch")

        raw: list[Transfer] = []
        for account in self.context.accounts.tracked_accounts():
            raw.extend(self.transfers.fetch(account.address, account.start_block))
        transfers = self.normalizer.normalize(raw)
        result = ImportResult(transfers=transfers)

        if self.transactions is None:
            return result

        accounts = self.context.accounts
        hashes = dict.fromkeys(
            t.hash
            for t in transfers
            if accounts.is_tracked(t.from_address) or accounts.is_tracked(t.to_address)
        )
        logger.info("Fetching details for %d transactions", len(hashes))
        for tx_hash in hashes:
            if self.context.options.include_fees:
                receipt = self.transactions.get_receipt(tx_hash)
                if receipt is not None:
                    result.receipts.append(receipt)
            if self.classifier is not None:
                detail = self.transactions.get_transaction(tx_hash)
                if detail is not None:
                    result.transactions[tx_hash] = detail
        return result

    def run(self) -> PipelineResult:
        data = self.fetch()
        return self.run_offline(data.transfers, data.receipts, data.transactions)

    def run_offline(
        self,
        transfers: Iterable[Transfer],
        receipts: Iterable[TransactionReceipt] = (),
        transactions: Mapping[str, TransactionDetail] | None = None,
    ) -> PipelineResult:
        options = self.context.options
        prices = self.context.prices

        normalized = self.normalizer.normalize(transfers)
        ledger = LedgerBuilder(self.context).build(
            normalized, receipts, transactions, self.classifier
        )
        logger.info("Built %d line items from %d transfers", len(ledger.line_items), len(normalized))

        movements = MovementStreamGenerator(prices).generate(ledger.line_items.values())
        ledgers = FifoLotMatcher(strict=options.strict).process(movements)

        reporter = PositionReporter(prices, options.benchmark, options.profit_threshold)
        return PipelineResult(
            line_items=list(ledger.line_items.values()),
            movements=movements,
            ledgers=ledgers,
            positions=reporter.report(ledgers),
            holdings=reporter.holdings(ledgers),
            unknown_accounts=ledger.unknown_accounts,
            unknown_selectors=self.classifier.unknown_selectors() if self.classifier else [],
            contract_to_token=ledger.contract_to_token,
        )
