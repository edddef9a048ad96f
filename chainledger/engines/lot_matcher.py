"""FIFO lot matching engine: realized gains and remaining inventory per commodity."""

import logging
from collections.abc import Iterable
from decimal import Decimal

from chainledger.decimal_utils import ONE, ZERO, exact
from chainledger.exceptions import (
    DataIntegrityError,
    InvalidMovementError,
    NoInventoryError,
    OversoldError,
)
from chainledger.models.enums import ACQUISITION_TYPES, DISPOSAL_TYPES
from chainledger.models.inventory import InventoryLot, SellRecord, SymbolLedger
from chainledger.models.movement import Movement

logger = logging.getLogger(__name__)


class FifoLotMatcher:
    """Matches disposals against the oldest open lots of the same commodity.

    With ``strict`` (the default) an integrity error aborts the run. Otherwise
    the offending commodity is marked failed and its later movements are
    skipped; other commodities are unaffected.
    """

    def __init__(self, strict: bool = True):
        self.strict = strict
        self.ledgers: dict[str, SymbolLedger] = {}

    def ledger(self, symbol: str) -> SymbolLedger:
        if symbol not in self.ledgers:
            self.ledgers[symbol] = SymbolLedger(symbol=symbol)
        return self.ledgers[symbol]

    def process(self, movements: Iterable[Movement]) -> dict[str, SymbolLedger]:
        """Apply movements in the given (chronological) order, then finalize."""
        for movement in movements:
            self.apply(movement)
        self.finalize()
        return self.ledgers

    def apply(self, movement: Movement) -> None:
        ledger = self.ledger(movement.symbol)
        if ledger.error is not None:
            logger.debug("Skipping %s for failed commodity %s", movement.tx, movement.symbol)
            return
        try:
            with exact():
                if movement.type in ACQUISITION_TYPES:
                    self._acquire(ledger, movement)
                else:
                    self._liquidate(ledger, movement)
        except DataIntegrityError as exc:
            if self.strict:
                raise
            logger.error("Abandoning %s: %s", movement.symbol, exc)
            ledger.error = str(exc)

    def finalize(self) -> None:
        for ledger in self.ledgers.values():
            with exact():
                ledger.remaining_inventory = sum((lot.amount for lot in ledger.inventory), ZERO)
                ledger.remaining_inventory_cost = sum(
                    (lot.remaining_cost for lot in ledger.inventory), ZERO
                )
            # Floor of 1 keeps the division defined once inventory is fully sold.
            ledger.current_average_buy_price = ledger.remaining_inventory_cost / max(
                ledger.remaining_inventory, ONE
            )

    def _acquire(self, ledger: SymbolLedger, movement: Movement) -> None:
        if movement.amount <= 0:
            raise InvalidMovementError(movement.tx, movement.symbol, movement.type, movement.amount)
        ledger.inventory.append(
            InventoryLot(
                symbol=movement.symbol,
                amount=movement.amount,
                price=movement.price,
                original=movement,
            )
        )

    def _liquidate(self, ledger: SymbolLedger, movement: Movement) -> None:
        if movement.type not in DISPOSAL_TYPES or movement.amount >= 0:
            raise InvalidMovementError(movement.tx, movement.symbol, movement.type, movement.amount)

        remaining = abs(movement.amount)
        if not ledger.inventory:
            raise NoInventoryError(movement.tx, movement.symbol, remaining)

        while remaining > 0:
            if not ledger.inventory:
                raise OversoldError(movement.tx, movement.symbol, remaining)
            lot = ledger.inventory[0]
            if lot.amount <= remaining:
                ledger.inventory.pop(0)
                consumed = lot.amount
            else:
                lot.amount -= remaining
                consumed = remaining
            self._realize(ledger, movement, lot, consumed)
            remaining -= consumed

    @staticmethod
    def _realize(
        ledger: SymbolLedger, movement: Movement, lot: InventoryLot, consumed: Decimal
    ) -> None:
        gain_per_unit = movement.price - lot.price
        gain = consumed * gain_per_unit
        cost = consumed * lot.price
        ledger.total_cost += cost
        ledger.total_gains += gain
        ledger.sells.append(
            SellRecord(
                date=movement.date,
                tx=movement.tx,
                symbol=movement.symbol,
                type=movement.type,
                amount=consumed,
                sell_price=movement.price,
                buy_price=lot.price,
                gain_per_unit=gain_per_unit,
                gain=gain,
                cost=cost,
                lot_tx=lot.original.tx,
                lot_date=lot.original.date,
            )
        )
