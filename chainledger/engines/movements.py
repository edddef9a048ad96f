"""Movement stream: expand line items into BUY/SELL/DEPOSIT/WITHDRAW events."""

from collections.abc import Iterable

from chainledger.decimal_utils import is_nan
from chainledger.engines.pricing import PriceResolver, implied_price
from chainledger.models.enums import MovementType
from chainledger.models.ledger import LineItem
from chainledger.models.movement import LiquidityOp, Movement, TradeOp


class MovementStreamGenerator:
    """Derives the time-ordered movement list consumed by the FIFO matcher."""

    def __init__(self, prices: PriceResolver):
        self.prices = prices

    def generate(self, line_items: Iterable[LineItem]) -> list[Movement]:
        movements: list[Movement] = []
        for item in sorted(line_items, key=lambda line_item: line_item.date):
            if item.apparent_swap:
                movements.extend(self.trade_ops(item))
            else:
                movements.extend(self.liquidity_ops(item))
        return sorted(movements, key=lambda movement: movement.date)

    def trade_ops(self, item: LineItem) -> list[TradeOp]:
        """BUY and SELL legs of an apparent swap, each pointing at the other."""
        ((address, deltas),) = item.active_self_accounts().items()
        (bought, bought_amount), (sold, sold_amount) = sorted(
            deltas.items(), key=lambda leg: leg[1], reverse=True
        )

        buy_price = self.prices.price_at(bought, item.date)
        sell_price = self.prices.price_at(sold, item.date)
        if is_nan(buy_price):
            buy_price = implied_price(sell_price, sold_amount, bought_amount)
        if is_nan(sell_price):
            sell_price = implied_price(buy_price, bought_amount, sold_amount)

        buy_cost = abs(bought_amount) * buy_price
        sell_cost = abs(sold_amount) * sell_price
        common = {"date": item.date, "tx": item.tx, "address": address}
        return [
            TradeOp(
                type=MovementType.BUY,
                symbol=bought,
                amount=bought_amount,
                price=buy_price,
                cost=buy_cost,
                other_symbol=sold,
                other_amount=sold_amount,
                other_price=sell_price,
                other_cost=sell_cost,
                **common,
            ),
            TradeOp(
                type=MovementType.SELL,
                symbol=sold,
                amount=sold_amount,
                price=sell_price,
                cost=sell_cost,
                other_symbol=bought,
                other_amount=bought_amount,
                other_price=buy_price,
                other_cost=buy_cost,
                **common,
            ),
        ]

    def liquidity_ops(self, item: LineItem) -> list[LiquidityOp]:
        ops: list[LiquidityOp] = []
        for address, deltas in item.active_self_accounts().items():
            for symbol, amount in deltas.items():
                price = self.prices.price_at(symbol, item.date)
                ops.append(
                    LiquidityOp(
                        type=MovementType.DEPOSIT if amount > 0 else MovementType.WITHDRAW,
                        date=item.date,
                        tx=item.tx,
                        address=address,
                        symbol=symbol,
                        amount=amount,
                        price=price,
                        cost=abs(amount) * price,
                    )
                )
        return ops
