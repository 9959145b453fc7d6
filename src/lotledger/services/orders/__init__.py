"""Order book for pending buy/sell intents.

Orders are ranked by price attractiveness and checked against the account
at placement. The book never executes trades.

Example:
    >>> from lotledger.services.orders import Order, OrderBook
    >>> book = OrderBook(portfolio)
    >>> book.place(Order.sell("AAPL", AssetKind.SHARE, Decimal("200"), 5))
    >>> book.peek_best_sell()
"""

from lotledger.services.orders.book import OrderBook
from lotledger.services.orders.models import Order, OrderSide

__all__ = [
    "Order",
    "OrderSide",
    "OrderBook",
]
