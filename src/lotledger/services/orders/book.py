"""Order book: pending intents ranked by price attractiveness.

Two independent binary heaps:
- BUY queue: highest price_limit first
- SELL queue: lowest price_limit first

The book admits and ranks orders only. It never matches or executes them,
and it never reserves cash or holdings.
"""

import heapq
from itertools import count

from lotledger.services.orders.models import Order, OrderSide
from lotledger.services.portfolio.exceptions import (
    InsufficientFundsError,
    InsufficientHoldingsError,
    InvalidArgumentError,
    UnknownSymbolError,
)
from lotledger.services.portfolio.interface import IPortfolioService
from lotledger.system.log_system import LoggerFactory

logger = LoggerFactory.get_logger()


class OrderBook:
    """
    Price-priority book of pending orders for one account.

    Admission checks read the account at placement time (advisory only).

    Example:
        >>> book = OrderBook(portfolio)
        >>> book.place(Order.buy("AAPL", AssetKind.SHARE, Decimal("100"), 1))
        >>> book.place(Order.buy("MSFT", AssetKind.SHARE, Decimal("150"), 1))
        >>> book.peek_best_buy().symbol
        'MSFT'
    """

    def __init__(self, account: IPortfolioService) -> None:
        """
        Initialize order book.

        Args:
            account: Portfolio consulted for cash and holdings at placement
        """
        if account is None:
            raise InvalidArgumentError("Order book needs an account")
        self._account = account
        # Heap entries: (priority key, sequence, order); sequence keeps orders out of comparisons
        self._buy_heap: list[tuple] = []
        self._sell_heap: list[tuple] = []
        self._sequence = count()

    def place(self, order: Order) -> None:
        """
        Admit an order into its side's queue.

        Args:
            order: Order to place

        Raises:
            InvalidArgumentError: If order is missing
            InsufficientFundsError: BUY whose notional exceeds current cash
            UnknownSymbolError: SELL on a symbol the account does not hold
            InsufficientHoldingsError: SELL for more units than currently held
        """
        if order is None:
            raise InvalidArgumentError("Order cannot be None")

        if order.side == OrderSide.BUY:
            self._check_buy(order)
            heapq.heappush(self._buy_heap, (-order.price_limit, next(self._sequence), order))
        elif order.side == OrderSide.SELL:
            self._check_sell(order)
            heapq.heappush(self._sell_heap, (order.price_limit, next(self._sequence), order))
        else:
            raise InvalidArgumentError(f"Invalid order side: {order.side}")

        logger.info(
            "order_book.order_placed",
            side=order.side.value,
            symbol=order.symbol,
            kind=order.asset_kind.value,
            quantity=order.quantity,
            price_limit=float(order.price_limit),
        )

    def peek_best_buy(self) -> Order | None:
        """Highest-priced pending BUY, or None."""
        return self._buy_heap[0][2] if self._buy_heap else None

    def peek_best_sell(self) -> Order | None:
        """Lowest-priced pending SELL, or None."""
        return self._sell_heap[0][2] if self._sell_heap else None

    def pending_buys(self) -> int:
        return len(self._buy_heap)

    def pending_sells(self) -> int:
        return len(self._sell_heap)

    def __len__(self) -> int:
        return len(self._buy_heap) + len(self._sell_heap)

    def _check_buy(self, order: Order) -> None:
        cash = self._account.get_cash()
        if order.notional > cash:
            self._reject(order, "insufficient_funds")
            raise InsufficientFundsError(f"Order {order} needs {order.notional}, cash is {cash}")

    def _check_sell(self, order: Order) -> None:
        if not self._account.has_symbol(order.symbol):
            self._reject(order, "unknown_symbol")
            raise UnknownSymbolError(f"Cannot place sell order, asset not held: {order.symbol}")

        held = self._account.get_quantity(order.symbol)
        if order.quantity > held:
            self._reject(order, "insufficient_holdings")
            raise InsufficientHoldingsError(
                f"Cannot place sell order for {order.quantity} {order.symbol}, holding {held}"
            )

    @staticmethod
    def _reject(order: Order, reason: str) -> None:
        logger.warning(
            "order_book.order_rejected",
            side=order.side.value,
            symbol=order.symbol,
            quantity=order.quantity,
            price_limit=float(order.price_limit),
            reason=reason,
        )
