"""Order models for the order book.

- OrderSide: BUY or SELL
- Order: Immutable pending trade intent (never linked to lots)
"""

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum

from lotledger.services.portfolio.exceptions import InvalidArgumentError
from lotledger.services.portfolio.models import AssetKind, normalize_symbol, to_decimal


class OrderSide(str, Enum):
    """Order side (buy or sell)."""

    BUY = "buy"
    SELL = "sell"


@dataclass(frozen=True)
class Order:
    """Immutable pending order.

    Placing an order checks the account only at placement time. Nothing is
    reserved: cash and holdings stay free for other operations.

    Attributes:
        symbol: Ticker symbol (normalized like Asset symbols)
        asset_kind: Kind of asset the order refers to
        price_limit: Limit price per unit (> 0)
        quantity: Units (> 0)
        side: BUY or SELL

    Example:
        >>> order = Order("aapl", AssetKind.SHARE, Decimal("150.50"), 10, OrderSide.BUY)
        >>> str(order)
        'BUY 10 SHARE AAPL @ 150.50'
    """

    symbol: str
    asset_kind: AssetKind
    price_limit: Decimal
    quantity: int
    side: OrderSide

    def __post_init__(self) -> None:
        """Validate order fields."""
        object.__setattr__(self, "symbol", normalize_symbol(self.symbol))
        if not isinstance(self.asset_kind, AssetKind):
            raise InvalidArgumentError(f"Invalid asset kind: {self.asset_kind!r}")
        if not isinstance(self.side, OrderSide):
            raise InvalidArgumentError(f"Invalid order side: {self.side!r}")

        price_limit = to_decimal(self.price_limit, "Price limit")
        if price_limit <= 0:
            raise InvalidArgumentError(f"Price limit must be positive, got {price_limit}")
        object.__setattr__(self, "price_limit", price_limit)

        if not isinstance(self.quantity, int) or isinstance(self.quantity, bool) or self.quantity <= 0:
            raise InvalidArgumentError(f"Order quantity must be a positive integer, got {self.quantity!r}")

    @classmethod
    def buy(cls, symbol: str, asset_kind: AssetKind, price_limit: Decimal | int | str, quantity: int) -> "Order":
        """Create a BUY order."""
        return cls(symbol, asset_kind, price_limit, quantity, OrderSide.BUY)  # type: ignore[arg-type]

    @classmethod
    def sell(cls, symbol: str, asset_kind: AssetKind, price_limit: Decimal | int | str, quantity: int) -> "Order":
        """Create a SELL order."""
        return cls(symbol, asset_kind, price_limit, quantity, OrderSide.SELL)  # type: ignore[arg-type]

    @property
    def notional(self) -> Decimal:
        """Limit value of the order (quantity * price_limit)."""
        return self.price_limit * self.quantity

    def __str__(self) -> str:
        return f"{self.side.name} {self.quantity} {self.asset_kind.name} {self.symbol} @ {self.price_limit:.2f}"
