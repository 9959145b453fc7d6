"""Asset valuation rules.

Each asset kind models a different real-world friction:
1. Share: flat brokerage fee on small purchases (below a notional threshold)
2. Commodity: storage cost per unit per day held (charged at valuation only)
3. Currency: bid/ask spread (charged at purchase and again on held value)

All functions are pure; they are evaluated per lot, never on a symbol's
aggregate, because lots carry different quantities and holding durations.
"""

from decimal import Decimal

from lotledger.services.portfolio.models import AssetKind, ValuationConfig

ZERO = Decimal("0")


class AssetValuator:
    """Computes acquisition cost and real value for every asset kind.

    Attributes:
        config: Valuation constants

    Example:
        >>> valuator = AssetValuator(ValuationConfig())
        >>> valuator.acquisition_cost(AssetKind.SHARE, Decimal("10"), 5)
        Decimal('5.00')
        >>> valuator.real_value(AssetKind.COMMODITY, Decimal("100"), 100, days_held=30)
        Decimal('8500.00')
    """

    def __init__(self, config: ValuationConfig | None = None) -> None:
        """Initialize valuator.

        Args:
            config: Valuation constants (defaults if None)
        """
        self.config = config or ValuationConfig()

    def acquisition_cost(self, kind: AssetKind, price: Decimal, quantity: int) -> Decimal:
        """Extra cost charged at purchase on top of price * quantity.

        - Share: flat fee if price * quantity < threshold, else 0
        - Commodity: 0
        - Currency: price * quantity * spread_rate

        Args:
            kind: Asset kind
            price: Price per unit
            quantity: Units bought

        Returns:
            Acquisition friction

        Raises:
            ValueError: If kind is not a known asset kind
        """
        if kind == AssetKind.SHARE:
            return self._share_fee(price, quantity)
        elif kind == AssetKind.COMMODITY:
            return ZERO
        elif kind == AssetKind.CURRENCY:
            return self._currency_spread(price, quantity)
        else:
            raise ValueError(f"Unsupported asset kind: {kind}")

    def real_value(self, kind: AssetKind, price: Decimal, quantity: int, days_held: int) -> Decimal:
        """Value of holding `quantity` units at `price` for `days_held` days.

        - Share: price * quantity - share fee (time-independent)
        - Commodity: price * quantity - quantity * storage_rate * max(1, days_held)
        - Currency: price * quantity - spread (time-independent)

        Args:
            kind: Asset kind
            price: Price per unit
            quantity: Units held
            days_held: Days since purchase (negative values are treated as 0)

        Returns:
            Real value after friction

        Raises:
            ValueError: If kind is not a known asset kind
        """
        nominal = price * quantity
        if kind == AssetKind.SHARE:
            return nominal - self._share_fee(price, quantity)
        elif kind == AssetKind.COMMODITY:
            return nominal - self._storage_cost(quantity, days_held)
        elif kind == AssetKind.CURRENCY:
            return nominal - self._currency_spread(price, quantity)
        else:
            raise ValueError(f"Unsupported asset kind: {kind}")

    def total_purchase_cost(self, kind: AssetKind, price: Decimal, quantity: int) -> Decimal:
        """Cash needed for a purchase: price * quantity plus acquisition cost."""
        return price * quantity + self.acquisition_cost(kind, price, quantity)

    def _share_fee(self, price: Decimal, quantity: int) -> Decimal:
        if price * quantity < self.config.share_fee_threshold:
            return self.config.share_flat_fee
        return ZERO

    def _storage_cost(self, quantity: int, days_held: int) -> Decimal:
        # At least one day of storage is always charged
        billable_days = max(1, days_held)
        return quantity * self.config.commodity_storage_rate * billable_days

    def _currency_spread(self, price: Decimal, quantity: int) -> Decimal:
        return price * quantity * self.config.currency_spread_rate
