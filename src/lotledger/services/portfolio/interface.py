"""Portfolio service interface (Protocol).

Defines the contract that portfolio (account) implementations satisfy.
The order book and the file manager depend on this contract only.
"""

from decimal import Decimal
from typing import Protocol

from lotledger.services.portfolio.models import Asset, LotRecord, PortfolioHeader, PortfolioReport


class IPortfolioService(Protocol):
    """
    Portfolio service interface for cash and lot-based holdings.

    Core responsibilities:
    - Buy assets (cash out, new lot) and sell them FIFO (cash in, profit)
    - Track the day counter used for time-dependent valuation
    - Value holdings per lot and report a deterministic snapshot
    - Export and re-hydrate canonical state

    Example:
        >>> portfolio: IPortfolioService = PortfolioService(config)
        >>> portfolio.buy(Asset.share("AAPL", Decimal("150.00")), 10)
        >>> portfolio.advance_day(5)
        >>> print(portfolio.report())
    """

    # ==================== Trading ====================

    def buy(self, asset: Asset, quantity: int) -> Decimal:
        """
        Buy units at the asset's market price.

        Raises:
            InvalidArgumentError: If asset or quantity is invalid
            CapacityExceededError: If a new symbol would exceed the cap
            InsufficientFundsError: If cost plus acquisition friction exceeds cash
        """
        ...

    def sell(self, symbol: str, quantity: int, current_price: Decimal) -> Decimal:
        """
        Sell units FIFO at the given price and return realized profit.

        Raises:
            InvalidArgumentError: If symbol, quantity or price is invalid
            UnknownSymbolError: If symbol is not held
            InsufficientHoldingsError: If fewer units are held than requested
        """
        ...

    def bulk_load(self, asset: Asset, quantity: int, purchase_day: int) -> None:
        """Insert a lot without any cash effect (state re-hydration)."""
        ...

    def advance_day(self, days: int) -> None:
        """Move the day counter forward (non-positive values are ignored)."""
        ...

    # ==================== Queries ====================

    def get_cash(self) -> Decimal:
        """Get current cash balance."""
        ...

    def get_current_day(self) -> int:
        """Get current day counter."""
        ...

    def get_quantity(self, symbol_or_asset: str | Asset | None) -> int:
        """Units held of a symbol (0 if not held)."""
        ...

    def has_symbol(self, symbol: str) -> bool:
        """Whether a holding ledger exists for symbol."""
        ...

    def get_holdings_count(self) -> int:
        """Number of distinct symbols held."""
        ...

    def holdings_value(self) -> Decimal:
        """Real value of all holdings at the current day."""
        ...

    def total_value(self) -> Decimal:
        """Cash plus holdings value."""
        ...

    def get_report(self) -> PortfolioReport:
        """Structured, ordered snapshot."""
        ...

    def report(self) -> str:
        """Rendered text report."""
        ...

    # ==================== State Export ====================

    def get_header(self) -> PortfolioHeader:
        """Cash and current day."""
        ...

    def export_lots(self) -> list[LotRecord]:
        """One canonical record per live lot."""
        ...
