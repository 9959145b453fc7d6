"""Portfolio error hierarchy.

Every failure raised by the portfolio core derives from PortfolioError.
All checks run before any state is mutated, so a raised error always
leaves the portfolio exactly as it was.
"""


class PortfolioError(Exception):
    """Base exception for portfolio errors."""

    pass


class InvalidArgumentError(PortfolioError, ValueError):
    """Missing asset/order, non-positive quantity or price, bad symbol or day."""

    pass


class InsufficientFundsError(PortfolioError):
    """Purchase cost exceeds available cash."""

    pass


class InsufficientHoldingsError(PortfolioError):
    """Sale or sell order asks for more units than are held."""

    pass


class UnknownSymbolError(PortfolioError):
    """Symbol has no holding ledger in the portfolio."""

    pass


class CapacityExceededError(PortfolioError):
    """Adding a new symbol would exceed the configured symbol cap."""

    pass
