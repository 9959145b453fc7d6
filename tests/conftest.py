"""Root conftest: shared fixtures for all tests."""

from decimal import Decimal

import pytest

from lotledger.services.portfolio import Asset, PortfolioConfig, PortfolioService
from lotledger.system import LoggerFactory


@pytest.fixture(autouse=True)
def reset_logging():
    """Reset logging configuration before and after each test."""
    LoggerFactory.reset()
    yield
    LoggerFactory.reset()


@pytest.fixture
def portfolio_config() -> PortfolioConfig:
    """Standard portfolio configuration ($10,000, day 0, unbounded)."""
    return PortfolioConfig(portfolio_id="test_portfolio", initial_cash=Decimal("10000.00"))


@pytest.fixture
def portfolio(portfolio_config: PortfolioConfig) -> PortfolioService:
    """Fresh portfolio with $10,000 cash."""
    return PortfolioService(portfolio_config)


@pytest.fixture
def apple() -> Asset:
    return Asset.share("AAPL", Decimal("150.00"))


@pytest.fixture
def gold() -> Asset:
    return Asset.commodity("GOLD", Decimal("1800.00"))
