"""Portfolio service for cash and lot-based holdings.

This module provides portfolio accounting with per-purchase lots, FIFO
sale consumption, realized profit calculation and per-kind valuation
(share fees, commodity storage, currency spread).

Key components:
- PortfolioService: Main service implementation
- IPortfolioService: Protocol interface
- HoldingLedger: Per-symbol FIFO lot collection
- AssetValuator: Acquisition cost and real value per asset kind
- Models: Asset, PurchaseLot, LotRecord, PortfolioReport, PortfolioConfig

Example:
    >>> from lotledger.services.portfolio import Asset, PortfolioConfig, PortfolioService
    >>> from decimal import Decimal
    >>>
    >>> portfolio = PortfolioService(PortfolioConfig(initial_cash=Decimal("10000")))
    >>> portfolio.buy(Asset.share("AAPL", Decimal("150")), 10)
    >>> portfolio.advance_day(10)
    >>>
    >>> # Query state
    >>> print(f"Cash: ${portfolio.get_cash()}")
    >>> print(portfolio.report())
"""

from lotledger.services.portfolio.exceptions import (
    CapacityExceededError,
    InsufficientFundsError,
    InsufficientHoldingsError,
    InvalidArgumentError,
    PortfolioError,
    UnknownSymbolError,
)
from lotledger.services.portfolio.holding_ledger import HoldingLedger
from lotledger.services.portfolio.interface import IPortfolioService
from lotledger.services.portfolio.models import (
    Asset,
    AssetKind,
    HoldingSummary,
    LotRecord,
    PortfolioConfig,
    PortfolioHeader,
    PortfolioReport,
    PurchaseLot,
    ValuationConfig,
)
from lotledger.services.portfolio.service import PortfolioService
from lotledger.services.portfolio.valuation import AssetValuator

__all__ = [
    # Service
    "IPortfolioService",
    "PortfolioService",
    "HoldingLedger",
    "AssetValuator",
    # Models
    "Asset",
    "AssetKind",
    "PurchaseLot",
    "LotRecord",
    "PortfolioHeader",
    "HoldingSummary",
    "PortfolioReport",
    "PortfolioConfig",
    "ValuationConfig",
    # Errors
    "PortfolioError",
    "InvalidArgumentError",
    "InsufficientFundsError",
    "InsufficientHoldingsError",
    "UnknownSymbolError",
    "CapacityExceededError",
]
