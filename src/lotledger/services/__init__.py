"""LotLedger services package.

Each service is independently testable and depends on its collaborators
through Protocol interfaces:
- portfolio: cash, lots, valuation and reports
- orders: price-priority book of pending intents
- persistence: flat-file save/load
"""

from lotledger.services.orders import Order, OrderBook, OrderSide
from lotledger.services.persistence import DataIntegrityError, PortfolioFileManager
from lotledger.services.portfolio import IPortfolioService, PortfolioService

__all__: list[str] = [
    "IPortfolioService",
    "PortfolioService",
    "Order",
    "OrderSide",
    "OrderBook",
    "DataIntegrityError",
    "PortfolioFileManager",
]
