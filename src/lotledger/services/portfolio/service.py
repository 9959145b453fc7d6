"""Portfolio service implementation.

Main service for cash-plus-assets accounting with lot-based holdings:
- Purchases create lots and pay price * quantity plus acquisition cost
- Sales drain lots FIFO and realize profit against lot cost basis
- Valuation applies asset-kind rules per lot at the current day

Every operation validates all preconditions before touching state, so a
raised error never leaves a partial update behind.
"""

from decimal import Decimal
from typing import Any

from lotledger.services.portfolio.exceptions import (
    CapacityExceededError,
    InsufficientFundsError,
    InvalidArgumentError,
    UnknownSymbolError,
)
from lotledger.services.portfolio.holding_ledger import HoldingLedger
from lotledger.services.portfolio.models import (
    REPORT_KIND_ORDER,
    Asset,
    HoldingSummary,
    LotRecord,
    PortfolioConfig,
    PortfolioHeader,
    PortfolioReport,
    PurchaseLot,
    normalize_symbol,
    to_decimal,
)
from lotledger.services.portfolio.valuation import AssetValuator
from lotledger.system.log_system import LoggerFactory

logger = LoggerFactory.get_logger()


class PortfolioService:
    """
    Portfolio service implementation.

    Owns the cash balance, the day counter and one HoldingLedger per symbol.

    Example:
        >>> portfolio = PortfolioService(PortfolioConfig(initial_cash=Decimal("10000")))
        >>> portfolio.buy(Asset.share("AAPL", Decimal("150")), 10)
        Decimal('1500')
        >>> portfolio.buy(Asset.commodity("GOLD", Decimal("1800")), 2)
        Decimal('3600')
        >>> portfolio.get_cash()
        Decimal('4900')
        >>> portfolio.get_holdings_count()
        2
    """

    def __init__(self, config: PortfolioConfig | None = None) -> None:
        """
        Initialize portfolio service.

        Args:
            config: Portfolio configuration (defaults if None)
        """
        self.config = config or PortfolioConfig()
        self._valuator = AssetValuator(self.config.valuation)

        # Core state
        self._cash: Decimal = self.config.initial_cash
        self._current_day: int = self.config.start_day
        self._ledgers: dict[str, HoldingLedger] = {}  # symbol → ledger, insertion ordered

        logger.debug(
            "portfolio_service.initialized",
            portfolio_id=self.config.portfolio_id,
            initial_cash=str(self._cash),
            start_day=self._current_day,
            max_symbols=self.config.max_symbols,
            lot_price_basis=self.config.valuation.lot_price_basis,
        )

    @classmethod
    def with_cash(cls, initial_cash: Decimal | int | str | float, **config_overrides: Any) -> "PortfolioService":
        """
        Create a portfolio from an initial cash amount.

        Args:
            initial_cash: Starting cash (>= 0)
            **config_overrides: Other PortfolioConfig fields

        Raises:
            InvalidArgumentError: If initial cash is negative
        """
        cash = to_decimal(initial_cash, "Initial cash")
        if cash < 0:
            raise InvalidArgumentError(f"Initial cash cannot be negative, got {cash}")
        return cls(PortfolioConfig(initial_cash=cash, **config_overrides))

    @classmethod
    def from_header(cls, header: PortfolioHeader, config: PortfolioConfig | None = None) -> "PortfolioService":
        """
        Create an empty portfolio at a persisted (cash, day) state.

        Lots are restored afterwards through bulk_load().

        Args:
            header: Persisted cash and current day
            config: Base configuration supplying valuation and symbol cap

        Raises:
            ValueError: If cash is negative or day is negative
        """
        base = (config or PortfolioConfig()).model_dump()
        base.update(initial_cash=header.cash, start_day=header.current_day)
        return cls(PortfolioConfig.model_validate(base))

    # ==================== Trading ====================

    def buy(self, asset: Asset, quantity: int) -> Decimal:
        """
        Buy `quantity` units of `asset` at its market price.

        Processing:
        1. Validate inputs (asset present, quantity > 0)
        2. Check symbol kind and symbol cap
        3. Check cash covers price * quantity + acquisition cost
        4. Deduct cash, store asset as the latest definition, append lot

        Args:
            asset: Asset definition (its price is the purchase price)
            quantity: Units to buy

        Returns:
            Total cash paid

        Raises:
            InvalidArgumentError: If asset is missing, quantity invalid, or symbol held as another kind
            CapacityExceededError: If a new symbol would exceed max_symbols
            InsufficientFundsError: If total cost exceeds cash
        """
        self._validate_asset(asset)
        self._validate_quantity(quantity)
        self._check_can_hold(asset)

        acquisition_cost = self._valuator.acquisition_cost(asset.kind, asset.price, quantity)
        total_cost = asset.price * quantity + acquisition_cost

        if total_cost > self._cash:
            logger.warning(
                "portfolio_service.buy_rejected",
                symbol=asset.symbol,
                quantity=quantity,
                total_cost=str(total_cost),
                cash=str(self._cash),
            )
            raise InsufficientFundsError(f"Insufficient funds: cost {total_cost}, cash {self._cash}")

        self._cash -= total_cost
        lot = self._append_lot(asset, quantity, self._current_day)

        logger.info(
            "portfolio_service.asset_bought",
            kind=asset.kind.value,
            symbol=asset.symbol,
            quantity=quantity,
            price=float(asset.price),
            acquisition_cost=float(acquisition_cost),
            day=lot.purchase_day,
            cash=float(self._cash),
        )

        return total_cost

    def sell(self, symbol: str, quantity: int, current_price: Decimal | int | str | float) -> Decimal:
        """
        Sell `quantity` units of `symbol` at the caller-supplied market price.

        Lots are drained FIFO. Revenue uses `current_price`, not the stored
        asset price.

        Args:
            symbol: Ticker symbol
            quantity: Units to sell
            current_price: Sale price per unit

        Returns:
            Realized profit (revenue - consumed cost basis)

        Raises:
            InvalidArgumentError: If symbol, quantity or price is invalid
            UnknownSymbolError: If symbol is not held
            InsufficientHoldingsError: If fewer units are held than requested
        """
        symbol = normalize_symbol(symbol)
        self._validate_quantity(quantity)
        price = to_decimal(current_price, "Sale price")
        if price <= 0:
            raise InvalidArgumentError(f"Sale price must be positive, got {price}")

        ledger = self._ledgers.get(symbol)
        if ledger is None:
            logger.warning("portfolio_service.sell_rejected", symbol=symbol, reason="unknown_symbol")
            raise UnknownSymbolError(f"Asset not found in portfolio: {symbol}")

        # Raises InsufficientHoldingsError before any lot is touched
        profit = ledger.consume_fifo(quantity, price)

        revenue = price * quantity
        self._cash += revenue

        if ledger.is_empty():
            del self._ledgers[symbol]

        logger.info(
            "portfolio_service.asset_sold",
            symbol=symbol,
            quantity=quantity,
            price=float(price),
            realized_pnl=float(profit),
            position_closed=symbol not in self._ledgers,
            cash=float(self._cash),
        )

        return profit

    def bulk_load(self, asset: Asset, quantity: int, purchase_day: int) -> None:
        """
        Re-hydrate a lot without paying for it.

        Same lot insertion as buy(), but no cash check and no deduction: the
        cost was paid in an earlier session.

        Args:
            asset: Asset definition (stored as the latest definition)
            quantity: Units in the lot
            purchase_day: Day the lot was originally bought (<= current day)

        Raises:
            InvalidArgumentError: If asset, quantity or day is invalid
            CapacityExceededError: If a new symbol would exceed max_symbols
        """
        self._validate_asset(asset)
        self._validate_quantity(quantity)
        if not isinstance(purchase_day, int) or isinstance(purchase_day, bool) or purchase_day < 0:
            raise InvalidArgumentError(f"Purchase day must be a non-negative integer, got {purchase_day!r}")
        if purchase_day > self._current_day:
            raise InvalidArgumentError(
                f"Purchase day {purchase_day} is after current day {self._current_day}"
            )
        self._check_can_hold(asset)

        self._append_lot(asset, quantity, purchase_day)

        logger.debug(
            "portfolio_service.lot_loaded",
            kind=asset.kind.value,
            symbol=asset.symbol,
            quantity=quantity,
            price=str(asset.price),
            purchase_day=purchase_day,
        )

    def update_prices(self, prices: dict[str, Decimal]) -> None:
        """
        Re-price stored asset definitions.

        Symbols that are not held are ignored.

        Args:
            prices: Dict mapping symbol → current price

        Raises:
            InvalidArgumentError: If any symbol is malformed or any price is not positive (nothing is applied)
        """
        updates: dict[str, Decimal] = {}
        for symbol, raw_price in prices.items():
            price = to_decimal(raw_price, f"Price for {symbol}")
            if price <= 0:
                raise InvalidArgumentError(f"Price for {symbol} must be positive, got {price}")
            updates[normalize_symbol(symbol)] = price

        for symbol, price in updates.items():
            ledger = self._ledgers.get(symbol)
            if ledger is None:
                logger.debug("portfolio_service.price_ignored", symbol=symbol)
                continue
            ledger.update_asset(ledger.asset.with_price(price))

        logger.debug("portfolio_service.prices_updated", symbols=sorted(updates))

    # ==================== Time ====================

    def advance_day(self, days: int) -> None:
        """
        Move the day counter forward. Non-positive values are ignored.

        Raises:
            InvalidArgumentError: If days is not an integer
        """
        if not isinstance(days, int) or isinstance(days, bool):
            raise InvalidArgumentError(f"Days must be an integer, got {days!r}")
        if days <= 0:
            return
        self._current_day += days
        logger.debug("portfolio_service.day_advanced", days=days, current_day=self._current_day)

    def get_current_day(self) -> int:
        return self._current_day

    # ==================== Valuation ====================

    def holdings_value(self) -> Decimal:
        """Sum of real values of every ledger at the current day."""
        return sum(
            (ledger.aggregate_value(self._current_day) for ledger in self._ledgers.values()),
            start=Decimal("0"),
        )

    def total_value(self) -> Decimal:
        """Cash plus holdings value."""
        return self._cash + self.holdings_value()

    def get_report(self) -> PortfolioReport:
        """
        Structured report snapshot.

        Holdings are grouped by kind (share, commodity, currency), then by
        value descending. sorted() is stable, so equal values keep ledger
        insertion order.
        """
        rows = [
            HoldingSummary(
                kind=ledger.asset.kind,
                symbol=ledger.symbol,
                quantity=ledger.total_quantity(),
                lot_count=ledger.lot_count(),
                market_price=ledger.asset.price,
                value=ledger.aggregate_value(self._current_day),
            )
            for ledger in self._ledgers.values()
            if ledger.total_quantity() > 0
        ]
        rows.sort(key=lambda row: (REPORT_KIND_ORDER.index(row.kind), -row.value))

        holdings_value = sum((row.value for row in rows), start=Decimal("0"))
        return PortfolioReport(
            day=self._current_day,
            cash=self._cash,
            holdings=rows,
            holdings_value=holdings_value,
            total_value=self._cash + holdings_value,
        )

    def report(self) -> str:
        """Text report (see get_report())."""
        return self.get_report().render()

    # ==================== Queries ====================

    def get_cash(self) -> Decimal:
        return self._cash

    def get_holdings_count(self) -> int:
        """Number of distinct symbols held."""
        return len(self._ledgers)

    def get_quantity(self, symbol_or_asset: str | Asset | None) -> int:
        """Units held of a symbol (0 if not held)."""
        if symbol_or_asset is None:
            return 0
        if isinstance(symbol_or_asset, Asset):
            symbol = symbol_or_asset.symbol
        else:
            symbol = symbol_or_asset
        ledger = self._find_ledger(symbol)
        return ledger.total_quantity() if ledger is not None else 0

    def has_symbol(self, symbol: str) -> bool:
        return self._find_ledger(symbol) is not None

    def get_ledger(self, symbol: str) -> HoldingLedger | None:
        """Holding ledger for a symbol, for inspection. Mutate only through buy/sell."""
        return self._find_ledger(symbol)

    def get_asset(self, symbol: str) -> Asset | None:
        """Latest stored asset definition for a symbol."""
        ledger = self._find_ledger(symbol)
        return ledger.asset if ledger is not None else None

    def get_lots(self, symbol: str) -> list[PurchaseLot]:
        """Copies of a symbol's lots, oldest first (empty if not held)."""
        ledger = self._find_ledger(symbol)
        return ledger.get_lots() if ledger is not None else []

    def get_symbols(self) -> list[str]:
        """Held symbols in first-purchase order."""
        return list(self._ledgers)

    # ==================== State Export ====================

    def get_header(self) -> PortfolioHeader:
        return PortfolioHeader(cash=self._cash, current_day=self._current_day)

    def export_lots(self) -> list[LotRecord]:
        """One record per live lot across all symbols."""
        records: list[LotRecord] = []
        for ledger in self._ledgers.values():
            records.extend(ledger.lot_records())
        return records

    def get_holdings_data(self) -> list[str]:
        """Canonical KIND|SYMBOL|UNIT_PRICE|QUANTITY|PURCHASE_DAY lines."""
        return [record.to_line() for record in self.export_lots()]

    def validate_state(self) -> dict[str, bool]:
        """
        Check internal invariants.

        Returns:
            Dict of check name → passed
        """
        checks = {
            "cash_non_negative": self._cash >= 0,
            "day_non_negative": self._current_day >= 0,
            "no_empty_ledgers": all(not ledger.is_empty() for ledger in self._ledgers.values()),
            "lots_positive": all(
                lot.quantity > 0 for ledger in self._ledgers.values() for lot in ledger.get_lots()
            ),
            "lots_not_in_future": all(
                lot.purchase_day <= self._current_day
                for ledger in self._ledgers.values()
                for lot in ledger.get_lots()
            ),
            "keys_match_symbols": all(symbol == ledger.symbol for symbol, ledger in self._ledgers.items()),
            "within_symbol_cap": self.config.max_symbols is None or len(self._ledgers) <= self.config.max_symbols,
        }

        for name, passed in checks.items():
            if not passed:
                logger.error("portfolio_service.invariant_violated", check=name)

        return checks

    # ==================== Internals ====================

    def _find_ledger(self, symbol: str) -> HoldingLedger | None:
        """Ledger for a symbol, normalized like Asset symbols.

        Raises:
            InvalidArgumentError: If symbol is empty, too long or malformed
        """
        return self._ledgers.get(normalize_symbol(symbol))

    def _append_lot(self, asset: Asset, quantity: int, day: int) -> PurchaseLot:
        ledger = self._ledgers.get(asset.symbol)
        if ledger is None:
            ledger = HoldingLedger(asset, self._valuator)
            self._ledgers[asset.symbol] = ledger
        else:
            ledger.update_asset(asset)
        return ledger.add_lot(day, asset.price, quantity)

    def _check_can_hold(self, asset: Asset) -> None:
        existing = self._ledgers.get(asset.symbol)
        if existing is not None:
            if existing.asset.kind != asset.kind:
                raise InvalidArgumentError(
                    f"{asset.symbol} is held as {existing.asset.kind.name}, cannot add {asset.kind.name}"
                )
            return

        cap = self.config.max_symbols
        if cap is not None and len(self._ledgers) >= cap:
            logger.warning("portfolio_service.capacity_exceeded", symbol=asset.symbol, max_symbols=cap)
            raise CapacityExceededError(f"Portfolio is full ({cap} symbols), cannot add {asset.symbol}")

    @staticmethod
    def _validate_asset(asset: Asset) -> None:
        if asset is None:
            raise InvalidArgumentError("Asset cannot be None")
        if not isinstance(asset, Asset):
            raise InvalidArgumentError(f"Expected Asset, got {type(asset).__name__}")

    @staticmethod
    def _validate_quantity(quantity: int) -> None:
        if not isinstance(quantity, int) or isinstance(quantity, bool):
            raise InvalidArgumentError(f"Quantity must be an integer, got {quantity!r}")
        if quantity <= 0:
            raise InvalidArgumentError(f"Quantity must be positive, got {quantity}")
