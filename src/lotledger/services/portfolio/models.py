"""Data models for portfolio service.

Defines all core entities for portfolio accounting:
- AssetKind: Closed set of asset variants (share, commodity, currency)
- Asset: Symbol + market price of one asset variant
- PurchaseLot: One acquisition event (day, unit price, remaining quantity)
- LotRecord / PortfolioHeader: Canonical persisted form of portfolio state
- HoldingSummary / PortfolioReport: Report snapshot
- ValuationConfig / PortfolioConfig: Service configuration
"""

from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, Literal
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field, field_validator

from lotledger.services.portfolio.exceptions import InvalidArgumentError

MAX_SYMBOL_LENGTH = 5
RECORD_SEPARATOR = "|"


def to_decimal(value: Any, name: str = "value") -> Decimal:
    """
    Convert a numeric input to Decimal.

    Floats go through str() so 0.1 becomes Decimal("0.1"), not its binary
    expansion.

    Raises:
        InvalidArgumentError: If value is missing, not numeric, or not finite
    """
    if value is None:
        raise InvalidArgumentError(f"{name} cannot be None")
    if isinstance(value, bool):
        raise InvalidArgumentError(f"{name} must be numeric, got {value!r}")
    try:
        result = value if isinstance(value, Decimal) else Decimal(str(value))
    except (InvalidOperation, ValueError) as e:
        raise InvalidArgumentError(f"{name} must be numeric, got {value!r}") from e
    if not result.is_finite():
        raise InvalidArgumentError(f"{name} must be finite, got {value!r}")
    return result


def format_decimal(value: Decimal) -> str:
    """Plain fixed-point rendering ('.' separator, no exponent)."""
    return format(value, "f")


def normalize_symbol(symbol: Any) -> str:
    """
    Strip and upper-case a symbol.

    Raises:
        InvalidArgumentError: If symbol is missing, empty, or too long
    """
    if symbol is None or not isinstance(symbol, str) or not symbol.strip():
        raise InvalidArgumentError("Asset symbol cannot be empty")
    normalized = symbol.strip().upper()
    if len(normalized) > MAX_SYMBOL_LENGTH:
        raise InvalidArgumentError(
            f"Asset symbol cannot be longer than {MAX_SYMBOL_LENGTH} characters, got '{normalized}'"
        )
    if RECORD_SEPARATOR in normalized:
        raise InvalidArgumentError(f"Asset symbol cannot contain '{RECORD_SEPARATOR}'")
    return normalized


class AssetKind(str, Enum):
    """Asset variant. Each kind has its own valuation rules."""

    SHARE = "share"
    COMMODITY = "commodity"
    CURRENCY = "currency"

    @classmethod
    def from_label(cls, label: str) -> "AssetKind":
        """
        Parse a kind from its persisted label ("SHARE") or value ("share").

        Raises:
            InvalidArgumentError: If label names no kind
        """
        key = label.strip().upper() if isinstance(label, str) else ""
        try:
            return cls[key]
        except KeyError:
            raise InvalidArgumentError(f"Unknown asset kind: {label!r}") from None


# Fixed grouping order for reports
REPORT_KIND_ORDER: tuple[AssetKind, ...] = (AssetKind.SHARE, AssetKind.COMMODITY, AssetKind.CURRENCY)


@dataclass(frozen=True)
class Asset:
    """
    Asset definition: kind, symbol and current market price.

    Identity is (kind, symbol). Price is excluded from equality and hashing,
    so Share AAPL @100 == Share AAPL @250, but Share AAPL != Commodity AAPL.

    Attributes:
        kind: Asset variant
        symbol: Upper-cased ticker (1-5 characters)
        price: Market price per unit (> 0)

    Example:
        >>> apple = Asset.share("aapl", Decimal("150.00"))
        >>> apple.symbol
        'AAPL'
        >>> apple == Asset.share("AAPL", Decimal("999"))
        True
    """

    kind: AssetKind
    symbol: str
    price: Decimal = field(compare=False)

    def __post_init__(self) -> None:
        if not isinstance(self.kind, AssetKind):
            raise InvalidArgumentError(f"Invalid asset kind: {self.kind!r}")
        object.__setattr__(self, "symbol", normalize_symbol(self.symbol))
        price = to_decimal(self.price, "Asset price")
        if price <= 0:
            raise InvalidArgumentError(f"Asset price must be positive, got {price}")
        object.__setattr__(self, "price", price)

    @classmethod
    def share(cls, symbol: str, price: Decimal | int | str | float) -> "Asset":
        """Create a share."""
        return cls(AssetKind.SHARE, symbol, price)  # type: ignore[arg-type]

    @classmethod
    def commodity(cls, symbol: str, price: Decimal | int | str | float) -> "Asset":
        """Create a commodity."""
        return cls(AssetKind.COMMODITY, symbol, price)  # type: ignore[arg-type]

    @classmethod
    def currency(cls, symbol: str, price: Decimal | int | str | float) -> "Asset":
        """Create a currency."""
        return cls(AssetKind.CURRENCY, symbol, price)  # type: ignore[arg-type]

    def with_price(self, price: Decimal | int | str | float) -> "Asset":
        """Return the same asset re-priced."""
        return Asset(self.kind, self.symbol, price)  # type: ignore[arg-type]

    def __str__(self) -> str:
        return f"{self.kind.name} {self.symbol} @ {self.price:.2f}"


@dataclass
class PurchaseLot:
    """
    One acquisition event.

    Day and unit price are fixed at creation; quantity only decreases, via
    FIFO consumption during a sale.

    Attributes:
        purchase_day: Account day on which the lot was bought (>= 0)
        unit_price: Price paid per unit (>= 0)
        quantity: Units still held (> 0 at creation, never negative)
        lot_id: Unique identifier (for logs and inspection)
    """

    purchase_day: int
    unit_price: Decimal
    quantity: int
    lot_id: str = field(default_factory=lambda: str(uuid4()), compare=False)

    def __post_init__(self) -> None:
        if self.quantity <= 0:
            raise InvalidArgumentError(f"Lot quantity must be positive, got {self.quantity}")
        self.unit_price = to_decimal(self.unit_price, "Lot unit price")
        if self.unit_price < 0:
            raise InvalidArgumentError(f"Lot unit price cannot be negative, got {self.unit_price}")
        if self.purchase_day < 0:
            raise InvalidArgumentError(f"Purchase day cannot be negative, got {self.purchase_day}")

    def decrease(self, amount: int) -> None:
        """
        Remove units from the lot.

        Raises:
            InvalidArgumentError: If amount is negative or exceeds what the lot holds
        """
        if amount < 0:
            raise InvalidArgumentError(f"Cannot remove a negative amount from a lot, got {amount}")
        if amount > self.quantity:
            raise InvalidArgumentError(f"Cannot remove {amount} units from lot holding {self.quantity}")
        self.quantity -= amount

    @property
    def cost_basis(self) -> Decimal:
        """Acquisition-price cost of the units still in the lot."""
        return self.unit_price * self.quantity


@dataclass(frozen=True)
class LotRecord:
    """
    Canonical persisted form of one live lot.

    Line format: KIND|SYMBOL|UNIT_PRICE|QUANTITY|PURCHASE_DAY

    Example:
        >>> LotRecord(AssetKind.SHARE, "AAPL", Decimal("150.00"), 10, 0).to_line()
        'SHARE|AAPL|150.00|10|0'
    """

    kind: AssetKind
    symbol: str
    unit_price: Decimal
    quantity: int
    purchase_day: int

    FIELD_COUNT = 5

    def to_line(self) -> str:
        """Render the record in canonical form."""
        return RECORD_SEPARATOR.join(
            [
                self.kind.name,
                self.symbol,
                format_decimal(self.unit_price),
                str(self.quantity),
                str(self.purchase_day),
            ]
        )

    @classmethod
    def parse(cls, line: str) -> "LotRecord":
        """
        Parse a canonical record line.

        Raises:
            InvalidArgumentError: If the field count is wrong or any field is malformed
        """
        parts = line.strip().split(RECORD_SEPARATOR)
        if len(parts) != cls.FIELD_COUNT:
            raise InvalidArgumentError(f"Lot record needs {cls.FIELD_COUNT} fields, got {len(parts)}: {line!r}")

        kind_label, symbol, price_text, quantity_text, day_text = parts
        return cls(
            kind=AssetKind.from_label(kind_label),
            symbol=normalize_symbol(symbol),
            unit_price=to_decimal(price_text.strip(), "Lot unit price"),
            quantity=_parse_int(quantity_text, "Lot quantity"),
            purchase_day=_parse_int(day_text, "Purchase day"),
        )


@dataclass(frozen=True)
class PortfolioHeader:
    """Account-level persisted state: cash and current day."""

    cash: Decimal
    current_day: int


def _parse_int(text: str, name: str) -> int:
    try:
        return int(text.strip())
    except ValueError as e:
        raise InvalidArgumentError(f"{name} must be an integer, got {text!r}") from e


class HoldingSummary(BaseModel):
    """
    One report row: aggregate view of a holding ledger.

    Attributes:
        kind: Asset kind
        symbol: Ticker symbol
        quantity: Total units across all lots
        lot_count: Number of live lots
        market_price: Latest known market price
        value: Aggregate real value at the report day
    """

    kind: AssetKind
    symbol: str
    quantity: int
    lot_count: int
    market_price: Decimal
    value: Decimal

    model_config = ConfigDict(frozen=True)


class PortfolioReport(BaseModel):
    """
    Immutable, deterministically ordered portfolio snapshot.

    Holdings are grouped by kind (share, commodity, currency), then sorted by
    value descending; equal values keep ledger insertion order.
    """

    day: int
    cash: Decimal
    holdings: list[HoldingSummary] = Field(default_factory=list)
    holdings_value: Decimal
    total_value: Decimal

    model_config = ConfigDict(frozen=True)

    def render(self) -> str:
        """Render the snapshot as a fixed-width text table."""
        rule = "-" * 50
        lines = [
            f"PORTFOLIO REPORT (Day {self.day})",
            rule,
            f"{'TYPE':<10} | {'SYMBOL':<10} | {'QUANTITY':<10} | VALUE",
            rule,
        ]
        for row in self.holdings:
            lines.append(f"{row.kind.name:<10} | {row.symbol:<10} | {row.quantity:<10d} | {row.value:.2f}")
        lines.append(rule)
        lines.append(f"CASH: {self.cash:.2f}")
        lines.append(f"TOTAL NET WORTH: {self.total_value:.2f}")
        return "\n".join(lines) + "\n"


class ValuationConfig(BaseModel):
    """
    Valuation constants per asset kind.

    Attributes:
        share_flat_fee: Flat fee charged on share purchases below the threshold
        share_fee_threshold: Notional (price * quantity) at or above which no fee applies
        commodity_storage_rate: Storage cost per unit per day held (minimum one day)
        currency_spread_rate: Spread as a fraction of notional (0.005 = 0.5%)
        lot_price_basis: Price used to value a lot.
            'market' = latest known market price of the asset,
            'acquisition' = the lot's own unit price.
            Default: 'market'

    Example:
        >>> config = ValuationConfig(share_flat_fee=Decimal("2.50"))
    """

    share_flat_fee: Decimal = Decimal("5.00")
    share_fee_threshold: Decimal = Decimal("1000.00")
    commodity_storage_rate: Decimal = Decimal("0.50")
    currency_spread_rate: Decimal = Decimal("0.005")
    lot_price_basis: Literal["market", "acquisition"] = "market"

    @field_validator("share_flat_fee", "share_fee_threshold", "commodity_storage_rate", "currency_spread_rate")
    @classmethod
    def validate_non_negative(cls, v: Decimal) -> Decimal:
        """Validate rates and fees are non-negative."""
        if v < 0:
            raise ValueError(f"Valuation constants cannot be negative, got {v}")
        return v

    @field_validator("currency_spread_rate")
    @classmethod
    def validate_spread_below_one(cls, v: Decimal) -> Decimal:
        """Validate spread is a fraction."""
        if v >= 1:
            raise ValueError(f"Currency spread rate must be below 1, got {v}")
        return v

    model_config = ConfigDict(frozen=True)


class PortfolioConfig(BaseModel):
    """
    Configuration for portfolio service.

    Attributes:
        portfolio_id: Unique portfolio identifier
        initial_cash: Starting cash (>= 0)
        start_day: Initial value of the day counter (>= 0)
        max_symbols: Cap on distinct symbols held (None = unbounded)
        valuation: Valuation constants

    Example:
        >>> config = PortfolioConfig(initial_cash=Decimal("10000"), max_symbols=10)
    """

    portfolio_id: str = Field(default_factory=lambda: str(uuid4()))
    initial_cash: Decimal = Decimal("10000.00")
    start_day: int = 0
    max_symbols: int | None = None
    valuation: ValuationConfig = Field(default_factory=ValuationConfig)

    @field_validator("initial_cash")
    @classmethod
    def validate_initial_cash(cls, v: Decimal) -> Decimal:
        """Validate initial cash is non-negative."""
        if v < 0:
            raise ValueError(f"Initial cash cannot be negative, got {v}")
        return v

    @field_validator("start_day")
    @classmethod
    def validate_start_day(cls, v: int) -> int:
        """Validate start day is non-negative."""
        if v < 0:
            raise ValueError(f"Start day cannot be negative, got {v}")
        return v

    @field_validator("max_symbols")
    @classmethod
    def validate_max_symbols(cls, v: int | None) -> int | None:
        """Validate symbol cap is at least one when set."""
        if v is not None and v < 1:
            raise ValueError(f"max_symbols must be at least 1 or None, got {v}")
        return v

    model_config = ConfigDict(frozen=True)
