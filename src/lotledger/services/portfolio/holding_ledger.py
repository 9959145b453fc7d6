"""Holding ledger for FIFO lot accounting.

One ledger per symbol. Holds the latest known asset definition plus the
purchase lots in chronological (insertion) order:
- Purchases append a new lot; lots are never merged
- Sales consume lots oldest first (FIFO)
- Valuation runs per lot, with each lot's own holding duration
"""

from dataclasses import replace
from decimal import Decimal

from lotledger.services.portfolio.exceptions import InsufficientHoldingsError, InvalidArgumentError
from lotledger.services.portfolio.models import Asset, LotRecord, PurchaseLot, to_decimal
from lotledger.services.portfolio.valuation import AssetValuator
from lotledger.system.log_system import LoggerFactory

logger = LoggerFactory.get_logger()


class HoldingLedger:
    """
    Per-symbol collection of purchase lots.

    Invariants:
    - total_quantity() == sum of lot quantities
    - every stored lot has quantity > 0
    - lot order is purchase order

    Example:
        >>> ledger = HoldingLedger(Asset.share("XYZ", Decimal("100")), AssetValuator())
        >>> first = ledger.add_lot(day=0, unit_price=Decimal("100"), quantity=10)
        >>> second = ledger.add_lot(day=10, unit_price=Decimal("120"), quantity=10)
        >>> ledger.consume_fifo(15, Decimal("150"))
        Decimal('650')
        >>> ledger.total_quantity()
        5
    """

    def __init__(self, asset: Asset, valuator: AssetValuator | None = None) -> None:
        """
        Initialize ledger.

        Args:
            asset: Current asset definition for this symbol
            valuator: Valuation rules (defaults if None)
        """
        if asset is None:
            raise InvalidArgumentError("Asset cannot be None")
        self._asset = asset
        self._valuator = valuator or AssetValuator()
        self._lots: list[PurchaseLot] = []

    @property
    def asset(self) -> Asset:
        """Latest known asset definition."""
        return self._asset

    @property
    def symbol(self) -> str:
        return self._asset.symbol

    def update_asset(self, asset: Asset) -> None:
        """
        Replace the stored asset definition (e.g. new market price).

        Raises:
            InvalidArgumentError: If asset is a different symbol or kind
        """
        if asset is None:
            raise InvalidArgumentError("Asset cannot be None")
        if asset != self._asset:
            raise InvalidArgumentError(
                f"Ledger for {self._asset.kind.name} {self._asset.symbol} cannot take "
                f"{asset.kind.name} {asset.symbol}"
            )
        self._asset = asset

    def add_lot(self, day: int, unit_price: Decimal, quantity: int) -> PurchaseLot:
        """
        Append a new lot to the end of the FIFO queue.

        Args:
            day: Purchase day
            unit_price: Price paid per unit
            quantity: Units bought

        Returns:
            The created lot

        Raises:
            InvalidArgumentError: If any lot field is invalid
        """
        lot = PurchaseLot(purchase_day=day, unit_price=unit_price, quantity=quantity)
        self._lots.append(lot)
        return lot

    def get_lots(self) -> list[PurchaseLot]:
        """Copies of all lots, oldest first."""
        return [replace(lot) for lot in self._lots]

    def total_quantity(self) -> int:
        """Total units across all lots."""
        return sum(lot.quantity for lot in self._lots)

    def lot_count(self) -> int:
        return len(self._lots)

    def is_empty(self) -> bool:
        return len(self._lots) == 0

    def consume_fifo(self, quantity_to_sell: int, sale_price: Decimal) -> Decimal:
        """
        Sell units using FIFO (First In, First Out).

        Drains the oldest lots first. Lots are decremented in place during the
        walk; emptied lots are dropped in a single pass afterwards.

        Args:
            quantity_to_sell: Units to sell (positive)
            sale_price: Price per unit received

        Returns:
            Realized profit: quantity_to_sell * sale_price - consumed cost basis

        Raises:
            InvalidArgumentError: If quantity is not positive or price is negative
            InsufficientHoldingsError: If fewer units are held than requested

        Example:
            >>> # Lots [10@$100, 10@$120], sell 15 @ $150
            >>> ledger.consume_fifo(15, Decimal("150"))
            Decimal('650')  # 10*(150-100) + 5*(150-120)
            >>> # Leaves: [5@$120]
        """
        if quantity_to_sell <= 0:
            raise InvalidArgumentError(f"Quantity must be positive, got {quantity_to_sell}")
        sale_price = to_decimal(sale_price, "Sale price")
        if sale_price < 0:
            raise InvalidArgumentError(f"Sale price cannot be negative, got {sale_price}")

        # Check before touching any lot
        total_available = self.total_quantity()
        if quantity_to_sell > total_available:
            raise InsufficientHoldingsError(
                f"Insufficient {self.symbol} quantity: need {quantity_to_sell}, have {total_available}"
            )

        remaining = quantity_to_sell
        cost_basis = Decimal("0")

        for lot in self._lots:
            if remaining == 0:
                break

            taken = min(remaining, lot.quantity)
            cost_basis += taken * lot.unit_price
            lot.decrease(taken)
            remaining -= taken

            logger.debug(
                "holding_ledger.lot_consumed",
                symbol=self.symbol,
                lot_id=lot.lot_id,
                purchase_day=lot.purchase_day,
                unit_price=str(lot.unit_price),
                quantity=taken,
                remaining_in_lot=lot.quantity,
            )

        # Compact after the walk
        self._lots = [lot for lot in self._lots if lot.quantity > 0]

        return quantity_to_sell * sale_price - cost_basis

    def aggregate_value(self, current_day: int) -> Decimal:
        """
        Real value of all lots at `current_day`.

        Each lot is valued on its own, with its own quantity and holding
        duration (current_day - purchase_day). Lots are never averaged.

        Args:
            current_day: Valuation day

        Returns:
            Sum of per-lot real values
        """
        value = Decimal("0")
        for lot in self._lots:
            if lot.quantity > 0:
                days_held = max(0, current_day - lot.purchase_day)
                value += self._valuator.real_value(
                    self._asset.kind,
                    self._lot_price(lot),
                    lot.quantity,
                    days_held,
                )
        return value

    def lot_records(self) -> list[LotRecord]:
        """Canonical records for every live lot, oldest first."""
        return [
            LotRecord(
                kind=self._asset.kind,
                symbol=self._asset.symbol,
                unit_price=lot.unit_price,
                quantity=lot.quantity,
                purchase_day=lot.purchase_day,
            )
            for lot in self._lots
            if lot.quantity > 0
        ]

    def _lot_price(self, lot: PurchaseLot) -> Decimal:
        if self._valuator.config.lot_price_basis == "acquisition":
            return lot.unit_price
        return self._asset.price
