"""Unit tests for HoldingLedger - FIFO lot consumption and per-lot valuation."""

from decimal import Decimal

import pytest

from lotledger.services.portfolio.exceptions import InsufficientHoldingsError, InvalidArgumentError
from lotledger.services.portfolio.holding_ledger import HoldingLedger
from lotledger.services.portfolio.models import Asset, AssetKind, ValuationConfig
from lotledger.services.portfolio.valuation import AssetValuator


@pytest.fixture
def ledger() -> HoldingLedger:
    """XYZ ledger with lots [10@$100 day 0, 10@$120 day 10]."""
    ledger = HoldingLedger(Asset.share("XYZ", Decimal("100")))
    ledger.add_lot(day=0, unit_price=Decimal("100"), quantity=10)
    ledger.add_lot(day=10, unit_price=Decimal("120"), quantity=10)
    return ledger


class TestLots:
    """Lot insertion and inspection."""

    def test_lots_are_never_merged(self) -> None:
        ledger = HoldingLedger(Asset.share("XYZ", Decimal("100")))
        ledger.add_lot(day=0, unit_price=Decimal("100"), quantity=5)
        ledger.add_lot(day=0, unit_price=Decimal("100"), quantity=5)

        assert ledger.lot_count() == 2
        assert ledger.total_quantity() == 10

    def test_lots_keep_insertion_order(self, ledger: HoldingLedger) -> None:
        lots = ledger.get_lots()
        assert [lot.unit_price for lot in lots] == [Decimal("100"), Decimal("120")]
        assert [lot.purchase_day for lot in lots] == [0, 10]

    def test_get_lots_returns_copies(self, ledger: HoldingLedger) -> None:
        lots = ledger.get_lots()
        lots[0].decrease(10)

        assert ledger.total_quantity() == 20

    def test_add_invalid_lot_raises(self, ledger: HoldingLedger) -> None:
        with pytest.raises(InvalidArgumentError):
            ledger.add_lot(day=0, unit_price=Decimal("100"), quantity=0)
        assert ledger.lot_count() == 2


class TestFIFOConsumption:
    """consume_fifo drains oldest lots first."""

    def test_partial_sale_spans_lots(self, ledger: HoldingLedger) -> None:
        """Sell 15 @ $150: 10*(150-100) + 5*(150-120) = 650."""
        profit = ledger.consume_fifo(15, Decimal("150"))

        assert profit == Decimal("650")
        assert ledger.total_quantity() == 5

        remaining = ledger.get_lots()
        assert len(remaining) == 1
        assert remaining[0].unit_price == Decimal("120")
        assert remaining[0].purchase_day == 10

    def test_sale_within_first_lot(self, ledger: HoldingLedger) -> None:
        profit = ledger.consume_fifo(4, Decimal("90"))

        assert profit == Decimal("-40")
        assert [lot.quantity for lot in ledger.get_lots()] == [6, 10]

    def test_full_sale_empties_ledger(self, ledger: HoldingLedger) -> None:
        ledger.consume_fifo(20, Decimal("110"))

        assert ledger.is_empty()
        assert ledger.total_quantity() == 0

    def test_insufficient_quantity_leaves_lots_untouched(self, ledger: HoldingLedger) -> None:
        with pytest.raises(InsufficientHoldingsError):
            ledger.consume_fifo(25, Decimal("150"))

        assert ledger.total_quantity() == 20
        assert ledger.lot_count() == 2

    def test_non_positive_quantity_raises(self, ledger: HoldingLedger) -> None:
        with pytest.raises(InvalidArgumentError):
            ledger.consume_fifo(0, Decimal("150"))

    def test_negative_price_raises(self, ledger: HoldingLedger) -> None:
        with pytest.raises(InvalidArgumentError):
            ledger.consume_fifo(1, Decimal("-1"))


class TestAggregateValue:
    """Each lot is valued with its own quantity and duration."""

    def test_market_basis_uses_latest_price(self, ledger: HoldingLedger) -> None:
        # Both lots valued at the stored $100, no fee (notional 1000 each)
        assert ledger.aggregate_value(current_day=10) == Decimal("2000")

    def test_acquisition_basis_uses_lot_price(self) -> None:
        valuator = AssetValuator(ValuationConfig(lot_price_basis="acquisition"))
        ledger = HoldingLedger(Asset.share("XYZ", Decimal("100")), valuator)
        ledger.add_lot(day=0, unit_price=Decimal("100"), quantity=10)
        ledger.add_lot(day=10, unit_price=Decimal("120"), quantity=10)

        assert ledger.aggregate_value(current_day=10) == Decimal("2200")

    def test_commodity_lots_use_own_duration(self) -> None:
        ledger = HoldingLedger(Asset.commodity("GOLD", Decimal("10")))
        ledger.add_lot(day=0, unit_price=Decimal("10"), quantity=10)
        ledger.add_lot(day=5, unit_price=Decimal("10"), quantity=10)

        # Lot 1: 100 - 10*0.5*10 = 50; Lot 2: 100 - 10*0.5*5 = 75
        assert ledger.aggregate_value(current_day=10) == Decimal("125")

    def test_small_share_lots_each_pay_fee(self) -> None:
        """Two 5-unit lots are valued separately, so each is below the threshold."""
        ledger = HoldingLedger(Asset.share("XYZ", Decimal("100")))
        ledger.add_lot(day=0, unit_price=Decimal("100"), quantity=5)
        ledger.add_lot(day=1, unit_price=Decimal("100"), quantity=5)

        assert ledger.aggregate_value(current_day=1) == Decimal("990")


class TestAssetDefinition:
    """Stored asset definition updates."""

    def test_update_price(self, ledger: HoldingLedger) -> None:
        ledger.update_asset(Asset.share("XYZ", Decimal("130")))
        assert ledger.asset.price == Decimal("130")

    def test_update_with_other_kind_raises(self, ledger: HoldingLedger) -> None:
        with pytest.raises(InvalidArgumentError):
            ledger.update_asset(Asset.commodity("XYZ", Decimal("130")))
        assert ledger.asset.kind == AssetKind.SHARE

    def test_lot_records(self, ledger: HoldingLedger) -> None:
        lines = [record.to_line() for record in ledger.lot_records()]
        assert lines == ["SHARE|XYZ|100|10|0", "SHARE|XYZ|120|10|10"]
