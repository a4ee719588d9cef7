"""
Unit tests for InventoryMovement and ProductInventory

Author: TM3
Date: 2025-10-17
"""
from datetime import datetime, timedelta, timezone

import pytest

from zylos.domain.clock import utcnow
from zylos.domain.enums import MovementType, StockLevel
from zylos.domain.errors import InvalidQuantity, InvalidState
from zylos.domain.inventory import InventoryMovement, ProductInventory
from zylos.domain.value_objects import Money


def movement(type_, quantity, product_id="p-1", **kwargs):
    return InventoryMovement(product_id=product_id, type=type_, quantity=quantity, **kwargs)


class TestInventoryMovement:
    """Test movement validation and signs"""

    def test_outflow_is_negative_change(self):
        assert movement(MovementType.OUT, 4).net_stock_change == -4
        assert movement(MovementType.IN, 4).net_stock_change == 4
        assert movement(MovementType.ADJUSTMENT, -3).net_stock_change == -3

    @pytest.mark.parametrize("type_", [MovementType.IN, MovementType.OUT])
    def test_non_positive_in_out_quantity_raises(self, type_):
        with pytest.raises(InvalidQuantity):
            movement(type_, 0)
        with pytest.raises(InvalidQuantity):
            movement(type_, -1)

    def test_zero_adjustment_raises(self):
        with pytest.raises(InvalidQuantity):
            movement(MovementType.ADJUSTMENT, 0)

    def test_adjustment_predicate(self):
        assert movement(MovementType.ADJUSTMENT, 5).is_adjustment()
        assert not movement(MovementType.IN, 5).is_adjustment()

    def test_blank_reason_becomes_none(self):
        assert movement(MovementType.IN, 1, reason="   ").reason is None

    def test_naive_created_at_becomes_utc(self):
        naive = utcnow().replace(tzinfo=None)
        assert movement(MovementType.IN, 1, created_at=naive).created_at.tzinfo is not None


class TestProductInventory:
    """Test stock aggregate queries and apply()"""

    def test_stock_levels(self):
        assert ProductInventory(product_id="p-1", current_stock=0).stock_level() == StockLevel.OUT
        assert ProductInventory(product_id="p-1", current_stock=10).stock_level() == StockLevel.LOW
        assert ProductInventory(product_id="p-1", current_stock=11).stock_level() == StockLevel.NORMAL

    def test_has_low_stock_with_explicit_threshold(self):
        inventory = ProductInventory(product_id="p-1", current_stock=15)
        assert not inventory.has_low_stock()
        assert inventory.has_low_stock(threshold=20)

    def test_apply_returns_new_aggregate(self):
        # Arrange
        inventory = ProductInventory(product_id="p-1", current_stock=10)

        # Act
        after = inventory.apply(movement(MovementType.OUT, 3))

        # Assert
        assert after.current_stock == 7
        assert len(after.movements) == 1
        assert inventory.current_stock == 10
        assert inventory.movements == ()

    def test_apply_rejects_other_product(self):
        inventory = ProductInventory(product_id="p-1")
        with pytest.raises(InvalidState):
            inventory.apply(movement(MovementType.IN, 1, product_id="p-2"))

    def test_totals_and_computed_stock(self):
        inventory = ProductInventory(product_id="p-1")
        for m in (movement(MovementType.IN, 20), movement(MovementType.OUT, 5),
                  movement(MovementType.ADJUSTMENT, -2)):
            inventory = inventory.apply(m)

        assert inventory.current_stock == 13
        assert inventory.computed_stock() == 13
        assert inventory.units_received() == 20
        assert inventory.units_shipped() == 5

    def test_projections_do_not_change_stock(self):
        inventory = ProductInventory(product_id="p-1", current_stock=8)
        assert inventory.get_total_incoming(5) == 13
        assert inventory.get_total_outgoing(10) == -2
        assert inventory.current_stock == 8
        assert inventory.has_sufficient_stock(8)
        assert not inventory.has_sufficient_stock(9)

    def test_recent_movements(self):
        old = movement(MovementType.IN, 1, created_at=utcnow() - timedelta(days=40))
        new = movement(MovementType.IN, 2, created_at=utcnow() - timedelta(days=5))
        inventory = ProductInventory(product_id="p-1", movements=(old, new))

        assert inventory.get_recent_movements(30) == [new]

    def test_recent_movements_cutoff_is_inclusive(self, monkeypatch):
        # Arrange
        now = datetime(2025, 10, 17, 12, 0, tzinfo=timezone.utc)
        monkeypatch.setattr('zylos.domain.inventory.utcnow', lambda: now)
        cutoff = now - timedelta(days=30)
        on_cutoff = movement(MovementType.IN, 1, created_at=cutoff)
        just_before = movement(MovementType.IN, 2, created_at=cutoff - timedelta(microseconds=1))
        inventory = ProductInventory(product_id="p-1", movements=(just_before, on_cutoff))

        # Act
        recent = inventory.get_recent_movements(30)

        # Assert
        assert recent == [on_cutoff]

    def test_stock_value(self):
        assert ProductInventory(product_id="p-1", current_stock=3).get_stock_value(Money(2.5)) == Money("7.50")
        assert ProductInventory(product_id="p-1", current_stock=-1).get_stock_value(Money(2.5)).is_zero()

    def test_to_dict(self):
        inventory = ProductInventory(product_id="p-1", current_stock=5).apply(movement(MovementType.IN, 1))
        data = inventory.to_dict()
        assert data["stock_level"] == "low"
        assert data["current_stock"] == 6
        assert data["movements"][0]["net_stock_change"] == 1
