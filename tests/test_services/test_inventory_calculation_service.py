"""
Unit tests for InventoryCalculationService

Author: TM3
Date: 2025-10-17
"""
from datetime import timedelta

from zylos.domain.clock import utcnow
from zylos.domain.enums import MovementType, StockLevel
from zylos.domain.inventory import InventoryMovement, ProductInventory
from zylos.domain.value_objects import Money
from zylos.services.inventory_calculation_service import InventoryCalculationService


class TestStockCalculations:

    def test_stock_level(self):
        assert InventoryCalculationService.calculate_stock_level(0) == StockLevel.OUT
        assert InventoryCalculationService.calculate_stock_level(10) == StockLevel.LOW
        assert InventoryCalculationService.calculate_stock_level(11) == StockLevel.NORMAL
        assert InventoryCalculationService.calculate_stock_level(3, 2, 3) == StockLevel.OUT

    def test_reorder_point(self):
        # 90 units/month = 3/day over 7 + 3 days
        assert InventoryCalculationService.calculate_reorder_point(90) == 30
        assert InventoryCalculationService.calculate_reorder_point(10, 5, 0) == 2

    def test_turnover_rate_counts_recent_outflows_only(self):
        movements = [
            InventoryMovement(product_id="p-1", type=MovementType.OUT, quantity=30),
            InventoryMovement(product_id="p-1", type=MovementType.IN, quantity=100),
            InventoryMovement(product_id="p-1", type=MovementType.OUT, quantity=60,
                              created_at=utcnow() - timedelta(days=45)),
        ]
        assert InventoryCalculationService.calculate_turnover_rate(movements, days=30) == 1.0
        assert InventoryCalculationService.calculate_turnover_rate(movements, days=0) == 0.0

    def test_stock_alerts(self):
        inventories = [
            ProductInventory(product_id="p-1", product_name="A", current_stock=0),
            ProductInventory(product_id="p-2", product_name="B", current_stock=5),
            ProductInventory(product_id="p-3", product_name="C", current_stock=50),
        ]

        alerts = InventoryCalculationService.generate_stock_alerts(inventories)

        assert [(a["product_id"], a["level"]) for a in alerts] == [("p-1", "out"), ("p-2", "low")]

    def test_inventory_value(self):
        inventories = [
            ProductInventory(product_id="p-1", current_stock=10),
            ProductInventory(product_id="p-2", current_stock=0),
            ProductInventory(product_id="p-3", current_stock=4),
        ]

        result = InventoryCalculationService.calculate_inventory_value(
            inventories, {"p-1": Money("2.50"), "p-2": Money(1)}
        )

        assert result["total_products"] == 3
        assert result["total_units"] == 14
        assert result["total_value"] == 25.0
        assert result["low_stock_products"] == ["p-1", "p-3"]
        assert result["out_of_stock_products"] == ["p-2"]


class TestReorderRecommendations:

    def test_recommendations(self):
        items = [
            {"product_id": "p-1", "current_stock": 5, "reorder_point": 20},
            {"product_id": "p-2", "current_stock": 20, "reorder_point": 20},
            {"product_id": "p-3", "current_stock": 0, "reorder_point": 500},
            {"product_id": "p-4", "current_stock": 0, "reorder_point": 50, "max_order_quantity": 30},
        ]

        result = InventoryCalculationService.recommend_reorder_quantities(items)

        assert [r["product_id"] for r in result] == ["p-1", "p-3", "p-4"]
        assert result[0]["recommended_quantity"] == 15
        assert result[0]["reason"] == "Reorder needed. Current: 5, Reorder point: 20"
        assert result[1]["recommended_quantity"] == 100
        assert result[2]["recommended_quantity"] == 30

    def test_global_cap(self):
        items = [{"product_id": "p-1", "current_stock": 0, "reorder_point": 80}]
        result = InventoryCalculationService.recommend_reorder_quantities(items, max_order_quantity=25)
        assert result[0]["recommended_quantity"] == 25
