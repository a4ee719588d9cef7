"""
Inventory Calculation Service

Stateless stock math used by the inventory endpoints and alerts: stock
levels, reorder points, turnover and reorder recommendations.

Author: TM3
Date: 2025-10-17
"""
import math
from datetime import timedelta
from typing import Any, Dict, Iterable, List, Optional

from zylos.domain.clock import utcnow
from zylos.domain.enums import StockLevel
from zylos.domain.inventory import InventoryMovement, ProductInventory
from zylos.domain.value_objects import Money

DEFAULT_MAX_ORDER_QUANTITY = 100


class InventoryCalculationService:
    """Stock level and reorder calculations"""

    @staticmethod
    def calculate_stock_level(current_stock: int, low_stock_threshold: int = 10,
                              out_of_stock_threshold: int = 0) -> StockLevel:
        if current_stock <= out_of_stock_threshold:
            return StockLevel.OUT
        if current_stock <= low_stock_threshold:
            return StockLevel.LOW
        return StockLevel.NORMAL

    @staticmethod
    def calculate_reorder_point(average_monthly_usage: float, lead_time_days: int = 7,
                                safety_stock_days: int = 3) -> int:
        """
        Units that cover the supplier lead time plus a safety margin

        reorder_point = ceil(daily_usage * (lead_time_days + safety_stock_days))
        """
        daily_usage = average_monthly_usage / 30
        return math.ceil(daily_usage * (lead_time_days + safety_stock_days))

    @staticmethod
    def calculate_turnover_rate(movements: Iterable[InventoryMovement], days: int = 30) -> float:
        """Average units shipped per day over the last `days` days"""
        if days <= 0:
            return 0.0
        cutoff = utcnow() - timedelta(days=days)
        shipped = sum(
            m.quantity for m in movements
            if m.is_stock_outflow() and m.created_at >= cutoff
        )
        return shipped / days

    @staticmethod
    def generate_stock_alerts(inventories: Iterable[ProductInventory]) -> List[Dict[str, Any]]:
        """One alert per product that is low or out of stock"""
        alerts = []
        for inventory in inventories:
            level = InventoryCalculationService.calculate_stock_level(
                inventory.current_stock, inventory.low_stock_threshold
            )
            if level == StockLevel.NORMAL:
                continue
            alerts.append({
                "product_id": inventory.product_id,
                "product_name": inventory.product_name,
                "current_stock": inventory.current_stock,
                "low_stock_threshold": inventory.low_stock_threshold,
                "level": level.value,
            })
        return alerts

    @staticmethod
    def calculate_inventory_value(inventories: Iterable[ProductInventory],
                                  unit_prices: Dict[str, Money]) -> Dict[str, Any]:
        """
        Stock valuation plus the low / out-of-stock lists

        Products without a known unit price are counted but not valued.
        """
        inventories = list(inventories)
        total_value = Money.zero()
        low_stock = []
        out_of_stock = []

        for inventory in inventories:
            price = unit_prices.get(inventory.product_id)
            if price is not None:
                total_value = total_value.add(inventory.get_stock_value(price))

            level = inventory.stock_level()
            if level == StockLevel.OUT:
                out_of_stock.append(inventory.product_id)
            elif level == StockLevel.LOW:
                low_stock.append(inventory.product_id)

        return {
            "total_products": len(inventories),
            "total_units": sum(max(i.current_stock, 0) for i in inventories),
            "total_value": float(total_value.amount),
            "low_stock_products": low_stock,
            "out_of_stock_products": out_of_stock,
        }

    @staticmethod
    def recommend_reorder_quantities(items: Iterable[Dict[str, Any]],
                                     max_order_quantity: Optional[int] = None) -> List[Dict[str, Any]]:
        """
        Reorder suggestions for products under their reorder point

        Args:
            items: dicts with product_id, current_stock, reorder_point and an
                optional max_order_quantity
            max_order_quantity: cap used when an item has none of its own

        Returns:
            One recommendation per product that needs reordering
        """
        recommendations = []
        for item in items:
            current_stock = item["current_stock"]
            reorder_point = item["reorder_point"]
            if current_stock >= reorder_point:
                continue

            cap = item.get("max_order_quantity") or max_order_quantity or DEFAULT_MAX_ORDER_QUANTITY
            recommendations.append({
                "product_id": item["product_id"],
                "current_stock": current_stock,
                "reorder_point": reorder_point,
                "recommended_quantity": min(reorder_point - current_stock, cap),
                "reason": f"Reorder needed. Current: {current_stock}, Reorder point: {reorder_point}",
            })
        return recommendations
