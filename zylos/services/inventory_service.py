"""
Inventory Service - stock movements and inventory queries

Every stock change is an inventory movement. The repository applies the
movement to products.current_stock in the same transaction; this service
decides which movement to record and publishes the resulting events.

Author: TM3
Date: 2025-10-17
"""
import logging
from datetime import timedelta
from typing import Any, Dict, List, Optional

from zylos.domain.clock import utcnow
from zylos.domain.enums import MovementType
from zylos.domain.errors import InsufficientStock, InvalidQuantity, ResourceNotFound
from zylos.domain.events import EventPublisher, inventory_alert, stock_added, stock_removed
from zylos.domain.inventory import InventoryMovement, ProductInventory
from zylos.domain.pagination import PaginatedResponse, PaginationParams
from zylos.domain.product import Product
from zylos.repositories.base import InventoryMovementRepository, ProductRepository
from zylos.services.inventory_calculation_service import InventoryCalculationService

logger = logging.getLogger(__name__)

HISTORY_DAYS = 90


class InventoryService:
    """Stock in / out / adjustments for one tenant's products"""

    def __init__(self, product_repository: ProductRepository,
                 movement_repository: InventoryMovementRepository,
                 publisher: EventPublisher):
        self.product_repository = product_repository
        self.movement_repository = movement_repository
        self.publisher = publisher

    def _require_product(self, product_id: str, tenant_id: str) -> Product:
        product = self.product_repository.find_by_id(product_id, tenant_id)
        if not product:
            raise ResourceNotFound("Product", product_id)
        return product

    def get_inventory(self, product_id: str, tenant_id: str, history_days: int = HISTORY_DAYS) -> ProductInventory:
        """ProductInventory snapshot with the movements of the last `history_days` days"""
        product = self._require_product(product_id, tenant_id)
        since = utcnow() - timedelta(days=history_days)
        movements = self.movement_repository.find_by_product(product_id, tenant_id, since)
        return product.to_inventory().model_copy(update={"movements": tuple(movements)})

    def _record(self, product: Product, movement: InventoryMovement, guard_stock: bool) -> ProductInventory:
        new_stock = self.movement_repository.record(movement, guard_stock=guard_stock)
        inventory = product.to_inventory().model_copy(update={
            "current_stock": new_stock,
            "movements": (movement,),
            "last_updated": movement.created_at,
        })
        logger.info(
            f"Stock {movement.type.value} of {movement.quantity} for product {product.id}: "
            f"{product.current_stock} -> {new_stock}"
        )
        return inventory

    def _alert_if_low(self, tenant_id: str, inventory: ProductInventory) -> None:
        if inventory.has_low_stock():
            logger.warning(
                f"Product {inventory.product_id} is at {inventory.current_stock} units "
                f"(threshold {inventory.low_stock_threshold})"
            )
            self.publisher.publish(inventory_alert(tenant_id, inventory))

    def add_stock(self, product_id: str, tenant_id: str, quantity: int, reason: Optional[str] = None,
                  reference_id: Optional[str] = None) -> ProductInventory:
        """
        Raises:
            InvalidQuantity: quantity <= 0
            ResourceNotFound: no such product
        """
        product = self._require_product(product_id, tenant_id)
        movement = InventoryMovement(
            tenant_id=tenant_id,
            product_id=product_id,
            type=MovementType.IN,
            quantity=quantity,
            reason=reason,
            reference_id=reference_id,
        )
        inventory = self._record(product, movement, guard_stock=False)
        self.publisher.publish(stock_added(tenant_id, movement, inventory.current_stock, product.name))
        return inventory

    def remove_stock(self, product_id: str, tenant_id: str, quantity: int, reason: Optional[str] = None,
                     reference_id: Optional[str] = None) -> ProductInventory:
        """
        Raises:
            InvalidQuantity: quantity <= 0
            InsufficientStock: fewer than `quantity` units on hand
            ResourceNotFound: no such product
        """
        product = self._require_product(product_id, tenant_id)
        movement = InventoryMovement(
            tenant_id=tenant_id,
            product_id=product_id,
            type=MovementType.OUT,
            quantity=quantity,
            reason=reason,
            reference_id=reference_id,
        )
        if not product.to_inventory().has_sufficient_stock(quantity):
            logger.warning(f"Insufficient stock for product {product_id}: {product.current_stock} < {quantity}")
            raise InsufficientStock(product_id, quantity, product.current_stock)

        inventory = self._record(product, movement, guard_stock=True)
        self.publisher.publish(stock_removed(tenant_id, movement, inventory.current_stock, product.name))
        self._alert_if_low(tenant_id, inventory)
        return inventory

    def adjust_stock(self, product_id: str, tenant_id: str, new_stock: int,
                     reason: Optional[str] = None) -> ProductInventory:
        """
        Set stock to an absolute count (physical count correction)

        Raises:
            InvalidQuantity: new_stock is negative or equal to the current stock
        """
        if new_stock < 0:
            raise InvalidQuantity(f"Stock cannot be negative: {new_stock}")

        product = self._require_product(product_id, tenant_id)
        delta = new_stock - product.current_stock
        if delta == 0:
            raise InvalidQuantity(f"Product {product_id} already has {new_stock} units")

        movement = InventoryMovement(
            tenant_id=tenant_id,
            product_id=product_id,
            type=MovementType.ADJUSTMENT,
            quantity=delta,
            reason=reason or "Stock adjustment",
        )
        inventory = self._record(product, movement, guard_stock=True)

        event = stock_added if delta > 0 else stock_removed
        self.publisher.publish(event(tenant_id, movement, inventory.current_stock, product.name))
        self._alert_if_low(tenant_id, inventory)
        return inventory

    def list_movements(self, tenant_id: str, pagination: PaginationParams,
                       product_id: Optional[str] = None) -> PaginatedResponse[InventoryMovement]:
        return self.movement_repository.find_by_tenant(tenant_id, pagination, product_id)

    def low_stock_report(self, tenant_id: str) -> Dict[str, Any]:
        """Active products at or under their threshold, with alerts"""
        products = self.product_repository.find_low_stock(tenant_id)
        inventories = [product.to_inventory() for product in products]
        alerts = InventoryCalculationService.generate_stock_alerts(inventories)

        return {
            "total": len(alerts),
            "out_of_stock": sum(1 for alert in alerts if alert["level"] == "out"),
            "alerts": alerts,
        }

    def reorder_recommendations(self, tenant_id: str, lead_time_days: int = 7,
                                safety_stock_days: int = 3) -> List[Dict[str, Any]]:
        """
        Reorder quantities for low-stock products, using the last 30 days of
        shipments as the monthly usage
        """
        items = []
        since = utcnow() - timedelta(days=30)
        for product in self.product_repository.find_low_stock(tenant_id):
            movements = self.movement_repository.find_by_product(product.id, tenant_id, since)
            monthly_usage = InventoryCalculationService.calculate_turnover_rate(movements, 30) * 30
            reorder_point = max(
                InventoryCalculationService.calculate_reorder_point(monthly_usage, lead_time_days, safety_stock_days),
                product.min_stock,
            )
            items.append({
                "product_id": product.id,
                "current_stock": product.current_stock,
                "reorder_point": reorder_point,
            })
        return InventoryCalculationService.recommend_reorder_quantities(items)
