"""
Product Service - product catalog use cases

Stock is not edited here: stock changes go through InventoryService so that
each one leaves an inventory movement.

Author: TM3
Date: 2025-10-17
"""
import logging
from typing import Any, Dict, List, Optional

from zylos.domain.errors import ResourceNotFound, ValidationFailed
from zylos.domain.pagination import PaginatedResponse, PaginationParams
from zylos.domain.product import Product, ProductCreate, ProductUpdate
from zylos.repositories.base import ProductRepository
from zylos.services.pricing_service import PricingService

logger = logging.getLogger(__name__)


class ProductService:
    """Product catalog per tenant"""

    def __init__(self, product_repository: ProductRepository, default_min_stock: int = 10):
        self.product_repository = product_repository
        self.default_min_stock = default_min_stock

    def get_product(self, product_id: str, tenant_id: str) -> Product:
        product = self.product_repository.find_by_id(product_id, tenant_id)
        if not product:
            raise ResourceNotFound("Product", product_id)
        return product

    def get_product_by_sku(self, sku: str, tenant_id: str) -> Product:
        product = self.product_repository.find_by_sku(sku.strip().upper(), tenant_id)
        if not product:
            raise ResourceNotFound("Product", sku)
        return product

    def list_products(self, tenant_id: str, pagination: PaginationParams, search: Optional[str] = None,
                      low_stock_only: bool = False) -> PaginatedResponse[Product]:
        return self.product_repository.find_all(tenant_id, pagination, search, low_stock_only)

    def create_product(self, tenant_id: str, data: ProductCreate) -> Product:
        """
        Raises:
            ValidationFailed: SKU already used in the tenant
        """
        if self.product_repository.find_by_sku(data.sku, tenant_id):
            raise ValidationFailed([f"SKU already exists in this tenant: {data.sku}"])

        if "min_stock" not in data.model_fields_set:
            data = data.model_copy(update={"min_stock": self.default_min_stock})

        product = self.product_repository.create(tenant_id, data)
        logger.info(f"Product created: {product.sku} ({product.id}, tenant {tenant_id})")
        return product

    def update_product(self, product_id: str, tenant_id: str, data: ProductUpdate) -> Product:
        current = self.get_product(product_id, tenant_id)

        if data.sku and data.sku != current.sku:
            existing = self.product_repository.find_by_sku(data.sku, tenant_id)
            if existing and existing.id != product_id:
                raise ValidationFailed([f"SKU already exists in this tenant: {data.sku}"])

        updated = self.product_repository.update(product_id, tenant_id, data)
        if not updated:
            raise ResourceNotFound("Product", product_id)
        return updated

    def get_pricing(self, product_id: str, tenant_id: str, tax_rate: Any = 0.16) -> Dict[str, Any]:
        """Price with tax plus margin and markup when the cost is known"""
        product = self.get_product(product_id, tenant_id)
        pricing = {
            "product_id": product.id,
            "price": float(product.price),
            "price_with_tax": float(PricingService.calculate_price_with_tax(product.price, tax_rate).amount),
            "margin": None,
            "markup": None,
        }
        if product.cost is not None:
            pricing["margin"] = float(PricingService.calculate_margin(product.cost, product.price))
            pricing["markup"] = float(PricingService.calculate_markup(product.cost, product.price))
        return pricing

    def low_stock_products(self, tenant_id: str) -> List[Product]:
        return self.product_repository.find_low_stock(tenant_id)
