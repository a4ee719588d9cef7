"""
Product Domain Model

Represents a product in a tenant's catalog.
This is the single source of truth for product data structure.

Author: TM3
Date: 2025-10-17
"""
from datetime import datetime
from decimal import Decimal
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from zylos.domain.clock import utcnow
from zylos.domain.enums import ProductStatus
from zylos.domain.errors import ValidationFailed
from zylos.domain.inventory import ProductInventory
from zylos.domain.specifications import ProductHasValidSkuSpecification


def _validate_sku(value: Any) -> str:
    sku = value.strip().upper() if isinstance(value, str) else value
    if not ProductHasValidSkuSpecification().is_satisfied_by({"sku": sku}):
        raise ValidationFailed(
            [f"Invalid SKU '{value}': only letters, numbers, hyphens and underscores are allowed"]
        )
    return sku


class Product(BaseModel):
    """
    Product domain model - represents a product in a tenant catalog

    Fields:
        id: Product ID (UUID)
        tenant_id: Owning tenant
        sku: Stock Keeping Unit (unique per tenant)
        name: Product name
        description: Product description (optional)
        category: Product category (optional)

        # Pricing and inventory
        price: Selling price
        cost: Purchase/cost price (optional)
        current_stock: Current stock level
        min_stock: Low-stock alert threshold

        # Metadata
        status: active / inactive / discontinued
        created_at: When product was created
        updated_at: When product was last updated
    """

    # Primary identification
    id: str = Field(..., description="Product ID")
    tenant_id: str = Field(..., description="Owning tenant ID")
    sku: str = Field(..., description="Stock Keeping Unit")
    name: str = Field(..., description="Product name")

    # Details
    description: Optional[str] = Field(None, description="Product description")
    category: Optional[str] = Field(None, description="Product category")

    # Pricing
    price: Decimal = Field(Decimal("0"), description="Sale price", ge=0)
    cost: Optional[Decimal] = Field(None, description="Cost/purchase price", ge=0)

    # Inventory
    current_stock: int = Field(0, description="Current stock level")
    min_stock: int = Field(10, description="Low-stock threshold", ge=0)

    # Metadata
    status: ProductStatus = Field(ProductStatus.ACTIVE, description="Catalog status")
    created_at: Optional[datetime] = Field(None, description="Creation timestamp")
    updated_at: Optional[datetime] = Field(None, description="Last update timestamp")

    model_config = ConfigDict(from_attributes=True)

    # Computed properties
    @property
    def is_active(self) -> bool:
        return self.status == ProductStatus.ACTIVE

    @property
    def low_stock_threshold(self) -> int:
        return self.min_stock

    @property
    def is_low_stock(self) -> bool:
        """Check if product stock is at or below its threshold"""
        return self.current_stock <= self.min_stock

    @property
    def is_out_of_stock(self) -> bool:
        return self.current_stock <= 0

    def to_inventory(self) -> ProductInventory:
        """Snapshot without movement history"""
        return ProductInventory(
            product_id=self.id,
            product_name=self.name,
            current_stock=self.current_stock,
            low_stock_threshold=self.min_stock,
            last_updated=self.updated_at or self.created_at or utcnow(),
        )

    def to_dict(self) -> dict:
        """
        Convert to dictionary with computed fields

        Returns dict with all fields plus computed properties
        """
        data = self.model_dump(mode="json")

        data['is_low_stock'] = self.is_low_stock
        data['is_out_of_stock'] = self.is_out_of_stock

        # Decimal -> float for JSON compatibility
        data['price'] = float(self.price)
        if self.cost is not None:
            data['cost'] = float(self.cost)

        return data


class ProductCreate(BaseModel):
    """Schema for creating a new product"""
    sku: str
    name: str
    description: Optional[str] = None
    category: Optional[str] = None
    price: Decimal = Field(..., ge=0)
    cost: Optional[Decimal] = Field(None, ge=0)
    current_stock: int = Field(0, ge=0)
    min_stock: int = Field(10, ge=0)
    status: ProductStatus = ProductStatus.ACTIVE

    @field_validator("sku", mode="before")
    @classmethod
    def _check_sku(cls, value: Any) -> str:
        return _validate_sku(value)

    @field_validator("name", mode="before")
    @classmethod
    def _check_name(cls, value: Any) -> str:
        if not isinstance(value, str) or not value.strip():
            raise ValidationFailed(["Product name is required"])
        return value.strip()


class ProductUpdate(BaseModel):
    """Schema for updating an existing product. Stock changes go through inventory movements."""
    sku: Optional[str] = None
    name: Optional[str] = None
    description: Optional[str] = None
    category: Optional[str] = None
    price: Optional[Decimal] = Field(None, ge=0)
    cost: Optional[Decimal] = Field(None, ge=0)
    min_stock: Optional[int] = Field(None, ge=0)
    status: Optional[ProductStatus] = None

    @field_validator("sku", mode="before")
    @classmethod
    def _check_sku(cls, value: Any) -> Optional[str]:
        if value is None:
            return None
        return _validate_sku(value)
