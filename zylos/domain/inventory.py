"""
Inventory Domain Model

InventoryMovement is one stock change (in, out or adjustment).
ProductInventory is the stock aggregate of a single product: a snapshot of
the current stock plus its movement history, answering read-only questions
about it.

Author: TM3
Date: 2025-10-17
"""
from datetime import datetime, timedelta
from typing import Any, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from zylos.domain.clock import ensure_utc, utcnow
from zylos.domain.enums import MovementType, StockLevel
from zylos.domain.errors import InvalidQuantity, InvalidState
from zylos.domain.value_objects import Money


class InventoryMovement(BaseModel):
    """
    One stock change for a product

    Fields:
        id: Movement ID (None until persisted)
        tenant_id: Owning tenant
        product_id: Product reference
        type: in / out / adjustment
        quantity: Units moved. Positive for in/out, signed for adjustments
        reason: Free text (optional)
        reference_id: Sale or purchase that caused the movement (optional)
        created_at: When the movement happened (UTC)
    """

    id: Optional[str] = None
    tenant_id: Optional[str] = None
    product_id: str
    type: MovementType
    quantity: int
    reason: Optional[str] = None
    reference_id: Optional[str] = None
    created_at: datetime = Field(default_factory=utcnow)

    model_config = ConfigDict(frozen=True, from_attributes=True)

    @field_validator("reason", mode="before")
    @classmethod
    def _blank_reason_is_none(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @field_validator("created_at")
    @classmethod
    def _aware_created_at(cls, value: datetime) -> datetime:
        return ensure_utc(value)

    @model_validator(mode="after")
    def _validate_quantity(self) -> "InventoryMovement":
        if self.type == MovementType.ADJUSTMENT:
            if self.quantity == 0:
                raise InvalidQuantity("Adjustment quantity cannot be zero")
        elif self.quantity <= 0:
            raise InvalidQuantity(
                f"Movement quantity must be positive for '{self.type.value}' movements: {self.quantity}"
            )
        return self

    def is_stock_inflow(self) -> bool:
        return self.type == MovementType.IN

    def is_stock_outflow(self) -> bool:
        return self.type == MovementType.OUT

    def is_adjustment(self) -> bool:
        return self.type == MovementType.ADJUSTMENT

    @property
    def net_stock_change(self) -> int:
        """Signed effect of this movement on stock"""
        if self.is_stock_outflow():
            return -self.quantity
        return self.quantity

    def to_dict(self) -> dict:
        data = self.model_dump(mode="json")
        data["net_stock_change"] = self.net_stock_change
        return data


class ProductInventory(BaseModel):
    """
    Stock aggregate for one product

    Immutable: apply() returns a new aggregate and leaves this one untouched.
    """

    product_id: str
    product_name: Optional[str] = None
    current_stock: int = 0
    low_stock_threshold: int = Field(10, ge=0)
    movements: Tuple[InventoryMovement, ...] = ()
    last_updated: datetime = Field(default_factory=utcnow)

    model_config = ConfigDict(frozen=True)

    @field_validator("last_updated")
    @classmethod
    def _aware_last_updated(cls, value: datetime) -> datetime:
        return ensure_utc(value)

    # Queries
    def is_in_stock(self) -> bool:
        return self.current_stock > 0

    def has_low_stock(self, threshold: Optional[int] = None) -> bool:
        if threshold is None:
            threshold = self.low_stock_threshold
        return self.current_stock <= threshold

    def has_sufficient_stock(self, required_quantity: int) -> bool:
        return self.current_stock >= required_quantity

    def stock_level(self) -> StockLevel:
        if not self.is_in_stock():
            return StockLevel.OUT
        if self.has_low_stock():
            return StockLevel.LOW
        return StockLevel.NORMAL

    def get_stock_value(self, unit_price: Money) -> Money:
        if self.current_stock <= 0:
            return Money.zero()
        return unit_price.multiply(self.current_stock)

    def get_recent_movements(self, days: int = 30) -> List[InventoryMovement]:
        """Movements created within the last `days` days (boundary included)"""
        cutoff = utcnow() - timedelta(days=days)
        return [m for m in self.movements if m.created_at >= cutoff]

    def get_total_incoming(self, quantity: int) -> int:
        """Stock after receiving `quantity` units. Does not change the aggregate."""
        return self.current_stock + quantity

    def get_total_outgoing(self, quantity: int) -> int:
        """Stock after shipping `quantity` units. Does not change the aggregate."""
        return self.current_stock - quantity

    def units_received(self) -> int:
        return sum(m.quantity for m in self.movements if m.is_stock_inflow())

    def units_shipped(self) -> int:
        return sum(m.quantity for m in self.movements if m.is_stock_outflow())

    def computed_stock(self) -> int:
        """Stock implied by the movement history alone"""
        return sum(m.net_stock_change for m in self.movements)

    # State changes
    def apply(self, movement: InventoryMovement) -> "ProductInventory":
        if movement.product_id != self.product_id:
            raise InvalidState(
                f"Movement for product {movement.product_id} cannot be applied to {self.product_id}"
            )
        return self.model_copy(update={
            "current_stock": self.current_stock + movement.net_stock_change,
            "movements": self.movements + (movement,),
            "last_updated": movement.created_at,
        })

    def to_dict(self) -> dict:
        return {
            "product_id": self.product_id,
            "product_name": self.product_name,
            "current_stock": self.current_stock,
            "low_stock_threshold": self.low_stock_threshold,
            "stock_level": self.stock_level().value,
            "is_in_stock": self.is_in_stock(),
            "has_low_stock": self.has_low_stock(),
            "units_received": self.units_received(),
            "units_shipped": self.units_shipped(),
            "last_updated": self.last_updated.isoformat(),
            "movements": [m.to_dict() for m in self.movements],
        }
