"""
Sale Domain Model

Sale aggregate: line items, money totals, and the two status fields.

    status:          pending -> completed
                     pending | completed -> cancelled  (unless paid)
    payment_status:  pending -> partial -> paid

Every transition returns a new Sale.

Author: TM3
Date: 2025-10-17
"""
from datetime import datetime
from typing import Any, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator

from zylos.domain.clock import ensure_utc, utcnow
from zylos.domain.enums import PaymentStatus, SaleStatus
from zylos.domain.errors import InvalidAmount, InvalidState
from zylos.domain.value_objects import Money, SaleLineItem


def _to_money(value: Any) -> Any:
    if isinstance(value, (Money, dict)):
        return value
    return Money(value)


class Sale(BaseModel):
    """
    Sale aggregate

    Fields:
        id: Sale ID (None until persisted)
        tenant_id: Owning tenant
        customer_id: Customer the sale is charged to
        items: Line items (at least one)
        subtotal / tax / discount / total: Money amounts
        amount_paid: Sum of recorded payments
        status: pending / completed / cancelled
        payment_status: pending / partial / paid
    """

    id: Optional[str] = None
    tenant_id: str
    customer_id: Optional[str] = None
    items: Tuple[SaleLineItem, ...]
    subtotal: Money
    tax: Money = Field(default_factory=Money.zero)
    discount: Money = Field(default_factory=Money.zero)
    total: Money
    amount_paid: Money = Field(default_factory=Money.zero)
    status: SaleStatus = SaleStatus.PENDING
    payment_status: PaymentStatus = PaymentStatus.PENDING
    notes: Optional[str] = None
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    model_config = ConfigDict(frozen=True, from_attributes=True)

    @field_validator("subtotal", "tax", "discount", "total", "amount_paid", mode="before")
    @classmethod
    def _coerce_money(cls, value: Any) -> Any:
        return _to_money(value)

    @field_validator("created_at", "updated_at")
    @classmethod
    def _aware(cls, value: datetime) -> datetime:
        return ensure_utc(value)

    # Status queries
    def is_pending(self) -> bool:
        return self.status == SaleStatus.PENDING

    def is_completed(self) -> bool:
        return self.status == SaleStatus.COMPLETED

    def is_cancelled(self) -> bool:
        return self.status == SaleStatus.CANCELLED

    def is_paid(self) -> bool:
        return self.payment_status == PaymentStatus.PAID

    def can_be_cancelled(self) -> bool:
        return not self.is_cancelled() and not self.is_paid()

    def requires_payment(self) -> bool:
        return not self.is_paid() and not self.is_cancelled() and self.total.is_positive()

    @property
    def balance_due(self) -> Money:
        if self.amount_paid >= self.total:
            return Money.zero()
        return self.total.subtract(self.amount_paid)

    def total_items(self) -> int:
        return sum(item.quantity for item in self.items)

    def items_summary(self) -> str:
        names = [item.product_name or "Unknown Product" for item in self.items]
        if len(names) == 1:
            return names[0]
        if len(names) <= 3:
            return ", ".join(names)
        return f"{names[0]} +{len(names) - 1} more"

    # Transitions
    def mark_completed(self) -> "Sale":
        if not self.is_pending():
            raise InvalidState(f"Only pending sales can be completed (sale is {self.status.value})")
        return self.model_copy(update={"status": SaleStatus.COMPLETED, "updated_at": utcnow()})

    def mark_cancelled(self) -> "Sale":
        if not self.can_be_cancelled():
            reason = "already cancelled" if self.is_cancelled() else "already paid"
            raise InvalidState(f"Sale cannot be cancelled: {reason}")
        return self.model_copy(update={"status": SaleStatus.CANCELLED, "updated_at": utcnow()})

    def record_payment(self, amount: Money) -> "Sale":
        if not amount.is_positive():
            raise InvalidAmount("Payment amount must be greater than 0")
        if not self.requires_payment():
            raise InvalidState("Sale does not accept payments")

        paid = self.amount_paid.add(amount)
        payment_status = PaymentStatus.PAID if paid >= self.total else PaymentStatus.PARTIAL
        return self.model_copy(update={
            "amount_paid": paid,
            "payment_status": payment_status,
            "updated_at": utcnow(),
        })

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "tenant_id": self.tenant_id,
            "customer_id": self.customer_id,
            "items": [item.to_dict() for item in self.items],
            "subtotal": float(self.subtotal.amount),
            "tax": float(self.tax.amount),
            "discount": float(self.discount.amount),
            "total": float(self.total.amount),
            "amount_paid": float(self.amount_paid.amount),
            "balance_due": float(self.balance_due.amount),
            "status": self.status.value,
            "payment_status": self.payment_status.value,
            "notes": self.notes,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
        }


class SaleItemInput(BaseModel):
    """One line of a sale request"""
    product_id: str
    product_name: Optional[str] = None
    quantity: int
    unit_price: float


class SaleCreate(BaseModel):
    """Schema for creating a sale. Items are validated by SalesService.validate_sale."""
    customer_id: Optional[str] = None
    items: List[SaleItemInput] = Field(default_factory=list)
    tax_rate: Optional[float] = Field(None, ge=0, le=1)
    discount_percentage: float = Field(0, ge=0, le=100)
    notes: Optional[str] = None


class PaymentCreate(BaseModel):
    """Schema for a payment against a sale or a supplier"""
    amount: float
    method: Optional[str] = None
    description: Optional[str] = None
