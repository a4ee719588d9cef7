"""
Ledger Domain Model

Accounting entries kept per customer and per supplier.

Balance sign convention, seen from the store:
- Customer: credit (a sale on account) raises what the customer owes us,
  debit (a payment) lowers it.
- Supplier: debit (a purchase) raises what we owe the supplier, credit
  (a payment) lowers it.

Author: TM3
Date: 2025-10-17
"""
from datetime import datetime
from decimal import Decimal
from typing import Any, Iterable, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from zylos.domain.clock import ensure_utc, utcnow
from zylos.domain.enums import EntityType, LedgerType
from zylos.domain.value_objects import Money


class LedgerEntry(BaseModel):
    """
    One ledger entry

    Fields:
        id: Entry ID (None until persisted)
        tenant_id: Owning tenant
        entity_type: customer / supplier
        entity_id: Customer or supplier ID
        type: debit / credit
        amount: Non-negative Money
        description: Free text (optional)
        reference_id: Sale or payment that produced the entry (optional)
        created_at: UTC timestamp
    """

    id: Optional[str] = None
    tenant_id: str
    entity_type: EntityType
    entity_id: str
    type: LedgerType
    amount: Money
    description: Optional[str] = None
    reference_id: Optional[str] = None
    created_at: datetime = Field(default_factory=utcnow)

    model_config = ConfigDict(frozen=True, from_attributes=True)

    @field_validator("amount", mode="before")
    @classmethod
    def _coerce_amount(cls, value: Any) -> Any:
        if isinstance(value, (Money, dict)):
            return value
        return Money(value)

    @field_validator("description", mode="before")
    @classmethod
    def _strip_description(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip() or None
        return value

    @field_validator("created_at")
    @classmethod
    def _aware_created_at(cls, value: datetime) -> datetime:
        return ensure_utc(value)

    def is_credit(self) -> bool:
        return self.type == LedgerType.CREDIT

    def is_debit(self) -> bool:
        return self.type == LedgerType.DEBIT

    def is_customer_entry(self) -> bool:
        return self.entity_type == EntityType.CUSTOMER

    def is_supplier_entry(self) -> bool:
        return self.entity_type == EntityType.SUPPLIER

    @property
    def balance_impact(self) -> Decimal:
        """Signed effect of this entry on the entity balance"""
        if self.is_customer_entry():
            increases = self.is_credit()
        else:
            increases = self.is_debit()
        return self.amount.amount if increases else -self.amount.amount

    def format_amount(self) -> str:
        return self.amount.format()

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "tenant_id": self.tenant_id,
            "entity_type": self.entity_type.value,
            "entity_id": self.entity_id,
            "type": self.type.value,
            "amount": float(self.amount.amount),
            "description": self.description,
            "reference_id": self.reference_id,
            "created_at": self.created_at.isoformat(),
        }


def calculate_balance(entries: Iterable[LedgerEntry]) -> Decimal:
    """Sum of the signed impacts of the given entries"""
    return sum((entry.balance_impact for entry in entries), Decimal("0.00"))
