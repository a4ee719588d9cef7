"""
Customer Domain Model

Customer is the catalog record; CustomerAccount is the aggregate of a
customer plus its ledger history, used to answer balance and standing
questions.

Author: TM3
Date: 2025-10-17
"""
from datetime import datetime
from decimal import Decimal
from typing import Any, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator

from zylos.domain.errors import InvalidState
from zylos.domain.ledger import LedgerEntry, calculate_balance
from zylos.domain.specifications import (
    CustomerIsInGoodStandingSpecification,
    CustomerWithinCreditLimitSpecification,
)
from zylos.domain.value_objects import Money, normalize_optional_email, normalize_required_name


class Customer(BaseModel):
    """
    Customer domain model - matches the customers table

    Fields:
        id: Customer ID (UUID)
        tenant_id: Owning tenant
        name: Customer name
        email: Contact email (optional, normalized)
        phone: Contact phone (optional)
        address: Postal address (optional)
        credit_limit: Maximum balance on account (None = no limit)
    """

    id: str = Field(..., description="Customer ID")
    tenant_id: str = Field(..., description="Owning tenant ID")
    name: str = Field(..., description="Customer name")
    email: Optional[str] = Field(None, description="Contact email")
    phone: Optional[str] = Field(None, description="Contact phone")
    address: Optional[str] = Field(None, description="Postal address")
    credit_limit: Optional[Decimal] = Field(None, description="Credit limit", ge=0)
    created_at: Optional[datetime] = Field(None, description="Creation timestamp")
    updated_at: Optional[datetime] = Field(None, description="Last update timestamp")

    model_config = ConfigDict(from_attributes=True)

    def to_dict(self) -> dict:
        data = self.model_dump(mode="json")
        if self.credit_limit is not None:
            data["credit_limit"] = float(self.credit_limit)
        return data


class CustomerCreate(BaseModel):
    """Schema for creating a customer"""
    name: str
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    credit_limit: Optional[Decimal] = Field(None, ge=0)

    @field_validator("name", mode="before")
    @classmethod
    def _validate_name(cls, value: Any) -> str:
        return normalize_required_name(value, "Customer")

    @field_validator("email", mode="before")
    @classmethod
    def _normalize_email(cls, value: Any) -> Optional[str]:
        return normalize_optional_email(value)


class CustomerUpdate(BaseModel):
    """Schema for updating a customer (only the fields sent are changed)"""
    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    credit_limit: Optional[Decimal] = Field(None, ge=0)

    @field_validator("name", mode="before")
    @classmethod
    def _validate_name(cls, value: Any) -> Optional[str]:
        if value is None:
            return None
        return normalize_required_name(value, "Customer")

    @field_validator("email", mode="before")
    @classmethod
    def _normalize_email(cls, value: Any) -> Optional[str]:
        return normalize_optional_email(value)


class CustomerAccount(BaseModel):
    """Customer plus ledger history"""

    customer: Customer
    entries: Tuple[LedgerEntry, ...] = ()

    model_config = ConfigDict(frozen=True)

    @property
    def balance(self) -> Decimal:
        return calculate_balance(self.entries)

    @property
    def last_payment_date(self) -> Optional[datetime]:
        payments = [entry.created_at for entry in self.entries if entry.is_debit()]
        return max(payments) if payments else None

    @property
    def has_outstanding_balance(self) -> bool:
        return self.balance > 0

    @property
    def credit_limit(self) -> Optional[Decimal]:
        return self.customer.credit_limit

    def total_debt(self) -> Money:
        return Money(self.balance) if self.balance > 0 else Money.zero()

    def can_add_credit(self, amount: Money) -> bool:
        if not amount.is_positive():
            return False
        projected = {"balance": self.balance + amount.amount, "credit_limit": self.credit_limit}
        return CustomerWithinCreditLimitSpecification().is_satisfied_by(projected)

    def can_make_payment(self, amount: Money) -> bool:
        return amount.is_positive() and self.balance >= amount.amount

    def is_in_good_standing(self, max_days_outstanding: int = 30) -> bool:
        return CustomerIsInGoodStandingSpecification(max_days_outstanding).is_satisfied_by(self)

    def add_entry(self, entry: LedgerEntry) -> "CustomerAccount":
        if entry.entity_id != self.customer.id or not entry.is_customer_entry():
            raise InvalidState(f"Ledger entry does not belong to customer {self.customer.id}")
        return self.model_copy(update={"entries": self.entries + (entry,)})

    def financial_summary(self) -> dict:
        credits = [entry.amount for entry in self.entries if entry.is_credit()]
        debits = [entry.amount for entry in self.entries if entry.is_debit()]
        total_credit = Money.sum(credits)
        average_order_value = total_credit.divide(len(credits)) if credits else Money.zero()
        last_activity = max((entry.created_at for entry in self.entries), default=None)

        return {
            "total_credit": float(total_credit.amount),
            "total_debit": float(Money.sum(debits).amount),
            "current_balance": float(self.balance),
            "total_orders": len(credits),
            "average_order_value": float(average_order_value.amount),
            "last_activity": last_activity.isoformat() if last_activity else None,
        }
