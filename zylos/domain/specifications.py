"""
Specifications

Named, reusable predicates over domain objects. A candidate can be any
object (or dict) exposing the attributes a specification reads, so the same
rule works on a Product model, a ProductInventory aggregate or a plain API
payload.

Specifications compose:
    sellable = ProductIsActiveSpecification() & ProductIsInStockSpecification()
    sellable.is_satisfied_by(product)

Author: TM3
Date: 2025-10-17
"""
import re
from abc import ABC, abstractmethod
from decimal import Decimal
from typing import Any, Optional

from zylos.domain.clock import ensure_utc, utcnow
from zylos.domain.enums import ProductStatus
from zylos.domain.value_objects import EMAIL_PATTERN, Money, to_decimal

SKU_PATTERN = re.compile(r"^[A-Z0-9_-]+$")


def _read(candidate: Any, name: str, default: Any = None) -> Any:
    """Read an attribute from an object or a key from a dict"""
    if isinstance(candidate, dict):
        return candidate.get(name, default)
    return getattr(candidate, name, default)


def _amount(value: Any) -> Decimal:
    """Money or plain number -> Decimal"""
    if isinstance(value, Money):
        return value.amount
    return to_decimal(value)


class Specification(ABC):
    """Base specification with boolean composition"""

    @abstractmethod
    def is_satisfied_by(self, candidate: Any) -> bool:
        pass

    def and_(self, other: "Specification") -> "Specification":
        return AndSpecification(self, other)

    def or_(self, other: "Specification") -> "Specification":
        return OrSpecification(self, other)

    def not_(self) -> "Specification":
        return NotSpecification(self)

    def __and__(self, other: "Specification") -> "Specification":
        return self.and_(other)

    def __or__(self, other: "Specification") -> "Specification":
        return self.or_(other)

    def __invert__(self) -> "Specification":
        return self.not_()


class AndSpecification(Specification):
    def __init__(self, left: Specification, right: Specification):
        self.left = left
        self.right = right

    def is_satisfied_by(self, candidate: Any) -> bool:
        return self.left.is_satisfied_by(candidate) and self.right.is_satisfied_by(candidate)


class OrSpecification(Specification):
    def __init__(self, left: Specification, right: Specification):
        self.left = left
        self.right = right

    def is_satisfied_by(self, candidate: Any) -> bool:
        return self.left.is_satisfied_by(candidate) or self.right.is_satisfied_by(candidate)


class NotSpecification(Specification):
    def __init__(self, spec: Specification):
        self.spec = spec

    def is_satisfied_by(self, candidate: Any) -> bool:
        return not self.spec.is_satisfied_by(candidate)


# ============================================================================
# Product specifications
# ============================================================================

class ProductIsActiveSpecification(Specification):
    """Candidate: {status}"""

    def is_satisfied_by(self, candidate: Any) -> bool:
        return _read(candidate, "status") == ProductStatus.ACTIVE


class ProductHasSufficientStockSpecification(Specification):
    """Candidate: {current_stock, required_quantity}"""

    def is_satisfied_by(self, candidate: Any) -> bool:
        return _read(candidate, "current_stock", 0) >= _read(candidate, "required_quantity", 0)


class ProductIsInStockSpecification(Specification):
    """Candidate: {current_stock}"""

    def is_satisfied_by(self, candidate: Any) -> bool:
        return _read(candidate, "current_stock", 0) > 0


class ProductIsLowStockSpecification(Specification):
    """Candidate: {current_stock, low_stock_threshold}"""

    def is_satisfied_by(self, candidate: Any) -> bool:
        return _read(candidate, "current_stock", 0) <= _read(candidate, "low_stock_threshold", 0)


class ProductPriceWithinRangeSpecification(Specification):
    """Candidate: {unit_price}. Both bounds inclusive."""

    def __init__(self, minimum_price: Money, maximum_price: Money):
        self.minimum_price = minimum_price
        self.maximum_price = maximum_price

    def is_satisfied_by(self, candidate: Any) -> bool:
        price = _read(candidate, "unit_price")
        if price is None:
            return False
        return self.minimum_price.amount <= _amount(price) <= self.maximum_price.amount


class ProductHasValidSkuSpecification(Specification):
    """Candidate: {sku}"""

    def is_satisfied_by(self, candidate: Any) -> bool:
        sku = _read(candidate, "sku")
        return bool(sku and sku.strip() and SKU_PATTERN.match(sku))


# ============================================================================
# Customer specifications
# ============================================================================

class CustomerHasSufficientBalanceSpecification(Specification):
    """Candidate: {balance}"""

    def __init__(self, minimum_balance: Optional[Money] = None):
        self.minimum_balance = minimum_balance or Money.zero()

    def is_satisfied_by(self, candidate: Any) -> bool:
        return _amount(_read(candidate, "balance", 0)) >= self.minimum_balance.amount


class CustomerWithinCreditLimitSpecification(Specification):
    """Candidate: {balance, credit_limit}"""

    def is_satisfied_by(self, candidate: Any) -> bool:
        credit_limit = _read(candidate, "credit_limit")
        if credit_limit is None:
            return True
        return _amount(_read(candidate, "balance", 0)) <= _amount(credit_limit)


class CustomerIsInGoodStandingSpecification(Specification):
    """
    Candidate: {has_outstanding_balance, last_payment_date}

    No outstanding balance is always good standing. An outstanding balance
    with no recorded payment is not.
    """

    def __init__(self, max_days_outstanding: int = 30):
        self.max_days_outstanding = max_days_outstanding

    def is_satisfied_by(self, candidate: Any) -> bool:
        if not _read(candidate, "has_outstanding_balance", False):
            return True

        last_payment_date = _read(candidate, "last_payment_date")
        if last_payment_date is None:
            return False

        days_since_last_payment = (utcnow() - ensure_utc(last_payment_date)).days
        return days_since_last_payment <= self.max_days_outstanding


class CustomerHasValidEmailSpecification(Specification):
    """Candidate: {email}"""

    def is_satisfied_by(self, candidate: Any) -> bool:
        email = _read(candidate, "email")
        if email is None:
            return False
        email = str(email).strip()
        return bool(email) and EMAIL_PATTERN.match(email) is not None


class CustomerHasValidContactInfoSpecification(Specification):
    """Candidate: {email, phone}. Either one is enough."""

    def is_satisfied_by(self, candidate: Any) -> bool:
        email = _read(candidate, "email")
        phone = _read(candidate, "phone")
        has_email = bool(email and str(email).strip())
        has_phone = bool(phone and str(phone).strip())
        return has_email or has_phone
