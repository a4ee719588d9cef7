"""
Value Objects

Immutable, self-validating primitives used across the domain layer.
Invalid values never make it past the constructor: each object raises the
matching DomainError instead of a generic pydantic ValidationError.

Author: TM3
Date: 2025-10-17
"""
import re
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any, List, Optional, Union

from pydantic import BaseModel, ConfigDict, field_validator

from zylos.domain.errors import (
    InvalidAmount,
    InvalidDiscount,
    InvalidEmailFormat,
    InvalidQuantity,
    InvalidSubdomain,
    ValidationFailed,
)

CENTS = Decimal("0.01")

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
SUBDOMAIN_PATTERN = re.compile(r"^[a-z0-9-]+$")


def to_decimal(value: Any) -> Decimal:
    """Convert int/float/str/Decimal to Decimal without float artifacts"""
    if isinstance(value, Decimal):
        return value
    if isinstance(value, bool):
        raise InvalidOperation(f"Boolean is not a number: {value}")
    return Decimal(str(value))


class Money(BaseModel):
    """
    Monetary amount, always non-negative and rounded to cents.

    Usage:
        price = Money(1500)
        total = price.multiply(3)       # Money(4500.00)
        total.format()                  # "$4,500.00"
    """

    amount: Decimal

    model_config = ConfigDict(frozen=True)

    def __init__(self, amount: Any = 0, **data):
        super().__init__(amount=amount, **data)

    @field_validator("amount", mode="before")
    @classmethod
    def _validate_amount(cls, value: Any) -> Decimal:
        try:
            amount = to_decimal(value)
        except (InvalidOperation, ValueError, TypeError):
            raise InvalidAmount(f"Amount must be a valid number: {value!r}")

        if not amount.is_finite():
            raise InvalidAmount(f"Amount must be a finite number: {value!r}")
        if amount < 0:
            raise InvalidAmount(f"Amount cannot be negative: {amount}")

        return amount.quantize(CENTS, rounding=ROUND_HALF_UP)

    # Factory methods
    @classmethod
    def zero(cls) -> "Money":
        return cls(0)

    @classmethod
    def from_cents(cls, cents: int) -> "Money":
        return cls(Decimal(cents) / 100)

    @classmethod
    def from_string(cls, value: str, symbol: str = "$") -> "Money":
        """Parse a display string such as "$1,500.50". Raises InvalidAmount."""
        if not isinstance(value, str):
            raise InvalidAmount(f"Amount must be a string: {value!r}")
        cleaned = value.strip().replace(symbol, "", 1).replace(",", "").replace(" ", "")
        if not cleaned:
            raise InvalidAmount(f"Amount must be a valid number: {value!r}")
        return cls(cleaned)

    @classmethod
    def sum(cls, moneys: List["Money"]) -> "Money":
        total = cls.zero()
        for money in moneys:
            total = total.add(money)
        return total

    @classmethod
    def average(cls, moneys: List["Money"]) -> "Money":
        """Mean amount, zero for an empty list"""
        if not moneys:
            return cls.zero()
        return cls.sum(moneys).divide(len(moneys))

    @classmethod
    def max(cls, moneys: List["Money"]) -> "Money":
        if not moneys:
            raise InvalidAmount("Cannot take the maximum of no amounts")
        return max(moneys, key=lambda money: money.amount)

    @classmethod
    def min(cls, moneys: List["Money"]) -> "Money":
        if not moneys:
            raise InvalidAmount("Cannot take the minimum of no amounts")
        return min(moneys, key=lambda money: money.amount)

    # Arithmetic (always returns a new instance)
    def add(self, other: "Money") -> "Money":
        return Money(self.amount + other.amount)

    def subtract(self, other: "Money") -> "Money":
        result = self.amount - other.amount
        if result < 0:
            raise InvalidAmount(f"Cannot subtract {other.amount} from {self.amount}")
        return Money(result)

    def multiply(self, factor: Union[int, float, Decimal]) -> "Money":
        # Result goes back through the constructor: negative factors are rejected.
        return Money(self.amount * to_decimal(factor))

    def divide(self, divisor: Union[int, float, Decimal]) -> "Money":
        divisor = to_decimal(divisor)
        if divisor <= 0:
            raise InvalidAmount(f"Divisor must be positive: {divisor}")
        return Money(self.amount / divisor)

    def percentage(self, percent: Union[int, float, Decimal]) -> "Money":
        percent = to_decimal(percent)
        if percent < 0 or percent > 100:
            raise InvalidDiscount(f"Percentage must be between 0 and 100: {percent}")
        return Money(self.amount * percent / 100)

    def discount(self, percent: Union[int, float, Decimal]) -> "Money":
        return self.subtract(self.percentage(percent))

    def __add__(self, other: "Money") -> "Money":
        return self.add(other)

    # Comparisons
    def __lt__(self, other: "Money") -> bool:
        return self.amount < other.amount

    def __le__(self, other: "Money") -> bool:
        return self.amount <= other.amount

    def __gt__(self, other: "Money") -> bool:
        return self.amount > other.amount

    def __ge__(self, other: "Money") -> bool:
        return self.amount >= other.amount

    def is_zero(self) -> bool:
        return self.amount == 0

    def is_positive(self) -> bool:
        return self.amount > 0

    # Formatting
    def to_cents(self) -> int:
        return int(self.amount * 100)

    def format(self, symbol: str = "$") -> str:
        return f"{symbol}{self.amount:,.2f}"

    def __str__(self) -> str:
        return f"{self.amount:.2f}"

    def to_dict(self) -> dict:
        return {
            "amount": float(self.amount),
            "formatted": self.format()
        }


class Email(BaseModel):
    """Email address, trimmed and normalized to lowercase"""

    value: str

    model_config = ConfigDict(frozen=True)

    def __init__(self, value: str, **data):
        super().__init__(value=value, **data)

    @field_validator("value", mode="before")
    @classmethod
    def _validate_email(cls, value: Any) -> str:
        if not isinstance(value, str) or not value.strip():
            raise InvalidEmailFormat(str(value), "Email address cannot be empty")

        email = value.strip().lower()

        if len(email) > 254:
            raise InvalidEmailFormat(email, "Email address is too long (max 254 characters)")
        if not EMAIL_PATTERN.match(email):
            raise InvalidEmailFormat(email)

        local_part, _, domain = email.rpartition("@")
        if len(local_part) > 64:
            raise InvalidEmailFormat(email, "Email local part is too long (max 64 characters)")
        if ".." in email or email.startswith(".") or domain.startswith(".") or local_part.endswith("."):
            raise InvalidEmailFormat(email)

        return email

    @classmethod
    def is_valid(cls, value: str) -> bool:
        try:
            cls(value)
        except InvalidEmailFormat:
            return False
        return True

    @property
    def local_part(self) -> str:
        return self.value.rpartition("@")[0]

    @property
    def domain(self) -> str:
        return self.value.rpartition("@")[2]

    def obfuscate(self) -> str:
        """Mask the local part for logs: jdoe@x.com -> j**e@x.com"""
        local = self.local_part
        if len(local) <= 2:
            return f"{local[0]}*@{self.domain}"
        stars = "*" * min(len(local) - 2, 3)
        return f"{local[0]}{stars}{local[-1]}@{self.domain}"

    def __str__(self) -> str:
        return self.value


def normalize_optional_email(value: Any) -> Optional[str]:
    """Blank -> None, otherwise the normalized address (raises InvalidEmailFormat)"""
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    return Email(value).value


def normalize_required_name(value: Any, resource: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValidationFailed([f"{resource} name is required"])
    return value.strip()


class Subdomain(BaseModel):
    """Tenant subdomain: lowercase letters, digits and hyphens"""

    value: str

    model_config = ConfigDict(frozen=True)

    def __init__(self, value: str, **data):
        super().__init__(value=value, **data)

    @field_validator("value", mode="before")
    @classmethod
    def _validate_subdomain(cls, value: Any) -> str:
        if not isinstance(value, str) or not value.strip():
            raise InvalidSubdomain("Subdomain cannot be empty")

        subdomain = value.strip()
        if len(subdomain) > 63:
            raise InvalidSubdomain(f"Subdomain is too long (max 63 characters): {subdomain}")
        if not SUBDOMAIN_PATTERN.match(subdomain):
            raise InvalidSubdomain(
                f"Invalid subdomain '{subdomain}': only lowercase letters, numbers and hyphens are allowed"
            )
        return subdomain

    @classmethod
    def is_valid(cls, value: str) -> bool:
        try:
            cls(value)
        except InvalidSubdomain:
            return False
        return True

    @classmethod
    def from_business_name(cls, business_name: str) -> "Subdomain":
        """Suggest a subdomain from a store name: 'Café Luna' -> 'caf-luna'"""
        slug = re.sub(r"[^a-z0-9\s-]", "", business_name.lower())
        slug = re.sub(r"\s+", "-", slug.strip())
        slug = re.sub(r"-+", "-", slug).strip("-")
        return cls(slug)

    def to_full_domain(self, root_domain: str) -> str:
        return f"{self.value}.{root_domain}"

    def __str__(self) -> str:
        return self.value


class SaleLineItem(BaseModel):
    """
    One line of a sale

    Fields:
        product_id: Product reference
        product_name: Name at sale time (optional)
        quantity: Units sold, must be > 0
        unit_price: Price per unit (number or Money)
    """

    product_id: str
    product_name: Optional[str] = None
    quantity: int
    unit_price: Money

    model_config = ConfigDict(frozen=True)

    @field_validator("quantity")
    @classmethod
    def _validate_quantity(cls, value: int) -> int:
        if value <= 0:
            raise InvalidQuantity(f"Item quantity must be positive: {value}")
        return value

    @field_validator("unit_price", mode="before")
    @classmethod
    def _coerce_unit_price(cls, value: Any) -> Any:
        if isinstance(value, (Money, dict)):
            return value
        return Money(value)

    @property
    def total_price(self) -> Money:
        return self.unit_price.multiply(self.quantity)

    def to_dict(self) -> dict:
        return {
            "product_id": self.product_id,
            "product_name": self.product_name,
            "quantity": self.quantity,
            "unit_price": float(self.unit_price.amount),
            "total_price": float(self.total_price.amount)
        }
