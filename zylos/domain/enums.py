"""
Domain enumerations shared across the Zylos domain layer.
"""
from enum import Enum


class UserRole(str, Enum):
    SUPER_ADMIN = "super_admin"
    ADMIN = "admin"
    VENDEDOR = "vendedor"
    CONTADOR = "contador"


class EntityType(str, Enum):
    """Ledger counterparty kind"""
    CUSTOMER = "customer"
    SUPPLIER = "supplier"


class MovementType(str, Enum):
    IN = "in"
    OUT = "out"
    ADJUSTMENT = "adjustment"


class LedgerType(str, Enum):
    CREDIT = "credit"
    DEBIT = "debit"


class SaleStatus(str, Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class PaymentStatus(str, Enum):
    PENDING = "pending"
    PARTIAL = "partial"
    PAID = "paid"


class ProductStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    DISCONTINUED = "discontinued"


class StockLevel(str, Enum):
    NORMAL = "normal"
    LOW = "low"
    OUT = "out"
