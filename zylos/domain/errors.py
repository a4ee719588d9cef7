"""
Domain Errors

Every business-rule violation raised by the domain and service layers is a
DomainError. Each error carries a stable code and the HTTP status the API
layer should answer with, so routers never have to guess.

Author: TM3
Date: 2025-10-17
"""
from typing import Any, Dict, List, Optional


class DomainError(Exception):
    """Base class for domain and application errors"""

    code: str = "DOMAIN_ERROR"
    status_code: int = 400

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> dict:
        """Serialize error for API responses"""
        data = {
            "detail": self.message,
            "code": self.code,
        }
        if self.details:
            data["details"] = self.details
        return data


# ============================================================================
# Validation errors (400)
# ============================================================================

class InvalidAmount(DomainError):
    code = "INVALID_AMOUNT"


class InvalidEmailFormat(DomainError):
    code = "INVALID_EMAIL_FORMAT"

    def __init__(self, email: str, reason: str = "Invalid email address format"):
        super().__init__(f"{reason}: {email}", {"field": "email", "value": email})


class InvalidQuantity(DomainError):
    code = "INVALID_QUANTITY"


class InvalidDiscount(DomainError):
    code = "INVALID_DISCOUNT"


class InvalidCommissionRate(DomainError):
    code = "INVALID_COMMISSION_RATE"


class InvalidSubdomain(DomainError):
    code = "INVALID_SUBDOMAIN"


class InvalidTenantName(DomainError):
    code = "INVALID_TENANT_NAME"


class ValidationFailed(DomainError):
    """Several validation problems reported together"""

    code = "VALIDATION_ERROR"

    def __init__(self, errors: List[str], message: str = "Validation failed"):
        super().__init__(message, {"errors": list(errors)})
        self.errors = list(errors)


# ============================================================================
# Conflicts (409)
# ============================================================================

class DuplicateEmail(DomainError):
    code = "DUPLICATE_EMAIL"
    status_code = 409

    def __init__(self, resource: str, email: str, existing_id: Optional[str] = None):
        details = {"field": "email", "resource": resource}
        if existing_id:
            details["existing_id"] = existing_id
        super().__init__(f"{resource.capitalize()} email already exists in this tenant: {email}", details)


class SubdomainTaken(DomainError):
    code = "SUBDOMAIN_TAKEN"
    status_code = 409

    def __init__(self, subdomain: str):
        super().__init__(f"This subdomain is already taken: {subdomain}", {"subdomain": subdomain})


# ============================================================================
# Business rules (422)
# ============================================================================

class CannotDeleteWithBalance(DomainError):
    code = "CANNOT_DELETE_WITH_BALANCE"
    status_code = 422

    def __init__(self, resource: str, entity_id: str, balance):
        super().__init__(
            f"Cannot delete {resource} with outstanding balance of {balance:.2f}",
            {"entity_id": entity_id, "balance": float(balance)}
        )


class InsufficientStock(DomainError):
    code = "INSUFFICIENT_STOCK"
    status_code = 422

    def __init__(self, product_id: str, requested: int, available: int):
        super().__init__(
            f"Insufficient stock for product {product_id}. Requested: {requested}, Available: {available}",
            {"product_id": product_id, "requested": requested, "available": available}
        )


class PaymentExceedsBalance(DomainError):
    code = "PAYMENT_EXCEEDS_BALANCE"
    status_code = 422


class InvalidState(DomainError):
    code = "INVALID_STATE"
    status_code = 422


# ============================================================================
# Access (403 / 404)
# ============================================================================

class ResourceNotFound(DomainError):
    code = "RESOURCE_NOT_FOUND"
    status_code = 404

    def __init__(self, resource: str, identifier: str):
        super().__init__(
            f"{resource} with identifier '{identifier}' not found",
            {"resource": resource, "identifier": identifier}
        )


class PermissionDenied(DomainError):
    code = "PERMISSION_DENIED"
    status_code = 403
