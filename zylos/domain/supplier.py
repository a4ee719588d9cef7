"""
Supplier Domain Model

Represents a supplier of a tenant. Emails are stored normalized (trimmed,
lowercase) so the per-tenant uniqueness check compares like with like.

Author: TM3
Date: 2025-10-17
"""
from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from zylos.domain.value_objects import normalize_optional_email, normalize_required_name


class Supplier(BaseModel):
    """
    Supplier domain model - matches the suppliers table

    Fields:
        id: Supplier ID (UUID)
        tenant_id: Owning tenant
        name: Supplier name
        email: Contact email (optional, normalized)
        phone: Contact phone (optional)
        address: Postal address (optional)
        created_at / updated_at: Timestamps
    """

    id: str = Field(..., description="Supplier ID")
    tenant_id: str = Field(..., description="Owning tenant ID")
    name: str = Field(..., description="Supplier name")
    email: Optional[str] = Field(None, description="Contact email")
    phone: Optional[str] = Field(None, description="Contact phone")
    address: Optional[str] = Field(None, description="Postal address")
    created_at: Optional[datetime] = Field(None, description="Creation timestamp")
    updated_at: Optional[datetime] = Field(None, description="Last update timestamp")

    model_config = ConfigDict(from_attributes=True)

    def to_dict(self) -> dict:
        return self.model_dump(mode="json")


class SupplierCreate(BaseModel):
    """Schema for creating a supplier"""
    name: str
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None

    @field_validator("name", mode="before")
    @classmethod
    def _validate_name(cls, value: Any) -> str:
        return normalize_required_name(value, "Supplier")

    @field_validator("email", mode="before")
    @classmethod
    def _normalize_email(cls, value: Any) -> Optional[str]:
        return normalize_optional_email(value)


class SupplierUpdate(BaseModel):
    """Schema for updating a supplier (only the fields sent are changed)"""
    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None

    @field_validator("name", mode="before")
    @classmethod
    def _validate_name(cls, value: Any) -> Optional[str]:
        if value is None:
            return None
        return normalize_required_name(value, "Supplier")

    @field_validator("email", mode="before")
    @classmethod
    def _normalize_email(cls, value: Any) -> Optional[str]:
        return normalize_optional_email(value)
