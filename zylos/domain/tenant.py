"""
Tenant Domain Model

A tenant is one store using Zylos, reached through its own subdomain
(acme.zylos.app). Tenants are immutable: activate() and deactivate() return
new instances.

Author: TM3
Date: 2025-10-17
"""
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from zylos.domain.clock import utcnow
from zylos.domain.errors import InvalidSubdomain, InvalidTenantName
from zylos.domain.value_objects import SUBDOMAIN_PATTERN


class Tenant(BaseModel):
    """
    Tenant entity

    Fields:
        id: Tenant ID (None until persisted)
        name: Store name
        subdomain: Lowercase letters, digits and hyphens
        active: Inactive tenants are rejected by the tenant middleware
        created_at / updated_at: UTC timestamps
    """

    id: Optional[str] = None
    name: str
    subdomain: str
    active: bool
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    model_config = ConfigDict(frozen=True, from_attributes=True)

    @classmethod
    def create(cls, name: str, subdomain: str, active: bool = True) -> "Tenant":
        """
        Validate and build a new tenant

        The subdomain is checked as given: 'ACME Store!' is rejected, not
        rewritten to 'acme-store'.

        Raises:
            InvalidTenantName: name is empty
            InvalidSubdomain: subdomain is empty or has invalid characters
        """
        if not name or not name.strip():
            raise InvalidTenantName("Tenant name is required")

        if not subdomain or not subdomain.strip():
            raise InvalidSubdomain("Tenant subdomain is required")

        subdomain = subdomain.strip()
        if not SUBDOMAIN_PATTERN.match(subdomain):
            raise InvalidSubdomain(
                "Subdomain must contain only lowercase letters, numbers, and hyphens"
            )

        now = utcnow()
        return cls(name=name.strip(), subdomain=subdomain, active=active, created_at=now, updated_at=now)

    def is_active(self) -> bool:
        return self.active

    def activate(self) -> "Tenant":
        return self.model_copy(update={"active": True, "updated_at": utcnow()})

    def deactivate(self) -> "Tenant":
        return self.model_copy(update={"active": False, "updated_at": utcnow()})

    def to_context(self) -> dict:
        """Values propagated to downstream handlers as x-tenant-* headers"""
        return {
            "id": self.id,
            "name": self.name,
            "subdomain": self.subdomain,
        }

    def to_dict(self) -> dict:
        return self.model_dump(mode="json")
