"""
Tenant Service - tenant registration and lifecycle

Author: TM3
Date: 2025-10-17
"""
import logging
from typing import Any, Dict, Optional

from zylos.domain.errors import ResourceNotFound, SubdomainTaken
from zylos.domain.pagination import PaginatedResponse, PaginationParams
from zylos.domain.tenant import Tenant
from zylos.domain.value_objects import Subdomain
from zylos.repositories.base import TenantRepository

logger = logging.getLogger(__name__)


class TenantService:
    """Tenants are global: these operations are not scoped by tenant_id"""

    def __init__(self, tenant_repository: TenantRepository, root_domain: str = "localhost:8000"):
        self.tenant_repository = tenant_repository
        self.root_domain = root_domain

    def create_tenant(self, name: str, subdomain: str) -> Tenant:
        """
        Raises:
            InvalidTenantName / InvalidSubdomain: bad input
            SubdomainTaken: another tenant owns the subdomain
        """
        tenant = Tenant.create(name, subdomain)

        if self.tenant_repository.find_by_subdomain(tenant.subdomain):
            logger.warning(f"Subdomain already taken: {tenant.subdomain}")
            raise SubdomainTaken(tenant.subdomain)

        created = self.tenant_repository.create(tenant)
        logger.info(f"Tenant registered: {created.subdomain} ({created.id})")
        return created

    def get_tenant(self, tenant_id: str) -> Tenant:
        tenant = self.tenant_repository.find_by_id(tenant_id)
        if not tenant:
            raise ResourceNotFound("Tenant", tenant_id)
        return tenant

    def get_by_subdomain(self, subdomain: str) -> Optional[Tenant]:
        return self.tenant_repository.find_by_subdomain(subdomain.strip().lower())

    def activate(self, tenant_id: str) -> Tenant:
        self.get_tenant(tenant_id)
        tenant = self.tenant_repository.activate(tenant_id)
        logger.info(f"Tenant activated: {tenant_id}")
        return tenant

    def deactivate(self, tenant_id: str) -> Tenant:
        self.get_tenant(tenant_id)
        tenant = self.tenant_repository.deactivate(tenant_id)
        logger.info(f"Tenant deactivated: {tenant_id}")
        return tenant

    def list_tenants(self, pagination: PaginationParams) -> PaginatedResponse[Tenant]:
        return self.tenant_repository.find_all(pagination)

    def check_subdomain_availability(self, subdomain: str) -> Dict[str, Any]:
        """
        Returns:
            {"subdomain", "available", "reason"?, "url"?}
        """
        if not Subdomain.is_valid(subdomain or ""):
            return {"subdomain": subdomain, "available": False, "reason": "invalid"}

        value = Subdomain(subdomain).value
        if self.tenant_repository.find_by_subdomain(value):
            return {"subdomain": value, "available": False, "reason": "taken"}

        return {
            "subdomain": value,
            "available": True,
            "url": Subdomain(value).to_full_domain(self.root_domain),
        }

    def suggest_subdomain(self, business_name: str) -> Dict[str, Any]:
        """Subdomain derived from a store name, with its availability"""
        suggestion = Subdomain.from_business_name(business_name)
        return self.check_subdomain_availability(suggestion.value)
