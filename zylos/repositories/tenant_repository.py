"""
Tenant Repository - tenants table through the Supabase client

Table: tenants (id uuid, name, subdomain unique, active, created_at,
updated_at)

Author: TM3
Date: 2025-10-17
"""
import logging
from typing import Callable, Dict, Optional

from postgrest.exceptions import APIError
from supabase import Client

from zylos.core.database import get_supabase
from zylos.domain.clock import utcnow
from zylos.domain.errors import SubdomainTaken
from zylos.domain.pagination import PaginatedResponse, PaginationParams
from zylos.domain.tenant import Tenant
from zylos.repositories.base import TenantRepository

logger = logging.getLogger(__name__)

TENANTS_TABLE = "tenants"

# Postgres unique_violation, as reported by PostgREST
UNIQUE_VIOLATION = "23505"


class SupabaseTenantRepository(TenantRepository):
    """Repository for Tenant data access"""

    def __init__(self, client_factory: Callable[[], Client] = get_supabase):
        self._client_factory = client_factory

    @property
    def _table(self):
        return self._client_factory().table(TENANTS_TABLE)

    @staticmethod
    def _map_row_to_tenant(row: dict) -> Tenant:
        return Tenant(
            id=str(row['id']),
            name=row['name'],
            subdomain=row['subdomain'],
            active=row.get('active', True),
            created_at=row['created_at'],
            updated_at=row.get('updated_at') or row['created_at']
        )

    def _first(self, response) -> Optional[Tenant]:
        rows = response.data or []
        return self._map_row_to_tenant(rows[0]) if rows else None

    def create(self, tenant: Tenant) -> Tenant:
        """
        Raises:
            SubdomainTaken: the unique index on subdomain rejected the row
        """
        try:
            response = self._table.insert({
                "name": tenant.name,
                "subdomain": tenant.subdomain,
                "active": tenant.active,
                "created_at": tenant.created_at.isoformat(),
                "updated_at": tenant.updated_at.isoformat(),
            }).execute()
        except APIError as e:
            if e.code == UNIQUE_VIOLATION:
                logger.warning(f"Subdomain taken on insert: {tenant.subdomain}")
                raise SubdomainTaken(tenant.subdomain)
            raise

        created = self._first(response)
        logger.info(f"Tenant created: {tenant.subdomain}")
        return created

    def find_by_id(self, tenant_id: str) -> Optional[Tenant]:
        response = self._table.select("*").eq("id", tenant_id).limit(1).execute()
        return self._first(response)

    def find_by_subdomain(self, subdomain: str) -> Optional[Tenant]:
        response = self._table.select("*").eq("subdomain", subdomain).limit(1).execute()
        return self._first(response)

    def update(self, tenant_id: str, fields: Dict) -> Optional[Tenant]:
        payload = dict(fields)
        payload["updated_at"] = utcnow().isoformat()
        response = self._table.update(payload).eq("id", tenant_id).execute()
        return self._first(response)

    def activate(self, tenant_id: str) -> Optional[Tenant]:
        return self.update(tenant_id, {"active": True})

    def deactivate(self, tenant_id: str) -> Optional[Tenant]:
        return self.update(tenant_id, {"active": False})

    def find_all(self, pagination: PaginationParams) -> PaginatedResponse[Tenant]:
        start = pagination.offset
        end = start + pagination.limit - 1
        response = (
            self._table.select("*", count="exact")
            .order("name")
            .range(start, end)
            .execute()
        )

        tenants = [self._map_row_to_tenant(row) for row in response.data or []]
        return PaginatedResponse.build(tenants, response.count or 0, pagination)
