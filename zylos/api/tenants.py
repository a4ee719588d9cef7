"""
Tenants API Endpoints
Store registration (public) and tenant administration (super admin)

These endpoints work on the root domain: they do not need a resolved tenant.

Author: TM3
Date: 2025-10-17
"""
import logging

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel

from zylos.api.deps import get_pagination, get_tenant_service
from zylos.core.auth import TokenUser, require_role
from zylos.domain.enums import UserRole
from zylos.domain.errors import DomainError
from zylos.domain.pagination import PaginationParams
from zylos.services.tenant_service import TenantService

logger = logging.getLogger(__name__)

router = APIRouter()


class TenantCreateRequest(BaseModel):
    name: str
    subdomain: str


@router.post("/", status_code=201)
async def register_tenant(
    request: TenantCreateRequest,
    service: TenantService = Depends(get_tenant_service)
):
    """Register a new store at <subdomain>.<ROOT_DOMAIN>"""
    try:
        tenant = service.create_tenant(request.name, request.subdomain)
        return {"status": "success", "data": tenant.to_dict()}

    except DomainError:
        raise
    except Exception as e:
        logger.error(f"Error registering tenant: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Error registering tenant: {str(e)}")


@router.get("/check/{subdomain}")
async def check_subdomain(
    subdomain: str,
    service: TenantService = Depends(get_tenant_service)
):
    try:
        return {"status": "success", "data": service.check_subdomain_availability(subdomain)}

    except DomainError:
        raise
    except Exception as e:
        logger.error(f"Error checking subdomain {subdomain}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Error checking subdomain: {str(e)}")


@router.get("/suggest")
async def suggest_subdomain(
    name: str = Query(..., min_length=1, description="Store name"),
    service: TenantService = Depends(get_tenant_service)
):
    try:
        return {"status": "success", "data": service.suggest_subdomain(name)}

    except DomainError:
        raise
    except Exception as e:
        logger.error(f"Error suggesting subdomain for {name}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Error suggesting subdomain: {str(e)}")


@router.get("/")
async def list_tenants(
    pagination: PaginationParams = Depends(get_pagination),
    user: TokenUser = Depends(require_role(UserRole.SUPER_ADMIN.value)),
    service: TenantService = Depends(get_tenant_service)
):
    try:
        return service.list_tenants(pagination).to_dict()

    except DomainError:
        raise
    except Exception as e:
        logger.error(f"Error listing tenants: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Error fetching tenants: {str(e)}")


@router.get("/{tenant_id}")
async def get_tenant(
    tenant_id: str,
    user: TokenUser = Depends(require_role(UserRole.SUPER_ADMIN.value)),
    service: TenantService = Depends(get_tenant_service)
):
    try:
        return {"status": "success", "data": service.get_tenant(tenant_id).to_dict()}

    except DomainError:
        raise
    except Exception as e:
        logger.error(f"Error fetching tenant {tenant_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Error fetching tenant: {str(e)}")


@router.post("/{tenant_id}/activate")
async def activate_tenant(
    tenant_id: str,
    user: TokenUser = Depends(require_role(UserRole.SUPER_ADMIN.value)),
    service: TenantService = Depends(get_tenant_service)
):
    try:
        return {"status": "success", "data": service.activate(tenant_id).to_dict()}

    except DomainError:
        raise
    except Exception as e:
        logger.error(f"Error activating tenant {tenant_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Error activating tenant: {str(e)}")


@router.post("/{tenant_id}/deactivate")
async def deactivate_tenant(
    tenant_id: str,
    user: TokenUser = Depends(require_role(UserRole.SUPER_ADMIN.value)),
    service: TenantService = Depends(get_tenant_service)
):
    try:
        return {"status": "success", "data": service.deactivate(tenant_id).to_dict()}

    except DomainError:
        raise
    except Exception as e:
        logger.error(f"Error deactivating tenant {tenant_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Error deactivating tenant: {str(e)}")
