"""
Products API Endpoints
Handles product catalog management and queries

Author: TM3
Date: 2025-10-17
"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from zylos.api.deps import get_pagination, get_product_service
from zylos.core.auth import TokenUser, require_permission
from zylos.core.config import settings
from zylos.core.tenancy import get_current_tenant
from zylos.domain.errors import DomainError
from zylos.domain.pagination import PaginationParams
from zylos.domain.product import ProductCreate, ProductUpdate
from zylos.domain.tenant import Tenant
from zylos.services.product_service import ProductService

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/")
async def get_products(
    search: Optional[str] = Query(None, description="Search by name or SKU"),
    low_stock_only: bool = Query(False, description="Only products at or under their threshold"),
    pagination: PaginationParams = Depends(get_pagination),
    tenant: Tenant = Depends(get_current_tenant),
    user: TokenUser = Depends(require_permission("products:read")),
    service: ProductService = Depends(get_product_service)
):
    """
    Get all products with optional filters

    Returns products with is_low_stock / is_out_of_stock included
    """
    try:
        page = service.list_products(tenant.id, pagination, search, low_stock_only)
        return page.to_dict()

    except DomainError:
        raise
    except Exception as e:
        logger.error(f"Error fetching products: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Error fetching products: {str(e)}")


@router.post("/", status_code=201)
async def create_product(
    data: ProductCreate,
    tenant: Tenant = Depends(get_current_tenant),
    user: TokenUser = Depends(require_permission("products:write")),
    service: ProductService = Depends(get_product_service)
):
    try:
        product = service.create_product(tenant.id, data)
        return {"status": "success", "data": product.to_dict()}

    except DomainError:
        raise
    except Exception as e:
        logger.error(f"Error creating product: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Error creating product: {str(e)}")


@router.get("/sku/{sku}")
async def get_product_by_sku(
    sku: str,
    tenant: Tenant = Depends(get_current_tenant),
    user: TokenUser = Depends(require_permission("products:read")),
    service: ProductService = Depends(get_product_service)
):
    try:
        return {"status": "success", "data": service.get_product_by_sku(sku, tenant.id).to_dict()}

    except DomainError:
        raise
    except Exception as e:
        logger.error(f"Error fetching product {sku}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Error fetching product: {str(e)}")


@router.get("/{product_id}")
async def get_product(
    product_id: str,
    tenant: Tenant = Depends(get_current_tenant),
    user: TokenUser = Depends(require_permission("products:read")),
    service: ProductService = Depends(get_product_service)
):
    try:
        return {"status": "success", "data": service.get_product(product_id, tenant.id).to_dict()}

    except DomainError:
        raise
    except Exception as e:
        logger.error(f"Error fetching product {product_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Error fetching product: {str(e)}")


@router.put("/{product_id}")
async def update_product(
    product_id: str,
    data: ProductUpdate,
    tenant: Tenant = Depends(get_current_tenant),
    user: TokenUser = Depends(require_permission("products:write")),
    service: ProductService = Depends(get_product_service)
):
    try:
        product = service.update_product(product_id, tenant.id, data)
        return {"status": "success", "data": product.to_dict()}

    except DomainError:
        raise
    except Exception as e:
        logger.error(f"Error updating product {product_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Error updating product: {str(e)}")


@router.get("/{product_id}/pricing")
async def get_product_pricing(
    product_id: str,
    tax_rate: Optional[float] = Query(None, ge=0, le=1),
    tenant: Tenant = Depends(get_current_tenant),
    user: TokenUser = Depends(require_permission("products:read")),
    service: ProductService = Depends(get_product_service)
):
    """Price with tax, margin and markup"""
    try:
        rate = settings.DEFAULT_TAX_RATE if tax_rate is None else tax_rate
        return {"status": "success", "data": service.get_pricing(product_id, tenant.id, rate)}

    except DomainError:
        raise
    except Exception as e:
        logger.error(f"Error pricing product {product_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Error pricing product: {str(e)}")
