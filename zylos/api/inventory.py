"""
Inventory API Endpoints
Stock movements, per-product inventory and low-stock reporting

Author: TM3
Date: 2025-10-17
"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel, Field

from zylos.api.deps import get_inventory_service, get_pagination
from zylos.core.auth import TokenUser, require_permission
from zylos.core.tenancy import get_current_tenant
from zylos.domain.errors import DomainError
from zylos.domain.pagination import PaginationParams
from zylos.domain.tenant import Tenant
from zylos.services.inventory_service import InventoryService

logger = logging.getLogger(__name__)

router = APIRouter()


# Request models
class StockMovementRequest(BaseModel):
    quantity: int
    reason: Optional[str] = None
    reference_id: Optional[str] = None


class StockAdjustmentRequest(BaseModel):
    new_stock: int = Field(..., ge=0)
    reason: Optional[str] = None


@router.get("/movements")
async def list_movements(
    product_id: Optional[str] = Query(None, description="Filter by product"),
    pagination: PaginationParams = Depends(get_pagination),
    tenant: Tenant = Depends(get_current_tenant),
    user: TokenUser = Depends(require_permission("inventory:read")),
    service: InventoryService = Depends(get_inventory_service)
):
    try:
        return service.list_movements(tenant.id, pagination, product_id).to_dict()

    except DomainError:
        raise
    except Exception as e:
        logger.error(f"Error listing movements: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Error fetching movements: {str(e)}")


@router.get("/low-stock")
async def low_stock_report(
    tenant: Tenant = Depends(get_current_tenant),
    user: TokenUser = Depends(require_permission("inventory:read")),
    service: InventoryService = Depends(get_inventory_service)
):
    try:
        return {"status": "success", "data": service.low_stock_report(tenant.id)}

    except DomainError:
        raise
    except Exception as e:
        logger.error(f"Error building low stock report: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Error building low stock report: {str(e)}")


@router.get("/reorder")
async def reorder_recommendations(
    lead_time_days: int = Query(7, ge=0),
    safety_stock_days: int = Query(3, ge=0),
    tenant: Tenant = Depends(get_current_tenant),
    user: TokenUser = Depends(require_permission("inventory:read")),
    service: InventoryService = Depends(get_inventory_service)
):
    try:
        data = service.reorder_recommendations(tenant.id, lead_time_days, safety_stock_days)
        return {"status": "success", "count": len(data), "data": data}

    except DomainError:
        raise
    except Exception as e:
        logger.error(f"Error building reorder recommendations: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Error building recommendations: {str(e)}")


@router.get("/{product_id}")
async def get_inventory(
    product_id: str,
    history_days: int = Query(90, ge=1, le=365),
    tenant: Tenant = Depends(get_current_tenant),
    user: TokenUser = Depends(require_permission("inventory:read")),
    service: InventoryService = Depends(get_inventory_service)
):
    """Stock level, threshold and recent movements of one product"""
    try:
        inventory = service.get_inventory(product_id, tenant.id, history_days)
        return {"status": "success", "data": inventory.to_dict()}

    except DomainError:
        raise
    except Exception as e:
        logger.error(f"Error fetching inventory of {product_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Error fetching inventory: {str(e)}")


@router.post("/{product_id}/add")
async def add_stock(
    product_id: str,
    request: StockMovementRequest,
    tenant: Tenant = Depends(get_current_tenant),
    user: TokenUser = Depends(require_permission("inventory:write")),
    service: InventoryService = Depends(get_inventory_service)
):
    try:
        inventory = service.add_stock(product_id, tenant.id, request.quantity, request.reason, request.reference_id)
        return {"status": "success", "data": inventory.to_dict()}

    except DomainError:
        raise
    except Exception as e:
        logger.error(f"Error adding stock to {product_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Error adding stock: {str(e)}")


@router.post("/{product_id}/remove")
async def remove_stock(
    product_id: str,
    request: StockMovementRequest,
    tenant: Tenant = Depends(get_current_tenant),
    user: TokenUser = Depends(require_permission("inventory:write")),
    service: InventoryService = Depends(get_inventory_service)
):
    try:
        inventory = service.remove_stock(product_id, tenant.id, request.quantity, request.reason, request.reference_id)
        return {"status": "success", "data": inventory.to_dict()}

    except DomainError:
        raise
    except Exception as e:
        logger.error(f"Error removing stock from {product_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Error removing stock: {str(e)}")


@router.post("/{product_id}/adjust")
async def adjust_stock(
    product_id: str,
    request: StockAdjustmentRequest,
    tenant: Tenant = Depends(get_current_tenant),
    user: TokenUser = Depends(require_permission("inventory:write")),
    service: InventoryService = Depends(get_inventory_service)
):
    """Set the stock to a counted value"""
    try:
        inventory = service.adjust_stock(product_id, tenant.id, request.new_stock, request.reason)
        return {"status": "success", "data": inventory.to_dict()}

    except DomainError:
        raise
    except Exception as e:
        logger.error(f"Error adjusting stock of {product_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Error adjusting stock: {str(e)}")
