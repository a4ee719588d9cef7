"""
Sales API Endpoints
Point-of-sale checkout, sale lifecycle, payments and sales metrics

Author: TM3
Date: 2025-10-17
"""
import logging
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel

from zylos.api.deps import get_pagination, get_sale_service
from zylos.core.auth import TokenUser, require_permission
from zylos.core.tenancy import get_current_tenant
from zylos.domain.enums import SaleStatus
from zylos.domain.errors import DomainError
from zylos.domain.pagination import PaginationParams
from zylos.domain.sale import PaymentCreate, SaleCreate
from zylos.domain.tenant import Tenant
from zylos.services.sale_service import SaleService

logger = logging.getLogger(__name__)

router = APIRouter()


class CancelRequest(BaseModel):
    reason: Optional[str] = None


@router.get("/")
async def list_sales(
    status: Optional[SaleStatus] = Query(None, description="Filter by status"),
    customer_id: Optional[str] = Query(None, description="Filter by customer"),
    pagination: PaginationParams = Depends(get_pagination),
    tenant: Tenant = Depends(get_current_tenant),
    user: TokenUser = Depends(require_permission("sales:read")),
    service: SaleService = Depends(get_sale_service)
):
    try:
        return service.list_sales(tenant.id, pagination, status, customer_id).to_dict()

    except DomainError:
        raise
    except Exception as e:
        logger.error(f"Error listing sales: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Error fetching sales: {str(e)}")


@router.post("/", status_code=201)
async def create_sale(
    data: SaleCreate,
    tenant: Tenant = Depends(get_current_tenant),
    user: TokenUser = Depends(require_permission("sales:create")),
    service: SaleService = Depends(get_sale_service)
):
    """
    Checkout: validates items, checks stock, prices the sale and records
    stock-out movements and the customer charge in one transaction
    """
    try:
        sale = service.create_sale(
            tenant.id,
            data.customer_id,
            data.items,
            tax_rate=data.tax_rate,
            discount_percentage=data.discount_percentage,
            notes=data.notes
        )
        return {"status": "success", "data": sale.to_dict()}

    except DomainError:
        raise
    except Exception as e:
        logger.error(f"Error creating sale: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Error creating sale: {str(e)}")


@router.get("/metrics")
async def sales_metrics(
    start_date: Optional[datetime] = Query(None, description="Period start (default: 30 days ago)"),
    end_date: Optional[datetime] = Query(None, description="Period end (default: now)"),
    tenant: Tenant = Depends(get_current_tenant),
    user: TokenUser = Depends(require_permission("reports:read")),
    service: SaleService = Depends(get_sale_service)
):
    """Totals, average ticket, top products, top customers and daily breakdown"""
    try:
        return {"status": "success", "data": service.sales_metrics(tenant.id, start_date, end_date)}

    except DomainError:
        raise
    except Exception as e:
        logger.error(f"Error computing sales metrics: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Error computing metrics: {str(e)}")


@router.get("/{sale_id}")
async def get_sale(
    sale_id: str,
    tenant: Tenant = Depends(get_current_tenant),
    user: TokenUser = Depends(require_permission("sales:read")),
    service: SaleService = Depends(get_sale_service)
):
    try:
        return {"status": "success", "data": service.get_sale(sale_id, tenant.id).to_dict()}

    except DomainError:
        raise
    except Exception as e:
        logger.error(f"Error fetching sale {sale_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Error fetching sale: {str(e)}")


@router.post("/{sale_id}/complete")
async def complete_sale(
    sale_id: str,
    tenant: Tenant = Depends(get_current_tenant),
    user: TokenUser = Depends(require_permission("sales:update")),
    service: SaleService = Depends(get_sale_service)
):
    try:
        return {"status": "success", "data": service.complete_sale(sale_id, tenant.id).to_dict()}

    except DomainError:
        raise
    except Exception as e:
        logger.error(f"Error completing sale {sale_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Error completing sale: {str(e)}")


@router.post("/{sale_id}/cancel")
async def cancel_sale(
    sale_id: str,
    request: CancelRequest,
    tenant: Tenant = Depends(get_current_tenant),
    user: TokenUser = Depends(require_permission("sales:update")),
    service: SaleService = Depends(get_sale_service)
):
    try:
        sale = service.cancel_sale(sale_id, tenant.id, request.reason)
        return {"status": "success", "data": sale.to_dict()}

    except DomainError:
        raise
    except Exception as e:
        logger.error(f"Error cancelling sale {sale_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Error cancelling sale: {str(e)}")


@router.post("/{sale_id}/payments")
async def record_sale_payment(
    sale_id: str,
    payment: PaymentCreate,
    tenant: Tenant = Depends(get_current_tenant),
    user: TokenUser = Depends(require_permission("sales:update")),
    service: SaleService = Depends(get_sale_service)
):
    try:
        sale = service.record_payment(sale_id, tenant.id, payment.amount, payment.method)
        return {"status": "success", "data": sale.to_dict()}

    except DomainError:
        raise
    except Exception as e:
        logger.error(f"Error recording payment on sale {sale_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Error recording payment: {str(e)}")
