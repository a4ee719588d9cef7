"""
Customers API Endpoints
Customer catalog, account status and payments on account

Author: TM3
Date: 2025-10-17
"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from zylos.api.deps import get_customer_service, get_pagination
from zylos.core.auth import TokenUser, require_permission
from zylos.core.tenancy import get_current_tenant
from zylos.domain.customer import CustomerCreate, CustomerUpdate
from zylos.domain.errors import DomainError
from zylos.domain.pagination import PaginationParams
from zylos.domain.sale import PaymentCreate
from zylos.domain.tenant import Tenant
from zylos.services.customer_service import CustomerService

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/")
async def list_customers(
    search: Optional[str] = Query(None, description="Search by name"),
    pagination: PaginationParams = Depends(get_pagination),
    tenant: Tenant = Depends(get_current_tenant),
    user: TokenUser = Depends(require_permission("customers:read")),
    service: CustomerService = Depends(get_customer_service)
):
    try:
        if search is not None:
            page = service.search_customers(tenant.id, search, pagination)
        else:
            page = service.list_customers(tenant.id, pagination)
        return page.to_dict()

    except DomainError:
        raise
    except Exception as e:
        logger.error(f"Error listing customers: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Error fetching customers: {str(e)}")


@router.post("/", status_code=201)
async def create_customer(
    data: CustomerCreate,
    tenant: Tenant = Depends(get_current_tenant),
    user: TokenUser = Depends(require_permission("customers:write")),
    service: CustomerService = Depends(get_customer_service)
):
    try:
        customer = service.create_customer(tenant.id, data)
        return {"status": "success", "data": customer.to_dict()}

    except DomainError:
        raise
    except Exception as e:
        logger.error(f"Error creating customer: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Error creating customer: {str(e)}")


@router.get("/{customer_id}")
async def get_customer(
    customer_id: str,
    max_days_outstanding: int = Query(30, ge=0, description="Days allowed since the last payment"),
    tenant: Tenant = Depends(get_current_tenant),
    user: TokenUser = Depends(require_permission("customers:read")),
    service: CustomerService = Depends(get_customer_service)
):
    """Customer with balance and good-standing flag"""
    try:
        return {"status": "success", "data": service.get_customer(customer_id, tenant.id, max_days_outstanding)}

    except DomainError:
        raise
    except Exception as e:
        logger.error(f"Error fetching customer {customer_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Error fetching customer: {str(e)}")


@router.put("/{customer_id}")
async def update_customer(
    customer_id: str,
    data: CustomerUpdate,
    tenant: Tenant = Depends(get_current_tenant),
    user: TokenUser = Depends(require_permission("customers:write")),
    service: CustomerService = Depends(get_customer_service)
):
    try:
        customer = service.update_customer(customer_id, tenant.id, data)
        return {"status": "success", "data": customer.to_dict()}

    except DomainError:
        raise
    except Exception as e:
        logger.error(f"Error updating customer {customer_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Error updating customer: {str(e)}")


@router.delete("/{customer_id}")
async def delete_customer(
    customer_id: str,
    tenant: Tenant = Depends(get_current_tenant),
    user: TokenUser = Depends(require_permission("customers:delete")),
    service: CustomerService = Depends(get_customer_service)
):
    try:
        service.delete_customer(customer_id, tenant.id)
        return {"status": "success", "message": f"Customer {customer_id} deleted"}

    except DomainError:
        raise
    except Exception as e:
        logger.error(f"Error deleting customer {customer_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Error deleting customer: {str(e)}")


@router.post("/{customer_id}/payments", status_code=201)
async def record_customer_payment(
    customer_id: str,
    payment: PaymentCreate,
    tenant: Tenant = Depends(get_current_tenant),
    user: TokenUser = Depends(require_permission("ledger:write")),
    service: CustomerService = Depends(get_customer_service)
):
    """Payment on account (ledger debit)"""
    try:
        entry = service.record_payment(
            customer_id, tenant.id, payment.amount,
            method=payment.method, description=payment.description
        )
        return {"status": "success", "data": entry.to_dict()}

    except DomainError:
        raise
    except Exception as e:
        logger.error(f"Error recording payment for customer {customer_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Error recording payment: {str(e)}")


@router.get("/{customer_id}/transactions")
async def get_customer_transactions(
    customer_id: str,
    pagination: PaginationParams = Depends(get_pagination),
    tenant: Tenant = Depends(get_current_tenant),
    user: TokenUser = Depends(require_permission("ledger:read")),
    service: CustomerService = Depends(get_customer_service)
):
    try:
        page = service.get_customer_transactions(customer_id, tenant.id, pagination)
        return page.to_dict()

    except DomainError:
        raise
    except Exception as e:
        logger.error(f"Error fetching transactions of customer {customer_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Error fetching transactions: {str(e)}")
