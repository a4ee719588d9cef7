"""
Suppliers API Endpoints
Supplier catalog, balances and payments for the current tenant

Author: TM3
Date: 2025-10-17
"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from zylos.api.deps import get_pagination, get_supplier_service
from zylos.core.auth import TokenUser, require_permission
from zylos.core.tenancy import get_current_tenant
from zylos.domain.errors import DomainError
from zylos.domain.pagination import PaginationParams
from zylos.domain.sale import PaymentCreate
from zylos.domain.supplier import SupplierCreate, SupplierUpdate
from zylos.domain.tenant import Tenant
from zylos.services.supplier_service import SupplierService

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/")
async def list_suppliers(
    search: Optional[str] = Query(None, description="Search by name"),
    with_balance: bool = Query(False, description="Add balance, balance_to_pay and account_status"),
    pagination: PaginationParams = Depends(get_pagination),
    tenant: Tenant = Depends(get_current_tenant),
    user: TokenUser = Depends(require_permission("suppliers:read")),
    service: SupplierService = Depends(get_supplier_service)
):
    """List suppliers, optionally filtered by name"""
    try:
        if with_balance:
            page = service.list_suppliers_with_balance(tenant.id, pagination, search)
        elif search is not None:
            page = service.search_suppliers(tenant.id, search, pagination)
        else:
            page = service.list_suppliers(tenant.id, pagination)
        return page.to_dict()

    except DomainError:
        raise
    except Exception as e:
        logger.error(f"Error listing suppliers: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Error fetching suppliers: {str(e)}")


@router.post("/", status_code=201)
async def create_supplier(
    data: SupplierCreate,
    tenant: Tenant = Depends(get_current_tenant),
    user: TokenUser = Depends(require_permission("suppliers:write")),
    service: SupplierService = Depends(get_supplier_service)
):
    try:
        supplier = service.create_supplier(tenant.id, data)
        return {"status": "success", "data": supplier.to_dict()}

    except DomainError:
        raise
    except Exception as e:
        logger.error(f"Error creating supplier: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Error creating supplier: {str(e)}")


@router.get("/{supplier_id}")
async def get_supplier(
    supplier_id: str,
    tenant: Tenant = Depends(get_current_tenant),
    user: TokenUser = Depends(require_permission("suppliers:read")),
    service: SupplierService = Depends(get_supplier_service)
):
    """Supplier with balance, balance_to_pay and account_status"""
    try:
        return {"status": "success", "data": service.get_supplier(supplier_id, tenant.id)}

    except DomainError:
        raise
    except Exception as e:
        logger.error(f"Error fetching supplier {supplier_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Error fetching supplier: {str(e)}")


@router.put("/{supplier_id}")
async def update_supplier(
    supplier_id: str,
    data: SupplierUpdate,
    tenant: Tenant = Depends(get_current_tenant),
    user: TokenUser = Depends(require_permission("suppliers:write")),
    service: SupplierService = Depends(get_supplier_service)
):
    try:
        supplier = service.update_supplier(supplier_id, tenant.id, data)
        return {"status": "success", "data": supplier.to_dict()}

    except DomainError:
        raise
    except Exception as e:
        logger.error(f"Error updating supplier {supplier_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Error updating supplier: {str(e)}")


@router.delete("/{supplier_id}")
async def delete_supplier(
    supplier_id: str,
    tenant: Tenant = Depends(get_current_tenant),
    user: TokenUser = Depends(require_permission("suppliers:delete")),
    service: SupplierService = Depends(get_supplier_service)
):
    try:
        service.delete_supplier(supplier_id, tenant.id)
        return {"status": "success", "message": f"Supplier {supplier_id} deleted"}

    except DomainError:
        raise
    except Exception as e:
        logger.error(f"Error deleting supplier {supplier_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Error deleting supplier: {str(e)}")


@router.get("/{supplier_id}/balance")
async def get_supplier_balance(
    supplier_id: str,
    tenant: Tenant = Depends(get_current_tenant),
    user: TokenUser = Depends(require_permission("suppliers:read")),
    service: SupplierService = Depends(get_supplier_service)
):
    try:
        balance = service.get_supplier_balance(supplier_id, tenant.id)
        return {"status": "success", "data": {"supplier_id": supplier_id, "balance": float(balance)}}

    except DomainError:
        raise
    except Exception as e:
        logger.error(f"Error fetching balance of supplier {supplier_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Error fetching balance: {str(e)}")


@router.post("/{supplier_id}/payments", status_code=201)
async def pay_supplier(
    supplier_id: str,
    payment: PaymentCreate,
    tenant: Tenant = Depends(get_current_tenant),
    user: TokenUser = Depends(require_permission("ledger:write")),
    service: SupplierService = Depends(get_supplier_service)
):
    """Record a payment to the supplier (ledger credit)"""
    try:
        entry = service.process_payment(
            supplier_id, tenant.id, payment.amount,
            method=payment.method, description=payment.description
        )
        return {"status": "success", "data": entry.to_dict()}

    except DomainError:
        raise
    except Exception as e:
        logger.error(f"Error paying supplier {supplier_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Error processing payment: {str(e)}")


@router.get("/{supplier_id}/transactions")
async def get_supplier_transactions(
    supplier_id: str,
    pagination: PaginationParams = Depends(get_pagination),
    tenant: Tenant = Depends(get_current_tenant),
    user: TokenUser = Depends(require_permission("ledger:read")),
    service: SupplierService = Depends(get_supplier_service)
):
    try:
        page = service.get_supplier_transactions(supplier_id, tenant.id, pagination)
        return page.to_dict()

    except DomainError:
        raise
    except Exception as e:
        logger.error(f"Error fetching transactions of supplier {supplier_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Error fetching transactions: {str(e)}")
