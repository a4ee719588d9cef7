"""
Ledger API Endpoints
Customer and supplier balances, entries and the financial report

Author: TM3
Date: 2025-10-17
"""
import logging
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel

from zylos.api.deps import get_ledger_service, get_pagination
from zylos.core.auth import TokenUser, require_permission
from zylos.core.tenancy import get_current_tenant
from zylos.domain.enums import EntityType, LedgerType
from zylos.domain.errors import DomainError
from zylos.domain.pagination import PaginationParams
from zylos.domain.tenant import Tenant
from zylos.services.ledger_service import LedgerService

logger = logging.getLogger(__name__)

router = APIRouter()


class LedgerEntryRequest(BaseModel):
    entity_type: EntityType
    entity_id: str
    type: LedgerType
    amount: float
    description: Optional[str] = None
    reference_id: Optional[str] = None


@router.post("/entries", status_code=201)
async def create_entry(
    request: LedgerEntryRequest,
    tenant: Tenant = Depends(get_current_tenant),
    user: TokenUser = Depends(require_permission("ledger:write")),
    service: LedgerService = Depends(get_ledger_service)
):
    """
    Record a manual entry

    customer credit: charge, customer debit: payment received
    supplier debit: purchase, supplier credit: payment made
    """
    recorders = {
        (EntityType.CUSTOMER, LedgerType.CREDIT): service.record_customer_credit,
        (EntityType.CUSTOMER, LedgerType.DEBIT): service.record_customer_debit,
        (EntityType.SUPPLIER, LedgerType.DEBIT): service.record_supplier_debit,
        (EntityType.SUPPLIER, LedgerType.CREDIT): service.record_supplier_credit,
    }

    try:
        record = recorders[(request.entity_type, request.type)]
        entry = record(
            tenant.id, request.entity_id, request.amount,
            description=request.description, reference_id=request.reference_id
        )
        return {"status": "success", "data": entry.to_dict()}

    except DomainError:
        raise
    except Exception as e:
        logger.error(f"Error recording ledger entry: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Error recording entry: {str(e)}")


@router.get("/report")
async def financial_report(
    start_date: Optional[datetime] = Query(None),
    end_date: Optional[datetime] = Query(None),
    tenant: Tenant = Depends(get_current_tenant),
    user: TokenUser = Depends(require_permission("reports:read")),
    service: LedgerService = Depends(get_ledger_service)
):
    """Revenue (customer charges) against expenses (supplier purchases)"""
    try:
        return {"status": "success", "data": service.period_report(tenant.id, start_date, end_date)}

    except DomainError:
        raise
    except Exception as e:
        logger.error(f"Error building financial report: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Error building report: {str(e)}")


@router.get("/{entity_type}/{entity_id}/balance")
async def get_balance(
    entity_type: EntityType,
    entity_id: str,
    tenant: Tenant = Depends(get_current_tenant),
    user: TokenUser = Depends(require_permission("ledger:read")),
    service: LedgerService = Depends(get_ledger_service)
):
    try:
        balance = service.get_balance(tenant.id, entity_type, entity_id)
        return {
            "status": "success",
            "data": {"entity_type": entity_type.value, "entity_id": entity_id, "balance": float(balance)}
        }

    except DomainError:
        raise
    except Exception as e:
        logger.error(f"Error fetching balance of {entity_type.value} {entity_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Error fetching balance: {str(e)}")


@router.get("/{entity_type}/{entity_id}/entries")
async def get_entries(
    entity_type: EntityType,
    entity_id: str,
    pagination: PaginationParams = Depends(get_pagination),
    tenant: Tenant = Depends(get_current_tenant),
    user: TokenUser = Depends(require_permission("ledger:read")),
    service: LedgerService = Depends(get_ledger_service)
):
    try:
        return service.get_entries(tenant.id, entity_type, entity_id, pagination).to_dict()

    except DomainError:
        raise
    except Exception as e:
        logger.error(f"Error fetching entries of {entity_type.value} {entity_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Error fetching entries: {str(e)}")
