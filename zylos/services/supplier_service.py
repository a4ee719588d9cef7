"""
Supplier Service - supplier use cases

Emails are unique per tenant. The lookup before insert/update is a
best-effort check; the repository also maps the database unique violation
to DuplicateEmail.

Author: TM3
Date: 2025-10-17
"""
import logging
from decimal import Decimal
from typing import Any, Dict, Optional

from zylos.domain.enums import EntityType
from zylos.domain.errors import (
    CannotDeleteWithBalance,
    DuplicateEmail,
    InvalidAmount,
    PaymentExceedsBalance,
    ResourceNotFound,
    ValidationFailed,
)
from zylos.domain.ledger import LedgerEntry
from zylos.domain.pagination import PaginatedResponse, PaginationParams
from zylos.domain.supplier import Supplier, SupplierCreate, SupplierUpdate
from zylos.domain.value_objects import Money, to_decimal
from zylos.repositories.base import LedgerEntryRepository, SupplierRepository
from zylos.services.ledger_service import LedgerService

logger = logging.getLogger(__name__)


def account_status(balance: Decimal) -> str:
    """Bucket a supplier balance for display"""
    if balance == 0:
        return "settled"
    if balance < 0:
        return "in_credit"
    if balance <= 30:
        return "pending_up_to_30"
    if balance <= 60:
        return "pending_31_60"
    if balance <= 90:
        return "pending_61_90"
    return "pending_over_90"


class SupplierService:
    """Supplier CRUD plus the supplier side of the ledger"""

    def __init__(self, supplier_repository: SupplierRepository, ledger_repository: LedgerEntryRepository):
        self.supplier_repository = supplier_repository
        self.ledger = LedgerService(ledger_repository)

    def _require(self, supplier_id: str, tenant_id: str) -> Supplier:
        supplier = self.supplier_repository.find_by_id(supplier_id, tenant_id)
        if not supplier:
            raise ResourceNotFound("Supplier", supplier_id)
        return supplier

    def create_supplier(self, tenant_id: str, data: SupplierCreate) -> Supplier:
        """
        Raises:
            DuplicateEmail: another supplier of the tenant uses the email
        """
        if data.email:
            existing = self.supplier_repository.find_by_email(data.email, tenant_id)
            if existing:
                logger.warning(f"Supplier email already in use: {data.email} (tenant {tenant_id})")
                raise DuplicateEmail("supplier", data.email, existing.id)

        supplier = self.supplier_repository.create(tenant_id, data)
        logger.info(f"Supplier created: {supplier.id} (tenant {tenant_id})")
        return supplier

    def update_supplier(self, supplier_id: str, tenant_id: str, data: SupplierUpdate) -> Supplier:
        current = self._require(supplier_id, tenant_id)

        if data.email and data.email != current.email:
            existing = self.supplier_repository.find_by_email(data.email, tenant_id)
            if existing and existing.id != supplier_id:
                logger.warning(f"Supplier email already in use: {data.email} (tenant {tenant_id})")
                raise DuplicateEmail("supplier", data.email, existing.id)

        updated = self.supplier_repository.update(supplier_id, tenant_id, data)
        if not updated:
            raise ResourceNotFound("Supplier", supplier_id)
        return updated

    def delete_supplier(self, supplier_id: str, tenant_id: str) -> None:
        """
        Raises:
            ResourceNotFound: no such supplier
            CannotDeleteWithBalance: the supplier balance is not zero
        """
        self._require(supplier_id, tenant_id)

        balance = self.get_supplier_balance(supplier_id, tenant_id)
        if balance != 0:
            logger.warning(f"Refused to delete supplier {supplier_id} with balance {balance}")
            raise CannotDeleteWithBalance("supplier", supplier_id, balance)

        if not self.supplier_repository.delete(supplier_id, tenant_id):
            raise ResourceNotFound("Supplier", supplier_id)
        logger.info(f"Supplier deleted: {supplier_id} (tenant {tenant_id})")

    def _with_balance(self, supplier: Supplier) -> Dict[str, Any]:
        balance = self.get_supplier_balance(supplier.id, supplier.tenant_id)
        return {
            **supplier.to_dict(),
            "balance": float(balance),
            "balance_to_pay": float(max(balance, Decimal("0"))),
            "account_status": account_status(balance),
        }

    def get_supplier(self, supplier_id: str, tenant_id: str) -> Dict[str, Any]:
        """Supplier with its balance, the amount still to pay and an account status"""
        return self._with_balance(self._require(supplier_id, tenant_id))

    def list_suppliers(self, tenant_id: str, pagination: PaginationParams) -> PaginatedResponse[Supplier]:
        return self.supplier_repository.find_by_tenant_id(tenant_id, pagination)

    def list_suppliers_with_balance(self, tenant_id: str, pagination: PaginationParams,
                                    name: Optional[str] = None) -> PaginatedResponse[Dict[str, Any]]:
        """
        One page of suppliers (optionally filtered by name), each with
        balance, balance_to_pay and account_status
        """
        if name is not None:
            page = self.search_suppliers(tenant_id, name, pagination)
        else:
            page = self.list_suppliers(tenant_id, pagination)
        return page.map(self._with_balance)

    def search_suppliers(self, tenant_id: str, name: str, pagination: PaginationParams) -> PaginatedResponse[Supplier]:
        term = (name or "").strip()
        if not term:
            raise ValidationFailed(["Search term is required"])
        return self.supplier_repository.search_by_name(tenant_id, term, pagination)

    def get_supplier_balance(self, supplier_id: str, tenant_id: str) -> Decimal:
        return self.ledger.get_balance(tenant_id, EntityType.SUPPLIER, supplier_id)

    def process_payment(self, supplier_id: str, tenant_id: str, amount: Any,
                        method: Optional[str] = None, description: Optional[str] = None) -> LedgerEntry:
        """
        Pay a supplier: records a supplier credit

        Raises:
            InvalidAmount: amount <= 0
            PaymentExceedsBalance: nothing is owed, or amount is more than what is owed
        """
        amount = to_decimal(amount)
        if amount <= 0:
            raise InvalidAmount("Payment amount must be greater than 0")

        self._require(supplier_id, tenant_id)
        balance = self.get_supplier_balance(supplier_id, tenant_id)
        if balance <= 0:
            raise PaymentExceedsBalance("This supplier has no outstanding balance", {"balance": float(balance)})

        entry = self.ledger.record_supplier_credit(
            tenant_id,
            supplier_id,
            Money(amount),
            description=description or f"Payment - {method or 'unspecified'}",
        )
        logger.info(f"Supplier payment of {Money(amount)} recorded for {supplier_id}")
        return entry

    def get_supplier_transactions(self, supplier_id: str, tenant_id: str,
                                  pagination: PaginationParams) -> PaginatedResponse[LedgerEntry]:
        self._require(supplier_id, tenant_id)
        return self.ledger.get_entries(tenant_id, EntityType.SUPPLIER, supplier_id, pagination)
