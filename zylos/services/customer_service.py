"""
Customer Service - customer use cases

Author: TM3
Date: 2025-10-17
"""
import logging
from decimal import Decimal
from typing import Any, Dict, Optional

from zylos.domain.customer import Customer, CustomerAccount, CustomerCreate, CustomerUpdate
from zylos.domain.enums import EntityType
from zylos.domain.errors import CannotDeleteWithBalance, DuplicateEmail, ResourceNotFound, ValidationFailed
from zylos.domain.ledger import LedgerEntry
from zylos.domain.pagination import PaginatedResponse, PaginationParams
from zylos.domain.specifications import CustomerHasValidContactInfoSpecification
from zylos.repositories.base import CustomerRepository, LedgerEntryRepository
from zylos.services.ledger_service import LedgerService

logger = logging.getLogger(__name__)


class CustomerService:
    """Customer CRUD plus the customer side of the ledger"""

    def __init__(self, customer_repository: CustomerRepository, ledger_repository: LedgerEntryRepository):
        self.customer_repository = customer_repository
        self.ledger = LedgerService(ledger_repository)

    def _require(self, customer_id: str, tenant_id: str) -> Customer:
        customer = self.customer_repository.find_by_id(customer_id, tenant_id)
        if not customer:
            raise ResourceNotFound("Customer", customer_id)
        return customer

    def _check_email_free(self, email: str, tenant_id: str, customer_id: Optional[str] = None) -> None:
        existing = self.customer_repository.find_by_email(email, tenant_id)
        if existing and existing.id != customer_id:
            logger.warning(f"Customer email already in use: {email} (tenant {tenant_id})")
            raise DuplicateEmail("customer", email, existing.id)

    def create_customer(self, tenant_id: str, data: CustomerCreate) -> Customer:
        if data.email:
            self._check_email_free(data.email, tenant_id)

        customer = self.customer_repository.create(tenant_id, data)
        logger.info(f"Customer created: {customer.id} (tenant {tenant_id})")
        return customer

    def update_customer(self, customer_id: str, tenant_id: str, data: CustomerUpdate) -> Customer:
        current = self._require(customer_id, tenant_id)

        if data.email and data.email != current.email:
            self._check_email_free(data.email, tenant_id, customer_id)

        updated = self.customer_repository.update(customer_id, tenant_id, data)
        if not updated:
            raise ResourceNotFound("Customer", customer_id)
        return updated

    def delete_customer(self, customer_id: str, tenant_id: str) -> None:
        self._require(customer_id, tenant_id)

        balance = self.get_customer_balance(customer_id, tenant_id)
        if balance != 0:
            logger.warning(f"Refused to delete customer {customer_id} with balance {balance}")
            raise CannotDeleteWithBalance("customer", customer_id, balance)

        if not self.customer_repository.delete(customer_id, tenant_id):
            raise ResourceNotFound("Customer", customer_id)
        logger.info(f"Customer deleted: {customer_id} (tenant {tenant_id})")

    def get_account(self, customer_id: str, tenant_id: str) -> CustomerAccount:
        customer = self._require(customer_id, tenant_id)
        entries = self.ledger.get_account(tenant_id, EntityType.CUSTOMER, customer_id)
        return CustomerAccount(customer=customer, entries=tuple(entries))

    def get_customer(self, customer_id: str, tenant_id: str, max_days_outstanding: int = 30) -> Dict[str, Any]:
        """Customer with balance, good-standing flag and account summary"""
        account = self.get_account(customer_id, tenant_id)
        last_payment = account.last_payment_date

        return {
            **account.customer.to_dict(),
            "balance": float(account.balance),
            "in_good_standing": account.is_in_good_standing(max_days_outstanding),
            "has_valid_contact_info": CustomerHasValidContactInfoSpecification().is_satisfied_by(account.customer),
            "last_payment_date": last_payment.isoformat() if last_payment else None,
            "summary": account.financial_summary(),
        }

    def list_customers(self, tenant_id: str, pagination: PaginationParams) -> PaginatedResponse[Customer]:
        return self.customer_repository.find_by_tenant_id(tenant_id, pagination)

    def search_customers(self, tenant_id: str, name: str, pagination: PaginationParams) -> PaginatedResponse[Customer]:
        term = (name or "").strip()
        if not term:
            raise ValidationFailed(["Search term is required"])
        return self.customer_repository.search_by_name(tenant_id, term, pagination)

    def get_customer_balance(self, customer_id: str, tenant_id: str) -> Decimal:
        return self.ledger.get_balance(tenant_id, EntityType.CUSTOMER, customer_id)

    def record_payment(self, customer_id: str, tenant_id: str, amount: Any,
                       method: Optional[str] = None, description: Optional[str] = None) -> LedgerEntry:
        """
        Payment on account (not tied to a sale): records a customer debit

        Raises:
            InvalidAmount: amount <= 0
            PaymentExceedsBalance: amount is more than the customer owes
        """
        self._require(customer_id, tenant_id)
        return self.ledger.record_customer_debit(
            tenant_id,
            customer_id,
            amount,
            description=description or f"Payment - {method or 'unspecified'}",
        )

    def get_customer_transactions(self, customer_id: str, tenant_id: str,
                                  pagination: PaginationParams) -> PaginatedResponse[LedgerEntry]:
        self._require(customer_id, tenant_id)
        return self.ledger.get_entries(tenant_id, EntityType.CUSTOMER, customer_id, pagination)
