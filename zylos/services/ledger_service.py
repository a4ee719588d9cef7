"""
Ledger Service - debits and credits against customers and suppliers

Balance convention:
    customer: credit raises what the customer owes us, debit (payment) lowers it
    supplier: debit raises what we owe the supplier, credit (payment) lowers it

Author: TM3
Date: 2025-10-17
"""
import logging
from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Dict, Iterable, List, Optional, Union

from zylos.domain.enums import EntityType, LedgerType
from zylos.domain.errors import InvalidAmount, PaymentExceedsBalance
from zylos.domain.ledger import LedgerEntry, calculate_balance
from zylos.domain.pagination import PaginatedResponse, PaginationParams
from zylos.domain.value_objects import Money, to_decimal
from zylos.repositories.base import LedgerEntryRepository

logger = logging.getLogger(__name__)

Amount = Union[Money, int, float, Decimal, str]


def _positive_money(amount: Amount) -> Money:
    money = amount if isinstance(amount, Money) else Money(amount)
    if not money.is_positive():
        raise InvalidAmount("Amount must be greater than 0")
    return money


class LedgerService:
    """Records ledger entries and reports on them"""

    def __init__(self, ledger_repository: LedgerEntryRepository):
        self.ledger_repository = ledger_repository

    def _record(self, tenant_id: str, entity_type: EntityType, entity_id: str, entry_type: LedgerType,
                amount: Money, description: Optional[str], reference_id: Optional[str]) -> LedgerEntry:
        entry = LedgerEntry(
            tenant_id=tenant_id,
            entity_type=entity_type,
            entity_id=entity_id,
            type=entry_type,
            amount=amount,
            description=description,
            reference_id=reference_id,
        )
        created = self.ledger_repository.create(entry)
        logger.info(
            f"Ledger {entry_type.value} of {amount} recorded for {entity_type.value} {entity_id} "
            f"(tenant {tenant_id})"
        )
        return created

    def _check_balance_covers(self, tenant_id: str, entity_type: EntityType, entity_id: str,
                              amount: Money) -> None:
        balance = self.get_balance(tenant_id, entity_type, entity_id)
        if amount.amount > balance:
            logger.warning(
                f"Rejected {amount} against {entity_type.value} {entity_id}: balance is {balance}"
            )
            raise PaymentExceedsBalance(
                f"Amount ({amount}) exceeds outstanding balance ({Money(max(balance, 0))})",
                {"amount": float(amount.amount), "balance": float(balance)}
            )

    # Customers
    def record_customer_credit(self, tenant_id: str, customer_id: str, amount: Amount,
                               description: Optional[str] = None,
                               reference_id: Optional[str] = None) -> LedgerEntry:
        """Charge the customer (their balance goes up)"""
        money = _positive_money(amount)
        return self._record(tenant_id, EntityType.CUSTOMER, customer_id, LedgerType.CREDIT,
                            money, description, reference_id)

    def record_customer_debit(self, tenant_id: str, customer_id: str, amount: Amount,
                              description: Optional[str] = None,
                              reference_id: Optional[str] = None) -> LedgerEntry:
        """
        Register a customer payment (their balance goes down)

        Raises:
            InvalidAmount: amount <= 0
            PaymentExceedsBalance: amount is more than the customer owes
        """
        money = _positive_money(amount)
        self._check_balance_covers(tenant_id, EntityType.CUSTOMER, customer_id, money)
        return self._record(tenant_id, EntityType.CUSTOMER, customer_id, LedgerType.DEBIT,
                            money, description, reference_id)

    # Suppliers
    def record_supplier_debit(self, tenant_id: str, supplier_id: str, amount: Amount,
                              description: Optional[str] = None,
                              reference_id: Optional[str] = None) -> LedgerEntry:
        """Register a purchase from the supplier (what we owe goes up)"""
        money = _positive_money(amount)
        return self._record(tenant_id, EntityType.SUPPLIER, supplier_id, LedgerType.DEBIT,
                            money, description, reference_id)

    def record_supplier_credit(self, tenant_id: str, supplier_id: str, amount: Amount,
                               description: Optional[str] = None,
                               reference_id: Optional[str] = None) -> LedgerEntry:
        """
        Register a payment to the supplier (what we owe goes down)

        Raises:
            InvalidAmount: amount <= 0
            PaymentExceedsBalance: amount is more than we owe
        """
        money = _positive_money(amount)
        self._check_balance_covers(tenant_id, EntityType.SUPPLIER, supplier_id, money)
        return self._record(tenant_id, EntityType.SUPPLIER, supplier_id, LedgerType.CREDIT,
                            money, description, reference_id)

    # Queries
    def get_balance(self, tenant_id: str, entity_type: EntityType, entity_id: str) -> Decimal:
        return self.ledger_repository.calculate_entity_balance(EntityType(entity_type), entity_id, tenant_id)

    def get_entries(self, tenant_id: str, entity_type: EntityType, entity_id: str,
                    pagination: PaginationParams) -> PaginatedResponse[LedgerEntry]:
        return self.ledger_repository.find_by_entity(EntityType(entity_type), entity_id, tenant_id, pagination)

    def get_account(self, tenant_id: str, entity_type: EntityType, entity_id: str) -> List[LedgerEntry]:
        return self.ledger_repository.find_all_by_entity(EntityType(entity_type), entity_id, tenant_id)

    @staticmethod
    def calculate_balance(entries: Iterable[LedgerEntry]) -> Decimal:
        return calculate_balance(entries)

    @staticmethod
    def generate_financial_report(revenue: Iterable[Amount], expenses: Iterable[Amount]) -> Dict[str, Any]:
        """
        Net income and profit margin from revenue and expense amounts

        profit_margin is a percentage of revenue (0 when there is no revenue)
        """
        total_revenue = sum((to_decimal(a.amount if isinstance(a, Money) else a) for a in revenue), Decimal("0"))
        total_expenses = sum((to_decimal(a.amount if isinstance(a, Money) else a) for a in expenses), Decimal("0"))
        net_income = total_revenue - total_expenses

        profit_margin = Decimal("0")
        if total_revenue > 0:
            profit_margin = (net_income / total_revenue * 100).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)

        return {
            "total_revenue": float(total_revenue),
            "total_expenses": float(total_expenses),
            "net_income": float(net_income),
            "profit_margin": float(profit_margin),
        }

    def period_report(self, tenant_id: str, start_date: Optional[datetime] = None,
                      end_date: Optional[datetime] = None) -> Dict[str, Any]:
        """
        Financial report for a period: customer charges are revenue, supplier
        purchases are expenses
        """
        revenue = self.ledger_repository.find_for_period(
            tenant_id, EntityType.CUSTOMER, LedgerType.CREDIT, start_date, end_date
        )
        expenses = self.ledger_repository.find_for_period(
            tenant_id, EntityType.SUPPLIER, LedgerType.DEBIT, start_date, end_date
        )

        report = self.generate_financial_report(
            [entry.amount for entry in revenue],
            [entry.amount for entry in expenses],
        )
        report["period"] = {
            "start": start_date.isoformat() if start_date else None,
            "end": end_date.isoformat() if end_date else None,
        }
        return report
