"""
Sale Service - sale use cases

create_sale validates the request, checks stock and credit, prices the sale
and hands it to the repository, which writes the sale, its items, the
stock-out movements and the customer ledger credit in one transaction.
Events are published only after the write succeeds.

Author: TM3
Date: 2025-10-17
"""
import logging
from collections import defaultdict
from datetime import datetime, timedelta
from decimal import Decimal
from typing import Any, Dict, List, Optional, Sequence, Union

from zylos.domain.clock import ensure_utc, utcnow
from zylos.domain.customer import CustomerAccount
from zylos.domain.enums import EntityType, LedgerType, SaleStatus
from zylos.domain.errors import (
    InsufficientStock,
    InvalidState,
    PaymentExceedsBalance,
    ResourceNotFound,
    ValidationFailed,
)
from zylos.domain.events import (
    EventPublisher,
    inventory_alert,
    payment_received,
    sale_cancelled,
    sale_completed,
    sale_created,
)
from zylos.domain.ledger import LedgerEntry
from zylos.domain.pagination import PaginatedResponse, PaginationParams
from zylos.domain.sale import Sale, SaleItemInput
from zylos.domain.specifications import ProductHasSufficientStockSpecification, ProductIsActiveSpecification
from zylos.domain.value_objects import Money, SaleLineItem, to_decimal
from zylos.repositories.base import (
    CustomerRepository,
    LedgerEntryRepository,
    ProductRepository,
    SaleRepository,
)
from zylos.services.pricing_service import PricingService
from zylos.services.sales_service import SalesService

logger = logging.getLogger(__name__)


class SaleService:
    """Create, complete, cancel and collect payment on sales"""

    def __init__(self, sale_repository: SaleRepository, product_repository: ProductRepository,
                 customer_repository: CustomerRepository, ledger_repository: LedgerEntryRepository,
                 publisher: EventPublisher, default_tax_rate: Union[float, Decimal] = Decimal("0.16")):
        self.sale_repository = sale_repository
        self.product_repository = product_repository
        self.customer_repository = customer_repository
        self.ledger_repository = ledger_repository
        self.publisher = publisher
        self.default_tax_rate = to_decimal(default_tax_rate)

    def _require(self, sale_id: str, tenant_id: str) -> Sale:
        sale = self.sale_repository.find_by_id(sale_id, tenant_id)
        if not sale:
            raise ResourceNotFound("Sale", sale_id)
        return sale

    def _check_credit(self, tenant_id: str, customer_id: str, total: Money) -> None:
        customer = self.customer_repository.find_by_id(customer_id, tenant_id)
        if not customer:
            raise ResourceNotFound("Customer", customer_id)
        if customer.credit_limit is None:
            return

        entries = self.ledger_repository.find_all_by_entity(EntityType.CUSTOMER, customer_id, tenant_id)
        account = CustomerAccount(customer=customer, entries=tuple(entries))
        if total.is_positive() and not account.can_add_credit(total):
            logger.warning(f"Sale of {total} exceeds credit limit of customer {customer_id}")
            raise InvalidState(
                f"Sale total {total} exceeds the credit limit of customer {customer_id}",
                {"balance": float(account.balance), "credit_limit": float(customer.credit_limit)}
            )

    def create_sale(self, tenant_id: str, customer_id: Optional[str], items: Sequence[Any],
                    tax_rate: Optional[Union[float, Decimal]] = None,
                    discount_percentage: Union[float, Decimal] = 0,
                    notes: Optional[str] = None) -> Sale:
        """
        Raises:
            ValidationFailed: invalid items (all problems listed) or inactive products
            ResourceNotFound: unknown product or customer
            InsufficientStock: not enough stock for an item
            InvalidState: the sale would take the customer over their credit limit
        """
        validation = SalesService.validate_sale(list(items))
        if not validation["is_valid"]:
            logger.warning(f"Sale rejected (tenant {tenant_id}): {validation['errors']}")
            raise ValidationFailed(validation["errors"], "Sale validation failed")

        requests = [item if isinstance(item, SaleItemInput) else SaleItemInput.model_validate(item)
                    for item in items]
        products = self.product_repository.find_by_ids([item.product_id for item in requests], tenant_id)

        requested: Dict[str, int] = defaultdict(int)
        errors: List[str] = []
        for index, item in enumerate(requests, start=1):
            product = products.get(item.product_id)
            if not product:
                raise ResourceNotFound("Product", item.product_id)
            if not ProductIsActiveSpecification().is_satisfied_by(product):
                errors.append(f"Item {index}: product is not active")
            requested[item.product_id] += item.quantity
        if errors:
            raise ValidationFailed(errors, "Sale validation failed")

        sufficient_stock = ProductHasSufficientStockSpecification()
        for product_id, quantity in requested.items():
            product = products[product_id]
            candidate = {"current_stock": product.current_stock, "required_quantity": quantity}
            if not sufficient_stock.is_satisfied_by(candidate):
                logger.warning(f"Insufficient stock for {product_id}: {product.current_stock} < {quantity}")
                raise InsufficientStock(product_id, quantity, product.current_stock)

        line_items = [
            SaleLineItem(
                product_id=item.product_id,
                product_name=item.product_name or products[item.product_id].name,
                quantity=item.quantity,
                unit_price=item.unit_price,
            )
            for item in requests
        ]
        rate = self.default_tax_rate if tax_rate is None else to_decimal(tax_rate)
        pricing = PricingService.price_sale(line_items, rate, discount_percentage)

        if customer_id:
            self._check_credit(tenant_id, customer_id, pricing["total"])

        sale = self.sale_repository.create_sale(Sale(
            tenant_id=tenant_id,
            customer_id=customer_id,
            items=tuple(line_items),
            subtotal=pricing["subtotal"],
            tax=pricing["tax"],
            discount=pricing["discount"],
            total=pricing["total"],
            notes=notes,
        ))
        logger.info(f"Sale created: {sale.id} total {sale.total} (tenant {tenant_id})")

        self.publisher.publish(sale_created(sale))
        for product_id, quantity in requested.items():
            inventory = products[product_id].to_inventory()
            remaining = inventory.get_total_outgoing(quantity)
            inventory = inventory.model_copy(update={"current_stock": remaining})
            if inventory.has_low_stock():
                self.publisher.publish(inventory_alert(tenant_id, inventory))

        return sale

    def complete_sale(self, sale_id: str, tenant_id: str) -> Sale:
        current = self._require(sale_id, tenant_id)
        sale = self.sale_repository.update_status(current.mark_completed(), current)
        logger.info(f"Sale completed: {sale_id}")
        self.publisher.publish(sale_completed(sale))
        return sale

    def cancel_sale(self, sale_id: str, tenant_id: str, reason: Optional[str] = None) -> Sale:
        """
        Cancel and restock. The customer is debited the sale total.

        Raises:
            InvalidState: the sale is already cancelled or already paid, or another
                request changed it first
        """
        current = self._require(sale_id, tenant_id)
        sale = self.sale_repository.cancel_sale(current.mark_cancelled(), current, reason)
        logger.info(f"Sale cancelled: {sale_id} ({reason or 'no reason given'})")
        self.publisher.publish(sale_cancelled(sale, reason))
        return sale

    def record_payment(self, sale_id: str, tenant_id: str, amount: Any,
                       method: Optional[str] = None) -> Sale:
        """
        Raises:
            InvalidAmount: amount <= 0
            InvalidState: the sale is paid or cancelled
            PaymentExceedsBalance: amount is more than the balance due
        """
        money = amount if isinstance(amount, Money) else Money(amount)
        sale = self._require(sale_id, tenant_id)

        if sale.requires_payment() and money > sale.balance_due:
            raise PaymentExceedsBalance(
                f"Payment amount ({money}) exceeds balance due ({sale.balance_due})",
                {"amount": float(money.amount), "balance_due": float(sale.balance_due.amount)}
            )
        updated = sale.record_payment(money)

        entry = None
        if sale.customer_id:
            entry = LedgerEntry(
                tenant_id=tenant_id,
                entity_type=EntityType.CUSTOMER,
                entity_id=sale.customer_id,
                type=LedgerType.DEBIT,
                amount=money,
                description=f"Payment for sale {sale_id} - {method or 'unspecified'}",
                reference_id=sale_id,
            )

        updated = self.sale_repository.record_payment(updated, sale, entry)
        logger.info(f"Payment of {money} on sale {sale_id}: {updated.payment_status.value}")
        self.publisher.publish(payment_received(updated, money, method))
        return updated

    def get_sale(self, sale_id: str, tenant_id: str) -> Sale:
        return self._require(sale_id, tenant_id)

    def list_sales(self, tenant_id: str, pagination: PaginationParams, status: Optional[SaleStatus] = None,
                   customer_id: Optional[str] = None) -> PaginatedResponse[Sale]:
        return self.sale_repository.find_all(tenant_id, pagination, status, customer_id)

    def sales_metrics(self, tenant_id: str, start_date: Optional[datetime] = None,
                      end_date: Optional[datetime] = None) -> Dict[str, Any]:
        """Metrics and daily breakdown for a period (default: last 30 days)"""
        end = ensure_utc(end_date) if end_date else utcnow()
        start = ensure_utc(start_date) if start_date else end - timedelta(days=30)

        sales = self.sale_repository.find_between(tenant_id, start, end)
        metrics = SalesService.calculate_sales_metrics(sales, start, end)
        metrics["daily_breakdown"] = SalesService.daily_breakdown(sales)
        return metrics
