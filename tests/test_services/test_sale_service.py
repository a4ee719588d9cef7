"""
Unit tests for SaleService

Repositories are MagicMocks; events go to an InMemoryEventPublisher.

Author: TM3
Date: 2025-10-17
"""
from decimal import Decimal
from unittest.mock import MagicMock

import pytest

from zylos.domain.enums import EntityType, LedgerType, PaymentStatus, ProductStatus, SaleStatus
from zylos.domain.errors import (
    InsufficientStock,
    InvalidState,
    PaymentExceedsBalance,
    ResourceNotFound,
    ValidationFailed,
)
from zylos.domain.ledger import LedgerEntry
from zylos.domain.value_objects import Money
from zylos.services.sale_service import SaleService


@pytest.fixture
def product_repository(sample_product):
    repo = MagicMock()
    repo.find_by_ids.return_value = {"p-1": sample_product}
    return repo


@pytest.fixture
def sale_repository(sample_sale):
    repo = MagicMock()
    repo.create_sale.side_effect = lambda sale: sale.model_copy(update={"id": "sale-9"})
    repo.find_by_id.return_value = sample_sale
    repo.update_status.side_effect = lambda sale, previous: sale
    repo.cancel_sale.side_effect = lambda sale, previous, reason=None: sale
    repo.record_payment.side_effect = lambda sale, previous, entry: sale
    return repo


@pytest.fixture
def customer_repository(sample_customer):
    repo = MagicMock()
    repo.find_by_id.return_value = sample_customer
    return repo


@pytest.fixture
def ledger_repository():
    repo = MagicMock()
    repo.find_all_by_entity.return_value = []
    return repo


@pytest.fixture
def service(sale_repository, product_repository, customer_repository, ledger_repository, publisher):
    return SaleService(sale_repository, product_repository, customer_repository, ledger_repository, publisher)


def item(quantity=2, unit_price=120, product_id="p-1"):
    return {"product_id": product_id, "quantity": quantity, "unit_price": unit_price}


class TestCreateSale:
    """Test the create-sale flow"""

    def test_create_sale(self, service, sale_repository, publisher, tenant_id):
        # Act
        sale = service.create_sale(tenant_id, "c-1", [item()])

        # Assert
        assert sale.id == "sale-9"
        assert sale.subtotal == Money(240)
        assert sale.tax == Money("38.40")
        assert sale.total == Money("278.40")
        assert sale.items[0].product_name == "Café de olla 500g"
        assert sale.status == SaleStatus.PENDING
        sale_repository.create_sale.assert_called_once()
        assert [e.event_type for e in publisher.events] == ["SaleCreated"]

    def test_create_sale_with_discount_and_tax_override(self, service, tenant_id):
        sale = service.create_sale(tenant_id, None, [item(1, 100)], tax_rate=0, discount_percentage=10)
        assert sale.discount == Money(10)
        assert sale.total == Money(90)
        assert sale.customer_id is None

    def test_invalid_items_list_every_error(self, service, sale_repository, tenant_id):
        with pytest.raises(ValidationFailed) as exc_info:
            service.create_sale(tenant_id, None, [item(0), item(1, -5)])

        assert exc_info.value.errors == [
            "Item 1: quantity must be greater than 0",
            "Item 2: unit price cannot be negative",
        ]
        sale_repository.create_sale.assert_not_called()

    def test_unknown_product(self, service, tenant_id):
        with pytest.raises(ResourceNotFound):
            service.create_sale(tenant_id, None, [item(product_id="p-404")])

    def test_inactive_product(self, service, product_repository, sample_product, tenant_id):
        product_repository.find_by_ids.return_value = {
            "p-1": sample_product.model_copy(update={"status": ProductStatus.INACTIVE}),
        }
        with pytest.raises(ValidationFailed) as exc_info:
            service.create_sale(tenant_id, None, [item()])
        assert exc_info.value.errors == ["Item 1: product is not active"]

    def test_stock_is_checked_per_product_total(self, service, sale_repository, publisher, tenant_id):
        with pytest.raises(InsufficientStock) as exc_info:
            service.create_sale(tenant_id, None, [item(30), item(21)])

        assert exc_info.value.details["requested"] == 51
        sale_repository.create_sale.assert_not_called()
        assert publisher.events == []

    def test_low_projected_stock_publishes_alert(self, service, publisher, tenant_id):
        service.create_sale(tenant_id, None, [item(45)])

        alerts = publisher.events_of_type("InventoryAlert")
        assert len(alerts) == 1
        assert alerts[0].data["current_stock"] == 5

    def test_unknown_customer(self, service, customer_repository, tenant_id):
        customer_repository.find_by_id.return_value = None
        with pytest.raises(ResourceNotFound):
            service.create_sale(tenant_id, "c-404", [item()])

    def test_credit_limit(self, service, customer_repository, ledger_repository, sample_customer, tenant_id):
        customer_repository.find_by_id.return_value = sample_customer.model_copy(
            update={"credit_limit": Decimal("300")}
        )
        ledger_repository.find_all_by_entity.return_value = [
            LedgerEntry(tenant_id=tenant_id, entity_type=EntityType.CUSTOMER, entity_id="c-1",
                        type=LedgerType.CREDIT, amount=100),
        ]

        with pytest.raises(InvalidState):
            service.create_sale(tenant_id, "c-1", [item()])


class TestSaleLifecycle:

    def test_complete(self, service, publisher, tenant_id):
        sale = service.complete_sale("sale-1", tenant_id)
        assert sale.is_completed()
        assert publisher.events[0].event_type == "SaleCompleted"

    def test_cancel(self, service, sale_repository, publisher, tenant_id):
        sale = service.cancel_sale("sale-1", tenant_id, reason="Cliente desistió")

        assert sale.is_cancelled()
        saved, previous, reason = sale_repository.cancel_sale.call_args.args
        assert reason == "Cliente desistió"
        assert previous.is_pending()
        assert publisher.events[0].data["reason"] == "Cliente desistió"

    def test_cancel_paid_sale(self, service, sale_repository, sample_sale, tenant_id):
        sale_repository.find_by_id.return_value = sample_sale.record_payment(Money(29))
        with pytest.raises(InvalidState):
            service.cancel_sale("sale-1", tenant_id)
        sale_repository.cancel_sale.assert_not_called()

    def test_missing_sale(self, service, sale_repository, tenant_id):
        sale_repository.find_by_id.return_value = None
        with pytest.raises(ResourceNotFound):
            service.complete_sale("nope", tenant_id)


class TestSalePayments:

    def test_partial_payment_records_customer_debit(self, service, sale_repository, publisher, tenant_id):
        sale = service.record_payment("sale-1", tenant_id, 10, method="cash")

        assert sale.payment_status == PaymentStatus.PARTIAL
        saved_sale, previous, entry = sale_repository.record_payment.call_args.args
        assert previous.amount_paid == Money(0)
        assert saved_sale.amount_paid == Money(10)
        assert entry.type == LedgerType.DEBIT
        assert entry.entity_id == "c-1"
        assert entry.amount == Money(10)
        assert entry.reference_id == "sale-1"
        assert publisher.events[0].event_type == "PaymentReceived"

    def test_full_payment(self, service, tenant_id):
        assert service.record_payment("sale-1", tenant_id, "29.00").is_paid()

    def test_payment_over_balance_due(self, service, sale_repository, tenant_id):
        with pytest.raises(PaymentExceedsBalance):
            service.record_payment("sale-1", tenant_id, 30)
        sale_repository.record_payment.assert_not_called()

    def test_walk_in_sale_has_no_ledger_entry(self, service, sale_repository, sample_sale, tenant_id):
        sale_repository.find_by_id.return_value = sample_sale.model_copy(update={"customer_id": None})

        service.record_payment("sale-1", tenant_id, 5)

        assert sale_repository.record_payment.call_args.args[2] is None


class TestSalesMetrics:

    def test_default_period(self, service, sale_repository, sample_sale, tenant_id):
        sale_repository.find_between.return_value = [sample_sale]

        metrics = service.sales_metrics(tenant_id)

        start, end = sale_repository.find_between.call_args.args[1:]
        assert (end - start).days == 30
        assert metrics["total_sales"] == 1
        assert len(metrics["daily_breakdown"]) == 1

    def test_concurrent_change_is_reported(self, service, sale_repository, publisher, tenant_id):
        sale_repository.record_payment.side_effect = InvalidState("Sale sale-1 was modified by another request")

        with pytest.raises(InvalidState):
            service.record_payment("sale-1", tenant_id, 10)

        assert publisher.events == []
