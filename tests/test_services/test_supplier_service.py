"""
Unit tests for SupplierService

Author: TM3
Date: 2025-10-17
"""
from decimal import Decimal
from unittest.mock import MagicMock

import pytest

from zylos.domain.enums import LedgerType
from zylos.domain.errors import (
    CannotDeleteWithBalance,
    DuplicateEmail,
    InvalidAmount,
    PaymentExceedsBalance,
    ResourceNotFound,
    ValidationFailed,
)
from zylos.domain.pagination import PaginatedResponse, PaginationParams
from zylos.domain.supplier import Supplier, SupplierCreate, SupplierUpdate
from zylos.domain.value_objects import Money
from zylos.services.supplier_service import SupplierService, account_status


@pytest.fixture
def supplier_repository(sample_supplier):
    repo = MagicMock()
    repo.find_by_id.return_value = sample_supplier
    repo.find_by_email.return_value = None
    return repo


@pytest.fixture
def ledger_repository():
    repo = MagicMock()
    repo.calculate_entity_balance.return_value = Decimal("0")
    repo.create.side_effect = lambda entry: entry
    return repo


@pytest.fixture
def service(supplier_repository, ledger_repository):
    return SupplierService(supplier_repository, ledger_repository)


class TestAccountStatus:

    @pytest.mark.parametrize("balance,status", [
        (Decimal("0"), "settled"),
        (Decimal("-5"), "in_credit"),
        (Decimal("30"), "pending_up_to_30"),
        (Decimal("45"), "pending_31_60"),
        (Decimal("90"), "pending_61_90"),
        (Decimal("90.01"), "pending_over_90"),
    ])
    def test_bands(self, balance, status):
        assert account_status(balance) == status


class TestSupplierCrud:

    def test_create(self, service, supplier_repository, sample_supplier, tenant_id):
        supplier_repository.create.return_value = sample_supplier
        data = SupplierCreate(name="Distribuidora Norte", email=" Ventas@Norte.Example.com ")

        result = service.create_supplier(tenant_id, data)

        assert result == sample_supplier
        supplier_repository.find_by_email.assert_called_once_with("ventas@norte.example.com", tenant_id)

    def test_create_duplicate_email(self, service, supplier_repository, sample_supplier, tenant_id):
        supplier_repository.find_by_email.return_value = sample_supplier

        with pytest.raises(DuplicateEmail) as exc_info:
            service.create_supplier(tenant_id, SupplierCreate(name="Otro", email=sample_supplier.email))

        assert exc_info.value.details["existing_id"] == "s-1"
        supplier_repository.create.assert_not_called()

    def test_update_unknown_supplier(self, service, supplier_repository, tenant_id):
        supplier_repository.find_by_id.return_value = None
        with pytest.raises(ResourceNotFound):
            service.update_supplier("missing", tenant_id, SupplierUpdate(name="X"))

    def test_update_email_taken_by_other(self, service, supplier_repository, sample_supplier, tenant_id):
        supplier_repository.find_by_email.return_value = sample_supplier.model_copy(update={"id": "s-2"})
        with pytest.raises(DuplicateEmail):
            service.update_supplier("s-1", tenant_id, SupplierUpdate(email="otro@norte.example.com"))

    def test_delete_with_balance(self, service, ledger_repository, supplier_repository, tenant_id):
        ledger_repository.calculate_entity_balance.return_value = Decimal("12.50")
        with pytest.raises(CannotDeleteWithBalance):
            service.delete_supplier("s-1", tenant_id)
        supplier_repository.delete.assert_not_called()

    def test_delete_settled(self, service, supplier_repository, tenant_id):
        supplier_repository.delete.return_value = True
        service.delete_supplier("s-1", tenant_id)
        supplier_repository.delete.assert_called_once_with("s-1", tenant_id)

    def test_get_supplier_includes_balance(self, service, ledger_repository, tenant_id):
        ledger_repository.calculate_entity_balance.return_value = Decimal("45")

        result = service.get_supplier("s-1", tenant_id)

        assert result["name"] == "Distribuidora Norte"
        assert result["balance"] == 45.0
        assert result["balance_to_pay"] == 45.0
        assert result["account_status"] == "pending_31_60"

    def test_blank_search_raises(self, service, tenant_id):
        with pytest.raises(ValidationFailed):
            service.search_suppliers(tenant_id, "  ", PaginationParams())


class TestSuppliersWithBalance:

    def test_each_supplier_gets_its_balance(self, service, supplier_repository, ledger_repository,
                                            sample_supplier, tenant_id):
        # Arrange
        other = Supplier(id="s-2", tenant_id=tenant_id, name="Lácteos del Sur")
        supplier_repository.find_by_tenant_id.return_value = PaginatedResponse.build(
            [sample_supplier, other], 12, PaginationParams(page=2, limit=2)
        )
        balances = {"s-1": Decimal("45.00"), "s-2": Decimal("-10.00")}
        ledger_repository.calculate_entity_balance.side_effect = (
            lambda entity_type, entity_id, tenant: balances[entity_id]
        )

        # Act
        page = service.list_suppliers_with_balance(tenant_id, PaginationParams(page=2, limit=2))

        # Assert
        first, second = page.data
        assert first["name"] == "Distribuidora Norte"
        assert first["balance"] == 45.0
        assert first["balance_to_pay"] == 45.0
        assert first["account_status"] == "pending_31_60"
        assert second["balance"] == -10.0
        assert second["balance_to_pay"] == 0.0
        assert second["account_status"] == "in_credit"
        assert page.pagination.total == 12
        assert page.to_dict()["data"][0]["id"] == "s-1"

    def test_name_filter_uses_search(self, service, supplier_repository, tenant_id):
        supplier_repository.search_by_name.return_value = PaginatedResponse.build([], 0)

        page = service.list_suppliers_with_balance(tenant_id, PaginationParams(), name=" norte ")

        assert page.data == []
        assert supplier_repository.search_by_name.call_args[0][1] == "norte"
        supplier_repository.find_by_tenant_id.assert_not_called()


class TestSupplierPayments:

    def test_payment(self, service, ledger_repository, tenant_id):
        ledger_repository.calculate_entity_balance.return_value = Decimal("200")

        entry = service.process_payment("s-1", tenant_id, 150, method="transfer")

        assert entry.type == LedgerType.CREDIT
        assert entry.amount == Money(150)
        assert entry.description == "Payment - transfer"

    def test_payment_without_balance(self, service, tenant_id):
        with pytest.raises(PaymentExceedsBalance, match="no outstanding balance"):
            service.process_payment("s-1", tenant_id, 10)

    def test_payment_over_balance(self, service, ledger_repository, tenant_id):
        ledger_repository.calculate_entity_balance.return_value = Decimal("5")
        with pytest.raises(PaymentExceedsBalance):
            service.process_payment("s-1", tenant_id, 10)

    def test_non_positive_payment(self, service, tenant_id):
        with pytest.raises(InvalidAmount):
            service.process_payment("s-1", tenant_id, 0)
