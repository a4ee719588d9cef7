"""
Service wiring for the API routers

Each router asks for its service through one of these dependencies, so
tests can swap in fakes with app.dependency_overrides.
"""
from functools import lru_cache

from fastapi import Query

from zylos.core.config import settings
from zylos.domain.events import EventPublisher, InMemoryEventPublisher, NullEventPublisher
from zylos.domain.pagination import PaginationParams
from zylos.repositories import (
    PostgresCustomerRepository,
    PostgresInventoryMovementRepository,
    PostgresLedgerEntryRepository,
    PostgresProductRepository,
    PostgresSaleRepository,
    PostgresSupplierRepository,
    SupabaseTenantRepository,
)
from zylos.services.customer_service import CustomerService
from zylos.services.inventory_service import InventoryService
from zylos.services.ledger_service import LedgerService
from zylos.services.product_service import ProductService
from zylos.services.sale_service import SaleService
from zylos.services.supplier_service import SupplierService
from zylos.services.tenant_service import TenantService

PUBLISHERS = {
    "memory": lambda: InMemoryEventPublisher(max_events=settings.EVENT_LOG_SIZE),
    "none": NullEventPublisher,
}


@lru_cache()
def get_event_publisher() -> EventPublisher:
    """One publisher per process, chosen by EVENT_PUBLISHER"""
    build_publisher = PUBLISHERS.get(settings.EVENT_PUBLISHER.lower())
    if build_publisher is None:
        raise ValueError(f"Unknown EVENT_PUBLISHER: {settings.EVENT_PUBLISHER}")
    return build_publisher()


def get_pagination(
    page: int = Query(1, ge=1, description="Page number"),
    limit: int = Query(20, ge=1, le=100, description="Items per page")
) -> PaginationParams:
    return PaginationParams(page=page, limit=limit)


def get_supplier_service() -> SupplierService:
    return SupplierService(PostgresSupplierRepository(), PostgresLedgerEntryRepository())


def get_customer_service() -> CustomerService:
    return CustomerService(PostgresCustomerRepository(), PostgresLedgerEntryRepository())


def get_ledger_service() -> LedgerService:
    return LedgerService(PostgresLedgerEntryRepository())


def get_product_service() -> ProductService:
    return ProductService(PostgresProductRepository(), settings.LOW_STOCK_THRESHOLD)


def get_inventory_service() -> InventoryService:
    return InventoryService(
        PostgresProductRepository(),
        PostgresInventoryMovementRepository(),
        get_event_publisher()
    )


def get_sale_service() -> SaleService:
    return SaleService(
        PostgresSaleRepository(),
        PostgresProductRepository(),
        PostgresCustomerRepository(),
        PostgresLedgerEntryRepository(),
        get_event_publisher(),
        default_tax_rate=settings.DEFAULT_TAX_RATE
    )


def get_tenant_service() -> TenantService:
    return TenantService(SupabaseTenantRepository(), settings.ROOT_DOMAIN)
