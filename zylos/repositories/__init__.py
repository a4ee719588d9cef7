"""
Repository Layer - Data Access

This layer handles all database queries and returns domain models.
Repositories abstract away SQL details from business logic.

Author: TM3
Date: 2025-10-17
"""
from zylos.repositories.customer_repository import PostgresCustomerRepository
from zylos.repositories.inventory_repository import PostgresInventoryMovementRepository
from zylos.repositories.ledger_repository import PostgresLedgerEntryRepository
from zylos.repositories.product_repository import PostgresProductRepository
from zylos.repositories.sale_repository import PostgresSaleRepository
from zylos.repositories.supplier_repository import PostgresSupplierRepository
from zylos.repositories.tenant_repository import SupabaseTenantRepository

__all__ = [
    'PostgresCustomerRepository',
    'PostgresInventoryMovementRepository',
    'PostgresLedgerEntryRepository',
    'PostgresProductRepository',
    'PostgresSaleRepository',
    'PostgresSupplierRepository',
    'SupabaseTenantRepository'
]
