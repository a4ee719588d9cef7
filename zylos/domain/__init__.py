"""
Domain Layer - Business Entities

Value objects, aggregates, specifications and events for the Zylos
point-of-sale backend. These models enforce the business rules; services
and repositories only orchestrate and persist them.

Author: TM3
Date: 2025-10-17
"""
from zylos.domain.customer import Customer, CustomerAccount
from zylos.domain.inventory import InventoryMovement, ProductInventory
from zylos.domain.ledger import LedgerEntry
from zylos.domain.pagination import PaginatedResponse, PaginationParams
from zylos.domain.product import Product
from zylos.domain.sale import Sale
from zylos.domain.supplier import Supplier
from zylos.domain.tenant import Tenant
from zylos.domain.value_objects import Email, Money, SaleLineItem, Subdomain

__all__ = [
    'Customer', 'CustomerAccount', 'InventoryMovement', 'ProductInventory',
    'LedgerEntry', 'PaginatedResponse', 'PaginationParams', 'Product', 'Sale',
    'Supplier', 'Tenant', 'Email', 'Money', 'SaleLineItem', 'Subdomain',
]
