"""
Repository interfaces

Services depend on these abstract classes, never on psycopg2 or Supabase
directly. Every query is scoped by tenant_id.

Author: TM3
Date: 2025-10-17
"""
from abc import ABC, abstractmethod
from datetime import datetime
from decimal import Decimal
from typing import Dict, List, Optional, Sequence

from zylos.domain.customer import Customer, CustomerCreate, CustomerUpdate
from zylos.domain.enums import EntityType, LedgerType, SaleStatus
from zylos.domain.inventory import InventoryMovement
from zylos.domain.ledger import LedgerEntry
from zylos.domain.pagination import PaginatedResponse, PaginationParams
from zylos.domain.product import Product, ProductCreate, ProductUpdate
from zylos.domain.sale import Sale
from zylos.domain.supplier import Supplier, SupplierCreate, SupplierUpdate
from zylos.domain.tenant import Tenant


class SupplierRepository(ABC):

    @abstractmethod
    def find_by_email(self, email: str, tenant_id: str) -> Optional[Supplier]:
        pass

    @abstractmethod
    def find_by_id(self, supplier_id: str, tenant_id: str) -> Optional[Supplier]:
        pass

    @abstractmethod
    def create(self, tenant_id: str, data: SupplierCreate) -> Supplier:
        """Insert a supplier. Raises DuplicateEmail on a unique violation."""
        pass

    @abstractmethod
    def update(self, supplier_id: str, tenant_id: str, data: SupplierUpdate) -> Optional[Supplier]:
        """Apply the fields set in `data`. Returns None when the supplier does not exist."""
        pass

    @abstractmethod
    def delete(self, supplier_id: str, tenant_id: str) -> bool:
        pass

    @abstractmethod
    def find_by_tenant_id(self, tenant_id: str, pagination: PaginationParams) -> PaginatedResponse[Supplier]:
        pass

    @abstractmethod
    def search_by_name(self, tenant_id: str, name: str, pagination: PaginationParams) -> PaginatedResponse[Supplier]:
        pass


class CustomerRepository(ABC):

    @abstractmethod
    def find_by_email(self, email: str, tenant_id: str) -> Optional[Customer]:
        pass

    @abstractmethod
    def find_by_id(self, customer_id: str, tenant_id: str) -> Optional[Customer]:
        pass

    @abstractmethod
    def create(self, tenant_id: str, data: CustomerCreate) -> Customer:
        pass

    @abstractmethod
    def update(self, customer_id: str, tenant_id: str, data: CustomerUpdate) -> Optional[Customer]:
        pass

    @abstractmethod
    def delete(self, customer_id: str, tenant_id: str) -> bool:
        pass

    @abstractmethod
    def find_by_tenant_id(self, tenant_id: str, pagination: PaginationParams) -> PaginatedResponse[Customer]:
        pass

    @abstractmethod
    def search_by_name(self, tenant_id: str, name: str, pagination: PaginationParams) -> PaginatedResponse[Customer]:
        pass


class LedgerEntryRepository(ABC):

    @abstractmethod
    def create(self, entry: LedgerEntry) -> LedgerEntry:
        pass

    @abstractmethod
    def calculate_entity_balance(self, entity_type: EntityType, entity_id: str, tenant_id: str) -> Decimal:
        """Signed balance of one customer or supplier (see zylos.domain.ledger)"""
        pass

    @abstractmethod
    def find_by_entity(self, entity_type: EntityType, entity_id: str, tenant_id: str,
                       pagination: PaginationParams) -> PaginatedResponse[LedgerEntry]:
        pass

    @abstractmethod
    def find_all_by_entity(self, entity_type: EntityType, entity_id: str, tenant_id: str) -> List[LedgerEntry]:
        pass

    @abstractmethod
    def find_for_period(self, tenant_id: str, entity_type: Optional[EntityType] = None,
                        entry_type: Optional[LedgerType] = None,
                        start_date: Optional[datetime] = None,
                        end_date: Optional[datetime] = None,
                        entity_id: Optional[str] = None) -> List[LedgerEntry]:
        pass


class TenantRepository(ABC):

    @abstractmethod
    def create(self, tenant: Tenant) -> Tenant:
        pass

    @abstractmethod
    def find_by_id(self, tenant_id: str) -> Optional[Tenant]:
        pass

    @abstractmethod
    def find_by_subdomain(self, subdomain: str) -> Optional[Tenant]:
        pass

    @abstractmethod
    def update(self, tenant_id: str, fields: Dict) -> Optional[Tenant]:
        pass

    @abstractmethod
    def activate(self, tenant_id: str) -> Optional[Tenant]:
        pass

    @abstractmethod
    def deactivate(self, tenant_id: str) -> Optional[Tenant]:
        pass

    @abstractmethod
    def find_all(self, pagination: PaginationParams) -> PaginatedResponse[Tenant]:
        pass


class ProductRepository(ABC):

    @abstractmethod
    def find_by_id(self, product_id: str, tenant_id: str) -> Optional[Product]:
        pass

    @abstractmethod
    def find_by_sku(self, sku: str, tenant_id: str) -> Optional[Product]:
        pass

    @abstractmethod
    def find_by_ids(self, product_ids: Sequence[str], tenant_id: str) -> Dict[str, Product]:
        pass

    @abstractmethod
    def find_all(self, tenant_id: str, pagination: PaginationParams, search: Optional[str] = None,
                 low_stock_only: bool = False) -> PaginatedResponse[Product]:
        pass

    @abstractmethod
    def find_low_stock(self, tenant_id: str) -> List[Product]:
        pass

    @abstractmethod
    def create(self, tenant_id: str, data: ProductCreate) -> Product:
        pass

    @abstractmethod
    def update(self, product_id: str, tenant_id: str, data: ProductUpdate) -> Optional[Product]:
        pass


class InventoryMovementRepository(ABC):

    @abstractmethod
    def record(self, movement: InventoryMovement, guard_stock: bool = False) -> int:
        """
        Insert the movement and apply it to products.current_stock in one
        transaction. Returns the new stock level.
        """
        pass

    @abstractmethod
    def find_by_product(self, product_id: str, tenant_id: str,
                        since: Optional[datetime] = None) -> List[InventoryMovement]:
        pass

    @abstractmethod
    def find_by_tenant(self, tenant_id: str, pagination: PaginationParams,
                       product_id: Optional[str] = None) -> PaginatedResponse[InventoryMovement]:
        pass


class SaleRepository(ABC):

    @abstractmethod
    def create_sale(self, sale: Sale) -> Sale:
        """
        Persist a new sale atomically: the sale row, its items, one stock-out
        movement per item and, when the sale has a customer, the customer
        ledger credit. Nothing is written if any step fails.
        """
        pass

    @abstractmethod
    def find_by_id(self, sale_id: str, tenant_id: str) -> Optional[Sale]:
        pass

    @abstractmethod
    def find_all(self, tenant_id: str, pagination: PaginationParams, status: Optional[SaleStatus] = None,
                 customer_id: Optional[str] = None) -> PaginatedResponse[Sale]:
        pass

    @abstractmethod
    def find_between(self, tenant_id: str, start_date: datetime, end_date: datetime) -> List[Sale]:
        pass

    @abstractmethod
    def update_status(self, sale: Sale, previous: Sale) -> Sale:
        pass

    @abstractmethod
    def cancel_sale(self, sale: Sale, previous: Sale, reason: Optional[str] = None) -> Sale:
        """
        Save the cancelled sale, return its items to stock and, when the sale
        has a customer, debit the sale total back, in one transaction.
        Fails with InvalidState if the stored sale no longer matches previous.
        """
        pass

    @abstractmethod
    def record_payment(self, sale: Sale, previous: Sale, entry: Optional[LedgerEntry]) -> Sale:
        """
        Save the payment fields of the sale and the ledger debit, in one
        transaction. previous is the sale as read before the payment; the
        write fails with InvalidState if the stored row no longer matches it.
        """
        pass
