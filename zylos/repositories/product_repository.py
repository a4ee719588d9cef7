"""
Product Repository - Data Access Layer for Products

Handles all database queries for products and returns Product domain models.

Table: products (id uuid, tenant_id, sku, name, description, category,
price, cost, current_stock, min_stock, status, created_at, updated_at),
unique (tenant_id, sku).

Author: TM3
Date: 2025-10-17
"""
from typing import Dict, List, Optional, Sequence

from psycopg2 import errors as pg_errors

from zylos.core.database import get_db_connection_dict
from zylos.domain.errors import ValidationFailed
from zylos.domain.pagination import PaginatedResponse, PaginationParams
from zylos.domain.product import Product, ProductCreate, ProductUpdate
from zylos.repositories.base import ProductRepository

PRODUCT_COLUMNS = """
    id, tenant_id, sku, name, description, category,
    price, cost, current_stock, min_stock, status,
    created_at, updated_at
"""


class PostgresProductRepository(ProductRepository):
    """
    Repository for Product data access

    All SQL queries for products are centralized here.
    Returns Product domain models, not raw dictionaries.
    """

    @staticmethod
    def _map_row_to_product(row: dict) -> Product:
        return Product(
            id=str(row['id']),
            tenant_id=str(row['tenant_id']),
            sku=row['sku'],
            name=row['name'],
            description=row.get('description'),
            category=row.get('category'),
            price=row['price'],
            cost=row.get('cost'),
            current_stock=row['current_stock'],
            min_stock=row['min_stock'],
            status=row['status'],
            created_at=row.get('created_at'),
            updated_at=row.get('updated_at')
        )

    def _find_one(self, where: str, params: tuple) -> Optional[Product]:
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute(f"""
                SELECT {PRODUCT_COLUMNS}
                FROM products
                WHERE {where}
            """, params)

            row = cursor.fetchone()
            if not row:
                return None

            return self._map_row_to_product(row)

        finally:
            cursor.close()
            conn.close()

    def find_by_id(self, product_id: str, tenant_id: str) -> Optional[Product]:
        """
        Find product by ID

        Returns:
            Product or None if not found
        """
        return self._find_one("tenant_id = %s AND id = %s", (tenant_id, product_id))

    def find_by_sku(self, sku: str, tenant_id: str) -> Optional[Product]:
        return self._find_one("tenant_id = %s AND sku = %s", (tenant_id, sku))

    def find_by_ids(self, product_ids: Sequence[str], tenant_id: str) -> Dict[str, Product]:
        """Products keyed by ID. Missing IDs are simply absent from the result."""
        if not product_ids:
            return {}

        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute(f"""
                SELECT {PRODUCT_COLUMNS}
                FROM products
                WHERE tenant_id = %s AND id = ANY(%s::uuid[])
            """, (tenant_id, list(product_ids)))

            products = [self._map_row_to_product(row) for row in cursor.fetchall()]
            return {product.id: product for product in products}

        finally:
            cursor.close()
            conn.close()

    def find_all(self, tenant_id: str, pagination: PaginationParams, search: Optional[str] = None,
                 low_stock_only: bool = False) -> PaginatedResponse[Product]:
        """
        Find products with filters

        Args:
            tenant_id: Owning tenant
            pagination: Page and page size
            search: Search in name or SKU
            low_stock_only: Only products at or under min_stock

        Returns:
            Paginated products ordered by name
        """
        # Build WHERE clause
        conditions = ["tenant_id = %s"]
        params = [tenant_id]

        if search:
            conditions.append("(name ILIKE %s OR sku ILIKE %s)")
            search_term = f"%{search}%"
            params.extend([search_term, search_term])

        if low_stock_only:
            conditions.append("current_stock <= min_stock")

        where_clause = " AND ".join(conditions)

        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            # Get total count
            cursor.execute(f"""
                SELECT COUNT(*) as total
                FROM products
                WHERE {where_clause}
            """, params)
            total = cursor.fetchone()['total']

            # Get products
            cursor.execute(f"""
                SELECT {PRODUCT_COLUMNS}
                FROM products
                WHERE {where_clause}
                ORDER BY name
                LIMIT %s OFFSET %s
            """, params + [pagination.limit, pagination.offset])

            products = [self._map_row_to_product(row) for row in cursor.fetchall()]
            return PaginatedResponse.build(products, total, pagination)

        finally:
            cursor.close()
            conn.close()

    def find_low_stock(self, tenant_id: str) -> List[Product]:
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute(f"""
                SELECT {PRODUCT_COLUMNS}
                FROM products
                WHERE tenant_id = %s
                  AND status = 'active'
                  AND current_stock <= min_stock
                ORDER BY current_stock ASC, name
            """, (tenant_id,))

            return [self._map_row_to_product(row) for row in cursor.fetchall()]

        finally:
            cursor.close()
            conn.close()

    def create(self, tenant_id: str, data: ProductCreate) -> Product:
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute(f"""
                INSERT INTO products
                    (tenant_id, sku, name, description, category, price, cost,
                     current_stock, min_stock, status)
                VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s, %s)
                RETURNING {PRODUCT_COLUMNS}
            """, (
                tenant_id, data.sku, data.name, data.description, data.category,
                data.price, data.cost, data.current_stock, data.min_stock, data.status.value
            ))

            row = cursor.fetchone()
            conn.commit()
            return self._map_row_to_product(row)

        except pg_errors.UniqueViolation:
            conn.rollback()
            raise ValidationFailed([f"SKU already exists in this tenant: {data.sku}"])

        except Exception:
            conn.rollback()
            raise

        finally:
            cursor.close()
            conn.close()

    def update(self, product_id: str, tenant_id: str, data: ProductUpdate) -> Optional[Product]:
        fields = data.model_dump(exclude_unset=True)
        if not fields:
            return self.find_by_id(product_id, tenant_id)

        if "status" in fields and fields["status"] is not None:
            fields["status"] = data.status.value

        assignments = ", ".join(f"{column} = %s" for column in fields)
        params = list(fields.values()) + [tenant_id, product_id]

        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute(f"""
                UPDATE products
                SET {assignments}, updated_at = NOW()
                WHERE tenant_id = %s AND id = %s
                RETURNING {PRODUCT_COLUMNS}
            """, params)

            row = cursor.fetchone()
            conn.commit()
            return self._map_row_to_product(row) if row else None

        except pg_errors.UniqueViolation:
            conn.rollback()
            raise ValidationFailed([f"SKU already exists in this tenant: {fields.get('sku')}"])

        except Exception:
            conn.rollback()
            raise

        finally:
            cursor.close()
            conn.close()
