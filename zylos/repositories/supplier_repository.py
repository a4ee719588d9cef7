"""
Supplier Repository - Data Access Layer for Suppliers

Table: suppliers (id uuid, tenant_id, name, email, phone, address,
created_at, updated_at), unique (tenant_id, email).

Author: TM3
Date: 2025-10-17
"""
from typing import Optional

from psycopg2 import errors as pg_errors

from zylos.core.database import get_db_connection_dict
from zylos.domain.errors import DuplicateEmail
from zylos.domain.pagination import PaginatedResponse, PaginationParams
from zylos.domain.supplier import Supplier, SupplierCreate, SupplierUpdate
from zylos.repositories.base import SupplierRepository

SUPPLIER_COLUMNS = "id, tenant_id, name, email, phone, address, created_at, updated_at"


class PostgresSupplierRepository(SupplierRepository):
    """
    Repository for Supplier data access

    All SQL queries for suppliers are centralized here.
    Returns Supplier domain models, not raw dictionaries.
    """

    @staticmethod
    def _map_row_to_supplier(row: dict) -> Supplier:
        return Supplier(
            id=str(row['id']),
            tenant_id=str(row['tenant_id']),
            name=row['name'],
            email=row.get('email'),
            phone=row.get('phone'),
            address=row.get('address'),
            created_at=row.get('created_at'),
            updated_at=row.get('updated_at')
        )

    def _find_one(self, where: str, params: tuple) -> Optional[Supplier]:
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute(f"""
                SELECT {SUPPLIER_COLUMNS}
                FROM suppliers
                WHERE {where}
            """, params)

            row = cursor.fetchone()
            if not row:
                return None

            return self._map_row_to_supplier(row)

        finally:
            cursor.close()
            conn.close()

    def find_by_email(self, email: str, tenant_id: str) -> Optional[Supplier]:
        return self._find_one("tenant_id = %s AND email = %s", (tenant_id, email.strip().lower()))

    def find_by_id(self, supplier_id: str, tenant_id: str) -> Optional[Supplier]:
        return self._find_one("tenant_id = %s AND id = %s", (tenant_id, supplier_id))

    def create(self, tenant_id: str, data: SupplierCreate) -> Supplier:
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute(f"""
                INSERT INTO suppliers (tenant_id, name, email, phone, address)
                VALUES (%s, %s, %s, %s, %s)
                RETURNING {SUPPLIER_COLUMNS}
            """, (tenant_id, data.name, data.email, data.phone, data.address))

            row = cursor.fetchone()
            conn.commit()
            return self._map_row_to_supplier(row)

        except pg_errors.UniqueViolation:
            conn.rollback()
            raise DuplicateEmail("supplier", data.email or "")

        except Exception:
            conn.rollback()
            raise

        finally:
            cursor.close()
            conn.close()

    def update(self, supplier_id: str, tenant_id: str, data: SupplierUpdate) -> Optional[Supplier]:
        fields = data.model_dump(exclude_unset=True)
        if not fields:
            return self.find_by_id(supplier_id, tenant_id)

        assignments = ", ".join(f"{column} = %s" for column in fields)
        params = list(fields.values()) + [tenant_id, supplier_id]

        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute(f"""
                UPDATE suppliers
                SET {assignments}, updated_at = NOW()
                WHERE tenant_id = %s AND id = %s
                RETURNING {SUPPLIER_COLUMNS}
            """, params)

            row = cursor.fetchone()
            conn.commit()
            return self._map_row_to_supplier(row) if row else None

        except pg_errors.UniqueViolation:
            conn.rollback()
            raise DuplicateEmail("supplier", fields.get("email") or "")

        except Exception:
            conn.rollback()
            raise

        finally:
            cursor.close()
            conn.close()

    def delete(self, supplier_id: str, tenant_id: str) -> bool:
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute("""
                DELETE FROM suppliers
                WHERE tenant_id = %s AND id = %s
            """, (tenant_id, supplier_id))

            deleted = cursor.rowcount > 0
            conn.commit()
            return deleted

        except Exception:
            conn.rollback()
            raise

        finally:
            cursor.close()
            conn.close()

    def _find_page(self, where: str, params: list, pagination: PaginationParams) -> PaginatedResponse[Supplier]:
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute(f"""
                SELECT COUNT(*) as total
                FROM suppliers
                WHERE {where}
            """, params)
            total = cursor.fetchone()['total']

            cursor.execute(f"""
                SELECT {SUPPLIER_COLUMNS}
                FROM suppliers
                WHERE {where}
                ORDER BY name
                LIMIT %s OFFSET %s
            """, params + [pagination.limit, pagination.offset])

            suppliers = [self._map_row_to_supplier(row) for row in cursor.fetchall()]
            return PaginatedResponse.build(suppliers, total, pagination)

        finally:
            cursor.close()
            conn.close()

    def find_by_tenant_id(self, tenant_id: str, pagination: PaginationParams) -> PaginatedResponse[Supplier]:
        return self._find_page("tenant_id = %s", [tenant_id], pagination)

    def search_by_name(self, tenant_id: str, name: str, pagination: PaginationParams) -> PaginatedResponse[Supplier]:
        return self._find_page("tenant_id = %s AND name ILIKE %s", [tenant_id, f"%{name.strip()}%"], pagination)
