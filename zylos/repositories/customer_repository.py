"""
Customer Repository - Data Access Layer for Customers

Table: customers (id uuid, tenant_id, name, email, phone, address,
credit_limit, created_at, updated_at), unique (tenant_id, email).

Author: TM3
Date: 2025-10-17
"""
from typing import Optional

from psycopg2 import errors as pg_errors

from zylos.core.database import get_db_connection_dict
from zylos.domain.customer import Customer, CustomerCreate, CustomerUpdate
from zylos.domain.errors import DuplicateEmail
from zylos.domain.pagination import PaginatedResponse, PaginationParams
from zylos.repositories.base import CustomerRepository

CUSTOMER_COLUMNS = "id, tenant_id, name, email, phone, address, credit_limit, created_at, updated_at"


class PostgresCustomerRepository(CustomerRepository):
    """Repository for Customer data access"""

    @staticmethod
    def _map_row_to_customer(row: dict) -> Customer:
        return Customer(
            id=str(row['id']),
            tenant_id=str(row['tenant_id']),
            name=row['name'],
            email=row.get('email'),
            phone=row.get('phone'),
            address=row.get('address'),
            credit_limit=row.get('credit_limit'),
            created_at=row.get('created_at'),
            updated_at=row.get('updated_at')
        )

    def _find_one(self, where: str, params: tuple) -> Optional[Customer]:
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute(f"""
                SELECT {CUSTOMER_COLUMNS}
                FROM customers
                WHERE {where}
            """, params)

            row = cursor.fetchone()
            return self._map_row_to_customer(row) if row else None

        finally:
            cursor.close()
            conn.close()

    def find_by_email(self, email: str, tenant_id: str) -> Optional[Customer]:
        return self._find_one("tenant_id = %s AND email = %s", (tenant_id, email.strip().lower()))

    def find_by_id(self, customer_id: str, tenant_id: str) -> Optional[Customer]:
        return self._find_one("tenant_id = %s AND id = %s", (tenant_id, customer_id))

    def create(self, tenant_id: str, data: CustomerCreate) -> Customer:
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute(f"""
                INSERT INTO customers (tenant_id, name, email, phone, address, credit_limit)
                VALUES (%s, %s, %s, %s, %s, %s)
                RETURNING {CUSTOMER_COLUMNS}
            """, (tenant_id, data.name, data.email, data.phone, data.address, data.credit_limit))

            row = cursor.fetchone()
            conn.commit()
            return self._map_row_to_customer(row)

        except pg_errors.UniqueViolation:
            conn.rollback()
            raise DuplicateEmail("customer", data.email or "")

        except Exception:
            conn.rollback()
            raise

        finally:
            cursor.close()
            conn.close()

    def update(self, customer_id: str, tenant_id: str, data: CustomerUpdate) -> Optional[Customer]:
        fields = data.model_dump(exclude_unset=True)
        if not fields:
            return self.find_by_id(customer_id, tenant_id)

        assignments = ", ".join(f"{column} = %s" for column in fields)
        params = list(fields.values()) + [tenant_id, customer_id]

        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute(f"""
                UPDATE customers
                SET {assignments}, updated_at = NOW()
                WHERE tenant_id = %s AND id = %s
                RETURNING {CUSTOMER_COLUMNS}
            """, params)

            row = cursor.fetchone()
            conn.commit()
            return self._map_row_to_customer(row) if row else None

        except pg_errors.UniqueViolation:
            conn.rollback()
            raise DuplicateEmail("customer", fields.get("email") or "")

        except Exception:
            conn.rollback()
            raise

        finally:
            cursor.close()
            conn.close()

    def delete(self, customer_id: str, tenant_id: str) -> bool:
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute("""
                DELETE FROM customers
                WHERE tenant_id = %s AND id = %s
            """, (tenant_id, customer_id))

            deleted = cursor.rowcount > 0
            conn.commit()
            return deleted

        except Exception:
            conn.rollback()
            raise

        finally:
            cursor.close()
            conn.close()

    def _find_page(self, where: str, params: list, pagination: PaginationParams) -> PaginatedResponse[Customer]:
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute(f"""
                SELECT COUNT(*) as total
                FROM customers
                WHERE {where}
            """, params)
            total = cursor.fetchone()['total']

            cursor.execute(f"""
                SELECT {CUSTOMER_COLUMNS}
                FROM customers
                WHERE {where}
                ORDER BY name
                LIMIT %s OFFSET %s
            """, params + [pagination.limit, pagination.offset])

            customers = [self._map_row_to_customer(row) for row in cursor.fetchall()]
            return PaginatedResponse.build(customers, total, pagination)

        finally:
            cursor.close()
            conn.close()

    def find_by_tenant_id(self, tenant_id: str, pagination: PaginationParams) -> PaginatedResponse[Customer]:
        return self._find_page("tenant_id = %s", [tenant_id], pagination)

    def search_by_name(self, tenant_id: str, name: str, pagination: PaginationParams) -> PaginatedResponse[Customer]:
        return self._find_page("tenant_id = %s AND name ILIKE %s", [tenant_id, f"%{name.strip()}%"], pagination)
