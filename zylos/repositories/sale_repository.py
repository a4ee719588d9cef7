"""
Sale Repository - Data Access Layer for Sales

Tables:
    sales (id uuid, tenant_id, customer_id, subtotal, tax, discount, total,
           amount_paid, status, payment_status, notes, created_at, updated_at)
    sale_items (id, sale_id, product_id, product_name, quantity, unit_price)

Multi-row writes (create, cancel, payment) run in a single transaction and
roll back as a whole.

Author: TM3
Date: 2025-10-17
"""
from collections import defaultdict
from datetime import datetime
from typing import Dict, List, Optional

from zylos.core.database import get_db_connection_dict
from zylos.domain.clock import utcnow
from zylos.domain.enums import EntityType, LedgerType, MovementType, SaleStatus
from zylos.domain.errors import InvalidState
from zylos.domain.inventory import InventoryMovement
from zylos.domain.ledger import LedgerEntry
from zylos.domain.pagination import PaginatedResponse, PaginationParams
from zylos.domain.sale import Sale
from zylos.domain.value_objects import SaleLineItem
from zylos.repositories.base import SaleRepository
from zylos.repositories.inventory_repository import insert_movement
from zylos.repositories.ledger_repository import insert_ledger_entry

SALE_COLUMNS = """
    id, tenant_id, customer_id, subtotal, tax, discount, total, amount_paid,
    status, payment_status, notes, created_at, updated_at
"""


class PostgresSaleRepository(SaleRepository):
    """Repository for Sale data access"""

    @staticmethod
    def _map_row_to_sale(row: dict, items: List[SaleLineItem]) -> Sale:
        return Sale(
            id=str(row['id']),
            tenant_id=str(row['tenant_id']),
            customer_id=str(row['customer_id']) if row.get('customer_id') else None,
            items=tuple(items),
            subtotal=row['subtotal'],
            tax=row['tax'],
            discount=row['discount'],
            total=row['total'],
            amount_paid=row['amount_paid'],
            status=row['status'],
            payment_status=row['payment_status'],
            notes=row.get('notes'),
            created_at=row['created_at'],
            updated_at=row.get('updated_at') or row['created_at']
        )

    @staticmethod
    def _load_items(cursor, sale_ids: List[str]) -> Dict[str, List[SaleLineItem]]:
        items: Dict[str, List[SaleLineItem]] = defaultdict(list)
        if not sale_ids:
            return items

        cursor.execute("""
            SELECT sale_id, product_id, product_name, quantity, unit_price
            FROM sale_items
            WHERE sale_id = ANY(%s::uuid[])
            ORDER BY id
        """, (sale_ids,))

        for row in cursor.fetchall():
            items[str(row['sale_id'])].append(SaleLineItem(
                product_id=str(row['product_id']),
                product_name=row.get('product_name'),
                quantity=row['quantity'],
                unit_price=row['unit_price']
            ))
        return items

    def _map_rows(self, cursor, rows: List[dict]) -> List[Sale]:
        items = self._load_items(cursor, [str(row['id']) for row in rows])
        return [self._map_row_to_sale(row, items[str(row['id'])]) for row in rows]

    def create_sale(self, sale: Sale) -> Sale:
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute("""
                INSERT INTO sales
                    (tenant_id, customer_id, subtotal, tax, discount, total, amount_paid,
                     status, payment_status, notes, created_at, updated_at)
                VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s)
                RETURNING id
            """, (
                sale.tenant_id,
                sale.customer_id,
                sale.subtotal.amount,
                sale.tax.amount,
                sale.discount.amount,
                sale.total.amount,
                sale.amount_paid.amount,
                sale.status.value,
                sale.payment_status.value,
                sale.notes,
                sale.created_at,
                sale.updated_at,
            ))
            sale_id = str(cursor.fetchone()['id'])

            for item in sale.items:
                cursor.execute("""
                    INSERT INTO sale_items (sale_id, product_id, product_name, quantity, unit_price)
                    VALUES (%s, %s, %s, %s, %s)
                """, (sale_id, item.product_id, item.product_name, item.quantity, item.unit_price.amount))

                insert_movement(cursor, InventoryMovement(
                    tenant_id=sale.tenant_id,
                    product_id=item.product_id,
                    type=MovementType.OUT,
                    quantity=item.quantity,
                    reason="Sale",
                    reference_id=sale_id,
                ), guard_stock=True)

            if sale.customer_id:
                insert_ledger_entry(cursor, LedgerEntry(
                    tenant_id=sale.tenant_id,
                    entity_type=EntityType.CUSTOMER,
                    entity_id=sale.customer_id,
                    type=LedgerType.CREDIT,
                    amount=sale.total,
                    description=f"Sale {sale_id}",
                    reference_id=sale_id,
                ))

            conn.commit()
            return sale.model_copy(update={"id": sale_id})

        except Exception:
            conn.rollback()
            raise

        finally:
            cursor.close()
            conn.close()

    def find_by_id(self, sale_id: str, tenant_id: str) -> Optional[Sale]:
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute(f"""
                SELECT {SALE_COLUMNS}
                FROM sales
                WHERE tenant_id = %s AND id = %s
            """, (tenant_id, sale_id))

            row = cursor.fetchone()
            if not row:
                return None

            return self._map_rows(cursor, [row])[0]

        finally:
            cursor.close()
            conn.close()

    def find_all(self, tenant_id: str, pagination: PaginationParams, status: Optional[SaleStatus] = None,
                 customer_id: Optional[str] = None) -> PaginatedResponse[Sale]:
        # Build WHERE clause
        conditions = ["tenant_id = %s"]
        params = [tenant_id]

        if status:
            conditions.append("status = %s")
            params.append(SaleStatus(status).value)

        if customer_id:
            conditions.append("customer_id = %s")
            params.append(customer_id)

        where_clause = " AND ".join(conditions)

        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute(f"""
                SELECT COUNT(*) as total
                FROM sales
                WHERE {where_clause}
            """, params)
            total = cursor.fetchone()['total']

            cursor.execute(f"""
                SELECT {SALE_COLUMNS}
                FROM sales
                WHERE {where_clause}
                ORDER BY created_at DESC
                LIMIT %s OFFSET %s
            """, params + [pagination.limit, pagination.offset])

            sales = self._map_rows(cursor, cursor.fetchall())
            return PaginatedResponse.build(sales, total, pagination)

        finally:
            cursor.close()
            conn.close()

    def find_between(self, tenant_id: str, start_date: datetime, end_date: datetime) -> List[Sale]:
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute(f"""
                SELECT {SALE_COLUMNS}
                FROM sales
                WHERE tenant_id = %s
                  AND created_at >= %s
                  AND created_at <= %s
                ORDER BY created_at
            """, (tenant_id, start_date, end_date))

            return self._map_rows(cursor, cursor.fetchall())

        finally:
            cursor.close()
            conn.close()

    @staticmethod
    def _save_state(cursor, sale: Sale, previous: Sale) -> None:
        """
        Write the new status and payment fields, only if the row still holds
        the state the transition was computed from

        Raises:
            InvalidState: another request changed the sale first
        """
        cursor.execute("""
            UPDATE sales
            SET status = %s, payment_status = %s, amount_paid = %s, updated_at = %s
            WHERE tenant_id = %s AND id = %s AND status = %s AND amount_paid = %s
        """, (
            sale.status.value,
            sale.payment_status.value,
            sale.amount_paid.amount,
            sale.updated_at,
            sale.tenant_id,
            sale.id,
            previous.status.value,
            previous.amount_paid.amount,
        ))

        if cursor.rowcount == 0:
            raise InvalidState(
                f"Sale {sale.id} was modified by another request, reload and retry",
                {"sale_id": sale.id}
            )

    def update_status(self, sale: Sale, previous: Sale) -> Sale:
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            self._save_state(cursor, sale, previous)
            conn.commit()
            return sale

        except Exception:
            conn.rollback()
            raise

        finally:
            cursor.close()
            conn.close()

    def cancel_sale(self, sale: Sale, previous: Sale, reason: Optional[str] = None) -> Sale:
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            self._save_state(cursor, sale, previous)

            for item in sale.items:
                insert_movement(cursor, InventoryMovement(
                    tenant_id=sale.tenant_id,
                    product_id=item.product_id,
                    type=MovementType.IN,
                    quantity=item.quantity,
                    reason=reason or "Sale cancelled",
                    reference_id=sale.id,
                ))

            if sale.customer_id:
                insert_ledger_entry(cursor, LedgerEntry(
                    tenant_id=sale.tenant_id,
                    entity_type=EntityType.CUSTOMER,
                    entity_id=sale.customer_id,
                    type=LedgerType.DEBIT,
                    amount=sale.total,
                    description=f"Sale {sale.id} cancelled",
                    reference_id=sale.id,
                    created_at=utcnow(),
                ))

            conn.commit()
            return sale

        except Exception:
            conn.rollback()
            raise

        finally:
            cursor.close()
            conn.close()

    def record_payment(self, sale: Sale, previous: Sale, entry: Optional[LedgerEntry]) -> Sale:
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            self._save_state(cursor, sale, previous)
            if entry is not None:
                insert_ledger_entry(cursor, entry)
            conn.commit()
            return sale

        except Exception:
            conn.rollback()
            raise

        finally:
            cursor.close()
            conn.close()
