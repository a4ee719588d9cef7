"""
Inventory Movement Repository

Table: inventory_movements (id uuid, tenant_id, product_id, type, quantity,
reason, reference_id, created_at). products.current_stock is kept in step
with the movements: every insert here also updates the product row.

Author: TM3
Date: 2025-10-17
"""
from datetime import datetime
from typing import List, Optional

from zylos.core.database import get_db_connection_dict
from zylos.domain.errors import InsufficientStock, ResourceNotFound
from zylos.domain.inventory import InventoryMovement
from zylos.domain.pagination import PaginatedResponse, PaginationParams
from zylos.repositories.base import InventoryMovementRepository

MOVEMENT_COLUMNS = "id, tenant_id, product_id, type, quantity, reason, reference_id, created_at"


def map_row_to_movement(row: dict) -> InventoryMovement:
    return InventoryMovement(
        id=str(row['id']),
        tenant_id=str(row['tenant_id']),
        product_id=str(row['product_id']),
        type=row['type'],
        quantity=row['quantity'],
        reason=row.get('reason'),
        reference_id=row.get('reference_id'),
        created_at=row['created_at']
    )


def insert_movement(cursor, movement: InventoryMovement, guard_stock: bool = False) -> int:
    """
    Insert a movement and apply it to the product stock with an open cursor.

    With guard_stock the stock update only happens if it leaves the product
    at zero or above, so concurrent sales cannot oversell.

    Returns:
        The product's new current_stock

    Raises:
        ResourceNotFound: the product does not exist in the tenant
        InsufficientStock: guard_stock is set and the stock would go negative
    """
    stock_guard = "AND current_stock + %s >= 0" if guard_stock else ""
    params = [movement.net_stock_change, movement.tenant_id, movement.product_id]
    if guard_stock:
        params.append(movement.net_stock_change)

    cursor.execute(f"""
        UPDATE products
        SET current_stock = current_stock + %s, updated_at = NOW()
        WHERE tenant_id = %s AND id = %s {stock_guard}
        RETURNING current_stock
    """, params)

    row = cursor.fetchone()
    if not row:
        cursor.execute("""
            SELECT current_stock
            FROM products
            WHERE tenant_id = %s AND id = %s
        """, (movement.tenant_id, movement.product_id))
        existing = cursor.fetchone()
        if not existing:
            raise ResourceNotFound("Product", movement.product_id)
        raise InsufficientStock(movement.product_id, movement.quantity, existing['current_stock'])

    cursor.execute("""
        INSERT INTO inventory_movements
            (tenant_id, product_id, type, quantity, reason, reference_id, created_at)
        VALUES (%s, %s, %s, %s, %s, %s, %s)
    """, (
        movement.tenant_id,
        movement.product_id,
        movement.type.value,
        movement.quantity,
        movement.reason,
        movement.reference_id,
        movement.created_at,
    ))

    return row['current_stock']


class PostgresInventoryMovementRepository(InventoryMovementRepository):
    """Repository for InventoryMovement data access"""

    def record(self, movement: InventoryMovement, guard_stock: bool = False) -> int:
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            new_stock = insert_movement(cursor, movement, guard_stock)
            conn.commit()
            return new_stock

        except Exception:
            conn.rollback()
            raise

        finally:
            cursor.close()
            conn.close()

    def find_by_product(self, product_id: str, tenant_id: str,
                        since: Optional[datetime] = None) -> List[InventoryMovement]:
        conditions = ["tenant_id = %s", "product_id = %s"]
        params = [tenant_id, product_id]

        if since:
            conditions.append("created_at >= %s")
            params.append(since)

        where_clause = " AND ".join(conditions)

        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute(f"""
                SELECT {MOVEMENT_COLUMNS}
                FROM inventory_movements
                WHERE {where_clause}
                ORDER BY created_at
            """, params)

            return [map_row_to_movement(row) for row in cursor.fetchall()]

        finally:
            cursor.close()
            conn.close()

    def find_by_tenant(self, tenant_id: str, pagination: PaginationParams,
                       product_id: Optional[str] = None) -> PaginatedResponse[InventoryMovement]:
        conditions = ["tenant_id = %s"]
        params = [tenant_id]

        if product_id:
            conditions.append("product_id = %s")
            params.append(product_id)

        where_clause = " AND ".join(conditions)

        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute(f"""
                SELECT COUNT(*) as total
                FROM inventory_movements
                WHERE {where_clause}
            """, params)
            total = cursor.fetchone()['total']

            cursor.execute(f"""
                SELECT {MOVEMENT_COLUMNS}
                FROM inventory_movements
                WHERE {where_clause}
                ORDER BY created_at DESC
                LIMIT %s OFFSET %s
            """, params + [pagination.limit, pagination.offset])

            movements = [map_row_to_movement(row) for row in cursor.fetchall()]
            return PaginatedResponse.build(movements, total, pagination)

        finally:
            cursor.close()
            conn.close()
