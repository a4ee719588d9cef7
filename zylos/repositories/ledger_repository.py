"""
Ledger Repository - Data Access Layer for Ledger Entries

Table: ledger_entries (id uuid, tenant_id, entity_type, entity_id, type,
amount numeric(12,2), description, reference_id, created_at)

Author: TM3
Date: 2025-10-17
"""
from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from zylos.core.database import get_db_connection_dict
from zylos.domain.enums import EntityType, LedgerType
from zylos.domain.ledger import LedgerEntry
from zylos.domain.pagination import PaginatedResponse, PaginationParams
from zylos.repositories.base import LedgerEntryRepository

LEDGER_COLUMNS = "id, tenant_id, entity_type, entity_id, type, amount, description, reference_id, created_at"

# Same sign convention as LedgerEntry.balance_impact
BALANCE_IMPACT_SQL = """
    CASE
        WHEN (entity_type = 'customer' AND type = 'credit')
          OR (entity_type = 'supplier' AND type = 'debit') THEN amount
        ELSE -amount
    END
"""


def map_row_to_ledger_entry(row: dict) -> LedgerEntry:
    return LedgerEntry(
        id=str(row['id']),
        tenant_id=str(row['tenant_id']),
        entity_type=row['entity_type'],
        entity_id=str(row['entity_id']),
        type=row['type'],
        amount=row['amount'],
        description=row.get('description'),
        reference_id=row.get('reference_id'),
        created_at=row['created_at']
    )


def insert_ledger_entry(cursor, entry: LedgerEntry) -> LedgerEntry:
    """Insert with an open cursor so callers can include it in their own transaction"""
    cursor.execute(f"""
        INSERT INTO ledger_entries
            (tenant_id, entity_type, entity_id, type, amount, description, reference_id, created_at)
        VALUES (%s, %s, %s, %s, %s, %s, %s, %s)
        RETURNING {LEDGER_COLUMNS}
    """, (
        entry.tenant_id,
        entry.entity_type.value,
        entry.entity_id,
        entry.type.value,
        entry.amount.amount,
        entry.description,
        entry.reference_id,
        entry.created_at,
    ))
    return map_row_to_ledger_entry(cursor.fetchone())


class PostgresLedgerEntryRepository(LedgerEntryRepository):
    """Repository for LedgerEntry data access"""

    def create(self, entry: LedgerEntry) -> LedgerEntry:
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            created = insert_ledger_entry(cursor, entry)
            conn.commit()
            return created

        except Exception:
            conn.rollback()
            raise

        finally:
            cursor.close()
            conn.close()

    def calculate_entity_balance(self, entity_type: EntityType, entity_id: str, tenant_id: str) -> Decimal:
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute(f"""
                SELECT COALESCE(SUM({BALANCE_IMPACT_SQL}), 0) as balance
                FROM ledger_entries
                WHERE tenant_id = %s AND entity_type = %s AND entity_id = %s
            """, (tenant_id, EntityType(entity_type).value, entity_id))

            row = cursor.fetchone()
            return Decimal(str(row['balance'])) if row else Decimal("0")

        finally:
            cursor.close()
            conn.close()

    def find_by_entity(self, entity_type: EntityType, entity_id: str, tenant_id: str,
                       pagination: PaginationParams) -> PaginatedResponse[LedgerEntry]:
        params = [tenant_id, EntityType(entity_type).value, entity_id]

        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute("""
                SELECT COUNT(*) as total
                FROM ledger_entries
                WHERE tenant_id = %s AND entity_type = %s AND entity_id = %s
            """, params)
            total = cursor.fetchone()['total']

            cursor.execute(f"""
                SELECT {LEDGER_COLUMNS}
                FROM ledger_entries
                WHERE tenant_id = %s AND entity_type = %s AND entity_id = %s
                ORDER BY created_at DESC
                LIMIT %s OFFSET %s
            """, params + [pagination.limit, pagination.offset])

            entries = [map_row_to_ledger_entry(row) for row in cursor.fetchall()]
            return PaginatedResponse.build(entries, total, pagination)

        finally:
            cursor.close()
            conn.close()

    def find_all_by_entity(self, entity_type: EntityType, entity_id: str, tenant_id: str) -> List[LedgerEntry]:
        return self.find_for_period(tenant_id, entity_type=entity_type, entity_id=entity_id)

    def find_for_period(self, tenant_id: str, entity_type: Optional[EntityType] = None,
                        entry_type: Optional[LedgerType] = None,
                        start_date: Optional[datetime] = None,
                        end_date: Optional[datetime] = None,
                        entity_id: Optional[str] = None) -> List[LedgerEntry]:
        # Build WHERE clause
        conditions = ["tenant_id = %s"]
        params = [tenant_id]

        if entity_type:
            conditions.append("entity_type = %s")
            params.append(EntityType(entity_type).value)

        if entity_id:
            conditions.append("entity_id = %s")
            params.append(entity_id)

        if entry_type:
            conditions.append("type = %s")
            params.append(LedgerType(entry_type).value)

        if start_date:
            conditions.append("created_at >= %s")
            params.append(start_date)

        if end_date:
            conditions.append("created_at <= %s")
            params.append(end_date)

        where_clause = " AND ".join(conditions)

        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute(f"""
                SELECT {LEDGER_COLUMNS}
                FROM ledger_entries
                WHERE {where_clause}
                ORDER BY created_at
            """, params)

            return [map_row_to_ledger_entry(row) for row in cursor.fetchall()]

        finally:
            cursor.close()
            conn.close()
