"""
Unit tests for PostgresSupplierRepository

Author: TM3
Date: 2025-10-17
"""
from datetime import datetime
from unittest.mock import MagicMock, patch

import pytest
from psycopg2 import errors as pg_errors

from zylos.domain.errors import DuplicateEmail
from zylos.domain.supplier import SupplierCreate, SupplierUpdate
from zylos.repositories.supplier_repository import PostgresSupplierRepository

TENANT_ID = "11111111-1111-1111-1111-111111111111"

SUPPLIER_ROW = {
    'id': 's-1',
    'tenant_id': TENANT_ID,
    'name': 'Distribuidora Norte',
    'email': 'ventas@norte.example.com',
    'phone': None,
    'address': None,
    'created_at': datetime.now(),
    'updated_at': None
}


class TestPostgresSupplierRepository:

    @patch('zylos.repositories.supplier_repository.get_db_connection_dict')
    def test_find_by_email_normalizes(self, mock_get_conn):
        mock_conn = MagicMock()
        mock_cursor = MagicMock()
        mock_get_conn.return_value = mock_conn
        mock_conn.cursor.return_value = mock_cursor
        mock_cursor.fetchone.return_value = SUPPLIER_ROW

        supplier = PostgresSupplierRepository().find_by_email(' Ventas@Norte.Example.com', TENANT_ID)

        assert supplier.id == 's-1'
        assert mock_cursor.execute.call_args.args[1] == (TENANT_ID, 'ventas@norte.example.com')

    @patch('zylos.repositories.supplier_repository.get_db_connection_dict')
    def test_create_commits(self, mock_get_conn):
        mock_conn = MagicMock()
        mock_cursor = MagicMock()
        mock_get_conn.return_value = mock_conn
        mock_conn.cursor.return_value = mock_cursor
        mock_cursor.fetchone.return_value = SUPPLIER_ROW

        supplier = PostgresSupplierRepository().create(
            TENANT_ID, SupplierCreate(name='Distribuidora Norte', email='ventas@norte.example.com')
        )

        assert supplier.name == 'Distribuidora Norte'
        mock_conn.commit.assert_called_once()
        mock_cursor.close.assert_called_once()

    @patch('zylos.repositories.supplier_repository.get_db_connection_dict')
    def test_create_unique_violation_is_duplicate_email(self, mock_get_conn):
        mock_conn = MagicMock()
        mock_cursor = MagicMock()
        mock_get_conn.return_value = mock_conn
        mock_conn.cursor.return_value = mock_cursor
        mock_cursor.execute.side_effect = pg_errors.UniqueViolation("duplicate key")

        with pytest.raises(DuplicateEmail):
            PostgresSupplierRepository().create(
                TENANT_ID, SupplierCreate(name='Otro', email='ventas@norte.example.com')
            )

        mock_conn.rollback.assert_called_once()
        mock_conn.close.assert_called_once()

    @patch('zylos.repositories.supplier_repository.get_db_connection_dict')
    def test_update_missing_returns_none(self, mock_get_conn):
        mock_conn = MagicMock()
        mock_cursor = MagicMock()
        mock_get_conn.return_value = mock_conn
        mock_conn.cursor.return_value = mock_cursor
        mock_cursor.fetchone.return_value = None

        assert PostgresSupplierRepository().update('s-404', TENANT_ID, SupplierUpdate(phone='555')) is None

    @patch('zylos.repositories.supplier_repository.get_db_connection_dict')
    def test_delete_reports_rowcount(self, mock_get_conn):
        mock_conn = MagicMock()
        mock_cursor = MagicMock()
        mock_get_conn.return_value = mock_conn
        mock_conn.cursor.return_value = mock_cursor
        mock_cursor.rowcount = 0

        assert PostgresSupplierRepository().delete('s-404', TENANT_ID) is False
        mock_conn.commit.assert_called_once()
