"""
Unit tests for PostgresProductRepository

These tests validate repository logic without requiring a database connection.

Author: TM3
Date: 2025-10-17
"""
from datetime import datetime
from decimal import Decimal
from unittest.mock import MagicMock, patch

import pytest
from psycopg2 import errors as pg_errors

from zylos.domain.errors import ValidationFailed
from zylos.domain.pagination import PaginationParams
from zylos.domain.product import Product, ProductCreate, ProductUpdate
from zylos.repositories.product_repository import PostgresProductRepository

TENANT_ID = "11111111-1111-1111-1111-111111111111"


def product_row(**overrides):
    row = {
        'id': 'p-1',
        'tenant_id': TENANT_ID,
        'sku': 'CAFE-001',
        'name': 'Café de olla 500g',
        'description': None,
        'category': 'Bebidas',
        'price': Decimal('120.00'),
        'cost': Decimal('80.00'),
        'current_stock': 50,
        'min_stock': 10,
        'status': 'active',
        'created_at': datetime.now(),
        'updated_at': None
    }
    row.update(overrides)
    return row


class TestPostgresProductRepository:
    """Test PostgresProductRepository methods"""

    @patch('zylos.repositories.product_repository.get_db_connection_dict')
    def test_find_by_id_returns_product(self, mock_get_conn):
        """Test find_by_id returns a Product domain model scoped by tenant"""
        # Arrange: Mock database connection
        mock_conn = MagicMock()
        mock_cursor = MagicMock()
        mock_get_conn.return_value = mock_conn
        mock_conn.cursor.return_value = mock_cursor
        mock_cursor.fetchone.return_value = product_row()

        # Act
        product = PostgresProductRepository().find_by_id('p-1', TENANT_ID)

        # Assert
        assert isinstance(product, Product)
        assert product.sku == 'CAFE-001'
        assert product.is_active
        assert mock_cursor.execute.call_args.args[1] == (TENANT_ID, 'p-1')
        mock_cursor.close.assert_called_once()
        mock_conn.close.assert_called_once()

    @patch('zylos.repositories.product_repository.get_db_connection_dict')
    def test_find_by_id_returns_none_when_not_found(self, mock_get_conn):
        """Test find_by_id returns None when product doesn't exist"""
        mock_conn = MagicMock()
        mock_cursor = MagicMock()
        mock_get_conn.return_value = mock_conn
        mock_conn.cursor.return_value = mock_cursor
        mock_cursor.fetchone.return_value = None

        assert PostgresProductRepository().find_by_id('missing', TENANT_ID) is None
        mock_conn.close.assert_called_once()

    @patch('zylos.repositories.product_repository.get_db_connection_dict')
    def test_find_by_ids_keys_by_id(self, mock_get_conn):
        mock_conn = MagicMock()
        mock_cursor = MagicMock()
        mock_get_conn.return_value = mock_conn
        mock_conn.cursor.return_value = mock_cursor
        mock_cursor.fetchall.return_value = [product_row(), product_row(id='p-2', sku='PAN-01')]

        products = PostgresProductRepository().find_by_ids(['p-1', 'p-2', 'p-3'], TENANT_ID)

        assert set(products) == {'p-1', 'p-2'}

    def test_find_by_ids_without_ids_skips_query(self):
        assert PostgresProductRepository().find_by_ids([], TENANT_ID) == {}

    @patch('zylos.repositories.product_repository.get_db_connection_dict')
    def test_find_all_with_filters(self, mock_get_conn):
        """Test find_all builds search and low-stock conditions"""
        mock_conn = MagicMock()
        mock_cursor = MagicMock()
        mock_get_conn.return_value = mock_conn
        mock_conn.cursor.return_value = mock_cursor
        mock_cursor.fetchone.return_value = {'total': 21}
        mock_cursor.fetchall.return_value = [product_row()]

        page = PostgresProductRepository().find_all(
            TENANT_ID, PaginationParams(page=2, limit=20), search='café', low_stock_only=True
        )

        count_sql, count_params = mock_cursor.execute.call_args_list[0].args
        assert "ILIKE" in count_sql
        assert "current_stock <= min_stock" in count_sql
        assert count_params == [TENANT_ID, '%café%', '%café%']
        assert mock_cursor.execute.call_args_list[1].args[1][-2:] == [20, 20]
        assert page.pagination.total == 21
        assert page.pagination.has_prev

    @patch('zylos.repositories.product_repository.get_db_connection_dict')
    def test_create_duplicate_sku(self, mock_get_conn):
        """Test a unique violation becomes a validation error and rolls back"""
        mock_conn = MagicMock()
        mock_cursor = MagicMock()
        mock_get_conn.return_value = mock_conn
        mock_conn.cursor.return_value = mock_cursor
        mock_cursor.execute.side_effect = pg_errors.UniqueViolation("duplicate key")

        with pytest.raises(ValidationFailed):
            PostgresProductRepository().create(
                TENANT_ID, ProductCreate(sku='CAFE-001', name='Café', price=Decimal('1'))
            )

        mock_conn.rollback.assert_called_once()
        mock_conn.commit.assert_not_called()

    @patch('zylos.repositories.product_repository.get_db_connection_dict')
    def test_update_only_sent_fields(self, mock_get_conn):
        mock_conn = MagicMock()
        mock_cursor = MagicMock()
        mock_get_conn.return_value = mock_conn
        mock_conn.cursor.return_value = mock_cursor
        mock_cursor.fetchone.return_value = product_row(price=Decimal('130.00'), status='inactive')

        product = PostgresProductRepository().update(
            'p-1', TENANT_ID, ProductUpdate(price=Decimal('130'), status='inactive')
        )

        sql, params = mock_cursor.execute.call_args.args
        assert "price = %s, status = %s" in sql
        assert params == [Decimal('130'), 'inactive', TENANT_ID, 'p-1']
        assert product.price == Decimal('130.00')
        mock_conn.commit.assert_called_once()
