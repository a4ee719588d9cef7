"""
Pytest fixtures and configuration for Zylos tests

This file provides shared fixtures that can be used across all test modules.
No fixture here needs a database: repositories are tested against a mocked
psycopg2 cursor and services against MagicMock repositories.

Author: TM3
Date: 2025-10-17
"""
import os
from datetime import timedelta
from decimal import Decimal
from unittest.mock import MagicMock

import pytest
from dotenv import load_dotenv

# Load environment variables for tests
load_dotenv()
os.environ.setdefault("AUTH_SECRET", "test-secret")

from zylos.domain.clock import utcnow
from zylos.domain.customer import Customer
from zylos.domain.events import InMemoryEventPublisher
from zylos.domain.product import Product
from zylos.domain.sale import Sale
from zylos.domain.supplier import Supplier
from zylos.domain.tenant import Tenant
from zylos.domain.value_objects import Money, SaleLineItem

TENANT_ID = "11111111-1111-1111-1111-111111111111"


@pytest.fixture
def tenant_id():
    return TENANT_ID


@pytest.fixture
def tenant():
    """Active tenant served at acme.<ROOT_DOMAIN>"""
    return Tenant(id=TENANT_ID, name="Acme Store", subdomain="acme", active=True)


@pytest.fixture
def publisher():
    return InMemoryEventPublisher()


@pytest.fixture
def mock_cursor_factory():
    """
    Returns a function that builds (conn, cursor) mocks for
    get_db_connection_dict patches
    """
    def build():
        mock_conn = MagicMock()
        mock_cursor = MagicMock()
        mock_conn.cursor.return_value = mock_cursor
        return mock_conn, mock_cursor
    return build


@pytest.fixture
def sample_product():
    """Product with 50 units and the default threshold of 10"""
    return Product(
        id="p-1",
        tenant_id=TENANT_ID,
        sku="CAFE-001",
        name="Café de olla 500g",
        category="Bebidas",
        price=Decimal("120.00"),
        cost=Decimal("80.00"),
        current_stock=50,
        min_stock=10,
        created_at=utcnow() - timedelta(days=10),
        updated_at=utcnow() - timedelta(days=1),
    )


@pytest.fixture
def sample_customer():
    return Customer(
        id="c-1",
        tenant_id=TENANT_ID,
        name="Ana López",
        email="ana@example.com",
        phone="555-0101",
    )


@pytest.fixture
def sample_supplier():
    return Supplier(
        id="s-1",
        tenant_id=TENANT_ID,
        name="Distribuidora Norte",
        email="ventas@norte.example.com",
    )


@pytest.fixture
def sample_sale():
    """Pending sale: 2 x 10.00 + 1 x 5.00, 16% tax"""
    return Sale(
        id="sale-1",
        tenant_id=TENANT_ID,
        customer_id="c-1",
        items=(
            SaleLineItem(product_id="p-1", product_name="Café", quantity=2, unit_price=Money("10.00")),
            SaleLineItem(product_id="p-2", product_name="Pan", quantity=1, unit_price=Money("5.00")),
        ),
        subtotal=Money("25.00"),
        tax=Money("4.00"),
        total=Money("29.00"),
    )


# ============================================================================
# API fixtures
# ============================================================================

@pytest.fixture
def api_app(tenant):
    """
    App with a fixed tenant lookup: only acme.<ROOT_DOMAIN> resolves.
    Services are overridden per test through app.dependency_overrides.
    """
    from zylos.main import create_app

    app = create_app(tenant_resolver=lambda subdomain: tenant if subdomain == "acme" else None)
    yield app
    app.dependency_overrides.clear()


@pytest.fixture
def login_as(api_app):
    """Returns a function that authenticates every request as the given role"""
    from zylos.core.auth import TokenUser, get_current_user

    def login(role: str = "admin", tenant_id: str = TENANT_ID) -> TokenUser:
        user = TokenUser(id="u-1", email="user@acme.example.com", role=role, tenant_id=tenant_id)
        api_app.dependency_overrides[get_current_user] = lambda: user
        return user
    return login


@pytest.fixture
def tenant_client(api_app):
    """Client calling the acme store subdomain"""
    from fastapi.testclient import TestClient
    return TestClient(api_app, base_url="http://acme.localhost:8000")


@pytest.fixture
def root_client(api_app):
    """Client calling the root domain (no tenant)"""
    from fastapi.testclient import TestClient
    return TestClient(api_app, base_url="http://localhost:8000")
