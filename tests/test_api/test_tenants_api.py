"""
API tests for store registration, tenant administration and the app-level
endpoints

Author: TM3
Date: 2025-10-17
"""
from unittest.mock import MagicMock, patch

import pytest

from zylos.api.deps import get_tenant_service
from zylos.domain.errors import InvalidSubdomain, SubdomainTaken
from zylos.domain.tenant import Tenant


@pytest.fixture
def tenant_service(api_app):
    service = MagicMock()
    api_app.dependency_overrides[get_tenant_service] = lambda: service
    return service


class TestRegistration:

    def test_register_on_root_domain(self, root_client, tenant_service):
        # Arrange
        tenant_service.create_tenant.return_value = Tenant(
            id="t-2", name="Café Luna", subdomain="cafe-luna", active=True
        )

        # Act
        response = root_client.post("/api/v1/tenants/", json={"name": "Café Luna", "subdomain": "cafe-luna"})

        # Assert
        assert response.status_code == 201
        assert response.json()["data"]["subdomain"] == "cafe-luna"
        tenant_service.create_tenant.assert_called_once_with("Café Luna", "cafe-luna")

    def test_taken_subdomain_is_conflict(self, root_client, tenant_service):
        tenant_service.create_tenant.side_effect = SubdomainTaken("acme")

        response = root_client.post("/api/v1/tenants/", json={"name": "Acme", "subdomain": "acme"})

        assert response.status_code == 409
        assert response.json()["code"] == "SUBDOMAIN_TAKEN"

    def test_invalid_subdomain(self, root_client, tenant_service):
        tenant_service.create_tenant.side_effect = InvalidSubdomain("Invalid subdomain 'Acme!'")

        response = root_client.post("/api/v1/tenants/", json={"name": "Acme", "subdomain": "Acme!"})

        assert response.status_code == 400
        assert response.json()["code"] == "INVALID_SUBDOMAIN"

    def test_check_and_suggest_are_public(self, root_client, tenant_service):
        tenant_service.check_subdomain_availability.return_value = {"subdomain": "luna", "available": True}
        tenant_service.suggest_subdomain.return_value = {"suggestion": "cafe-luna", "available": True}

        check = root_client.get("/api/v1/tenants/check/luna")
        suggest = root_client.get("/api/v1/tenants/suggest", params={"name": "Cafe Luna"})

        assert check.status_code == 200
        assert check.json()["data"]["available"] is True
        assert suggest.json()["data"]["suggestion"] == "cafe-luna"


class TestTenantAdministration:

    def test_list_requires_token(self, root_client, tenant_service):
        response = root_client.get("/api/v1/tenants/")

        assert response.status_code == 401

    def test_admin_is_not_super_admin(self, root_client, login_as, tenant_service):
        login_as("admin")

        response = root_client.post("/api/v1/tenants/t-2/deactivate")

        assert response.status_code == 403
        tenant_service.deactivate.assert_not_called()

    def test_super_admin_deactivates(self, root_client, login_as, tenant_service):
        login_as("super_admin", tenant_id=None)
        tenant_service.deactivate.return_value = Tenant(
            id="t-2", name="Café Luna", subdomain="cafe-luna", active=False
        )

        response = root_client.post("/api/v1/tenants/t-2/deactivate")

        assert response.status_code == 200
        assert response.json()["data"]["active"] is False


class TestAppEndpoints:

    def test_unknown_subdomain_is_404(self, api_app):
        from fastapi.testclient import TestClient
        client = TestClient(api_app, base_url="http://nope.localhost:8000")

        response = client.get("/api/v1/products/")

        assert response.status_code == 404
        assert response.json()["code"] == "TENANT_NOT_FOUND"

    def test_tenant_endpoint_on_root_domain_is_400(self, root_client, login_as):
        login_as("admin")

        response = root_client.get("/api/v1/products/")

        assert response.status_code == 400

    def test_root_reports_tenant(self, tenant_client, root_client):
        on_tenant = tenant_client.get("/")
        on_root = root_client.get("/")

        assert on_tenant.json()["tenant"]["subdomain"] == "acme"
        assert on_tenant.headers["x-tenant-subdomain"] == "acme"
        assert on_root.json()["tenant"] is None

    @patch('zylos.main.get_db_connection_with_retry')
    def test_health_connected(self, mock_connect, root_client):
        mock_conn = MagicMock()
        mock_connect.return_value = mock_conn

        response = root_client.get("/health")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert body["database"]["status"] == "connected"
        mock_conn.close.assert_called_once()

    @patch('zylos.main.get_db_connection_with_retry')
    def test_health_degraded(self, mock_connect, api_app):
        from fastapi.testclient import TestClient
        mock_connect.side_effect = Exception("connection refused")

        # Exempt from tenant lookup even on an unknown subdomain
        response = TestClient(api_app, base_url="http://nope.localhost:8000").get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "degraded"
        assert "connection refused" in response.json()["database"]["error"]
