"""
Unit tests for the Tenant entity

Author: TM3
Date: 2025-10-17
"""
import pytest

from zylos.domain.errors import InvalidSubdomain, InvalidTenantName
from zylos.domain.tenant import Tenant


class TestTenant:

    def test_create(self):
        tenant = Tenant.create("  Acme Store ", "acme-store")
        assert tenant.name == "Acme Store"
        assert tenant.subdomain == "acme-store"
        assert tenant.is_active()

    def test_subdomain_is_not_rewritten(self):
        with pytest.raises(InvalidSubdomain):
            Tenant.create("Acme", "ACME Store!")

    def test_empty_name_raises(self):
        with pytest.raises(InvalidTenantName):
            Tenant.create("  ", "acme")

    def test_empty_subdomain_raises(self):
        with pytest.raises(InvalidSubdomain):
            Tenant.create("Acme", "")

    def test_activate_and_deactivate_return_new_instances(self, tenant):
        inactive = tenant.deactivate()
        assert not inactive.is_active()
        assert tenant.is_active()
        assert inactive.activate().is_active()

    def test_to_context(self, tenant):
        assert tenant.to_context() == {
            "id": tenant.id,
            "name": "Acme Store",
            "subdomain": "acme",
        }
