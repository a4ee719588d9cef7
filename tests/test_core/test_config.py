"""
Tests for settings parsing

Author: TM3
Date: 2025-10-17
"""
from zylos.core.config import Settings


class TestSettings:

    def test_comma_separated_origins(self):
        settings = Settings(ALLOWED_ORIGINS="http://a.test, https://b.test")
        assert settings.get_allowed_origins() == ["http://a.test", "https://b.test"]

    def test_json_origins(self):
        settings = Settings(ALLOWED_ORIGINS='["https://app.zylos.app"]')
        assert settings.get_allowed_origins() == ["https://app.zylos.app"]

    def test_empty_origins_fall_back_to_localhost(self):
        assert Settings(ALLOWED_ORIGINS="").get_allowed_origins() == ["http://localhost:3000"]

    def test_root_hostname(self):
        assert Settings(ROOT_DOMAIN="Zylos.App:443").root_hostname() == "zylos.app"
