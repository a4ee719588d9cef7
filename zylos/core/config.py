"""
Centralized application settings
"""
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List, Optional


class Settings(BaseSettings):
    """Application settings, read from the environment and .env"""

    # API Settings
    API_TITLE: str = "Zylos API"
    API_VERSION: str = "1.0.0"
    API_DESCRIPTION: str = "Multi-tenant point of sale, inventory and ledger API"
    API_HOST: str = "0.0.0.0"
    API_PORT: int = 8000
    API_DEBUG: bool = False

    # Database
    DATABASE_URL: str = ""
    SUPABASE_URL: str = ""
    SUPABASE_SERVICE_ROLE_KEY: str = ""

    # Auth
    AUTH_SECRET: str = ""

    # Tenancy: tenants live at <subdomain>.<ROOT_DOMAIN>
    ROOT_DOMAIN: str = "localhost:8000"

    # CORS - Can be string (comma-separated) or JSON array
    # Example: "http://localhost:3000,https://yourdomain.com" or '["http://localhost:3000"]'
    ALLOWED_ORIGINS: Optional[str] = "http://localhost:3000,http://localhost:3001"

    # Business defaults
    DEFAULT_TAX_RATE: float = 0.16
    LOW_STOCK_THRESHOLD: int = 10

    # "memory" keeps an in-process event log, "none" discards events
    EVENT_PUBLISHER: str = "memory"
    # Newest events kept by the "memory" publisher
    EVENT_LOG_SIZE: int = 1000

    LOG_LEVEL: str = "INFO"

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=True, extra="ignore")

    def get_allowed_origins(self) -> List[str]:
        """Parse ALLOWED_ORIGINS string into list"""
        if not self.ALLOWED_ORIGINS:
            return ["http://localhost:3000"]

        # Try JSON parse first (for array format)
        import json
        try:
            origins = json.loads(self.ALLOWED_ORIGINS)
            if isinstance(origins, list):
                return origins
        except (json.JSONDecodeError, ValueError):
            pass

        # Fall back to comma-separated string
        return [origin.strip() for origin in self.ALLOWED_ORIGINS.split(",")]

    def root_hostname(self) -> str:
        """ROOT_DOMAIN without port"""
        return self.ROOT_DOMAIN.split(":")[0].lower()


settings = Settings()
