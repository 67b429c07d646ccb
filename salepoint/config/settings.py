"""
Application settings with Pydantic v2 validation.

Loads configuration from environment variables with sensible defaults.
"""

from pathlib import Path
from typing import Any, Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class StorageSettings(BaseSettings):
    """Storage configuration."""

    model_config = SettingsConfigDict(env_prefix="STORAGE_")

    data_dir: Path = Path("data")
    db_name: str = "salepoint.db"

    # SQLite settings
    pool_size: int = 5
    busy_timeout: int = 30000  # ms

    @property
    def db_path(self) -> Path:
        return self.data_dir / self.db_name


class APISettings(BaseSettings):
    """API server configuration."""

    model_config = SettingsConfigDict(env_prefix="API_")

    host: str = "0.0.0.0"
    port: int = 8000
    debug: bool = False
    cors_origins: list[str] = ["*"]


class SalesSettings(BaseSettings):
    """Checkout, tax and invoicing configuration."""

    model_config = SettingsConfigDict(env_prefix="SALES_")

    tax_rate: float = Field(default=0.16, ge=0, le=1)
    tax_enabled: bool = False
    tax_label: str = "VAT"

    currency_code: str = "USD"
    currency_symbol: str = "$"

    invoice_prefix: str = "INV-"
    default_payment_method: Literal[
        "CASH", "MOBILE_PAYMENT", "BANK_TRANSFER", "POS_TERMINAL"
    ] = "CASH"

    product_search_limit: int = 20

    # Operator recorded on sales until authentication is wired in
    default_user_id: int = 1


class CompanySettings(BaseSettings):
    """Company details printed on receipts."""

    model_config = SettingsConfigDict(env_prefix="COMPANY_")

    name: str = "Salepoint Store"
    address: str = ""
    phone: str = ""
    email: str = ""
    tax_id: str = ""
    receipt_footer: str = "Thank you for your purchase"


class ClientSettings(BaseSettings):
    """Terminal client configuration (gateway and draft cache)."""

    model_config = SettingsConfigDict(env_prefix="CLIENT_")

    base_url: str = "http://localhost:8000"
    timeout: float = 15.0

    # Double-click absorption after a submission resolves
    submit_cooldown_seconds: float = 0.5

    # Retry settings (catalog reads only)
    max_retries: int = 3
    retry_delay: float = 0.5
    retry_multiplier: float = 2.0

    draft_db_name: str = "drafts.db"


class Settings(BaseSettings):
    """Main application settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    app_name: str = "Salepoint POS"
    app_version: str = "1.0.0"
    environment: Literal["development", "staging", "production"] = "development"
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"

    # Sub-settings
    storage: StorageSettings = Field(default_factory=StorageSettings)
    api: APISettings = Field(default_factory=APISettings)
    sales: SalesSettings = Field(default_factory=SalesSettings)
    company: CompanySettings = Field(default_factory=CompanySettings)
    client: ClientSettings = Field(default_factory=ClientSettings)

    @field_validator("storage", mode="before")
    @classmethod
    def ensure_data_dir(cls, v: Any) -> StorageSettings:
        if isinstance(v, dict):
            settings = StorageSettings(**v)
        else:
            settings = v or StorageSettings()
        settings.data_dir.mkdir(parents=True, exist_ok=True)
        return settings

    @property
    def draft_db_path(self) -> Path:
        return self.storage.data_dir / self.client.draft_db_name


# Global settings instance
_settings: Settings | None = None


def get_settings() -> Settings:
    """Get or create global settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reset_settings() -> None:
    """Reset settings (for testing)."""
    global _settings
    _settings = None
