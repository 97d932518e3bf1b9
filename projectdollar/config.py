# projectdollar/config.py
"""
Application configuration using Pydantic Settings.

Loads configuration from environment variables with validation:
- ENVIRONMENT: Runtime mode (development, test, production)
- DATABASE_URL: Where the single state record is persisted
- PRICE_* / FX_*: Market data provider behaviour (timeouts, TTLs, fallbacks)

Environment-specific behavior:
- test: In-memory SQLite, background refresh disabled
- development: Local SQLite file by default
- production: Rejects in-memory databases

Usage:
    from projectdollar.config import settings

    ttl = settings.price_cache_ttl_seconds
"""
from decimal import Decimal
from pathlib import Path
from typing import Literal

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


_PROJECT_ROOT = Path(__file__).resolve().parent.parent
_ENV_FILE = _PROJECT_ROOT / ".env"


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Environment variables:
        - ENVIRONMENT: Runtime environment (development, test, production)
        - DATABASE_URL: SQLAlchemy URL for the state store
        - LOG_LEVEL: Logging level (default: "INFO")
        - LOG_FORMAT: "text" or "json" (default: "text")
        - ALPHA_VANTAGE_API_KEY: Enables the secondary price source
    """

    environment: Literal["development", "test", "production"] = Field(
        default="development",
        description="Runtime environment (development, test, production)"
    )

    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )
    log_format: Literal["text", "json"] = Field(
        default="text",
        description="Log output format"
    )

    database_url: str | None = Field(
        default=None,
        description="SQLAlchemy connection string for the state store"
    )

    app_name: str = "ProjectDollar"
    debug: bool = False

    # =========================================================================
    # PERSISTENCE
    # =========================================================================
    state_key: str = Field(
        default="ProjectDollar:state",
        min_length=1,
        description="Namespace key of the single persisted state record"
    )

    # =========================================================================
    # PRICE PROVIDER
    # =========================================================================
    price_sources: list[str] = Field(
        default=["yahoo", "alpha_vantage"],
        description="Ordered quote sources; the first is the primary"
    )
    price_cache_ttl_seconds: float = Field(
        default=300.0,
        gt=0,
        description="How long a fetched price stays valid"
    )
    price_request_timeout: float = Field(
        default=5.0,
        gt=0,
        description="Per-source timeout before falling through to the next source"
    )
    price_fetch_concurrency: int = Field(
        default=4,
        ge=1,
        le=32,
        description="Maximum concurrent symbol lookups in a batch fetch"
    )
    price_request_delay: float = Field(
        default=1.0,
        ge=0,
        description="Pause between lookups in a sequential refresh"
    )
    price_refresh_interval: float = Field(
        default=120.0,
        gt=0,
        description="Seconds between background price refreshes"
    )
    enable_background_refresh: bool = Field(
        default=True,
        description="Start the periodic price refresh with the API"
    )
    alpha_vantage_api_key: str | None = Field(
        default=None,
        description="API key for the Alpha Vantage GLOBAL_QUOTE endpoint"
    )

    # =========================================================================
    # EXCHANGE RATE PROVIDER
    # =========================================================================
    fx_rate_url: str = Field(
        default="https://api.exchangerate-api.com/v4/latest/EUR",
        description="JSON endpoint returning rates relative to EUR"
    )
    fx_cache_ttl_seconds: float = Field(
        default=3600.0,
        gt=0,
        description="How long a fetched EUR/USD rate stays valid"
    )
    fx_fallback_rate: Decimal = Field(
        default=Decimal("1.08"),
        gt=0,
        description="EUR/USD rate used when the rate source fails"
    )

    # =========================================================================
    # CORS
    # =========================================================================
    cors_origins: list[str] = Field(
        default=["http://localhost:8081", "http://localhost:3000"],
        description="Allowed CORS origins"
    )

    model_config = SettingsConfigDict(
        env_file=str(_ENV_FILE) if _ENV_FILE.exists() else None,
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @model_validator(mode="after")
    def validate_environment(self) -> "Settings":
        """
        Fill environment-dependent defaults.

        Rules:
        - test: in-memory SQLite, no background refresh
        - development: SQLite file next to the project
        - production: DATABASE_URL required, in-memory SQLite rejected
        """
        if self.environment == "test":
            if self.database_url is None:
                object.__setattr__(self, "database_url", "sqlite:///:memory:")
            object.__setattr__(self, "enable_background_refresh", False)
            return self

        if self.database_url is None:
            if self.environment == "production":
                raise ValueError(
                    "DATABASE_URL is required in production environment. "
                    "Example: sqlite:////var/lib/projectdollar/state.db"
                )
            object.__setattr__(
                self, "database_url", f"sqlite:///{_PROJECT_ROOT / 'projectdollar.db'}"
            )

        if self.environment == "production" and ":memory:" in self.database_url:
            raise ValueError(
                "Production environment cannot use an in-memory database; "
                "state would be lost on restart."
            )

        return self

    @property
    def is_sqlite(self) -> bool:
        """Check if using SQLite database."""
        return self.database_url is not None and self.database_url.lower().startswith("sqlite")

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment == "production"

    @property
    def is_test(self) -> bool:
        """Check if running in test environment."""
        return self.environment == "test"


settings = Settings()
