"""
Settings for the archetype matching service, via pydantic-settings.

Every tunable the service reads from the environment is declared here.
Call get_settings() for the cached instance.
"""

from functools import lru_cache
from pathlib import Path
from typing import List, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


# Repository root (src/config/settings.py -> ../../)
PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent


class Settings(BaseSettings):
    """
    Service configuration, read from environment variables and `.env`.

    Required:
        - SUPABASE_URL: Supabase project holding the archetype catalog
        - SUPABASE_SERVICE_KEY: Service role key for that project

    Matching overrides:
        - ARCHETYPE_TABLE: Catalog table name (default: morph_archetypes)
        - BMI_EPSILON / BMI_RELAXATION: BMI gate tolerances
        - MIN_STRICT_CANDIDATES: Strict survivors needed to skip relaxation
        - CATALOG_FETCH_TIMEOUT_SECONDS: Timeout for the catalog read
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ==========================================================================
    # Runtime
    # ==========================================================================
    environment: str = Field(default="development", description="development, staging or production")
    debug: bool = Field(default=False, description="Force DEBUG logging")
    log_level: str = Field(default="INFO", description="Minimum log level")

    @property
    def is_development(self) -> bool:
        return self.environment.lower() in ("development", "dev", "local")

    @property
    def is_production(self) -> bool:
        return self.environment.lower() in ("production", "prod")

    # ==========================================================================
    # HTTP Server
    # ==========================================================================
    host: str = Field(default="0.0.0.0", description="Bind address")
    port: int = Field(default=8080, description="Bind port")

    cors_origins: List[str] = Field(
        default=["http://localhost:3000", "http://localhost:5173"],
        description="Origins allowed to call the API (comma-separated in env)"
    )

    @field_validator("cors_origins", mode="before")
    @classmethod
    def split_cors_origins(cls, v):
        if isinstance(v, str):
            return [origin.strip() for origin in v.split(",") if origin.strip()]
        return v

    # ==========================================================================
    # Archetype Catalog (Supabase)
    # ==========================================================================
    supabase_url: str = Field(..., description="Supabase project URL")
    supabase_service_key: str = Field(..., description="Supabase service role key")
    archetype_table: str = Field(
        default="morph_archetypes",
        description="Table holding the archetype catalog"
    )
    catalog_fetch_timeout_seconds: Optional[float] = Field(
        default=10.0,
        description="Timeout for the catalog read (None disables it)"
    )

    # ==========================================================================
    # Archetype Matching
    # ==========================================================================
    bmi_epsilon: float = Field(
        default=0.5,
        ge=0.0,
        description="Tolerance applied to both BMI range bounds"
    )
    bmi_relaxation: float = Field(
        default=8.0,
        ge=0.0,
        description="Extra BMI band width used by the relaxed pass"
    )
    min_strict_candidates: int = Field(
        default=2,
        ge=0,
        description="Relax the BMI gate when fewer candidates survive the strict pass"
    )
    default_match_limit: int = Field(default=5, ge=1, description="Default shortlist size")
    max_match_limit: int = Field(default=20, ge=1, description="Largest shortlist a request may ask for")


@lru_cache
def get_settings() -> Settings:
    """
    Cached Settings instance.

    Reads the `.env` at the repository root when there is one.

    Raises:
        ValidationError: If SUPABASE_URL or SUPABASE_SERVICE_KEY is missing
    """
    env_file = PROJECT_ROOT / ".env"
    return Settings(_env_file=env_file if env_file.exists() else None)


def get_settings_for_testing(**overrides) -> Settings:
    """
    Uncached Settings with test credentials, plus any overrides.

    Example:
        settings = get_settings_for_testing(bmi_relaxation=4.0)
    """
    values = {
        "supabase_url": "https://test.supabase.co",
        "supabase_service_key": "test-key",
        "environment": "testing",
        "debug": True,
    }
    values.update(overrides)
    return Settings(**values)
