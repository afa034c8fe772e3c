"""
Superstore Profitability Analytics
Centralized Configuration Management

Pydantic settings with environment variable support, validation, and type
safety. Each concern gets its own settings class and env prefix; the
top-level ``Settings`` aggregates them.
"""

from functools import lru_cache
from typing import List, Optional
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class DatabaseSettings(BaseSettings):
    """Relational store for the loaded batch"""

    model_config = SettingsConfigDict(env_prefix="DATABASE_")

    url: str = Field(
        default="sqlite+aiosqlite:///./data/superstore.db",
        description="Async SQLAlchemy database URL",
    )
    echo: bool = Field(default=False, description="Echo SQL queries")
    batch_size: int = Field(default=1000, description="Rows per insert batch")


class DataSettings(BaseSettings):
    """Source extract and report output locations"""

    model_config = SettingsConfigDict(env_prefix="DATA_")

    source_path: str = Field(default="./data/superstore.csv", description="CSV extract path")
    output_path: Optional[str] = Field(default=None, description="Report JSON output path")

    # CSV dialect
    delimiter: str = Field(default=",", description="Field delimiter")
    encoding: str = Field(default="utf8", description="File encoding")
    date_format: str = Field(default="%Y-%m-%d", description="Date format of order/ship dates")
    null_values: List[str] = Field(
        default=["", "NULL", "null", "None", "NA", "N/A"],
        description="Tokens read as missing values",
    )


class AnalyticsSettings(BaseSettings):
    """Aggregation engine behaviour"""

    model_config = SettingsConfigDict(env_prefix="ANALYTICS_")

    money_scale: int = Field(default=4, description="Decimal places kept for sales/profit")
    worst_products_limit: int = Field(default=5, description="Rows in the worst products report")
    ranking_limit: int = Field(default=10, description="Rows in customer/state/city rankings")
    allow_missing_profit: bool = Field(
        default=False,
        description="Accept records without profit and exclude them from profit sums",
    )
    max_error_rows: int = Field(default=20, description="Failing row indices kept per check")

    @field_validator("money_scale")
    @classmethod
    def validate_scale(cls, v: int) -> int:
        """Scale must fit the Numeric(14, 4) storage column"""
        if not 0 <= v <= 4:
            raise ValueError("money_scale must be between 0 and 4")
        return v


class MonitoringSettings(BaseSettings):
    """Logging configuration"""

    model_config = SettingsConfigDict(env_prefix="")

    log_level: str = Field(default="INFO", alias="LOG_LEVEL", description="Logging level")
    log_format: str = Field(default="json", alias="LOG_FORMAT", description="Log format: json or text")


class Settings(BaseSettings):
    """
    Main Application Settings

    Aggregates all configuration sections and provides a single entry point
    for accessing application configuration.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    # Application
    app_name: str = Field(default="superstore-analytics", alias="APP_NAME", description="Application name")
    app_env: str = Field(default="development", alias="APP_ENV", description="Environment")
    debug: bool = Field(default=False, alias="DEBUG", description="Debug mode")

    # API Server
    api_host: str = Field(default="0.0.0.0", alias="API_HOST", description="API host")
    api_port: int = Field(default=8000, alias="API_PORT", description="API port")

    # Version
    version: str = Field(default="1.0.0", description="Application version")

    # Subsystem configurations
    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    data: DataSettings = Field(default_factory=DataSettings)
    analytics: AnalyticsSettings = Field(default_factory=AnalyticsSettings)
    monitoring: MonitoringSettings = Field(default_factory=MonitoringSettings)

    @field_validator("app_env")
    @classmethod
    def validate_env(cls, v: str) -> str:
        """Validate environment value"""
        allowed = ["development", "staging", "production", "testing"]
        if v.lower() not in allowed:
            raise ValueError(f"Environment must be one of: {allowed}")
        return v.lower()

    @property
    def is_development(self) -> bool:
        """Check if running in development"""
        return self.app_env == "development"


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached application settings.

    Uses LRU cache to ensure settings are only loaded once.

    Returns:
        Settings: Application settings instance
    """
    return Settings()
