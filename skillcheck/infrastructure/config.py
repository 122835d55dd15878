"""
Centralized configuration management for the skill-check reporting service.

Provides environment-specific configuration with validation, type safety,
and settings sections loaded from the environment using Pydantic.
"""

from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path
from typing import Any, Literal

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings


class DatabaseConfig(BaseSettings):
    """
    Database configuration settings.

    Handles both SQLite and MySQL configurations with validation
    and connection URL generation.

    Example:
        >>> db_config = DatabaseConfig(backend="sqlite", sqlite_path="./test.db")
        >>> print(db_config.get_connection_url())
        >>> # sqlite:///./test.db
    """

    backend: Literal["sqlite", "mysql"] = Field("sqlite", description="Database backend type")

    # SQLite settings
    sqlite_path: str | None = Field("./skillcheck.db", description="SQLite database file path")

    # MySQL settings
    mysql_host: str | None = Field("localhost", description="MySQL host")
    mysql_port: int | None = Field(3306, ge=1, le=65535, description="MySQL port")
    mysql_user: str | None = Field("root", description="MySQL username")
    mysql_password: str | None = Field("", description="MySQL password")
    mysql_database: str | None = Field("skillcheck", description="MySQL database name")
    mysql_charset: str = Field("utf8mb4", description="MySQL character set")

    # Connection settings
    pool_pre_ping: bool = Field(True, description="Enable connection pool pre-ping")
    pool_recycle: int = Field(3600, ge=60, description="Connection pool recycle time (seconds)")
    echo: bool = Field(False, description="Enable SQL query logging")

    model_config = {"env_prefix": "DB_", "case_sensitive": False}

    @field_validator("sqlite_path")
    def validate_sqlite_path(cls, v):
        """Validate SQLite path and ensure directory exists."""
        if v and v != ":memory:":
            path = Path(v)
            path.parent.mkdir(parents=True, exist_ok=True)
            if not path.suffix:
                v = str(path.with_suffix(".db"))
        return v

    @model_validator(mode="after")
    def validate_mysql_config(self):
        """Validate MySQL configuration completeness."""
        if self.backend == "mysql":
            missing = []
            if not self.mysql_host:
                missing.append("mysql_host")
            if not self.mysql_user:
                missing.append("mysql_user")
            if not self.mysql_database:
                missing.append("mysql_database")
            if missing:
                raise ValueError(f"MySQL backend requires: {', '.join(missing)}")
        return self

    def get_connection_url(self) -> str:
        """
        Generate database connection URL.

        Returns:
            Database connection URL string

        Raises:
            ValueError: If backend is unsupported
        """
        if self.backend == "sqlite":
            return f"sqlite:///{self.sqlite_path}"
        elif self.backend == "mysql":
            password_part = f":{self.mysql_password}" if self.mysql_password else ""
            return (
                f"mysql+pymysql://{self.mysql_user}{password_part}@{self.mysql_host}:"
                f"{self.mysql_port}/{self.mysql_database}?charset={self.mysql_charset}"
            )
        else:
            raise ValueError(f"Unsupported database backend: {self.backend}")

    def get_engine_options(self) -> dict[str, Any]:
        """Get SQLAlchemy engine options."""
        return {
            "echo": self.echo,
            "future": True,
            "pool_pre_ping": self.pool_pre_ping,
            "pool_recycle": self.pool_recycle,
        }


class LoggingConfig(BaseSettings):
    """
    Logging configuration settings.

    Example:
        >>> configure_logging(LoggingConfig(level="DEBUG", file_path="./logs/debug.log"))
    """

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        "INFO", description="Minimum logging level"
    )
    file_path: str | None = Field("./logs/skillcheck.log", description="Log file path")
    max_bytes: int = Field(10 * 1024 * 1024, ge=1024, description="Max log file size in bytes")
    backup_count: int = Field(5, ge=1, description="Number of backup log files")
    structured: bool = Field(True, description="Use structured JSON logging")
    console_enabled: bool = Field(True, description="Enable console output")

    model_config = {"env_prefix": "LOG_", "case_sensitive": False}

    @field_validator("file_path")
    def validate_log_path(cls, v):
        """Ensure log directory exists."""
        if v:
            Path(v).parent.mkdir(parents=True, exist_ok=True)
        return v


class SecurityConfig(BaseSettings):
    """
    Security configuration settings.

    Upload limits and CORS settings for the web surface.
    """

    max_upload_size_mb: int = Field(10, ge=1, le=100, description="Maximum CSV upload size (MB)")
    max_comment_length: int = Field(2000, ge=50, description="Maximum counseling comment length")

    cors_origins: list[str] = Field(["*"], description="Allowed CORS origins")
    cors_methods: list[str] = Field(["GET", "POST"], description="Allowed CORS methods")

    model_config = {"env_prefix": "SECURITY_", "case_sensitive": False}

    @property
    def max_upload_bytes(self) -> int:
        return self.max_upload_size_mb * 1024 * 1024


class ReportConfig(BaseSettings):
    """
    Report content settings.

    National averages are published figures for the certification
    programme; they are shown beside each customer's own results.

    Example:
        >>> report = ReportConfig(national_care=270)
        >>> report.national_averages()["care"]
        270.0
    """

    organisation: str = Field("Nail Skill Check", description="Name printed on reports")
    history_limit: int = Field(10, ge=1, le=50, description="Rows in the history table")

    national_total: float | None = Field(692, ge=0, description="National average overall score")
    national_care: float | None = Field(267, ge=0, description="National average care score")
    national_one_color: float | None = Field(
        350, ge=0, description="National average one-color score"
    )
    national_gradation: float | None = Field(
        None, ge=0, description="National average gradation score"
    )
    national_time: float | None = Field(75, ge=0, description="National average time score")
    national_total_time: str | None = Field(
        "104 minutes 54 seconds", description="National average total working time"
    )

    model_config = {"env_prefix": "REPORT_", "case_sensitive": False}

    def national_averages(self) -> dict[str, float | None]:
        """National averages keyed by discipline name."""
        return {
            "total": _as_float(self.national_total),
            "care": _as_float(self.national_care),
            "one_color": _as_float(self.national_one_color),
            "gradation": _as_float(self.national_gradation),
            "time": _as_float(self.national_time),
        }


def _as_float(value: float | None) -> float | None:
    return float(value) if value is not None else None


class ApplicationConfig(BaseSettings):
    """
    Main application configuration.

    Example:
        >>> config = get_settings()
        >>> print(config.app.environment)
    """

    environment: Literal["development", "testing", "production"] = Field(
        "development", description="Application environment"
    )
    debug: bool = Field(False, description="Enable debug mode")
    title: str = Field("Skill Check Reports", description="Application title")
    version: str = Field("0.1.0", description="Application version")

    # Feature flags
    enable_pdf_reports: bool = Field(True, description="Enable printable PDF reports")
    enable_data_export: bool = Field(True, description="Enable data export functionality")
    enable_csv_import: bool = Field(True, description="Enable CSV upload endpoint")

    model_config = {"env_prefix": "APP_", "case_sensitive": False}

    @model_validator(mode="after")
    def debug_implies_development(self):
        """Ensure debug mode is only enabled outside production."""
        if self.debug and self.environment == "production":
            raise ValueError("Debug mode cannot be enabled in production")
        return self


class Settings:
    """
    Complete application settings container.

    Provides structured access to all configuration sections
    with lazy loading and caching.

    Example:
        >>> settings = get_settings()
        >>> print(settings.database.get_connection_url())
        >>> print(settings.report.history_limit)
    """

    def __init__(self):
        self._app: ApplicationConfig | None = None
        self._database: DatabaseConfig | None = None
        self._logging: LoggingConfig | None = None
        self._security: SecurityConfig | None = None
        self._report: ReportConfig | None = None

    @property
    def app(self) -> ApplicationConfig:
        """Get application configuration."""
        if self._app is None:
            self._app = ApplicationConfig()
        return self._app

    @property
    def database(self) -> DatabaseConfig:
        """Get database configuration."""
        if self._database is None:
            self._database = DatabaseConfig()
        return self._database

    @property
    def logging(self) -> LoggingConfig:
        """Get logging configuration."""
        if self._logging is None:
            level = "DEBUG" if self.app.debug else "INFO"
            if self.app.environment == "production":
                level = "WARNING"
            self._logging = LoggingConfig(level=level)
        return self._logging

    @property
    def security(self) -> SecurityConfig:
        """Get security configuration."""
        if self._security is None:
            self._security = SecurityConfig()
        return self._security

    @property
    def report(self) -> ReportConfig:
        """Get report configuration."""
        if self._report is None:
            self._report = ReportConfig()
        return self._report

    def is_development(self) -> bool:
        return self.app.environment == "development"

    def is_testing(self) -> bool:
        return self.app.environment == "testing"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Get application settings instance (cached).

    Returns:
        Settings instance with all configuration loaded
    """
    return Settings()


def load_settings_from_file(file_path: str) -> Settings:
    """
    Load settings from a JSON configuration file.

    Each top-level section is exported as ``SECTION_KEY`` environment
    variables, e.g. ``{"db": {"backend": "sqlite"}}`` sets ``DB_BACKEND``.

    Raises:
        FileNotFoundError: If configuration file doesn't exist
        ValueError: If file format is unsupported
    """
    import json

    config_path = Path(file_path)
    if not config_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {file_path}")

    if config_path.suffix.lower() == ".json":
        with open(config_path, encoding="utf-8") as f:
            config_data = json.load(f)
    else:
        raise ValueError(f"Unsupported configuration file format: {config_path.suffix}")

    for section, values in config_data.items():
        if isinstance(values, dict):
            for key, value in values.items():
                os.environ[f"{section.upper()}_{key.upper()}"] = str(value)

    get_settings.cache_clear()
    return get_settings()


def override_settings(**kwargs) -> Settings:
    """
    Override specific settings for testing or development.

    Example:
        >>> settings = override_settings(app_environment="testing")
    """
    for key, value in kwargs.items():
        os.environ[key.upper()] = str(value)

    get_settings.cache_clear()
    return get_settings()


def reset_settings() -> None:
    """Reset settings cache to reload from environment."""
    get_settings.cache_clear()
