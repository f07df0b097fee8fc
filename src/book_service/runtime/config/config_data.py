"""Typed view of the ``config`` section of config.yaml.

Every field has a default, so an empty or missing section still yields a
usable configuration pointing at a local MySQL server.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field
from sqlalchemy.engine import URL


class LoggingConfig(BaseModel):
    """Where loguru writes and how much."""

    level: str = Field(default="INFO", description="Minimum level for every sink")
    format: Literal["json", "plain"] = Field(default="plain", description="Log format")
    file: str | None = Field(default=None, description="Log file path")
    max_size_mb: int = Field(default=10, description="Rotate the log file at this size (MB)")
    backup_count: int = Field(default=5, description="Rotated log files kept")


class DatabaseConfig(BaseModel):
    """Connection settings for the MySQL record store."""

    driver: str = Field(default="mysql+pymysql", description="SQLAlchemy dialect+driver")
    host: str = Field(default="127.0.0.1", description="Database host")
    port: int = Field(default=3306, description="Database port")
    name: str = Field(default="book", description="Database name")
    user: str = Field(default="root", description="Database username")
    password: str | None = Field(default=None, description="Database password")
    charset: str = Field(default="utf8mb4", description="Connection character set")
    pool_size: int = Field(default=10, description="Connection pool size")
    max_overflow: int = Field(default=10, description="Connections allowed beyond pool_size")
    pool_timeout: int = Field(default=30, description="Seconds to wait for a pooled connection")
    pool_recycle: int = Field(default=1800, description="Reopen pooled connections older than this (s)")
    connect_timeout: int = Field(
        default=10, description="Driver connect timeout in seconds"
    )

    @property
    def url(self) -> URL:
        """SQLAlchemy URL for the configured server.

        ``URL.create`` escapes the credentials, so passwords containing ``@``
        or ``/`` need no manual quoting.
        """
        query = {"charset": self.charset} if self.driver.startswith("mysql") else {}
        return URL.create(
            self.driver,
            username=self.user or None,
            password=self.password or None,
            host=self.host,
            port=self.port,
            database=self.name,
            query=query,
        )

    @property
    def safe_url(self) -> str:
        """The connection URL with the password masked, for logging."""
        return self.url.render_as_string(hide_password=True)


class AppConfig(BaseModel):
    """HTTP listener settings."""

    environment: Literal["development", "production", "test"] = Field(
        default="development", description="Deployment stage; selects <ENV>_ overrides"
    )
    host: str = Field(default="0.0.0.0", description="Listen address")
    port: int = Field(default=9091, description="Listen port")


class ConfigData(BaseModel):
    """The whole ``config`` section."""

    logging: LoggingConfig = Field(
        default_factory=LoggingConfig, description="Log sinks"
    )
    database: DatabaseConfig = Field(
        default_factory=DatabaseConfig, description="Record store connection"
    )
    app: AppConfig = Field(
        default_factory=AppConfig, description="HTTP listener"
    )
