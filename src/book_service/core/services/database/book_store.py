"""Database engine and session factory shared by the book handlers."""

from typing import Any

from loguru import logger
from sqlalchemy import text
from sqlalchemy.engine import URL, make_url
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, SQLModel, create_engine

from src.book_service.entities.book import BookTable
from src.book_service.runtime.config.config_data import DatabaseConfig


class StoreUnavailableError(RuntimeError):
    """Raised when the record store cannot be reached at startup."""


class BookStore:
    """The single shared handle to the record store.

    Wraps one SQLAlchemy engine, whose connection pool makes the handle safe
    to share between concurrently running requests. Constructing a store
    never opens a connection; call :meth:`connect` for that.
    """

    def __init__(self, url: str | URL, **engine_kwargs: Any) -> None:
        self._url = make_url(url)
        self._engine = create_engine(self._url, **engine_kwargs)

    @classmethod
    def from_config(cls, db_config: DatabaseConfig) -> "BookStore":
        """Build a pooled store for the configured database server."""
        engine_kwargs: dict[str, Any] = {
            "pool_size": db_config.pool_size,
            "max_overflow": db_config.max_overflow,
            "pool_timeout": db_config.pool_timeout,
            "pool_recycle": db_config.pool_recycle,
            "pool_pre_ping": True,  # Validate connections before use
            "echo": False,
        }
        if db_config.driver.startswith("mysql"):
            engine_kwargs["connect_args"] = {"connect_timeout": db_config.connect_timeout}

        logger.info("Configuring record store engine for {}", db_config.safe_url)
        return cls(db_config.url, **engine_kwargs)

    @property
    def safe_url(self) -> str:
        return self._url.render_as_string(hide_password=True)

    def ping(self) -> None:
        """Round-trip a trivial query, raising StoreUnavailableError on failure."""
        try:
            with self._engine.connect() as connection:
                connection.execute(text("SELECT 1"))
        except SQLAlchemyError as e:
            raise StoreUnavailableError(
                f"cannot reach record store at {self.safe_url}: {e}"
            ) from e

    def create_schema(self) -> None:
        """Create the book table if it does not exist yet."""
        SQLModel.metadata.create_all(self._engine, tables=[BookTable.__table__])

    def connect(self) -> None:
        """Verify reachability and make sure the schema exists."""
        logger.info("Connecting to record store at {}", self.safe_url)
        self.ping()
        self.create_schema()
        logger.info("Record store ready")

    def get_session(self) -> Session:
        """Return a new SQLModel session bound to the shared engine."""
        return Session(self._engine, expire_on_commit=False, autoflush=True)

    def dispose(self) -> None:
        """Release every pooled connection."""
        self._engine.dispose()
