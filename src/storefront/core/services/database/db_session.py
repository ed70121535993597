"""Database engine and session factory backing the local cache."""

import threading
from collections.abc import Iterator
from contextlib import contextmanager

from loguru import logger
from sqlalchemy import Engine, StaticPool, text
from sqlmodel import Session, create_engine

from src.storefront.runtime.config.config_data import DatabaseConfig
from src.storefront.runtime.context import get_config


class DbSessionService:
    def __init__(self, db_config: DatabaseConfig | None = None):
        """Initialize the shared database engine and session factory."""

        main_config = get_config()
        db_config = db_config or main_config.database

        logger.info("Setting up local cache engine for environment: {}", main_config.app.environment)
        engine_kwargs = {
            "echo": db_config.echo,
            "connect_args": self._get_connect_args(db_config),
        }

        if db_config.is_memory:
            # One shared connection, otherwise every checkout sees an empty database
            engine_kwargs["poolclass"] = StaticPool

        self._engine = create_engine(db_config.connection_string, **engine_kwargs)
        # Serializes cache access: SQLite writes, reads and the fan-out that follows
        self._lock = threading.RLock()
        logger.info("Local cache engine initialized using {}", db_config.connection_string)

    def _get_connect_args(self, db_config: DatabaseConfig) -> dict:
        """Get database-specific connection arguments."""
        connect_args = {}

        if db_config.url.startswith("sqlite"):
            connect_args.update(
                {
                    "check_same_thread": False,
                    "timeout": db_config.timeout,
                }
            )

        return connect_args

    @property
    def engine(self) -> Engine:
        return self._engine

    @property
    def lock(self) -> threading.RLock:
        return self._lock

    def get_session(self) -> Session:
        """Return a new SQLModel session bound to the shared engine."""
        return Session(
            self._engine,
            expire_on_commit=False,
            autoflush=True,
        )

    @contextmanager
    def session_scope(self) -> Iterator[Session]:
        """Transaction scope: commit on success, roll back and re-raise on failure."""
        db = self.get_session()
        try:
            yield db
            db.commit()
        except Exception as e:
            db.rollback()
            logger.error(
                "Local cache transaction failed",
                extra={
                    "error_type": type(e).__name__,
                    "error_message": str(e),
                },
            )
            raise
        finally:
            db.close()

    def health_check(self) -> bool:
        """Check that the cache database answers a trivial query."""
        try:
            with self._engine.connect() as connection:
                connection.execute(text("SELECT 1"))
                return True
        except Exception as e:
            logger.error(
                "Local cache health check failed",
                extra={
                    "error_type": type(e).__name__,
                    "error_message": str(e),
                },
            )
            return False

    def dispose(self) -> None:
        self._engine.dispose()
