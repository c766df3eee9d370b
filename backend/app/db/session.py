"""
Database engine (connection pool) and session.

One engine is active per process. It is built from the active DbConfig and can only be
swapped after the candidate config passes a round-trip test; see ConnectionManager.set_config.
"""
import logging
import threading
from typing import Callable

from fastapi import Depends
from pydantic import BaseModel
from sqlalchemy import create_engine, text
from sqlalchemy.engine import URL, Engine
from sqlalchemy.orm import sessionmaker

from app.config import Settings, settings
from app.core.constants import PASSWORD_MASK, POOL_RECYCLE_SECONDS
from app.core.errors import ConnectionFailure, driver_message

logger = logging.getLogger(__name__)


class DbConfig(BaseModel):
    host: str
    port: int
    user: str
    password: str = ""
    database: str = ""

    model_config = {"frozen": True}

    @classmethod
    def from_settings(cls, s: Settings) -> "DbConfig":
        return cls(
            host=s.db_host,
            port=s.db_port,
            user=s.db_user,
            password=s.db_password,
            database=s.db_name,
        )

    def redacted(self) -> dict:
        """Config as a dict with the password masked; safe to return to clients or log."""
        return {**self.model_dump(), "password": PASSWORD_MASK}


def build_url(config: DbConfig) -> URL:
    return URL.create(
        "mysql+pymysql",
        username=config.user or None,
        password=config.password or None,
        host=config.host or None,
        port=config.port,
        database=config.database or None,
        query={"charset": "utf8mb4"},
    )


def create_pool(config: DbConfig) -> Engine:
    """
    Engine for this config. Lazy: no connection is opened until first use.
    max_overflow=0 so pool_size is a hard bound; extra requests wait up to pool_timeout.
    """
    logger.info("Creating pool for %s:%s/%s", config.host, config.port, config.database)
    return create_engine(
        build_url(config),
        pool_size=settings.db_pool_size,
        max_overflow=0,
        pool_pre_ping=True,
        pool_recycle=POOL_RECYCLE_SECONDS,
        pool_timeout=settings.db_pool_timeout,
    )


class ConnectionManager:
    """
    Holds the single active (config, engine) pair.

    Swaps are serialized by _swap_lock across test + close + install. Readers only take
    _state_lock, which a swap holds just for the install step, so a slow connection
    test never blocks get_pool() and readers never see a missing engine.
    """

    def __init__(
        self,
        defaults: DbConfig | None = None,
        engine_factory: Callable[[DbConfig], Engine] = create_pool,
    ):
        self._defaults = defaults
        self._engine_factory = engine_factory
        self._config: DbConfig | None = None
        self._engine: Engine | None = None
        self._state_lock = threading.Lock()
        self._swap_lock = threading.Lock()

    def _ensure_loaded(self) -> None:
        # Caller holds _state_lock
        if self._config is None:
            self._config = self._defaults or DbConfig.from_settings(Settings())
        if self._engine is None:
            self._engine = self._engine_factory(self._config)

    def get_pool(self) -> Engine:
        with self._state_lock:
            self._ensure_loaded()
            return self._engine

    def get_config(self) -> dict:
        """Active config with the password masked."""
        with self._state_lock:
            self._ensure_loaded()
            return self._config.redacted()

    def test_config(self, candidate: DbConfig) -> None:
        """Round-trip SELECT 1 on a throwaway pool. Raises ConnectionFailure; never touches active state."""
        probe = self._engine_factory(candidate)
        try:
            with probe.connect() as conn:
                conn.execute(text("SELECT 1"))
        except Exception as e:
            msg = driver_message(e)
            logger.warning(
                "Connection test failed for %s:%s/%s: %s",
                candidate.host, candidate.port, candidate.database, msg,
            )
            raise ConnectionFailure(msg) from e
        finally:
            probe.dispose()

    def set_config(self, candidate: DbConfig, keep_password: bool = False) -> None:
        """
        Test candidate, then close the old pool and install candidate with a fresh pool.
        On ConnectionFailure the active config and pool are left as they were.
        keep_password: an empty candidate password reuses the active one.
        """
        with self._swap_lock:
            if keep_password and not candidate.password:
                with self._state_lock:
                    self._ensure_loaded()
                    candidate = candidate.model_copy(update={"password": self._config.password})
            self.test_config(candidate)
            engine = self._engine_factory(candidate)
            with self._state_lock:
                if self._engine is not None:
                    self._engine.dispose()
                self._config, self._engine = candidate, engine
        logger.info("Switched database to %s:%s/%s", candidate.host, candidate.port, candidate.database)

    def close(self) -> None:
        with self._state_lock:
            if self._engine is not None:
                self._engine.dispose()
                self._engine = None


connection_manager = ConnectionManager()
SessionLocal = sessionmaker(autocommit=False, autoflush=False)


def get_connection_manager() -> ConnectionManager:
    return connection_manager


def get_db(manager: ConnectionManager = Depends(get_connection_manager)):
    db = SessionLocal(bind=manager.get_pool())
    try:
        yield db
    finally:
        db.close()
