from app.db.base import Base
from app.db.session import (
    ConnectionManager,
    DbConfig,
    SessionLocal,
    connection_manager,
    get_connection_manager,
    get_db,
)
from app.db.tables import CHAT_HISTORY_TABLE

__all__ = [
    "Base",
    "ConnectionManager",
    "DbConfig",
    "SessionLocal",
    "connection_manager",
    "get_connection_manager",
    "get_db",
    "CHAT_HISTORY_TABLE",
]
