"""Database utilities and session management."""

from parkadmin.db.base import (
    Base,
    BaseModel,
    String50,
    String100,
    String255,
    String500,
    String2000,
    is_valid_id,
    new_id,
)
from parkadmin.db.deps import DBSession, get_db
from parkadmin.db.session import (
    AsyncSessionLocal,
    check_db_health,
    close_db,
    engine,
    get_session,
    init_db,
)

__all__ = [
    # Base classes
    "Base",
    "BaseModel",
    # String types
    "String50",
    "String100",
    "String255",
    "String500",
    "String2000",
    # Identifiers
    "new_id",
    "is_valid_id",
    # Session management
    "engine",
    "AsyncSessionLocal",
    "get_session",
    "init_db",
    "close_db",
    "check_db_health",
    # Dependencies
    "get_db",
    "DBSession",
]
