"""Database persistence layer."""

from .db import create_db_engine, make_session_factory, session_scope
from .models import Base, KeyValueEntry
from .repo import KeyValueRepository, SqlStore

__all__ = [
    "create_db_engine",
    "make_session_factory",
    "session_scope",
    "Base",
    "KeyValueEntry",
    "KeyValueRepository",
    "SqlStore",
]
