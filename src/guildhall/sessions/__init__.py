"""Server-side session state and its stores."""

from guildhall.sessions.state import SessionState
from guildhall.sessions.store import MemorySessionStore, SessionStore, SqliteSessionStore

__all__ = ["MemorySessionStore", "SessionState", "SessionStore", "SqliteSessionStore"]
