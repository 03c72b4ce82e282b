"""Session stores — durable mappings from session id to ``SessionState``.

The middleware reads a session once at the start of a request and
writes it back once at the end, so a store only needs per-id atomic
``get``/``put``/``destroy``. No cross-session locking is required.

Two backends ship with guildhall:

- ``MemorySessionStore`` — a dict, optionally with a time-to-live.
- ``SqliteSessionStore`` — stdlib ``sqlite3`` run in anyio worker
  threads, for sessions that survive a restart.
"""

import json
import sqlite3
import threading
import time
from collections.abc import Callable
from pathlib import Path
from typing import Any, Protocol, runtime_checkable

import anyio

from guildhall.sessions.state import SessionState


@runtime_checkable
class SessionStore(Protocol):
    """Storage backend protocol for server-side sessions."""

    async def get(self, session_id: str) -> SessionState | None: ...

    async def put(self, session_id: str, state: SessionState) -> None: ...

    async def destroy(self, session_id: str) -> None: ...


class MemorySessionStore:
    """Process-local session store.

    Entries older than ``ttl`` seconds (measured from the last ``put``)
    are treated as absent. Every ``sweep_interval`` seconds (default:
    ``ttl``) a ``put`` also purges every expired entry, so sessions whose
    cookie never comes back do not accumulate. States are copied in and
    out so a request never shares a mutable object with the store.
    """

    __slots__ = ("_clock", "_data", "_last_sweep", "_sweep_interval", "_ttl")

    def __init__(
        self,
        ttl: float | None = None,
        *,
        sweep_interval: float | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._ttl = ttl
        self._sweep_interval = ttl if sweep_interval is None else sweep_interval
        self._clock = clock
        self._last_sweep = clock()
        self._data: dict[str, tuple[float, dict[str, Any]]] = {}

    def __len__(self) -> int:
        return len(self._data)

    def __contains__(self, session_id: object) -> bool:
        return session_id in self._data

    def _expired(self, stored_at: float, now: float) -> bool:
        return self._ttl is not None and now - stored_at > self._ttl

    async def get(self, session_id: str) -> SessionState | None:
        entry = self._data.get(session_id)
        if entry is None:
            return None
        stored_at, payload = entry
        if self._expired(stored_at, self._clock()):
            del self._data[session_id]
            return None
        return SessionState.from_dict(payload)

    async def put(self, session_id: str, state: SessionState) -> None:
        now = self._clock()
        if self._sweep_interval is not None and now - self._last_sweep >= self._sweep_interval:
            self.purge()
        self._data[session_id] = (now, state.to_dict())

    async def destroy(self, session_id: str) -> None:
        self._data.pop(session_id, None)

    def purge(self) -> int:
        """Drop every expired entry and return how many were removed."""
        now = self._clock()
        self._last_sweep = now
        expired = [
            session_id
            for session_id, (stored_at, _) in self._data.items()
            if self._expired(stored_at, now)
        ]
        for session_id in expired:
            del self._data[session_id]
        return len(expired)


_SCHEMA = (
    """
    CREATE TABLE IF NOT EXISTS sessions (
        id TEXT PRIMARY KEY,
        data TEXT NOT NULL,
        expires_at REAL
    )
    """,
    "CREATE INDEX IF NOT EXISTS sessions_expires_at ON sessions (expires_at)",
)


class SqliteSessionStore:
    """Session store persisted in a SQLite file.

    Blocking ``sqlite3`` calls run in anyio's worker threads so the
    event loop never waits on disk. Expired rows are treated as absent
    and deleted when read; every ``sweep_interval`` seconds a ``put``
    also deletes all expired rows.

    Usage::

        store = SqliteSessionStore("sessions.db", ttl=86400)
    """

    __slots__ = ("_conn", "_last_sweep", "_lock", "_sweep_interval", "_ttl")

    def __init__(
        self,
        path: str | Path,
        ttl: float | None = None,
        *,
        sweep_interval: float = 60.0,
    ) -> None:
        self._ttl = ttl
        self._sweep_interval = sweep_interval
        self._last_sweep = time.monotonic()
        self._lock = threading.Lock()
        self._conn = sqlite3.connect(str(path), check_same_thread=False)
        with self._lock:
            for statement in _SCHEMA:
                self._conn.execute(statement)
            self._conn.commit()

    def _execute(self, sql: str, params: tuple[Any, ...]) -> list[Any]:
        with self._lock:
            rows = self._conn.execute(sql, params).fetchall()
            self._conn.commit()
            return rows

    async def _run(self, sql: str, *params: Any) -> list[Any]:
        return await anyio.to_thread.run_sync(self._execute, sql, params)

    async def get(self, session_id: str) -> SessionState | None:
        rows = await self._run("SELECT data, expires_at FROM sessions WHERE id = ?", session_id)
        if not rows:
            return None
        data, expires_at = rows[0]
        if expires_at is not None and expires_at < time.time():
            await self.destroy(session_id)
            return None
        return SessionState.from_dict(json.loads(data))

    async def put(self, session_id: str, state: SessionState) -> None:
        if time.monotonic() - self._last_sweep >= self._sweep_interval:
            await self.purge()
        expires_at = time.time() + self._ttl if self._ttl is not None else None
        await self._run(
            "INSERT INTO sessions (id, data, expires_at) VALUES (?, ?, ?) "
            "ON CONFLICT(id) DO UPDATE SET data = excluded.data, expires_at = excluded.expires_at",
            session_id,
            json.dumps(state.to_dict()),
            expires_at,
        )

    async def destroy(self, session_id: str) -> None:
        await self._run("DELETE FROM sessions WHERE id = ?", session_id)

    def _delete_expired(self, now: float) -> int:
        with self._lock:
            cursor = self._conn.execute(
                "DELETE FROM sessions WHERE expires_at IS NOT NULL AND expires_at < ?", (now,)
            )
            self._conn.commit()
            return cursor.rowcount

    async def purge(self) -> int:
        """Delete every expired row and return how many were removed."""
        self._last_sweep = time.monotonic()
        return await anyio.to_thread.run_sync(self._delete_expired, time.time())

    def close(self) -> None:
        with self._lock:
            self._conn.close()
