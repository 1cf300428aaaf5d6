"""
Session stores - server-side persistence of SessionData keyed by session id.

Two interchangeable backends with the same key/TTL contract:
- MemorySessionStore: process memory, lost on restart (development)
- DatabaseSessionStore: SQLAlchemy "sessions" table (any DATABASE_URL)

Contract:
- get() returns None for unknown or expired ids
- set() writes the whole value and (re)starts the TTL
- touch() extends the TTL of an existing entry only; it never creates one,
  so a read racing a logout cannot bring the session back
- delete() is a no-op for unknown ids
"""

import logging
import time
from abc import ABC, abstractmethod
from typing import Callable, Dict, Optional, Tuple

from fastapi.concurrency import run_in_threadpool
from sqlalchemy import delete as sql_delete
from sqlalchemy.orm import sessionmaker

from teamcal.models.stored_session import StoredSession
from teamcal.schemas.session import SessionData


logger = logging.getLogger("teamcal.services.session_store")


Clock = Callable[[], float]


class SessionStore(ABC):
    """Abstract session store. All methods are coroutines."""

    @abstractmethod
    async def get(self, session_id: str) -> Optional[SessionData]:
        ...

    @abstractmethod
    async def set(self, session_id: str, data: SessionData, ttl_seconds: int) -> None:
        ...

    @abstractmethod
    async def touch(self, session_id: str, ttl_seconds: int) -> bool:
        """Extend the TTL. Returns False if the entry no longer exists."""

    @abstractmethod
    async def delete(self, session_id: str) -> None:
        ...


class MemorySessionStore(SessionStore):
    """
    Dict-backed store.

    Values are kept as JSON-ready dicts, never as the live SessionData
    object, so a handler mutating its context does not change what is
    stored until it commits.
    """

    # Expired entries are purged at most this often
    SWEEP_INTERVAL_SECONDS = 60

    def __init__(self, clock: Clock = time.time):
        self._clock = clock
        # session_id -> (serialized SessionData, expires_at epoch seconds)
        self._entries: Dict[str, Tuple[dict, float]] = {}
        self._last_sweep = clock()

    def __len__(self) -> int:
        return len(self._entries)

    def _sweep(self) -> None:
        now = self._clock()
        if now - self._last_sweep < self.SWEEP_INTERVAL_SECONDS:
            return
        self._last_sweep = now
        expired = [sid for sid, (_, expires_at) in self._entries.items() if expires_at <= now]
        for sid in expired:
            del self._entries[sid]
        if expired:
            logger.debug(f"Purged {len(expired)} expired sessions")

    async def get(self, session_id: str) -> Optional[SessionData]:
        self._sweep()
        entry = self._entries.get(session_id)
        if entry is None:
            return None
        payload, expires_at = entry
        if expires_at <= self._clock():
            del self._entries[session_id]
            return None
        return SessionData.model_validate(payload)

    async def set(self, session_id: str, data: SessionData, ttl_seconds: int) -> None:
        self._entries[session_id] = (data.model_dump(mode="json"), self._clock() + ttl_seconds)

    async def touch(self, session_id: str, ttl_seconds: int) -> bool:
        entry = self._entries.get(session_id)
        if entry is None or entry[1] <= self._clock():
            return False
        self._entries[session_id] = (entry[0], self._clock() + ttl_seconds)
        return True

    async def delete(self, session_id: str) -> None:
        self._entries.pop(session_id, None)


class DatabaseSessionStore(SessionStore):
    """
    SQLAlchemy-backed store.

    Blocking ORM calls run in the threadpool so a slow database never
    stalls the event loop. Each call is one short transaction on one row,
    which is the unit of atomicity for a session.
    """

    def __init__(self, session_factory: sessionmaker, clock: Clock = time.time):
        self._session_factory = session_factory
        self._clock = clock

    # -------------------------------------------------------------------------
    # SYNC IMPLEMENTATIONS (run in threadpool)
    # -------------------------------------------------------------------------

    def _get_sync(self, session_id: str) -> Optional[dict]:
        with self._session_factory() as db:
            row = db.get(StoredSession, session_id)
            if row is None:
                return None
            if row.expires_at <= self._clock():
                db.delete(row)
                db.commit()
                return None
            return row.data

    def _set_sync(self, session_id: str, payload: dict, ttl_seconds: int) -> None:
        expires_at = self._clock() + ttl_seconds
        with self._session_factory() as db:
            row = db.get(StoredSession, session_id)
            if row is None:
                db.add(StoredSession(sid=session_id, data=payload, expires_at=expires_at))
            else:
                row.data = payload
                row.expires_at = expires_at
            db.commit()

    def _touch_sync(self, session_id: str, ttl_seconds: int) -> bool:
        now = self._clock()
        with self._session_factory() as db:
            row = db.get(StoredSession, session_id)
            if row is None or row.expires_at <= now:
                return False
            row.expires_at = now + ttl_seconds
            db.commit()
            return True

    def _delete_sync(self, session_id: str) -> None:
        with self._session_factory() as db:
            db.execute(sql_delete(StoredSession).where(StoredSession.sid == session_id))
            db.commit()

    def purge_expired(self) -> int:
        """Delete every expired row. Returns the number removed."""
        with self._session_factory() as db:
            result = db.execute(sql_delete(StoredSession).where(StoredSession.expires_at <= self._clock()))
            db.commit()
            return result.rowcount or 0

    # -------------------------------------------------------------------------
    # ASYNC INTERFACE
    # -------------------------------------------------------------------------

    async def get(self, session_id: str) -> Optional[SessionData]:
        payload = await run_in_threadpool(self._get_sync, session_id)
        if payload is None:
            return None
        return SessionData.model_validate(payload)

    async def set(self, session_id: str, data: SessionData, ttl_seconds: int) -> None:
        await run_in_threadpool(self._set_sync, session_id, data.model_dump(mode="json"), ttl_seconds)

    async def touch(self, session_id: str, ttl_seconds: int) -> bool:
        return await run_in_threadpool(self._touch_sync, session_id, ttl_seconds)

    async def delete(self, session_id: str) -> None:
        await run_in_threadpool(self._delete_sync, session_id)
