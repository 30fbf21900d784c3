from __future__ import annotations

import json
import time
from abc import ABC, abstractmethod
from contextlib import contextmanager
from datetime import datetime, timedelta, timezone
from threading import Lock
from typing import Any, Callable, Iterator

from sqlalchemy.orm import Session

from orderassist.conversation.models import ChatTurn, OrderRecord
from orderassist.models.session_entry import SessionEntry


class SessionStore(ABC):
    @abstractmethod
    def get(self, key: str) -> Any | None:
        """Return the stored value, or None when absent or expired."""

    @abstractmethod
    def set(self, key: str, value: Any) -> None:
        """Store a JSON-compatible value and restart its expiry."""

    @abstractmethod
    def delete(self, key: str) -> None:
        """Remove the value if present."""


class InMemorySessionStore(SessionStore):
    """Session state in process memory with a sliding TTL.

    ``ttl_seconds=None`` keeps entries for the lifetime of the process.
    """

    def __init__(self, *, ttl_seconds: float | None = None, clock: Callable[[], float] = time.monotonic) -> None:
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._data: dict[str, tuple[str, float | None]] = {}
        self._lock = Lock()

    def _purge_expired(self, now: float) -> None:
        expired = [key for key, (_, expires_at) in self._data.items() if expires_at is not None and expires_at <= now]
        for key in expired:
            self._data.pop(key, None)

    def get(self, key: str) -> Any | None:
        now = self._clock()
        with self._lock:
            self._purge_expired(now)
            entry = self._data.get(key)
            if entry is None:
                return None
            return json.loads(entry[0])

    def set(self, key: str, value: Any) -> None:
        now = self._clock()
        expires_at = now + self.ttl_seconds if self.ttl_seconds else None
        with self._lock:
            self._data[key] = (json.dumps(value, ensure_ascii=False), expires_at)

    def delete(self, key: str) -> None:
        with self._lock:
            self._data.pop(key, None)

    def __len__(self) -> int:
        with self._lock:
            self._purge_expired(self._clock())
            return len(self._data)


class DatabaseSessionStore(SessionStore):
    """Session state shared between workers through the SQL database."""

    def __init__(self, session_factory: Callable[[], Session], *, ttl_seconds: float | None = None) -> None:
        self._session_factory = session_factory
        self.ttl_seconds = ttl_seconds

    def _now(self) -> datetime:
        return datetime.now(timezone.utc)

    @staticmethod
    def _is_expired(entry: SessionEntry, now: datetime) -> bool:
        if entry.expires_at is None:
            return False
        expires_at = entry.expires_at
        # SQLite hands back naive datetimes
        if expires_at.tzinfo is None:
            expires_at = expires_at.replace(tzinfo=timezone.utc)
        return expires_at <= now

    def get(self, key: str) -> Any | None:
        db = self._session_factory()
        try:
            entry = db.query(SessionEntry).filter(SessionEntry.key == key).first()
            if entry is None:
                return None
            if self._is_expired(entry, self._now()):
                db.delete(entry)
                db.commit()
                return None
            return json.loads(entry.value_json or "null")
        finally:
            db.close()

    def set(self, key: str, value: Any) -> None:
        now = self._now()
        expires_at = now + timedelta(seconds=self.ttl_seconds) if self.ttl_seconds else None
        payload = json.dumps(value, ensure_ascii=False)
        db = self._session_factory()
        try:
            entry = db.query(SessionEntry).filter(SessionEntry.key == key).first()
            if entry is None:
                db.add(SessionEntry(key=key, value_json=payload, expires_at=expires_at))
            else:
                entry.value_json = payload
                entry.expires_at = expires_at
            db.commit()
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()

    def delete(self, key: str) -> None:
        db = self._session_factory()
        try:
            db.query(SessionEntry).filter(SessionEntry.key == key).delete()
            db.commit()
        finally:
            db.close()

    def purge_expired(self) -> int:
        db = self._session_factory()
        try:
            removed = (
                db.query(SessionEntry)
                .filter(SessionEntry.expires_at.isnot(None), SessionEntry.expires_at <= self._now())
                .delete(synchronize_session=False)
            )
            db.commit()
            return removed
        finally:
            db.close()


class ConversationMemory:
    PREFIX = "history:"

    def __init__(self, store: SessionStore) -> None:
        self._store = store

    def history(self, session_key: str) -> list[ChatTurn]:
        raw = self._store.get(self.PREFIX + session_key) or []
        return [ChatTurn.from_dict(item) for item in raw if isinstance(item, dict)]

    def append_turn(self, session_key: str, user_text: str, assistant_text: str) -> list[ChatTurn]:
        turns = self.history(session_key)
        turns.append(ChatTurn(role="user", content=user_text))
        turns.append(ChatTurn(role="assistant", content=assistant_text))
        self._store.set(self.PREFIX + session_key, [turn.to_dict() for turn in turns])
        return turns


class OrderStateStore:
    PREFIX = "order:"

    def __init__(self, store: SessionStore) -> None:
        self._store = store

    def get(self, session_key: str) -> OrderRecord | None:
        raw = self._store.get(self.PREFIX + session_key)
        if raw is None:
            return None
        return OrderRecord.from_dict(raw)

    def save(self, session_key: str, record: OrderRecord) -> None:
        self._store.set(self.PREFIX + session_key, record.to_dict())

    def clear(self, session_key: str) -> None:
        self._store.delete(self.PREFIX + session_key)


class ProcessedMessageRegistry:
    """Remembers inbound webhook message ids so redeliveries are skipped."""

    PREFIX = "processed:"

    def __init__(self, store: SessionStore) -> None:
        self._store = store
        self._lock = Lock()

    def mark_if_new(self, message_id: str) -> bool:
        key = self.PREFIX + message_id
        with self._lock:
            if self._store.get(key) is not None:
                return False
            self._store.set(key, True)
        return True


class SessionLockRegistry:
    """One lock per session key; turns for the same session run one at a time."""

    def __init__(self) -> None:
        self._locks: dict[str, Lock] = {}
        self._refcounts: dict[str, int] = {}
        self._guard = Lock()

    def acquire(self, session_key: str) -> Lock:
        with self._guard:
            lock = self._locks.setdefault(session_key, Lock())
            self._refcounts[session_key] = self._refcounts.get(session_key, 0) + 1
        lock.acquire()
        return lock

    def release(self, session_key: str) -> None:
        with self._guard:
            lock = self._locks[session_key]
            remaining = self._refcounts[session_key] - 1
            if remaining <= 0:
                self._refcounts.pop(session_key, None)
                self._locks.pop(session_key, None)
            else:
                self._refcounts[session_key] = remaining
        lock.release()

    def active_sessions(self) -> int:
        with self._guard:
            return len(self._locks)

    @contextmanager
    def hold(self, session_key: str) -> Iterator[None]:
        self.acquire(session_key)
        try:
            yield
        finally:
            self.release(session_key)
