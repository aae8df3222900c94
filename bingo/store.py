"""Key-value state store with per-key expiry.

Sessions, balances, transactions and card reservations all live here as
JSON documents. Callers do read-modify-write on single keys; nothing is
atomic across a get/put pair, so two writers on the same key race and the
last ``put`` wins.
"""

from __future__ import annotations

import json
import time
from typing import Any, Callable, Dict, Optional, Tuple

from flask import Flask

from bingo import db


Clock = Callable[[], float]


class Store:
    """Backend-agnostic interface."""

    def put(self, key: str, value: Any, ttl: Optional[float] = None) -> None:
        raise NotImplementedError

    def get(self, key: str) -> Any:
        raise NotImplementedError

    def delete(self, key: str) -> None:
        raise NotImplementedError

    def purge_expired(self) -> int:
        return 0


class MemoryStore(Store):
    """Process-local store. Values are kept JSON-encoded so readers never
    share mutable objects with writers."""

    def __init__(self, clock: Clock = time.time) -> None:
        self._clock = clock
        self._data: Dict[str, Tuple[str, Optional[float]]] = {}

    def put(self, key, value, ttl=None):
        expires_at = self._clock() + ttl if ttl else None
        self._data[key] = (json.dumps(value), expires_at)

    def get(self, key):
        entry = self._data.get(key)
        if entry is None:
            return None
        raw, expires_at = entry
        if expires_at is not None and expires_at <= self._clock():
            self._data.pop(key, None)
            return None
        return json.loads(raw)

    def delete(self, key):
        self._data.pop(key, None)

    def purge_expired(self):
        now = self._clock()
        stale = [k for k, (_, exp) in self._data.items() if exp is not None and exp <= now]
        for k in stale:
            self._data.pop(k, None)
        return len(stale)


class SqlStore(Store):
    """Store backed by the ``store_entry`` table. Needs an app context.

    Rows are always re-read from the table since game loops write them from
    their own app context and session."""

    def __init__(self, clock: Clock = time.time) -> None:
        self._clock = clock

    def put(self, key, value, ttl=None):
        from bingo.models import StoreEntry
        expires_at = self._clock() + ttl if ttl else None
        try:
            entry = db.session.get(StoreEntry, key, populate_existing=True)
            if entry is None:
                entry = StoreEntry(key=key)
            entry.value = json.dumps(value)
            entry.expires_at = expires_at
            db.session.add(entry)
            db.session.commit()
        except Exception:
            db.session.rollback()
            raise

    def get(self, key):
        from bingo.models import StoreEntry
        entry = db.session.get(StoreEntry, key, populate_existing=True)
        if entry is None:
            return None
        if entry.is_expired(self._clock()):
            self.delete(key)
            return None
        return json.loads(entry.value)

    def delete(self, key):
        from bingo.models import StoreEntry
        try:
            StoreEntry.query.filter_by(key=key).delete()
            db.session.commit()
        except Exception:
            db.session.rollback()
            raise

    def purge_expired(self):
        from bingo.models import StoreEntry
        try:
            count = StoreEntry.query.filter(
                StoreEntry.expires_at.isnot(None),
                StoreEntry.expires_at <= self._clock(),
            ).delete(synchronize_session=False)
            db.session.commit()
        except Exception:
            db.session.rollback()
            raise
        return int(count or 0)


def create_store(app: Flask, clock: Clock = time.time) -> Store:
    backend = str(app.config.get('STORE_BACKEND', 'sql')).lower().strip()
    if backend == 'memory':
        store = MemoryStore(clock=clock)
    elif backend == 'sql':
        store = SqlStore(clock=clock)
    else:
        raise ValueError(f"Unknown STORE_BACKEND: {backend}")
    app.logger.info(f"[store] backend={backend}")
    return store
