# quizbank/store.py

from __future__ import annotations

from typing import Dict, Iterable, Optional, Protocol, Tuple

from sqlalchemy import select
from sqlalchemy.orm import Session, sessionmaker

from db import SessionLocal
from models import KVEntry


class KeyValueStore(Protocol):
    def get(self, key: str) -> Optional[str]: ...

    def set(self, key: str, value: str) -> None: ...

    def set_many(self, items: Iterable[Tuple[str, str]]) -> None: ...


class MemoryStore:
    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self.data: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self.data.get(key)

    def set(self, key: str, value: str) -> None:
        self.data[key] = value

    def set_many(self, items: Iterable[Tuple[str, str]]) -> None:
        self.data.update(dict(items))


class SqlKeyValueStore:
    """
    Durable store on the kv_entries table. set() and set_many() each commit
    once, so their writes are on disk together before the call returns.
    """

    def __init__(self, scope: str = "default", session_factory: Optional[sessionmaker] = None):
        self.scope = scope
        self._session_factory = session_factory or SessionLocal

    def _find(self, db: Session, key: str) -> Optional[KVEntry]:
        stmt = select(KVEntry).where(KVEntry.scope == self.scope, KVEntry.key == key)
        return db.execute(stmt).scalar_one_or_none()

    def get(self, key: str) -> Optional[str]:
        with self._session_factory() as db:
            row = self._find(db, key)
            return row.value if row else None

    def set(self, key: str, value: str) -> None:
        self.set_many([(key, value)])

    def set_many(self, items: Iterable[Tuple[str, str]]) -> None:
        # all keys in one transaction: either every value lands or none does
        with self._session_factory() as db:
            for key, value in items:
                row = self._find(db, key)
                if row is None:
                    db.add(KVEntry(scope=self.scope, key=key, value=value))
                else:
                    row.value = value
            db.commit()
