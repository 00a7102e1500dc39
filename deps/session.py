# quizbank/deps/session.py
from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from typing import Annotated, Dict

from fastapi import Depends, Header, HTTPException

from bank import Bank, get_bank
from errors import LoadError
from progress import ProgressPersister
from session import QuizSession
from store import SqlKeyValueStore

logger = logging.getLogger(__name__)

DEFAULT_SCOPE = "default"


@dataclass
class SessionSlot:
    """A session plus the lock every request must hold while using it."""

    session: QuizSession
    lock: threading.Lock = field(default_factory=threading.Lock)


class SessionRegistry:
    def __init__(self):
        self._slots: Dict[str, SessionSlot] = {}
        # one lock per scope for the life of the process; a replaced session
        # keeps its scope's lock so old and new requests never overlap
        self._scope_locks: Dict[str, threading.Lock] = {}
        self._lock = threading.Lock()

    def get(self, scope: str, bank: Bank) -> SessionSlot:
        with self._lock:
            slot = self._slots.get(scope)
            if slot is not None and slot.session.bank is bank:
                return slot
            scope_lock = self._scope_locks.setdefault(scope, threading.Lock())

        # a reloaded bank invalidates the old session; it rebuilds from storage
        # while holding the scope lock, after any in-flight request finishes
        with scope_lock:
            with self._lock:
                slot = self._slots.get(scope)
                if slot is not None and slot.session.bank is bank:
                    return slot
            session = QuizSession(bank, ProgressPersister(SqlKeyValueStore(scope)))
            session.restore()
            slot = SessionSlot(session, lock=scope_lock)
            with self._lock:
                self._slots[scope] = slot
            return slot

    def clear(self) -> None:
        with self._lock:
            self._slots.clear()


registry = SessionRegistry()


async def loaded_bank() -> Bank:
    try:
        return await get_bank()
    except LoadError as e:
        logger.error("question bank unavailable: %s", e)
        raise HTTPException(status_code=503, detail=f"bank_unavailable: {e.reason}")


def _scope(x_quiz_user: str | None) -> str:
    scope = (x_quiz_user or "").strip()[:64]
    return scope or DEFAULT_SCOPE


def session_slot(
    bank: Annotated[Bank, Depends(loaded_bank)],
    x_quiz_user: Annotated[str | None, Header(alias="x-quiz-user")] = None,
) -> SessionSlot:
    return registry.get(_scope(x_quiz_user), bank)


BankDep = Annotated[Bank, Depends(loaded_bank)]
SlotDep = Annotated[SessionSlot, Depends(session_slot)]
