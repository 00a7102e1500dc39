# quizbank/progress.py

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List

from pydantic import ValidationError

from errors import MalformedStorageError
from schemas.session import AnswerRecord, Prefs
from store import KeyValueStore

logger = logging.getLogger(__name__)

# Key names are part of the stored data format; do not rename.
PROGRESS_KEY = "quiz_progress_v1"
RECORDS_KEY = "quiz_records_v1"
WRONGBOOK_KEY = "quiz_wrongbook_v1"
PREFS_KEY = "quiz_prefs_v1"

_DELIM = "__"


def progress_key(subject: str, chapter: str, wrong_only: bool, randomize: bool, keyword: str) -> str:
    parts = [
        subject,
        chapter,
        "wrong" if wrong_only else "all",
        "rand" if randomize else "seq",
        (keyword or "").strip(),
    ]
    return _DELIM.join(parts)


def restore_cursor(progress: Dict[str, int], key: str, queue_length: int) -> int:
    pos = progress.get(key)
    if isinstance(pos, bool) or not isinstance(pos, int):
        return 0
    return pos if 0 <= pos < queue_length else 0


def reconcile_wrongbook(records: Dict[str, AnswerRecord], wrongbook: List[str]) -> List[str]:
    """
    Wrong book consistent with the records: an id is kept only while its record
    is incorrect, and incorrect records missing from the list are appended.
    """
    out = [qid for qid in wrongbook if qid in records and records[qid].correct is False]
    seen = set(out)
    for qid, record in records.items():
        if record.correct is False and qid not in seen:
            out.append(qid)
            seen.add(qid)
    if out != wrongbook:
        logger.warning("wrong book out of step with answer records; rebuilt (%d id(s))", len(out))
    return out


@dataclass
class PersistedState:
    progress: Dict[str, int] = field(default_factory=dict)
    records: Dict[str, AnswerRecord] = field(default_factory=dict)
    wrongbook: List[str] = field(default_factory=list)
    prefs: Prefs = field(default_factory=Prefs)


class ProgressPersister:
    def __init__(self, store: KeyValueStore):
        self.store = store

    # --- reading ----------------------------------------------------------------

    def _load_json(self, key: str) -> Any:
        raw = self.store.get(key)
        if not raw:
            return None
        try:
            return json.loads(raw)
        except (json.JSONDecodeError, TypeError) as e:
            raise MalformedStorageError(key, str(e)) from e

    def _read(self, key: str, parse, default):
        try:
            data = self._load_json(key)
            if data is None:
                return default
            return parse(key, data)
        except MalformedStorageError as e:
            logger.warning("discarding stored value: %s", e)
            return default

    @staticmethod
    def _parse_progress(key: str, data: Any) -> Dict[str, int]:
        if not isinstance(data, dict):
            raise MalformedStorageError(key, "expected an object")
        return {
            str(k): v for k, v in data.items() if isinstance(v, int) and not isinstance(v, bool)
        }

    @staticmethod
    def _parse_records(key: str, data: Any) -> Dict[str, AnswerRecord]:
        if not isinstance(data, dict):
            raise MalformedStorageError(key, "expected an object")
        out: Dict[str, AnswerRecord] = {}
        for qid, raw in data.items():
            try:
                out[str(qid)] = AnswerRecord.model_validate(raw)
            except ValidationError:
                logger.warning("dropping malformed answer record for %s", qid)
        return out

    @staticmethod
    def _parse_wrongbook(key: str, data: Any) -> List[str]:
        if not isinstance(data, list):
            raise MalformedStorageError(key, "expected a list")
        out: List[str] = []
        for qid in data:
            if isinstance(qid, str) and qid not in out:
                out.append(qid)
        return out

    @staticmethod
    def _parse_prefs(key: str, data: Any) -> Prefs:
        if not isinstance(data, dict):
            raise MalformedStorageError(key, "expected an object")
        return Prefs(
            random_order=bool(data.get("randomOrder")),
            only_wrong=bool(data.get("onlyWrong")),
            selected_subject=data.get("selectedSubject") if isinstance(data.get("selectedSubject"), str) else "",
            selected_chapter=data.get("selectedChapter") if isinstance(data.get("selectedChapter"), str) else "",
            keyword=data.get("keyword") if isinstance(data.get("keyword"), str) else "",
        )

    def restore(self) -> PersistedState:
        records = self._read(RECORDS_KEY, self._parse_records, {})
        wrongbook = self._read(WRONGBOOK_KEY, self._parse_wrongbook, [])
        return PersistedState(
            progress=self._read(PROGRESS_KEY, self._parse_progress, {}),
            records=records,
            wrongbook=reconcile_wrongbook(records, wrongbook),
            prefs=self._read(PREFS_KEY, self._parse_prefs, Prefs()),
        )

    # --- writing ----------------------------------------------------------------

    def save(self, state: PersistedState) -> None:
        """Write every key now, in one store call; no batching across calls."""
        records = {qid: r.model_dump(by_alias=True) for qid, r in state.records.items()}
        self.store.set_many(
            [
                (RECORDS_KEY, json.dumps(records, ensure_ascii=False)),
                (WRONGBOOK_KEY, json.dumps(state.wrongbook, ensure_ascii=False)),
                (PROGRESS_KEY, json.dumps(state.progress, ensure_ascii=False)),
                (PREFS_KEY, json.dumps(state.prefs.model_dump(by_alias=True), ensure_ascii=False)),
            ]
        )
