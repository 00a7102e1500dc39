# quizbank/bank.py

from __future__ import annotations

import asyncio
import json
import logging
import os
from collections import Counter
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

import httpx
from pydantic import ValidationError

from errors import LoadError
from schemas.questions import ChapterEntry, Question, SubjectEntry

logger = logging.getLogger(__name__)

_BASE = Path(__file__).resolve().parent
QUESTION_BANK_SRC = os.getenv("QUESTION_BANK_SRC", str(_BASE / "data" / "question-bank.json"))
CHAPTER_INDEX_SRC = os.getenv("CHAPTER_INDEX_SRC", str(_BASE / "data" / "chapter-index.json"))
BANK_FETCH_TIMEOUT = float(os.getenv("BANK_FETCH_TIMEOUT", "10"))


@dataclass
class Bank:
    questions: Dict[str, Question] = field(default_factory=dict)
    index: List[SubjectEntry] = field(default_factory=list)

    def get(self, qid: str) -> Optional[Question]:
        return self.questions.get(qid)

    def subject_names(self) -> List[str]:
        return [s.name for s in self.index]

    def chapters_for(self, subject: str) -> List[ChapterEntry]:
        target = next((s for s in self.index if s.name == subject), None)
        return list(target.chapters) if target else []

    def __len__(self) -> int:
        return len(self.questions)


def _is_url(src: str) -> bool:
    return src.startswith("http://") or src.startswith("https://")


async def _fetch_text(src: str, client: Optional[httpx.AsyncClient]) -> str:
    if _is_url(src):
        try:
            r = await client.get(src)
        except httpx.HTTPError as e:
            raise LoadError(src, f"{type(e).__name__}: {e}") from e
        if r.status_code >= 400:
            raise LoadError(src, f"HTTP {r.status_code}")
        return r.text

    try:
        return await asyncio.to_thread(Path(src).read_text, encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise LoadError(src, str(e)) from e


async def _fetch_document(src: str, client: Optional[httpx.AsyncClient]) -> Dict[str, Any]:
    text = await _fetch_text(src, client)
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise LoadError(src, f"invalid JSON ({e.msg})") from e
    if not isinstance(data, dict):
        # wrong top-level shape: treat like a document with no arrays
        logger.warning("%s: root is %s, not an object; loading it as empty", src, type(data).__name__)
        return {}
    return data


def _build_questions(doc: Dict[str, Any]) -> Dict[str, Question]:
    rows = doc.get("questions")
    if not isinstance(rows, list):
        # partial bank: no questions array
        rows = []

    questions: Dict[str, Question] = {}
    for raw in rows:
        if not isinstance(raw, dict):
            continue
        try:
            q = Question.model_validate(raw)
        except ValidationError as e:
            logger.warning("skipping invalid question %r: %d error(s)", raw.get("id"), e.error_count())
            continue
        if q.id in questions:
            logger.warning("duplicate question id %s; keeping the later row", q.id)
        questions[q.id] = q
    return questions


def _build_index(doc: Dict[str, Any], questions: Dict[str, Question]) -> List[SubjectEntry]:
    rows = doc.get("subjects")
    if not isinstance(rows, list):
        rows = []

    actual = Counter((q.subject, q.chapter) for q in questions.values())
    index: List[SubjectEntry] = []
    for raw in rows:
        try:
            entry = SubjectEntry.model_validate(raw)
        except ValidationError:
            logger.warning("skipping invalid subject entry %r", raw)
            continue

        chapters = []
        for ch in entry.chapters:
            n = actual.get((entry.name, ch.name), 0)
            if n != ch.count:
                logger.warning(
                    "chapter count mismatch for %s/%s: index says %d, bank has %d",
                    entry.name,
                    ch.name,
                    ch.count,
                    n,
                )
            chapters.append(ChapterEntry(name=ch.name, count=n))
        index.append(SubjectEntry(name=entry.name, chapters=chapters))
    return index


async def load_bank(
    question_src: str = QUESTION_BANK_SRC,
    index_src: str = CHAPTER_INDEX_SRC,
    timeout: float = BANK_FETCH_TIMEOUT,
    client: Optional[httpx.AsyncClient] = None,
) -> Bank:
    """
    Fetch both documents concurrently and build the in-memory bank.
    Raises LoadError if either one fails; nothing is returned in that case.
    Pass `client` to reuse a configured httpx client (it is not closed).
    """
    if client is None:
        async with httpx.AsyncClient(timeout=timeout) as own_client:
            return await load_bank(question_src, index_src, client=own_client)

    bank_doc, index_doc = await asyncio.gather(
        _fetch_document(question_src, client),
        _fetch_document(index_src, client),
    )

    questions = _build_questions(bank_doc)
    index = _build_index(index_doc, questions)
    logger.info("loaded %d questions across %d subjects", len(questions), len(index))
    return Bank(questions=questions, index=index)


class QuestionBank:
    _bank: Optional[Bank] = None
    _lock: Optional[asyncio.Lock] = None

    @classmethod
    def _get_lock(cls) -> asyncio.Lock:
        if cls._lock is None:
            cls._lock = asyncio.Lock()
        return cls._lock

    @classmethod
    async def load(cls) -> Bank:
        if cls._bank is None:
            async with cls._get_lock():
                if cls._bank is None:
                    cls._bank = await load_bank(QUESTION_BANK_SRC, CHAPTER_INDEX_SRC)
        return cls._bank

    @classmethod
    async def reload(cls) -> int:
        async with cls._get_lock():
            bank = await load_bank(QUESTION_BANK_SRC, CHAPTER_INDEX_SRC)
            cls._bank = bank
        return len(bank)

    @classmethod
    def peek(cls) -> Optional[Bank]:
        return cls._bank

    @classmethod
    def clear(cls) -> None:
        cls._bank = None
        cls._lock = None


# Public API
async def get_bank() -> Bank:
    return await QuestionBank.load()


async def reload_bank() -> int:
    return await QuestionBank.reload()
