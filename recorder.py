# quizbank/recorder.py

from __future__ import annotations

from datetime import UTC, datetime
from typing import Dict, List, Optional, Tuple

from schemas.session import AnswerRecord

Records = Dict[str, AnswerRecord]


def _now_iso() -> str:
    return datetime.now(UTC).isoformat().replace("+00:00", "Z")


def grade(option: str, answer: str) -> bool:
    return option.strip().upper() == (answer or "").strip().upper()


def apply_submission(
    records: Records,
    wrongbook: List[str],
    qid: str,
    selected: str,
    correct: bool,
    answered_at: Optional[str] = None,
) -> Tuple[Records, List[str]]:
    """
    Return new (records, wrongbook) with the answer applied. Inputs are not
    touched, so the caller can persist before swapping state in.
    """
    new_records = dict(records)
    new_records[qid] = AnswerRecord(
        selected=selected, correct=correct, answered_at=answered_at or _now_iso()
    )

    if correct:
        new_wrong = [i for i in wrongbook if i != qid]
    elif qid in wrongbook:
        new_wrong = list(wrongbook)
    else:
        new_wrong = [*wrongbook, qid]
    return new_records, new_wrong


def apply_reset(records: Records, wrongbook: List[str], qid: str) -> Tuple[Records, List[str]]:
    new_records = {k: v for k, v in records.items() if k != qid}
    new_wrong = [i for i in wrongbook if i != qid]
    return new_records, new_wrong
