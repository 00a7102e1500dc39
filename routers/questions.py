from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, HTTPException

from deps.session import BankDep
from filters import build_queue
from schemas.questions import QuestionOut, SubjectEntry

router = APIRouter(tags=["questions"])


@router.get("/subjects", response_model=List[SubjectEntry])
def list_subjects(bank: BankDep):
    return bank.index


@router.get("/questions", response_model=List[QuestionOut])
def list_questions(
    bank: BankDep,
    subject: Optional[str] = None,
    chapter: Optional[str] = None,
    keyword: Optional[str] = None,
):
    if subject and chapter:
        ids = build_queue(bank.questions.values(), subject, chapter, keyword=keyword or "")
        return [bank.get(qid).model_dump() for qid in ids]

    # browsing without a full chapter filter: bank order
    qs = [
        q
        for q in bank.questions.values()
        if (not subject or q.subject == subject) and (not chapter or q.chapter == chapter)
    ]
    return [q.model_dump() for q in qs]


# ids look like subject/chapter/page-001, hence :path
@router.get("/questions/{qid:path}", response_model=QuestionOut)
def get_question_detail(qid: str, bank: BankDep):
    q = bank.get(qid)
    if not q:
        raise HTTPException(status_code=404, detail="question not found")
    return q.model_dump()
