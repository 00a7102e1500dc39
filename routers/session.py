# quizbank/routers/session.py
from __future__ import annotations

from fastapi import APIRouter

from deps.session import SlotDep
from schemas.session import (
    FilterUpdate,
    JumpRequest,
    OptionRequest,
    ResetRequest,
    SessionView,
    SubmitRequest,
    SubmitResponse,
    WrongbookOut,
)

router = APIRouter(prefix="/session", tags=["session"])


@router.get("", response_model=SessionView)
def get_session(slot: SlotDep):
    with slot.lock:
        return slot.session.view()


@router.put("/filters", response_model=SessionView)
def update_filters(req: FilterUpdate, slot: SlotDep):
    with slot.lock:
        slot.session.apply_filters(
            subject=req.subject,
            chapter=req.chapter,
            keyword=req.keyword,
            random_order=req.random_order,
            only_wrong=req.only_wrong,
        )
        return slot.session.view()


@router.post("/next", response_model=SessionView)
def next_question(slot: SlotDep):
    with slot.lock:
        slot.session.next()
        return slot.session.view()


@router.post("/prev", response_model=SessionView)
def prev_question(slot: SlotDep):
    with slot.lock:
        slot.session.prev()
        return slot.session.view()


@router.post("/jump", response_model=SessionView)
def jump(req: JumpRequest, slot: SlotDep):
    # out-of-range indexes are ignored, not rejected
    with slot.lock:
        slot.session.jump_to(req.index)
        return slot.session.view()


@router.post("/select", response_model=SessionView)
def select_option(req: OptionRequest, slot: SlotDep):
    with slot.lock:
        slot.session.select_option(req.option)
        return slot.session.view()


@router.post("/submit", response_model=SubmitResponse)
def submit(req: SubmitRequest, slot: SlotDep):
    with slot.lock:
        applied, correct = slot.session.try_submit(req.option)
        return {"ok": applied, "correct": correct, "view": slot.session.view()}


@router.post("/reset", response_model=SessionView)
def reset(req: ResetRequest, slot: SlotDep):
    with slot.lock:
        slot.session.reset(req.question_id)
        return slot.session.view()


@router.post("/image", response_model=SessionView)
def toggle_image(slot: SlotDep):
    with slot.lock:
        slot.session.toggle_image()
        return slot.session.view()


@router.get("/wrongbook", response_model=WrongbookOut)
def wrongbook(slot: SlotDep):
    with slot.lock:
        ids = list(slot.session.wrongbook)
    return {"ids": ids, "count": len(ids)}
