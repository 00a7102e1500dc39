# quizbank/schemas/session.py
from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from schemas.questions import QuestionOut


class AnswerRecord(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    selected: str
    correct: bool
    answered_at: str = Field(alias="answeredAt")


class Prefs(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    random_order: bool = Field(default=False, alias="randomOrder")
    only_wrong: bool = Field(default=False, alias="onlyWrong")
    selected_subject: str = Field(default="", alias="selectedSubject")
    selected_chapter: str = Field(default="", alias="selectedChapter")
    keyword: str = ""


class FilterUpdate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    subject: Optional[str] = None
    chapter: Optional[str] = None
    keyword: Optional[str] = None
    random_order: Optional[bool] = Field(default=None, alias="randomOrder")
    only_wrong: Optional[bool] = Field(default=None, alias="onlyWrong")


class JumpRequest(BaseModel):
    index: int


class OptionRequest(BaseModel):
    option: str


class SubmitRequest(BaseModel):
    option: Optional[str] = None


class ResetRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    question_id: Optional[str] = Field(default=None, alias="questionId")


class Stats(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    done_count: int = Field(alias="doneCount")
    correct_count: int = Field(alias="correctCount")
    wrong_count: int = Field(alias="wrongCount")
    progress_rate: int = Field(alias="progressRate")
    accuracy_rate: int = Field(alias="accuracyRate")


class SessionView(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    subject: str
    chapter: str
    keyword: str
    random_order: bool = Field(alias="randomOrder")
    only_wrong: bool = Field(alias="onlyWrong")
    queue: List[str]
    current_pos: int = Field(alias="currentPos")
    current: Optional[QuestionOut] = None
    selected_option: str = Field(alias="selectedOption")
    submitted: bool
    show_image: bool = Field(alias="showImage")
    can_submit: bool = Field(alias="canSubmit")
    is_last_question: bool = Field(alias="isLastQuestion")
    # revealed only after the current question has been submitted
    answer: Optional[str] = None
    record: Optional[AnswerRecord] = None
    stats: Stats


class SubmitResponse(BaseModel):
    ok: bool
    correct: bool
    view: SessionView


class WrongbookOut(BaseModel):
    ids: List[str]
    count: int

