# quizbank/schemas/questions.py
from __future__ import annotations

import re
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

_LETTER_RE = re.compile(r"^[A-Z]$")


def normalize_options(options: Any) -> Dict[str, str]:
    """
    Canonical option map: single uppercase letter keys, blank entries dropped,
    sorted by letter. Applying it twice gives the same result as once.
    """
    if not isinstance(options, dict):
        return {}

    out: Dict[str, str] = {}
    for key, value in options.items():
        if value is None:
            continue
        k = str(key).strip().upper()
        if not _LETTER_RE.match(k) or k in out:
            continue
        text = str(value).strip()
        if not text:
            continue
        out[k] = text
    return dict(sorted(out.items()))


class Question(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str
    subject: str
    chapter: str
    page: int = 0
    question: str = ""
    options: Dict[str, str] = Field(default_factory=dict)
    answer: str = ""
    has_image: bool = Field(default=False, alias="hasImage")
    image_path: Optional[str] = Field(default=None, alias="imagePath")

    @field_validator("options", mode="before")
    @classmethod
    def _normalize_options(cls, v: Any) -> Dict[str, str]:
        return normalize_options(v)

    @field_validator("answer", mode="before")
    @classmethod
    def _strip_answer(cls, v: Any) -> str:
        return "" if v is None else str(v).strip()

    @field_validator("question", mode="before")
    @classmethod
    def _text(cls, v: Any) -> str:
        return "" if v is None else str(v)

    @model_validator(mode="after")
    def _image_pairing(self) -> "Question":
        # imagePath is present iff hasImage
        if not self.has_image or not self.image_path:
            object.__setattr__(self, "has_image", False)
            object.__setattr__(self, "image_path", None)
        return self


class ChapterEntry(BaseModel):
    name: str
    count: int = 0


class SubjectEntry(BaseModel):
    name: str
    chapters: List[ChapterEntry] = Field(default_factory=list)


class QuestionOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    subject: str
    chapter: str
    page: int
    question: str
    options: Dict[str, str]
    has_image: bool = Field(alias="hasImage")
    image_path: Optional[str] = Field(default=None, alias="imagePath")
