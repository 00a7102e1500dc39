# quizbank/filters.py

from __future__ import annotations

import random as _rnd
import re
from typing import Collection, Iterable, List, Optional

from schemas.questions import Question

# OCR output spells some symbols as LaTeX-ish escapes, sometimes with doubled
# backslashes. Both sides of a keyword match go through the same table.
_FORMULA_SUBS = [
    (re.compile(r"\\+lambda", re.IGNORECASE), "λ"),
    (re.compile(r"\\+mu", re.IGNORECASE), "μ"),
    (re.compile(r"\\+rho", re.IGNORECASE), "ρ"),
    (re.compile(r"\\+alpha", re.IGNORECASE), "α"),
    (re.compile(r"\\+beta", re.IGNORECASE), "β"),
    (re.compile(r"\\+gamma", re.IGNORECASE), "γ"),
    (re.compile(r"\\+times", re.IGNORECASE), "×"),
    (re.compile(r"\\+cdot", re.IGNORECASE), "·"),
]


def normalize_formula_text(text: Optional[str]) -> str:
    s = "" if text is None else str(text)
    for pat, repl in _FORMULA_SUBS:
        s = pat.sub(repl, s)
    return s.casefold()


def canonical_keyword(keyword: Optional[str]) -> str:
    return (keyword or "").strip()


def matches_keyword(q: Question, keyword: str) -> bool:
    """keyword must already be normalized."""
    if keyword in normalize_formula_text(q.question):
        return True
    return any(keyword in normalize_formula_text(text) for text in q.options.values())


def build_queue(
    questions: Iterable[Question],
    subject: str,
    chapter: str,
    keyword: str = "",
    wrong_only: bool = False,
    randomize: bool = False,
    wrong_set: Collection[str] = (),
    rng: Optional[_rnd.Random] = None,
) -> List[str]:
    if not subject or not chapter:
        return []

    selected = [q for q in questions if q.subject == subject and q.chapter == chapter]

    kw = canonical_keyword(keyword)
    if kw:
        needle = normalize_formula_text(kw)
        selected = [q for q in selected if matches_keyword(q, needle)]

    if wrong_only:
        wrong = set(wrong_set)
        selected = [q for q in selected if q.id in wrong]

    # sorted() is stable, so equal pages keep bank order
    selected = sorted(selected, key=lambda q: q.page)

    ids = [q.id for q in selected]
    if randomize:
        (rng or _rnd).shuffle(ids)
    return ids
