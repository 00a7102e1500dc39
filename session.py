# quizbank/session.py

from __future__ import annotations

import logging
import math
import random as _rnd
from typing import Callable, Dict, List, Optional, Tuple

from bank import Bank
from cursor import Cursor
from filters import build_queue, canonical_keyword
from progress import PersistedState, ProgressPersister, progress_key, restore_cursor
from recorder import apply_reset, apply_submission, grade
from schemas.questions import ChapterEntry, Question, QuestionOut
from schemas.session import AnswerRecord, Prefs, SessionView, Stats

logger = logging.getLogger(__name__)


def _percent(part: int, whole: int) -> int:
    # half-up, so 50.5 shows as 51
    return math.floor(part / whole * 100 + 0.5)


class QuizSession:
    """
    One user's quiz state over a loaded bank.

    Filter changes rebuild the queue and restore the cursor remembered for the
    new filter combination. Navigation, submit and reset persist through the
    ProgressPersister before the in-memory state is replaced, so a failed
    write leaves the session as it was.
    """

    def __init__(self, bank: Bank, persister: ProgressPersister, rng: Optional[_rnd.Random] = None):
        self.bank = bank
        self.persister = persister
        self.rng = rng

        self.subject = ""
        self.chapter = ""
        self.keyword = ""
        self.random_order = False
        self.only_wrong = False

        self.queue: List[str] = []
        self.cursor = Cursor()

        self.selected_option = ""
        self.submitted = False
        self.show_image = False

        self.records: Dict[str, AnswerRecord] = {}
        self.wrongbook: List[str] = []
        self.progress: Dict[str, int] = {}

    # --- startup ----------------------------------------------------------------

    def restore(self) -> "QuizSession":
        state = self.persister.restore()
        self.records = state.records
        self.wrongbook = state.wrongbook
        self.progress = state.progress

        prefs = state.prefs
        subjects = self.bank.subject_names()
        subject = prefs.selected_subject if prefs.selected_subject in subjects else ""
        if not subject and subjects:
            subject = subjects[0]

        chapters = [c.name for c in self.bank.chapters_for(subject)]
        chapter = prefs.selected_chapter if prefs.selected_chapter in chapters else ""
        if not chapter and chapters:
            chapter = chapters[0]

        self._rebuild(subject, chapter, prefs.keyword, prefs.random_order, prefs.only_wrong)
        return self

    # --- derived state ----------------------------------------------------------

    @property
    def current_pos(self) -> int:
        return self.cursor.index

    @property
    def current_question(self) -> Optional[Question]:
        if not self.queue:
            return None
        return self.bank.get(self.queue[self.cursor.index])

    @property
    def progress_key(self) -> str:
        return progress_key(
            self.subject, self.chapter, self.only_wrong, self.random_order, canonical_keyword(self.keyword)
        )

    @property
    def prefs(self) -> Prefs:
        return Prefs(
            random_order=self.random_order,
            only_wrong=self.only_wrong,
            selected_subject=self.subject,
            selected_chapter=self.chapter,
            keyword=self.keyword,
        )

    @property
    def subject_options(self) -> List[str]:
        return self.bank.subject_names()

    @property
    def chapter_options(self) -> List[ChapterEntry]:
        return self.bank.chapters_for(self.subject)

    @property
    def done_count(self) -> int:
        return sum(1 for qid in self.queue if qid in self.records)

    @property
    def correct_count(self) -> int:
        return sum(1 for qid in self.queue if qid in self.records and self.records[qid].correct)

    @property
    def wrong_count(self) -> int:
        return len(self.wrongbook)

    @property
    def progress_rate(self) -> int:
        if not self.queue:
            return 0
        return _percent(self.done_count, len(self.queue))

    @property
    def accuracy_rate(self) -> int:
        done = self.done_count
        if not done:
            return 0
        return _percent(self.correct_count, done)

    @property
    def can_submit(self) -> bool:
        return self.current_question is not None and bool(self.selected_option) and not self.submitted

    @property
    def is_last_question(self) -> bool:
        return self.cursor.is_last

    # --- persistence ------------------------------------------------------------

    def _save(
        self,
        *,
        records: Optional[Dict[str, AnswerRecord]] = None,
        wrongbook: Optional[List[str]] = None,
        progress: Optional[Dict[str, int]] = None,
        prefs: Optional[Prefs] = None,
    ) -> None:
        self.persister.save(
            PersistedState(
                progress=self.progress if progress is None else progress,
                records=self.records if records is None else records,
                wrongbook=self.wrongbook if wrongbook is None else wrongbook,
                prefs=self.prefs if prefs is None else prefs,
            )
        )

    def _sync_question_state(self) -> None:
        self.show_image = False
        q = self.current_question
        record = self.records.get(q.id) if q else None
        if record:
            self.selected_option = record.selected
            self.submitted = True
        else:
            self.selected_option = ""
            self.submitted = False

    # --- filters ----------------------------------------------------------------

    def _rebuild(self, subject: str, chapter: str, keyword: str, random_order: bool, only_wrong: bool) -> None:
        queue = build_queue(
            self.bank.questions.values(),
            subject,
            chapter,
            keyword=keyword,
            wrong_only=only_wrong,
            randomize=random_order,
            wrong_set=self.wrongbook,
            rng=self.rng,
        )
        key = progress_key(subject, chapter, only_wrong, random_order, canonical_keyword(keyword))
        cursor = Cursor(len(queue), restore_cursor(self.progress, key, len(queue)))

        prefs = Prefs(
            random_order=random_order,
            only_wrong=only_wrong,
            selected_subject=subject,
            selected_chapter=chapter,
            keyword=keyword,
        )
        self._save(prefs=prefs)

        self.subject, self.chapter, self.keyword = subject, chapter, keyword
        self.random_order, self.only_wrong = random_order, only_wrong
        self.queue = queue
        self.cursor = cursor
        self._sync_question_state()
        logger.debug("queue rebuilt for %s: %d question(s), pos %d", key, len(queue), cursor.index)

    def apply_filters(
        self,
        subject: Optional[str] = None,
        chapter: Optional[str] = None,
        keyword: Optional[str] = None,
        random_order: Optional[bool] = None,
        only_wrong: Optional[bool] = None,
    ) -> None:
        """Change any subset of the filters and rebuild the queue once."""
        new_subject = self.subject if subject is None else subject
        new_chapter = self.chapter if chapter is None else chapter

        if subject is not None and chapter is None:
            names = [c.name for c in self.bank.chapters_for(new_subject)]
            if new_chapter not in names:
                new_chapter = names[0] if names else ""

        self._rebuild(
            new_subject,
            new_chapter,
            self.keyword if keyword is None else keyword,
            self.random_order if random_order is None else bool(random_order),
            self.only_wrong if only_wrong is None else bool(only_wrong),
        )

    def rebuild(self) -> None:
        self.apply_filters()

    def set_subject(self, subject: str) -> None:
        self.apply_filters(subject=subject)

    def set_chapter(self, chapter: str) -> None:
        self.apply_filters(chapter=chapter)

    def set_keyword(self, keyword: str) -> None:
        self.apply_filters(keyword=keyword)

    def set_random_order(self, value: bool) -> None:
        self.apply_filters(random_order=value)

    def set_only_wrong(self, value: bool) -> None:
        self.apply_filters(only_wrong=value)

    # --- navigation -------------------------------------------------------------

    def _navigate(self, move: Callable[[Cursor], bool]) -> bool:
        cursor = Cursor(self.cursor.length, self.cursor.index)
        if not move(cursor):
            return False

        progress = {**self.progress, self.progress_key: cursor.index}
        self._save(progress=progress)

        self.progress = progress
        self.cursor = cursor
        self._sync_question_state()
        return True

    def next(self) -> bool:
        return self._navigate(lambda c: c.next())

    def prev(self) -> bool:
        return self._navigate(lambda c: c.prev())

    def jump_to(self, index: int) -> bool:
        return self._navigate(lambda c: c.jump_to(index))

    # --- answering --------------------------------------------------------------

    def select_option(self, option: str) -> bool:
        q = self.current_question
        if q is None or self.submitted:
            return False
        opt = (option or "").strip().upper()
        if not opt:
            return False
        if q.options and opt not in q.options:
            return False
        self.selected_option = opt
        return True

    def try_submit(self, option: Optional[str] = None) -> Tuple[bool, bool]:
        """
        Returns (applied, correct). When the current view is already submitted
        the stored grade is returned and nothing changes.
        """
        q = self.current_question
        if q is None:
            return False, False

        if self.submitted:
            record = self.records.get(q.id)
            return False, bool(record and record.correct)

        selected = (self.selected_option if option is None else option or "").strip().upper()
        if not selected:
            return False, False

        correct = grade(selected, q.answer)
        records, wrongbook = apply_submission(self.records, self.wrongbook, q.id, selected, correct)
        self._save(records=records, wrongbook=wrongbook)

        self.records = records
        self.wrongbook = wrongbook
        self.selected_option = selected
        self.submitted = True
        return True, correct

    def submit(self, option: Optional[str] = None) -> bool:
        return self.try_submit(option)[1]

    def reset(self, question_id: Optional[str] = None) -> bool:
        current = self.current_question
        qid = question_id or (current.id if current else None)
        is_current = current is not None and current.id == qid
        if not qid or (qid not in self.records and qid not in self.wrongbook):
            if is_current:
                # nothing stored, but a pending selection is still dropped
                self.selected_option = ""
                self.submitted = False
            return False

        records, wrongbook = apply_reset(self.records, self.wrongbook, qid)
        self._save(records=records, wrongbook=wrongbook)

        self.records = records
        self.wrongbook = wrongbook
        if is_current:
            self.selected_option = ""
            self.submitted = False
        return True

    def toggle_image(self) -> bool:
        q = self.current_question
        if q is not None and q.has_image:
            self.show_image = not self.show_image
        return self.show_image

    # --- snapshot ---------------------------------------------------------------

    def view(self) -> SessionView:
        q = self.current_question
        record = self.records.get(q.id) if q else None
        return SessionView(
            subject=self.subject,
            chapter=self.chapter,
            keyword=self.keyword,
            random_order=self.random_order,
            only_wrong=self.only_wrong,
            queue=list(self.queue),
            current_pos=self.cursor.index,
            current=QuestionOut.model_validate(q.model_dump()) if q else None,
            selected_option=self.selected_option,
            submitted=self.submitted,
            show_image=self.show_image,
            can_submit=self.can_submit,
            is_last_question=self.is_last_question,
            answer=q.answer if (q and self.submitted) else None,
            record=record,
            stats=Stats(
                done_count=self.done_count,
                correct_count=self.correct_count,
                wrong_count=self.wrong_count,
                progress_rate=self.progress_rate,
                accuracy_rate=self.accuracy_rate,
            ),
        )
