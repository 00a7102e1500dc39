import json

from progress import (
    PREFS_KEY,
    PROGRESS_KEY,
    RECORDS_KEY,
    WRONGBOOK_KEY,
    PersistedState,
    ProgressPersister,
    progress_key,
    reconcile_wrongbook,
    restore_cursor,
)
from schemas.session import AnswerRecord, Prefs
from store import MemoryStore


def test_progress_key_format():
    assert progress_key("S", "C1", False, False, "") == "S__C1__all__seq__"
    assert progress_key("S", "C1", True, True, "  λ ") == "S__C1__wrong__rand__λ"


def test_restore_cursor_validates_against_queue():
    progress = {"k": 2, "neg": -1, "flag": True}
    assert restore_cursor(progress, "k", 3) == 2
    assert restore_cursor(progress, "k", 2) == 0
    assert restore_cursor(progress, "neg", 3) == 0
    assert restore_cursor(progress, "flag", 3) == 0
    assert restore_cursor(progress, "missing", 3) == 0


def test_empty_store_restores_defaults():
    state = ProgressPersister(MemoryStore()).restore()
    assert state.progress == {} and state.records == {} and state.wrongbook == []
    assert state.prefs == Prefs()


def test_save_restore_roundtrip():
    store = MemoryStore()
    p = ProgressPersister(store)
    state = PersistedState(
        progress={"S__C1__all__seq__": 1},
        records={"S/C1/page-001": AnswerRecord(selected="A", correct=False, answered_at="2026-10-01T00:00:00Z")},
        wrongbook=["S/C1/page-001"],
        prefs=Prefs(random_order=True, selected_subject="S", selected_chapter="C1", keyword="λ "),
    )
    p.save(state)
    assert ProgressPersister(store).restore() == state


def test_stored_format_uses_stable_names():
    store = MemoryStore()
    ProgressPersister(store).save(
        PersistedState(
            records={"q": AnswerRecord(selected="B", correct=True, answered_at="t")},
            prefs=Prefs(only_wrong=True),
        )
    )
    assert json.loads(store.get(RECORDS_KEY)) == {"q": {"selected": "B", "correct": True, "answeredAt": "t"}}
    assert json.loads(store.get(WRONGBOOK_KEY)) == []
    assert json.loads(store.get(PROGRESS_KEY)) == {}
    assert json.loads(store.get(PREFS_KEY)) == {
        "randomOrder": False,
        "onlyWrong": True,
        "selectedSubject": "",
        "selectedChapter": "",
        "keyword": "",
    }


def test_malformed_entries_fall_back(caplog):
    store = MemoryStore(
        {
            PROGRESS_KEY: "{oops",
            RECORDS_KEY: json.dumps({"good": {"selected": "A", "correct": True, "answeredAt": "t"}, "bad": 3}),
            WRONGBOOK_KEY: json.dumps({"not": "a list"}),
            PREFS_KEY: json.dumps({"randomOrder": 1, "keyword": 42, "selectedSubject": "S"}),
        }
    )
    state = ProgressPersister(store).restore()
    assert state.progress == {}
    assert list(state.records) == ["good"]
    assert state.wrongbook == []
    assert state.prefs.random_order is True
    assert state.prefs.keyword == ""
    assert state.prefs.selected_subject == "S"
    assert "discarding stored value" in caplog.text


def _wrong():
    return {"selected": "A", "correct": False, "answeredAt": "t"}


def test_wrongbook_deduplicated_on_restore():
    store = MemoryStore(
        {
            RECORDS_KEY: json.dumps({"a": _wrong(), "b": _wrong()}),
            WRONGBOOK_KEY: json.dumps(["a", "b", "a", 5]),
        }
    )
    assert ProgressPersister(store).restore().wrongbook == ["a", "b"]


def test_wrongbook_drops_id_whose_record_was_discarded():
    store = MemoryStore(
        {
            RECORDS_KEY: json.dumps({"q1": {"selected": "A", "correct": False, "answeredAt": 5}}),
            WRONGBOOK_KEY: json.dumps(["q1"]),
        }
    )
    state = ProgressPersister(store).restore()
    assert state.records == {}
    assert state.wrongbook == []


def test_wrongbook_rebuilt_from_incorrect_records():
    store = MemoryStore(
        {
            RECORDS_KEY: json.dumps({"q1": _wrong(), "q2": {"selected": "B", "correct": True, "answeredAt": "t"}}),
            WRONGBOOK_KEY: "[broken",
        }
    )
    state = ProgressPersister(store).restore()
    assert state.wrongbook == ["q1"]


def test_reconcile_wrongbook_keeps_order_and_drops_correct():
    records = {
        "a": AnswerRecord(selected="A", correct=False, answered_at="t"),
        "b": AnswerRecord(selected="B", correct=True, answered_at="t"),
        "c": AnswerRecord(selected="C", correct=False, answered_at="t"),
    }
    assert reconcile_wrongbook(records, ["c", "b", "gone"]) == ["c", "a"]
    assert reconcile_wrongbook(records, ["c", "a"]) == ["c", "a"]
