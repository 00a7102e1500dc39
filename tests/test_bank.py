import asyncio
import json
from pathlib import Path

import httpx
import pytest

from bank import QuestionBank, get_bank, load_bank
from errors import LoadError
from schemas.questions import Question, normalize_options

DATA_DIR = Path(__file__).resolve().parent / "data"
QUESTION_BANK = DATA_DIR / "question-bank.json"
CHAPTER_INDEX = DATA_DIR / "chapter-index.json"


def _write(path, payload):
    path.write_text(payload if isinstance(payload, str) else json.dumps(payload), encoding="utf-8")
    return str(path)


def test_load_skips_invalid_rows(bank):
    assert set(bank.questions) == {"S/C1/page-001", "S/C1/page-002", "S/C2/page-001", "T/C1/page-003"}
    assert bank.get("broken") is None


def test_options_normalized_on_load(bank):
    q = bank.get("S/C1/page-002")
    assert q.options == {"A": "\\mu", "B": "\\lambda", "C": "\\alpha"}
    assert list(q.options) == ["A", "B", "C"]


def test_image_path_only_with_has_image(bank):
    q = bank.get("S/C1/page-001")
    assert q.has_image is True and q.image_path == "output/S/C1/page-001.png"
    other = bank.get("S/C2/page-001")
    assert other.has_image is False and other.image_path is None


def test_has_image_without_path_is_dropped():
    q = Question.model_validate({"id": "x", "subject": "S", "chapter": "C", "hasImage": True})
    assert q.has_image is False and q.image_path is None


def test_index_counts_reconciled(bank):
    assert bank.subject_names() == ["S", "T"]
    assert [(c.name, c.count) for c in bank.chapters_for("S")] == [("C1", 2), ("C2", 1)]
    # index file claims 5
    assert bank.chapters_for("T")[0].count == 1
    assert bank.chapters_for("nope") == []


def test_normalize_options_idempotent():
    raw = {"b": " two ", "A": "one", "a": "dup", "c": "", "d": None, "10": "x", " e ": "five"}
    once = normalize_options(raw)
    assert once == {"A": "one", "B": "two", "E": "five"}
    assert normalize_options(once) == once


def test_normalize_options_non_mapping():
    assert normalize_options(None) == {}
    assert normalize_options(["A", "B"]) == {}


def test_missing_file_raises_load_error(tmp_path):
    with pytest.raises(LoadError):
        asyncio.run(load_bank(str(tmp_path / "missing.json"), str(CHAPTER_INDEX)))


def test_invalid_json_raises_load_error(tmp_path):
    bad = _write(tmp_path / "bank.json", "{not json")
    with pytest.raises(LoadError) as exc:
        asyncio.run(load_bank(bad, str(CHAPTER_INDEX)))
    assert "invalid JSON" in exc.value.reason


def test_non_object_root_loads_as_empty(tmp_path, caplog):
    idx = _write(tmp_path / "index.json", [1, 2, 3])
    b = asyncio.run(load_bank(str(QUESTION_BANK), idx))
    assert b.index == []
    assert len(b) > 0
    assert "not an object" in caplog.text

    qs = _write(tmp_path / "bank.json", ["not", "a", "bank"])
    b = asyncio.run(load_bank(qs, str(CHAPTER_INDEX)))
    assert len(b) == 0


def test_partial_documents_load_as_empty(tmp_path):
    qs = _write(tmp_path / "bank.json", {"version": 1})
    idx = _write(tmp_path / "index.json", {"generatedAt": "now"})
    b = asyncio.run(load_bank(qs, idx))
    assert len(b) == 0 and b.index == []


def test_load_over_http():
    docs = {
        "/data/question-bank.json": QUESTION_BANK.read_text(encoding="utf-8"),
        "/data/chapter-index.json": CHAPTER_INDEX.read_text(encoding="utf-8"),
    }

    def handler(request: httpx.Request) -> httpx.Response:
        body = docs.get(request.url.path)
        if body is None:
            return httpx.Response(404)
        return httpx.Response(200, text=body)

    async def run(bank_url, index_url):
        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            return await load_bank(bank_url, index_url, client=client)

    b = asyncio.run(run("http://quiz.test/data/question-bank.json", "http://quiz.test/data/chapter-index.json"))
    assert len(b) == 4

    with pytest.raises(LoadError) as exc:
        asyncio.run(run("http://quiz.test/data/question-bank.json", "http://quiz.test/data/gone.json"))
    assert exc.value.reason == "HTTP 404"


def test_cached_bank_loads_once():
    QuestionBank.clear()
    first = asyncio.run(get_bank())
    second = asyncio.run(get_bank())
    assert first is second
    assert len(first) == 4
