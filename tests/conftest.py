import asyncio
import os
import random
import tempfile
import uuid
from pathlib import Path

import pytest

DATA_DIR = Path(__file__).resolve().parent / "data"
QUESTION_BANK = DATA_DIR / "question-bank.json"
CHAPTER_INDEX = DATA_DIR / "chapter-index.json"
_DB_PATH = Path(tempfile.gettempdir()) / f"quizbank-test-{os.getpid()}.db"

# Modules read these at import time, so they have to be set before any app import.
os.environ["DATABASE_URL"] = f"sqlite:///{_DB_PATH}"
os.environ["QUESTION_BANK_SRC"] = str(QUESTION_BANK)
os.environ["CHAPTER_INDEX_SRC"] = str(CHAPTER_INDEX)

from bank import load_bank  # noqa: E402
from db import Base, engine  # noqa: E402
import models  # noqa: E402,F401
from progress import ProgressPersister  # noqa: E402
from session import QuizSession  # noqa: E402
from store import MemoryStore  # noqa: E402

Base.metadata.create_all(bind=engine)


@pytest.fixture(scope="session", autouse=True)
def _cleanup_db():
    yield
    engine.dispose()
    if _DB_PATH.exists():
        _DB_PATH.unlink()


@pytest.fixture(scope="session")
def bank():
    return asyncio.run(load_bank(str(QUESTION_BANK), str(CHAPTER_INDEX)))


@pytest.fixture
def store():
    return MemoryStore()


@pytest.fixture
def make_session(bank, store):
    def _make(seed=None, restore=True):
        rng = random.Random(seed) if seed is not None else None
        s = QuizSession(bank, ProgressPersister(store), rng=rng)
        return s.restore() if restore else s

    return _make


@pytest.fixture
def user_headers():
    # a fresh storage scope per test keeps API tests independent
    return {"x-quiz-user": f"test-{uuid.uuid4().hex[:12]}"}
