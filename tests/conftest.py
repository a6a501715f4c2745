import random

import pytest

from flashdrill.db import KeyValueStore
from flashdrill.models import Question, QuestionType
from flashdrill.progress import ProgressStore


def make_question(qid, category="A", qtype=QuestionType.SINGLE, answer=("A",)):
    options = () if qtype is QuestionType.JUDGMENT else ("one", "two", "three", "four")
    return Question(
        id=qid, category=category, type=qtype, text=f"Question {qid}?",
        answer=frozenset(answer), options=options,
    )


@pytest.fixture
def tmp_db(tmp_path):
    """Provide a temporary SQLite database path for tests."""
    db_path = str(tmp_path / "test_flashdrill.db")
    return db_path


@pytest.fixture
def storage(tmp_db):
    return KeyValueStore(tmp_db)


@pytest.fixture
def store(storage):
    ticks = iter(range(1000, 10**9, 1000))
    return ProgressStore(storage, clock=lambda: next(ticks))


@pytest.fixture
def small_bank():
    """Five questions: three in category A, two in category B."""
    return [
        make_question("a1", "A"),
        make_question("a2", "A", QuestionType.MULTIPLE, answer=("A", "C")),
        make_question("a3", "A", QuestionType.JUDGMENT, answer=("√",)),
        make_question("b1", "B"),
        make_question("b2", "B", QuestionType.JUDGMENT, answer=("×",)),
    ]


@pytest.fixture
def rng():
    return random.Random(1234)
