# tests/test_mastery.py
import pytest

from flashdrill.mastery import apply_outcome, default_record, is_hard
from flashdrill.models import Outcome, ProgressRecord, Status


def test_first_hard_answer_enters_learning():
    """Hard on a new question: learning, score 5, one review."""
    result = apply_outcome(None, Outcome.HARD, now_ms=1000)
    assert result.status is Status.LEARNING
    assert result.difficulty_score == 5
    assert result.review_count == 1
    assert result.last_reviewed == 1000


def test_first_easy_answer_masters():
    result = apply_outcome(None, Outcome.EASY, now_ms=1000)
    assert result.status is Status.MASTERED
    assert result.difficulty_score == 0
    assert result.review_count == 1


def test_hard_demotes_mastered():
    """A single hard answer undoes mastery regardless of history."""
    mastered = ProgressRecord(Status.MASTERED, 0, 500, 7)
    result = apply_outcome(mastered, Outcome.HARD, now_ms=2000)
    assert result.status is Status.LEARNING
    assert result.difficulty_score == 5
    assert result.review_count == 8


def test_easy_promotes_learning():
    learning = ProgressRecord(Status.LEARNING, 5, 500, 3)
    result = apply_outcome(learning, Outcome.EASY, now_ms=2000)
    assert result.status is Status.MASTERED
    assert result.difficulty_score == 0
    assert result.review_count == 4
    assert result.last_reviewed == 2000


def test_outcome_accepts_plain_strings():
    result = apply_outcome(None, "hard", now_ms=1)
    assert result.status is Status.LEARNING


def test_unknown_outcome_rejected():
    with pytest.raises(ValueError):
        apply_outcome(None, "medium", now_ms=1)


def test_previous_record_not_mutated():
    learning = ProgressRecord(Status.LEARNING, 5, 500, 3)
    apply_outcome(learning, Outcome.EASY, now_ms=2000)
    assert learning.status is Status.LEARNING
    assert learning.review_count == 3


def test_default_record_is_new():
    record = default_record()
    assert record.status is Status.NEW
    assert record.difficulty_score == 0
    assert record.review_count == 0


def test_is_hard():
    assert is_hard(ProgressRecord(Status.LEARNING, 5, 0, 1))
    assert not is_hard(ProgressRecord(Status.MASTERED, 0, 0, 1))
    assert not is_hard(None)
