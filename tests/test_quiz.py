# tests/test_quiz.py
import pytest

from conftest import make_question
from flashdrill.models import Outcome, QuestionType
from flashdrill.quiz import check_answer, format_answer, grade, normalize_selection, option_keys

SINGLE = make_question("s", qtype=QuestionType.SINGLE, answer=("B",))
MULTI = make_question("m", qtype=QuestionType.MULTIPLE, answer=("A", "C"))
JUDGE = make_question("j", qtype=QuestionType.JUDGMENT, answer=("×",))


def test_option_keys():
    assert option_keys(SINGLE) == ("A", "B", "C", "D")
    assert option_keys(JUDGE) == ("√", "×")


def test_single_choice():
    assert check_answer(SINGLE, "B")
    assert check_answer(SINGLE, "b")
    assert not check_answer(SINGLE, "A")


def test_multiple_choice_needs_exact_set():
    assert check_answer(MULTI, "AC")
    assert check_answer(MULTI, "c, a")
    assert check_answer(MULTI, ["C", "A"])
    assert not check_answer(MULTI, "A")
    assert not check_answer(MULTI, "ACD")


def test_single_choice_rejects_several_keys():
    assert not check_answer(SINGLE, ["B", "C"])


def test_judgment_symbols_and_letters():
    assert check_answer(JUDGE, "×")
    assert check_answer(JUDGE, "f")
    assert check_answer(JUDGE, "N")
    assert not check_answer(JUDGE, "√")
    assert not check_answer(JUDGE, "t")


def test_grade_maps_to_outcome():
    assert grade(SINGLE, "B") is Outcome.EASY
    assert grade(SINGLE, "D") is Outcome.HARD


# --- Edge case tests ---


def test_empty_selection_rejected():
    with pytest.raises(ValueError):
        normalize_selection(SINGLE, "")
    with pytest.raises(ValueError):
        normalize_selection(MULTI, [])


def test_unknown_option_rejected():
    with pytest.raises(ValueError, match="Not a valid option"):
        check_answer(SINGLE, "E")
    with pytest.raises(ValueError):
        check_answer(JUDGE, "maybe")


def test_format_answer():
    assert format_answer(MULTI) == "A, C"
    assert format_answer(JUDGE) == "×"
