"""Answer checking for single, multiple and judgment questions."""
from typing import Iterable

from flashdrill.bank import JUDGMENT_KEYS, option_letters
from flashdrill.models import Outcome, Question, QuestionType


def option_keys(question: Question) -> tuple:
    if question.type is QuestionType.JUDGMENT:
        return JUDGMENT_KEYS
    return option_letters(len(question.options))


def normalize_selection(question: Question, selected: str | Iterable[str]) -> frozenset:
    """Turn user input into a set of option keys.

    A plain string is split into characters for multiple choice ("AC") and
    taken whole otherwise. Letters are upper-cased; judgment answers also
    accept t/f and y/n.
    """
    if isinstance(selected, str):
        if question.type is QuestionType.MULTIPLE:
            selected = [c for c in selected if not c.isspace() and c != ","]
        else:
            selected = [selected]
    keys = set()
    for key in selected:
        key = key.strip()
        if question.type is QuestionType.JUDGMENT:
            key = {"t": "√", "y": "√", "f": "×", "n": "×", "x": "×"}.get(key.lower(), key)
        else:
            key = key.upper()
        keys.add(key)
    if not keys or "" in keys:
        raise ValueError("Select at least one option")
    invalid = keys - set(option_keys(question))
    if invalid:
        raise ValueError(f"Not a valid option: {', '.join(sorted(invalid))}")
    return frozenset(keys)


def check_answer(question: Question, selected: str | Iterable[str]) -> bool:
    """Multiple choice needs the exact set of keys; the rest need the single key."""
    keys = normalize_selection(question, selected)
    if question.type is not QuestionType.MULTIPLE and len(keys) != 1:
        return False
    return keys == question.answer


def grade(question: Question, selected: str | Iterable[str]) -> Outcome:
    return Outcome.EASY if check_answer(question, selected) else Outcome.HARD


def format_answer(question: Question) -> str:
    return ", ".join(sorted(question.answer))
