# tests/test_integration.py
"""End-to-end test of the core workflow."""
import random

from flashdrill.bank import DEFAULT_BANK_PATH, load_bank
from flashdrill.dashboard import get_overview
from flashdrill.db import KeyValueStore
from flashdrill.models import Outcome, Status
from flashdrill.progress import ProgressStore
from flashdrill.quiz import grade
from flashdrill.scheduler import WEIGHT_HARD, review_weight
from flashdrill.session import SessionController


def boot(db_path, bank):
    storage = KeyValueStore(db_path)
    return SessionController(bank, ProgressStore(storage), storage, rng=random.Random(3))


def test_full_study_workflow(tmp_db):
    """Category drill, restart mid-session, then smart review picks up the misses."""
    bank = load_bank(DEFAULT_BANK_PATH)
    category = bank[0].category
    in_category = [q for q in bank if q.category == category]

    controller = boot(tmp_db, bank)
    state = controller.start_session(category=category)
    assert len(state.queue) == len(in_category)

    # Miss the first question, then "close the app"
    first = controller.current_question()
    controller.submit_answer(grade(first, _wrong(first)))

    controller = boot(tmp_db, bank)
    assert controller.is_active
    assert controller.state.index == 1
    while controller.is_active:
        q = controller.current_question()
        result = controller.submit_answer(grade(q, sorted(q.answer)))
    assert result.completed
    assert result.summary == {
        "total": len(in_category), "answered": len(in_category),
        "easy": len(in_category) - 1, "hard": 1,
        "accuracy": round((len(in_category) - 1) / len(in_category) * 100, 1),
    }

    progress = controller.progress_snapshot()
    assert progress[first.id].status is Status.LEARNING
    overview = get_overview(bank, progress)
    assert overview["mastered"] == len(in_category) - 1
    assert overview["learning"] == 1

    # Smart review leads with the missed question, mastered ones go last
    state = controller.start_session()
    assert state.queue[0] == first.id
    assert review_weight(progress[state.queue[0]]) == WEIGHT_HARD
    tail = [qid for qid in state.queue if qid in progress and progress[qid].status is Status.MASTERED]
    assert list(state.queue[-len(tail):]) == tail

    # Reset wipes progress and the session together
    controller.submit_answer(Outcome.EASY)
    assert controller.reset_all_progress(confirm=lambda: True)
    controller = boot(tmp_db, bank)
    assert not controller.is_active
    assert controller.progress_snapshot() == {}


def _wrong(question):
    if question.type.value == "judgment":
        return "√" if "×" in question.answer else "×"
    keys = [chr(ord("A") + i) for i in range(len(question.options))]
    return next(k for k in keys if {k} != question.answer)
