"""Study session management: queue cursor, answers, persistence and resumption."""
import json
import logging
import random
import sqlite3
from dataclasses import replace
from typing import Callable, Iterable

from flashdrill.bank import index_bank
from flashdrill.db import KeyValueStore
from flashdrill.errors import (
    CorruptPersistedState, ResetConfirmationDeclined, SessionNotActive, StaleQuestionReference,
)
from flashdrill.models import (
    AnswerResult, Outcome, ProgressRecord, Question, QuestionType, SessionMode, SessionState,
)
from flashdrill.progress import ProgressStore
from flashdrill.scheduler import build_queue

logger = logging.getLogger(__name__)

SESSION_KEY = "exam_session_v2"

IDLE = SessionState()


def encode_session(state: SessionState) -> str:
    return json.dumps({
        "mode": state.mode.value,
        "queue": list(state.queue),
        "index": state.index,
        "easy_count": state.easy_count,
        "hard_count": state.hard_count,
    })


def decode_session(blob: str) -> SessionState:
    """Parse a stored session. Raises CorruptPersistedState on any defect."""
    try:
        data = json.loads(blob)
    except json.JSONDecodeError as e:
        raise CorruptPersistedState(SESSION_KEY, f"invalid JSON: {e}") from e
    if not isinstance(data, dict):
        raise CorruptPersistedState(SESSION_KEY, "top level is not an object")
    try:
        mode = SessionMode(data.get("mode"))
    except ValueError:
        raise CorruptPersistedState(SESSION_KEY, f"unknown mode {data.get('mode')!r}") from None
    if mode is SessionMode.IDLE:
        return IDLE

    queue = data.get("queue")
    index = data.get("index")
    if not isinstance(queue, list) or not queue or not all(isinstance(q, str) for q in queue):
        raise CorruptPersistedState(SESSION_KEY, "queue must be a non-empty list of ids")
    if len(set(queue)) != len(queue):
        raise CorruptPersistedState(SESSION_KEY, "queue contains duplicates")
    if not isinstance(index, int) or isinstance(index, bool) or not 0 <= index < len(queue):
        raise CorruptPersistedState(SESSION_KEY, f"index {index!r} out of range")
    easy = data.get("easy_count", 0)
    hard = data.get("hard_count", 0)
    if not all(isinstance(n, int) and not isinstance(n, bool) and n >= 0 for n in (easy, hard)):
        raise CorruptPersistedState(SESSION_KEY, "answer counts must be non-negative integers")
    return SessionState(mode, tuple(queue), index, easy, hard)


def summarize(state: SessionState) -> dict:
    answered = state.easy_count + state.hard_count
    return {
        "total": len(state.queue),
        "answered": answered,
        "easy": state.easy_count,
        "hard": state.hard_count,
        "accuracy": round(state.easy_count / answered * 100, 1) if answered else 0.0,
    }


class SessionController:
    """Drives one study session at a time over a fixed question bank.

    Idle until ``start_session`` succeeds; Active while questions remain in the
    queue. The session is persisted after every transition, and a persisted
    session is restored on construction so an interrupted run resumes at the
    same question.
    """

    def __init__(
        self,
        bank: Iterable[Question],
        progress: ProgressStore,
        storage: KeyValueStore,
        rng: random.Random | None = None,
    ):
        self.bank = list(bank)
        self.questions = index_bank(self.bank)
        self.progress = progress
        self.storage = storage
        self.rng = rng or random.Random()
        self._state = self._restore()

    def _restore(self) -> SessionState:
        try:
            blob = self.storage.load(SESSION_KEY)
        except sqlite3.Error as e:
            logger.warning("Session storage unavailable, starting idle: %s", e)
            return IDLE
        if blob is None:
            return IDLE
        try:
            state = decode_session(blob)
        except CorruptPersistedState as e:
            logger.warning("%s; discarding stored session", e)
            self.storage.delete(SESSION_KEY)
            return IDLE
        if state.is_active:
            logger.info("Resuming session at question %d of %d", state.index + 1, len(state.queue))
        return state

    def _persist(self) -> None:
        if self._state.is_active:
            self.storage.save(SESSION_KEY, encode_session(self._state))
        else:
            self.storage.delete(SESSION_KEY)

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def is_active(self) -> bool:
        return self._state.is_active

    def start_session(
        self,
        category: str | None = None,
        question_type: QuestionType | str | None = None,
    ) -> SessionState:
        """Build a queue and enter the Active state.

        Raises NoMatchingQuestions (leaving the controller idle) when the
        filters select nothing. Starting while a session is active replaces it.
        """
        queue = build_queue(
            self.bank, self.progress.snapshot(), category, question_type, rng=self.rng,
        )
        self._state = SessionState(SessionMode.STUDYING, tuple(queue), 0)
        self._persist()
        return self._state

    def current_question(self) -> Question:
        if not self._state.is_active:
            raise SessionNotActive("No study session in progress")
        qid = self._state.current_id
        question = self.questions.get(qid)
        if question is None:
            logger.error("Session refers to unknown question %s; ending session", qid)
            self.exit_session()
            raise StaleQuestionReference(qid)
        return question

    def submit_answer(self, outcome: Outcome) -> AnswerResult:
        """Record the outcome for the current question and advance.

        The last answer in the queue completes the session: the controller
        returns to idle and the result carries the session summary.
        """
        if not self._state.is_active:
            raise SessionNotActive("Cannot submit an answer without an active session")
        outcome = Outcome(outcome)
        qid = self.current_question().id
        record = self.progress.record_answer(qid, outcome)

        state = self._state
        if outcome is Outcome.EASY:
            state = replace(state, easy_count=state.easy_count + 1)
        else:
            state = replace(state, hard_count=state.hard_count + 1)

        if state.index + 1 < len(state.queue):
            self._state = replace(state, index=state.index + 1)
            self._persist()
            return AnswerResult(qid, record, completed=False, session=self._state)

        summary = summarize(state)
        self._state = IDLE
        self._persist()
        logger.info("Session complete: %d easy, %d hard", summary["easy"], summary["hard"])
        return AnswerResult(qid, record, completed=True, session=self._state, summary=summary)

    def exit_session(self) -> None:
        self._state = IDLE
        self.storage.delete(SESSION_KEY)

    def reset_all_progress(self, confirm: Callable[[], bool] | None = None) -> bool:
        """Wipe every progress record and the session together.

        Returns False without touching anything if ``confirm`` declines, either
        by returning a falsy value or by raising ResetConfirmationDeclined.
        """
        try:
            if confirm is not None and not confirm():
                raise ResetConfirmationDeclined()
        except ResetConfirmationDeclined:
            logger.info("Progress reset declined")
            return False
        self.progress.reset_all(SESSION_KEY)
        self._state = IDLE
        return True

    def progress_snapshot(self) -> dict[str, ProgressRecord]:
        return self.progress.snapshot()

    def position(self) -> tuple[int, int]:
        """1-based position of the current question and the queue length."""
        if not self._state.is_active:
            return 0, 0
        return self._state.index + 1, len(self._state.queue)
