"""Per-question progress tracking with synchronous persistence."""
import json
import logging
import sqlite3
import time
from typing import Callable

from flashdrill.db import KeyValueStore
from flashdrill.errors import CorruptPersistedState
from flashdrill.mastery import apply_outcome
from flashdrill.models import Outcome, ProgressRecord, Status

logger = logging.getLogger(__name__)

PROGRESS_KEY = "exam_progress_v1"


def now_ms() -> int:
    return int(time.time() * 1000)


def encode_progress(progress: dict[str, ProgressRecord]) -> str:
    return json.dumps(
        {
            qid: {
                "status": rec.status.value,
                "difficulty_score": rec.difficulty_score,
                "last_reviewed": rec.last_reviewed,
                "review_count": rec.review_count,
            }
            for qid, rec in progress.items()
        },
        sort_keys=True,
    )


def _decode_record(qid: str, raw) -> ProgressRecord:
    if not isinstance(raw, dict):
        raise CorruptPersistedState(PROGRESS_KEY, f"record for {qid!r} is not an object")
    try:
        status = Status(raw["status"])
        score = raw["difficulty_score"]
        last_reviewed = raw.get("last_reviewed", 0)
        review_count = raw["review_count"]
    except (KeyError, ValueError) as e:
        raise CorruptPersistedState(PROGRESS_KEY, f"record for {qid!r}: {e}") from e
    if status is Status.NEW:
        raise CorruptPersistedState(PROGRESS_KEY, f"record for {qid!r} stores status 'new'")
    for name, value in (("difficulty_score", score), ("last_reviewed", last_reviewed), ("review_count", review_count)):
        if not isinstance(value, int) or isinstance(value, bool) or value < 0:
            raise CorruptPersistedState(PROGRESS_KEY, f"record for {qid!r} has invalid {name}")
    if score > 5:
        raise CorruptPersistedState(PROGRESS_KEY, f"record for {qid!r} has difficulty_score {score}")
    return ProgressRecord(status, score, last_reviewed, review_count)


def decode_progress(blob: str) -> dict[str, ProgressRecord]:
    """Parse a stored progress map. Raises CorruptPersistedState on any defect."""
    try:
        data = json.loads(blob)
    except json.JSONDecodeError as e:
        raise CorruptPersistedState(PROGRESS_KEY, f"invalid JSON: {e}") from e
    if not isinstance(data, dict):
        raise CorruptPersistedState(PROGRESS_KEY, "top level is not an object")
    return {qid: _decode_record(qid, raw) for qid, raw in data.items()}


class ProgressStore:
    """Owns the question id -> ProgressRecord map.

    The map is the single source of truth for mastery state; every mutation is
    written through to storage before the call returns.
    """

    def __init__(self, storage: KeyValueStore, clock: Callable[[], int] = now_ms):
        self.storage = storage
        self.clock = clock
        self._progress: dict[str, ProgressRecord] = self._load()

    def _load(self) -> dict[str, ProgressRecord]:
        try:
            blob = self.storage.load(PROGRESS_KEY)
        except sqlite3.Error as e:
            logger.warning("Progress storage unavailable, starting with no progress: %s", e)
            return {}
        if blob is None:
            return {}
        try:
            return decode_progress(blob)
        except CorruptPersistedState as e:
            logger.warning("%s; discarding stored progress", e)
            self.storage.delete(PROGRESS_KEY)
            return {}

    def _persist(self) -> None:
        self.storage.save(PROGRESS_KEY, encode_progress(self._progress))

    def get(self, question_id: str) -> ProgressRecord | None:
        return self._progress.get(question_id)

    def status_of(self, question_id: str) -> Status:
        record = self._progress.get(question_id)
        return record.status if record else Status.NEW

    def record_answer(self, question_id: str, outcome: Outcome) -> ProgressRecord:
        updated = apply_outcome(self._progress.get(question_id), outcome, self.clock())
        self._progress[question_id] = updated
        self._persist()
        logger.debug("Recorded %s for %s -> %s", Outcome(outcome).value, question_id, updated.status.value)
        return updated

    def snapshot(self) -> dict[str, ProgressRecord]:
        """A copy of the map; records are immutable so a shallow copy suffices."""
        return dict(self._progress)

    def reset_all(self, *also_delete: str) -> None:
        """Clear every record. Extra storage keys are removed in the same transaction."""
        self.storage.delete(PROGRESS_KEY, *also_delete)
        self._progress = {}
        logger.info("All progress reset")

    def __len__(self) -> int:
        return len(self._progress)

    def __contains__(self, question_id: str) -> bool:
        return question_id in self._progress
