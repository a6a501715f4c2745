"""Review queue construction: category practice and smart review."""
import logging
import random
from collections import defaultdict
from typing import Iterable, Mapping

from flashdrill.errors import NoMatchingQuestions
from flashdrill.mastery import is_hard
from flashdrill.models import ProgressRecord, Question, QuestionType, Status

logger = logging.getLogger(__name__)

SMART_REVIEW_BATCH_SIZE = 30

WEIGHT_HARD = 4
WEIGHT_NEW = 3
WEIGHT_LEARNING = 2
WEIGHT_MASTERED = 0


def review_weight(record: ProgressRecord | None) -> int:
    """Smart-review priority: hard > new > learning > mastered."""
    if is_hard(record):
        return WEIGHT_HARD
    if record is None:
        return WEIGHT_NEW
    if record.status is Status.LEARNING:
        return WEIGHT_LEARNING
    return WEIGHT_MASTERED


def is_mastered(record: ProgressRecord | None) -> bool:
    return record is not None and record.status is Status.MASTERED


def filter_candidates(
    bank: Iterable[Question],
    category: str | None = None,
    question_type: QuestionType | str | None = None,
) -> list[Question]:
    qtype = QuestionType(question_type) if question_type else None
    return [
        q for q in bank
        if (not category or q.category == category)
        and (qtype is None or q.type is qtype)
    ]


def bucketed_shuffle(buckets: Mapping[int, list[str]], rng: random.Random) -> list[str]:
    """Concatenate buckets by descending key, uniformly shuffling each one."""
    ordered = []
    for key in sorted(buckets, reverse=True):
        ids = list(buckets[key])
        rng.shuffle(ids)
        ordered.extend(ids)
    return ordered


def build_category_queue(
    candidates: list[Question],
    progress: Mapping[str, ProgressRecord],
    rng: random.Random,
) -> list[str]:
    """Not-mastered questions first, then mastered. No size cap."""
    buckets = defaultdict(list)
    for q in candidates:
        buckets[0 if is_mastered(progress.get(q.id)) else 1].append(q.id)
    return bucketed_shuffle(buckets, rng)


def build_smart_queue(
    candidates: list[Question],
    progress: Mapping[str, ProgressRecord],
    rng: random.Random,
    limit: int = SMART_REVIEW_BATCH_SIZE,
) -> list[str]:
    buckets = defaultdict(list)
    for q in candidates:
        buckets[review_weight(progress.get(q.id))].append(q.id)
    return bucketed_shuffle(buckets, rng)[:limit]


def build_queue(
    bank: Iterable[Question],
    progress: Mapping[str, ProgressRecord],
    category: str | None = None,
    question_type: QuestionType | str | None = None,
    rng: random.Random | None = None,
) -> list[str]:
    """Select and order the question ids for one study session.

    With a category, every matching question is returned with unmastered ones
    first. Without one, the whole bank is ranked for smart review and the top
    SMART_REVIEW_BATCH_SIZE ids are returned; an empty category counts as none.
    Ordering inside a priority group is random.

    Raises:
        NoMatchingQuestions: if nothing matches the filters.
    """
    rng = rng or random.Random()
    candidates = filter_candidates(bank, category, question_type)
    if not candidates:
        raise NoMatchingQuestions(category, question_type)

    if category:
        queue = build_category_queue(candidates, progress, rng)
        logger.info("Built category queue for %r: %d questions", category, len(queue))
    else:
        queue = build_smart_queue(candidates, progress, rng)
        logger.info("Built smart review queue: %d of %d questions", len(queue), len(candidates))
    return queue


def count_by_weight(bank: Iterable[Question], progress: Mapping[str, ProgressRecord]) -> dict[int, int]:
    """How many bank questions fall into each smart-review priority group."""
    counts = defaultdict(int)
    for q in bank:
        counts[review_weight(progress.get(q.id))] += 1
    return dict(counts)
