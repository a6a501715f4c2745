"""Two-bucket mastery update rule."""
from flashdrill.models import Outcome, ProgressRecord, Status

HARD_SCORE = 5
EASY_SCORE = 0
# Records scoring above this are treated as "hard" by smart review.
HARD_THRESHOLD = 2


def default_record() -> ProgressRecord:
    """The implicit record for a question that has never been answered."""
    return ProgressRecord(status=Status.NEW, difficulty_score=0, last_reviewed=0, review_count=0)


def apply_outcome(
    previous: ProgressRecord | None,
    outcome: Outcome,
    now_ms: int,
) -> ProgressRecord:
    """Calculate the next progress record from a single answer outcome.

    Args:
        previous: Current record, or None if the question is new
        outcome: EASY (answered correctly) or HARD (answered wrong)
        now_ms: Review time in epoch milliseconds

    Returns:
        A new ProgressRecord. Only review_count carries over from history:
        one hard answer always demotes to learning, one easy answer always
        promotes to mastered.
    """
    current = previous or default_record()
    outcome = Outcome(outcome)

    if outcome is Outcome.HARD:
        status, score = Status.LEARNING, HARD_SCORE
    else:
        status, score = Status.MASTERED, EASY_SCORE

    return ProgressRecord(
        status=status,
        difficulty_score=score,
        last_reviewed=now_ms,
        review_count=current.review_count + 1,
    )


def is_hard(record: ProgressRecord | None) -> bool:
    return record is not None and record.difficulty_score > HARD_THRESHOLD
