"""Progress dashboard statistics."""
from typing import Iterable, Mapping

from flashdrill.bank import get_categories
from flashdrill.models import ProgressRecord, Question, QuestionType, Status


def get_mastery_label(percent: float) -> str:
    if percent >= 80:
        return "MASTERED"
    elif percent >= 50:
        return "GOOD PROGRESS"
    elif percent > 0:
        return "STARTED"
    return "NOT STARTED"


def get_mastery_color(percent: float) -> str:
    if percent >= 80:
        return "green"
    elif percent >= 50:
        return "yellow"
    elif percent > 0:
        return "dark_orange"
    return "red"


def _status(progress: Mapping[str, ProgressRecord], qid: str) -> Status:
    record = progress.get(qid)
    return record.status if record else Status.NEW


def get_overview(bank: list[Question], progress: Mapping[str, ProgressRecord]) -> dict:
    """Totals for the whole bank. Records for ids outside the bank are ignored."""
    statuses = [_status(progress, q.id) for q in bank]
    mastered = statuses.count(Status.MASTERED)
    learning = statuses.count(Status.LEARNING)
    total = len(bank)
    return {
        "total": total,
        "mastered": mastered,
        "learning": learning,
        "new": total - mastered - learning,
        "percent": round(mastered / total * 100, 1) if total else 0.0,
    }


def get_category_stats(bank: list[Question], progress: Mapping[str, ProgressRecord]) -> list[dict]:
    results = []
    for cat in get_categories(bank):
        qs = [q for q in bank if q.category == cat]
        mastered = sum(1 for q in qs if _status(progress, q.id) is Status.MASTERED)
        percent = round(mastered / len(qs) * 100) if qs else 0
        results.append({
            "category": cat,
            "total": len(qs),
            "single": sum(1 for q in qs if q.type is QuestionType.SINGLE),
            "multiple": sum(1 for q in qs if q.type is QuestionType.MULTIPLE),
            "judgment": sum(1 for q in qs if q.type is QuestionType.JUDGMENT),
            "mastered": mastered,
            "percent": percent,
            "label": get_mastery_label(percent),
        })
    return results


def get_questions_by_status(
    bank: Iterable[Question],
    progress: Mapping[str, ProgressRecord],
    status: Status,
) -> dict[str, list[Question]]:
    """Questions with the given status, grouped by category in bank order."""
    groups: dict[str, list[Question]] = {}
    for q in bank:
        if _status(progress, q.id) is status:
            groups.setdefault(q.category, []).append(q)
    return groups
