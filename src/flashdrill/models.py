"""Data classes for the flashcard domain model."""
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


class QuestionType(str, Enum):
    SINGLE = "single"
    MULTIPLE = "multiple"
    JUDGMENT = "judgment"


class Status(str, Enum):
    NEW = "new"
    LEARNING = "learning"
    MASTERED = "mastered"


class Outcome(str, Enum):
    EASY = "easy"
    HARD = "hard"


class SessionMode(str, Enum):
    IDLE = "idle"
    STUDYING = "studying"


@dataclass(frozen=True)
class Question:
    id: str
    category: str
    type: QuestionType
    text: str
    answer: frozenset
    options: tuple = ()
    explanation: str = ""


@dataclass(frozen=True)
class ProgressRecord:
    status: Status
    difficulty_score: int = 0
    last_reviewed: int = 0  # epoch millis
    review_count: int = 0


@dataclass(frozen=True)
class SessionState:
    mode: SessionMode = SessionMode.IDLE
    queue: tuple = ()
    index: int = 0
    easy_count: int = 0
    hard_count: int = 0

    @property
    def is_active(self) -> bool:
        return self.mode is SessionMode.STUDYING

    @property
    def current_id(self) -> Optional[str]:
        if not self.is_active:
            return None
        return self.queue[self.index]


@dataclass(frozen=True)
class AnswerResult:
    question_id: str
    record: ProgressRecord
    completed: bool
    session: SessionState = field(default_factory=SessionState)
    summary: Optional[dict] = None
