"""Error taxonomy for the progress tracker and session controller."""


class FlashdrillError(Exception):
    """Base class for all application errors."""


class QuestionBankError(FlashdrillError):
    """The question bank file is missing or malformed."""


class NoMatchingQuestions(FlashdrillError):
    """The candidate set was empty after filtering."""

    def __init__(self, category=None, question_type=None):
        self.category = category
        self.question_type = question_type
        parts = []
        if category:
            parts.append(f"category={category!r}")
        if question_type:
            parts.append(f"type={getattr(question_type, 'value', question_type)!r}")
        where = f" ({', '.join(parts)})" if parts else ""
        super().__init__(f"No questions match{where}")


class CorruptPersistedState(FlashdrillError):
    """A stored progress or session blob could not be decoded."""

    def __init__(self, key: str, reason: str):
        self.key = key
        self.reason = reason
        super().__init__(f"Corrupt persisted state under {key!r}: {reason}")


class StaleQuestionReference(FlashdrillError):
    """The active session refers to a question id missing from the bank."""

    def __init__(self, question_id: str):
        self.question_id = question_id
        super().__init__(f"Question {question_id!r} is no longer in the bank")


class SessionNotActive(FlashdrillError):
    """An operation that needs an active session was called while idle."""


class ResetConfirmationDeclined(FlashdrillError):
    """The learner declined a progress reset. Nothing was changed."""
