"""Question bank loading and validation for JSON and YAML files."""
import json
import logging
from pathlib import Path

from flashdrill.errors import QuestionBankError
from flashdrill.models import Question, QuestionType

logger = logging.getLogger(__name__)

CONTENT_DIR = Path(__file__).parent / "content"
DEFAULT_BANK_PATH = str(CONTENT_DIR / "questions.json")

JUDGMENT_KEYS = ("√", "×")


def read_bank_data(file_path: str):
    path = Path(file_path)
    if not path.exists():
        raise QuestionBankError(f"Question bank not found: {file_path}")
    suffix = path.suffix.lower()
    text = path.read_text(encoding="utf-8")
    if suffix in (".yaml", ".yml"):
        import yaml
        try:
            return yaml.safe_load(text)
        except yaml.YAMLError as e:
            raise QuestionBankError(f"Invalid YAML in {path.name}: {e}") from e
    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        raise QuestionBankError(f"Invalid JSON in {path.name}: {e}") from e


def option_letters(count: int) -> tuple:
    return tuple(chr(ord("A") + i) for i in range(count))


def parse_question(raw: dict, position: int) -> Question:
    """Build a Question from one bank entry, validating answer keys against options."""
    if not isinstance(raw, dict):
        raise QuestionBankError(f"Question {position} must be an object")
    for required in ("id", "category", "type", "question", "answer"):
        if required not in raw:
            raise QuestionBankError(f"Question {position} missing '{required}' field")

    qid = str(raw["id"])
    try:
        qtype = QuestionType(raw["type"])
    except ValueError:
        raise QuestionBankError(f"Question {qid}: unknown type {raw['type']!r}") from None

    options = tuple(str(o) for o in raw.get("options") or ())
    answer = raw["answer"]
    keys = set(answer) if isinstance(answer, list) else {answer}
    keys = {str(k).strip() for k in keys}

    if qtype is QuestionType.JUDGMENT:
        valid = set(JUDGMENT_KEYS)
        options = ()
    else:
        if not options:
            raise QuestionBankError(f"Question {qid}: {qtype.value} questions need options")
        valid = set(option_letters(len(options)))

    if not keys or not keys <= valid:
        raise QuestionBankError(f"Question {qid}: answer {answer!r} is not one of {sorted(valid)}")
    if qtype is not QuestionType.MULTIPLE and len(keys) != 1:
        raise QuestionBankError(f"Question {qid}: {qtype.value} questions take exactly one answer")

    return Question(
        id=qid,
        category=str(raw["category"]),
        type=qtype,
        text=str(raw["question"]),
        answer=frozenset(keys),
        options=options,
        explanation=str(raw.get("explanation") or ""),
    )


def load_bank(file_path: str = DEFAULT_BANK_PATH) -> list[Question]:
    """Load and validate the full question bank. Order follows the file."""
    data = read_bank_data(file_path)
    if isinstance(data, dict):
        data = data.get("questions")
    if not isinstance(data, list):
        raise QuestionBankError("Question bank must be a list or contain a 'questions' list")

    questions = [parse_question(raw, i) for i, raw in enumerate(data)]
    seen = set()
    for q in questions:
        if q.id in seen:
            raise QuestionBankError(f"Duplicate question id {q.id!r}")
        seen.add(q.id)
    logger.info("Loaded %d questions from %s", len(questions), Path(file_path).name)
    return questions


def index_bank(bank: list[Question]) -> dict[str, Question]:
    return {q.id: q for q in bank}


def get_categories(bank: list[Question]) -> list[str]:
    """Distinct categories in the order they first appear in the bank."""
    return list(dict.fromkeys(q.category for q in bank))
