"""Runtime settings and logging setup."""
import logging
import os
from dataclasses import dataclass

from rich.console import Console
from rich.logging import RichHandler

from flashdrill.bank import DEFAULT_BANK_PATH
from flashdrill.db import DEFAULT_DB_PATH

DB_ENV = "FLASHDRILL_DB"
BANK_ENV = "FLASHDRILL_BANK"
LOG_LEVEL_ENV = "FLASHDRILL_LOG_LEVEL"
DEFAULT_LOG_LEVEL = "WARNING"


@dataclass(frozen=True)
class Settings:
    db_path: str = DEFAULT_DB_PATH
    bank_path: str = DEFAULT_BANK_PATH
    log_level: str = DEFAULT_LOG_LEVEL


def load_settings(environ=None) -> Settings:
    env = os.environ if environ is None else environ
    level = env.get(LOG_LEVEL_ENV, DEFAULT_LOG_LEVEL).upper()
    if level not in logging.getLevelNamesMapping():
        level = DEFAULT_LOG_LEVEL
    return Settings(
        db_path=env.get(DB_ENV) or DEFAULT_DB_PATH,
        bank_path=env.get(BANK_ENV) or DEFAULT_BANK_PATH,
        log_level=level,
    )


def setup_logging(level: str = DEFAULT_LOG_LEVEL, console: Console | None = None) -> None:
    """Route log records through rich so they render alongside the UI."""
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, show_path=False, rich_tracebacks=True)],
        force=True,
    )
