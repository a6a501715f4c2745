"""Database initialization and the key-value persistence surface."""
import logging
import sqlite3
from pathlib import Path

logger = logging.getLogger(__name__)

DEFAULT_DB_PATH = str(Path.home() / ".flashdrill" / "flashdrill.db")

SCHEMA = """
CREATE TABLE IF NOT EXISTS kv_store (
    key TEXT PRIMARY KEY,
    value TEXT NOT NULL,
    updated_at TEXT DEFAULT CURRENT_TIMESTAMP
);
"""


def get_connection(db_path: str = DEFAULT_DB_PATH) -> sqlite3.Connection:
    """Return a SQLite connection with row factory enabled."""
    conn = sqlite3.connect(db_path)
    conn.row_factory = sqlite3.Row
    return conn


def init_db(db_path: str = DEFAULT_DB_PATH) -> None:
    """Initialize the database, creating all tables if they don't exist."""
    Path(db_path).parent.mkdir(parents=True, exist_ok=True)
    conn = get_connection(db_path)
    conn.executescript(SCHEMA)
    conn.commit()
    conn.close()


class KeyValueStore:
    """String-keyed, string-valued durable storage backed by SQLite.

    Every write commits before returning, so callers get read-your-writes
    consistency. ``delete`` accepts several keys and removes them in a single
    transaction.

    An unusable database does not fail construction: ``available`` is set to
    False and later reads raise ``sqlite3.Error`` for the owning service to
    handle.
    """

    def __init__(self, db_path: str = DEFAULT_DB_PATH):
        self.db_path = db_path
        self.available = True
        try:
            init_db(db_path)
        except (sqlite3.Error, OSError) as e:
            self.available = False
            logger.warning("Storage at %s is unavailable: %s", db_path, e)

    def load(self, key: str) -> str | None:
        conn = get_connection(self.db_path)
        try:
            row = conn.execute("SELECT value FROM kv_store WHERE key = ?", (key,)).fetchone()
        finally:
            conn.close()
        return row["value"] if row else None

    def save(self, key: str, value: str) -> None:
        conn = get_connection(self.db_path)
        try:
            with conn:
                conn.execute(
                    """INSERT INTO kv_store (key, value, updated_at) VALUES (?, ?, CURRENT_TIMESTAMP)
                    ON CONFLICT(key) DO UPDATE SET value=excluded.value, updated_at=CURRENT_TIMESTAMP""",
                    (key, value),
                )
        finally:
            conn.close()

    def delete(self, *keys: str) -> None:
        if not keys:
            return
        conn = get_connection(self.db_path)
        try:
            with conn:
                conn.executemany("DELETE FROM kv_store WHERE key = ?", [(k,) for k in keys])
        finally:
            conn.close()
        logger.debug("Deleted keys %s", ", ".join(keys))

    def keys(self) -> list[str]:
        conn = get_connection(self.db_path)
        try:
            rows = conn.execute("SELECT key FROM kv_store ORDER BY key").fetchall()
        finally:
            conn.close()
        return [r["key"] for r in rows]
