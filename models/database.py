"""SQLite database initialization and CRUD operations."""

import json
import logging
import shutil
import sqlite3
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterator, Optional

from config.exceptions import DatabaseError
from models.journal import JournalEntry
from models.request import parse_timestamp
from models.story import StoryArc

logger = logging.getLogger(__name__)

# SQL for creating all tables
_CREATE_TABLES_SQL = """
CREATE TABLE IF NOT EXISTS journal_entries (
    id TEXT PRIMARY KEY,
    assignment_name TEXT NOT NULL DEFAULT '',
    subject TEXT NOT NULL DEFAULT '',
    entry_date TEXT NOT NULL,
    body TEXT NOT NULL,
    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
    updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
);

CREATE TABLE IF NOT EXISTS story_arcs (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    chapter_id TEXT NOT NULL DEFAULT '',
    entry_id TEXT,
    chapter_text TEXT NOT NULL,
    cliffhanger TEXT NOT NULL DEFAULT '',
    themes TEXT NOT NULL DEFAULT '[]',
    created_at TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS preferences (
    key TEXT PRIMARY KEY,
    value TEXT NOT NULL
);
"""

# Indexes added via migration (idempotent)
_MIGRATION_SQL = [
    "CREATE INDEX IF NOT EXISTS idx_story_arcs_created ON story_arcs(created_at, id)",
    "CREATE INDEX IF NOT EXISTS idx_story_arcs_entry ON story_arcs(entry_id)",
    "CREATE INDEX IF NOT EXISTS idx_journal_entries_date ON journal_entries(entry_date)",
]


def _sortable_timestamp(value: datetime) -> str:
    """Fixed-width UTC timestamp so lexical order equals time order."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S.%fZ")


class Database:
    """SQLite database manager for journal entries, story arcs and preferences."""

    def __init__(self, db_path: str | Path):
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._init_db()

    @contextmanager
    def _get_conn(self) -> Iterator[sqlite3.Connection]:
        conn = sqlite3.connect(str(self.db_path))
        conn.row_factory = sqlite3.Row
        try:
            conn.execute("PRAGMA journal_mode = WAL")
            with conn:
                yield conn
        except sqlite3.Error as e:
            raise DatabaseError(f"Database operation failed: {e}", {"path": str(self.db_path)}) from e
        finally:
            conn.close()

    def _init_db(self):
        with self._get_conn() as conn:
            conn.executescript(_CREATE_TABLES_SQL)
        self._migrate()

    def _migrate(self):
        """Apply idempotent schema migrations (indexes)."""
        for sql in _MIGRATION_SQL:
            try:
                with self._get_conn() as conn:
                    conn.execute(sql)
            except DatabaseError as e:
                logger.debug("Migration skipped (already applied): %s", e)

    def backup_database(self, target_path: str | Path) -> Path:
        """Create a backup copy of the database.

        Args:
            target_path: Path for the backup file.

        Returns:
            Path to the backup file.
        """
        target = Path(target_path)
        target.parent.mkdir(parents=True, exist_ok=True)
        shutil.copy2(str(self.db_path), str(target))
        logger.info("Database backed up to %s", target)
        return target

    # ---- Journal Entry CRUD ----

    def save_journal_entry(self, entry: JournalEntry) -> str:
        """Insert or replace a journal entry. Returns its id."""
        with self._get_conn() as conn:
            conn.execute(
                "INSERT INTO journal_entries (id, assignment_name, subject, entry_date, body) "
                "VALUES (?, ?, ?, ?, ?) "
                "ON CONFLICT(id) DO UPDATE SET assignment_name=excluded.assignment_name, "
                "subject=excluded.subject, entry_date=excluded.entry_date, body=excluded.body, "
                "updated_at=CURRENT_TIMESTAMP",
                (entry.id, entry.assignment_name, entry.subject,
                 _sortable_timestamp(entry.date), json.dumps(entry.to_dict(), ensure_ascii=False)),
            )
        return entry.id

    def get_journal_entry(self, entry_id: str) -> Optional[JournalEntry]:
        with self._get_conn() as conn:
            row = conn.execute(
                "SELECT body FROM journal_entries WHERE id = ?", (entry_id,)
            ).fetchone()
        if not row:
            return None
        try:
            return JournalEntry.from_dict(json.loads(row["body"]))
        except (ValueError, KeyError) as e:
            logger.error("Error decoding journal entry %s: %s", entry_id, e)
            return None

    def list_journal_entries(self) -> list[JournalEntry]:
        with self._get_conn() as conn:
            rows = conn.execute(
                "SELECT id, body FROM journal_entries ORDER BY entry_date, id"
            ).fetchall()
        entries = []
        for r in rows:
            try:
                entries.append(JournalEntry.from_dict(json.loads(r["body"])))
            except (ValueError, KeyError) as e:
                logger.error("Skipping undecodable journal entry %s: %s", r["id"], e)
        return entries

    def delete_journal_entry(self, entry_id: str) -> bool:
        with self._get_conn() as conn:
            cursor = conn.execute("DELETE FROM journal_entries WHERE id = ?", (entry_id,))
            return cursor.rowcount > 0

    # ---- Story Arc CRUD ----

    def create_story_arc(self, arc: StoryArc) -> int:
        with self._get_conn() as conn:
            cursor = conn.execute(
                "INSERT INTO story_arcs (chapter_id, entry_id, chapter_text, cliffhanger, "
                "themes, created_at) VALUES (?, ?, ?, ?, ?, ?)",
                (arc.chapter_id, arc.entry_id, arc.chapter_text, arc.cliffhanger,
                 json.dumps(arc.themes, ensure_ascii=False), _sortable_timestamp(arc.created_at)),
            )
            return cursor.lastrowid

    def get_recent_story_arcs(self, limit: int) -> list[StoryArc]:
        """Newest first; ties on created_at fall back to insertion order."""
        if limit <= 0:
            return []
        with self._get_conn() as conn:
            rows = conn.execute(
                "SELECT * FROM story_arcs ORDER BY created_at DESC, id DESC LIMIT ?",
                (limit,),
            ).fetchall()
        return [self._row_to_arc(r) for r in rows]

    def list_story_arcs(self) -> list[StoryArc]:
        """All arcs, oldest first."""
        with self._get_conn() as conn:
            rows = conn.execute(
                "SELECT * FROM story_arcs ORDER BY created_at, id"
            ).fetchall()
        return [self._row_to_arc(r) for r in rows]

    def count_story_arcs(self) -> int:
        with self._get_conn() as conn:
            return conn.execute("SELECT COUNT(*) FROM story_arcs").fetchone()[0]

    def delete_story_arcs(self):
        with self._get_conn() as conn:
            conn.execute("DELETE FROM story_arcs")
        logger.info("All story arcs deleted")

    @staticmethod
    def _row_to_arc(row: sqlite3.Row) -> StoryArc:
        try:
            themes = json.loads(row["themes"] or "[]")
        except ValueError:
            themes = []
        return StoryArc(
            id=row["id"],
            chapter_id=row["chapter_id"],
            entry_id=row["entry_id"],
            chapter_text=row["chapter_text"],
            cliffhanger=row["cliffhanger"],
            themes=themes,
            created_at=parse_timestamp(row["created_at"]),
        )

    # ---- Preferences ----

    def get_preference(self, key: str) -> Optional[str]:
        with self._get_conn() as conn:
            row = conn.execute("SELECT value FROM preferences WHERE key = ?", (key,)).fetchone()
        return row["value"] if row else None

    def set_preference(self, key: str, value: str):
        with self._get_conn() as conn:
            conn.execute(
                "INSERT INTO preferences (key, value) VALUES (?, ?) "
                "ON CONFLICT(key) DO UPDATE SET value=excluded.value",
                (key, value),
            )
