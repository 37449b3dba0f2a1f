"""Database connection, DDL, and low-level row helpers for svo-editor."""

from __future__ import annotations

import sqlite3
from collections.abc import Iterable
from pathlib import Path

from svo_editor.exceptions import DatabaseError

SCHEMA_VERSION = "1.0"

DEFAULT_DB_PATH = Path.home() / ".svo_editor.db"

# ---------------------------------------------------------------------------
# DDL statements
# ---------------------------------------------------------------------------

_DDL = """
-- Meta table
CREATE TABLE IF NOT EXISTS meta (
    key TEXT NOT NULL,
    value TEXT,
    UNIQUE (key)
);

-- Words
CREATE TABLE IF NOT EXISTS words (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    text TEXT NOT NULL,
    role TEXT NOT NULL CHECK( role IN ('SUBJECT', 'VERB', 'OBJECT') ),
    created_at TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%f', 'now')),
    updated_at TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%f', 'now'))
);
CREATE INDEX IF NOT EXISTS word_role_index ON words (role);
CREATE INDEX IF NOT EXISTS word_text_index ON words (text);

-- Allowed combinations
CREATE TABLE IF NOT EXISTS combinations (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    subject_id INTEGER NOT NULL REFERENCES words (id) ON DELETE CASCADE,
    verb_id INTEGER NOT NULL REFERENCES words (id) ON DELETE CASCADE,
    object_id INTEGER NOT NULL REFERENCES words (id) ON DELETE CASCADE,
    created_at TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%f', 'now')),
    UNIQUE (subject_id, verb_id, object_id)
);
CREATE INDEX IF NOT EXISTS combination_subject_index ON combinations (subject_id);
CREATE INDEX IF NOT EXISTS combination_verb_index ON combinations (verb_id);
CREATE INDEX IF NOT EXISTS combination_object_index ON combinations (object_id);

-- Edit history
CREATE TABLE IF NOT EXISTS edit_history (
    rowid INTEGER PRIMARY KEY,
    entity_type TEXT NOT NULL CHECK( entity_type IN ('word', 'combination') ),
    entity_id TEXT NOT NULL,
    field_name TEXT,
    operation TEXT NOT NULL CHECK( operation IN ('CREATE', 'UPDATE', 'DELETE') ),
    old_value TEXT,
    new_value TEXT,
    timestamp TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%f', 'now'))
);
CREATE INDEX IF NOT EXISTS edit_history_entity_index ON edit_history (entity_type, entity_id);
CREATE INDEX IF NOT EXISTS edit_history_timestamp_index ON edit_history (timestamp);
"""

# Combination rows joined with their three words, aliased per slot.
COMBINATION_SELECT = """
SELECT c.id, c.created_at,
       s.id AS s_id, s.text AS s_text, s.role AS s_role,
       s.created_at AS s_created_at, s.updated_at AS s_updated_at,
       v.id AS v_id, v.text AS v_text, v.role AS v_role,
       v.created_at AS v_created_at, v.updated_at AS v_updated_at,
       o.id AS o_id, o.text AS o_text, o.role AS o_role,
       o.created_at AS o_created_at, o.updated_at AS o_updated_at
FROM combinations c
JOIN words s ON c.subject_id = s.id
JOIN words v ON c.verb_id = v.id
JOIN words o ON c.object_id = o.id
"""


def connect(db_path: str | Path = ":memory:") -> sqlite3.Connection:
    """Open a database connection with editor PRAGMA settings."""
    db_path_str = str(db_path)
    conn = sqlite3.connect(db_path_str)
    conn.execute("PRAGMA foreign_keys = ON")
    if db_path_str != ":memory:":
        conn.execute("PRAGMA journal_mode = WAL")
    conn.row_factory = sqlite3.Row
    return conn


def init_db(conn: sqlite3.Connection) -> None:
    """Initialize all tables if they don't exist. Set schema version."""
    conn.executescript(_DDL)
    conn.execute(
        "INSERT OR IGNORE INTO meta (key, value) VALUES ('schema_version', ?)",
        (SCHEMA_VERSION,),
    )
    conn.execute(
        "INSERT OR IGNORE INTO meta (key, value) "
        "VALUES ('created_at', strftime('%Y-%m-%dT%H:%M:%f', 'now'))",
    )
    conn.commit()


def check_schema_version(conn: sqlite3.Connection) -> None:
    """Verify the database schema version is compatible."""
    try:
        row = conn.execute(
            "SELECT value FROM meta WHERE key = 'schema_version'"
        ).fetchone()
    except sqlite3.OperationalError:
        # meta table doesn't exist - uninitialized DB
        return
    if row is None:
        return
    version = row[0]
    if version != SCHEMA_VERSION:
        raise DatabaseError(
            f"Incompatible schema version: {version} "
            f"(expected {SCHEMA_VERSION})"
        )


def placeholders(values: Iterable[object]) -> str:
    """Return ``?, ?, ?`` with one marker per value."""
    return ", ".join("?" for _ in values)


# ---------------------------------------------------------------------------
# Word helpers
# ---------------------------------------------------------------------------

def get_word_row(conn: sqlite3.Connection, word_id: int) -> sqlite3.Row | None:
    """Get a full word row by ID."""
    return conn.execute(
        "SELECT * FROM words WHERE id = ?",
        (word_id,),
    ).fetchone()


def get_word_rows(
    conn: sqlite3.Connection, word_ids: Iterable[int]
) -> list[sqlite3.Row]:
    """Get every word row whose ID is in ``word_ids`` (missing IDs are absent)."""
    ids = list(word_ids)
    if not ids:
        return []
    return conn.execute(
        f"SELECT * FROM words WHERE id IN ({placeholders(ids)})",
        ids,
    ).fetchall()


def word_exists(conn: sqlite3.Connection, word_id: int) -> bool:
    return conn.execute(
        "SELECT 1 FROM words WHERE id = ?", (word_id,)
    ).fetchone() is not None


# ---------------------------------------------------------------------------
# Combination helpers
# ---------------------------------------------------------------------------

def get_combination_row(
    conn: sqlite3.Connection, combination_id: int
) -> sqlite3.Row | None:
    """Get a joined combination row by ID."""
    return conn.execute(
        COMBINATION_SELECT + "WHERE c.id = ?",
        (combination_id,),
    ).fetchone()


def get_combination_row_by_triple(
    conn: sqlite3.Connection, subject_id: int, verb_id: int, object_id: int
) -> sqlite3.Row | None:
    """Get a joined combination row by its exact triple."""
    return conn.execute(
        COMBINATION_SELECT
        + "WHERE c.subject_id = ? AND c.verb_id = ? AND c.object_id = ?",
        (subject_id, verb_id, object_id),
    ).fetchone()


def combination_exists(conn: sqlite3.Connection, combination_id: int) -> bool:
    return conn.execute(
        "SELECT 1 FROM combinations WHERE id = ?", (combination_id,)
    ).fetchone() is not None


def count_word_combinations(conn: sqlite3.Connection, word_id: int) -> int:
    """Count combinations referencing a word in any slot."""
    return conn.execute(
        "SELECT COUNT(*) FROM combinations "
        "WHERE subject_id = ? OR verb_id = ? OR object_id = ?",
        (word_id, word_id, word_id),
    ).fetchone()[0]
