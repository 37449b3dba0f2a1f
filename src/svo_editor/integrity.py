"""Data-integrity checks for svo-editor databases."""

from __future__ import annotations

import sqlite3

from svo_editor.models import IntegrityFinding, Severity

_SLOTS = (
    ("subject_id", "SUBJECT"),
    ("verb_id", "VERB"),
    ("object_id", "OBJECT"),
)


def check_all(conn: sqlite3.Connection) -> list[IntegrityFinding]:
    """Run all integrity rules."""
    results: list[IntegrityFinding] = []
    results.extend(_int_cmb_001(conn))
    results.extend(_int_cmb_002(conn))
    results.extend(_int_wrd_001(conn))
    results.extend(_int_wrd_002(conn))
    results.extend(_int_wrd_003(conn))
    results.extend(_int_vrb_001(conn))
    return results


def _int_cmb_001(conn: sqlite3.Connection) -> list[IntegrityFinding]:
    """Combination slot holds a word of another role."""
    results = []
    for column, expected in _SLOTS:
        rows = conn.execute(
            f"SELECT c.id, w.id AS word_id, w.role FROM combinations c "
            f"JOIN words w ON c.{column} = w.id WHERE w.role != ?",
            (expected,),
        ).fetchall()
        for row in rows:
            results.append(IntegrityFinding(
                rule_id="INT-CMB-001",
                severity=Severity.ERROR.value,
                entity_type="combination",
                entity_id=str(row["id"]),
                message=(
                    f"{expected.lower()} slot references word {row['word_id']} "
                    f"with role {row['role']}"
                ),
                details={"slot": expected, "word_id": row["word_id"],
                         "role": row["role"]},
            ))
    return results


def _int_cmb_002(conn: sqlite3.Connection) -> list[IntegrityFinding]:
    """Combination references a word that no longer exists."""
    results = []
    for column, expected in _SLOTS:
        rows = conn.execute(
            f"SELECT c.id, c.{column} AS word_id FROM combinations c "
            f"WHERE NOT EXISTS (SELECT 1 FROM words w WHERE w.id = c.{column})"
        ).fetchall()
        for row in rows:
            results.append(IntegrityFinding(
                rule_id="INT-CMB-002",
                severity=Severity.ERROR.value,
                entity_type="combination",
                entity_id=str(row["id"]),
                message=(
                    f"{expected.lower()} slot references missing word "
                    f"{row['word_id']}"
                ),
                details={"slot": expected, "word_id": row["word_id"]},
            ))
    return results


def _int_wrd_001(conn: sqlite3.Connection) -> list[IntegrityFinding]:
    """Words with blank text."""
    rows = conn.execute(
        "SELECT id FROM words WHERE TRIM(text) = ''"
    ).fetchall()
    return [
        IntegrityFinding(
            rule_id="INT-WRD-001",
            severity=Severity.ERROR.value,
            entity_type="word",
            entity_id=str(row["id"]),
            message="Word text is blank",
        )
        for row in rows
    ]


def _int_wrd_002(conn: sqlite3.Connection) -> list[IntegrityFinding]:
    """Same text used by several words of one role."""
    rows = conn.execute(
        "SELECT text, role, GROUP_CONCAT(id) AS ids, COUNT(*) AS cnt "
        "FROM words GROUP BY text, role HAVING cnt > 1"
    ).fetchall()
    results = []
    for row in rows:
        ids = sorted(int(i) for i in row["ids"].split(","))
        for word_id in ids:
            results.append(IntegrityFinding(
                rule_id="INT-WRD-002",
                severity=Severity.WARNING.value,
                entity_type="word",
                entity_id=str(word_id),
                message=f"Duplicate {row['role']} text {row['text']!r}",
                details={"ids": ids},
            ))
    return results


def _int_wrd_003(conn: sqlite3.Connection) -> list[IntegrityFinding]:
    """Subjects and objects that no combination uses."""
    results = []
    for column, role in (("subject_id", "SUBJECT"), ("object_id", "OBJECT")):
        rows = conn.execute(
            f"SELECT w.id FROM words w WHERE w.role = ? AND NOT EXISTS "
            f"(SELECT 1 FROM combinations c WHERE c.{column} = w.id)",
            (role,),
        ).fetchall()
        for row in rows:
            results.append(IntegrityFinding(
                rule_id="INT-WRD-003",
                severity=Severity.WARNING.value,
                entity_type="word",
                entity_id=str(row["id"]),
                message=f"{role.capitalize()} is not used by any combination",
            ))
    return results


def _int_vrb_001(conn: sqlite3.Connection) -> list[IntegrityFinding]:
    """Verbs with no combinations."""
    rows = conn.execute(
        "SELECT w.id FROM words w WHERE w.role = 'VERB' AND NOT EXISTS "
        "(SELECT 1 FROM combinations c WHERE c.verb_id = w.id)"
    ).fetchall()
    return [
        IntegrityFinding(
            rule_id="INT-VRB-001",
            severity=Severity.WARNING.value,
            entity_type="word",
            entity_id=str(row["id"]),
            message="Verb has no combinations",
        )
        for row in rows
    ]
