"""Word and combination store contracts and their SQLite implementations.

The engine and service only rely on the two protocols below; any backend
that honours them (SQLite tables, :mod:`svo_editor.memory`, ...) can be
plugged in. A store must enforce triple uniqueness itself and report a
duplicate insert as :class:`~svo_editor.exceptions.CombinationExistsError`.
"""

from __future__ import annotations

import sqlite3
from collections.abc import Iterable, Sequence
from typing import Protocol

from svo_editor import db as _db
from svo_editor.exceptions import (
    CombinationExistsError,
    DatabaseError,
    EntityNotFoundError,
)
from svo_editor.models import CombinationModel, NewCombination, WordModel

_SLOTS = ("subject", "verb", "object")


class WordStore(Protocol):
    def resolve_word(self, word_id: int) -> WordModel | None: ...

    def resolve_words(self, word_ids: Iterable[int]) -> dict[int, WordModel]: ...

    def find_words(
        self, *, text: str | None = None, role: str | None = None
    ) -> list[WordModel]: ...

    def find_words_by_role(self, role: str) -> list[WordModel]: ...

    def word_exists(self, word_id: int) -> bool: ...

    def insert_word(self, text: str, role: str) -> WordModel: ...

    def update_word(self, word_id: int, text: str, role: str) -> WordModel: ...

    def delete_word(self, word_id: int) -> bool: ...


class CombinationStore(Protocol):
    def get(self, combination_id: int) -> CombinationModel | None: ...

    def exists(self, combination_id: int) -> bool: ...

    def find_by_triple(
        self, subject_id: int, verb_id: int, object_id: int
    ) -> CombinationModel | None: ...

    def find_by_verb(self, verb_id: int) -> list[CombinationModel]: ...

    def find_by_word(self, word_id: int) -> list[CombinationModel]: ...

    def count_by_word(self, word_id: int) -> int: ...

    def find_all(self) -> list[CombinationModel]: ...

    def save(self, combination: NewCombination) -> CombinationModel: ...

    def save_all(
        self, combinations: Sequence[NewCombination]
    ) -> list[CombinationModel]: ...

    def delete(self, combination_id: int) -> bool: ...

    def delete_by_verb(self, verb_id: int) -> int: ...


# ---------------------------------------------------------------------------
# Row conversion
# ---------------------------------------------------------------------------

def row_to_word(row: sqlite3.Row, prefix: str = "") -> WordModel:
    return WordModel(
        id=row[f"{prefix}id"],
        text=row[f"{prefix}text"],
        role=row[f"{prefix}role"],
        created_at=row[f"{prefix}created_at"],
        updated_at=row[f"{prefix}updated_at"],
    )


def row_to_combination(row: sqlite3.Row) -> CombinationModel:
    return CombinationModel(
        id=row["id"],
        subject=row_to_word(row, "s_"),
        verb=row_to_word(row, "v_"),
        object=row_to_word(row, "o_"),
        created_at=row["created_at"],
    )


# ---------------------------------------------------------------------------
# SQLite stores
# ---------------------------------------------------------------------------

class SQLiteWordStore:
    """Words kept in the ``words`` table.

    The store never commits; transaction boundaries belong to the caller.
    """

    def __init__(self, conn: sqlite3.Connection) -> None:
        self._conn = conn

    def resolve_word(self, word_id: int) -> WordModel | None:
        row = _db.get_word_row(self._conn, word_id)
        return row_to_word(row) if row is not None else None

    def resolve_words(self, word_ids: Iterable[int]) -> dict[int, WordModel]:
        return {
            row["id"]: row_to_word(row)
            for row in _db.get_word_rows(self._conn, word_ids)
        }

    def find_words(
        self, *, text: str | None = None, role: str | None = None
    ) -> list[WordModel]:
        clauses: list[str] = []
        params: list[str] = []
        if text is not None:
            clauses.append("text = ?")
            params.append(text)
        if role is not None:
            clauses.append("role = ?")
            params.append(role)
        where = " AND ".join(clauses) if clauses else "1=1"
        rows = self._conn.execute(
            f"SELECT * FROM words WHERE {where} ORDER BY id", params
        ).fetchall()
        return [row_to_word(r) for r in rows]

    def find_words_by_role(self, role: str) -> list[WordModel]:
        return self.find_words(role=role)

    def word_exists(self, word_id: int) -> bool:
        return _db.word_exists(self._conn, word_id)

    def insert_word(self, text: str, role: str) -> WordModel:
        cur = self._conn.execute(
            "INSERT INTO words (text, role) VALUES (?, ?)",
            (text, role),
        )
        return self.resolve_word(cur.lastrowid)  # type: ignore[return-value]

    def update_word(self, word_id: int, text: str, role: str) -> WordModel:
        cur = self._conn.execute(
            "UPDATE words SET text = ?, role = ?, "
            "updated_at = strftime('%Y-%m-%dT%H:%M:%f', 'now') WHERE id = ?",
            (text, role, word_id),
        )
        if cur.rowcount == 0:
            raise EntityNotFoundError("word", word_id)
        return self.resolve_word(word_id)  # type: ignore[return-value]

    def delete_word(self, word_id: int) -> bool:
        # combinations go with it through ON DELETE CASCADE
        cur = self._conn.execute("DELETE FROM words WHERE id = ?", (word_id,))
        return cur.rowcount > 0


class SQLiteCombinationStore:
    """Combinations kept in the ``combinations`` table.

    Uniqueness of the triple is enforced by the table's UNIQUE constraint,
    so a concurrent writer inserting the same triple fails here instead of
    producing a second row.
    """

    def __init__(self, conn: sqlite3.Connection) -> None:
        self._conn = conn

    def get(self, combination_id: int) -> CombinationModel | None:
        row = _db.get_combination_row(self._conn, combination_id)
        return row_to_combination(row) if row is not None else None

    def exists(self, combination_id: int) -> bool:
        return _db.combination_exists(self._conn, combination_id)

    def find_by_triple(
        self, subject_id: int, verb_id: int, object_id: int
    ) -> CombinationModel | None:
        row = _db.get_combination_row_by_triple(
            self._conn, subject_id, verb_id, object_id
        )
        return row_to_combination(row) if row is not None else None

    def find_by_verb(self, verb_id: int) -> list[CombinationModel]:
        rows = self._conn.execute(
            _db.COMBINATION_SELECT + "WHERE c.verb_id = ? ORDER BY c.id",
            (verb_id,),
        ).fetchall()
        return [row_to_combination(r) for r in rows]

    def find_by_word(self, word_id: int) -> list[CombinationModel]:
        rows = self._conn.execute(
            _db.COMBINATION_SELECT
            + "WHERE c.subject_id = ? OR c.verb_id = ? OR c.object_id = ? "
            "ORDER BY c.id",
            (word_id, word_id, word_id),
        ).fetchall()
        return [row_to_combination(r) for r in rows]

    def count_by_word(self, word_id: int) -> int:
        return _db.count_word_combinations(self._conn, word_id)

    def find_all(self) -> list[CombinationModel]:
        rows = self._conn.execute(
            _db.COMBINATION_SELECT + "ORDER BY c.id"
        ).fetchall()
        return [row_to_combination(r) for r in rows]

    def save(self, combination: NewCombination) -> CombinationModel:
        try:
            cur = self._conn.execute(
                "INSERT INTO combinations (subject_id, verb_id, object_id) "
                "VALUES (?, ?, ?)",
                combination.triple,
            )
        except sqlite3.IntegrityError as e:
            if "UNIQUE" in str(e):
                raise CombinationExistsError(
                    combination.subject.text,
                    combination.verb.text,
                    combination.object.text,
                ) from e
            for slot, word_id in zip(_SLOTS, combination.triple):
                if not _db.word_exists(self._conn, word_id):
                    raise EntityNotFoundError(slot, word_id) from e
            raise DatabaseError(f"Could not store combination: {e}") from e
        return self.get(cur.lastrowid)  # type: ignore[return-value]

    def save_all(
        self, combinations: Sequence[NewCombination]
    ) -> list[CombinationModel]:
        return [self.save(c) for c in combinations]

    def delete(self, combination_id: int) -> bool:
        cur = self._conn.execute(
            "DELETE FROM combinations WHERE id = ?", (combination_id,)
        )
        return cur.rowcount > 0

    def delete_by_verb(self, verb_id: int) -> int:
        cur = self._conn.execute(
            "DELETE FROM combinations WHERE verb_id = ?", (verb_id,)
        )
        return cur.rowcount
