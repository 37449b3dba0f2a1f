"""Tests for the database layer."""

import sqlite3

import pytest

from svo_editor import db
from svo_editor.exceptions import CombinationExistsError, EntityNotFoundError
from svo_editor.models import NewCombination, WordModel
from svo_editor.stores import SQLiteCombinationStore, SQLiteWordStore


@pytest.fixture
def conn():
    c = db.connect()
    db.init_db(c)
    yield c
    c.close()


class TestSchema:

    def test_tables_created(self, conn):
        tables = {
            r[0] for r in conn.execute(
                "SELECT name FROM sqlite_master WHERE type='table'"
            )
        }
        assert {"meta", "words", "combinations", "edit_history"} <= tables

    def test_foreign_keys_enabled(self, conn):
        assert conn.execute("PRAGMA foreign_keys").fetchone()[0] == 1

    def test_init_is_idempotent(self, conn):
        db.init_db(conn)
        rows = conn.execute(
            "SELECT COUNT(*) FROM meta WHERE key='schema_version'"
        ).fetchone()
        assert rows[0] == 1

    def test_role_check_constraint(self, conn):
        with pytest.raises(sqlite3.IntegrityError):
            conn.execute("INSERT INTO words (text, role) VALUES ('x', 'NOUN')")

    def test_triple_unique_constraint(self, conn):
        for text, role in (("cat", "SUBJECT"), ("eats", "VERB"), ("fish", "OBJECT")):
            conn.execute("INSERT INTO words (text, role) VALUES (?, ?)", (text, role))
        conn.execute(
            "INSERT INTO combinations (subject_id, verb_id, object_id) VALUES (1, 2, 3)"
        )
        with pytest.raises(sqlite3.IntegrityError):
            conn.execute(
                "INSERT INTO combinations (subject_id, verb_id, object_id) "
                "VALUES (1, 2, 3)"
            )

    def test_unknown_word_reference_rejected(self, conn):
        with pytest.raises(sqlite3.IntegrityError):
            conn.execute(
                "INSERT INTO combinations (subject_id, verb_id, object_id) "
                "VALUES (7, 8, 9)"
            )


class TestHelpers:

    def test_get_word_rows_skips_missing(self, conn):
        conn.execute("INSERT INTO words (text, role) VALUES ('cat', 'SUBJECT')")
        rows = db.get_word_rows(conn, [1, 2])
        assert [r["text"] for r in rows] == ["cat"]
        assert db.get_word_rows(conn, []) == []

    def test_placeholders(self):
        assert db.placeholders([1, 2, 3]) == "?, ?, ?"

    def test_count_word_combinations(self, conn):
        for text, role in (("cat", "SUBJECT"), ("eats", "VERB"), ("fish", "OBJECT")):
            conn.execute("INSERT INTO words (text, role) VALUES (?, ?)", (text, role))
        conn.execute(
            "INSERT INTO combinations (subject_id, verb_id, object_id) VALUES (1, 2, 3)"
        )
        assert db.count_word_combinations(conn, 2) == 1
        assert db.word_exists(conn, 3)
        assert not db.word_exists(conn, 4)


class TestSQLiteCombinationStore:

    @pytest.fixture
    def stores(self, conn):
        words = SQLiteWordStore(conn)
        cat = words.insert_word("cat", "SUBJECT")
        eats = words.insert_word("eats", "VERB")
        fish = words.insert_word("fish", "OBJECT")
        return words, SQLiteCombinationStore(conn), cat, eats, fish

    def test_missing_slot_word_reported(self, stores):
        words, combos, cat, eats, fish = stores
        ghost = WordModel(
            id=99, text="ghost", role="OBJECT",
            created_at=fish.created_at, updated_at=fish.updated_at,
        )
        with pytest.raises(EntityNotFoundError) as exc:
            combos.save(NewCombination(cat, eats, ghost))
        assert exc.value.entity_type == "object"
        assert exc.value.entity_id == 99
        assert str(exc.value) == "Object word not found with ID: 99"
        assert combos.find_all() == []

    def test_duplicate_triple(self, stores):
        words, combos, cat, eats, fish = stores
        combos.save(NewCombination(cat, eats, fish))
        with pytest.raises(CombinationExistsError):
            combos.save(NewCombination(cat, eats, fish))

    def test_count_by_word(self, stores):
        words, combos, cat, eats, fish = stores
        assert combos.count_by_word(eats.id) == 0
        combos.save(NewCombination(cat, eats, fish))
        assert combos.count_by_word(eats.id) == 1
        assert combos.count_by_word(fish.id) == 1
