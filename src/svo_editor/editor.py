"""CombinationEditor — main entry point for the svo-editor library."""

from __future__ import annotations

import functools
import logging
from collections.abc import Callable, Generator, Iterable
from contextlib import contextmanager
from pathlib import Path
from typing import Any, TypeVar

from svo_editor import db as _db
from svo_editor import history as _hist
from svo_editor.engine import DEFAULT_MESSAGES, Messages
from svo_editor.models import (
    BatchOutcome,
    CombinationModel,
    EditRecord,
    IntegrityFinding,
    SentenceCheck,
    SuggestionResult,
    WordModel,
    WordRole,
)
from svo_editor.service import CombinationService
from svo_editor.stores import SQLiteCombinationStore, SQLiteWordStore

logger = logging.getLogger(__name__)

_F = TypeVar("_F", bound=Callable[..., Any])


def _modifies_db(method: _F) -> _F:
    """Decorator: wraps mutation methods in a transaction (unless in batch)."""

    @functools.wraps(method)
    def wrapper(self: CombinationEditor, *args: Any, **kwargs: Any) -> Any:
        if self._in_batch:
            return method(self, *args, **kwargs)
        with self._conn:
            return method(self, *args, **kwargs)

    return wrapper  # type: ignore[return-value]


def _combination_snapshot(combo: CombinationModel) -> dict[str, Any]:
    return {
        "subject_id": combo.subject.id,
        "verb_id": combo.verb.id,
        "object_id": combo.object.id,
        "sentence": combo.sentence,
    }


class CombinationEditor:
    """Words and allowed Subject–Verb–Object combinations in SQLite.

    Every mutation runs in its own transaction, so the existence check and
    the insert of a combination see the same state. Use :meth:`batch` to
    group several mutations into one transaction.
    """

    def __init__(
        self,
        db_path: str | Path = ":memory:",
        *,
        messages: Messages = DEFAULT_MESSAGES,
    ) -> None:
        self._db_path = str(db_path)
        self._conn = _db.connect(db_path)
        _db.check_schema_version(self._conn)
        _db.init_db(self._conn)
        self._in_batch = False
        self._batch_depth = 0
        self._service = CombinationService(
            SQLiteWordStore(self._conn),
            SQLiteCombinationStore(self._conn),
            messages=messages,
        )

    def close(self) -> None:
        """Close the database connection."""
        self._conn.close()

    def __enter__(self) -> CombinationEditor:
        return self

    def __exit__(self, *exc: Any) -> None:
        self.close()

    # ------------------------------------------------------------------
    # Batch context manager
    # ------------------------------------------------------------------

    @contextmanager
    def batch(self) -> Generator[None, None, None]:
        """Group multiple mutations into a single transaction."""
        self._batch_depth += 1
        if self._batch_depth == 1:
            self._in_batch = True
            self._conn.execute("BEGIN")
        try:
            yield
        except BaseException:
            if self._batch_depth == 1:
                self._conn.rollback()
                self._in_batch = False
            self._batch_depth -= 1
            raise
        else:
            self._batch_depth -= 1
            if self._batch_depth == 0:
                self._conn.commit()
                self._in_batch = False

    # ------------------------------------------------------------------
    # Words
    # ------------------------------------------------------------------

    @_modifies_db
    def create_word(self, text: str, role: str | WordRole) -> WordModel:
        word = self._service.create_word(text, role)
        _hist.record_create(
            self._conn, "word", word.id, {"text": word.text, "role": word.role}
        )
        return word

    @_modifies_db
    def update_word(
        self,
        word_id: int,
        *,
        text: str | None = None,
        role: str | WordRole | None = None,
    ) -> WordModel:
        old = self._service.get_word(word_id)
        new = self._service.update_word(word_id, text=text, role=role)
        for field in ("text", "role"):
            if getattr(old, field) != getattr(new, field):
                _hist.record_update(
                    self._conn, "word", word_id, field,
                    getattr(old, field), getattr(new, field),
                )
        return new

    def get_word(self, word_id: int) -> WordModel:
        return self._service.get_word(word_id)

    def list_words(self, role: str | WordRole | None = None) -> list[WordModel]:
        return self._service.list_words(role)

    def find_words(
        self, text: str, role: str | WordRole | None = None
    ) -> list[WordModel]:
        return self._service.find_words(text, role)

    @_modifies_db
    def delete_word(self, word_id: int) -> None:
        word = self._service.get_word(word_id)
        removed = self._service.delete_word(word_id)
        for combo in removed:
            _hist.record_delete(
                self._conn, "combination", combo.id, _combination_snapshot(combo)
            )
        _hist.record_delete(
            self._conn, "word", word_id, {"text": word.text, "role": word.role}
        )

    # ------------------------------------------------------------------
    # Combinations
    # ------------------------------------------------------------------

    def list_combinations(self, verb_id: int | None = None) -> list[CombinationModel]:
        return self._service.list_combinations(verb_id)

    def get_combination(self, combination_id: int) -> CombinationModel:
        return self._service.get_combination(combination_id)

    @_modifies_db
    def create_combination(
        self, subject_id: int, verb_id: int, object_id: int
    ) -> CombinationModel:
        combo = self._service.create_combination(subject_id, verb_id, object_id)
        _hist.record_create(
            self._conn, "combination", combo.id, _combination_snapshot(combo)
        )
        return combo

    @_modifies_db
    def create_combinations_batch(
        self,
        verb_id: int,
        subject_ids: Iterable[int],
        object_ids: Iterable[int],
    ) -> BatchOutcome:
        outcome = self._service.create_combinations_batch(
            verb_id, subject_ids, object_ids
        )
        for combo in outcome.combinations:
            _hist.record_create(
                self._conn, "combination", combo.id, _combination_snapshot(combo)
            )
        return outcome

    @_modifies_db
    def delete_combination(self, combination_id: int) -> None:
        combo = self._service.delete_combination(combination_id)
        _hist.record_delete(
            self._conn, "combination", combination_id, _combination_snapshot(combo)
        )

    @_modifies_db
    def delete_combinations_by_verb(self, verb_id: int) -> int:
        """Delete every combination of a verb; returns how many were removed."""
        removed = self._service.delete_combinations_by_verb(verb_id)
        for combo in removed:
            _hist.record_delete(
                self._conn, "combination", combo.id, _combination_snapshot(combo)
            )
        return len(removed)

    # ------------------------------------------------------------------
    # Exercises
    # ------------------------------------------------------------------

    def get_suggestions(
        self, limit: int | None = None, *, verb_id: int | None = None
    ) -> SuggestionResult:
        return self._service.get_suggestions(limit, verb_id=verb_id)

    def validate_sentence(
        self, subject_id: int, verb_id: int, object_id: int
    ) -> SentenceCheck:
        return self._service.validate_sentence(subject_id, verb_id, object_id)

    # ------------------------------------------------------------------
    # History
    # ------------------------------------------------------------------

    def get_history(
        self,
        *,
        entity_type: str | None = None,
        entity_id: int | str | None = None,
        operation: str | None = None,
        limit: int | None = None,
    ) -> list[EditRecord]:
        return _hist.query_history(
            self._conn,
            entity_type=entity_type,
            entity_id=entity_id,
            operation=operation,
            limit=limit,
        )

    def get_changes_since(self, timestamp: str) -> list[EditRecord]:
        return _hist.query_history(self._conn, since=timestamp)

    # ------------------------------------------------------------------
    # Integrity & export
    # ------------------------------------------------------------------

    def check_integrity(self) -> list[IntegrityFinding]:
        from svo_editor.integrity import check_all
        return check_all(self._conn)

    def export_dict(self) -> dict[str, Any]:
        from svo_editor.exporter import export_to_dict
        return export_to_dict(self._conn)

    def export_yaml(self, destination: str | Path) -> None:
        from svo_editor.exporter import export_to_yaml
        export_to_yaml(self._conn, destination)
