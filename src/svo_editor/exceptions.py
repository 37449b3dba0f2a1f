"""Custom exception hierarchy for svo-editor."""

from __future__ import annotations


class SvoEditorError(Exception):
    """Base exception for all svo-editor errors."""


class ValidationError(SvoEditorError):
    """Invalid input (blank text, unknown role, empty id set)."""


class EntityNotFoundError(SvoEditorError):
    """Referenced word or combination doesn't exist.

    ``key`` names what ``entity_id`` is: a numeric ``"ID"`` by default, or
    ``"text"`` when a word was looked up by its text.
    """

    _MESSAGES = {
        "subject": "Subject word not found with {key}: {id}",
        "verb": "Verb word not found with {key}: {id}",
        "object": "Object word not found with {key}: {id}",
        "word": "Word not found with {key}: {id}",
        "combination": "Allowed combination not found with {key}: {id}",
    }

    def __init__(
        self, entity_type: str, entity_id: object, *, key: str = "ID"
    ) -> None:
        self.entity_type = entity_type
        self.entity_id = entity_id
        self.key = key
        template = self._MESSAGES.get(
            entity_type, f"{entity_type.capitalize()} not found with {{key}}: {{id}}"
        )
        super().__init__(template.format(key=key, id=entity_id))


class DuplicateEntityError(SvoEditorError):
    """Entity with the same key already exists."""


class CombinationExistsError(DuplicateEntityError):
    """The exact (subject, verb, object) triple is already allowed."""

    def __init__(self, subject: str, verb: str, object: str) -> None:
        self.texts = (subject, verb, object)
        super().__init__(f"Combination already exists: {subject} {verb} {object}")


class ExportError(SvoEditorError):
    """Failed to export (ambiguous word references, etc.)."""


class DatabaseError(SvoEditorError):
    """Schema version mismatch, connection failure."""
