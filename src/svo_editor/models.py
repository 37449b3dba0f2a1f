"""Domain model dataclasses and enums for svo-editor."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------

class WordRole(str, Enum):
    """Grammatical role a word plays in a sentence."""

    SUBJECT = "SUBJECT"
    VERB = "VERB"
    OBJECT = "OBJECT"


class EditOperation(str, Enum):
    """Type of mutation recorded in the edit history."""

    CREATE = "CREATE"
    UPDATE = "UPDATE"
    DELETE = "DELETE"


class Severity(str, Enum):
    """Severity level for integrity findings."""

    ERROR = "ERROR"
    WARNING = "WARNING"


# ---------------------------------------------------------------------------
# Graph entities
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class WordModel:
    """A lexical item tagged with its role."""

    id: int
    text: str
    role: str
    created_at: str
    updated_at: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "text": self.text,
            "type": self.role,
            "created_at": self.created_at,
        }


@dataclass(frozen=True, slots=True)
class CombinationModel:
    """One allowed (subject, verb, object) triple."""

    id: int
    subject: WordModel
    verb: WordModel
    object: WordModel
    created_at: str

    @property
    def triple(self) -> tuple[int, int, int]:
        return (self.subject.id, self.verb.id, self.object.id)

    @property
    def sentence(self) -> str:
        return f"{self.subject.text} {self.verb.text} {self.object.text}"

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "subject": WordReference.of(self.subject).to_dict(),
            "verb": WordReference.of(self.verb).to_dict(),
            "object": WordReference.of(self.object).to_dict(),
            "sentence": self.sentence,
        }


@dataclass(frozen=True, slots=True)
class NewCombination:
    """A resolved triple staged for insertion (no id yet)."""

    subject: WordModel
    verb: WordModel
    object: WordModel

    @property
    def triple(self) -> tuple[int, int, int]:
        return (self.subject.id, self.verb.id, self.object.id)


# ---------------------------------------------------------------------------
# Query payloads
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class WordReference:
    """Minimal id + text view of a word."""

    id: int
    text: str

    @classmethod
    def of(cls, word: WordModel) -> WordReference:
        return cls(id=word.id, text=word.text)

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "text": self.text}


@dataclass(frozen=True, slots=True)
class VerbSuggestion:
    """A verb with every subject and object id seen alongside it.

    The two id lists are independent: a subject and an object both listed
    here are not necessarily allowed together.
    """

    id: int
    text: str
    compatible_subject_ids: tuple[int, ...]
    compatible_object_ids: tuple[int, ...]

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "text": self.text,
            "compatible_subject_ids": list(self.compatible_subject_ids),
            "compatible_object_ids": list(self.compatible_object_ids),
        }


@dataclass(frozen=True, slots=True)
class SuggestionResult:
    """Exercise data: verbs with their adjacency plus the word lists."""

    verbs: tuple[VerbSuggestion, ...]
    subjects: tuple[WordReference, ...]
    objects: tuple[WordReference, ...]

    def to_dict(self) -> dict[str, Any]:
        return {
            "verbs": [v.to_dict() for v in self.verbs],
            "subjects": [s.to_dict() for s in self.subjects],
            "objects": [o.to_dict() for o in self.objects],
        }


@dataclass(frozen=True, slots=True)
class SentenceCheck:
    """Answer to "is this sentence allowed?"."""

    valid: bool
    sentence: str
    message: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "valid": self.valid,
            "sentence": self.sentence,
            "message": self.message,
        }


@dataclass(frozen=True, slots=True)
class BatchOutcome:
    """Result of expanding a verb over subject and object sets."""

    combinations: tuple[CombinationModel, ...]
    skipped_subject_ids: tuple[int, ...] = ()
    skipped_object_ids: tuple[int, ...] = ()
    existing: tuple[tuple[int, int, int], ...] = ()

    @property
    def created(self) -> int:
        return len(self.combinations)

    def to_dict(self) -> dict[str, Any]:
        return {
            "created": self.created,
            "combinations": [c.to_dict() for c in self.combinations],
            "skipped_subject_ids": list(self.skipped_subject_ids),
            "skipped_object_ids": list(self.skipped_object_ids),
        }


# ---------------------------------------------------------------------------
# Bookkeeping
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class EditRecord:
    """A single edit-history entry."""

    id: int
    entity_type: str
    entity_id: str
    field_name: str | None
    operation: str
    old_value: str | None
    new_value: str | None
    timestamp: str


@dataclass(frozen=True, slots=True)
class IntegrityFinding:
    """A single integrity-check finding (error or warning)."""

    rule_id: str
    severity: str
    entity_type: str
    entity_id: str
    message: str
    details: dict[str, Any] | None = field(default=None)
