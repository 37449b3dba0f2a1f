"""
Data classes and constants for the batch change request system.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional, Union


# =============================================================================
# Operation Types
# =============================================================================

class OperationType(str, Enum):
    """Supported batch operations."""
    ADD_WORD = "add_word"
    UPDATE_WORD = "update_word"
    DELETE_WORD = "delete_word"
    ADD_COMBINATION = "add_combination"
    EXPAND_VERB = "expand_verb"
    DELETE_COMBINATION = "delete_combination"
    DELETE_VERB_COMBINATIONS = "delete_verb_combinations"


VALID_ROLES = {"SUBJECT", "VERB", "OBJECT"}

# A word reference is either a word id or the word's text.
WordRef = Union[int, str]


# =============================================================================
# Field Requirements
# =============================================================================

REQUIRED_FIELDS: Dict[str, List[str]] = {
    OperationType.ADD_WORD.value: ["text", "role"],
    OperationType.UPDATE_WORD.value: ["word"],
    OperationType.DELETE_WORD.value: ["word"],
    OperationType.ADD_COMBINATION.value: ["subject", "verb", "object"],
    OperationType.EXPAND_VERB.value: ["verb", "subjects", "objects"],
    OperationType.DELETE_COMBINATION.value: ["id"],
    OperationType.DELETE_VERB_COMBINATIONS.value: ["verb"],
}

OPTIONAL_FIELDS: Dict[str, List[str]] = {
    OperationType.ADD_WORD.value: [],
    OperationType.UPDATE_WORD.value: ["role", "new_text", "new_role"],
    OperationType.DELETE_WORD.value: ["role"],
    OperationType.ADD_COMBINATION.value: [],
    OperationType.EXPAND_VERB.value: [],
    OperationType.DELETE_COMBINATION.value: [],
    OperationType.DELETE_VERB_COMBINATIONS.value: [],
}

# Role each word-reference field resolves in.
REFERENCE_ROLES: Dict[str, str] = {
    "subject": "SUBJECT",
    "subjects": "SUBJECT",
    "verb": "VERB",
    "object": "OBJECT",
    "objects": "OBJECT",
}


# =============================================================================
# Data Classes
# =============================================================================

@dataclass
class Change:
    """Single change operation."""
    operation: str
    params: Dict[str, Any]
    line_number: Optional[int] = None

    @property
    def verb(self) -> Optional[WordRef]:
        """Get the verb reference if present in params."""
        return self.params.get("verb")


@dataclass
class ChangeRequest:
    """Parsed change request from YAML."""
    changes: List[Change]
    session_name: Optional[str] = None
    session_description: Optional[str] = None
    source_file: Optional[Path] = None


@dataclass
class ValidationError:
    """Validation error for a specific change."""
    index: int
    operation: str
    field: str
    message: str
    line_number: Optional[int] = None


@dataclass
class ValidationWarning:
    """Validation warning for a specific change."""
    index: int
    operation: str
    message: str
    line_number: Optional[int] = None


@dataclass
class ValidationResult:
    """Result of validating a change request."""
    is_valid: bool
    errors: List[ValidationError] = field(default_factory=list)
    warnings: List[ValidationWarning] = field(default_factory=list)

    @property
    def error_count(self) -> int:
        return len(self.errors)

    @property
    def warning_count(self) -> int:
        return len(self.warnings)


@dataclass
class ChangeResult:
    """Result of executing a single change."""
    index: int
    operation: str
    success: bool
    message: str
    target: Optional[str] = None
    created_ids: List[int] = field(default_factory=list)
    error: Optional[str] = None


@dataclass
class BatchResult:
    """Result of executing a batch change request."""
    total_count: int
    success_count: int
    failure_count: int
    changes: List[ChangeResult]
    duration_seconds: float
    dry_run: bool = False

    @property
    def skipped_count(self) -> int:
        return self.total_count - self.success_count - self.failure_count
