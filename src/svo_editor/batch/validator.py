"""
Validation for batch change requests.

Provides both schema validation (required fields, types) and
referential validation (referenced words exist in the database).
"""
from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, List, Optional, Set, Tuple

from svo_editor.exceptions import SvoEditorError

from .executor import resolve_word_ref
from .schema import (
    Change,
    ChangeRequest,
    OperationType,
    OPTIONAL_FIELDS,
    REFERENCE_ROLES,
    REQUIRED_FIELDS,
    VALID_ROLES,
    ValidationError,
    ValidationResult,
    ValidationWarning,
)

if TYPE_CHECKING:
    from svo_editor.editor import CombinationEditor

logger = logging.getLogger(__name__)


def validate_change_request(
    request: ChangeRequest,
    editor: Optional[CombinationEditor] = None,
) -> ValidationResult:
    """Validate a change request.

    Args:
        request: The change request to validate
        editor: If given, verify that referenced words exist in its database.
            Words added by earlier ``add_word`` changes count as existing.

    Returns:
        ValidationResult with errors and warnings
    """
    errors: List[ValidationError] = []
    warnings: List[ValidationWarning] = []
    pending: Set[Tuple[str, str]] = set()

    for i, change in enumerate(request.changes):
        change_errors, change_warnings = _validate_change(change, i, editor, pending)
        errors.extend(change_errors)
        warnings.extend(change_warnings)

        if change.operation == OperationType.ADD_WORD.value and not change_errors:
            pending.add(
                (str(change.params["role"]).upper(), str(change.params["text"]).strip())
            )

    return ValidationResult(
        is_valid=len(errors) == 0,
        errors=errors,
        warnings=warnings,
    )


def _validate_change(
    change: Change,
    index: int,
    editor: Optional[CombinationEditor],
    pending: Set[Tuple[str, str]],
) -> Tuple[List[ValidationError], List[ValidationWarning]]:
    """Validate a single change operation.

    Returns:
        Tuple of (errors, warnings)
    """
    errors: List[ValidationError] = []
    warnings: List[ValidationWarning] = []
    op = change.operation
    p = change.params

    if op not in REQUIRED_FIELDS:
        valid = ", ".join(o.value for o in OperationType)
        errors.append(ValidationError(
            index=index,
            operation=op,
            field="operation",
            message=f"Unknown operation '{op}'. Valid operations: {valid}",
        ))
        return errors, warnings

    for field_name in REQUIRED_FIELDS[op]:
        if p.get(field_name) in (None, "", []):
            errors.append(ValidationError(
                index=index,
                operation=op,
                field=field_name,
                message=f"Missing required field: '{field_name}'",
            ))

    known = set(REQUIRED_FIELDS[op]) | set(OPTIONAL_FIELDS[op])
    for field_name in p:
        if field_name not in known:
            warnings.append(ValidationWarning(
                index=index,
                operation=op,
                message=f"Unknown field '{field_name}' will be ignored",
            ))

    if errors:
        return errors, warnings

    for field_name in ("role", "new_role"):
        value = p.get(field_name)
        if value is not None and str(value).upper() not in VALID_ROLES:
            errors.append(ValidationError(
                index=index,
                operation=op,
                field=field_name,
                message=f"Invalid role '{value}'. Valid roles: SUBJECT, VERB, OBJECT",
            ))

    if op == OperationType.ADD_WORD.value and not str(p["text"]).strip():
        errors.append(ValidationError(
            index=index, operation=op, field="text",
            message="Text cannot be empty",
        ))

    if op == OperationType.UPDATE_WORD.value and not (
        p.get("new_text") or p.get("new_role")
    ):
        warnings.append(ValidationWarning(
            index=index, operation=op,
            message="Neither 'new_text' nor 'new_role' given; nothing to update",
        ))

    if op == OperationType.DELETE_COMBINATION.value and not _is_id(p["id"]):
        errors.append(ValidationError(
            index=index, operation=op, field="id",
            message=f"Combination id must be an integer, got {p['id']!r}",
        ))

    for field_name in ("subjects", "objects"):
        if field_name in p and not isinstance(p[field_name], list):
            errors.append(ValidationError(
                index=index, operation=op, field=field_name,
                message=f"Field '{field_name}' must be a list",
            ))

    if errors:
        return errors, warnings

    for field_name, role in _references(change):
        refs = p[field_name] if isinstance(p[field_name], list) else [p[field_name]]
        for ref in refs:
            error = _check_reference(ref, role, editor, pending)
            if error:
                errors.append(ValidationError(
                    index=index, operation=op, field=field_name, message=error,
                ))

    return errors, warnings


def _is_id(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _references(change: Change) -> List[Tuple[str, Optional[str]]]:
    """Word-reference fields of a change with the role they resolve in."""
    p = change.params
    if change.operation in (
        OperationType.UPDATE_WORD.value,
        OperationType.DELETE_WORD.value,
    ):
        role = p.get("role")
        return [("word", str(role).upper() if role else None)]
    return [(f, REFERENCE_ROLES[f]) for f in p if f in REFERENCE_ROLES]


def _check_reference(
    ref: Any,
    role: Optional[str],
    editor: Optional[CombinationEditor],
    pending: Set[Tuple[str, str]],
) -> Optional[str]:
    """Check one word reference.

    Returns:
        Error message if invalid, None if valid
    """
    if isinstance(ref, bool) or not isinstance(ref, (int, str)):
        return f"Invalid word reference {ref!r}: expected an id or a text"
    if isinstance(ref, str) and not ref.strip():
        return "Word reference cannot be blank"
    if editor is None:
        return None
    if isinstance(ref, str) and any(
        text == ref.strip() and (role is None or r == role) for r, text in pending
    ):
        return None
    try:
        resolve_word_ref(editor, ref, role)
    except SvoEditorError as e:
        logger.debug(f"Reference {ref!r} rejected: {e}")
        return str(e)
    return None
