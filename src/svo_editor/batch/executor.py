"""
Executor for batch change requests.

Applies changes to a database through :class:`~svo_editor.editor.CombinationEditor`.
"""
from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING, Any, Callable, Dict, List

from svo_editor.exceptions import (
    EntityNotFoundError,
    SvoEditorError,
    ValidationError as EditorValidationError,
)
from svo_editor.models import WordModel

from .schema import (
    BatchResult,
    Change,
    ChangeRequest,
    ChangeResult,
    OperationType,
    WordRef,
)

if TYPE_CHECKING:
    from svo_editor.editor import CombinationEditor

logger = logging.getLogger(__name__)


class _DryRunRollback(Exception):
    """Raised to discard everything a dry run applied."""


def resolve_word_ref(
    editor: CombinationEditor,
    ref: WordRef,
    role: str | None = None,
) -> WordModel:
    """Resolve a word id or a word text (looked up within ``role``).

    Raises:
        EntityNotFoundError: No word matches.
        ValidationError: The text matches several words.
    """
    if isinstance(ref, bool) or not isinstance(ref, (int, str)):
        raise EditorValidationError(f"Invalid word reference: {ref!r}")
    if isinstance(ref, int):
        return editor.get_word(ref)

    matches = editor.find_words(ref, role)
    if not matches:
        raise EntityNotFoundError((role or "word").lower(), ref, key="text")
    if len(matches) > 1:
        ids = ", ".join(str(w.id) for w in matches)
        raise EditorValidationError(
            f"Ambiguous word reference {ref!r}: matches ids {ids}"
        )
    return matches[0]


def execute_change_request(
    editor: CombinationEditor,
    request: ChangeRequest,
    dry_run: bool = False,
) -> BatchResult:
    """Execute a batch change request.

    Each change is applied in its own transaction; a failing change is
    recorded and the remaining changes still run. A dry run applies the
    changes inside one transaction and rolls it back at the end.

    Args:
        editor: The editor to apply changes through
        request: The change request to execute
        dry_run: If True, simulate execution without keeping any change

    Returns:
        BatchResult with details of each change
    """
    start_time = time.time()
    results: List[ChangeResult] = []

    def run_all() -> None:
        for i, change in enumerate(request.changes):
            results.append(_execute_change(change, i, editor))

    if dry_run:
        try:
            with editor.batch():
                run_all()
                raise _DryRunRollback()
        except _DryRunRollback:
            pass
    else:
        run_all()

    success_count = sum(1 for r in results if r.success)
    failure_count = sum(1 for r in results if not r.success)
    duration = time.time() - start_time

    logger.info(
        f"Batch {'dry run' if dry_run else 'applied'}: "
        f"{success_count}/{len(results)} change(s) succeeded"
    )

    return BatchResult(
        total_count=len(results),
        success_count=success_count,
        failure_count=failure_count,
        changes=results,
        duration_seconds=duration,
        dry_run=dry_run,
    )


def _execute_change(
    change: Change,
    index: int,
    editor: CombinationEditor,
) -> ChangeResult:
    """Execute a single change operation.

    Returns:
        ChangeResult with success/failure status
    """
    op = change.operation
    handler = _HANDLERS.get(op)

    if handler is None:
        return ChangeResult(
            index=index,
            operation=op,
            success=False,
            message=f"Unknown operation: {op}",
            error=f"Unknown operation: {op}",
        )

    try:
        return handler(change, index, editor)
    except SvoEditorError as e:
        logger.warning(f"Change #{index + 1} ({op}) failed: {e}")
        return ChangeResult(
            index=index,
            operation=op,
            success=False,
            message=f"Failed: {e}",
            error=str(e),
        )
    except Exception as e:
        logger.exception(f"Error executing change #{index + 1} ({op})")
        return ChangeResult(
            index=index,
            operation=op,
            success=False,
            message=f"Failed: {e}",
            error=str(e),
        )


# =============================================================================
# Operation handlers
# =============================================================================

def _exec_add_word(change: Change, index: int, editor: CombinationEditor) -> ChangeResult:
    p = change.params
    word = editor.create_word(p["text"], p["role"])
    return ChangeResult(
        index=index,
        operation=change.operation,
        success=True,
        message=f"Added {word.role} '{word.text}'",
        target=str(word.id),
        created_ids=[word.id],
    )


def _exec_update_word(change: Change, index: int, editor: CombinationEditor) -> ChangeResult:
    p = change.params
    word = resolve_word_ref(editor, p["word"], p.get("role"))
    updated = editor.update_word(
        word.id, text=p.get("new_text"), role=p.get("new_role")
    )
    return ChangeResult(
        index=index,
        operation=change.operation,
        success=True,
        message=f"Updated word {word.id} to {updated.role} '{updated.text}'",
        target=str(word.id),
    )


def _exec_delete_word(change: Change, index: int, editor: CombinationEditor) -> ChangeResult:
    p = change.params
    word = resolve_word_ref(editor, p["word"], p.get("role"))
    editor.delete_word(word.id)
    return ChangeResult(
        index=index,
        operation=change.operation,
        success=True,
        message=f"Deleted {word.role} '{word.text}'",
        target=str(word.id),
    )


def _exec_add_combination(change: Change, index: int, editor: CombinationEditor) -> ChangeResult:
    p = change.params
    subject = resolve_word_ref(editor, p["subject"], "SUBJECT")
    verb = resolve_word_ref(editor, p["verb"], "VERB")
    object_ = resolve_word_ref(editor, p["object"], "OBJECT")
    combo = editor.create_combination(subject.id, verb.id, object_.id)
    return ChangeResult(
        index=index,
        operation=change.operation,
        success=True,
        message=f"Added '{combo.sentence}'",
        target=str(combo.id),
        created_ids=[combo.id],
    )


def _exec_expand_verb(change: Change, index: int, editor: CombinationEditor) -> ChangeResult:
    p = change.params
    verb = resolve_word_ref(editor, p["verb"], "VERB")
    subject_ids = [resolve_word_ref(editor, r, "SUBJECT").id for r in p["subjects"]]
    object_ids = [resolve_word_ref(editor, r, "OBJECT").id for r in p["objects"]]
    outcome = editor.create_combinations_batch(verb.id, subject_ids, object_ids)
    return ChangeResult(
        index=index,
        operation=change.operation,
        success=True,
        message=(
            f"Created {outcome.created} combination(s) for '{verb.text}', "
            f"{len(outcome.existing)} already existed"
        ),
        target=str(verb.id),
        created_ids=[c.id for c in outcome.combinations],
    )


def _exec_delete_combination(change: Change, index: int, editor: CombinationEditor) -> ChangeResult:
    combination_id = change.params["id"]
    editor.delete_combination(combination_id)
    return ChangeResult(
        index=index,
        operation=change.operation,
        success=True,
        message=f"Deleted combination {combination_id}",
        target=str(combination_id),
    )


def _exec_delete_verb_combinations(
    change: Change, index: int, editor: CombinationEditor
) -> ChangeResult:
    verb = resolve_word_ref(editor, change.params["verb"], "VERB")
    count = editor.delete_combinations_by_verb(verb.id)
    return ChangeResult(
        index=index,
        operation=change.operation,
        success=True,
        message=f"Deleted {count} combination(s) of '{verb.text}'",
        target=str(verb.id),
    )


_HANDLERS: Dict[str, Callable[[Change, int, Any], ChangeResult]] = {
    OperationType.ADD_WORD.value: _exec_add_word,
    OperationType.UPDATE_WORD.value: _exec_update_word,
    OperationType.DELETE_WORD.value: _exec_delete_word,
    OperationType.ADD_COMBINATION.value: _exec_add_combination,
    OperationType.EXPAND_VERB.value: _exec_expand_verb,
    OperationType.DELETE_COMBINATION.value: _exec_delete_combination,
    OperationType.DELETE_VERB_COMBINATIONS.value: _exec_delete_verb_combinations,
}
