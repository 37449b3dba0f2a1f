"""Export pipeline for svo-editor.

The export is a batch change request (see :mod:`svo_editor.batch`) that
recreates every word and combination when applied to an empty database.
Combinations refer to words by text within the slot's role, so texts must be
unique per role and every slot must hold a word of its own role.
"""

from __future__ import annotations

import logging
import sqlite3
from collections import defaultdict
from pathlib import Path
from typing import Any

import yaml

from svo_editor.exceptions import ExportError
from svo_editor.models import WordRole
from svo_editor.stores import SQLiteCombinationStore, SQLiteWordStore

logger = logging.getLogger(__name__)


def export_to_dict(conn: sqlite3.Connection) -> dict[str, Any]:
    """Build a change-request mapping describing the whole graph."""
    words = SQLiteWordStore(conn).find_words()
    combinations = SQLiteCombinationStore(conn).find_all()

    seen: dict[tuple[str, str], list[int]] = defaultdict(list)
    for word in words:
        seen[(word.role, word.text)].append(word.id)
    clashes = {k: v for k, v in seen.items() if len(v) > 1}
    if clashes:
        detail = "; ".join(
            f"{role} {text!r} (ids {', '.join(map(str, ids))})"
            for (role, text), ids in sorted(clashes.items())
        )
        raise ExportError(f"Ambiguous word texts: {detail}")

    # replay resolves each slot's text within the slot's role
    mismatched = [
        f"{c.id} ({slot.value.lower()} {word.text!r} is {word.role})"
        for c in combinations
        for slot, word in zip(WordRole, (c.subject, c.verb, c.object))
        if word.role != slot.value
    ]
    if mismatched:
        raise ExportError(
            f"Combinations with words in the wrong role: {', '.join(mismatched)}"
        )

    changes: list[dict[str, Any]] = [
        {"operation": "add_word", "text": w.text, "role": w.role}
        for w in words
    ]
    changes.extend(
        {
            "operation": "add_combination",
            "subject": c.subject.text,
            "verb": c.verb.text,
            "object": c.object.text,
        }
        for c in combinations
    )
    logger.info(
        f"Exported {len(words)} word(s) and {len(combinations)} combination(s)"
    )
    return {"session": {"name": "svo-editor export"}, "changes": changes}


def export_to_yaml(conn: sqlite3.Connection, destination: str | Path) -> None:
    """Write the change-request export to a YAML file."""
    data = export_to_dict(conn)
    with open(destination, "w", encoding="utf-8") as f:
        yaml.safe_dump(data, f, allow_unicode=True, sort_keys=False)
