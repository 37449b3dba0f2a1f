"""Edit history recording and querying for svo-editor.

Every mutation made through :class:`~svo_editor.editor.CombinationEditor`
appends rows to ``edit_history``. Values are stored as JSON text so that a
word snapshot and a single field value share one column type.
"""

from __future__ import annotations

import json
import sqlite3
from typing import Any

from svo_editor.models import EditOperation, EditRecord


def _encode(value: Any) -> str:
    return json.dumps(value, ensure_ascii=False, sort_keys=True)


def _record(
    conn: sqlite3.Connection,
    operation: EditOperation,
    entity_type: str,
    entity_id: int | str,
    *,
    field_name: str | None = None,
    old: str | None = None,
    new: str | None = None,
) -> None:
    conn.execute(
        "INSERT INTO edit_history "
        "(entity_type, entity_id, field_name, operation, old_value, new_value) "
        "VALUES (?, ?, ?, ?, ?, ?)",
        (entity_type, str(entity_id), field_name, operation.value, old, new),
    )


def record_create(
    conn: sqlite3.Connection,
    entity_type: str,
    entity_id: int | str,
    snapshot: dict[str, Any] | None = None,
) -> None:
    new = _encode(snapshot) if snapshot else None
    _record(conn, EditOperation.CREATE, entity_type, entity_id, new=new)


def record_update(
    conn: sqlite3.Connection,
    entity_type: str,
    entity_id: int | str,
    field_name: str,
    old_value: str | int | None,
    new_value: str | int | None,
) -> None:
    """Record one changed field; a cleared value is stored as JSON null."""
    _record(
        conn, EditOperation.UPDATE, entity_type, entity_id,
        field_name=field_name,
        old=_encode(old_value), new=_encode(new_value),
    )


def record_delete(
    conn: sqlite3.Connection,
    entity_type: str,
    entity_id: int | str,
    snapshot: dict[str, Any] | None = None,
) -> None:
    old = _encode(snapshot) if snapshot else None
    _record(conn, EditOperation.DELETE, entity_type, entity_id, old=old)


def query_history(
    conn: sqlite3.Connection,
    *,
    entity_type: str | None = None,
    entity_id: int | str | None = None,
    since: str | None = None,
    operation: str | EditOperation | None = None,
    limit: int | None = None,
) -> list[EditRecord]:
    """Return history rows oldest first, filtered by any given criteria."""
    filters = {
        "entity_type = ?": entity_type,
        "entity_id = ?": None if entity_id is None else str(entity_id),
        "timestamp > ?": since,
        "operation = ?": EditOperation(operation).value if operation else None,
    }
    active = {clause: value for clause, value in filters.items() if value is not None}

    sql = "SELECT rowid, * FROM edit_history"
    if active:
        sql += " WHERE " + " AND ".join(active)
    sql += " ORDER BY timestamp, rowid"
    params: list[Any] = list(active.values())
    if limit is not None:
        sql += " LIMIT ?"
        params.append(limit)

    return [
        EditRecord(
            id=row["rowid"],
            entity_type=row["entity_type"],
            entity_id=row["entity_id"],
            field_name=row["field_name"],
            operation=row["operation"],
            old_value=row["old_value"],
            new_value=row["new_value"],
            timestamp=row["timestamp"],
        )
        for row in conn.execute(sql, params)
    ]
