"""
YAML parser for batch change requests.

A request is a mapping with an optional ``session`` block and a non-empty
``changes`` list; every change is a mapping whose ``operation`` key names
the operation and whose other keys become its parameters.
"""
from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml

from .schema import Change, ChangeRequest


class ParseError(Exception):
    """Error parsing a change request file."""

    def __init__(self, message: str, line: Optional[int] = None):
        self.line = line
        super().__init__(message)


def load_change_request(
    source: Union[str, Path, Dict[str, Any]],
) -> ChangeRequest:
    """Load a change request from a YAML file, YAML string or dictionary.

    A string is read as a path when it is a single line that contains a
    path separator or ends in ``.yaml``/``.yml``; otherwise it is YAML.

    Raises:
        ParseError: If the content cannot be parsed or has the wrong shape
        FileNotFoundError: If the file does not exist
    """
    if isinstance(source, dict):
        return _build_request(source, None)

    if isinstance(source, Path) or _looks_like_path(source):
        path = Path(source)
        return _build_request(load_yaml_file(path), path)

    return _build_request(_read_yaml(source, "YAML content"), None)


def load_yaml_file(path: Union[str, Path]) -> Dict[str, Any]:
    """Load the raw YAML mapping from a file.

    Raises:
        ParseError: If the file cannot be parsed or is not a mapping
        FileNotFoundError: If the file does not exist
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"File not found: {path}")
    return _read_yaml(path.read_text(encoding="utf-8"), "YAML file")


def _looks_like_path(s: str) -> bool:
    if "\n" in s:
        return False
    return "/" in s or "\\" in s or s.endswith((".yaml", ".yml"))


def _read_yaml(text: str, what: str) -> Dict[str, Any]:
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as e:
        mark = getattr(e, "problem_mark", None)
        raise ParseError(
            f"Invalid YAML: {e}", line=mark.line + 1 if mark else None
        ) from e
    if data is None:
        raise ParseError(f"Empty {what}")
    if not isinstance(data, dict):
        raise ParseError("YAML root must be a mapping (dictionary)")
    return data


def _build_request(data: Dict[str, Any], source: Optional[Path]) -> ChangeRequest:
    session = data.get("session") or {}
    if not isinstance(session, dict):
        raise ParseError("Field 'session' must be a mapping")

    if "changes" not in data or data["changes"] is None:
        raise ParseError("Missing required field: 'changes'")
    entries = data["changes"]
    if not isinstance(entries, list):
        raise ParseError("Field 'changes' must be a list")
    if not entries:
        raise ParseError("Field 'changes' cannot be empty")

    return ChangeRequest(
        changes=[_build_change(n, entry) for n, entry in enumerate(entries, 1)],
        session_name=session.get("name"),
        session_description=session.get("description"),
        source_file=source,
    )


def _build_change(number: int, entry: Any) -> Change:
    if not isinstance(entry, dict):
        raise ParseError(f"Change #{number} must be a mapping (dictionary)")

    params = dict(entry)
    operation = params.pop("operation", None)
    if not operation:
        raise ParseError(f"Change #{number}: Missing required field 'operation'")
    if not isinstance(operation, str):
        raise ParseError(f"Change #{number}: Field 'operation' must be a string")
    return Change(operation=operation, params=params)
