"""
Command-line interface for batch change requests.
"""
from __future__ import annotations

import argparse
import logging
import os
import sys
from pathlib import Path
from typing import Optional

from svo_editor.db import DEFAULT_DB_PATH
from svo_editor.editor import CombinationEditor
from svo_editor.exceptions import SvoEditorError
from svo_editor.models import Severity

from .executor import execute_change_request
from .parser import ParseError, load_change_request
from .schema import BatchResult, ValidationResult
from .validator import validate_change_request

DB_ENV_VAR = "SVO_EDITOR_DB"


def main(argv: Optional[list] = None) -> int:
    """Main entry point for svo-batch CLI."""
    parser = create_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if not hasattr(args, "func"):
        parser.print_help()
        return 1

    return args.func(args)


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="svo-batch",
        description="Batch change request tool for sentence combination databases",
    )
    parser.add_argument(
        "--version",
        action="version",
        version="%(prog)s (svo-editor)",
    )
    parser.add_argument(
        "--db",
        type=Path,
        default=Path(os.environ.get(DB_ENV_VAR, DEFAULT_DB_PATH)),
        help=f"Database file (default: ${DB_ENV_VAR} or {DEFAULT_DB_PATH})",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Log debug output",
    )

    subparsers = parser.add_subparsers(title="commands", dest="command")

    # validate command
    validate_parser = subparsers.add_parser(
        "validate",
        help="Validate a change request file",
    )
    validate_parser.add_argument(
        "file",
        type=Path,
        help="YAML file containing change request",
    )
    validate_parser.add_argument(
        "--no-check-refs",
        action="store_true",
        help="Skip referential validation (word existence checks)",
    )
    validate_parser.set_defaults(func=cmd_validate)

    # apply command
    apply_parser = subparsers.add_parser(
        "apply",
        help="Apply changes from a request file",
    )
    apply_parser.add_argument(
        "file",
        type=Path,
        help="YAML file containing change request",
    )
    apply_parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Simulate execution without keeping changes",
    )
    apply_parser.add_argument(
        "--yes", "-y",
        action="store_true",
        help="Skip confirmation prompt",
    )
    apply_parser.set_defaults(func=cmd_apply)

    # export command
    export_parser = subparsers.add_parser(
        "export",
        help="Export all words and combinations as a change request",
    )
    export_parser.add_argument(
        "--output", "-o",
        type=Path,
        help="Output YAML file (default: stdout)",
    )
    export_parser.set_defaults(func=cmd_export)

    # check command
    check_parser = subparsers.add_parser(
        "check",
        help="Run integrity checks on the database",
    )
    check_parser.set_defaults(func=cmd_check)

    # history command
    history_parser = subparsers.add_parser(
        "history",
        help="View recent edit history",
    )
    history_parser.add_argument(
        "--limit",
        type=int,
        default=20,
        help="Number of records to show (default: 20)",
    )
    history_parser.set_defaults(func=cmd_history)

    return parser


def _load(file: Path):
    try:
        return load_change_request(file)
    except ParseError as e:
        print(f"\n  [PARSE ERROR] {e}")
        if e.line:
            print(f"  Line: {e.line}")
        return None
    except FileNotFoundError as e:
        print(f"\n  [ERROR] {e}")
        return None


def cmd_validate(args: argparse.Namespace) -> int:
    """Handle validate command."""
    print(f"\nValidating {args.file}...")

    request = _load(args.file)
    if request is None:
        return 1

    if args.no_check_refs:
        validation = validate_change_request(request)
    else:
        with CombinationEditor(args.db) as editor:
            validation = validate_change_request(request, editor)

    print_validation_result(validation, len(request.changes))
    return 0 if validation.is_valid else 1


def cmd_apply(args: argparse.Namespace) -> int:
    """Handle apply command."""
    request = _load(args.file)
    if request is None:
        return 1

    with CombinationEditor(args.db) as editor:
        validation = validate_change_request(request, editor)
        if not validation.is_valid:
            print_validation_result(validation, len(request.changes))
            print("\nAborting: fix validation errors first.")
            return 1

        if not args.dry_run and not args.yes:
            answer = input(
                f"Apply {len(request.changes)} change(s) to {args.db}? [y/N] "
            )
            if answer.strip().lower() not in ("y", "yes"):
                print("Cancelled.")
                return 1

        result = execute_change_request(editor, request, dry_run=args.dry_run)

    print_batch_result(result)
    return 0 if result.failure_count == 0 else 1


def cmd_export(args: argparse.Namespace) -> int:
    """Handle export command."""
    import yaml

    with CombinationEditor(args.db) as editor:
        try:
            if args.output:
                editor.export_yaml(args.output)
                print(f"Exported to {args.output}")
            else:
                yaml.safe_dump(
                    editor.export_dict(), sys.stdout,
                    allow_unicode=True, sort_keys=False,
                )
        except SvoEditorError as e:
            print(f"\n  [ERROR] {e}")
            return 1
    return 0


def cmd_check(args: argparse.Namespace) -> int:
    """Handle check command."""
    with CombinationEditor(args.db) as editor:
        findings = editor.check_integrity()

    if not findings:
        print("\nNo integrity problems found.")
        return 0

    errors = 0
    for f in findings:
        if f.severity == Severity.ERROR:
            errors += 1
        print(f"  [{f.severity}] {f.rule_id} {f.entity_type} {f.entity_id}: {f.message}")
    print(f"\n{len(findings)} finding(s), {errors} error(s)")
    return 1 if errors else 0


def cmd_history(args: argparse.Namespace) -> int:
    """Handle history command."""
    with CombinationEditor(args.db) as editor:
        records = editor.get_history()

    records = records[-args.limit:] if args.limit > 0 else records
    if not records:
        print("\nNo history recorded.")
        return 0

    for r in records:
        detail = r.new_value or r.old_value or ""
        field = f".{r.field_name}" if r.field_name else ""
        print(f"  {r.timestamp}  {r.operation:<6} {r.entity_type}#{r.entity_id}{field}  {detail}")
    return 0


def print_validation_result(validation: ValidationResult, total: int) -> None:
    """Print a validation summary."""
    if validation.is_valid:
        print(f"\n  OK: {total} change(s) valid")
    for e in validation.errors:
        print(f"  [ERROR] #{e.index + 1} {e.operation} {e.field}: {e.message}")
    for w in validation.warnings:
        print(f"  [WARNING] #{w.index + 1} {w.operation}: {w.message}")
    if not validation.is_valid:
        print(
            f"\n  {validation.error_count} error(s), "
            f"{validation.warning_count} warning(s)"
        )


def print_batch_result(result: BatchResult) -> None:
    """Print an execution summary."""
    label = "DRY RUN" if result.dry_run else "APPLIED"
    print(f"\n{label}: {result.success_count}/{result.total_count} change(s) succeeded")
    for c in result.changes:
        status = "OK" if c.success else "FAILED"
        print(f"  [{status}] #{c.index + 1} {c.operation}: {c.message}")
    print(f"\nCompleted in {result.duration_seconds:.2f}s")


if __name__ == "__main__":
    sys.exit(main())
