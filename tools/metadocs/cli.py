# SPDX-License-Identifier: MIT
"""
Meta Documentation CLI

Command-line interface for loading documentation fragments and reporting
every parse, registration and cross-reference problem in one run.

Usage:
    python -m tools.metadocs.cli validate <file>
    python -m tools.metadocs.cli parse <file>
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from typing import Any, Dict, List, Optional

from .errors import ParseError
from .event import MetaEvent
from .objects import MetaObject
from .parser import load_fragments, parse_fragments, validate_fragments
from .validator import ValidationResult


def read_file(path: str) -> str:
    """
    Read a file and return its contents.

    Raises:
        FileNotFoundError: If file does not exist
        IOError: If file cannot be read
    """
    with open(path, "r", encoding="utf-8") as f:
        return f.read()


def configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


def format_validation_result(result: ValidationResult) -> str:
    """
    Format a validation result as a report grouped by record.

    Args:
        result: The validation result to format

    Returns:
        Formatted string for display
    """
    lines: List[str] = []

    lines.append("VALID" if result.valid else "INVALID")
    lines.append(f"  Records checked: {result.records_checked}")
    lines.append(f"  Violations: {len(result.violations)}")

    for record, violations in result.by_record().items():
        lines.append(f"  {record}")
        for v in violations:
            lines.append(f"    - [{v.kind}] {v.message}")

    return "\n".join(lines)


def describe_object(obj: MetaObject) -> Dict[str, Any]:
    """Build the JSON description of one record."""
    output: Dict[str, Any] = {
        "category": obj.category,
        "name": obj.name,
        "names": obj.multi_names,
        "group": obj.group,
        "plugin": obj.plugin,
        "searchable_text": obj.searchable_text(),
    }
    if isinstance(obj, MetaEvent):
        output.update({
            "events": obj.events,
            "switches": obj.switches,
            "switch_names": sorted(obj.switch_names),
            "regex": obj.regex_matcher.pattern if obj.regex_matcher else None,
            "player": obj.player,
            "npc": obj.npc,
            "cancellable": obj.cancellable,
            "has_location": obj.has_location,
        })
    return output


def cmd_validate(args: argparse.Namespace) -> int:
    """
    Validate a fragment file.

    Returns:
        Exit code (0 for valid, 1 for invalid)
    """
    try:
        content = read_file(args.file)
    except FileNotFoundError:
        print(f"Error: File not found: {args.file}", file=sys.stderr)
        return 1
    except IOError as e:
        print(f"Error: Cannot read file: {e}", file=sys.stderr)
        return 1

    _, result = validate_fragments(content)

    if args.json:
        print(json.dumps(result.to_dict(), indent=2))
    else:
        print(format_validation_result(result))

    return 0 if result.valid else 1


def cmd_parse(args: argparse.Namespace) -> int:
    """
    Load a fragment file and print every registered record.

    Returns:
        Exit code (0 for success, 1 for failure)
    """
    try:
        content = read_file(args.file)
    except FileNotFoundError:
        print(f"Error: File not found: {args.file}", file=sys.stderr)
        return 1
    except IOError as e:
        print(f"Error: Cannot read file: {e}", file=sys.stderr)
        return 1

    result = ValidationResult()
    try:
        fragments = parse_fragments(content, result)
    except ParseError as e:
        print(f"Parse error: {e}", file=sys.stderr)
        return 1

    docs, result = load_fragments(fragments, result=result)

    output = {
        "objects": [describe_object(obj) for obj in docs.iter_objects()],
        "violations": [v.to_dict() for v in result.violations],
    }
    print(json.dumps(output, indent=2))
    return 0


def build_parser() -> argparse.ArgumentParser:
    """
    Build the argument parser for the CLI.

    Returns:
        Configured argument parser
    """
    parser = argparse.ArgumentParser(
        prog="metadocs",
        description="Documentation fragment parser and cross-reference validator",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Log registration and validation progress",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    # validate command
    validate_parser = subparsers.add_parser(
        "validate",
        help="Load, register and cross-check a fragment file",
    )
    validate_parser.add_argument(
        "file",
        help="Path to the JSON fragment file",
    )
    validate_parser.add_argument(
        "--json",
        action="store_true",
        help="Output results as JSON",
    )
    validate_parser.set_defaults(func=cmd_validate)

    # parse command
    parse_parser = subparsers.add_parser(
        "parse",
        help="Load a fragment file and display the records",
    )
    parse_parser.add_argument(
        "file",
        help="Path to the JSON fragment file",
    )
    parse_parser.set_defaults(func=cmd_parse)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main entry point for the CLI.

    Args:
        argv: Command-line arguments (defaults to sys.argv)

    Returns:
        Exit code
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.verbose)

    if hasattr(args, "func"):
        return args.func(args)

    parser.print_help()
    return 1


if __name__ == "__main__":
    sys.exit(main())
