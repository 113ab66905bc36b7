# SPDX-License-Identifier: MIT
"""
Meta Documentation Fragment Loader

Turns already-segmented documentation fragments into records and
registers them. Fragments arrive as JSON:

    [
        {"type": "event", "tags": [["events", "player breaks block"], ...]},
        {"type": "language", "tags": [["name", "Flag System"], ...]}
    ]

Tag-level problems are collected against the record they belong to;
sibling tags and sibling fragments are still processed.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple, Type

from .errors import MetaDocsError, ParseError, UnrecognizedKeyError
from .event import MetaEvent
from .objects import MetaLanguage, MetaObject
from .registry import MetaDocs, SealedMetaDocs
from .validator import ValidationResult, validate_docs

logger = logging.getLogger(__name__)

# Fragment type -> record kind
OBJECT_TYPES: Dict[str, Type[MetaObject]] = {
    "event": MetaEvent,
    "language": MetaLanguage,
}


@dataclass
class Fragment:
    """One tagged block describing a single documented object."""

    kind: str
    tags: List[Tuple[str, str]] = field(default_factory=list)
    index: int = 0

    @property
    def label(self) -> str:
        return f"fragment #{self.index}"


# =============================================================================
# Fragment Parsing
# =============================================================================


def parse_fragment(data: Any, index: int = 0) -> Fragment:
    """
    Parse one fragment object.

    Args:
        data: Decoded JSON object with "type" and "tags"
        index: Position of the fragment in its file

    Returns:
        Fragment with its ordered (key, value) pairs

    Raises:
        ParseError: If the fragment structure is invalid
    """
    if not isinstance(data, dict):
        raise ParseError(f"Fragment #{index} must be an object")

    kind = data.get("type")
    if not isinstance(kind, str) or not kind:
        raise ParseError(f"Fragment #{index} missing 'type'")

    raw_tags = data.get("tags", [])
    if not isinstance(raw_tags, list):
        raise ParseError(f"Fragment #{index} 'tags' must be a list")

    tags: List[Tuple[str, str]] = []
    for pair in raw_tags:
        if (
            not isinstance(pair, (list, tuple))
            or len(pair) != 2
            or not all(isinstance(part, str) for part in pair)
        ):
            raise ParseError(f"Fragment #{index} has an invalid tag: {pair!r}")
        tags.append((pair[0], pair[1]))

    return Fragment(kind=kind, tags=tags, index=index)


def parse_fragments(
    content: str, result: Optional[ValidationResult] = None
) -> List[Fragment]:
    """
    Parse a JSON fragment list.

    Args:
        content: JSON fragment list
        result: Collector for malformed fragments. When given, each bad
            fragment is reported as ``fragment #N`` and skipped; otherwise
            the first one raises.

    Returns:
        The well-formed fragments, in file order

    Raises:
        ParseError: If the content is not valid JSON or not a list, or a
            fragment is malformed and no collector was given
    """
    try:
        data = json.loads(content)
    except json.JSONDecodeError as e:
        raise ParseError(f"Invalid JSON: {e}") from e

    if not isinstance(data, list):
        raise ParseError("Fragment file must contain a list")

    fragments: List[Fragment] = []
    for index, item in enumerate(data):
        try:
            fragments.append(parse_fragment(item, index))
        except ParseError as e:
            if result is None:
                raise
            result.add_error(e, f"fragment #{index}")
    return fragments


# =============================================================================
# Record Building
# =============================================================================


def build_object(fragment: Fragment, result: ValidationResult) -> Optional[MetaObject]:
    """
    Build and finalize a record from one fragment.

    Every tag is applied in order. Tag errors are added to ``result``
    under the record's name once it is known.

    Args:
        fragment: The fragment to build from
        result: Collector for tag and finalize errors

    Returns:
        The finalized record, or None if it cannot be finalized
    """
    object_type = OBJECT_TYPES.get(fragment.kind)
    if object_type is None:
        result.add_error(UnrecognizedKeyError(fragment.kind), fragment.label)
        return None

    obj = object_type()
    errors: List[MetaDocsError] = []
    for key, value in fragment.tags:
        try:
            if not obj.apply_value(key, value):
                errors.append(UnrecognizedKeyError(key))
        except ParseError as e:
            errors.append(e)

    record_name = obj.name or fragment.label
    for error in errors:
        result.add_error(error, record_name)

    try:
        obj.finalize()
    except MetaDocsError as e:
        result.add_error(e, record_name)
        return None

    return obj


def load_fragments(
    fragments: List[Fragment],
    docs: Optional[MetaDocs] = None,
    result: Optional[ValidationResult] = None,
) -> Tuple[MetaDocs, ValidationResult]:
    """
    Build every fragment and register it.

    Args:
        fragments: Fragments to load
        docs: Registry to register into (a new one by default)
        result: Collector for errors (a new one by default)

    Returns:
        The (still open) registry and the result so far
    """
    if docs is None:
        docs = MetaDocs()
    if result is None:
        result = ValidationResult()

    for fragment in fragments:
        obj = build_object(fragment, result)
        if obj is None:
            continue
        try:
            docs.register(obj)
        except MetaDocsError as e:
            result.add_error(e, obj.name)

    logger.debug("Loaded %d fragments into %d objects", len(fragments), len(docs))
    return docs, result


def validate_fragments(content: str) -> Tuple[Optional[SealedMetaDocs], ValidationResult]:
    """
    Run the full pipeline over a JSON fragment list.

    Loads and registers every fragment, seals the registry, then runs the
    second-pass check of every registered object.

    Args:
        content: JSON fragment list

    Returns:
        The sealed registry (None if the file is not a JSON list) and the
        result with every violation found, malformed fragments included
    """
    result = ValidationResult()

    try:
        fragments = parse_fragments(content, result)
    except ParseError as e:
        result.add_error(e, "document")
        return None, result

    docs, result = load_fragments(fragments, result=result)
    sealed = docs.seal()
    validate_docs(sealed, result)
    return sealed, result
