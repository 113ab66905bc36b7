# SPDX-License-Identifier: MIT
"""
Meta Documentation Objects

Base record shared by every documented object kind, plus the simple
``language`` kind. A record is built by applying tagged values one at a
time, finalized once, registered into a ``MetaDocs`` registry and then
checked against the sealed registry in a second pass.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Callable, ClassVar, Dict, FrozenSet, List, Optional, Set

from .errors import (
    DanglingReferenceError,
    DuplicateTagError,
    MissingRequiredFieldError,
    RecordFinalizedError,
)

if TYPE_CHECKING:
    from .registry import SealedMetaDocs
    from .validator import ValidationResult


# =============================================================================
# Constants
# =============================================================================

# Linkable text markup: <@link TYPE TARGET>
LINK_RE = re.compile(r"<@link\s+([^\s>]+)(?:\s+([^>]*))?>")

# Link types that always resolve
EXTERNAL_LINK_TYPES = {"url"}

# Base keys that may be given more than once
BASE_REPEATABLE_KEYS: FrozenSet[str] = frozenset({"warning"})


# =============================================================================
# Utility Functions
# =============================================================================


def split_lines(value: str) -> List[str]:
    """Split a tag value on newlines, dropping empty entries."""
    return [line for line in value.split("\n") if line]


def is_blank(value: Any) -> bool:
    """Return True for None and for strings that are empty or whitespace."""
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    return False


def parse_flag(value: str) -> bool:
    """Parse a literal ``true`` flag; anything else is False."""
    return value.strip().lower() == "true"


def find_links(text: Optional[str]) -> List[re.Match]:
    """Return every link markup match in a piece of linkable text."""
    if not text:
        return []
    return list(LINK_RE.finditer(text))


def resolve_link(docs: "SealedMetaDocs", link_type: str, target: str) -> bool:
    """
    Resolve one link against the sealed registry.

    A link whose type names a registry category is looked up in that
    category only. Any other first word is taken as part of an untyped
    name and looked up across every category.

    Args:
        docs: The sealed registry
        link_type: First word of the link markup
        target: Remainder of the link markup (may be empty)

    Returns:
        True if the link resolves
    """
    kind = link_type.lower()
    if kind in EXTERNAL_LINK_TYPES:
        return True

    target = target.strip().lower()
    if kind in docs.categories and target:
        if docs.lookup(kind, target) is not None:
            return True
        return any(obj.matches_name(target) for obj in docs.iter_category(kind))

    name = f"{kind} {target}".strip()
    if docs.lookup_any(name) is not None:
        return True
    return any(obj.matches_name(name) for obj in docs.iter_objects())


# =============================================================================
# Base Record
# =============================================================================

Handler = Callable[[Any, str], None]


def _set_group(obj: "MetaObject", value: str) -> None:
    obj.group = value


def _set_plugin(obj: "MetaObject", value: str) -> None:
    obj.plugin = value


def _set_deprecated(obj: "MetaObject", value: str) -> None:
    obj.deprecated = value


def _add_warning(obj: "MetaObject", value: str) -> None:
    obj.warnings.append(value)


BASE_HANDLERS: Dict[str, Handler] = {
    "group": _set_group,
    "plugin": _set_plugin,
    "deprecated": _set_deprecated,
    "warning": _add_warning,
}


@dataclass
class MetaObject:
    """Base for all documented objects."""

    category: ClassVar[str] = "object"
    KEY_HANDLERS: ClassVar[Dict[str, Handler]] = {}
    REPEATABLE_KEYS: ClassVar[FrozenSet[str]] = frozenset()

    group: str = ""
    plugin: str = ""
    deprecated: str = ""
    warnings: List[str] = field(default_factory=list)
    _seen_keys: Set[str] = field(default_factory=set, repr=False, compare=False)
    _finalized: bool = field(default=False, repr=False, compare=False)

    # -------------------------------------------------------------------------
    # Identity
    # -------------------------------------------------------------------------

    @property
    def name(self) -> str:
        """Canonical name."""
        return ""

    @property
    def clean_name(self) -> str:
        return self.name.lower()

    @property
    def multi_names(self) -> List[str]:
        """Normalized names this object is registered under."""
        return [self.clean_name]

    @property
    def finalized(self) -> bool:
        return self._finalized

    def matches_name(self, text: str) -> bool:
        """Whether free text names this object by something other than a registered name."""
        return False

    # -------------------------------------------------------------------------
    # Tag application
    # -------------------------------------------------------------------------

    @classmethod
    def recognized_keys(cls) -> List[str]:
        """All tag keys this kind of object accepts."""
        return sorted(set(cls.KEY_HANDLERS) | set(BASE_HANDLERS))

    def _apply_from(self, handlers: Dict[str, Handler], repeatable: FrozenSet[str],
                    key: str, value: str) -> bool:
        handler = handlers.get(key)
        if handler is None:
            return False
        if self._finalized:
            raise RecordFinalizedError(
                f"Cannot apply '{key}' after finalize", self.name or None
            )
        if key not in repeatable:
            if key in self._seen_keys:
                raise DuplicateTagError(key, self.name or None)
            self._seen_keys.add(key)
        handler(self, value)
        return True

    def apply_value(self, key: str, value: str) -> bool:
        """
        Apply one tagged value to the shared base fields.

        Args:
            key: The tag key
            value: The raw tag value

        Returns:
            True if the key was recognized, False otherwise

        Raises:
            DuplicateTagError: If a single-valued key was already applied
            RecordFinalizedError: If the object was already finalized
        """
        return self._apply_from(BASE_HANDLERS, BASE_REPEATABLE_KEYS, key, value)

    def finalize(self) -> None:
        """Compute derived state and stop accepting tags."""
        self._finalized = True

    # -------------------------------------------------------------------------
    # Second-pass checks
    # -------------------------------------------------------------------------

    def require(self, result: "ValidationResult", fields: Dict[str, Any]) -> None:
        """Record a MissingRequiredFieldError for each blank field."""
        for field_name, value in fields.items():
            if is_blank(value):
                result.add_error(MissingRequiredFieldError(field_name, self.name))

    def post_check_linkable_text(
        self, docs: "SealedMetaDocs", text: Optional[str], result: "ValidationResult"
    ) -> None:
        """Record a DanglingReferenceError for each link that does not resolve."""
        for match in find_links(text):
            if not resolve_link(docs, match.group(1), match.group(2) or ""):
                result.add_error(DanglingReferenceError(match.group(0), self.name))

    def post_check(self, docs: "SealedMetaDocs", result: "ValidationResult") -> None:
        """Validate this object against the complete registry."""
        self.post_check_linkable_text(docs, self.deprecated, result)
        for warning in self.warnings:
            self.post_check_linkable_text(docs, warning, result)

    # -------------------------------------------------------------------------
    # Search
    # -------------------------------------------------------------------------

    def searchable_text(self) -> str:
        """Free text of the shared fields, newline joined."""
        all_warnings = "\n".join(self.warnings)
        return f"{self.name}\n{self.group}\n{self.plugin}\n{self.deprecated}\n{all_warnings}"


# =============================================================================
# Language
# =============================================================================


def _set_language_name(obj: "MetaLanguage", value: str) -> None:
    obj.language_name = value.strip()


def _set_description(obj: "MetaLanguage", value: str) -> None:
    obj.description = value


@dataclass
class MetaLanguage(MetaObject):
    """A documented language concept."""

    category: ClassVar[str] = "language"
    KEY_HANDLERS: ClassVar[Dict[str, Handler]] = {
        "name": _set_language_name,
        "description": _set_description,
    }

    language_name: str = ""
    description: str = ""

    @property
    def name(self) -> str:
        return self.language_name

    def apply_value(self, key: str, value: str) -> bool:
        if self._apply_from(self.KEY_HANDLERS, self.REPEATABLE_KEYS, key, value):
            return True
        return super().apply_value(key, value)

    def finalize(self) -> None:
        if is_blank(self.language_name):
            raise MissingRequiredFieldError("name")
        super().finalize()

    def post_check(self, docs: "SealedMetaDocs", result: "ValidationResult") -> None:
        self.require(result, {"name": self.language_name, "description": self.description})
        self.post_check_linkable_text(docs, self.description, result)
        super().post_check(docs, result)

    def searchable_text(self) -> str:
        return f"{super().searchable_text()}\n{self.description}"
