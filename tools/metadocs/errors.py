# SPDX-License-Identifier: MIT
"""
Meta Documentation Errors

Error kinds raised while parsing, registering and validating documented
objects. Every error carries the name of the record it belongs to so that
a batch run can attribute it in the final report.
"""

from __future__ import annotations

from typing import Optional


class MetaDocsError(Exception):
    """Base class for all meta documentation errors."""

    kind = "error"

    def __init__(self, message: str, record_name: Optional[str] = None) -> None:
        self.record_name = record_name
        self.message = message
        super().__init__(f"{record_name}: {message}" if record_name else message)


# =============================================================================
# Parse-time Errors
# =============================================================================


class ParseError(MetaDocsError):
    """Raised when a tag value cannot be applied to a record."""

    kind = "parse"


class InvalidPatternError(ParseError):
    """Raised when a regex tag does not compile."""

    kind = "invalid_pattern"

    def __init__(
        self, pattern: str, reason: str, record_name: Optional[str] = None
    ) -> None:
        self.pattern = pattern
        self.reason = reason
        super().__init__(f"Invalid regex '{pattern}': {reason}", record_name)


class DuplicateTagError(ParseError):
    """Raised when a single-valued tag appears twice in one fragment."""

    kind = "duplicate_tag"

    def __init__(self, key: str, record_name: Optional[str] = None) -> None:
        self.key = key
        super().__init__(f"Tag '{key}' given more than once", record_name)


class UnrecognizedKeyError(ParseError):
    """Raised when no record kind recognizes a tag key."""

    kind = "unrecognized_key"

    def __init__(self, key: str, record_name: Optional[str] = None) -> None:
        self.key = key
        super().__init__(f"Unrecognized key '{key}'", record_name)


class RecordFinalizedError(ParseError):
    """Raised when a tag is applied to a record that was already finalized."""

    kind = "finalized"


# =============================================================================
# Registry Errors
# =============================================================================


class DuplicateNameError(MetaDocsError):
    """Raised when a name is already registered to a different record."""

    kind = "duplicate_name"

    def __init__(
        self, category: str, name: str, record_name: Optional[str] = None
    ) -> None:
        self.category = category
        self.name = name
        super().__init__(
            f"Name '{name}' is already registered in '{category}'", record_name
        )


class RegistryPhaseError(MetaDocsError):
    """Raised when the registry is used in the wrong phase."""

    kind = "registry_phase"


# =============================================================================
# Validation Errors
# =============================================================================


class MissingRequiredFieldError(MetaDocsError):
    """Raised when a required field is absent or blank."""

    kind = "missing_field"

    def __init__(self, field_name: str, record_name: Optional[str] = None) -> None:
        self.field_name = field_name
        super().__init__(f"Missing required field: {field_name}", record_name)


class DanglingReferenceError(MetaDocsError):
    """Raised when linkable text references an undocumented object."""

    kind = "dangling_reference"

    def __init__(self, link: str, record_name: Optional[str] = None) -> None:
        self.link = link
        super().__init__(f"Unresolved reference '{link}'", record_name)


class SynonymConflictError(MetaDocsError):
    """Raised when a synonym shadows another record's primary name."""

    kind = "synonym_conflict"

    def __init__(
        self, synonym: str, other: str, record_name: Optional[str] = None
    ) -> None:
        self.synonym = synonym
        self.other = other
        super().__init__(
            f"Synonym '{synonym}' conflicts with the primary name of '{other}'",
            record_name,
        )
