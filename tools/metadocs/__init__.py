# SPDX-License-Identifier: MIT
"""
Meta Documentation Validator

Parses tagged documentation fragments for script events and other
documented objects, registers them in a shared registry and checks every
record against the complete registry in a second pass.

Usage:
    from tools.metadocs import MetaDocs, MetaEvent, validate_docs

    event = MetaEvent()
    event.apply_value("events", "player breaks block")
    event.apply_value("triggers", "when a player breaks a block.")
    event.apply_value("regex", "^player breaks [^\\s]+$")

    docs = MetaDocs()
    docs.register(event)
    result = validate_docs(docs.seal())
"""

from .errors import (
    MetaDocsError,
    ParseError,
    InvalidPatternError,
    DuplicateTagError,
    UnrecognizedKeyError,
    RecordFinalizedError,
    DuplicateNameError,
    RegistryPhaseError,
    MissingRequiredFieldError,
    DanglingReferenceError,
    SynonymConflictError,
)

from .objects import MetaObject, MetaLanguage

from .event import MetaEvent

from .registry import MetaDocs, SealedMetaDocs

from .validator import (
    validate_docs,
    ValidationResult,
    Violation,
)

from .parser import (
    parse_fragments,
    load_fragments,
    validate_fragments,
    Fragment,
)

__version__ = "0.1.0"
__all__ = [
    # Error exports
    "MetaDocsError",
    "ParseError",
    "InvalidPatternError",
    "DuplicateTagError",
    "UnrecognizedKeyError",
    "RecordFinalizedError",
    "DuplicateNameError",
    "RegistryPhaseError",
    "MissingRequiredFieldError",
    "DanglingReferenceError",
    "SynonymConflictError",
    # Record exports
    "MetaObject",
    "MetaLanguage",
    "MetaEvent",
    # Registry exports
    "MetaDocs",
    "SealedMetaDocs",
    # Validator exports
    "validate_docs",
    "ValidationResult",
    "Violation",
    # Loader exports
    "parse_fragments",
    "load_fragments",
    "validate_fragments",
    "Fragment",
]
