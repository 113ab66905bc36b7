# SPDX-License-Identifier: MIT
"""
Meta Documentation Validator

Second-pass validation of every registered object against the sealed
registry. Problems are collected per object; one object's failures never
stop the check of its siblings.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .errors import MetaDocsError, RegistryPhaseError
from .registry import SealedMetaDocs

logger = logging.getLogger(__name__)


@dataclass
class Violation:
    """Represents a single problem found for one record."""

    record: str
    kind: str
    message: str

    def to_dict(self) -> Dict[str, str]:
        return {
            "record": self.record,
            "kind": self.kind,
            "message": self.message,
        }


@dataclass
class ValidationResult:
    """Result of a parse, registration and validation run."""

    valid: bool = True
    violations: List[Violation] = field(default_factory=list)
    records_checked: int = 0

    def add_violation(self, record: str, kind: str, message: str) -> None:
        """Add a validation violation."""
        self.violations.append(Violation(record=record, kind=kind, message=message))
        self.valid = False
        logger.debug("[%s] %s: %s", record, kind, message)

    def add_error(self, error: MetaDocsError, record: Optional[str] = None) -> None:
        """
        Add a violation from a raised error.

        Args:
            error: The error to record
            record: Record name to use when the error carries none
        """
        self.add_violation(
            record=error.record_name or record or "<unnamed>",
            kind=error.kind,
            message=error.message,
        )

    def by_record(self) -> Dict[str, List[Violation]]:
        """Group violations by record name, in first-seen order."""
        grouped: Dict[str, List[Violation]] = {}
        for violation in self.violations:
            grouped.setdefault(violation.record, []).append(violation)
        return grouped

    def kinds(self) -> List[str]:
        """Kinds of all violations, in the order found."""
        return [v.kind for v in self.violations]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "valid": self.valid,
            "records_checked": self.records_checked,
            "violations": [v.to_dict() for v in self.violations],
        }


def validate_docs(
    docs: SealedMetaDocs, result: Optional[ValidationResult] = None
) -> ValidationResult:
    """
    Run the second-pass check of every registered object.

    Args:
        docs: The sealed registry
        result: Existing result to add to (e.g. one holding parse errors)

    Returns:
        ValidationResult with every violation found

    Raises:
        RegistryPhaseError: If the registry has not been sealed
    """
    if not isinstance(docs, SealedMetaDocs):
        raise RegistryPhaseError("Validation requires a sealed registry; call seal() first")

    if result is None:
        result = ValidationResult()

    for obj in docs.iter_objects():
        logger.debug("Checking %s '%s'", obj.category, obj.name)
        try:
            obj.post_check(docs, result)
        except MetaDocsError as e:
            result.add_error(e, obj.name)
        result.records_checked += 1

    return result
