# SPDX-License-Identifier: MIT
"""
Meta Documentation Registry

Shared namespace of every documented object, keyed by category and by
normalized name. The registry has two phases: ``MetaDocs`` accepts
registrations, and ``seal()`` hands back a read-only ``SealedMetaDocs``
which is the only object the second-pass validation accepts.
"""

from __future__ import annotations

import logging
from typing import Dict, Iterable, Iterator, List, Optional, Tuple

from .errors import DuplicateNameError, RegistryPhaseError
from .objects import MetaObject

logger = logging.getLogger(__name__)

DEFAULT_CATEGORIES: Tuple[str, ...] = ("event", "language")


class _Namespaces:
    """Read access shared by both registry phases."""

    def __init__(self, namespaces: Dict[str, Dict[str, MetaObject]]) -> None:
        self._namespaces = namespaces

    @property
    def categories(self) -> List[str]:
        return list(self._namespaces)

    def lookup(self, category: str, name: str) -> Optional[MetaObject]:
        """Find an object by category and name (case-insensitive)."""
        return self._namespaces.get(category, {}).get(name.lower())

    def lookup_any(self, name: str) -> Optional[MetaObject]:
        """Find an object by name in any category."""
        clean = name.lower()
        for namespace in self._namespaces.values():
            if clean in namespace:
                return namespace[clean]
        return None

    def iter_category(self, category: str) -> Iterator[MetaObject]:
        """Iterate the distinct objects of one category, in registration order."""
        seen = set()
        for obj in self._namespaces.get(category, {}).values():
            if id(obj) not in seen:
                seen.add(id(obj))
                yield obj

    def iter_objects(self) -> Iterator[MetaObject]:
        """Iterate the distinct objects of every category."""
        for category in self._namespaces:
            yield from self.iter_category(category)

    def __len__(self) -> int:
        return sum(1 for _ in self.iter_objects())


class MetaDocs(_Namespaces):
    """Registry in its registration phase."""

    def __init__(self, categories: Iterable[str] = DEFAULT_CATEGORIES) -> None:
        super().__init__({category: {} for category in categories})
        self._sealed = False

    @property
    def sealed(self) -> bool:
        return self._sealed

    def _check_open(self) -> None:
        if self._sealed:
            raise RegistryPhaseError("Registry is sealed; no further registration allowed")

    def insert(self, category: str, name: str, obj: MetaObject) -> None:
        """
        Insert a single name for an object.

        Raises:
            DuplicateNameError: If the name maps to a different object
            RegistryPhaseError: If the registry is sealed
        """
        self._check_open()
        namespace = self._namespaces.setdefault(category, {})
        clean = name.lower()
        existing = namespace.get(clean)
        if existing is not None and existing is not obj:
            raise DuplicateNameError(category, clean, obj.name or None)
        namespace[clean] = obj

    def register(self, obj: MetaObject) -> None:
        """
        Register an object under its canonical name and every synonym.

        Finalizes the object first if that has not happened yet. Nothing is
        inserted when any of its names collides.

        Args:
            obj: The object to register

        Raises:
            DuplicateNameError: If any name maps to a different object
            MissingRequiredFieldError: If finalize finds no name
            RegistryPhaseError: If the registry is sealed
        """
        self._check_open()
        if not obj.finalized:
            obj.finalize()

        namespace = self._namespaces.setdefault(obj.category, {})
        for name in obj.multi_names:
            existing = namespace.get(name)
            if existing is not None and existing is not obj:
                raise DuplicateNameError(obj.category, name, obj.name)

        for name in obj.multi_names:
            self.insert(obj.category, name, obj)
        logger.debug("Registered %s '%s' as %s", obj.category, obj.name, obj.multi_names)

    def seal(self) -> "SealedMetaDocs":
        """Close the registration phase and return the read-only registry."""
        self._check_open()
        self._sealed = True
        logger.debug("Registry sealed with %d objects", len(self))
        return SealedMetaDocs(self._namespaces)


class SealedMetaDocs(_Namespaces):
    """Registry in its validation phase: lookups only."""
