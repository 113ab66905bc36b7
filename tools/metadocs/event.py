# SPDX-License-Identifier: MIT
"""
Meta Documentation Event Record

A documented script event: its names, trigger text, regex matcher,
switches, context tags and determinations. Tagged values are applied
through a fixed key table; derived fields are computed once at finalize.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, ClassVar, Dict, FrozenSet, List, Optional, Set

from .errors import InvalidPatternError, MissingRequiredFieldError, SynonymConflictError
from .objects import Handler, MetaObject, is_blank, parse_flag, split_lines

if TYPE_CHECKING:
    from .registry import SealedMetaDocs
    from .validator import ValidationResult


# =============================================================================
# Switch Tables
# =============================================================================

# Switches usable only when the event has a player attached
PLAYER_SWITCHES = {"flagged", "permission"}

# Switches usable only when the event has a location
LOCATION_SWITCHES = {"in", "location_flagged"}

# Switches usable only when the event is cancellable
CANCELLABLE_SWITCHES = {"cancelled", "ignorecancelled"}

# Switches usable on every event
GLOBAL_SWITCHES = {"priority", "bukkit_priority", "server_flagged"}


def switch_prefix(switch_line: str) -> str:
    """
    Get the name of a switch declaration.

    Format: "<name> <description>" or "<name>:<description>"

    Args:
        switch_line: One raw switch line

    Returns:
        The lowercased text before the first space, then before the first colon
    """
    return switch_line.split(" ", 1)[0].split(":", 1)[0].lower()


# =============================================================================
# Key Handlers
# =============================================================================


def _set_events(event: "MetaEvent", value: str) -> None:
    event.events = split_lines(value)


def _set_triggers(event: "MetaEvent", value: str) -> None:
    event.triggers = value


def _set_player(event: "MetaEvent", value: str) -> None:
    event.player = value


def _set_npc(event: "MetaEvent", value: str) -> None:
    event.npc = value


def _set_regex(event: "MetaEvent", value: str) -> None:
    try:
        event.regex_matcher = re.compile(value)
    except re.error as e:
        raise InvalidPatternError(value, str(e), event.name or None) from e


def _add_switches(event: "MetaEvent", value: str) -> None:
    event.switches.extend(split_lines(value))


def _set_context(event: "MetaEvent", value: str) -> None:
    event.context = split_lines(value)


def _set_determinations(event: "MetaEvent", value: str) -> None:
    event.determinations = split_lines(value)


def _set_cancellable(event: "MetaEvent", value: str) -> None:
    event.cancellable = parse_flag(value)


def _set_location(event: "MetaEvent", value: str) -> None:
    event.has_location = parse_flag(value)


EVENT_HANDLERS: Dict[str, Handler] = {
    "events": _set_events,
    "triggers": _set_triggers,
    "player": _set_player,
    "npc": _set_npc,
    "regex": _set_regex,
    "switch": _add_switches,
    "context": _set_context,
    "determine": _set_determinations,
    "cancellable": _set_cancellable,
    "location": _set_location,
}


# =============================================================================
# Event Record
# =============================================================================


@dataclass
class MetaEvent(MetaObject):
    """A documented event."""

    category: ClassVar[str] = "event"
    KEY_HANDLERS: ClassVar[Dict[str, Handler]] = EVENT_HANDLERS
    REPEATABLE_KEYS: ClassVar[FrozenSet[str]] = frozenset({"switch"})

    events: List[str] = field(default_factory=list)
    clean_events: List[str] = field(default_factory=list)
    has_multiple_names: bool = False
    switches: List[str] = field(default_factory=list)
    switch_names: Set[str] = field(default_factory=set)
    regex_matcher: Optional[re.Pattern] = None
    triggers: str = ""
    context: List[str] = field(default_factory=list)
    determinations: List[str] = field(default_factory=list)
    player: str = ""
    npc: str = ""
    cancellable: bool = False
    has_location: bool = False

    @property
    def name(self) -> str:
        return self.events[0] if self.events else ""

    @property
    def multi_names(self) -> List[str]:
        return list(self.clean_events)

    def matches_name(self, text: str) -> bool:
        if self.regex_matcher is None:
            return False
        return self.regex_matcher.fullmatch(text) is not None

    def apply_value(self, key: str, value: str) -> bool:
        """
        Apply one tagged value to this event.

        Args:
            key: The tag key (events, triggers, regex, switch, ...)
            value: The raw, possibly multi-line tag value

        Returns:
            True if the key was recognized here or by the base record

        Raises:
            InvalidPatternError: If a regex value does not compile
            DuplicateTagError: If a single-valued key was already applied
            RecordFinalizedError: If the event was already finalized
        """
        if self._apply_from(self.KEY_HANDLERS, self.REPEATABLE_KEYS, key, value):
            return True
        return super().apply_value(key, value)

    def finalize(self) -> None:
        """
        Compute the derived name and switch fields.

        Raises:
            MissingRequiredFieldError: If no event names were given
        """
        if not self.events:
            raise MissingRequiredFieldError("events")
        self.clean_events = [name.lower() for name in self.events]
        self.has_multiple_names = len(self.events) > 1
        self.switch_names = {switch_prefix(line) for line in self.switches}
        super().finalize()

    def is_valid_switch(self, switch_name: str) -> bool:
        """
        Returns whether the switch name given is valid for this event.

        Declared switches are only known once the event is finalized;
        before that only the capability and global switches can match.
        """
        if switch_name in self.switch_names:
            return True
        if switch_name in PLAYER_SWITCHES:
            return not is_blank(self.player)
        if switch_name in LOCATION_SWITCHES:
            return self.has_location
        if switch_name in CANCELLABLE_SWITCHES:
            return self.cancellable
        return switch_name in GLOBAL_SWITCHES

    # -------------------------------------------------------------------------
    # Second-pass checks
    # -------------------------------------------------------------------------

    def post_check_synonyms(self, docs: "SealedMetaDocs", result: "ValidationResult") -> None:
        """Check that no synonym shadows another object's primary name."""
        for synonym in self.clean_events[1:]:
            for other in docs.iter_objects():
                if other is not self and other.clean_name == synonym:
                    result.add_error(SynonymConflictError(synonym, other.name, self.name))

    def post_check(self, docs: "SealedMetaDocs", result: "ValidationResult") -> None:
        self.post_check_synonyms(docs, result)
        self.require(result, {
            "events": self.name,
            "triggers": self.triggers,
            "regex": self.regex_matcher,
        })
        self.post_check_linkable_text(docs, self.triggers, result)
        for context in self.context:
            self.post_check_linkable_text(docs, context, result)
        for determine in self.determinations:
            self.post_check_linkable_text(docs, determine, result)
        super().post_check(docs, result)

    # -------------------------------------------------------------------------
    # Search
    # -------------------------------------------------------------------------

    def searchable_text(self) -> str:
        base_text = super().searchable_text()
        all_events = "\n".join(self.events)
        all_contexts = "\n".join(self.context)
        all_determinations = "\n".join(self.determinations)
        regex = self.regex_matcher.pattern if self.regex_matcher is not None else ""
        return (
            f"{base_text}\n{all_events}\n{self.triggers}\n{self.player}\n{self.npc}\n"
            f"{regex}\n{all_contexts}\n{all_determinations}"
        )
