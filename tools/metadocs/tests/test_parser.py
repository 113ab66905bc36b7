# SPDX-License-Identifier: MIT
"""Tests for the fragment loader."""

import json
import unittest

from tools.metadocs.errors import ParseError
from tools.metadocs.event import MetaEvent
from tools.metadocs.parser import (
    Fragment,
    build_object,
    load_fragments,
    parse_fragment,
    parse_fragments,
    validate_fragments,
)
from tools.metadocs.validator import ValidationResult


BLOCK_BREAK = {
    "type": "event",
    "tags": [
        ["events", "block.break\nBLOCK.BREAK"],
        ["triggers", "fires when a block breaks"],
        ["regex", "block\\.break"],
        ["cancellable", "true"],
        ["switch", "with:<item> to only process the event when the item matches."],
    ],
}

FLAG_SYSTEM = {
    "type": "language",
    "tags": [
        ["name", "Flag System"],
        ["description", "Flags are persistent data. See <@link event block.break>."],
    ],
}


class TestParseFragments(unittest.TestCase):
    """Test JSON fragment parsing."""

    def test_parse_list(self) -> None:
        """Test parsing a fragment list."""
        fragments = parse_fragments(json.dumps([BLOCK_BREAK, FLAG_SYSTEM]))

        self.assertEqual(len(fragments), 2)
        self.assertEqual(fragments[0].kind, "event")
        self.assertEqual(fragments[0].tags[0], ("events", "block.break\nBLOCK.BREAK"))
        self.assertEqual(fragments[1].index, 1)
        self.assertEqual(fragments[1].label, "fragment #1")

    def test_invalid_json(self) -> None:
        """Test that invalid JSON raises ParseError."""
        with self.assertRaises(ParseError):
            parse_fragments("[{")

    def test_not_a_list(self) -> None:
        """Test that a non-list document raises ParseError."""
        with self.assertRaises(ParseError):
            parse_fragments('{"type": "event"}')

    def test_missing_type(self) -> None:
        """Test that a fragment without a type raises ParseError."""
        with self.assertRaises(ParseError) as ctx:
            parse_fragment({"tags": []}, 3)
        self.assertIn("#3", str(ctx.exception))

    def test_collect_malformed_fragments(self) -> None:
        """Test that a collector receives bad fragments and parsing continues."""
        content = json.dumps([{"tags": []}, BLOCK_BREAK])
        result = ValidationResult()
        fragments = parse_fragments(content, result)

        self.assertEqual([f.index for f in fragments], [1])
        self.assertEqual(result.kinds(), ["parse"])
        self.assertEqual(result.violations[0].record, "fragment #0")

        with self.assertRaises(ParseError):
            parse_fragments(content)

    def test_invalid_tag(self) -> None:
        """Test that malformed tag pairs raise ParseError."""
        with self.assertRaises(ParseError):
            parse_fragment({"type": "event", "tags": [["events"]]})
        with self.assertRaises(ParseError):
            parse_fragment({"type": "event", "tags": [["events", 5]]})


class TestBuildObject(unittest.TestCase):
    """Test building records from fragments."""

    def test_build_event(self) -> None:
        """Test building a complete event."""
        result = ValidationResult()
        event = build_object(parse_fragment(BLOCK_BREAK), result)

        self.assertIsInstance(event, MetaEvent)
        self.assertTrue(event.finalized)
        self.assertEqual(event.switch_names, {"with"})
        self.assertTrue(event.cancellable)
        self.assertTrue(result.valid)

    def test_invalid_regex_keeps_sibling_tags(self) -> None:
        """Test that a bad regex is reported and other tags still apply."""
        fragment = Fragment(
            kind="event",
            tags=[
                ("regex", "(["),
                ("events", "broken regex"),
                ("triggers", "still applied"),
            ],
        )
        result = ValidationResult()
        event = build_object(fragment, result)

        self.assertIsNotNone(event)
        self.assertEqual(event.triggers, "still applied")
        self.assertIsNone(event.regex_matcher)
        self.assertEqual(result.kinds(), ["invalid_pattern"])
        self.assertEqual(result.violations[0].record, "broken regex")

    def test_unknown_key(self) -> None:
        """Test that unrecognized keys are reported against the record."""
        fragment = Fragment(kind="event", tags=[("events", "e"), ("mechanism", "x")])
        result = ValidationResult()
        build_object(fragment, result)

        self.assertEqual(result.kinds(), ["unrecognized_key"])
        self.assertIn("mechanism", result.violations[0].message)
        self.assertEqual(result.violations[0].record, "e")

    def test_duplicate_tag(self) -> None:
        """Test that a repeated single-valued tag is reported."""
        fragment = Fragment(
            kind="event",
            tags=[("events", "e"), ("triggers", "one"), ("triggers", "two")],
        )
        result = ValidationResult()
        event = build_object(fragment, result)

        self.assertEqual(result.kinds(), ["duplicate_tag"])
        self.assertEqual(event.triggers, "one")

    def test_unknown_type(self) -> None:
        """Test that an unknown fragment type is reported."""
        result = ValidationResult()
        obj = build_object(Fragment(kind="mechanism", index=4), result)

        self.assertIsNone(obj)
        self.assertEqual(result.kinds(), ["unrecognized_key"])
        self.assertEqual(result.violations[0].record, "fragment #4")

    def test_missing_names(self) -> None:
        """Test that an event without names is not built."""
        result = ValidationResult()
        obj = build_object(Fragment(kind="event", tags=[("triggers", "t")], index=2), result)

        self.assertIsNone(obj)
        self.assertEqual(result.kinds(), ["missing_field"])
        self.assertEqual(result.violations[0].record, "fragment #2")


class TestLoadFragments(unittest.TestCase):
    """Test loading and registration."""

    def test_load_registers(self) -> None:
        """Test that loaded records are registered by every alias."""
        docs, result = load_fragments(parse_fragments(json.dumps([BLOCK_BREAK, FLAG_SYSTEM])))

        self.assertTrue(result.valid)
        self.assertIsNotNone(docs.lookup("event", "BLOCK.BREAK"))
        self.assertIsNotNone(docs.lookup("language", "flag system"))
        self.assertFalse(docs.sealed)

    def test_duplicate_names_collected(self) -> None:
        """Test that a name collision is reported and loading continues."""
        duplicate = {"type": "event", "tags": [["events", "Block.Break"]]}
        docs, result = load_fragments(
            parse_fragments(json.dumps([BLOCK_BREAK, duplicate, FLAG_SYSTEM]))
        )

        self.assertEqual(result.kinds(), ["duplicate_name"])
        self.assertEqual(len(docs), 2)


class TestValidateFragments(unittest.TestCase):
    """Test the full pipeline."""

    def test_clean_file(self) -> None:
        """Test that a clean fragment file validates."""
        docs, result = validate_fragments(json.dumps([FLAG_SYSTEM, BLOCK_BREAK]))

        self.assertTrue(result.valid)
        self.assertEqual(result.records_checked, 2)
        self.assertIsNotNone(docs)

    def test_all_errors_reported(self) -> None:
        """Test that parse and validation errors appear in one report."""
        broken = {
            "type": "event",
            "tags": [
                ["events", "player explodes"],
                ["regex", "(["],
                ["triggers", "after <@link event nothing here>"],
            ],
        }
        _, result = validate_fragments(json.dumps([BLOCK_BREAK, broken]))

        self.assertFalse(result.valid)
        self.assertEqual(
            result.kinds(),
            ["invalid_pattern", "missing_field", "dangling_reference"],
        )
        self.assertEqual(list(result.by_record()), ["player explodes"])

    def test_malformed_fragment_does_not_stop_siblings(self) -> None:
        """Test that a bad fragment is reported and the others are still checked."""
        dangling = {
            "type": "event",
            "tags": [
                ["events", "a"],
                ["triggers", "see <@link event nope>"],
                ["regex", "a"],
            ],
        }
        bad_tag = {"type": "event", "tags": [["events"]]}
        docs, result = validate_fragments(json.dumps([dangling, bad_tag, "not an object"]))

        self.assertIsNotNone(docs)
        self.assertEqual(result.kinds(), ["parse", "parse", "dangling_reference"])
        grouped = result.by_record()
        self.assertEqual(list(grouped), ["fragment #1", "fragment #2", "a"])
        self.assertEqual(result.records_checked, 1)

    def test_unparseable_content(self) -> None:
        """Test that bad JSON is reported as a document error."""
        docs, result = validate_fragments("not json")

        self.assertIsNone(docs)
        self.assertFalse(result.valid)
        self.assertEqual(result.violations[0].record, "document")


if __name__ == "__main__":
    unittest.main()
