# python
"""
Arguments module behavioral tests (argument specifications).

Scope
- Validate placement (positional vs optional), flag normalization and destination deduction.
- Validate attribute collection: flat pairs, keywords, aliases, duplicates, unknown names.
- Validate nargs/choices/boolean sanitizing and the per-action attribute rules.
- Validate unused attribute warnings and read-only introspection.

Conventions
- Test method names follow CamelCase per project convention.
- Specifications are built with an empty context (faults are raised, warnings warned).
"""

from __future__ import annotations

import doctest
import unittest
import warnings
from unittest import TestCase

from kvargs import arguments
from kvargs.arguments import Argument
from kvargs.faults import (
    ActionConflictError,
    DuplicateAttributeError,
    InvalidChoicesError,
    InvalidNargsError,
    InvalidPlacementError,
    InvalidSwitchError,
    MissingConstError,
    MissingDefaultError,
    PlacementConflictError,
    UndeducibleDestinationError,
    UnknownActionError,
    UnknownAttributeError,
    UnusedAttributeWarning,
)
from kvargs.records import declare


def build(*items, **attributes):
    return Argument(items, attributes, {})


class TestPlacement(TestCase):
    """Behavioral tests for positional/optional placement and naming."""

    def testPositionalFromName(self):
        a = build("name", "input-file")
        self.assertTrue(a.positional)
        self.assertEqual(a.destination, "input_file")
        self.assertEqual(a.key, "input_file")
        self.assertEqual(a.label, "input-file")
        self.assertEqual(a.action, "store")

    def testOptionalKeyPrefersLong(self):
        a = build("short", "v", "long", "verbose", "action", "count")
        self.assertFalse(a.positional)
        self.assertEqual(a.key, "--verbose")
        self.assertEqual(a.flags, ("-v", "--verbose"))
        self.assertEqual(a.destination, "verbose")

    def testShortOnlyKeyAndExplicitDestination(self):
        a = build("short", "-q", "destination", "quiet", "action", "store_true")
        self.assertEqual(a.short, "q")
        self.assertEqual(a.key, "-q")
        self.assertEqual(a.destination, "quiet")

    def testLongLeadingHyphensDropped(self):
        a = build("long", "--dry-run", "action", "store_true")
        self.assertEqual(a.long, "dry-run")
        self.assertEqual(a.destination, "dry_run")

    def testDestAlias(self):
        a = build("long", "output", dest="target")
        self.assertEqual(a.destination, "target")

    def testNameWithFlagsConflicts(self):
        with self.assertRaises(PlacementConflictError):
            build("name", "file", "short", "f")

    def testMissingNamesRejected(self):
        with self.assertRaises(UndeducibleDestinationError):
            build("action", "store_true")

    def testShortOnlyWithoutDestinationRejected(self):
        with self.assertRaises(UndeducibleDestinationError):
            build("short", "x")

    def testShortMustBeOneCharacter(self):
        with self.assertRaises(InvalidSwitchError):
            build("short", "xy", "destination", "x")

    def testInvalidLongRejected(self):
        with self.assertRaises(InvalidSwitchError):
            build("long", "-bad")

    def testPositionalNameCannotLookLikeFlag(self):
        with self.assertRaises(InvalidPlacementError):
            build("name", "-file")


class TestAttributes(TestCase):
    """Behavioral tests for attribute collection and value sanitizing."""

    def testKeywordsAndItemsMerge(self):
        a = build("long", "mode", help="operating mode", metavar="MODE")
        self.assertEqual(a.help, "operating mode")
        self.assertEqual(a.metavar, "MODE")

    def testDuplicateAttributeRejected(self):
        with self.assertRaises(DuplicateAttributeError):
            build("long", "mode", "long", "other")
        with self.assertRaises(DuplicateAttributeError):
            build("long", "mode", long="other")

    def testAliasAndCanonicalCountAsDuplicate(self):
        with self.assertRaises(DuplicateAttributeError):
            build("long", "mode", "dest", "a", "destination", "b")

    def testUnknownAttributeRejected(self):
        with self.assertRaises(UnknownAttributeError):
            build("long", "mode", "colour", "red")

    def testUnknownActionRejected(self):
        with self.assertRaises(UnknownActionError):
            build("long", "mode", "action", "store_maybe")

    def testOddItemsRejected(self):
        with self.assertRaises(TypeError):
            build("long")

    def testNargsForms(self):
        self.assertEqual(build("long", "a", "nargs", "2").nargs, 2)
        self.assertEqual(build("long", "a", "nargs", 3).nargs, 3)
        self.assertEqual(build("long", "a", "nargs", "*").nargs, "*")
        self.assertEqual(build("long", "a", "nargs", "+").nargs, "+")
        self.assertIsNone(build("long", "a").nargs)

    def testInvalidNargsRejected(self):
        for nargs in ("0", 0, -1, "x", "**", True, 1.5):
            with self.subTest(nargs=nargs), self.assertRaises(InvalidNargsError):
                build("long", "a", "nargs", nargs)

    def testChoicesMustBeContainer(self):
        with self.assertRaises(InvalidChoicesError):
            build("long", "color", "choices", {"red": "_"})
        a = build("long", "color", "choices", declare("red", "_", "blue", "_"))
        self.assertEqual(list(a.choices), ["red", "blue"])

    def testRequiredAcceptsText(self):
        self.assertTrue(build("long", "a", "required", "true").required)
        self.assertFalse(build("long", "a", "required", "False").required)
        self.assertTrue(build("long", "a", "required", True).required)

    def testRequiredRejectsOtherText(self):
        with self.assertRaises(TypeError):
            build("long", "a", "required", "yes")

    def testDefaultMustBeText(self):
        with self.assertRaises(TypeError):
            build("long", "a", "default", 1)


class TestActions(TestCase):
    """Behavioral tests for per-action attribute rules."""

    def testOnlyStoreAndSubCommandArePositional(self):
        build("name", "file")
        build("name", "cmd", "action", "sub_command")
        for action in ("append", "extend", "count", "store_true", "sub_argument"):
            with self.subTest(action=action), self.assertRaises(InvalidPlacementError):
                build("name", "file", "action", action)

    def testPositionalRejectsRequired(self):
        with self.assertRaises(InvalidPlacementError):
            build("name", "file", "required", "true")

    def testStoreTrueForbidsDefault(self):
        with self.assertRaises(ActionConflictError):
            build("long", "flag", "action", "store_true", "default", "x")

    def testStoreFalseForbidsNargs(self):
        with self.assertRaises(ActionConflictError):
            build("long", "flag", "action", "store_false", "nargs", "1")

    def testVersionRequiresVersion(self):
        with self.assertRaises(ActionConflictError):
            build("long", "version", "action", "version")
        a = build("long", "version", "action", "version", "version", "1.0")
        self.assertEqual(a.version, "1.0")

    def testVersionForbidsRequired(self):
        with self.assertRaises(ActionConflictError):
            build("long", "version", "action", "version", "version", "1.0", "required", "true")

    def testHelpForbidsVersion(self):
        with self.assertRaises(ActionConflictError):
            build("long", "help", "action", "help", "version", "1.0")

    def testCountForbidsConst(self):
        with self.assertRaises(ActionConflictError):
            build("short", "v", "destination", "v", "action", "count", "const", "2")

    def testStoreConstRequiresConst(self):
        with self.assertRaises(ActionConflictError):
            build("long", "fast", "action", "store_const")
        self.assertEqual(build("long", "fast", "action", "store_const", "const", "yes").const, "yes")

    def testAppendConstForbidsChoices(self):
        with self.assertRaises(ActionConflictError):
            build("long", "tag", "action", "append_const", "const", "x", "choices", declare("x", "_"))

    def testSubCommandForbidsDefault(self):
        with self.assertRaises(ActionConflictError):
            build("name", "cmd", "action", "sub_command", "default", "x")

    def testOptionalPositionalNeedsDefault(self):
        with self.assertRaises(MissingDefaultError):
            build("name", "file", "nargs", "?")
        self.assertEqual(build("name", "file", "nargs", "?", "default", "-").default, "-")

    def testOptionalFlagNeedsConst(self):
        with self.assertRaises(MissingConstError):
            build("long", "level", "nargs", "?")
        self.assertEqual(build("long", "level", "nargs", "?", "const", "1").const, "1")

    def testUnusedVersionWarns(self):
        with self.assertWarns(UnusedAttributeWarning):
            build("long", "mode", "version", "1.0")

    def testUnusedConstWarns(self):
        with self.assertWarns(UnusedAttributeWarning):
            build("long", "mode", "const", "x")

    def testUsedConstDoesNotWarn(self):
        with warnings.catch_warnings():
            warnings.simplefilter("error")
            build("long", "mode", "nargs", "?", "const", "x")


class TestIntrospection(TestCase):
    """Behavioral tests for read-only views and representation."""

    def testReadOnly(self):
        a = build("long", "mode")
        with self.assertRaises(AttributeError):
            a.destination = "other"

    def testReprListsSetAttributes(self):
        a = build("long", "mode", help="operating mode")
        self.assertTrue(repr(a).startswith("argument("))
        self.assertIn("destination='mode'", repr(a))
        self.assertIn("help='operating mode'", repr(a))
        self.assertNotIn("metavar", repr(a))

    def testModuleExamplesHold(self):
        failures, attempted = doctest.testmod(arguments, optionflags=doctest.ELLIPSIS)
        self.assertGreater(attempted, 0)
        self.assertEqual(failures, 0)


if __name__ == "__main__":
    unittest.main()
