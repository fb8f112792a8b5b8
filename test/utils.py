# python
"""
Utils module behavioral tests (sentinel and small helpers).

Scope
- Validate the Unset sentinel: singleton, falsy, printable, unions, non-subclassable.
- Validate coalesce, rename, view, pluralize and argmax.

Conventions
- Test method names follow CamelCase per project convention.
"""

from __future__ import annotations

import copy
import unittest
from types import MappingProxyType
from unittest import TestCase

from kvargs.utils import Unset, UnsetType, argmax, coalesce, pluralize, rename, view


class TestUnset(TestCase):
    """Behavioral tests for the Unset sentinel."""

    def testSingleton(self):
        self.assertIs(UnsetType(), Unset)
        self.assertIs(copy.copy(Unset), Unset)
        self.assertIs(copy.deepcopy(Unset), Unset)

    def testFalsyAndPrintable(self):
        self.assertFalse(Unset)
        self.assertEqual(repr(Unset), "Unset")

    def testUnionWithTypes(self):
        self.assertIsInstance(Unset, str | Unset)
        self.assertIsInstance("text", Unset | str)
        self.assertNotIsInstance(1, str | Unset)

    def testNotSubclassable(self):
        with self.assertRaises(TypeError):
            class Derived(UnsetType):  # NOQA: F-841
                pass


class TestHelpers(TestCase):
    """Behavioral tests for coalesce/rename/view/pluralize/argmax."""

    def testCoalesceReplacesOnlyUnset(self):
        self.assertEqual(coalesce(Unset, "fallback"), "fallback")
        self.assertEqual(coalesce("", "fallback"), "")
        self.assertIsNone(coalesce(Unset))

    def testRenameCallable(self):
        def function():
            pass

        rename(function, "renamed")
        self.assertEqual(function.__name__, "renamed")
        self.assertEqual(function.__qualname__, "renamed")

    def testRenameDecorator(self):
        @rename("decorated")
        def function():
            pass

        self.assertEqual(function.__name__, "decorated")

    def testRenameRejectsBadArity(self):
        with self.assertRaises(TypeError):
            rename()

    def testViewExposesImmutableForms(self):
        class Holder:
            names = view("names")
            table = view("table")
            text = view("text")

            def __init__(self):
                self._names = ["a", "b"]
                self._table = {"a": 1}
                self._text = "plain"

        holder = Holder()
        self.assertEqual(holder.names, ("a", "b"))
        self.assertIsInstance(holder.table, MappingProxyType)
        self.assertEqual(holder.text, "plain")
        with self.assertRaises(AttributeError):
            holder.names = ()

    def testPluralize(self):
        self.assertEqual(pluralize("value", 1), "1 value")
        self.assertEqual(pluralize("value", 2), "2 values")
        self.assertEqual(pluralize("switch", 0), "0 switches")

    def testArgmaxIsPositive(self):
        self.assertGreater(argmax(), 0)


if __name__ == "__main__":
    unittest.main()
