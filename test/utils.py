"""
Utilities behavioral tests (sentinel, mirrors, wording helpers, suggestions).

Scope
- Validate the Unset sentinel and coalesce().
- Validate mirror() copies and rename().
- Validate pluralize(), ordinal(), distance() and nearest().

Conventions
- Test method names follow CamelCase per project convention.
"""

from __future__ import annotations

import unittest
from unittest import TestCase

from helmsman.utils import *


class TestUnset(TestCase):
    """Behavioral tests for the Unset sentinel."""

    def testSingleton(self):
        self.assertIs(UnsetType(), Unset)

    def testFalsey(self):
        self.assertFalse(Unset)
        self.assertEqual(repr(Unset), "Unset")

    def testFinal(self):
        with self.assertRaises(TypeError):
            class Derived(UnsetType):
                pass

    def testCoalescePreservesFalseyValues(self):
        self.assertEqual(coalesce(Unset, "fallback"), "fallback")
        self.assertIsNone(coalesce(None, "fallback"))
        self.assertEqual(coalesce(0, 1), 0)
        self.assertIsNone(coalesce(Unset))


class TestMirror(TestCase):
    """Behavioral tests for mirror() and rename()."""

    def testMirrorReturnsCopies(self):
        class Holder:
            items = mirror("items")

            def __init__(self):
                self._items = {"a": [1, 2]}

        holder = Holder()
        holder.items["a"].append(3)
        self.assertEqual(holder.items, {"a": [1, 2]})

    def testMirrorIsReadOnly(self):
        class Holder:
            value = mirror("value")

            def __init__(self):
                self._value = 1

        with self.assertRaises(AttributeError):
            Holder().value = 2

    def testMirrorRejectsNonString(self):
        with self.assertRaises(TypeError):
            mirror(1)

    def testRenameForms(self):
        def function():
            pass

        self.assertEqual(rename(function, "renamed").__name__, "renamed")
        self.assertEqual(rename("decorated")(function).__qualname__, "decorated")
        with self.assertRaises(TypeError):
            rename()


class TestWording(TestCase):
    """Behavioral tests for pluralize() and ordinal()."""

    def testPluralize(self):
        self.assertEqual(pluralize("flag"), "flags")
        self.assertEqual(pluralize("SWITCH"), "SWITCHES")
        self.assertEqual(pluralize("entry"), "entries")
        self.assertEqual(pluralize("command option"), "command options")

    def testOrdinalWords(self):
        self.assertEqual(ordinal(1), "first")
        self.assertEqual(ordinal(10), "tenth")

    def testOrdinalSuffixes(self):
        self.assertEqual(ordinal(11), "11th")
        self.assertEqual(ordinal(21), "21st")
        self.assertEqual(ordinal(22), "22nd")
        self.assertEqual(ordinal(23), "23rd")
        self.assertEqual(ordinal(112), "112th")


class TestSuggestions(TestCase):
    """Behavioral tests for distance() and nearest()."""

    def testDistance(self):
        self.assertEqual(distance("test", "test"), 0)
        self.assertEqual(distance("tes", "test"), 1)
        self.assertEqual(distance("kitten", "sitting"), 3)
        self.assertEqual(distance("", "abc"), 3)

    def testNearestPicksClosest(self):
        self.assertEqual(nearest("tes", ["help", "test", "version"]), "test")

    def testNearestRespectsCutoff(self):
        self.assertIsNone(nearest("xyz", ["help", "version"]))

    def testNearestTieKeepsOrder(self):
        self.assertEqual(nearest("ab", ["aa", "bb"]), "aa")

    def testNearestSkipsExactMatch(self):
        self.assertIsNone(nearest("help", ["help"]))


if __name__ == "__main__":
    unittest.main()
