"""
Utility tests (Unset sentinel, coalesce, rename, mirror, ordinal).

Conventions
- Test method names follow CamelCase per project convention.
"""
import copy
import unittest
from collections import namedtuple
from types import MappingProxyType
from unittest import TestCase

from clapper.utils import *


class TestUnset(TestCase):
    """The Unset sentinel."""

    def testSingleton(self):
        self.assertIs(UnsetType(), Unset)
        self.assertIs(copy.copy(Unset), Unset)
        self.assertIs(copy.deepcopy(Unset), Unset)

    def testFalsyAndPrintable(self):
        self.assertFalse(Unset)
        self.assertEqual(repr(Unset), "Unset")

    def testUnionInIsinstance(self):
        self.assertTrue(isinstance(Unset, str | Unset))
        self.assertTrue(isinstance("x", Unset | str))

    def testSealed(self):
        with self.assertRaises(TypeError):
            type("Sub", (UnsetType,), {})


class TestHelpers(TestCase):
    """coalesce, rename, mirror, ordinal."""

    def testCoalesce(self):
        self.assertEqual(coalesce(Unset, "fallback"), "fallback")
        self.assertIsNone(coalesce(Unset))
        self.assertEqual(coalesce(0, 1), 0)

    def testRename(self):
        @rename("renamed")
        def function():
            pass

        self.assertEqual(function.__name__, "renamed")
        with self.assertRaises(TypeError):
            rename(1, "x")
        with self.assertRaises(TypeError):
            rename()

    def testMirror(self):
        class Holder:
            items = mirror("items")
            table = mirror("table")

            def __init__(self):
                self._items = ["a"]
                self._table = {"a": 1}

        holder = Holder()
        self.assertEqual(holder.items, ("a",))
        self.assertIsInstance(holder.table, MappingProxyType)
        with self.assertRaises(AttributeError):
            holder.items = ()

    def testMirrorKeepsTuples(self):
        Pair = namedtuple("Pair", ("left", "right"))

        class Holder:
            pair = mirror("pair")

            def __init__(self):
                self._pair = Pair(1, 2)

        self.assertEqual(Holder().pair.right, 2)
        self.assertIsInstance(Holder().pair, Pair)

    def testOrdinal(self):
        self.assertEqual(ordinal(1), "first")
        self.assertEqual(ordinal(10), "tenth")
        self.assertEqual(ordinal(11), "11th")
        self.assertEqual(ordinal(21), "21st")
        self.assertEqual(ordinal(112), "112th")
        self.assertEqual(ordinal(23), "23rd")


if __name__ == "__main__":
    unittest.main()
