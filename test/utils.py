"""
Utils module behavioral tests (Unset sentinel, coalesce, mirror, ordinal).

Scope
- Validate the Unset singleton: falsiness, repr, unions and sealing.
- Validate coalesce and read-only mirrored properties.
- Validate ordinal wording used by parse diagnostics.

Conventions
- Test method names follow CamelCase per project convention.
"""

from __future__ import annotations

import unittest
from types import MappingProxyType
from unittest import TestCase

from arbor.utils import Unset, UnsetType, coalesce, mirror, ordinal, rename


class TestUnset(TestCase):
    """The Unset sentinel."""

    def testSingleton(self):
        self.assertIs(UnsetType(), Unset)

    def testFalseyButNotNone(self):
        self.assertFalse(Unset)
        self.assertIsNot(Unset, None)
        self.assertEqual(repr(Unset), "Unset")

    def testUnionInIsinstance(self):
        self.assertTrue(isinstance(Unset, str | Unset))
        self.assertTrue(isinstance("x", str | Unset))
        self.assertFalse(isinstance(1, str | Unset))

    def testSealed(self):
        with self.assertRaises(TypeError):
            type("Derived", (UnsetType,), {})


class TestHelpers(TestCase):
    """coalesce, rename and mirror."""

    def testCoalesceReplacesOnlyUnset(self):
        self.assertEqual(coalesce(Unset, "tcp"), "tcp")
        self.assertIsNone(coalesce(Unset))
        self.assertEqual(coalesce("", "tcp"), "")
        self.assertIsNone(coalesce(None, "tcp"))

    def testRename(self):
        @rename("describe")
        def anonymous():
            pass

        self.assertEqual(anonymous.__name__, "describe")
        with self.assertRaises(TypeError):
            rename()

    def testMirrorHandsOutReadOnlyViews(self):
        class Holder:
            names = mirror("names")
            table = mirror("table")

            def __init__(self):
                self._names = ["a"]
                self._table = {"a": 1}

        holder = Holder()
        self.assertEqual(holder.names, ("a",))
        self.assertIsInstance(holder.table, MappingProxyType)
        holder._table["b"] = 2
        self.assertIn("b", holder.table)
        with self.assertRaises(AttributeError):
            holder.names = ()


class TestPackageMetadata(TestCase):
    """Package dunders."""

    def testMetadataNamesThisProject(self):
        import arbor

        self.assertEqual(arbor.__title__, "arbor")
        self.assertEqual(arbor.__author__, "Arbor Contributors")
        self.assertEqual(arbor.__version__, "%d.%d.%d" % arbor.version_info[:3])


class TestOrdinal(TestCase):
    """Ordinal wording."""

    def testWords(self):
        self.assertEqual([ordinal(number) for number in (1, 2, 3, 10)], ["first", "second", "third", "tenth"])

    def testSuffixes(self):
        for number, expected in ((11, "11th"), (12, "12th"), (13, "13th"), (21, "21st"), (22, "22nd"),
                                 (23, "23rd"), (101, "101st"), (111, "111th"), (112, "112th")):
            with self.subTest(number=number):
                self.assertEqual(ordinal(number), expected)


if __name__ == "__main__":
    unittest.main()
