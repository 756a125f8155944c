"""
Utilities module tests (sentinel, coalesce, rename, mirror, records).

Scope
- Unset sentinel identity, truthiness and union support.
- coalesce() only replaces Unset.
- @rename() and its argument checks.
- mirror() copies containers on read.
- RecordType typename, mirrored fields and repr.
- Every package module imports cleanly.

Conventions
- Test method names follow CamelCase per project convention.
"""

from __future__ import annotations

import importlib
import unittest
from unittest import TestCase

from flagship import Unset, UnsetType, coalesce, rename, mirror
from flagship.utils import RecordType


class UnsetTest(TestCase):
    """The Unset sentinel."""

    def testSingleton(self):
        self.assertIs(UnsetType(), Unset)

    def testFalsey(self):
        self.assertFalse(Unset)
        self.assertEqual(repr(Unset), "Unset")

    def testUnionInIsinstance(self):
        self.assertIsInstance(Unset, str | Unset)
        self.assertIsInstance("x", str | Unset)
        self.assertNotIsInstance(1, str | Unset)

    def testSealed(self):
        with self.assertRaises(TypeError):
            class Derived(UnsetType):
                pass


class CoalesceTest(TestCase):
    """coalesce() replaces only Unset."""

    def testReplacesUnset(self):
        self.assertEqual(coalesce(Unset, "fallback"), "fallback")
        self.assertIsNone(coalesce(Unset))

    def testKeepsFalseyValues(self):
        self.assertEqual(coalesce("", "fallback"), "")
        self.assertEqual(coalesce(0, 1), 0)
        self.assertIsNone(coalesce(None, 1))


class RenameTest(TestCase):
    """@rename() decorator."""

    def testRenames(self):
        @rename("renamed")
        def function():
            pass

        self.assertEqual(function.__name__, "renamed")
        self.assertEqual(function.__qualname__, "renamed")

    def testReturnsTheTarget(self):
        def function():
            pass

        self.assertIs(rename("renamed")(function), function)

    def testInvalidArguments(self):
        with self.assertRaises(TypeError):
            rename(1)
        with self.assertRaises(TypeError):
            rename("name")(1)
        with self.assertRaises(TypeError):
            rename("length")(len)


class RecordTest(TestCase):
    """mirror() and the RecordType metaclass."""

    def setUp(self):
        class SampleRecord(metaclass=RecordType):
            __introspectable__ = ("name", "items")

            def __init__(self, name, items):
                self._name = name
                self._items = items

        self.record = SampleRecord

    def testTypename(self):
        self.assertEqual(self.record.__typename__, "sample-record")

    def testMirroredFieldsAreReadOnly(self):
        record = self.record("x", [1, 2])
        self.assertEqual(record.name, "x")
        with self.assertRaises(AttributeError):
            record.name = "y"

    def testContainersAreCopied(self):
        record = self.record("x", [1, 2])
        record.items.append(3)
        self.assertEqual(record.items, [1, 2])

    def testRepr(self):
        self.assertEqual(repr(self.record("x", (1,))), "sample-record(name='x', items=[1])")

    def testMirrorRejectsNonStrings(self):
        with self.assertRaises(TypeError):
            mirror(1)


class ImportTest(TestCase):
    """Every flagship module loads on its own."""

    def testModulesImport(self):
        for name in (
            "utils",
            "faults",
            "schema",
            "declarations",
            "boundaries",
            "tokens",
            "binder",
            "coercion",
            "flagset",
            "application",
        ):
            with self.subTest(module=name):
                module = importlib.import_module(f"flagship.{name}")
                self.assertTrue(module.__all__)

    def testUnsetPrecedesRecords(self):
        self.assertIs(RecordType.__displayable__, Unset)


if __name__ == "__main__":
    unittest.main()
