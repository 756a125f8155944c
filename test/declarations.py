"""
Declarations module tests (declaration forest and declaration faults).

Scope
- Pre-order ids, dotted paths, parent links and command names.
- Every declaration fault text, raised fail-fast by declare().
- Shadowed-alias warning for command flags reusing a global alias.

Conventions
- Test method names follow CamelCase per project convention.
- Schemas are declared inline in each test.
"""

from __future__ import annotations

import unittest
from unittest import TestCase

from flagship import Schema, Command, Flag, Settings, ValueType, Kind, declare, check
from flagship.faults import (
    DeclarationError,
    DuplicateShortError,
    OverlongShortError,
    DuplicateLongError,
    DuplicateCommandError,
    UnsupportedTypeError,
    DuplicateSettingsError,
    GlobalCommandError,
    NestedGlobalError,
    ShadowedAliasWarning,
)


class DeclareTest(TestCase):
    """Building the declaration forest."""

    def setUp(self):
        class Flags(Schema):
            verbose = Flag("-v", "--verbose", type=bool)

            class Foo(Command, descr="foo command"):
                string = Flag("-s", "--string", default="x", env="APP_STRING")

                class Bar(Command, command="baz"):
                    ints = Flag("-i", type=list[int], delimiter=",")

            settings = Settings(allow_unknown_arg=True)

        self.schema = Flags

    def testPreOrderIds(self):
        declarations, _ = declare(self.schema)
        self.assertEqual([declaration.id for declaration in declarations], [0, 1, 2, 3, 4])
        self.assertEqual(
            [declaration.path for declaration in declarations],
            ["verbose", "Foo", "Foo.string", "Foo.Bar", "Foo.Bar.ints"],
        )

    def testParentLinks(self):
        declarations, _ = declare(self.schema)
        verbose, foo, string, bar, ints = declarations
        self.assertIsNone(verbose.parent)
        self.assertIs(string.parent, foo)
        self.assertIs(ints.parent, bar)
        self.assertEqual(list(ints.ancestors()), [bar, foo])
        self.assertEqual(ints.depth, 2)

    def testCommandNames(self):
        declarations, _ = declare(self.schema)
        self.assertEqual(declarations[1].command, "foo")
        self.assertEqual(declarations[3].command, "baz")
        self.assertIs(declarations[1].kind, Kind.COMMAND)
        self.assertEqual(declarations[1].descr, "foo command")

    def testArgumentFields(self):
        declarations, _ = declare(self.schema)
        string = declarations[2]
        self.assertIs(string.kind, Kind.ARGUMENT)
        self.assertEqual((string.short, string.long), ("s", "string"))
        self.assertEqual(string.default, "x")
        self.assertEqual(string.env, "APP_STRING")
        self.assertEqual(string.delimiter, "")
        self.assertIs(string.value_type, ValueType.STRING)
        self.assertIs(declarations[4].value_type, ValueType.INT_LIST)
        self.assertEqual(declarations[4].delimiter, ",")

    def testFormatted(self):
        class Flags(Schema):
            both = Flag("-b", "--both")
            long = Flag("--long")

        declarations, _ = declare(Flags)
        self.assertEqual(declarations[0].formatted, "-b")
        self.assertEqual(declarations[1].formatted, "--long")

    def testSettings(self):
        _, settings = declare(self.schema)
        self.assertEqual(len(settings), 1)
        self.assertIsNone(settings[0].parent)
        self.assertTrue(settings[0].allow_unknown_arg)

    def testAcceptsInstances(self):
        declarations, _ = declare(self.schema())
        self.assertEqual(len(declarations), 5)

    def testRejectsNonSchemas(self):
        with self.assertRaises(TypeError):
            declare(object)
        with self.assertRaises(TypeError):
            declare("Flags")


class CheckTest(TestCase):
    """Declaration faults and their texts."""

    def testDuplicateShort(self):
        class Flags(Schema):
            a = Flag("-s")
            b = Flag("-s")

        with self.assertRaises(DuplicateShortError) as context:
            declare(Flags)
        self.assertEqual(str(context.exception), "short argument s in b field is already defined in a field")

    def testOverlongShort(self):
        class Flags(Schema):
            a = Flag("-ab")

        with self.assertRaises(OverlongShortError) as context:
            declare(Flags)
        self.assertEqual(str(context.exception), "short argument ab in a field must be one character long")

    def testDuplicateLong(self):
        class Flags(Schema):
            a = Flag("--name")
            b = Flag("--name")

        with self.assertRaises(DuplicateLongError) as context:
            declare(Flags)
        self.assertEqual(str(context.exception), "long argument name in b field is already defined in a field")

    def testDuplicateCommand(self):
        class Flags(Schema):
            class Foo(Command, command="run"):
                pass

            class Bar(Command, command="run"):
                pass

        with self.assertRaises(DuplicateCommandError) as context:
            declare(Flags)
        self.assertEqual(str(context.exception), "command run in Bar field is already defined in Foo field")

    def testUnsupportedType(self):
        class Flags(Schema):
            mapping = Flag("-m", type=dict)

        with self.assertRaises(UnsupportedTypeError) as context:
            declare(Flags)
        self.assertTrue(str(context.exception).startswith("invalid type dict. Supported types: bool, int"))

    def testDuplicateSettings(self):
        class Flags(Schema):
            a = Settings()
            b = Settings(allow_unknown_arg=True)

        with self.assertRaises(DuplicateSettingsError) as context:
            declare(Flags)
        self.assertEqual(str(context.exception), "duplicate settings in `b` and `a` fields")

    def testGlobalCommand(self):
        class Flags(Schema):
            class Foo(Command, global_=True):
                pass

        with self.assertRaises(GlobalCommandError) as context:
            declare(Flags)
        self.assertEqual(str(context.exception), "command foo can't be global")

    def testNestedGlobal(self):
        class Flags(Schema):
            class Foo(Command):
                x = Flag("-x", type=bool, global_=True)

        with self.assertRaises(NestedGlobalError) as context:
            declare(Flags)
        self.assertEqual(str(context.exception), "argument -x can't be global")

    def testSameAliasesInDifferentScopes(self):
        class Flags(Schema):
            string = Flag("-s", "--string")
            settings = Settings()

            class Foo(Command):
                string = Flag("-s", "--string")
                settings = Settings()

                class Foo(Command, command="foo"):
                    string = Flag("-s", "--string")

        declarations, settings = declare(Flags)
        self.assertEqual(len(declarations), 5)
        self.assertEqual(len(settings), 2)

    def testCheckCollectsEveryFault(self):
        class Flags(Schema):
            a = Flag("-s")
            b = Flag("-s")
            c = Flag("-cd")

        with self.assertRaises(DuplicateShortError):
            declare(Flags)

    def testDeclarationFaultsAreValueErrors(self):
        class Flags(Schema):
            a = Flag("-ab")

        with self.assertRaises(ValueError):
            declare(Flags)
        self.assertTrue(issubclass(DeclarationError, ValueError))

    def testShadowedAliasWarning(self):
        class Flags(Schema):
            verbose = Flag("-v", type=bool, global_=True)

            class Foo(Command):
                version = Flag("-v", type=bool)

        with self.assertWarns(ShadowedAliasWarning):
            declare(Flags)


class CheckFunctionTest(TestCase):
    """check() on a built forest."""

    def testReturnsEveryFault(self):
        class Valid(Schema):
            a = Flag("-s")

        declarations, _ = declare(Valid)
        self.assertEqual(check(declarations), [])
        self.assertEqual(len(check(declarations * 2)), 1)


if __name__ == "__main__":
    unittest.main()
