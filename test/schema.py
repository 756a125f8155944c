"""
Schema module tests (value types, flag metadata, containers).

Scope
- ValueType resolution from python types, list aliases and names.
- Flag metadata sanitization (names, strings, nonempty default).
- Container metaclass: member order, command keywords, nested instances.
- Flag descriptor behavior on schema instances.

Conventions
- Test method names follow CamelCase per project convention.
- Tests use the public API (Schema, Command, Flag, Settings, ValueType).
"""

from __future__ import annotations

import unittest
from unittest import TestCase

from flagship import Schema, Command, Flag, Settings, ValueType, Unset


class ValueTypeTest(TestCase):
    """Resolution and properties of ValueType."""

    def testOfPythonTypes(self):
        self.assertIs(ValueType.of(bool), ValueType.BOOL)
        self.assertIs(ValueType.of(int), ValueType.INT)
        self.assertIs(ValueType.of(float), ValueType.FLOAT64)
        self.assertIs(ValueType.of(str), ValueType.STRING)

    def testOfListAliases(self):
        self.assertIs(ValueType.of(list[int]), ValueType.INT_LIST)
        self.assertIs(ValueType.of(list[str]), ValueType.STRING_LIST)
        self.assertIs(ValueType.of(list[ValueType.UINT64]), ValueType.UINT64_LIST)

    def testOfNamesAndMembers(self):
        self.assertIs(ValueType.of("uint64"), ValueType.UINT64)
        self.assertIs(ValueType.of(ValueType.INT64), ValueType.INT64)

    def testOfUnsupported(self):
        self.assertIs(ValueType.of(dict), Unset)
        self.assertIs(ValueType.of(list[list[int]]), Unset)
        self.assertIs(ValueType.of(dict[str, int]), Unset)
        self.assertIs(ValueType.of("int32"), Unset)

    def testRepeatableAndScalar(self):
        self.assertTrue(ValueType.BOOL_LIST.repeatable)
        self.assertFalse(ValueType.BOOL.repeatable)
        self.assertIs(ValueType.FLOAT64_LIST.scalar, ValueType.FLOAT64)
        self.assertIs(ValueType.STRING.scalar, ValueType.STRING)

    def testZeroValues(self):
        self.assertIs(ValueType.BOOL.zero, False)
        self.assertEqual(ValueType.UINT.zero, 0)
        self.assertEqual(ValueType.FLOAT64.zero, 0.0)
        self.assertEqual(ValueType.STRING.zero, "")
        self.assertEqual(ValueType.INT_LIST.zero, [])
        self.assertIsNot(ValueType.INT_LIST.zero, ValueType.INT_LIST.zero)


class FlagTest(TestCase):
    """Flag metadata sanitization."""

    def testShortAndLongNames(self):
        flag = Flag("-s", "--string")
        self.assertEqual(flag.short, "s")
        self.assertEqual(flag.long, "string")

    def testNamesAreCleaned(self):
        flag = Flag("-x", "--out put!")
        self.assertEqual(flag.long, "output")

    def testNamesAreRequired(self):
        with self.assertRaises(TypeError):
            Flag()

    def testNamesMustBeDashed(self):
        with self.assertRaises(ValueError):
            Flag("string")

    def testSingleShortAndLong(self):
        with self.assertRaises(ValueError):
            Flag("-a", "-b")
        with self.assertRaises(ValueError):
            Flag("--alpha", "--beta")

    def testNameWithoutUsableCharacters(self):
        with self.assertRaises(ValueError):
            Flag("--!!")

    def testDefaultMustBeString(self):
        with self.assertRaises(TypeError):
            Flag("-i", type=int, default=1)

    def testEmptyEnvAndDelimiterRejected(self):
        with self.assertRaises(ValueError):
            Flag("-s", env=" ")
        with self.assertRaises(ValueError):
            Flag("-s", delimiter="")

    def testSpaceDelimiterAccepted(self):
        self.assertEqual(Flag("-s", type=list[str], delimiter=" ").delimiter, " ")

    def testRequiredImpliesNonempty(self):
        self.assertTrue(Flag("-r", required=True).nonempty)
        self.assertFalse(Flag("-r", required=True, nonempty=False).nonempty)
        self.assertFalse(Flag("-r").nonempty)

    def testTypeNameForMessages(self):
        self.assertEqual(Flag.__typename__, "flag")


class ContainerTest(TestCase):
    """Schema/Command containers and the Flag descriptor."""

    def testMembersInDefinitionOrder(self):
        class Flags(Schema):
            b = Flag("-b", type=bool)

            class Foo(Command):
                x = Flag("-x")

            a = Flag("-a")
            settings = Settings(allow_unknown_arg=True)

        self.assertEqual(list(Flags.__members__), ["b", "Foo", "a", "settings"])

    def testCommandKeywords(self):
        class Flags(Schema):
            class Foo(Command, command="f.o-o", descr=" the foo ", required=True, nonempty=True):
                pass

        self.assertEqual(Flags.Foo.__command__, "f.o-o")
        self.assertEqual(Flags.Foo.__descr__, "the foo")
        self.assertTrue(Flags.Foo.__required__)
        self.assertTrue(Flags.Foo.__nonempty__)
        self.assertFalse(Flags.Foo.__global__)

    def testUnexpectedKeywordRejected(self):
        with self.assertRaises(TypeError):
            class Foo(Command, hidden=True):
                pass

    def testInheritedMembers(self):
        class Base(Schema):
            a = Flag("-a")

        class Flags(Base):
            b = Flag("-b")

        self.assertEqual(list(Flags.__members__), ["a", "b"])

    def testDescriptorZeroValues(self):
        class Flags(Schema):
            string = Flag("-s")
            ints = Flag("-i", type=list[int])
            flag = Flag("-f", type=bool)

        flags = Flags()
        self.assertEqual(flags.string, "")
        self.assertEqual(flags.ints, [])
        self.assertIs(flags.flag, False)
        self.assertIsInstance(Flags.string, Flag)

    def testDescriptorStoresValue(self):
        class Flags(Schema):
            string = Flag("-s")

        flags = Flags()
        flags.string = "foo"
        self.assertEqual(flags.string, "foo")
        self.assertEqual(Flags().string, "")

    def testNestedCommandInstances(self):
        class Flags(Schema):
            class Foo(Command):
                class Bar(Command):
                    string = Flag("-s")

        flags = Flags()
        self.assertIsInstance(flags.Foo, Flags.Foo)
        self.assertIsInstance(flags.Foo.Bar, Flags.Foo.Bar)
        self.assertEqual(flags.Foo.Bar.string, "")

    def testAttributeNames(self):
        class Flags(Schema):
            string = Flag("-s")
            settings = Settings()

        self.assertEqual(Flags.string.attribute, "string")
        self.assertEqual(Flags.settings.attribute, "settings")


if __name__ == "__main__":
    unittest.main()
