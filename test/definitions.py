"""
Definitions module behavioral tests (construction, normalization, immutability).

Scope
- Validate names: long name, short name, environment variable, argument name.
- Validate construction-time default checks per kind, including required/default conflicts.
- Validate alternatives and delimiter rules.
- Validate the read-only surface and the sealed type.

Conventions
- Test method names follow CamelCase per project convention.
- Never pass explicit None for any parameter unless the test is about rejecting it.
"""

from __future__ import annotations

import unittest
from unittest import TestCase

from tiller import (
    ParameterDefinition,
    ParameterKind,
    flag,
    integer,
    string,
    choice,
    string_list,
    integer_list,
    choice_list,
)


class TestNames(TestCase):
    """Behavioral tests for name validation."""

    def testLongNameIsTrimmed(self):
        self.assertEqual(integer("  --max-count ").long_name, "--max-count")

    def testLongNameMustBeDashDelimitedLowerCase(self):
        for name in ("count", "-count", "--Count", "--max_count", "--", "---count", "--count-"):
            with self.subTest(name=name), self.assertRaises(ValueError):
                integer(name)

    def testLongNameMustBeString(self):
        with self.assertRaises(TypeError):
            integer(None)

    def testShortName(self):
        self.assertEqual(flag("--verbose", short_name="-v").short_name, "-v")
        self.assertIsNone(flag("--verbose").short_name)
        for name in ("v", "--v", "-vv", "-1"):
            with self.subTest(name=name), self.assertRaises(ValueError):
                flag("--verbose", short_name=name)

    def testShortNameExplicitNoneRejected(self):
        with self.assertRaises(TypeError):
            flag("--verbose", short_name=None)

    def testEnvironmentVariable(self):
        self.assertEqual(flag("--verbose", environment_variable="TOOL_VERBOSE").environment_variable, "TOOL_VERBOSE")
        for name in ("tool_verbose", "1TOOL", "TOOL-VERBOSE", ""):
            with self.subTest(name=name), self.assertRaises(ValueError):
                flag("--verbose", environment_variable=name)

    def testArgumentName(self):
        self.assertEqual(integer("--count", argument_name="COUNT").argument_name, "COUNT")
        with self.assertRaises(ValueError):
            integer("--count", argument_name="count")

    def testFlagRejectsArgumentName(self):
        with self.assertRaises(TypeError):
            flag("--verbose", argument_name="VERBOSE")


class TestMetadata(TestCase):
    """Behavioral tests for descriptive metadata."""

    def testDescriptionDefaultsToNone(self):
        self.assertIsNone(flag("--verbose").description)

    def testDescriptionIsTrimmed(self):
        self.assertEqual(flag("--verbose", description="  talk more ").description, "talk more")

    def testDescriptionEmptyRejected(self):
        with self.assertRaises(ValueError):
            flag("--verbose", description="   ")

    def testDescriptionExplicitNoneRejected(self):
        with self.assertRaises(TypeError):
            flag("--verbose", description=None)

    def testRequiredIsBoolean(self):
        self.assertIs(integer("--count", required=1).required, True)
        self.assertIs(integer("--count").required, False)

    def testKindFromString(self):
        self.assertIs(ParameterDefinition("integer-list", "--port").kind, ParameterKind.INTEGER_LIST)

    def testUnknownKindRejected(self):
        with self.assertRaises(ValueError):
            ParameterDefinition("float", "--ratio")


class TestDefaults(TestCase):
    """Behavioral tests for construction-time default validation."""

    def testIntegerDefault(self):
        self.assertEqual(integer("--count", default=10).default, 10)
        self.assertEqual(integer("--count", default=0).default, 0)
        self.assertIsNone(integer("--count").default)

    def testIntegerDefaultMustBeInteger(self):
        for default in ("10", 1.5, True):
            with self.subTest(default=default), self.assertRaises(TypeError):
                integer("--count", default=default)

    def testFlagRejectsDefault(self):
        with self.assertRaises(TypeError):
            flag("--verbose", default=True)

    def testRequiredRejectsDefault(self):
        with self.assertRaises(ValueError):
            integer("--count", required=True, default=1)

    def testStringDefaultMustBeString(self):
        with self.assertRaises(TypeError):
            string("--name", default=1)

    def testChoiceDefaultMustBeAlternative(self):
        self.assertEqual(choice("--mode", ("fast", "safe"), default="safe").default, "safe")
        with self.assertRaises(ValueError):
            choice("--mode", ("fast", "safe"), default="reckless")

    def testListDefaultIsTuple(self):
        self.assertEqual(string_list("--tag", default=["a", "b"]).default, ("a", "b"))
        self.assertEqual(integer_list("--port", default=(80,)).default, (80,))

    def testListDefaultElementsAreChecked(self):
        with self.assertRaises(TypeError):
            integer_list("--port", default=[80, "443"])
        with self.assertRaises(ValueError):
            choice_list("--level", ("low", "high"), default=["low", "max"])

    def testListDefaultMustBeSequence(self):
        with self.assertRaises(TypeError):
            string_list("--tag", default="a")


class TestAlternativesAndDelimiter(TestCase):
    """Behavioral tests for alternatives and delimiter rules."""

    def testAlternativesKeepOrder(self):
        self.assertEqual(choice("--mode", ["safe", "fast"]).alternatives, ("safe", "fast"))

    def testAlternativesRequiredForChoices(self):
        with self.assertRaises(TypeError):
            ParameterDefinition(ParameterKind.CHOICE, "--mode")

    def testAlternativesForbiddenElsewhere(self):
        with self.assertRaises(TypeError):
            ParameterDefinition(ParameterKind.STRING, "--mode", alternatives=("a",))

    def testAlternativesDuplicatesRejected(self):
        with self.assertRaises(ValueError):
            choice("--mode", ("fast", "fast"))

    def testAlternativesEmptyRejected(self):
        with self.assertRaises(ValueError):
            choice("--mode", ())

    def testAlternativesMustBeStrings(self):
        with self.assertRaises(TypeError):
            choice("--mode", (1, 2))
        with self.assertRaises(TypeError):
            choice("--mode", "fast")

    def testDelimiter(self):
        self.assertEqual(string_list("--tag", delimiter=";").delimiter, ";")
        self.assertIsNone(string_list("--tag").delimiter)
        with self.assertRaises(ValueError):
            string_list("--tag", delimiter="")
        with self.assertRaises(TypeError):
            string("--tag", delimiter=",")


class TestImmutability(TestCase):
    """Behavioral tests for the read-only surface."""

    def testPropertiesAreReadOnly(self):
        definition = integer("--count")
        with self.assertRaises(AttributeError):
            definition.long_name = "--other"

    def testSealed(self):
        with self.assertRaises(TypeError):
            type("Derived", (ParameterDefinition,), {})

    def testReprOmitsUnsetFields(self):
        text = repr(integer("--count", default=3))
        self.assertTrue(text.startswith("parameter-definition("))
        self.assertIn("long_name='--count'", text)
        self.assertIn("default=3", text)
        self.assertNotIn("short_name", text)

    def testKindHelpers(self):
        self.assertTrue(ParameterKind.CHOICE_LIST.plural)
        self.assertTrue(ParameterKind.CHOICE_LIST.chosen)
        self.assertIs(ParameterKind.INTEGER_LIST.scalar, ParameterKind.INTEGER)
        self.assertIs(ParameterKind.FLAG.scalar, ParameterKind.FLAG)
        self.assertFalse(ParameterKind.STRING.plural)


if __name__ == "__main__":
    unittest.main()
