"""
Flag query behavioral tests (has/get over token sequences, flag specs).

Conventions
- Test method names follow CamelCase per project convention.
"""
import sys
import unittest
from unittest import TestCase, mock

from clapper import parse, Arguments, InvalidFlagSpecError, ConfigurationError


class TestHas(TestCase):
    """Presence checks."""

    def testShortFlagInsideBundle(self):
        arguments = parse(["-aBc"])
        self.assertTrue(arguments.has("-B"))
        self.assertTrue(arguments.has("-c"))

    def testShortFlagIsCaseSensitive(self):
        self.assertFalse(parse(["-aBc"]).has("-b"))

    def testLongFlagWithInlineValue(self):
        self.assertTrue(parse(["--output=x"]).has("--output"))

    def testPairMatchesEitherSpelling(self):
        self.assertTrue(parse(["-v"]).has("--verbose", "-v"))
        self.assertTrue(parse(["--verbose"]).has("--verbose", "-v"))
        self.assertFalse(parse(["--quiet"]).has("--verbose", "-v"))

    def testNothingAfterEndOfOptions(self):
        self.assertFalse(parse(["--", "--verbose"]).has("--verbose"))


class TestGet(TestCase):
    """Value lookups."""

    def testLastOccurrenceWins(self):
        self.assertEqual(parse(["--add", "3", "--add=5"]).get("--add"), "5")

    def testRescanningIsIdempotent(self):
        arguments = parse(["--add", "3", "--add=5"])
        self.assertEqual(arguments.get("--add"), arguments.get("--add"))

    def testCalculator(self):
        arguments = parse("5 --add 3 -m2 --divide=4")
        self.assertEqual(arguments.get("--add", "-a"), "3")
        self.assertEqual(arguments.get("--multiply", "-m"), "2")
        self.assertEqual(arguments.get("--divide", "-d"), "4")
        self.assertIsNone(arguments.get("--subtract", "-s"))

    def testLongFlagWithoutFollowingText(self):
        self.assertEqual(parse(["--name", "--other"]).get("--name"), "")
        self.assertEqual(parse(["--name"]).get("--name"), "")

    def testShortFlagTakesAttachedRest(self):
        self.assertEqual(parse(["-ofile.txt"]).get("-o"), "file.txt")
        self.assertEqual(parse(["-o"]).get("-o"), "")

    def testShortFlagMustOpenBundle(self):
        self.assertIsNone(parse(["-ab"]).get("-b"))

    def testDefinedValueWhenPresent(self):
        arguments = parse(["--level", "3", "-x"])
        for spec in ("--level", "-x"):
            if arguments.has(spec):
                self.assertIsNotNone(arguments.get(spec))


class TestSpecs(TestCase):
    """Flag spec sanitization."""

    def testSpecWithoutDash(self):
        with self.assertRaises(InvalidFlagSpecError):
            parse([]).has("verbose")

    def testShortSpecTooLong(self):
        with self.assertRaises(InvalidFlagSpecError):
            parse([]).get("--verbose", "-vv")

    def testShortSpecFirstInPair(self):
        with self.assertRaises(InvalidFlagSpecError):
            parse([]).has("-v", "-w")

    def testNonStringSpec(self):
        with self.assertRaises(InvalidFlagSpecError):
            parse([]).has(1)

    def testInvalidSpecIsConfigurationError(self):
        with self.assertRaises(ConfigurationError):
            parse([]).has("v")


class TestArguments(TestCase):
    """Arguments view."""

    def testRawAndTokens(self):
        arguments = Arguments(["-v", "x"])
        self.assertEqual(arguments.raw, ("-v", "x"))
        self.assertEqual(len(arguments.tokens), 2)

    def testParseReadsProcessArguments(self):
        with mock.patch.object(sys, "argv", ["prog", "--verbose"]):
            arguments = parse()
        self.assertTrue(arguments.has("--verbose"))
        self.assertTrue(arguments.available)

    def testUnavailableWithoutArgv(self):
        with mock.patch.object(sys, "argv", []):
            self.assertFalse(Arguments([]).available)


if __name__ == "__main__":
    unittest.main()
