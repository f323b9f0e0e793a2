"""
Fault behavioral tests (taxonomy, replacement, triggering, rendering).

Conventions
- Test method names follow CamelCase per project convention.
"""
import copy
import io
import sys
import types
import unittest
import warnings
from unittest import TestCase, mock

from rich.console import Console

from clapper import Command
from clapper.faults import *


def render(fault, **options):
    stream = io.StringIO()
    Console(file=stream, width=120).print(copy.replace(fault, **options))
    return stream.getvalue()


class TestTaxonomy(TestCase):
    """Kinds and codes."""

    def testKindFollowsCodeRange(self):
        self.assertIs(FaultCode.UNREACHABLE.kind, ErrorKind.LIBRARY_BUG)
        self.assertIs(FaultCode.INVALID_FLAG_SPEC.kind, ErrorKind.DEVELOPER_INDUCED)
        self.assertIs(FaultCode.UNKNOWN_SWITCH.kind, ErrorKind.INVALID_USER_INPUT)

    def testClassKindsMatchCodes(self):
        for cls in (
            UnreachableError,
            ConfigurationError,
            InvalidFlagSpecError,
            SubcommandRequiredError,
            SubcommandLongFlagValueError,
            UnknownSwitchError,
            FlagAssignmentError,
            MissingInlineValueError,
            NotEnoughValuesError,
            TooManyValuesError,
            MissingArgumentError,
            UnexpectedPositionalError,
        ):
            with self.subTest(cls=cls.__name__):
                self.assertIs(cls.kind, cls.code.kind)

    def testInvalidFlagSpecIsTypeError(self):
        self.assertTrue(issubclass(InvalidFlagSpecError, TypeError))

    def testNormalizeUsesHostCodes(self):
        self.assertEqual(FaultCode.UNKNOWN_SWITCH.normalize(), "12201")
        main = types.SimpleNamespace(__codes__={FaultCode.UNKNOWN_SWITCH: "E-FLAG"})
        with mock.patch.dict(sys.modules, {"__main__": main}):
            self.assertEqual(FaultCode.UNKNOWN_SWITCH.normalize(), "E-FLAG")

    def testGetdoc(self):
        main = types.SimpleNamespace(__docs__={FaultCode.TOO_MANY_VALUES: "see the manual"})
        with mock.patch.dict(sys.modules, {"__main__": main}):
            self.assertEqual(getdoc(FaultCode.TOO_MANY_VALUES), "see the manual")
            self.assertIsNone(getdoc(FaultCode.UNKNOWN_SWITCH))
        with self.assertRaises(TypeError):
            getdoc(12201)


class TestTrigger(TestCase):
    """Surfacing faults."""

    def testReplaceMergesOptions(self):
        fault = UnknownSwitchError("unknown flag", hint="a")
        replaced = copy.replace(fault, hint="b", position=3)
        self.assertEqual(replaced.options["hint"], "b")
        self.assertEqual(replaced.options["position"], 3)
        self.assertEqual(fault.options["hint"], "a")
        self.assertIsInstance(replaced, UnknownSwitchError)

    def testOptionsAreReadOnly(self):
        with self.assertRaises(TypeError):
            UnknownSwitchError("x").options["hint"] = "y"

    def testRaisesOutsideShell(self):
        with self.assertRaises(UnknownSwitchError):
            trigger(UnknownSwitchError("unknown flag"))

    def testUserErrorExitsInShell(self):
        with mock.patch("clapper.faults.console", Console(file=io.StringIO())):
            with self.assertRaises(SystemExit) as context:
                trigger(MissingArgumentError("missing"), shell=True)
        self.assertEqual(context.exception.code, 1)

    def testDeveloperErrorRaisesInShell(self):
        with self.assertRaises(ConfigurationError):
            trigger(ConfigurationError("broken"), shell=True)

    def testWarningOutsideShell(self):
        with warnings.catch_warnings(record=True) as caught:
            warnings.simplefilter("always")
            trigger(EmptyInlineValueWarning("empty"))
        self.assertEqual(len(caught), 1)
        self.assertIs(caught[0].category, EmptyInlineValueWarning)

    def testWarningPrintsInShell(self):
        stream = io.StringIO()
        with mock.patch("clapper.faults.console", Console(file=stream, width=120)):
            trigger(EmptyInlineValueWarning("empty"), shell=True)
        self.assertIn("empty", stream.getvalue())

    def testTriggerRejectsPlainObjects(self):
        with self.assertRaises(TypeError):
            trigger(ValueError("x"))


class TestRendering(TestCase):
    """Rich rendering."""

    def testHeaderMessageAndHint(self):
        output = render(UnknownSwitchError("unknown flag '--x' at first position", hint="did you mean '--y'?"))
        self.assertIn("[ clapper — 12201 | Unknown Flag ]", output)
        self.assertIn("unknown flag '--x' at first position", output)
        self.assertIn("→ did you mean '--y'?", output)

    def testToolNameInHeader(self):
        self.assertIn("[ tool —", render(UnknownSwitchError("x"), tool=Command("tool")))

    def testHostProgramName(self):
        with mock.patch.dict(sys.modules, {"__main__": types.SimpleNamespace(__prog__="prog")}):
            self.assertIn("[ prog —", render(UnknownSwitchError("x")))

    def testFancyPanel(self):
        output = render(UnknownSwitchError("x"), fancy=True)
        self.assertIn("╭", output)


if __name__ == "__main__":
    unittest.main()
