"""
Faults module behavioral tests (fault codes, reporting and control signals).

Scope
- Validate that fault codes are unique and attached to every parse error class.
- Validate the "Error: <message>" rendering with and without colors.
- Validate copy.replace() option merging, trigger() and fatal().

Conventions
- Test method names follow CamelCase per project convention.
- Reports go to in-memory rich consoles.
"""

import copy
import io
import unittest
from unittest import TestCase

from rich.console import Console

import flagset.faults
from flagset import (
    DEFAULT_COLORS,
    NO_COLORS,
    CoercionError,
    CommandException,
    FaultCode,
    IntegerOverflowError,
    MissingFlagError,
    PrintedHelp,
    SchemaError,
    UnrecognizedOptionError,
    fatal,
    trigger,
)


def _errors():
    """Every concrete parse error class."""
    pending = [CommandException]
    while pending:
        for subclass in pending.pop().__subclasses__():
            pending.append(subclass)
            if subclass is not CoercionError:
                yield subclass


class TestFaultCodes(TestCase):
    """Codes are stable identifiers, one per parse error."""

    def testCodesUnique(self):
        codes = [error.code for error in _errors()]
        self.assertEqual(len(codes), len(set(codes)))

    def testEveryErrorHasCode(self):
        for error in _errors():
            with self.subTest(error=error.__name__):
                self.assertIsInstance(error.code, FaultCode)

    def testEveryCodeIsUsed(self):
        self.assertEqual({error.code for error in _errors()}, set(FaultCode))

    def testCoercionHierarchy(self):
        self.assertTrue(issubclass(IntegerOverflowError, CoercionError))
        self.assertTrue(issubclass(UnrecognizedOptionError, CoercionError))

    def testSignalsAreNotParseErrors(self):
        self.assertFalse(issubclass(PrintedHelp, CommandException))
        self.assertFalse(issubclass(SchemaError, CommandException))
        self.assertTrue(issubclass(SchemaError, TypeError))


class TestCommandException(TestCase):
    """Message, options and rendering."""

    def testMessage(self):
        fault = MissingFlagError("missing required flag: --name", flag="--name")
        self.assertEqual(str(fault), "missing required flag: --name")
        self.assertEqual(fault.args, ("missing required flag: --name",))
        self.assertEqual(fault.exit_code, 1)

    def testOptionsReadOnly(self):
        fault = MissingFlagError("missing", flag="--name")
        with self.assertRaises(TypeError):
            fault.options["flag"] = "--other"

    def testRichRendering(self):
        text = MissingFlagError("missing required flag: --name").__rich__()
        self.assertEqual(text.plain, "Error: missing required flag: --name")
        self.assertIn("bold red", {str(span.style) for span in text.spans})

    def testRenderingWithoutColors(self):
        text = MissingFlagError("missing", colors=NO_COLORS).__rich__()
        self.assertEqual(text.plain, "Error: missing")
        self.assertFalse(text.spans)

    def testReplaceMergesOptions(self):
        fault = MissingFlagError("missing", flag="--name")
        replaced = copy.replace(fault, command="git add")
        self.assertIsNot(replaced, fault)
        self.assertIs(type(replaced), MissingFlagError)
        self.assertEqual(dict(replaced.options), {"flag": "--name", "command": "git add"})
        self.assertEqual(dict(fault.options), {"flag": "--name"})


class TestReporting(TestCase):
    """trigger() prints once then raises; fatal() exits."""

    def setUp(self):
        self.out = io.StringIO()
        self.console = Console(file=self.out, width=200, color_system=None, force_terminal=False)

    def testTriggerPrintsAndRaises(self):
        with self.assertRaises(MissingFlagError) as context:
            trigger(MissingFlagError("missing required flag: --name"), console=self.console, command="tool")
        self.assertEqual(self.out.getvalue(), "Error: missing required flag: --name\n")
        self.assertEqual(context.exception.options["command"], "tool")

    def testTriggerLogsFaultCode(self):
        with self.assertLogs("flagset", "DEBUG") as logs, self.assertRaises(MissingFlagError):
            trigger(MissingFlagError("missing"), console=self.console, command="tool")
        self.assertIn("fault 21301 (MissingFlagError) at 'tool'", logs.output[-1])

    def testTriggerRejectsPlainExceptions(self):
        with self.assertRaises(TypeError):
            trigger(ValueError("nope"))

    def testFatalExits(self):
        with self.assertRaises(SystemExit) as context:
            fatal("cannot open '%s'", "config.toml", console=self.console)
        self.assertEqual(context.exception.code, 1)
        self.assertEqual(self.out.getvalue(), "Error: cannot open 'config.toml'\n")

    def testFatalMessageWithoutArguments(self):
        with self.assertRaises(SystemExit):
            fatal("100% broken", console=self.console, colors=DEFAULT_COLORS)
        self.assertEqual(self.out.getvalue(), "Error: 100% broken\n")

    def testDefaultConsoleIsStderr(self):
        self.assertTrue(flagset.faults.stderr.stderr)

    def testPrintedHelpSignal(self):
        signal = PrintedHelp("git add")
        self.assertEqual(signal.command, "git add")
        self.assertEqual(signal.exit_code, 0)


if __name__ == "__main__":
    unittest.main()
