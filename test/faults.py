"""
Fault tests (codes, messages, rendering, trigger policy).

Scope
- FaultCode identifiers are unique and normalized through __main__.__codes__.
- CommandException keeps its message and freezes its options.
- trigger() raises or renders according to throw_on_error and merges options.

Conventions
- Test method names follow CamelCase per project convention.
- Rendering goes to the shared stderr console, captured with redirect_stderr.
"""
import io
import unittest
from contextlib import redirect_stderr
from unittest import TestCase
from unittest.mock import patch

from cmdtree import Command
from cmdtree.faults import *


class TestFaultCode(TestCase):

    def testCodesAreUnique(self):
        values = [member.value for member in FaultCode]
        self.assertEqual(len(values), len(set(values)))

    def testEveryFaultHasItsCode(self):
        for fault, code in (
                (MissingRequiredOptionError, FaultCode.MISSING_REQUIRED_OPTION),
                (RepeatedOptionError, FaultCode.REPEATED_OPTION),
                (InvalidOptionValueError, FaultCode.INVALID_OPTION_VALUE),
                (MissingOptionArgumentError, FaultCode.MISSING_OPTION_ARGUMENT),
                (UnknownOptionError, FaultCode.UNKNOWN_OPTION),
                (UnknownSubcommandError, FaultCode.UNKNOWN_SUBCOMMAND),
                (DuplicateOptionError, FaultCode.DUPLICATE_OPTION),
                (DuplicateSubcommandError, FaultCode.DUPLICATE_SUBCOMMAND),
                (ConflictingSwitchesError, FaultCode.CONFLICTING_SWITCHES),
                (SwitchSubcommandConflictError, FaultCode.SWITCH_SUBCOMMAND_CONFLICT),
                (StateError, FaultCode.STATE_ERROR),
        ):
            self.assertIs(fault.code, code)
            self.assertTrue(issubclass(fault, CommandException))

    def testNormalizeDefaultsToNumber(self):
        self.assertEqual(FaultCode.UNKNOWN_OPTION.normalize(), "21101")

    def testNormalizeHonoursHostCodes(self):
        main = __import__("__main__")
        with patch.object(main, "__codes__", {FaultCode.UNKNOWN_OPTION: "E-OPT"}, create=True):
            self.assertEqual(FaultCode.UNKNOWN_OPTION.normalize(), "E-OPT")
            self.assertEqual(FaultCode.STATE_ERROR.normalize(), "21133")

    def testTitle(self):
        self.assertEqual(FaultCode.SWITCH_SUBCOMMAND_CONFLICT.title, "switch subcommand conflict")


class TestCommandException(TestCase):

    def testMessageAndOptions(self):
        error = UnknownOptionError("No such option: --x", token="--x")
        self.assertEqual(str(error), "No such option: --x")
        self.assertEqual(error.options["token"], "--x")
        with self.assertRaises(TypeError):
            error.options["token"] = "--y"

    def testReplaceMergesOptions(self):
        error = UnknownOptionError("No such option: --x", token="--x")
        replica = error.__replace__(hint="did you mean --y?")
        self.assertIsNot(replica, error)
        self.assertIsInstance(replica, UnknownOptionError)
        self.assertEqual(dict(replica.options), {"token": "--x", "hint": "did you mean --y?"})

    def testRenderUsesRootName(self):
        parent = Command("parent")
        kid = parent.add_subcommand(name="kid")
        stderr = io.StringIO()
        with redirect_stderr(stderr):
            trigger(UnknownSubcommandError("No such subcommand: pop", command=kid), throw_on_error=False)
        output = stderr.getvalue()
        self.assertIn("parent", output)
        self.assertIn("21103", output)
        self.assertIn("Unknown Subcommand", output)
        self.assertIn("No such subcommand: pop", output)

    def testRenderShowsHint(self):
        stderr = io.StringIO()
        with redirect_stderr(stderr):
            trigger(UnknownOptionError("No such option: --strng"), throw_on_error=False, hint="did you mean --string?")
        self.assertIn("did you mean --string?", stderr.getvalue())


class TestTrigger(TestCase):

    def testRaisesWhenThrowing(self):
        with self.assertRaises(StateError) as context:
            trigger(StateError("frozen"))
        self.assertEqual(str(context.exception), "frozen")

    def testRaisesMergedReplica(self):
        error = StateError("frozen")
        with self.assertRaises(StateError) as context:
            trigger(error, throw_on_error=True, hint="parse later")
        self.assertIsNot(context.exception, error)
        self.assertEqual(context.exception.options["hint"], "parse later")

    def testPrintsWhenNotThrowing(self):
        stderr = io.StringIO()
        with redirect_stderr(stderr):
            self.assertIsNone(trigger(StateError("frozen"), throw_on_error=False))
        self.assertIn("frozen", stderr.getvalue())

    def testRejectsPlainObjects(self):
        with self.assertRaises(TypeError):
            trigger(ValueError("nope"))


if __name__ == "__main__":
    unittest.main()
