"""
Parser behavioral tests (tokens, values, subcommands, outcomes).

Scope
- Validate flag counting (repeated and stacked) and duplicate rejection.
- Validate option value forms (--opt=value, --opt value, -o value), defaults and escapes.
- Validate positional filling, subcommand descent and default-command chaining.
- Validate the "--" terminator and in-place advancing of a list argv.
- Validate input faults (messages, codes, suggestions) and evaluate() outcomes.
- Validate triggers and validators running during a parse.

Conventions
- Test method names follow CamelCase per project convention.
- argv[0] is always the program name.
"""

from __future__ import annotations

import unittest
from unittest import TestCase

from helmsman import Program, Command, Flag, Option, Argument, Status, parse, evaluate
from helmsman.faults import *


class TestFlags(TestCase):
    """Behavioral tests for flag occurrences."""

    def setUp(self):
        self.program = (
            Program("prog")
            .add(Flag("-v", "--verbose", repeating=True))
            .add(Flag("-d", "--debug"))
            .add(Option("-o", "--output"))
        )

    def testZeroOccurrences(self):
        result = self.program.parse(["prog"])
        self.assertFalse(result.flag_is_set("debug"))
        self.assertEqual(result.occurrences_of("debug"), 0)

    def testOneOccurrence(self):
        result = self.program.parse(["prog", "--debug"])
        self.assertTrue(result.flag_is_set("debug"))
        self.assertEqual(result.occurrences_of("debug"), 1)

    def testRepeatingCountsEveryForm(self):
        result = self.program.parse(["prog", "-v", "--verbose", "-vvv"])
        self.assertEqual(result.occurrences_of("verbose"), 5)

    def testNonRepeatingTwiceRaises(self):
        for argv in (["prog", "-d", "-d"], ["prog", "-d", "--debug"], ["prog", "-dd"]):
            with self.subTest(argv=argv):
                with self.assertRaises(DuplicatedSwitchError):
                    self.program.parse(argv)

    def testFlagWithValueRaises(self):
        with self.assertRaises(FlagAssignmentError) as context:
            self.program.parse(["prog", "--debug=yes"])
        self.assertEqual(context.exception.message, "flag --debug at first position cannot accept a value")

    def testDistinctLettersAreNotStacked(self):
        with self.assertRaises(UnknownSwitchError):
            self.program.parse(["prog", "-vd"])

    def testStackedOptionLetterRaises(self):
        with self.assertRaises(MalformedTokenError):
            self.program.parse(["prog", "-oo"])


class TestOptions(TestCase):
    """Behavioral tests for option values."""

    def setUp(self):
        self.program = (
            Program("prog")
            .add(Option("-o", "--opt"))
            .add(Option("-t", "--tag", repeating=True, default=["x", "y"]))
            .add(Option("--mode", default="reee"))
            .add(Argument("rest").optional())
        )

    def testValueForms(self):
        for argv in (["prog", "--opt=value"], ["prog", "--opt", "value"], ["prog", "-o", "value"], ["prog", "-o=value"]):
            with self.subTest(argv=argv):
                self.assertEqual(self.program.parse(argv).option_value("opt"), "value")

    def testValueMayContainEquals(self):
        self.assertEqual(self.program.parse(["prog", "--opt=a=b"]).option_value("opt"), "a=b")

    def testEmptyInlineValue(self):
        self.assertEqual(self.program.parse(["prog", "--opt="]).option_values("opt"), [""])

    def testDefaultInstalled(self):
        result = self.program.parse(["prog"])
        self.assertEqual(result.option_value("mode"), "reee")
        self.assertEqual(result.option_values("tag"), ["x", "y"])
        self.assertIsNone(result.option_value("opt"))
        self.assertEqual(result.option_value("opt", "fallback"), "fallback")

    def testExplicitValueOverridesDefault(self):
        self.assertEqual(self.program.parse(["prog", "--mode", "fast"]).option_value("mode"), "fast")

    def testRepeatingDefaultsDoNotMix(self):
        result = self.program.parse(["prog", "-t", "a", "--tag=b"])
        self.assertEqual(result.option_values("tag"), ["a", "b"])

    def testNonRepeatingTwiceRaises(self):
        with self.assertRaises(DuplicatedSwitchError):
            self.program.parse(["prog", "--opt=a", "-o", "b"])

    def testMissingValueAtEnd(self):
        with self.assertRaises(MissingOptionValueError) as context:
            self.program.parse(["prog", "--opt"])
        self.assertEqual(context.exception.message, "option --opt at first position is missing a value")

    def testSwitchIsNotTakenAsValue(self):
        with self.assertRaises(MissingOptionValueError) as context:
            self.program.parse(["prog", "--opt", "-5"])
        self.assertIn("prefix it with '\\\\'", context.exception.message)

    def testEscapedValue(self):
        result = self.program.parse(["prog", "--opt", "\\-5", "\\-x"])
        self.assertEqual(result.option_value("opt"), "-5")
        self.assertEqual(result.arg_value("rest"), "-x")

    def testEscapeDisabled(self):
        result = parse(self.program, ["prog", "--opt", "\\-5"], escape=None)
        self.assertEqual(result.option_value("opt"), "\\-5")

    def testLoneDashIsPositional(self):
        self.assertEqual(self.program.parse(["prog", "-"]).arg_value("rest"), "-")

    def testRequiredOptionMissing(self):
        program = Program("prog").add(Option("--name", required=True))
        with self.assertRaises(MissingOptionError) as context:
            program.parse(["prog"])
        self.assertEqual(context.exception.message, "missing required option name")

    def testStringArgvIsSplit(self):
        result = self.program.parse("prog --opt 'two words'")
        self.assertEqual(result.option_value("opt"), "two words")


class TestArguments(TestCase):
    """Behavioral tests for positional arguments."""

    def setUp(self):
        self.program = (
            Program("cp")
            .add(Argument("src"))
            .add(Argument("dst").optional())
            .add(Argument("extra").repeating().default(["z"]))
        )

    def testFilledInOrder(self):
        result = self.program.parse(["cp", "a", "b", "c", "d"])
        self.assertEqual(result.arg_value("src"), "a")
        self.assertEqual(result.arg_value("dst"), "b")
        self.assertEqual(result.arg_values("extra"), ["c", "d"])

    def testDefaults(self):
        result = self.program.parse(["cp", "a"])
        self.assertIsNone(result.arg_value("dst"))
        self.assertEqual(result.arg_values("extra"), ["z"])

    def testMissingRequired(self):
        with self.assertRaises(MissingArgumentError) as context:
            self.program.parse(["cp"])
        self.assertEqual(context.exception.message, "missing required argument src")

    def testExcessiveParameter(self):
        program = Program("cat").add(Argument("file"))
        with self.assertRaises(UnexpectedArgumentError) as context:
            program.parse(["cat", "a", "b"])
        self.assertEqual(context.exception.message, "unknown (excessive) parameter b at second position")
        self.assertEqual(context.exception.options["index"], 2)

    def testSwitchesBetweenArguments(self):
        program = Program("cp").add(Argument("src")).add(Argument("dst")).add(Flag("-f", "--force"))
        result = program.parse(["cp", "a", "-f", "b"])
        self.assertEqual((result.arg_value("src"), result.arg_value("dst")), ("a", "b"))
        self.assertTrue(result.flag_is_set("force"))

    def testDefaultKeywordFillsMissingArgument(self):
        result = Program("ls").add(Argument("dir", default=".")).parse(["ls"])
        self.assertEqual(result.arg_value("dir"), ".")


class TestSubcommands(TestCase):
    """Behavioral tests for subcommand descent."""

    def setUp(self):
        self.program = (
            Program("prog")
            .add(Flag("-v", "--verbose"))
            .add(Argument("x"))
            .add(Command("a"))
            .add(Command("b").add(Command("c").add(Option("--depth"))))
        )

    def testHierarchy(self):
        result = self.program.parse(["prog", "x", "b", "c"])
        self.assertEqual(result.arg_values("x"), ["x"])
        self.assertEqual(result.child.name, "b")
        self.assertEqual(result.child.child.name, "c")
        self.assertIsNone(result.child.child.child)
        self.assertIs(result.child.child.parent, result.child)

    def testChildSeesAncestorValues(self):
        result = self.program.parse(["prog", "-v", "x", "b", "c", "--depth", "2"])
        leaf = result.child.child
        self.assertTrue(leaf.flag_is_set("verbose"))
        self.assertEqual(leaf.option_value("depth"), "2")
        self.assertIsNone(result.option_value("depth"))

    def testMissingSubcommand(self):
        with self.assertRaises(MissingCommandError) as context:
            self.program.parse(["prog", "x"])
        self.assertIs(context.exception.command, self.program)

    def testUnknownSubcommandSuggests(self):
        with self.assertRaises(UnknownCommandError) as context:
            self.program.parse(["prog", "x", "bb"])
        fault = context.exception
        self.assertEqual(fault.message, "unknown command 'bb' at second position (did you mean 'b'?)")
        self.assertEqual(fault.options["suggestion"], "b")

    def testOptionOfSubcommandIsUnknownAtParent(self):
        with self.assertRaises(UnknownSwitchError):
            self.program.parse(["prog", "--depth", "2", "x", "b", "c"])

    def testOnDispatch(self):
        seen = []
        result = self.program.parse(["prog", "x", "a"])
        result.on("a", lambda child: seen.append(child.name)).on("b", lambda child: seen.append("wrong"))
        self.assertEqual(seen, ["a"])


class TestDefaultCommands(TestCase):
    """Behavioral tests for default subcommand chaining."""

    def setUp(self):
        self.inner = Command("list").add(Flag("-a", "--all"))
        self.outer = Command("remote").add(self.inner).add(Command("add")).default_command("list")
        self.program = Program("git").add(self.outer).add(Command("init")).default_command("remote")

    def testChaining(self):
        result = self.program.parse(["git"])
        self.assertEqual(result.child.name, "remote")
        self.assertEqual(result.child.child.name, "list")

    def testDefaultFlagsReachableFromParent(self):
        result = self.program.parse(["git", "--all"])
        leaf = result.child.child
        self.assertTrue(leaf.flag_is_set("all"))

    def testExplicitCommandWins(self):
        result = self.program.parse(["git", "init"])
        self.assertEqual(result.child.name, "init")

    def testOwnOptionShadowsDefaultFlag(self):
        program = (
            Program("p")
            .add(Option("-a", "--alpha"))
            .add(Command("sub").add(Flag("-a", "--all")))
            .default_command("sub")
        )
        result = program.parse(["p", "-a", "x"])
        self.assertEqual(result.option_value("alpha"), "x")
        self.assertEqual(result.child.name, "sub")
        self.assertFalse(result.child.flag_is_set("all"))

    def testOwnFlagShadowsDefaultOption(self):
        program = (
            Program("p")
            .add(Flag("-q", "--quiet"))
            .add(Command("sub").add(Option("-q", "--query")))
            .default_command("sub")
        )
        result = program.parse(["p", "-q"])
        self.assertTrue(result.flag_is_set("quiet"))
        self.assertIsNone(result.child.option_value("query"))

    def testStackedOwnOptionRejected(self):
        program = (
            Program("p")
            .add(Option("-a", "--alpha"))
            .add(Command("sub").add(Flag("-a", "--all", repeating=True)))
            .default_command("sub")
        )
        with self.assertRaises(MalformedTokenError):
            program.parse(["p", "-aa"])


class TestBorrowedSwitches(TestCase):
    """Behavioral tests for switches resolved through the default subcommand."""

    def setUp(self):
        self.program = (
            Program("git")
            .add(Command("list").add(Option("--sort", default="date").accepts(["date", "title"])))
            .add(Command("add").add(Argument("path").optional()))
            .default_command("list")
        )

    def testDefaultOptionReachableFromParent(self):
        result = self.program.parse(["git", "--sort", "title"])
        self.assertEqual(result.child.name, "list")
        self.assertEqual(result.child.option_value("sort"), "title")

    def testDefaultOptionStillDefaulted(self):
        result = self.program.parse(["git"])
        self.assertEqual(result.child.option_value("sort"), "date")

    def testDefaultOptionValidatedAtOwner(self):
        with self.assertRaises(ValidationError) as context:
            self.program.parse(["git", "--sort", "size"])
        self.assertEqual(context.exception.command.name, "list")

    def testNamingTheDefaultKeepsSwitch(self):
        result = self.program.parse(["git", "--sort", "title", "list"])
        self.assertEqual(result.child.option_value("sort"), "title")

    def testSiblingCommandRejectsSwitch(self):
        with self.assertRaises(UnknownSwitchError) as context:
            self.program.parse(["git", "--sort", "bogus", "add"])
        fault = context.exception
        self.assertEqual(fault.message, "--sort at first position belongs to command 'list', not to 'add'")
        self.assertEqual(fault.options["input"], "--sort")
        self.assertEqual(fault.options["index"], 1)
        self.assertEqual(fault.command.name, "git")

    def testSiblingCommandRejectsInlineSwitch(self):
        outcome = self.program.evaluate(["git", "--sort=title", "add", "x"])
        self.assertIs(outcome.status, Status.FAILURE)
        self.assertIsInstance(outcome.fault, UnknownSwitchError)
        self.assertIn("--sort at first position", outcome.fault.message)


class TestTerminator(TestCase):
    """Behavioral tests for "--" and argv advancing."""

    def setUp(self):
        self.program = (
            Program("run")
            .add(Flag("-q", "--quiet"))
            .add(Argument("target"))
        )

    def testRestIsVerbatim(self):
        argv = ["run", "app", "--", "--quiet", "x", "--"]
        result = self.program.parse(argv)
        self.assertEqual(result.rest, ["--quiet", "x", "--"])
        self.assertFalse(result.flag_is_set("quiet"))
        self.assertEqual(argv, ["--quiet", "x", "--"])

    def testArgvFullyConsumed(self):
        argv = ["run", "-q", "app"]
        self.program.parse(argv)
        self.assertEqual(argv, [])

    def testTupleArgvIsLeftAlone(self):
        argv = ("run", "app", "--", "x")
        self.assertEqual(self.program.parse(argv).rest, ["x"])

    def testRestAtSubcommandLevel(self):
        program = Program("tool").add(Command("exec").add(Argument("cmd")))
        result = program.parse(["tool", "exec", "ls", "--", "-la"])
        self.assertEqual(result.rest, [])
        self.assertEqual(result.child.rest, ["-la"])

    def testRequiredStillCheckedBeforeTerminator(self):
        with self.assertRaises(MissingArgumentError):
            self.program.parse(["run", "--", "app"])


class TestSuggestions(TestCase):
    """Behavioral tests for "did you mean" hints."""

    def testUnknownOptionSuggestsClosest(self):
        program = Program("prog").add(Option("--test"))
        with self.assertRaises(UnknownSwitchError) as context:
            program.parse(["prog", "--tes", "1"])
        fault = context.exception
        self.assertIn("did you mean --test?", fault.message)
        self.assertEqual(fault.options["suggestion"], "--test")
        self.assertEqual(fault.code, FaultCode.UNKNOWN_SWITCH)

    def testUnknownShortWithoutSuggestion(self):
        program = Program("prog").add(Flag("-x"))
        with self.assertRaises(UnknownSwitchError) as context:
            program.parse(["prog", "-zzz"])
        self.assertNotIn("did you mean", context.exception.message)


class TestHelpAndVersion(TestCase):
    """Behavioral tests for help/version short-circuits."""

    def setUp(self):
        self.sub = Command("build").add(Argument("target"))
        self.program = Program("tool").add(Argument("mode")).add(self.sub)

    def testHelpSkipsRequiredChecks(self):
        outcome = self.program.evaluate(["tool", "--help"])
        self.assertIs(outcome.status, Status.HELP)
        self.assertIs(outcome.command, self.program)

    def testSubcommandHelp(self):
        outcome = self.program.evaluate(["tool", "m", "build", "-h"])
        self.assertIs(outcome.status, Status.HELP)
        self.assertIs(outcome.command, self.sub)
        self.assertEqual(outcome.result.child.name, "build")

    def testVersion(self):
        outcome = self.program.evaluate(["tool", "--version"])
        self.assertIs(outcome.status, Status.VERSION)

    def testParseReturnsPartialTree(self):
        result = self.program.parse(["tool", "--help"])
        self.assertTrue(result.flag_is_set("help"))
        self.assertIsNone(result.child)


class TestEvaluate(TestCase):
    """Behavioral tests for evaluate() outcomes."""

    def setUp(self):
        self.child = Command("get").add(Argument("key").accepts(["a", "b"]))
        self.program = Program("kv").add(self.child)

    def testSuccess(self):
        outcome = evaluate(self.program, ["kv", "get", "a"])
        self.assertIs(outcome.status, Status.SUCCESS)
        self.assertIs(outcome.command, self.child)
        self.assertIsNone(outcome.fault)
        self.assertEqual(outcome.result.child.arg_value("key"), "a")

    def testFailureCarriesFailingCommand(self):
        outcome = evaluate(self.program, ["kv", "get", "c"])
        self.assertIs(outcome.status, Status.FAILURE)
        self.assertIsNone(outcome.result)
        self.assertIs(outcome.command, self.child)
        self.assertIsInstance(outcome.fault, ValidationError)
        self.assertIs(outcome.fault.command, self.child)

    def testMalformedArgvIsNotCaptured(self):
        with self.assertRaises(TypeError):
            evaluate(self.program, 42)


class TestParseTimeCallbacks(TestCase):
    """Behavioral tests for triggers and validators during a parse."""

    def testTriggersFireInTokenOrder(self):
        events = []
        program = (
            Program("prog")
            .add(Flag("-v", repeating=True).trigger(lambda: events.append("v")))
            .add(Option("--name").trigger(lambda value: events.append(f"name={value}")))
            .add(Argument("file").trigger(lambda value: events.append(f"file={value}")))
        )
        program.parse(["prog", "-vv", "--name", "n", "f"])
        self.assertEqual(events, ["v", "v", "name=n", "file=f"])

    def testValidatorsSkippedWithoutValues(self):
        calls = []
        program = Program("prog").add(Option("--level").validate_with(lambda entry, values: calls.append(values)))
        program.parse(["prog"])
        self.assertEqual(calls, [])
        program.parse(["prog", "--level", "3"])
        self.assertEqual(calls, [["3"]])

    def testValidatorsSeeDefaults(self):
        program = Program("prog").add(Option("--mode", default="bogus").accepts(["fast", "slow"]))
        with self.assertRaises(ValidationError):
            program.parse(["prog"])

    def testPredicateRejection(self):
        program = Program("prog").add(Argument("count").validate_each_with(str.isdigit, "must be a number"))
        with self.assertRaises(ValidationError) as context:
            program.parse(["prog", "many"])
        self.assertEqual(context.exception.message, "argument count must be a number")


if __name__ == "__main__":
    unittest.main()
