"""
Tokenizer and binder behavioral tests.

Scope
- Validate token classification: long options, short clusters, "--", negative numbers.
- Validate positional binding: order, optional suffixes, variadic capture.
- Validate option binding: defaults, repeated options, inline and separate values.
- Validate that each binding failure raises its specific fault.

Conventions
- Test method names follow CamelCase per project convention.
- Schemas are declared per test so each case reads on its own.
"""

import enum
import unittest
from unittest import TestCase

from helmsman import Option, Schema, Binder, isoption
from helmsman.faults import (
    ArgumentMissingRequiredError,
    ArgumentTooManyError,
    ArgumentInvalidValueError,
    OptionUnknownError,
    OptionMissingValueError,
    OptionInvalidValueError,
)


def bind(args, options, tokens):
    binder = Binder(Schema(args, positional=True), Schema(options, positional=False))
    return binder.bind(tokens)


class Level(enum.Enum):
    LOW = "low"
    HIGH = "high"


class TestClassification(TestCase):
    """Behavioral tests for isoption()."""

    def testOptionShapes(self):
        self.assertTrue(isoption("--name"))
        self.assertTrue(isoption("-v"))
        self.assertTrue(isoption("--"))

    def testValueShapes(self):
        self.assertFalse(isoption("-"))
        self.assertFalse(isoption("-5"))
        self.assertFalse(isoption("-.5"))
        self.assertFalse(isoption("file.txt"))
        self.assertFalse(isoption(""))


class TestBinding(TestCase):
    """Behavioral tests for Binder.bind()."""

    def testRoundTripCountAndFile(self):
        class Args:
            file: str

        class Options:
            count: int = 1

        binding = bind(Args, Options, ["--count", "5", "file.txt"])
        self.assertEqual(binding.args.file, "file.txt")
        self.assertEqual(binding.options.count, 5)

    def testNegativeNumbersArePositional(self):
        class Args:
            threshold: str
            value: str | None

        class Options:
            count: int = 0

        binding = bind(Args, Options, ["-5", "--count", "10", "-42"])
        self.assertEqual(binding.args.threshold, "-5")
        self.assertEqual(binding.args.value, "-42")
        self.assertEqual(binding.options.count, 10)

    def testRepeatedOptionsAccumulateInOrder(self):
        class Options:
            files: list[str] = []

        binding = bind(None, Options, ["--files", "a.txt", "--files", "b.txt"])
        self.assertEqual(binding.options.files, ["a.txt", "b.txt"])

    def testRepeatedOptionsDefaultToEmpty(self):
        class Options:
            files: list[str] = []

        self.assertEqual(bind(None, Options, []).options.files, [])

    def testScalarOptionKeepsLastOccurrence(self):
        class Options:
            count: int = 1

        self.assertEqual(bind(None, Options, ["--count", "2", "--count=3"]).options.count, 3)

    def testBooleanDefaultsAndPresence(self):
        class Options:
            verbose: bool = False
            color: bool = True

        binding = bind(None, Options, [])
        self.assertIs(binding.options.verbose, False)
        self.assertIs(binding.options.color, True)
        self.assertIs(bind(None, Options, ["--verbose"]).options.verbose, True)
        self.assertIs(bind(None, Options, ["--color=false"]).options.color, False)

    def testLongOptionTakesDashedValue(self):
        class Options:
            count: int = 0

        self.assertEqual(bind(None, Options, ["--count", "-3"]).options.count, -3)

    def testUnderscoreSpellingAccepted(self):
        class Options:
            dry_run: bool = False

        self.assertIs(bind(None, Options, ["--dry_run"]).options.dry_run, True)

    def testShortClusters(self):
        class Options:
            verbose: bool = Option(False, short="v")
            all: bool = Option(False, short="a")
            count: int = Option(1, short="n")

        binding = bind(None, Options, ["-va", "-n5"])
        self.assertTrue(binding.options.verbose)
        self.assertTrue(binding.options.all)
        self.assertEqual(binding.options.count, 5)
        self.assertEqual(bind(None, Options, ["-n", "3"]).options.count, 3)
        self.assertEqual(bind(None, Options, ["-vn=4"]).options.count, 4)

    def testDoubleDashMakesRestPositional(self):
        class Args:
            words: list[str]

        class Options:
            count: int = 1

        binding = bind(Args, Options, ["--", "--count", "-v"])
        self.assertEqual(binding.args.words, ["--count", "-v"])
        self.assertEqual(binding.options.count, 1)

    def testVariadicCapturesRest(self):
        class Args:
            first: str
            rest: list[str]

        binding = bind(Args, None, ["a", "b", "c"])
        self.assertEqual(binding.args.first, "a")
        self.assertEqual(binding.args.rest, ["b", "c"])
        self.assertEqual(bind(Args, None, ["a"]).args.rest, [])

    def testTypedVariadic(self):
        class Args:
            numbers: tuple[int, ...]

        self.assertEqual(bind(Args, None, ["1", "-2"]).args.numbers, (1, -2))

    def testOptionalSuffixUsesDefault(self):
        class Args:
            name: str
            greeting: str = "hello"

        self.assertEqual(bind(Args, None, ["bob"]).args.greeting, "hello")

    def testEmptyStringPassesThrough(self):
        class Args:
            name: str

        self.assertEqual(bind(Args, None, [""]).args.name, "")

    def testEnumOption(self):
        class Options:
            level: Level = Level.LOW

        self.assertIs(bind(None, Options, ["--level", "HIGH"]).options.level, Level.HIGH)
        self.assertIs(bind(None, Options, ["--level", "high"]).options.level, Level.HIGH)


class TestBindingFaults(TestCase):
    """Behavioral tests for binder faults."""

    def testMissingRequiredPositional(self):
        class Args:
            file: str

        with self.assertRaises(ArgumentMissingRequiredError) as caught:
            bind(Args, None, [])
        self.assertEqual(caught.exception.options["position"], 1)
        self.assertIn("first", str(caught.exception))

    def testTooManyPositionals(self):
        class Args:
            file: str

        with self.assertRaises(ArgumentTooManyError) as caught:
            bind(Args, None, ["a", "b", "c"])
        self.assertEqual(caught.exception.options["extra"], ("b", "c"))

    def testInvalidPositionalValue(self):
        class Args:
            count: int

        with self.assertRaises(ArgumentInvalidValueError):
            bind(Args, None, ["many"])

    def testUnknownLongOptionSuggests(self):
        class Options:
            count: int = 1

        with self.assertRaises(OptionUnknownError) as caught:
            bind(None, Options, ["--cuont", "2"])
        self.assertEqual(caught.exception.options["suggestions"], ["count"])

    def testUnknownShortOption(self):
        with self.assertRaises(OptionUnknownError):
            bind(None, None, ["-x"])

    def testMissingOptionValue(self):
        class Options:
            count: int = 1

        with self.assertRaises(OptionMissingValueError):
            bind(None, Options, ["--count"])

    def testMissingShortOptionValue(self):
        class Options:
            count: int = Option(1, short="n")

        with self.assertRaises(OptionMissingValueError):
            bind(None, Options, ["-n"])

    def testInvalidOptionValue(self):
        class Options:
            count: int = 1

        with self.assertRaises(OptionInvalidValueError) as caught:
            bind(None, Options, ["--count", "x"])
        self.assertEqual(caught.exception.options["value"], "x")

    def testFaultsCarryExitCodes(self):
        class Args:
            file: str

        with self.assertRaises(ArgumentMissingRequiredError) as caught:
            bind(Args, None, [])
        self.assertEqual(caught.exception.exitcode, 2)


if __name__ == "__main__":
    unittest.main()
