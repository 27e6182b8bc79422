"""
Bundled plugins behavioral tests (help, version, suggestions).

Scope
- Validate HelpPlugin: --help/-h screens, the help command, no-command and group listings.
- Validate VersionPlugin: --version/-V output and veto.
- Validate SuggestPlugin: nearest-first suggestions that leave the error unhandled.

Conventions
- Test method names follow CamelCase per project convention.
- Output is captured through io.StringIO streams given to execute(); colours are off.
"""

import io
import unittest
from unittest import TestCase

from helmsman import Argument, Builder, HelpPlugin, Option, SuggestPlugin, VersionPlugin


class RunArgs:
    image: str = Argument(descr="image to run")
    command: list[str]


class RunOptions:
    name: str | None = Option(short="n", descr="container name")
    detach: bool = Option(False, short="d", descr="run in the background")


def run_container(args, options, context):
    context.stdout.write("run %s\n" % args.image)


def status(args, options, context):
    context.stdout.write("ok\n")


def application(*plugins):
    builder = Builder("harbor", version="1.2.0", descr="manage containers", colorful=False)
    builder.command(
        "container run", run_container,
        args=RunArgs, options=RunOptions, descr="run a container",
        examples=("harbor container run alpine sh",),
    )
    builder.command("container ls", status, descr="list containers")
    builder.command("status", status, descr="show daemon status")
    builder.plugin(*plugins)
    return builder.build()


def execute(registry, argv):
    stdout, stderr = io.StringIO(), io.StringIO()
    status = registry.execute(argv, stdout=stdout, stderr=stderr, environ={})
    return status, stdout.getvalue(), stderr.getvalue()


class TestHelpPlugin(TestCase):
    """Behavioral tests for HelpPlugin."""

    def testHelpWithoutCommandShowsApplication(self):
        status, stdout, stderr = execute(application(HelpPlugin()), ["--help"])
        self.assertEqual((status, stderr), (0, ""))
        self.assertIn("harbor v1.2.0", stdout)
        self.assertIn("manage containers", stdout)
        self.assertIn("container", stdout)
        self.assertIn("show daemon status", stdout)
        self.assertIn("--help", stdout)

    def testNoCommandShowsApplication(self):
        status, stdout, _ = execute(application(HelpPlugin()), [])
        self.assertEqual(status, 0)
        self.assertIn("Usage", stdout)

    def testShortHelpOnCommand(self):
        status, stdout, _ = execute(application(HelpPlugin()), ["container", "run", "-h"])
        self.assertEqual(status, 0)
        self.assertIn("Usage: harbor container run [options] IMAGE [COMMAND...]", stdout)
        self.assertIn("image to run", stdout)
        self.assertIn("-n, --name NAME", stdout)
        self.assertIn("harbor container run alpine sh", stdout)
        self.assertNotIn("run alpine\n", stdout)

    def testHelpSkipsBinding(self):
        status, _, stderr = execute(application(HelpPlugin()), ["container", "run", "--help"])
        self.assertEqual((status, stderr), (0, ""))

    def testHelpCommand(self):
        status, stdout, _ = execute(application(HelpPlugin()), ["help", "status"])
        self.assertEqual(status, 0)
        self.assertIn("Usage: harbor status", stdout)

    def testHelpCommandForGroup(self):
        status, stdout, _ = execute(application(HelpPlugin()), ["help", "container"])
        self.assertEqual(status, 0)
        self.assertIn("ls", stdout)
        self.assertIn("run a container", stdout)

    def testHelpCommandForUnknownPath(self):
        status, _, stderr = execute(application(HelpPlugin()), ["help", "nope"])
        self.assertEqual(status, 3)
        self.assertIn("unknown command 'nope'", stderr)

    def testUnknownSubcommandListsGroup(self):
        status, stdout, stderr = execute(application(HelpPlugin()), ["container", "rm"])
        self.assertEqual((status, stdout), (0, ""))
        self.assertIn("unknown command 'container rm'", stderr)
        self.assertIn("list containers", stderr)

    def testBareGroupListsWithoutError(self):
        status, stdout, stderr = execute(application(HelpPlugin()), ["container"])
        self.assertEqual((status, stdout), (0, ""))
        self.assertNotIn("unknown command", stderr)
        self.assertIn("Usage: harbor container <command>", stderr)
        self.assertIn("list containers", stderr)

    def testHelpOnHiddenCommand(self):
        builder = Builder("harbor", colorful=False)
        builder.command("secret", status, options=RunOptions, descr="internal use", hidden=True)
        builder.plugin(HelpPlugin())
        code, stdout, stderr = execute(builder.build(), ["secret", "--help"])
        self.assertEqual((code, stderr), (0, ""))
        self.assertIn("Usage: harbor secret [options]", stdout)
        self.assertIn("internal use", stdout)
        self.assertIn("-d, --detach", stdout)

    def testUnknownTopLevelCommandIsNotHandled(self):
        status, _, _ = execute(application(HelpPlugin()), ["nope"])
        self.assertEqual(status, 3)

    def testHelpCommandIsListed(self):
        registry = application(HelpPlugin())
        self.assertIn(("help",), [command.path for command in registry.commands])


class TestVersionPlugin(TestCase):
    """Behavioral tests for VersionPlugin."""

    def testVersionFlag(self):
        for flag in ("--version", "-V"):
            with self.subTest(flag=flag):
                status, stdout, _ = execute(application(VersionPlugin()), [flag])
                self.assertEqual((status, stdout), (0, "harbor v1.2.0\n"))

    def testVersionVetoesCommand(self):
        status, stdout, _ = execute(application(VersionPlugin()), ["status", "--version"])
        self.assertEqual((status, stdout), (0, "harbor v1.2.0\n"))

    def testHelpRunsBeforeVersion(self):
        status, stdout, _ = execute(application(VersionPlugin(), HelpPlugin()), ["--version", "--help"])
        self.assertEqual(status, 0)
        self.assertIn("Usage", stdout)
        self.assertEqual(stdout.count("harbor v1.2.0"), 1)


class TestSuggestPlugin(TestCase):
    """Behavioral tests for SuggestPlugin."""

    def testSuggestsNearestCommand(self):
        status, _, stderr = execute(application(SuggestPlugin()), ["stauts"])
        self.assertEqual(status, 3)
        self.assertIn("did you mean?", stderr)
        self.assertIn("  status", stderr)
        self.assertIn("available commands: container run, container ls, status", stderr)

    def testNoSuggestionForDistantWords(self):
        status, _, stderr = execute(application(SuggestPlugin()), ["zzzzzzzz"])
        self.assertEqual(status, 3)
        self.assertNotIn("did you mean?", stderr)

    def testGroupHelpWinsOverSuggestions(self):
        status, _, stderr = execute(application(HelpPlugin(), SuggestPlugin()), ["container", "lss"])
        self.assertEqual(status, 0)
        self.assertNotIn("did you mean?", stderr)


if __name__ == "__main__":
    unittest.main()
