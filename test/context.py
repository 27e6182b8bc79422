"""
Context behavioral tests (store, introspection, lifetime).

Conventions
- Test method names follow CamelCase per project convention.
"""

import io
import unittest
from unittest import TestCase

from helmsman import CommandInfo, Context


class TestContext(TestCase):
    """Behavioral tests for Context."""

    def make(self, **options):
        return Context(
            "tool", "1.0.0", "a tool",
            commands=(CommandInfo(("greet",), "say hello"), CommandInfo(("users", "list"))),
            stdout=io.StringIO(),
            stderr=io.StringIO(),
            environ={"HOME": "/home/tool"},
            **options,
        )

    def testStoreRoundTrip(self):
        context = self.make()
        context.set("help", True)
        self.assertIn("help", context)
        self.assertTrue(context.get("help"))
        self.assertTrue(context.pop("help"))
        self.assertNotIn("help", context)
        self.assertEqual(context.get("missing", 1), 1)

    def testDescribe(self):
        context = self.make()
        self.assertEqual(context.describe("greet"), "say hello")
        self.assertIsNone(context.describe(["users", "list"]))
        self.assertIsNone(context.describe("nope"))

    def testMetadataAndEnviron(self):
        context = self.make()
        self.assertEqual((context.name, context.version, context.descr), ("tool", "1.0.0", "a tool"))
        context.environ["HOME"] = "/tmp"
        self.assertEqual(context.environ["HOME"], "/home/tool")

    def testConsolesWriteToStreams(self):
        context = self.make(colorful=False)
        context.out.print("to stdout")
        context.err.print("to stderr")
        self.assertEqual(context.stdout.getvalue(), "to stdout\n")
        self.assertEqual(context.stderr.getvalue(), "to stderr\n")

    def testCloseClearsOnce(self):
        with self.make() as context:
            context.set("key", "value")
            context.define("verbose", True)
        self.assertTrue(context.closed)
        self.assertNotIn("key", context)
        self.assertIsNone(context.option("verbose"))
        context.close()
        self.assertTrue(context.closed)


if __name__ == "__main__":
    unittest.main()
