# python
"""
Help rendering tests.

Scope
- Validate the usage line and the per-option listing (forms, description, help text).
- Validate placeholders by arity and the description of defaults.
- Validate program name resolution and the fancy (panel) layout.

Conventions
- Test method names follow CamelCase per project convention.
- Output is captured with color disabled and compared line by line.
"""

from __future__ import annotations

import io
import unittest
from unittest import TestCase
from unittest.mock import patch

from rich.console import Console

from clioptions import ArgumentParser, Arity

main = __import__("__main__")


def _lines(parser):
    console = Console(file=io.StringIO(), color_system=None, width=120)
    parser.help(console=console)
    return [line.rstrip() for line in console.file.getvalue().splitlines()]


class TestUsageLine(TestCase):

    def testUsageWithoutOptions(self):
        self.assertEqual(_lines(ArgumentParser(prog="tool")), ["usage: tool [--] [arguments]"])

    def testUsageWithOptions(self):
        lines = _lines(ArgumentParser(prog="tool").add("a", "all"))
        self.assertEqual(lines[:3], ["usage: tool [options] [--] [arguments]", "", "options:"])

    def testProgFromMain(self):
        with patch.object(main, "__prog__", "hosttool", create=True):
            self.assertEqual(ArgumentParser().prog, "hosttool")
            self.assertEqual(_lines(ArgumentParser()), ["usage: hosttool [--] [arguments]"])

    def testExplicitProgWins(self):
        with patch.object(main, "__prog__", "hosttool", create=True):
            self.assertEqual(ArgumentParser(prog=" tool ").prog, "tool")

    def testProgValidated(self):
        with self.assertRaises(TypeError):
            ArgumentParser(prog=3)
        with self.assertRaises(ValueError):
            ArgumentParser(prog="  ")


class TestListing(TestCase):

    def testSwitches(self):
        parser = (
            ArgumentParser(prog="tool")
            .add("a", "all", helptext="show everything")
            .add("q", None, Arity.NO_VALUE, True)
            .add("v", "verbose", Arity.COUNTING, 2)
        )
        self.assertEqual(_lines(parser)[3:], [
            "  -a",
            "  --all",
            "      switch; default value is false",
            "      show everything",
            "  -q",
            "      switch; default value is true",
            "  -v",
            "  --verbose",
            "      accumulating switch; default value is 2",
        ])

    def testRequiredValue(self):
        parser = (
            ArgumentParser(prog="tool")
            .add("n", "num", Arity.REQUIRED_VALUE)
            .add(None, "out", Arity.REQUIRED_VALUE, "a.txt")
        )
        self.assertEqual(_lines(parser)[3:], [
            "  -n<ARG>",
            "  -n <ARG>",
            "  --num=<ARG>",
            "  --num <ARG>",
            "      option requiring a value; no default value",
            "  --out=<ARG>",
            "  --out <ARG>",
            "      option requiring a value; default value is 'a.txt'",
        ])

    def testOptionalValue(self):
        parser = (
            ArgumentParser(prog="tool")
            .add("c", "color", Arity.OPTIONAL_VALUE)
            .add(None, "pager", Arity.OPTIONAL_VALUE, True)
            .add(None, "when", Arity.OPTIONAL_VALUE, "auto")
        )
        self.assertEqual(_lines(parser)[3:], [
            "  -c[<ARG>]",
            "  --color[=<ARG>]",
            "      option with an optional value; default value is unset",
            "  --pager[=<ARG>]",
            "      option with an optional value; default value is set",
            "  --when[=<ARG>]",
            "      option with an optional value; default value is 'auto'",
        ])

    def testMultiValue(self):
        parser = (
            ArgumentParser(prog="tool")
            .add("t", None, Arity.MULTI_VALUE)
            .add(None, "tag", Arity.MULTI_VALUE, ["x", "y"])
        )
        self.assertEqual(_lines(parser)[3:], [
            "  -t<ARG>",
            "  -t <ARG>",
            "      requires a value and can be used multiple times; no default values",
            "  --tag=<ARG>",
            "  --tag <ARG>",
            "      requires a value and can be used multiple times; default values are 'x', 'y'",
        ])

    def testColorfulOutputMatchesPlainText(self):
        plain = ArgumentParser(prog="tool", colorful=False).add("a", "all", helptext="show everything")
        styled = ArgumentParser(prog="tool").add("a", "all", helptext="show everything")
        self.assertEqual(_lines(plain), _lines(styled))

    def testFancyPanel(self):
        parser = ArgumentParser(prog="tool", fancy=True).add("a", "all")
        output = "\n".join(_lines(parser))
        self.assertIn("╭", output)
        self.assertIn("usage: tool [options] [--] [arguments]", output)
        self.assertIn("--all", output)
        self.assertIn("switch; default value is false", output)


if __name__ == "__main__":
    unittest.main()
