"""
Tests for the present singleton.

This module verifies semantic guarantees of the `presenttype` sentinel:
- Singleton identity (single instance per interpreter process).
- Truthy semantics and string/representation behavior.
- Rich rendering integration.
- Copying, deep copying and pickling preserve identity.
- Finality (type cannot be subclassed).
- Its role in parse results for options with an optional value.
"""
import copy
import pickle
import unittest
from unittest import TestCase

from rich.console import Console
from rich.text import Text

from clioptions import ArgumentParser, Arity
from clioptions.present import *


class PresentTest(TestCase):
    """
    Test suite for the `presenttype` singleton.
    """

    def setUp(self) -> None:
        self.present: presenttype = presenttype()

    def testSingleton(self) -> None:
        """
        The constructor and the module export are the same object.
        """
        self.assertIs(self.present, presenttype())
        self.assertIs(present, self.present)

    def testRich(self) -> None:
        self.assertEqual(self.present.__rich__(), Text("present", style="green"))

    def testRichConsolePrint(self) -> None:
        """
        Console.print(...) renders 'present' without ANSI when color is disabled.
        """
        console = Console(color_system=None, force_terminal=False)
        with console.capture() as capture:
            console.print(self.present)
        self.assertEqual(capture.get().strip(), "present")

    def testRepr(self) -> None:
        self.assertEqual(repr(self.present), "present")
        self.assertEqual(str(self.present), "present")

    def testTruthy(self) -> None:
        self.assertTrue(bool(self.present))

    def testNotEqualToTrueOrStrings(self) -> None:
        """
        Truthy does not imply equality with True or with the text "present".
        """
        self.assertNotEqual(self.present, True)  # noqa: E712
        self.assertNotEqual(self.present, "present")
        self.assertNotEqual(self.present, "")

    def testCopyDeepcopyPreserveSingleton(self) -> None:
        self.assertIs(copy.copy(self.present), self.present)
        self.assertIs(copy.deepcopy(self.present), self.present)

    def testPickleRoundTrip(self) -> None:
        self.assertIs(pickle.loads(pickle.dumps(self.present)), self.present)

    def testFinalClass(self) -> None:
        with self.assertRaises(TypeError):
            type("presenttype", (presenttype,), {})


class PresentInResultsTest(TestCase):
    """
    Three states of an option with an optional value.
    """

    def setUp(self) -> None:
        self.parser = ArgumentParser().add("c", "color", Arity.OPTIONAL_VALUE)

    def testNeverGiven(self) -> None:
        self.assertIs(self.parser.parse([])["color"], False)

    def testGivenWithoutValue(self) -> None:
        self.assertIs(self.parser.parse(["--color"])["color"], present)
        self.assertIs(self.parser.parse(["-c"])["color"], present)

    def testGivenWithValue(self) -> None:
        self.assertEqual(self.parser.parse(["--color=auto"])["color"], "auto")
        self.assertEqual(self.parser.parse(["-cauto"])["color"], "auto")

    def testGivenWithEmptyValue(self) -> None:
        self.assertEqual(self.parser.parse(["--color="])["color"], "")


if __name__ == '__main__':
    unittest.main()
