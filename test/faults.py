"""
Faults module behavioral tests (parse error values and their rendering).

Scope
- Validate ParseError construction, options and copy.replace.
- Validate the rendered header, message and hint.
- Validate host overrides through __codes__ and __prog__ in __main__.

Conventions
- Test method names follow CamelCase per project convention.
"""

from __future__ import annotations

import copy
import io
import sys
import unittest
from unittest import TestCase, mock

from rich.console import Console

from arbor import Command, FaultCode, ParseError, UnknownOptionError


def fault(**options):
    return UnknownOptionError(
        "unknown option '--hots' at first position",
        **{
            "command": Command("fcast"),
            "code": FaultCode.UNKNOWN_OPTION,
            "title": "unknown option",
            "hint": "did you mean '--host'?",
            "suggestion": "host",
        } | options,
    )


def render(error):
    console = Console(file=io.StringIO(), width=100)
    console.print(error)
    return console.file.getvalue()


class TestParseError(TestCase):
    """ParseError values."""

    def testMessageMustBeString(self):
        with self.assertRaises(TypeError):
            ParseError(42)

    def testIsNotAnException(self):
        self.assertNotIsInstance(fault(), BaseException)

    def testProperties(self):
        error = fault()
        self.assertEqual(str(error), "unknown option '--hots' at first position")
        self.assertEqual(error.code, FaultCode.UNKNOWN_OPTION)
        self.assertEqual(error.title, "unknown option")
        self.assertEqual(error.suggestion, "host")
        self.assertEqual(error.command.name, "fcast")

    def testOptionsAreReadOnly(self):
        with self.assertRaises(TypeError):
            fault().options["code"] = None  # type: ignore[index]

    def testReplaceKeepsTypeAndMessage(self):
        error = fault()
        fancy = copy.replace(error, fancy=True)
        self.assertIsInstance(fancy, UnknownOptionError)
        self.assertEqual(fancy.message, error.message)
        self.assertTrue(fancy.options["fancy"])
        self.assertNotIn("fancy", error.options)


class TestRendering(TestCase):
    """Rich rendering of parse errors."""

    def testHeaderMessageAndHint(self):
        printed = render(fault())
        self.assertIn("[ fcast — 11201 | Unknown Option ]", printed)
        self.assertIn("unknown option '--hots' at first position", printed)
        self.assertIn("→ did you mean '--host'?", printed)

    def testFancyIsPanel(self):
        printed = render(fault(fancy=True))
        self.assertIn("╭", printed)
        self.assertIn("Unknown Option", printed)

    def testHostCodesOverride(self):
        with mock.patch.object(sys.modules["__main__"], "__codes__", {FaultCode.UNKNOWN_OPTION: "E-OPT"}, create=True):
            self.assertEqual(FaultCode.UNKNOWN_OPTION.normalize(), "E-OPT")
            self.assertIn("E-OPT", render(fault()))
        self.assertEqual(FaultCode.UNKNOWN_OPTION.normalize(), "11201")

    def testHostProgOverride(self):
        with mock.patch.object(sys.modules["__main__"], "__prog__", "caster", create=True):
            self.assertIn("[ caster — ", render(fault()))


if __name__ == "__main__":
    unittest.main()
