# python
"""
Helps module behavioral tests (usage, help body and version rendering).

Scope
- Validate synthesized usage lines and their wrapping rules.
- Validate help sections, help column alignment and metavar synthesis.
- Validate sub-parser blocks, version expansion and console printing.

Conventions
- Test method names follow CamelCase per project convention.
- Assertions compare plain text (styles never change the text).
"""

from __future__ import annotations

import io
import unittest
from unittest import TestCase

from kvargs import add_argument, add_subparser, new_parser
from kvargs.faults import NotAParserError
from kvargs.helps import MINIMUM, WIDTH, format_help, format_usage, format_version, print_help
from kvargs.records import declare


def parser(*arguments, **attributes):
    result = new_parser(**attributes)
    for items in arguments:
        result = add_argument(result, *items)
    return result


class TestUsage(TestCase):
    """Behavioral tests for usage synthesis."""

    def testOptionalsThenPositionals(self):
        p = parser(
            ("name", "file",),
            ("short", "v", "long", "verbose", "action", "store_true"),
            ("short", "o", "long", "output"),
            prog="tool",
        )
        self.assertEqual(format_usage(p), "usage: tool [-h] [-v] [-o OUTPUT] file")

    def testArityForms(self):
        p = parser(
            ("long", "pair", "nargs", "2"),
            ("long", "many", "nargs", "*"),
            ("long", "some", "nargs", "+", "required", "true"),
            ("long", "maybe", "nargs", "?", "const", "c"),
            prog="tool", add_help=False,
        )
        self.assertEqual(
            format_usage(p),
            "usage: tool [--pair PAIR PAIR] [--many [MANY ...]] --some SOME [SOME ...]\n"
            "            [--maybe [MAYBE]]",
        )

    def testExplicitUsageWins(self):
        p = parser(("name", "file",), prog="tool", usage="tool [options] FILE")
        self.assertEqual(format_usage(p), "usage: tool [options] FILE")

    def testChoicesAndMetavar(self):
        p = parser(
            ("long", "color", "choices", declare("red", "_", "blue", "_")),
            ("name", "target", "metavar", "DEST"),
            prog="tool", add_help=False,
        )
        self.assertEqual(format_usage(p), "usage: tool [--color {red,blue}] DEST")

    def testHangingIndentWrapping(self):
        p = parser(*(("long", "option-%02d" % index, "action", "store_true") for index in range(12)), prog="tool")
        lines = format_usage(p).splitlines()
        self.assertGreater(len(lines), 1)
        for line in lines:
            self.assertLessEqual(len(line), WIDTH)
        for line in lines[1:]:
            self.assertTrue(line.startswith(" " * len("usage: tool ") + "["))

    def testNarrowHangingIndentFallsBack(self):
        prog = "p" * (WIDTH - MINIMUM)
        p = parser(*(("long", "option-%02d" % index, "action", "store_true") for index in range(8)), prog=prog)
        lines = format_usage(p).splitlines()
        self.assertTrue(lines[0].startswith("usage: " + prog + " [-h]"))
        for line in lines[1:]:
            self.assertTrue(line.startswith("  ["))
            self.assertLessEqual(len(line), WIDTH)

    def testItemsAreNeverSplit(self):
        p = parser(("long", "x" * 100, "action", "store_true"), prog="tool", add_help=False)
        self.assertEqual(format_usage(p), "usage: tool [--%s]" % ("x" * 100))


class TestHelp(TestCase):
    """Behavioral tests for the help body."""

    def testSectionsAndColumns(self):
        p = parser(
            ("short", "v", "long", "verbose", "action", "store_true", "help", "be chatty"),
            ("short", "o", "long", "output", "help", "where to write"),
            ("name", "file", "help", "input file"),
            prog="tool",
            description="Process files.",
            epilogue="See the manual.",
        )
        self.assertEqual(format_help(p), "\n".join((
            "usage: tool [-h] [-v] [-o OUTPUT] file",
            "",
            "Process files.",
            "",
            "positional arguments:",
            "  file                  input file",
            "",
            "options:",
            "  -h, --help            show this help message and exit",
            "  -v, --verbose         be chatty",
            "  -o OUTPUT, --output OUTPUT",
            "                        where to write",
            "",
            "See the manual.",
        )))

    def testLongHelpWrapsAtColumn(self):
        p = parser(("long", "mode", "help", " ".join(["word"] * 40)), prog="tool", add_help=False)
        lines = format_help(p).splitlines()
        body = lines[lines.index("options:") + 1:]
        self.assertGreater(len(body), 1)
        for line in body:
            self.assertLessEqual(len(line), WIDTH)
        for line in body[1:]:
            self.assertTrue(line.startswith(" " * 24 + "word"))

    def testSubCommandBlock(self):
        top = parser(("name", "cmd", "action", "sub_command", "help", "what to do"), prog="tool")
        top = add_subparser(top, "cmd", "add", new_parser(description="add things"), "a")
        top = add_subparser(top, "cmd", "rm", new_parser(description="remove things"))
        text = format_help(top)
        self.assertIn("usage: tool [-h] {add,rm} ...", text)
        self.assertIn("\n".join((
            "positional arguments:",
            "  {add,rm}              what to do",
            "    add (aliases: a)    add things",
            "    rm                  remove things",
        )), text)

    def testColorfulKeepsPlainText(self):
        arguments = (("long", "mode", "help", "operating mode"), ("name", "file"))
        self.assertEqual(
            format_help(parser(*arguments, prog="tool", colorful=True)),
            format_help(parser(*arguments, prog="tool")),
        )

    def testPrintHelpWritesToFile(self):
        p = parser(("name", "file"), prog="tool")
        stream = io.StringIO()
        print_help(p, file=stream)
        self.assertEqual(stream.getvalue(), format_help(p) + "\n")

    def testProgOverride(self):
        self.assertTrue(format_usage(parser(prog="tool"), "other").startswith("usage: other"))

    def testNotAParserRejected(self):
        with self.assertRaises(NotAParserError):
            format_help("tool")


class TestVersion(TestCase):
    """Behavioral tests for version rendering."""

    def testProgExpanded(self):
        p = parser(("long", "version", "action", "version", "version", "%(prog)s 2.0"), prog="tool")
        self.assertEqual(format_version(p, p.arguments["--version"]), "tool 2.0")


if __name__ == "__main__":
    unittest.main()
