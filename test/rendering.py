"""
Rendering module behavioral tests (help pages and usage lines).

Scope
- Validate help page sections: path header, description, usage, options,
  option groups and the subcommands table.
- Validate usage composition across ancestors and hanging-indent wrapping.
- Validate palette and panel switches (colorful, fancy).

Conventions
- Test method names follow CamelCase per project convention.
- Assertions look for content, not exact layout, except for usage lines.
"""

from __future__ import annotations

import unittest
from unittest import TestCase

from arbor import CommandBuilder, OptionGroupBuilder, Constraint, Option
from arbor.rendering import render_help, render_usage, usage_renderable


def fcast():
    return (
        CommandBuilder("fcast", "control a media receiver")
        .option("connection_type", "c", "transport to use", default="tcp")
        .option("host", "h", "address of the receiver", required=True)
        .option("port", "p", "port of the receiver")
        .subcommand(
            CommandBuilder("play", "play media on the receiver")
            .option("mime_type", "m", "mime type of the content", required=True)
            .group(
                OptionGroupBuilder("source", "where the media comes from", Constraint.EXACTLY_ONE)
                .option("file", "f", "local file to stream")
                .option("url", "u", "remote url to play")
                .option("content", "c", "inline content to play")
            )
            .option("timestamp", "t", "position to start from", default="0")
        )
        .subcommand(CommandBuilder("stop"))
        .build()
    )


class TestUsage(TestCase):
    """Usage lines."""

    def testRootUsage(self):
        self.assertEqual(fcast().usage(), "usage: fcast [OPTIONS] --host <HOST> [SUBCOMMAND]")

    def testSubcommandUsageCarriesAncestors(self):
        play = fcast().children["play"]
        self.assertEqual(play.usage(), "usage: fcast --host <HOST> play [OPTIONS] --mime_type <MIME_TYPE>")

    def testLeafWithoutOptions(self):
        stop = fcast().children["stop"]
        self.assertEqual(render_usage(stop), "usage: fcast --host <HOST> stop")

    def testOptionalOnlyCommand(self):
        command = CommandBuilder("tool").option("verbose", "v", takes_value=False).build()
        self.assertEqual(command.usage(), "usage: tool [OPTIONS]")

    def testNarrowWidthWrapsWithHangingIndent(self):
        play = fcast().children["play"]
        lines = play.usage(width=30).splitlines()
        self.assertGreater(len(lines), 1)
        self.assertTrue(lines[0].startswith("usage: fcast"))
        for line in lines[1:]:
            self.assertTrue(line.startswith(" " * len("usage: ")))
            self.assertFalse(line[len("usage: "):].startswith(" "))

    def testRenderableMatchesString(self):
        command = fcast()
        self.assertEqual(usage_renderable(command).plain, command.usage())


class TestHelp(TestCase):
    """Help pages."""

    def testRootSections(self):
        page = fcast().help()
        self.assertTrue(page.startswith("fcast\n"))
        self.assertIn("control a media receiver", page)
        self.assertIn("usage: fcast [OPTIONS] --host <HOST> [SUBCOMMAND]", page)
        self.assertIn("options:", page)
        self.assertIn("-c, --connection_type <CONNECTION_TYPE>", page)
        self.assertIn("-h, --host <HOST>", page)
        self.assertIn("subcommands", page)
        self.assertIn("play media on the receiver", page)

    def testRequiredAndDefaultMarkers(self):
        page = fcast().help()
        self.assertIn("(required)", page)
        self.assertIn("[default: tcp]", page)

    def testHelpOptionIsListedLast(self):
        page = fcast().help()
        self.assertIn("--help", page)
        self.assertIn("print help information", page)
        self.assertGreater(page.index("--help"), page.index("--port"))

    def testSubcommandPage(self):
        page = fcast().children["play"].help()
        self.assertTrue(page.startswith("fcast ➜ play\n"))
        self.assertIn("usage: fcast --host <HOST> play [OPTIONS] --mime_type <MIME_TYPE>", page)
        self.assertIn("source (exactly one of --file, --url, --content):", page)
        self.assertIn("where the media comes from", page)
        self.assertIn("[default: 0]", page)
        self.assertNotIn("subcommands", page)

    def testGroupedOptionsAreNotRepeatedUnderOptions(self):
        page = fcast().children["play"].help()
        self.assertEqual(page.count("--url <URL>"), 1)

    def testChildWithoutDescriptionPointsToItsHelp(self):
        page = fcast().help()
        self.assertIn("no description", page)

    def testEmptyDefaultIsQuoted(self):
        command = CommandBuilder("tool").option(Option("prefix", descr="text to prepend", default="")).build()
        self.assertIn('[default: ""]', command.help())

    def testPlainAndColorful(self):
        command = fcast()
        self.assertNotIn("\x1b[", command.help())
        self.assertIn("\x1b[", render_help(command, colorful=True))

    def testFancyWrapsInPanel(self):
        page = fcast().children["play"].help(fancy=True)
        self.assertIn("FCAST PLAY HELP", page)
        self.assertIn("╭", page)

    def testRenderingIsDeterministic(self):
        command = fcast()
        self.assertEqual(command.help(), command.help())

    def testRenderingDoesNotFreeze(self):
        command = fcast()
        command.help()
        self.assertFalse(command.frozen)


if __name__ == "__main__":
    unittest.main()
