"""Tests for the console module."""

import unittest
from unittest.mock import patch

from sbomgraph import console as console_module
from sbomgraph.console import console, print_analysis_summary, print_error, print_summary_table


class TestConsole(unittest.TestCase):
    """Tests for the shared console."""

    def test_console_writes_to_stderr(self):
        self.assertTrue(console.stderr)


class TestPrintSummaryTable(unittest.TestCase):
    """Tests for print_summary_table."""

    def test_empty_values_are_hidden(self):
        with patch.object(console, "print") as mock_print:
            print_summary_table("Summary", [("Components", 0), ("Ignored", 0)])
        mock_print.assert_not_called()

    def test_show_if_empty(self):
        with patch.object(console, "print") as mock_print:
            print_summary_table("Summary", [("Components", 0)], show_if_empty=True)
        mock_print.assert_called_once()

    def test_analysis_summary_rows(self):
        with patch.object(console_module, "print_summary_table") as mock_table:
            print_analysis_summary("pom.xml", "maven", 12, 15, 1)
        title, rows = mock_table.call_args.args
        self.assertEqual(title, "SBOM for pom.xml")
        self.assertIn(("Components", 12), rows)
        self.assertIn(("Dependency edges", 15), rows)


class TestPrintError(unittest.TestCase):
    """Tests for print_error."""

    def test_markup_is_escaped(self):
        with patch.object(console, "print") as mock_print:
            print_error("bad [tag]", title="MalformedInputError")
        message = mock_print.call_args.args[0]
        self.assertIn("Error (MalformedInputError):", message)
        self.assertIn("bad \\[tag]", message)

    def test_github_actions_annotation(self):
        with patch.object(console_module, "IS_GITHUB_ACTIONS", True), patch.object(console, "print"):
            with patch("builtins.print") as mock_builtin_print:
                print_error("boom", title="Oops")
        mock_builtin_print.assert_called_once_with("::error title=Oops::boom")
