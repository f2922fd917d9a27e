"""Tests for the error taxonomy and error display."""

import unittest
from unittest.mock import patch

import pytest

from orgadmin_cli.errors import (
    AdminError,
    ConfigurationError,
    ErrorHandler,
    ErrorKind,
    OperationError,
    PreconditionError,
    UsageError,
    exit_code_for,
    handle_exception,
    handle_keyboard_interrupt,
)


class TestErrorKinds(unittest.TestCase):
    """Test each error class carries its kind."""

    def test_kinds(self) -> None:
        """Test the class to kind mapping."""
        self.assertIs(ConfigurationError("x").kind, ErrorKind.CONFIGURATION)
        self.assertIs(UsageError("x").kind, ErrorKind.USAGE)
        self.assertIs(PreconditionError("x").kind, ErrorKind.PRECONDITION)
        self.assertIs(OperationError("x").kind, ErrorKind.OPERATION)

    def test_message(self) -> None:
        """Test the message is kept and used as str()."""
        error = PreconditionError("Organization 'acme' does not exist.")
        self.assertEqual(error.message, str(error))
        self.assertEqual(error.suggestions, [])

    def test_exit_codes(self) -> None:
        """Test usage errors exit 2 and everything else 1."""
        self.assertEqual(exit_code_for(UsageError("x")), 2)
        self.assertEqual(exit_code_for(ConfigurationError("x")), 1)
        self.assertEqual(exit_code_for(PreconditionError("x")), 1)
        self.assertEqual(exit_code_for(OperationError("x")), 1)
        self.assertEqual(exit_code_for(RuntimeError("x")), 1)


class TestErrorHandler(unittest.TestCase):
    """Test suggestions and rendering."""

    def setUp(self) -> None:
        """Set up test fixtures."""
        self.handler = ErrorHandler()

    def test_kind_suggestions(self) -> None:
        """Test suggestions chosen by kind."""
        suggestions = self.handler.get_suggestions(ConfigurationError("x"))
        self.assertTrue(any("ORGADMIN_DATA" in s for s in suggestions))

    def test_explicit_suggestions_win(self) -> None:
        """Test suggestions attached to the error replace the defaults."""
        error = UsageError("x", suggestions=["Try harder"])
        self.assertEqual(self.handler.get_suggestions(error), ["Try harder"])

    def test_foreign_error(self) -> None:
        """Test non-orgadmin errors get no suggestions."""
        self.assertEqual(self.handler.get_suggestions(ValueError("x")), [])

    @patch('orgadmin_cli.errors.console')
    def test_display_error(self, mock_console) -> None:
        """Test the error is printed once as a panel."""
        self.handler.display_error(PreconditionError("Group 'dev' already exists."), "add group")
        mock_console.print.assert_called_once()
        panel = mock_console.print.call_args[0][0]
        self.assertIn("Group 'dev' already exists.", panel.renderable)
        self.assertIn("add group", panel.renderable)

    @patch('orgadmin_cli.errors.console')
    def test_display_escapes_markup(self, mock_console) -> None:
        """Test brackets in messages are not read as rich markup."""
        self.handler.display_error(UsageError("Usage: orgadmin add [options] org <org>"))
        panel = mock_console.print.call_args[0][0]
        self.assertIn("\\[options]", panel.renderable)


@patch('orgadmin_cli.errors.console')
def test_handle_exception_exits_with_kind_code(mock_console):
    """Test handle_exception exits with the kind's code."""
    with pytest.raises(SystemExit) as exc_info:
        handle_exception(UsageError("bad"))
    assert exc_info.value.code == 2


@patch('orgadmin_cli.errors.console')
def test_handle_exception_explicit_code(mock_console):
    """Test an explicit exit code overrides the kind's."""
    with pytest.raises(SystemExit) as exc_info:
        handle_exception(AdminError("bad"), exit_code=3)
    assert exc_info.value.code == 3


@patch('orgadmin_cli.errors.console')
def test_keyboard_interrupt(mock_console):
    """Test Ctrl+C exits 130."""
    with pytest.raises(SystemExit) as exc_info:
        handle_keyboard_interrupt()
    assert exc_info.value.code == 130
    mock_console.print.assert_called_once()
