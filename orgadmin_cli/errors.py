"""Error taxonomy and error display for the orgadmin CLI.

Every failure the command processor can report is an ``AdminError`` tagged
with an ``ErrorKind``. The dispatcher carries these to the CLI boundary,
which renders them with recovery suggestions and picks the exit code.
"""

import sys
from enum import Enum
from typing import Dict, List, Optional, Self

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel

console = Console(stderr=True)


class ErrorKind(Enum):
    """Structured failure categories."""
    CONFIGURATION = "configuration"
    USAGE = "usage"
    PRECONDITION = "precondition"
    OPERATION = "operation"


class AdminError(Exception):
    """Base exception class for orgadmin errors."""

    kind: ErrorKind = ErrorKind.OPERATION

    def __init__(self: Self, message: str, suggestions: Optional[List[str]] = None) -> None:
        """Initialize an orgadmin error.

        Args:
            message: The error message to display.
            suggestions: Optional list of recovery suggestions.
        """
        super().__init__(message)
        self.message = message
        self.suggestions = suggestions or []


class ConfigurationError(AdminError):
    """Raised when the data root is missing or misconfigured."""
    kind = ErrorKind.CONFIGURATION


class UsageError(AdminError):
    """Raised for a missing subcommand, bad arity or an unknown token."""
    kind = ErrorKind.USAGE


class PreconditionError(AdminError):
    """Raised when an entity exists (or does not) contrary to the verb."""
    kind = ErrorKind.PRECONDITION


class OperationError(AdminError):
    """Raised when a filesystem mutation fails after its checks passed."""
    kind = ErrorKind.OPERATION


EXIT_CODES: Dict[ErrorKind, int] = {
    ErrorKind.CONFIGURATION: 1,
    ErrorKind.USAGE: 2,
    ErrorKind.PRECONDITION: 1,
    ErrorKind.OPERATION: 1,
}


class ErrorHandler:
    """Handles and displays errors with recovery suggestions."""

    def __init__(self: Self) -> None:
        """Initialize the error handler."""
        self.kind_suggestions: Dict[ErrorKind, List[str]] = {
            ErrorKind.CONFIGURATION: [
                "Pass the data root explicitly: orgadmin <command> --data <root>",
                "Or export ORGADMIN_DATA=<root>",
                "Initialize a new root with: orgadmin init --data <root>",
            ],
            ErrorKind.USAGE: [
                "Show the expected form: orgadmin help <command>",
                "Entity kinds are 'org', 'group' and 'user'",
            ],
            ErrorKind.PRECONDITION: [
                "Inspect what exists: orgadmin list [<org>]",
                "Check the spelling of the organization, group or user name",
            ],
            ErrorKind.OPERATION: [
                "Check that the data root is writable by the current user",
                "Re-run the command once the underlying problem is fixed",
            ],
        }

    def get_suggestions(self: Self, error: Exception) -> List[str]:
        """Get recovery suggestions for an error.

        Args:
            error: The exception to analyze.

        Returns:
            List of recovery suggestions.
        """
        if isinstance(error, AdminError):
            if error.suggestions:
                return error.suggestions
            return self.kind_suggestions.get(error.kind, [])
        return []

    def display_error(
        self: Self,
        error: Exception,
        context: Optional[str] = None,
        show_suggestions: bool = True
    ) -> None:
        """Display an error with formatting and suggestions.

        Args:
            error: The exception that occurred.
            context: Optional context about what was being attempted.
            show_suggestions: Whether to show recovery suggestions.
        """
        content = []

        if context:
            content.append(f"[bold]Context:[/bold] {escape(context)}")
            content.append("")

        content.append(f"[bold red]Error:[/bold red] {escape(str(error))}")

        if show_suggestions:
            suggestions = self.get_suggestions(error)
            if suggestions:
                content.append("")
                content.append("[bold blue]Suggested solutions:[/bold blue]")
                for i, suggestion in enumerate(suggestions, 1):
                    content.append(f"  {i}. {escape(suggestion)}")

        console.print(Panel(
            "\n".join(content),
            title="[bold red]orgadmin error[/bold red]",
            border_style="red",
            expand=False
        ))


def exit_code_for(error: Exception) -> int:
    """Map an error to the process exit code used by the CLI."""
    if isinstance(error, AdminError):
        return EXIT_CODES[error.kind]
    return 1


def handle_exception(
    error: Exception,
    context: Optional[str] = None,
    exit_code: Optional[int] = None
) -> None:
    """Global exception handler for the orgadmin CLI.

    Args:
        error: The exception that occurred.
        context: Optional context about what was being attempted.
        exit_code: Exit code to use when terminating. Derived from the
            error kind when omitted.
    """
    error_handler = ErrorHandler()
    error_handler.display_error(error, context)
    sys.exit(exit_code if exit_code is not None else exit_code_for(error))


def handle_keyboard_interrupt() -> None:
    """Handle Ctrl+C gracefully."""
    console.print("\n[yellow]Operation cancelled by user[/yellow]")
    sys.exit(130)
