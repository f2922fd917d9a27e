"""Operator-facing output for the orgadmin CLI.

The dispatcher reports through a ``Reporter``: confirmation lines for
processed targets and the one-time display of a new user's key. The
``list`` command renders entities with ``display_entity_table``.
"""

from typing import Any, Dict, List, Optional, Self

from rich.console import Console
from rich.markup import escape
from rich.table import Table

console = Console()


class Reporter:
    """Output channel the dispatcher reports through. Discards everything."""

    def confirm(self: Self, message: str) -> None:
        """Report a processed target (only shown in verbose mode)."""

    def user_key(self: Self, key: str) -> None:
        """Hand a newly generated user key to the operator."""


class ConsoleReporter(Reporter):
    """Reports to stdout through rich."""

    def __init__(self: Self, verbose: bool = False, output: Optional[Console] = None) -> None:
        """Initialize the reporter.

        Args:
            verbose: Whether confirmation lines are printed.
            output: Console to print to; the module console by default.
        """
        self.verbose = verbose
        self.console = output or console

    def confirm(self: Self, message: str) -> None:
        if self.verbose:
            self.console.print(escape(message), highlight=False, soft_wrap=True)

    def user_key(self: Self, key: str) -> None:
        # The only place a key is ever written outside the user's config file.
        self.console.print(f"New user key: {escape(key)}", highlight=False, soft_wrap=True)


def display_entity_table(
    rows: List[Dict[str, Any]],
    title: str = "Organizations"
) -> None:
    """Display entities in a formatted table.

    Args:
        rows: Entity dictionaries with ``kind``, ``name`` and ``state`` keys,
            plus ``groups`` and ``users`` counts for organizations.
        title: Table title to display.
    """
    if not rows:
        console.print("[yellow]No entities found.[/yellow]")
        return

    show_counts = any('groups' in row for row in rows)

    table = Table(title=escape(title), show_header=True, header_style="bold magenta")
    table.add_column("Kind", style="dim")
    table.add_column("Name", style="cyan", no_wrap=True)
    table.add_column("State", justify="center")
    if show_counts:
        table.add_column("Groups", justify="right")
        table.add_column("Users", justify="right")

    for row in rows:
        state = row.get('state', 'unknown')
        style = _get_state_style(state)
        cells = [
            row.get('kind', 'N/A'),
            escape(row.get('name', 'N/A')),
            f"[{style}]{state}[/{style}]",
        ]
        if show_counts:
            cells.extend([str(row.get('groups', '')), str(row.get('users', ''))])
        table.add_row(*cells)

    console.print(table)
    console.print(f"\n[blue]Total: {len(rows)} entit{'y' if len(rows) == 1 else 'ies'}[/blue]")


def _get_state_style(state: str) -> str:
    """Get Rich style for an entity state.

    Args:
        state: Entity state string.

    Returns:
        Rich style string for the state.
    """
    state_styles = {
        'active': 'green',
        'suspended': 'yellow',
    }
    return state_styles.get(state, 'dim')
