"""UI components for the orgadmin CLI."""

from .display import ConsoleReporter, Reporter, display_entity_table

__all__ = [
    'ConsoleReporter',
    'Reporter',
    'display_entity_table',
]
