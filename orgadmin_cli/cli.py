"""Main CLI interface for orgadmin."""

import functools
import logging
from pathlib import Path
from typing import Any, Callable, List, Optional, Self, Tuple

import click
from rich.console import Console

from . import __version__
from .audit import AuditLogger, get_audit_logger
from .config import AdminConfig, parse_overrides
from .dispatcher import CommandDispatcher, Verb
from .errors import AdminError, handle_exception, handle_keyboard_interrupt
from .help import render_help
from .inventory import Inventory
from .matching import close_enough
from .storage import FilesystemStorage
from .ui.display import display_entity_table

console = Console()
logger = logging.getLogger(__name__)


class AliasedGroup(click.Group):
    """Group that accepts any unambiguous command prefix of 3+ characters."""

    def get_command(self: Self, ctx: click.Context, cmd_name: str) -> Optional[click.Command]:
        command = super().get_command(ctx, cmd_name)
        if command is not None:
            return command

        matches = [name for name in self.list_commands(ctx) if close_enough(name, cmd_name)]
        if not matches:
            return None
        if len(matches) == 1:
            return super().get_command(ctx, matches[0])
        ctx.fail(f"Too many matches for '{cmd_name}': {', '.join(sorted(matches))}")
        return None

    def resolve_command(
        self: Self,
        ctx: click.Context,
        args: List[str]
    ) -> Tuple[Optional[str], Optional[click.Command], List[str]]:
        _, command, args = super().resolve_command(ctx, args)
        return (command.name if command else None), command, args


def configure_logging(debug: bool) -> None:
    """Send DEBUG diagnostics to stderr with ``--debug``.

    Without it nothing is configured and only warnings reach stderr.
    """
    if debug:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(levelname)s %(name)s: %(message)s",
            force=True
        )


def data_option(func: Callable[..., Any]) -> Callable[..., Any]:
    """Shared ``--data``/``--set``/``--debug`` options."""
    func = click.option('--debug', is_flag=True, help='Debug mode generates lots of diagnostics')(func)
    func = click.option('--set', 'overrides', multiple=True, metavar='NAME=VALUE',
                        help='Temporary configuration override')(func)
    func = click.option('--data', envvar='ORGADMIN_DATA', default='',
                        help='Data directory, otherwise $ORGADMIN_DATA')(func)
    return func


def verb_options(func: Callable[..., Any]) -> Callable[..., Any]:
    """Options shared by the lifecycle verbs."""
    func = click.option('--verbose/--quiet', default=None,
                        help='Turn confirmation output on or off')(func)
    func = data_option(func)
    return click.argument('args', nargs=-1)(func)


def load_config(
    data: str,
    overrides: Tuple[str, ...],
    verbose: Optional[bool],
    debug: bool
) -> AdminConfig:
    configure_logging(debug)
    return AdminConfig.load(root=data, overrides=parse_overrides(overrides), verbose=verbose)


def handle_admin_errors(func: Callable[..., Any]) -> Callable[..., Any]:
    """Decorator rendering AdminError and Ctrl+C at the CLI boundary.

    Args:
        func: The function to wrap.

    Returns:
        Wrapped function with error handling.
    """
    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return func(*args, **kwargs)
        except AdminError as e:
            handle_exception(e)
        except KeyboardInterrupt:
            handle_keyboard_interrupt()
    return wrapper


def attach_audit(audit: AuditLogger, root: Path) -> None:
    """Point the audit log at ``root``; an unwritable log only warns."""
    try:
        audit.attach_file(root)
    except OSError as e:
        logger.warning("Audit log unavailable: %s", e)


def run_verb(
    verb: Verb,
    args: Tuple[str, ...],
    data: str,
    overrides: Tuple[str, ...],
    verbose: Optional[bool],
    debug: bool
) -> None:
    """Run one lifecycle verb end to end, raising its error if it failed."""
    config = load_config(data, overrides, verbose, debug)
    storage = FilesystemStorage()
    audit = get_audit_logger()

    if config.audit and config.root and storage.is_dir(config.root):
        attach_audit(audit, Path(config.root))

    try:
        result = CommandDispatcher(config, storage=storage, audit=audit).run(verb, args)
    finally:
        audit.detach()

    result.raise_for_error()


@click.group(cls=AliasedGroup)
@click.version_option(version=__version__)
def main() -> None:
    """orgadmin - Manage organizations, groups and users under a data root."""
    pass


@main.command()
@verb_options
@handle_admin_errors
def add(args: Tuple[str, ...], data: str, overrides: Tuple[str, ...],
        debug: bool, verbose: Optional[bool]) -> None:
    """Create organizations, groups or users."""
    run_verb(Verb.ADD, args, data, overrides, verbose, debug)


@main.command()
@verb_options
@handle_admin_errors
def remove(args: Tuple[str, ...], data: str, overrides: Tuple[str, ...],
           debug: bool, verbose: Optional[bool]) -> None:
    """Delete organizations, groups or users. Permanently."""
    run_verb(Verb.REMOVE, args, data, overrides, verbose, debug)


@main.command()
@verb_options
@handle_admin_errors
def suspend(args: Tuple[str, ...], data: str, overrides: Tuple[str, ...],
            debug: bool, verbose: Optional[bool]) -> None:
    """Suspend organizations, groups or users."""
    run_verb(Verb.SUSPEND, args, data, overrides, verbose, debug)


@main.command()
@verb_options
@handle_admin_errors
def resume(args: Tuple[str, ...], data: str, overrides: Tuple[str, ...],
           debug: bool, verbose: Optional[bool]) -> None:
    """Resume suspended organizations, groups or users."""
    run_verb(Verb.RESUME, args, data, overrides, verbose, debug)


@main.command()
@data_option
@handle_admin_errors
def init(data: str, overrides: Tuple[str, ...], debug: bool) -> None:
    """Initialize a data root."""
    config = load_config(data, overrides, None, debug)
    root = config.initialize(FilesystemStorage())
    if config.audit:
        audit = get_audit_logger()
        attach_audit(audit, root)
        try:
            audit.log_initialization(root)
        finally:
            audit.detach()
    console.print(f"[green]✓[/green] Initialized data root {root}", highlight=False)


@main.command(name='list')
@click.argument('org', required=False)
@data_option
@handle_admin_errors
def list_cmd(org: Optional[str], data: str, overrides: Tuple[str, ...], debug: bool) -> None:
    """List organizations, or the groups and users of one organization."""
    config = load_config(data, overrides, None, debug)
    storage = FilesystemStorage()
    inventory = Inventory(storage, config.validate_root(storage))

    if org:
        display_entity_table(inventory.members(org), title=f"Organization '{org}'")
    else:
        display_entity_table(inventory.organizations(), title="Organizations")


@main.command(name='help')
@click.argument('command', required=False)
def help_cmd(command: Optional[str]) -> None:
    """Show usage for a command, or a summary of all commands."""
    click.echo(render_help(command), nl=False)


if __name__ == '__main__':
    main()
