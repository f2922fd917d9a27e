"""Command dispatcher for entity lifecycle verbs.

``add``, ``remove``, ``suspend`` and ``resume`` share one flow:

1. validate the data root,
2. resolve the entity kind from an abbreviated token,
3. check the argument count for that kind,
4. check the parent organization for groups and users,
5. for each target in order: check existence, apply the lifecycle
   operation, report.

The first failure ends the invocation. Targets processed before it are not
rolled back.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import List, Optional, Self, Sequence, Union

from .audit import AuditLogger, get_audit_logger
from .config import AdminConfig
from .entities import EntityKind
from .errors import (
    AdminError,
    ErrorKind,
    OperationError,
    PreconditionError,
    UsageError,
)
from .keys import KeyGenerator, generate_key
from .lifecycle import LifecycleEngine
from .matching import close_enough
from .storage import FilesystemStorage, Storage, entity_exists
from .ui.display import ConsoleReporter, Reporter
from .validators import InputValidator

logger = logging.getLogger(__name__)

PROGRAM = "orgadmin"
KIND_CHOICES = "expected 'org', 'group' or 'user'"


@dataclass(frozen=True)
class VerbSpec:
    name: str
    must_exist: bool
    past: str
    preposition: str


class Verb(Enum):
    """Lifecycle verbs and how each one reports."""
    ADD = VerbSpec("add", False, "Created", "for")
    REMOVE = VerbSpec("remove", True, "Removed", "from")
    SUSPEND = VerbSpec("suspend", True, "Suspended", "in")
    RESUME = VerbSpec("resume", True, "Resumed", "in")

    @property
    def spec(self: Self) -> VerbSpec:
        return self.value

    @classmethod
    def match(cls, token: str) -> Optional["Verb"]:
        for verb in cls:
            if close_enough(verb.value.name, token):
                return verb
        return None


@dataclass
class TargetOutcome:
    """One successfully processed target."""
    kind: EntityKind
    name: str
    path: Path
    org: Optional[str] = None
    key: Optional[str] = field(default=None, repr=False)


@dataclass
class CommandResult:
    """What an invocation did, and the error that stopped it, if any."""
    verb: Optional[Verb]
    kind: Optional[EntityKind] = None
    org: Optional[str] = None
    outcomes: List[TargetOutcome] = field(default_factory=list)
    error: Optional[AdminError] = None
    failed_target: Optional[str] = None

    @property
    def ok(self: Self) -> bool:
        return self.error is None

    @property
    def error_kind(self: Self) -> Optional[ErrorKind]:
        return self.error.kind if self.error else None

    @property
    def message(self: Self) -> Optional[str]:
        return self.error.message if self.error else None

    def raise_for_error(self: Self) -> "CommandResult":
        """Raise the stored error, if any; otherwise return self."""
        if self.error is not None:
            raise self.error
        return self


def usage(verb: Verb, kind: EntityKind) -> str:
    return f"Usage: {PROGRAM} {verb.value.name} [options] {kind.usage_form()}"


class CommandDispatcher:
    """Runs lifecycle verbs against one data root."""

    def __init__(
        self: Self,
        config: AdminConfig,
        storage: Optional[Storage] = None,
        reporter: Optional[Reporter] = None,
        key_generator: KeyGenerator = generate_key,
        audit: Optional[AuditLogger] = None
    ) -> None:
        """Initialize the dispatcher.

        Args:
            config: Resolved settings (root and verbosity).
            storage: Filesystem primitives; the real filesystem by default.
            reporter: Operator-facing output channel.
            key_generator: Produces keys for new users.
            audit: Audit logger; the shared one by default.
        """
        self.config = config
        self.storage = storage or FilesystemStorage()
        self.reporter = reporter or ConsoleReporter(verbose=config.verbose)
        self.key_generator = key_generator
        self.audit = audit or get_audit_logger()

    def run(self: Self, verb: Union[Verb, str], args: Sequence[str]) -> CommandResult:
        """Run one verb over its arguments.

        Args:
            verb: The verb, or an abbreviation of its name.
            args: The entity-kind token followed by names, e.g.
                ``["group", "acme", "dev", "ops"]``.

        Returns:
            A CommandResult. Errors are carried in it, not raised.
        """
        if isinstance(verb, str):
            resolved = Verb.match(verb)
            if resolved is None:
                error = UsageError(f"Unrecognized command '{verb}'.")
                self.audit.log_error(error.kind.value, error.message)
                return CommandResult(None, error=error)
            verb = resolved

        result = CommandResult(verb)
        try:
            self._run(verb, list(args), result)
        except AdminError as e:
            result.error = e
            if result.failed_target is None:
                self.audit.log_error(e.kind.value, e.message)
        return result

    def dispatch(self: Self, verb: Union[Verb, str], args: Sequence[str]) -> CommandResult:
        """Like ``run`` but raises the error instead of returning it."""
        return self.run(verb, args).raise_for_error()

    def _run(self: Self, verb: Verb, args: List[str], result: CommandResult) -> None:
        root = self.config.validate_root(self.storage)

        if not args:
            raise UsageError(f"Subcommand not specified - {KIND_CHOICES}.")

        kind = EntityKind.match(args[0])
        if kind is None:
            raise UsageError(f"Unrecognized argument '{args[0]}' - {KIND_CHOICES}.")
        result.kind = kind

        names = args[1:]
        if len(names) < kind.spec.min_args:
            raise UsageError(usage(verb, kind))

        engine = LifecycleEngine(self.storage, root, self.key_generator)

        if kind.needs_parent:
            org, targets = names[0], names[1:]
            InputValidator.validate_entity_name(org, EntityKind.ORG.label)
            if not entity_exists(self.storage, root, EntityKind.ORG, org):
                raise PreconditionError(f"Organization '{org}' does not exist.")
            result.org = org
        else:
            org, targets = None, names

        for target in targets:
            InputValidator.validate_entity_name(target, kind.label)

        for target in targets:
            try:
                outcome = self._apply(verb, kind, org, target, engine, root)
            except AdminError as e:
                result.failed_target = target
                self.audit.log_operation(verb.value.name, kind.label, target, False,
                                         org=org, error_kind=e.kind.value)
                raise
            result.outcomes.append(outcome)

    def _apply(
        self: Self,
        verb: Verb,
        kind: EntityKind,
        org: Optional[str],
        target: str,
        engine: LifecycleEngine,
        root: Path
    ) -> TargetOutcome:
        """Check the precondition for one target, apply the verb and report."""
        label = kind.label.capitalize()
        owner, child = (org, target) if org is not None else (target, None)
        exists = entity_exists(self.storage, root, kind, owner, child)

        if verb.value.must_exist and not exists:
            raise PreconditionError(f"{label} '{target}' does not exist.")
        if not verb.value.must_exist and exists:
            raise PreconditionError(f"{label} '{target}' already exists.")

        path = engine.path_for(kind, owner, child)
        key = None
        if verb is Verb.ADD:
            created = engine.create(kind, owner, child)
            ok, key = created.success, created.key
        elif verb is Verb.REMOVE:
            ok = engine.remove(kind, owner, child)
        elif verb is Verb.SUSPEND:
            ok = engine.suspend(path)
        else:
            ok = engine.resume(path)

        if not ok:
            infinitive = "create" if verb is Verb.ADD else verb.value.name
            raise OperationError(f"Failed to {infinitive} {kind.label} '{target}'.")

        self.audit.log_operation(verb.value.name, kind.label, target, True, org=org)
        logger.debug("%s %s %s at %s", verb.value.name, kind.label, target, path)

        if key is not None:
            self.reporter.user_key(key)
        self.reporter.confirm(self.confirmation(verb, kind, target, org))

        return TargetOutcome(kind, target, path, org, key)

    @staticmethod
    def confirmation(verb: Verb, kind: EntityKind, target: str, org: Optional[str]) -> str:
        """Verbose confirmation line for one processed target."""
        if org is None:
            return f"{verb.value.past} {kind.label} '{target}'"
        return f"{verb.value.past} {kind.label} '{target}' {verb.value.preposition} organization '{org}'"
