"""orgadmin - administrative commands for organizations, groups and users."""

__version__ = "0.1.0"

from .config import AdminConfig
from .dispatcher import CommandDispatcher, CommandResult, TargetOutcome, Verb
from .entities import EntityKind, resolve
from .errors import (
    AdminError,
    ConfigurationError,
    ErrorKind,
    OperationError,
    PreconditionError,
    UsageError,
)
from .storage import FilesystemStorage, MemoryStorage, Storage, entity_exists

__all__ = [
    '__version__',
    'AdminConfig',
    'AdminError',
    'CommandDispatcher',
    'CommandResult',
    'ConfigurationError',
    'EntityKind',
    'ErrorKind',
    'FilesystemStorage',
    'MemoryStorage',
    'OperationError',
    'PreconditionError',
    'Storage',
    'TargetOutcome',
    'UsageError',
    'Verb',
    'entity_exists',
    'resolve',
]
