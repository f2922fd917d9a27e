"""Configuration for the orgadmin CLI.

Settings come from the server configuration file at ``<root>/config`` and
from command-line overrides. The file format is one ``name=value`` pair per
line; the same format is used for each user's ``config`` file.
"""

import os
from pathlib import Path
from typing import Any, Dict, Iterable, Optional, Self

from .entities import ORGS_DIR
from .errors import ConfigurationError, OperationError, PreconditionError, UsageError
from .storage import DIR_MODE, FilesystemStorage, Storage

ROOT_ENV_VAR = "ORGADMIN_DATA"
CONFIG_FILE = "config"

TRUE_VALUES = {"1", "true", "yes", "on", "y", "t"}


def parse_config_text(text: str) -> Dict[str, str]:
    """Parse ``name=value`` lines, skipping blanks and ``#`` comments."""
    values: Dict[str, str] = {}
    for line in text.splitlines():
        line = line.strip()
        if line and not line.startswith("#") and "=" in line:
            key, val = line.split("=", 1)
            values[key.strip()] = val.strip()
    return values


def format_config_text(values: Dict[str, Any]) -> str:
    """Serialize settings as sorted ``name=value`` lines."""
    return "".join(f"{key}={_format_value(values[key])}\n" for key in sorted(values))


def _format_value(value: Any) -> str:
    if isinstance(value, bool):
        return "1" if value else "0"
    return str(value)


def parse_bool(raw: str) -> bool:
    """Parse the boolean spellings accepted in configuration files."""
    return raw.strip().lower() in TRUE_VALUES


def parse_overrides(assignments: Iterable[str]) -> Dict[str, str]:
    """Parse ``NAME=VALUE`` override strings.

    Raises:
        UsageError: If an assignment has no ``=`` or an empty name.
    """
    result = {}
    for assignment in assignments:
        if "=" not in assignment:
            raise UsageError(f"Invalid override '{assignment}' - expected NAME=VALUE.")
        key, value = assignment.split("=", 1)
        key = key.strip()
        if not key:
            raise UsageError(f"Invalid override '{assignment}' - the name is empty.")
        result[key] = value.strip()
    return result


class AdminConfig:
    """Resolved settings consumed by the command processor."""

    # Configuration schema for validation
    CONFIG_SCHEMA = {
        'root': {'type': str, 'required': True},
        'verbose': {'type': bool, 'required': False, 'default': False},
        'audit': {'type': bool, 'required': False, 'default': True},
    }

    def __init__(self: Self, root: str = "", **settings: Any) -> None:
        """Initialize from explicit values; schema defaults fill the rest.

        Args:
            root: The data root path.
            **settings: Any other schema setting (``verbose``, ``audit``).
        """
        self.values: Dict[str, Any] = {
            key: schema['default']
            for key, schema in self.CONFIG_SCHEMA.items()
            if 'default' in schema
        }
        self.values['root'] = root
        self.update(settings)

    def update(self: Self, settings: Dict[str, Any]) -> None:
        """Merge settings, coercing strings to the schema type.

        Keys outside the schema are ignored.

        Raises:
            ConfigurationError: If a value cannot be coerced.
        """
        for key, value in settings.items():
            schema = self.CONFIG_SCHEMA.get(key)
            if schema is None or value is None:
                continue
            self.values[key] = self._coerce(key, value, schema['type'])

    @staticmethod
    def _coerce(key: str, value: Any, expected: type) -> Any:
        if isinstance(value, expected):
            return value
        if isinstance(value, str):
            if expected is bool:
                return parse_bool(value)
            return expected(value)
        raise ConfigurationError(f"Setting '{key}' must be of type {expected.__name__}")

    @property
    def root(self: Self) -> str:
        return self.values['root']

    @property
    def verbose(self: Self) -> bool:
        return self.values['verbose']

    @property
    def audit(self: Self) -> bool:
        return self.values['audit']

    def get(self: Self, key: str, default: Any = None) -> Any:
        return self.values.get(key, default)

    def validate_root(self: Self, storage: Storage) -> Path:
        """Check the data root is set and is an existing directory.

        Returns:
            The root as a path.

        Raises:
            ConfigurationError: If the root is empty or missing.
        """
        if not self.root:
            raise ConfigurationError("The '--data' option is required.")
        if not storage.is_dir(self.root):
            raise ConfigurationError("The '--data' path does not exist.")
        return Path(self.root)

    def initialize(self: Self, storage: Storage) -> Path:
        """Prepare the data root: ``orgs/`` plus a default ``config`` file.

        Returns:
            The root as a path.

        Raises:
            ConfigurationError: If the root is empty or missing.
            PreconditionError: If the root already has a config file.
            OperationError: If a directory or the file cannot be written.
        """
        root = self.validate_root(storage)
        config_file = root / CONFIG_FILE
        if storage.exists(config_file):
            raise PreconditionError(f"The data root '{root}' is already initialized.")

        if not storage.make_dir(root / ORGS_DIR, DIR_MODE, parents=True):
            raise OperationError(f"Failed to create '{root / ORGS_DIR}'.")
        if not storage.create_file(config_file) or \
                not storage.write_text(config_file, self.defaults_text()):
            raise OperationError(f"Failed to write '{config_file}'.")
        return root

    def defaults_text(self: Self) -> str:
        """Contents written to a freshly initialized server config file."""
        return format_config_text({
            key: schema['default']
            for key, schema in self.CONFIG_SCHEMA.items()
            if 'default' in schema
        })

    @classmethod
    def load(
        cls,
        root: Optional[str] = None,
        overrides: Optional[Dict[str, str]] = None,
        verbose: Optional[bool] = None,
        storage: Optional[Storage] = None
    ) -> "AdminConfig":
        """Resolve the configuration for one invocation.

        Precedence from lowest to highest: schema defaults, ``<root>/config``,
        ``overrides``, then the ``verbose`` flag.

        Args:
            root: The ``--data`` value; falls back to ``$ORGADMIN_DATA``.
            overrides: ``--set`` values.
            verbose: The ``--verbose/--quiet`` flag, None when not given.
            storage: Where to read the config file from.

        Returns:
            The resolved configuration. The root itself is not validated here.
        """
        storage = storage or FilesystemStorage()
        root = root or os.environ.get(ROOT_ENV_VAR, "")
        config = cls(root=root)

        if root:
            text = storage.read_text(Path(root) / CONFIG_FILE)
            if text is not None:
                file_values = parse_config_text(text)
                file_values.pop('root', None)
                config.update(file_values)

        if overrides:
            config.update({k: v for k, v in overrides.items() if k != 'root'})

        if verbose is not None:
            config.values['verbose'] = verbose

        return config
