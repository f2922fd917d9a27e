"""Entity lifecycle engine.

State transitions on entity directories: add creates the directory (plus
seeded contents), remove deletes it recursively, suspend and resume create
and delete the ``suspended`` marker. Each operation returns whether it
succeeded; callers decide what a failure means.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Self

from .config import format_config_text
from .entities import (
    GROUPS_DIR,
    ORGS_DIR,
    USER_CONFIG_FILE,
    USERS_DIR,
    EntityKind,
    marker_path,
    resolve,
)
from .keys import KeyGenerator, generate_key
from .storage import DIR_MODE, FILE_MODE, Storage

logger = logging.getLogger(__name__)


@dataclass
class CreateResult:
    """Outcome of a create; ``key`` is only set for new users."""
    success: bool
    key: Optional[str] = field(default=None, repr=False)

    def __bool__(self: Self) -> bool:
        return self.success


class LifecycleEngine:
    """Applies lifecycle transitions to entities under one data root."""

    def __init__(
        self: Self,
        storage: Storage,
        root: Path,
        key_generator: KeyGenerator = generate_key
    ) -> None:
        """Initialize the engine.

        Args:
            storage: Directory and file primitives.
            root: The validated data root.
            key_generator: Produces new user keys.
        """
        self.storage = storage
        self.root = Path(root)
        self.key_generator = key_generator

    def path_for(self: Self, kind: EntityKind, org: str, child: Optional[str] = None) -> Path:
        return resolve(self.root, kind, org, child)

    def create(self: Self, kind: EntityKind, org: str, child: Optional[str] = None) -> CreateResult:
        """Create an entity directory with owner-only permissions.

        Organizations are seeded with empty ``groups/`` and ``users/``
        directories. Users additionally get a generated key persisted in a
        ``config`` file inside their directory; the key is handed back in
        the result for the operator and is never logged.

        Args:
            kind: Kind of entity.
            org: Organization name (the target itself for organizations).
            child: Group or user name.

        Returns:
            A CreateResult, falsy if the directory could not be made or
            seeded. A directory that was made but not seeded is removed.
        """
        target = self.path_for(kind, org, child)

        # The collection directory (orgs/, groups/ or users/) is made on demand.
        if not self.storage.make_dir(target.parent, DIR_MODE, parents=True):
            logger.debug("Could not prepare %s", target.parent)
            return CreateResult(False)

        if not self.storage.make_dir(target, DIR_MODE):
            return CreateResult(False)

        if kind is EntityKind.ORG:
            seeded = all(
                self.storage.make_dir(target / name, DIR_MODE)
                for name in (GROUPS_DIR, USERS_DIR)
            )
            return CreateResult(True) if seeded else self._discard(target)

        if kind is EntityKind.USER:
            result = self._seed_user(target)
            return result if result else self._discard(target)

        return CreateResult(True)

    def _discard(self: Self, target: Path) -> CreateResult:
        # A failed create leaves the entity absent.
        if not self.storage.remove_tree(target):
            logger.warning("Could not remove partially created %s", target)
        return CreateResult(False)

    def _seed_user(self: Self, target: Path) -> CreateResult:
        key = self.key_generator()
        conf_file = target / USER_CONFIG_FILE

        if not self.storage.create_file(conf_file, FILE_MODE):
            return CreateResult(False)
        if not self.storage.write_text(conf_file, format_config_text({"key": key}), FILE_MODE):
            return CreateResult(False)

        logger.debug("Stored new user key in %s", conf_file)
        return CreateResult(True, key)

    def remove(self: Self, kind: EntityKind, org: str, child: Optional[str] = None) -> bool:
        """Recursively delete an entity directory.

        Group and user memberships are not revoked; removal never waits on
        them.
        """
        # TODO: revoke group memberships here once membership tracking exists.
        return self.storage.remove_tree(self.path_for(kind, org, child))

    def suspend(self: Self, entity_dir: Path) -> bool:
        """Create the suspension marker. Fails if it is already present."""
        return self.storage.create_file(marker_path(entity_dir), FILE_MODE)

    def resume(self: Self, entity_dir: Path) -> bool:
        """Delete the suspension marker. Fails if it is absent."""
        return self.storage.remove_file(marker_path(entity_dir))

    def is_suspended(self: Self, entity_dir: Path) -> bool:
        return self.storage.exists(marker_path(entity_dir))

    @property
    def orgs_dir(self: Self) -> Path:
        return self.root / ORGS_DIR
