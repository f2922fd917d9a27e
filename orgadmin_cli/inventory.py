"""Read-only listing of the entities under a data root."""

from pathlib import Path
from typing import Any, Dict, List, Self

from .entities import GROUPS_DIR, ORGS_DIR, USERS_DIR, EntityKind, marker_path, resolve
from .errors import PreconditionError
from .storage import Storage, entity_exists
from .validators import InputValidator


class Inventory:
    """Lists organizations and their members with their state."""

    def __init__(self: Self, storage: Storage, root: Path) -> None:
        self.storage = storage
        self.root = Path(root)

    def _state(self: Self, entity_dir: Path) -> str:
        return "suspended" if self.storage.exists(marker_path(entity_dir)) else "active"

    def organizations(self: Self) -> List[Dict[str, Any]]:
        """One row per organization, with group and user counts."""
        rows = []
        for name in self.storage.list_children(self.root / ORGS_DIR):
            org_dir = resolve(self.root, EntityKind.ORG, name)
            rows.append({
                'kind': EntityKind.ORG.label,
                'name': name,
                'state': self._state(org_dir),
                'groups': len(self.storage.list_children(org_dir / GROUPS_DIR)),
                'users': len(self.storage.list_children(org_dir / USERS_DIR)),
            })
        return rows

    def members(self: Self, org: str) -> List[Dict[str, Any]]:
        """Groups then users of one organization.

        Raises:
            UsageError: If the organization name is invalid.
            PreconditionError: If the organization does not exist.
        """
        InputValidator.validate_entity_name(org, EntityKind.ORG.label)
        if not entity_exists(self.storage, self.root, EntityKind.ORG, org):
            raise PreconditionError(f"Organization '{org}' does not exist.")

        org_dir = resolve(self.root, EntityKind.ORG, org)
        rows = []
        for kind in (EntityKind.GROUP, EntityKind.USER):
            for name in self.storage.list_children(org_dir / kind.spec.collection):
                rows.append({
                    'kind': kind.label,
                    'name': name,
                    'state': self._state(resolve(self.root, kind, org, name)),
                })
        return rows
