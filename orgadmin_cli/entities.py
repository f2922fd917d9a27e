"""Entity kinds and their on-disk layout.

Organizations live at ``<root>/orgs/<org>``; groups and users live one level
deeper, under ``groups/`` and ``users/`` inside their organization.
"""

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional, Self, Tuple, Union

from .matching import close_enough

ORGS_DIR = "orgs"
GROUPS_DIR = "groups"
USERS_DIR = "users"
SUSPENDED_MARKER = "suspended"
USER_CONFIG_FILE = "config"


@dataclass(frozen=True)
class KindSpec:
    """Per-kind table row: naming, layout and arity."""
    keywords: Tuple[str, ...]
    label: str
    collection: Optional[str]
    needs_parent: bool

    @property
    def keyword(self: Self) -> str:
        return self.keywords[0]

    @property
    def placeholder(self: Self) -> str:
        return f"<{self.keyword}>"

    @property
    def min_args(self: Self) -> int:
        """Arguments needed after the kind token."""
        return 2 if self.needs_parent else 1


class EntityKind(Enum):
    """The three entity kinds, in matching order."""
    ORG = KindSpec(("org", "organization"), "organization", None, False)
    GROUP = KindSpec(("group",), "group", GROUPS_DIR, True)
    USER = KindSpec(("user",), "user", USERS_DIR, True)

    @property
    def spec(self: Self) -> KindSpec:
        return self.value

    @property
    def label(self: Self) -> str:
        return self.value.label

    @property
    def keyword(self: Self) -> str:
        return self.value.keyword

    @property
    def needs_parent(self: Self) -> bool:
        return self.value.needs_parent

    def usage_form(self: Self) -> str:
        """Argument form for this kind, e.g. ``group <org> <group>``."""
        if self.needs_parent:
            return f"{self.keyword} <org> {self.value.placeholder}"
        return f"{self.keyword} {self.value.placeholder}"

    @classmethod
    def match(cls, token: str) -> Optional["EntityKind"]:
        """Resolve an abbreviated kind token; the first kind to match wins."""
        for kind in cls:
            if any(close_enough(keyword, token) for keyword in kind.value.keywords):
                return kind
        return None


def resolve(
    root: Union[str, Path],
    kind: EntityKind,
    org: str,
    child: Optional[str] = None
) -> Path:
    """Compute the directory for an entity. Does not touch the filesystem.

    Args:
        root: The configured data root.
        kind: Which kind of entity.
        org: Organization name.
        child: Group or user name; required for those kinds.

    Returns:
        The entity's directory.

    Raises:
        ValueError: If a group or user is resolved without a child name.
    """
    org_dir = Path(root) / ORGS_DIR / org
    if kind is EntityKind.ORG:
        return org_dir

    if child is None:
        raise ValueError(f"A {kind.label} path needs a {kind.label} name")

    return org_dir / kind.value.collection / child


def marker_path(entity_dir: Path) -> Path:
    """Suspension marker location for an entity directory."""
    return entity_dir / SUSPENDED_MARKER
