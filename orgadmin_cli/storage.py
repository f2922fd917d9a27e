"""Repository layer over the data root.

The directory tree under the root is the only state the processor has. All
reads and writes go through a ``Storage`` so the lifecycle and dispatch rules
can run against ``MemoryStorage`` in tests and ``FilesystemStorage`` in
production. Mutating primitives report failure by returning False.
"""

import logging
import os
import shutil
from abc import ABC, abstractmethod
from pathlib import Path, PurePath
from typing import Dict, Iterable, List, Optional, Self, Tuple, Union

from .entities import EntityKind, resolve

logger = logging.getLogger(__name__)

PathLike = Union[str, PurePath]

DIR_MODE = 0o700
FILE_MODE = 0o600


class Storage(ABC):
    """Directory and file primitives the core calls into."""

    @abstractmethod
    def is_dir(self: Self, path: PathLike) -> bool:
        """True if ``path`` exists and is a directory."""

    @abstractmethod
    def exists(self: Self, path: PathLike) -> bool:
        """True if anything exists at ``path``."""

    @abstractmethod
    def make_dir(self: Self, path: PathLike, mode: int = DIR_MODE, parents: bool = False) -> bool:
        """Create a directory.

        With ``parents`` missing ancestors are created and an existing
        directory is not an error. Without it the parent must exist and the
        directory must not.
        """

    @abstractmethod
    def remove_tree(self: Self, path: PathLike) -> bool:
        """Recursively delete a directory and everything below it."""

    @abstractmethod
    def create_file(self: Self, path: PathLike, mode: int = FILE_MODE) -> bool:
        """Create an empty file; fails if it already exists."""

    @abstractmethod
    def remove_file(self: Self, path: PathLike) -> bool:
        """Delete a file; fails if it does not exist."""

    @abstractmethod
    def write_text(self: Self, path: PathLike, text: str, mode: int = FILE_MODE) -> bool:
        """Replace a file's contents."""

    @abstractmethod
    def read_text(self: Self, path: PathLike) -> Optional[str]:
        """Read a file, or None if it cannot be read."""

    @abstractmethod
    def list_children(self: Self, path: PathLike) -> List[str]:
        """Sorted names of the subdirectories of ``path``."""


class FilesystemStorage(Storage):
    """Storage backed by the local filesystem."""

    def is_dir(self: Self, path: PathLike) -> bool:
        return Path(path).is_dir()

    def exists(self: Self, path: PathLike) -> bool:
        return Path(path).exists()

    def make_dir(self: Self, path: PathLike, mode: int = DIR_MODE, parents: bool = False) -> bool:
        path = Path(path)
        try:
            path.mkdir(mode=mode, parents=parents, exist_ok=parents)
            os.chmod(path, mode)
        except OSError as e:
            logger.debug("mkdir %s failed: %s", path, e)
            return False
        return True

    def remove_tree(self: Self, path: PathLike) -> bool:
        path = Path(path)
        if not path.is_dir():
            logger.debug("rmtree %s skipped: not a directory", path)
            return False
        try:
            shutil.rmtree(path)
        except OSError as e:
            logger.debug("rmtree %s failed: %s", path, e)
            return False
        return True

    def create_file(self: Self, path: PathLike, mode: int = FILE_MODE) -> bool:
        path = Path(path)
        try:
            fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_EXCL, mode)
            os.close(fd)
            os.chmod(path, mode)
        except OSError as e:
            logger.debug("create %s failed: %s", path, e)
            return False
        return True

    def remove_file(self: Self, path: PathLike) -> bool:
        path = Path(path)
        try:
            path.unlink()
        except OSError as e:
            logger.debug("unlink %s failed: %s", path, e)
            return False
        return True

    def write_text(self: Self, path: PathLike, text: str, mode: int = FILE_MODE) -> bool:
        path = Path(path)
        temp_file = path.with_name(f".{path.name}.tmp")
        try:
            fd = os.open(temp_file, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, mode)
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(text)
            os.chmod(temp_file, mode)
            # Atomic move
            temp_file.replace(path)
        except OSError as e:
            logger.debug("write %s failed: %s", path, e)
            if temp_file.exists():
                temp_file.unlink()
            return False
        return True

    def read_text(self: Self, path: PathLike) -> Optional[str]:
        try:
            return Path(path).read_text(encoding="utf-8")
        except OSError as e:
            logger.debug("read %s failed: %s", path, e)
            return None

    def list_children(self: Self, path: PathLike) -> List[str]:
        path = Path(path)
        if not path.is_dir():
            return []
        return sorted(child.name for child in path.iterdir() if child.is_dir())


class MemoryStorage(Storage):
    """In-memory storage for tests and dry runs.

    Directories and files are kept in dictionaries keyed by path, each with
    the mode it was created with.
    """

    def __init__(self: Self, dirs: Iterable[PathLike] = ()) -> None:
        """Initialize with pre-existing directories (ancestors included).

        Args:
            dirs: Directories that exist before any operation, such as the
                data root.
        """
        self.dirs: Dict[PurePath, int] = {}
        self.files: Dict[PurePath, Tuple[str, int]] = {}
        for directory in dirs:
            self.make_dir(directory, parents=True)

    @staticmethod
    def _key(path: PathLike) -> PurePath:
        return PurePath(path)

    def _under(self: Self, path: PurePath, candidate: PurePath) -> bool:
        return candidate == path or path in candidate.parents

    def is_dir(self: Self, path: PathLike) -> bool:
        return self._key(path) in self.dirs

    def exists(self: Self, path: PathLike) -> bool:
        key = self._key(path)
        return key in self.dirs or key in self.files

    def make_dir(self: Self, path: PathLike, mode: int = DIR_MODE, parents: bool = False) -> bool:
        key = self._key(path)
        if key in self.files:
            return False
        if key in self.dirs:
            return parents
        parent = key.parent
        if parent != key and parent not in self.dirs:
            if not parents or not self.make_dir(parent, mode, parents=True):
                return False
        self.dirs[key] = mode
        return True

    def remove_tree(self: Self, path: PathLike) -> bool:
        key = self._key(path)
        if key not in self.dirs:
            return False
        for directory in [d for d in self.dirs if self._under(key, d)]:
            del self.dirs[directory]
        for file in [f for f in self.files if self._under(key, f)]:
            del self.files[file]
        return True

    def create_file(self: Self, path: PathLike, mode: int = FILE_MODE) -> bool:
        key = self._key(path)
        if self.exists(key) or key.parent not in self.dirs:
            return False
        self.files[key] = ("", mode)
        return True

    def remove_file(self: Self, path: PathLike) -> bool:
        key = self._key(path)
        if key not in self.files:
            return False
        del self.files[key]
        return True

    def write_text(self: Self, path: PathLike, text: str, mode: int = FILE_MODE) -> bool:
        key = self._key(path)
        if key in self.dirs or key.parent not in self.dirs:
            return False
        self.files[key] = (text, mode)
        return True

    def read_text(self: Self, path: PathLike) -> Optional[str]:
        entry = self.files.get(self._key(path))
        return entry[0] if entry else None

    def list_children(self: Self, path: PathLike) -> List[str]:
        key = self._key(path)
        return sorted(d.name for d in self.dirs if d.parent == key and d != key)


def entity_exists(
    storage: Storage,
    root: PathLike,
    kind: EntityKind,
    org: str,
    child: Optional[str] = None
) -> bool:
    """Existence oracle: does the entity's resolved path exist as a directory?"""
    return storage.is_dir(resolve(root, kind, org, child))
