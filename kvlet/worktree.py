"""Working directory access and status classification."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Literal, Mapping

from .objects import object_id
from .staging import StagingArea

META_DIR = ".kvlet"

Category = Literal["untracked", "modified", "staged", "removed", "unchanged"]


class WorkingTree(ABC):
    """File I/O over the working directory.

    Paths are plain file names relative to the working directory root.
    """

    @abstractmethod
    def read(self, path: str) -> bytes:
        """Read a file's bytes. Raises FileNotFoundError if absent."""

    @abstractmethod
    def write(self, path: str, data: bytes) -> None:
        """Create or overwrite a file."""

    @abstractmethod
    def list_files(self) -> list[str]:
        """All working files, sorted."""

    @abstractmethod
    def exists(self, path: str) -> bool:
        """Check whether a file is present."""

    @abstractmethod
    def delete(self, path: str) -> None:
        """Delete a file if present."""


class Directory(WorkingTree):
    """A real directory on disk.

    Only plain files directly under ``root`` are part of the working tree;
    subdirectories, including the repository metadata directory, are not.
    """

    def __init__(self, root: str | Path, ignore: Iterable[str] = (META_DIR,)) -> None:
        self.root = Path(root)
        self.ignore = frozenset(ignore)

    def _path(self, path: str) -> Path:
        return self.root / path

    def read(self, path: str) -> bytes:
        return self._path(path).read_bytes()

    def write(self, path: str, data: bytes) -> None:
        self._path(path).write_bytes(data)

    def list_files(self) -> list[str]:
        if not self.root.is_dir():
            return []
        return sorted(
            entry.name
            for entry in self.root.iterdir()
            if entry.is_file() and entry.name not in self.ignore
        )

    def exists(self, path: str) -> bool:
        """True only for a plain file directly under ``root``."""
        if path in (".", "..") or path in self.ignore or Path(path).name != path:
            return False
        return self._path(path).is_file()

    def delete(self, path: str) -> None:
        self._path(path).unlink(missing_ok=True)


class MemoryTree(WorkingTree):
    """A dict-backed working tree."""

    def __init__(self, files: Mapping[str, bytes] | None = None) -> None:
        self.files: dict[str, bytes] = dict(files or {})

    def read(self, path: str) -> bytes:
        try:
            return self.files[path]
        except KeyError:
            raise FileNotFoundError(path) from None

    def write(self, path: str, data: bytes) -> None:
        self.files[path] = data

    def list_files(self) -> list[str]:
        return sorted(self.files)

    def exists(self, path: str) -> bool:
        return path in self.files

    def delete(self, path: str) -> None:
        self.files.pop(path, None)


@dataclass(frozen=True)
class WorkingTreeStatus:
    """Every relevant path sorted into exactly one category.

    ``modified`` pairs a path with ``"modified"`` or ``"deleted"``.
    """

    staged: tuple[str, ...] = ()
    removed: tuple[str, ...] = ()
    modified: tuple[tuple[str, str], ...] = ()
    untracked: tuple[str, ...] = ()
    unchanged: tuple[str, ...] = ()

    def is_clean(self) -> bool:
        """No staged, removed or unstaged changes. Untracked files are allowed."""
        return not (self.staged or self.removed or self.modified)

    def category(self, path: str) -> Category | None:
        if path in self.staged:
            return "staged"
        if path in self.removed:
            return "removed"
        if any(p == path for p, _ in self.modified):
            return "modified"
        if path in self.untracked:
            return "untracked"
        if path in self.unchanged:
            return "unchanged"
        return None


def scan(
    tree: Mapping[str, str], staging: StagingArea, files: WorkingTree
) -> WorkingTreeStatus:
    """Classify the working tree against the current commit and staging area.

    Precedence, first match wins:

    1. removed: staged for removal.
    2. modified-not-staged, as ``deleted``: tracked or staged for addition
       but missing from disk.
    3. modified-not-staged, as ``modified``: the working copy hashes
       differently from the staged blob, or from the tracked blob when
       nothing is staged.
    4. staged: staged for addition and the working copy matches.
    5. untracked: on disk, neither tracked nor staged.
    6. unchanged.
    """
    additions, removals = staging.snapshot()
    on_disk = set(files.list_files())
    paths = on_disk | set(tree) | set(additions) | removals

    staged: list[str] = []
    removed: list[str] = []
    modified: list[tuple[str, str]] = []
    untracked: list[str] = []
    unchanged: list[str] = []

    for path in sorted(paths):
        if path in removals:
            removed.append(path)
            continue
        expected = additions.get(path, tree.get(path))
        if expected is None:
            untracked.append(path)
        elif path not in on_disk:
            modified.append((path, "deleted"))
        elif object_id(files.read(path)) != expected:
            modified.append((path, "modified"))
        elif path in additions:
            staged.append(path)
        else:
            unchanged.append(path)

    return WorkingTreeStatus(
        staged=tuple(staged),
        removed=tuple(removed),
        modified=tuple(modified),
        untracked=tuple(untracked),
        unchanged=tuple(unchanged),
    )
