"""Repository factory."""

import time
from pathlib import Path
from typing import Callable, Literal

from .errors import RepositoryNotInitialized
from .kv.base import KVStore
from .repository import DEFAULT_BRANCH, Repository
from .worktree import META_DIR, Directory


def repository(
    path: str | Path = ".",
    *,
    storage: Literal["disk", "memory"] = "disk",
    create: bool = False,
    branch: str = DEFAULT_BRANCH,
    clock: Callable[[], float] = time.time,
) -> Repository:
    """Open (or create) the repository for a working directory.

    Args:
        path: The working directory.
        storage: ``"disk"`` (default) keeps repository state in
            ``<path>/.kvlet`` via diskcache. ``"memory"`` keeps it in
            process memory, so it only makes sense with ``create=True``.
        create: Initialize a new repository instead of opening one.
        branch: Root branch name for a new repository.
        clock: Source of commit timestamps.

    Returns:
        A ``Repository`` over ``Directory(path)``.

    Raises:
        RepositoryNotInitialized: Opening a directory with no repository.
        RepositoryExists: Creating over an existing repository.
    """
    root = Path(path)
    backend: KVStore
    if storage == "disk":
        meta = root / META_DIR
        if not create and not meta.is_dir():
            raise RepositoryNotInitialized()
        from .kv.disk import Disk

        backend = Disk(str(meta))
    elif storage == "memory":
        from .kv.memory import Memory

        backend = Memory()
    else:
        raise ValueError(f"Unknown storage: {storage!r}")

    files = Directory(root)
    if create:
        return Repository.init(backend, files, branch=branch, clock=clock)
    return Repository(backend, files, clock=clock)
