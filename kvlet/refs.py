"""Branch pointers, HEAD and the persisted staging area."""

import pickle

from .kv.base import KVStore
from .staging import StagingArea

BRANCH_HEAD = "__branch_head__%s"
HEAD_KEY = "__head__"
STAGED_ADDITIONS = "__staged_additions__"
STAGED_REMOVALS = "__staged_removals__"


class Refs:
    """Mutable repository pointers kept beside the objects in one KV store.

    Reads go straight to the store. Writes are returned as batches by the
    ``*_writes`` helpers so an operation can apply them together with its
    object writes in a single atomic ``KVStore.write``.
    """

    def __init__(self, store: KVStore) -> None:
        self.store = store

    # -- HEAD --

    @property
    def head(self) -> str | None:
        """Name of the current branch, or None before ``init``."""
        head_bytes = self.store.get(HEAD_KEY)
        if head_bytes is None:
            return None
        return pickle.loads(head_bytes)

    @staticmethod
    def head_writes(branch: str) -> dict[str, bytes]:
        return {HEAD_KEY: pickle.dumps(branch)}

    # -- Branches --

    def branch(self, name: str) -> str | None:
        """Commit id a branch points at, or None if there is no such branch."""
        head_bytes = self.store.get(BRANCH_HEAD % name)
        if head_bytes is None:
            return None
        return pickle.loads(head_bytes)

    def branches(self) -> list[str]:
        """All branch names, sorted."""
        prefix = BRANCH_HEAD.replace("%s", "")
        return sorted(
            key[len(prefix):]
            for key in self.store.keys(prefix)
            if key[len(prefix):]
        )

    @staticmethod
    def branch_writes(name: str, commit_id: str) -> dict[str, bytes]:
        return {BRANCH_HEAD % name: pickle.dumps(commit_id)}

    def delete_branch(self, name: str) -> None:
        self.store.remove(BRANCH_HEAD % name)

    # -- Staging area --

    def load_staging(self) -> StagingArea:
        additions_bytes = self.store.get(STAGED_ADDITIONS)
        removals_bytes = self.store.get(STAGED_REMOVALS)
        additions = pickle.loads(additions_bytes) if additions_bytes else {}
        removals = pickle.loads(removals_bytes) if removals_bytes else []
        return StagingArea(additions, removals)

    @staticmethod
    def staging_writes(staging: StagingArea) -> dict[str, bytes]:
        additions, removals = staging.snapshot()
        return {
            STAGED_ADDITIONS: pickle.dumps(dict(sorted(additions.items()))),
            STAGED_REMOVALS: pickle.dumps(sorted(removals)),
        }

    def save_staging(self, staging: StagingArea) -> None:
        self.store.write(self.staging_writes(staging))
