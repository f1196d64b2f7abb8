"""Repository: the operations of the version-control engine.

A ``Repository`` is the explicit context of one unit of work. It owns the
KV store, the blob and commit stores, the refs, the staging area and the
working tree, and every operation goes through it.
"""

import time
from typing import Callable, Iterable, Mapping

from loguru import logger

from .errors import (
    BranchExists,
    CorruptRepository,
    EmptyMessage,
    FileNotInCommit,
    InvalidBranchOperation,
    InvalidFileName,
    NoCommitWithMessage,
    NoSuchBranch,
    NoSuchFile,
    NothingToCommit,
    NothingToMerge,
    RepositoryExists,
    RepositoryNotInitialized,
    UncommittedChanges,
    UntrackedFileInTheWay,
)
from .graph import CommitGraph
from .kv.base import KVStore
from .merge import MergeResult, conflict_content, plan_merge
from .objects import BLOB_KEY, Commit, CommitStore, ObjectStore, object_id
from .refs import Refs
from .staging import StagingArea
from .status import format_log, format_status
from .worktree import WorkingTree, WorkingTreeStatus, scan

DEFAULT_BRANCH = "master"
INITIAL_MESSAGE = "initial commit"
CONFLICT_MESSAGE = "Encountered a merge conflict."


class Repository:
    """A version-controlled working tree.

    Args:
        store: KV store holding objects, refs and the staging area.
        files: The working tree.
        clock: Source of commit timestamps (seconds since the epoch).

    Raises:
        RepositoryNotInitialized: ``store`` has no HEAD; use ``init()``.
    """

    def __init__(
        self,
        store: KVStore,
        files: WorkingTree,
        *,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.store = store
        self.files = files
        self.clock = clock
        self.blobs = ObjectStore(store, BLOB_KEY)
        self.commits = CommitStore(store)
        self.graph = CommitGraph(self.commits)
        self.refs = Refs(store)
        if self.refs.head is None:
            raise RepositoryNotInitialized()
        self.staging = self.refs.load_staging()

    @classmethod
    def init(
        cls,
        store: KVStore,
        files: WorkingTree,
        *,
        branch: str = DEFAULT_BRANCH,
        clock: Callable[[], float] = time.time,
    ) -> "Repository":
        """Create a repository with a single root commit on ``branch``."""
        refs = Refs(store)
        if refs.head is not None:
            raise RepositoryExists()
        root = Commit(message=INITIAL_MESSAGE, timestamp=0.0)
        root_id, writes = CommitStore(store).prepare_commit(root)
        writes.update(Refs.branch_writes(branch, root_id))
        writes.update(Refs.head_writes(branch))
        writes.update(Refs.staging_writes(StagingArea()))
        store.write(writes)
        logger.info("Initialized repository on branch {}", branch)
        return cls(store, files, clock=clock)

    # -- Pointers --

    @property
    def current_branch(self) -> str:
        branch = self.refs.head
        if branch is None:
            raise CorruptRepository("HEAD is missing")
        return branch

    def _branch_commit(self, name: str) -> str | None:
        commit_id = self.refs.branch(name)
        if commit_id is not None and not self.commits.exists(commit_id):
            raise CorruptRepository(
                f"Branch {name} points at missing commit {commit_id}"
            )
        return commit_id

    def head_commit_id(self) -> str:
        branch = self.current_branch
        commit_id = self._branch_commit(branch)
        if commit_id is None:
            raise CorruptRepository(f"HEAD names missing branch {branch}")
        return commit_id

    def head_commit(self) -> Commit:
        return self.commits.get_commit(self.head_commit_id())

    def branches(self) -> list[str]:
        return self.refs.branches()

    def close(self) -> None:
        """Release the KV store."""
        self.store.close()

    # -- Staging --

    def add(self, path: str) -> None:
        """Stage the working copy of ``path``.

        A file whose content matches the current commit is unstaged
        instead.
        """
        if not self.files.exists(path):
            raise NoSuchFile()
        try:
            path.encode("utf-8")
        except UnicodeEncodeError:
            raise InvalidFileName() from None
        data = self.files.read(path)
        blob_id = object_id(data)
        if self.head_commit().tree.get(path) == blob_id:
            self.staging.unstage(path)
        else:
            self.blobs.put(data)
            self.staging.stage_add(path, blob_id)
        self.refs.save_staging(self.staging)
        logger.debug("Added {}", path)

    def rm(self, path: str) -> None:
        """Unstage ``path`` and, if it is tracked, stage its removal and delete it."""
        tracked = self.head_commit().tree
        self.staging.stage_remove(path, tracked)
        self.refs.save_staging(self.staging)
        if path in tracked:
            self.files.delete(path)
        logger.debug("Removed {}", path)

    def commit(self, message: str) -> str:
        """Commit the staging area on the current branch. Returns the new id."""
        if not message.strip():
            raise EmptyMessage()
        if self.staging.is_empty():
            raise NothingToCommit()
        return self._commit(message, (self.head_commit_id(),), self.staging)

    def _commit(
        self,
        message: str,
        parents: tuple[str, ...],
        staging: StagingArea,
        extra_writes: Mapping[str, bytes] | None = None,
    ) -> str:
        """Write a commit, advance the current branch and clear staging in one batch."""
        branch = self.current_branch
        base = self.commits.get_commit(parents[0])
        commit = Commit(
            message=message,
            timestamp=self.clock(),
            parents=parents,
            tree=staging.apply(base.tree),
        )
        commit_id, writes = self.commits.prepare_commit(commit)
        writes.update(extra_writes or {})
        writes.update(Refs.branch_writes(branch, commit_id))
        writes.update(Refs.staging_writes(StagingArea()))
        self.store.write(writes)
        self.staging.clear()
        logger.info("Committed {} on {}: {}", commit_id[:8], branch, message)
        return commit_id

    # -- Inspection --

    def scan(self) -> WorkingTreeStatus:
        return scan(self.head_commit().tree, self.staging, self.files)

    def status(self) -> str:
        return format_status(self.branches(), self.current_branch, self.scan())

    def history(self) -> list[str]:
        """First-parent history of HEAD, newest first."""
        return list(self.graph.history(self.head_commit_id()))

    def log(self) -> str:
        return format_log(
            (commit_id, self.commits.get_commit(commit_id))
            for commit_id in self.history()
        )

    def global_log(self) -> str:
        """Every commit in the store, newest first."""
        entries = sorted(
            self.commits.commits(),
            key=lambda entry: (entry[1].timestamp, entry[0]),
            reverse=True,
        )
        return format_log(entries)

    def find(self, message: str) -> list[str]:
        """Ids of all commits with exactly ``message``."""
        found = sorted(
            commit_id
            for commit_id, commit in self.commits.commits()
            if commit.message == message
        )
        if not found:
            raise NoCommitWithMessage()
        return found

    # -- Checkout / reset --

    def checkout_file(self, path: str, commit_id: str | None = None) -> None:
        """Restore ``path`` from HEAD, or from a (possibly abbreviated) commit id.

        The staging area is left alone.
        """
        if commit_id is None:
            commit_id = self.head_commit_id()
        else:
            commit_id = self.commits.resolve(commit_id)
        tree = self.commits.get_commit(commit_id).tree
        if path not in tree:
            raise FileNotInCommit()
        self.files.write(path, self.blobs.get(tree[path]))
        logger.debug("Checked out {} from {}", path, commit_id[:8])

    def checkout_branch(self, name: str) -> None:
        """Make ``name`` the current branch and check out its tree."""
        target_id = self._branch_commit(name)
        if target_id is None:
            raise NoSuchBranch("No such branch exists.")
        if name == self.current_branch:
            raise InvalidBranchOperation("No need to checkout the current branch.")
        target = self.commits.get_commit(target_id).tree
        self._require_clean(target)
        self._switch_tree(self.head_commit().tree, target)
        writes = Refs.head_writes(name)
        writes.update(Refs.staging_writes(StagingArea()))
        self.store.write(writes)
        self.staging.clear()
        logger.info("Switched to branch {}", name)

    def reset(self, commit_id: str) -> str:
        """Move the current branch to a (possibly abbreviated) commit id.

        Returns the full commit id.
        """
        commit_id = self.commits.resolve(commit_id)
        target = self.commits.get_commit(commit_id).tree
        self._require_clean(target)
        self._switch_tree(self.head_commit().tree, target)
        writes = Refs.branch_writes(self.current_branch, commit_id)
        writes.update(Refs.staging_writes(StagingArea()))
        self.store.write(writes)
        self.staging.clear()
        logger.info("Reset {} to {}", self.current_branch, commit_id[:8])
        return commit_id

    # -- Branches --

    def branch(self, name: str) -> None:
        """Create a branch at the current commit."""
        if self.refs.branch(name) is not None:
            raise BranchExists()
        self.store.write(Refs.branch_writes(name, self.head_commit_id()))
        logger.info("Created branch {}", name)

    def rm_branch(self, name: str) -> None:
        """Delete a branch pointer. Its commits stay in the store."""
        if self.refs.branch(name) is None:
            raise NoSuchBranch()
        if name == self.current_branch:
            raise InvalidBranchOperation("Cannot remove the current branch.")
        self.refs.delete_branch(name)
        logger.info("Deleted branch {}", name)

    # -- Merge --

    def merge(self, name: str) -> MergeResult:
        """Merge branch ``name`` into the current branch.

        Fast-forwards when the current head is the split point, otherwise
        commits a three-way merge with two parents. Conflicting files are
        committed with conflict markers and listed on the result.
        """
        if not self.staging.is_empty() or self.scan().modified:
            raise UncommittedChanges()
        other_id = self._branch_commit(name)
        if other_id is None:
            raise NoSuchBranch()
        current = self.current_branch
        if name == current:
            raise InvalidBranchOperation("Cannot merge a branch with itself.")

        head_id = self.head_commit_id()
        current_tree = self.commits.get_commit(head_id).tree
        other_tree = self.commits.get_commit(other_id).tree
        split_id = self.graph.split_point(head_id, other_id)
        if split_id == other_id:
            raise NothingToMerge("Given branch is an ancestor of the current branch.")

        if split_id == head_id:
            self._require_no_untracked(other_tree)
            self._switch_tree(current_tree, other_tree)
            self.store.write(Refs.branch_writes(current, other_id))
            logger.info("Fast-forwarded {} to {}", current, other_id[:8])
            return MergeResult(
                commit=other_id,
                strategy="fast_forward",
                taken=tuple(
                    sorted(
                        path
                        for path, blob_id in other_tree.items()
                        if current_tree.get(path) != blob_id
                    )
                ),
                deleted=tuple(sorted(set(current_tree) - set(other_tree))),
            )

        if split_id is None:
            logger.warning("{} and {} share no commit; merging from empty", current, name)
            base_tree: Mapping[str, str] = {}
        else:
            base_tree = self.commits.get_commit(split_id).tree

        plan = plan_merge(current_tree, other_tree, base_tree)
        if plan.is_empty:
            raise NothingToMerge()
        self._require_no_untracked(plan.touched)

        staging = StagingArea()
        contents: dict[str, bytes | None] = {}
        blob_writes: dict[str, bytes] = {}
        for path, blob_id in plan.take.items():
            staging.stage_add(path, blob_id)
            contents[path] = self.blobs.get(blob_id)
        for path in plan.delete:
            staging.stage_remove(path, current_tree)
            contents[path] = None
        for path in plan.conflicts:
            data = conflict_content(
                self._blob_or_none(current_tree.get(path)),
                self._blob_or_none(other_tree.get(path)),
            )
            blob_id, writes = self.blobs.prepare(data)
            blob_writes.update(writes)
            staging.stage_add(path, blob_id)
            contents[path] = data
            logger.warning("Merge conflict in {}", path)

        commit_id = self._commit(
            f"Merged {name} into {current}.",
            (head_id, other_id),
            staging,
            extra_writes=blob_writes,
        )
        for path, data in contents.items():
            if data is None:
                self.files.delete(path)
            else:
                self.files.write(path, data)
        return MergeResult(
            commit=commit_id,
            strategy="three_way",
            conflicts=plan.conflicts,
            taken=tuple(sorted(plan.take)),
            deleted=plan.delete,
        )

    # -- Internal --

    def _blob_or_none(self, blob_id: str | None) -> bytes | None:
        if blob_id is None:
            return None
        return self.blobs.get(blob_id)

    def _require_clean(self, target: Iterable[str]) -> None:
        """Fail unless the working tree can be replaced by ``target``."""
        if not self.staging.is_empty() or self.scan().modified:
            raise UncommittedChanges()
        self._require_no_untracked(target)

    def _require_no_untracked(self, paths: Iterable[str]) -> None:
        untracked = set(self.scan().untracked)
        in_the_way = sorted(path for path in paths if path in untracked)
        if in_the_way:
            raise UntrackedFileInTheWay(in_the_way)

    def _switch_tree(
        self, current: Mapping[str, str], target: Mapping[str, str]
    ) -> None:
        """Write every file of ``target`` and delete tracked files it lacks."""
        contents = {path: self.blobs.get(blob_id) for path, blob_id in target.items()}
        for path, data in contents.items():
            self.files.write(path, data)
        for path in current:
            if path not in target:
                self.files.delete(path)
