"""kvlet: a local version-control engine over a key-value store."""

from loguru import logger

from .errors import (
    AmbiguousObjectId,
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
    NothingToRemove,
    ObjectNotFound,
    RepositoryError,
    RepositoryExists,
    RepositoryNotInitialized,
    UncommittedChanges,
    UntrackedFileInTheWay,
)
from .factory import repository
from .graph import CommitGraph
from .kv.base import KVStore
from .merge import MergePlan, MergeResult, Resolution, Side, plan_merge, resolve
from .objects import Commit, CommitStore, ObjectStore, object_id
from .repository import Repository
from .staging import StagingArea
from .worktree import Directory, MemoryTree, WorkingTree, WorkingTreeStatus, scan

logger.disable("kvlet")

__all__ = [
    "AmbiguousObjectId",
    "BranchExists",
    "Commit",
    "CommitGraph",
    "CommitStore",
    "CorruptRepository",
    "Directory",
    "EmptyMessage",
    "FileNotInCommit",
    "InvalidBranchOperation",
    "InvalidFileName",
    "KVStore",
    "MemoryTree",
    "MergePlan",
    "MergeResult",
    "NoCommitWithMessage",
    "NoSuchBranch",
    "NoSuchFile",
    "NothingToCommit",
    "NothingToMerge",
    "NothingToRemove",
    "ObjectNotFound",
    "ObjectStore",
    "Repository",
    "RepositoryError",
    "RepositoryExists",
    "RepositoryNotInitialized",
    "Resolution",
    "Side",
    "StagingArea",
    "UncommittedChanges",
    "UntrackedFileInTheWay",
    "WorkingTree",
    "WorkingTreeStatus",
    "object_id",
    "plan_merge",
    "repository",
    "resolve",
    "scan",
]
