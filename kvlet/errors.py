"""kvlet error types.

Every ``RepositoryError`` ends the current operation before it changes any
state. ``str(exc)`` is the message shown to the user.
"""


class RepositoryError(Exception):
    """Base class for errors reported to the user."""

    message = "Repository error."

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.message)


class RepositoryNotInitialized(RepositoryError):
    message = "Not in an initialized kvlet directory."


class RepositoryExists(RepositoryError):
    message = (
        "A kvlet version-control system already exists in the current directory."
    )


class ObjectNotFound(RepositoryError):
    """Raised when an id (or id prefix) names no stored object."""

    message = "No commit with that id exists."


class AmbiguousObjectId(ObjectNotFound):
    """Raised when an abbreviated id matches more than one object.

    Attributes:
        matches: The full ids sharing the prefix.
    """

    def __init__(self, prefix: str, matches: list[str]) -> None:
        self.matches = matches
        super().__init__(
            f"Abbreviated id {prefix} matches {len(matches)} objects."
        )


class NothingToRemove(RepositoryError):
    message = "No reason to remove the file."


class NothingToCommit(RepositoryError):
    message = "No changes added to the commit."


class EmptyMessage(RepositoryError):
    message = "Please enter a commit message."


class NothingToMerge(RepositoryError):
    message = "No changes to merge."


class UncommittedChanges(RepositoryError):
    """Raised when an operation would overwrite unsaved work."""

    message = "You have uncommitted changes."


class UntrackedFileInTheWay(UncommittedChanges):
    """Raised when an untracked working file would be overwritten or deleted.

    Attributes:
        paths: The untracked paths in the way.
    """

    message = (
        "There is an untracked file in the way; delete it, or add and commit it first."
    )

    def __init__(self, paths: list[str]) -> None:
        self.paths = paths
        super().__init__()


class NoSuchFile(RepositoryError):
    message = "File does not exist."


class InvalidFileName(RepositoryError):
    """Raised for a file name that cannot be stored in a commit tree."""

    message = "File name is not valid UTF-8."


class FileNotInCommit(RepositoryError):
    message = "File does not exist in that commit."


class BranchExists(RepositoryError):
    message = "A branch with that name already exists."


class NoSuchBranch(RepositoryError):
    message = "A branch with that name does not exist."


class InvalidBranchOperation(RepositoryError):
    pass


class NoCommitWithMessage(RepositoryError):
    message = "Found no commit with that message."


class CorruptRepository(RuntimeError):
    """Raised when persisted state breaks a repository invariant.

    Not a ``RepositoryError``: it means the store was damaged outside
    normal operation, and callers should let it propagate.
    """
