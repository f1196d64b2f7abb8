"""Staging area: pending additions and removals for the next commit."""

from types import MappingProxyType
from typing import Iterable, Mapping

from .errors import NothingToRemove


class StagingArea:
    """Files staged for the next commit.

    ``additions`` maps a path to the blob id it will hold in the next
    commit, overriding the current tree. ``removals`` lists paths the next
    commit drops. A path is never in both.
    """

    def __init__(
        self,
        additions: Mapping[str, str] | None = None,
        removals: Iterable[str] = (),
    ) -> None:
        self._additions: dict[str, str] = dict(additions or {})
        self._removals: set[str] = set(removals)
        self._removals.difference_update(self._additions)

    def stage_add(self, path: str, blob_id: str) -> None:
        """Stage ``path`` to hold ``blob_id`` in the next commit."""
        self._removals.discard(path)
        self._additions[path] = blob_id

    def stage_remove(self, path: str, tracked: Mapping[str, str]) -> None:
        """Stage ``path`` for removal.

        Any pending addition is dropped. The removal itself is recorded
        only when ``path`` is tracked by the current commit; a file that was
        merely staged for addition just goes back to untracked.

        Raises:
            NothingToRemove: ``path`` is neither tracked nor staged.
        """
        staged = path in self._additions
        if not staged and path not in tracked:
            raise NothingToRemove()
        self._additions.pop(path, None)
        if path in tracked:
            self._removals.add(path)

    def unstage(self, path: str) -> None:
        """Forget any pending addition or removal of ``path``."""
        self._additions.pop(path, None)
        self._removals.discard(path)

    def clear(self) -> None:
        self._additions.clear()
        self._removals.clear()

    def snapshot(self) -> tuple[Mapping[str, str], frozenset[str]]:
        """Read-only view of ``(additions, removals)``."""
        return MappingProxyType(self._additions), frozenset(self._removals)

    @property
    def additions(self) -> Mapping[str, str]:
        return MappingProxyType(self._additions)

    @property
    def removals(self) -> frozenset[str]:
        return frozenset(self._removals)

    def is_empty(self) -> bool:
        return not self._additions and not self._removals

    def __bool__(self) -> bool:
        return not self.is_empty()

    def apply(self, tree: Mapping[str, str]) -> dict[str, str]:
        """The tree the next commit will hold if made on top of ``tree``."""
        result = {
            path: blob for path, blob in tree.items() if path not in self._removals
        }
        result.update(self._additions)
        return result

    def __repr__(self) -> str:
        return (
            f"StagingArea(additions={sorted(self._additions)}, "
            f"removals={sorted(self._removals)})"
        )
