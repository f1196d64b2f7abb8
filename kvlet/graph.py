"""Commit DAG traversal: ancestors, split point and history."""

from typing import Iterator

from loguru import logger

from .objects import CommitStore


class CommitGraph:
    """Read-only view of the commit DAG stored in a ``CommitStore``."""

    def __init__(self, commits: CommitStore) -> None:
        self.commits = commits

    def parents(self, commit_id: str) -> tuple[str, ...]:
        return self.commits.get_commit(commit_id).parents

    def generations(self, commit_id: str) -> Iterator[list[str]]:
        """Yield ancestors of ``commit_id`` one BFS generation at a time.

        The first generation is ``[commit_id]``; each following one holds
        the parents of the previous generation not seen before, first
        parents ahead of second parents. A commit reachable along several
        paths appears only in the nearest generation.
        """
        visited = {commit_id}
        frontier = [commit_id]
        while frontier:
            yield frontier
            next_frontier: list[str] = []
            for current in frontier:
                for parent in self.parents(current):
                    if parent not in visited:
                        visited.add(parent)
                        next_frontier.append(parent)
            frontier = next_frontier

    def ancestors_of(self, commit_id: str) -> set[str]:
        """Every commit reachable from ``commit_id``, itself included."""
        result: set[str] = set()
        for generation in self.generations(commit_id):
            result.update(generation)
        return result

    def split_point(self, head_a: str, head_b: str) -> str | None:
        """The merge base of two branch heads.

        Walks the generations of ``head_a`` nearest first and returns the
        first commit that is anywhere in the ancestry of ``head_b``. This is
        a common ancestor closest to ``head_a`` in BFS order, not always the
        lowest common ancestor: in criss-cross histories with several merge
        paths another common ancestor may be closer to ``head_b``.

        Returns None when the heads share no commit.
        """
        ancestors_b = self.ancestors_of(head_b)
        for generation in self.generations(head_a):
            for commit_id in generation:
                if commit_id in ancestors_b:
                    logger.debug(
                        "Split point of {} and {} is {}",
                        head_a[:8],
                        head_b[:8],
                        commit_id[:8],
                    )
                    return commit_id
        return None

    def is_ancestor(self, ancestor: str, descendant: str) -> bool:
        return ancestor in self.ancestors_of(descendant)

    def history(self, commit_id: str) -> Iterator[str]:
        """Yield the first-parent chain from ``commit_id`` back to the root."""
        current: str | None = commit_id
        while current is not None:
            yield current
            parents = self.parents(current)
            current = parents[0] if parents else None
