"""Tests for commit graph traversal."""

import pytest

from kvlet import Commit, CommitGraph, CommitStore
from kvlet.kv.memory import Memory


@pytest.fixture
def graph():
    return CommitGraph(CommitStore(Memory()))


def make(graph: CommitGraph, message: str, *parents: str) -> str:
    return graph.commits.put_commit(Commit(message, 0.0, parents))


class TestAncestors:
    def test_includes_self(self, graph):
        root = make(graph, "root")
        assert graph.ancestors_of(root) == {root}

    def test_linear(self, graph):
        root = make(graph, "root")
        a = make(graph, "a", root)
        b = make(graph, "b", a)
        assert graph.ancestors_of(b) == {root, a, b}

    def test_closed_under_parents(self, graph):
        root = make(graph, "root")
        a = make(graph, "a", root)
        b = make(graph, "b", root)
        m = make(graph, "m", a, b)
        tip = make(graph, "tip", m)
        ancestors = graph.ancestors_of(tip)
        for commit_id in ancestors:
            assert set(graph.parents(commit_id)) <= ancestors
        assert root in ancestors

    def test_follows_both_merge_parents(self, graph):
        root = make(graph, "root")
        a = make(graph, "a", root)
        b = make(graph, "b", root)
        m = make(graph, "m", a, b)
        assert graph.ancestors_of(m) == {root, a, b, m}


class TestGenerations:
    def test_diamond_visits_shared_ancestor_once(self, graph):
        root = make(graph, "root")
        a = make(graph, "a", root)
        b = make(graph, "b", root)
        m = make(graph, "m", a, b)
        assert list(graph.generations(m)) == [[m], [a, b], [root]]

    def test_first_parent_first(self, graph):
        root = make(graph, "root")
        a = make(graph, "a", root)
        b = make(graph, "b", root)
        m = make(graph, "m", b, a)
        assert list(graph.generations(m))[1] == [b, a]

    def test_shared_ancestor_at_nearest_distance(self, graph):
        root = make(graph, "root")
        a1 = make(graph, "a1", root)
        a2 = make(graph, "a2", a1)
        m = make(graph, "m", a2, root)
        assert list(graph.generations(m)) == [[m], [a2, root], [a1]]


class TestSplitPoint:
    def test_same_head(self, graph):
        root = make(graph, "root")
        a = make(graph, "a", root)
        assert graph.split_point(a, a) == a

    def test_divergent_branches(self, graph):
        root = make(graph, "root")
        x = make(graph, "x", root)
        a = make(graph, "a", x)
        b1 = make(graph, "b1", x)
        b2 = make(graph, "b2", b1)
        assert graph.split_point(a, b2) == x
        assert graph.split_point(b2, a) == x

    def test_ancestor_branch(self, graph):
        root = make(graph, "root")
        a = make(graph, "a", root)
        b = make(graph, "b", a)
        assert graph.split_point(b, a) == a
        assert graph.split_point(a, b) == a

    def test_after_previous_merge(self, graph):
        root = make(graph, "root")
        a1 = make(graph, "a1", root)
        b1 = make(graph, "b1", root)
        a2 = make(graph, "a2", a1, b1)
        b2 = make(graph, "b2", b1)
        assert graph.split_point(a2, b2) == b1

    def test_bfs_split_point_is_not_always_lowest(self, graph):
        # x descends from root, so x is the lowest common ancestor of the
        # heads, but root is fewer generations away from head_a.
        root = make(graph, "root")
        x = make(graph, "x", root)
        l2 = make(graph, "l2", x)
        l1 = make(graph, "l1", l2)
        c = make(graph, "c", root)
        head_a = make(graph, "head_a", c, l1)
        head_b = make(graph, "head_b", x)
        assert graph.split_point(head_a, head_b) == root
        assert graph.is_ancestor(root, x)

    def test_unrelated_histories(self, graph):
        a = make(graph, "root a")
        b = make(graph, "root b")
        assert graph.split_point(a, b) is None


class TestHistory:
    def test_first_parent_chain(self, graph):
        root = make(graph, "root")
        a = make(graph, "a", root)
        b = make(graph, "b", root)
        m = make(graph, "m", a, b)
        assert list(graph.history(m)) == [m, a, root]

    def test_is_ancestor(self, graph):
        root = make(graph, "root")
        a = make(graph, "a", root)
        b = make(graph, "b", root)
        assert graph.is_ancestor(root, a)
        assert graph.is_ancestor(a, a)
        assert not graph.is_ancestor(a, b)
