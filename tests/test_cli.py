"""Tests for the command-line interface."""

import pytest
from click.testing import CliRunner
from loguru import logger

from kvlet.cli import main
from kvlet.kv.disk import Disk


@pytest.fixture(autouse=True)
def quiet_logging():
    yield
    logger.remove()
    logger.disable("kvlet")


@pytest.fixture
def run(tmp_path):
    runner = CliRunner()

    def invoke(*args):
        return runner.invoke(main, ["--repo", str(tmp_path), *args])

    return invoke


@pytest.fixture
def initialized(run):
    assert run("init").exit_code == 0
    return run


def commit_file(run, tmp_path, path, content, message):
    (tmp_path / path).write_text(content)
    assert run("add", path).exit_code == 0
    assert run("commit", message).exit_code == 0


class TestSetup:
    def test_init(self, run, tmp_path):
        result = run("init")
        assert result.exit_code == 0
        assert (tmp_path / ".kvlet").is_dir()

    def test_init_twice(self, initialized):
        result = initialized("init")
        assert result.exit_code == 1
        assert "already exists" in result.output

    def test_not_initialized(self, run):
        result = run("status")
        assert result.exit_code == 1
        assert "Not in an initialized kvlet directory." in result.output

    def test_repo_from_environment(self, tmp_path):
        runner = CliRunner()
        result = runner.invoke(main, ["init"], env={"KVLET_REPO": str(tmp_path)})
        assert result.exit_code == 0
        assert (tmp_path / ".kvlet").is_dir()

    def test_verbose(self, run, tmp_path):
        assert run("--verbose", "init").exit_code == 0
        assert (tmp_path / ".kvlet").is_dir()


class TestCommit:
    def test_add_commit_log(self, initialized, tmp_path):
        commit_file(initialized, tmp_path, "f", "1\n", "first file")
        result = initialized("log")
        assert result.exit_code == 0
        assert "first file" in result.output
        assert "initial commit" in result.output
        assert result.output.count("===\n") == 2

    def test_add_missing(self, initialized):
        result = initialized("add", "ghost")
        assert result.exit_code == 1
        assert "File does not exist." in result.output

    def test_commit_without_message(self, initialized, tmp_path):
        (tmp_path / "f").write_text("1\n")
        initialized("add", "f")
        result = initialized("commit")
        assert result.exit_code == 1
        assert "Please enter a commit message." in result.output

    def test_commit_nothing(self, initialized):
        result = initialized("commit", "nothing")
        assert result.exit_code == 1
        assert "No changes added to the commit." in result.output

    def test_rm(self, initialized, tmp_path):
        commit_file(initialized, tmp_path, "f", "1\n", "add f")
        assert initialized("rm", "f").exit_code == 0
        assert not (tmp_path / "f").exists()
        assert "=== Removed Files ===\nf\n" in initialized("status").output

    def test_find_and_global_log(self, initialized, tmp_path):
        commit_file(initialized, tmp_path, "f", "1\n", "needle")
        found = initialized("find", "needle")
        assert found.exit_code == 0
        commit_id = found.output.strip()
        assert len(commit_id) == 64
        assert f"commit {commit_id}" in initialized("global-log").output
        missing = initialized("find", "haystack")
        assert "Found no commit with that message." in missing.output


class TestStatus:
    def test_sections(self, initialized, tmp_path):
        commit_file(initialized, tmp_path, "tracked", "1\n", "one")
        (tmp_path / "tracked").write_text("2\n")
        (tmp_path / "loose").write_text("x\n")
        output = initialized("status").output
        assert output.startswith("=== Branches ===\n*master\n\n")
        assert "tracked (modified)" in output
        assert "=== Untracked Files ===\nloose\n" in output


class TestCheckout:
    def test_file_from_head(self, initialized, tmp_path):
        commit_file(initialized, tmp_path, "f", "1\n", "one")
        (tmp_path / "f").write_text("scratch\n")
        assert initialized("checkout", "--file", "f").exit_code == 0
        assert (tmp_path / "f").read_text() == "1\n"

    def test_file_from_commit(self, initialized, tmp_path):
        commit_file(initialized, tmp_path, "f", "1\n", "one")
        first = initialized("find", "one").output.strip()
        commit_file(initialized, tmp_path, "f", "2\n", "two")
        assert initialized("checkout", first[:8], "-f", "f").exit_code == 0
        assert (tmp_path / "f").read_text() == "1\n"

    def test_branch(self, initialized, tmp_path):
        commit_file(initialized, tmp_path, "f", "1\n", "one")
        assert initialized("branch", "side").exit_code == 0
        assert initialized("checkout", "side").exit_code == 0
        commit_file(initialized, tmp_path, "g", "g\n", "side work")
        assert initialized("checkout", "master").exit_code == 0
        assert not (tmp_path / "g").exists()
        assert "*master\nside\n" in initialized("status").output

    def test_missing_branch(self, initialized):
        result = initialized("checkout", "nope")
        assert result.exit_code == 1
        assert "No such branch exists." in result.output

    def test_no_target(self, initialized):
        assert initialized("checkout").exit_code == 2


class TestBranches:
    def test_rm_branch(self, initialized):
        initialized("branch", "side")
        assert initialized("rm-branch", "side").exit_code == 0
        result = initialized("rm-branch", "side")
        assert result.exit_code == 1
        assert "A branch with that name does not exist." in result.output

    def test_reset(self, initialized, tmp_path):
        commit_file(initialized, tmp_path, "f", "1\n", "one")
        first = initialized("find", "one").output.strip()
        commit_file(initialized, tmp_path, "f", "2\n", "two")
        assert initialized("reset", first).exit_code == 0
        assert (tmp_path / "f").read_text() == "1\n"
        assert "two" not in initialized("log").output


class TestMerge:
    def test_conflict(self, initialized, tmp_path):
        commit_file(initialized, tmp_path, "f", "base\n", "base")
        initialized("branch", "other")
        commit_file(initialized, tmp_path, "f", "mine\n", "mine")
        initialized("checkout", "other")
        commit_file(initialized, tmp_path, "f", "theirs\n", "theirs")
        initialized("checkout", "master")

        result = initialized("merge", "other")
        assert result.exit_code == 0
        assert "Encountered a merge conflict." in result.output
        assert (tmp_path / "f").read_text() == (
            "<<<<<<< HEAD\nmine\n=======\ntheirs\n>>>>>>>\n"
        )
        assert "Merged other into master." in initialized("log").output

    def test_fast_forward(self, initialized, tmp_path):
        commit_file(initialized, tmp_path, "f", "base\n", "base")
        initialized("branch", "other")
        initialized("checkout", "other")
        commit_file(initialized, tmp_path, "f", "ahead\n", "ahead")
        initialized("checkout", "master")

        result = initialized("merge", "other")
        assert result.exit_code == 0
        assert "Current branch fast-forwarded." in result.output
        assert (tmp_path / "f").read_text() == "ahead\n"

    def test_ancestor(self, initialized, tmp_path):
        initialized("branch", "other")
        commit_file(initialized, tmp_path, "f", "ahead\n", "ahead")
        result = initialized("merge", "other")
        assert result.exit_code == 1
        assert "Given branch is an ancestor of the current branch." in result.output


class TestResources:
    def test_store_closed_after_each_command(self, run, monkeypatch):
        closed = []
        original = Disk.close

        def close(self):
            closed.append(self.directory)
            original(self)

        monkeypatch.setattr(Disk, "close", close)
        assert run("init").exit_code == 0
        assert len(closed) == 1
        assert run("status").exit_code == 0
        assert len(closed) == 2
        assert run("rm-branch", "missing").exit_code == 1
        assert len(closed) == 3
