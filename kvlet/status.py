"""Plain-text rendering of status and log output."""

from datetime import datetime
from typing import Iterable

from .objects import Commit
from .worktree import WorkingTreeStatus

DATE_FORMAT = "%a %b %d %H:%M:%S %Y %z"


def _section(title: str, lines: Iterable[str]) -> list[str]:
    return [f"=== {title} ===", *lines, ""]


def format_status(
    branches: Iterable[str], current: str, status: WorkingTreeStatus
) -> str:
    """Render the status report, every section sorted."""
    lines: list[str] = []
    lines += _section(
        "Branches",
        (f"*{name}" if name == current else name for name in sorted(branches)),
    )
    lines += _section("Staged Files", sorted(status.staged))
    lines += _section("Removed Files", sorted(status.removed))
    lines += _section(
        "Modifications Not Staged For Commit",
        (f"{path} ({kind})" for path, kind in sorted(status.modified)),
    )
    lines += _section("Untracked Files", sorted(status.untracked))
    return "\n".join(lines) + "\n"


def format_date(timestamp: float) -> str:
    return datetime.fromtimestamp(timestamp).astimezone().strftime(DATE_FORMAT)


def format_log(entries: Iterable[tuple[str, Commit]]) -> str:
    lines: list[str] = []
    for commit_id, commit in entries:
        lines += ["===", f"commit {commit_id}"]
        if commit.is_merge:
            lines.append(
                "Merge: " + " ".join(parent[:7] for parent in commit.parents[:2])
            )
        lines += [f"Date: {format_date(commit.timestamp)}", commit.message, ""]
    return "\n".join(lines) + ("\n" if lines else "")
