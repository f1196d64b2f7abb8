"""
Command-line interface for kvlet.

Translates commands into ``Repository`` calls. Errors are printed as a
single message line and exit with status 1.
"""

import functools
import sys

import click
from loguru import logger

from .errors import RepositoryError
from .factory import repository
from .repository import CONFLICT_MESSAGE, Repository


def reports_errors(fn):
    """Print a RepositoryError's message and exit 1 instead of a traceback."""

    @functools.wraps(fn)
    def wrapper(*args, **kwargs):
        try:
            return fn(*args, **kwargs)
        except RepositoryError as e:
            click.echo(str(e))
            sys.exit(1)

    return wrapper


def _open(ctx: click.Context, **kwargs) -> Repository:
    """Open the repository for this command; it is closed when the command ends."""
    repo = repository(ctx.obj["repo"], **kwargs)
    ctx.call_on_close(repo.close)
    return repo


@click.group()
@click.option(
    "--repo",
    default=".",
    envvar="KVLET_REPO",
    type=click.Path(file_okay=False),
    help="Working directory of the repository",
)
@click.option("--verbose", "-v", is_flag=True, help="Log debug output to stderr")
@click.pass_context
def main(ctx, repo, verbose):
    """A local version-control system."""
    logger.remove()
    logger.add(
        sys.stderr,
        level="DEBUG" if verbose else "WARNING",
        format="{level}: {message}",
    )
    logger.enable("kvlet")
    ctx.obj = {"repo": repo}


@main.command()
@click.pass_context
@reports_errors
def init(ctx):
    """Create a new repository in the working directory."""
    _open(ctx, create=True)


@main.command()
@click.argument("file")
@click.pass_context
@reports_errors
def add(ctx, file):
    """Stage a file for the next commit."""
    _open(ctx).add(file)


@main.command()
@click.argument("message", required=False, default="")
@click.pass_context
@reports_errors
def commit(ctx, message):
    """Commit the staged files."""
    _open(ctx).commit(message)


@main.command()
@click.argument("file")
@click.pass_context
@reports_errors
def rm(ctx, file):
    """Unstage a file, or stage a tracked file for removal."""
    _open(ctx).rm(file)


@main.command()
@click.pass_context
@reports_errors
def log(ctx):
    """Show the history of the current branch."""
    click.echo(_open(ctx).log(), nl=False)


@main.command("global-log")
@click.pass_context
@reports_errors
def global_log(ctx):
    """Show every commit ever made."""
    click.echo(_open(ctx).global_log(), nl=False)


@main.command()
@click.argument("message")
@click.pass_context
@reports_errors
def find(ctx, message):
    """Print the ids of commits with the given message."""
    for commit_id in _open(ctx).find(message):
        click.echo(commit_id)


@main.command()
@click.pass_context
@reports_errors
def status(ctx):
    """Show branches, staged, removed, modified and untracked files."""
    click.echo(_open(ctx).status(), nl=False)


@main.command()
@click.argument("target", required=False)
@click.option(
    "--file",
    "-f",
    "path",
    help="Restore this file from TARGET (a commit id) or from HEAD",
)
@click.pass_context
@reports_errors
def checkout(ctx, target, path):
    """Switch to branch TARGET, or restore a single file with --file."""
    repo = _open(ctx)
    if path is not None:
        repo.checkout_file(path, target)
    elif target is None:
        raise click.UsageError("Give a branch name or --file.")
    else:
        repo.checkout_branch(target)


@main.command()
@click.argument("name")
@click.pass_context
@reports_errors
def branch(ctx, name):
    """Create a branch at the current commit."""
    _open(ctx).branch(name)


@main.command("rm-branch")
@click.argument("name")
@click.pass_context
@reports_errors
def rm_branch(ctx, name):
    """Delete a branch pointer."""
    _open(ctx).rm_branch(name)


@main.command()
@click.argument("commit_id")
@click.pass_context
@reports_errors
def reset(ctx, commit_id):
    """Check out a commit and move the current branch to it."""
    _open(ctx).reset(commit_id)


@main.command()
@click.argument("name")
@click.pass_context
@reports_errors
def merge(ctx, name):
    """Merge a branch into the current branch."""
    result = _open(ctx).merge(name)
    if result.strategy == "fast_forward":
        click.echo("Current branch fast-forwarded.")
    if result.has_conflicts:
        click.echo(CONFLICT_MESSAGE)


if __name__ == "__main__":
    main()
