"""Thin wrappers around the git CLI for the bits prwatch needs."""

from __future__ import annotations

import logging
import re
import subprocess

logger = logging.getLogger(__name__)

MAIN_BRANCH_CANDIDATES = ("main", "master")

# git@github.com:owner/name.git, https://github.com/owner/name(.git), ssh://git@host/owner/name.git
_REMOTE_RE = re.compile(r"[:/](?P<owner>[^/:]+)/(?P<name>[^/]+?)(?:\.git)?/?$")


class GitError(RuntimeError):
    """A git command failed or returned something unusable."""


def run_git(*args: str, cwd: str | None = None) -> str:
    try:
        result = subprocess.run(["git", *args], capture_output=True, text=True, cwd=cwd)
    except FileNotFoundError:
        raise GitError("git is not installed.")
    if result.returncode != 0:
        raise GitError(f"git {' '.join(args)} failed: {result.stderr.strip()}")
    return result.stdout.strip()


def current_branch_name(cwd: str | None = None) -> str:
    name = run_git("rev-parse", "--abbrev-ref", "HEAD", cwd=cwd)
    if not name or name == "HEAD":
        raise GitError("HEAD is detached; pass --branch explicitly.")
    return name


def branch_exists(name: str, cwd: str | None = None) -> bool:
    try:
        run_git("show-ref", "--verify", "--quiet", f"refs/heads/{name}", cwd=cwd)
    except GitError:
        return False
    return True


def main_branch_name(cwd: str | None = None) -> str:
    for name in MAIN_BRANCH_CANDIDATES:
        if branch_exists(name, cwd=cwd):
            return name
    raise GitError(f"No main branch found (tried {', '.join(MAIN_BRANCH_CANDIDATES)}).")


def merge_base(a: str, b: str = "HEAD", cwd: str | None = None) -> str:
    return run_git("merge-base", a, b, cwd=cwd)


def first_commit_message(base: str, head: str = "HEAD", cwd: str | None = None) -> tuple[str, str]:
    """Return (title, body) of the oldest commit on ``head`` since ``base``.

    Raises GitError when the branch has no commits of its own.
    """
    shas = run_git("rev-list", "--reverse", f"{base}..{head}", cwd=cwd).split()
    if not shas:
        raise GitError(f"No commits on {head} since {base[:7]}.")
    message = run_git("log", "-1", "--format=%B", shas[0], cwd=cwd)
    title, _, body = message.partition("\n")
    return title.strip(), body.strip()


def push_branch(branch: str, remote: str = "origin", cwd: str | None = None) -> None:
    logger.info("pushing %s to %s", branch, remote)
    run_git("push", "--set-upstream", remote, branch, cwd=cwd)


def remote_repo_name(remote: str = "origin", cwd: str | None = None) -> str:
    """Return ``owner/name`` for ``remote`` parsed from its URL."""
    url = run_git("remote", "get-url", remote, cwd=cwd)
    match = _REMOTE_RE.search(url)
    if not match:
        raise GitError(f"Cannot tell the repository from remote URL {url!r}.")
    return f"{match['owner']}/{match['name']}"
