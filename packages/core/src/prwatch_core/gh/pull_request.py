"""PR source backed by the GitHub REST API via PyGithub."""

from __future__ import annotations

import logging
from datetime import datetime

from github import Github, GithubException

from prwatch_core.gh.base import DEFAULT_MIN_INTERVAL, BasePrSource, NoSuchPrError, PrSourceError
from prwatch_core.models import (
    CheckResult,
    ContextCheck,
    ContextState,
    FileChange,
    RunCheck,
    RunStatus,
    StatusRecord,
    parse_conclusion,
)

logger = logging.getLogger(__name__)


def get_repo(repo_name: str, token: str):
    return Github(token).get_repo(repo_name)


def get_open_pull(repo, branch: str):
    """Return the open PR whose head is ``branch`` in ``repo``, or None."""
    head = f"{repo.owner.login}:{branch}"
    for pr in repo.get_pulls(state="open", head=head):
        return pr
    return None


def _iso(value: datetime | None) -> str:
    return value.isoformat() if value else ""


def get_checks(repo, sha: str) -> list[CheckResult]:
    """Collect check runs and commit statuses for ``sha``, runs first."""
    commit = repo.get_commit(sha)
    checks: list[CheckResult] = [
        RunCheck(
            name=run.name,
            status=RunStatus(run.status.upper()),
            conclusion=parse_conclusion(run.conclusion),
            started_at=_iso(run.started_at),
            completed_at=_iso(run.completed_at),
            details_url=run.details_url or "",
        )
        for run in commit.get_check_runs()
    ]
    checks.extend(
        ContextCheck(
            name=status.context,
            state=ContextState(status.state.upper()),
            started_at=_iso(status.created_at),
            target_url=status.target_url or "",
        )
        for status in commit.get_combined_status().statuses
    )
    return checks


def to_record(repo, pr) -> StatusRecord:
    return StatusRecord(
        number=pr.number,
        title=pr.title,
        url=pr.html_url,
        body=pr.body or "",
        state="MERGED" if pr.merged else pr.state.upper(),
        author=pr.user.login,
        created_at=_iso(pr.created_at),
        updated_at=_iso(pr.updated_at),
        head_ref_name=pr.head.ref,
        base_ref_name=pr.base.ref,
        head_sha=pr.head.sha,
        is_draft=bool(pr.draft),
        commits=[c.sha for c in pr.get_commits()],
        files=[FileChange(path=f.filename, additions=f.additions, deletions=f.deletions) for f in pr.get_files()],
        checks=get_checks(repo, pr.head.sha),
    )


class GithubApiSource(BasePrSource):
    def __init__(self, repo_name: str, token: str, min_interval: float = DEFAULT_MIN_INTERVAL, repo=None):
        super().__init__(min_interval)
        self.repo_name = repo_name
        self._repo = repo if repo is not None else get_repo(repo_name, token)

    def _fetch(self, branch: str) -> StatusRecord | None:
        try:
            pr = get_open_pull(self._repo, branch)
            if pr is None:
                return None
            return to_record(self._repo, pr)
        except GithubException as e:
            raise PrSourceError(f"GitHub API error for {self.repo_name}: {e}")
        except (ValueError, AttributeError) as e:
            raise PrSourceError(f"Unexpected pull request data from {self.repo_name}: {e!r}")

    def create(self, branch: str, title: str, body: str, base: str, draft: bool = True) -> StatusRecord:
        try:
            pr = self._repo.create_pull(title=title, body=body, base=base, head=branch, draft=draft)
        except GithubException as e:
            raise PrSourceError(f"Could not create a pull request for {branch!r}: {e}")
        logger.info("Created pull request %s", pr.html_url)

        record = self._fetch(branch)
        if record is None:
            raise NoSuchPrError(branch)
        return record
