"""Pull request status data model.

A StatusRecord is one snapshot of a PR as reported by the hosting service:
metadata, changed files and the check rollup for the head commit. Records
are never edited in place; a refresh produces a new record and the
scheduler swaps it in.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum

logger = logging.getLogger(__name__)

PENDING_LABEL = " .. "


class RunStatus(str, Enum):
    QUEUED = "QUEUED"
    PENDING = "PENDING"
    REQUESTED = "REQUESTED"
    IN_PROGRESS = "IN_PROGRESS"
    WAITING = "WAITING"
    COMPLETED = "COMPLETED"


class Conclusion(str, Enum):
    SUCCESS = "SUCCESS"
    FAILURE = "FAILURE"
    NEUTRAL = "NEUTRAL"
    SKIPPED = "SKIPPED"
    CANCELLED = "CANCELLED"
    TIMED_OUT = "TIMED_OUT"
    ACTION_REQUIRED = "ACTION_REQUIRED"
    STALE = "STALE"  # only GitHub itself marks runs stale
    STARTUP_FAILURE = "STARTUP_FAILURE"


class ContextState(str, Enum):
    PENDING = "PENDING"
    SUCCESS = "SUCCESS"
    FAILURE = "FAILURE"
    ERROR = "ERROR"
    EXPECTED = "EXPECTED"  # required status that has not been posted yet


_CONCLUSION_LABELS: dict[Conclusion, str] = {
    Conclusion.SUCCESS: " OK ",
    Conclusion.NEUTRAL: "Pass",
    Conclusion.CANCELLED: "Pass",
    Conclusion.SKIPPED: "Skip",
    Conclusion.FAILURE: "Fail",
    Conclusion.TIMED_OUT: "Fail",
    Conclusion.ACTION_REQUIRED: "Fail",
    Conclusion.STALE: "Fail",
    Conclusion.STARTUP_FAILURE: "Fail",
}

_CONTEXT_LABELS: dict[ContextState, str] = {
    ContextState.SUCCESS: " OK ",
    ContextState.FAILURE: "Fail",
    ContextState.ERROR: "Fail",
    ContextState.PENDING: PENDING_LABEL,
    ContextState.EXPECTED: PENDING_LABEL,
}

_TERMINAL_CONTEXT_STATES = frozenset({ContextState.SUCCESS, ContextState.FAILURE, ContextState.ERROR})


@dataclass
class FileChange:
    """One changed file in the PR diff."""

    path: str
    additions: int = 0
    deletions: int = 0


@dataclass
class RunCheck:
    """A check run (e.g. a GitHub Actions job) on the head commit."""

    name: str
    status: RunStatus
    conclusion: Conclusion | None = None
    started_at: str = ""
    completed_at: str = ""
    workflow_name: str = ""
    details_url: str = ""

    @property
    def is_terminal(self) -> bool:
        return self.status is RunStatus.COMPLETED

    @property
    def short_label(self) -> str:
        if not self.is_terminal or self.conclusion is None:
            return PENDING_LABEL
        return _CONCLUSION_LABELS[self.conclusion]


@dataclass
class ContextCheck:
    """A commit status posted by an external service."""

    name: str
    state: ContextState
    started_at: str = ""
    target_url: str = ""

    @property
    def is_terminal(self) -> bool:
        return self.state in _TERMINAL_CONTEXT_STATES

    @property
    def short_label(self) -> str:
        return _CONTEXT_LABELS[self.state]


CheckResult = RunCheck | ContextCheck


@dataclass
class StatusRecord:
    """Snapshot of a single pull request.

    ``number`` is the identity: a refresh must return a record with the same
    number. ``last_fetched`` is owned by the scheduler and is not part of
    what the hosting service reports.
    """

    number: int
    title: str
    url: str
    body: str = ""
    state: str = ""
    author: str = ""
    created_at: str = ""
    updated_at: str = ""
    head_ref_name: str = ""
    base_ref_name: str = ""
    head_sha: str = ""
    is_draft: bool = False
    review_decision: str = ""
    commits: list[str] = field(default_factory=list)
    files: list[FileChange] = field(default_factory=list)
    checks: list[CheckResult] = field(default_factory=list)
    last_fetched: float | None = None

    @property
    def sha(self) -> str:
        """Id of the last commit on the PR, or an empty string."""
        return self.commits[-1] if self.commits else ""

    @classmethod
    def from_gh_json(cls, data: dict) -> StatusRecord:
        """Build a record from one element of ``gh pr list --json`` output.

        Raises KeyError/ValueError/TypeError on data that does not look like
        a PR; callers treat that as a failed fetch.
        """
        if not isinstance(data, dict):
            raise TypeError(f"expected a JSON object, got {type(data).__name__}")

        author = data.get("author") or {}
        checks: list[CheckResult] = []
        for entry in data.get("statusCheckRollup") or []:
            check = check_from_gh_json(entry)
            if check is not None:
                checks.append(check)

        return cls(
            number=int(data["number"]),
            title=data["title"],
            url=data["url"],
            body=data.get("body") or "",
            state=data.get("state") or "",
            author=author.get("login", ""),
            created_at=data.get("createdAt") or "",
            updated_at=data.get("updatedAt") or "",
            head_ref_name=data.get("headRefName") or "",
            base_ref_name=data.get("baseRefName") or "",
            head_sha=data.get("headRefOid") or "",
            is_draft=bool(data.get("isDraft", False)),
            review_decision=data.get("reviewDecision") or "",
            commits=[c["oid"] for c in data.get("commits") or []],
            files=[
                FileChange(path=f["path"], additions=int(f.get("additions", 0)), deletions=int(f.get("deletions", 0)))
                for f in data.get("files") or []
            ],
            checks=checks,
        )


def parse_conclusion(value: str | None) -> Conclusion | None:
    """Parse a check-run conclusion; empty or unrecognised values mean "none yet"."""
    if not value:
        return None
    try:
        return Conclusion(value.upper())
    except ValueError:
        logger.debug("Ignoring unknown check conclusion %r", value)
        return None


def check_from_gh_json(entry: dict) -> CheckResult | None:
    """Parse one ``statusCheckRollup`` entry, or return None for unknown kinds."""
    kind = entry.get("__typename")
    if kind == "CheckRun":
        return RunCheck(
            name=entry["name"],
            status=RunStatus(entry["status"].upper()),
            conclusion=parse_conclusion(entry.get("conclusion")),
            started_at=entry.get("startedAt") or "",
            completed_at=entry.get("completedAt") or "",
            workflow_name=entry.get("workflowName") or "",
            details_url=entry.get("detailsUrl") or "",
        )
    if kind == "StatusContext":
        return ContextCheck(
            name=entry["context"],
            state=ContextState(entry["state"].upper()),
            started_at=entry.get("startedAt") or "",
            target_url=entry.get("targetUrl") or "",
        )
    logger.debug("Skipping status check of unknown type %r", kind)
    return None
