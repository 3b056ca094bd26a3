"""PR source backed by the GitHub CLI (``gh``).

Uses whatever session ``gh auth login`` stored, so no token handling is
needed here.
"""

from __future__ import annotations

import json
import logging
import subprocess

from prwatch_core.gh.base import DEFAULT_MIN_INTERVAL, BasePrSource, NoSuchPrError, PrSourceError
from prwatch_core.models import StatusRecord

logger = logging.getLogger(__name__)

PR_FIELDS = (
    "number",
    "title",
    "url",
    "body",
    "state",
    "author",
    "createdAt",
    "updatedAt",
    "headRefName",
    "headRefOid",
    "baseRefName",
    "isDraft",
    "reviewDecision",
    "commits",
    "files",
    "statusCheckRollup",
)


class GhCliSource(BasePrSource):
    def __init__(self, min_interval: float = DEFAULT_MIN_INTERVAL, gh: str = "gh", cwd: str | None = None):
        super().__init__(min_interval)
        self._gh = gh
        self._cwd = cwd

    def _run(self, *args: str) -> str:
        cmd = [self._gh, *args]
        logger.debug("running: %s", " ".join(cmd))
        try:
            result = subprocess.run(cmd, capture_output=True, text=True, cwd=self._cwd)
        except FileNotFoundError:
            raise PrSourceError(f"{self._gh!r} not found. Install the GitHub CLI: https://cli.github.com")
        if result.returncode != 0:
            raise PrSourceError(f"{' '.join(cmd[:3])} failed: {result.stderr.strip() or result.returncode}")
        return result.stdout

    def _fetch(self, branch: str) -> StatusRecord | None:
        stdout = self._run("pr", "list", "--head", branch, "--limit", "1", "--json", ",".join(PR_FIELDS))
        if not stdout.strip():
            return None
        try:
            prs = json.loads(stdout)
        except json.JSONDecodeError as e:
            raise PrSourceError(f"gh returned invalid JSON: {e}")
        if not prs:
            return None
        try:
            return StatusRecord.from_gh_json(prs[0])
        except (KeyError, ValueError, TypeError) as e:
            raise PrSourceError(f"gh returned a malformed pull request: {e!r}")

    def create(self, branch: str, title: str, body: str, base: str, draft: bool = True) -> StatusRecord:
        args = ["pr", "create", "--head", branch, "--base", base, "--title", title, "--body", body]
        if draft:
            args.append("--draft")
        url = self._run(*args).strip()
        logger.info("Created pull request %s", url)

        record = self._fetch(branch)
        if record is None:
            raise NoSuchPrError(branch)
        return record
