"""Base PR-data source implementing the Template Method pattern.

Every source finds the PR for a branch, refetches it and decides when it
is due again. Sources differ only in how they talk to the hosting service:

    fetch_initial() / refresh() / find() → _fetch()   ← only this differs per source
    create()                                         ← and this

Subclasses raise PrSourceError for anything that prevents a usable record.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod

from prwatch_core.models import StatusRecord

logger = logging.getLogger(__name__)

DEFAULT_MIN_INTERVAL = 15.0


class PrSourceError(Exception):
    """The hosting service could not produce a usable record."""


class NoSuchPrError(PrSourceError):
    """No open pull request exists for the branch."""

    def __init__(self, branch: str):
        super().__init__(f"No pull request found for branch {branch!r}.")
        self.branch = branch


class BasePrSource(ABC):
    def __init__(self, min_interval: float = DEFAULT_MIN_INTERVAL):
        self.min_interval = min_interval

    # ------------------------------------------------------------------ #
    # Public interface                                                     #
    # ------------------------------------------------------------------ #

    def find(self, branch: str) -> StatusRecord | None:
        """Return the PR for ``branch`` or None when there is none."""
        return self._fetch(branch)

    def fetch_initial(self, branch: str) -> StatusRecord:
        record = self._fetch(branch)
        if record is None:
            raise NoSuchPrError(branch)
        logger.debug("Fetched PR #%d for %s", record.number, branch)
        return record

    def refresh(self, current: StatusRecord) -> StatusRecord:
        """Refetch ``current`` and return a fully replaced snapshot."""
        branch = current.head_ref_name
        record = self._fetch(branch)
        if record is None:
            raise NoSuchPrError(branch)
        return record

    def is_due(self, record: StatusRecord, now: float) -> bool:
        """True when ``record`` is old enough to be fetched again."""
        if record.last_fetched is None:
            return True
        return now - record.last_fetched >= self.min_interval

    # ------------------------------------------------------------------ #
    # Abstract — implement in each source                                  #
    # ------------------------------------------------------------------ #

    @abstractmethod
    def _fetch(self, branch: str) -> StatusRecord | None:
        """Fetch the open PR whose head is ``branch``; None if there is none."""

    @abstractmethod
    def create(self, branch: str, title: str, body: str, base: str, draft: bool = True) -> StatusRecord:
        """Open a PR from ``branch`` into ``base`` and return its record."""
