"""Refresh scheduler: the tick loop behind the live dashboard.

Each tick renders the current record, checks whether every check has
finished and, if not, asks the source for a fresh record in the background.
Rendering never waits on the network; a refresh lands whenever it completes
and shows up on a later tick.
"""

from __future__ import annotations

import dataclasses
import logging
import threading
import time
from concurrent.futures import Future, ThreadPoolExecutor
from enum import Enum, IntEnum
from typing import Callable

from rich.console import Console

from prwatch_core.gh.base import BasePrSource, PrSourceError
from prwatch_core.models import StatusRecord
from prwatch_core.registry import RowRegistry
from prwatch_core.rows import build_rows

logger = logging.getLogger(__name__)

DEFAULT_TICK_INTERVAL = 0.075


class SchedulerState(str, Enum):
    RUNNING = "running"
    COMPLETED = "completed"


class ExitStatus(IntEnum):
    SUCCESS = 0
    FAILURE = 1


def is_complete(record: StatusRecord) -> bool:
    """True once every check is terminal; a PR without checks has nothing to wait for."""
    return all(check.is_terminal for check in record.checks)


class RefreshScheduler:
    def __init__(
        self,
        source: BasePrSource,
        registry: RowRegistry,
        record: StatusRecord,
        tick_interval: float = DEFAULT_TICK_INTERVAL,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self._source = source
        self._registry = registry
        self._tick_interval = tick_interval
        self._clock = clock
        self._sleep = sleep
        self._lock = threading.Lock()
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="prwatch-refresh")
        self._inflight: Future | None = None
        if record.last_fetched is None:
            record = dataclasses.replace(record, last_fetched=clock())
        self._record = record
        self.state = SchedulerState.RUNNING

    @property
    def record(self) -> StatusRecord:
        with self._lock:
            return self._record

    @property
    def refresh_in_flight(self) -> bool:
        return self._inflight is not None and not self._inflight.done()

    def wait_for_refresh(self, timeout: float | None = None) -> None:
        """Block until the in-flight refresh, if any, has been applied."""
        if self._inflight is not None:
            self._inflight.result(timeout)

    def tick(self) -> None:
        record = self.record
        self._registry.render(build_rows(record))

        if is_complete(record):
            self.state = SchedulerState.COMPLETED
            self._registry.render(build_rows(self.record))
            return

        self.trigger_refresh()

    def trigger_refresh(self, now: float | None = None) -> bool:
        """Start a background refresh if none is running and the record is stale.

        Returns True when a refresh was started.
        """
        if self.refresh_in_flight:
            return False

        now = self._clock() if now is None else now
        snapshot = self.record
        if not self._source.is_due(snapshot, now):
            return False

        self._inflight = self._executor.submit(self._refresh, snapshot, now)
        return True

    def _refresh(self, snapshot: StatusRecord, started: float) -> None:
        try:
            fresh = self._source.refresh(snapshot)
            if fresh.number != snapshot.number:
                raise PrSourceError(f"refresh returned PR #{fresh.number}, expected #{snapshot.number}")
        except Exception as e:
            logger.warning("Refreshing PR #%d failed, keeping the previous data: %s", snapshot.number, e)
            fresh = None

        with self._lock:
            previous = self._record
            stamp = started if previous.last_fetched is None else max(previous.last_fetched, started)
            self._record = dataclasses.replace(fresh or previous, last_fetched=stamp)

        if fresh is not None:
            logger.debug("Refreshed PR #%d", fresh.number)

    def run(self) -> ExitStatus:
        try:
            while self.state is SchedulerState.RUNNING:
                self.tick()
                if self.state is SchedulerState.RUNNING:
                    self._sleep(self._tick_interval)
        finally:
            self._executor.shutdown(wait=False)
        return ExitStatus.SUCCESS


def run_until_complete(
    branch: str,
    source: BasePrSource,
    *,
    registry: RowRegistry | None = None,
    console: Console | None = None,
    tick_interval: float = DEFAULT_TICK_INTERVAL,
    initial: StatusRecord | None = None,
) -> ExitStatus:
    """Watch the PR for ``branch`` until all of its checks have finished.

    The initial fetch is the only fatal step: without a record there is
    nothing to draw, so it fails before the display starts.
    """
    if initial is None:
        try:
            initial = source.fetch_initial(branch)
        except PrSourceError as e:
            logger.error("%s", e)
            return ExitStatus.FAILURE

    registry = registry or RowRegistry(console=console)
    scheduler = RefreshScheduler(source, registry, initial, tick_interval=tick_interval)
    with registry:
        return scheduler.run()
