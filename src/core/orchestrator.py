"""Synchronization pass orchestration.

One pass derives the candidate names, launches one task per candidate, and
joins them all before returning. A per-pass JobCounter reports progress and
fires the completion signal exactly once.
"""

from __future__ import annotations

import asyncio
import logging
import threading
from dataclasses import dataclass, field
from typing import Callable, Iterable, Optional

from core.candidates import build_candidates
from core.config import SyncConfig
from core.errors import CatalogError
from core.models import Candidate, CatalogEntry, LibraryItem
from core.ports import CatalogPort
from core.reconcile import Reconciler

LOGGER = logging.getLogger(__name__)

DEFAULT_JOB_DELAY_SECONDS = 0.2


def _log_completion() -> None:
    LOGGER.info("Completed catalog check.")


class JobCounter:
    """Outstanding job count with an atomic decrement-and-check."""

    def __init__(self, total: int, on_complete: Callable[[], None]) -> None:
        self._remaining = total
        self._on_complete = on_complete
        self._fired = False
        self._lock = threading.Lock()

    @property
    def remaining(self) -> int:
        with self._lock:
            return self._remaining

    def _fire_once(self) -> bool:
        with self._lock:
            if self._fired or self._remaining > 0:
                return False
            self._fired = True
        self._on_complete()
        return True

    def start(self) -> None:
        """Fire immediately when there is nothing to wait for."""

        self._fire_once()

    def decrement(self) -> bool:
        """Mark one job finished; return True if this call completed the pass."""

        with self._lock:
            self._remaining -= 1
        return self._fire_once()


@dataclass
class PassReport:
    """Summary of one synchronization pass."""

    candidates: int
    announced: list[CatalogEntry] = field(default_factory=list)
    failed: list[str] = field(default_factory=list)


class SyncOrchestrator:
    """Fans candidates out to concurrent query and reconcile jobs."""

    def __init__(
        self,
        catalog: CatalogPort,
        reconciler: Reconciler,
        config: SyncConfig,
        job_delay: float = DEFAULT_JOB_DELAY_SECONDS,
        on_complete: Optional[Callable[[], None]] = None,
    ) -> None:
        self._catalog = catalog
        self._reconciler = reconciler
        self._config = config
        self._job_delay = job_delay
        self._on_complete = on_complete or _log_completion

    async def _run_job(
        self,
        candidate: Candidate,
        counter: JobCounter,
        pending: set[int],
        report: PassReport,
    ) -> None:
        try:
            try:
                remote_id = await self._catalog.resolve_id(candidate.name, candidate.query_type)
                if remote_id is None:
                    LOGGER.debug("No catalog match for %s %r", candidate.query_type.value, candidate.name)
                    return
                entries = await self._catalog.fetch_entries(remote_id, candidate.query_type)
            except CatalogError as exc:
                LOGGER.error("Catalog query failed for %s %r: %s", candidate.query_type.value, candidate.name, exc)
                report.failed.append(candidate.name)
                return

            announced = await self._reconciler.reconcile(entries, pending)
            report.announced.extend(announced)
            await asyncio.sleep(self._job_delay)
        finally:
            if not counter.decrement():
                LOGGER.debug("%s catalog jobs remaining", counter.remaining)

    async def run_pass(self, items: Iterable[LibraryItem]) -> PassReport:
        """Run one synchronization pass over the library and return a report.

        Remote failures only affect their own candidate. Any other failure
        (e.g. the classification store) is re-raised once every job has joined.
        """

        candidate_set = build_candidates(items, self._config.filters)
        report = PassReport(candidates=len(candidate_set))
        counter = JobCounter(len(candidate_set), self._on_complete)
        LOGGER.info(
            "Checking catalog for %s artists and %s creators",
            len(candidate_set.artists),
            len(candidate_set.creators),
        )
        if not candidate_set:
            counter.start()
            return report

        pending: set[int] = set()
        tasks = [
            asyncio.create_task(self._run_job(candidate, counter, pending, report))
            for candidate in candidate_set.candidates()
        ]
        results = await asyncio.gather(*tasks, return_exceptions=True)

        errors = [result for result in results if isinstance(result, BaseException)]
        for error in errors:
            LOGGER.error("Catalog job failed", exc_info=error)
        if errors:
            raise errors[0]

        LOGGER.info("%s new or updated entries announced", len(report.announced))
        return report
