"""Validate construction sites concurrently.

Each site's blocking database round-trip runs in a worker thread via
``asyncio.to_thread``; an ``asyncio.Semaphore`` caps how many are in flight.
Sites are independent, so diagnostics may arrive in any order.
"""

import asyncio
import logging
from typing import Iterable, List

from .analyzer import CommandAnalyzer, FileJob
from .logger import log_call
from .models import ConstructionSite, DiagnosticRecord
from .utils import limit_parallelism


class SitePool:
    """Fan construction sites out to worker threads."""

    def __init__(self, analyzer: CommandAnalyzer, parallelism: int = 4, pool_size: int | None = None) -> None:
        self.analyzer = analyzer
        self.parallelism = parallelism
        self.pool_size = pool_size
        self.log = logging.getLogger(__name__)

    async def _run_site(
        self, sem: asyncio.Semaphore, job: FileJob, site: ConstructionSite
    ) -> DiagnosticRecord | None:
        async with sem:
            return await asyncio.to_thread(self.analyzer.analyze_site, job, site)

    @log_call
    async def check(self, jobs: Iterable[FileJob]) -> List[DiagnosticRecord]:
        """Analyse every site of ``jobs`` and return the diagnostics found.

        The first :class:`FatalValidationError` aborts the run and propagates.
        """
        work = [(job, site) for job in jobs for site in job.sites]
        n_workers = limit_parallelism(self.parallelism, len(work), self.pool_size)
        self.log.info("Checking %d site(s) with parallelism=%d", len(work), n_workers)
        sem = asyncio.Semaphore(n_workers)
        results = await asyncio.gather(*(self._run_site(sem, job, site) for job, site in work))
        records = [r for r in results if r is not None]
        self.log.info("Check finished with %d diagnostic(s)", len(records))
        return records

    def run(self, jobs: Iterable[FileJob]) -> List[DiagnosticRecord]:
        return asyncio.run(self.check(list(jobs)))
