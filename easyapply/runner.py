"""
One automation run: collect listings, skip what was already applied to,
drive the apply flow job by job and record every outcome.
"""

import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable, ContextManager, Optional

from playwright.sync_api import Page

from easyapply.apply_flow import ApplyFlow
from easyapply.browser import browser_session
from easyapply.collector import ListingCollector
from easyapply.config import Settings
from easyapply.history import CsvApplicationHistory, HistoryLookup, HistoryRecorder
from easyapply.models import (
    ApplicationStats,
    ApplyOutcome,
    JobRecord,
    NoResultsFound,
    OutcomeKind,
)
from easyapply.utils import truncate

log = logging.getLogger(__name__)


@dataclass
class RunSummary:
    run_id: str
    collected: int = 0
    results: list[tuple[JobRecord, ApplyOutcome]] = field(default_factory=list)
    cancelled: bool = False

    @property
    def stats(self) -> ApplicationStats:
        kinds = [outcome.kind for _, outcome in self.results]
        skipped = kinds.count(OutcomeKind.SKIPPED_ALREADY_APPLIED)
        successful = kinds.count(OutcomeKind.SUCCEEDED)
        return ApplicationStats(
            total=len(kinds),
            successful=successful,
            failed=len(kinds) - successful - skipped,
            skipped=skipped,
        )

    @property
    def applied(self) -> list[JobRecord]:
        return [job for job, outcome in self.results if outcome.is_success]


class RunLogger(logging.LoggerAdapter):
    """Prefixes every record with the run id."""

    def process(self, msg, kwargs):
        return f"[run {self.extra['run_id']}] {msg}", kwargs


def check_previously_applied(history: HistoryLookup, job: JobRecord, logger=log) -> bool:
    """History lookup that favours availability: failures mean "not applied"."""
    try:
        return bool(history.is_previously_applied(job.job_id))
    except Exception as e:
        logger.warning(f"History lookup failed for {job.job_id}, treating as not applied: {truncate(str(e))}")
        return False


def record_outcome(history: HistoryRecorder, job: JobRecord, outcome: ApplyOutcome, logger=log) -> bool:
    try:
        ok = history.record_application(
            job.job_id,
            job.title,
            job.company,
            job.url,
            outcome,
            datetime.now(timezone.utc),
        )
    except Exception as e:
        logger.error(f"Failed to record application for {job.title}: {truncate(str(e))}")
        return False
    if not ok:
        logger.warning(f"History recorder rejected application for {job.title}")
    return bool(ok)


class AutomationRun:
    """Wires collector, apply flow and history together for one session."""

    def __init__(
        self,
        settings: Settings,
        history=None,
        session_factory: Callable[[Settings], ContextManager[Page]] = browser_session,
        should_stop: Optional[Callable[[], bool]] = None,
    ):
        self.settings = settings
        self.history = history or CsvApplicationHistory(settings.applications_csv)
        self.session_factory = session_factory
        self.should_stop = should_stop or (lambda: False)
        self.run_id = uuid.uuid4().hex[:8]
        self.log = RunLogger(logging.getLogger("easyapply.run"), {"run_id": self.run_id})

    def execute(self) -> RunSummary:
        """Run once. AuthenticationFailed propagates; the browser still closes."""
        summary = RunSummary(run_id=self.run_id)
        query = self.settings.query
        self.log.info(
            f"Applying for jobs with title: {query.title}, location: {query.location}, "
            f"max jobs: {self.settings.max_jobs_to_apply}"
        )

        with self.session_factory(self.settings) as page:
            collector = ListingCollector(page, self.settings, logger=self.log)
            try:
                # Applying navigates away from the feed, so collect everything first.
                jobs = list(collector.collect(query, self.settings.credentials))
            except NoResultsFound as e:
                self.log.info(str(e))
                jobs = []
            summary.collected = len(jobs)
            self.log.info(f"Job search completed. Found {len(jobs)} jobs after {collector.iterations} iterations")

            flow = ApplyFlow(page, self.settings, logger=self.log)
            self._process(jobs, flow, summary)

        stats = summary.stats
        self.log.info(
            f"Processed {stats.total} jobs: {stats.successful} applied, "
            f"{stats.failed} failed, {stats.skipped} skipped."
        )
        return summary

    def _process(self, jobs: list[JobRecord], flow: ApplyFlow, summary: RunSummary):
        attempted = 0
        for job in jobs:
            if self.should_stop():
                self.log.info("Stop requested, leaving remaining jobs unprocessed.")
                summary.cancelled = True
                break
            if attempted >= self.settings.max_jobs_to_apply:
                self.log.info(f"Reached maximum jobs to apply ({self.settings.max_jobs_to_apply}), stopping.")
                break
            if check_previously_applied(self.history, job, self.log) or job.already_applied_hint:
                self.log.info(f"Already applied for: {job.title} at {job.company}")
                outcome = ApplyOutcome.skipped_already_applied()
            else:
                attempted += 1
                outcome = flow.apply(job)

            record_outcome(self.history, job, outcome, self.log)
            summary.results.append((job, outcome))
