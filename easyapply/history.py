"""
Application history — every apply attempt is appended to a persistent CSV
file so submissions can be tracked and never repeated.
"""

import csv
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional, Protocol

from easyapply.models import ApplicationStats, ApplyOutcome

log = logging.getLogger(__name__)

CSV_HEADERS = [
    "timestamp",
    "platform",
    "job_id",
    "job_title",
    "company",
    "job_url",
    "status",          # applied | skipped | failed
    "outcome",
    "failure_reason",
]


class HistoryLookup(Protocol):
    def is_previously_applied(self, job_id: str) -> bool: ...


class HistoryRecorder(Protocol):
    def record_application(
        self,
        job_id: str,
        title: str,
        company: str,
        url: str,
        outcome: ApplyOutcome,
        timestamp: datetime,
    ) -> bool: ...


class CsvApplicationHistory:
    """CSV-backed history lookup and recorder."""

    def __init__(self, path: Path, platform: str = "LinkedIn"):
        self.path = Path(path)
        self.platform = platform
        self._applied: Optional[set[str]] = None

    def _ensure_csv(self):
        """Create the CSV with headers if it doesn't exist yet."""
        if not self.path.exists():
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.path, "w", newline="", encoding="utf-8") as f:
                writer = csv.writer(f)
                writer.writerow(CSV_HEADERS)

    def _rows(self) -> list[dict]:
        self._ensure_csv()
        with open(self.path, "r", encoding="utf-8") as f:
            return list(csv.DictReader(f))

    def record_application(
        self,
        job_id: str,
        title: str,
        company: str,
        url: str,
        outcome: ApplyOutcome,
        timestamp: Optional[datetime] = None,
    ) -> bool:
        """Append one row to the applications CSV."""
        try:
            self._ensure_csv()
            ts = timestamp or datetime.now(timezone.utc)
            row = [
                ts.isoformat(),
                self.platform,
                job_id,
                title,
                company,
                url,
                outcome.status,
                outcome.kind.value,
                "" if outcome.is_success else outcome.detail,
            ]
            with open(self.path, "a", newline="", encoding="utf-8") as f:
                writer = csv.writer(f)
                writer.writerow(row)
        except OSError as e:
            log.error(f"Failed to record application {job_id}: {e}")
            return False
        if outcome.is_success and self._applied is not None:
            self._applied.add(job_id)
        log.info(f"[{outcome.status.upper()}] {self.platform} | {company} — {title}")
        return True

    def applied_job_ids(self) -> set[str]:
        """Return the set of job ids already applied to (to avoid duplicates)."""
        return {
            row.get("job_id", "")
            for row in self._rows()
            if row.get("status") == "applied"
        }

    def is_previously_applied(self, job_id: str) -> bool:
        # Read once; rows this instance writes keep the set current.
        if self._applied is None:
            self._applied = self.applied_job_ids()
        return job_id in self._applied

    def stats(self, since: Optional[datetime] = None) -> ApplicationStats:
        """Summary counts, optionally limited to rows at or after `since`."""
        total = successful = failed = skipped = 0
        for row in self._rows():
            if since is not None:
                try:
                    ts = datetime.fromisoformat(row.get("timestamp", ""))
                except ValueError:
                    continue
                if ts < since:
                    continue
            total += 1
            status = row.get("status", "")
            if status == "applied":
                successful += 1
            elif status == "skipped":
                skipped += 1
            elif status == "failed":
                failed += 1
        return ApplicationStats(total=total, successful=successful, failed=failed, skipped=skipped)
