"""Track applications in a structured table (CSV) with file locking."""
from __future__ import annotations

import csv
import fcntl
from collections import Counter
from datetime import datetime, timezone
from pathlib import Path
from typing import NamedTuple

from daymark.log import get_logger
from daymark.models import Job

log = get_logger(__name__)


class StatusInfo(NamedTuple):
    label: str
    counts_as_applied: bool


APPLICATION_STATUS_CONFIG: dict[str, StatusInfo] = {
    "applied": StatusInfo("Applied", True),
    "interview": StatusInfo("Interview", True),
    "offer": StatusInfo("Offer", True),
    "rejected": StatusInfo("Rejected", True),
    "ghosted": StatusInfo("Ghosted", True),
    "withdrawn": StatusInfo("Withdrawn", True),
    "not_applied": StatusInfo("Not Applied", False),  # marked, never actually sent
}

HEADERS: list[str] = [
    "job_id", "role", "company", "location", "url", "source",
    "applied_at", "status", "score",
]


def _lock(f, exclusive: bool = True) -> None:
    """Advisory file lock (Unix fcntl)."""
    try:
        op = fcntl.LOCK_EX if exclusive else fcntl.LOCK_SH
        fcntl.flock(f.fileno(), op)
    except (OSError, AttributeError):
        pass


def _unlock(f) -> None:
    try:
        fcntl.flock(f.fileno(), fcntl.LOCK_UN)
    except (OSError, AttributeError):
        pass


class ApplicationTracker:
    def __init__(self, path: Path) -> None:
        self.path = Path(path)

    def ensure(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        if not self.path.exists():
            with open(self.path, "w", newline="", encoding="utf-8") as f:
                _lock(f)
                csv.writer(f).writerow(HEADERS)
                _unlock(f)
            log.info("Created application tracker → %s", self.path.name)

    def get_applications(self) -> list[dict[str, str]]:
        self.ensure()
        with open(self.path, "r", newline="", encoding="utf-8") as f:
            _lock(f, exclusive=False)
            rows = list(csv.DictReader(f))
            _unlock(f)
        return rows

    def record_application(self, job: Job, status: str = "applied") -> bool:
        """Append a row for *job*; False if the job is already tracked."""
        if status not in APPLICATION_STATUS_CONFIG:
            raise ValueError(f"Unknown application status: {status!r}")
        self.ensure()
        row = {
            "job_id": job.id,
            "role": job.role,
            "company": job.company,
            "location": job.location,
            "url": job.application_url,
            "source": job.source.value,
            "applied_at": datetime.now(timezone.utc).strftime("%Y-%m-%d %H:%M"),
            "status": status,
            "score": "" if job.match_score is None else str(job.match_score),
        }
        with open(self.path, "r+", newline="", encoding="utf-8") as f:
            _lock(f)
            if any(r.get("job_id") == job.id for r in csv.DictReader(f)):
                _unlock(f)
                return False
            f.seek(0, 2)
            csv.DictWriter(f, fieldnames=HEADERS).writerow(row)
            _unlock(f)
        log.debug("Tracked: %s @ %s [%s]", job.role, job.company, status)
        return True

    def update_status(self, job_id: str, status: str) -> bool:
        """Move an existing application to *status* (e.g. applied -> interview)."""
        if status not in APPLICATION_STATUS_CONFIG:
            raise ValueError(f"Unknown application status: {status!r}")
        self.ensure()
        with open(self.path, "r+", newline="", encoding="utf-8") as f:
            _lock(f)
            rows = list(csv.DictReader(f))
            found = False
            for r in rows:
                if r.get("job_id") == job_id:
                    r["status"] = status
                    found = True
                    break
            if found:
                f.seek(0)
                f.truncate()
                w = csv.DictWriter(f, fieldnames=HEADERS)
                w.writeheader()
                w.writerows(rows)
            _unlock(f)
        if found:
            log.debug("Updated %s → %s", job_id, status)
        return found

    def status_counts(self) -> Counter:
        return Counter(r.get("status", "") for r in self.get_applications())

    def applied_count(self) -> int:
        """Applications whose status means something was actually sent."""
        return sum(
            1 for r in self.get_applications()
            if APPLICATION_STATUS_CONFIG.get(r.get("status", ""), StatusInfo("", False)).counts_as_applied
        )
