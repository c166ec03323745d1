"""Remotive — free API for remote tech jobs (no API key required).

Docs: https://remotive.com/api/remote-jobs
Remotive asks clients to stay around four requests a day, so the adapter
enforces that locally instead of waiting for a block.
"""
from __future__ import annotations

import re
import threading
from html import unescape
import time
from datetime import datetime, timezone
from typing import Callable

import requests

from daymark.log import get_logger
from daymark.models import Job, JobSearchParams, JobSource, RateLimitInfo
from daymark.retry import retry
from daymark.sources.base import JobSourceAdapter, date_part, preview

log = get_logger(__name__)

API_URL = "https://remotive.com/api/remote-jobs"
DAILY_REQUEST_LIMIT = 4
MIN_REQUEST_INTERVAL = 30.0  # seconds
_DAY = 24 * 60 * 60

_JOB_TYPES: dict[str, str] = {
    "full_time": "Full-time",
    "part_time": "Part-time",
    "contract": "Contract",
    "freelance": "Freelance",
}

_TAG_RE = re.compile(r"<[^>]*>")
_WS_RE = re.compile(r"\s+")


def strip_html(text: str | None) -> str:
    """Plain text from an HTML description; entities are decoded after tags go."""
    return _WS_RE.sub(" ", unescape(_TAG_RE.sub(" ", text or ""))).strip()


class RemotiveAdapter(JobSourceAdapter):
    source_id = JobSource.REMOTIVE

    def __init__(self, env_getter=None, clock: Callable[[], float] = time.time) -> None:
        self._clock = clock
        self._lock = threading.Lock()
        self._daily_count = 0
        self._last_request = float("-inf")
        self._day_started = clock()

    def is_configured(self) -> bool:
        return True

    def get_rate_limit_info(self) -> RateLimitInfo | None:
        return RateLimitInfo(
            remaining=max(0, DAILY_REQUEST_LIMIT - self._daily_count),
            total=DAILY_REQUEST_LIMIT,
            reset_at=datetime.fromtimestamp(self._day_started + _DAY, tz=timezone.utc),
        )

    def _acquire(self) -> bool:
        """Reserve one request slot; False when over the local limits."""
        with self._lock:
            now = self._clock()
            if now - self._day_started > _DAY:
                self._daily_count = 0
                self._day_started = now
            if self._daily_count >= DAILY_REQUEST_LIMIT:
                return False
            if now - self._last_request < MIN_REQUEST_INTERVAL:
                return False
            self._daily_count += 1
            self._last_request = now
            return True

    @retry(max_attempts=2, base_delay=1.5)
    def _fetch(self, params: JobSearchParams) -> list[dict]:
        query: dict = {"category": "software-dev", "limit": params.limit or 50}
        if params.query:
            query["search"] = params.query
        r = requests.get(API_URL, params=query, timeout=15)
        r.raise_for_status()
        data = r.json().get("jobs")
        return data if isinstance(data, list) else []

    def fetch_jobs(self, params: JobSearchParams) -> list[Job]:
        if not self._acquire():
            log.warning("Remotive rate limit reached — skipping this fetch")
            return []
        today = datetime.now(timezone.utc).date().isoformat()
        jobs: list[Job] = []
        for hit in self._fetch(params):
            job_type = hit.get("job_type") or ""
            jobs.append(
                Job(
                    id=f"remotive-{hit.get('id')}",
                    company=hit.get("company_name") or "Unknown Company",
                    role=hit.get("title") or "Unknown Role",
                    location=hit.get("candidate_required_location") or "Remote",
                    application_url=hit.get("url") or "",
                    date_posted=date_part(hit.get("publication_date"), today),
                    source=JobSource.REMOTIVE,
                    description=preview(strip_html(hit.get("description"))),
                    employment_type=_JOB_TYPES.get(job_type, job_type) or None,
                    remote=True,
                    salary=hit.get("salary") or None,
                )
            )
        log.debug("Remotive returned %d jobs", len(jobs))
        return jobs
