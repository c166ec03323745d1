"""SimplifyJobs — community-maintained internship list on GitHub (no key needed)."""
from __future__ import annotations

import requests

from daymark.log import get_logger
from daymark.models import Job, JobSearchParams, JobSource
from daymark.retry import retry
from daymark.sources.base import JobSourceAdapter
from daymark.sources.markdown import parse_jobs_from_markdown

log = get_logger(__name__)

GITHUB_JOBS_URL = (
    "https://raw.githubusercontent.com/SimplifyJobs/Summer2026-Internships/dev/README.md"
)


class SimplifyJobsAdapter(JobSourceAdapter):
    source_id = JobSource.SIMPLIFY_JOBS

    def __init__(self, env_getter=None, url: str = GITHUB_JOBS_URL) -> None:
        self.url = url

    def is_configured(self) -> bool:
        return True

    @retry(max_attempts=3, base_delay=2.0)
    def _download(self) -> str:
        r = requests.get(self.url, timeout=20)
        r.raise_for_status()
        return r.text

    def fetch_jobs(self, params: JobSearchParams) -> list[Job]:
        # The README is one curated list; search params do not apply.
        jobs = parse_jobs_from_markdown(self._download())
        log.debug("SimplifyJobs returned %d jobs", len(jobs))
        return jobs
