"""JSearch API (RapidAPI) — aggregated job listings."""
from __future__ import annotations

from datetime import datetime, timezone

import requests

from daymark.log import get_logger
from daymark.models import Job, JobSearchParams, JobSource, RateLimitInfo
from daymark.retry import retry
from daymark.sources.base import JobSourceAdapter, date_part, preview

log = get_logger(__name__)


def _format_salary(hit: dict) -> str | None:
    lo, hi = hit.get("job_min_salary"), hit.get("job_max_salary")
    if not lo and not hi:
        return None
    currency = hit.get("job_salary_currency") or "USD"
    period = hit.get("job_salary_period") or "year"
    if lo and hi:
        return f"{currency} {lo:,}-{hi:,}/{period}"
    return f"{currency} {(lo or hi):,}/{period}"


class JSearchAdapter(JobSourceAdapter):
    source_id = JobSource.JSEARCH
    BASE = "https://jsearch.p.rapidapi.com"

    def __init__(self, env_getter) -> None:
        self.api_key: str = env_getter("RAPIDAPI_KEY")
        self._rate_limit: RateLimitInfo | None = None

    def is_configured(self) -> bool:
        return bool(self.api_key)

    def get_rate_limit_info(self) -> RateLimitInfo | None:
        return self._rate_limit

    @staticmethod
    def build_query(params: JobSearchParams) -> str:
        return f"{params.query or 'software engineer intern'} in {params.location or 'USA'}"

    def _update_rate_limit(self, headers) -> None:
        remaining = headers.get("x-ratelimit-requests-remaining")
        limit = headers.get("x-ratelimit-requests-limit")
        reset = headers.get("x-ratelimit-requests-reset")
        if remaining and limit:
            self._rate_limit = RateLimitInfo(
                remaining=int(remaining),
                total=int(limit),
                reset_at=(
                    datetime.fromtimestamp(int(reset), tz=timezone.utc)
                    if reset else datetime.now(timezone.utc)
                ),
            )

    @retry(max_attempts=3, base_delay=2.0)
    def _fetch(self, params: JobSearchParams) -> list[dict]:
        query: dict = {
            "query": self.build_query(params),
            "page": str(params.page or 1),
            "num_pages": "1",
        }
        if params.date_posted:
            query["date_posted"] = params.date_posted
        if params.remote:
            query["remote_jobs_only"] = "true"
        if params.employment_type:
            query["employment_types"] = params.employment_type

        r = requests.get(
            f"{self.BASE}/search",
            params=query,
            headers={
                "X-RapidAPI-Key": self.api_key,
                "X-RapidAPI-Host": "jsearch.p.rapidapi.com",
            },
            timeout=15,
        )
        self._update_rate_limit(r.headers)
        if r.status_code == 403:
            log.warning("JSearch 403 — subscribe to the API on RapidAPI first")
        r.raise_for_status()
        data = r.json().get("data")
        if not isinstance(data, list):
            log.warning("JSearch returned no data")
            return []
        return data

    def fetch_jobs(self, params: JobSearchParams) -> list[Job]:
        if not self.api_key:
            log.warning("JSearch API key not configured")
            return []
        today = datetime.now(timezone.utc).date().isoformat()
        jobs: list[Job] = []
        for hit in self._fetch(params):
            location = ", ".join(
                p for p in (hit.get("job_city"), hit.get("job_state"), hit.get("job_country")) if p
            )
            jobs.append(
                Job(
                    id=f"jsearch-{hit.get('job_id')}",
                    company=hit.get("employer_name") or "Unknown Company",
                    role=hit.get("job_title") or "Unknown Role",
                    location=location or "Not specified",
                    application_url=hit.get("job_apply_link") or "",
                    date_posted=date_part(hit.get("job_posted_at_datetime_utc"), today),
                    source=JobSource.JSEARCH,
                    description=preview(hit.get("job_description")),
                    employment_type=hit.get("job_employment_type"),
                    remote=hit.get("job_is_remote"),
                    salary=_format_salary(hit),
                )
            )
        log.debug("JSearch returned %d jobs", len(jobs))
        return jobs
