"""Adzuna job search — multi-country aggregator.

Free tier: 250 requests/day.  Sign up at https://developer.adzuna.com/
"""
from __future__ import annotations

from datetime import datetime, timezone

import requests

from daymark.log import get_logger
from daymark.models import Job, JobSearchParams, JobSource
from daymark.retry import retry
from daymark.sources.base import JobSourceAdapter, date_part, preview

log = get_logger(__name__)

BASE_URL = "https://api.adzuna.com/v1/api/jobs"
DEFAULT_COUNTRY = "us"

# Location substring -> Adzuna country code.
COUNTRY_CODES: dict[str, str] = {
    "usa": "us", "us": "us", "united states": "us",
    "uk": "gb", "united kingdom": "gb",
    "canada": "ca", "australia": "au", "germany": "de", "france": "fr",
    "india": "in", "netherlands": "nl", "spain": "es", "italy": "it",
    "brazil": "br", "mexico": "mx", "poland": "pl", "russia": "ru",
    "south africa": "za", "new zealand": "nz", "singapore": "sg",
    "austria": "at", "belgium": "be", "switzerland": "ch",
}

_MAX_DAYS_OLD: dict[str, int] = {"today": 1, "3days": 3, "week": 7, "month": 30}


def country_code(location: str | None) -> str:
    if not location:
        return DEFAULT_COUNTRY
    low = location.lower()
    # Longest names first: "us" is a substring of "australia" and "russia".
    for name, code in sorted(COUNTRY_CODES.items(), key=lambda kv: -len(kv[0])):
        if name in low:
            return code
    return DEFAULT_COUNTRY


def _contract_time(employment_type: str) -> str | None:
    t = employment_type.upper()
    if "FULL" in t:
        return "full_time"
    if "PART" in t:
        return "part_time"
    return None


def _format_salary(hit: dict) -> str | None:
    lo, hi = hit.get("salary_min"), hit.get("salary_max")
    if not lo and not hi:
        return None
    if lo and hi:
        return f"${lo:,.0f}-${hi:,.0f}/year"
    return f"${(lo or hi):,.0f}/year"


class AdzunaAdapter(JobSourceAdapter):
    source_id = JobSource.ADZUNA

    def __init__(self, env_getter) -> None:
        self.app_id: str = env_getter("ADZUNA_APP_ID")
        self.app_key: str = env_getter("ADZUNA_APP_KEY")

    def is_configured(self) -> bool:
        return bool(self.app_id and self.app_key)

    def build_request(self, params: JobSearchParams) -> tuple[str, dict]:
        url = f"{BASE_URL}/{country_code(params.location)}/search/{params.page or 1}"
        query: dict = {
            "app_id": self.app_id,
            "app_key": self.app_key,
            "results_per_page": params.limit or 20,
            "category": "it-jobs",
            "what": params.query or "software engineer",
        }
        if params.location:
            first = params.location.lower().split(",")[0].strip()
            if first and first not in COUNTRY_CODES:
                query["where"] = first
        if params.date_posted in _MAX_DAYS_OLD:
            query["max_days_old"] = _MAX_DAYS_OLD[params.date_posted]
        if params.employment_type:
            contract = _contract_time(params.employment_type)
            if contract:
                query["full_time"] = "1" if contract == "full_time" else "0"
                query["part_time"] = "1" if contract == "part_time" else "0"
        return url, query

    @retry(max_attempts=3, base_delay=2.0)
    def _fetch(self, params: JobSearchParams) -> list[dict]:
        url, query = self.build_request(params)
        r = requests.get(url, params=query, headers={"Accept": "application/json"}, timeout=15)
        if r.status_code == 401:
            log.error("Adzuna authentication failed — check ADZUNA_APP_ID / ADZUNA_APP_KEY")
        elif r.status_code == 429:
            log.warning("Adzuna rate limit exceeded")
        r.raise_for_status()
        results = r.json().get("results")
        if not isinstance(results, list):
            log.warning("Adzuna returned no results")
            return []
        return results

    def fetch_jobs(self, params: JobSearchParams) -> list[Job]:
        if not self.is_configured():
            log.warning("Adzuna API credentials not configured")
            return []
        today = datetime.now(timezone.utc).date().isoformat()
        jobs: list[Job] = []
        for hit in self._fetch(params):
            contract = " - ".join(p for p in (hit.get("contract_type"), hit.get("contract_time")) if p)
            jobs.append(
                Job(
                    id=f"adzuna-{hit.get('id')}",
                    company=(hit.get("company") or {}).get("display_name") or "Unknown Company",
                    role=hit.get("title") or "Unknown Role",
                    location=(hit.get("location") or {}).get("display_name") or "Not specified",
                    application_url=hit.get("redirect_url") or "",
                    date_posted=date_part(hit.get("created"), today),
                    source=JobSource.ADZUNA,
                    description=preview(hit.get("description")),
                    employment_type=contract or None,
                    salary=_format_salary(hit),
                )
            )
        log.debug("Adzuna returned %d jobs", len(jobs))
        return jobs
