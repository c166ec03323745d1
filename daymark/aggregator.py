"""Fan out to job sources in parallel, merge, and deduplicate."""
from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from typing import Iterable, Mapping

from daymark.log import get_logger
from daymark.models import Job, JobSearchParams, JobSource
from daymark.sources import JobSourceAdapter

log = get_logger(__name__)


def dedupe_key(job: Job) -> str:
    return f"{job.company.lower()}-{job.role.lower()}-{job.location.lower()}"


def dedupe_jobs(jobs: Iterable[Job]) -> list[Job]:
    """Keep the first listing per (company, role, location), case-insensitively."""
    seen: dict[str, Job] = {}
    for job in jobs:
        seen.setdefault(dedupe_key(job), job)
    return list(seen.values())


def _fetch_source(adapter: JobSourceAdapter, params: JobSearchParams) -> list[Job]:
    """Wrapper for parallel fetching; a failing source contributes nothing."""
    name = adapter.source_name
    try:
        results = adapter.fetch_jobs(params)
        log.info("[%s] returned %d jobs", name, len(results))
        return results
    except Exception as exc:
        log.error("[%s] FAILED: %s", name, exc)
        return []


def fetch_all(
    enabled_sources: Iterable[JobSource | str],
    params: JobSearchParams | None = None,
    *,
    registry: Mapping[JobSource, JobSourceAdapter],
) -> list[Job]:
    """Fetch from every enabled, configured source and merge the results.

    Waits for all sources to settle. Results are merged in registry order,
    independent of which source answers first, so "first occurrence wins"
    during dedup is reproducible.
    """
    params = params or JobSearchParams()
    wanted: set[JobSource] = set()
    for source in enabled_sources:
        try:
            wanted.add(JobSource(source))
        except ValueError:
            log.debug("Ignoring unknown job source %r", source)

    adapters = [
        adapter for source, adapter in registry.items()
        if source in wanted and adapter.is_configured()
    ]
    for source in wanted - {a.source_id for a in adapters}:
        log.debug("Skipping unconfigured source %s", source.value)
    if not adapters:
        return []

    log.info("Fetching from %d source(s) in parallel...", len(adapters))
    with ThreadPoolExecutor(max_workers=len(adapters)) as pool:
        futures = [pool.submit(_fetch_source, a, params) for a in adapters]
        batches = [f.result() for f in futures]

    merged = [job for batch in batches for job in batch]
    jobs = dedupe_jobs(merged)
    log.info("Total unique jobs: %d (from %d listings)", len(jobs), len(merged))
    return jobs
