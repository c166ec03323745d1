from __future__ import annotations

from typing import Callable

from .base import JobSourceAdapter
from .simplify import SimplifyJobsAdapter
from .jsearch import JSearchAdapter
from .remotive import RemotiveAdapter
from .adzuna import AdzunaAdapter

from daymark.log import get_logger
from daymark.models import JobSource

log = get_logger(__name__)

__all__ = [
    "JobSourceAdapter", "SimplifyJobsAdapter", "JSearchAdapter",
    "RemotiveAdapter", "AdzunaAdapter",
    "ADAPTER_TYPES", "build_registry", "get_adapter", "get_all_sources", "get_configured_sources",
]

# Closed set of sources; iteration order is JobSource declaration order.
ADAPTER_TYPES: dict[JobSource, type[JobSourceAdapter]] = {
    JobSource.SIMPLIFY_JOBS: SimplifyJobsAdapter,
    JobSource.JSEARCH: JSearchAdapter,
    JobSource.REMOTIVE: RemotiveAdapter,
    JobSource.ADZUNA: AdzunaAdapter,
}


def build_registry(env_getter: Callable[[str], str]) -> dict[JobSource, JobSourceAdapter]:
    registry = {source: ADAPTER_TYPES[source](env_getter) for source in JobSource}
    for source, adapter in registry.items():
        log.debug("Registered source: %s (configured=%s)", adapter.source_name, adapter.is_configured())
    return registry


def get_adapter(registry: dict[JobSource, JobSourceAdapter], source: JobSource | str) -> JobSourceAdapter | None:
    try:
        return registry.get(JobSource(source))
    except ValueError:
        return None


def get_all_sources() -> list[JobSource]:
    return list(JobSource)


def get_configured_sources(registry: dict[JobSource, JobSourceAdapter]) -> list[JobSource]:
    return [source for source, adapter in registry.items() if adapter.is_configured()]
