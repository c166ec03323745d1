from __future__ import annotations

from abc import ABC, abstractmethod

from daymark.models import Job, JobSearchParams, JobSource, RateLimitInfo, SOURCE_NAMES

# Stored descriptions are previews, not full postings.
DESCRIPTION_PREVIEW_LEN = 500


class JobSourceAdapter(ABC):
    """One external job board. Owns its own credentials and rate-limit state."""

    source_id: JobSource

    @property
    def source_name(self) -> str:
        return SOURCE_NAMES[self.source_id]

    @abstractmethod
    def is_configured(self) -> bool:
        """Credentials/availability check; unconfigured sources are skipped."""

    @abstractmethod
    def fetch_jobs(self, params: JobSearchParams) -> list[Job]:
        pass

    def get_rate_limit_info(self) -> RateLimitInfo | None:
        return None


def preview(text: str | None) -> str | None:
    if text is None:
        return None
    return text[:DESCRIPTION_PREVIEW_LEN]


def date_part(iso: str | None, fallback: str) -> str:
    """``YYYY-MM-DD`` prefix of an ISO timestamp, or *fallback*."""
    if not iso:
        return fallback
    return str(iso).split("T")[0]
