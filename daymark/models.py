"""Data models for jobs, skills, daily assignments and tasks."""
from __future__ import annotations

from dataclasses import asdict, dataclass, field, fields
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Iterable


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def today_iso() -> str:
    return datetime.now(timezone.utc).date().isoformat()


class JobSource(str, Enum):
    """Origin adapter of a listing. Declaration order is the fetch/merge order."""

    SIMPLIFY_JOBS = "simplify-jobs"
    JSEARCH = "jsearch"
    REMOTIVE = "remotive"
    ADZUNA = "adzuna"


SOURCE_NAMES: dict[JobSource, str] = {
    JobSource.SIMPLIFY_JOBS: "SimplifyJobs",
    JobSource.JSEARCH: "JSearch",
    JobSource.REMOTIVE: "Remotive",
    JobSource.ADZUNA: "Adzuna",
}


@dataclass
class Job:
    id: str
    company: str
    role: str
    location: str
    application_url: str
    date_posted: str
    source: JobSource = JobSource.SIMPLIFY_JOBS
    fetched_at: str = field(default_factory=utc_now_iso)
    salary: str | None = None
    description: str | None = None
    employment_type: str | None = None
    remote: bool | None = None
    sponsorship: bool | None = None
    no_sponsorship: bool = False
    us_only: bool = False
    is_sub_entry: bool = False
    # Derived per user at read time; never stored as ground truth.
    match_score: int | None = None

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["source"] = self.source.value
        data.pop("match_score")
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Job:
        known = {f.name for f in fields(cls)}
        kwargs = {k: v for k, v in data.items() if k in known and k != "match_score"}
        kwargs["source"] = JobSource(kwargs.get("source", JobSource.SIMPLIFY_JOBS.value))
        return cls(**kwargs)


@dataclass
class UserSkills:
    languages: list[str] = field(default_factory=list)
    frameworks: list[str] = field(default_factory=list)
    tools: list[str] = field(default_factory=list)
    role_types: list[str] = field(default_factory=list)
    other_keywords: list[str] = field(default_factory=list)

    # Resume-derived categories; role_types is curated by hand.
    RESUME_CATEGORIES = ("languages", "frameworks", "tools", "other_keywords")

    def resume_tokens(self) -> list[str]:
        return [*self.languages, *self.frameworks, *self.tools, *self.other_keywords]

    def fingerprint(self) -> tuple:
        return (
            tuple(self.languages), tuple(self.frameworks), tuple(self.tools),
            tuple(self.role_types), tuple(self.other_keywords),
        )

    def to_dict(self) -> dict[str, list[str]]:
        return {
            "languages": list(self.languages),
            "frameworks": list(self.frameworks),
            "tools": list(self.tools),
            "role_types": list(self.role_types),
            "other_keywords": list(self.other_keywords),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> UserSkills:
        data = data or {}
        return cls(
            languages=list(data.get("languages") or []),
            frameworks=list(data.get("frameworks") or []),
            tools=list(data.get("tools") or []),
            role_types=list(data.get("role_types") or []),
            other_keywords=list(data.get("other_keywords") or []),
        )


@dataclass
class UserProfile:
    skills: UserSkills = field(default_factory=UserSkills)
    resume_file_name: str | None = None
    resume_uploaded_at: str | None = None

    @property
    def has_resume(self) -> bool:
        return bool(self.resume_file_name)

    def to_dict(self) -> dict[str, Any]:
        return {
            "skills": self.skills.to_dict(),
            "resume_file_name": self.resume_file_name,
            "resume_uploaded_at": self.resume_uploaded_at,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> UserProfile:
        data = data or {}
        return cls(
            skills=UserSkills.from_dict(data.get("skills")),
            resume_file_name=data.get("resume_file_name"),
            resume_uploaded_at=data.get("resume_uploaded_at"),
        )


@dataclass
class MatchResult:
    job: Job
    score: int
    matched_keywords: list[str]
    matches_role_filter: bool
    has_resume_match: bool


@dataclass
class DailyJobAssignment:
    """The slate for one calendar date (YYYY-MM-DD)."""

    date: str
    job_ids: list[str] = field(default_factory=list)
    completed_job_ids: list[str] = field(default_factory=list)
    skipped_job_ids: list[str] = field(default_factory=list)

    def active_job_ids(self, seen: Iterable[str] = ()) -> list[str]:
        """Slate minus completed, skipped and (optionally) refreshed-away jobs."""
        done = set(self.completed_job_ids) | set(self.skipped_job_ids) | set(seen)
        return [jid for jid in self.job_ids if jid not in done]

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> DailyJobAssignment:
        return cls(
            date=data["date"],
            job_ids=list(data.get("job_ids") or []),
            completed_job_ids=list(data.get("completed_job_ids") or []),
            skipped_job_ids=list(data.get("skipped_job_ids") or []),
        )


@dataclass
class JobApplication:
    """A global history event: the user applied to or skipped a job."""

    id: str
    job_id: str
    status: str  # applied | skipped
    assigned_date: str
    applied_at: str | None = None
    skip_reason: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> JobApplication:
        return cls(**{k: data.get(k) for k in ("id", "job_id", "status", "assigned_date", "applied_at", "skip_reason")})


@dataclass
class JobState:
    """Per-user job state; mutated only through DailyAssignmentEngine."""

    all_jobs: list[Job] = field(default_factory=list)
    applications: list[JobApplication] = field(default_factory=list)
    daily_assignments: dict[str, DailyJobAssignment] = field(default_factory=dict)
    seen_job_ids: list[str] = field(default_factory=list)
    last_fetched_at: str | None = None

    def set_all_jobs(self, jobs: list[Job]) -> None:
        self.all_jobs = list(jobs)
        self.last_fetched_at = utc_now_iso()

    def job_by_id(self, job_id: str) -> Job | None:
        for job in self.all_jobs:
            if job.id == job_id:
                return job
        return None

    def to_dict(self) -> dict[str, Any]:
        return {
            "all_jobs": [j.to_dict() for j in self.all_jobs],
            "applications": [a.to_dict() for a in self.applications],
            "daily_assignments": {d: a.to_dict() for d, a in self.daily_assignments.items()},
            "seen_job_ids": list(self.seen_job_ids),
            "last_fetched_at": self.last_fetched_at,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> JobState:
        data = data or {}
        return cls(
            all_jobs=[Job.from_dict(j) for j in data.get("all_jobs", [])],
            applications=[JobApplication.from_dict(a) for a in data.get("applications", [])],
            daily_assignments={
                d: DailyJobAssignment.from_dict(a)
                for d, a in (data.get("daily_assignments") or {}).items()
            },
            seen_job_ids=list(data.get("seen_job_ids") or []),
            last_fetched_at=data.get("last_fetched_at"),
        )


TASK_STATUSES = ("pending", "in-progress", "completed", "skipped")
TASK_CATEGORIES = ("job-application", "work", "personal", "health", "learning", "other")
TIME_SLOTS: dict[str, tuple[int, int]] = {
    "morning": (6, 12),
    "afternoon": (12, 18),
    "evening": (18, 22),
}


@dataclass
class Task:
    id: str
    title: str
    date: str
    duration: int  # minutes
    category: str = "other"
    status: str = "pending"
    description: str | None = None
    preferred_time_slot: str | None = None  # advisory only
    start_time: str | None = None
    end_time: str | None = None
    was_auto_shifted: bool = False
    original_start_time: str | None = None
    completed_at: str | None = None

    def mark_completed(self) -> None:
        self.status = "completed"
        self.completed_at = utc_now_iso()

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Task:
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in data.items() if k in known})


@dataclass(frozen=True)
class BusySlot:
    start: str
    end: str


@dataclass(frozen=True)
class TimeSlot:
    start: str
    end: str
    duration: int  # minutes


@dataclass
class JobSearchParams:
    query: str | None = None
    location: str | None = None
    remote: bool = False
    employment_type: str | None = None  # FULLTIME, PARTTIME, INTERN, CONTRACTOR
    date_posted: str | None = None  # today, 3days, week, month
    page: int = 1
    limit: int | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> JobSearchParams:
        data = data or {}
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in data.items() if k in known})


@dataclass
class RateLimitInfo:
    remaining: int
    total: int
    reset_at: datetime
