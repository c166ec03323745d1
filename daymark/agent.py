"""
Daily job agent.

Runs: fetch sources → merge/dedupe → store → build today's slate → plan tasks → save.
"""
from __future__ import annotations

from pathlib import Path
from typing import Any, Mapping

from daymark.aggregator import fetch_all
from daymark.assignments import DailyAssignmentEngine
from daymark.busy_slots import BusyCalendar
from daymark.config import (
    CONFIG_DIR,
    DATA_DIR,
    PROFILE_PATH,
    Settings,
    ensure_dirs,
    get_env,
    load_profile,
    load_settings,
    load_tasks,
)
from daymark.log import get_logger
from daymark.models import JobSource, UserProfile, today_iso
from daymark.scheduler import DayPlanner
from daymark.sources import JobSourceAdapter, build_registry
from daymark.store import StateStore
from daymark.tracker import ApplicationTracker

log = get_logger(__name__)

TASKS_PATH: Path = CONFIG_DIR / "tasks.yaml"
BUSY_PATH: Path = CONFIG_DIR / "busy.yaml"


def _user_id() -> str:
    return get_env("DAYMARK_USER") or "default"


class Session:
    """Loaded state for one user: the engine plus where to save it."""

    def __init__(
        self,
        *,
        settings: Settings | None = None,
        profile: UserProfile | None = None,
        data_dir: Path | None = None,
        user_id: str | None = None,
    ) -> None:
        self.settings = settings or load_settings()
        self.data_dir = Path(data_dir or DATA_DIR)
        self.user_id = user_id or _user_id()
        self.store = StateStore(self.data_dir, self.user_id)
        self.tracker = ApplicationTracker(self.data_dir / f"{self.user_id}_applications.csv")

        state, saved_profile = self.store.load()
        if profile is None:
            profile = load_profile() if PROFILE_PATH.exists() else saved_profile
        self.profile = profile or UserProfile()
        self.engine = DailyAssignmentEngine(
            state, self.profile, jobs_per_day=self.settings.jobs_per_day, user_id=self.user_id
        )
        self.profile_changed = saved_profile is not None and (
            saved_profile.skills.fingerprint() != self.profile.skills.fingerprint()
            or saved_profile.resume_file_name != self.profile.resume_file_name
        )

    @property
    def state(self):
        return self.engine.state

    def save(self) -> None:
        self.store.save(self.state, self.profile)


def _job_summary(job) -> dict[str, Any]:
    return {
        "id": job.id,
        "company": job.company,
        "role": job.role,
        "location": job.location,
        "url": job.application_url,
        "match_score": job.match_score,
    }


def run(
    *,
    date: str | None = None,
    fetch: bool = True,
    settings: Settings | None = None,
    profile: UserProfile | None = None,
    registry: Mapping[JobSource, JobSourceAdapter] | None = None,
    data_dir: Path | None = None,
    tasks_path: Path | None = None,
    busy_path: Path | None = None,
) -> dict[str, Any]:
    ensure_dirs()
    day = date or today_iso()
    session = Session(settings=settings, profile=profile, data_dir=data_dir)
    settings = session.settings

    # 1. Fetch: parallel across enabled sources
    jobs_found = 0
    if fetch:
        registry = registry if registry is not None else build_registry(get_env)
        jobs = fetch_all(settings.enabled_job_sources, settings.job_search_params, registry=registry)
        jobs_found = len(jobs)
        if jobs:
            session.state.set_all_jobs(jobs)
        else:
            log.warning("No jobs returned; keeping %d stored job(s)", len(session.state.all_jobs))

    # 2. New skills or resume: rebuild today's slate around them
    if session.profile_changed and day in session.state.daily_assignments:
        log.info("Profile changed since last run; reassigning %s", day)
        session.engine.reassign_for_resume(day)

    # 3. Today's slate
    daily = session.engine.get_daily_jobs(day)

    # 4. Plan the day's tasks around busy time
    tasks = load_tasks(tasks_path or TASKS_PATH, day=day)
    busy = BusyCalendar.from_file(busy_path or BUSY_PATH).get_busy_slots(day)
    plan = DayPlanner(settings).plan(day, tasks, busy)

    session.save()
    shifted = settings.auto_shift_enabled and bool(busy)
    day_stats = session.engine.application_stats(day)
    log.info(
        "Run complete for %s: %d job(s) today, %d/%d done",
        day, len(daily), day_stats["today_completed"], day_stats["today_total"],
    )
    return {
        "date": day,
        "jobs_found": jobs_found,
        "jobs_total": len(session.state.all_jobs),
        "daily_jobs": [_job_summary(j) for j in daily],
        "stats": day_stats,
        "tasks": [t.to_dict() for t in plan.tasks],
        "unscheduled": sum(1 for t in plan.tasks if t.start_time is None) if shifted else 0,
        "has_conflicts": plan.has_conflicts,
    }


def mark_applied(job_id: str, *, date: str | None = None, **session_kwargs: Any) -> bool:
    session = Session(**session_kwargs)
    day = date or today_iso()
    if not session.engine.mark_applied(job_id, day):
        return False
    job = session.state.job_by_id(job_id)
    if job is not None:
        session.tracker.record_application(job)
    session.save()
    return True


def mark_skipped(
    job_id: str, *, date: str | None = None, reason: str | None = None, **session_kwargs: Any
) -> bool:
    session = Session(**session_kwargs)
    ok = session.engine.mark_skipped(job_id, date or today_iso(), reason)
    if ok:
        session.save()
    return ok


def refresh(*, date: str | None = None, **session_kwargs: Any) -> list[str]:
    session = Session(**session_kwargs)
    added = session.engine.refresh_for_day(date or today_iso())
    session.save()
    return added


def on_resume_changed(profile: UserProfile, *, date: str | None = None, **session_kwargs: Any) -> list[str]:
    """Store the new profile and rebuild the day's slate around it."""
    session = Session(profile=profile, **session_kwargs)
    assignment = session.engine.reassign_for_resume(date or today_iso())
    session.save()
    return list(assignment.job_ids)


def stats(*, date: str | None = None, **session_kwargs: Any) -> dict[str, int]:
    session = Session(**session_kwargs)
    result = session.engine.application_stats(date or today_iso())
    result["tracked_applied"] = session.tracker.applied_count()
    return result
