"""Daily job slates: assign, apply, skip, refill, refresh, reassign."""
from __future__ import annotations

import threading
import uuid
import weakref
from datetime import date as date_cls, datetime, timedelta

from daymark.log import get_logger
from daymark.memo import VersionedMemo
from daymark.models import (
    DailyJobAssignment,
    Job,
    JobApplication,
    JobState,
    UserProfile,
    today_iso,
    utc_now_iso,
)
from daymark.scorer import filter_and_rank, score_job

log = get_logger(__name__)

DEFAULT_JOBS_PER_DAY = 5
DISPLAY_COUNT = 5

# An entry disappears once no caller holds its lock.
_LOCKS: weakref.WeakValueDictionary[tuple, threading.RLock] = weakref.WeakValueDictionary()
_LOCKS_GUARD = threading.Lock()


def _named_lock(*key: str) -> threading.RLock:
    with _LOCKS_GUARD:
        lock = _LOCKS.get(key)
        if lock is None:
            lock = _LOCKS[key] = threading.RLock()
        return lock


def day_lock(user_id: str, date: str) -> threading.RLock:
    """Serializes every mutation of one user's slate for one date."""
    return _named_lock("day", user_id, date)


def _user_lock(user_id: str) -> threading.RLock:
    # Held only while picking candidates and committing them, so two dates
    # filling at once never claim the same job.
    return _named_lock("user", user_id)


class DailyAssignmentEngine:
    """Owns all mutation of a user's ``JobState``.

    Slates only grow: ``mark_applied``, ``mark_skipped`` and ``refill`` append
    to ``job_ids`` and never remove from it. ``reassign_for_resume`` and
    ``clear_day`` are the explicit exceptions.
    """

    def __init__(
        self,
        state: JobState,
        profile: UserProfile,
        jobs_per_day: int = DEFAULT_JOBS_PER_DAY,
        user_id: str = "default",
    ) -> None:
        self.state = state
        self.profile = profile
        self.jobs_per_day = jobs_per_day
        self.user_id = user_id
        self._display: VersionedMemo[list[Job]] = VersionedMemo()

    # ── selection helpers ──

    def _history_ids(self) -> set[str]:
        return {a.job_id for a in self.state.applications}

    def _assigned_elsewhere(self, date: str) -> set[str]:
        ids: set[str] = set()
        for d, assignment in self.state.daily_assignments.items():
            if d != date:
                ids.update(assignment.job_ids)
        return ids

    def _active(self, assignment: DailyJobAssignment) -> list[str]:
        return assignment.active_job_ids(self.state.seen_job_ids)

    def _pick(self, date: str, count: int, exclude: set[str] = frozenset()) -> list[str]:
        """Top *count* ranked job ids nobody has claimed yet."""
        if count <= 0:
            return []
        excluded = (
            self._history_ids()
            | self._assigned_elsewhere(date)
            | set(self.state.seen_job_ids)
            | set(exclude)
        )
        pool = [j for j in self.state.all_jobs if j.id not in excluded]
        ranked = filter_and_rank(pool, self.profile.skills, self.profile.has_resume)
        return [j.id for j in ranked[:count]]

    def _record(self, job_id: str, date: str, status: str, reason: str | None = None) -> None:
        self.state.applications.append(
            JobApplication(
                id=uuid.uuid4().hex,
                job_id=job_id,
                status=status,
                assigned_date=date,
                applied_at=utc_now_iso() if status == "applied" else None,
                skip_reason=reason,
            )
        )

    def _get_or_create(self, date: str) -> DailyJobAssignment:
        assignment = self.state.daily_assignments.get(date)
        if assignment is None:
            with _user_lock(self.user_id):
                assignment = self.state.daily_assignments[date] = DailyJobAssignment(date=date)
        return assignment

    # ── operations ──

    def assign_for_day(self, date: str, count: int | None = None) -> DailyJobAssignment:
        """Create the slate for *date*; an existing slate is returned untouched."""
        target = self.jobs_per_day if count is None else count
        with day_lock(self.user_id, date):
            existing = self.state.daily_assignments.get(date)
            if existing is not None:
                return existing
            with _user_lock(self.user_id):
                job_ids = self._pick(date, target)
                assignment = DailyJobAssignment(date=date, job_ids=job_ids)
                self.state.daily_assignments[date] = assignment
        log.info("Assigned %d job(s) for %s", len(job_ids), date)
        return assignment

    def get_daily_jobs(self, date: str | None = None) -> list[Job]:
        """Active jobs for *date*, scored against the current skills."""
        date = date or today_iso()
        assignment = self.state.daily_assignments.get(date)
        if assignment is None:
            if not self.state.all_jobs:
                return []
            assignment = self.assign_for_day(date)

        active = tuple(self._active(assignment))
        skills = self.profile.skills
        has_resume = self.profile.has_resume
        key = (
            date, active, skills.fingerprint(), has_resume,
            self.state.last_fetched_at, len(self.state.all_jobs),
        )

        def compute() -> list[Job]:
            by_id = {j.id: j for j in self.state.all_jobs}
            jobs = [by_id[jid] for jid in active if jid in by_id]
            scored = [score_job(j, skills, has_resume).job for j in jobs]
            if has_resume:
                scored.sort(key=lambda j: -(j.match_score or 0))
            return scored[:DISPLAY_COUNT]

        return self._display.get(key, compute)

    def mark_applied(self, job_id: str, date: str | None = None) -> bool:
        date = date or today_iso()
        if self.state.job_by_id(job_id) is None:
            log.debug("mark_applied: unknown job %s", job_id)
            return False
        with day_lock(self.user_id, date):
            assignment = self._get_or_create(date)
            if job_id in assignment.completed_job_ids:
                return False
            self._record(job_id, date, "applied")
            if job_id not in assignment.job_ids:
                assignment.job_ids.append(job_id)
            if job_id in assignment.skipped_job_ids:
                assignment.skipped_job_ids.remove(job_id)
            assignment.completed_job_ids.append(job_id)
        log.info("Applied: %s (%s)", job_id, date)
        return True

    def mark_skipped(self, job_id: str, date: str | None = None, reason: str | None = None) -> bool:
        """Skip *job_id* and top the slate back up. Completed jobs stay completed."""
        date = date or today_iso()
        if self.state.job_by_id(job_id) is None:
            log.debug("mark_skipped: unknown job %s", job_id)
            return False
        with day_lock(self.user_id, date):
            assignment = self._get_or_create(date)
            if job_id in assignment.completed_job_ids or job_id in assignment.skipped_job_ids:
                return False
            self._record(job_id, date, "skipped", reason)
            if job_id not in assignment.job_ids:
                assignment.job_ids.append(job_id)
            assignment.skipped_job_ids.append(job_id)
            added = self._refill_locked(date)
        log.info("Skipped: %s (%s); refilled %d", job_id, date, len(added))
        return True

    def refill(self, date: str | None = None) -> list[str]:
        date = date or today_iso()
        with day_lock(self.user_id, date):
            return self._refill_locked(date)

    def _refill_locked(self, date: str) -> list[str]:
        assignment = self.state.daily_assignments.get(date)
        if assignment is None:
            return []
        needed = self.jobs_per_day - len(self._active(assignment))
        if needed <= 0:
            return []
        with _user_lock(self.user_id):
            added = self._pick(date, needed, exclude=set(assignment.job_ids))
            assignment.job_ids.extend(added)
        if len(added) < needed:
            log.debug("Refill for %s short by %d: pool exhausted", date, needed - len(added))
        return added

    def refresh_for_day(self, date: str | None = None) -> list[str]:
        """Retire the current active jobs as seen and deal a fresh slate."""
        date = date or today_iso()
        with day_lock(self.user_id, date):
            assignment = self._get_or_create(date)
            retired = self._active(assignment)
            seen = self.state.seen_job_ids
            seen.extend(jid for jid in retired if jid not in seen)
            needed = max(0, self.jobs_per_day - len(assignment.completed_job_ids))
            with _user_lock(self.user_id):
                added = self._pick(date, needed, exclude=set(assignment.job_ids))
                assignment.job_ids.extend(added)
        log.info("Refreshed %s: %d retired, %d new", date, len(retired), len(added))
        return added

    def reassign_for_resume(self, date: str | None = None) -> DailyJobAssignment:
        """Rebuild *date* around new skills; completed work is kept."""
        date = date or today_iso()
        with day_lock(self.user_id, date):
            old = self.state.daily_assignments.get(date)
            completed = list(old.completed_job_ids) if old else []
            needed = max(0, self.jobs_per_day - len(completed))
            with _user_lock(self.user_id):
                fresh = self._pick(date, needed, exclude=set(completed))
                assignment = DailyJobAssignment(
                    date=date,
                    job_ids=completed + fresh,
                    completed_job_ids=completed,
                )
                self.state.daily_assignments[date] = assignment
        self._display.invalidate()
        log.info("Reassigned %s for new resume: %d kept, %d new", date, len(completed), len(fresh))
        return assignment

    def clear_day(self, date: str) -> bool:
        with day_lock(self.user_id, date), _user_lock(self.user_id):
            removed = self.state.daily_assignments.pop(date, None) is not None
        if removed:
            self._display.invalidate()
        return removed

    def is_job_completed(self, job_id: str, date: str | None = None) -> bool:
        assignment = self.state.daily_assignments.get(date or today_iso())
        return assignment is not None and job_id in assignment.completed_job_ids

    def is_job_skipped(self, job_id: str, date: str | None = None) -> bool:
        assignment = self.state.daily_assignments.get(date or today_iso())
        return assignment is not None and job_id in assignment.skipped_job_ids

    def application_stats(self, today: str | None = None) -> dict[str, int]:
        today = today or today_iso()
        week_start = date_cls.fromisoformat(today) - timedelta(days=7)
        applied = [a for a in self.state.applications if a.status == "applied"]
        this_week = 0
        for a in applied:
            if not a.applied_at:
                continue
            if datetime.fromisoformat(a.applied_at).date() >= week_start:
                this_week += 1
        assignment = self.state.daily_assignments.get(today)
        return {
            "total_applied": len(applied),
            "this_week": this_week,
            "today_completed": len(assignment.completed_job_ids) if assignment else 0,
            "today_total": self.jobs_per_day,
        }
