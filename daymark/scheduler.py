"""Shift a day's tasks around busy calendar time."""
from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import date as date_cls, datetime, time, timedelta, tzinfo

from daymark.config import Settings
from daymark.log import get_logger
from daymark.memo import VersionedMemo
from daymark.models import BusySlot, Task, TimeSlot

log = get_logger(__name__)

MIN_GAP_MINUTES = 15


@dataclass
class ShiftConfig:
    working_hours_start: str
    working_hours_end: str
    buffer_minutes: int
    date: str  # YYYY-MM-DD
    tz: tzinfo | None = None  # None means the system local zone


@dataclass
class _Gap:
    start: datetime
    end: datetime

    @property
    def minutes(self) -> int:
        return int((self.end - self.start).total_seconds() // 60)


def _localize(dt: datetime, tz: tzinfo | None) -> datetime:
    if dt.tzinfo is not None:
        return dt
    return dt.replace(tzinfo=tz) if tz is not None else dt.astimezone()


def parse_instant(value: str, tz: tzinfo | None = None) -> datetime:
    """Aware datetime from an ISO string; naive values are read in *tz*."""
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    return _localize(datetime.fromisoformat(text), tz)


def _clock(day: str, hhmm: str, tz: tzinfo | None) -> datetime:
    hours, minutes = (int(p) for p in hhmm.split(":", 1))
    return _localize(datetime.combine(date_cls.fromisoformat(day), time(hours, minutes)), tz)


def _expand(busy_slots: list[BusySlot], buffer_minutes: int, tz: tzinfo | None) -> list[tuple[datetime, datetime]]:
    pad = timedelta(minutes=buffer_minutes)
    expanded = []
    for s in busy_slots:
        start, end = parse_instant(s.start, tz), parse_instant(s.end, tz)
        if end <= start:
            log.debug("Ignoring empty or inverted busy slot %s -> %s", s.start, s.end)
            continue
        expanded.append((start - pad, end + pad))
    return expanded


def _free_gaps(day_start: datetime, day_end: datetime, busy: list[tuple[datetime, datetime]]) -> list[_Gap]:
    """Complement of *busy* within the working window, dropping short gaps."""
    gaps: list[_Gap] = []
    overlapping = sorted(
        (b for b in busy if b[1] > day_start and b[0] < day_end),
        key=lambda b: b[0],
    )
    cursor = day_start
    for busy_start, busy_end in overlapping:
        busy_start = max(busy_start, day_start)
        busy_end = min(busy_end, day_end)
        if cursor < busy_start:
            gap = _Gap(cursor, busy_start)
            if gap.minutes >= MIN_GAP_MINUTES:
                gaps.append(gap)
        cursor = max(cursor, busy_end)
    if cursor < day_end:
        gap = _Gap(cursor, day_end)
        if gap.minutes >= MIN_GAP_MINUTES:
            gaps.append(gap)
    return gaps


def _window_gaps(
    day: str, busy_slots: list[BusySlot], start: str, end: str, buffer_minutes: int, tz: tzinfo | None,
) -> list[_Gap]:
    return _free_gaps(_clock(day, start, tz), _clock(day, end, tz), _expand(busy_slots, buffer_minutes, tz))


def get_available_time_slots(
    day: str,
    busy_slots: list[BusySlot],
    working_hours_start: str,
    working_hours_end: str,
    buffer_minutes: int,
    tz: tzinfo | None = None,
) -> list[TimeSlot]:
    gaps = _window_gaps(day, busy_slots, working_hours_start, working_hours_end, buffer_minutes, tz)
    return [TimeSlot(g.start.isoformat(), g.end.isoformat(), g.minutes) for g in gaps]


def _placement_order(tasks: list[Task]) -> list[Task]:
    # Explicit start times first, then longest first; sorted() keeps ties stable.
    return sorted(tasks, key=lambda t: (t.start_time is None, -t.duration))


def shift_tasks_around_busy_times(
    tasks: list[Task], busy_slots: list[BusySlot], config: ShiftConfig
) -> list[Task]:
    """First-fit placement of *tasks* into the day's free gaps.

    Returns new Task objects in placement order; inputs are not mutated.
    A task that fits nowhere, or has a negative duration, comes back with
    no start/end time and ``was_auto_shifted`` False. Busy slots that end
    before they start are ignored. ``preferred_time_slot`` is not consulted.
    """
    gaps = _window_gaps(
        config.date, busy_slots, config.working_hours_start,
        config.working_hours_end, config.buffer_minutes, config.tz,
    )
    placed: list[Task] = []
    for task in _placement_order(tasks):
        idx = None
        if task.duration >= 0:
            idx = next((i for i, g in enumerate(gaps) if g.minutes >= task.duration), None)
        if idx is None:
            placed.append(replace(task, start_time=None, end_time=None, was_auto_shifted=False))
            continue

        gap = gaps[idx]
        new_start = gap.start
        new_end = new_start + timedelta(minutes=task.duration)
        original = task.start_time
        moved = original is None or parse_instant(original, config.tz) != new_start
        placed.append(replace(
            task,
            start_time=new_start.isoformat(),
            end_time=new_end.isoformat(),
            was_auto_shifted=moved,
            original_start_time=original,
        ))

        gap.start = new_end
        if gap.minutes < MIN_GAP_MINUTES:
            del gaps[idx]

    unscheduled = sum(1 for t in placed if t.start_time is None)
    if unscheduled:
        log.info("%s: %d of %d task(s) did not fit", config.date, unscheduled, len(placed))
    return placed


def shift_day(tasks: list[Task], busy_slots: list[BusySlot], settings: Settings, day: str) -> list[Task]:
    """Apply the user's auto-shift settings; tasks pass through when it is off."""
    if not settings.auto_shift_enabled or not busy_slots:
        return tasks
    config = ShiftConfig(
        working_hours_start=settings.working_hours_start,
        working_hours_end=settings.working_hours_end,
        buffer_minutes=settings.shift_buffer,
        date=day,
        tz=settings.tz,
    )
    return shift_tasks_around_busy_times(tasks, busy_slots, config)


@dataclass
class DayPlan:
    date: str
    tasks: list[Task]
    available_slots: list[TimeSlot]
    busy_slots: list[BusySlot] = field(default_factory=list)
    auto_shift_enabled: bool = True

    @property
    def has_conflicts(self) -> bool:
        return any(t.was_auto_shifted for t in self.tasks)


class DayPlanner:
    """Recomputes a day's plan only when tasks, busy time or settings change."""

    def __init__(self, settings: Settings) -> None:
        self.settings = settings
        self._memo: VersionedMemo[DayPlan] = VersionedMemo()

    def _key(self, day: str, tasks: list[Task], busy_slots: list[BusySlot]) -> tuple:
        s = self.settings
        return (
            day,
            tuple(tuple(t.to_dict().items()) for t in tasks),
            tuple(busy_slots),
            (s.auto_shift_enabled, s.working_hours_start, s.working_hours_end, s.shift_buffer, s.timezone),
        )

    def plan(self, day: str, tasks: list[Task], busy_slots: list[BusySlot]) -> DayPlan:
        def compute() -> DayPlan:
            s = self.settings
            return DayPlan(
                date=day,
                tasks=shift_day(tasks, busy_slots, s, day),
                available_slots=get_available_time_slots(
                    day, busy_slots, s.working_hours_start, s.working_hours_end, s.shift_buffer, s.tz,
                ),
                busy_slots=list(busy_slots),
                auto_shift_enabled=s.auto_shift_enabled,
            )

        return self._memo.get(self._key(day, tasks, busy_slots), compute)
