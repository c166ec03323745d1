"""Per-date busy time, built from calendar events or a YAML file."""
from __future__ import annotations

import threading
from datetime import datetime
from pathlib import Path
from typing import Any, Iterable

import yaml

from daymark.log import get_logger
from daymark.models import BusySlot

log = get_logger(__name__)


def _instant(value: Any) -> str | None:
    """Event time as an ISO string; None for all-day entries."""
    if isinstance(value, str):
        return value
    if isinstance(value, datetime):  # unquoted YAML timestamps
        return value.isoformat()
    if isinstance(value, dict):
        return _instant(value.get("dateTime"))
    return None


def busy_slots_from_events(events: Iterable[dict[str, Any]]) -> list[BusySlot]:
    """Turn calendar event or free/busy payloads into busy slots.

    Cancelled and transparent ("show as free") events are ignored, as are
    all-day events, which carry a ``date`` rather than a ``dateTime``.
    """
    slots: list[BusySlot] = []
    for event in events:
        if event.get("status") == "cancelled" or event.get("transparency") == "transparent":
            continue
        start, end = _instant(event.get("start")), _instant(event.get("end"))
        if not start or not end:
            continue
        slots.append(BusySlot(start=start, end=end))
    return slots


class BusyCalendar:
    """Busy slots keyed by date (YYYY-MM-DD)."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._slots: dict[str, list[BusySlot]] = {}

    def set_busy_slots(self, date: str, slots: Iterable[BusySlot]) -> None:
        with self._lock:
            self._slots[date] = list(slots)

    def get_busy_slots(self, date: str) -> list[BusySlot]:
        with self._lock:
            return list(self._slots.get(date, []))

    def dates(self) -> list[str]:
        with self._lock:
            return sorted(self._slots)

    @classmethod
    def from_file(cls, path: Path) -> BusyCalendar:
        """Load ``{date: [{start, end}, ...]}`` from YAML."""
        calendar = cls()
        if not path.exists():
            return calendar
        with open(path, "r", encoding="utf-8") as f:
            raw = yaml.safe_load(f) or {}
        for date, events in raw.items():
            calendar.set_busy_slots(str(date), busy_slots_from_events(events or []))
        log.debug("Loaded busy time for %d date(s) from %s", len(raw), path.name)
        return calendar
