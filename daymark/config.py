"""Load settings, profile and env configuration."""
from __future__ import annotations

import os
import re
from dataclasses import dataclass, field
from datetime import date, datetime, tzinfo
from pathlib import Path
from typing import Any
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import yaml
from dotenv import load_dotenv

from daymark.log import get_logger
from daymark.models import JobSearchParams, JobSource, Task, UserProfile
from daymark.skills import canonical_key, normalize_skill

log = get_logger(__name__)

load_dotenv()

ROOT_DIR: Path = Path(__file__).resolve().parent.parent
CONFIG_DIR: Path = ROOT_DIR / "config"
SETTINGS_PATH: Path = CONFIG_DIR / "settings.yaml"
PROFILE_PATH: Path = CONFIG_DIR / "profile.yaml"
DATA_DIR: Path = Path(os.environ.get("DAYMARK_DATA_DIR", ROOT_DIR / "data"))
LOGS_DIR: Path = Path(os.environ.get("DAYMARK_LOG_DIR", ROOT_DIR / "logs"))

_HHMM = re.compile(r"^([01]?\d|2[0-3]):([0-5]\d)$")


class ConfigError(ValueError):
    """Raised when settings.yaml holds a value we cannot use."""


@dataclass
class Settings:
    jobs_per_day: int = 5
    working_hours_start: str = "09:00"
    working_hours_end: str = "17:00"
    auto_shift_enabled: bool = True
    shift_buffer: int = 15  # minutes
    enabled_job_sources: list[str] = field(
        default_factory=lambda: [JobSource.SIMPLIFY_JOBS.value]
    )
    job_search_params: JobSearchParams = field(default_factory=JobSearchParams)
    timezone: str | None = None  # IANA name; None means the system local zone

    @property
    def tz(self) -> tzinfo | None:
        return ZoneInfo(self.timezone) if self.timezone else None


def get_env(key: str, default: str = "") -> str:
    return os.environ.get(key, default).strip()


def ensure_dirs() -> None:
    for d in (DATA_DIR, LOGS_DIR):
        d.mkdir(parents=True, exist_ok=True)


def _read_yaml(path: Path) -> Any:
    if not path.exists():
        log.debug("No config file at %s; using defaults", path)
        return None
    with open(path, "r", encoding="utf-8") as f:
        return yaml.safe_load(f)


def parse_hhmm(value: Any, name: str) -> str:
    """Validate a working-hours value and return it as zero-padded HH:MM."""
    # YAML 1.1 reads unquoted 17:00 as the base-60 integer 1020.
    if isinstance(value, int) and not isinstance(value, bool):
        value = "%d:%02d" % divmod(value, 60)
    m = _HHMM.match(str(value).strip())
    if not m:
        raise ConfigError(f"{name} must be HH:MM, got {value!r}")
    return f"{int(m.group(1)):02d}:{m.group(2)}"


def settings_from_dict(data: dict[str, Any] | None) -> Settings:
    data = data or {}
    defaults = Settings()
    hours = data.get("working_hours") or {}

    tz_name = data.get("timezone") or None
    if tz_name:
        try:
            ZoneInfo(tz_name)
        except (ZoneInfoNotFoundError, ValueError) as exc:
            raise ConfigError(f"Unknown timezone {tz_name!r}") from exc

    try:
        jobs_per_day = int(data.get("jobs_per_day", defaults.jobs_per_day))
        shift_buffer = int(data.get("shift_buffer", defaults.shift_buffer))
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"Invalid number in settings: {exc}") from exc
    if jobs_per_day < 0 or shift_buffer < 0:
        raise ConfigError("jobs_per_day and shift_buffer must not be negative")

    return Settings(
        jobs_per_day=jobs_per_day,
        working_hours_start=parse_hhmm(
            hours.get("start", defaults.working_hours_start), "working_hours.start"
        ),
        working_hours_end=parse_hhmm(
            hours.get("end", defaults.working_hours_end), "working_hours.end"
        ),
        auto_shift_enabled=bool(data.get("auto_shift_enabled", defaults.auto_shift_enabled)),
        shift_buffer=shift_buffer,
        enabled_job_sources=list(data.get("enabled_job_sources") or defaults.enabled_job_sources),
        job_search_params=JobSearchParams.from_dict(data.get("job_search_params")),
        timezone=tz_name,
    )


def load_settings(path: Path | None = None) -> Settings:
    return settings_from_dict(_read_yaml(path or SETTINGS_PATH))


def _canonical_skills(values: list[str]) -> list[str]:
    seen: dict[str, str] = {}
    for value in values:
        skill = normalize_skill(str(value).strip())
        if skill:
            seen.setdefault(canonical_key(skill), skill)
    return list(seen.values())


def load_profile(path: Path | None = None) -> UserProfile:
    """Profile from YAML with every skill in canonical form (e.g. fullstack -> Full Stack)."""
    profile = UserProfile.from_dict(_read_yaml(path or PROFILE_PATH))
    skills = profile.skills
    for category in (*skills.RESUME_CATEGORIES, "role_types"):
        setattr(skills, category, _canonical_skills(getattr(skills, category)))
    return profile


def load_tasks(path: Path, day: str | None = None) -> list[Task]:
    """Tasks from a YAML list, optionally only those on *day*."""
    raw = _read_yaml(path) or []
    tasks = []
    for item in raw:
        # YAML turns unquoted dates and timestamps into objects.
        item = {k: v.isoformat() if isinstance(v, (date, datetime)) else v for k, v in item.items()}
        tasks.append(Task.from_dict(item))
    if day is not None:
        tasks = [t for t in tasks if t.date == day]
    return tasks
