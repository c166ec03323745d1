"""Per-user JSON snapshot of job state and profile, with file locking."""
from __future__ import annotations

import fcntl
import json
import os
from contextlib import contextmanager
from pathlib import Path
from typing import IO, Iterator

from daymark.log import get_logger
from daymark.models import JobState, UserProfile

log = get_logger(__name__)


@contextmanager
def locked_open(path: Path, mode: str, exclusive: bool = True) -> Iterator[IO[str]]:
    """Open *path* holding an advisory fcntl lock for the duration."""
    with open(path, mode, encoding="utf-8") as f:
        fcntl.flock(f.fileno(), fcntl.LOCK_EX if exclusive else fcntl.LOCK_SH)
        try:
            yield f
        finally:
            fcntl.flock(f.fileno(), fcntl.LOCK_UN)


class StateStore:
    """Reads and writes ``<data_dir>/<user_id>.json``."""

    def __init__(self, data_dir: Path, user_id: str = "default") -> None:
        self.data_dir = Path(data_dir)
        self.user_id = user_id

    @property
    def path(self) -> Path:
        return self.data_dir / f"{self.user_id}.json"

    def load(self) -> tuple[JobState, UserProfile | None]:
        """Saved state and profile; fresh state and None when nothing is saved."""
        if not self.path.exists():
            return JobState(), None
        with locked_open(self.path, "r", exclusive=False) as f:
            data = json.load(f)
        profile = UserProfile.from_dict(data["profile"]) if data.get("profile") else None
        state = JobState.from_dict(data.get("state"))
        log.debug(
            "Loaded %s: %d jobs, %d day(s)", self.path.name,
            len(state.all_jobs), len(state.daily_assignments),
        )
        return state, profile

    def save(self, state: JobState, profile: UserProfile | None = None) -> None:
        self.data_dir.mkdir(parents=True, exist_ok=True)
        payload = {"state": state.to_dict(), "profile": profile.to_dict() if profile else None}
        tmp = self.path.with_suffix(".json.tmp")
        with locked_open(tmp, "w") as f:
            json.dump(payload, f, indent=2)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp, self.path)
        log.debug("Saved %s", self.path.name)
