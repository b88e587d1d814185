"""
StatusStore — the single source of truth for what the web layer shows.

Written only by the polling actor, read by any number of request
threads. The lock is held for field assignment only, never across a
network call. Readers get an immutable SharedStatus snapshot.
"""

import threading
from dataclasses import replace

from .models import SharedStatus, is_blocked


class StatusStore:
    def __init__(self, initial=None):
        self._lock = threading.Lock()
        self._status = initial or SharedStatus()
        self._has_data = False

    def snapshot(self) -> SharedStatus:
        with self._lock:
            return self._status

    @property
    def has_data(self) -> bool:
        """True once at least one poll succeeded."""
        with self._lock:
            return self._has_data

    def update(self, **fields) -> SharedStatus:
        with self._lock:
            self._status = replace(self._status, **fields)
            return self._status

    def set_error(self, message) -> SharedStatus:
        return self.update(last_error=message)

    def apply_progress(self, progress, requirement) -> SharedStatus:
        """Wholesale replace from a fresh DailyProgress; clears last_error."""
        xp_today = progress.xp_today
        with self._lock:
            self._status = SharedStatus(
                blocked=is_blocked(xp_today, requirement),
                xp_today=xp_today,
                xp_goal=progress.xp_goal,
                lessons=tuple(progress.lessons_today),
                last_error=None,
            )
            self._has_data = True
            return self._status
