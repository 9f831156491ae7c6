"""Consecutive-day streaks and the free-tier session quota."""
import threading
from datetime import date, datetime, timedelta
from typing import Optional

from loguru import logger

from scripture_tutor.models import ProgressRecord, SessionQuota

PLAN_LENGTH = 30


def record_day_completed(progress: ProgressRecord, day_id: int, today: date) -> ProgressRecord:
    """Mark a reading day complete and update the streak for today's date.

    Repeating the event on the same calendar day leaves the streak unchanged.
    A date earlier than the last activity (clock moved back) changes neither
    the streak nor the last activity date.
    """
    progress.completed_day_ids.add(day_id)
    previous = progress.current_streak
    if progress.last_activity_date is None:
        progress.current_streak = 1
    else:
        delta = (today - progress.last_activity_date).days
        if delta == 1:
            progress.current_streak += 1
        elif delta > 1:
            progress.current_streak = 1
    progress.longest_streak = max(progress.longest_streak, progress.current_streak)
    if progress.last_activity_date is None or today > progress.last_activity_date:
        progress.last_activity_date = today
    if progress.current_streak != previous:
        logger.info("Streak {} -> {}", previous, progress.current_streak)
    return progress


def completion_percentage(progress: ProgressRecord, plan_length: int = PLAN_LENGTH) -> float:
    return len(progress.completed_day_ids) / plan_length * 100


def merge_progress(local: ProgressRecord, remote: ProgressRecord) -> ProgressRecord:
    """Combine two copies of the same user's progress without losing completed days."""
    dates = [d for d in (local.last_activity_date, remote.last_activity_date) if d is not None]
    return ProgressRecord(
        completed_day_ids=local.completed_day_ids | remote.completed_day_ids,
        current_streak=max(local.current_streak, remote.current_streak),
        longest_streak=max(local.longest_streak, remote.longest_streak),
        last_activity_date=max(dates) if dates else None,
    )


class SessionLimiter:
    """Rolling-window quota of free sessions.

    The refill check and the decrement happen under one lock, so concurrent
    try_start() calls never hand out more than the cap per window.
    """

    def __init__(self, quota: SessionQuota, cap: int, window: timedelta):
        self.quota = quota
        self.cap = cap
        self.window = window
        self._lock = threading.Lock()

    @classmethod
    def fresh(cls, cap: int, window: timedelta, now: datetime) -> "SessionLimiter":
        return cls(SessionQuota(remaining=cap, window_started_at=now), cap, window)

    def _refill_if_due(self, now: datetime) -> None:
        if now - self.quota.window_started_at >= self.window:
            self.quota.remaining = self.cap
            self.quota.window_started_at = now
            logger.debug("Session quota refilled to {}", self.cap)

    def refresh(self, now: datetime) -> int:
        with self._lock:
            self._refill_if_due(now)
            return self.quota.remaining

    def try_start(self, now: datetime) -> bool:
        """Consume one session. False means the quota is spent and nothing changed."""
        with self._lock:
            self._refill_if_due(now)
            if self.quota.remaining > 0:
                self.quota.remaining -= 1
                return True
            logger.info("Session limit reached; next refill at {}", self.quota.window_started_at + self.window)
            return False

    def time_until_refill(self, now: datetime) -> Optional[timedelta]:
        """Time left before sessions are available again, or None if some remain."""
        with self._lock:
            self._refill_if_due(now)
            if self.quota.remaining > 0:
                return None
            return self.quota.window_started_at + self.window - now


def format_time_remaining(interval: Optional[timedelta]) -> str:
    if interval is None or interval.total_seconds() <= 0:
        return ""
    total = int(interval.total_seconds())
    hours, minutes = total // 3600, (total % 3600) // 60
    if hours:
        return f"{hours}h {minutes}m"
    if minutes:
        return f"{minutes}m"
    return "< 1m"
