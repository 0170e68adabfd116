"""
Core Module - Clock and Duty Windows.

============================================================
RESPONSIBILITY
============================================================
Provides a testable clock abstraction and the duty-shift
calendar used to scope a report run.

- All "now" lookups go through a clock
- Duty windows are computed in the operator's local timezone
- Two fixed shifts per day: day and night

============================================================
DUTY CALENDAR
============================================================
With the default hours (day 08:00, night 20:00):

previous duty: yesterday 20:00:00 -> today 07:59:59
current duty:  today 08:00:00     -> today 19:59:59

A run before local noon reports the previous (night) duty,
a run after noon reports the current (day) duty.

============================================================
"""

from abc import ABC, abstractmethod
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime, time, timedelta, timezone, tzinfo
from typing import Generator, Optional
import threading

from zoneinfo import ZoneInfo


DEFAULT_TIMEZONE = "Europe/Kyiv"


# ============================================================
# CLOCK PROTOCOL
# ============================================================

class ClockProtocol(ABC):
    """Abstract interface for system clock."""

    @abstractmethod
    def now(self) -> datetime:
        """Get current timezone-aware datetime."""
        pass


# ============================================================
# SYSTEM CLOCK (PRODUCTION)
# ============================================================

class SystemClock(ClockProtocol):
    """Production clock using actual system time in a fixed timezone."""

    def __init__(self, tz: Optional[tzinfo] = None):
        self._tz = tz or ZoneInfo(DEFAULT_TIMEZONE)

    def now(self) -> datetime:
        """Get current datetime in the clock's timezone."""
        return datetime.now(self._tz)


# ============================================================
# MOCK CLOCK (TESTING)
# ============================================================

class MockClock(ClockProtocol):
    """
    Mock clock for testing.

    Allows time manipulation for deterministic tests.
    """

    def __init__(self, initial_time: Optional[datetime] = None):
        """
        Initialize mock clock.

        Args:
            initial_time: Starting time (defaults to current UTC)
        """
        self._time = initial_time or datetime.now(timezone.utc)
        self._lock = threading.Lock()

    def now(self) -> datetime:
        """Get current (mocked) datetime."""
        with self._lock:
            return self._time

    def set_time(self, new_time: datetime) -> None:
        """Set the current time."""
        with self._lock:
            if new_time.tzinfo is None:
                new_time = new_time.replace(tzinfo=timezone.utc)
            self._time = new_time

    def advance(self, seconds: float = 0, **kwargs) -> None:
        """
        Advance time by the specified amount.

        Args:
            seconds: Number of seconds to advance
            **kwargs: Passed to timedelta (hours, minutes, days, etc.)
        """
        with self._lock:
            self._time = self._time + timedelta(seconds=seconds, **kwargs)

    @contextmanager
    def freeze(self, at_time: datetime) -> Generator[None, None, None]:
        """Temporarily pin the clock to ``at_time``."""
        with self._lock:
            original_time = self._time
            self._time = at_time
        try:
            yield
        finally:
            with self._lock:
                self._time = original_time


# ============================================================
# DUTY WINDOWS
# ============================================================

@dataclass(frozen=True)
class DutyWindow:
    """Closed interval [start, end] of one duty shift."""

    start: datetime
    end: datetime

    def contains(self, moment: datetime) -> bool:
        """Inclusive on both boundaries."""
        return self.start <= moment <= self.end

    def label(self, fmt: str = "%Y-%m-%d %H:%M:%S") -> str:
        return f"з {self.start.strftime(fmt)} по {self.end.strftime(fmt)}"


class DutySchedule:
    """
    Two fixed 12-hour shifts per day.

    The shift boundaries are local wall-clock hours; every
    window returned is timezone-aware in ``tz``.
    """

    def __init__(
        self,
        day_start_hour: int = 8,
        night_start_hour: int = 20,
        tz: Optional[tzinfo] = None,
    ):
        if not 0 <= day_start_hour < night_start_hour <= 23:
            raise ValueError(
                f"Invalid duty hours: day={day_start_hour}, night={night_start_hour}"
            )
        self._day_start = day_start_hour
        self._night_start = night_start_hour
        self._tz = tz or ZoneInfo(DEFAULT_TIMEZONE)

    @property
    def tz(self) -> tzinfo:
        return self._tz

    def _at(self, day, hour: int, second_before: bool = False) -> datetime:
        moment = datetime.combine(day, time(hour=hour), tzinfo=self._tz)
        if second_before:
            moment -= timedelta(seconds=1)
        return moment

    def previous_duty(self, now: datetime) -> DutyWindow:
        """Night shift that ended this morning."""
        today = now.astimezone(self._tz).date()
        yesterday = today - timedelta(days=1)
        return DutyWindow(
            start=self._at(yesterday, self._night_start),
            end=self._at(today, self._day_start, second_before=True),
        )

    def current_duty(self, now: datetime) -> DutyWindow:
        """Day shift of today."""
        today = now.astimezone(self._tz).date()
        return DutyWindow(
            start=self._at(today, self._day_start),
            end=self._at(today, self._night_start, second_before=True),
        )

    def report_window(self, now: datetime) -> DutyWindow:
        """Shift a run at ``now`` reports on."""
        if now.astimezone(self._tz).hour < 12:
            return self.previous_duty(now)
        return self.current_duty(now)

    def retrieval_window(self, now: datetime) -> DutyWindow:
        """Both shifts, so late-reported events are aggregated before filtering."""
        return DutyWindow(
            start=self.previous_duty(now).start,
            end=self.current_duty(now).end,
        )
