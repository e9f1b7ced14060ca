"""Court booking overlap checks.

All times are naive club-local wall-clock times on a single calendar date;
nothing here converts time zones. Intervals are half-open ``[start, end)``,
so a booking that starts exactly when another ends is not a conflict.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterable, Protocol

MINUTES_PER_DAY = 24 * 60

# HH:MM with an optional :SS suffix (Postgres `time` columns come back as 09:00:00)
_TIME_RE = re.compile(r"^(\d{1,2}):(\d{2})(?::(\d{2}))?$")


class InvalidTimeError(ValueError):
    pass


class BookedSlot(Protocol):
    start_time: str
    end_time: str


def time_to_minutes(value: str) -> int:
    """Minutes since midnight for an ``HH:MM`` string. ``24:00`` is accepted as end of day."""
    m = _TIME_RE.match((value or "").strip()) if isinstance(value, str) else None
    if not m:
        raise InvalidTimeError(f"invalid time {value!r}, expected HH:MM")
    hour, minute = int(m.group(1)), int(m.group(2))
    if hour == 24 and minute == 0 and not int(m.group(3) or 0):
        return MINUTES_PER_DAY
    if hour > 23 or minute > 59:
        raise InvalidTimeError(f"invalid time {value!r}, out of range")
    return hour * 60 + minute


def minutes_to_time(minutes: int) -> str:
    if minutes < 0 or minutes > MINUTES_PER_DAY:
        raise InvalidTimeError(f"{minutes} minutes is outside a single day")
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def overlaps(a_start: int, a_end: int, b_start: int, b_end: int) -> bool:
    return a_start < b_end and a_end > b_start


@dataclass(frozen=True)
class Reservation:
    court_number: int
    booking_date: str
    start_time: str
    duration_minutes: int

    def __post_init__(self):
        if self.duration_minutes <= 0:
            raise ValueError("duration must be a positive number of minutes")

    @property
    def start_minutes(self) -> int:
        return time_to_minutes(self.start_time)

    @property
    def end_minutes(self) -> int:
        return self.start_minutes + self.duration_minutes

    @property
    def end_time(self) -> str:
        end = self.end_minutes
        if end > MINUTES_PER_DAY:
            raise ValueError("bookings cannot run past midnight")
        return minutes_to_time(end)


def _slot_minutes(booking: BookedSlot) -> tuple[int, int]:
    start = time_to_minutes(booking.start_time)
    end = time_to_minutes(booking.end_time)
    if end <= start:
        raise InvalidTimeError(f"booking ends ({booking.end_time}) before it starts ({booking.start_time})")
    return start, end


def find_conflict(proposed: Reservation, existing: Iterable[BookedSlot]) -> BookedSlot | None:
    """Return the first existing booking that overlaps ``proposed``.

    ``existing`` must already be narrowed to the same club, court, date and
    active statuses. A malformed row raises instead of being skipped.
    """
    new_start = proposed.start_minutes
    new_end = new_start + proposed.duration_minutes
    for booking in existing:
        exist_start, exist_end = _slot_minutes(booking)
        if overlaps(new_start, new_end, exist_start, exist_end):
            return booking
    return None


def has_conflict(proposed: Reservation, existing: Iterable[BookedSlot]) -> bool:
    return find_conflict(proposed, existing) is not None
