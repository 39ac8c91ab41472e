"""Time-slot validation: 12-hour time format, start before end, no overlaps within a day."""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Iterable

from .availability import DAYS_OF_WEEK, TimeSlot, WeeklySchedule
from .errors import ValidationError

# H:MM AM/PM, hour 1-12 (leading zero optional), optional single space before meridiem
TIME_PATTERN = re.compile(r"(0?[1-9]|1[0-2]):([0-5][0-9]) ?([AaPp][Mm])")
# Times are parsed against a fixed date so only time of day is compared.
REFERENCE_DATE = "2000/01/01"

INVALID_FORMAT = "Invalid time format (HH:MM AM/PM)"
END_NOT_AFTER_START = "End time must be after start time"
OVERLAP = "Overlaps with another time slot"


@dataclass
class SlotError:
    """Inline guidance for one field of one slot (index is in the caller's order)."""
    index: int
    field: str  # "start" or "end"
    message: str

    def to_dict(self) -> dict[str, Any]:
        return {"index": self.index, "field": self.field, "message": self.message}


def validate_time_format(time: Any) -> bool:
    """True iff time is a full 12-hour clock string like '9:00 AM' or '12:30pm'."""
    return isinstance(time, str) and TIME_PATTERN.fullmatch(time) is not None


def _parse(time: str) -> datetime:
    hour, minute, meridiem = TIME_PATTERN.fullmatch(time).groups()
    return datetime.strptime(f"{REFERENCE_DATE} {hour}:{minute} {meridiem.upper()}", "%Y/%m/%d %I:%M %p")


def _endpoints(slot: Any) -> tuple[Any, Any]:
    """(start, end) of a TimeSlot or a {"start", "end"} dict; (None, None) for anything else."""
    if isinstance(slot, TimeSlot):
        return slot.start, slot.end
    if isinstance(slot, dict):
        return slot.get("start"), slot.get("end")
    return None, None


def validate_time_slots(slots: Iterable[Any] | None) -> bool:
    """
    True if a day's slots can be stored.

    Empty or missing slots are valid (a disabled day). Otherwise every slot needs
    a valid start and end with start < end, and after sorting by start no slot
    may end after the next one starts. Back-to-back slots are fine. A slot that
    crosses midnight (11:00 PM to 1:00 AM) fails the start < end check.
    """
    if not slots:
        return True
    pairs = [_endpoints(s) for s in slots]
    if not all(validate_time_format(start) and validate_time_format(end) for start, end in pairs):
        return False

    ordered = sorted(((_parse(start), _parse(end)) for start, end in pairs), key=lambda p: p[0])
    for i, (start, end) in enumerate(ordered):
        if start >= end:
            return False
        if i < len(ordered) - 1 and end > ordered[i + 1][0]:
            return False
    return True


def slot_errors(slots: Iterable[Any] | None) -> list[SlotError]:
    """Per-slot messages for the form. Empty exactly when validate_time_slots() is True."""
    errors: list[SlotError] = []
    parsed: dict[int, tuple[datetime, datetime]] = {}
    for i, slot in enumerate(slots or []):
        start, end = _endpoints(slot)
        bad = [name for name, value in (("start", start), ("end", end)) if not validate_time_format(value)]
        if bad:
            errors.extend(SlotError(i, name, INVALID_FORMAT) for name in bad)
            continue
        start_dt, end_dt = _parse(start), _parse(end)
        if start_dt >= end_dt:
            errors.append(SlotError(i, "end", END_NOT_AFTER_START))
            continue
        parsed[i] = (start_dt, end_dt)

    order = sorted(parsed, key=lambda i: parsed[i][0])
    for prev, cur in zip(order, order[1:]):
        if parsed[prev][1] > parsed[cur][0]:
            errors.append(SlotError(cur, "start", OVERLAP))

    errors.sort(key=lambda e: e.index)
    return errors


def validate_schedule(schedule: WeeklySchedule) -> dict[str, list[SlotError]]:
    """Map each day that has problems to its slot errors. Disabled days are always valid."""
    out: dict[str, list[SlotError]] = {}
    for day in DAYS_OF_WEEK:
        availability = schedule[day]
        if not availability.enabled:
            continue
        errors = slot_errors(availability.time_slots)
        if errors:
            out[day] = errors
    return out


def ensure_valid(schedule: WeeklySchedule) -> None:
    """Raise ValidationError with per-day slot errors if the schedule cannot be saved."""
    problems = validate_schedule(schedule)
    if problems:
        raise ValidationError(errors={day: [e.to_dict() for e in errs] for day, errs in problems.items()})
