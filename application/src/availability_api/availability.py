"""Weekly availability model: days, time slots, default schedule and stored form."""

from __future__ import annotations

import json
from dataclasses import dataclass, replace
from typing import Any

DAYS_OF_WEEK = ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday"]
WEEKEND = ("Saturday", "Sunday")

# Bump when the stored layout changes; add a migration in _migrate().
SCHEMA_VERSION = 1


class ScheduleFormatError(ValueError):
    """Data does not describe a well-formed weekly schedule."""


@dataclass(frozen=True)
class TimeSlot:
    """One contiguous availability window, e.g. 9:00 AM to 12:00 PM."""
    start: str = ""
    end: str = ""

    def to_dict(self) -> dict[str, str]:
        return {"start": self.start, "end": self.end}


@dataclass(frozen=True)
class DayAvailability:
    """Whether a day is enabled and its slots (empty iff disabled)."""
    enabled: bool
    time_slots: tuple[TimeSlot, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "time_slots", tuple(self.time_slots))
        if not isinstance(self.enabled, bool):
            raise ScheduleFormatError("enabled must be a boolean")
        if not self.enabled and self.time_slots:
            raise ScheduleFormatError("a disabled day cannot have time slots")
        if self.enabled and not self.time_slots:
            raise ScheduleFormatError("an enabled day needs at least one time slot")

    def to_dict(self) -> dict[str, Any]:
        return {"enabled": self.enabled, "timeSlots": [s.to_dict() for s in self.time_slots]}


@dataclass(frozen=True)
class WeeklySchedule:
    """Full seven-day availability record for one user."""
    days: dict[str, DayAvailability]

    def __post_init__(self) -> None:
        if sorted(self.days) != sorted(DAYS_OF_WEEK):
            raise ScheduleFormatError(f"schedule must have exactly the days {', '.join(DAYS_OF_WEEK)}")

    def __getitem__(self, day: str) -> DayAvailability:
        return self.days[day]

    def to_dict(self) -> dict[str, Any]:
        """Day -> {enabled, timeSlots}, the shape the editing form works with."""
        return {day: self.days[day].to_dict() for day in DAYS_OF_WEEK}

    @classmethod
    def from_dict(cls, data: Any) -> WeeklySchedule:
        """Build from the day mapping produced by to_dict(). Raises ScheduleFormatError."""
        if not isinstance(data, dict):
            raise ScheduleFormatError("schedule must be an object keyed by day")
        days: dict[str, DayAvailability] = {}
        for day, value in data.items():
            if day not in DAYS_OF_WEEK:
                raise ScheduleFormatError(f"unknown day {day!r}")
            if not isinstance(value, dict):
                raise ScheduleFormatError(f"{day} must be an object")
            slots = value.get("timeSlots")
            if not isinstance(slots, list):
                raise ScheduleFormatError(f"{day}.timeSlots must be a list")
            days[day] = DayAvailability(
                enabled=value.get("enabled"),
                time_slots=tuple(_slot_from_dict(s, day) for s in slots),
            )
        return cls(days=days)


def _slot_from_dict(data: Any, day: str) -> TimeSlot:
    if not isinstance(data, dict):
        raise ScheduleFormatError(f"{day} has a time slot that is not an object")
    start = data.get("start", "")
    end = data.get("end", "")
    if not isinstance(start, str) or not isinstance(end, str):
        raise ScheduleFormatError(f"{day} time slot start/end must be strings")
    return TimeSlot(start=start, end=end)


def default_schedule() -> WeeklySchedule:
    """Weekdays enabled with one blank slot, weekends disabled."""
    return WeeklySchedule(days={
        day: DayAvailability(enabled=False) if day in WEEKEND else DayAvailability(enabled=True, time_slots=(TimeSlot(),))
        for day in DAYS_OF_WEEK
    })


# --- Stored form ---

def serialize(schedule: WeeklySchedule) -> str:
    """JSON text stored in the key-value store, tagged with SCHEMA_VERSION."""
    return json.dumps({"version": SCHEMA_VERSION, "schedule": schedule.to_dict()}, separators=(",", ":"))


def deserialize(text: str) -> WeeklySchedule:
    """
    Parse stored JSON text into a WeeklySchedule.

    Accepts the current versioned form and migrates the two legacy shapes
    (unversioned day mapping, day array). Anything else raises ScheduleFormatError.
    """
    try:
        data = json.loads(text)
    except (TypeError, RecursionError, json.JSONDecodeError) as e:
        raise ScheduleFormatError(f"stored value is not JSON: {e}") from e
    return WeeklySchedule.from_dict(_migrate(data))


def _migrate(data: Any) -> dict[str, Any]:
    """Return the canonical day mapping for any supported stored layout."""
    if isinstance(data, list):
        return _from_day_array(data)
    if not isinstance(data, dict):
        raise ScheduleFormatError("stored value must be an object or a day array")
    if "version" not in data:
        # Unversioned day mapping, written before the version tag existed
        return data
    version = data["version"]
    if type(version) is not int or version != SCHEMA_VERSION:
        raise ScheduleFormatError(f"unsupported schedule version {version!r}")
    return data.get("schedule")


def _from_day_array(entries: list[Any]) -> dict[str, Any]:
    """Legacy [{"day": "Monday", "slots": [...]}] layout; a day is enabled iff it has slots."""
    out: dict[str, Any] = {day: {"enabled": False, "timeSlots": []} for day in DAYS_OF_WEEK}
    for entry in entries:
        if not isinstance(entry, dict) or entry.get("day") not in DAYS_OF_WEEK:
            raise ScheduleFormatError("day array entries need a known 'day'")
        slots = entry.get("slots") or []
        if not isinstance(slots, list):
            raise ScheduleFormatError(f"{entry['day']}.slots must be a list")
        out[entry["day"]] = {"enabled": bool(slots), "timeSlots": slots}
    return out


# --- Form editing ---

def set_day_enabled(schedule: WeeklySchedule, day: str, enabled: bool) -> WeeklySchedule:
    """Toggle a day. Disabling clears its slots; enabling resets to one blank slot."""
    current = schedule[day]
    if current.enabled == enabled:
        return schedule
    new_day = DayAvailability(enabled=True, time_slots=(TimeSlot(),)) if enabled else DayAvailability(enabled=False)
    return replace(schedule, days={**schedule.days, day: new_day})


def add_slot(schedule: WeeklySchedule, day: str) -> WeeklySchedule:
    """Append a blank slot to an enabled day."""
    current = schedule[day]
    if not current.enabled:
        raise ScheduleFormatError(f"{day} is disabled")
    new_day = replace(current, time_slots=current.time_slots + (TimeSlot(),))
    return replace(schedule, days={**schedule.days, day: new_day})


def remove_slot(schedule: WeeklySchedule, day: str, index: int) -> WeeklySchedule:
    """Remove slot at index; the last remaining slot of a day is kept."""
    current = schedule[day]
    if not 0 <= index < len(current.time_slots):
        raise IndexError(f"{day} has no time slot {index}")
    if len(current.time_slots) <= 1:
        return schedule
    slots = current.time_slots[:index] + current.time_slots[index + 1:]
    return replace(schedule, days={**schedule.days, day: replace(current, time_slots=slots)})
