"""Unit tests for the schedule model: default, invariants, stored form, legacy migration, form edits."""

from __future__ import annotations

import json

import pytest

from src.availability_api.availability import (
    DAYS_OF_WEEK,
    SCHEMA_VERSION,
    DayAvailability,
    ScheduleFormatError,
    TimeSlot,
    WeeklySchedule,
    add_slot,
    default_schedule,
    deserialize,
    remove_slot,
    serialize,
    set_day_enabled,
)

DEFAULT_DICT = {
    "Monday": {"enabled": True, "timeSlots": [{"start": "", "end": ""}]},
    "Tuesday": {"enabled": True, "timeSlots": [{"start": "", "end": ""}]},
    "Wednesday": {"enabled": True, "timeSlots": [{"start": "", "end": ""}]},
    "Thursday": {"enabled": True, "timeSlots": [{"start": "", "end": ""}]},
    "Friday": {"enabled": True, "timeSlots": [{"start": "", "end": ""}]},
    "Saturday": {"enabled": False, "timeSlots": []},
    "Sunday": {"enabled": False, "timeSlots": []},
}


def _sample() -> WeeklySchedule:
    data = json.loads(json.dumps(DEFAULT_DICT))
    data["Monday"]["timeSlots"] = [{"start": "9:00 AM", "end": "12:00 PM"}, {"start": "1:00 PM", "end": "5:00 PM"}]
    data["Saturday"] = {"enabled": True, "timeSlots": [{"start": "10:00 AM", "end": "2:00 PM"}]}
    return WeeklySchedule.from_dict(data)


def test_default_schedule_shape():
    assert default_schedule().to_dict() == DEFAULT_DICT
    assert list(default_schedule().to_dict()) == DAYS_OF_WEEK


def test_day_invariants():
    with pytest.raises(ScheduleFormatError):
        DayAvailability(enabled=False, time_slots=(TimeSlot("9:00 AM", "10:00 AM"),))
    with pytest.raises(ScheduleFormatError):
        DayAvailability(enabled=True)
    with pytest.raises(ScheduleFormatError):
        DayAvailability(enabled="yes", time_slots=(TimeSlot(),))


def test_schedule_needs_all_seven_days():
    data = dict(DEFAULT_DICT)
    del data["Sunday"]
    with pytest.raises(ScheduleFormatError):
        WeeklySchedule.from_dict(data)

    with pytest.raises(ScheduleFormatError):
        WeeklySchedule.from_dict({**DEFAULT_DICT, "Funday": {"enabled": False, "timeSlots": []}})


@pytest.mark.parametrize("bad", [
    [],
    "Monday",
    {**DEFAULT_DICT, "Monday": []},
    {**DEFAULT_DICT, "Monday": {"enabled": True}},
    {**DEFAULT_DICT, "Monday": {"enabled": True, "timeSlots": ["9:00 AM"]}},
    {**DEFAULT_DICT, "Monday": {"enabled": True, "timeSlots": [{"start": 9, "end": 10}]}},
])
def test_from_dict_rejects_malformed(bad):
    with pytest.raises(ScheduleFormatError):
        WeeklySchedule.from_dict(bad)


def test_serialize_is_versioned():
    stored = json.loads(serialize(_sample()))
    assert stored["version"] == SCHEMA_VERSION
    assert stored["schedule"]["Monday"]["timeSlots"][1] == {"start": "1:00 PM", "end": "5:00 PM"}


def test_deserialize_current_form():
    schedule = _sample()
    assert deserialize(serialize(schedule)) == schedule


def test_deserialize_unversioned_mapping():
    assert deserialize(json.dumps(DEFAULT_DICT)) == default_schedule()


def test_deserialize_day_array():
    legacy = [{"day": day, "slots": []} for day in DAYS_OF_WEEK]
    legacy[2]["slots"] = [{"start": "8:00 AM", "end": "9:30 AM"}]
    schedule = deserialize(json.dumps(legacy))
    assert schedule["Wednesday"] == DayAvailability(enabled=True, time_slots=(TimeSlot("8:00 AM", "9:30 AM"),))
    assert schedule["Monday"] == DayAvailability(enabled=False)


def test_deserialize_day_array_missing_days_are_disabled():
    schedule = deserialize(json.dumps([{"day": "Friday", "slots": [{"start": "1:00 PM", "end": "2:00 PM"}]}]))
    assert schedule["Friday"].enabled is True
    assert all(not schedule[d].enabled for d in DAYS_OF_WEEK if d != "Friday")


@pytest.mark.parametrize("text", [
    "not json",
    "",
    "42",
    json.dumps({"version": SCHEMA_VERSION + 1, "schedule": DEFAULT_DICT}),
    json.dumps({"version": SCHEMA_VERSION}),
    json.dumps({"version": True, "schedule": DEFAULT_DICT}),
    json.dumps({"version": 1.0, "schedule": DEFAULT_DICT}),
    json.dumps({"version": "1", "schedule": DEFAULT_DICT}),
    "[" * 100000 + "]" * 100000,
    json.dumps([{"day": "Someday", "slots": []}]),
])
def test_deserialize_rejects(text):
    with pytest.raises(ScheduleFormatError):
        deserialize(text)


def test_set_day_enabled():
    schedule = default_schedule()
    off = set_day_enabled(schedule, "Monday", False)
    assert off["Monday"] == DayAvailability(enabled=False)
    on = set_day_enabled(off, "Monday", True)
    assert on["Monday"] == DayAvailability(enabled=True, time_slots=(TimeSlot(),))
    # original untouched
    assert schedule == default_schedule()


def test_set_day_enabled_same_state_keeps_slots():
    schedule = _sample()
    assert set_day_enabled(schedule, "Monday", True) is schedule


def test_add_and_remove_slot():
    schedule = add_slot(default_schedule(), "Tuesday")
    assert len(schedule["Tuesday"].time_slots) == 2
    schedule = remove_slot(schedule, "Tuesday", 0)
    assert len(schedule["Tuesday"].time_slots) == 1
    # last slot of a day stays
    assert remove_slot(schedule, "Tuesday", 0) is schedule


def test_remove_slot_keeps_others_in_order():
    schedule = remove_slot(_sample(), "Monday", 0)
    assert schedule["Monday"].time_slots == (TimeSlot("1:00 PM", "5:00 PM"),)


def test_remove_slot_bad_index():
    with pytest.raises(IndexError):
        remove_slot(_sample(), "Monday", 5)


def test_add_slot_to_disabled_day():
    with pytest.raises(ScheduleFormatError):
        add_slot(default_schedule(), "Sunday")
