import pytest

from admin_app.errors import ScheduleError
from admin_app.models import DaySchedule, TimeSlot
from admin_app.schedule import (
    TimingEditor,
    default_working_hours,
    is_overnight,
    parse_minutes,
    slots_overlap,
    validate_day,
    validate_week,
)


def test_parse_minutes_reads_bad_input_as_midnight():
    assert parse_minutes("09:30") == 570
    assert parse_minutes("garbage") == 0


def test_overlapping_slots_on_same_day_are_rejected():
    day = DaySchedule(is_open=True, slots=[TimeSlot("09:00", "12:00"), TimeSlot("11:00", "14:00")])
    assert validate_day(day) == "Slot 1 and Slot 2 overlap"


def test_touching_slots_do_not_overlap():
    assert not slots_overlap(TimeSlot("09:00", "12:00"), TimeSlot("12:00", "15:00"))


def test_overnight_slots_are_exempt_from_overlap():
    overnight = TimeSlot("22:00", "02:00")
    assert is_overnight(overnight)
    assert not slots_overlap(overnight, TimeSlot("01:00", "03:00"))
    day = DaySchedule(is_open=True, slots=[overnight, TimeSlot("23:00", "23:30")])
    assert validate_day(day) is None


def test_two_overnight_slots_on_one_day_pass_validation():
    day = DaySchedule(is_open=True, slots=[TimeSlot("22:00", "02:00"), TimeSlot("23:00", "01:00")])
    assert validate_day(day) is None


def test_open_day_needs_a_slot_but_closed_day_does_not():
    assert validate_day(DaySchedule(is_open=True, slots=[])) == "At least one slot is required"
    assert validate_day(DaySchedule(is_open=False, slots=[])) is None


def test_validate_week_reports_first_bad_day():
    hours = default_working_hours()
    hours.day("wednesday").slots.append(TimeSlot("10:00", "11:00"))

    with pytest.raises(ScheduleError) as excinfo:
        validate_week(hours)

    assert excinfo.value.day == "wednesday"
    assert str(excinfo.value).startswith("WEDNESDAY:")


def test_editor_falls_back_to_defaults_without_saved_hours():
    editor = TimingEditor()
    editor.load("b1", {"name": "Main"})

    assert editor.generated_default
    assert not editor.has_unsaved_changes
    monday = editor.working.day("monday")
    assert monday.is_open
    assert monday.slots[0].to_dict() == {"open": "09:00", "close": "22:00"}


def test_editor_tracks_unsaved_changes_by_value():
    editor = TimingEditor()
    editor.load(
        "b1",
        {"workingHours": {"monday": {"isOpen": True, "slots": [{"open": "10:00", "close": "14:00"}]}}},
    )
    assert not editor.generated_default
    assert not editor.working.day("sunday").is_open

    editor.toggle_day("monday")
    assert editor.has_unsaved_changes
    editor.toggle_day("monday")
    assert not editor.has_unsaved_changes


def test_opening_an_empty_day_seeds_default_slot():
    editor = TimingEditor()
    editor.load("b1", {"workingHours": {"monday": {"isOpen": False, "slots": []}}})

    editor.toggle_day("tuesday")

    assert [slot.to_dict() for slot in editor.working.day("tuesday").slots] == [{"open": "09:00", "close": "22:00"}]


def test_last_slot_of_open_day_cannot_be_removed():
    editor = TimingEditor()
    editor.load("b1", None)

    with pytest.raises(ScheduleError):
        editor.remove_slot("monday", 0)
    assert [slot.to_dict() for slot in editor.working.day("monday").slots] == [{"open": "09:00", "close": "22:00"}]

    editor.add_slot("monday")
    editor.remove_slot("monday", 0)
    assert editor.working.day("monday").slots[0].to_dict() == {"open": "09:00", "close": "17:00"}


def test_set_slot_time_flags_overnight_and_rejects_bad_times():
    editor = TimingEditor()
    editor.load("b1", None)

    assert editor.set_slot_time("friday", 0, "close", "01:30") is True
    with pytest.raises(ScheduleError):
        editor.set_slot_time("friday", 0, "open", "25:00")


def test_apply_to_all_copies_monday_independently():
    editor = TimingEditor()
    editor.load("b1", None)
    editor.set_slot_time("monday", 0, "open", "11:00")

    editor.apply_to_all("monday")
    editor.set_slot_time("monday", 0, "open", "12:00")

    assert editor.working.day("sunday").slots[0].open == "11:00"
    assert editor.working.day("monday").slots[0].open == "12:00"


def test_payload_and_mark_saved():
    editor = TimingEditor()
    editor.load("b1", None)
    editor.toggle_day("sunday", is_open=False)

    payload = editor.payload()
    assert set(payload) == {"workingHours"}
    assert payload["workingHours"]["sunday"]["isOpen"] is False

    editor.mark_saved()
    assert not editor.has_unsaved_changes
