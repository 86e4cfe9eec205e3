import json
from datetime import date
from pathlib import Path

import pytest

from src.fieldbook.data import repository
from src.fieldbook.models.domain import AppointmentStatus, TimeSlot


@pytest.fixture(autouse=True)
def clear_caches():
    repository.clear_caches()
    yield
    repository.clear_caches()


def _write(path: Path, payload) -> Path:
    path.write_text(json.dumps(payload), encoding="utf-8")
    return path


def test_load_reps_parses_starting_address(tmp_path: Path):
    source = _write(
        tmp_path / "reps.json",
        [
            {
                "id": "rep-1",
                "name": "Jordan Lee",
                "email": "jordan@example.com",
                "phone": "555-0101",
                "color": "#ff0000",
                "startingAddress": {
                    "street": "1 Main St",
                    "city": "Atlanta",
                    "state": "GA",
                    "zip": "30303",
                    "lat": 33.75,
                    "lng": "-84.39",
                },
            },
            {"id": "rep-2", "name": "No Geo", "startingAddress": {"street": "2 Main St"}},
            {"name": "Missing Id"},
        ],
    )

    reps = repository.load_reps(source)

    assert [rep.rep_id for rep in reps] == ["rep-1", "rep-2"]
    assert reps[0].home_address.coordinate() == (33.75, -84.39)
    assert reps[0].home_address.zip_code == "30303"
    assert not reps[1].home_address.has_coordinates


def test_unparsable_coordinate_is_left_missing_not_zero(tmp_path: Path):
    source = _write(
        tmp_path / "reps.json",
        [{"id": "rep-1", "name": "Bad", "startingAddress": {"lat": "north", "lng": -84.0}}],
    )

    rep = repository.load_reps(source)[0]

    assert rep.home_address.latitude is None
    assert not rep.home_address.has_coordinates


def test_template_drops_unknown_slots_and_days():
    template = repository.parse_template(
        {
            "rep-1": {"Monday": ["10am", "2PM", "noon"], "funday": ["7pm"], "friday": []},
            "rep-2": "bogus",
        }
    )

    assert template.slots_for("rep-1", date(2025, 6, 2)) == frozenset({TimeSlot.TEN_AM, TimeSlot.TWO_PM})
    assert template.slots_for("rep-1", date(2025, 6, 6)) == frozenset()
    assert template.slots_for("rep-2", date(2025, 6, 2)) == frozenset()
    assert template.weekly_slot_count("rep-1") == 2


def test_load_appointments_is_never_cached(tmp_path: Path):
    path = tmp_path / "appointments.json"
    record = {
        "id": "apt-1",
        "repId": "rep-1",
        "date": "2025-06-02",
        "timeSlot": "10am",
        "customerName": "Pat",
        "address": {"lat": 33.0, "lng": -84.0},
        "status": "scheduled",
        "createdAt": "2025-05-30T12:00:00Z",
    }
    _write(path, [record])
    first = repository.load_appointments(path)

    _write(path, [record, {**record, "id": "apt-2", "timeSlot": "2pm", "status": "cancelled"}])
    second = repository.load_appointments(path)

    assert len(first) == 1
    assert len(second) == 2
    assert second[1].status is AppointmentStatus.CANCELLED
    assert first[0].created_at.year == 2025


def test_malformed_appointments_are_skipped(tmp_path: Path):
    path = _write(
        tmp_path / "appointments.json",
        [
            {"id": "ok", "repId": "", "date": "2025-06-02", "timeSlot": "7pm", "address": {}},
            {"id": "bad-slot", "repId": "r", "date": "2025-06-02", "timeSlot": "9am"},
            {"id": "bad-date", "repId": "r", "date": "June 2", "timeSlot": "10am"},
            {"repId": "r", "date": "2025-06-02", "timeSlot": "10am"},
        ],
    )

    appointments = repository.load_appointments(path)

    assert [apt.appointment_id for apt in appointments] == ["ok"]
    assert appointments[0].rep_id is None
    assert appointments[0].status is AppointmentStatus.SCHEDULED


def test_missing_file_raises(tmp_path: Path):
    with pytest.raises(FileNotFoundError):
        repository.load_appointments(tmp_path / "missing.json")
