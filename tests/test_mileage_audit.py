import logging
from datetime import date, timedelta

import pytest

from src.fieldbook.models.domain import (
    Address,
    AnchorSource,
    Appointment,
    AppointmentStatus,
    SalesRep,
    TimeSlot,
)
from src.fieldbook.services.mileage.service import audit_appointments, mileage_issues, summarize_mileage

MONDAY = date(2025, 6, 2)


def _rep(rep_id: str, lat: float | None = 33.0, lng: float | None = -84.0) -> SalesRep:
    return SalesRep(rep_id=rep_id, name=f"Rep {rep_id}", home_address=Address(latitude=lat, longitude=lng))


def _appointment(appointment_id, rep_id, day, slot, lat, lng, status=AppointmentStatus.SCHEDULED):
    return Appointment(
        appointment_id=appointment_id,
        date=day,
        time_slot=slot,
        rep_id=rep_id,
        address=Address(latitude=lat, longitude=lng),
        status=status,
    )


def test_first_appointment_measured_from_home_then_chained():
    appointments = [
        _appointment("A1", "R1", MONDAY, TimeSlot.TEN_AM, 33.05, -84.05),
        _appointment("A2", "R1", MONDAY, TimeSlot.TWO_PM, 33.05, -84.05),
    ]

    records = audit_appointments(appointments, [_rep("R1")], 60)

    assert records["A1"].anchor_source is AnchorSource.HOME
    assert records["A1"].distance_miles == pytest.approx(4.5, abs=0.3)
    assert records["A2"].anchor_source is AnchorSource.LAST_APPOINTMENT
    assert records["A2"].distance_miles == 0.0
    assert not any(record.flagged for record in records.values())


def test_flags_at_or_beyond_threshold():
    appointments = [
        _appointment("NEAR", "R1", MONDAY, TimeSlot.TEN_AM, 33.1, -84.0),
        _appointment("FAR", "R2", MONDAY, TimeSlot.TEN_AM, 34.0, -84.0),
    ]
    roster = [_rep("R1"), _rep("R2")]
    far_distance = audit_appointments(appointments, roster, 60)["FAR"].distance_miles

    records = audit_appointments(appointments, roster, far_distance)

    assert records["FAR"].flagged
    assert not records["NEAR"].flagged
    assert [record.appointment_id for record in mileage_issues(records)] == ["FAR"]


def test_previous_evening_chains_into_next_morning():
    appointments = [
        _appointment("EVE", "R1", MONDAY - timedelta(days=1), TimeSlot.SEVEN_PM, 34.0, -84.0),
        _appointment("MORN", "R1", MONDAY, TimeSlot.TEN_AM, 34.0, -84.0),
    ]

    records = audit_appointments(appointments, [_rep("R1")], 60)

    assert records["EVE"].flagged
    assert records["MORN"].anchor_source is AnchorSource.LAST_APPOINTMENT
    assert records["MORN"].distance_miles == 0.0
    assert not records["MORN"].flagged


def test_cancelled_unassigned_and_unknown_reps_are_skipped():
    appointments = [
        _appointment("C1", "R1", MONDAY, TimeSlot.TEN_AM, 33.5, -84.0, status=AppointmentStatus.CANCELLED),
        _appointment("U1", None, MONDAY, TimeSlot.TEN_AM, 33.5, -84.0),
        _appointment("G1", "GHOST", MONDAY, TimeSlot.TEN_AM, 33.5, -84.0),
        _appointment("S1", "R1", MONDAY, TimeSlot.TWO_PM, 33.5, -84.0),
    ]

    records = audit_appointments(appointments, [_rep("R1")], 60)

    assert set(records) == {"S1"}
    assert records["S1"].anchor_source is AnchorSource.HOME


def test_cancelled_appointment_does_not_anchor_the_next_one():
    appointments = [
        _appointment("C1", "R1", MONDAY, TimeSlot.TEN_AM, 34.0, -84.0, status=AppointmentStatus.CANCELLED),
        _appointment("S1", "R1", MONDAY, TimeSlot.TWO_PM, 33.0, -84.0),
    ]

    records = audit_appointments(appointments, [_rep("R1")], 60)

    assert records["S1"].distance_miles == 0.0


def test_missing_coordinates_skip_only_affected_records():
    appointments = [
        _appointment("BAD", "R1", MONDAY, TimeSlot.TEN_AM, None, None),
        _appointment("OK", "R2", MONDAY, TimeSlot.TEN_AM, 33.1, -84.0),
        _appointment("NOHOME", "R3", MONDAY, TimeSlot.TEN_AM, 33.1, -84.0),
    ]

    records = audit_appointments(appointments, [_rep("R1"), _rep("R2"), _rep("R3", None, None)], 60)

    assert set(records) == {"OK"}


def test_date_window_limits_reported_records_but_not_anchors():
    appointments = [
        _appointment("EVE", "R1", MONDAY - timedelta(days=1), TimeSlot.SEVEN_PM, 34.0, -84.0),
        _appointment("MORN", "R1", MONDAY, TimeSlot.TEN_AM, 34.0, -84.0),
        _appointment("LATER", "R1", MONDAY + timedelta(days=5), TimeSlot.TEN_AM, 33.0, -84.0),
    ]

    records = audit_appointments(appointments, [_rep("R1")], 60, start=MONDAY, end=MONDAY)

    assert set(records) == {"MORN"}
    assert records["MORN"].anchor_source is AnchorSource.LAST_APPOINTMENT


def test_audit_does_not_mutate_ledger():
    appointments = [_appointment("A1", "R1", MONDAY, TimeSlot.TEN_AM, 33.05, -84.05)]
    snapshot = list(appointments)

    audit_appointments(appointments, [_rep("R1")], 60)

    assert appointments == snapshot


def test_summary_counts_and_average():
    appointments = [
        _appointment("A1", "R1", MONDAY, TimeSlot.TEN_AM, 33.0, -84.0),
        _appointment("A2", "R2", MONDAY, TimeSlot.TEN_AM, 34.0, -84.0),
    ]
    records = audit_appointments(appointments, [_rep("R1"), _rep("R2")], 60)

    summary = summarize_mileage(records, 60)

    assert summary.audited == 2
    assert summary.issues == 1
    assert summary.average_distance_miles == pytest.approx(records["A2"].distance_miles / 2)
    assert summarize_mileage({}, 60).average_distance_miles == 0.0


def test_negative_threshold_rejected():
    with pytest.raises(ValueError):
        audit_appointments([], [], -1)


def test_rep_with_bad_home_is_not_audited_even_when_chained(caplog):
    appointments = [
        _appointment("X1", "BAD", MONDAY, TimeSlot.TEN_AM, 33.05, -84.05),
        _appointment("X2", "BAD", MONDAY, TimeSlot.SEVEN_PM, 33.1, -84.1),
        _appointment("OK", "R1", MONDAY, TimeSlot.TEN_AM, 33.1, -84.0),
    ]

    with caplog.at_level(logging.WARNING):
        records = audit_appointments(appointments, [_rep("BAD", None, None), _rep("R1")], 60)

    assert set(records) == {"OK"}
    assert "home address has no coordinates" in caplog.text
