"""Data access helpers for the rep roster, availability templates and booking ledger."""

from __future__ import annotations

import functools
import json
import logging
from datetime import date, datetime
from pathlib import Path
from typing import Any, Optional

from ..config import settings
from ..models.domain import (
    WEEKDAYS,
    Address,
    Appointment,
    AppointmentStatus,
    SalesRep,
    TimeSlot,
    WeeklyAvailabilityTemplate,
)

logger = logging.getLogger(__name__)


def _coerce_float(value: Any) -> Optional[float]:
    if value is None or value == "" or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    try:
        return float(str(value).replace(",", ""))
    except ValueError:
        logger.warning(f"Unable to parse coordinate from value '{value}'")
        return None


def _text(value: Any) -> str:
    return str(value).strip() if value is not None else ""


def _read_json(path: Path) -> Any:
    if not path.exists():
        raise FileNotFoundError(f"Data file not found: {path}")
    with path.open(mode="r", encoding="utf-8-sig") as handle:
        return json.load(handle)


def parse_address(raw: Any) -> Address:
    """Build an ``Address``; coordinates stay ``None`` when absent or unparsable."""

    if not isinstance(raw, dict):
        return Address()
    return Address(
        street=_text(raw.get("street")),
        city=_text(raw.get("city")),
        state=_text(raw.get("state")),
        zip_code=_text(raw.get("zip") or raw.get("zipCode") or raw.get("zip_code")),
        latitude=_coerce_float(raw.get("lat", raw.get("latitude"))),
        longitude=_coerce_float(raw.get("lng", raw.get("longitude"))),
    )


def parse_rep(raw: dict) -> Optional[SalesRep]:
    rep_id = _text(raw.get("id") or raw.get("repId") or raw.get("rep_id"))
    if not rep_id:
        logger.warning(f"Skipping rep record without an id: {raw!r:.120}")
        return None
    return SalesRep(
        rep_id=rep_id,
        name=_text(raw.get("name")) or rep_id,
        home_address=parse_address(raw.get("startingAddress") or raw.get("homeAddress")),
        email=_text(raw.get("email")),
        phone=_text(raw.get("phone")),
        color=_text(raw.get("color")),
    )


def parse_template(raw: Any) -> WeeklyAvailabilityTemplate:
    """Build the weekly template, dropping weekday names and slots outside the enumeration."""

    if not isinstance(raw, dict):
        raise ValueError("Availability data must be an object keyed by rep id.")
    slots: dict[str, dict[str, frozenset[TimeSlot]]] = {}
    for rep_id, days in raw.items():
        if not isinstance(days, dict):
            logger.warning(f"Ignoring malformed availability entry for rep {rep_id}")
            continue
        rep_days: dict[str, frozenset[TimeSlot]] = {}
        for day_name, labels in days.items():
            day_key = str(day_name).strip().lower()
            if day_key not in WEEKDAYS:
                logger.warning(f"Ignoring unknown weekday '{day_name}' for rep {rep_id}")
                continue
            valid: set[TimeSlot] = set()
            for label in labels or ():
                try:
                    valid.add(TimeSlot(str(label).strip().lower()))
                except ValueError:
                    logger.warning(f"Ignoring unknown time slot '{label}' for rep {rep_id} on {day_key}")
            rep_days[day_key] = frozenset(valid)
        slots[str(rep_id)] = rep_days
    return WeeklyAvailabilityTemplate(slots=slots)


def _parse_created_at(value: Any) -> Optional[datetime]:
    if not value:
        return None
    try:
        return datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    except ValueError:
        return None


def parse_appointment(raw: dict) -> Optional[Appointment]:
    appointment_id = _text(raw.get("id") or raw.get("appointmentId"))
    try:
        day = date.fromisoformat(_text(raw.get("date"))[:10])
        time_slot = TimeSlot(_text(raw.get("timeSlot") or raw.get("time_slot")).lower())
        status = AppointmentStatus(_text(raw.get("status") or "scheduled").lower())
    except ValueError as exc:
        logger.warning(f"Skipping appointment '{appointment_id or '?'}': {exc}")
        return None
    if not appointment_id:
        logger.warning(f"Skipping appointment without an id on {day} {time_slot.value}")
        return None
    rep_id = _text(raw.get("repId") or raw.get("rep_id")) or None
    return Appointment(
        appointment_id=appointment_id,
        date=day,
        time_slot=time_slot,
        rep_id=rep_id,
        address=parse_address(raw.get("address")),
        status=status,
        customer_name=_text(raw.get("customerName")),
        customer_phone=_text(raw.get("customerPhone")) or None,
        customer_email=_text(raw.get("customerEmail")) or None,
        created_at=_parse_created_at(raw.get("createdAt")),
    )


@functools.lru_cache(maxsize=1)
def load_reps(source: Optional[Path] = None) -> tuple[SalesRep, ...]:
    """Load the rep roster from the configured JSON file."""

    path = source or settings.reps_file
    payload = _read_json(path)
    if not isinstance(payload, list):
        raise ValueError(f"Rep file '{path}' must contain a JSON array.")
    reps = tuple(rep for rep in (parse_rep(item) for item in payload if isinstance(item, dict)) if rep)
    logger.info(f"Loaded {len(reps)} reps from {path}")
    return reps


@functools.lru_cache(maxsize=1)
def load_availability(source: Optional[Path] = None) -> WeeklyAvailabilityTemplate:
    """Load weekly availability templates keyed by rep id."""

    path = source or settings.availability_file
    return parse_template(_read_json(path))


def load_appointments(source: Optional[Path] = None) -> tuple[Appointment, ...]:
    """Read the booking ledger. Never cached: each call returns a fresh snapshot."""

    path = source or settings.appointments_file
    payload = _read_json(path)
    if not isinstance(payload, list):
        raise ValueError(f"Appointments file '{path}' must contain a JSON array.")
    appointments = tuple(
        apt for apt in (parse_appointment(item) for item in payload if isinstance(item, dict)) if apt
    )
    logger.info(f"Loaded {len(appointments)} appointments from {path}")
    return appointments


def get_rep(rep_id: str) -> Optional[SalesRep]:
    for rep in load_reps():
        if rep.rep_id == rep_id:
            return rep
    return None


def clear_caches() -> None:
    load_reps.cache_clear()
    load_availability.cache_clear()
