"""Domain models for reps, availability templates, appointments and slots."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Mapping, Optional

Coordinate = tuple[float, float]

WEEKDAYS: tuple[str, ...] = (
    "monday",
    "tuesday",
    "wednesday",
    "thursday",
    "friday",
    "saturday",
    "sunday",
)


class MissingCoordinateError(ValueError):
    """Raised when an address without usable lat/lng enters a distance computation."""


class TimeSlot(str, Enum):
    TEN_AM = "10am"
    TWO_PM = "2pm"
    SEVEN_PM = "7pm"

    @property
    def precedence(self) -> int:
        return TIME_SLOTS.index(self)


# Chronological order of the bookable slots in a day.
TIME_SLOTS: tuple[TimeSlot, ...] = (TimeSlot.TEN_AM, TimeSlot.TWO_PM, TimeSlot.SEVEN_PM)


class AppointmentStatus(str, Enum):
    SCHEDULED = "scheduled"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class SlotStatus(str, Enum):
    NONE = "none"
    LIMITED = "limited"
    GOOD = "good"
    UNKNOWN = "unknown"


class AnchorSource(str, Enum):
    HOME = "home"
    LAST_APPOINTMENT = "last-appointment"

    @property
    def label(self) -> str:
        return "from Home" if self is AnchorSource.HOME else "from Last Appt"


def weekday_name(day: date) -> str:
    return WEEKDAYS[day.weekday()]


@dataclass(frozen=True, slots=True)
class Address:
    """Postal address with optional geocoded coordinates."""

    street: str = ""
    city: str = ""
    state: str = ""
    zip_code: str = ""
    latitude: Optional[float] = None
    longitude: Optional[float] = None

    @property
    def has_coordinates(self) -> bool:
        return _is_valid_number(self.latitude) and _is_valid_number(self.longitude)

    def coordinate(self) -> Coordinate:
        """Return ``(lat, lng)`` or raise ``MissingCoordinateError``."""

        if not self.has_coordinates:
            label = ", ".join(part for part in (self.street, self.city, self.state, self.zip_code) if part)
            raise MissingCoordinateError(f"Address '{label or '<blank>'}' has no usable latitude/longitude.")
        return (float(self.latitude), float(self.longitude))


@dataclass(frozen=True, slots=True)
class SalesRep:
    """Field sales representative. Read-only to the engine."""

    rep_id: str
    name: str
    home_address: Address
    email: str = ""
    phone: str = ""
    color: str = ""


@dataclass(frozen=True, slots=True)
class Appointment:
    """One booked visit in the ledger."""

    appointment_id: str
    date: date
    time_slot: TimeSlot
    rep_id: Optional[str]
    address: Address
    status: AppointmentStatus = AppointmentStatus.SCHEDULED
    customer_name: str = ""
    customer_phone: Optional[str] = None
    customer_email: Optional[str] = None
    created_at: Optional[datetime] = None

    @property
    def is_scheduled(self) -> bool:
        return self.status is AppointmentStatus.SCHEDULED


@dataclass(frozen=True, slots=True)
class WeeklyAvailabilityTemplate:
    """Recurring weekly bookable slots keyed by rep id then weekday name."""

    slots: Mapping[str, Mapping[str, frozenset[TimeSlot]]] = field(default_factory=dict)

    def slots_for(self, rep_id: str, day: date) -> frozenset[TimeSlot]:
        rep_days = self.slots.get(rep_id)
        if not rep_days:
            return frozenset()
        return rep_days.get(weekday_name(day), frozenset())

    def is_available(self, rep_id: str, day: date, time_slot: TimeSlot) -> bool:
        return time_slot in self.slots_for(rep_id, day)

    def weekly_slot_count(self, rep_id: str) -> int:
        return sum(len(day_slots) for day_slots in self.slots.get(rep_id, {}).values())


@dataclass(frozen=True, slots=True)
class AnchorResult:
    """Origin used for a rep's travel distance to a requested slot."""

    latitude: float
    longitude: float
    source: AnchorSource
    address: Address
    appointment_id: Optional[str] = None

    @property
    def coordinate(self) -> Coordinate:
        return (self.latitude, self.longitude)

    @property
    def label(self) -> str:
        return self.source.label


@dataclass(frozen=True, slots=True)
class AvailableRep:
    rep_id: str
    rep_name: str
    distance_miles: float
    anchor: AnchorResult


@dataclass(frozen=True, slots=True)
class Slot:
    """Evaluation result for one (date, time slot) cell."""

    date: date
    time_slot: TimeSlot
    available_reps: tuple[AvailableRep, ...]
    status: SlotStatus
    skipped_rep_ids: tuple[str, ...] = ()

    @property
    def available_count(self) -> int:
        return len(self.available_reps)


@dataclass(frozen=True, slots=True)
class MileageRecord:
    appointment_id: str
    rep_id: str
    date: date
    time_slot: TimeSlot
    distance_miles: float
    anchor_source: AnchorSource
    flagged: bool


def _is_valid_number(value: object) -> bool:
    if value is None or isinstance(value, bool):
        return False
    try:
        number = float(value)
    except (TypeError, ValueError):
        return False
    return math.isfinite(number)
