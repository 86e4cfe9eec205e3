"""Availability request/response schemas."""

from __future__ import annotations

from datetime import date
from typing import List, Literal, Optional

from pydantic import BaseModel, Field

from ..models.domain import Address, AnchorResult, Slot
from ..services.availability import RepSlot

TimeSlotLiteral = Literal["10am", "2pm", "7pm"]


class AddressModel(BaseModel):
    street: str = ""
    city: str = ""
    state: str = ""
    zip: str = ""
    lat: Optional[float] = Field(default=None, ge=-90, le=90)
    lng: Optional[float] = Field(default=None, ge=-180, le=180)

    def to_domain(self) -> Address:
        return Address(
            street=self.street,
            city=self.city,
            state=self.state,
            zip_code=self.zip,
            latitude=self.lat,
            longitude=self.lng,
        )

    @classmethod
    def from_domain(cls, address: Address) -> "AddressModel":
        return cls(
            street=address.street,
            city=address.city,
            state=address.state,
            zip=address.zip_code,
            lat=address.latitude,
            lng=address.longitude,
        )


class AvailabilityGridRequest(BaseModel):
    address: AddressModel
    start_date: Optional[date] = Field(default=None, description="First day of the horizon; defaults to today.")
    horizon_days: Optional[int] = Field(default=None, ge=1, le=90)
    week_offset: int = Field(default=0, description="Shift the window by whole weeks (negative = earlier).")
    threshold_miles: Optional[float] = Field(default=None, gt=0, description="Overrides the configured booking radius.")


class AnchorModel(BaseModel):
    lat: float
    lng: float
    source: Literal["home", "last-appointment"]
    label: str
    appointment_id: Optional[str] = None

    @classmethod
    def from_domain(cls, anchor: AnchorResult) -> "AnchorModel":
        return cls(
            lat=anchor.latitude,
            lng=anchor.longitude,
            source=anchor.source.value,
            label=anchor.label,
            appointment_id=anchor.appointment_id,
        )


class AvailableRepModel(BaseModel):
    rep_id: str
    rep_name: str
    distance_miles: float
    anchor: AnchorModel


class SlotModel(BaseModel):
    date: date
    time_slot: TimeSlotLiteral
    status: Literal["none", "limited", "good", "unknown"]
    available_count: int
    available_reps: List[AvailableRepModel]
    skipped_rep_ids: List[str] = Field(default_factory=list)

    @classmethod
    def from_domain(cls, slot: Slot) -> "SlotModel":
        return cls(
            date=slot.date,
            time_slot=slot.time_slot.value,
            status=slot.status.value,
            available_count=slot.available_count,
            available_reps=[
                AvailableRepModel(
                    rep_id=rep.rep_id,
                    rep_name=rep.rep_name,
                    distance_miles=round(rep.distance_miles, 2),
                    anchor=AnchorModel.from_domain(rep.anchor),
                )
                for rep in slot.available_reps
            ],
            skipped_rep_ids=list(slot.skipped_rep_ids),
        )


class AvailabilityGridResponse(BaseModel):
    start_date: date
    horizon_days: int
    week_offset: int
    threshold_miles: float
    days: List[List[SlotModel]]


class RepSlotModel(BaseModel):
    date: date
    time_slot: TimeSlotLiteral
    state: Literal["unavailable", "open", "booked"]
    anchor: Optional[AnchorModel] = None
    appointment_id: Optional[str] = None

    @classmethod
    def from_domain(cls, slot: RepSlot) -> "RepSlotModel":
        return cls(
            date=slot.date,
            time_slot=slot.time_slot.value,
            state=slot.state.value,
            anchor=AnchorModel.from_domain(slot.anchor) if slot.anchor else None,
            appointment_id=slot.appointment_id,
        )


class RepScheduleResponse(BaseModel):
    rep_id: str
    rep_name: str
    weeks: int
    week_offset: int
    days: List[List[RepSlotModel]]


class BookingProposalRequest(BaseModel):
    date: date
    time_slot: TimeSlotLiteral
    address: AddressModel
    customer_name: str = Field(..., min_length=1)
    customer_phone: Optional[str] = None
    customer_email: Optional[str] = None
    threshold_miles: Optional[float] = Field(default=None, gt=0)


class BookingProposalResponse(BaseModel):
    appointment_id: str
    rep_id: str
    rep_name: str
    date: date
    time_slot: TimeSlotLiteral
    distance_miles: float
    anchor: AnchorModel
    status: Literal["scheduled"] = "scheduled"
