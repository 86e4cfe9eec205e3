"""API routes for the booking grid and rep availability views."""

from __future__ import annotations

import logging
from datetime import date
from typing import Optional

from fastapi import APIRouter, HTTPException, Query, status

from ...config import settings
from ...data import repository
from ...models.domain import MissingCoordinateError, TimeSlot
from ...schemas.availability import (
    AnchorModel,
    AvailabilityGridRequest,
    AvailabilityGridResponse,
    BookingProposalRequest,
    BookingProposalResponse,
    RepScheduleResponse,
    RepSlotModel,
    SlotModel,
)
from ...services.availability import (
    build_grid,
    build_rep_schedule,
    evaluate_slot,
    propose_booking,
    revalidate_booking,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/availability", tags=["availability"])


def _load_snapshot():
    try:
        return repository.load_reps(), repository.load_availability(), repository.load_appointments()
    except (FileNotFoundError, ValueError) as exc:
        logger.error(f"Failed to load scheduling data: {exc}")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=f"Scheduling data unavailable: {exc}",
        ) from exc


@router.post("/grid", response_model=AvailabilityGridResponse, status_code=status.HTTP_200_OK)
def availability_grid(payload: AvailabilityGridRequest) -> AvailabilityGridResponse:
    """Availability of every (day, slot) for a customer address."""

    start_date = payload.start_date or date.today()
    horizon_days = payload.horizon_days or settings.grid_horizon_days
    threshold = payload.threshold_miles or settings.booking_radius_miles
    reps, templates, appointments = _load_snapshot()

    try:
        grid = build_grid(
            payload.address.to_domain(),
            start_date,
            horizon_days,
            reps,
            templates,
            appointments,
            threshold,
            week_offset=payload.week_offset,
        )
    except (MissingCoordinateError, ValueError) as exc:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc)) from exc

    return AvailabilityGridResponse(
        start_date=grid[0][0].date,
        horizon_days=horizon_days,
        week_offset=payload.week_offset,
        threshold_miles=threshold,
        days=[[SlotModel.from_domain(slot) for slot in day] for day in grid],
    )


@router.get("/reps/{rep_id}", response_model=RepScheduleResponse, status_code=status.HTTP_200_OK)
def rep_schedule(
    rep_id: str,
    reference_date: Optional[date] = Query(default=None, description="Any day in the first week; defaults to today."),
    weeks: Optional[int] = Query(default=None, ge=1, le=12),
    week_offset: int = Query(default=0),
) -> RepScheduleResponse:
    """Per-slot state of one rep across whole weeks."""

    reps, templates, appointments = _load_snapshot()
    rep = next((item for item in reps if item.rep_id == rep_id), None)
    if rep is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Rep '{rep_id}' not found.")

    week_count = weeks or settings.rep_schedule_weeks
    schedule = build_rep_schedule(
        rep,
        reference_date or date.today(),
        templates,
        appointments,
        weeks=week_count,
        week_offset=week_offset,
    )
    return RepScheduleResponse(
        rep_id=rep.rep_id,
        rep_name=rep.name,
        weeks=week_count,
        week_offset=week_offset,
        days=[[RepSlotModel.from_domain(slot) for slot in day] for day in schedule],
    )


@router.post("/proposals", response_model=BookingProposalResponse, status_code=status.HTTP_200_OK)
def booking_proposal(payload: BookingProposalRequest) -> BookingProposalResponse:
    """Pick the closest available rep for a slot and confirm against a fresh ledger read."""

    threshold = payload.threshold_miles or settings.booking_radius_miles
    customer_address = payload.address.to_domain()
    time_slot = TimeSlot(payload.time_slot)
    reps, templates, appointments = _load_snapshot()

    try:
        slot = evaluate_slot(payload.date, time_slot, customer_address, reps, templates, appointments, threshold)
    except (MissingCoordinateError, ValueError) as exc:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc)) from exc

    proposal = propose_booking(
        slot,
        payload.customer_name,
        customer_address,
        customer_phone=payload.customer_phone,
        customer_email=payload.customer_email,
    )
    if proposal is None:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"No rep available on {payload.date} at {payload.time_slot} (slot status: {slot.status.value}).",
        )

    fresh = repository.load_appointments()
    if not revalidate_booking(proposal, reps, templates, fresh, threshold):
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Availability changed while booking; refresh the grid and try again.",
        )

    chosen = slot.available_reps[0]
    return BookingProposalResponse(
        appointment_id=proposal.appointment_id,
        rep_id=chosen.rep_id,
        rep_name=chosen.rep_name,
        date=proposal.date,
        time_slot=proposal.time_slot.value,
        distance_miles=round(chosen.distance_miles, 2),
        anchor=AnchorModel.from_domain(chosen.anchor),
    )
