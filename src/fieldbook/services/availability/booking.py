"""Turn a slot selection into an unsaved appointment and re-check it before commit."""

from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone
from typing import Iterable, Optional, Sequence

from ...models.domain import (
    Address,
    Appointment,
    AppointmentStatus,
    SalesRep,
    Slot,
    WeeklyAvailabilityTemplate,
)
from .slots import evaluate_slot

logger = logging.getLogger(__name__)


def propose_booking(
    slot: Slot,
    customer_name: str,
    customer_address: Address,
    *,
    customer_phone: Optional[str] = None,
    customer_email: Optional[str] = None,
    now: Optional[datetime] = None,
) -> Appointment | None:
    """Assign the closest available rep of ``slot``; ``None`` when nobody is available."""

    if not slot.available_reps:
        return None
    closest = slot.available_reps[0]
    return Appointment(
        appointment_id=f"apt-{uuid.uuid4().hex[:12]}",
        date=slot.date,
        time_slot=slot.time_slot,
        rep_id=closest.rep_id,
        address=customer_address,
        status=AppointmentStatus.SCHEDULED,
        customer_name=customer_name,
        customer_phone=customer_phone,
        customer_email=customer_email,
        created_at=now or datetime.now(timezone.utc),
    )


def revalidate_booking(
    appointment: Appointment,
    roster: Sequence[SalesRep],
    templates: WeeklyAvailabilityTemplate,
    fresh_appointments: Iterable[Appointment],
    threshold_miles: float,
) -> bool:
    """Check that the proposed rep is still offered for the slot in a fresh ledger read."""

    if appointment.rep_id is None:
        return False
    slot = evaluate_slot(
        appointment.date,
        appointment.time_slot,
        appointment.address,
        roster,
        templates,
        (apt for apt in fresh_appointments if apt.appointment_id != appointment.appointment_id),
        threshold_miles,
    )
    still_available = any(rep.rep_id == appointment.rep_id for rep in slot.available_reps)
    if not still_available:
        logger.warning(
            f"Rep {appointment.rep_id} no longer available on {appointment.date} "
            f"at {appointment.time_slot.value}; snapshot was stale"
        )
    return still_available
