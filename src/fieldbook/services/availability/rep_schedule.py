"""Per-rep slot states for the multi-week availability views."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Iterable, Optional

from ...models.domain import (
    TIME_SLOTS,
    AnchorResult,
    Appointment,
    MissingCoordinateError,
    SalesRep,
    TimeSlot,
    WeeklyAvailabilityTemplate,
)
from .anchors import resolve_anchor, scheduled_for_rep
from .grid import week_dates

logger = logging.getLogger(__name__)


class RepSlotState(str, Enum):
    UNAVAILABLE = "unavailable"
    OPEN = "open"
    BOOKED = "booked"


@dataclass(frozen=True, slots=True)
class RepSlot:
    date: date
    time_slot: TimeSlot
    state: RepSlotState
    anchor: Optional[AnchorResult] = None
    appointment_id: Optional[str] = None


def build_rep_schedule(
    rep: SalesRep,
    reference_date: date,
    templates: WeeklyAvailabilityTemplate,
    appointments: Iterable[Appointment],
    *,
    weeks: int = 3,
    week_offset: int = 0,
) -> list[list[RepSlot]]:
    """Slot states for ``rep`` over whole weeks starting at the week of ``reference_date``.

    Booked slots carry the occupying appointment id (lowest id if the ledger
    holds duplicates). Open slots carry the anchor the rep would depart from,
    or ``None`` when that anchor or the rep's home has no coordinates.
    """

    own = scheduled_for_rep(rep.rep_id, appointments)
    booked: dict[tuple[date, TimeSlot], str] = {}
    for apt in sorted(own, key=lambda item: item.appointment_id):
        key = (apt.date, apt.time_slot)
        if key in booked:
            logger.warning(
                f"Rep {rep.rep_id} has duplicate scheduled appointments on {apt.date} at "
                f"{apt.time_slot.value}; using {booked[key]}"
            )
            continue
        booked[key] = apt.appointment_id

    home_known = rep.home_address.has_coordinates
    if not home_known:
        logger.warning(f"Rep {rep.rep_id} home address has no coordinates; open slots carry no anchor")

    schedule: list[list[RepSlot]] = []
    for day in week_dates(reference_date, week_offset, weeks):
        day_slots: list[RepSlot] = []
        for time_slot in TIME_SLOTS:
            appointment_id = booked.get((day, time_slot))
            if appointment_id is not None:
                day_slots.append(
                    RepSlot(date=day, time_slot=time_slot, state=RepSlotState.BOOKED, appointment_id=appointment_id)
                )
                continue
            if not templates.is_available(rep.rep_id, day, time_slot):
                day_slots.append(RepSlot(date=day, time_slot=time_slot, state=RepSlotState.UNAVAILABLE))
                continue
            anchor: Optional[AnchorResult] = None
            if home_known:
                try:
                    anchor = resolve_anchor(rep, day, own, time_slot)
                except MissingCoordinateError as exc:
                    logger.warning(f"No anchor for rep {rep.rep_id} on {day} {time_slot.value}: {exc}")
            day_slots.append(RepSlot(date=day, time_slot=time_slot, state=RepSlotState.OPEN, anchor=anchor))
        schedule.append(day_slots)
    return schedule
