"""Anchor resolution: where a rep departs from for a given slot."""

from __future__ import annotations

import logging
from datetime import date, timedelta
from typing import Iterable, Sequence

from ...models.domain import (
    AnchorResult,
    AnchorSource,
    Appointment,
    SalesRep,
    TimeSlot,
)

logger = logging.getLogger(__name__)


def scheduled_for_rep(rep_id: str, appointments: Iterable[Appointment]) -> list[Appointment]:
    return [apt for apt in appointments if apt.rep_id == rep_id and apt.is_scheduled]


def _latest(candidates: Sequence[Appointment], rep_id: str) -> Appointment:
    """Pick the appointment in the highest slot; lowest id breaks ties."""

    top = max(apt.time_slot.precedence for apt in candidates)
    in_top_slot = sorted(
        (apt for apt in candidates if apt.time_slot.precedence == top),
        key=lambda apt: apt.appointment_id,
    )
    if len(in_top_slot) > 1:
        chosen = in_top_slot[0]
        logger.warning(
            f"Rep {rep_id} has {len(in_top_slot)} scheduled appointments on {chosen.date} "
            f"at {chosen.time_slot.value} ({', '.join(a.appointment_id for a in in_top_slot)}); "
            f"using {chosen.appointment_id}"
        )
    return in_top_slot[0]


def _from_appointment(appointment: Appointment) -> AnchorResult:
    latitude, longitude = appointment.address.coordinate()
    return AnchorResult(
        latitude=latitude,
        longitude=longitude,
        source=AnchorSource.LAST_APPOINTMENT,
        address=appointment.address,
        appointment_id=appointment.appointment_id,
    )


def resolve_anchor(
    rep: SalesRep,
    day: date,
    appointments: Iterable[Appointment],
    time_slot: TimeSlot,
) -> AnchorResult:
    """Resolve the travel origin for ``rep`` arriving at ``time_slot`` on ``day``.

    The origin is the latest scheduled appointment earlier the same day, else the
    last scheduled appointment of the previous day, else the rep's home.
    Only the rep's own scheduled appointments are considered.

    Raises:
        MissingCoordinateError: the chosen origin address has no coordinates.
    """

    own = scheduled_for_rep(rep.rep_id, appointments)
    target_index = time_slot.precedence

    earlier_today = [
        apt for apt in own if apt.date == day and apt.time_slot.precedence < target_index
    ]
    if earlier_today:
        return _from_appointment(_latest(earlier_today, rep.rep_id))

    previous_day = day - timedelta(days=1)
    yesterday = [apt for apt in own if apt.date == previous_day]
    if yesterday:
        return _from_appointment(_latest(yesterday, rep.rep_id))

    latitude, longitude = rep.home_address.coordinate()
    return AnchorResult(
        latitude=latitude,
        longitude=longitude,
        source=AnchorSource.HOME,
        address=rep.home_address,
    )
