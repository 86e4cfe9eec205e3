"""Per-slot availability evaluation."""

from __future__ import annotations

import logging
from datetime import date
from typing import Iterable, Mapping, Sequence

from ...models.domain import (
    Address,
    Appointment,
    AvailableRep,
    Coordinate,
    MissingCoordinateError,
    SalesRep,
    Slot,
    SlotStatus,
    TimeSlot,
    WeeklyAvailabilityTemplate,
)
from ..geospatial import distance_miles
from .anchors import resolve_anchor

logger = logging.getLogger(__name__)

GOOD_SLOT_MIN_REPS = 3


def classify_slot_status(available_count: int) -> SlotStatus:
    if available_count < 0:
        raise ValueError("available_count must be >= 0")
    if available_count >= GOOD_SLOT_MIN_REPS:
        return SlotStatus.GOOD
    if available_count >= 1:
        return SlotStatus.LIMITED
    return SlotStatus.NONE


def group_scheduled_by_rep(appointments: Iterable[Appointment]) -> dict[str, tuple[Appointment, ...]]:
    """Index scheduled, assigned appointments by rep id."""

    grouped: dict[str, list[Appointment]] = {}
    for apt in appointments:
        if apt.rep_id is None or not apt.is_scheduled:
            continue
        grouped.setdefault(apt.rep_id, []).append(apt)
    return {rep_id: tuple(items) for rep_id, items in grouped.items()}


def target_coordinate(target: Address) -> Coordinate:
    """Coordinates of the customer address; a missing one aborts the whole evaluation."""

    try:
        return target.coordinate()
    except MissingCoordinateError as exc:
        raise MissingCoordinateError(
            f"Target address has no latitude/longitude; geocode it before requesting availability. ({exc})"
        ) from exc


def evaluate_prepared(
    day: date,
    time_slot: TimeSlot,
    target: Coordinate,
    roster: Sequence[SalesRep],
    templates: WeeklyAvailabilityTemplate,
    by_rep: Mapping[str, Sequence[Appointment]],
    threshold_miles: float,
) -> Slot:
    available: list[AvailableRep] = []
    skipped: list[str] = []

    for rep in roster:
        if not templates.is_available(rep.rep_id, day, time_slot):
            continue

        if not rep.home_address.has_coordinates:
            logger.warning(f"Skipping rep {rep.rep_id} for {day} {time_slot.value}: home address has no coordinates")
            skipped.append(rep.rep_id)
            continue

        own = by_rep.get(rep.rep_id, ())
        occupying = sorted(
            apt.appointment_id for apt in own if apt.date == day and apt.time_slot is time_slot
        )
        if occupying:
            if len(occupying) > 1:
                logger.warning(
                    f"Rep {rep.rep_id} has {len(occupying)} scheduled appointments on {day} at "
                    f"{time_slot.value}; using {occupying[0]}"
                )
            logger.debug(f"Rep {rep.rep_id} already booked on {day} at {time_slot.value}")
            continue

        try:
            anchor = resolve_anchor(rep, day, own, time_slot)
            distance = distance_miles(anchor.coordinate, target)
        except MissingCoordinateError as exc:
            logger.warning(f"Skipping rep {rep.rep_id} for {day} {time_slot.value}: {exc}")
            skipped.append(rep.rep_id)
            continue

        if distance > threshold_miles:
            logger.debug(
                f"Rep {rep.rep_id} is {distance:.1f} mi {anchor.label.lower()} "
                f"(limit {threshold_miles:.1f}) for {day} {time_slot.value}"
            )
            continue

        available.append(
            AvailableRep(
                rep_id=rep.rep_id,
                rep_name=rep.name,
                distance_miles=distance,
                anchor=anchor,
            )
        )

    available.sort(key=lambda item: (item.distance_miles, item.rep_id))
    status = classify_slot_status(len(available))
    if status is SlotStatus.NONE and skipped:
        status = SlotStatus.UNKNOWN

    return Slot(
        date=day,
        time_slot=time_slot,
        available_reps=tuple(available),
        status=status,
        skipped_rep_ids=tuple(skipped),
    )


def evaluate_slot(
    day: date,
    time_slot: TimeSlot,
    target_address: Address,
    roster: Sequence[SalesRep],
    templates: WeeklyAvailabilityTemplate,
    appointments: Iterable[Appointment],
    threshold_miles: float,
) -> Slot:
    """Determine which reps can serve ``target_address`` at (``day``, ``time_slot``).

    A rep qualifies when the weekly template offers the slot, no scheduled
    appointment occupies it, and the distance from the rep's resolved anchor
    is within ``threshold_miles``. Reps with unusable coordinates are skipped;
    a slot left empty only because of them is reported as ``unknown``.
    """

    if threshold_miles < 0:
        raise ValueError("threshold_miles must be >= 0")
    target = target_coordinate(target_address)
    return evaluate_prepared(
        day,
        time_slot,
        target,
        roster,
        templates,
        group_scheduled_by_rep(appointments),
        threshold_miles,
    )
