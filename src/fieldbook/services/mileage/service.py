"""Mileage audit of already-booked appointments."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from typing import Dict, Iterable, Optional, Sequence

from ...models.domain import Appointment, MileageRecord, MissingCoordinateError, SalesRep
from ..availability.anchors import resolve_anchor
from ..availability.slots import group_scheduled_by_rep
from ..geospatial import distance_miles

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class MileageSummary:
    audited: int
    issues: int
    average_distance_miles: float
    threshold_miles: float


def audit_appointments(
    appointments: Iterable[Appointment],
    roster: Sequence[SalesRep],
    mileage_threshold: float,
    *,
    start: Optional[date] = None,
    end: Optional[date] = None,
) -> Dict[str, MileageRecord]:
    """Resolve each scheduled appointment's anchor and measure the drive to it.

    Anchors are resolved against the rep's full scheduled set, so a window
    given by ``start``/``end`` limits which appointments are reported, not
    which ones can act as anchors. Records at or beyond ``mileage_threshold``
    are flagged.
    """

    if mileage_threshold < 0:
        raise ValueError("mileage_threshold must be >= 0")

    reps = {rep.rep_id: rep for rep in roster}
    by_rep = group_scheduled_by_rep(appointments)
    records: Dict[str, MileageRecord] = {}

    for rep_id, own in by_rep.items():
        rep = reps.get(rep_id)
        if rep is None:
            logger.warning(f"Skipping {len(own)} appointments for unknown rep {rep_id}")
            continue
        if not rep.home_address.has_coordinates:
            logger.warning(f"Skipping {len(own)} appointments for rep {rep_id}: home address has no coordinates")
            continue

        for apt in sorted(own, key=lambda item: (item.date, item.time_slot.precedence, item.appointment_id)):
            if start is not None and apt.date < start:
                continue
            if end is not None and apt.date > end:
                continue
            try:
                anchor = resolve_anchor(rep, apt.date, own, apt.time_slot)
                distance = distance_miles(anchor.coordinate, apt.address.coordinate())
            except MissingCoordinateError as exc:
                logger.warning(f"Skipping mileage audit for appointment {apt.appointment_id}: {exc}")
                continue

            records[apt.appointment_id] = MileageRecord(
                appointment_id=apt.appointment_id,
                rep_id=rep_id,
                date=apt.date,
                time_slot=apt.time_slot,
                distance_miles=distance,
                anchor_source=anchor.source,
                flagged=distance >= mileage_threshold,
            )

    flagged = sum(1 for record in records.values() if record.flagged)
    logger.info(f"Audited {len(records)} appointments, {flagged} at or beyond {mileage_threshold:.0f} mi")
    return records


def mileage_issues(records: Dict[str, MileageRecord]) -> list[MileageRecord]:
    return sorted(
        (record for record in records.values() if record.flagged),
        key=lambda record: (-record.distance_miles, record.appointment_id),
    )


def summarize_mileage(records: Dict[str, MileageRecord], threshold_miles: float) -> MileageSummary:
    distances = [record.distance_miles for record in records.values()]
    return MileageSummary(
        audited=len(records),
        issues=sum(1 for record in records.values() if record.flagged),
        average_distance_miles=sum(distances) / len(distances) if distances else 0.0,
        threshold_miles=threshold_miles,
    )
