"""Availability engine: anchors, slot evaluation and grid assembly."""

from .anchors import resolve_anchor
from .booking import propose_booking, revalidate_booking
from .grid import build_grid, horizon_dates, week_dates
from .rep_schedule import RepSlot, RepSlotState, build_rep_schedule
from .slots import classify_slot_status, evaluate_slot

__all__ = [
    "resolve_anchor",
    "evaluate_slot",
    "classify_slot_status",
    "build_grid",
    "horizon_dates",
    "week_dates",
    "build_rep_schedule",
    "RepSlot",
    "RepSlotState",
    "propose_booking",
    "revalidate_booking",
]
