"""Availability grid assembly over a multi-day horizon."""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from datetime import date, timedelta
from typing import Iterable, Sequence

from ...config import settings
from ...models.domain import (
    TIME_SLOTS,
    Address,
    Appointment,
    SalesRep,
    Slot,
    WeeklyAvailabilityTemplate,
)
from .slots import evaluate_prepared, group_scheduled_by_rep, target_coordinate

logger = logging.getLogger(__name__)

DAYS_PER_WEEK = 7


def horizon_dates(start_date: date, horizon_days: int, week_offset: int = 0) -> list[date]:
    """Consecutive calendar days starting ``week_offset`` weeks after ``start_date``."""

    if horizon_days < 1:
        raise ValueError("horizon_days must be >= 1")
    first = start_date + timedelta(days=DAYS_PER_WEEK * week_offset)
    return [first + timedelta(days=offset) for offset in range(horizon_days)]


def week_dates(reference_date: date, week_offset: int = 0, weeks: int = 1) -> list[date]:
    """Whole Monday-to-Sunday weeks, starting with the week containing ``reference_date``."""

    if weeks < 1:
        raise ValueError("weeks must be >= 1")
    monday = reference_date - timedelta(days=reference_date.weekday())
    return horizon_dates(monday, DAYS_PER_WEEK * weeks, week_offset)


def build_grid(
    target_address: Address,
    start_date: date,
    horizon_days: int,
    roster: Sequence[SalesRep],
    templates: WeeklyAvailabilityTemplate,
    appointments: Iterable[Appointment],
    threshold_miles: float,
    *,
    week_offset: int = 0,
    max_workers: int | None = None,
) -> list[list[Slot]]:
    """Evaluate every (day, slot) cell of the horizon.

    Returns one list per day, each holding the slots in ``TIME_SLOTS`` order.
    The appointment snapshot is read once; every cell is evaluated from it
    independently, so a fresh snapshot must be passed after any booking.
    """

    if threshold_miles < 0:
        raise ValueError("threshold_miles must be >= 0")
    target = target_coordinate(target_address)
    days = horizon_dates(start_date, horizon_days, week_offset)
    roster = tuple(roster)
    by_rep = group_scheduled_by_rep(appointments)
    workers = max_workers if max_workers is not None else settings.grid_max_workers

    def evaluate_day(day: date) -> list[Slot]:
        return [
            evaluate_prepared(day, time_slot, target, roster, templates, by_rep, threshold_miles)
            for time_slot in TIME_SLOTS
        ]

    grid: list[list[Slot]]
    if workers <= 1 or len(days) == 1:
        grid = [evaluate_day(day) for day in days]
    else:
        grid = [[] for _ in days]
        with ThreadPoolExecutor(max_workers=min(workers, len(days))) as executor:
            futures = {executor.submit(evaluate_day, day): index for index, day in enumerate(days)}
            for future in as_completed(futures):
                grid[futures[future]] = future.result()

    open_slots = sum(1 for day_slots in grid for slot in day_slots if slot.available_count)
    logger.info(
        f"Built availability grid {days[0]}..{days[-1]} for {len(roster)} reps: "
        f"{open_slots}/{len(days) * len(TIME_SLOTS)} slots with availability"
    )
    return grid
