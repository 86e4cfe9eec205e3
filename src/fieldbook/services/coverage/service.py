"""Home-based range listings and zip code coverage."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Mapping, Sequence

from ...models.domain import Coordinate, MissingCoordinateError, SalesRep
from ..geospatial import distance_miles

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class RepInRange:
    rep: SalesRep
    distance_miles: float


@dataclass(slots=True)
class CoverageResult:
    covered: list[str]
    uncovered: list[str]

    @property
    def total(self) -> int:
        return len(self.covered) + len(self.uncovered)

    @property
    def percentage(self) -> float:
        if not self.total:
            return 0.0
        return round(len(self.covered) / self.total * 100, 1)


def _home_coordinates(roster: Sequence[SalesRep]) -> list[tuple[SalesRep, Coordinate]]:
    homes: list[tuple[SalesRep, Coordinate]] = []
    for rep in roster:
        try:
            homes.append((rep, rep.home_address.coordinate()))
        except MissingCoordinateError as exc:
            logger.warning(f"Rep {rep.rep_id} excluded from coverage: {exc}")
    return homes


def reps_within_range(point: Coordinate, roster: Sequence[SalesRep], radius_miles: float) -> list[RepInRange]:
    """Reps whose home lies within ``radius_miles`` of ``point``, nearest first."""

    matches: list[RepInRange] = []
    for rep, home in _home_coordinates(roster):
        distance = distance_miles(home, point)
        if distance <= radius_miles:
            matches.append(RepInRange(rep=rep, distance_miles=distance))
    matches.sort(key=lambda item: (item.distance_miles, item.rep.rep_id))
    return matches


def covered_zip_codes(
    zip_centroids: Mapping[str, Coordinate | None],
    roster: Sequence[SalesRep],
    radius_miles: float,
) -> CoverageResult:
    """Split zip codes into those within ``radius_miles`` of any rep home and the rest.

    Zips without a centroid are counted as uncovered.
    """

    homes = [home for _, home in _home_coordinates(roster)]
    covered: list[str] = []
    uncovered: list[str] = []
    for zip_code, centroid in zip_centroids.items():
        if centroid is not None and any(distance_miles(home, centroid) <= radius_miles for home in homes):
            covered.append(zip_code)
        else:
            uncovered.append(zip_code)
    return CoverageResult(covered=covered, uncovered=uncovered)
