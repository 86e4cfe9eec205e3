"""Operations dashboard schemas: mileage audit and coverage."""

from __future__ import annotations

from datetime import date
from typing import Dict, List, Literal, Optional, Tuple

from pydantic import BaseModel, Field


class MileageRecordModel(BaseModel):
    appointment_id: str
    rep_id: str
    date: date
    time_slot: Literal["10am", "2pm", "7pm"]
    distance_miles: float
    anchor_source: Literal["home", "last-appointment"]
    flagged: bool


class MileageSummaryModel(BaseModel):
    audited: int
    issues: int
    average_distance_miles: float
    threshold_miles: float


class MileageAuditResponse(BaseModel):
    summary: MileageSummaryModel
    issues: List[MileageRecordModel]
    records: Dict[str, MileageRecordModel]


class RepInRangeModel(BaseModel):
    rep_id: str
    name: str
    color: str = ""
    distance_miles: float


class RepsInRangeResponse(BaseModel):
    radius_miles: float
    items: List[RepInRangeModel]


class ZipCoverageRequest(BaseModel):
    zip_centroids: Dict[str, Optional[Tuple[float, float]]] = Field(
        ..., description="Zip code → (lat, lng) centroid; null when unknown."
    )
    radius_miles: Optional[float] = Field(default=None, gt=0)


class ZipCoverageResponse(BaseModel):
    radius_miles: float
    total: int
    covered_count: int
    percentage: float
    covered: List[str]
    uncovered: List[str]
