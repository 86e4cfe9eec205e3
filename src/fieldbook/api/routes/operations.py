"""Operations dashboard endpoints: mileage issues and rep coverage."""

from __future__ import annotations

from datetime import date
from typing import Optional

from fastapi import APIRouter, HTTPException, Query, status

from ...config import settings
from ...data import repository
from ...models.domain import MileageRecord
from ...schemas.operations import (
    MileageAuditResponse,
    MileageRecordModel,
    MileageSummaryModel,
    RepInRangeModel,
    RepsInRangeResponse,
    ZipCoverageRequest,
    ZipCoverageResponse,
)
from ...services.coverage.service import covered_zip_codes, reps_within_range
from ...services.mileage.service import audit_appointments, mileage_issues, summarize_mileage

router = APIRouter(tags=["operations"])


def _record_model(record: MileageRecord) -> MileageRecordModel:
    return MileageRecordModel(
        appointment_id=record.appointment_id,
        rep_id=record.rep_id,
        date=record.date,
        time_slot=record.time_slot.value,
        distance_miles=round(record.distance_miles, 2),
        anchor_source=record.anchor_source.value,
        flagged=record.flagged,
    )


@router.get("/appointments/mileage-audit", response_model=MileageAuditResponse, status_code=status.HTTP_200_OK)
def mileage_audit(
    start: Optional[date] = Query(default=None),
    end: Optional[date] = Query(default=None),
    threshold_miles: Optional[float] = Query(default=None, gt=0),
) -> MileageAuditResponse:
    threshold = threshold_miles or settings.mileage_issue_miles
    if start and end and start > end:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail="start must be on or before end.")
    try:
        reps = repository.load_reps()
        appointments = repository.load_appointments()
    except (FileNotFoundError, ValueError) as exc:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=f"Scheduling data unavailable: {exc}",
        ) from exc

    records = audit_appointments(appointments, reps, threshold, start=start, end=end)
    summary = summarize_mileage(records, threshold)
    return MileageAuditResponse(
        summary=MileageSummaryModel(
            audited=summary.audited,
            issues=summary.issues,
            average_distance_miles=round(summary.average_distance_miles, 2),
            threshold_miles=summary.threshold_miles,
        ),
        issues=[_record_model(record) for record in mileage_issues(records)],
        records={appointment_id: _record_model(record) for appointment_id, record in records.items()},
    )


@router.get("/coverage/reps", response_model=RepsInRangeResponse, status_code=status.HTTP_200_OK)
def reps_in_range(
    lat: float = Query(..., ge=-90, le=90),
    lng: float = Query(..., ge=-180, le=180),
    radius_miles: Optional[float] = Query(default=None, gt=0),
) -> RepsInRangeResponse:
    radius = radius_miles or settings.rep_range_miles
    try:
        reps = repository.load_reps()
    except (FileNotFoundError, ValueError) as exc:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc)) from exc

    matches = reps_within_range((lat, lng), reps, radius)
    return RepsInRangeResponse(
        radius_miles=radius,
        items=[
            RepInRangeModel(
                rep_id=match.rep.rep_id,
                name=match.rep.name,
                color=match.rep.color,
                distance_miles=round(match.distance_miles, 2),
            )
            for match in matches
        ],
    )


@router.post("/coverage/zips", response_model=ZipCoverageResponse, status_code=status.HTTP_200_OK)
def zip_coverage(payload: ZipCoverageRequest) -> ZipCoverageResponse:
    radius = payload.radius_miles or settings.coverage_radius_miles
    try:
        reps = repository.load_reps()
    except (FileNotFoundError, ValueError) as exc:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc)) from exc

    result = covered_zip_codes(payload.zip_centroids, reps, radius)
    return ZipCoverageResponse(
        radius_miles=radius,
        total=result.total,
        covered_count=len(result.covered),
        percentage=result.percentage,
        covered=result.covered,
        uncovered=result.uncovered,
    )
