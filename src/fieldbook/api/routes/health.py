"""Health endpoints."""

from __future__ import annotations

from fastapi import APIRouter, status

from ...data import repository

router = APIRouter(tags=["health"])


@router.get("/health", status_code=status.HTTP_200_OK)
def health_root() -> dict:
    """Simple health check endpoint that doesn't require any dependencies."""
    return {"status": "ok"}


@router.get("/health/data", status_code=status.HTTP_200_OK)
def health_data() -> dict:
    """Report whether the roster, templates and ledger can be loaded."""
    try:
        reps = repository.load_reps()
        templates = repository.load_availability()
        appointments = repository.load_appointments()
    except (FileNotFoundError, ValueError) as exc:
        return {"healthy": False, "error": str(exc)}

    return {
        "healthy": True,
        "reps": len(reps),
        "reps_with_templates": sum(1 for rep in reps if templates.weekly_slot_count(rep.rep_id)),
        "reps_missing_coordinates": [rep.rep_id for rep in reps if not rep.home_address.has_coordinates],
        "appointments": len(appointments),
        "scheduled_appointments": sum(1 for apt in appointments if apt.is_scheduled),
    }
