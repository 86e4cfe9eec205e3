"""Application configuration and settings management."""

from pathlib import Path
from typing import Any

import json
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime configuration loaded from environment variables or defaults."""

    model_config = SettingsConfigDict(
        env_prefix="FB_",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
    )

    app_name: str = "Fieldbook Availability API"
    api_prefix: str = "/api"
    data_root: Path = Field(default=Path("data"), description="Root directory for static data files.")
    reps_file: Path = Field(
        default=Path("data/reps.json"),
        description="Sales rep roster including home addresses.",
    )
    availability_file: Path = Field(
        default=Path("data/availability.json"),
        description="Weekly availability templates keyed by rep id.",
    )
    appointments_file: Path = Field(
        default=Path("data/appointments.json"),
        description="Booking ledger snapshot.",
    )

    # Distance thresholds (miles). Each consumer reads its own value.
    booking_radius_miles: float = Field(
        default=45.0,
        gt=0.0,
        description="Maximum anchor-to-customer distance for a rep to be offered in the booking grid.",
    )
    mileage_issue_miles: float = Field(
        default=60.0,
        gt=0.0,
        description="Booked appointments at or beyond this distance from their anchor are flagged.",
    )
    rep_range_miles: float = Field(
        default=75.0,
        gt=0.0,
        description="Radius used for 'within range' rep listings.",
    )
    coverage_radius_miles: float = Field(
        default=45.0,
        gt=0.0,
        description="Radius from a rep home that counts a zip code as covered.",
    )

    grid_horizon_days: int = Field(default=5, ge=1, le=90)
    rep_schedule_weeks: int = Field(default=3, ge=1, le=12)
    grid_max_workers: int = Field(
        default=1,
        ge=1,
        description="Thread pool size for per-day grid evaluation (1 = evaluate inline).",
    )

    frontend_allowed_origins: tuple[str, ...] = Field(
        default=(
            "http://localhost:3000",
            "http://127.0.0.1:3000",
        ),
        description="Permitted web origins for browser clients (CORS).",
    )

    @field_validator("data_root", "reps_file", "availability_file", "appointments_file", mode="before")
    @classmethod
    def _expand_path(cls, value: Any) -> Path:
        path_value = value if isinstance(value, Path) else Path(str(value))
        return path_value.expanduser().resolve()

    @field_validator("frontend_allowed_origins", mode="before")
    @classmethod
    def _parse_str_tuple_from_env(cls, value: Any) -> tuple[str, ...]:
        """Parse string tuple from environment variable (comma-separated or JSON array)."""
        if isinstance(value, tuple):
            return value
        if isinstance(value, list):
            return tuple(str(item) for item in value)
        if isinstance(value, str):
            try:
                parsed = json.loads(value)
                if isinstance(parsed, list):
                    return tuple(str(item) for item in parsed)
            except (json.JSONDecodeError, TypeError):
                pass
            if "," in value:
                return tuple(item.strip() for item in value.split(",") if item.strip())
            if value.strip():
                return (value.strip(),)
        return tuple()


settings = Settings()
