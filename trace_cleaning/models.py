"""Pydantic models for GPS traces and pipeline results."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from date_utils import format_timestamp


class Point(BaseModel):
    """A single GPS sample. Coordinates are WGS84 degrees."""

    lat: float = Field(strict=True, allow_inf_nan=False)
    lng: float = Field(strict=True, allow_inf_nan=False)
    timestamp: datetime | None = None

    model_config = ConfigDict(frozen=True)

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"lat": self.lat, "lng": self.lng}
        if self.timestamp is not None:
            payload["timestamp"] = format_timestamp(self.timestamp)
        return payload


# Ordered in recording order; stages never reorder.
Trace = list[Point]


class PipelineOptions(BaseModel):
    """Request-scoped stage switches."""

    snap: bool = False
    smooth: bool = False

    model_config = ConfigDict(frozen=True)

    @classmethod
    def from_query(cls, snap: str | None, smooth: str | None) -> PipelineOptions:
        """Only the exact string ``true`` enables a stage."""
        return cls(snap=snap == "true", smooth=smooth == "true")


class PipelineResult(BaseModel):
    """Cleaned trace plus provenance counts for one request."""

    coordinates: list[Point] = Field(default_factory=list)
    original_count: int
    processed_count: int
    road_snapped: bool = False
    smoothed: bool = False
    invalid_count: int = 0
    noise_removed_count: int = 0
    snap_applied: bool = False
    snap_error: str | None = None

    model_config = ConfigDict(frozen=True)

    def to_response(self) -> dict[str, Any]:
        return {
            "coordinates": [point.to_payload() for point in self.coordinates],
            "metadata": {
                "originalCount": self.original_count,
                "processedCount": self.processed_count,
                "roadSnapped": self.road_snapped,
                "smoothed": self.smoothed,
                "invalidCount": self.invalid_count,
                "noiseRemovedCount": self.noise_removed_count,
                "snapApplied": self.snap_applied,
            },
        }
