"""Per-visit editing and completion."""

from .location import (
    AuthorizationStatus,
    CaptureOutcome,
    LocationCapture,
    LocationProvider,
    ReportedLocationProvider,
    capture_location,
)
from .session import CancellationToken, CompletionState, VisitSession

__all__ = [
    "AuthorizationStatus",
    "CaptureOutcome",
    "LocationCapture",
    "LocationProvider",
    "ReportedLocationProvider",
    "capture_location",
    "CancellationToken",
    "CompletionState",
    "VisitSession",
]
