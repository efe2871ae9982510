"""Location provider contract and single-shot capture used when completing visits."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Protocol

from ...errors import LocationDenied, LocationUnavailable
from ...models.domain import Coordinate

logger = logging.getLogger(__name__)


class AuthorizationStatus(str, Enum):
    AUTHORIZED_ALWAYS = "authorized_always"
    AUTHORIZED_WHEN_IN_USE = "authorized_when_in_use"
    NOT_DETERMINED = "not_determined"
    DENIED = "denied"
    RESTRICTED = "restricted"

    @property
    def is_authorized(self) -> bool:
        return self in (AuthorizationStatus.AUTHORIZED_ALWAYS, AuthorizationStatus.AUTHORIZED_WHEN_IN_USE)


class CaptureOutcome(str, Enum):
    FIXED = "fixed"
    DENIED = "denied"
    UNAVAILABLE = "unavailable"
    EMPTY = "empty"


class LocationProvider(Protocol):
    """Device geolocation: permission handling plus one-off fixes (no continuous tracking)."""

    def authorization_status(self) -> AuthorizationStatus: ...

    async def request_authorization(self) -> AuthorizationStatus: ...

    async def request_location(self) -> Optional[Coordinate]: ...


@dataclass(frozen=True, slots=True)
class LocationCapture:
    outcome: CaptureOutcome
    coordinate: Optional[Coordinate] = None
    error: Optional[str] = None

    @property
    def should_warn(self) -> bool:
        return self.outcome in (CaptureOutcome.DENIED, CaptureOutcome.UNAVAILABLE)


async def capture_location(provider: LocationProvider) -> LocationCapture:
    """Resolve permission and request a single fix, reporting the branch taken."""
    status = provider.authorization_status()
    if status == AuthorizationStatus.NOT_DETERMINED:
        status = await provider.request_authorization()
        logger.info(f"Location authorization resolved to {status.value}")

    if not status.is_authorized:
        return LocationCapture(outcome=CaptureOutcome.DENIED)

    try:
        coordinate = await provider.request_location()
    except LocationDenied:
        logger.info("Location permission revoked before a fix was obtained")
        return LocationCapture(outcome=CaptureOutcome.DENIED)
    except LocationUnavailable as exc:
        logger.warning(f"Location fix failed: {exc.message}")
        return LocationCapture(outcome=CaptureOutcome.UNAVAILABLE, error=exc.message)

    if coordinate is None:
        return LocationCapture(outcome=CaptureOutcome.EMPTY)
    return LocationCapture(outcome=CaptureOutcome.FIXED, coordinate=coordinate)


class ReportedLocationProvider:
    """Provider backed by a coordinate reported by a remote device.

    Reports ``DENIED`` when the device sent no coordinate, which completes the
    visit without a location.
    """

    def __init__(self, coordinate: Optional[Coordinate] = None) -> None:
        self.coordinate = coordinate

    def authorization_status(self) -> AuthorizationStatus:
        if self.coordinate is None:
            return AuthorizationStatus.DENIED
        return AuthorizationStatus.AUTHORIZED_WHEN_IN_USE

    async def request_authorization(self) -> AuthorizationStatus:
        return self.authorization_status()

    async def request_location(self) -> Optional[Coordinate]:
        if self.coordinate is None:
            raise LocationUnavailable()
        return self.coordinate
