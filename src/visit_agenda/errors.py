"""Error taxonomy for agenda planning, visit completion and submission."""

from __future__ import annotations


class VisitAgendaError(Exception):
    """Base class for recoverable agenda errors. ``message`` is safe to show to users."""

    default_message = "Unexpected visit agenda error."

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class NoClientsSelected(VisitAgendaError, ValueError):
    default_message = "Select at least one client to generate the agenda."


class NoVisits(VisitAgendaError, ValueError):
    default_message = "There are no planned visits to submit."


class InvalidURL(VisitAgendaError):
    default_message = "The visit service URL is not valid."


class InvalidResponse(VisitAgendaError):
    default_message = "The visit service returned an invalid response."


class ServerError(VisitAgendaError):
    """Non-2xx answer from the visit service; ``message`` is the response body."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        self.status_code = status_code
        super().__init__(message or "Unknown error")


class GatewayUnavailable(VisitAgendaError):
    default_message = "The visit service could not be reached."


class DecodingError(VisitAgendaError):
    default_message = "The visit service data could not be decoded."


class LocationDenied(VisitAgendaError):
    default_message = "Location permission was denied."


class LocationUnavailable(VisitAgendaError):
    default_message = "The current location could not be determined."


class CaptureInProgress(VisitAgendaError):
    default_message = "The visit is already being completed."


class SubmissionInProgress(VisitAgendaError):
    default_message = "The agenda is already being submitted."
