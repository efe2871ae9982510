"""Visit agenda planning, completion and submission for field commercial staff."""

from .errors import (
    CaptureInProgress,
    DecodingError,
    GatewayUnavailable,
    InvalidResponse,
    InvalidURL,
    LocationDenied,
    LocationUnavailable,
    NoClientsSelected,
    NoVisits,
    ServerError,
    SubmissionInProgress,
    VisitAgendaError,
)
from .models.domain import AttachmentType, Client, Coordinate, Visit, VisitAttachment, VisitTag
from .persistence.visit_store import VisitStore
from .services.agenda import AgendaPlanner
from .services.lifecycle import VisitSession
from .services.submission import HttpVisitGateway, SubmissionCoordinator

__all__ = [
    "AgendaPlanner",
    "AttachmentType",
    "CaptureInProgress",
    "Client",
    "Coordinate",
    "DecodingError",
    "GatewayUnavailable",
    "HttpVisitGateway",
    "InvalidResponse",
    "InvalidURL",
    "LocationDenied",
    "LocationUnavailable",
    "NoClientsSelected",
    "NoVisits",
    "ServerError",
    "SubmissionCoordinator",
    "SubmissionInProgress",
    "Visit",
    "VisitAgendaError",
    "VisitAttachment",
    "VisitSession",
    "VisitStore",
    "VisitTag",
]
