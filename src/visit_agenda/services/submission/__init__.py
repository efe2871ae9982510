"""Submission of planned visits to the remote visit service."""

from .coordinator import (
    OutcomeStatus,
    SubmissionCoordinator,
    SubmissionOutcome,
    SubmissionReport,
    build_payload,
    submission_visit_id,
)
from .gateway import HttpVisitGateway, RemoteVisitGateway

__all__ = [
    "HttpVisitGateway",
    "RemoteVisitGateway",
    "OutcomeStatus",
    "SubmissionCoordinator",
    "SubmissionOutcome",
    "SubmissionReport",
    "build_payload",
    "submission_visit_id",
]
