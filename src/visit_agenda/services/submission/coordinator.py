"""Sequential submission of the planned agenda to the remote visit service."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import timezone
from enum import Enum
from typing import List, Optional, Sequence

from ...errors import NoVisits, SubmissionInProgress, VisitAgendaError
from ...models.domain import Visit
from ...schemas.visits import VisitPayload
from .gateway import RemoteVisitGateway

logger = logging.getLogger(__name__)

SUCCESS_MESSAGE = "Visits submitted successfully."

# Upper 53 bits of the visit UUID: stable per visit and exact in JSON number parsers.
_SUBMISSION_ID_SHIFT = 128 - 53


def submission_visit_id(visit: Visit) -> int:
    return visit.id.int >> _SUBMISSION_ID_SHIFT


def build_payload(visit: Visit, commercial_id: int) -> VisitPayload:
    planned_utc = visit.planned_time.astimezone(timezone.utc)
    return VisitPayload(
        visit_id=submission_visit_id(visit),
        commercial_id=commercial_id,
        date=planned_utc.isoformat(timespec="seconds"),
        client_ids=[visit.client.id],
    )


class OutcomeStatus(str, Enum):
    ACCEPTED = "accepted"
    FAILED = "failed"
    NOT_ATTEMPTED = "not_attempted"


@dataclass(slots=True)
class SubmissionOutcome:
    visit: Visit
    status: OutcomeStatus
    payload: Optional[VisitPayload] = None
    error: Optional[str] = None

    @property
    def sequence(self) -> int:
        return self.visit.sequence

    @property
    def client_id(self) -> int:
        return self.visit.client.id


@dataclass(slots=True)
class SubmissionReport:
    """Per-visit result of one submission run, in agenda order."""

    outcomes: List[SubmissionOutcome] = field(default_factory=list)
    error_message: Optional[str] = None

    @property
    def success(self) -> bool:
        return bool(self.outcomes) and all(item.status == OutcomeStatus.ACCEPTED for item in self.outcomes)

    @property
    def accepted(self) -> list[SubmissionOutcome]:
        return [item for item in self.outcomes if item.status == OutcomeStatus.ACCEPTED]

    @property
    def failed(self) -> Optional[SubmissionOutcome]:
        return next((item for item in self.outcomes if item.status == OutcomeStatus.FAILED), None)

    def pending_visits(self) -> list[Visit]:
        """Visits not accepted by the service, for callers that retry only the remainder."""
        return [item.visit for item in self.outcomes if item.status != OutcomeStatus.ACCEPTED]


class SubmissionCoordinator:
    """Drives the gateway one visit at a time, strictly in sequence order.

    The first failure stops the run. Visits accepted before it stay accepted
    remotely and the local plan is never modified. Requests carry no idempotency
    key, so re-submitting a partially accepted plan sends accepted visits again.
    Only one run may be in flight; a second call raises ``SubmissionInProgress``.
    """

    def __init__(self, gateway: RemoteVisitGateway, commercial_id: int) -> None:
        self.gateway = gateway
        self.commercial_id = commercial_id
        self.is_submitting = False
        self.error_message: Optional[str] = None
        self.success_message: Optional[str] = None
        self.last_report: Optional[SubmissionReport] = None
        self.recent_visits: list[VisitPayload] = []

    async def submit_agenda(self, plan: Sequence[Visit]) -> SubmissionReport:
        if self.is_submitting:
            raise SubmissionInProgress()
        if not plan:
            self.error_message = NoVisits.default_message
            raise NoVisits()

        ordered = sorted(plan, key=lambda visit: visit.sequence)
        report = SubmissionReport(
            outcomes=[SubmissionOutcome(visit=visit, status=OutcomeStatus.NOT_ATTEMPTED) for visit in ordered]
        )
        self.is_submitting = True
        self.success_message = None
        self.error_message = None
        try:
            for outcome in report.outcomes:
                payload = build_payload(outcome.visit, self.commercial_id)
                outcome.payload = payload
                try:
                    await self.gateway.submit_visit(payload)
                except VisitAgendaError as exc:
                    self._stop_at(report, outcome, exc.message)
                    break
                except Exception as exc:
                    logger.exception(f"Unexpected gateway error for visit {outcome.sequence}")
                    self._stop_at(report, outcome, str(exc) or type(exc).__name__)
                    break
                outcome.status = OutcomeStatus.ACCEPTED

            if report.success:
                self.success_message = SUCCESS_MESSAGE
                logger.info(f"Submitted {len(ordered)} visits for commercial {self.commercial_id}")
            else:
                self.error_message = report.error_message
        finally:
            self.is_submitting = False
            self.last_report = report
        return report

    @staticmethod
    def _stop_at(report: SubmissionReport, outcome: SubmissionOutcome, message: str) -> None:
        outcome.status = OutcomeStatus.FAILED
        outcome.error = message
        report.error_message = message
        logger.error(f"Submission stopped at visit {outcome.sequence} of {len(report.outcomes)}: {message}")

    async def load_recent_visits(self, limit: int = 10) -> list[VisitPayload]:
        """Fetch the latest visits from the service, raising gateway errors to the caller."""
        visits = await self.gateway.fetch_recent_visits(limit)
        self.recent_visits = visits
        self.error_message = None
        return visits

    async def refresh_recent_visits(self, limit: int = 10) -> list[VisitPayload]:
        try:
            return await self.load_recent_visits(limit)
        except VisitAgendaError as exc:
            self.error_message = exc.message
            logger.warning(f"Could not refresh recent visits: {exc.message}")
            return []
