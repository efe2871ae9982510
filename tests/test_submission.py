import asyncio
from datetime import date, datetime, timezone
from typing import Optional

import pytest

from visit_agenda.errors import NoVisits, ServerError, SubmissionInProgress
from visit_agenda.models.domain import Client, Visit
from visit_agenda.schemas.visits import VisitPayload
from visit_agenda.services.submission.coordinator import (
    SUCCESS_MESSAGE,
    OutcomeStatus,
    SubmissionCoordinator,
    build_payload,
    submission_visit_id,
)


def _plan(count: int) -> list[Visit]:
    visits = []
    for index in range(count):
        client = Client(
            id=(index + 1) * 10,
            name=f"Client {index + 1}",
            address="123 Main St",
            latitude=40.7128,
            longitude=-74.0060,
        )
        visits.append(
            Visit(
                sequence=index + 1,
                client=client,
                scheduled_date=date(2025, 1, 2),
                planned_time=datetime(2025, 1, 2, 9 + index, 0, tzinfo=timezone.utc),
            )
        )
    return visits


class DummyGateway:
    def __init__(self, fail_on: Optional[int] = None, recent: Optional[list[VisitPayload]] = None):
        self.fail_on = fail_on
        self.recent = recent or []
        self.submitted: list[VisitPayload] = []
        self.fetch_limits: list[int] = []

    async def submit_visit(self, payload):
        self.submitted.append(payload)
        if self.fail_on is not None and len(self.submitted) == self.fail_on:
            raise ServerError("Backend rejected visit", status_code=422)

    async def fetch_recent_visits(self, limit):
        self.fetch_limits.append(limit)
        if self.fail_on is not None:
            raise ServerError("Service unavailable", status_code=503)
        return self.recent


def test_build_payload_uses_utc_timestamp_and_client_id():
    visit = _plan(1)[0]

    payload = build_payload(visit, commercial_id=7)

    assert payload.commercial_id == 7
    assert payload.client_ids == [10]
    assert payload.date == "2025-01-02T09:00:00+00:00"
    assert payload.visit_id == submission_visit_id(visit)


def test_submission_visit_id_is_stable_and_unique():
    first, second = _plan(2)

    assert submission_visit_id(first) == submission_visit_id(first)
    assert submission_visit_id(first) != submission_visit_id(second)
    assert 0 <= submission_visit_id(first) < 2**53


def test_submit_agenda_success_submits_in_order():
    gateway = DummyGateway()
    coordinator = SubmissionCoordinator(gateway, commercial_id=7)
    plan = _plan(3)

    report = asyncio.run(coordinator.submit_agenda(plan))

    assert [payload.client_ids[0] for payload in gateway.submitted] == [10, 20, 30]
    assert report.success is True
    assert [item.status for item in report.outcomes] == [OutcomeStatus.ACCEPTED] * 3
    assert coordinator.success_message == SUCCESS_MESSAGE
    assert coordinator.error_message is None
    assert coordinator.is_submitting is False


def test_submit_agenda_follows_sequence_order():
    gateway = DummyGateway()
    coordinator = SubmissionCoordinator(gateway, commercial_id=7)
    plan = _plan(3)
    plan.reverse()

    asyncio.run(coordinator.submit_agenda(plan))

    assert [payload.client_ids[0] for payload in gateway.submitted] == [10, 20, 30]


def test_submit_agenda_stops_on_first_failure():
    gateway = DummyGateway(fail_on=2)
    coordinator = SubmissionCoordinator(gateway, commercial_id=7)
    plan = _plan(4)
    snapshot = [(visit.id, visit.sequence) for visit in plan]

    report = asyncio.run(coordinator.submit_agenda(plan))

    assert len(gateway.submitted) == 2
    assert report.success is False
    assert [item.status for item in report.outcomes] == [
        OutcomeStatus.ACCEPTED,
        OutcomeStatus.FAILED,
        OutcomeStatus.NOT_ATTEMPTED,
        OutcomeStatus.NOT_ATTEMPTED,
    ]
    assert report.failed.error == "Backend rejected visit"
    assert [visit.client.id for visit in report.pending_visits()] == [20, 30, 40]
    assert coordinator.error_message == "Backend rejected visit"
    assert coordinator.success_message is None
    assert coordinator.is_submitting is False
    assert [(visit.id, visit.sequence) for visit in plan] == snapshot


def test_submit_empty_agenda_fails_without_network_calls():
    gateway = DummyGateway()
    coordinator = SubmissionCoordinator(gateway, commercial_id=7)

    with pytest.raises(NoVisits):
        asyncio.run(coordinator.submit_agenda([]))

    assert gateway.submitted == []
    assert coordinator.error_message == NoVisits.default_message
    assert coordinator.is_submitting is False


def test_refresh_recent_visits_returns_remote_payloads():
    recent = [VisitPayload(visit_id=1000, commercial_id=7, date="2025-01-02T09:00:00Z", client_ids=[10])]
    gateway = DummyGateway(recent=recent)
    coordinator = SubmissionCoordinator(gateway, commercial_id=7)

    visits = asyncio.run(coordinator.refresh_recent_visits(limit=5))

    assert visits == recent
    assert coordinator.recent_visits == recent
    assert gateway.fetch_limits == [5]


def test_refresh_recent_visits_surfaces_errors():
    gateway = DummyGateway(fail_on=1)
    coordinator = SubmissionCoordinator(gateway, commercial_id=7)

    visits = asyncio.run(coordinator.refresh_recent_visits())

    assert visits == []
    assert coordinator.error_message == "Service unavailable"
    assert gateway.fetch_limits == [10]


class SlowGateway(DummyGateway):
    async def submit_visit(self, payload):
        await asyncio.sleep(0.01)
        await super().submit_visit(payload)


def test_overlapping_submission_is_rejected_and_order_is_kept():
    gateway = SlowGateway()
    coordinator = SubmissionCoordinator(gateway, commercial_id=7)
    plan = _plan(3)

    async def scenario():
        return await asyncio.gather(
            coordinator.submit_agenda(plan), coordinator.submit_agenda(plan), return_exceptions=True
        )

    first, second = asyncio.run(scenario())

    assert first.success is True
    assert isinstance(second, SubmissionInProgress)
    assert [payload.client_ids[0] for payload in gateway.submitted] == [10, 20, 30]
    assert coordinator.is_submitting is False

    report = asyncio.run(coordinator.submit_agenda(plan))
    assert report.success is True


def test_unexpected_gateway_error_is_reported_as_failure():
    class BrokenGateway(DummyGateway):
        async def submit_visit(self, payload):
            await super().submit_visit(payload)
            raise RuntimeError("socket closed")

    coordinator = SubmissionCoordinator(BrokenGateway(), commercial_id=7)

    report = asyncio.run(coordinator.submit_agenda(_plan(2)))

    assert report.success is False
    assert [item.status for item in report.outcomes] == [OutcomeStatus.FAILED, OutcomeStatus.NOT_ATTEMPTED]
    assert report.failed.error == "socket closed"
    assert coordinator.error_message == "socket closed"
    assert coordinator.is_submitting is False


def test_successful_refresh_clears_previous_error():
    gateway = DummyGateway(fail_on=1)
    coordinator = SubmissionCoordinator(gateway, commercial_id=7)
    asyncio.run(coordinator.submit_agenda(_plan(1)))
    assert coordinator.error_message == "Backend rejected visit"

    gateway.fail_on = None
    asyncio.run(coordinator.refresh_recent_visits())

    assert coordinator.error_message is None


def test_load_recent_visits_raises_gateway_errors():
    coordinator = SubmissionCoordinator(DummyGateway(fail_on=1), commercial_id=7)

    with pytest.raises(ServerError):
        asyncio.run(coordinator.load_recent_visits(3))

    assert coordinator.recent_visits == []
