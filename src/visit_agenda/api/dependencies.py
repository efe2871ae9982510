"""Process-wide service instances handed to route handlers."""

from __future__ import annotations

import functools

from ..config import settings
from ..data.clients_repository import load_clients
from ..models.domain import Client
from ..persistence.filesystem import KeyValueStorage
from ..persistence.visit_store import VisitStore
from ..services.agenda.planner import AgendaPlanner
from ..services.submission.coordinator import SubmissionCoordinator
from ..services.submission.gateway import HttpVisitGateway


@functools.lru_cache(maxsize=1)
def get_planner() -> AgendaPlanner:
    store = VisitStore(KeyValueStorage(), key=settings.store_key)
    return AgendaPlanner(store, start_hour=settings.agenda_start_hour)


@functools.lru_cache(maxsize=1)
def get_coordinator() -> SubmissionCoordinator:
    gateway = HttpVisitGateway(
        base_url=settings.gateway_base_url,
        token=settings.gateway_token,
        timeout=settings.gateway_timeout_seconds,
    )
    return SubmissionCoordinator(gateway, commercial_id=settings.commercial_id)


def get_client_catalog() -> tuple[Client, ...]:
    return load_clients()
