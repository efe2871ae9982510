"""Health endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, status

from ...config import settings
from ...services.agenda.planner import AgendaPlanner
from ..dependencies import get_planner

router = APIRouter(tags=["health"])


@router.get("/health", status_code=status.HTTP_200_OK)
def health_root() -> dict:
    """Simple health check endpoint that doesn't require any dependencies."""
    return {"status": "ok"}


@router.get("/health/agenda", status_code=status.HTTP_200_OK)
def health_agenda(planner: AgendaPlanner = Depends(get_planner)) -> dict:
    """Report the locally persisted plan and the configured visit service."""
    return {
        "planned_visits": len(planner),
        "completed_visits": sum(1 for visit in planner.visits if visit.is_completed),
        "store_key": planner.store.key,
        "gateway_base_url": settings.gateway_base_url,
    }
