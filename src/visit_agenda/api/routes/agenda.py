"""Agenda planning, visit editing and submission endpoints."""

from __future__ import annotations

import logging
from typing import Callable, List
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.responses import JSONResponse

from ...data.clients_repository import resolve_clients
from ...errors import NoClientsSelected, NoVisits, SubmissionInProgress, VisitAgendaError
from ...models.domain import Client, Coordinate, Visit, VisitTag
from ...schemas.visits import (
    AddAttachmentRequest,
    CompleteVisitRequest,
    CompleteVisitResponse,
    DeleteVisitsRequest,
    GenerateAgendaRequest,
    MoveVisitsRequest,
    SubmissionOutcomeModel,
    SubmissionResponse,
    UpdateNotesRequest,
    VisitModel,
    VisitPayload,
)
from ...services.agenda.planner import AgendaPlanner
from ...services.lifecycle.location import ReportedLocationProvider
from ...services.lifecycle.session import VisitSession
from ...services.submission.coordinator import SUCCESS_MESSAGE, SubmissionCoordinator, SubmissionReport
from ..dependencies import get_client_catalog, get_coordinator, get_planner

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/agenda", tags=["agenda"])


def _visit_model(visit: Visit) -> VisitModel:
    model = VisitModel.model_validate(visit)
    return model.model_copy(update={"selected_tags": sorted(visit.selected_tags, key=lambda tag: tag.value)})


def _plan_models(planner: AgendaPlanner) -> List[VisitModel]:
    return [_visit_model(visit) for visit in planner.visits]


def _require_visit(planner: AgendaPlanner, visit_id: UUID) -> Visit:
    visit = planner.get_visit(visit_id)
    if visit is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Visit {visit_id} not found")
    return visit


def _edit_visit(planner: AgendaPlanner, visit_id: UUID, edit: Callable[[VisitSession], None]) -> VisitModel:
    session = VisitSession(_require_visit(planner, visit_id), ReportedLocationProvider())
    try:
        edit(session)
        planner.update_visit(session.visit)
    finally:
        session.close()
    return _visit_model(session.visit)


def _report_response(report: SubmissionReport) -> SubmissionResponse:
    return SubmissionResponse(
        success=report.success,
        success_message=SUCCESS_MESSAGE if report.success else None,
        error_message=report.error_message,
        outcomes=[
            SubmissionOutcomeModel(
                sequence=item.sequence,
                client_id=item.client_id,
                status=item.status.value,
                payload=item.payload,
                error=item.error,
            )
            for item in report.outcomes
        ],
    )


@router.get("/visits", response_model=List[VisitModel])
def list_visits(planner: AgendaPlanner = Depends(get_planner)) -> List[VisitModel]:
    return _plan_models(planner)


@router.post("/generate", response_model=List[VisitModel], status_code=status.HTTP_201_CREATED)
def generate(
    payload: GenerateAgendaRequest,
    planner: AgendaPlanner = Depends(get_planner),
    catalog: tuple[Client, ...] = Depends(get_client_catalog),
) -> List[VisitModel]:
    """Replace the whole plan. Anything recorded on the previous plan is discarded."""
    if payload.clients is not None:
        clients = [Client(**client.model_dump()) for client in payload.clients]
    else:
        try:
            clients = resolve_clients(payload.client_ids or [], catalog)
        except LookupError as exc:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    try:
        planner.replace_plan(clients, payload.date)
    except NoClientsSelected as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=exc.message) from exc
    return _plan_models(planner)


@router.post("/move", response_model=List[VisitModel])
def move(payload: MoveVisitsRequest, planner: AgendaPlanner = Depends(get_planner)) -> List[VisitModel]:
    try:
        planner.move_visits(payload.from_indices, payload.to_index)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    return _plan_models(planner)


@router.post("/delete", response_model=List[VisitModel])
def delete(payload: DeleteVisitsRequest, planner: AgendaPlanner = Depends(get_planner)) -> List[VisitModel]:
    try:
        planner.delete_visits(payload.offsets)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    return _plan_models(planner)


@router.get("/visits/{visit_id}", response_model=VisitModel)
def get_visit(visit_id: UUID, planner: AgendaPlanner = Depends(get_planner)) -> VisitModel:
    return _visit_model(_require_visit(planner, visit_id))


@router.post("/visits/{visit_id}/tags/{tag}", response_model=VisitModel)
def toggle_tag(visit_id: UUID, tag: VisitTag, planner: AgendaPlanner = Depends(get_planner)) -> VisitModel:
    return _edit_visit(planner, visit_id, lambda session: session.toggle_tag(tag))


@router.post("/visits/{visit_id}/attachments", response_model=VisitModel, status_code=status.HTTP_201_CREATED)
def add_attachment(
    visit_id: UUID, payload: AddAttachmentRequest, planner: AgendaPlanner = Depends(get_planner)
) -> VisitModel:
    return _edit_visit(planner, visit_id, lambda session: session.add_attachment(payload.type))


@router.delete("/visits/{visit_id}/attachments/{attachment_id}", response_model=VisitModel)
def remove_attachment(
    visit_id: UUID, attachment_id: UUID, planner: AgendaPlanner = Depends(get_planner)
) -> VisitModel:
    return _edit_visit(planner, visit_id, lambda session: session.remove_attachment(attachment_id))


@router.put("/visits/{visit_id}/notes", response_model=VisitModel)
def update_notes(
    visit_id: UUID, payload: UpdateNotesRequest, planner: AgendaPlanner = Depends(get_planner)
) -> VisitModel:
    return _edit_visit(planner, visit_id, lambda session: session.update_notes(payload.notes))


@router.post("/visits/{visit_id}/complete", response_model=CompleteVisitResponse)
async def complete_visit(
    visit_id: UUID,
    payload: CompleteVisitRequest,
    planner: AgendaPlanner = Depends(get_planner),
) -> CompleteVisitResponse:
    """Complete a visit using the coordinates reported by the device, if any."""
    coordinate = None
    if payload.latitude is not None and payload.longitude is not None:
        coordinate = Coordinate(latitude=payload.latitude, longitude=payload.longitude)

    session = VisitSession(_require_visit(planner, visit_id), ReportedLocationProvider(coordinate))
    try:
        capture = await session.mark_completed()
        planner.update_visit(session.visit)
    finally:
        session.close()
    return CompleteVisitResponse(
        visit=_visit_model(session.visit),
        show_location_error=session.show_location_error,
        outcome=capture.outcome.value if capture else "cancelled",
    )


@router.post("/submit", response_model=SubmissionResponse)
async def submit(
    planner: AgendaPlanner = Depends(get_planner),
    coordinator: SubmissionCoordinator = Depends(get_coordinator),
):
    try:
        report = await coordinator.submit_agenda(planner.visits)
    except SubmissionInProgress as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=exc.message) from exc
    except NoVisits as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=exc.message) from exc
    except Exception as exc:
        logger.exception(f"Error submitting agenda: {exc}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to submit agenda: {str(exc)}",
        ) from exc

    response = _report_response(report)
    if not report.success:
        return JSONResponse(status_code=status.HTTP_502_BAD_GATEWAY, content=response.model_dump(mode="json"))
    return response


@router.get("/recent", response_model=List[VisitPayload])
async def recent_visits(
    limit: int = Query(10, ge=1, le=100),
    coordinator: SubmissionCoordinator = Depends(get_coordinator),
) -> List[VisitPayload]:
    try:
        return await coordinator.load_recent_visits(limit)
    except VisitAgendaError as exc:
        logger.warning(f"Could not load recent visits: {exc.message}")
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=exc.message) from exc
