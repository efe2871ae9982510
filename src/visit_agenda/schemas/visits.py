"""Visit wire payloads and agenda request/response schemas."""

from __future__ import annotations

import datetime as dt
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, model_validator

from ..models.domain import AttachmentType, VisitTag


class VisitPayload(BaseModel):
    """Body exchanged with the remote visit service."""

    visit_id: int
    commercial_id: int
    date: str = Field(..., description="ISO-8601 timestamp including the UTC offset.")
    client_ids: List[int]


class ClientModel(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    address: str
    latitude: float
    longitude: float


class VisitAttachmentModel(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    type: AttachmentType
    file_name: str
    created_at: dt.datetime


class VisitModel(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    sequence: int
    client: ClientModel
    scheduled_date: dt.date
    planned_time: dt.datetime
    planned_hour_text: str
    is_completed: bool
    notes: str
    selected_tags: List[VisitTag]
    attachments: List[VisitAttachmentModel]
    current_latitude: Optional[float] = None
    current_longitude: Optional[float] = None
    completion_timestamp: Optional[dt.datetime] = None


class GenerateAgendaRequest(BaseModel):
    date: dt.date
    client_ids: Optional[List[int]] = Field(
        default=None,
        description="Ids from the configured client catalog, in visiting order.",
    )
    clients: Optional[List[ClientModel]] = Field(
        default=None,
        description="Explicit clients, used instead of catalog ids when provided.",
    )

    @model_validator(mode="after")
    def _require_selection_source(self) -> "GenerateAgendaRequest":
        if self.client_ids is None and self.clients is None:
            raise ValueError("Provide either client_ids or clients.")
        return self


class MoveVisitsRequest(BaseModel):
    from_indices: List[int] = Field(..., min_length=1)
    to_index: int = Field(..., ge=0)


class DeleteVisitsRequest(BaseModel):
    offsets: List[int] = Field(..., min_length=1)


class AddAttachmentRequest(BaseModel):
    type: AttachmentType


class UpdateNotesRequest(BaseModel):
    notes: str


class CompleteVisitRequest(BaseModel):
    """Coordinates reported by the device; omit them when location is not available."""

    latitude: Optional[float] = Field(default=None, ge=-90, le=90)
    longitude: Optional[float] = Field(default=None, ge=-180, le=180)


class CompleteVisitResponse(BaseModel):
    visit: VisitModel
    show_location_error: bool
    outcome: str


class SubmissionOutcomeModel(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    sequence: int
    client_id: int
    status: str
    payload: Optional[VisitPayload] = None
    error: Optional[str] = None


class SubmissionResponse(BaseModel):
    success: bool
    success_message: Optional[str] = None
    error_message: Optional[str] = None
    outcomes: List[SubmissionOutcomeModel]
