"""Domain models for clients, planned visits and their evidence."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Optional
from uuid import UUID, uuid4


@dataclass(frozen=True, slots=True)
class Client:
    """A selectable client from the caller's catalog."""

    id: int
    name: str
    address: str
    latitude: float
    longitude: float


@dataclass(frozen=True, slots=True)
class Coordinate:
    latitude: float
    longitude: float


class VisitTag(str, Enum):
    """Kind of interaction recorded for a visit."""

    INSTALLATION = "installation"
    TRAINING = "training"
    SUPPORT = "support"
    SALES = "sales"
    OTHER = "other"


class AttachmentType(str, Enum):
    PHOTO = "photo"
    VIDEO = "video"


@dataclass(slots=True)
class VisitAttachment:
    """Evidence metadata attached to a visit. Media content is handled elsewhere."""

    type: AttachmentType
    file_name: str
    created_at: datetime = field(default_factory=lambda: datetime.now().astimezone())
    id: UUID = field(default_factory=uuid4)


@dataclass(slots=True)
class Visit:
    """One planned interaction with a client inside the day's agenda."""

    sequence: int
    client: Client
    scheduled_date: date
    planned_time: datetime
    id: UUID = field(default_factory=uuid4)
    is_completed: bool = False
    notes: str = ""
    selected_tags: set[VisitTag] = field(default_factory=set)
    attachments: list[VisitAttachment] = field(default_factory=list)
    current_latitude: Optional[float] = None
    current_longitude: Optional[float] = None
    completion_timestamp: Optional[datetime] = None

    @property
    def planned_hour_text(self) -> str:
        return self.planned_time.strftime("%H:%M")
