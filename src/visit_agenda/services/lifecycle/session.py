"""Editing session for a single visit: tags, evidence, notes and completion."""

from __future__ import annotations

import asyncio
import copy
import logging
from datetime import datetime
from enum import Enum
from typing import Callable, Optional
from uuid import UUID

from ...errors import CaptureInProgress
from ...models.domain import AttachmentType, Visit, VisitAttachment, VisitTag
from .location import LocationCapture, LocationProvider, capture_location

logger = logging.getLogger(__name__)

PLACEHOLDER_FILE_NAMES = {
    AttachmentType.PHOTO: "evidence_photo.jpg",
    AttachmentType.VIDEO: "evidence_video.mov",
}


def _local_now() -> datetime:
    return datetime.now().astimezone()


class CompletionState(str, Enum):
    PLANNED = "planned"
    CAPTURING_LOCATION = "capturing_location"
    COMPLETED = "completed"


class CancellationToken:
    """Set once the owner of a session goes away; late results are dropped."""

    def __init__(self) -> None:
        self._cancelled = False

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def cancel(self) -> None:
        self._cancelled = True


class VisitSession:
    """Works on a private copy of one visit.

    The caller writes ``session.visit`` back to the agenda (``AgendaPlanner.update_visit``)
    once it is done editing. Closing the session cancels any pending location capture.
    """

    def __init__(
        self,
        visit: Visit,
        location_provider: LocationProvider,
        clock: Callable[[], datetime] = _local_now,
    ) -> None:
        self.visit = copy.deepcopy(visit)
        self.location_provider = location_provider
        self.clock = clock
        self.is_saving = False
        self.show_location_error = False
        self.token = CancellationToken()
        self._capture_task: Optional[asyncio.Task[LocationCapture]] = None

    @property
    def state(self) -> CompletionState:
        if self._capture_task is not None and not self._capture_task.done():
            return CompletionState.CAPTURING_LOCATION
        if self.visit.is_completed:
            return CompletionState.COMPLETED
        return CompletionState.PLANNED

    @property
    def closed(self) -> bool:
        return self.token.cancelled

    def toggle_tag(self, tag: VisitTag) -> None:
        if tag in self.visit.selected_tags:
            self.visit.selected_tags.remove(tag)
        else:
            self.visit.selected_tags.add(tag)

    def add_attachment(self, attachment_type: AttachmentType) -> VisitAttachment:
        attachment = VisitAttachment(
            type=attachment_type,
            file_name=PLACEHOLDER_FILE_NAMES[attachment_type],
            created_at=self.clock(),
        )
        self.visit.attachments.append(attachment)
        return attachment

    def remove_attachment(self, attachment: VisitAttachment | UUID) -> None:
        attachment_id = attachment.id if isinstance(attachment, VisitAttachment) else attachment
        self.visit.attachments = [item for item in self.visit.attachments if item.id != attachment_id]

    def update_notes(self, notes: str) -> None:
        self.visit.notes = notes

    def dismiss_location_error(self) -> None:
        self.show_location_error = False

    async def mark_completed(self) -> Optional[LocationCapture]:
        """Complete the visit, attaching the device location when one can be obtained.

        Returns the capture result, or ``None`` when the session was closed before
        the capture finished (the visit is then left untouched).
        """
        if self.closed:
            raise RuntimeError("Visit session is closed.")
        if self.state == CompletionState.CAPTURING_LOCATION:
            raise CaptureInProgress()

        self.is_saving = True
        task = asyncio.ensure_future(capture_location(self.location_provider))
        self._capture_task = task
        try:
            capture = await task
        except asyncio.CancelledError:
            if not self.token.cancelled:
                raise
            logger.debug(f"Dropped location capture for visit {self.visit.id} after session close")
            return None
        finally:
            self._capture_task = None
            self.is_saving = False

        if self.token.cancelled:
            logger.debug(f"Dropped location capture for visit {self.visit.id} after session close")
            return None

        self._finalize(capture)
        return capture

    def close(self) -> None:
        self.token.cancel()
        if self._capture_task is not None and not self._capture_task.done():
            self._capture_task.cancel()
        self.is_saving = False

    def _finalize(self, capture: LocationCapture) -> None:
        if capture.coordinate is not None:
            self.visit.current_latitude = capture.coordinate.latitude
            self.visit.current_longitude = capture.coordinate.longitude
        if capture.should_warn:
            self.show_location_error = True
        self.visit.is_completed = True
        self.visit.completion_timestamp = self.clock()
        logger.info(
            f"Visit {self.visit.id} for client {self.visit.client.id} completed ({capture.outcome.value})"
        )
