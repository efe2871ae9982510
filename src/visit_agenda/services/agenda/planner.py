"""Agenda planning: builds the day's ordered visit plan and keeps it persisted."""

from __future__ import annotations

import logging
from datetime import date, datetime, time, timedelta
from typing import Iterable, Optional, Sequence, TypeVar
from uuid import UUID

from ...errors import NoClientsSelected
from ...models.domain import Client, Visit
from ...persistence.visit_store import VisitStore

logger = logging.getLogger(__name__)

DEFAULT_START_HOUR = 9

T = TypeVar("T")


def move_items(items: Sequence[T], from_indices: Iterable[int], to_index: int) -> list[T]:
    """Move the items at ``from_indices`` so they sit before the element originally at ``to_index``.

    Moved items keep their relative order and the rest close the gap. ``to_index``
    equal to ``len(items)`` moves them to the end.
    """
    count = len(items)
    sources = sorted(set(from_indices))
    if any(index < 0 or index >= count for index in sources):
        raise ValueError(f"Source indices {sources} out of range for {count} visits.")
    if to_index < 0 or to_index > count:
        raise ValueError(f"Destination {to_index} out of range for {count} visits.")

    source_set = set(sources)
    moved = [items[index] for index in sources]
    remaining = [item for index, item in enumerate(items) if index not in source_set]
    insert_at = to_index - sum(1 for index in sources if index < to_index)
    return remaining[:insert_at] + moved + remaining[insert_at:]


def remove_items(items: Sequence[T], offsets: Iterable[int]) -> list[T]:
    count = len(items)
    targets = set(offsets)
    if any(index < 0 or index >= count for index in targets):
        raise ValueError(f"Offsets {sorted(targets)} out of range for {count} visits.")
    return [item for index, item in enumerate(items) if index not in targets]


def planned_time_for(day: date, index: int, start_hour: int = DEFAULT_START_HOUR) -> datetime:
    """Local wall-clock slot for the visit at ``index``: one hour per visit from ``start_hour``.

    Slots past 23:00 roll over into the following day; the visit's ``scheduled_date``
    follows the slot.
    """
    midnight = datetime.combine(day, time(0, 0, 0))
    return (midnight + timedelta(hours=start_hour + index)).astimezone()


class AgendaPlanner:
    """Owns the ordered plan of visits for a day.

    Every structural change renumbers ``sequence`` to ``1..N`` and persists the
    plan through the store. The planner is meant to be driven by a single owner
    and does no locking.
    """

    def __init__(
        self,
        store: VisitStore,
        preloaded_visits: Optional[Sequence[Visit]] = None,
        start_hour: int = DEFAULT_START_HOUR,
    ) -> None:
        self.store = store
        self.start_hour = start_hour
        self.error_message: Optional[str] = None
        self.is_generating = False
        if preloaded_visits:
            self._visits = list(preloaded_visits)
        else:
            self._visits = store.load()
        self._renumber()
        self.selected_clients: list[Client] = self._unique_clients(self._visits)

    @property
    def visits(self) -> list[Visit]:
        return list(self._visits)

    def __len__(self) -> int:
        return len(self._visits)

    def get_visit(self, visit_id: UUID) -> Optional[Visit]:
        return next((visit for visit in self._visits if visit.id == visit_id), None)

    def index_of(self, visit_id: UUID) -> Optional[int]:
        return next((index for index, visit in enumerate(self._visits) if visit.id == visit_id), None)

    def replace_plan(self, selected_clients: Sequence[Client], day: date) -> list[Visit]:
        """Discard the current plan and build a new one, one visit per selected client.

        This is destructive: notes, evidence and completion recorded on the previous
        plan are lost.
        """
        if not selected_clients:
            self.error_message = NoClientsSelected.default_message
            raise NoClientsSelected()

        self.is_generating = True
        try:
            clients = self._unique_clients(selected_clients)
            if len(clients) != len(selected_clients):
                logger.warning(
                    f"Ignoring {len(selected_clients) - len(clients)} duplicate clients in agenda selection"
                )

            discarded = sum(1 for visit in self._visits if visit.is_completed)
            if discarded:
                logger.warning(f"Replacing plan discards {discarded} completed visits")

            self._visits = [self._build_visit(index, client, day) for index, client in enumerate(clients)]
            self.selected_clients = clients
            self.error_message = None
            logger.info(f"Generated agenda for {day.isoformat()} with {len(self._visits)} visits")
            self.store.save(self._visits)
            return self.visits
        finally:
            self.is_generating = False

    def _build_visit(self, index: int, client: Client, day: date) -> Visit:
        planned = planned_time_for(day, index, self.start_hour)
        return Visit(sequence=index + 1, client=client, scheduled_date=planned.date(), planned_time=planned)

    # The destructive replacement is the only way to generate an agenda.
    generate_agenda = replace_plan

    def move_visits(self, from_indices: Iterable[int], to_index: int) -> None:
        self._visits = move_items(self._visits, from_indices, to_index)
        self._renumber()
        self.store.save(self._visits)

    def delete_visits(self, offsets: Iterable[int]) -> None:
        before = len(self._visits)
        self._visits = remove_items(self._visits, offsets)
        self._renumber()
        logger.info(f"Deleted {before - len(self._visits)} visits, {len(self._visits)} remaining")
        self.store.save(self._visits)

    def update_visit(self, visit: Visit) -> bool:
        """Replace the stored visit with the same id. Unknown ids are ignored."""
        index = self.index_of(visit.id)
        if index is None:
            logger.debug(f"Ignoring update for unknown visit {visit.id}")
            return False
        visit.sequence = index + 1
        self._visits[index] = visit
        self.store.save(self._visits)
        return True

    def _renumber(self) -> None:
        for index, visit in enumerate(self._visits):
            visit.sequence = index + 1

    @staticmethod
    def _unique_clients(items: Iterable[Client | Visit]) -> list[Client]:
        seen: set[int] = set()
        clients: list[Client] = []
        for item in items:
            client = item.client if isinstance(item, Visit) else item
            if client.id in seen:
                continue
            seen.add(client.id)
            clients.append(client)
        return clients
