"""Data access helpers for the selectable client catalog."""

from __future__ import annotations

import functools
import json
import logging
from pathlib import Path
from typing import Any, Iterable, Optional

from ..config import settings
from ..models.domain import Client

logger = logging.getLogger(__name__)

SAMPLE_CLIENTS: tuple[Client, ...] = (
    Client(id=10, name="Clínica Andes", address="Av. Libertad 123, Santiago", latitude=-33.4569, longitude=-70.6483),
    Client(id=20, name="Hospital Central", address="Cra 7 # 40-62, Bogotá", latitude=4.6486, longitude=-74.0995),
    Client(
        id=30,
        name="Instituto del Corazón",
        address="Calle 26 # 52-20, Ciudad de México",
        latitude=19.4326,
        longitude=-99.1332,
    ),
    Client(
        id=40,
        name="Centro Médico Pacífico",
        address="Av. Javier Prado 776, Lima",
        latitude=-12.0464,
        longitude=-77.0428,
    ),
    Client(
        id=50,
        name="Hospital del Sur",
        address="Av. 9 de Julio 999, Buenos Aires",
        latitude=-34.6037,
        longitude=-58.3816,
    ),
)


def _client_from_record(record: dict[str, Any]) -> Client:
    try:
        return Client(
            id=int(record["id"]),
            name=str(record.get("name") or "").strip(),
            address=str(record.get("address") or "").strip(),
            latitude=float(record["latitude"]),
            longitude=float(record["longitude"]),
        )
    except (KeyError, TypeError, ValueError) as exc:
        raise ValueError(f"Invalid client record {record!r}: {exc}") from exc


@functools.lru_cache(maxsize=1)
def load_clients(source: Optional[Path] = None) -> tuple[Client, ...]:
    """Load the client catalog from the configured JSON file, or the built-in sample."""

    json_path = source or settings.clients_file
    if json_path is None:
        return SAMPLE_CLIENTS
    if not json_path.exists():
        raise FileNotFoundError(f"Client catalog not found: {json_path}")

    with json_path.open(mode="r", encoding="utf-8") as handle:
        records = json.load(handle)
    if not isinstance(records, list):
        raise ValueError(f"Client catalog '{json_path}' must contain a JSON array.")

    clients = tuple(_client_from_record(record) for record in records)
    logger.info(f"Loaded {len(clients)} clients from {json_path}")
    return clients


def resolve_clients(client_ids: Iterable[int], catalog: Optional[Iterable[Client]] = None) -> list[Client]:
    """Map ids to catalog clients, keeping the order the ids were given in."""
    by_id = {client.id: client for client in (load_clients() if catalog is None else catalog)}
    ids = list(client_ids)
    missing = [client_id for client_id in ids if client_id not in by_id]
    if missing:
        raise LookupError(f"Unknown client ids: {missing}")
    return [by_id[client_id] for client_id in ids]
