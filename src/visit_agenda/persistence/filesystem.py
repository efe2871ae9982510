"""File-based key-value storage for locally persisted state."""

from __future__ import annotations

import re
from pathlib import Path

from ..config import settings

_UNSAFE_KEY_CHARS = re.compile(r"[^A-Za-z0-9._-]")


class KeyValueStorage:
    """Thin wrapper around the data root storing one blob file per key."""

    def __init__(self, root: Path | None = None) -> None:
        self.root = (root or settings.data_root).resolve()
        self.state_root = self.root / "state"
        self.state_root.mkdir(parents=True, exist_ok=True)

    def path_for(self, key: str) -> Path:
        if not key:
            raise ValueError("Storage key must not be empty.")
        return self.state_root / f"{_UNSAFE_KEY_CHARS.sub('_', key)}.json"

    def read_bytes(self, key: str) -> bytes | None:
        path = self.path_for(key)
        if not path.exists():
            return None
        with path.open("rb") as handle:
            return handle.read()

    def write_bytes(self, key: str, payload: bytes) -> None:
        path = self.path_for(key)
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open("wb") as handle:
            handle.write(payload)

    def remove(self, key: str) -> None:
        self.path_for(key).unlink(missing_ok=True)
