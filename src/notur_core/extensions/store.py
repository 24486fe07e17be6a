"""Installed-extension records and their persistence."""

import json
from abc import ABC, abstractmethod
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any


@dataclass
class InstalledExtension:
    """Persistent record of one installed extension."""

    extension_id: str
    version: str
    path: str  # extension root directory, "" for in-memory manifests
    enabled: bool = True
    installed_at: str = field(default_factory=lambda: datetime.now(timezone.utc).isoformat())
    settings: dict[str, Any] = field(default_factory=dict)


class ExtensionStore(ABC):
    """Abstract base class for installed-extension storage."""

    @abstractmethod
    def save(self, record: InstalledExtension) -> None:
        """Insert or replace a record."""

    @abstractmethod
    def get(self, extension_id: str) -> InstalledExtension | None:
        """Get a record by extension id."""

    @abstractmethod
    def delete(self, extension_id: str) -> bool:
        """Delete a record. Returns True if it existed."""

    @abstractmethod
    def list(self) -> list[InstalledExtension]:
        """All records in installation order."""


class InMemoryExtensionStore(ExtensionStore):
    """Dict-backed store, used in tests and when no state file is configured."""

    def __init__(self) -> None:
        self._records: dict[str, InstalledExtension] = {}

    def save(self, record: InstalledExtension) -> None:
        self._records[record.extension_id] = record

    def get(self, extension_id: str) -> InstalledExtension | None:
        return self._records.get(extension_id)

    def delete(self, extension_id: str) -> bool:
        return self._records.pop(extension_id, None) is not None

    def list(self) -> list[InstalledExtension]:
        return list(self._records.values())


class JSONExtensionStore(InMemoryExtensionStore):
    """Store persisted to a single JSON file, rewritten on every change."""

    def __init__(self, path: str | Path):
        """Initialize store.

        Args:
            path: JSON state file; created on first write
        """
        super().__init__()
        self.path = Path(path)
        self._load()

    def _load(self) -> None:
        if not self.path.exists():
            return
        with self.path.open() as f:
            data = json.load(f)
        for item in data.get("extensions", []):
            record = InstalledExtension(**item)
            self._records[record.extension_id] = record

    def _flush(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        payload = {"extensions": [asdict(r) for r in self._records.values()]}
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        with tmp_path.open("w") as f:
            json.dump(payload, f, indent=2)
        tmp_path.replace(self.path)

    def save(self, record: InstalledExtension) -> None:
        super().save(record)
        self._flush()

    def delete(self, extension_id: str) -> bool:
        existed = super().delete(extension_id)
        if existed:
            self._flush()
        return existed
