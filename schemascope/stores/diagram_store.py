"""JSON-file store for generated diagrams."""

from __future__ import annotations

import json
from dataclasses import dataclass
from datetime import UTC, datetime
from pathlib import Path
from typing import Dict, List, Optional, Sequence

from ..models import Model

_STORE_VERSION = 1


class DiagramNotFoundError(LookupError):
    """Raised when no diagram is stored for a repository and user."""


@dataclass
class DiagramRecord:
    """Stored model list for one repository and user."""

    repository: str
    user: str
    models: List[Model]
    created_at: str
    updated_at: str


def _key(repository: str, user: str) -> str:
    return f"{user}::{repository}"


def _now() -> str:
    return datetime.now(UTC).isoformat().replace("+00:00", "Z")


def _to_record(entry: Dict[str, object], repository: str, user: str) -> DiagramRecord:
    raw_models = entry.get("models")
    models = [
        Model.from_dict(item)
        for item in (raw_models if isinstance(raw_models, list) else [])
        if isinstance(item, dict)
    ]
    return DiagramRecord(
        repository=str(entry.get("repository", repository)),
        user=str(entry.get("user", user)),
        models=models,
        created_at=str(entry.get("created_at", "")),
        updated_at=str(entry.get("updated_at", "")),
    )


class DiagramStore:
    """Keeps the latest model list per (repository, user) with upsert semantics."""

    def __init__(self, path: Path | None) -> None:
        self._path = path
        self._entries: Dict[str, Dict[str, object]] = {}
        self._dirty = False
        if self._path is not None:
            self._load(self._path)

    def upsert(self, repository: str, user: str, models: Sequence[Model]) -> DiagramRecord:
        """Replace any stored models for the key, keeping the creation time."""
        key = _key(repository, user)
        now = _now()
        existing = self._entries.get(key)
        created_at = existing.get("created_at") if existing else None
        if not isinstance(created_at, str):
            created_at = now
        self._entries[key] = {
            "repository": repository,
            "user": user,
            "models": [model.to_dict() for model in models],
            "created_at": created_at,
            "updated_at": now,
        }
        self._dirty = True
        return DiagramRecord(
            repository=repository,
            user=user,
            models=list(models),
            created_at=created_at,
            updated_at=now,
        )

    def find(self, repository: str, user: str) -> Optional[DiagramRecord]:
        entry = self._entries.get(_key(repository, user))
        if not entry:
            return None
        return _to_record(entry, repository, user)

    def get(self, repository: str, user: str) -> DiagramRecord:
        """Like :meth:`find` but raises :class:`DiagramNotFoundError` when absent."""
        record = self.find(repository, user)
        if record is None:
            raise DiagramNotFoundError(f"No diagram stored for '{repository}'")
        return record

    def records(self, user: str, repository: Optional[str] = None) -> List[DiagramRecord]:
        """Return the user's diagrams, most recently updated first."""
        found: List[DiagramRecord] = []
        for entry in self._entries.values():
            if entry.get("user") != user:
                continue
            if repository is not None and entry.get("repository") != repository:
                continue
            found.append(_to_record(entry, str(entry.get("repository", "")), user))
        return sorted(found, key=lambda record: record.updated_at, reverse=True)

    def delete(self, repository: str, user: str) -> bool:
        removed = self._entries.pop(_key(repository, user), None)
        if removed is not None:
            self._dirty = True
        return removed is not None

    def persist(self) -> None:
        if not self._dirty or self._path is None:
            return
        payload = {
            "version": _STORE_VERSION,
            "entries": self._entries,
        }
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._path.write_text(
            json.dumps(payload, indent=2, sort_keys=True), encoding="utf-8"
        )
        self._dirty = False

    # ------------------------------------------------------------------
    # Internal helpers

    def _load(self, path: Path) -> None:
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return
        except (OSError, json.JSONDecodeError):
            return
        if not isinstance(data, dict) or data.get("version") != _STORE_VERSION:
            return
        entries = data.get("entries")
        if not isinstance(entries, dict):
            return
        self._entries = {
            key: raw
            for key, raw in entries.items()
            if isinstance(key, str) and isinstance(raw, dict) and "models" in raw
        }
        self._dirty = False


__all__ = ["DiagramNotFoundError", "DiagramRecord", "DiagramStore"]
