"""Contracts for repository tree and content providers."""

from __future__ import annotations

from typing import List, Protocol

from ..models import TreeEntry


class SourceError(RuntimeError):
    """Raised when a repository tree listing cannot be obtained."""


class RepositorySource(Protocol):
    """Supplies the tree listing and per-file content of one repository.

    ``list_tree`` failures are fatal for a scan and must raise
    :class:`SourceError`. ``fetch`` should return an empty string for files it
    cannot retrieve or decode.
    """

    @property
    def identity(self) -> str:
        ...

    def list_tree(self) -> List[TreeEntry]:
        ...

    def fetch(self, path: str) -> str:
        ...


__all__ = ["RepositorySource", "SourceError"]
