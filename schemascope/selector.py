"""Candidate file selection ahead of content fetching.

Fetching is the expensive step, so paths are split into two tiers: strong
candidates whose location or name suggests model definitions, and a capped
pool of weak candidates that must pass a cheap content check before being
parsed.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Iterable, List, Mapping

from .config import SelectorConfig
from .extraction.blocks import GENERIC_ARGS
from .models import SourceFile, TreeEntry

_SCHEMA_CONSTRUCTOR = re.compile(r"\bnew\s+(?:mongoose\.)?Schema\s*" + GENERIC_ARGS + r"\s*\(")


def has_schema_content(content: str) -> bool:
    """Return True when ``content`` appears to construct a schema."""
    if "Schema" not in content:
        return False
    return _SCHEMA_CONSTRUCTOR.search(content) is not None


@dataclass
class Selection:
    """Paths chosen for fetching, strong tier first."""

    strong: List[str] = field(default_factory=list)
    weak: List[str] = field(default_factory=list)

    @property
    def paths(self) -> List[str]:
        return [*self.strong, *self.weak]

    def __len__(self) -> int:
        return len(self.strong) + len(self.weak)


class CandidateSelector:
    """Ranks and bounds the files worth fetching from a repository tree."""

    def __init__(self, config: SelectorConfig | None = None) -> None:
        self.config = config or SelectorConfig()
        self._extensions = tuple(ext.lower() for ext in self.config.extensions)

    def is_eligible(self, entry: TreeEntry) -> bool:
        return entry.is_file and entry.path.lower().endswith(self._extensions)

    def is_excluded(self, path: str) -> bool:
        lower = path.lower()
        return any(pattern in lower for pattern in self.config.exclude_patterns)

    def is_model_file(self, path: str) -> bool:
        """Return True for non-excluded paths that look like model definitions."""
        if self.is_excluded(path):
            return False
        lower = path.lower()
        anchored = lower if lower.startswith("/") else f"/{lower}"
        if any(directory in anchored for directory in self.config.model_dirs):
            return True
        filename = lower.rsplit("/", 1)[-1]
        return any(hint in filename for hint in self.config.filename_hints)

    def select(self, entries: Iterable[TreeEntry]) -> Selection:
        """Return strong and weak candidates in listing order, each tier capped."""
        strong: List[str] = []
        weak: List[str] = []
        for entry in entries:
            if not self.is_eligible(entry):
                continue
            if self.is_model_file(entry.path):
                strong.append(entry.path)
            else:
                weak.append(entry.path)
        return Selection(
            strong=strong[: self.config.strong_limit],
            weak=weak[: self.config.weak_limit],
        )

    @staticmethod
    def materialise(selection: Selection, contents: Mapping[str, str]) -> List[SourceFile]:
        """Pair selected paths with fetched content, dropping empty files and weak files without a schema."""
        files: List[SourceFile] = []
        for path in selection.strong:
            content = contents.get(path) or ""
            if content:
                files.append(SourceFile(path=path, content=content))
        for path in selection.weak:
            content = contents.get(path) or ""
            if content and has_schema_content(content):
                files.append(SourceFile(path=path, content=content))
        return files


__all__ = ["CandidateSelector", "Selection", "has_schema_content"]
