"""Per-file schema extraction and cross-file merging."""

from __future__ import annotations

from typing import Iterable, List, Optional, Set

from ..logging import get_logger
from ..models import Model, SourceFile
from .blocks import iter_schema_blocks
from .fields import parse_fields
from .naming import DEFAULT_LOOKBACK, index_declarations, resolve_model_name

SCHEMA_TOKEN = "Schema"


class NameRegistry:
    """Accumulates model names claimed during one extraction run."""

    def __init__(self) -> None:
        self._seen: Set[str] = set()

    def __contains__(self, name: object) -> bool:
        return name in self._seen

    def __len__(self) -> int:
        return len(self._seen)

    def claim(self, name: str, file_path: str) -> str:
        """Return ``name`` or, when taken, ``name_<file base name>``."""
        if name not in self._seen:
            self._seen.add(name)
            return name
        base = file_path.rsplit("/", 1)[-1]
        candidate = f"{name}_{base}"
        counter = 2
        while candidate in self._seen:
            candidate = f"{name}_{base}_{counter}"
            counter += 1
        self._seen.add(candidate)
        return candidate


class SchemaExtractor:
    """Turns source files into models. Never raises for file content."""

    def __init__(self, *, lookback: int = DEFAULT_LOOKBACK) -> None:
        self.lookback = lookback
        self.logger = get_logger("extraction")

    def extract_file(self, source: SourceFile) -> List[Model]:
        """Return models for one file, without global name deduplication."""
        content = source.content
        if not content or SCHEMA_TOKEN not in content:
            return []

        declarations = index_declarations(content)
        models: List[Model] = []
        for block in iter_schema_blocks(content):
            fields = parse_fields(block.body)
            if not fields:
                self.logger.debug("Skipping empty schema block in %s at %d", source.path, block.start)
                continue
            name = resolve_model_name(
                content, block.start, declarations, source.path, lookback=self.lookback
            )
            models.append(Model(name=name, file_path=source.path, fields=fields))
        return models

    def merge(
        self,
        per_file: Iterable[List[Model]],
        registry: Optional[NameRegistry] = None,
    ) -> List[Model]:
        """Concatenate per-file results in order, renaming collisions."""
        registry = registry if registry is not None else NameRegistry()
        merged: List[Model] = []
        for models in per_file:
            for model in models:
                unique = registry.claim(model.name, model.file_path)
                merged.append(Model(name=unique, file_path=model.file_path, fields=model.fields))
        return merged

    def extract(
        self,
        files: Iterable[SourceFile],
        registry: Optional[NameRegistry] = None,
    ) -> List[Model]:
        return self.merge((self.extract_file(source) for source in files), registry)


def extract_models(
    files: Iterable[SourceFile],
    registry: Optional[NameRegistry] = None,
    *,
    lookback: int = DEFAULT_LOOKBACK,
) -> List[Model]:
    """Extract and deduplicate models from ``files`` in the given order."""
    return SchemaExtractor(lookback=lookback).extract(files, registry)


__all__ = ["NameRegistry", "SCHEMA_TOKEN", "SchemaExtractor", "extract_models"]
