"""Scan pipeline: tree listing, candidate selection, fetch and extraction."""

from __future__ import annotations

from concurrent.futures import Future, ThreadPoolExecutor, wait
from typing import Dict, List, Optional, Sequence

from .config import SchemascopeConfig
from .extraction import NameRegistry, SchemaExtractor
from .logging import get_logger
from .models import ScanResult
from .selector import CandidateSelector
from .sources.base import RepositorySource

SUPPORTED_ORM = "mongoose"
NO_SCHEMAS_MESSAGE = "No Mongoose schemas were found in the repository."


class ScanPipeline:
    """Coordinates one repository scan end to end.

    Only a failing tree listing aborts a scan (``SourceError`` propagates).
    Individual fetch failures and a batch timeout degrade to missing files.
    """

    def __init__(
        self,
        config: SchemascopeConfig | None = None,
        *,
        selector: CandidateSelector | None = None,
        extractor: SchemaExtractor | None = None,
    ) -> None:
        self.config = config
        self.selector = selector or CandidateSelector(config.selector if config else None)
        self.extractor = extractor or SchemaExtractor(
            lookback=config.extraction.lookback if config else 200
        )
        self.workers = config.fetch.workers if config else 8
        self.timeout = config.fetch.timeout if config else None
        self.logger = get_logger("pipeline")

    def run(
        self,
        source: RepositorySource,
        *,
        orm: Optional[str] = SUPPORTED_ORM,
        timeout: Optional[float] = None,
        registry: Optional[NameRegistry] = None,
    ) -> ScanResult:
        """Scan ``source`` and return the merged model collection."""
        if orm is not None and orm.strip().lower() != SUPPORTED_ORM:
            self.logger.info("Skipping %s: ORM '%s' is not supported", source.identity, orm)
            return ScanResult(
                supported=False,
                message=f'Diagram generation for "{orm}" is coming soon.',
            )

        self.logger.info("Scanning %s", source.identity)
        entries = source.list_tree()
        selection = self.selector.select(entries)
        self.logger.debug(
            "Selected %d strong and %d weak candidates from %d entries",
            len(selection.strong),
            len(selection.weak),
            len(entries),
        )

        effective_timeout = timeout if timeout is not None else self.timeout
        contents = self.fetch_all(source, selection.paths, timeout=effective_timeout)
        files = self.selector.materialise(selection, contents)
        models = self.extractor.extract(files, registry)

        if not models:
            self.logger.info("No schemas found in %s", source.identity)
            return ScanResult(supported=True, models=[], message=NO_SCHEMAS_MESSAGE)

        self.logger.info("Extracted %d models from %d files", len(models), len(files))
        return ScanResult(supported=True, models=models)

    def fetch_all(
        self,
        source: RepositorySource,
        paths: Sequence[str],
        *,
        timeout: Optional[float] = None,
    ) -> Dict[str, str]:
        """Fetch ``paths`` concurrently; missing, failed or late files map to ``""``."""
        contents: Dict[str, str] = {path: "" for path in paths}
        if not paths:
            return contents

        executor = ThreadPoolExecutor(
            max_workers=max(1, min(self.workers, len(paths))),
            thread_name_prefix="schemascope-fetch",
        )
        futures: List[Future[str]] = [executor.submit(source.fetch, path) for path in paths]
        try:
            _, pending = wait(futures, timeout=timeout)
        finally:
            executor.shutdown(wait=False, cancel_futures=True)

        if pending:
            self.logger.warning(
                "Fetch timed out after %ss; continuing with %d of %d files",
                timeout,
                len(paths) - len(pending),
                len(paths),
            )

        # Collect in selection order so name deduplication stays deterministic.
        for path, future in zip(paths, futures):
            if future in pending:
                continue
            try:
                contents[path] = future.result() or ""
            except Exception as exc:
                self.logger.debug("Fetch failed for %s: %s", path, exc)
        return contents


__all__ = ["NO_SCHEMAS_MESSAGE", "SUPPORTED_ORM", "ScanPipeline"]
