"""FastAPI application entrypoint for schemascope service mode."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

import uvicorn
from fastapi import Depends, FastAPI
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from ..config import load_config
from ..diagram import build_graph
from ..models import ScanResult
from ..pipeline import SUPPORTED_ORM, ScanPipeline
from ..sources import GitHubRepositorySource, LocalRepositorySource, RepositorySource, SourceError
from ..stores import DiagramNotFoundError, DiagramRecord, DiagramStore


class GenerateRequest(BaseModel):
    path: Optional[str] = None
    repository: Optional[str] = None
    branch: str = "main"
    token: Optional[str] = None
    orm: str = SUPPORTED_ORM
    user: str = "anonymous"
    timeout: Optional[float] = None
    include_graph: bool = False


class GenerateResponse(BaseModel):
    supported: bool
    models: List[Dict[str, Any]] = []
    message: Optional[str] = None
    graph: Optional[Dict[str, Any]] = None


class HealthResponse(BaseModel):
    status: str


class DiagramResponse(BaseModel):
    repository: str
    user: str
    models: List[Dict[str, Any]]
    created_at: str
    updated_at: str


class DiagramListResponse(BaseModel):
    diagrams: List[DiagramResponse]


class DeleteResponse(BaseModel):
    deleted: bool


def _diagram_response(record: DiagramRecord) -> DiagramResponse:
    return DiagramResponse(
        repository=record.repository,
        user=record.user,
        models=[model.to_dict() for model in record.models],
        created_at=record.created_at,
        updated_at=record.updated_at,
    )


def _default_pipeline() -> ScanPipeline:
    return ScanPipeline(load_config(Path.cwd()))


def _build_source(payload: GenerateRequest, pipeline: ScanPipeline) -> RepositorySource:
    if payload.repository:
        github = pipeline.config.github if pipeline.config else None
        return GitHubRepositorySource.from_slug(
            payload.repository,
            branch=payload.branch,
            token=payload.token or (github.token if github else None),
            api_url=github.api_url if github else "https://api.github.com",
            request_timeout=github.request_timeout if github else 30.0,
        )
    if payload.path:
        excludes = pipeline.config.exclude_paths if pipeline.config else []
        return LocalRepositorySource(payload.path, exclude_paths=excludes)
    raise ValueError("Either 'path' or 'repository' is required")


def create_app(
    pipeline_factory: Callable[[], ScanPipeline] = _default_pipeline,
    store: DiagramStore | None = None,
) -> FastAPI:
    """Create the FastAPI application exposing schema scans and stored diagrams.

    Without ``store`` the diagrams live in memory for the lifetime of the app.
    """

    app = FastAPI(title="Schemascope Service", version="1.0.0")
    diagrams = store if store is not None else DiagramStore(None)

    async def get_pipeline() -> ScanPipeline:
        # Lazy-instantiate per request to keep state predictable.
        return pipeline_factory()

    @app.get("/health", response_model=HealthResponse)
    async def health() -> HealthResponse:
        return HealthResponse(status="ok")

    @app.post("/diagrams/generate", response_model=GenerateResponse)
    async def generate(
        payload: GenerateRequest,
        pipeline: ScanPipeline = Depends(get_pipeline),
    ) -> GenerateResponse:
        source = _build_source(payload, pipeline)

        def _run_scan() -> ScanResult:
            return pipeline.run(source, orm=payload.orm, timeout=payload.timeout)

        loop = asyncio.get_running_loop()
        result = await loop.run_in_executor(None, _run_scan)

        if result.found:
            diagrams.upsert(source.identity, payload.user, result.models)
            diagrams.persist()

        data = result.to_dict()
        return GenerateResponse(
            supported=data["supported"],
            models=data["models"],
            message=data.get("message"),
            graph=build_graph(result.models) if payload.include_graph else None,
        )

    @app.get("/diagrams", response_model=DiagramListResponse)
    async def list_diagrams(
        user: str = "anonymous", repository: Optional[str] = None
    ) -> DiagramListResponse:
        records = diagrams.records(user, repository=repository)
        return DiagramListResponse(diagrams=[_diagram_response(record) for record in records])

    # Identities such as owner/repo@branch contain slashes.
    @app.get("/diagrams/{repository:path}", response_model=DiagramResponse)
    async def get_diagram(repository: str, user: str = "anonymous") -> DiagramResponse:
        return _diagram_response(diagrams.get(repository, user))

    @app.delete("/diagrams/{repository:path}", response_model=DeleteResponse)
    async def delete_diagram(repository: str, user: str = "anonymous") -> DeleteResponse:
        if not diagrams.delete(repository, user):
            raise DiagramNotFoundError(f"No diagram stored for '{repository}'")
        diagrams.persist()
        return DeleteResponse(deleted=True)

    @app.exception_handler(SourceError)
    async def source_error_handler(
        _: Any, exc: SourceError
    ) -> JSONResponse:  # pragma: no cover - simple mapping
        return JSONResponse(status_code=502, content={"detail": str(exc)})

    @app.exception_handler(DiagramNotFoundError)
    async def not_found_handler(
        _: Any, exc: DiagramNotFoundError
    ) -> JSONResponse:  # pragma: no cover - simple mapping
        return JSONResponse(status_code=404, content={"detail": str(exc)})

    @app.exception_handler(ValueError)
    async def value_error_handler(
        _: Any, exc: ValueError
    ) -> JSONResponse:  # pragma: no cover - simple mapping
        return JSONResponse(status_code=400, content={"detail": str(exc)})

    return app


def run_service(
    host: str = "127.0.0.1", port: int = 8000, store_path: Path | None = None
) -> None:  # pragma: no cover - integration path
    app = create_app(store=DiagramStore(store_path))
    uvicorn.run(app, host=host, port=port)
