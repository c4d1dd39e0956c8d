"""FastAPI application entrypoint for storyscan service mode."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Any, Callable, Dict, Optional

from fastapi import Depends, FastAPI
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from ..config import StoryScanConfig
from ..document import SourceDocument
from ..errors import StoryScanError
from ..extract import extract_stories
from ..indexer import parse_for_indexer
from ..logging import get_logger
from ..models import catalog_to_dict

_LOGGER = get_logger("service")


class DocumentRequest(BaseModel):
    filename: str
    source: str
    ast: Dict[str, Any]


class IndexRequest(DocumentRequest):
    legacy_template: Optional[bool] = None
    include_raw_source: Optional[bool] = None


class StoryPayload(BaseModel):
    id: str
    name: str
    description: Optional[str] = None
    source: Optional[bool | str] = None
    rawSource: Optional[str] = None


class ExtractResponse(BaseModel):
    stories: Dict[str, StoryPayload]


class IndexedStoryPayload(BaseModel):
    exportName: str
    name: str
    tags: list[str] = Field(default_factory=list)
    rawSource: Optional[str] = None


class IndexedMetaPayload(BaseModel):
    title: Optional[str] = None
    tags: Optional[list[str]] = None


class IndexResponse(BaseModel):
    meta: IndexedMetaPayload
    stories: list[IndexedStoryPayload]


class HealthResponse(BaseModel):
    status: str


def _default_config() -> StoryScanConfig:
    return StoryScanConfig(root=Path.cwd())


def _document(payload: DocumentRequest) -> SourceDocument:
    return SourceDocument(filename=payload.filename, source=payload.source, ast=payload.ast)


def create_app(
    config_factory: Callable[[], StoryScanConfig] = _default_config,
) -> FastAPI:
    """Create the FastAPI application exposing storyscan operations."""

    app = FastAPI(title="Storyscan Service", version="1.0.0")

    async def get_config() -> StoryScanConfig:
        return config_factory()

    @app.get("/health", response_model=HealthResponse)
    async def health() -> HealthResponse:
        return HealthResponse(status="ok")

    @app.post("/extract", response_model=ExtractResponse, response_model_exclude_none=True)
    async def extract(
        payload: DocumentRequest,
        config: StoryScanConfig = Depends(get_config),
    ) -> ExtractResponse:
        def _run_extract() -> Dict[str, Any]:
            catalog = extract_stories(_document(payload), package_name=config.package_name)
            return catalog_to_dict(catalog)

        loop = asyncio.get_running_loop()
        stories = await loop.run_in_executor(None, _run_extract)
        return ExtractResponse.model_validate({"stories": stories})

    @app.post("/index", response_model=IndexResponse, response_model_exclude_none=True)
    async def index(
        payload: IndexRequest,
        config: StoryScanConfig = Depends(get_config),
    ) -> IndexResponse:
        def _run_index() -> Dict[str, Any]:
            result = parse_for_indexer(
                _document(payload),
                legacy_template=(
                    config.legacy_template
                    if payload.legacy_template is None
                    else payload.legacy_template
                ),
                package_name=config.package_name,
                include_raw_source=(
                    config.indexer.include_raw_source
                    if payload.include_raw_source is None
                    else payload.include_raw_source
                ),
            )
            return result.to_dict()

        loop = asyncio.get_running_loop()
        result = await loop.run_in_executor(None, _run_index)
        return IndexResponse.model_validate(result)

    @app.exception_handler(StoryScanError)
    async def storyscan_error_handler(_: Any, exc: StoryScanError) -> JSONResponse:
        _LOGGER.info("Rejected %s: %s", exc.filename or "<unknown>", exc)
        return JSONResponse(status_code=422, content={"detail": str(exc)})

    return app


def run_service(
    host: str = "127.0.0.1",
    port: int = 8000,
    *,
    config: StoryScanConfig | None = None,
) -> None:  # pragma: no cover - integration path
    import uvicorn

    app = create_app(lambda: config) if config is not None else create_app()
    uvicorn.run(app, host=host, port=port)
