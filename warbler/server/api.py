"""HTTP API for the transcription pipeline (FastAPI + uvicorn).

Endpoints:
    POST /transcribe  multipart form: ``file`` (WAV bytes), optional ``model``
    GET  /health      engine and default-model availability

Run with ``warbler serve`` or directly::

    uvicorn warbler.server.api:create_app --factory --host 0.0.0.0 --port 6000
"""

from __future__ import annotations

import asyncio
import contextlib
import time
from collections.abc import AsyncIterator, Awaitable
from typing import Literal, TypeVar

import structlog
from fastapi import FastAPI, File, Form, Request, Response, UploadFile
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from warbler.app.pipeline import TranscriptionPipeline
from warbler.config.schema import AppConfig, load_config
from warbler.domain.constants import ERROR_FIELD
from warbler.domain.exceptions import ConfigurationError, InvalidRequestError, WarblerError
from warbler.domain.model import Segment

logger = structlog.get_logger(__name__)

T = TypeVar("T")

# Non-standard status used by nginx for "client closed request"
CLIENT_CLOSED_REQUEST = 499
DISCONNECT_POLL_S = 0.5


class SegmentResponse(BaseModel):
    start: str
    end: str
    text: str


class TranscribeResponse(BaseModel):
    transcription_segments: list[SegmentResponse]


class ErrorResponse(BaseModel):
    error: str


class HealthResponse(BaseModel):
    status: Literal["ready", "degraded"]
    engine_available: bool
    default_model_available: bool
    uptime_seconds: float


def _segment_to_response(segment: Segment) -> SegmentResponse:
    return SegmentResponse(start=segment.start, end=segment.end, text=segment.text)


def _describe_validation_errors(exc: RequestValidationError) -> list[str]:
    problems = []
    for err in exc.errors():
        # Drop the "body" prefix FastAPI puts on form fields
        field = ".".join(str(part) for part in err.get("loc", ()) if part != "body")
        msg = err.get("msg", "invalid value")
        problems.append(f"{field}: {msg}" if field else msg)
    return problems


async def run_until_disconnected(
    request: Request,
    work: Awaitable[T],
    *,
    poll_interval: float = DISCONNECT_POLL_S,
) -> T | None:
    """Await ``work`` unless the client goes away first.

    Returns None if the client disconnected; ``work`` is then cancelled,
    which kills the engine process it owns.
    """
    task = asyncio.ensure_future(work)
    try:
        while True:
            done, _ = await asyncio.wait({task}, timeout=poll_interval)
            if done:
                return task.result()
            if await request.is_disconnected():
                logger.warning("Client disconnected, cancelling transcription")
                task.cancel()
                with contextlib.suppress(asyncio.CancelledError):
                    await task
                return None
    finally:
        if not task.done():
            task.cancel()


def create_app(
    config: AppConfig | None = None,
    *,
    pipeline: TranscriptionPipeline | None = None,
) -> FastAPI:
    """Build the API application.

    Args:
        config: Service settings; loaded via :func:`load_config` if omitted
        pipeline: Pre-built pipeline (tests inject one with a fake engine)
    """
    config = config or load_config()
    pipeline = pipeline or TranscriptionPipeline(config)
    started_at = time.time()

    @contextlib.asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        if config.create_models_dir:
            config.models_dir.mkdir(parents=True, exist_ok=True)
        logger.info(
            "Warbler API starting",
            models_dir=str(config.models_dir),
            default_model=config.default_model,
            language=config.language,
        )
        yield
        logger.info("Warbler API stopped")

    app = FastAPI(title="Warbler", summary="WAV to timestamped transcript segments", lifespan=lifespan)
    app.state.config = config
    app.state.pipeline = pipeline

    if config.cors_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=config.cors_origins,
            allow_methods=["POST", "GET"],
            allow_headers=["Content-Type", "Accept"],
            max_age=3600,
        )

    @app.exception_handler(WarblerError)
    async def _handle_warbler_error(request: Request, exc: WarblerError) -> JSONResponse:
        return JSONResponse(status_code=exc.http_status, content={ERROR_FIELD: exc.message})

    @app.exception_handler(RequestValidationError)
    async def _handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
        error = InvalidRequestError(_describe_validation_errors(exc))
        logger.warning("Rejected malformed request", path=request.url.path, error=error.message)
        return await _handle_warbler_error(request, error)

    @app.post(
        "/transcribe",
        response_model=TranscribeResponse,
        responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
    )
    async def transcribe(
        request: Request,
        file: UploadFile | None = File(None),
        model: str | None = Form(None),
    ) -> TranscribeResponse | Response:
        audio = await file.read() if file is not None else b""
        segments = await run_until_disconnected(request, pipeline.transcribe(audio, model))
        if segments is None:
            return Response(status_code=CLIENT_CLOSED_REQUEST)
        return TranscribeResponse(
            transcription_segments=[_segment_to_response(s) for s in segments],
        )

    @app.get("/health", response_model=HealthResponse)
    async def health() -> HealthResponse:
        try:
            pipeline.invoker.check_binary()
            engine_available = True
        except ConfigurationError:
            engine_available = False
        try:
            pipeline.resolve_model(None)
            model_available = True
        except ConfigurationError:
            model_available = False

        return HealthResponse(
            status="ready" if engine_available and model_available else "degraded",
            engine_available=engine_available,
            default_model_available=model_available,
            uptime_seconds=round(time.time() - started_at, 3),
        )

    return app
