"""HTTP transcription service (FastAPI + uvicorn).

Usage:
    warbler serve                     # listen on 0.0.0.0:6000
    curl -F file=@speech.wav -F model=ggml-small.bin http://localhost:6000/transcribe

Programmatic usage:
    from warbler.server import create_app

    app = create_app(AppConfig(models_dir=Path("models")))
"""

from warbler.server.api import (
    ErrorResponse,
    HealthResponse,
    SegmentResponse,
    TranscribeResponse,
    create_app,
    run_until_disconnected,
)

__all__ = [
    "ErrorResponse",
    "HealthResponse",
    "SegmentResponse",
    "TranscribeResponse",
    "create_app",
    "run_until_disconnected",
]
