"""Request-scoped transcription pipeline.

validate audio -> resolve model -> run engine -> parse captions

Each step short-circuits on failure. Errors are logged here, once, with
their diagnostic context before they propagate to the caller, who only
sees the caller-safe message.
"""

from __future__ import annotations

import time
from pathlib import Path, PurePath

import structlog

from warbler.audio.validation import check_profile, format_bytes, inspect_wav
from warbler.config.schema import AppConfig
from warbler.domain.exceptions import (
    ModelNotFoundError,
    NoAudioProvidedError,
    WarblerError,
)
from warbler.domain.model import REQUIRED_PROFILE, AudioProfile, Segment
from warbler.engines.captions import iter_segments
from warbler.engines.invoker import EngineInvoker

logger = structlog.get_logger(__name__)

__all__ = ["TranscriptionPipeline", "is_plain_filename"]


def is_plain_filename(name: str) -> bool:
    """True if ``name`` names a file directly inside a directory."""
    if not name or name in (".", ".."):
        return False
    return PurePath(name).name == name and "/" not in name and "\\" not in name


class TranscriptionPipeline:
    """Turns uploaded WAV bytes into transcript segments.

    All filesystem locations come from ``config``; the pipeline keeps no
    state between calls and is safe to share across concurrent requests.

    Usage:
        pipeline = TranscriptionPipeline(AppConfig(models_dir=Path("models")))
        segments = await pipeline.transcribe(wav_bytes, "ggml-small.bin")
    """

    def __init__(
        self,
        config: AppConfig,
        *,
        invoker: EngineInvoker | None = None,
        required_profile: AudioProfile = REQUIRED_PROFILE,
    ) -> None:
        self.config = config
        self.invoker = invoker or EngineInvoker(
            config.engine_binary,
            language=config.language,
            timeout_s=config.engine_timeout_s,
        )
        self.required_profile = required_profile

    def resolve_model(self, model_name: str | None) -> Path:
        """Map a caller-supplied model name to a file in the models directory.

        Blank or missing names select ``config.default_model``.

        Raises:
            ModelNotFoundError: If the name is not a plain filename or the
                file does not exist
        """
        name = (model_name or "").strip() or self.config.default_model
        if not is_plain_filename(name):
            raise ModelNotFoundError(name)
        path = self.config.models_dir / name
        if not path.is_file():
            raise ModelNotFoundError(name, self.config.models_dir)
        return path

    async def transcribe(self, audio_bytes: bytes | None, model_name: str | None = None) -> list[Segment]:
        """Run the full pipeline for one request.

        Raises:
            WarblerError: The first failing step's error; see
                :mod:`warbler.domain.exceptions` for the taxonomy
        """
        step = "audio"
        start = time.perf_counter()
        try:
            if not audio_bytes:
                raise NoAudioProvidedError()
            logger.info("Received WAV upload", size=format_bytes(len(audio_bytes)))

            buffer = inspect_wav(audio_bytes)
            check_profile(buffer, self.required_profile)

            step = "model"
            model_path = self.resolve_model(model_name)

            step = "engine"
            invocation = await self.invoker.run(buffer, model_path)

            step = "parse"
            segments = list(iter_segments(invocation.stdout.splitlines()))
        except WarblerError as exc:
            logger.error(
                "Transcription request failed",
                step=step,
                error_type=type(exc).__name__,
                error=exc.message,
                cause=repr(exc.cause) if exc.cause is not None else None,
                **exc.context,
            )
            raise

        logger.info(
            "Transcription finished",
            model=model_path.name,
            segments=len(segments),
            audio_s=round(buffer.duration_s, 2),
            elapsed_s=round(time.perf_counter() - start, 2),
        )
        return segments
