"""Error taxonomy for the transcription pipeline.

Every failure is terminal for the request that raised it. Caller-input
errors report HTTP 400; environment and configuration errors report 500.
The ``message`` of each error is what callers see, so it never contains
file-system paths; paths and other diagnostics live in ``context``,
which is logged but not returned over HTTP.
"""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Any, ClassVar

from .error_schema import ErrorDict

if TYPE_CHECKING:
    from pathlib import Path

    from rich.panel import Panel

__all__ = [
    "AudioInputError",
    "ConfigurationError",
    "EngineError",
    "EngineExecutionError",
    "EngineNotExecutableError",
    "EngineNotFoundError",
    "EngineSpawnError",
    "EngineTimeoutError",
    "EngineWriteError",
    "InvalidAudioFormatError",
    "InvalidRequestError",
    "ModelNotFoundError",
    "NoAudioProvidedError",
    "UnsupportedAudioProfileError",
    "WarblerError",
]


class WarblerError(Exception):
    """Base error carrying context and suggestions.

    Attributes:
        message: Caller-safe description of what went wrong
        cause: Underlying exception, if any
        context: Diagnostic key/value pairs for logs
        suggestions: Actionable hints for whoever operates the service
        timestamp: When the error was created
    """

    http_status: ClassVar[int] = 500

    def __init__(
        self,
        message: str,
        *,
        cause: BaseException | None = None,
        context: dict[str, Any] | None = None,
        suggestions: list[str] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.cause = cause
        self.context: dict[str, Any] = dict(context or {})
        self.suggestions: list[str] = list(suggestions or [])
        self.timestamp = datetime.now()

    def format_error(self) -> str:
        """Format as plain text for terminals and log files."""
        lines = [f"✗ Error: {self.message}"]
        if self.context:
            lines.append("")
            lines.append("Details:")
            for key, value in self.context.items():
                lines.append(f"  {key}: {value}")
        if self.suggestions:
            lines.append("")
            lines.append("Possible solutions:")
            for suggestion in self.suggestions:
                lines.append(f"  • {suggestion}")
        if self.cause is not None:
            lines.append("")
            lines.append(f"Caused by: {type(self.cause).__name__}: {self.cause}")
        return "\n".join(lines)

    def format_rich(self) -> Panel:
        """Format as a Rich panel for the CLI."""
        from rich.panel import Panel
        from rich.text import Text

        body = Text()
        body.append(self.message, style="bold")
        if self.context:
            body.append("\n\nDetails:\n", style="dim")
            for key, value in self.context.items():
                body.append(f"  {key}: ", style="cyan")
                body.append(f"{value}\n")
        if self.suggestions:
            body.append("\nPossible solutions:\n", style="dim")
            for suggestion in self.suggestions:
                body.append(f"  • {suggestion}\n", style="green")
        if self.cause is not None:
            body.append(f"\nCaused by: {type(self.cause).__name__}: {self.cause}", style="red")
        return Panel(body, title=f"[red]{type(self).__name__}[/red]", border_style="red")

    def to_dict(self) -> ErrorDict:
        """Serialize for logs and structured consumers."""
        return {
            "error_type": type(self).__name__,
            "message": self.message,
            "http_status": self.http_status,
            "context": dict(self.context),
            "suggestions": list(self.suggestions),
            "timestamp": self.timestamp.isoformat(),
            "cause": str(self.cause) if self.cause is not None else None,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> WarblerError:
        """Rebuild an error from ``to_dict()`` output.

        The original cause is not recoverable and is dropped.
        """
        error = cls.__new__(cls)
        WarblerError.__init__(
            error,
            data.get("message", ""),
            context=data.get("context") or {},
            suggestions=data.get("suggestions") or [],
        )
        timestamp = data.get("timestamp")
        if timestamp:
            error.timestamp = datetime.fromisoformat(timestamp)
        return error


# Caller input (HTTP 400)


class InvalidRequestError(WarblerError):
    """The multipart form does not have the expected parts."""

    http_status = 400

    def __init__(self, problems: list[str]) -> None:
        self.problems = list(problems)
        super().__init__(
            f"Invalid request: {'; '.join(self.problems)}",
            context={"problems": self.problems},
            suggestions=["Send the audio as a file part named 'file' and the model name as a text part"],
        )


class AudioInputError(WarblerError):
    """The uploaded audio cannot be accepted."""

    http_status = 400


class NoAudioProvidedError(AudioInputError):
    def __init__(self) -> None:
        super().__init__(
            "No WAV file provided",
            suggestions=["Send the audio as a multipart part named 'file'"],
        )


class InvalidAudioFormatError(AudioInputError):
    """The upload is not a readable uncompressed WAV container."""

    def __init__(self, reason: str, *, size_bytes: int = 0, cause: BaseException | None = None) -> None:
        super().__init__(
            f"Invalid WAV format: {reason}",
            cause=cause,
            context={"size_bytes": size_bytes, "reason": reason},
            suggestions=[
                "Upload an uncompressed PCM WAV file",
                "Convert with: ffmpeg -i input -ar 16000 -ac 1 -c:a pcm_s16le output.wav",
            ],
        )


class UnsupportedAudioProfileError(AudioInputError):
    """The WAV header is valid but not mono/16-bit/16 kHz.

    ``mismatches`` maps each offending field to ``(expected, actual)``.
    """

    def __init__(self, mismatches: dict[str, tuple[int, int]]) -> None:
        self.mismatches = dict(mismatches)
        details = ", ".join(
            f"{name} {actual} (expected {expected})"
            for name, (expected, actual) in self.mismatches.items()
        )
        super().__init__(
            f"WAV must be mono, 16-bit, 16 kHz; got {details}",
            context={name: actual for name, (_, actual) in self.mismatches.items()},
            suggestions=[
                "Resample with: ffmpeg -i input -ar 16000 -ac 1 -c:a pcm_s16le output.wav",
            ],
        )


# Environment and configuration (HTTP 500)


class ConfigurationError(WarblerError):
    """A configured file (model or engine binary) is unusable."""

    http_status = 500


class ModelNotFoundError(ConfigurationError):
    def __init__(self, model_name: str, models_dir: Path | None = None) -> None:
        context: dict[str, Any] = {"model": model_name}
        if models_dir is not None:
            context["models_dir"] = str(models_dir)
        super().__init__(
            f"Model file {model_name} not found in models directory",
            context=context,
            suggestions=[
                "Check the model name matches a file in the models directory",
                "Download ggml models from https://huggingface.co/ggerganov/whisper.cpp",
            ],
        )


class EngineNotFoundError(ConfigurationError):
    def __init__(self, binary: Path, *, cause: BaseException | None = None) -> None:
        super().__init__(
            "Transcription engine binary not found",
            cause=cause,
            context={"binary": str(binary)},
            suggestions=[
                "Build whisper.cpp and point engine_binary at whisper-cli",
                "Set WARBLER_ENGINE_BINARY or engine_binary in the config file",
            ],
        )


class EngineNotExecutableError(ConfigurationError):
    def __init__(self, binary: Path, *, cause: BaseException | None = None) -> None:
        super().__init__(
            "Transcription engine binary is not executable",
            cause=cause,
            context={"binary": str(binary)},
            suggestions=[f"Run: chmod +x {binary}"],
        )


class EngineError(WarblerError):
    """The engine process could not complete a run."""

    http_status = 500


class EngineSpawnError(EngineError):
    def __init__(self, binary: Path, cause: BaseException) -> None:
        # strerror omits the filename OSError appends to str()
        reason = getattr(cause, "strerror", None) or str(cause)
        super().__init__(
            f"Failed to start transcription engine: {reason}",
            cause=cause,
            context={"binary": str(binary)},
        )


class EngineWriteError(EngineError):
    def __init__(self, cause: BaseException, *, bytes_total: int = 0) -> None:
        super().__init__(
            "Failed to stream audio to transcription engine",
            cause=cause,
            context={"bytes_total": bytes_total},
            suggestions=["The engine exited before reading all audio; check its stderr"],
        )


class EngineExecutionError(EngineError):
    """The engine exited with a non-zero status.

    ``stderr`` holds the engine's diagnostic output verbatim.
    """

    def __init__(self, returncode: int, stderr: str) -> None:
        self.returncode = returncode
        self.stderr = stderr
        super().__init__(
            f"Transcription failed: {stderr}",
            context={"exit_code": returncode, "stderr": stderr},
        )


class EngineTimeoutError(EngineError):
    def __init__(self, timeout_s: float) -> None:
        super().__init__(
            f"Transcription engine did not finish within {timeout_s:g}s",
            context={"timeout_s": timeout_s},
            suggestions=["Raise engine_timeout_s or use a smaller model"],
        )
