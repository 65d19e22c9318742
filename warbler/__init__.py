"""Warbler: WAV uploads in, timestamped transcript segments out.

Wraps the whisper.cpp ``whisper-cli`` executable behind an HTTP API.
"""

from warbler.app.pipeline import TranscriptionPipeline
from warbler.config.schema import AppConfig, load_config
from warbler.domain.exceptions import WarblerError
from warbler.domain.model import Segment

__version__ = "0.1.0"

__all__ = [
    "AppConfig",
    "Segment",
    "TranscriptionPipeline",
    "WarblerError",
    "__version__",
    "load_config",
]
