"""Constants for the Warbler domain model.

This module centralizes magic strings and fixed values shared by the
audio validator, the engine invoker and the caption parser.
"""
from __future__ import annotations

from enum import Enum

# Model store
DEFAULT_MODEL_NAME = "ggml-base.bin"
DEFAULT_MODELS_DIR = "./models"
DEFAULT_ENGINE_BINARY = "/app/build/bin/whisper-cli"
DEFAULT_LANGUAGE = "pt"

# Audio profile accepted by the engine
REQUIRED_CHANNELS = 1
REQUIRED_SAMPLE_RATE = 16000
REQUIRED_BITS_PER_SAMPLE = 16

# Caption-track tokens
WEBVTT_HEADER = "WEBVTT"
CUE_ARROW = "-->"
TIME_SPAN_SEPARATOR = " --> "

# Response payload field names
SEGMENTS_FIELD = "transcription_segments"
ERROR_FIELD = "error"


class OutputFormat(str, Enum):
    """Output formats supported by ``warbler transcribe``."""
    TABLE = "table"
    JSON = "json"
    VTT = "vtt"
