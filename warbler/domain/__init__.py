"""Dependency-free domain models and errors for Warbler."""

from .constants import (
    DEFAULT_LANGUAGE,
    DEFAULT_MODEL_NAME,
    OutputFormat,
)
from .exceptions import (
    AudioInputError,
    ConfigurationError,
    EngineError,
    EngineExecutionError,
    EngineNotExecutableError,
    EngineNotFoundError,
    EngineSpawnError,
    EngineTimeoutError,
    EngineWriteError,
    InvalidAudioFormatError,
    InvalidRequestError,
    ModelNotFoundError,
    NoAudioProvidedError,
    UnsupportedAudioProfileError,
    WarblerError,
)
from .model import (
    REQUIRED_PROFILE,
    AudioBuffer,
    AudioProfile,
    EngineInvocation,
    Segment,
)

__all__ = [
    "AudioBuffer",
    "AudioInputError",
    "AudioProfile",
    "ConfigurationError",
    "DEFAULT_LANGUAGE",
    "DEFAULT_MODEL_NAME",
    "EngineError",
    "EngineExecutionError",
    "EngineInvocation",
    "EngineNotExecutableError",
    "EngineNotFoundError",
    "EngineSpawnError",
    "EngineTimeoutError",
    "EngineWriteError",
    "InvalidAudioFormatError",
    "InvalidRequestError",
    "ModelNotFoundError",
    "NoAudioProvidedError",
    "OutputFormat",
    "REQUIRED_PROFILE",
    "Segment",
    "UnsupportedAudioProfileError",
    "WarblerError",
]
