"""Application workflows."""

from .pipeline import TranscriptionPipeline, is_plain_filename

__all__ = ["TranscriptionPipeline", "is_plain_filename"]
