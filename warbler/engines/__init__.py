"""Transcription engine process handling and output parsing."""

from .captions import (
    CaptionParser,
    ParserState,
    format_captions,
    iter_segments,
    parse_captions,
)
from .invoker import EngineInvoker, build_args

__all__ = [
    "CaptionParser",
    "EngineInvoker",
    "ParserState",
    "build_args",
    "format_captions",
    "iter_segments",
    "parse_captions",
]
