"""Streaming parser for whisper-cli caption output.

whisper-cli writes WebVTT-style text: a ``WEBVTT`` header, then cue
blocks made of a time-span line and zero or more text lines. Some builds
prefix each cue with a bracketed span (``[00:00:00.000 --> 00:00:01.000]
text``) and print consecutive cues without a blank line between them,
so a new cue header also closes the previous block.

The parser is a two-state machine fed one line at a time. It never
raises: malformed spans degrade to empty ``start``/``end`` strings and
stray lines outside a cue are dropped, because a partial transcript is
more useful to callers than a failed request.

Example:
    >>> parse_captions("WEBVTT\\n\\n00:00:00.000 --> 00:00:02.000\\nHello\\n")
    [Segment(start='00:00:00.000', end='00:00:02.000', text='Hello')]
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from enum import Enum

from warbler.domain.constants import CUE_ARROW, TIME_SPAN_SEPARATOR, WEBVTT_HEADER
from warbler.domain.model import Segment

__all__ = [
    "CaptionParser",
    "ParserState",
    "format_captions",
    "iter_segments",
    "parse_captions",
]


class ParserState(str, Enum):
    IDLE = "idle"
    IN_BLOCK = "in_block"


@dataclass
class _PendingCue:
    time_span: str = ""
    text_lines: list[str] = field(default_factory=list)

    @property
    def complete(self) -> bool:
        return bool(self.time_span) and any(self.text_lines)


def _split_time_span(raw: str) -> tuple[str, str]:
    parts = raw.strip("[]").split(TIME_SPAN_SEPARATOR)
    start = parts[0].strip()
    end = parts[1].strip() if len(parts) > 1 else ""
    return start, end


class CaptionParser:
    """Line-at-a-time caption parser.

    Usage:
        parser = CaptionParser()
        for line in lines:
            segment = parser.feed(line)
            if segment is not None:
                ...
        last = parser.finish()

    A parser instance holds state for one output stream; call
    :meth:`reset` (or create a new instance) before reusing it.
    """

    def __init__(self) -> None:
        self.state = ParserState.IDLE
        self._pending = _PendingCue()

    def reset(self) -> None:
        self.state = ParserState.IDLE
        self._pending = _PendingCue()

    def _flush(self) -> Segment | None:
        """Emit the pending cue if it is complete, then clear it."""
        pending = self._pending
        self._pending = _PendingCue()
        self.state = ParserState.IDLE
        if not pending.complete:
            return None
        start, end = _split_time_span(pending.time_span)
        text = "\n".join(pending.text_lines).strip()
        return Segment(start=start, end=end, text=text)

    def _open_cue(self, line: str) -> None:
        bracket = line.find("]")
        if bracket >= 0:
            time_span = line[: bracket + 1].strip()
            first_text = line[bracket + 1 :].strip()
            text_lines = [first_text] if first_text else []
        else:
            time_span = line
            text_lines = []
        self._pending = _PendingCue(time_span=time_span, text_lines=text_lines)
        self.state = ParserState.IN_BLOCK

    def feed(self, line: str) -> Segment | None:
        """Advance the state machine by one line.

        Returns the segment completed by this line, if any.
        """
        line = line.strip()

        if not line:
            # A blank line inside an incomplete cue leaves it open.
            if self.state is ParserState.IN_BLOCK and self._pending.complete:
                return self._flush()
            return None

        if line == WEBVTT_HEADER:
            return None

        if CUE_ARROW in line:
            segment = None
            if self.state is ParserState.IN_BLOCK and self._pending.complete:
                segment = self._flush()
            self._open_cue(line)
            return segment

        if self.state is ParserState.IN_BLOCK:
            self._pending.text_lines.append(line)
        return None

    def finish(self) -> Segment | None:
        """Signal end of stream and emit the final cue, if complete."""
        if self.state is ParserState.IN_BLOCK:
            return self._flush()
        return None


def iter_segments(lines: Iterable[str]) -> Iterator[Segment]:
    """Lazily parse ``lines`` into segments, in caption order."""
    parser = CaptionParser()
    for line in lines:
        segment = parser.feed(line)
        if segment is not None:
            yield segment
    segment = parser.finish()
    if segment is not None:
        yield segment


def parse_captions(text: str) -> list[Segment]:
    """Parse complete engine output into a list of segments."""
    return list(iter_segments(text.splitlines()))


def format_captions(segments: Iterable[Segment]) -> str:
    """Serialize segments back into WebVTT-style caption text.

    ``parse_captions(format_captions(segments))`` reproduces ``segments``
    as long as no text field contains a blank line. A cue with an empty
    start or end is written in the bracketed form, the only header shape
    that parses back to an empty side.
    """
    blocks = [WEBVTT_HEADER, ""]
    for segment in segments:
        header = f"{segment.start}{TIME_SPAN_SEPARATOR}{segment.end}"
        if not (segment.start and segment.end):
            header = f"[{header}]"
        blocks.append(header)
        blocks.append(segment.text)
        blocks.append("")
    return "\n".join(blocks)
