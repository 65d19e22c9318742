"""Dependency-free value objects for the transcription pipeline."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from .constants import (
    REQUIRED_BITS_PER_SAMPLE,
    REQUIRED_CHANNELS,
    REQUIRED_SAMPLE_RATE,
)

__all__ = [
    "AudioBuffer",
    "AudioProfile",
    "EngineInvocation",
    "REQUIRED_PROFILE",
    "Segment",
]


@dataclass(frozen=True)
class AudioProfile:
    """Channel count, sample rate and bit depth of a waveform."""

    channels: int
    sample_rate: int
    bits_per_sample: int

    def mismatches(self, required: AudioProfile) -> dict[str, tuple[int, int]]:
        """Return ``{field: (expected, actual)}`` for every differing field."""
        diffs: dict[str, tuple[int, int]] = {}
        for name in ("channels", "sample_rate", "bits_per_sample"):
            expected = getattr(required, name)
            actual = getattr(self, name)
            if expected != actual:
                diffs[name] = (expected, actual)
        return diffs

    def __str__(self) -> str:
        channel_str = "mono" if self.channels == 1 else f"{self.channels} channels"
        return f"{channel_str}, {self.bits_per_sample}-bit, {self.sample_rate:,} Hz"


REQUIRED_PROFILE = AudioProfile(
    channels=REQUIRED_CHANNELS,
    sample_rate=REQUIRED_SAMPLE_RATE,
    bits_per_sample=REQUIRED_BITS_PER_SAMPLE,
)


@dataclass(frozen=True)
class AudioBuffer:
    """Uploaded WAV bytes plus the attributes read from their header.

    Attributes:
        data: The complete WAV file, header included. This is what the
            engine receives on standard input.
        profile: Channel count, sample rate and bit depth from the header
        frame_count: Number of audio frames declared by the header
    """

    data: bytes
    profile: AudioProfile
    frame_count: int = 0

    @property
    def size_bytes(self) -> int:
        return len(self.data)

    @property
    def duration_s(self) -> float:
        rate = self.profile.sample_rate
        return self.frame_count / rate if rate else 0.0

    def __repr__(self) -> str:
        return (
            f"AudioBuffer(size_bytes={self.size_bytes}, profile={self.profile!r}, "
            f"frame_count={self.frame_count})"
        )


@dataclass(frozen=True)
class EngineInvocation:
    """Outcome of one engine run.

    The live process handle never leaves the invoker; this record is
    created once both output streams have been fully collected.
    """

    binary: Path
    model_path: Path
    args: tuple[str, ...]
    returncode: int
    stdout: str
    stderr: str

    @property
    def argv(self) -> list[str]:
        return [str(self.binary), *self.args]

    @property
    def succeeded(self) -> bool:
        return self.returncode == 0


@dataclass(frozen=True)
class Segment:
    """One timed unit of transcript text.

    ``start`` and ``end`` are kept as the timestamp strings the engine
    printed (e.g. ``"00:00:02.000"``); they default to empty strings
    when the engine emitted a malformed time span.
    """

    start: str
    end: str
    text: str

    def to_dict(self) -> dict[str, str]:
        return {"start": self.start, "end": self.end, "text": self.text}
