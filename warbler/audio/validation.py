"""WAV header inspection and profile enforcement.

Audio is validated before any model lookup or process spawn so that a
bad upload is rejected without paying for an engine run. Nothing is
resampled or converted: buffers that do not already match the required
profile are refused.
"""

from __future__ import annotations

import io
import struct
import wave

from warbler.domain.exceptions import (
    InvalidAudioFormatError,
    UnsupportedAudioProfileError,
)
from warbler.domain.model import REQUIRED_PROFILE, AudioBuffer, AudioProfile

WAVE_FORMAT_EXTENSIBLE = 0xFFFE
# KSDATAFORMAT_SUBTYPE_PCM
PCM_SUBFORMAT = b"\x01\x00\x00\x00\x00\x00\x10\x00\x80\x00\x00\xaa\x00\x38\x9b\x71"

__all__ = [
    "check_profile",
    "format_bytes",
    "inspect_wav",
    "validate_wav",
]


def _read_extensible_header(data: bytes) -> tuple[AudioProfile, int] | None:
    """Read a WAVE_FORMAT_EXTENSIBLE header whose subformat is integer PCM.

    Returns the profile and frame count, or None if ``data`` is not such a file.
    """
    if len(data) < 12 or data[:4] != b"RIFF" or data[8:12] != b"WAVE":
        return None

    fmt: bytes | None = None
    data_size: int | None = None
    offset = 12
    while offset + 8 <= len(data):
        chunk_id, chunk_size = struct.unpack_from("<4sI", data, offset)
        body = data[offset + 8 : offset + 8 + chunk_size]
        if chunk_id == b"fmt ":
            fmt = body
        elif chunk_id == b"data":
            data_size = len(body)
            break
        # Chunks are padded to an even length
        offset += 8 + chunk_size + (chunk_size & 1)

    if fmt is None or data_size is None or len(fmt) < 40:
        return None
    format_tag, channels, sample_rate, _, block_align, bits = struct.unpack_from("<HHIIHH", fmt)
    if format_tag != WAVE_FORMAT_EXTENSIBLE or fmt[24:40] != PCM_SUBFORMAT or block_align == 0:
        return None

    profile = AudioProfile(channels=channels, sample_rate=sample_rate, bits_per_sample=bits)
    return profile, data_size // block_align


def inspect_wav(data: bytes) -> AudioBuffer:
    """Parse ``data`` as an uncompressed WAV container.

    Args:
        data: Complete WAV file contents

    Returns:
        AudioBuffer wrapping ``data`` with channel count, sample rate,
        bit depth and frame count read from the header

    Raises:
        InvalidAudioFormatError: If the header is missing, truncated or
            describes a non-PCM encoding
    """
    try:
        with wave.open(io.BytesIO(data), "rb") as wf:
            profile = AudioProfile(
                channels=wf.getnchannels(),
                sample_rate=wf.getframerate(),
                bits_per_sample=wf.getsampwidth() * 8,
            )
            frame_count = wf.getnframes()
    except (wave.Error, EOFError, struct.error) as exc:
        # Older wave modules refuse extensible headers even for plain PCM
        extensible = _read_extensible_header(data)
        if extensible is None:
            raise InvalidAudioFormatError(
                str(exc) or type(exc).__name__,
                size_bytes=len(data),
                cause=exc,
            ) from exc
        profile, frame_count = extensible

    return AudioBuffer(data=data, profile=profile, frame_count=frame_count)


def check_profile(buffer: AudioBuffer, required: AudioProfile = REQUIRED_PROFILE) -> None:
    """Reject buffers whose header does not match ``required`` exactly.

    Raises:
        UnsupportedAudioProfileError: Naming every mismatched field
    """
    mismatches = buffer.profile.mismatches(required)
    if mismatches:
        raise UnsupportedAudioProfileError(mismatches)


def validate_wav(data: bytes, required: AudioProfile = REQUIRED_PROFILE) -> AudioBuffer:
    """Inspect ``data`` and enforce ``required`` in one step."""
    buffer = inspect_wav(data)
    check_profile(buffer, required)
    return buffer


def format_bytes(size: int) -> str:
    """Format a byte count for log messages.

    Example:
        >>> format_bytes(1536)
        '1.50 KB'
    """
    kb = 1024
    mb = 1024 * kb
    gb = 1024 * mb
    if size >= gb:
        return f"{size / gb:.2f} GB"
    if size >= mb:
        return f"{size / mb:.2f} MB"
    if size >= kb:
        return f"{size / kb:.2f} KB"
    return f"{size} bytes"
