"""Shared fixtures: WAV builders and a scriptable fake whisper-cli.

The fake engine is a small Python script behind a ``/bin/sh`` wrapper so
it runs with the test interpreter regardless of shebang length limits.
It records its argv, stdin size and PID to a JSON file next to itself,
then behaves according to ``mode``:

- ``ok``: print ``output`` to stdout and exit 0
- ``fail``: print ``stderr`` to stderr and exit 3
- ``early_exit``: exit 1 without reading stdin
- ``hang``: read stdin, then sleep until killed
"""

from __future__ import annotations

import io
import json
import struct
import sys
import wave
from dataclasses import dataclass
from pathlib import Path
from typing import Callable

import pytest

from warbler.config.schema import AppConfig

SAMPLE_VTT = """WEBVTT

00:00:00.000 --> 00:00:02.000
Hello world

00:00:02.000 --> 00:00:04.000
Second line
"""

_ENGINE_SCRIPT = """\
import json, os, sys, time
mode = {mode!r}
record = {{"args": sys.argv[1:], "pid": os.getpid(), "stdin_bytes": None}}
if mode != "early_exit":
    record["stdin_bytes"] = len(sys.stdin.buffer.read())
tmp = {record_path!r} + ".%d.tmp" % os.getpid()
with open(tmp, "w") as fh:
    json.dump(record, fh)
os.replace(tmp, {record_path!r})
if mode == "early_exit":
    sys.exit(1)
if mode == "fail":
    sys.stderr.buffer.write({stderr!a}.encode("utf-8"))
    sys.exit(3)
if mode == "hang":
    time.sleep(60)
sys.stdout.buffer.write({output!a}.encode("utf-8"))
"""


def make_wav(
    *,
    channels: int = 1,
    sample_rate: int = 16000,
    sample_width: int = 2,
    frames: int = 1600,
) -> bytes:
    """Build an in-memory PCM WAV file of silence."""
    buf = io.BytesIO()
    with wave.open(buf, "wb") as wf:
        wf.setnchannels(channels)
        wf.setsampwidth(sample_width)
        wf.setframerate(sample_rate)
        wf.writeframes(b"\x00" * frames * channels * sample_width)
    return buf.getvalue()


# KSDATAFORMAT_SUBTYPE_PCM
PCM_GUID = b"\x01\x00\x00\x00\x00\x00\x10\x00\x80\x00\x00\xaa\x00\x38\x9b\x71"


def make_extensible_wav(
    *,
    channels: int = 1,
    sample_rate: int = 16000,
    bits: int = 16,
    frames: int = 1600,
    subformat: bytes = PCM_GUID,
) -> bytes:
    """Build a WAV using the WAVE_FORMAT_EXTENSIBLE fmt chunk layout."""
    block_align = channels * bits // 8
    channel_mask = 0x4 if channels == 1 else 0x3
    fmt = struct.pack(
        "<HHIIHHHHI",
        0xFFFE,
        channels,
        sample_rate,
        sample_rate * block_align,
        block_align,
        bits,
        22,
        bits,
        channel_mask,
    ) + subformat
    samples = b"\x00" * frames * block_align
    body = (
        b"WAVE"
        + b"fmt " + struct.pack("<I", len(fmt)) + fmt
        + b"LIST" + struct.pack("<I", 3) + b"abc\x00"
        + b"data" + struct.pack("<I", len(samples)) + samples
    )
    return b"RIFF" + struct.pack("<I", len(body)) + body


@dataclass
class FakeEngine:
    binary: Path
    record_path: Path

    def record(self) -> dict:
        return json.loads(self.record_path.read_text())

    @property
    def was_called(self) -> bool:
        return self.record_path.exists()


@pytest.fixture
def valid_wav() -> bytes:
    return make_wav()


@pytest.fixture
def wav_factory() -> Callable[..., bytes]:
    return make_wav


@pytest.fixture
def extensible_wav_factory() -> Callable[..., bytes]:
    return make_extensible_wav


@pytest.fixture
def fake_engine(tmp_path: Path) -> Callable[..., FakeEngine]:
    """Factory writing a fake whisper-cli into ``tmp_path``."""

    def _make(mode: str = "ok", output: str = SAMPLE_VTT, stderr: str = "") -> FakeEngine:
        engine_dir = tmp_path / "engine"
        engine_dir.mkdir(exist_ok=True)
        record_path = engine_dir / "record.json"
        script = engine_dir / "fake_whisper.py"
        script.write_text(
            _ENGINE_SCRIPT.format(
                mode=mode,
                record_path=str(record_path),
                stderr=stderr,
                output=output,
            )
        )
        binary = engine_dir / "whisper-cli"
        binary.write_text(f'#!/bin/sh\nexec "{sys.executable}" "{script}" "$@"\n')
        binary.chmod(0o755)
        return FakeEngine(binary=binary, record_path=record_path)

    return _make


@pytest.fixture
def models_dir(tmp_path: Path) -> Path:
    directory = tmp_path / "models"
    directory.mkdir()
    (directory / "ggml-base.bin").write_bytes(b"fake model")
    (directory / "ggml-small.bin").write_bytes(b"fake model")
    return directory


@pytest.fixture
def make_config(models_dir: Path) -> Callable[..., AppConfig]:
    def _make(engine: FakeEngine | Path | None = None, **overrides: object) -> AppConfig:
        binary = engine.binary if isinstance(engine, FakeEngine) else engine
        return AppConfig(
            engine_binary=binary or models_dir.parent / "missing-whisper-cli",
            models_dir=models_dir,
            **overrides,
        )

    return _make
