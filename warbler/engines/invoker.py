"""whisper-cli subprocess invocation.

The engine reads a WAV file on stdin and writes captions to stdout::

    whisper-cli -m <model> -f - -l <lang> -ovtt -of -

It does not start decoding until stdin reaches EOF, so the invoker
always closes stdin after writing the audio. stdout and stderr are
drained concurrently with the write so a chatty engine cannot fill a
pipe and deadlock the run.

The process handle is owned by :meth:`EngineInvoker._spawned` for its
whole life: whatever ends the run (success, write failure, timeout or
task cancellation) the child is killed if still running and reaped
before control leaves the invoker.
"""

from __future__ import annotations

import asyncio
import logging
import os
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path
from typing import cast

from warbler.domain.constants import DEFAULT_LANGUAGE
from warbler.domain.exceptions import (
    EngineExecutionError,
    EngineNotExecutableError,
    EngineNotFoundError,
    EngineSpawnError,
    EngineTimeoutError,
    EngineWriteError,
)
from warbler.domain.model import AudioBuffer, EngineInvocation

logger = logging.getLogger(__name__)

__all__ = ["EngineInvoker", "build_args"]


def build_args(model_path: Path, language: str = DEFAULT_LANGUAGE) -> tuple[str, ...]:
    """Return the fixed whisper-cli argument list (without the binary)."""
    return (
        "-m", str(model_path),
        "-f", "-",
        "-l", language,
        "-ovtt",
        "-of", "-",
    )


class EngineInvoker:
    """Runs the transcription engine once per call.

    Holds no per-run state, so one instance can serve concurrent requests.

    Args:
        binary: Path to the whisper-cli executable
        language: Language code passed with ``-l``
        timeout_s: Upper bound on one run, or None to wait indefinitely
    """

    def __init__(
        self,
        binary: Path,
        language: str = DEFAULT_LANGUAGE,
        timeout_s: float | None = None,
    ) -> None:
        self.binary = Path(binary)
        self.language = language
        self.timeout_s = timeout_s

    def check_binary(self) -> None:
        """Verify the engine binary exists and is executable.

        Raises:
            EngineNotFoundError: If nothing usable exists at ``binary``
            EngineNotExecutableError: If the file lacks execute permission
        """
        if not self.binary.is_file():
            raise EngineNotFoundError(self.binary)
        if not os.access(self.binary, os.X_OK):
            raise EngineNotExecutableError(self.binary)

    @asynccontextmanager
    async def _spawned(self, args: tuple[str, ...]) -> AsyncIterator[asyncio.subprocess.Process]:
        try:
            process = await asyncio.create_subprocess_exec(
                str(self.binary),
                *args,
                stdin=asyncio.subprocess.PIPE,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except FileNotFoundError as exc:
            raise EngineNotFoundError(self.binary, cause=exc) from exc
        except PermissionError as exc:
            raise EngineNotExecutableError(self.binary, cause=exc) from exc
        except OSError as exc:
            raise EngineSpawnError(self.binary, exc) from exc

        logger.debug("Spawned %s (PID %d)", self.binary.name, process.pid)
        try:
            yield process
        finally:
            if process.returncode is None:
                logger.warning("Killing unfinished engine process (PID %d)", process.pid)
                try:
                    process.kill()
                except ProcessLookupError:
                    pass
                await asyncio.shield(process.wait())

    async def _feed_stdin(self, process: asyncio.subprocess.Process, data: bytes) -> None:
        # All three pipes are requested in _spawned
        stdin = cast(asyncio.StreamWriter, process.stdin)
        try:
            stdin.write(data)
            await stdin.drain()
            stdin.close()
            await stdin.wait_closed()
        except (BrokenPipeError, ConnectionResetError) as exc:
            raise EngineWriteError(exc, bytes_total=len(data)) from exc

    async def _communicate(
        self,
        process: asyncio.subprocess.Process,
        data: bytes,
    ) -> tuple[bytes, bytes]:
        stdout_pipe = cast(asyncio.StreamReader, process.stdout)
        stderr_pipe = cast(asyncio.StreamReader, process.stderr)
        readers = [
            asyncio.ensure_future(stdout_pipe.read()),
            asyncio.ensure_future(stderr_pipe.read()),
        ]
        try:
            await self._feed_stdin(process, data)
            stdout, stderr = await asyncio.gather(*readers)
        finally:
            for reader in readers:
                if not reader.done():
                    reader.cancel()
        await process.wait()
        return stdout, stderr

    async def run(self, audio: AudioBuffer, model_path: Path) -> EngineInvocation:
        """Stream ``audio`` through the engine and collect its output.

        A zero exit status with empty stdout is a valid (empty) result.

        Raises:
            EngineNotFoundError: Binary missing
            EngineNotExecutableError: Binary lacks execute permission
            EngineSpawnError: The OS refused to start the process
            EngineWriteError: stdin closed before all audio was written
            EngineTimeoutError: ``timeout_s`` elapsed before the engine exited
            EngineExecutionError: Engine exited non-zero; carries its stderr
        """
        self.check_binary()
        args = build_args(model_path, self.language)

        async with self._spawned(args) as process:
            try:
                stdout, stderr = await asyncio.wait_for(
                    self._communicate(process, audio.data),
                    timeout=self.timeout_s,
                )
            except asyncio.TimeoutError as exc:
                raise EngineTimeoutError(self.timeout_s or 0.0) from exc
            returncode = process.returncode

        invocation = EngineInvocation(
            binary=self.binary,
            model_path=model_path,
            args=args,
            returncode=returncode if returncode is not None else -1,
            stdout=stdout.decode("utf-8", errors="replace"),
            stderr=stderr.decode("utf-8", errors="replace"),
        )
        logger.debug(
            "Engine exited with %d (%d bytes stdout, %d bytes stderr)",
            invocation.returncode,
            len(stdout),
            len(stderr),
        )
        if not invocation.succeeded:
            raise EngineExecutionError(invocation.returncode, invocation.stderr)
        return invocation
