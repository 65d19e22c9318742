"""``warbler transcribe``: run the pipeline locally on one WAV file."""

from __future__ import annotations

import asyncio
import json
from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from warbler.app.pipeline import TranscriptionPipeline
from warbler.cli.helpers import configure_logging, err_console, load_cli_config
from warbler.domain.constants import SEGMENTS_FIELD, OutputFormat
from warbler.domain.exceptions import AudioInputError, WarblerError
from warbler.domain.model import Segment
from warbler.engines.captions import format_captions

console = Console()


def _render(segments: list[Segment], fmt: OutputFormat) -> None:
    if fmt is OutputFormat.JSON:
        typer.echo(json.dumps({SEGMENTS_FIELD: [s.to_dict() for s in segments]}, ensure_ascii=False, indent=2))
    elif fmt is OutputFormat.VTT:
        typer.echo(format_captions(segments))
    else:
        table = Table(show_lines=False)
        table.add_column("Start", style="cyan", no_wrap=True)
        table.add_column("End", style="cyan", no_wrap=True)
        table.add_column("Text")
        for segment in segments:
            table.add_row(segment.start, segment.end, segment.text)
        console.print(table)
        console.print(f"[dim]{len(segments)} segment(s)[/dim]")


def register_transcribe(app: typer.Typer) -> None:
    @app.command("transcribe")
    def transcribe_cmd(
        audio: Path = typer.Argument(..., metavar="AUDIO", help="Mono 16-bit 16 kHz WAV file"),
        model: str | None = typer.Option(None, "--model", "-m", help="Model filename in the models directory"),
        output_format: OutputFormat = typer.Option(OutputFormat.TABLE, "--format", "-f", help="Output format"),
        config_path: Path | None = typer.Option(None, "--config", "-c", help="Path to config TOML"),
        verbose: bool = typer.Option(False, "--verbose", "-v", help="Log pipeline progress to stderr"),
    ) -> None:
        """Transcribe a WAV file without starting the server."""
        if not audio.is_file():
            err_console.print(f"[red]Error: file not found: {audio}[/red]")
            raise typer.Exit(code=2)

        config = load_cli_config(config_path)
        configure_logging(config.log_level if verbose else "WARNING")
        pipeline = TranscriptionPipeline(config)

        try:
            segments = asyncio.run(pipeline.transcribe(audio.read_bytes(), model))
        except WarblerError as exc:
            err_console.print(exc.format_rich())
            raise typer.Exit(code=2 if isinstance(exc, AudioInputError) else 1) from exc

        _render(segments, output_format)
