"""``warbler check``: verify the engine binary and model file."""

from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console

from warbler.app.pipeline import TranscriptionPipeline
from warbler.cli.helpers import load_cli_config
from warbler.domain.exceptions import ConfigurationError

console = Console()


def register_check(app: typer.Typer) -> None:
    @app.command("check")
    def check_cmd(
        model: str | None = typer.Option(None, "--model", "-m", help="Model filename to check (default: configured default)"),
        config_path: Path | None = typer.Option(None, "--config", "-c", help="Path to config TOML"),
    ) -> None:
        """Check that the service can run a transcription."""
        config = load_cli_config(config_path)
        pipeline = TranscriptionPipeline(config)
        ok = True

        try:
            pipeline.invoker.check_binary()
            console.print(f"[green]✓ Engine:[/green] {config.engine_binary}")
        except ConfigurationError as exc:
            ok = False
            console.print(f"[red]✗ Engine:[/red] {exc.message} ({config.engine_binary})")

        try:
            model_path = pipeline.resolve_model(model)
            console.print(f"[green]✓ Model:[/green] {model_path}")
        except ConfigurationError as exc:
            ok = False
            console.print(f"[red]✗ Model:[/red] {exc.message} ({config.models_dir})")

        console.print(f"  Language: {config.language}")
        console.print(f"  Timeout: {config.engine_timeout_s or 'none'}")

        if not ok:
            raise typer.Exit(code=1)
