"""``warbler serve``: run the HTTP API."""

from __future__ import annotations

from pathlib import Path

import typer
import uvicorn

from warbler.cli.helpers import configure_logging, load_cli_config
from warbler.server.api import create_app


def register_serve(app: typer.Typer) -> None:
    @app.command("serve")
    def serve_cmd(
        config_path: Path | None = typer.Option(
            None, "--config", "-c", help="Path to config TOML (default: $WARBLER_CONFIG)"
        ),
        host: str | None = typer.Option(None, "--host", help="Listen address (overrides config)"),
        port: int | None = typer.Option(None, "--port", "-p", help="Listen port (overrides config)"),
    ) -> None:
        """Start the transcription HTTP service."""
        config = load_cli_config(config_path)
        updates = {k: v for k, v in {"host": host, "port": port}.items() if v is not None}
        if updates:
            config = config.model_copy(update=updates)

        configure_logging(config.log_level)
        uvicorn.run(
            create_app(config),
            host=config.host,
            port=config.port,
            log_level=config.log_level.lower(),
        )
