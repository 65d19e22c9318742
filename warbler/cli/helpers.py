"""Shared CLI helpers: logging setup and config loading."""
from __future__ import annotations

import logging
from pathlib import Path

import structlog
import typer
from pydantic import ValidationError
from rich.console import Console

from warbler.config.schema import AppConfig, load_config

err_console = Console(stderr=True)


def configure_logging(level: str = "INFO") -> None:
    """Route stdlib and structlog output through one stderr handler."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.add_log_level,
            structlog.dev.ConsoleRenderer(colors=False),
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


def load_cli_config(config_path: Path | None) -> AppConfig:
    """Load config, turning validation errors into a clean CLI exit."""
    try:
        return load_config(config_path)
    except ValidationError as exc:
        err_console.print(f"[red]Invalid configuration:[/red]\n{exc}")
        raise typer.Exit(code=2) from exc
