"""Warbler command-line entry point."""

from __future__ import annotations

import typer

from warbler.cli.commands import register_check, register_serve, register_transcribe

app = typer.Typer(
    name="warbler",
    help="Speech-to-text over HTTP with whisper.cpp",
    no_args_is_help=True,
    add_completion=False,
)

register_serve(app)
register_transcribe(app)
register_check(app)


def main() -> None:
    app()


if __name__ == "__main__":
    main()
