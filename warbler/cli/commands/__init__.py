"""Composable CLI command registrations for Typer."""

from .check import register_check
from .serve import register_serve
from .transcribe import register_transcribe

__all__ = [
    "register_check",
    "register_serve",
    "register_transcribe",
]
