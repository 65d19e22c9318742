"""Audio input checks."""

from .validation import check_profile, format_bytes, inspect_wav, validate_wav

__all__ = [
    "check_profile",
    "format_bytes",
    "inspect_wav",
    "validate_wav",
]
