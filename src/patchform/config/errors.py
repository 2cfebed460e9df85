"""Errors raised while reading engine settings."""

from __future__ import annotations


class ConfigurationError(RuntimeError):
    """Raised when a ``PATCHFORM_*`` setting holds a value the engine cannot use."""
