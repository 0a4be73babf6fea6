from __future__ import annotations


class FallingBlockError(Exception):
    """Base class for errors raised by the falling block engine."""


class ConfigError(FallingBlockError, ValueError):
    """Raised for invalid game, rules or generator configuration."""
