"""Custom exceptions for configuration management."""

from mediaseq.errors import MediaseqError


class ConfigError(MediaseqError):
    """Raised when configuration data cannot be processed."""
