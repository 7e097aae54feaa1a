"""Configuration error definitions."""

from __future__ import annotations


class ConfigurationError(RuntimeError):
    """Raised when configuration values are invalid."""


class MissingConfigurationError(ConfigurationError):
    """Raised when required configuration values are absent or blank."""


class UnknownBlockchainError(ConfigurationError):
    """Raised when a blockchain name has no configuration entry."""

    def __init__(self, name: str, *, available: tuple[str, ...]) -> None:
        super().__init__(
            f"Blockchain configuration is missing for {name!r}. "
            f"Available: {', '.join(available)}"
        )
        self.name = name
        self.available = available
