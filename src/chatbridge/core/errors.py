"""Shared error types for the conversion engine."""


class ConversionError(Exception):
    """Base error for all engine failures."""


class RegistryFrozenError(ConversionError):
    """A converter was registered after the registry was frozen."""

    def __init__(self, key: str) -> None:
        self.key = key
        super().__init__(f"Converter registry is frozen; cannot register: {key}")


class ConfigError(ConversionError):
    """Engine configuration could not be loaded or validated."""
