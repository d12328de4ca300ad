"""Exceptions raised by SpectraPulse."""

import numbers


class SpectraPulseError(Exception):
    """Base class for all SpectraPulse errors."""


class ConfigurationError(SpectraPulseError, ValueError):
    """Raised when a configuration value is rejected at construction time."""


def require_number(name: str, value) -> None:
    """Raise ConfigurationError unless value is a real number (bools rejected)."""
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        raise ConfigurationError(f"{name} must be a number, got {value!r}")
