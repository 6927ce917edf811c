"""Headless entity playground driven by emitting timers, timer sequences and time multipliers."""

__version__ = "0.1.0"

__all__ = ["__version__"]