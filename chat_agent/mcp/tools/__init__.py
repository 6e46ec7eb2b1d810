"""Tool registrations grouped by domain."""

from . import clock, schedule, weather  # noqa: F401

__all__ = ["clock", "schedule", "weather"]
