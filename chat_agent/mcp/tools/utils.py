"""Shared helpers for tool implementations."""

from __future__ import annotations


def error_message(action: str, exc: BaseException) -> str:
    """Format a tool failure as a string the model can relay to the user."""

    return f"Error {action}: {exc}"
