"""Shared presentation models."""

from dataclasses import dataclass


@dataclass(frozen=True)
class Notice:
    """Inline message shown above a form."""

    text: str
    is_error: bool = False
