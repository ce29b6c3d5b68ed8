"""Errors raised by the scheduling core."""

from __future__ import annotations


class SlotStoreError(Exception):
    """Raised when the slot/event store cannot be read."""
