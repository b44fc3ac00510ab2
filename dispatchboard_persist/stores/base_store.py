"""
RESPONSIBILITIES
- Define shared exceptions for the persistence layer.
- Define the durable slot interface: one named key holding one serialized snapshot.
PROCESS OVERVIEW
1. read() -> return the stored text, or None when the slot was never written.
2. write() -> replace the stored text atomically; readers never observe a partial write.
"""

from __future__ import annotations

from pathlib import Path
from typing import Protocol


class StoreError(RuntimeError):
    """Base exception type for persistence-layer failures."""


class StoreValidationError(StoreError):
    """Raised when stored data fails validation rules."""


class StorePersistError(StoreError):
    """Raised when the durable slot cannot be read or written."""


class DurableSlot(Protocol):
    """A single persisted key surviving process restarts."""

    @property
    def location(self) -> Path | str:
        """Human readable location used in logs."""

    def read(self) -> str | None:
        """Return the stored payload, or None when the slot is empty."""

    def write(self, payload: str) -> None:
        """Replace the stored payload."""
