"""Exceptions raised by the availability service."""

from __future__ import annotations


class AvailabilityError(Exception):
    """Base class for availability errors."""

    def __init__(self, message: str = "", *args):
        super().__init__(message, *args)
        self.message = message


class ValidationError(AvailabilityError):
    """Time format invalid or slots overlap / misordered. Never reaches the store."""

    def __init__(self, message: str = "Invalid time slots configuration", errors: dict | None = None):
        super().__init__(message)
        self.errors = errors or {}


class StorageUnavailable(AvailabilityError):
    """Store unreachable on the read path. Callers degrade to the default schedule."""


class StorageCorruptionError(AvailabilityError):
    """Stored value is not a well-formed serialized schedule."""


class StorageWriteError(AvailabilityError):
    """Store write failed. Must be surfaced to the user; not retried."""


class ProtocolError(AvailabilityError):
    """Malformed request on the write endpoint."""
