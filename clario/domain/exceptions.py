"""Errors raised by the notification pipeline."""

from __future__ import annotations


class StoreError(RuntimeError):
    """The raw-event store could not be reached or rejected a query."""


class PushEndpointValidationError(ValueError):
    """A push endpoint descriptor is missing required fields or is malformed."""


class PushDeliveryError(RuntimeError):
    """A single push endpoint rejected a delivery attempt."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


__all__ = ["StoreError", "PushEndpointValidationError", "PushDeliveryError"]
