"""Exception types shared across the service."""

from __future__ import annotations


class PuckAlertsError(RuntimeError):
    """Base class for errors raised by puck-alerts."""


class DeliveryError(PuckAlertsError):
    """A single webhook delivery attempt failed.

    Raised per attempt so the retry policy can decide whether to try again;
    never escapes the dispatcher.
    """

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class RuleNotFoundError(PuckAlertsError):
    """Raised when a webhook rule id does not exist."""
