from __future__ import annotations

from typing import Any


class SubmissionError(Exception):
    """Base error mapped to a ``{"success": false, ...}`` response."""

    status_code: int = 400

    def __init__(self, error: str, *, details: Any = None):
        super().__init__(error)
        self.error = error
        self.details = details

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"success": False, "error": self.error}
        if self.details is not None:
            payload["details"] = self.details
        return payload


class ValidationError(SubmissionError):
    status_code = 400


class MalformedInputError(SubmissionError):
    status_code = 400


class UnexpectedError(SubmissionError):
    status_code = 500


class NotificationDeliveryError(Exception):
    """Telegram refused or never received a message. Never leaves the notifier."""
