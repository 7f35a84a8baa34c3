"""Error taxonomy shared by every proxy boundary.

Each error knows its HTTP status and how to render itself as the uniform
``{"error": message}`` payload returned to the caller:

  ValidationError   400  missing or malformed input (user-correctable)
  ExtractionError   400  uploaded content could not be read (user-correctable)
  CredentialError   500  vendor API key not configured (operator-correctable)
  VendorError       500  vendor answered with a non-success response
  NetworkError      500  transport failure before the vendor answered
  NotFoundError     404  unknown source, conversation or attachment id

None of these are retried; the caller re-triggers the action.
"""

from __future__ import annotations

from typing import Any


class ChatRelayError(Exception):
    """Base for all errors surfaced to API callers."""

    status_code: int = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def to_payload(self) -> dict[str, Any]:
        return {"error": self.message}


class ValidationError(ChatRelayError):
    status_code = 400


class ExtractionError(ChatRelayError):
    """Uploaded content is malformed or of an unsupported type.

    ``reason`` is one of ``invalid-pdf``, ``invalid-encoding``,
    ``invalid-json`` or ``unsupported-type``.
    """

    status_code = 400

    def __init__(self, reason: str, message: str, mime_type: str | None = None) -> None:
        super().__init__(message)
        self.reason = reason
        self.mime_type = mime_type

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"error": self.message, "reason": self.reason}
        if self.mime_type is not None:
            payload["mimeType"] = self.mime_type
        return payload


class CredentialError(ChatRelayError):
    status_code = 500

    def __init__(self, env_var: str) -> None:
        super().__init__(f"{env_var} not set")
        self.env_var = env_var


class VendorError(ChatRelayError):
    """Non-success vendor response; ``status`` is the vendor's HTTP status."""

    status_code = 500

    def __init__(self, status: int | None, message: str) -> None:
        super().__init__(message)
        self.status = status

    def to_payload(self) -> dict[str, Any]:
        return {"error": self.message, "status": self.status}


class NetworkError(ChatRelayError):
    status_code = 500


class NotFoundError(ChatRelayError):
    """A session object (source, conversation, attachment) does not exist."""

    status_code = 404
