"""
Exceptions for the booking client.
Gateway errors are raised in sheets_api_client.py and caught by the session
controller; validation errors are raised in validator.py and shown to the user.
"""

from typing import Sequence


class BookingClientError(Exception):
    """Base exception for all booking client errors."""
    pass


# ── Gateway ───────────────────────────────────────────────────────────────────

class GatewayError(BookingClientError):
    """Raised when talking to the remote booking sheet fails."""
    pass


class RequestTimeout(GatewayError):
    """Raised when a request does not settle before its deadline."""

    def __init__(self, timeout: float):
        self.timeout = timeout
        super().__init__(f"Request timed out after {timeout:g}s")


class HttpStatusError(GatewayError):
    """Raised when the endpoint answers with a non-2xx status."""

    def __init__(self, status_code: int):
        self.status_code = status_code
        super().__init__(f"HTTP {status_code}")


class InvalidResponseError(GatewayError):
    """Raised when the body of a successful response is not JSON."""

    def __init__(self, status_code: int, content_type: str, body_snippet: str):
        self.status_code = status_code
        self.content_type = content_type
        self.body_snippet = body_snippet
        super().__init__(
            f"Non-JSON response. HTTP {status_code}. "
            f"content-type: {content_type}. Body: {body_snippet}"
        )


class TransportError(GatewayError):
    """Raised for connection-level failures (DNS, refused, reset, TLS...)."""
    pass


class BackendRejectedError(GatewayError):
    """Raised when the endpoint answers valid JSON without ok=true."""
    pass


# ── Validation ────────────────────────────────────────────────────────────────

class BookingValidationError(BookingClientError):
    """Base for errors that block a submission before any network call."""

    message_key = "validation_failed"


class MissingFieldsError(BookingValidationError):
    """Raised when a required form field is empty or the age is not a number."""

    message_key = "missing_fields"

    def __init__(self, fields: Sequence[str]):
        self.fields = list(fields)
        super().__init__(f"Missing or invalid fields: {', '.join(self.fields)}")


class SlotConflictError(BookingValidationError):
    """Raised when the machine is already booked for the date and slot."""

    message_key = "slot_conflict"


class PastSlotError(BookingValidationError):
    """Raised when the selected slot has already started."""

    message_key = "past_slot"
