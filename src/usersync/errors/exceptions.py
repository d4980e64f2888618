"""Exception hierarchy for the webhook sync pipeline.

Each error carries the HTTP status the transport should answer with, so the
route stays a thin shim: client faults (bad or unsigned requests) are 4xx and
are never retried by the provider, server faults are 5xx so the provider's
redelivery re-drives the whole envelope later.
"""


class UserSyncError(Exception):
    """Base exception for usersync."""

    def __init__(self, code: str, message: str, details=None, status_code: int = 500):
        self.code = code
        self.message = message
        self.details = details
        self.status_code = status_code
        super().__init__(message)

    @property
    def is_client_fault(self) -> bool:
        return self.status_code < 500


class VerificationError(UserSyncError):
    """Base for failures raised while authenticating an inbound webhook."""


class MisconfiguredError(VerificationError):
    """No usable signing secret; a server-side fault, never bypassed."""

    def __init__(self, message: str = "webhook secret not configured"):
        super().__init__("MISCONFIGURED", message, status_code=500)


class MissingHeadersError(VerificationError):
    """One of the id/timestamp/signature headers was absent."""

    def __init__(self, missing: list[str] | None = None):
        super().__init__(
            "MISSING_HEADERS",
            "missing signature headers",
            details={"missing": missing} if missing else None,
            status_code=400,
        )


class InvalidSignatureError(VerificationError):
    """Signature mismatch, stale/future timestamp or malformed header encoding.

    ``reason`` is for logs only; the client sees a generic message.
    """

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__("INVALID_SIGNATURE", "verification failed", status_code=400)


class EventParseError(UserSyncError):
    """An authentic payload did not have the expected shape."""

    def __init__(self, message: str = "unexpected webhook payload", details=None):
        super().__init__("PARSE_ERROR", message, details, status_code=500)


class DispatchError(UserSyncError):
    """The user store rejected or failed the mutation for an event."""

    def __init__(self, event_type: str):
        self.event_type = event_type
        super().__init__(
            "DISPATCH_ERROR",
            f"error processing event: {event_type}",
            status_code=500,
        )
