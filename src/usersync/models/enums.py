"""String enums for webhook events and dispatch outcomes."""

from enum import StrEnum


class EventKind(StrEnum):
    USER_CREATED = "user.created"
    USER_UPDATED = "user.updated"
    USER_DELETED = "user.deleted"
    OTHER = "other"

    @classmethod
    def from_type(cls, event_type: str) -> "EventKind":
        """Map a provider type string to a kind; unknown strings become OTHER."""
        try:
            kind = cls(event_type)
        except ValueError:
            return cls.OTHER
        # "other" is our catch-all, not a provider event type
        return cls.OTHER if kind is cls.OTHER else kind


class DispatchAction(StrEnum):
    UPSERTED = "upserted"
    PATCHED = "patched"
    DELETED = "deleted"
    SKIPPED = "skipped"
    IGNORED = "ignored"
