"""Decode a verified payload into a typed event."""

from collections.abc import Mapping
from typing import Any

from pydantic import ValidationError

from usersync.errors.exceptions import EventParseError
from usersync.models.enums import EventKind
from usersync.models.webhook import DeletedObjectData, UserData, VerifiedEvent

_PROJECTIONS = {
    EventKind.USER_CREATED: UserData,
    EventKind.USER_UPDATED: UserData,
    EventKind.USER_DELETED: DeletedObjectData,
}


def classify(payload: Mapping[str, Any]) -> VerifiedEvent:
    """Map the ``type`` discriminator to an EventKind and validate ``data``.

    Unknown types are returned as OTHER with their data untouched so that new
    provider event types never fail a delivery.
    """
    event_type = payload.get("type")
    if not isinstance(event_type, str) or not event_type:
        raise EventParseError("webhook payload has no event type")

    kind = EventKind.from_type(event_type)
    data = payload.get("data")

    projection = _PROJECTIONS.get(kind)
    if projection is None:
        return VerifiedEvent(kind=kind, type=event_type, data=dict(data) if isinstance(data, Mapping) else {})

    if kind is EventKind.USER_DELETED and not isinstance(data, Mapping):
        # Nothing confirms a deletion; the dispatcher skips it
        return VerifiedEvent(kind=kind, type=event_type, data=DeletedObjectData())

    if not isinstance(data, Mapping):
        raise EventParseError(f"{event_type} payload has no data object")
    try:
        parsed = projection.model_validate(dict(data))
    except ValidationError as exc:
        raise EventParseError(
            f"unexpected {event_type} payload shape",
            details=exc.errors(include_url=False, include_input=False),
        )
    return VerifiedEvent(kind=kind, type=event_type, data=parsed)
