"""Inbound webhook envelope and the typed events decoded from it."""

from dataclasses import dataclass, field
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from usersync.models.enums import DispatchAction, EventKind


@dataclass(frozen=True)
class WebhookEnvelope:
    """One inbound delivery as received by the transport. Never persisted."""

    id: str | None
    timestamp: str | None
    signature: str | None
    raw_body: bytes = field(repr=False)


# ── Provider payload projections ───────────────────────────────────────────────

class EmailAddress(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True)

    id: str | None = None
    email_address: str


class UserData(BaseModel):
    """The slice of the provider's user object that the store cares about."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    id: str = Field(..., min_length=1)
    email_addresses: list[EmailAddress] = Field(default_factory=list)
    first_name: str | None = None
    last_name: str | None = None
    username: str | None = None
    image_url: str | None = None


class DeletedObjectData(BaseModel):
    """Deletion payload, read as-is.

    Values are not coerced: only a string "user" object, a non-empty string id
    and a literal true confirm a deletion, anything else is skipped downstream.
    """

    model_config = ConfigDict(extra="ignore", frozen=True)

    object: Any = None
    id: Any = None
    deleted: Any = None


@dataclass(frozen=True)
class VerifiedEvent:
    """An authenticated, classified event. Only built after verification.

    ``data`` is a validated projection for the user kinds and the untouched
    mapping for OTHER.
    """

    kind: EventKind
    type: str
    data: UserData | DeletedObjectData | dict[str, Any]


@dataclass(frozen=True)
class DispatchResult:
    event_type: str
    kind: EventKind
    action: DispatchAction
    external_id: str | None = None
