"""Route verified events to exactly one user store mutation.

Command construction is pure: the same event always yields the same command,
so a redelivered envelope replays the identical mutation. The dispatcher never
retries; a failing store call surfaces as DispatchError and the provider's
redelivery re-drives the whole envelope.
"""

import logging

from usersync.errors.exceptions import DispatchError
from usersync.models.commands import UserDeleteCommand, UserPatchCommand, UserUpsertCommand
from usersync.models.enums import DispatchAction, EventKind
from usersync.models.webhook import DeletedObjectData, DispatchResult, UserData, VerifiedEvent
from usersync.services.user_sync import SyncGateway

logger = logging.getLogger(__name__)

UNNAMED_USER = "Unnamed User"


def primary_email(user: UserData) -> str | None:
    """First address on the account, if any."""
    if not user.email_addresses:
        return None
    return user.email_addresses[0].email_address or None


def compose_display_name(user: UserData) -> str | None:
    """Join first and last name, falling back to the username."""
    name = f"{user.first_name or ''} {user.last_name or ''}".strip()
    return name or user.username or None


def build_upsert_command(user: UserData) -> UserUpsertCommand:
    # Creation tolerates placeholders rather than failing the whole sync
    return UserUpsertCommand(
        external_id=user.id,
        email=primary_email(user) or "",
        display_name=compose_display_name(user) or UNNAMED_USER,
        avatar_url=user.image_url,
    )


def build_patch_command(user: UserData) -> UserPatchCommand:
    """Only fields the event actually carries end up in the patch."""
    changes: dict[str, str] = {}

    display_name = compose_display_name(user)
    if display_name is not None:
        changes["display_name"] = display_name

    email = primary_email(user)
    if email is not None:
        changes["email"] = email

    if user.image_url is not None:
        changes["avatar_url"] = user.image_url

    return UserPatchCommand(external_id=user.id, **changes)


def build_delete_command(data: DeletedObjectData) -> UserDeleteCommand | None:
    """A delete is only issued when the payload confirms kind, identity and deletion."""
    if (
        data.object == "user"
        and isinstance(data.id, str)
        and data.id
        and data.deleted is True
    ):
        return UserDeleteCommand(external_id=data.id)
    return None


class EventDispatcher:
    """Applies one verified event to the user store through a SyncGateway."""

    def __init__(self, gateway: SyncGateway):
        self.gateway = gateway

    async def dispatch(self, event: VerifiedEvent) -> DispatchResult:
        try:
            return await self._dispatch(event)
        except DispatchError:
            raise
        except Exception as exc:
            raise DispatchError(event.type) from exc

    async def _dispatch(self, event: VerifiedEvent) -> DispatchResult:
        if event.kind is EventKind.USER_CREATED:
            command = build_upsert_command(event.data)
            await self.gateway.create_or_sync_user(command)
            logger.info("User created/synced: %s", command.external_id)
            return self._result(event, DispatchAction.UPSERTED, command.external_id)

        if event.kind is EventKind.USER_UPDATED:
            command = build_patch_command(event.data)
            await self.gateway.patch_user(command)
            logger.info(
                "User updated: %s (fields=%s)",
                command.external_id,
                sorted(command.to_changes()),
            )
            return self._result(event, DispatchAction.PATCHED, command.external_id)

        if event.kind is EventKind.USER_DELETED:
            command = build_delete_command(event.data)
            if command is None:
                logger.warning(
                    "Ignoring %s without a confirmed user deletion: %s",
                    event.type,
                    event.data.model_dump(),
                )
                return self._result(event, DispatchAction.SKIPPED)
            await self.gateway.delete_user(command)
            logger.info("User deleted: %s", command.external_id)
            return self._result(event, DispatchAction.DELETED, command.external_id)

        logger.debug("No handler for event type %s", event.type)
        return self._result(event, DispatchAction.IGNORED)

    @staticmethod
    def _result(event: VerifiedEvent, action: DispatchAction, external_id: str | None = None) -> DispatchResult:
        return DispatchResult(event_type=event.type, kind=event.kind, action=action, external_id=external_id)
