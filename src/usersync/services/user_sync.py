"""User store mutation API consumed by the webhook dispatcher."""

import logging
from typing import Protocol

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from usersync.models.commands import UserDeleteCommand, UserPatchCommand, UserUpsertCommand
from usersync.repositories.user_repo import UserRepository

logger = logging.getLogger(__name__)


class SyncGateway(Protocol):
    """The three mutations the dispatcher may issue. Any of them may raise."""

    async def create_or_sync_user(self, command: UserUpsertCommand) -> None: ...

    async def patch_user(self, command: UserPatchCommand) -> bool: ...

    async def delete_user(self, command: UserDeleteCommand) -> bool: ...


class SqlUserSyncGateway:
    """SyncGateway backed by the ``users`` table.

    Every operation commits its own unit of work so that one webhook maps to
    one transaction.
    """

    def __init__(self, session: AsyncSession):
        self.session = session
        self.users = UserRepository(session)

    async def create_or_sync_user(self, command: UserUpsertCommand) -> None:
        fields = command.model_dump(exclude={"external_id"})
        user = await self.users.get(command.external_id)
        if user is not None:
            await self.users.update(user, **fields)
            await self.session.commit()
            return

        try:
            await self.users.create(external_id=command.external_id, **fields)
            await self.session.commit()
        except IntegrityError:
            # A concurrent delivery inserted the same user first; overwrite it instead
            await self.session.rollback()
            logger.info("User %s inserted concurrently, updating instead", command.external_id)
            user = await self.users.get(command.external_id)
            if user is None:
                raise
            await self.users.update(user, **fields)
            await self.session.commit()

    async def patch_user(self, command: UserPatchCommand) -> bool:
        """Apply the provided fields only. Returns False when the user is unknown."""
        user = await self.users.get(command.external_id)
        if user is None:
            # Nothing to patch; a later user.created carries the full record
            logger.warning("Patch for unknown user %s skipped", command.external_id)
            return False
        changes = command.to_changes()
        if changes:
            await self.users.update(user, **changes)
            await self.session.commit()
        return True

    async def delete_user(self, command: UserDeleteCommand) -> bool:
        """Delete the user if present. Returns False when it was already gone."""
        user = await self.users.get(command.external_id)
        if user is None:
            logger.info("Delete for unknown user %s is a no-op", command.external_id)
            return False
        await self.users.delete(user)
        await self.session.commit()
        return True
