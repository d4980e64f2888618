"""FastAPI dependency injection providers."""

from collections.abc import AsyncGenerator
from typing import Annotated

from fastapi import Depends, Request

from usersync.errors.exceptions import MisconfiguredError
from usersync.services.user_sync import SqlUserSyncGateway, SyncGateway


def get_webhook_secret(request: Request) -> str:
    """Return the signing secret injected at startup, or fail as a server fault."""
    secret = getattr(request.app.state, "webhook_secret", None)
    if not secret:
        raise MisconfiguredError()
    return secret


def get_webhook_tolerance(request: Request) -> int:
    return request.app.state.webhook_tolerance


async def get_sync_gateway(request: Request) -> AsyncGenerator[SyncGateway, None]:
    """Yield the user store gateway bound to a request-scoped session."""
    session_factory = request.app.state.db_session_factory
    async with session_factory() as session:
        yield SqlUserSyncGateway(session)


# Type aliases for dependency injection
WebhookSecret = Annotated[str, Depends(get_webhook_secret)]
WebhookTolerance = Annotated[int, Depends(get_webhook_tolerance)]
Gateway = Annotated[SyncGateway, Depends(get_sync_gateway)]
