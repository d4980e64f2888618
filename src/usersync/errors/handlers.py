"""FastAPI exception handlers producing the standard ErrorResponse."""

import logging
from datetime import datetime, timezone

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from usersync.errors.exceptions import InvalidSignatureError, UserSyncError
from usersync.models.common import ErrorDetail, ErrorResponse

logger = logging.getLogger(__name__)


def register_exception_handlers(app: FastAPI) -> None:
    """Register all custom exception handlers on the FastAPI app."""

    @app.exception_handler(UserSyncError)
    async def usersync_error_handler(request: Request, exc: UserSyncError):
        trace_id = getattr(request.state, "trace_id", "trc_unknown")
        log_extra = {"path": request.url.path, "code": exc.code, "trace_id": trace_id}
        if isinstance(exc, InvalidSignatureError):
            log_extra["reason"] = exc.reason
        if exc.is_client_fault:
            logger.warning("webhook_rejected: %s", exc.message, extra=log_extra)
        else:
            logger.error("webhook_failed: %s", exc.message, extra=log_extra, exc_info=exc.__cause__)

        error_response = ErrorResponse(
            error=ErrorDetail(
                code=exc.code,
                message=exc.message,
                details=exc.details,
                trace_id=trace_id,
                timestamp=datetime.now(timezone.utc),
            ),
        )
        return JSONResponse(
            status_code=exc.status_code,
            content=error_response.model_dump(mode="json", exclude_none=True),
        )
