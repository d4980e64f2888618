"""Identity provider webhook endpoint: bytes and headers in, status code out."""

import logging

from fastapi import APIRouter, Request

from usersync.dependencies import Gateway, WebhookSecret, WebhookTolerance
from usersync.logging_config import bind_event_type
from usersync.models.webhook import WebhookEnvelope
from usersync.webhooks.classifier import classify
from usersync.webhooks.dispatcher import EventDispatcher
from usersync.webhooks.verifier import WebhookVerifier

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/webhooks", tags=["Webhooks"])

# Svix sends branded headers; the unbranded names are accepted as a fallback.
ID_HEADERS = ("svix-id", "webhook-id")
TIMESTAMP_HEADERS = ("svix-timestamp", "webhook-timestamp")
SIGNATURE_HEADERS = ("svix-signature", "webhook-signature")


def _first_header(request: Request, names: tuple[str, ...]) -> str | None:
    for name in names:
        value = request.headers.get(name)
        if value:
            return value
    return None


@router.post("/clerk")
async def receive_identity_webhook(
    request: Request,
    secret: WebhookSecret,
    tolerance: WebhookTolerance,
    gateway: Gateway,
) -> dict:
    """Verify, classify and apply one identity provider event.

    Rejections (400) never touch the user store. Store failures answer 500 so
    the provider redelivers the envelope.
    """
    verifier = WebhookVerifier(secret, tolerance=tolerance)
    envelope = WebhookEnvelope(
        id=_first_header(request, ID_HEADERS),
        timestamp=_first_header(request, TIMESTAMP_HEADERS),
        signature=_first_header(request, SIGNATURE_HEADERS),
        raw_body=await request.body(),
    )

    event = classify(verifier.verify(envelope))
    bind_event_type(event.type)
    logger.info("Received identity webhook: %s", event.type)

    result = await EventDispatcher(gateway).dispatch(event)
    return {
        "message": "processed successfully",
        "event_type": result.event_type,
        "action": result.action,
        "external_id": result.external_id,
    }
