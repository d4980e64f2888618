"""Webhook signature verification for Svix-signed identity provider deliveries.

The provider signs ``{id}.{timestamp}.{body}`` with HMAC-SHA256 keyed by the
base64-decoded endpoint secret (``whsec_...``). The signature header holds one
or more space-separated ``v1,<base64>`` entries so secrets can be rotated.
See: https://docs.svix.com/receiving/verifying-payloads/how-manual
"""

import base64
import binascii
import hashlib
import hmac
import json
import logging
import time
from typing import Any

from usersync.errors.exceptions import (
    EventParseError,
    InvalidSignatureError,
    MisconfiguredError,
    MissingHeadersError,
)
from usersync.models.webhook import WebhookEnvelope

logger = logging.getLogger(__name__)

SECRET_PREFIX = "whsec_"
SIGNATURE_VERSION = "v1"
# Replay window enforced by the provider's own verifier
DEFAULT_TOLERANCE = 300


def _decode_secret(secret: str | None) -> bytes:
    if not secret:
        raise MisconfiguredError()
    if secret.startswith(SECRET_PREFIX):
        secret = secret[len(SECRET_PREFIX):]
    try:
        key = base64.b64decode(secret, validate=True)
    except (binascii.Error, ValueError):
        raise MisconfiguredError("webhook secret is not valid base64")
    if not key:
        raise MisconfiguredError()
    return key


def _compute_signature(key: bytes, msg_id: str, timestamp: str, body: str) -> str:
    signed_content = f"{msg_id}.{timestamp}.{body}".encode("utf-8")
    digest = hmac.new(key, signed_content, hashlib.sha256).digest()
    return base64.b64encode(digest).decode("ascii")


def sign_payload(secret: str, msg_id: str, timestamp: int | str, body: bytes | str) -> str:
    """Produce a signature header value the way the provider does.

    Used by tests and local tooling to replay deliveries.
    """
    key = _decode_secret(secret)
    if isinstance(body, bytes):
        body = body.decode("utf-8")
    return f"{SIGNATURE_VERSION},{_compute_signature(key, msg_id, str(timestamp), body)}"


class WebhookVerifier:
    """Authenticates envelopes against one configured secret."""

    def __init__(self, secret: str | None, tolerance: int = DEFAULT_TOLERANCE):
        self._key = _decode_secret(secret)
        self.tolerance = tolerance

    def verify(self, envelope: WebhookEnvelope, now: float | None = None) -> dict[str, Any]:
        """Check headers, timestamp window and signature, then decode the body.

        Returns the verified raw event as a mapping. Raises MissingHeadersError,
        InvalidSignatureError or EventParseError.
        """
        missing = [
            name
            for name, value in (
                ("id", envelope.id),
                ("timestamp", envelope.timestamp),
                ("signature", envelope.signature),
            )
            if not value
        ]
        if missing:
            raise MissingHeadersError(missing)

        self._check_timestamp(envelope.timestamp, now)

        try:
            body = envelope.raw_body.decode("utf-8")
        except UnicodeDecodeError:
            raise InvalidSignatureError("body is not valid UTF-8")

        expected = _compute_signature(self._key, envelope.id, envelope.timestamp, body)
        if not self._matches(expected, envelope.signature):
            raise InvalidSignatureError("no matching signature found")

        # Authentic from here on; a body we cannot decode is an upstream contract change
        try:
            payload = json.loads(body)
        except json.JSONDecodeError as exc:
            raise EventParseError("webhook body is not valid JSON", details=str(exc))
        if not isinstance(payload, dict):
            raise EventParseError("webhook body is not a JSON object")

        logger.debug("Verified webhook delivery %s", envelope.id)
        return payload

    def _check_timestamp(self, timestamp: str, now: float | None) -> None:
        try:
            sent_at = int(timestamp)
        except (TypeError, ValueError):
            raise InvalidSignatureError("invalid signature headers")

        current = int(now if now is not None else time.time())
        if sent_at < current - self.tolerance:
            raise InvalidSignatureError("message timestamp too old")
        if sent_at > current + self.tolerance:
            raise InvalidSignatureError("message timestamp too new")

    @staticmethod
    def _matches(expected: str, header: str) -> bool:
        for entry in header.split(" "):
            version, _, signature = entry.partition(",")
            if version != SIGNATURE_VERSION or not signature:
                continue
            if hmac.compare_digest(expected.encode("ascii"), signature.encode("utf-8")):
                return True
        return False


def verify(
    envelope: WebhookEnvelope,
    secret: str | None,
    *,
    now: float | None = None,
    tolerance: int = DEFAULT_TOLERANCE,
) -> dict[str, Any]:
    """Verify a single envelope. See ``WebhookVerifier.verify``."""
    return WebhookVerifier(secret, tolerance=tolerance).verify(envelope, now=now)
