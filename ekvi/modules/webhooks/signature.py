"""
Mux webhook signature verification.

Mux signs each delivery with a ``mux-signature`` header of the form
``t=<unix timestamp>,v1=<hex digest>``, where the digest is
HMAC-SHA256(secret, "<t>.<raw body>").
"""
import hashlib
import hmac
import json
import time
from typing import Any, Mapping

SIGNATURE_HEADER = "mux-signature"
SCHEME = "v1"


class WebhookConfigurationError(Exception):
    """The signing secret is not configured on this server."""


class WebhookVerificationError(Exception):
    """The request is not a validly signed webhook."""


def compute_signature(secret: str, timestamp: int | str, body: bytes) -> str:
    signed = f"{timestamp}.".encode() + body
    return hmac.new(secret.encode(), signed, hashlib.sha256).hexdigest()


def _parse_header(header: str) -> tuple[int, list[str]]:
    timestamp = None
    signatures = []
    for part in header.split(","):
        key, _, value = part.strip().partition("=")
        if key == "t":
            try:
                timestamp = int(value)
            except ValueError:
                raise WebhookVerificationError("Malformed signature timestamp")
        elif key == SCHEME and value:
            signatures.append(value)
    if timestamp is None or not signatures:
        raise WebhookVerificationError("Malformed signature header")
    return timestamp, signatures


def verify_signature(
    body: bytes,
    headers: Mapping[str, str],
    secret: str | None,
    tolerance_seconds: int = 300,
    now: float | None = None,
) -> None:
    if not secret:
        raise WebhookConfigurationError("Webhook signing secret not configured")

    header = headers.get(SIGNATURE_HEADER)
    if not header:
        raise WebhookVerificationError("Missing signature header")

    timestamp, signatures = _parse_header(header)
    current = time.time() if now is None else now
    if tolerance_seconds > 0 and current - timestamp > tolerance_seconds:
        raise WebhookVerificationError("Signature timestamp outside tolerance")

    expected = compute_signature(secret, timestamp, body)
    if not any(hmac.compare_digest(expected, sig) for sig in signatures):
        raise WebhookVerificationError("Signature mismatch")


def unwrap(
    body: bytes,
    headers: Mapping[str, str],
    secret: str | None,
    tolerance_seconds: int = 300,
    now: float | None = None,
) -> dict[str, Any]:
    """Verify the delivery and return the decoded event envelope."""
    verify_signature(body, headers, secret, tolerance_seconds=tolerance_seconds, now=now)
    try:
        envelope = json.loads(body)
    except ValueError as e:
        raise WebhookVerificationError("Webhook body is not valid JSON") from e
    if not isinstance(envelope, dict) or not isinstance(envelope.get("type"), str):
        raise WebhookVerificationError("Webhook body has no event type")
    return envelope
