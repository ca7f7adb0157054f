"""Webhook signature verification.

Scell signs every webhook delivery with HMAC-SHA256 over
``"{timestamp}.{raw body}"`` and sends the result in the
``X-Webhook-Signature`` header as ``t=<unix seconds>,v1=<hex digest>``.
"""

import hashlib
import hmac
import json
import re
import time
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable, Mapping, Optional, Sequence, Union

from .logging import get_logger
from .types import WebhookEvent, WebhookPayload

logger = get_logger(__name__)

DEFAULT_TOLERANCE_SECONDS = 300  # 5 minutes

SIGNATURE_HEADER = "X-Webhook-Signature"
EVENT_HEADER = "X-Webhook-Event"
DELIVERY_HEADER = "X-Webhook-Delivery"

_TIMESTAMP_PATTERN = re.compile(r"-?\d+")

Payload = Union[str, bytes]


@dataclass(frozen=True)
class SignedWebhookHeader:
    """Parsed X-Webhook-Signature header."""

    timestamp: int
    signature: str

    def __str__(self) -> str:
        return f"t={self.timestamp},v1={self.signature}"


@dataclass(frozen=True)
class WebhookHeaders:
    """Webhook headers extracted from an inbound request."""

    signature: str
    event: str
    delivery_id: str


@dataclass(frozen=True)
class SignedTestEvent:
    """A signed webhook delivery built for local testing."""

    payload: str
    headers: dict[str, str]


def parse_signature_header(header: Optional[str]) -> Optional[SignedWebhookHeader]:
    """
    Parse a `t=<timestamp>,v1=<signature>` header.

    Pairs may come in any order and unknown keys are ignored.

    Returns:
        The parsed header, or None if `t` or `v1` is missing or the
        timestamp is not an integer
    """
    if not header:
        return None

    timestamp: Optional[str] = None
    signature: Optional[str] = None
    for part in header.split(","):
        key, sep, value = part.partition("=")
        if not sep:
            continue
        key = key.strip()
        if key == "t":
            timestamp = value.strip()
        elif key == "v1":
            signature = value.strip()

    if timestamp is None or signature is None:
        return None
    if not _TIMESTAMP_PATTERN.fullmatch(timestamp):
        return None
    return SignedWebhookHeader(timestamp=int(timestamp), signature=signature)


def compute_signature(
    payload: Payload,
    timestamp: int,
    secret: str,
    digestmod: Callable[..., Any] = hashlib.sha256,
) -> str:
    """
    Compute the hex HMAC of a webhook payload.

    Args:
        payload: The raw request body
        timestamp: Signing time in unix seconds
        secret: The webhook signing secret
        digestmod: Hash constructor for the HMAC (default: SHA-256)

    Returns:
        Lowercase hex digest of `"{timestamp}.{payload}"`
    """
    body = payload.encode("utf-8") if isinstance(payload, str) else payload
    message = f"{timestamp}.".encode("utf-8") + body
    return hmac.new(secret.encode("utf-8"), message, digestmod).hexdigest()


def secure_compare(expected: str, provided: str) -> bool:
    """
    Compare two signatures in constant time.

    Lengths are compared first; signature length is not secret.
    """
    expected_bytes = expected.encode("utf-8")
    provided_bytes = provided.encode("utf-8")
    if len(expected_bytes) != len(provided_bytes):
        return False
    return hmac.compare_digest(expected_bytes, provided_bytes)


class WebhookVerifier:
    """
    Verifies and constructs signed webhook deliveries.

    The clock, delivery-id source and HMAC digest are injectable so the
    verifier can be exercised without real time or randomness.
    """

    def __init__(
        self,
        *,
        clock: Callable[[], float] = time.time,
        uuid_factory: Callable[[], Any] = uuid.uuid4,
        digestmod: Callable[..., Any] = hashlib.sha256,
    ) -> None:
        self._clock = clock
        self._uuid_factory = uuid_factory
        self._digestmod = digestmod

    def verify(
        self,
        payload: Payload,
        header: Optional[str],
        secret: str,
        tolerance_seconds: int = DEFAULT_TOLERANCE_SECONDS,
        *,
        now: Optional[int] = None,
    ) -> bool:
        """
        Verify a webhook delivery.

        Args:
            payload: The raw request body, exactly as received
            header: The X-Webhook-Signature header value
            secret: Your webhook signing secret (whsec_...)
            tolerance_seconds: Maximum clock distance from the signing time
            now: Override current unix time

        Returns:
            True only if the header parses, the timestamp is within tolerance
            and the signature matches
        """
        return self.verify_with_rotation(
            payload, header, [secret], tolerance_seconds, now=now
        )

    def verify_with_rotation(
        self,
        payload: Payload,
        header: Optional[str],
        secrets: Sequence[str],
        tolerance_seconds: int = DEFAULT_TOLERANCE_SECONDS,
        *,
        now: Optional[int] = None,
    ) -> bool:
        """
        Verify a webhook against several secrets (for secret rotation).

        Returns True if ANY secret validates the signature.
        """
        parsed = parse_signature_header(header)
        if parsed is None:
            logger.debug("webhook rejected", reason="malformed_header")
            return False

        current = now if now is not None else int(self._clock())
        if abs(current - parsed.timestamp) > tolerance_seconds:
            logger.debug(
                "webhook rejected",
                reason="timestamp_outside_tolerance",
                timestamp=parsed.timestamp,
                tolerance_seconds=tolerance_seconds,
            )
            return False

        for secret in secrets:
            expected = compute_signature(payload, parsed.timestamp, secret, self._digestmod)
            if secure_compare(expected, parsed.signature):
                return True

        logger.debug("webhook rejected", reason="signature_mismatch")
        return False

    def parse_payload(self, payload: Payload) -> WebhookPayload:
        """
        Parse a verified webhook body.

        Raises:
            json.JSONDecodeError: If the body is not JSON
            ValueError: If the body is not a webhook envelope
        """
        return WebhookPayload.from_dict(json.loads(payload))

    def construct_test_event(
        self,
        event: Union[WebhookEvent, str],
        data: Any,
        secret: str,
    ) -> SignedTestEvent:
        """
        Build a signed webhook delivery for local integration tests.

        Never expose this to untrusted callers: it signs with your secret.
        """
        event_name = event.value if isinstance(event, Enum) else event
        now = self._clock()
        timestamp = int(now)
        sent_at = datetime.fromtimestamp(now, tz=timezone.utc)

        envelope = WebhookPayload(
            event=event_name,
            timestamp=sent_at.isoformat(timespec="milliseconds").replace("+00:00", "Z"),
            data=data,
        )
        payload = json.dumps(envelope.to_dict(), separators=(",", ":"))
        signature = compute_signature(payload, timestamp, secret, self._digestmod)

        return SignedTestEvent(
            payload=payload,
            headers={
                SIGNATURE_HEADER: str(SignedWebhookHeader(timestamp, signature)),
                EVENT_HEADER: event_name,
                DELIVERY_HEADER: str(self._uuid_factory()),
                "Content-Type": "application/json",
            },
        )


_default_verifier = WebhookVerifier()


def verify_signature(
    payload: Payload,
    header: Optional[str],
    secret: str,
    tolerance_seconds: int = DEFAULT_TOLERANCE_SECONDS,
    *,
    now: Optional[int] = None,
) -> bool:
    """
    Verify a webhook signature from Scell.

    Example:
        if not verify_signature(request.body, request.headers["X-Webhook-Signature"], secret):
            return Response(status=401)
        event = parse_payload(request.body)
    """
    return _default_verifier.verify(payload, header, secret, tolerance_seconds, now=now)


def verify_signature_with_rotation(
    payload: Payload,
    header: Optional[str],
    secrets: Sequence[str],
    tolerance_seconds: int = DEFAULT_TOLERANCE_SECONDS,
    *,
    now: Optional[int] = None,
) -> bool:
    """Verify a webhook signature against current and previous secrets."""
    return _default_verifier.verify_with_rotation(
        payload, header, secrets, tolerance_seconds, now=now
    )


def parse_payload(payload: Payload) -> WebhookPayload:
    """Parse a verified webhook body into a WebhookPayload."""
    return _default_verifier.parse_payload(payload)


def construct_test_event(
    event: Union[WebhookEvent, str],
    data: Any,
    secret: str,
) -> SignedTestEvent:
    """Build a signed webhook delivery for local testing."""
    return _default_verifier.construct_test_event(event, data, secret)


def extract_webhook_headers(headers: Mapping[str, Any]) -> WebhookHeaders:
    """
    Extract webhook headers from a request headers object.

    Works with various header dict formats (case-insensitive).
    """

    def get_header(name: str) -> str:
        lower_name = name.lower()
        for key, value in headers.items():
            if key.lower() == lower_name:
                if isinstance(value, list):
                    return str(value[0]) if value else ""
                return str(value) if value else ""
        return ""

    return WebhookHeaders(
        signature=get_header(SIGNATURE_HEADER),
        event=get_header(EVENT_HEADER),
        delivery_id=get_header(DELIVERY_HEADER),
    )
