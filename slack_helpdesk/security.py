"""Utilities for validating Slack request signatures."""

from __future__ import annotations

import hmac
import re
import time
from hashlib import sha256
from typing import TYPE_CHECKING

from .exceptions import (
    InvalidIdentityError,
    InvalidTimestampError,
    SignatureMismatchError,
    StaleRequestError,
)

if TYPE_CHECKING:  # pragma: no cover
    from .request import IncomingRequest


SLACK_SIGNATURE_HEADER = "X-Slack-Signature"
SLACK_TIMESTAMP_HEADER = "X-Slack-Request-Timestamp"
VERSION = "v0"
DEFAULT_TOLERANCE = 60 * 5  # five minutes
TRUSTED_COMMON_NAME = "platform-tls-client.slack.com"

_COMMON_NAME_PATTERN = re.compile(r"CN=(.*?),")
_TIMESTAMP_PATTERN = re.compile(r"[+-]?[0-9]+")


def compute_signature(signing_secret: str, timestamp: str | int, body: bytes | str) -> str:
    """Return Slack-compatible signature for the provided payload."""

    if isinstance(body, str):
        body = body.encode("utf-8")
    basestring = f"{VERSION}:{timestamp}:".encode("utf-8") + body
    secret = signing_secret.encode("utf-8")
    digest = hmac.new(secret, basestring, sha256).hexdigest()
    return f"{VERSION}={digest}"


def validate_identity(header_value: str | None) -> None:
    """Check the mutual TLS distinguished name carries Slack's common name."""

    matches = _COMMON_NAME_PATTERN.findall(header_value or "")
    if len(matches) != 1 or matches[0] != TRUSTED_COMMON_NAME:
        raise InvalidIdentityError("invalid CN in DN header")


def parse_timestamp(raw: str | None) -> int:
    if not raw or not _TIMESTAMP_PATTERN.fullmatch(raw):
        raise InvalidTimestampError(f"invalid timestamp sent from slack: {raw!r}")
    return int(raw)


def validate_request(
    request: "IncomingRequest",
    signing_secret: str,
    *,
    identity_header: str | None = None,
    tolerance: int = DEFAULT_TOLERANCE,
) -> None:
    """Raise an ``AuthError`` unless *request* was signed by Slack.

    Checks run in a fixed order: identity header (when configured), timestamp
    format, replay window, then the HMAC over the body. Only requests older
    than *tolerance* seconds are refused; timestamps in the future pass the
    replay check. The body is read through ``request.body`` which keeps the
    bytes for classification.
    """

    if identity_header:
        validate_identity(request.headers.get(identity_header))

    request_ts = parse_timestamp(request.headers.get(SLACK_TIMESTAMP_HEADER))

    current_ts = int(time.time())
    if current_ts - request_ts > tolerance:
        raise StaleRequestError(f"stale timestamp sent from slack: {request_ts}")

    body = request.body

    expected = compute_signature(signing_secret, request_ts, body)
    signature = request.headers.get(SLACK_SIGNATURE_HEADER, "")
    if not hmac.compare_digest(expected.encode("utf-8"), signature.encode("utf-8")):
        raise SignatureMismatchError("invalid signature sent from slack")
