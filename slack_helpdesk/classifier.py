"""Work out which kind of Slack payload a validated request carries."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

from pydantic import ValidationError

from .exceptions import MalformedJSONError, MissingFieldError, UnparseablePayloadError
from .payloads import (
    EVENT_CALLBACK,
    URL_VERIFICATION,
    EventCallback,
    InteractionCallback,
    Payload,
    SlashCommand,
    URLVerification,
    summarise_validation_error,
)

if TYPE_CHECKING:  # pragma: no cover
    from .request import IncomingRequest


REQUIRED_INTERACTION_KEYS = ("type", "callback_id")


def classify(request: "IncomingRequest") -> Payload:
    """Classify the body of *request*; the first matching rule wins.

    1. form field ``command`` -> ``SlashCommand``
    2. JSON ``url_verification`` with a challenge -> ``URLVerification``
    3. form field ``payload`` -> ``InteractionCallback``
    4. JSON ``event_callback`` with an inner event type -> ``EventCallback``

    Anything else raises ``UnparseablePayloadError``.
    """

    form = request.form
    if form.get("command"):
        return SlashCommand.from_body(dict(form))

    document = request.json()
    if _is_url_verification(document):
        return URLVerification.from_body(document)

    if "payload" in form:
        return parse_interaction_payload(form["payload"])

    if _is_event_callback(document):
        try:
            return EventCallback.from_body(document)
        except ValidationError as exc:
            raise UnparseablePayloadError(f"invalid events API callback: {summarise_validation_error(exc)}") from exc

    raise UnparseablePayloadError("unrecognised slack payload")


def parse_interaction_payload(raw: str) -> InteractionCallback:
    """Decode the JSON ``payload`` form field of an interaction callback."""

    try:
        document = json.loads(raw)
    except (ValueError, RecursionError) as exc:
        raise MalformedJSONError(f"error parsing payload JSON: {exc}") from exc
    if not isinstance(document, dict):
        raise MalformedJSONError("error parsing payload JSON: expected an object")

    missing = [key for key in REQUIRED_INTERACTION_KEYS if not _non_empty_string(document.get(key))]
    if missing:
        raise MissingFieldError(missing)

    try:
        return InteractionCallback.from_body(document)
    except ValidationError as exc:
        raise MalformedJSONError(f"error parsing payload JSON: {summarise_validation_error(exc)}") from exc


def _is_url_verification(document: Any) -> bool:
    return (
        isinstance(document, dict)
        and document.get("type") == URL_VERIFICATION
        and isinstance(document.get("challenge"), str)
    )


def _is_event_callback(document: Any) -> bool:
    if not isinstance(document, dict) or document.get("type") != EVENT_CALLBACK:
        return False
    event = document.get("event")
    return isinstance(event, dict) and _non_empty_string(event.get("type"))


def _non_empty_string(value: Any) -> bool:
    return isinstance(value, str) and bool(value)
