"""Per-request wrapper that owns the raw body bytes."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any, Dict, Mapping
from urllib.parse import parse_qs

from werkzeug.exceptions import ClientDisconnected

from .exceptions import BodyReadError

if TYPE_CHECKING:  # pragma: no cover
    from werkzeug.wrappers import Request

    from .payloads import Payload


FORM_MIMETYPE = "application/x-www-form-urlencoded"

_UNSET: Any = object()


class IncomingRequest:
    """Wrap a werkzeug/Flask request for validation and classification.

    The body is read from the transport exactly once. Signature validation,
    form parsing, JSON decoding and classification all work on that copy.
    """

    def __init__(self, http_request: "Request") -> None:
        self._http_request = http_request
        self._body: bytes | None = None
        self._form: Dict[str, str] | None = None
        self._json: Any = _UNSET
        self._payload: "Payload | None" = None

    @property
    def http_request(self) -> "Request":
        return self._http_request

    @property
    def path(self) -> str:
        return self._http_request.path

    @property
    def headers(self) -> Mapping[str, str]:
        return self._http_request.headers

    @property
    def mimetype(self) -> str:
        return self._http_request.mimetype or ""

    @property
    def body(self) -> bytes:
        """Return the request body, reading it from the transport on first use."""

        if self._body is None:
            try:
                self._body = self._http_request.get_data(cache=True)
            except (OSError, ClientDisconnected) as exc:
                raise BodyReadError(f"invalid request body sent from slack: {exc}") from exc
        return self._body

    @property
    def form(self) -> Dict[str, str]:
        """Form fields decoded from the body; empty unless the body is form encoded."""

        if self._form is None:
            if self.mimetype != FORM_MIMETYPE:
                self._form = {}
            else:
                text = self.body.decode("utf-8", errors="replace")
                parsed = parse_qs(text, keep_blank_values=True)
                self._form = {key: values[0] for key, values in parsed.items()}
        return self._form

    def json(self) -> Any:
        """Return the body decoded as JSON, or ``None`` when it is not JSON."""

        if self._json is _UNSET:
            try:
                self._json = json.loads(self.body)
            except (ValueError, RecursionError):
                self._json = None
        return self._json

    def payload(self) -> "Payload":
        """Classify the body once and return the cached payload."""

        if self._payload is None:
            from .classifier import classify

            self._payload = classify(self)
        return self._payload

    def body_text(self) -> str:
        """Body decoded for logging; never raises."""

        if self._body is None:
            return ""
        return self._body.decode("utf-8", errors="replace")
