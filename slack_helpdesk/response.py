"""Response writer handed to route handlers."""

from __future__ import annotations

import json
from typing import Any, Dict

from flask import Response

TEXT_CONTENT_TYPE = "text/plain; charset=utf-8"
JSON_CONTENT_TYPE = "application/json"


class SlackResponse:
    """Collect a handler's response before it is turned into a Flask response.

    Like an HTTP response writer, the first write fixes the status code and
    headers; later writes only append to the body.
    """

    def __init__(self) -> None:
        self.status_code = 200
        self.headers: Dict[str, str] = {}
        self._chunks: list[bytes] = []
        self._written = False

    @property
    def written(self) -> bool:
        return self._written

    @property
    def body(self) -> bytes:
        return b"".join(self._chunks)

    def write(self, status_code: int, data: bytes | str, content_type: str = TEXT_CONTENT_TYPE) -> None:
        if not self._written:
            self.status_code = status_code
            self.headers["Content-Type"] = content_type
            self._written = True
        if isinstance(data, str):
            data = data.encode("utf-8")
        self._chunks.append(data)

    def text(self, status_code: int, body: str) -> None:
        """Write a plain text response."""

        self.write(status_code, body, TEXT_CONTENT_TYPE)

    def json(self, status_code: int, data: Any) -> None:
        """Write a JSON response, e.g. a message for Slack to post."""

        self.write(status_code, json.dumps(data), JSON_CONTENT_TYPE)

    def to_flask(self) -> Response:
        return Response(self.body, status=self.status_code, headers=self.headers)
