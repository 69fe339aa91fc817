"""HTTP entry point that validates, classifies and routes Slack callbacks."""

from __future__ import annotations

from typing import Any
from uuid import uuid4

import structlog
from flask import Response
from structlog.contextvars import bind_contextvars, unbind_contextvars
from werkzeug.wrappers import Request

from .exceptions import AuthError, ClassifyError, HandlerError
from .payloads import InteractionCallback, URLVerification
from .request import IncomingRequest
from .response import SlackResponse
from .routing import Handler, Route, RouteTable
from .security import validate_request

INVALID_REQUEST_MESSAGE = "invalid slack request"
NOT_FOUND_MESSAGE = "Not found"
HANDLER_FAILED_MESSAGE = "Internal server error"


def not_found(response: SlackResponse, request: IncomingRequest, context: Any) -> None:
    """Default route used when nothing else matches."""

    response.text(404, NOT_FOUND_MESSAGE)


class SlackDispatcher:
    """Route validated Slack requests to registered handlers.

    The dispatcher keeps no per-request state; concurrent requests are safe
    as long as the route table is not mutated while serving.
    """

    def __init__(
        self,
        route_table: RouteTable,
        *,
        signing_secret: str,
        base_path: str,
        identity_header: str | None = None,
        default_route: Handler | None = None,
    ) -> None:
        if not signing_secret:
            raise ValueError("A signing secret is required to validate Slack requests.")
        self.routes = route_table
        self.base_path = base_path
        self.default_route: Handler = default_route or not_found
        self._signing_secret = signing_secret
        self._identity_header = identity_header

    def handle_command(self, command: str, handler: Handler) -> Route:
        """Register *handler* for a slash command sent to the base path."""

        return self.routes.register(Route(self.base_path, handler, command=command))

    def handle_interaction(self, interaction_type: str, callback_id: str, handler: Handler) -> Route:
        """Register *handler* for an interaction type / callback id pair."""

        return self.routes.register(
            Route(self.base_path, handler, interaction_type=interaction_type, callback_id=callback_id)
        )

    def handle_event(self, event_type: str, handler: Handler) -> Route:
        """Register *handler* for an Events API inner event type."""

        return self.routes.register(Route(self.base_path, handler, event_type=event_type))

    def handle_path(self, path: str, handler: Handler) -> Route:
        """Register *handler* for requests to an exact path."""

        return self.routes.register(Route(path, handler))

    def dispatch(self, http_request: Request) -> Response:
        """Serve one HTTP request; never raises."""

        trace_id = str(uuid4())
        bind_contextvars(trace_id=trace_id)
        log = structlog.get_logger().bind(trace_id=trace_id, path=http_request.path)
        request = IncomingRequest(http_request)
        response = SlackResponse()
        try:
            try:
                validate_request(request, self._signing_secret, identity_header=self._identity_header)
            except AuthError as exc:
                log.warning("slack_request_rejected", reason=exc.reason, error=str(exc))
                response.text(400, INVALID_REQUEST_MESSAGE)
                return response.to_flask()

            if request.path == self.base_path:
                self._dispatch_payload(request, response, log)
            else:
                route = self.routes.match_path(request.path)
                self._serve(route, request, response, None, log)
            return response.to_flask()
        finally:
            unbind_contextvars("trace_id")

    def _dispatch_payload(self, request: IncomingRequest, response: SlackResponse, log) -> None:
        route: Route | None = None
        try:
            payload = request.payload()
            if isinstance(payload, URLVerification):
                log.info("url_verification_challenge")
                response.text(200, payload.challenge)
                return

            route = self.routes.match(payload)
            context: Any = payload
            if route is not None and isinstance(payload, InteractionCallback):
                context = payload.refine()
        except ClassifyError as exc:
            log.warning("slack_payload_invalid", error=str(exc), body=request.body_text())
            response.text(400, str(exc))
            return

        self._serve(route, request, response, context, log)

    def _serve(self, route: Route | None, request: IncomingRequest, response: SlackResponse, context: Any, log) -> None:
        if route is None:
            log.info("slack_route_not_found")
            handler, context = self.default_route, None
        else:
            handler = route.handler

        try:
            self._invoke(handler, response, request, context)
        except HandlerError as exc:
            log.error(
                "slack_handler_failed",
                error=str(exc),
                body=request.body_text(),
                exc_info=exc.__cause__,
            )
            if not response.written:
                response.text(500, HANDLER_FAILED_MESSAGE)

    @staticmethod
    def _invoke(handler: Handler, response: SlackResponse, request: IncomingRequest, context: Any) -> None:
        try:
            handler(response, request, context)
        except Exception as exc:
            raise HandlerError(str(exc)) from exc
