"""Application entry point for the Slack helpdesk receiver."""

from __future__ import annotations

from pathlib import Path
from uuid import uuid4

import structlog
from flask import Flask, jsonify, request
from werkzeug.exceptions import HTTPException

from slack_helpdesk.config import AppSettings, get_settings
from slack_helpdesk.dispatcher import SlackDispatcher
from slack_helpdesk.handlers import HelpdeskHandlers
from slack_helpdesk.logging_config import configure_logging
from slack_helpdesk.routing import RouteTable
from slack_helpdesk.slack_client import PlatformClient, SlackClient

DISPATCHER_EXTENSION = "slack_dispatcher"

_LOGGING_CONFIGURED = False


def _create_slack_client(settings: AppSettings) -> SlackClient:
    """Initialise the Slack API wrapper using validated settings."""

    return SlackClient(app_token=settings.app_token, bot_token=settings.bot_token)


def _create_dispatcher(settings: AppSettings, slack_client: PlatformClient) -> SlackDispatcher:
    dispatcher = SlackDispatcher(
        RouteTable(),
        signing_secret=settings.signing_secret,
        base_path=settings.base_path,
        identity_header=settings.identity_header,
    )
    HelpdeskHandlers(slack_client).register(dispatcher, command=settings.help_command)
    return dispatcher


def _register_error_handlers(flask_app: Flask) -> None:
    """Register a JSON error handler that attaches a trace identifier."""

    @flask_app.errorhandler(Exception)
    def handle_unexpected_error(error: Exception):  # type: ignore[override]
        if isinstance(error, HTTPException):
            return error
        trace_id = str(uuid4())
        flask_app.logger.exception(
            "Unhandled application error", extra={"trace_id": trace_id}, exc_info=error
        )
        response = jsonify({"error": "internal_server_error", "trace_id": trace_id})
        response.status_code = 500
        return response


def _load_version() -> str:
    version_file = Path(__file__).resolve().parent / "VERSION"
    if version_file.exists():
        return version_file.read_text(encoding="utf-8").strip()
    return "unknown"


def create_app(settings: AppSettings | None = None, slack_client: PlatformClient | None = None) -> Flask:
    """Create and configure the Flask application."""

    global _LOGGING_CONFIGURED
    if settings is None:
        settings = get_settings()
    if not _LOGGING_CONFIGURED:
        configure_logging(settings.log_level)
        _LOGGING_CONFIGURED = True

    if slack_client is None:
        slack_client = _create_slack_client(settings)
    dispatcher = _create_dispatcher(settings, slack_client)

    flask_app = Flask(__name__)
    flask_app.config["APP_VERSION"] = _load_version()
    flask_app.extensions[DISPATCHER_EXTENSION] = dispatcher
    flask_app.logger.setLevel("INFO")

    _register_error_handlers(flask_app)

    @flask_app.route("/", defaults={"path": ""}, methods=["POST"])
    @flask_app.route("/<path:path>", methods=["POST"])
    def slack_callbacks(path: str):
        return dispatcher.dispatch(request)

    @flask_app.route("/healthz", methods=["GET"])
    def healthz():
        health: dict[str, object] = {"ok": True}
        health["version"] = flask_app.config.get("APP_VERSION", "unknown")
        health["config"] = {
            "base_path": dispatcher.base_path,
            "identity_check": settings.identity_header is not None,
        }
        health["routes"] = len(dispatcher.routes)
        if not health["routes"]:
            health["ok"] = False
        status = 200 if health["ok"] else 503
        return jsonify(health), status

    structlog.get_logger().info(
        "slack_receiver_configured",
        base_path=settings.base_path,
        routes=len(dispatcher.routes),
        identity_header=settings.identity_header,
    )
    return flask_app


if __name__ == "__main__":  # pragma: no cover - manual execution helper
    app_settings = get_settings()
    client = _create_slack_client(app_settings)
    client.verify()
    application = create_app(app_settings, client)
    structlog.get_logger().info("slack_receiver_listening", host=app_settings.host, port=app_settings.port)
    application.run(host=app_settings.host, port=app_settings.port)
