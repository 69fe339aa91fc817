"""Tests for the helpdesk slash command and dialog handlers."""

from pathlib import Path
import sys

import pytest
from slack_sdk.errors import SlackApiError
from structlog.testing import capture_logs

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:  # pragma: no cover
    sys.path.insert(0, str(ROOT))

from slack_helpdesk.dispatcher import SlackDispatcher  # noqa: E402
from slack_helpdesk.exceptions import ContextTypeError  # noqa: E402
from slack_helpdesk.handlers import (  # noqa: E402
    HELP_DESCRIPTION_FIELD,
    HELP_REQUEST_CALLBACK_ID,
    DialogOpenError,
    HelpdeskHandlers,
    build_help_dialog,
)
from slack_helpdesk.payloads import DialogSubmission, SlashCommand  # noqa: E402
from slack_helpdesk.response import SlackResponse  # noqa: E402
from slack_helpdesk.routing import RouteTable  # noqa: E402


class DummyPlatformClient:
    def __init__(self, error: Exception | None = None):
        self.error = error
        self.dialogs = []
        self.messages = []

    def open_dialog(self, trigger_id, dialog):
        if self.error is not None:
            raise self.error
        self.dialogs.append((trigger_id, dialog))

    def send_message(self, text, channel):
        self.messages.append((text, channel))


def _submission(**overrides) -> DialogSubmission:
    body = {
        "type": "dialog_submission",
        "callback_id": HELP_REQUEST_CALLBACK_ID,
        "submission": {HELP_DESCRIPTION_FIELD: "My laptop is on fire"},
        "user": {"id": "W12A3BCDEF", "name": "dreamweaver"},
        "channel": {"id": "C1AB2C3DE", "name": "helpdesk"},
    }
    body.update(overrides)
    return DialogSubmission.from_body(body)


def test_build_help_dialog():
    dialog = build_help_dialog()

    assert dialog["callback_id"] == HELP_REQUEST_CALLBACK_ID
    assert dialog["title"] == "Request Help"
    assert dialog["submit_label"] == "Create"
    assert dialog["notify_on_cancel"] is True
    assert len(dialog["elements"]) == 1
    element = dialog["elements"][0]
    assert element["name"] == HELP_DESCRIPTION_FIELD
    assert element["type"] == "textarea"


def test_help_request_opens_dialog():
    client = DummyPlatformClient()
    handlers = HelpdeskHandlers(client)
    command = SlashCommand.from_body({"command": "/help-me", "trigger_id": "ABC123", "user_id": "U1"})

    handlers.help_request(SlackResponse(), None, command)

    assert client.dialogs[0][0] == "ABC123"
    assert client.dialogs[0][1]["callback_id"] == HELP_REQUEST_CALLBACK_ID


def test_help_request_wraps_dialog_errors():
    error = SlackApiError("bad thing happen", {"ok": False, "error": "invalid_trigger"})
    handlers = HelpdeskHandlers(DummyPlatformClient(error=error))
    command = SlashCommand.from_body({"command": "/help-me", "trigger_id": "ABC123"})

    with pytest.raises(DialogOpenError) as err:
        handlers.help_request(SlackResponse(), None, command)

    assert str(err.value).startswith("Failed to open dialog: bad thing happen")
    assert err.value.__cause__ is error


def test_help_request_rejects_other_contexts():
    handlers = HelpdeskHandlers(DummyPlatformClient())

    with pytest.raises(ContextTypeError) as err:
        handlers.help_request(SlackResponse(), None, 42)

    assert str(err.value) == "Expected a SlashCommand to be passed to the handler, got int"


def test_help_callback_logs_and_confirms():
    client = DummyPlatformClient()
    handlers = HelpdeskHandlers(client)

    with capture_logs() as logs:
        handlers.help_callback(SlackResponse(), None, _submission())

    entry = next(log for log in logs if log["event"] == "help_requested")
    assert entry["user_name"] == "dreamweaver"
    assert entry["description"] == "My laptop is on fire"
    assert client.messages == [
        ("Thanks <@W12A3BCDEF>, your help request has been received.", "C1AB2C3DE"),
    ]


def test_help_callback_without_channel_skips_confirmation():
    client = DummyPlatformClient()
    handlers = HelpdeskHandlers(client)

    handlers.help_callback(SlackResponse(), None, _submission(channel=None))

    assert client.messages == []


def test_register_adds_command_and_dialog_routes():
    dispatcher = SlackDispatcher(RouteTable(), signing_secret="secret", base_path="/slack")

    HelpdeskHandlers(DummyPlatformClient()).register(dispatcher, command="/help-me")

    keys = [route.key for route in dispatcher.routes]
    assert keys == [
        ("/slack", "/help-me", None, None, None),
        ("/slack", None, HELP_REQUEST_CALLBACK_ID, "dialog_submission", None),
    ]
