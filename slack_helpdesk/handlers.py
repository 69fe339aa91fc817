"""Helpdesk handlers: a slash command that opens a dialog and its submission callback."""

from __future__ import annotations

from typing import Any, Dict

import structlog
from slack_sdk.errors import SlackApiError
from slack_sdk.models.dialogs import DialogBuilder

from .dispatcher import SlackDispatcher
from .exceptions import HelpdeskError
from .payloads import DIALOG_SUBMISSION, DialogSubmission, SlashCommand, expect_context
from .request import IncomingRequest
from .response import SlackResponse
from .slack_client import PlatformClient

HELP_REQUEST_CALLBACK_ID = "HelpRequest"
HELP_DESCRIPTION_FIELD = "HelpRequestDescription"
HELP_CONFIRMATION_TEXT = "Thanks <@{user_id}>, your help request has been received."


class DialogOpenError(HelpdeskError):
    pass


def build_help_dialog() -> Dict[str, Any]:
    """Build the dialog used to capture a help request."""

    return (
        DialogBuilder()
        .title("Request Help")
        .callback_id(HELP_REQUEST_CALLBACK_ID)
        .submit_label("Create")
        .notify_on_cancel(True)
        .text_area(
            name=HELP_DESCRIPTION_FIELD,
            label="Help Request Description",
            placeholder="Describe what you would like help with ...",
        )
        .to_dict()
    )


class HelpdeskHandlers:
    """Handlers bound to the platform client they talk to."""

    def __init__(self, slack_client: PlatformClient) -> None:
        self._client = slack_client

    def register(self, dispatcher: SlackDispatcher, *, command: str = "/help-me") -> None:
        dispatcher.handle_command(command, self.help_request)
        dispatcher.handle_interaction(DIALOG_SUBMISSION, HELP_REQUEST_CALLBACK_ID, self.help_callback)

    def help_request(self, response: SlackResponse, request: IncomingRequest, context: Any) -> None:
        """Open the help request dialog for the user who ran the command."""

        command = expect_context(context, SlashCommand)
        log = structlog.get_logger().bind(user_id=command.user_id, command=command.command)
        log.info("help_dialog_requested")
        try:
            self._client.open_dialog(command.trigger_id, build_help_dialog())
        except SlackApiError as exc:
            raise DialogOpenError(f"Failed to open dialog: {exc}") from exc

    def help_callback(self, response: SlackResponse, request: IncomingRequest, context: Any) -> None:
        """Record a submitted help request and confirm it in the channel."""

        submission = expect_context(context, DialogSubmission)
        user = submission.user
        description = submission.submission.get(HELP_DESCRIPTION_FIELD, "")
        structlog.get_logger().info(
            "help_requested",
            user_id=user.id if user else None,
            user_name=user.name if user else None,
            description=description,
        )

        channel = submission.channel
        if channel is not None and channel.id and user is not None:
            self._client.send_message(HELP_CONFIRMATION_TEXT.format(user_id=user.id), channel.id)
