"""Thin wrapper utilities around the Slack WebClient."""

from __future__ import annotations

from typing import Any, Mapping, Protocol

import structlog
from slack_sdk import WebClient
from slack_sdk.errors import SlackApiError


class PlatformClient(Protocol):
    """The Slack capabilities handlers rely on."""

    def open_dialog(self, trigger_id: str, dialog: Mapping[str, Any]) -> None:
        ...

    def send_message(self, text: str, channel: str) -> None:
        ...


class SlackClient:
    """Encapsulate Slack WebClient interactions for easier testing.

    Dialogs are opened with the app token that owns the slash command;
    messages are posted with the bot token.
    """

    def __init__(
        self,
        *,
        app_token: str | None = None,
        bot_token: str | None = None,
        app_client: WebClient | None = None,
        bot_client: WebClient | None = None,
    ) -> None:
        if app_client is None and app_token is None:
            raise ValueError("Either an instantiated app client or an app token must be provided.")
        if bot_client is None and bot_token is None:
            raise ValueError("Either an instantiated bot client or a bot token must be provided.")

        self._app_client = app_client or WebClient(token=app_token)
        self._bot_client = bot_client or WebClient(token=bot_token)

    @property
    def app_client(self) -> WebClient:
        return self._app_client

    @property
    def bot_client(self) -> WebClient:
        return self._bot_client

    def verify(self) -> None:
        """Check both tokens against Slack; raises ``SlackApiError`` when either is rejected."""

        self._app_client.auth_test()
        self._bot_client.auth_test()

    def open_dialog(self, trigger_id: str, dialog: Mapping[str, Any]) -> None:
        """Open a dialog in response to a slash command or interaction."""

        try:
            self._app_client.dialog_open(trigger_id=trigger_id, dialog=dict(dialog))
        except SlackApiError as exc:
            structlog.get_logger().warning(
                "dialog_open_failed",
                trigger_id=trigger_id,
                error=exc.response.get("error") if exc.response is not None else str(exc),
            )
            raise

    def send_message(self, text: str, channel: str) -> None:
        """Post a message visible to everyone in *channel*."""

        try:
            self._bot_client.chat_postMessage(channel=channel, text=text)
        except SlackApiError as exc:  # pragma: no cover - network dependent
            structlog.get_logger().warning(
                "message_send_failed",
                channel=channel,
                error=exc.response.get("error") if exc.response is not None else str(exc),
            )
