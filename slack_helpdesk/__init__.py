"""Slack helpdesk receiver package initialisation."""

from .config import AppSettings, get_settings  # noqa: F401
from .dispatcher import SlackDispatcher  # noqa: F401
from .logging_config import configure_logging  # noqa: F401
from .payloads import (  # noqa: F401
    DialogSubmission,
    EventCallback,
    InteractionCallback,
    SlashCommand,
    URLVerification,
    expect_context,
)
from .routing import Route, RouteTable  # noqa: F401

__all__ = [
    "AppSettings",
    "get_settings",
    "SlackDispatcher",
    "configure_logging",
    "Route",
    "RouteTable",
    "SlashCommand",
    "InteractionCallback",
    "DialogSubmission",
    "EventCallback",
    "URLVerification",
    "expect_context",
]
