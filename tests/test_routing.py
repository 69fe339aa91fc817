"""Tests for route definitions and the route table."""

from pathlib import Path
import sys

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:  # pragma: no cover
    sys.path.insert(0, str(ROOT))

from slack_helpdesk.exceptions import DuplicateRouteError, RouteNotFoundError  # noqa: E402
from slack_helpdesk.payloads import EventCallback, InteractionCallback, SlashCommand  # noqa: E402
from slack_helpdesk.routing import Route, RouteTable  # noqa: E402

BASE = "/slack"


def _noop(response, request, context):
    return None


def _other(response, request, context):
    return None


def _command(name: str) -> SlashCommand:
    return SlashCommand.from_body({"command": name})


def _interaction(kind: str, callback_id: str) -> InteractionCallback:
    return InteractionCallback.from_body({"type": kind, "callback_id": callback_id})


def _event(kind: str) -> EventCallback:
    return EventCallback.from_body({"type": "event_callback", "event": {"type": kind}})


def test_match_slash_command():
    table = RouteTable()
    route = table.register(Route(BASE, _noop, command="/foo"))

    assert table.match(_command("/foo")) is route
    assert table.match(_command("/bar")) is None


def test_match_interaction_requires_exact_pair():
    table = RouteTable()
    route = table.register(Route(BASE, _noop, interaction_type="dialog_submission", callback_id="x"))

    assert table.match(_interaction("dialog_submission", "x")) is route
    assert table.match(_interaction("dialog_submission", "y")) is None
    assert table.match(_interaction("block_actions", "x")) is None


def test_match_event_type():
    table = RouteTable()
    route = table.register(Route(BASE, _noop, event_type="emoji_changed"))

    assert table.match(_event("emoji_changed")) is route
    assert table.match(_event("app_mention")) is None


def test_categories_do_not_cross_match():
    table = RouteTable()
    table.register(Route(BASE, _noop, event_type="x"))
    table.register(Route(BASE, _noop, interaction_type="x", callback_id="x"))

    assert table.match(_command("x")) is None


def test_first_registered_route_wins_within_category():
    table = RouteTable()
    first = table.register(Route(BASE, _noop, command="/foo"))
    table.register(Route("/other", _other, command="/foo"))

    assert table.match(_command("/foo")) is first


def test_match_path_only_considers_path_routes():
    table = RouteTable()
    table.register(Route(BASE, _noop, command="/foo"))
    path_route = table.register(Route("/foo", _noop))

    assert table.match_path("/foo") is path_route
    assert table.match_path(BASE) is None
    assert table.match_path("/foo/") is None


def test_duplicate_registration_rejected():
    table = RouteTable()
    table.register(Route(BASE, _noop, command="/foo"))

    with pytest.raises(DuplicateRouteError):
        table.register(Route(BASE, _other, command="/foo"))

    assert len(table) == 1


def test_unregister_unknown_route_rejected():
    table = RouteTable()

    with pytest.raises(RouteNotFoundError):
        table.unregister(Route(BASE, _noop, command="/foo"))


def test_register_match_unregister_round_trip():
    table = RouteTable()
    route = Route(BASE, _noop, interaction_type="dialog_submission", callback_id="x")

    table.register(route)
    assert table.match(_interaction("dialog_submission", "x")) is route

    table.unregister(Route(BASE, _other, interaction_type="dialog_submission", callback_id="x"))
    assert table.match(_interaction("dialog_submission", "x")) is None
    assert len(table) == 0


def test_iteration_preserves_insertion_order():
    table = RouteTable()
    routes = [
        table.register(Route(BASE, _noop, command="/b")),
        table.register(Route(BASE, _noop, command="/a")),
        table.register(Route("/path", _noop)),
    ]

    assert list(table) == routes
    assert table.routes == tuple(routes)


@pytest.mark.parametrize(
    "kwargs",
    [
        {"command": "/foo", "event_type": "emoji_changed"},
        {"command": "/foo", "interaction_type": "dialog_submission", "callback_id": "x"},
        {"interaction_type": "dialog_submission"},
        {"callback_id": "x"},
    ],
)
def test_route_requires_single_discriminator(kwargs):
    with pytest.raises(ValueError):
        Route(BASE, _noop, **kwargs)


def test_route_requires_path():
    with pytest.raises(ValueError):
        Route("", _noop)


def test_route_equality_ignores_handler():
    assert Route(BASE, _noop, command="/foo") == Route(BASE, _other, command="/foo")
    assert Route(BASE, _noop, command="/foo").key == (BASE, "/foo", None, None, None)
