"""Route definitions and the ordered route table."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Callable, Iterator, List, Optional, Tuple

from .exceptions import DuplicateRouteError, RouteNotFoundError
from .payloads import EventCallback, InteractionCallback, SlashCommand

if TYPE_CHECKING:  # pragma: no cover
    from .request import IncomingRequest
    from .response import SlackResponse


Handler = Callable[["SlackResponse", "IncomingRequest", Any], None]
RouteKey = Tuple[str, Optional[str], Optional[str], Optional[str], Optional[str]]


@dataclass(frozen=True)
class Route:
    """A handler bound to exactly one discriminator.

    Populate ``command``, or both ``interaction_type`` and ``callback_id``,
    or ``event_type``; leave all of them empty for a plain path route.
    """

    path: str
    handler: Handler = field(compare=False, repr=False)
    command: str | None = None
    callback_id: str | None = None
    interaction_type: str | None = None
    event_type: str | None = None

    def __post_init__(self) -> None:
        if not self.path:
            raise ValueError("Route path must not be empty.")
        if bool(self.interaction_type) != bool(self.callback_id):
            raise ValueError("Interaction routes need both an interaction type and a callback id.")
        groups = [bool(self.command), bool(self.interaction_type), bool(self.event_type)]
        if sum(groups) > 1:
            raise ValueError("A route may only match on one of command, interaction or event type.")

    @property
    def key(self) -> RouteKey:
        return (self.path, self.command, self.callback_id, self.interaction_type, self.event_type)

    @property
    def is_path_route(self) -> bool:
        return not (self.command or self.interaction_type or self.event_type)

    def matches(self, payload: Any) -> bool:
        """Return True when *payload* has exactly this route's discriminator."""

        if isinstance(payload, SlashCommand):
            return self.command is not None and self.command == payload.command
        if isinstance(payload, InteractionCallback):
            return (
                self.interaction_type is not None
                and self.interaction_type == payload.type
                and self.callback_id == payload.callback_id
            )
        if isinstance(payload, EventCallback):
            return self.event_type is not None and self.event_type == payload.event.type
        return False


class RouteTable:
    """Insertion-ordered collection of routes.

    Register and unregister routes while setting the application up; the
    table takes no locks, so callers that mutate it while serving traffic
    must synchronise themselves.
    """

    def __init__(self) -> None:
        self._routes: List[Route] = []

    def __len__(self) -> int:
        return len(self._routes)

    def __iter__(self) -> Iterator[Route]:
        return iter(tuple(self._routes))

    @property
    def routes(self) -> Tuple[Route, ...]:
        return tuple(self._routes)

    def register(self, route: Route) -> Route:
        if self._find(route.key) is not None:
            raise DuplicateRouteError(f"A route is already registered for {route.key!r}.")
        self._routes.append(route)
        return route

    def unregister(self, route: Route) -> None:
        existing = self._find(route.key)
        if existing is None:
            raise RouteNotFoundError(f"No route is registered for {route.key!r}.")
        self._routes.remove(existing)

    def match(self, payload: Any) -> Route | None:
        """Return the first route whose discriminator equals the payload's."""

        for route in self._routes:
            if route.matches(payload):
                return route
        return None

    def match_path(self, path: str) -> Route | None:
        for route in self._routes:
            if route.is_path_route and route.path == path:
                return route
        return None

    def _find(self, key: RouteKey) -> Route | None:
        for route in self._routes:
            if route.key == key:
                return route
        return None
