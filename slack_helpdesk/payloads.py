"""Pydantic models for the Slack payloads the receiver understands."""

from __future__ import annotations

from typing import Any, Dict, List, Literal, Type, TypeVar, Union

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr, ValidationError

from .exceptions import ContextTypeError, MalformedJSONError

URL_VERIFICATION = "url_verification"
EVENT_CALLBACK = "event_callback"
DIALOG_SUBMISSION = "dialog_submission"
VIEW_SUBMISSION = "view_submission"
BLOCK_ACTIONS = "block_actions"


class SlackModel(BaseModel):
    """Base model that keeps unknown keys and the decoded body."""

    model_config = ConfigDict(extra="allow")

    _body: Dict[str, Any] = PrivateAttr(default_factory=dict)

    @classmethod
    def from_body(cls, body: Dict[str, Any]):
        model = cls.model_validate(body)
        model._body = body
        return model

    @property
    def body(self) -> Dict[str, Any]:
        """The full decoded request body this model was built from."""

        return self._body


class Team(SlackModel):
    id: str = ""
    domain: str = ""


class User(SlackModel):
    id: str = ""
    name: str = ""


class Channel(SlackModel):
    id: str = ""
    name: str = ""


class SlashCommand(SlackModel):
    """A ``/command`` invocation forwarded as a form-encoded POST."""

    command: str
    text: str = ""
    token: str = ""
    team_id: str = ""
    team_domain: str = ""
    enterprise_id: str = ""
    enterprise_name: str = ""
    channel_id: str = ""
    channel_name: str = ""
    user_id: str = ""
    user_name: str = ""
    response_url: str = ""
    trigger_id: str = ""
    api_app_id: str = ""


class InteractionCallback(SlackModel):
    """A user action on an interactive element, delivered in the ``payload`` field."""

    type: str
    callback_id: str
    token: str = ""
    trigger_id: str = ""
    response_url: str = ""
    action_ts: str = ""
    team: Team | None = None
    user: User | None = None
    channel: Channel | None = None

    def refine(self) -> "InteractionCallback":
        """Return the interaction-specific shape for this callback's ``type``."""

        shape = INTERACTION_SHAPES.get(self.type)
        if shape is None or isinstance(self, shape):
            return self
        try:
            return shape.from_body(self.body)
        except ValidationError as exc:
            raise MalformedJSONError(f"error parsing payload JSON: {summarise_validation_error(exc)}") from exc


class DialogSubmission(InteractionCallback):
    submission: Dict[str, Any] = Field(default_factory=dict)
    state: str = ""


class ViewSubmission(InteractionCallback):
    view: Dict[str, Any] = Field(default_factory=dict)


class BlockActions(InteractionCallback):
    actions: List[Dict[str, Any]] = Field(default_factory=list)


INTERACTION_SHAPES: Dict[str, Type[InteractionCallback]] = {
    DIALOG_SUBMISSION: DialogSubmission,
    VIEW_SUBMISSION: ViewSubmission,
    BLOCK_ACTIONS: BlockActions,
}


class InnerEvent(SlackModel):
    type: str
    subtype: str | None = None
    event_ts: str | None = None


class EventCallback(SlackModel):
    """Events API envelope wrapping a single inner event."""

    type: Literal["event_callback"]
    event: InnerEvent
    token: str = ""
    team_id: str = ""
    api_app_id: str = ""
    event_id: str = ""
    event_time: int | None = None


class URLVerification(SlackModel):
    """Events API handshake; the challenge must be echoed back verbatim."""

    type: Literal["url_verification"]
    challenge: str
    token: str = ""


Payload = Union[SlashCommand, InteractionCallback, EventCallback, URLVerification]


def summarise_validation_error(exc: ValidationError) -> str:
    """Describe the first error of *exc* as ``location: message``."""

    errors: List[Dict[str, Any]] = exc.errors()
    first = errors[0] if errors else {}
    location = ".".join(str(part) for part in first.get("loc", ()))
    return f"{location}: {first.get('msg', 'invalid value')}"


ContextT = TypeVar("ContextT", bound=SlackModel)


def expect_context(context: Any, kind: Type[ContextT]) -> ContextT:
    """Narrow a handler context to *kind* or raise ``ContextTypeError``."""

    if not isinstance(context, kind):
        raise ContextTypeError(
            f"Expected a {kind.__name__} to be passed to the handler, got {type(context).__name__}"
        )
    return context
