import re
from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, field_validator

# Mirrors the provider-side limit on a single message
MAX_CONTENT_LENGTH = 4096

Role = Literal["system", "user", "assistant"]

# C0 controls except tab, newline and carriage return, plus DEL
CONTROL_CHARS = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]")


def strip_control_chars(text: str) -> str:
    return CONTROL_CHARS.sub("", text)


class ChatMessage(BaseModel):
    """A message in the provider-agnostic conversation format.

    Attributes:
        role: Speaker (system, user or assistant).
        content: Message text.
    """

    model_config = ConfigDict(frozen=True)

    role: Role
    content: str


class ClientMessage(BaseModel):
    """A prior or current turn supplied by the client.

    Clients may only send user and assistant turns; the system message is
    always built server-side.
    """

    role: Literal["user", "assistant"]
    content: str = Field(..., min_length=1, max_length=MAX_CONTENT_LENGTH)

    @field_validator("content")
    @classmethod
    def reject_blank_content(cls, v: str) -> str:
        """Reject content made only of whitespace and control characters."""
        if not strip_control_chars(v).strip():
            raise ValueError("Message content cannot be empty")
        return v


class ChatRequest(BaseModel):
    """Request payload for the chat endpoint.

    Attributes:
        messages: Conversation so far; the last entry is the new user message.
        conversation_id: Opaque client-side conversation identifier.
        language: Reply and retrieval language.
        user_name: Name of the user, if the client already knows it.
    """

    model_config = ConfigDict(populate_by_name=True)

    messages: list[ClientMessage] = Field(..., min_length=1)
    conversation_id: str | None = Field(None, alias="conversationId")
    language: Literal["en", "fr"] | None = None
    user_name: str | None = Field(None, alias="userName", max_length=100)

    @property
    def latest_message(self) -> ClientMessage:
        return self.messages[-1]

    @property
    def history(self) -> list[ChatMessage]:
        """Every turn before the latest one, as provider-agnostic messages."""
        return [ChatMessage(role=m.role, content=m.content) for m in self.messages[:-1]]


class ContentEvent(BaseModel):
    """A chunk of generated text."""

    type: Literal["content"] = "content"
    data: str


class DoneEvent(BaseModel):
    """Successful end of stream."""

    type: Literal["done"] = "done"


class ErrorEvent(BaseModel):
    """Failed end of stream.

    Attributes:
        error: User-facing message.
        code: Machine-readable error code.
    """

    type: Literal["error"] = "error"
    error: str
    code: str


StreamEvent = Annotated[ContentEvent | DoneEvent | ErrorEvent, Field(discriminator="type")]

stream_event_adapter: TypeAdapter[ContentEvent | DoneEvent | ErrorEvent] = TypeAdapter(StreamEvent)


class ErrorResponse(BaseModel):
    """JSON body of every pre-stream error response."""

    error: str
    code: str
    details: dict[str, Any] | None = None
