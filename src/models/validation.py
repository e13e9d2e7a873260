"""Chat request validation.

Schema checks come from the pydantic models; the conversational rule (the
last message must come from the user) is checked separately so it can be
reported with its own error code.
"""

from typing import Any

from pydantic import ValidationError

from src.models.schemas import ChatRequest

INVALID_JSON = "INVALID_JSON"
INVALID_PAYLOAD = "INVALID_PAYLOAD"
INVALID_CONVERSATION = "INVALID_CONVERSATION"


class ChatRequestError(Exception):
    """Raised when a chat request is malformed.

    Attributes:
        code: INVALID_JSON, INVALID_PAYLOAD or INVALID_CONVERSATION.
        message: User-facing description.
        details: Optional structured details (field-level errors).
    """

    def __init__(self, code: str, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.details = details


def _field_errors(exc: ValidationError) -> list[dict[str, str]]:
    return [
        {
            "field": ".".join(str(part) for part in error["loc"]),
            "message": error["msg"],
            "code": error["type"],
        }
        for error in exc.errors(include_url=False, include_input=False)
    ]


def validate_last_message_is_from_user(request: ChatRequest) -> None:
    """Ensure the conversation ends with a user message.

    Raises:
        ChatRequestError: INVALID_CONVERSATION if the last role is not user.
    """
    if request.latest_message.role != "user":
        raise ChatRequestError(INVALID_CONVERSATION, "Last message must be from user")


def parse_chat_request(payload: Any) -> ChatRequest:
    """Validate a decoded JSON payload into a ``ChatRequest``.

    Args:
        payload: Decoded request body.

    Returns:
        The validated request.

    Raises:
        ChatRequestError: INVALID_PAYLOAD on schema violations,
            INVALID_CONVERSATION if the last message is not from the user.
    """
    try:
        request = ChatRequest.model_validate(payload)
    except ValidationError as e:
        raise ChatRequestError(
            INVALID_PAYLOAD,
            "Invalid request payload",
            details={"errors": _field_errors(e)},
        ) from e

    validate_last_message_is_from_user(request)
    return request
