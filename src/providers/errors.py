"""Provider error taxonomy and classification.

Every failure coming out of an adapter is turned into a ``ProviderError``
with one fixed code and a fixed user-facing message. Classification looks
only at the exception type and HTTP status, never at upstream text, so
nothing from the provider (bodies, stack traces, credentials) can leak into
what the client sees.
"""

import builtins
from enum import Enum

import httpx

# Upstream statuses worth another attempt
RETRYABLE_STATUS_CODES = frozenset({429, 500, 503})


class ErrorCode(str, Enum):
    """Provider failure codes."""

    MISSING_API_KEY = "MISSING_API_KEY"
    INVALID_API_KEY = "INVALID_API_KEY"
    RATE_LIMITED = "RATE_LIMITED"
    TIMEOUT = "TIMEOUT"
    SERVICE_ERROR = "SERVICE_ERROR"
    CONNECTION_ERROR = "CONNECTION_ERROR"
    INVALID_INPUT = "INVALID_INPUT"
    UNKNOWN_ERROR = "UNKNOWN_ERROR"


USER_MESSAGES: dict[ErrorCode, str] = {
    ErrorCode.MISSING_API_KEY: "The assistant is not configured. Please try again later.",
    ErrorCode.INVALID_API_KEY: "The assistant is misconfigured. Please try again later.",
    ErrorCode.RATE_LIMITED: "The assistant is receiving too many requests. Please try again in a moment.",
    ErrorCode.TIMEOUT: "The assistant took too long to respond. Please try again.",
    ErrorCode.SERVICE_ERROR: "The assistant service is temporarily unavailable. Please try again later.",
    ErrorCode.CONNECTION_ERROR: "Could not reach the assistant service. Please try again later.",
    ErrorCode.INVALID_INPUT: "The message could not be processed. Please rephrase and try again.",
    ErrorCode.UNKNOWN_ERROR: "An error occurred while processing your request.",
}


class ProviderError(Exception):
    """Classified provider failure.

    Attributes:
        message: User-facing message, safe to send to the client.
        code: Error code.
        status_code: Upstream HTTP status, if there was one.
        retryable: Whether another attempt may succeed.
    """

    def __init__(
        self,
        message: str,
        code: ErrorCode,
        status_code: int | None = None,
        retryable: bool = False,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code
        self.status_code = status_code
        self.retryable = retryable

    @classmethod
    def from_code(
        cls,
        code: ErrorCode,
        status_code: int | None = None,
        retryable: bool = False,
    ) -> "ProviderError":
        """Build an error carrying the standard message for ``code``."""
        return cls(USER_MESSAGES[code], code, status_code=status_code, retryable=retryable)


class UpstreamStreamError(Exception):
    """The provider reported an error inside an otherwise successful stream."""


def _code_for_status(status_code: int) -> ErrorCode:
    if status_code in (401, 403):
        return ErrorCode.INVALID_API_KEY
    if status_code == 429:
        return ErrorCode.RATE_LIMITED
    if status_code in (400, 404, 422):
        return ErrorCode.INVALID_INPUT
    if status_code >= 500:
        return ErrorCode.SERVICE_ERROR
    return ErrorCode.UNKNOWN_ERROR


def classify_error(exc: BaseException) -> ProviderError:
    """Map any exception raised while talking to a provider to a ``ProviderError``.

    Timeouts, connection failures and HTTP 429/500/503 are retryable;
    everything else is not.
    """
    if isinstance(exc, ProviderError):
        return exc

    if isinstance(exc, httpx.HTTPStatusError):
        status_code = exc.response.status_code
        return ProviderError.from_code(
            _code_for_status(status_code),
            status_code=status_code,
            retryable=status_code in RETRYABLE_STATUS_CODES,
        )

    if isinstance(exc, (httpx.TimeoutException, builtins.TimeoutError)):
        return ProviderError.from_code(ErrorCode.TIMEOUT, retryable=True)

    if isinstance(exc, (httpx.TransportError, ConnectionError)):
        return ProviderError.from_code(ErrorCode.CONNECTION_ERROR, retryable=True)

    if isinstance(exc, UpstreamStreamError):
        return ProviderError.from_code(ErrorCode.SERVICE_ERROR)

    return ProviderError.from_code(ErrorCode.UNKNOWN_ERROR)
