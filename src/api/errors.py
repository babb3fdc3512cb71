from __future__ import annotations

from typing import Any, List, Optional


class ApiError(Exception):
    """Base of every failure the client core reports to its callers."""

    default_message = "Something went wrong."

    def __init__(self, message: Optional[str] = None) -> None:
        super().__init__(message or self.default_message)
        self.message = message or self.default_message

    @property
    def user_message(self) -> str:
        return self.message


class InvalidRequest(ApiError):
    """The request URL could not be built; nothing was sent."""

    default_message = "Invalid service URL."


class InvalidResponse(ApiError):
    """No usable response came back from the transport."""

    default_message = "Unexpected response from the server."


class DecodingError(ApiError):
    """
    A success response (or a timestamp inside one) could not be decoded.
    `raw` keeps the offending value.
    """

    default_message = "Could not read the server response."

    def __init__(self, message: Optional[str] = None, raw: Any = None) -> None:
        super().__init__(message)
        self.raw = raw

    @property
    def user_message(self) -> str:
        return self.default_message


class ServerError(ApiError):
    """Non-2xx response, carrying the server's message and status code."""

    def __init__(
        self, message: str, code: int, details: Optional[List[str]] = None
    ) -> None:
        super().__init__(message)
        self.code = code
        self.details = list(details) if details else []

    @property
    def user_message(self) -> str:
        text = f"{self.message} ({self.code})"
        if self.details:
            text += "\n" + "\n".join(self.details)
        return text

    def __str__(self) -> str:
        return self.user_message


class LocalValidationError(ApiError):
    """Rejected before reaching the network."""

    default_message = "Invalid input."


def user_message(error: Optional[BaseException], fallback: str) -> str:
    """
    Text to show for `error`: the server's own message for ServerError, the
    validation text for LocalValidationError, otherwise the call site's fallback.
    """
    if isinstance(error, (ServerError, LocalValidationError)):
        return error.user_message
    return fallback
