"""Exceptions raised by the ECG interpreter."""

from typing import Optional

from utils import messages


class EcgInterpreterError(Exception):
    """Base class; ``str(exc)`` is always safe to show to the user."""

    default_message = messages.UNKNOWN_ERROR

    def __init__(self, message: str = "") -> None:
        super().__init__(message or self.default_message)

    @property
    def message(self) -> str:
        return self.args[0]


class InvalidCredentialError(EcgInterpreterError):
    default_message = messages.INVALID_API_KEY


class MissingCredentialError(EcgInterpreterError):
    default_message = messages.MISSING_API_KEY


class MissingImageError(EcgInterpreterError):
    default_message = messages.MISSING_IMAGE


class InvalidImageError(EcgInterpreterError):
    default_message = messages.INVALID_IMAGE


class VisionAPIError(EcgInterpreterError):
    default_message = messages.API_REQUEST_FAILED

    def __init__(self, message: str = "", status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code
