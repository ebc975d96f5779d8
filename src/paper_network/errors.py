from __future__ import annotations


class BackendError(Exception):
    """Base class for failures talking to the similarity backend."""


class TransportError(BackendError):
    """The request never produced a response (DNS, connect, timeout, ...)."""


class InvalidResponseError(BackendError):
    """The backend answered with a non-2xx status."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class DecodingError(BackendError):
    """The backend answered, but the payload could not be turned into a graph."""
