"""Exceptions raised by the fake client.

These derive from the ``kubernetes_asyncio`` exception so that controller
code written against the real client, which catches `ApiException` and
checks its ``status``, behaves the same way against the fake.
"""

from __future__ import annotations

from typing import ClassVar

from kubernetes_asyncio.client import ApiException

__all__ = [
    "AlreadyExistsError",
    "BadRequestError",
    "InvalidSelectorError",
    "NoReactionError",
    "NotFoundError",
    "StatusError",
    "UnsupportedPatchTypeError",
]


class StatusError(ApiException):
    """Base class for errors carrying a Kubernetes status code.

    Parameters
    ----------
    message
        Human-readable reason for the error.
    """

    status_code: ClassVar[int] = 500

    def __init__(self, message: str) -> None:
        super().__init__(status=self.status_code, reason=message)
        self.message = message


class BadRequestError(StatusError):
    """The request was malformed or inconsistent."""

    status_code = 400


class InvalidSelectorError(BadRequestError):
    """A label selector could not be parsed."""


class NoReactionError(Exception):
    """No reactor in the chain handled an action that requires one."""


class NotFoundError(StatusError):
    """The target object does not exist."""

    status_code = 404


class AlreadyExistsError(StatusError):
    """An object with the same name already exists."""

    status_code = 409


class UnsupportedPatchTypeError(StatusError):
    """The patch type is not supported by the fake."""

    status_code = 415
