from __future__ import annotations

"""Derive HTTP status, title and type URI of a problem from an error type."""

from enum import Enum
from http import HTTPStatus
from typing import Callable, Dict, TypeVar

from .detail import URN_PROBLEM_JAVA_PREFIX
from .status import StatusLike, StatusType, to_status_type

EXCEPTION_SUFFIX = "Exception"

T = TypeVar("T", bound=type)


class ErrorClass(str, Enum):
    """Whether an error is an ordinary client outcome or a server failure."""

    CLIENT = "client"
    SERVER = "server"


def classify(status: StatusLike) -> ErrorClass:
    if to_status_type(status).is_server_error:
        return ErrorClass.SERVER
    return ErrorClass.CLIENT


def is_server_error(status: StatusLike) -> bool:
    return classify(status) is ErrorClass.SERVER


class StatusRegistry:
    """Maps error types to the HTTP status they should be answered with.

    Declarations are looked up for the exact type only; a subclass has to
    declare its own status, otherwise it gets the default.
    """

    def __init__(self, default: StatusLike = HTTPStatus.BAD_REQUEST) -> None:
        self._default = to_status_type(default)
        self._statuses: Dict[type, StatusType] = {}

    @property
    def default(self) -> StatusType:
        return self._default

    def register(self, error_type: type, status: StatusLike) -> None:
        self._statuses[error_type] = to_status_type(status)

    def status_for(self, error_type: type) -> StatusType:
        return self._statuses.get(error_type, self._default)

    def __contains__(self, error_type: object) -> bool:
        return error_type in self._statuses


default_registry = StatusRegistry()


def return_status(status: StatusLike, *, registry: StatusRegistry | None = None) -> Callable[[T], T]:
    """Class decorator declaring the status an error type is returned with.

    Example::

        @return_status(HTTPStatus.CONFLICT)
        class YouDidItWrongException(ApplicationWebException):
            pass
    """

    target = registry or default_registry
    resolved = to_status_type(status)

    def decorate(error_type: T) -> T:
        target.register(error_type, resolved)
        return error_type

    return decorate


def status_for(error_type: type) -> StatusType:
    return default_registry.status_for(error_type)


def title_from_name(name: str) -> str:
    if name.endswith(EXCEPTION_SUFFIX):
        name = name[: -len(EXCEPTION_SUFFIX)]
    out: list[str] = []
    for char in name:
        if out and char.isupper():
            out.append(" ")
        out.append(char.lower())
    return "".join(out)


def title_for(error_type: type) -> str | None:
    """Title derived from the type name, or ``None`` when nothing is left of it."""

    return title_from_name(error_type.__name__) or None


def type_uri_for(error_type: type, prefix: str = URN_PROBLEM_JAVA_PREFIX) -> str:
    return f"{prefix}{error_type.__module__}.{error_type.__qualname__}"


__all__ = [
    "ErrorClass",
    "StatusRegistry",
    "classify",
    "default_registry",
    "is_server_error",
    "return_status",
    "status_for",
    "title_for",
    "title_from_name",
    "type_uri_for",
]
