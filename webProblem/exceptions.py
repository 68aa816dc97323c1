from __future__ import annotations

"""Exceptions carrying a problem detail response, and the builder producing them.

Simple example::

    raise bad_request("you did it wrong")

Or using a builder::

    raise builder_for(HTTPStatus.CONFLICT).caused_by(exc).detail("you did it wrong").build()

Errors with a status below 500 are raised as :class:`ApplicationWebException`,
so a surrounding transaction manager can treat them as ordinary outcomes and
skip the rollback it applies to server errors.

Subclass to get an error type clients can refer to::

    @return_status(HTTPStatus.CONFLICT)
    class YouDidItWrongException(ApplicationWebException):
        def __init__(self) -> None:
            super().__init__("Next time, you'll do better")

which yields this problem detail::

    type: urn:problem:java:mypackage.YouDidItWrongException
    title: you did it wrong
    status: 409
    detail: Next time, you'll do better
    instance: urn:problem-instance:fb4627b2-8479-4520-a645-d9e866c1d5ef
"""

from dataclasses import dataclass, replace
from http import HTTPStatus
from typing import Any, Callable, TypeVar

from .classify import (
    ErrorClass,
    StatusRegistry,
    classify,
    default_registry,
    title_for,
    type_uri_for,
)
from .detail import APPLICATION_PROBLEM_JSON, ProblemDetail
from .status import StatusLike, StatusType, to_status_type
from .xml_codec import is_xml_media_type, to_xml

R = TypeVar("R")


@dataclass(frozen=True, slots=True)
class ProblemResponse:
    """A response carrying a problem detail as its entity."""

    status: StatusType
    entity: ProblemDetail
    media_type: str = APPLICATION_PROBLEM_JSON

    @property
    def status_code(self) -> int:
        return self.status.code

    def body(self) -> str:
        if is_xml_media_type(self.media_type):
            return to_xml(self.entity)
        return self.entity.to_json()

    def with_media_type(self, media_type: str) -> "ProblemResponse":
        return replace(self, media_type=media_type)

    def send(self, sender: Callable[[int, str, str], R]) -> R:
        return sender(self.status.code, self.media_type, self.body())


class WebException(Exception):
    """An error answered with a problem detail response.

    Raised directly for server errors; a surrounding transaction should be
    rolled back.
    """

    rollback = True

    def __init__(self, detail: str | None = None, *, response: ProblemResponse | None = None) -> None:
        if response is None:
            builder = WebExceptionBuilder.from_type(type(self))
            if detail is not None:
                builder.detail(detail)
            response = builder.build_response()
        self.response = response
        super().__init__(str(response.entity))

    @property
    def problem_detail(self) -> ProblemDetail:
        return self.response.entity

    @property
    def status(self) -> StatusType:
        return self.response.status

    @property
    def status_code(self) -> int:
        return self.response.status.code

    @property
    def error_class(self) -> ErrorClass:
        return classify(self.response.status)

    @property
    def is_server_error(self) -> bool:
        return self.error_class is ErrorClass.SERVER


class ApplicationWebException(WebException):
    """A non-server error; an ordinary outcome that needs no rollback."""

    rollback = False


class WebExceptionBuilder:
    def __init__(self, status: StatusLike) -> None:
        self._status = to_status_type(status)
        self._fields: dict[str, Any] = {"status": self._status.code}
        self._cause: BaseException | None = None

    @classmethod
    def from_type(cls, error_type: type, *, registry: StatusRegistry | None = None) -> "WebExceptionBuilder":
        status = (registry or default_registry).status_for(error_type)
        builder = cls(status).type(type_uri_for(error_type))
        title = title_for(error_type)
        if title is not None:
            builder.title(title)
        return builder

    @property
    def status(self) -> StatusType:
        return self._status

    @property
    def is_server_error(self) -> bool:
        return classify(self._status) is ErrorClass.SERVER

    def type(self, uri: str) -> "WebExceptionBuilder":
        self._fields["type"] = str(uri)
        return self

    def title(self, title: str) -> "WebExceptionBuilder":
        if title is None:
            raise TypeError("title must not be None")
        self._fields["title"] = title
        return self

    def detail(self, detail: str) -> "WebExceptionBuilder":
        if detail is None:
            raise TypeError("detail must not be None")
        self._fields["detail"] = detail
        return self

    def instance(self, uri: str) -> "WebExceptionBuilder":
        self._fields["instance"] = str(uri)
        return self

    def caused_by(self, cause: BaseException | ProblemDetail) -> "WebExceptionBuilder":
        if isinstance(cause, ProblemDetail):
            self._fields["cause"] = cause
            return self
        if not isinstance(cause, BaseException):
            raise TypeError(f"cause must be an exception or a ProblemDetail, not {cause!r}")
        self._cause = cause
        if isinstance(cause, WebException):
            self._fields["cause"] = cause.problem_detail
        return self

    def build_entity(self) -> ProblemDetail:
        return ProblemDetail(**self._fields)

    def build_response(self) -> ProblemResponse:
        return ProblemResponse(status=self._status, entity=self.build_entity())

    def build(self) -> WebException:
        response = self.build_response()
        error_type = WebException if self.is_server_error else ApplicationWebException
        error = error_type(response=response)
        if self._cause is not None:
            error.__cause__ = self._cause
        return error


def builder_for(status: StatusLike) -> WebExceptionBuilder:
    return WebExceptionBuilder(status)


def bad_request(detail: str) -> WebException:
    return builder_for(HTTPStatus.BAD_REQUEST).detail(detail).build()


def bad_gateway(detail: str) -> WebException:
    return builder_for(HTTPStatus.BAD_GATEWAY).detail(detail).build()


def not_found(detail: str) -> WebException:
    return builder_for(HTTPStatus.NOT_FOUND).detail(detail).build()


__all__ = [
    "ApplicationWebException",
    "ProblemResponse",
    "WebException",
    "WebExceptionBuilder",
    "bad_gateway",
    "bad_request",
    "builder_for",
    "not_found",
]
