from __future__ import annotations

"""Problem detail entity shared by the exception builder, the codecs and the API handlers.

A problem detail carries machine-readable details of an error in an HTTP
response body, so HTTP APIs don't have to invent their own error formats.
See https://tools.ietf.org/html/draft-ietf-appsawg-http-problem-01.
"""

import uuid
from http import HTTPStatus
from typing import Any, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from .status import StatusType, to_status_type

APPLICATION_PROBLEM_TYPE_PREFIX = "application/problem"
APPLICATION_PROBLEM_JSON = APPLICATION_PROBLEM_TYPE_PREFIX + "+json"
APPLICATION_PROBLEM_XML = APPLICATION_PROBLEM_TYPE_PREFIX + "+xml"

URN_PROBLEM_PREFIX = "urn:problem:"
URN_PROBLEM_JAVA_PREFIX = URN_PROBLEM_PREFIX + "java:"
URN_PROBLEM_INSTANCE_PREFIX = "urn:problem-instance:"

FIELD_ORDER = ("type", "title", "status", "detail", "instance", "cause")

# Longest cause chain accepted; keeps both codecs inside their nesting limits.
MAX_CAUSE_DEPTH = 100


class ProblemDetailFormatError(ValueError):
    """Raised when a serialized problem detail cannot be parsed."""


def new_instance_uri() -> str:
    return f"{URN_PROBLEM_INSTANCE_PREFIX}{uuid.uuid4()}"


class ProblemDetail(BaseModel):
    """One occurrence of a problem, optionally caused by another one.

    ``type`` identifies the problem type, ``title`` summarises it, ``status``
    is the HTTP status code of this occurrence, ``detail`` explains this
    occurrence and ``instance`` identifies it. ``instance`` defaults to a
    fresh ``urn:problem-instance:<uuid>`` for every detail built without one.
    """

    model_config = ConfigDict(frozen=True)

    type: Optional[str] = None
    title: Optional[str] = None
    status: Optional[int] = None
    detail: Optional[str] = None
    instance: str = Field(default_factory=new_instance_uri)
    cause: Optional["ProblemDetail"] = None

    @field_validator("status", mode="before")
    @classmethod
    def _status_code(cls, value: Any) -> Any:
        if isinstance(value, (StatusType, HTTPStatus)):
            return to_status_type(value).code
        return value

    @field_validator("instance", mode="before")
    @classmethod
    def _default_instance(cls, value: Any) -> Any:
        if value is None:
            return new_instance_uri()
        return value

    @model_validator(mode="after")
    def _bounded_cause_chain(self) -> "ProblemDetail":
        if self.cause_depth > MAX_CAUSE_DEPTH:
            raise ValueError(f"cause chain deeper than {MAX_CAUSE_DEPTH} levels")
        return self

    @property
    def cause_depth(self) -> int:
        """Number of causes nested below this detail."""

        depth = 0
        node = self.cause
        while node is not None:
            depth += 1
            node = node.cause
        return depth

    @property
    def status_type(self) -> StatusType | None:
        if self.status is None:
            return None
        return StatusType.from_code(self.status)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ProblemDetail":
        try:
            return cls.model_validate(data)
        except ValidationError as exc:
            raise ProblemDetailFormatError(f"invalid problem detail: {exc}") from exc

    @classmethod
    def from_json(cls, text: str | bytes) -> "ProblemDetail":
        try:
            return cls.model_validate_json(text)
        except ValidationError as exc:
            raise ProblemDetailFormatError(f"invalid problem detail json: {exc}") from exc

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump(exclude_none=True)

    def to_json(self) -> str:
        return self.model_dump_json(exclude_none=True)

    def equals_ignoring_instance(self, other: "ProblemDetail") -> bool:
        if not isinstance(other, ProblemDetail):
            return False
        if (self.type, self.title, self.status, self.detail) != (
            other.type,
            other.title,
            other.status,
            other.detail,
        ):
            return False
        if self.cause is None or other.cause is None:
            return self.cause is None and other.cause is None
        return self.cause.equals_ignoring_instance(other.cause)

    def render(self, indent: str = "") -> str:
        lines = []
        for name in FIELD_ORDER[:-1]:
            value = getattr(self, name)
            if value is not None:
                lines.append(f"{indent}{name}: {value}\n")
        if self.cause is not None:
            lines.append(f"{indent}cause:\n")
            lines.append(self.cause.render(indent + "  "))
        return "".join(lines)

    def __str__(self) -> str:
        return self.render()


__all__ = [
    "APPLICATION_PROBLEM_JSON",
    "APPLICATION_PROBLEM_TYPE_PREFIX",
    "APPLICATION_PROBLEM_XML",
    "FIELD_ORDER",
    "MAX_CAUSE_DEPTH",
    "ProblemDetail",
    "ProblemDetailFormatError",
    "URN_PROBLEM_INSTANCE_PREFIX",
    "URN_PROBLEM_JAVA_PREFIX",
    "URN_PROBLEM_PREFIX",
    "new_instance_uri",
]
