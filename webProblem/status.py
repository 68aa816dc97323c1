from __future__ import annotations

"""Semantic HTTP status values used by problem details."""

from dataclasses import dataclass
from enum import Enum
from http import HTTPStatus
from typing import Union


class StatusFamily(str, Enum):
    """The class of an HTTP status code, taken from its first digit."""

    INFORMATIONAL = "informational"
    SUCCESSFUL = "successful"
    REDIRECTION = "redirection"
    CLIENT_ERROR = "client_error"
    SERVER_ERROR = "server_error"
    OTHER = "other"

    @classmethod
    def family_of(cls, code: int) -> "StatusFamily":
        return _FAMILIES.get(int(code) // 100, cls.OTHER)


_FAMILIES = {
    1: StatusFamily.INFORMATIONAL,
    2: StatusFamily.SUCCESSFUL,
    3: StatusFamily.REDIRECTION,
    4: StatusFamily.CLIENT_ERROR,
    5: StatusFamily.SERVER_ERROR,
}


@dataclass(frozen=True, slots=True)
class StatusType:
    """An HTTP status code together with its reason phrase and family."""

    code: int
    reason: str = ""

    @property
    def family(self) -> StatusFamily:
        return StatusFamily.family_of(self.code)

    @property
    def is_server_error(self) -> bool:
        return self.family is StatusFamily.SERVER_ERROR

    @classmethod
    def from_code(cls, code: int) -> "StatusType":
        try:
            reason = HTTPStatus(int(code)).phrase
        except ValueError:
            reason = ""
        return cls(code=int(code), reason=reason)

    def __int__(self) -> int:
        return self.code

    def __str__(self) -> str:
        return f"{self.code} {self.reason}".rstrip()


StatusLike = Union[int, HTTPStatus, StatusType]


def to_status_type(status: StatusLike) -> StatusType:
    """Normalise an ``int``, ``HTTPStatus`` or ``StatusType`` into a ``StatusType``."""

    if isinstance(status, StatusType):
        return status
    if isinstance(status, bool) or not isinstance(status, int):
        raise TypeError(f"not an HTTP status: {status!r}")
    if isinstance(status, HTTPStatus):
        return StatusType(code=status.value, reason=status.phrase)
    if not 100 <= status <= 999:
        raise ValueError(f"HTTP status code out of range: {status}")
    return StatusType.from_code(status)


__all__ = ["StatusFamily", "StatusLike", "StatusType", "to_status_type"]
