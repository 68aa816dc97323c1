from __future__ import annotations

"""Read problem details out of HTTP responses received from other services."""

import logging
from typing import Any, Protocol

import requests

from .classify import ErrorClass, classify
from .detail import APPLICATION_PROBLEM_XML, ProblemDetail, ProblemDetailFormatError
from .exceptions import ApplicationWebException, ProblemResponse, WebException
from .status import StatusType
from .xml_codec import from_xml, is_xml_media_type

_logger = logging.getLogger(__name__)


class ResponseLike(Protocol):
    status_code: int
    text: str
    headers: Any


def _content_type(response: ResponseLike) -> str:
    headers = getattr(response, "headers", None) or {}
    return headers.get("Content-Type") or headers.get("content-type") or ""


def problem_detail_from_response(response: ResponseLike | requests.Response) -> ProblemDetail | None:
    """Parse the body of ``response`` as a problem detail.

    Returns ``None`` when the body is empty or not shaped like a problem
    detail; callers inspecting arbitrary responses never see a parse error.
    """

    body = response.text or ""
    if not body.strip():
        return None
    content_type = _content_type(response)
    try:
        if is_xml_media_type(content_type):
            return from_xml(body)
        return ProblemDetail.from_json(body)
    except ProblemDetailFormatError as exc:
        _logger.debug(
            "response body is not a problem detail (status=%s, content_type=%s): %s",
            response.status_code,
            content_type,
            exc,
        )
        return None


def raise_for_problem(response: ResponseLike | requests.Response) -> None:
    """Raise the matching :class:`WebException` for an error response.

    Successful responses pass silently. When the body carries no problem
    detail, a minimal one with the response status and reason phrase is used.
    """

    if response.status_code < 400:
        return
    status = StatusType.from_code(response.status_code)
    detail = problem_detail_from_response(response)
    if detail is None:
        detail = ProblemDetail(status=status, title=status.reason or None)
    problem = ProblemResponse(status=status, entity=detail)
    if is_xml_media_type(_content_type(response)):
        problem = problem.with_media_type(APPLICATION_PROBLEM_XML)
    if classify(status) is ErrorClass.SERVER:
        raise WebException(response=problem)
    raise ApplicationWebException(response=problem)


__all__ = ["problem_detail_from_response", "raise_for_problem"]
