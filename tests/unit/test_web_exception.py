from __future__ import annotations

import json
from http import HTTPStatus

import pytest

from webProblem.classify import ErrorClass, return_status
from webProblem.detail import APPLICATION_PROBLEM_JSON, APPLICATION_PROBLEM_XML, ProblemDetail
from webProblem.exceptions import (
    ApplicationWebException,
    ProblemResponse,
    WebException,
    WebExceptionBuilder,
    bad_gateway,
    bad_request,
    builder_for,
    not_found,
)
from webProblem.status import StatusType
from webProblem.xml_codec import XML_DECLARATION


@return_status(HTTPStatus.FORBIDDEN)
class YouDidItWrongException(ApplicationWebException):
    def __init__(self, message: str) -> None:
        super().__init__(message)


class PlainException(ApplicationWebException):
    pass


def _instance(exc: WebException) -> str:
    return exc.problem_detail.instance


def test_simple_bad_request() -> None:
    exc = bad_request("foo")

    assert isinstance(exc, ApplicationWebException)
    assert str(exc) == f"status: 400\ndetail: foo\ninstance: {_instance(exc)}\n"
    assert exc.status == StatusType(400, "Bad Request")
    assert exc.response.media_type == APPLICATION_PROBLEM_JSON
    assert exc.error_class is ErrorClass.CLIENT
    assert exc.rollback is False


def test_full_builder() -> None:
    cause = ValueError("foo")
    exc = (
        builder_for(HTTPStatus.CONFLICT)
        .type("urn:problem:failed.status.check")
        .title("failed status check")
        .detail("foo is not allowed when bar")
        .caused_by(cause)
        .build()
    )

    assert isinstance(exc, ApplicationWebException)
    assert str(exc) == (
        "type: urn:problem:failed.status.check\n"
        "title: failed status check\n"
        "status: 409\n"
        "detail: foo is not allowed when bar\n"
        f"instance: {_instance(exc)}\n"
    )
    assert exc.status_code == 409
    assert exc.response.media_type == APPLICATION_PROBLEM_JSON
    assert exc.__cause__ is cause
    assert exc.problem_detail.cause is None


def test_from_sub_exception() -> None:
    message = "Next time, you'll do better"
    exc = YouDidItWrongException(message)

    assert isinstance(exc, ApplicationWebException)
    assert str(exc) == (
        f"type: urn:problem:java:{YouDidItWrongException.__module__}.YouDidItWrongException\n"
        "title: you did it wrong\n"
        "status: 403\n"
        f"detail: {message}\n"
        f"instance: {_instance(exc)}\n"
    )
    assert exc.status == StatusType(403, "Forbidden")


def test_sub_exception_without_declared_status() -> None:
    exc = PlainException()
    assert exc.status_code == 400
    assert exc.problem_detail.title == "plain"
    assert exc.problem_detail.detail is None


@pytest.mark.parametrize(
    "factory, code",
    [(bad_request, 400), (not_found, 404), (bad_gateway, 502)],
)
def test_convenience_constructors(factory, code: int) -> None:
    exc = factory("details")
    assert exc.status_code == code
    assert exc.problem_detail.status == code
    assert exc.problem_detail.detail == "details"
    assert exc.problem_detail.type is None
    assert exc.problem_detail.title is None


def test_server_errors_are_not_application_exceptions() -> None:
    exc = bad_gateway("upstream down")
    assert type(exc) is WebException
    assert exc.is_server_error
    assert exc.error_class is ErrorClass.SERVER
    assert exc.rollback is True

    internal = builder_for(500).detail("boom").build()
    assert type(internal) is WebException


def test_conflict_is_client_classified() -> None:
    builder = builder_for(HTTPStatus.CONFLICT)
    assert not builder.is_server_error
    assert not builder.build().is_server_error


def test_wrapping_problem_detail_as_cause() -> None:
    cause = ProblemDetail(title="cause-title", instance="cause-instance")
    exc = builder_for(502).detail("upstream failed").caused_by(cause).build()

    assert exc.problem_detail.cause == cause
    assert exc.__cause__ is None
    assert str(exc).endswith("cause:\n  title: cause-title\n  instance: cause-instance\n")


def test_wrapping_web_exception_keeps_its_problem_detail() -> None:
    inner = not_found("no such customer")
    outer = builder_for(HTTPStatus.BAD_GATEWAY).caused_by(inner).build()

    assert outer.__cause__ is inner
    assert outer.problem_detail.cause == inner.problem_detail


def test_each_build_gets_a_new_instance() -> None:
    builder = builder_for(HTTPStatus.CONFLICT).detail("again")
    assert builder.build_entity().instance != builder.build_entity().instance


def test_explicit_instance_is_kept() -> None:
    exc = builder_for(409).instance("urn:example:occurrence:1").build()
    assert exc.problem_detail.instance == "urn:example:occurrence:1"


def test_from_type_derives_fields() -> None:
    entity = WebExceptionBuilder.from_type(YouDidItWrongException).build_entity()
    assert entity.status == 403
    assert entity.title == "you did it wrong"
    assert entity.type.endswith(".YouDidItWrongException")


def test_from_type_without_title_leaves_it_out() -> None:
    bare = type("Exception", (ApplicationWebException,), {})
    entity = WebExceptionBuilder.from_type(bare).build_entity()
    assert entity.title is None
    assert entity.status == 400
    assert "title" not in entity.to_dict()


def test_builder_rejects_missing_values() -> None:
    builder = builder_for(400)
    with pytest.raises(TypeError):
        builder.title(None)  # type: ignore[arg-type]
    with pytest.raises(TypeError):
        builder.detail(None)  # type: ignore[arg-type]
    with pytest.raises(TypeError):
        builder.caused_by("not an exception")  # type: ignore[arg-type]


def test_exception_can_be_raised_and_caught() -> None:
    with pytest.raises(WebException) as info:
        raise not_found("gone")
    assert info.value.status_code == 404


def test_problem_response_send() -> None:
    response = bad_request("foo").response
    sent: list[tuple[int, str, str]] = []

    def sender(status: int, media_type: str, body: str) -> str:
        sent.append((status, media_type, body))
        return "sent"

    assert response.send(sender) == "sent"
    status, media_type, body = sent[0]
    assert status == 400
    assert media_type == APPLICATION_PROBLEM_JSON
    assert json.loads(body) == {"status": 400, "detail": "foo", "instance": response.entity.instance}


def test_problem_response_xml_body() -> None:
    response = ProblemResponse(status=StatusType.from_code(404), entity=ProblemDetail(status=404, instance="i"))
    xml_response = response.with_media_type(APPLICATION_PROBLEM_XML)
    assert response.media_type == APPLICATION_PROBLEM_JSON
    assert xml_response.body().startswith(XML_DECLARATION + "<problemDetail>")
    assert xml_response.status_code == 404
