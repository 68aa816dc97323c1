from __future__ import annotations

import os
from http import HTTPStatus

import pytest

from webProblem.config import ENV_PREFIX
from webProblem.detail import ProblemDetail


@pytest.fixture(autouse=True)
def _clean_settings_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep developer ``WEBPROBLEM_*`` variables out of the tests."""

    for key in list(os.environ):
        if key.startswith(ENV_PREFIX):
            monkeypatch.delenv(key, raising=False)


@pytest.fixture()
def full_detail() -> ProblemDetail:
    return ProblemDetail(
        type="urn:problem:foo-type",
        title="foo-title",
        status=HTTPStatus.CONFLICT,
        detail="foo-detail",
        instance="foo-instance",
    )


@pytest.fixture()
def nested_detail() -> ProblemDetail:
    root_cause = ProblemDetail(title="root-cause", instance="root-instance")
    cause = ProblemDetail(
        title="cause-title",
        status=502,
        instance="cause-instance",
        cause=root_cause,
    )
    return ProblemDetail(
        type="urn:problem:outer-type",
        status=500,
        detail="outer-detail",
        instance="outer-instance",
        cause=cause,
    )
