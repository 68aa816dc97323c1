from __future__ import annotations

"""Problem details for HTTP APIs and the exceptions that carry them."""

from importlib.metadata import PackageNotFoundError, version

from .classify import (
    ErrorClass,
    StatusRegistry,
    classify,
    return_status,
    status_for,
    title_for,
    title_from_name,
    type_uri_for,
)
from .detail import (
    APPLICATION_PROBLEM_JSON,
    APPLICATION_PROBLEM_XML,
    MAX_CAUSE_DEPTH,
    URN_PROBLEM_INSTANCE_PREFIX,
    URN_PROBLEM_JAVA_PREFIX,
    URN_PROBLEM_PREFIX,
    ProblemDetail,
    ProblemDetailFormatError,
)
from .exceptions import (
    ApplicationWebException,
    ProblemResponse,
    WebException,
    WebExceptionBuilder,
    bad_gateway,
    bad_request,
    builder_for,
    not_found,
)
from .status import StatusFamily, StatusType

try:
    __version__ = version("webProblem")
except PackageNotFoundError:  # pragma: no cover - package not installed
    __version__ = "0.1.0"

__all__ = [
    "APPLICATION_PROBLEM_JSON",
    "APPLICATION_PROBLEM_XML",
    "ApplicationWebException",
    "ErrorClass",
    "MAX_CAUSE_DEPTH",
    "ProblemDetail",
    "ProblemDetailFormatError",
    "ProblemResponse",
    "StatusFamily",
    "StatusRegistry",
    "StatusType",
    "URN_PROBLEM_INSTANCE_PREFIX",
    "URN_PROBLEM_JAVA_PREFIX",
    "URN_PROBLEM_PREFIX",
    "WebException",
    "WebExceptionBuilder",
    "__version__",
    "bad_gateway",
    "bad_request",
    "builder_for",
    "classify",
    "not_found",
    "return_status",
    "status_for",
    "title_for",
    "title_from_name",
    "type_uri_for",
]
