from __future__ import annotations

"""FastAPI exception handlers answering errors with problem detail responses."""

from typing import Iterator

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import Response
from starlette.exceptions import HTTPException as StarletteHTTPException

from webProblem.config import ProblemSettings, load_settings
from webProblem.detail import APPLICATION_PROBLEM_JSON, APPLICATION_PROBLEM_XML, ProblemDetail
from webProblem.exceptions import ProblemResponse, WebException
from webProblem.status import StatusType
from webProblem.utils.log_json import JsonLogger

_SECURITY_HEADERS = {
    "Cache-Control": "no-store",
    "X-Content-Type-Options": "nosniff",
}


_XML_TYPES = frozenset({"application/xml", "text/xml", APPLICATION_PROBLEM_XML})
_JSON_TYPES = frozenset({"application/json", APPLICATION_PROBLEM_JSON})
_WILDCARDS = frozenset({"*/*", "application/*"})


def _accept_entries(accept: str) -> Iterator[tuple[str, float]]:
    for part in accept.split(","):
        essence, *params = part.split(";")
        essence = essence.strip().lower()
        if not essence:
            continue
        quality = 1.0
        for param in params:
            key, _, value = param.partition("=")
            if key.strip().lower() == "q":
                try:
                    quality = float(value.strip())
                except ValueError:
                    quality = 0.0
        yield essence, quality


def negotiate_media_type(request: Request, default: str) -> str:
    """Rank the ``Accept`` entries and pick the problem media type to answer with.

    XML wins only when ``application/xml``, ``text/xml`` or
    ``application/problem+xml`` is preferred over every JSON type and
    wildcard; JSON wins the same way. Otherwise ``default`` is used.
    """

    best = {"xml": 0.0, "json": 0.0, "any": 0.0}
    for essence, quality in _accept_entries(request.headers.get("accept", "")):
        if essence in _XML_TYPES:
            kind = "xml"
        elif essence in _JSON_TYPES:
            kind = "json"
        elif essence in _WILDCARDS:
            kind = "any"
        else:
            continue
        best[kind] = max(best[kind], quality)
    if best["xml"] > max(best["json"], best["any"]):
        return APPLICATION_PROBLEM_XML
    if best["json"] > max(best["xml"], best["any"]):
        return APPLICATION_PROBLEM_JSON
    return default


def _validation_summary(exc: RequestValidationError) -> str:
    """``loc: msg`` per error; the rejected input values are left out."""

    parts = []
    for error in exc.errors():
        location = ".".join(str(item) for item in error.get("loc", ()))
        parts.append(f"{location}: {error.get('msg', 'invalid value')}")
    return "; ".join(parts)


def problem_response(
    problem: ProblemResponse,
    *,
    media_type: str | None = None,
    headers: dict[str, str] | None = None,
) -> Response:
    if media_type is not None:
        problem = problem.with_media_type(media_type)
    merged = dict(_SECURITY_HEADERS)
    if headers:
        merged.update(headers)

    def send(status: int, content_type: str, body: str) -> Response:
        merged["Content-Type"] = content_type
        return Response(content=body, status_code=status, headers=merged)

    return problem.send(send)


def _log_problem(logger: JsonLogger | None, request: Request, problem: ProblemResponse, **context: object) -> None:
    if logger is None:
        return
    logger.problem(
        problem.entity,
        status=problem.status_code,
        route=request.url.path,
        method=request.method,
        **context,
    )


def install_problem_handlers(app: FastAPI, settings: ProblemSettings | None = None) -> None:
    """Register handlers turning errors raised by ``app`` into problem responses."""

    settings = settings or load_settings()
    logger: JsonLogger | None = None
    if settings.logging_enabled:
        logger = JsonLogger(
            "api",
            max_details_bytes=settings.log_max_details_bytes,
            sample_rate=settings.log_sample_rate,
        )
    app.state.problem_settings = settings

    def _respond(request: Request, problem: ProblemResponse, headers: dict[str, str] | None = None, **context: object) -> Response:
        _log_problem(logger, request, problem, **context)
        media_type = negotiate_media_type(request, settings.default_media_type)
        return problem_response(problem, media_type=media_type, headers=headers)

    @app.exception_handler(WebException)
    async def web_exception_handler(request: Request, exc: WebException) -> Response:
        return _respond(request, exc.response, rollback=exc.rollback)

    @app.exception_handler(RequestValidationError)
    async def validation_handler(request: Request, exc: RequestValidationError) -> Response:
        status = StatusType.from_code(422)
        problem = ProblemResponse(
            status=status,
            entity=ProblemDetail(title=status.reason, status=status, detail=_validation_summary(exc) or None),
        )
        return _respond(request, problem)

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException) -> Response:
        status = StatusType.from_code(exc.status_code)
        problem = ProblemResponse(
            status=status,
            entity=ProblemDetail(
                title=status.reason or None,
                status=status,
                detail=exc.detail if isinstance(exc.detail, str) else None,
            ),
        )
        return _respond(request, problem, headers=dict(exc.headers or {}))

    if settings.catch_unhandled:

        @app.exception_handler(Exception)
        async def unhandled_handler(request: Request, exc: Exception) -> Response:
            status = StatusType.from_code(500)
            problem = ProblemResponse(
                status=status,
                entity=ProblemDetail(title=status.reason, status=status, detail=settings.unhandled_detail),
            )
            return _respond(request, problem, error=type(exc).__name__)


__all__ = ["install_problem_handlers", "negotiate_media_type", "problem_response"]
