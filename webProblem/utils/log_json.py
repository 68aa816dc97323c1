from __future__ import annotations

"""One JSON log line per problem answered.

A line keeps the identity of the problem (``type``, ``title``, ``status``,
``instance`` and the types of its causes) exactly as it went out in the
response body, so it can be matched with what the client saw. Only free text
(the ``detail`` and any request context) is scrubbed and capped in size.
"""

import json
import logging
import random
import re
from datetime import datetime, timezone
from typing import Any, Mapping

from ..classify import is_server_error
from ..detail import ProblemDetail

EMAIL_RE = re.compile(r"[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}")
BEARER_RE = re.compile(r"\bbearer\s+[A-Za-z0-9\-._~+/]+=*", re.IGNORECASE)
URL_QUERY_RE = re.compile(r"(https?://[^\s?#]+)[?#]\S*")
GUID_RE = re.compile(r"\b[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{12}\b")

PROBLEM_EVENT = "problem"
IDENTITY_FIELDS = ("type", "title", "status", "instance", "cause_types", "route", "method")

_LEVEL_MAP = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
}


def scrub(text: str) -> str:
    """Drop e-mail addresses, bearer credentials, GUIDs and URL query strings."""

    text = EMAIL_RE.sub("[email]", text)
    text = BEARER_RE.sub("bearer [redacted]", text)
    text = GUID_RE.sub("[guid]", text)
    return URL_QUERY_RE.sub(r"\1", text)


def _scrub_context(value: Any) -> Any:
    if isinstance(value, Mapping):
        return {str(k): _scrub_context(v) for k, v in value.items() if v is not None}
    if isinstance(value, (list, tuple)):
        return [_scrub_context(v) for v in value]
    if value is None or isinstance(value, (bool, int, float)):
        return value
    return scrub(str(value))


def _cap(details: dict[str, Any], max_bytes: int) -> dict[str, Any]:
    if max_bytes <= 0:
        return details
    blob = json.dumps(details, ensure_ascii=False, sort_keys=True, separators=(",", ":")).encode("utf-8")
    if len(blob) <= max_bytes:
        return details
    return {"truncated": True, "preview": blob[:max_bytes].decode("utf-8", errors="ignore")}


class JsonLogger:
    """Writes problem events as single-line JSON through :mod:`logging`."""

    def __init__(
        self,
        service: str,
        *,
        logger: logging.Logger | None = None,
        max_details_bytes: int = 4096,
        sample_rate: float = 1.0,
    ) -> None:
        self._service = service
        self._logger = logger or logging.getLogger(f"webproblem.{service}.problems")
        if not self._logger.handlers:
            handler = logging.StreamHandler()
            handler.setFormatter(logging.Formatter("%(message)s"))
            self._logger.addHandler(handler)
            self._logger.propagate = False
        if self._logger.level == logging.NOTSET:
            self._logger.setLevel(logging.INFO)
        self._max_details_bytes = max(0, int(max_details_bytes))
        self._sample_rate = max(0.0, min(1.0, float(sample_rate)))

    def should_sample(self) -> bool:
        if self._sample_rate >= 1.0:
            return True
        return random.random() <= self._sample_rate

    def problem(
        self,
        problem: ProblemDetail,
        *,
        status: int | None = None,
        route: str | None = None,
        method: str | None = None,
        **context: Any,
    ) -> dict[str, Any] | None:
        """Log ``problem``: ERROR for server errors, WARNING otherwise.

        ``status`` defaults to the problem's own status; ``context`` ends up
        scrubbed under ``details`` next to the problem's ``detail`` text.
        """

        status = problem.status if status is None else status
        level = "ERROR" if status is not None and is_server_error(status) else "WARNING"
        causes = []
        cause = problem.cause
        while cause is not None:
            causes.append(cause.type or cause.title or cause.instance)
            cause = cause.cause
        return self.emit(
            level,
            PROBLEM_EVENT,
            type=problem.type,
            title=problem.title,
            status=status,
            instance=problem.instance,
            cause_types=causes or None,
            route=route,
            method=method,
            details={"detail": problem.detail, **context},
        )

    def emit(
        self,
        level: str,
        event: str,
        *,
        details: Mapping[str, Any] | None = None,
        **fields: Any,
    ) -> dict[str, Any] | None:
        """Write one entry; identity ``fields`` verbatim, ``details`` scrubbed."""

        if not self.should_sample():
            return None
        level = level.upper()
        entry: dict[str, Any] = {
            "ts": datetime.now(timezone.utc).isoformat(),
            "level": level,
            "service": self._service,
            "event": event,
        }
        unknown = {k: v for k, v in fields.items() if k not in IDENTITY_FIELDS}
        for key in IDENTITY_FIELDS:
            if fields.get(key) is not None:
                entry[key] = fields[key]
        scrubbed = _scrub_context({**(details or {}), **unknown})
        if scrubbed:
            entry["details"] = _cap(scrubbed, self._max_details_bytes)
        payload = json.dumps(entry, ensure_ascii=False, sort_keys=True, separators=(",", ":"))
        self._logger.log(_LEVEL_MAP.get(level, logging.INFO), payload)
        return entry


__all__ = ["JsonLogger", "PROBLEM_EVENT", "scrub"]
