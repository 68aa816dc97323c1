from __future__ import annotations

"""Loader for settings of the problem detail handlers and CLI."""

import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Mapping

import yaml

from .detail import APPLICATION_PROBLEM_JSON

CONFIG_ENV = "WEBPROBLEM_CONFIG"
ENV_PREFIX = "WEBPROBLEM_"

DEFAULT_UNHANDLED_DETAIL = "An unexpected error occurred"


@dataclass(slots=True)
class ProblemSettings:
    """Runtime toggles for problem responses and their logging."""

    default_media_type: str = APPLICATION_PROBLEM_JSON
    catch_unhandled: bool = True
    unhandled_detail: str = DEFAULT_UNHANDLED_DETAIL
    logging_enabled: bool = True
    log_sample_rate: float = 1.0
    log_max_details_bytes: int = 4096

    @classmethod
    def from_env(cls, base: "ProblemSettings | None" = None) -> "ProblemSettings":
        """Overlay ``WEBPROBLEM_*`` environment variables on ``base``."""

        settings = base or ProblemSettings()
        overrides: dict[str, Any] = {}
        media_type = os.getenv(ENV_PREFIX + "MEDIA_TYPE")
        if media_type:
            overrides["default_media_type"] = media_type
        detail = os.getenv(ENV_PREFIX + "UNHANDLED_DETAIL")
        if detail:
            overrides["unhandled_detail"] = detail
        for key, attr in (("CATCH_UNHANDLED", "catch_unhandled"), ("LOGGING", "logging_enabled")):
            raw = os.getenv(ENV_PREFIX + key)
            if raw is not None:
                overrides[attr] = _coerce_bool(raw, getattr(settings, attr))
        sample_rate = os.getenv(ENV_PREFIX + "LOG_SAMPLE_RATE")
        if sample_rate is not None:
            overrides["log_sample_rate"] = _clamp_rate(_coerce_float(sample_rate, settings.log_sample_rate))
        max_details = os.getenv(ENV_PREFIX + "LOG_MAX_DETAILS_BYTES")
        if max_details is not None:
            overrides["log_max_details_bytes"] = max(0, _coerce_int(max_details, settings.log_max_details_bytes))
        return replace(settings, **overrides)


def _coerce_bool(value: Any, default: bool) -> bool:
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in {"1", "true", "yes", "on"}:
        return True
    if text in {"0", "false", "no", "off"}:
        return False
    return default


def _coerce_float(value: Any, default: float) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


def _coerce_int(value: Any, default: int) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def _clamp_rate(value: float) -> float:
    return max(0.0, min(1.0, value))


def _from_mapping(raw: Mapping[str, Any]) -> ProblemSettings:
    defaults = ProblemSettings()
    responses = raw.get("responses") or {}
    logging_cfg = raw.get("logging") or {}
    return ProblemSettings(
        default_media_type=str(responses.get("media_type") or defaults.default_media_type),
        catch_unhandled=_coerce_bool(responses.get("catch_unhandled", True), True),
        unhandled_detail=str(responses.get("unhandled_detail") or defaults.unhandled_detail),
        logging_enabled=_coerce_bool(logging_cfg.get("enabled", True), True),
        log_sample_rate=_clamp_rate(_coerce_float(logging_cfg.get("sample_rate"), 1.0)),
        log_max_details_bytes=max(0, _coerce_int(logging_cfg.get("max_details_bytes"), 4096)),
    )


def load_settings(path: Path | None = None) -> ProblemSettings:
    """Load settings from YAML, then apply environment overrides.

    The file is taken from ``path`` or the ``WEBPROBLEM_CONFIG`` variable; a
    missing file yields the defaults. Expected layout::

        responses:
          media_type: application/problem+json
          catch_unhandled: true
          unhandled_detail: An unexpected error occurred
        logging:
          enabled: true
          sample_rate: 1.0
          max_details_bytes: 4096
    """

    if path is None:
        env = os.getenv(CONFIG_ENV)
        path = Path(env) if env else None
    settings = ProblemSettings()
    if path is not None and path.exists():
        raw = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
        if isinstance(raw, Mapping):
            settings = _from_mapping(raw)
    return ProblemSettings.from_env(settings)


__all__ = ["CONFIG_ENV", "ProblemSettings", "load_settings"]
