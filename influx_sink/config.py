"""
Runtime settings for the sink, read from the environment.

Env vars:
- SERVICE_NAME (default "influx-sink")
- ENVIRONMENT / ENV
- LOG_LEVEL (default "INFO")
- APP_VERSION, GIT_SHA / COMMIT_SHA
- INFLUX_TAG_SKIP_WARNINGS (default true): log one warning per skipped tag
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping, Optional

from influx_sink.diagnostics import LoggingDiagnosticSink
from influx_sink.structured_logging import init_structured_logging


_TRUE = {"1", "true", "yes", "y", "on"}
_FALSE = {"0", "false", "no", "n", "off"}

_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


def _bool_env(env: Mapping[str, str], name: str, default: bool) -> bool:
    v = env.get(name)
    if v is None or not str(v).strip():
        return default
    s = str(v).strip().lower()
    if s in _TRUE:
        return True
    if s in _FALSE:
        return False
    raise ValueError(f"Invalid boolean for {name}: {v!r}")


def _str_env(env: Mapping[str, str], *names: str, default: str) -> str:
    for name in names:
        v = env.get(name)
        if v is not None and str(v).strip():
            return str(v).strip()
    return default


@dataclass(frozen=True, slots=True)
class Settings:
    service: str = "influx-sink"
    env: str = "unknown"
    log_level: str = "INFO"
    version: str = "unknown"
    sha: str = "unknown"
    tag_skip_warnings: bool = True

    @staticmethod
    def from_env(environ: Optional[Mapping[str, str]] = None) -> "Settings":
        env = os.environ if environ is None else environ
        level = _str_env(env, "LOG_LEVEL", default="INFO").upper()
        if level == "WARN":
            level = "WARNING"
        if level not in _LOG_LEVELS:
            raise ValueError(f"Invalid LOG_LEVEL: {level!r}")
        return Settings(
            service=_str_env(env, "SERVICE_NAME", default="influx-sink"),
            env=_str_env(env, "ENVIRONMENT", "ENV", default="unknown"),
            log_level=level,
            version=_str_env(env, "APP_VERSION", "VERSION", default="unknown"),
            sha=_str_env(env, "GIT_SHA", "COMMIT_SHA", default="unknown"),
            tag_skip_warnings=_bool_env(env, "INFLUX_TAG_SKIP_WARNINGS", True),
        )


def configure_logging(settings: Settings) -> None:
    init_structured_logging(
        service=settings.service,
        env=settings.env,
        version=settings.version,
        sha=settings.sha,
        level=settings.log_level,
    )


def build_diagnostic_sink(settings: Settings) -> LoggingDiagnosticSink:
    return LoggingDiagnosticSink(enabled=settings.tag_skip_warnings)


__all__ = ["Settings", "configure_logging", "build_diagnostic_sink"]
