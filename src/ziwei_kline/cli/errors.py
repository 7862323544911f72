"""Errors raised by ``ziwei-kline`` commands and their exit statuses.

Every failure a command reports falls into one category. The category
fixes the process exit status so scripts can tell a malformed chart from
a missing file without parsing the message.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Mapping, Optional

__all__ = [
    "EXIT_STATUS",
    "CliError",
    "ErrorPayload",
    "build_error_payload",
    "log_cli_error",
]

logger = logging.getLogger("ziwei_kline.cli")


EXIT_STATUS: Mapping[str, int] = {
    "runtime": 1,
    "usage": 2,
    "io": 3,
    "not_found": 4,
    "validation": 5,
}


@dataclass(frozen=True, slots=True)
class ErrorPayload:
    """What a failed command reports on stdout and in the ``cli.error`` log record."""

    category: str
    message: str
    context: Mapping[str, Any] = field(default_factory=dict)

    @property
    def status_code(self) -> int:
        return EXIT_STATUS[self.category]

    def as_dict(self) -> Mapping[str, Any]:
        return {
            "status_code": self.status_code,
            "category": self.category,
            "message": self.message,
            "context": dict(self.context),
        }


def _loggable(value: Any) -> Any:
    # chart paths, suffixes and validation details all end up as JSON log fields
    if value is None or isinstance(value, (str, int, float, bool)):
        return value
    return str(value)


def build_error_payload(
    message: str,
    *,
    category: str = "runtime",
    context: Optional[Mapping[str, Any]] = None,
) -> ErrorPayload:
    """Return the payload for ``message``; unknown categories are rejected."""

    if category not in EXIT_STATUS:
        raise ValueError(
            f"Unknown CLI error category '{category}'. "
            f"Expected one of: {', '.join(EXIT_STATUS)}"
        )
    details = {key: _loggable(value) for key, value in (context or {}).items()}
    return ErrorPayload(category=category, message=message, context=details)


def log_cli_error(payload: ErrorPayload, *, exc_info: Optional[BaseException] = None) -> None:
    logger.error(
        payload.message,
        extra={
            "event": "cli.error",
            "category": payload.category,
            "status_code": payload.status_code,
            "context": dict(payload.context),
        },
        exc_info=exc_info,
    )


class CliError(RuntimeError):
    """A command failure that maps to one of the :data:`EXIT_STATUS` categories."""

    def __init__(
        self,
        message: str,
        *,
        category: str = "runtime",
        context: Optional[Mapping[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.payload = build_error_payload(message, category=category, context=context)
        self.logged = False

    @property
    def category(self) -> str:
        return self.payload.category

    @property
    def status_code(self) -> int:
        return self.payload.status_code

    @property
    def context(self) -> Mapping[str, Any]:
        return self.payload.context
