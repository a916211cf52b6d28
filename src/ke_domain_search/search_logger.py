"""
Structured logger for the domain search pipeline.

Every component writes through one SearchLogger so a search can be
followed end to end. Lines are JSON objects, readable text, or both.
Values under credential-like keys are replaced before anything is
written or retained.
"""

import json
import sys
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Optional, TextIO

from .enums import LogLevel


_SEVERITY = {
    LogLevel.DEBUG: 10,
    LogLevel.INFO: 20,
    LogLevel.WARN: 30,
    LogLevel.ERROR: 40,
}

_FORMATS = ("json", "text", "both")

DEFAULT_MAX_ENTRIES = 1000


@dataclass
class LogEntry:
    """One emitted log line before formatting."""

    timestamp: str
    level: LogLevel
    component: str
    message: str
    data: dict = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "timestamp": self.timestamp,
            "level": self.level.value,
            "component": self.component,
            "message": self.message,
            "data": self.data,
        }


def _is_sensitive(key: Any, patterns: frozenset) -> bool:
    lowered = str(key).lower()
    return any(pattern in lowered for pattern in patterns)


class SearchLogger:
    """
    Level-filtered logger for search components.

    Entries that pass the level filter are written to the stream. The
    most recent `max_entries` of them are kept in memory and exposed
    through `entries`; older ones are dropped.
    """

    SENSITIVE_KEYS = frozenset({
        'token', 'secret', 'password', 'api_key', 'auth', 'authorization',
        'credential', 'credentials', 'access_token', 'refresh_token',
        'session_token', 'cookie',
    })

    MASK_VALUE = "***MASKED***"

    def __init__(
        self,
        output_format: str = "text",
        output_stream: Optional[TextIO] = None,
        level: LogLevel = LogLevel.INFO,
        max_entries: int = DEFAULT_MAX_ENTRIES,
    ):
        """
        Args:
            output_format: One of 'json', 'text' or 'both'
            output_stream: Where lines are written; stderr when omitted
            level: Lowest severity that is written
            max_entries: How many recent entries to keep in memory
        """
        if output_format not in _FORMATS:
            raise ValueError(
                f"output_format must be one of {', '.join(_FORMATS)}, got {output_format!r}"
            )
        if max_entries < 0:
            raise ValueError(f"max_entries must be non-negative, got {max_entries}")

        self._format = output_format
        self._stream = output_stream if output_stream is not None else sys.stderr
        self._level = level
        self._retained: deque[LogEntry] = deque(maxlen=max_entries)

    @classmethod
    def from_config(cls, logging_config, output_stream: Optional[TextIO] = None) -> "SearchLogger":
        """Build a logger from a LoggingConfig."""
        return cls(
            output_format=logging_config.output_format,
            output_stream=output_stream,
            level=LogLevel(logging_config.level),
        )

    @property
    def output_format(self) -> str:
        return self._format

    @property
    def level(self) -> LogLevel:
        return self._level

    @property
    def entries(self) -> list[LogEntry]:
        return list(self._retained)

    def is_enabled_for(self, level: LogLevel) -> bool:
        return _SEVERITY[level] >= _SEVERITY[self._level]

    def log(
        self,
        level: LogLevel,
        component: str,
        message: str,
        data: Optional[dict] = None,
    ) -> Optional[LogEntry]:
        """
        Write a single entry.

        Returns the entry that was written, or None when `level` is
        below the logger's threshold.
        """
        if not self.is_enabled_for(level):
            return None

        entry = LogEntry(
            timestamp=datetime.now(timezone.utc).isoformat(),
            level=level,
            component=component,
            message=message,
            data=self.mask_sensitive_data(data or {}),
        )
        self._retained.append(entry)
        self._write(entry)
        return entry

    def debug(self, component: str, message: str, data: Optional[dict] = None) -> Optional[LogEntry]:
        return self.log(LogLevel.DEBUG, component, message, data)

    def info(self, component: str, message: str, data: Optional[dict] = None) -> Optional[LogEntry]:
        return self.log(LogLevel.INFO, component, message, data)

    def warn(self, component: str, message: str, data: Optional[dict] = None) -> Optional[LogEntry]:
        return self.log(LogLevel.WARN, component, message, data)

    def log_error(
        self,
        component: str,
        message: str,
        error: Optional[Exception] = None,
        request_url: Optional[str] = None,
        response_status_code: Optional[int] = None,
        additional_data: Optional[dict] = None,
        level: LogLevel = LogLevel.ERROR,
    ) -> Optional[LogEntry]:
        """
        Write a failure together with what is known about its cause.

        The exception's text, class name and `code` attribute (when it
        has one) are added to the entry's data, as are the request URL
        and HTTP status when given. Failures that the pipeline absorbs
        are passed in with `level=LogLevel.WARN`.
        """
        context = dict(additional_data or {})

        if error is not None:
            context["error_message"] = str(error)
            context["error_type"] = type(error).__name__
            error_code = getattr(error, "code", None)
            if error_code is not None:
                context["error_code"] = error_code

        if request_url is not None:
            context["request_url"] = request_url
        if response_status_code is not None:
            context["response_status_code"] = response_status_code

        return self.log(level, component, message, context)

    def mask_sensitive_data(self, data: dict) -> dict:
        """Return a copy of `data` with credential-like values replaced, at any depth."""
        if not isinstance(data, dict):
            return data
        return {key: self._mask_value(key, value) for key, value in data.items()}

    def _mask_value(self, key: Any, value: Any) -> Any:
        if _is_sensitive(key, self.SENSITIVE_KEYS):
            return self.MASK_VALUE
        if isinstance(value, dict):
            return self.mask_sensitive_data(value)
        if isinstance(value, list):
            return [self.mask_sensitive_data(item) for item in value]
        return value

    def _write(self, entry: LogEntry) -> None:
        lines = []
        if self._format != "text":
            lines.append(self.format_json(entry))
        if self._format != "json":
            lines.append(self.format_text(entry))

        for line in lines:
            self._stream.write(line + "\n")
        self._stream.flush()

    def format_json(self, entry: LogEntry) -> str:
        return json.dumps(entry.to_dict(), ensure_ascii=False, default=str)

    def format_text(self, entry: LogEntry) -> str:
        """[timestamp] LEVEL [component] message {data}"""
        line = f"[{entry.timestamp}] {entry.level.value.upper()} [{entry.component}] {entry.message}"
        if entry.data:
            line += " " + json.dumps(entry.data, ensure_ascii=False, default=str)
        return line

    def clear_entries(self) -> None:
        self._retained.clear()


def quiet_logger() -> SearchLogger:
    """Text logger on stderr that only writes errors."""
    return SearchLogger(output_format="text", level=LogLevel.ERROR)
