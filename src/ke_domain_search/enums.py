"""
Enumeration types for the domain search pipeline.

These enums provide type-safe constants for availability, pricing
provenance, search states and error codes.
"""

from enum import Enum


class AvailabilityStatus(Enum):
    """Availability of a single domain."""

    AVAILABLE = "available"
    TAKEN = "taken"
    UNKNOWN = "unknown"


class PricingSource(Enum):
    """Where a price table came from."""

    LIVE = "live"
    ESTIMATED = "estimated"


class SearchState(Enum):
    """States of the search orchestrator."""

    IDLE = "idle"
    DEBOUNCING = "debouncing"
    SEARCHING = "searching"
    RESOLVED = "resolved"
    ERRORED = "errored"


class OperationState(Enum):
    """Lifecycle of a deduplicated in-flight operation."""

    PENDING = "pending"
    SETTLED = "settled"


class LogLevel(Enum):
    """Logging severity levels."""

    DEBUG = "debug"
    INFO = "info"
    WARN = "warn"
    ERROR = "error"


class ApiErrorCode(Enum):
    """Error codes for registrar API client operations."""

    NETWORK_ERROR = "network_error"
    TLS_ERROR = "tls_error"
    TIMEOUT = "timeout"
    HTTP_ERROR = "http_error"
    PARSE_ERROR = "parse_error"
    UNSUCCESSFUL = "unsuccessful"


class DomainValidationErrorCode(Enum):
    """Error codes for domain validation failures."""

    EMPTY_INPUT = "empty_input"
    FORBIDDEN_CHARS = "forbidden_chars"
    IDNA_ERROR = "idna_error"
    TOO_SHORT = "too_short"
