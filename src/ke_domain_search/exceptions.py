"""
Exception classes for the domain search pipeline.

Every error derives from DomainSearchError and carries a machine-readable
code, a human message and a details mapping.

Transport and structural failures are raised by the API client and
absorbed at the fetcher boundary; they never reach the search UI.
"""

from typing import Optional


class DomainSearchError(Exception):
    """Base exception for all domain search errors."""

    def __init__(
        self,
        code: str,
        message: str,
        details: Optional[dict] = None,
    ) -> None:
        self.code = code
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(code={self.code!r}, message={self.message!r})"

    def to_dict(self) -> dict:
        """Serializable form used by the CLI and logs."""
        return {
            "error_type": self.__class__.__name__,
            "code": self.code,
            "message": self.message,
            "details": self.details,
        }


class ValidationError(DomainSearchError):
    """Raised when a domain name or query cannot be validated."""

    pass


class NetworkError(DomainSearchError):
    """Raised when a request to the registrar API fails in transport (timeout, refused, non-2xx)."""

    pass


class ProtocolError(DomainSearchError):
    """Raised when the registrar API answers with a malformed or unsuccessful payload."""

    pass


class ConfigurationError(DomainSearchError):
    """Raised when configuration values are missing or invalid."""

    pass


class CheckoutError(DomainSearchError):
    """Raised when a suggestion cannot be handed off to checkout."""

    pass
