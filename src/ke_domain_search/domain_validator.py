"""
Query normalization and domain validation.

Turns free-text search input into a bare label suitable for pairing
with extensions, and validates full domain names (including
internationalized ones) before they are sent to the registrar.
"""

import re
from dataclasses import dataclass
from typing import Optional

import idna

from .catalog import ExtensionCatalog
from .enums import DomainValidationErrorCode
from .exceptions import ValidationError


MIN_LABEL_LENGTH = 2

# Anything a search label may not contain
LABEL_FORBIDDEN_PATTERN = re.compile(r"[^a-z0-9-]")

# Punctuation, dots or slashes left after a pasted domain
TRAILING_JUNK_PATTERN = re.compile(r"[^a-z0-9]+$")

# Forbidden characters in full domain names (control chars, spaces, special symbols)
FORBIDDEN_CHARS_PATTERN = re.compile(
    r'[\x00-\x1f\x7f'
    r'\s'
    r'!@#$%^&*()+=\[\]{}|\\:;"\'<>,?/`~_]'
)


def normalize_query(raw_query: str, catalog: ExtensionCatalog) -> str:
    """
    Reduce free text to a search label.

    Strips surrounding whitespace, a leading scheme or 'www.', any URL
    path and trailing punctuation, then one trailing known extension.
    Lower-cases and drops every character outside [a-z0-9-].

    Examples:
        >>> normalize_query("MyBrand.co.ke", ExtensionCatalog())
        'mybrand'
        >>> normalize_query("  my brand! ", ExtensionCatalog())
        'mybrand'
        >>> normalize_query("mybrand.co.ke/", ExtensionCatalog())
        'mybrand'
    """
    if not raw_query:
        return ""
    text = raw_query.strip().lower()
    text = re.sub(r"^[a-z]+://", "", text)
    if text.startswith("www."):
        text = text[4:]
    text = re.split(r"[/?#]", text, maxsplit=1)[0]
    text = TRAILING_JUNK_PATTERN.sub("", text)
    text = catalog.strip_extension(text)
    return LABEL_FORBIDDEN_PATTERN.sub("", text)


def is_searchable(label: str, min_length: int = MIN_LABEL_LENGTH) -> bool:
    return len(label) >= min_length


@dataclass
class DomainValidationResult:
    """Result of validating a full domain name."""

    valid: bool
    canonical_domain: Optional[str]
    error_code: Optional[DomainValidationErrorCode] = None
    message: Optional[str] = None


class DomainValidator:
    """
    Validates and canonicalizes full domain names.

    Canonical form is lower-case ASCII; international labels are
    IDNA-encoded (punycode).
    """

    def validate(self, raw_domain: str) -> DomainValidationResult:
        """
        Validate a domain name.

        Args:
            raw_domain: Domain as typed or generated

        Returns:
            DomainValidationResult with canonical form or error
        """
        if not raw_domain or not raw_domain.strip():
            return DomainValidationResult(
                valid=False,
                canonical_domain=None,
                error_code=DomainValidationErrorCode.EMPTY_INPUT,
                message="Domain input is empty",
            )

        domain = raw_domain.strip().rstrip(".")
        if FORBIDDEN_CHARS_PATTERN.search(domain):
            return DomainValidationResult(
                valid=False,
                canonical_domain=None,
                error_code=DomainValidationErrorCode.FORBIDDEN_CHARS,
                message="Domain contains forbidden characters",
            )

        try:
            canonical = self.normalize_to_canonical(domain)
        except ValidationError as e:
            return DomainValidationResult(
                valid=False,
                canonical_domain=None,
                error_code=DomainValidationErrorCode.IDNA_ERROR,
                message=e.message,
            )

        if "." not in canonical or len(canonical.split(".", 1)[0]) < 1:
            return DomainValidationResult(
                valid=False,
                canonical_domain=None,
                error_code=DomainValidationErrorCode.TOO_SHORT,
                message="Domain needs a label and an extension",
            )

        return DomainValidationResult(valid=True, canonical_domain=canonical)

    def normalize_to_canonical(self, domain: str) -> str:
        """
        Convert a domain to canonical form (lowercase, IDNA-encoded).

        Raises:
            ValidationError: If IDNA encoding fails
        """
        domain_lower = domain.lower()
        if all(ord(c) < 128 for c in domain_lower):
            return domain_lower
        try:
            return idna.encode(domain_lower, uts46=True).decode("ascii")
        except idna.IDNAError as e:
            raise ValidationError(
                code=DomainValidationErrorCode.IDNA_ERROR.value,
                message=f"IDNA encoding failed: {e}",
                details={"domain": domain, "idna_error": str(e)},
            )

    def canonicalize(self, domain: str) -> str:
        """
        Canonical form of a valid domain.

        Raises:
            ValidationError: If the domain is invalid
        """
        result = self.validate(domain)
        if not result.valid:
            raise ValidationError(
                code=result.error_code.value,
                message=result.message or "Invalid domain",
                details={"domain": domain},
            )
        return result.canonical_domain
