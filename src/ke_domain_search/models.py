"""
Data models for the domain search pipeline.

This module defines the price tables, availability results, extension
descriptors and suggestions that flow from the registrar API to the
search UI, plus the record handed to checkout.
"""

from dataclasses import dataclass, field
from typing import Any, Optional

from .enums import AvailabilityStatus, PricingSource
from .exceptions import ProtocolError


# Registration terms offered by the registrar, in years
TERM_LENGTHS = (1, 2, 3, 5, 10)

# Backend identifiers that denote live (billing system) prices
LIVE_PRICING_SOURCES = frozenset({"live", "whmcs"})


def term_key(years: int) -> str:
    """API key for a registration term, e.g. 1 -> '1_year', 5 -> '5_years'."""
    return f"{years}_year" if years == 1 else f"{years}_years"


def _parse_term_table(raw: Any, field_name: str) -> dict[int, float]:
    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise ProtocolError(
            code="parse_error",
            message=f"Pricing field '{field_name}' must be an object",
            details={"field": field_name},
        )
    table = {}
    for years in TERM_LENGTHS:
        value = raw.get(term_key(years))
        if value is None:
            continue
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ProtocolError(
                code="parse_error",
                message=f"Price for {term_key(years)} in '{field_name}' is not a number",
                details={"field": field_name, "term": term_key(years), "value": value},
            )
        table[years] = float(value)
    return table


@dataclass(frozen=True)
class PricingRecord:
    """Per-extension price table."""

    currency: str
    setup_fee: float = 0.0
    registration_by_term: dict[int, float] = field(default_factory=dict)
    renewal_by_term: dict[int, float] = field(default_factory=dict)
    source: PricingSource = PricingSource.ESTIMATED

    @property
    def first_year_price(self) -> Optional[float]:
        """One-year registration price, or None when the registrar quotes on request."""
        return self.registration_by_term.get(1)

    @property
    def first_year_renewal(self) -> Optional[float]:
        return self.renewal_by_term.get(1)

    @property
    def contact_for_pricing(self) -> bool:
        return self.first_year_price is None

    @classmethod
    def from_api(cls, data: Any) -> "PricingRecord":
        """
        Build a PricingRecord from the registrar's JSON pricing object.

        Args:
            data: The 'data' member of a pricing response

        Returns:
            Parsed PricingRecord

        Raises:
            ProtocolError: If the payload is structurally invalid
        """
        if not isinstance(data, dict):
            raise ProtocolError(
                code="parse_error",
                message="Pricing payload must be an object",
                details={"payload_type": type(data).__name__},
            )
        if "registration" not in data:
            raise ProtocolError(
                code="parse_error",
                message="Pricing payload has no registration table",
                details={"keys": sorted(data.keys())},
            )

        setup_fee = data.get("setup_fee", 0) or 0
        if isinstance(setup_fee, bool) or not isinstance(setup_fee, (int, float)):
            raise ProtocolError(
                code="parse_error",
                message="Pricing setup_fee is not a number",
                details={"setup_fee": setup_fee},
            )

        raw_source = str(data.get("source", "")).lower()
        source = PricingSource.LIVE if raw_source in LIVE_PRICING_SOURCES else PricingSource.ESTIMATED

        return cls(
            currency=str(data.get("currency") or "KES"),
            setup_fee=float(setup_fee),
            registration_by_term=_parse_term_table(data.get("registration"), "registration"),
            renewal_by_term=_parse_term_table(data.get("renewal"), "renewal"),
            source=source,
        )

    def to_dict(self) -> dict:
        """Convert to the registrar's JSON shape."""
        return {
            "currency": self.currency,
            "setup_fee": self.setup_fee,
            "registration": {term_key(y): p for y, p in sorted(self.registration_by_term.items())},
            "renewal": {term_key(y): p for y, p in sorted(self.renewal_by_term.items())},
            "source": self.source.value,
        }


@dataclass(frozen=True)
class AvailabilityResult:
    """Outcome of checking one domain."""

    domain: str
    available: bool
    status: AvailabilityStatus
    pricing: Optional[PricingRecord] = None

    @classmethod
    def unknown(cls, domain: str) -> "AvailabilityResult":
        """Result for a domain whose check failed; fails closed."""
        return cls(domain=domain, available=False, status=AvailabilityStatus.UNKNOWN)

    @classmethod
    def from_api(cls, domain: str, data: Any) -> "AvailabilityResult":
        """
        Build a result from an availability entry ({available|status, pricing?}).

        Raises:
            ProtocolError: If neither 'available' nor 'status' is usable
        """
        if not isinstance(data, dict):
            raise ProtocolError(
                code="parse_error",
                message=f"Availability entry for {domain} must be an object",
                details={"domain": domain},
            )
        if isinstance(data.get("available"), bool):
            available = data["available"]
        elif isinstance(data.get("status"), str):
            available = data["status"].lower() == "available"
        else:
            raise ProtocolError(
                code="parse_error",
                message=f"Availability entry for {domain} has no availability field",
                details={"domain": domain, "keys": sorted(data.keys())},
            )

        pricing = None
        if data.get("pricing") is not None:
            pricing = PricingRecord.from_api(data["pricing"])

        return cls(
            domain=domain,
            available=available,
            status=AvailabilityStatus.AVAILABLE if available else AvailabilityStatus.TAKEN,
            pricing=pricing,
        )


@dataclass(frozen=True)
class ExtensionDescriptor:
    """A domain extension offered by the storefront."""

    ext: str  # with leading dot, e.g. '.co.ke'
    description: str
    popular: bool = False
    category: str = "local"
    eligibility: str = "Open to everyone"
    pricing: Optional[PricingRecord] = None

    @property
    def api_name(self) -> str:
        """Extension as used in pricing URLs ('co.ke')."""
        return self.ext.lstrip(".")


@dataclass
class Suggestion:
    """One candidate domain in the result list."""

    base_label: str
    extension: ExtensionDescriptor
    status: AvailabilityStatus = AvailabilityStatus.UNKNOWN
    pricing: Optional[PricingRecord] = None
    is_loading: bool = True

    @property
    def domain(self) -> str:
        return f"{self.base_label}{self.extension.ext}"

    @property
    def available(self) -> Optional[bool]:
        """None while loading; afterwards True only for a confirmed available domain."""
        if self.is_loading:
            return None
        return self.status is AvailabilityStatus.AVAILABLE

    @property
    def price(self) -> Optional[float]:
        return self.pricing.first_year_price if self.pricing else None

    def to_dict(self) -> dict:
        return {
            "domain": self.domain,
            "extension": self.extension.ext,
            "status": self.status.value,
            "popular": self.extension.popular,
            "price": self.price,
            "currency": self.pricing.currency if self.pricing else None,
            "is_loading": self.is_loading,
        }


@dataclass(frozen=True)
class CheckoutSelection:
    """What the search hands to the checkout / registrar-selection flow."""

    domain: str
    price: float
    extension: str
    pricing: Optional[PricingRecord] = None
    renewal: Optional[float] = None

    def to_dict(self) -> dict:
        return {
            "domain": self.domain,
            "price": self.price,
            "renewal": self.renewal,
            "extension": self.extension,
            "pricing": self.pricing.to_dict() if self.pricing else None,
        }
