"""
Checkout hand-off and price quotes.

Selecting an available suggestion produces a CheckoutSelection for the
registrar-selection / checkout flow. quote() computes what a
multi-year registration costs from the extension's price table.
"""

from dataclasses import dataclass
from typing import Optional

from .enums import AvailabilityStatus
from .exceptions import CheckoutError
from .i18n import get_message
from .models import TERM_LENGTHS, CheckoutSelection, Suggestion


@dataclass(frozen=True)
class CheckoutQuote:
    """Cost of registering a domain for a given term."""

    years: int
    currency: Optional[str]
    yearly_total: float  # registration price for the whole term
    setup_fee: float
    subtotal: float
    savings: float  # versus paying the one-year price every year


def select_suggestion(suggestion: Suggestion, language: str = "en") -> CheckoutSelection:
    """
    Build the checkout hand-off for a suggestion.

    Raises:
        CheckoutError: If the suggestion is not available or has no
                       one-year price (contact-for-pricing domains are
                       handled by the sales team, not checkout)
    """
    if suggestion.status is not AvailabilityStatus.AVAILABLE:
        raise CheckoutError(
            code="not_available",
            message=get_message("checkout.not_available", language, domain=suggestion.domain),
            details={"domain": suggestion.domain, "status": suggestion.status.value},
        )
    price = suggestion.price
    if price is None:
        raise CheckoutError(
            code="contact_for_pricing",
            message=get_message("pricing.contact", language),
            details={"domain": suggestion.domain},
        )
    pricing = suggestion.pricing
    return CheckoutSelection(
        domain=suggestion.domain,
        price=price,
        extension=suggestion.extension.ext,
        pricing=pricing,
        renewal=pricing.first_year_renewal if pricing else None,
    )


def term_price(selection: CheckoutSelection, years: int) -> float:
    """Registration price for the whole term."""
    pricing = selection.pricing
    if pricing is None:
        return selection.price * years
    quoted = pricing.registration_by_term.get(years)
    if quoted is not None:
        return quoted
    base = pricing.first_year_price or selection.price
    return base * years


def quote(selection: CheckoutSelection, years: int = 1, language: str = "en") -> CheckoutQuote:
    """
    Price a registration term.

    Raises:
        CheckoutError: If the term is not one the registrar offers
    """
    if years not in TERM_LENGTHS:
        raise CheckoutError(
            code="invalid_term",
            message=get_message("checkout.invalid_term", language, years=years),
            details={"years": years, "offered": list(TERM_LENGTHS)},
        )

    pricing = selection.pricing
    total = term_price(selection, years)
    setup_fee = pricing.setup_fee if pricing else 0.0

    savings = 0.0
    if years > 1 and pricing is not None:
        base = pricing.first_year_price or selection.price
        savings = max(0.0, base * years - total)

    return CheckoutQuote(
        years=years,
        currency=pricing.currency if pricing else None,
        yearly_total=total,
        setup_fee=setup_fee,
        subtotal=total + setup_fee,
        savings=savings,
    )
