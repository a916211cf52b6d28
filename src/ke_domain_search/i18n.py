"""
Internationalization (i18n) for user-facing messages.

Provides translations in English (en) and Swahili (sw).
"""

from typing import Optional


# Supported languages
SUPPORTED_LANGUAGES = frozenset({"en", "sw"})
DEFAULT_LANGUAGE = "en"


# message key -> language code -> template
TRANSLATIONS: dict[str, dict[str, str]] = {
    # Availability status labels
    "status.available": {
        "en": "Available",
        "sw": "Inapatikana",
    },
    "status.taken": {
        "en": "Taken",
        "sw": "Imechukuliwa",
    },
    "status.unknown": {
        "en": "Unknown",
        "sw": "Haijulikani",
    },
    "status.loading": {
        "en": "Checking...",
        "sw": "Inakagua...",
    },

    # Pricing
    "pricing.contact": {
        "en": "Contact for pricing",
        "sw": "Wasiliana nasi kwa bei",
    },
    "pricing.per_year": {
        "en": "{currency} {price}/year",
        "sw": "{currency} {price}/mwaka",
    },
    "pricing.live": {
        "en": "Live pricing",
        "sw": "Bei ya sasa",
    },
    "pricing.estimated": {
        "en": "Estimated",
        "sw": "Makadirio",
    },

    # Search orchestrator
    "search.no_suggestions": {
        "en": "No suggestions could be generated for '{query}'. Try a different name.",
        "sw": "Hakuna mapendekezo yaliyopatikana kwa '{query}'. Jaribu jina lingine.",
    },
    "search.failed": {
        "en": "Failed to search domains. Please try again.",
        "sw": "Utafutaji wa vikoa umeshindwa. Tafadhali jaribu tena.",
    },
    "search.query_too_short": {
        "en": "Enter at least {min_length} characters to search.",
        "sw": "Andika angalau herufi {min_length} ili kutafuta.",
    },

    # Checkout
    "checkout.not_available": {
        "en": "{domain} is not available for registration",
        "sw": "{domain} haipatikani kwa usajili",
    },
    "checkout.invalid_term": {
        "en": "Registration term of {years} years is not offered",
        "sw": "Muda wa usajili wa miaka {years} haupatikani",
    },

    # CLI
    "cli.results_header": {
        "en": "Results for '{query}'",
        "sw": "Matokeo ya '{query}'",
    },
    "cli.available_count": {
        "en": "{count} available",
        "sw": "{count} zinapatikana",
    },
    "cli.pricing_unavailable": {
        "en": "Pricing unavailable for {extension}",
        "sw": "Bei haipatikani kwa {extension}",
    },
}


def get_message(
    key: str,
    language: Optional[str] = None,
    **kwargs,
) -> str:
    """
    Look up `key` in `language` and fill in its placeholders.

    Unsupported or missing languages use DEFAULT_LANGUAGE. An unknown key
    is returned as is, and a template whose placeholders are not all
    supplied is returned unformatted.

        >>> get_message('status.available', 'sw')
        'Inapatikana'
        >>> get_message('checkout.not_available', 'en', domain='a.co.ke')
        'a.co.ke is not available for registration'
    """
    variants = TRANSLATIONS.get(key)
    if not variants:
        return key

    if language not in SUPPORTED_LANGUAGES:
        language = DEFAULT_LANGUAGE
    template = variants.get(language) or variants.get(DEFAULT_LANGUAGE)
    if template is None:
        return key

    if not kwargs:
        return template
    try:
        return template.format(**kwargs)
    except KeyError:
        return template


def get_all_message_keys() -> set[str]:
    return set(TRANSLATIONS)


def has_translation(key: str, language: str) -> bool:
    return language in TRANSLATIONS.get(key, {})


def get_missing_translations(language: str) -> set[str]:
    """Message keys that lack a translation for the language."""
    return {key for key in TRANSLATIONS if not has_translation(key, language)}


def validate_translations() -> dict[str, set[str]]:
    """Missing message keys per supported language; all empty when complete."""
    return {language: get_missing_translations(language) for language in SUPPORTED_LANGUAGES}
