"""
ke-domain-search - Kenyan (.ke) domain search and availability pipeline.

This package turns free-text search input into ranked, priced domain
suggestions across the .ke extensions, backed by the registrar API with
caching and request deduplication.
"""

__version__ = "0.1.0"
__author__ = "KE Zone Team"

from ke_domain_search.exceptions import (
    DomainSearchError,
    ValidationError,
    NetworkError,
    ProtocolError,
    ConfigurationError,
    CheckoutError,
)
from ke_domain_search.enums import (
    AvailabilityStatus,
    PricingSource,
    SearchState,
    OperationState,
    LogLevel,
    ApiErrorCode,
    DomainValidationErrorCode,
)
from ke_domain_search.config import (
    ApiConfig,
    CacheConfig,
    SearchConfig,
    LoggingConfig,
    SystemConfig,
    create_default_config,
    config_from_dict,
    load_config,
    load_config_from_file,
    save_config_to_file,
    apply_env_overrides,
)
from ke_domain_search.models import (
    TERM_LENGTHS,
    PricingRecord,
    AvailabilityResult,
    ExtensionDescriptor,
    Suggestion,
    CheckoutSelection,
)
from ke_domain_search.cache import CacheEntry, TTLCache
from ke_domain_search.dedup import InFlightOperation, RequestDeduplicator
from ke_domain_search.search_logger import SearchLogger, LogEntry
from ke_domain_search.api_client import RegistrarApiClient
from ke_domain_search.catalog import DEFAULT_EXTENSIONS, ExtensionCatalog
from ke_domain_search.domain_validator import (
    DomainValidator,
    DomainValidationResult,
    normalize_query,
)
from ke_domain_search.pricing import PricingFetcher
from ke_domain_search.availability import AvailabilityChecker
from ke_domain_search.suggestions import SuggestionGenerator, rank_suggestions
from ke_domain_search.orchestrator import SearchOrchestrator, SearchSnapshot
from ke_domain_search.checkout import CheckoutQuote, quote, select_suggestion
from ke_domain_search.pipeline import SearchPipeline, build_pipeline
from ke_domain_search.i18n import (
    get_message,
    SUPPORTED_LANGUAGES,
    DEFAULT_LANGUAGE,
)
from ke_domain_search.cli import main as cli_main

__all__ = [
    # Exceptions
    "DomainSearchError",
    "ValidationError",
    "NetworkError",
    "ProtocolError",
    "ConfigurationError",
    "CheckoutError",
    # Enums
    "AvailabilityStatus",
    "PricingSource",
    "SearchState",
    "OperationState",
    "LogLevel",
    "ApiErrorCode",
    "DomainValidationErrorCode",
    # Configuration
    "ApiConfig",
    "CacheConfig",
    "SearchConfig",
    "LoggingConfig",
    "SystemConfig",
    "create_default_config",
    "config_from_dict",
    "load_config",
    "load_config_from_file",
    "save_config_to_file",
    "apply_env_overrides",
    # Models
    "TERM_LENGTHS",
    "PricingRecord",
    "AvailabilityResult",
    "ExtensionDescriptor",
    "Suggestion",
    "CheckoutSelection",
    # Cache & dedup
    "CacheEntry",
    "TTLCache",
    "InFlightOperation",
    "RequestDeduplicator",
    # Logging
    "SearchLogger",
    "LogEntry",
    # API client
    "RegistrarApiClient",
    # Catalog & validation
    "DEFAULT_EXTENSIONS",
    "ExtensionCatalog",
    "DomainValidator",
    "DomainValidationResult",
    "normalize_query",
    # Pipeline components
    "PricingFetcher",
    "AvailabilityChecker",
    "SuggestionGenerator",
    "rank_suggestions",
    "SearchOrchestrator",
    "SearchSnapshot",
    "CheckoutQuote",
    "quote",
    "select_suggestion",
    "SearchPipeline",
    "build_pipeline",
    # I18n
    "get_message",
    "SUPPORTED_LANGUAGES",
    "DEFAULT_LANGUAGE",
    # CLI
    "cli_main",
]
