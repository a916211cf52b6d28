"""
Configuration dataclasses for the domain search pipeline.

This module defines the configuration structures used throughout the
system (registrar API access, cache lifetimes, search behaviour and
logging) together with loaders for JSON config files and environment
variables.

Precedence, lowest to highest: built-in defaults, JSON config file,
environment variables (a local .env file is honoured).
"""

import json
import os
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Optional
from urllib.parse import urlparse

from dotenv import load_dotenv

from .exceptions import ConfigurationError


DEFAULT_API_BASE_URL = "https://api.digikenya.co.ke/api/v1"
DEFAULT_CONFIG_PATH = Path.home() / ".ke_domain_search" / "config.json"
ENV_PREFIX = "KE_SEARCH_"

SUPPORTED_OUTPUT_FORMATS = ("json", "text", "both")
SUPPORTED_LOG_LEVELS = ("debug", "info", "warn", "error")


@dataclass
class ApiConfig:
    """Registrar API access."""

    base_url: str = DEFAULT_API_BASE_URL
    timeout_seconds: float = 15.0
    api_key: Optional[str] = None
    include_pricing: bool = True


@dataclass
class CacheConfig:
    """Lifetimes of cached values, in seconds."""

    default_ttl_seconds: float = 300.0
    pricing_ttl_seconds: float = 600.0  # prices change rarely
    availability_ttl_seconds: float = 120.0  # availability is volatile


@dataclass
class SearchConfig:
    """Interactive search behaviour."""

    debounce_seconds: float = 0.3
    min_query_length: int = 2


@dataclass
class LoggingConfig:
    """Logging configuration."""

    level: str = "info"
    output_format: str = "text"  # 'json', 'text', 'both'


@dataclass
class SystemConfig:
    """Main system configuration combining all sub-configurations."""

    api: ApiConfig = field(default_factory=ApiConfig)
    cache: CacheConfig = field(default_factory=CacheConfig)
    search: SearchConfig = field(default_factory=SearchConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    language: str = "en"  # 'en' or 'sw'

    def validate(self) -> "SystemConfig":
        """
        Check every value for sanity.

        Returns:
            self, so calls can be chained

        Raises:
            ConfigurationError: On the first invalid value found
        """
        parsed = urlparse(self.api.base_url)
        if parsed.scheme.lower() != "https" or not parsed.netloc:
            raise ConfigurationError(
                code="invalid_base_url",
                message=f"API base URL must be an https URL: {self.api.base_url}",
                details={"base_url": self.api.base_url},
            )
        if self.api.timeout_seconds <= 0:
            raise ConfigurationError(
                code="invalid_timeout",
                message="API timeout must be positive",
                details={"timeout_seconds": self.api.timeout_seconds},
            )
        for name in ("default_ttl_seconds", "pricing_ttl_seconds", "availability_ttl_seconds"):
            if getattr(self.cache, name) <= 0:
                raise ConfigurationError(
                    code="invalid_ttl",
                    message=f"Cache TTL '{name}' must be positive",
                    details={name: getattr(self.cache, name)},
                )
        if self.search.debounce_seconds < 0:
            raise ConfigurationError(
                code="invalid_debounce",
                message="Debounce delay cannot be negative",
                details={"debounce_seconds": self.search.debounce_seconds},
            )
        if self.search.min_query_length < 1:
            raise ConfigurationError(
                code="invalid_min_query_length",
                message="Minimum query length must be at least 1",
                details={"min_query_length": self.search.min_query_length},
            )
        if self.logging.level not in SUPPORTED_LOG_LEVELS:
            raise ConfigurationError(
                code="invalid_log_level",
                message=f"Unsupported log level: {self.logging.level}",
                details={"level": self.logging.level},
            )
        if self.logging.output_format not in SUPPORTED_OUTPUT_FORMATS:
            raise ConfigurationError(
                code="invalid_output_format",
                message=f"Unsupported log output format: {self.logging.output_format}",
                details={"output_format": self.logging.output_format},
            )
        return self


def create_default_config(language: str = "en") -> SystemConfig:
    """Create a system configuration with built-in defaults."""
    return SystemConfig(language=language)


def config_from_dict(data: dict) -> SystemConfig:
    """
    Build a SystemConfig from a plain dictionary.

    Unknown keys are ignored; missing sections fall back to defaults.

    Raises:
        ConfigurationError: If a value has the wrong type or is invalid
    """
    try:
        api_data = data.get("api", {})
        cache_data = data.get("cache", {})
        search_data = data.get("search", {})
        logging_data = data.get("logging", {})

        defaults = SystemConfig()
        config = SystemConfig(
            api=ApiConfig(
                base_url=str(api_data.get("base_url", defaults.api.base_url)),
                timeout_seconds=float(api_data.get("timeout_seconds", defaults.api.timeout_seconds)),
                api_key=api_data.get("api_key"),
                include_pricing=bool(api_data.get("include_pricing", defaults.api.include_pricing)),
            ),
            cache=CacheConfig(
                default_ttl_seconds=float(cache_data.get(
                    "default_ttl_seconds", defaults.cache.default_ttl_seconds)),
                pricing_ttl_seconds=float(cache_data.get(
                    "pricing_ttl_seconds", defaults.cache.pricing_ttl_seconds)),
                availability_ttl_seconds=float(cache_data.get(
                    "availability_ttl_seconds", defaults.cache.availability_ttl_seconds)),
            ),
            search=SearchConfig(
                debounce_seconds=float(search_data.get(
                    "debounce_seconds", defaults.search.debounce_seconds)),
                min_query_length=int(search_data.get(
                    "min_query_length", defaults.search.min_query_length)),
            ),
            logging=LoggingConfig(
                level=str(logging_data.get("level", defaults.logging.level)),
                output_format=str(logging_data.get("output_format", defaults.logging.output_format)),
            ),
            language=str(data.get("language", defaults.language)),
        )
    except (AttributeError, TypeError, ValueError) as e:
        raise ConfigurationError(
            code="invalid_config",
            message=f"Invalid configuration value: {e}",
            details={"error": str(e)},
        )
    return config.validate()


def config_to_dict(config: SystemConfig) -> dict:
    """Convert a SystemConfig to a JSON-serializable dictionary."""
    return asdict(config)


def load_config_from_file(config_path: Path) -> Optional[SystemConfig]:
    """
    Load configuration from a JSON file.

    Args:
        config_path: Path to the configuration file

    Returns:
        SystemConfig if the file exists, None otherwise

    Raises:
        ConfigurationError: If the file is not valid JSON or holds invalid values
    """
    if not config_path.exists():
        return None
    try:
        with open(config_path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise ConfigurationError(
            code="unreadable_config",
            message=f"Could not read config file {config_path}: {e}",
            details={"path": str(config_path)},
        )
    if not isinstance(data, dict):
        raise ConfigurationError(
            code="invalid_config",
            message="Config file must contain a JSON object",
            details={"path": str(config_path)},
        )
    return config_from_dict(data)


def save_config_to_file(config: SystemConfig, config_path: Path) -> bool:
    """
    Save configuration to a JSON file.

    Args:
        config: Configuration to save
        config_path: Path to the configuration file

    Returns:
        True if successful, False otherwise
    """
    try:
        config_path.parent.mkdir(parents=True, exist_ok=True)
        with open(config_path, "w", encoding="utf-8") as f:
            json.dump(config_to_dict(config), f, indent=2)
        return True
    except OSError:
        return False


def apply_env_overrides(config: SystemConfig, env: Optional[dict] = None) -> SystemConfig:
    """
    Override configuration values from KE_SEARCH_* environment variables.

    Args:
        config: Base configuration (modified in place)
        env: Mapping to read from; defaults to os.environ

    Returns:
        The updated configuration, validated
    """
    env = os.environ if env is None else env

    def get(name: str) -> Optional[str]:
        value = env.get(ENV_PREFIX + name)
        return value if value not in (None, "") else None

    try:
        if get("API_BASE_URL"):
            config.api.base_url = get("API_BASE_URL")
        if get("API_TIMEOUT"):
            config.api.timeout_seconds = float(get("API_TIMEOUT"))
        if get("API_KEY"):
            config.api.api_key = get("API_KEY")
        if get("INCLUDE_PRICING"):
            config.api.include_pricing = get("INCLUDE_PRICING").lower() in ("1", "true", "yes")
        if get("PRICING_TTL"):
            config.cache.pricing_ttl_seconds = float(get("PRICING_TTL"))
        if get("AVAILABILITY_TTL"):
            config.cache.availability_ttl_seconds = float(get("AVAILABILITY_TTL"))
        if get("DEBOUNCE"):
            config.search.debounce_seconds = float(get("DEBOUNCE"))
        if get("LOG_LEVEL"):
            config.logging.level = get("LOG_LEVEL").lower()
        if get("LOG_FORMAT"):
            config.logging.output_format = get("LOG_FORMAT").lower()
        if get("LANGUAGE"):
            config.language = get("LANGUAGE").lower()
    except ValueError as e:
        raise ConfigurationError(
            code="invalid_env",
            message=f"Invalid environment override: {e}",
            details={"error": str(e)},
        )
    return config.validate()


def load_config(config_path: Optional[Path] = None, use_dotenv: bool = True) -> SystemConfig:
    """
    Resolve the effective configuration.

    Args:
        config_path: Optional JSON config file; DEFAULT_CONFIG_PATH when None
        use_dotenv: Whether to load a .env file into the environment first

    Returns:
        Validated SystemConfig
    """
    if use_dotenv:
        load_dotenv()
    config = load_config_from_file(config_path or DEFAULT_CONFIG_PATH)
    if config is None:
        config = create_default_config()
    return apply_env_overrides(config)
