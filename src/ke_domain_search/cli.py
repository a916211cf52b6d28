"""
Command-line interface for the domain search pipeline.

Commands:
- search: Rank suggestions for a name across all .ke extensions
- check: Check availability of specific domains
- pricing: Show price tables for extensions
- config: Show, create or validate the settings file
"""

import argparse
import asyncio
import json
import sys
from pathlib import Path
from typing import Optional

from . import __version__
from .config import (
    DEFAULT_CONFIG_PATH,
    SystemConfig,
    create_default_config,
    load_config,
    load_config_from_file,
    save_config_to_file,
)
from .enums import AvailabilityStatus, SearchState
from .exceptions import ConfigurationError, DomainSearchError
from .i18n import SUPPORTED_LANGUAGES, get_message
from .models import PricingRecord, Suggestion
from .pipeline import build_pipeline


def format_price(pricing: Optional[PricingRecord], language: str) -> str:
    if pricing is None or pricing.first_year_price is None:
        return get_message("pricing.contact", language)
    return get_message(
        "pricing.per_year",
        language,
        currency=pricing.currency,
        price=f"{pricing.first_year_price:,.0f}",
    )


def format_suggestion(suggestion: Suggestion, language: str) -> str:
    marker = {
        AvailabilityStatus.AVAILABLE: "✓",
        AvailabilityStatus.TAKEN: "✗",
        AvailabilityStatus.UNKNOWN: "?",
    }[suggestion.status]
    status = get_message(f"status.{suggestion.status.value}", language)
    line = f"  {marker} {suggestion.domain:<28} {status:<14}"
    if suggestion.status is AvailabilityStatus.AVAILABLE:
        line += format_price(suggestion.pricing, language)
    return line


def _resolve_config(args: argparse.Namespace) -> SystemConfig:
    config = load_config(Path(args.config) if args.config else None)
    if getattr(args, "language", None):
        config.language = args.language
    if getattr(args, "verbose", False):
        config.logging.level = "debug"
    return config


async def run_search(query: str, config: SystemConfig, as_json: bool = False) -> int:
    """Run one orchestrated search and print the ranked results."""
    language = config.language
    async with build_pipeline(config) as pipeline:
        orchestrator = pipeline.create_orchestrator()
        ran = await orchestrator.search_now(query)
        if not ran:
            print(get_message(
                "search.query_too_short", language,
                min_length=config.search.min_query_length,
            ), file=sys.stderr)
            return 1

        snapshot = orchestrator.snapshot()
        if snapshot.state is SearchState.ERRORED:
            print(snapshot.error_message, file=sys.stderr)
            return 1

        if as_json:
            print(json.dumps([s.to_dict() for s in snapshot.suggestions], indent=2))
        else:
            print(get_message("cli.results_header", language, query=snapshot.query))
            for suggestion in snapshot.suggestions:
                print(format_suggestion(suggestion, language))
            available = sum(1 for s in snapshot.suggestions if s.status is AvailabilityStatus.AVAILABLE)
            print()
            print(get_message("cli.available_count", language, count=available))

        return 0 if any(s.status is AvailabilityStatus.AVAILABLE for s in snapshot.suggestions) else 1


async def run_check(domains: list[str], config: SystemConfig, as_json: bool = False) -> int:
    """Check specific domains in one batch."""
    language = config.language
    async with build_pipeline(config) as pipeline:
        results = await pipeline.availability.check_batch(domains)

    if as_json:
        print(json.dumps({
            domain: {
                "status": result.status.value,
                "available": result.available,
                "pricing": result.pricing.to_dict() if result.pricing else None,
            }
            for domain, result in results.items()
        }, indent=2))
    else:
        for domain, result in results.items():
            status = get_message(f"status.{result.status.value}", language)
            line = f"  {domain:<28} {status}"
            if result.available and result.pricing is not None:
                line += f"  {format_price(result.pricing, language)}"
            print(line)

    return 0 if any(r.available for r in results.values()) else 1


async def run_pricing(extensions: list[str], config: SystemConfig, as_json: bool = False) -> int:
    """Show price tables for extensions."""
    language = config.language
    async with build_pipeline(config) as pipeline:
        records = await pipeline.pricing.get_many(extensions)

    failed = [ext for ext, record in records.items() if record is None]
    if as_json:
        print(json.dumps({
            ext: record.to_dict() if record else None
            for ext, record in records.items()
        }, indent=2))
    else:
        for ext, record in records.items():
            if record is None:
                print(f"  {ext:<10} {get_message('cli.pricing_unavailable', language, extension=ext)}")
                continue
            source = get_message(f"pricing.{record.source.value}", language)
            print(f"  {ext:<10} {format_price(record, language)}  ({source})")
            for years, price in sorted(record.registration_by_term.items()):
                print(f"      {years:>2}y  {record.currency} {price:,.0f}")

    return 1 if failed else 0


def cmd_search(args: argparse.Namespace) -> int:
    """Entry for 'search'; a missing config file means defaults plus environment."""
    config = _resolve_config(args)
    return asyncio.run(run_search(args.query, config, as_json=args.json))


def cmd_check(args: argparse.Namespace) -> int:
    config = _resolve_config(args)
    return asyncio.run(run_check(args.domains, config, as_json=args.json))


def cmd_pricing(args: argparse.Namespace) -> int:
    config = _resolve_config(args)
    return asyncio.run(run_pricing(args.extensions, config, as_json=args.json))


def _show_config(config_path: Path) -> int:
    config = load_config_from_file(config_path)
    if config is None:
        print(f"Nothing to show: {config_path} does not exist (run 'config init').")
        return 1

    rows = [
        ("API base URL", config.api.base_url),
        ("API key", "set" if config.api.api_key else "not set"),
        ("Timeout", f"{config.api.timeout_seconds}s"),
        ("Pricing TTL", f"{config.cache.pricing_ttl_seconds}s"),
        ("Availability TTL", f"{config.cache.availability_ttl_seconds}s"),
        ("Debounce", f"{config.search.debounce_seconds}s"),
        ("Language", config.language),
        ("Log level", config.logging.level),
    ]
    print(f"Settings in {config_path}:")
    for label, value in rows:
        print(f"  {label}: {value}")
    return 0


def _init_config(config_path: Path, language: Optional[str], force: bool) -> int:
    if config_path.exists() and not force:
        print(f"{config_path} already exists; pass --force to replace it.")
        return 1

    config = create_default_config(language=language or "en")
    if not save_config_to_file(config, config_path):
        print(f"Error: Could not write {config_path}", file=sys.stderr)
        return 1
    print(f"Configuration created at: {config_path}")
    return 0


def _validate_config(config_path: Path) -> int:
    if load_config_from_file(config_path) is None:
        print(f"Error: No configuration at {config_path}", file=sys.stderr)
        return 1
    print(f"{config_path}: OK")
    return 0


def cmd_config(args: argparse.Namespace) -> int:
    config_path = Path(args.path) if args.path else DEFAULT_CONFIG_PATH
    if args.action == "show":
        return _show_config(config_path)
    if args.action == "init":
        return _init_config(config_path, args.language, args.force)
    return _validate_config(config_path)


def _add_common_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--config", "-c",
        help="Path to configuration file",
    )
    parser.add_argument(
        "--language", "-l",
        choices=sorted(SUPPORTED_LANGUAGES),
        help="Output language (default: from configuration, en)",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Output results as JSON",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable debug logging",
    )


def create_parser() -> argparse.ArgumentParser:
    """Parser with one sub-command per pipeline entry point."""
    parser = argparse.ArgumentParser(
        prog="ke-domain-search",
        description="Search and price .ke domain names",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    search_parser = subparsers.add_parser(
        "search",
        help="Suggest available domains for a name",
    )
    search_parser.add_argument(
        "query",
        help="Name to search for (e.g., mybrand or mybrand.co.ke)",
    )
    _add_common_options(search_parser)
    search_parser.set_defaults(func=cmd_search)

    check_parser = subparsers.add_parser(
        "check",
        help="Check availability of specific domains",
    )
    check_parser.add_argument(
        "domains",
        nargs="+",
        help="Domains to check (e.g., mybrand.co.ke)",
    )
    _add_common_options(check_parser)
    check_parser.set_defaults(func=cmd_check)

    pricing_parser = subparsers.add_parser(
        "pricing",
        help="Show price tables for extensions",
    )
    pricing_parser.add_argument(
        "extensions",
        nargs="+",
        help="Extensions (e.g., .co.ke me.ke)",
    )
    _add_common_options(pricing_parser)
    pricing_parser.set_defaults(func=cmd_pricing)

    config_parser = subparsers.add_parser(
        "config",
        help="Show, create or validate the settings file",
    )
    config_parser.add_argument(
        "action",
        choices=["show", "init", "validate"],
        help="Configuration action",
    )
    config_parser.add_argument(
        "--path", "-p",
        help="Path to configuration file",
    )
    config_parser.add_argument(
        "--force", "-f",
        action="store_true",
        help="Replace an existing file",
    )
    config_parser.add_argument(
        "--language", "-l",
        choices=sorted(SUPPORTED_LANGUAGES),
        help="Language written to a new file",
    )
    config_parser.set_defaults(func=cmd_config)

    return parser


def main(argv: Optional[list[str]] = None) -> int:
    """Run the CLI; returns 0 on success, 1 on failure and 2 on bad configuration."""
    parser = create_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    try:
        return args.func(args)
    except ConfigurationError as e:
        print(f"Configuration error: {e.message}", file=sys.stderr)
        return 2
    except DomainSearchError as e:
        print(f"Error: {e.message}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
