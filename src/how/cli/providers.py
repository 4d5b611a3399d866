"""`how providers` command implementation."""

import argparse
import sys

from how.cli.shared import add_common_arguments, configure_logging
from how.config import load_config
from how.errors import HowError
from how.providers import ProviderManager


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="how providers",
        description="List, test, and describe the configured providers",
    )
    add_common_arguments(parser)
    parser.add_argument(
        "action",
        nargs="?",
        choices=["list", "test", "capabilities"],
        default="list",
    )
    parser.add_argument("name", nargs="?", help="Provider name (capabilities only)")
    return parser


def _list(manager: ProviderManager, current: str, failures: dict) -> int:
    infos = manager.list_providers()
    if not infos and not failures:
        print("No providers configured. Run `how setup` first.")
        return 0
    print("Configured providers:")
    for info in infos:
        marker = "*" if info.name == current else " "
        print(f"  {marker} {info.name:<12} {info.type:<10} {info.model}")
    for name, error in sorted(failures.items()):
        print(f"  ! {name:<12} {error}")
    print(f"\nAvailable types: {', '.join(manager.available_types())}")
    return 0


def _test(manager: ProviderManager, failures: dict) -> int:
    status = 0
    for name, error in manager.health_check().items():
        if error is None:
            print(f"  ok    {name}")
        else:
            print(f"  fail  {name}: {error}")
            status = 1
    for name, error in sorted(failures.items()):
        print(f"  fail  {name}: {error}")
        status = 1
    return status


def _capabilities(manager: ProviderManager, name: str) -> int:
    caps = manager.get_capabilities(name)
    print(f"Capabilities of {name}:")
    for field, value in caps.model_dump().items():
        if isinstance(value, bool):
            value = "yes" if value else "no"
        print(f"  {field.replace('_', ' ')}: {value}")
    return 0


def run(argv: list[str]) -> int:
    """Execute the providers command."""
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.debug)

    try:
        config = load_config(args.config)
        manager = ProviderManager()
        failures = manager.load_providers(config.providers)
        if args.action == "test":
            return _test(manager, failures)
        if args.action == "capabilities":
            return _capabilities(manager, args.name or config.current_provider)
        return _list(manager, config.current_provider, failures)
    except HowError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
