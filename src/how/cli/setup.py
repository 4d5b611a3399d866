"""`how setup` command implementation."""

import argparse
import getpass
import sys

from how.cli.shared import add_common_arguments, configure_logging
from how.config import PROVIDERS, load_config, save_config
from how.errors import HowError
from how.models import PRESETS, HowConfig, ProviderConfig

API_KEY_CLI_WARNING = (
    "Warning: --api-key may leak secrets via shell history and process lists. "
    "Prefer the interactive `how setup` prompt or provider API key environment variables."
)


def build_parser() -> argparse.ArgumentParser:
    """Build parser for the setup command."""
    parser = argparse.ArgumentParser(
        prog="how setup",
        description="Configure the provider, model, and display preferences",
    )
    add_common_arguments(parser)
    parser.add_argument(
        "--interactive",
        action="store_true",
        help="Run the interactive wizard (default when no explicit options are given)",
    )
    parser.add_argument("--provider", choices=sorted(PROVIDERS), help="Provider to use")
    parser.add_argument("--model", help="Model name for the provider")
    parser.add_argument(
        "--api-key",
        help="API key to store in config (not recommended; may leak via shell history)",
    )
    parser.add_argument("--base-url", help="Custom API endpoint (e.g. an Ollama host)")
    parser.add_argument("--preset", choices=sorted(PRESETS), help="Default formatter preset")
    return parser


def _ask(question: str, default: str = "") -> str:
    suffix = f" [{default}]" if default else ""
    answer = input(f"{question}{suffix}: ").strip()
    return answer or default


def _ask_bool(question: str, default: bool) -> bool:
    hint = "Y/n" if default else "y/N"
    answer = input(f"{question} [{hint}]: ").strip().lower()
    if not answer:
        return default
    return answer in {"y", "yes"}


def _choose_provider(default: str) -> str:
    names = sorted(PROVIDERS)
    print("Available providers:")
    for i, name in enumerate(names, start=1):
        print(f"  {i}. {name:<10} {PROVIDERS[name]['label']}")
    while True:
        answer = _ask("Provider", default or names[0])
        if answer.isdigit() and 1 <= int(answer) <= len(names):
            return names[int(answer) - 1]
        if answer in PROVIDERS:
            return answer
        print(f"Unknown provider {answer!r}.")


def run_wizard(existing: HowConfig) -> HowConfig:
    """Prompt for every setting, using the existing config as defaults."""
    config = existing.model_copy(deep=True)
    print("how setup\n")

    name = _choose_provider(config.current_provider)
    spec = PROVIDERS[name]
    provider = config.providers.get(name) or ProviderConfig(type=name)
    provider.type = name
    provider.model = _ask("Model", provider.model or spec["default_model"])

    if spec["env_key"]:
        hint = " (leave empty to keep the stored key)" if provider.api_key else ""
        hint = hint or f" (leave empty to use ${spec['env_key']})"
        api_key = getpass.getpass(f"API key{hint}: ").strip()
        if api_key:
            provider.api_key = api_key
    else:
        provider.base_url = _ask("Base URL", provider.base_url or "http://localhost:11434")

    config.providers[name] = provider
    config.current_provider = name

    print("\nContext")
    config.context.include_files = _ask_bool(
        "Include directory listing", config.context.include_files
    )
    config.context.include_git = _ask_bool("Include git information", config.context.include_git)
    history = _ask("Recent shell commands to include", str(config.context.include_history))
    if history.isdigit():
        config.context.include_history = int(history)
    config.context.include_environment = _ask_bool(
        "Include environment variables", config.context.include_environment
    )

    print("\nDisplay")
    config.display.color = _ask_bool("Use colors", config.display.color)
    config.display.emoji = _ask_bool("Use emoji", config.display.emoji)
    preset = _ask(f"Formatter preset ({', '.join(sorted(PRESETS))})", config.display.preset)
    if preset in PRESETS:
        config.display.preset = preset
    return config


def apply_options(existing: HowConfig, args: argparse.Namespace) -> HowConfig:
    """Apply explicit command-line options without prompting."""
    config = existing.model_copy(deep=True)
    name = args.provider or config.current_provider
    if not name:
        raise ValueError("--provider is required when no provider is configured")

    provider = config.providers.get(name) or ProviderConfig(type=name)
    provider.type = provider.type or name
    if args.model is not None:
        provider.model = args.model
    elif not provider.model and name in PROVIDERS:
        provider.model = PROVIDERS[name]["default_model"]
    if args.api_key is not None:
        provider.api_key = args.api_key
    if args.base_url is not None:
        provider.base_url = args.base_url

    config.providers[name] = provider
    config.current_provider = name
    if args.preset is not None:
        config.display.preset = args.preset
    return config


def run(argv: list[str]) -> int:
    """Execute the setup command."""
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.debug)

    if args.api_key is not None:
        print(API_KEY_CLI_WARNING, file=sys.stderr)

    has_explicit_options = any(
        value is not None
        for value in (args.provider, args.model, args.api_key, args.base_url, args.preset)
    )
    interactive = args.interactive or not has_explicit_options

    try:
        existing = load_config(args.config, apply_env=False)
        if interactive:
            updated = run_wizard(existing)
        else:
            updated = apply_options(existing, args)
        path = save_config(updated, args.config)
    except (HowError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except (EOFError, KeyboardInterrupt):
        print("\nSetup cancelled.", file=sys.stderr)
        return 1

    provider = updated.current_provider_config()
    print(f"\nConfiguration saved to {path}")
    print(f"  provider: {updated.current_provider}")
    print(f"  model: {provider.model if provider else '(not set)'}")
    print(f"  api_key: {'set' if provider and provider.api_key else 'not set'}")
    print(f"  preset: {updated.display.preset}")
    print("")
    return 0
