"""Configuration loading and saving for how."""

import logging
import os
import time
from collections.abc import Mapping
from pathlib import Path

import yaml
from pydantic import ValidationError

from how.errors import ConfigError
from how.models import HowConfig, ProviderConfig, ProviderSpec

log = logging.getLogger(__name__)

CONFIG_DIR = Path.home() / ".config" / "how"
CONFIG_FILE = CONFIG_DIR / "config.yaml"
ENV_PREFIX = "HOW_"

PROVIDERS: dict[str, ProviderSpec] = {
    "anthropic": {
        "env_key": "ANTHROPIC_API_KEY",
        "label": "Anthropic (Claude)",
        "default_model": "claude-3-5-sonnet-latest",
    },
    "openai": {
        "env_key": "OPENAI_API_KEY",
        "label": "OpenAI",
        "default_model": "gpt-4o-mini",
    },
    "gemini": {
        "env_key": "GEMINI_API_KEY",
        "label": "Google Gemini",
        "default_model": "gemini-2.0-flash",
    },
    "ollama": {
        "env_key": None,
        "label": "Ollama (local)",
        "default_model": "llama3",
    },
}


def _config_path(path: str | Path | None) -> Path:
    return Path(path).expanduser() if path else CONFIG_FILE


def load_config(path: str | Path | None = None, apply_env: bool = True) -> HowConfig:
    """Load config from disk, then apply ``HOW_*`` environment overrides."""
    config_path = _config_path(path)
    data: object = {}
    try:
        with open(config_path, encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
        log.debug("loaded config from %s", config_path)
    except FileNotFoundError:
        log.warning("no config file at %s, using defaults", config_path)
    except (OSError, yaml.YAMLError) as e:
        raise ConfigError(f"cannot read config file {config_path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"config file {config_path} must contain a mapping")

    try:
        config = HowConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"invalid config file {config_path}: {e}") from e

    return apply_env_overrides(config) if apply_env else config


def apply_env_overrides(
    config: HowConfig, environ: Mapping[str, str] | None = None
) -> HowConfig:
    """Overlay ``HOW_*`` variables and provider API-key variables onto config."""
    env = os.environ if environ is None else environ

    provider_name = env.get(f"{ENV_PREFIX}CURRENT_PROVIDER")
    if provider_name:
        log.debug("current provider overridden from environment: %s", provider_name)
        config.current_provider = provider_name

    if not config.current_provider:
        return config

    model = env.get(f"{ENV_PREFIX}MODEL")
    api_key = env.get(f"{ENV_PREFIX}API_KEY")
    provider = config.providers.get(config.current_provider)
    if provider is None and (model or api_key):
        provider = ProviderConfig(type=config.current_provider)
        spec = PROVIDERS.get(config.current_provider)
        if spec is not None:
            provider.model = spec["default_model"]
        config.providers[config.current_provider] = provider
    if provider is None:
        return config

    if model:
        provider.model = model
    if api_key:
        provider.api_key = api_key

    spec = PROVIDERS.get(provider.type or config.current_provider)
    if not provider.api_key and spec is not None and spec["env_key"]:
        provider.api_key = env.get(spec["env_key"]) or None
        if provider.api_key:
            log.debug("using API key from %s", spec["env_key"])
    return config


def save_config(config: HowConfig, path: str | Path | None = None) -> Path:
    """Write config as YAML with camelCase keys, readable only by the owner."""
    config_path = _config_path(path)
    data = config.model_dump(by_alias=True, exclude_none=True)
    temp_file = config_path.parent / f".{config_path.name}.{os.getpid()}.{time.time_ns()}.tmp"
    try:
        config_path.parent.mkdir(parents=True, exist_ok=True, mode=0o700)
        fd = os.open(temp_file, os.O_WRONLY | os.O_CREAT | os.O_EXCL, 0o600)
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            yaml.safe_dump(data, f, sort_keys=False, default_flow_style=False)
        os.replace(temp_file, config_path)
        os.chmod(config_path, 0o600)
    except OSError as e:
        temp_file.unlink(missing_ok=True)
        raise ConfigError(f"cannot write config file {config_path}: {e}") from e
    log.debug("saved config to %s", config_path)
    return config_path


def needs_setup(path: str | Path | None = None) -> bool:
    """Return True when no usable provider is configured."""
    config_path = _config_path(path)
    if not config_path.exists() and not os.environ.get(f"{ENV_PREFIX}CURRENT_PROVIDER"):
        return True
    try:
        config = load_config(config_path)
    except ConfigError:
        return True
    return config.current_provider_config() is None
