"""Unit tests for how.config and the configuration models."""

import os
import stat

import pytest
import yaml

from how import config as config_mod
from how.config import apply_env_overrides, load_config, needs_setup, save_config
from how.errors import ConfigError
from how.models import HowConfig, ProviderConfig

SAMPLE_YAML = """\
currentProvider: anthropic
providers:
  anthropic:
    type: anthropic
    apiKey: sk-test
    model: claude-3-5-sonnet-latest
    maxTokens: 2000
    customHeaders:
      X-Team: shell
context:
  includeFiles: false
  includeHistory: 3
  excludePatterns: ["*.log"]
display:
  preset: colored
  emoji: false
history:
  maxSize: 20
"""


@pytest.fixture
def clean_env(monkeypatch):
    for name in ("HOW_CURRENT_PROVIDER", "HOW_MODEL", "HOW_API_KEY", "ANTHROPIC_API_KEY"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def config_file(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(SAMPLE_YAML)
    return path


# ---------------------------------------------------------------------------
# load_config()
# ---------------------------------------------------------------------------


class TestLoadConfig:
    def test_reads_camel_case_yaml(self, config_file, clean_env):
        config = load_config(config_file)

        assert config.current_provider == "anthropic"
        provider = config.current_provider_config()
        assert provider is not None
        assert provider.api_key == "sk-test"
        assert provider.max_tokens == 2000
        assert provider.custom_headers == {"X-Team": "shell"}
        assert config.context.include_files is False
        assert config.context.include_history == 3
        assert config.context.exclude_patterns == ["*.log"]
        assert config.display.preset == "colored"
        assert config.display.emoji is False
        assert config.history.max_size == 20

    def test_missing_file_gives_defaults(self, tmp_path, clean_env):
        config = load_config(tmp_path / "absent.yaml")

        assert config == HowConfig()
        assert config.display.preset == "compact"
        assert config.context.max_context_size == 10000

    def test_empty_file_gives_defaults(self, tmp_path, clean_env):
        path = tmp_path / "config.yaml"
        path.write_text("")
        assert load_config(path) == HowConfig()

    def test_invalid_yaml_raises(self, tmp_path, clean_env):
        path = tmp_path / "config.yaml"
        path.write_text("providers: [unclosed")
        with pytest.raises(ConfigError, match="cannot read"):
            load_config(path)

    def test_non_mapping_raises(self, tmp_path, clean_env):
        path = tmp_path / "config.yaml"
        path.write_text("- just\n- a list\n")
        with pytest.raises(ConfigError, match="mapping"):
            load_config(path)

    def test_schema_error_raises(self, tmp_path, clean_env):
        path = tmp_path / "config.yaml"
        path.write_text("context:\n  includeHistory: lots\n")
        with pytest.raises(ConfigError, match="invalid config"):
            load_config(path)

    def test_default_path_used(self, tmp_path, monkeypatch, clean_env):
        path = tmp_path / "config.yaml"
        path.write_text("currentProvider: openai\n")
        monkeypatch.setattr(config_mod, "CONFIG_FILE", path)

        assert load_config().current_provider == "openai"


# ---------------------------------------------------------------------------
# Environment overrides
# ---------------------------------------------------------------------------


class TestEnvOverrides:
    def test_how_variables_override_current_provider(self, config_file, monkeypatch, clean_env):
        monkeypatch.setenv("HOW_MODEL", "claude-3-haiku")
        monkeypatch.setenv("HOW_API_KEY", "sk-env")

        provider = load_config(config_file).current_provider_config()
        assert provider.model == "claude-3-haiku"
        assert provider.api_key == "sk-env"

    def test_switching_provider_creates_entry_with_default_model(self):
        config = apply_env_overrides(
            HowConfig(),
            {"HOW_CURRENT_PROVIDER": "openai", "HOW_API_KEY": "sk-x"},
        )

        provider = config.current_provider_config()
        assert config.current_provider == "openai"
        assert provider.type == "openai"
        assert provider.model == config_mod.PROVIDERS["openai"]["default_model"]
        assert provider.api_key == "sk-x"

    def test_provider_key_variable_fills_missing_key(self):
        config = HowConfig(
            current_provider="anthropic",
            providers={"anthropic": ProviderConfig(type="anthropic", model="m")},
        )
        apply_env_overrides(config, {"ANTHROPIC_API_KEY": "sk-ant"})
        assert config.current_provider_config().api_key == "sk-ant"

    def test_stored_key_wins_over_provider_key_variable(self):
        config = HowConfig(
            current_provider="anthropic",
            providers={"anthropic": ProviderConfig(type="anthropic", api_key="stored")},
        )
        apply_env_overrides(config, {"ANTHROPIC_API_KEY": "sk-ant"})
        assert config.current_provider_config().api_key == "stored"

    def test_apply_env_false_skips_overrides(self, config_file, monkeypatch, clean_env):
        monkeypatch.setenv("HOW_API_KEY", "sk-env")
        config = load_config(config_file, apply_env=False)
        assert config.current_provider_config().api_key == "sk-test"


# ---------------------------------------------------------------------------
# save_config() and needs_setup()
# ---------------------------------------------------------------------------


class TestSaveConfig:
    def test_round_trips_through_yaml(self, tmp_path, config_file, clean_env):
        original = load_config(config_file)
        target = tmp_path / "nested" / "config.yaml"

        save_config(original, target)

        assert load_config(target) == original

    def test_writes_camel_case_keys(self, tmp_path):
        config = HowConfig(
            current_provider="openai",
            providers={"openai": ProviderConfig(type="openai", api_key="k", model="gpt")},
        )
        target = tmp_path / "config.yaml"
        save_config(config, target)

        data = yaml.safe_load(target.read_text())
        assert data["currentProvider"] == "openai"
        assert data["providers"]["openai"]["apiKey"] == "k"
        assert "maxContextSize" in data["context"]

    @pytest.mark.skipif(os.name == "nt", reason="POSIX permissions")
    def test_file_is_private(self, tmp_path):
        target = tmp_path / "config.yaml"
        save_config(HowConfig(), target)
        assert stat.S_IMODE(target.stat().st_mode) == 0o600

    def test_leaves_no_temp_files(self, tmp_path):
        target = tmp_path / "config.yaml"
        save_config(HowConfig(), target)
        save_config(HowConfig(), target)
        assert [p.name for p in tmp_path.iterdir()] == ["config.yaml"]


class TestNeedsSetup:
    def test_true_without_file(self, tmp_path, clean_env):
        assert needs_setup(tmp_path / "absent.yaml") is True

    def test_false_with_configured_provider(self, config_file, clean_env):
        assert needs_setup(config_file) is False

    def test_true_when_current_provider_missing(self, tmp_path, clean_env):
        path = tmp_path / "config.yaml"
        path.write_text("currentProvider: openai\n")
        assert needs_setup(path) is True

    def test_true_on_broken_file(self, tmp_path, clean_env):
        path = tmp_path / "config.yaml"
        path.write_text(": : :\n\t- bad")
        assert needs_setup(path) is True
