"""Unit tests for how.providers."""

from types import SimpleNamespace
from unittest.mock import MagicMock, patch

import litellm
import pytest

from how.errors import (
    InvalidAPIKeyError,
    InvalidModelError,
    ProviderError,
    ProviderNotFoundError,
    RateLimitError,
    ServiceUnavailableError,
)
from how.models import Context, HistoryEntry, ProviderConfig
from how.providers import LiteLLMProvider, ProviderManager


def _config(**overrides) -> ProviderConfig:
    values = {"type": "anthropic", "api_key": "sk-test", "model": "claude-3-5-sonnet-latest"}
    values.update(overrides)
    return ProviderConfig(**values)


def _completion(content="Use `ls`.", total_tokens=42, model="claude-x"):
    return SimpleNamespace(
        choices=[SimpleNamespace(message=SimpleNamespace(content=content))],
        usage=SimpleNamespace(total_tokens=total_tokens),
        model=model,
    )


def _stream_part(text):
    return SimpleNamespace(choices=[SimpleNamespace(delta=SimpleNamespace(content=text))])


# ---------------------------------------------------------------------------
# send_prompt()
# ---------------------------------------------------------------------------


class TestSendPrompt:
    def test_returns_response_with_usage(self):
        provider = LiteLLMProvider("anthropic", _config())
        with patch("how.providers.litellm.completion", return_value=_completion()) as mock:
            response = provider.send_prompt("list files")

        assert response.text == "Use `ls`."
        assert response.tokens_used == 42
        assert response.model == "claude-x"
        assert response.provider == "anthropic"
        assert response.response_time >= 0
        kwargs = mock.call_args.kwargs
        assert kwargs["model"] == "anthropic/claude-3-5-sonnet-latest"
        assert kwargs["api_key"] == "sk-test"
        assert kwargs["max_tokens"] == 1000
        assert kwargs["messages"][-1] == {"role": "user", "content": "list files"}

    def test_optional_parameters_forwarded(self):
        config = _config(
            base_url="http://proxy",
            temperature=0.2,
            top_p=0.9,
            custom_headers={"X-A": "1"},
        )
        provider = LiteLLMProvider("anthropic", config)
        with patch("how.providers.litellm.completion", return_value=_completion()) as mock:
            provider.send_prompt("hi")

        kwargs = mock.call_args.kwargs
        assert kwargs["api_base"] == "http://proxy"
        assert kwargs["temperature"] == 0.2
        assert kwargs["top_p"] == 0.9
        assert kwargs["extra_headers"] == {"X-A": "1"}

    def test_openai_model_not_prefixed(self):
        provider = LiteLLMProvider("work", _config(type="openai", model="gpt-4o-mini"))
        assert provider.model == "gpt-4o-mini"

    def test_prefixed_model_left_alone(self):
        provider = LiteLLMProvider("g", _config(type="gemini", model="gemini/gemini-2.0-flash"))
        assert provider.model == "gemini/gemini-2.0-flash"

    def test_previous_prompts_become_turns(self):
        context = Context(
            working_directory="/tmp/project",
            previous_prompts=[HistoryEntry(prompt="first", response="answer")],
        )
        provider = LiteLLMProvider("anthropic", _config())
        with patch("how.providers.litellm.completion", return_value=_completion()) as mock:
            provider.send_prompt("second", context)

        messages = mock.call_args.kwargs["messages"]
        assert [m["role"] for m in messages] == ["system", "user", "assistant", "user"]
        assert "/tmp/project" in messages[0]["content"]

    def test_custom_system_prompt_template(self):
        provider = LiteLLMProvider("anthropic", _config(system_prompt="Be brief. $system_context"))
        with patch("how.providers.litellm.completion", return_value=_completion()) as mock:
            provider.send_prompt("hi", Context(shell="zsh"))

        assert mock.call_args.kwargs["messages"][0]["content"] == "Be brief. Shell: zsh"

    def test_none_content_becomes_empty_text(self):
        provider = LiteLLMProvider("anthropic", _config())
        with patch("how.providers.litellm.completion", return_value=_completion(content=None)):
            assert provider.send_prompt("hi").text == ""


class TestErrorTranslation:
    @pytest.mark.parametrize(
        ("raised", "expected"),
        [
            (
                litellm.AuthenticationError("bad key", llm_provider="anthropic", model="m"),
                InvalidAPIKeyError,
            ),
            (
                litellm.NotFoundError("no model", llm_provider="anthropic", model="m"),
                InvalidModelError,
            ),
            (
                litellm.RateLimitError("slow down", llm_provider="anthropic", model="m"),
                RateLimitError,
            ),
            (
                litellm.ServiceUnavailableError("down", llm_provider="anthropic", model="m"),
                ServiceUnavailableError,
            ),
            (RuntimeError("boom"), ProviderError),
        ],
    )
    def test_litellm_errors_translated(self, raised, expected):
        provider = LiteLLMProvider("anthropic", _config())
        with patch("how.providers.litellm.completion", side_effect=raised):
            with pytest.raises(expected) as exc_info:
                provider.send_prompt("hi")

        assert exc_info.value.__cause__ is raised


# ---------------------------------------------------------------------------
# send_prompt_stream()
# ---------------------------------------------------------------------------


class TestSendPromptStream:
    def test_yields_text_then_done(self):
        parts = [_stream_part("Hel"), _stream_part(None), _stream_part("lo")]
        provider = LiteLLMProvider("anthropic", _config())
        with patch("how.providers.litellm.completion", return_value=iter(parts)) as mock:
            chunks = list(provider.send_prompt_stream("hi"))

        assert [c.text for c in chunks] == ["Hel", "lo", ""]
        assert [c.done for c in chunks] == [False, False, True]
        assert chunks[-1].error is None
        assert mock.call_args.kwargs["stream"] is True

    def test_error_reported_in_final_chunk(self):
        def broken():
            yield _stream_part("partial")
            raise litellm.APIConnectionError("reset", llm_provider="anthropic", model="m")

        provider = LiteLLMProvider("anthropic", _config())
        with patch("how.providers.litellm.completion", return_value=broken()):
            chunks = list(provider.send_prompt_stream("hi"))

        assert chunks[0].text == "partial"
        assert chunks[-1].done is True
        assert isinstance(chunks[-1].error, ServiceUnavailableError)


# ---------------------------------------------------------------------------
# validate_config(), info and capabilities
# ---------------------------------------------------------------------------


class TestValidateConfig:
    def test_valid_config_passes(self):
        LiteLLMProvider("anthropic", _config()).validate_config()

    def test_missing_api_key(self):
        with pytest.raises(InvalidAPIKeyError, match="anthropic"):
            LiteLLMProvider("anthropic", _config(api_key=None)).validate_config()

    def test_ollama_needs_no_key(self):
        LiteLLMProvider("ollama", _config(type="ollama", api_key=None)).validate_config()

    def test_missing_model(self):
        with pytest.raises(InvalidModelError):
            LiteLLMProvider("anthropic", _config(model="")).validate_config()

    @pytest.mark.parametrize("max_tokens", [0, -1, 8193])
    def test_max_tokens_out_of_range(self, max_tokens):
        with pytest.raises(ProviderError, match="max_tokens"):
            LiteLLMProvider("anthropic", _config(max_tokens=max_tokens)).validate_config()

    @pytest.mark.parametrize("max_tokens", [1, 8192])
    def test_max_tokens_bounds_accepted(self, max_tokens):
        LiteLLMProvider("anthropic", _config(max_tokens=max_tokens)).validate_config()


class TestInfoAndCapabilities:
    def test_get_info(self):
        info = LiteLLMProvider("work", _config()).get_info()

        assert info.name == "work"
        assert info.type == "anthropic"
        assert info.model == "claude-3-5-sonnet-latest"
        assert "Anthropic" in info.description

    def test_capabilities_from_model_info(self):
        model_info = {
            "max_input_tokens": 200000,
            "max_output_tokens": 4096,
            "supports_function_calling": True,
            "supports_vision": True,
        }
        provider = LiteLLMProvider("anthropic", _config())
        with patch("how.providers.litellm.get_model_info", return_value=model_info):
            caps = provider.get_capabilities()

        assert caps.streaming is True
        assert caps.function_calling is True
        assert caps.image_analysis is True
        assert caps.max_context_size == 200000
        assert caps.max_tokens == 4096

    def test_capabilities_for_unknown_model(self):
        provider = LiteLLMProvider("anthropic", _config())
        with patch("how.providers.litellm.get_model_info", side_effect=Exception("unknown")):
            caps = provider.get_capabilities()

        assert caps.function_calling is False
        assert caps.max_context_size == 8192

    def test_get_models(self):
        provider = LiteLLMProvider("anthropic", _config())
        with patch.dict(
            "how.providers.litellm.models_by_provider", {"anthropic": ["b", "a"]}, clear=False
        ):
            assert provider.get_models() == ["a", "b"]


# ---------------------------------------------------------------------------
# ProviderManager
# ---------------------------------------------------------------------------


class TestProviderManager:
    def test_available_types(self):
        assert ProviderManager().available_types() == ["anthropic", "gemini", "ollama", "openai"]

    def test_load_list_and_get(self):
        manager = ProviderManager()
        failures = manager.load_providers(
            {
                "zeta": _config(type="openai", model="gpt-4o-mini"),
                "alpha": _config(),
            }
        )

        assert failures == {}
        assert [info.name for info in manager.list_providers()] == ["alpha", "zeta"]
        assert manager.get_provider("zeta").type == "openai"

    def test_failures_reported_not_raised(self):
        manager = ProviderManager()
        failures = manager.load_providers(
            {"good": _config(), "nokey": _config(api_key=None), "odd": _config(type="mystery")}
        )

        assert set(failures) == {"nokey", "odd"}
        assert isinstance(failures["nokey"], InvalidAPIKeyError)
        assert "unknown provider type" in str(failures["odd"])
        assert [info.name for info in manager.list_providers()] == ["good"]

    def test_type_defaults_to_name(self):
        manager = ProviderManager()
        provider = manager.create_provider("openai", _config(type="", model="gpt-4o-mini"))
        assert provider.type == "openai"

    def test_get_unknown_provider(self):
        with pytest.raises(ProviderNotFoundError, match="missing"):
            ProviderManager().get_provider("missing")

    def test_register_custom_factory(self):
        fake = MagicMock()
        factory = MagicMock(return_value=fake)
        manager = ProviderManager(factories={})
        manager.register("fake", factory)

        manager.load_providers({"f": _config(type="fake")})

        factory.assert_called_once()
        fake.validate_config.assert_called_once_with()
        assert manager.get_provider("f") is fake

    def test_health_check(self):
        manager = ProviderManager()
        manager.load_providers({"a": _config(), "b": _config()})
        with patch(
            "how.providers.litellm.completion",
            side_effect=[
                _completion(),
                litellm.RateLimitError("quota", llm_provider="anthropic", model="m"),
            ],
        ):
            results = manager.health_check()

        assert results["a"] is None
        assert isinstance(results["b"], RateLimitError)

    def test_get_capabilities_by_name(self):
        manager = ProviderManager()
        manager.load_providers({"a": _config()})
        with patch("how.providers.litellm.get_model_info", return_value={}):
            assert manager.get_capabilities("a").streaming is True
