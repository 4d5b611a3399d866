"""LLM provider clients backed by LiteLLM."""

import json
import logging
import time
from collections.abc import Callable, Iterator

import litellm

from how.config import PROVIDERS
from how.errors import (
    InvalidAPIKeyError,
    InvalidModelError,
    ProviderError,
    ProviderNotFoundError,
    RateLimitError,
    ServiceUnavailableError,
)
from how.models import (
    Capabilities,
    Context,
    ProviderConfig,
    ProviderInfo,
    Response,
    StreamChunk,
)
from how.prompt import build_messages

log = logging.getLogger(__name__)

# Suppress litellm's noisy logging
litellm.suppress_debug_info = True

MAX_TOKENS_LIMIT = 8192
DEFAULT_CONTEXT_SIZE = 8192

# Provider types whose models LiteLLM routes by a "<type>/" prefix.
_PREFIXED_TYPES = frozenset({"anthropic", "gemini", "ollama"})


class LiteLLMProvider:
    """One configured provider, talking to its API through ``litellm.completion``."""

    # Upper bound on the rendered system context, in characters.
    max_context_size: int | None = None

    def __init__(self, name: str, config: ProviderConfig) -> None:
        self.name = name
        self.config = config
        self.type = config.type or name

    @property
    def model(self) -> str:
        """Model identifier in LiteLLM format."""
        model = self.config.model
        if model and self.type in _PREFIXED_TYPES and not model.startswith(f"{self.type}/"):
            return f"{self.type}/{model}"
        return model

    def _completion_kwargs(self, messages: list, stream: bool = False) -> dict:
        kwargs: dict = {
            "model": self.model,
            "messages": messages,
            "max_tokens": self.config.max_tokens,
        }
        if stream:
            kwargs["stream"] = True
        if self.config.api_key:
            kwargs["api_key"] = self.config.api_key
        if self.config.base_url:
            kwargs["api_base"] = self.config.base_url
        if self.config.temperature is not None:
            kwargs["temperature"] = self.config.temperature
        if self.config.top_p is not None:
            kwargs["top_p"] = self.config.top_p
        if self.config.custom_headers:
            kwargs["extra_headers"] = dict(self.config.custom_headers)
        return kwargs

    def _messages(self, prompt: str, context: Context | None) -> list:
        messages = build_messages(
            prompt,
            context,
            system_prompt=self.config.system_prompt,
            max_context_size=self.max_context_size,
        )
        log.debug("model=%s", self.model)
        log.debug("messages=%s", json.dumps(messages, indent=2))
        return messages

    def send_prompt(self, prompt: str, context: Context | None = None) -> Response:
        """Send a prompt and wait for the complete answer."""
        messages = self._messages(prompt, context)
        start = time.monotonic()
        try:
            response = litellm.completion(**self._completion_kwargs(messages))
        except Exception as e:
            raise self._translate_error(e) from e
        elapsed = time.monotonic() - start

        content = response.choices[0].message.content or ""
        usage = getattr(response, "usage", None)
        tokens = getattr(usage, "total_tokens", 0) or 0
        log.debug("response: %d chars, %d tokens, %.2fs", len(content), tokens, elapsed)
        return Response(
            text=content,
            model=getattr(response, "model", None) or self.model,
            provider=self.type,
            tokens_used=tokens,
            response_time=elapsed,
        )

    def send_prompt_stream(
        self, prompt: str, context: Context | None = None
    ) -> Iterator[StreamChunk]:
        """Yield the answer piece by piece.

        The stream always ends with a chunk whose ``done`` flag is set. A
        failure is reported in that final chunk's ``error`` instead of being
        raised.
        """
        messages = self._messages(prompt, context)
        try:
            stream = litellm.completion(**self._completion_kwargs(messages, stream=True))
            for part in stream:
                if not part.choices:
                    continue
                text = part.choices[0].delta.content
                if text:
                    yield StreamChunk(text=text)
        except Exception as e:
            log.debug("stream failed: %s", e)
            yield StreamChunk(done=True, error=self._translate_error(e))
            return
        yield StreamChunk(done=True)

    def validate_config(self) -> None:
        """Raise a ProviderError subclass when the config cannot work."""
        spec = PROVIDERS.get(self.type)
        needs_key = spec is None or spec["env_key"] is not None
        if needs_key and not self.config.api_key:
            raise InvalidAPIKeyError(self.name)
        if not self.config.model:
            raise InvalidModelError(self.name)
        if not 1 <= self.config.max_tokens <= MAX_TOKENS_LIMIT:
            raise ProviderError(
                f"max_tokens for provider '{self.name}' must be between 1 and "
                f"{MAX_TOKENS_LIMIT}, got {self.config.max_tokens}"
            )

    def get_info(self) -> ProviderInfo:
        spec = PROVIDERS.get(self.type)
        label = spec["label"] if spec else self.type
        return ProviderInfo(
            name=self.name,
            type=self.type,
            model=self.config.model,
            description=f"{label} via LiteLLM",
        )

    def get_capabilities(self) -> Capabilities:
        """Describe the model using LiteLLM's model registry where it knows the model."""
        info: dict = {}
        try:
            info = dict(litellm.get_model_info(self.model))
        except Exception as e:
            log.debug("no model info for %s: %s", self.model, e)
        return Capabilities(
            streaming=True,
            function_calling=bool(info.get("supports_function_calling")),
            code_execution=False,
            image_analysis=bool(info.get("supports_vision")),
            conversation_memory=True,
            max_context_size=info.get("max_input_tokens") or DEFAULT_CONTEXT_SIZE,
            max_tokens=info.get("max_output_tokens") or MAX_TOKENS_LIMIT,
        )

    def get_models(self) -> list[str]:
        """Models LiteLLM knows for this provider type."""
        return sorted(litellm.models_by_provider.get(self.type, []))

    def _translate_error(self, error: Exception) -> ProviderError:
        if isinstance(error, ProviderError):
            return error
        if isinstance(error, litellm.AuthenticationError):
            return InvalidAPIKeyError(self.name)
        if isinstance(error, litellm.NotFoundError):
            return InvalidModelError(self.name)
        if isinstance(error, litellm.RateLimitError):
            return RateLimitError(f"rate limited by provider '{self.name}': {error}")
        if isinstance(
            error,
            (litellm.ServiceUnavailableError, litellm.APIConnectionError, litellm.Timeout),
        ):
            return ServiceUnavailableError(f"provider '{self.name}' is unavailable: {error}")
        return ProviderError(f"provider '{self.name}' failed: {error}")


ProviderFactory = Callable[[str, ProviderConfig], LiteLLMProvider]


class ProviderManager:
    """Registry of configured providers, keyed by their config name."""

    def __init__(self, factories: dict[str, ProviderFactory] | None = None) -> None:
        self._factories: dict[str, ProviderFactory] = (
            dict(factories) if factories is not None else dict.fromkeys(PROVIDERS, LiteLLMProvider)
        )
        self._providers: dict[str, LiteLLMProvider] = {}

    def register(self, provider_type: str, factory: ProviderFactory) -> None:
        self._factories[provider_type] = factory

    def available_types(self) -> list[str]:
        return sorted(self._factories)

    def create_provider(self, name: str, config: ProviderConfig) -> LiteLLMProvider:
        """Build and validate a provider without registering it."""
        provider_type = config.type or name
        factory = self._factories.get(provider_type)
        if factory is None:
            raise ProviderError(f"unknown provider type: {provider_type}")
        provider = factory(name, config)
        provider.validate_config()
        return provider

    def load_providers(self, providers: dict[str, ProviderConfig]) -> dict[str, ProviderError]:
        """Create every configured provider; return the ones that failed by name."""
        failures: dict[str, ProviderError] = {}
        for name, config in providers.items():
            try:
                self._providers[name] = self.create_provider(name, config)
            except ProviderError as e:
                log.debug("provider %s not loaded: %s", name, e)
                failures[name] = e
        return failures

    def get_provider(self, name: str) -> LiteLLMProvider:
        provider = self._providers.get(name)
        if provider is None:
            raise ProviderNotFoundError(name)
        return provider

    def list_providers(self) -> list[ProviderInfo]:
        return [self._providers[name].get_info() for name in sorted(self._providers)]

    def get_capabilities(self, name: str) -> Capabilities:
        return self.get_provider(name).get_capabilities()

    def health_check(self) -> dict[str, Exception | None]:
        """Send a trivial prompt to every provider; None means healthy."""
        results: dict[str, Exception | None] = {}
        for name in sorted(self._providers):
            try:
                self._providers[name].send_prompt("Hello")
                results[name] = None
            except ProviderError as e:
                results[name] = e
        return results
