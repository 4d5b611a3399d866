"""Configuration model for how, stored as camelCase YAML."""

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

DEFAULT_MAX_TOKENS = 1000


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ProviderConfig(_CamelModel):
    """Credentials and tuning for one LLM provider."""

    type: str = ""
    api_key: str | None = None
    model: str = ""
    base_url: str | None = None
    max_tokens: int = DEFAULT_MAX_TOKENS
    temperature: float | None = None
    top_p: float | None = None
    system_prompt: str | None = None
    custom_headers: dict[str, str] = Field(default_factory=dict)


class ContextConfig(_CamelModel):
    include_files: bool = True
    include_history: int = 5
    include_environment: bool = False
    include_git: bool = True
    max_context_size: int = 10000
    exclude_patterns: list[str] = Field(default_factory=list)


class DisplayConfig(_CamelModel):
    syntax_highlight: bool = True
    show_context: bool = False
    emoji: bool = True
    color: bool = True
    preset: str = "compact"


class HistoryConfig(_CamelModel):
    enabled: bool = True
    max_size: int = 100
    file_path: str | None = None


class HowConfig(_CamelModel):
    """Runtime configuration for how."""

    current_provider: str = ""
    providers: dict[str, ProviderConfig] = Field(default_factory=dict)
    context: ContextConfig = Field(default_factory=ContextConfig)
    display: DisplayConfig = Field(default_factory=DisplayConfig)
    history: HistoryConfig = Field(default_factory=HistoryConfig)

    def current_provider_config(self) -> ProviderConfig | None:
        return self.providers.get(self.current_provider)
