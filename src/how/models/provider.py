"""Provider metadata and response models."""

from typing import TypedDict

from pydantic import BaseModel, ConfigDict


class ProviderInfo(BaseModel):
    name: str
    type: str
    model: str
    description: str = ""


class Capabilities(BaseModel):
    streaming: bool = False
    function_calling: bool = False
    code_execution: bool = False
    image_analysis: bool = False
    conversation_memory: bool = False
    max_context_size: int = 0
    max_tokens: int = 0


class Response(BaseModel):
    """A complete provider answer plus usage metadata."""

    text: str
    model: str = ""
    provider: str = ""
    tokens_used: int = 0
    response_time: float = 0.0


class StreamChunk(BaseModel):
    """One piece of a streamed answer; ``done`` marks the end of the stream."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    text: str = ""
    done: bool = False
    error: Exception | None = None


class ProviderSpec(TypedDict):
    """Static metadata for a supported provider type."""

    env_key: str | None
    label: str
    default_model: str
