"""Exception hierarchy for how."""


class HowError(Exception):
    """Base class for errors surfaced to the CLI."""


class ConfigError(HowError):
    """The configuration file could not be read, parsed, or written."""


class ProviderError(HowError):
    """A provider could not be configured or failed to answer."""


class InvalidAPIKeyError(ProviderError):
    def __init__(self, provider: str) -> None:
        super().__init__(f"invalid or missing API key for provider '{provider}'")


class InvalidModelError(ProviderError):
    def __init__(self, provider: str) -> None:
        super().__init__(f"invalid or unsupported model for provider '{provider}'")


class ProviderNotFoundError(ProviderError):
    def __init__(self, name: str) -> None:
        super().__init__(f"provider '{name}' not found")
        self.name = name


class RateLimitError(ProviderError):
    """The provider refused the request because of rate limits or quota."""


class ServiceUnavailableError(ProviderError):
    """The provider could not be reached or returned a server error."""
