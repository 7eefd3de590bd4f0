"""Provider-specific errors."""


class LLMProviderError(Exception):
    """Base exception for LLM provider errors.

    Raised when a provider call fails or returns content that cannot be parsed.
    """

    pass
