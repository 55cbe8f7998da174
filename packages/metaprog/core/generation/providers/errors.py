"""Provider-specific errors."""

from metaprog.core.errors import MetaprogError


class LLMProviderError(MetaprogError):
    """Raised when a provider exhausts its retries or hits an unrecoverable error."""
