"""Abstract base for generation providers, and the errors they raise."""

from abc import ABC, abstractmethod
from collections.abc import Sequence

from civicscoach.errors import CoachError
from civicscoach.models import GenerationResult, PromptMessage, ResolvedGenerationConfig


class ProviderError(CoachError):
    """Raised when a provider call fails."""

    def __init__(self, provider_name: str, message: str) -> None:
        self.provider_name = provider_name
        super().__init__(f"[{provider_name}] {message}")
        self.message = message


class ConfigurationError(ProviderError):
    """Missing credential. Fatal, never retried."""


class UpstreamAuthError(ProviderError):
    """Credential rejected by the upstream API."""


class UpstreamError(ProviderError):
    """Any other upstream failure; carries the upstream message."""


class GenerationProvider(ABC):
    """Abstract base for text-generation backends."""

    @abstractmethod
    def name(self) -> str:
        """Return the short provider name (e.g. 'gemini')."""
        ...

    @abstractmethod
    def model_string(self) -> str:
        """Return the actual model identifier string."""
        ...

    @abstractmethod
    async def invoke(
        self,
        messages: Sequence[PromptMessage],
        config: ResolvedGenerationConfig,
        max_output_tokens: int,
        query: str | None = None,
    ) -> GenerationResult:
        """Generate text for the given messages.

        Args:
            messages: Ordered prompt messages, instruction first.
            config: Resolved sampling parameters.
            max_output_tokens: Output token cap.
            query: Literal user query, used to pick a rate-limit fallback payload.

        Returns:
            GenerationResult; ``demo`` is True for the rate-limit fallback.

        Raises:
            ConfigurationError: No API key configured.
            UpstreamAuthError: API key rejected.
            UpstreamError: Any other API failure or timeout.
        """
        ...
