"""Abstract base class for answer generation providers."""

from abc import ABC, abstractmethod

from ...config.logging import LoggerMixin
from ...config.settings import Settings
from ...core.exceptions import GenerationError


class GenerationProvider(ABC, LoggerMixin):
    """Turns an assembled prompt into answer text."""

    def __init__(self, settings: Settings):
        self.settings = settings
        self._initialized = False

    @abstractmethod
    async def initialize(self) -> None:
        """Initialize the provider."""
        pass

    @abstractmethod
    async def close(self) -> None:
        """Release provider resources."""
        pass

    @abstractmethod
    async def generate(self, prompt: str) -> str:
        """Generate a completion for the prompt."""
        pass

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Get the name of this provider."""
        pass

    @property
    def is_initialized(self) -> bool:
        return self._initialized

    def _ensure_initialized(self) -> None:
        if not self._initialized:
            raise GenerationError(f"{self.provider_name} generation provider not initialized")
