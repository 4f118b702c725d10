"""Generation manager that selects and drives a provider."""

from typing import Optional

from ...config.logging import LoggerMixin
from ...config.settings import Settings
from ...core.exceptions import GenerationError
from .api import ApiGenerationProvider
from .base import GenerationProvider
from .echo import EchoGenerationProvider


class GenerationManager(LoggerMixin):
    """Generates answer text from grounded prompts."""

    def __init__(self, settings: Settings, provider: Optional[GenerationProvider] = None):
        self.settings = settings
        self.provider: Optional[GenerationProvider] = provider
        self._initialized = False

    async def initialize(self) -> None:
        """Initialize the configured provider."""
        try:
            if self.provider is None:
                if self.settings.GENERATION_PROVIDER == "echo":
                    self.provider = EchoGenerationProvider(self.settings)
                else:
                    self.provider = ApiGenerationProvider(self.settings)

            if not self.provider.is_initialized:
                await self.provider.initialize()
            self._initialized = True

            self.logger.info(
                "Generation manager initialized",
                provider=self.provider.provider_name,
                model=self.settings.GENERATION_MODEL,
            )

        except GenerationError:
            raise
        except Exception as e:
            self.logger.error("Failed to initialize generation manager", error=str(e))
            raise GenerationError(f"Generation manager initialization failed: {e}")

    async def close(self) -> None:
        """Close the generation manager."""
        if self.provider:
            await self.provider.close()
            self.provider = None

        self._initialized = False
        self.logger.info("Generation manager closed")

    async def generate(self, prompt: str) -> str:
        """Generate answer text; the provider's reply is returned verbatim."""
        if not self._initialized or not self.provider:
            raise GenerationError("Generation manager not initialized")

        try:
            return await self.provider.generate(prompt)
        except GenerationError:
            raise
        except Exception as e:
            self.logger.error("Generation provider failed", error=str(e))
            raise GenerationError(f"Generation failed: {e}", self.settings.GENERATION_MODEL)
