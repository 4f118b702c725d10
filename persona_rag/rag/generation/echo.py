"""Offline generation provider for local development."""

from .base import GenerationProvider


class EchoGenerationProvider(GenerationProvider):
    """Returns the assembled prompt instead of calling a model."""

    @property
    def provider_name(self) -> str:
        return "echo"

    async def initialize(self) -> None:
        self._initialized = True
        self.logger.info("Echo generation provider initialized")

    async def close(self) -> None:
        self._initialized = False

    async def generate(self, prompt: str) -> str:
        self._ensure_initialized()
        return f"[ECHO RESPONSE]\n{prompt}"
