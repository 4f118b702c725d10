"""Chat-completions generation provider implementation."""

import asyncio
from typing import Any, Optional

import aiohttp

from ...core.exceptions import GenerationError
from .base import GenerationProvider


class ApiGenerationProvider(GenerationProvider):
    """Generation provider for OpenAI-compatible chat completion endpoints."""

    def __init__(self, settings):
        super().__init__(settings)
        self._session: Optional[aiohttp.ClientSession] = None

    @property
    def provider_name(self) -> str:
        return "api"

    @property
    def endpoint(self) -> str:
        return f"{self.settings.GENERATION_API_BASE.rstrip('/')}/v1/chat/completions"

    async def initialize(self) -> None:
        """Open the HTTP session."""
        if not self.settings.GENERATION_API_BASE:
            raise GenerationError(
                "GENERATION_API_BASE required for API provider", self.settings.GENERATION_MODEL
            )

        timeout = aiohttp.ClientTimeout(total=self.settings.GENERATION_TIMEOUT_SECONDS)
        self._session = aiohttp.ClientSession(timeout=timeout)
        self._initialized = True

        self.logger.info(
            "API generation provider initialized",
            api_base=self.settings.GENERATION_API_BASE,
            model=self.settings.GENERATION_MODEL,
        )

    async def close(self) -> None:
        """Close the HTTP session."""
        if self._session:
            await self._session.close()
            self._session = None

        self._initialized = False
        self.logger.info("API generation provider closed")

    async def generate(self, prompt: str) -> str:
        """Send the prompt as a single user message and return the reply text."""
        self._ensure_initialized()

        model = self.settings.GENERATION_MODEL
        headers = {"Content-Type": "application/json"}
        if self.settings.GENERATION_API_KEY:
            headers["Authorization"] = f"Bearer {self.settings.GENERATION_API_KEY}"

        payload = {
            "model": model,
            "messages": [{"role": "user", "content": prompt}],
            "temperature": self.settings.GENERATION_TEMPERATURE,
        }

        try:
            async with self._session.post(self.endpoint, headers=headers, json=payload) as response:
                if response.status != 200:
                    error_text = await response.text()
                    raise GenerationError(
                        f"Generation request failed: {response.status} - {error_text[:200]}", model
                    )
                data = await response.json()
        except GenerationError:
            self.logger.error("Generation request rejected", model=model)
            raise
        except asyncio.TimeoutError:
            self.logger.error("Generation request timed out", model=model)
            raise GenerationError(
                f"Generation request timed out after {self.settings.GENERATION_TIMEOUT_SECONDS}s", model
            )
        except (aiohttp.ClientError, ValueError) as e:
            self.logger.error("Generation service unreachable", model=model, error=str(e))
            raise GenerationError(f"Generation service error: {e}", model)

        text = self._extract_text(data)

        self.logger.debug("Answer generated", model=model, length=len(text))
        return text

    def _extract_text(self, data: Any) -> str:
        model = self.settings.GENERATION_MODEL
        choices = data.get("choices") if isinstance(data, dict) else None
        if not choices:
            raise GenerationError("Generation provider returned no candidate", model)

        message = choices[0].get("message") if isinstance(choices[0], dict) else None
        content = message.get("content") if isinstance(message, dict) else None

        # Some providers return content as a list of typed parts
        if isinstance(content, list):
            content = "".join(
                part.get("text", "") for part in content if isinstance(part, dict)
            )

        if not isinstance(content, str):
            raise GenerationError("Generation provider returned no candidate", model)
        return content
