"""Answer generation from grounded prompts.

- ApiGenerationProvider: OpenAI-compatible chat completions over aiohttp
- EchoGenerationProvider: returns the prompt, for offline development
- GenerationManager: selects the provider from GENERATION_PROVIDER
"""

from .manager import GenerationManager

__all__ = ["GenerationManager"]
