"""Text-generation backends: Gemini, local Ollama, and Claude.

Each backend exposes ``generate_content(prompt) -> str``. Backends do not
retry; rate-limit handling lives in :mod:`highlight_reel.generation.queue`.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Protocol

import httpx
from anthropic import Anthropic
from anthropic.types import TextBlock

from highlight_reel.config import Settings, settings
from highlight_reel.errors import GenerationFailure
from highlight_reel.pipeline_config import GenerationProvider

logger = logging.getLogger(__name__)


class GenerationBackend(Protocol):
    def generate_content(self, prompt: str) -> str:
        """Return the model's text response to *prompt*."""


class GeminiBackend:
    """Google Gemini via the google-generativeai SDK."""

    def __init__(self, api_key: str, model_name: str = "gemini-2.5-flash") -> None:
        if not api_key:
            raise ValueError(
                "Gemini API key required. Set GEMINI_API_KEY environment variable "
                "or pass api_key parameter."
            )
        import google.generativeai as genai

        genai.configure(api_key=api_key)  # type: ignore[attr-defined]
        self.model_name = model_name
        self.model = genai.GenerativeModel(model_name)  # type: ignore[attr-defined]

    def generate_content(self, prompt: str) -> str:
        response = self.model.generate_content(prompt)
        return str(response.text)


class OllamaBackend:
    """A local Ollama server (``POST /api/generate``, non-streaming)."""

    def __init__(
        self,
        api_url: str = "http://localhost:11434",
        model_name: str = "gemma3:12b",
        timeout: float = 600.0,
        client: httpx.Client | None = None,
    ) -> None:
        self.api_url = api_url.rstrip("/")
        self.model_name = model_name
        self.client = client or httpx.Client(timeout=timeout)

    def generate_content(self, prompt: str) -> str:
        try:
            response = self.client.post(
                f"{self.api_url}/api/generate",
                json={"model": self.model_name, "prompt": prompt, "stream": False},
            )
        except httpx.HTTPError as exc:
            logger.error("Ollama request failed: %s", exc)
            raise GenerationFailure(f"Ollama request failed: {exc}") from exc

        if response.is_error:
            details: Any
            try:
                details = response.json()
            except ValueError:
                details = response.text
            logger.error(
                "Ollama API error: status=%s reason=%s details=%s",
                response.status_code,
                response.reason_phrase,
                details,
            )
            details_str = json.dumps(details) if isinstance(details, (dict, list)) else str(details)
            raise GenerationFailure(
                f"Ollama API error: {response.status_code} {response.reason_phrase} - {details_str}"
            )

        return str(response.json()["response"])


class AnthropicBackend:
    """Claude via the Anthropic Messages API."""

    def __init__(self, api_key: str, model_name: str, max_tokens: int = 4096) -> None:
        if not api_key:
            raise ValueError(
                "Anthropic API key required. Set ANTHROPIC_API_KEY environment variable "
                "or pass api_key parameter."
            )
        self.client = Anthropic(api_key=api_key)
        self.model_name = model_name
        self.max_tokens = max_tokens

    def generate_content(self, prompt: str) -> str:
        response = self.client.messages.create(
            model=self.model_name,
            max_tokens=self.max_tokens,
            messages=[{"role": "user", "content": prompt}],
        )
        # We only send text prompts, so the first block should be a TextBlock.
        block = response.content[0]
        if not isinstance(block, TextBlock):
            raise GenerationFailure(f"Expected TextBlock from Claude, got {type(block).__name__}")
        return block.text


def get_generation_backend(
    provider: str | GenerationProvider | None = None,
    source: Settings | None = None,
) -> GenerationBackend:
    """Instantiate the backend selected by configuration.

    Args:
        provider: Provider name; defaults to ``settings.ai_provider``.
        source: Settings to read credentials from; defaults to the app settings.

    Raises:
        ValueError: If the provider is unknown or missing its credentials.
    """
    source = source or settings
    provider = GenerationProvider(provider or source.ai_provider)

    if provider is GenerationProvider.GEMINI:
        return GeminiBackend(source.gemini_api_key, source.gemini_model)
    if provider is GenerationProvider.ANTHROPIC:
        return AnthropicBackend(source.anthropic_api_key, source.llm_model)
    return OllamaBackend(source.ollama_api_url, source.ollama_model, source.ollama_timeout)
