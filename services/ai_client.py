"""
Reasoning Client Module

This module wraps the LLM providers behind the ReasoningClient protocol:
Google's Gemini API (default) and Anthropic's Messages API. Each client
applies the configured request timeout and converts provider failures into
ReasoningServiceError so callers only deal with one exception family.
"""

from typing import Optional

import anthropic
from google import genai
from google.genai import types

from config import settings
from utils.exceptions import ConfigurationError, ReasoningServiceError
from utils.logger import get_logger

logger = get_logger(__name__)


class GeminiClient:
    """ReasoningClient backed by Google's Gemini API."""

    def __init__(self, api_key: Optional[str] = None, timeout: Optional[int] = None):
        """
        Initialize the Gemini client.

        Selects a model based on the preference order in settings.DEFAULT_AI_MODELS.

        Raises:
            ConfigurationError: If no API key is configured.
            ReasoningServiceError: If the model list cannot be fetched or is empty.
        """
        api_key = api_key or settings.GOOGLE_AI_API_KEY
        if not api_key:
            raise ConfigurationError("Missing required GOOGLE_AI_API_KEY")

        timeout = timeout or settings.AI_REQUEST_TIMEOUT
        self.client = genai.Client(
            api_key=api_key,
            http_options=types.HttpOptions(timeout=timeout * 1000)  # milliseconds
        )
        self.model_name = self._select_model()
        logger.info(f"Selected AI model: {self.model_name}")

    def _select_model(self) -> str:
        try:
            available_models = [m.name for m in self.client.models.list()]
        except Exception as e:
            logger.error(f"Error listing Gemini models: {e}")
            raise ReasoningServiceError(f"Could not list Gemini models: {e}") from e

        # Select a model based on preference order
        for preferred in settings.DEFAULT_AI_MODELS:
            for available in available_models:
                if preferred in available:
                    return available

        if available_models:
            # None of our preferred models are available, just use the first one
            return available_models[0]

        raise ReasoningServiceError("No Gemini models available")

    def complete(self, prompt: str, max_tokens: int) -> str:
        try:
            response = self.client.models.generate_content(
                model=self.model_name,
                contents=prompt,
                config=types.GenerateContentConfig(max_output_tokens=max_tokens),
            )
        except Exception as e:
            logger.error(f"Gemini request failed: {e}")
            raise ReasoningServiceError(f"Gemini request failed: {e}") from e
        return response.text or ""


class AnthropicClient:
    """ReasoningClient backed by Anthropic's Messages API."""

    def __init__(self, api_key: Optional[str] = None, model: Optional[str] = None,
                 timeout: Optional[int] = None):
        api_key = api_key or settings.ANTHROPIC_API_KEY
        if not api_key:
            raise ConfigurationError("Missing required ANTHROPIC_API_KEY")

        self.model_name = model or settings.ANTHROPIC_MODEL
        self.client = anthropic.Anthropic(
            api_key=api_key,
            timeout=float(timeout or settings.AI_REQUEST_TIMEOUT),
        )
        logger.info(f"Selected AI model: {self.model_name}")

    def complete(self, prompt: str, max_tokens: int) -> str:
        try:
            msg = self.client.messages.create(
                model=self.model_name,
                max_tokens=max_tokens,
                messages=[{"role": "user", "content": prompt}],
            )
        except anthropic.APIError as e:
            logger.error(f"Anthropic request failed: {e}")
            raise ReasoningServiceError(f"Anthropic request failed: {e}") from e
        for block in msg.content or []:
            if getattr(block, "type", None) == "text":
                return block.text
        return ""


def create_reasoning_client(provider: Optional[str] = None):
    """
    Build the ReasoningClient for the configured provider.

    Args:
        provider: 'gemini' or 'anthropic' (defaults to settings.LLM_PROVIDER).

    Raises:
        ConfigurationError: If the provider is unknown or its key is missing.
    """
    provider = (provider or settings.LLM_PROVIDER).lower()

    if provider == "gemini":
        return GeminiClient()
    if provider == "anthropic":
        return AnthropicClient()

    raise ConfigurationError(f"Unknown LLM_PROVIDER: {provider!r}")
