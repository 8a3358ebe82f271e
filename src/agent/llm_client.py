from __future__ import annotations

import asyncio
from abc import ABC, abstractmethod
from typing import Any, Optional

from anthropic import Anthropic
from openai import OpenAI

from agent.config import ANTHROPIC, DEEPSEEK, GenerationSettings
from agent.errors import ProviderConfigurationError
from models.schemas import ModelResponse, PromptPair


DEFAULT_MAX_TOKENS = 4096
DEFAULT_TEMPERATURE = 0


def _attr(obj: Any, name: str) -> Any:
    """SDK objects and plain dicts (test doubles, raw JSON) are both accepted."""
    if isinstance(obj, dict):
        return obj.get(name)
    return getattr(obj, name, None)


class ModelClient(ABC):
    """
    One generative-text backend behind a provider-neutral call. Adapters
    normalize the response body and stop reason; they never swallow errors.
    """

    provider: str = ""
    model_id: str = ""

    @abstractmethod
    async def invoke(
        self,
        prompt: PromptPair,
        max_tokens: int = DEFAULT_MAX_TOKENS,
        temperature: float = DEFAULT_TEMPERATURE,
    ) -> ModelResponse:
        ...


class AnthropicModelClient(ModelClient):
    provider = ANTHROPIC

    def __init__(self, client: Any, model_id: str = GenerationSettings.anthropic_model):
        self.client = client
        self.model_id = model_id

    @classmethod
    def from_settings(cls, settings: GenerationSettings) -> "AnthropicModelClient":
        if not settings.anthropic_api_key:
            raise ProviderConfigurationError(ANTHROPIC, "ANTHROPIC_API_KEY is not set")
        client = Anthropic(
            api_key=settings.anthropic_api_key,
            timeout=settings.timeout_seconds,
            max_retries=0,
        )
        return cls(client, model_id=settings.anthropic_model)

    @staticmethod
    def response_text(message: Any) -> str:
        # Content is a list of typed blocks; only text blocks carry output.
        blocks = _attr(message, "content") or []
        return "".join(
            _attr(block, "text") or "" for block in blocks if _attr(block, "type") == "text"
        )

    async def invoke(
        self,
        prompt: PromptPair,
        max_tokens: int = DEFAULT_MAX_TOKENS,
        temperature: float = DEFAULT_TEMPERATURE,
    ) -> ModelResponse:
        message = await asyncio.to_thread(
            self.client.messages.create,
            model=self.model_id,
            system=prompt.system,
            temperature=temperature,
            max_tokens=max_tokens,
            messages=[{"role": "user", "content": prompt.user}],
        )
        return ModelResponse(
            text=self.response_text(message),
            stop_reason=_attr(message, "stop_reason") or None,
        )


class DeepSeekModelClient(ModelClient):
    """DeepSeek through its OpenAI-compatible chat completions endpoint."""

    provider = DEEPSEEK

    def __init__(self, client: Any, model_id: str = GenerationSettings.deepseek_model):
        self.client = client
        self.model_id = model_id

    @classmethod
    def from_settings(cls, settings: GenerationSettings) -> "DeepSeekModelClient":
        if not settings.deepseek_api_key:
            raise ProviderConfigurationError(DEEPSEEK, "DEEPSEEK_API_KEY is not set")
        client = OpenAI(
            api_key=settings.deepseek_api_key,
            base_url=settings.deepseek_base_url,
            timeout=settings.timeout_seconds,
            max_retries=0,
        )
        return cls(client, model_id=settings.deepseek_model)

    async def invoke(
        self,
        prompt: PromptPair,
        max_tokens: int = DEFAULT_MAX_TOKENS,
        temperature: float = DEFAULT_TEMPERATURE,
    ) -> ModelResponse:
        completion = await asyncio.to_thread(
            self.client.chat.completions.create,
            model=self.model_id,
            temperature=temperature,
            max_tokens=max_tokens,
            messages=[
                {"role": "system", "content": prompt.system},
                {"role": "user", "content": prompt.user},
            ],
        )
        choices = _attr(completion, "choices") or []
        if not choices:
            return ModelResponse(text="", stop_reason=None)
        choice = choices[0]
        return ModelResponse(
            text=_attr(_attr(choice, "message"), "content") or "",
            stop_reason=_attr(choice, "finish_reason") or None,
        )


def create_model_client(settings: GenerationSettings, client: Optional[Any] = None) -> ModelClient:
    """
    Select the adapter for `settings.provider`. Pass `client` to reuse an
    already-built SDK client instead of constructing one from credentials.
    """
    provider = settings.provider
    if provider == ANTHROPIC:
        if client is not None:
            return AnthropicModelClient(client, model_id=settings.anthropic_model)
        return AnthropicModelClient.from_settings(settings)
    if provider == DEEPSEEK:
        if client is not None:
            return DeepSeekModelClient(client, model_id=settings.deepseek_model)
        return DeepSeekModelClient.from_settings(settings)
    raise ProviderConfigurationError(provider, f"Unknown AI provider; expected one of {ANTHROPIC}, {DEEPSEEK}")
