"""
LLM client abstraction for Groq, OpenAI and Anthropic.
Provides a unified completion interface and normalises provider failures
into LLMError / LLMTransientError so callers can decide what to retry.
"""

import asyncio
from abc import ABC, abstractmethod
from enum import Enum
from typing import Optional

import anthropic
import openai
import structlog
from pydantic import BaseModel

from scriptpolish.core.config import settings
from scriptpolish.core.exceptions import LLMError, LLMTransientError

logger = structlog.get_logger(__name__)


class LLMProvider(str, Enum):
    """Supported LLM providers."""
    GROQ = "groq"
    OPENAI = "openai"
    ANTHROPIC = "anthropic"


class LLMMessage(BaseModel):
    """Message format for LLM conversations."""
    role: str  # "system", "user", "assistant"
    content: str


class LLMResponse(BaseModel):
    """Standardized LLM response."""
    content: str
    model: str
    provider: LLMProvider
    prompt_tokens: int = 0
    completion_tokens: int = 0

    @property
    def tokens_used(self) -> int:
        return self.prompt_tokens + self.completion_tokens


class BaseLLMClient(ABC):
    """Abstract base class for provider clients."""

    fast_model: str

    @abstractmethod
    async def generate(
        self,
        messages: list[LLMMessage],
        model: Optional[str] = None,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
        json_mode: bool = False,
    ) -> LLMResponse:
        """Generate completion from messages."""


class OpenAICompatibleClient(BaseLLMClient):
    """
    Chat-completions client for OpenAI and OpenAI-compatible APIs (Groq).
    """

    TRANSIENT_ERRORS = (
        openai.APIConnectionError,  # includes APITimeoutError
        openai.RateLimitError,
        openai.InternalServerError,
    )

    def __init__(
        self,
        provider: LLMProvider,
        api_key: str,
        default_model: str,
        fast_model: str,
        base_url: Optional[str] = None,
    ):
        self.provider = provider
        # Retries are decided by callers, not the SDK
        self.client = openai.AsyncOpenAI(api_key=api_key, base_url=base_url, max_retries=0)
        self.default_model = default_model
        self.fast_model = fast_model

    async def generate(
        self,
        messages: list[LLMMessage],
        model: Optional[str] = None,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
        json_mode: bool = False,
    ) -> LLMResponse:
        model = model or self.default_model
        request_params = {
            "model": model,
            "messages": [{"role": m.role, "content": m.content} for m in messages],
            "max_tokens": max_tokens or settings.llm_max_tokens,
        }
        if temperature is not None:
            request_params["temperature"] = temperature
        if json_mode:
            request_params["response_format"] = {"type": "json_object"}

        logger.debug("Completion request", provider=self.provider.value, model=model)

        try:
            response = await asyncio.wait_for(
                self.client.chat.completions.create(**request_params),
                timeout=settings.llm_timeout,
            )
        except asyncio.TimeoutError as e:
            raise LLMTransientError(f"{self.provider.value} request timed out") from e
        except self.TRANSIENT_ERRORS as e:
            raise LLMTransientError(str(e)) from e
        except openai.OpenAIError as e:
            raise LLMError(str(e)) from e

        if not response.choices:
            raise LLMError("Malformed completion response: no choices")

        usage = response.usage
        return LLMResponse(
            content=response.choices[0].message.content or "",
            model=model,
            provider=self.provider,
            prompt_tokens=usage.prompt_tokens if usage else 0,
            completion_tokens=usage.completion_tokens if usage else 0,
        )


class AnthropicClient(BaseLLMClient):
    """Anthropic messages API client."""

    TRANSIENT_ERRORS = (
        anthropic.APIConnectionError,
        anthropic.RateLimitError,
        anthropic.InternalServerError,
    )

    def __init__(self):
        self.client = anthropic.AsyncAnthropic(api_key=settings.anthropic_api_key, max_retries=0)
        self.default_model = settings.anthropic_model_primary
        self.fast_model = settings.anthropic_model_fast

    async def generate(
        self,
        messages: list[LLMMessage],
        model: Optional[str] = None,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
        json_mode: bool = False,
    ) -> LLMResponse:
        model = model or self.default_model

        # Anthropic takes the system prompt separately; JSON mode is prompt-driven
        system_message = ""
        conversation_messages = []
        for msg in messages:
            if msg.role == "system":
                system_message = msg.content
            else:
                conversation_messages.append({"role": msg.role, "content": msg.content})

        if not conversation_messages:
            conversation_messages.append({"role": "user", "content": "Begin."})

        request_params = {
            "model": model,
            "messages": conversation_messages,
            "max_tokens": max_tokens or settings.llm_max_tokens,
        }
        if system_message:
            request_params["system"] = system_message
        if temperature is not None:
            request_params["temperature"] = temperature

        logger.debug("Completion request", provider="anthropic", model=model, json_mode=json_mode)

        try:
            response = await asyncio.wait_for(
                self.client.messages.create(**request_params),
                timeout=settings.llm_timeout,
            )
        except asyncio.TimeoutError as e:
            raise LLMTransientError("anthropic request timed out") from e
        except self.TRANSIENT_ERRORS as e:
            raise LLMTransientError(str(e)) from e
        except anthropic.AnthropicError as e:
            raise LLMError(str(e)) from e

        text = "".join(block.text for block in response.content if block.type == "text")
        return LLMResponse(
            content=text,
            model=model,
            provider=LLMProvider.ANTHROPIC,
            prompt_tokens=response.usage.input_tokens,
            completion_tokens=response.usage.output_tokens,
        )


class LLMClient:
    """
    Unified LLM client that routes to the configured provider.
    Provider clients are created lazily so only configured keys are needed.
    """

    def __init__(self, default_provider: Optional[LLMProvider] = None):
        self._clients: dict[LLMProvider, BaseLLMClient] = {}

        if default_provider:
            self.default_provider = default_provider
        else:
            try:
                self.default_provider = LLMProvider(settings.default_llm_provider.lower())
            except ValueError:
                logger.warning(
                    "Unknown LLM provider, falling back to groq",
                    provider=settings.default_llm_provider,
                )
                self.default_provider = LLMProvider.GROQ

    def _build_client(self, provider: LLMProvider) -> BaseLLMClient:
        if provider == LLMProvider.OPENAI:
            return OpenAICompatibleClient(
                provider=provider,
                api_key=settings.openai_api_key,
                default_model=settings.openai_model_primary,
                fast_model=settings.openai_model_fast,
            )
        if provider == LLMProvider.ANTHROPIC:
            return AnthropicClient()
        return OpenAICompatibleClient(
            provider=LLMProvider.GROQ,
            api_key=settings.groq_api_key,
            default_model=settings.groq_model_primary,
            fast_model=settings.groq_model_fast,
            base_url=settings.groq_base_url,
        )

    def _get_client(self, provider: Optional[LLMProvider] = None) -> BaseLLMClient:
        provider = provider or self.default_provider
        if provider not in self._clients:
            self._clients[provider] = self._build_client(provider)
        return self._clients[provider]

    async def generate(
        self,
        messages: list[LLMMessage],
        provider: Optional[LLMProvider] = None,
        model: Optional[str] = None,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
        json_mode: bool = False,
    ) -> LLMResponse:
        """Generate completion using the primary model of a provider."""
        client = self._get_client(provider)
        return await client.generate(
            messages=messages,
            model=model,
            temperature=temperature,
            max_tokens=max_tokens,
            json_mode=json_mode,
        )

    async def generate_fast(
        self,
        messages: list[LLMMessage],
        temperature: Optional[float] = None,
        json_mode: bool = False,
    ) -> LLMResponse:
        """Generate using the fast model for simple tasks such as classification."""
        client = self._get_client()
        return await client.generate(
            messages=messages,
            model=client.fast_model,
            temperature=temperature,
            json_mode=json_mode,
        )


# Process-wide client; handlers receive it through dependency injection
llm_client = LLMClient()
