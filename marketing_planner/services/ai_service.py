"""
LLM access for plan generation.

Wraps the configured LangChain chat models (Gemini, OpenAI, Groq) behind one
``generate_response`` call. Providers are tried in the configured order; a
provider that errors or exceeds AI_TIMEOUT_SECONDS hands over to the next.
"""

import asyncio
import logging
import time
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

from pydantic import BaseModel
from langchain_core.language_models.chat_models import BaseChatModel
from langchain_core.messages import AIMessage, BaseMessage, HumanMessage, SystemMessage
from langchain_core.prompts import ChatPromptTemplate, MessagesPlaceholder
from langchain_google_genai import ChatGoogleGenerativeAI
from langchain_groq import ChatGroq
from langchain_openai import ChatOpenAI

from ..core.config import settings

logger = logging.getLogger(__name__)


class AIProvider(str, Enum):
    """Supported AI providers."""
    GEMINI = "gemini"
    GROQ = "groq"
    OPENAI = "openai"


class AIResponse(BaseModel):
    """One completed generation."""
    content: str
    provider: str
    model: str
    tokens_used: int
    response_time: float
    timestamp: datetime


class AIProviderError(Exception):
    """Raised when no provider produced a reply."""
    pass


def _build_gemini() -> BaseChatModel:
    return ChatGoogleGenerativeAI(
        google_api_key=settings.GEMINI_API_KEY,
        model=settings.GEMINI_MODEL,
        temperature=settings.AI_TEMPERATURE,
        max_output_tokens=settings.AI_MAX_TOKENS,
    )


def _build_groq() -> BaseChatModel:
    return ChatGroq(
        api_key=settings.GROQ_API_KEY,
        model=settings.GROQ_MODEL,
        temperature=settings.AI_TEMPERATURE,
        max_tokens=settings.AI_MAX_TOKENS,
    )


def _build_openai() -> BaseChatModel:
    return ChatOpenAI(
        api_key=settings.OPENAI_API_KEY,
        model=settings.OPENAI_MODEL,
        temperature=settings.AI_TEMPERATURE,
        max_tokens=settings.AI_MAX_TOKENS,
    )


_BUILDERS: Dict[AIProvider, Callable[[], BaseChatModel]] = {
    AIProvider.GEMINI: _build_gemini,
    AIProvider.GROQ: _build_groq,
    AIProvider.OPENAI: _build_openai,
}

# Field holding the output budget on each chat model class
_MAX_TOKENS_FIELD = {
    AIProvider.GEMINI: "max_output_tokens",
    AIProvider.GROQ: "max_tokens",
    AIProvider.OPENAI: "max_tokens",
}

_PROMPT = ChatPromptTemplate.from_messages([MessagesPlaceholder(variable_name="messages")])

_ROLE_TO_MESSAGE = {
    "system": SystemMessage,
    "user": HumanMessage,
    "assistant": AIMessage,
}


def _api_key(provider: AIProvider) -> Optional[str]:
    return {
        AIProvider.GEMINI: settings.GEMINI_API_KEY,
        AIProvider.GROQ: settings.GROQ_API_KEY,
        AIProvider.OPENAI: settings.OPENAI_API_KEY,
    }[provider]


def to_langchain_messages(messages: List[Dict[str, str]]) -> List[BaseMessage]:
    """Convert role/content dicts; unknown roles are skipped."""
    converted = []
    for msg in messages:
        message_cls = _ROLE_TO_MESSAGE.get(msg.get("role"))
        if message_cls is None:
            logger.debug(f"Skipping message with unsupported role {msg.get('role')!r}")
            continue
        converted.append(message_cls(content=msg["content"]))
    return converted


def _tokens_used(reply: AIMessage) -> int:
    usage = getattr(reply, "usage_metadata", None) or {}
    return int(usage.get("total_tokens", 0))


def _text_of(reply: AIMessage) -> str:
    content = reply.content
    if isinstance(content, str):
        return content
    # Some providers return content blocks
    return "".join(block.get("text", "") if isinstance(block, dict) else str(block) for block in content)


class AIService:
    """Chat models for every provider that has an API key, with failover."""

    def __init__(self):
        self.models: Dict[AIProvider, BaseChatModel] = {}
        for provider, build in _BUILDERS.items():
            if not _api_key(provider):
                continue
            try:
                self.models[provider] = build()
                logger.info(f"{provider.value} provider initialized")
            except Exception as e:
                logger.warning(f"Failed to initialize {provider.value}: {e}")

        if not self.models:
            raise RuntimeError("No AI providers available. Please check your API keys.")

    def provider_order(self) -> List[AIProvider]:
        """Configured primary/secondary/tertiary providers first, then any other available one."""
        order: List[AIProvider] = []
        for configured in (
            settings.PRIMARY_AI_PROVIDER,
            settings.SECONDARY_AI_PROVIDER,
            settings.TERTIARY_AI_PROVIDER,
        ):
            try:
                provider = AIProvider(configured.lower())
            except ValueError:
                logger.warning(f"Ignoring unknown AI provider {configured!r}")
                continue
            if provider in self.models and provider not in order:
                order.append(provider)
        order.extend(p for p in self.models if p not in order)
        return order

    def _model_for_call(
        self,
        provider: AIProvider,
        temperature: Optional[float],
        max_tokens: Optional[int],
    ) -> BaseChatModel:
        overrides: Dict[str, Any] = {}
        if temperature is not None:
            overrides["temperature"] = temperature
        if max_tokens is not None:
            overrides[_MAX_TOKENS_FIELD[provider]] = max_tokens
        model = self.models[provider]
        # Copies share the underlying HTTP client
        return model.model_copy(update=overrides) if overrides else model

    @staticmethod
    def _model_name(model: BaseChatModel) -> str:
        return getattr(model, "model", None) or getattr(model, "model_name", None) or "unknown"

    async def generate_response(
        self,
        messages: List[Dict[str, str]],
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
    ) -> AIResponse:
        """Generate a reply, trying providers in order until one succeeds."""
        prompt_value = await _PROMPT.ainvoke({"messages": to_langchain_messages(messages)})
        last_error: Optional[Exception] = None

        for provider in self.provider_order():
            model = self._model_for_call(provider, temperature, max_tokens)
            start_time = time.time()
            try:
                logger.info(f"Attempting AI generation with {provider.value}")
                reply = await asyncio.wait_for(model.ainvoke(prompt_value), timeout=settings.AI_TIMEOUT_SECONDS)
            except asyncio.TimeoutError:
                logger.warning(f"Provider {provider.value} timed out after {settings.AI_TIMEOUT_SECONDS}s")
                last_error = TimeoutError(f"{provider.value} timed out")
                continue
            except Exception as e:
                logger.warning(f"Provider {provider.value} failed: {e}")
                last_error = e
                continue

            elapsed = time.time() - start_time
            logger.info(f"Generated response with {provider.value} in {elapsed:.1f}s")
            return AIResponse(
                content=_text_of(reply),
                provider=provider.value,
                model=self._model_name(model),
                tokens_used=_tokens_used(reply),
                response_time=elapsed,
                timestamp=datetime.now(timezone.utc),
            )

        raise AIProviderError(f"All AI providers failed. Last error: {last_error}")


_ai_service: Optional[AIService] = None


def get_ai_service() -> AIService:
    """Shared AIService, created on first use so imports never need API keys."""
    global _ai_service
    if _ai_service is None:
        _ai_service = AIService()
    return _ai_service
