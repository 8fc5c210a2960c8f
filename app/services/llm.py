# =============================================================================
# Multi-Provider LLM Abstraction — Pluggable Text Generation
# =============================================================================
#
# The planner and the evaluator each send one rendered prompt and read
# back one block of text. This module hides which vendor produces it:
#
#   generate_text(llm, prompt)  → str
#       └── llm.complete(messages=[{"role": "user", ...}])
#             ├── AnthropicProvider        (LLM_PROVIDER=anthropic)
#             └── OpenAICompatibleProvider (LLM_PROVIDER=openai_compatible)
#
# DESIGN DECISION: Protocol (structural typing) over ABC.
# Any object with an async `complete()` satisfies LLMProvider, so the
# agents can be driven by AsyncMock stand-ins in tests.
#
# DESIGN DECISION: Explicit timeout on every client.
# Generation sits on the request path of POST /api/evaluation; clients
# are built with llm_timeout_seconds instead of the SDK's 10-minute
# default.
#
# DESIGN DECISION: Unknown LLM_PROVIDER values are a configuration
# error, raised when the provider is first requested.
# =============================================================================

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Protocol

from app.config import settings

logger = logging.getLogger(__name__)


@dataclass
class LLMResponse:
    """
    One completion, normalised across vendors.

    `content` is usually a string. Callers read it through extract_text(),
    which also accepts a list of content blocks.
    """

    content: str | list[Any]
    model: str
    input_tokens: int = 0
    output_tokens: int = 0


class LLMProvider(Protocol):
    """Anything that can turn chat messages into an LLMResponse."""

    async def complete(
        self,
        messages: list[dict[str, str]],
        system: str | None = None,
        temperature: float | None = None,
        max_tokens: int | None = None,
    ) -> LLMResponse:
        """
        Args:
            messages: [{"role": "user" | "assistant", "content": ...}]
            system: Optional system prompt. Anthropic takes it as a
                top-level kwarg, OpenAI-style APIs as a leading message.
            temperature: None means "use LLM_TEMPERATURE".
            max_tokens: None means "use LLM_MAX_TOKENS".
        """
        ...


# ---------------------------------------------------------------------------
# Text Helpers
# ---------------------------------------------------------------------------


def extract_text(content: Any) -> str:
    """
    Text of an LLM payload.

    For a list of content blocks (SDK objects with `.text` or dicts with
    a "text" key) the first block carrying a string wins. A plain string
    is returned as is. Anything else yields "".
    """
    if isinstance(content, list):
        for block in content:
            text = (
                block.get("text")
                if isinstance(block, dict)
                else getattr(block, "text", None)
            )
            if isinstance(text, str):
                return text
        return ""

    if isinstance(content, str):
        return content

    return ""


async def generate_text(llm: LLMProvider, prompt: str) -> str:
    """Send `prompt` as a single user message and return the reply text."""
    response = await llm.complete(
        messages=[{"role": "user", "content": prompt}],
    )
    logger.debug(
        "LLM reply from %s (%d in / %d out tokens)",
        response.model, response.input_tokens, response.output_tokens,
    )
    return extract_text(response.content)


def _resolve_api_key(explicit: str | None, vendor_key: str, hint: str) -> str:
    # LLM_API_KEY takes precedence over the vendor-specific variable
    key = explicit or settings.llm_api_key or vendor_key
    if not key:
        raise ValueError(hint)
    return key


# ---------------------------------------------------------------------------
# Anthropic (Claude)
# ---------------------------------------------------------------------------


class AnthropicProvider:
    """Claude through the native AsyncAnthropic client."""

    def __init__(
        self,
        api_key: str | None = None,
        model: str | None = None,
    ) -> None:
        from anthropic import AsyncAnthropic

        self._client = AsyncAnthropic(
            api_key=_resolve_api_key(
                api_key,
                settings.anthropic_api_key,
                "No Anthropic API key configured. Set LLM_API_KEY or "
                "ANTHROPIC_API_KEY in .env",
            ),
            timeout=settings.llm_timeout_seconds,
        )
        self._model = model or settings.llm_model
        logger.info("Initialized AnthropicProvider (model=%s)", self._model)

    async def complete(
        self,
        messages: list[dict[str, str]],
        system: str | None = None,
        temperature: float | None = None,
        max_tokens: int | None = None,
    ) -> LLMResponse:
        kwargs: dict = {
            "model": self._model,
            "messages": messages,
            "max_tokens": max_tokens or settings.llm_max_tokens,
            "temperature": (
                settings.llm_temperature if temperature is None else temperature
            ),
        }
        if system:
            kwargs["system"] = system

        response = await self._client.messages.create(**kwargs)

        return LLMResponse(
            content=[b for b in response.content if b.type == "text"],
            model=response.model,
            input_tokens=response.usage.input_tokens,
            output_tokens=response.usage.output_tokens,
        )


# ---------------------------------------------------------------------------
# OpenAI-Compatible
# ---------------------------------------------------------------------------


class OpenAICompatibleProvider:
    """
    Any chat-completions API that follows the OpenAI wire format.

    Example (Gemini's OpenAI endpoint):
        LLM_PROVIDER=openai_compatible
        LLM_BASE_URL=https://generativelanguage.googleapis.com/v1beta/openai/
        LLM_API_KEY=your-key
        LLM_MODEL=gemini-2.0-flash
    """

    def __init__(
        self,
        api_key: str | None = None,
        model: str | None = None,
        base_url: str | None = None,
    ) -> None:
        from openai import AsyncOpenAI

        resolved_base_url = base_url or settings.llm_base_url
        client_kwargs: dict = {
            "api_key": _resolve_api_key(
                api_key,
                settings.openai_api_key,
                "No API key configured for OpenAI-compatible provider. "
                "Set LLM_API_KEY in .env",
            ),
            "timeout": settings.llm_timeout_seconds,
        }
        if resolved_base_url:
            client_kwargs["base_url"] = resolved_base_url

        self._client = AsyncOpenAI(**client_kwargs)
        self._model = model or settings.llm_model
        logger.info(
            "Initialized OpenAICompatibleProvider (model=%s, base_url=%s)",
            self._model,
            resolved_base_url or "https://api.openai.com/v1",
        )

    async def complete(
        self,
        messages: list[dict[str, str]],
        system: str | None = None,
        temperature: float | None = None,
        max_tokens: int | None = None,
    ) -> LLMResponse:
        if system:
            messages = [{"role": "system", "content": system}, *messages]

        response = await self._client.chat.completions.create(
            model=self._model,
            messages=messages,
            max_tokens=max_tokens or settings.llm_max_tokens,
            temperature=(
                settings.llm_temperature if temperature is None else temperature
            ),
        )

        usage = response.usage
        return LLMResponse(
            content=response.choices[0].message.content or "",
            model=response.model or self._model,
            input_tokens=usage.prompt_tokens if usage else 0,
            output_tokens=usage.completion_tokens if usage else 0,
        )


# ---------------------------------------------------------------------------
# Factory
# ---------------------------------------------------------------------------

_PROVIDERS: dict[str, type[AnthropicProvider] | type[OpenAICompatibleProvider]] = {
    "anthropic": AnthropicProvider,
    "openai_compatible": OpenAICompatibleProvider,
}

# Lazy singleton, created on first use
_provider: AnthropicProvider | OpenAICompatibleProvider | None = None


def get_llm_provider() -> AnthropicProvider | OpenAICompatibleProvider:
    """
    The configured provider, built on first call and shared afterwards.

    Raises:
        ValueError: LLM_PROVIDER is unknown or the provider has no API key.
    """
    global _provider
    if _provider is None:
        provider_cls = _PROVIDERS.get(settings.llm_provider)
        if provider_cls is None:
            raise ValueError(
                f"Unknown LLM_PROVIDER '{settings.llm_provider}'. "
                f"Expected one of: {', '.join(_PROVIDERS)}"
            )
        _provider = provider_cls()
    return _provider
