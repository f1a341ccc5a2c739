"""
LLM completion collaborator.

This module is the only place that talks to OpenAI. Everything above it sees
`CompletionResult` and `CompletionServiceError`, never SDK types, so tests
(and other providers) can stand in for the real client.
"""

import logging
from dataclasses import dataclass
from typing import Optional, Protocol

from openai import APIError, AsyncOpenAI

logger = logging.getLogger(__name__)

# Provider error codes the API maps to dedicated responses.
INSUFFICIENT_QUOTA = "insufficient_quota"
RATE_LIMIT_EXCEEDED = "rate_limit_exceeded"


class CompletionServiceError(Exception):
    """A failed completion call. `code` is the provider's error code, if any."""

    def __init__(self, message: str, code: Optional[str] = None):
        super().__init__(message)
        self.code = code


@dataclass
class CompletionUsage:
    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0


@dataclass
class CompletionResult:
    content: str
    usage: CompletionUsage


class CompletionClient(Protocol):
    async def complete(
        self,
        model: str,
        messages: list[dict[str, str]],
        max_tokens: int,
        temperature: float,
    ) -> CompletionResult:
        ...


class OpenAICompletionClient:
    """
    Chat-completions client backed by `openai.AsyncOpenAI`.

    The SDK client is built on first use, so the app still starts (and can
    answer preflight and validation errors) without a key configured. SDK
    retries are disabled: each request makes exactly one upstream call.
    """

    def __init__(self, api_key: str, base_url: Optional[str] = None, timeout: Optional[float] = None):
        self._api_key = api_key
        self._base_url = base_url
        self._timeout = timeout
        self._client: Optional[AsyncOpenAI] = None

    def _get_client(self) -> AsyncOpenAI:
        if self._client is None:
            if not self._api_key:
                raise CompletionServiceError("OPENAI_API_KEY is not configured")
            self._client = AsyncOpenAI(
                api_key=self._api_key,
                base_url=self._base_url,
                timeout=self._timeout,
                max_retries=0,
            )
        return self._client

    async def complete(
        self,
        model: str,
        messages: list[dict[str, str]],
        max_tokens: int,
        temperature: float,
    ) -> CompletionResult:
        client = self._get_client()
        try:
            response = await client.chat.completions.create(
                model=model,
                messages=messages,
                max_tokens=max_tokens,
                temperature=temperature,
            )
        except APIError as exc:
            raise CompletionServiceError(str(exc), code=getattr(exc, "code", None)) from exc

        if not response.choices:
            raise CompletionServiceError("Completion returned no choices")
        content = response.choices[0].message.content or ""
        usage = CompletionUsage()
        if response.usage is not None:
            usage = CompletionUsage(
                prompt_tokens=response.usage.prompt_tokens,
                completion_tokens=response.usage.completion_tokens,
                total_tokens=response.usage.total_tokens,
            )
        else:
            logger.warning("Completion for model '%s' reported no token usage.", model)
        return CompletionResult(content=content, usage=usage)
