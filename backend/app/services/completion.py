# app/services/completion.py
# LLM 텍스트 생성 (OpenAI 호환 Chat Completions — 기본 Groq)
# - 단일 user 메시지 1회 호출
# - 네트워크/인증/API 오류 → UpstreamUnavailable

from __future__ import annotations
import logging
from typing import Optional

import openai
from openai import AsyncOpenAI

from app.core.config import Settings
from app.core.errors import InvalidInput, UpstreamUnavailable
from app.core.retry import retry_async

log = logging.getLogger(__name__)

NO_RESPONSE = "No response generated"


class CompletionClient:
    def __init__(self, settings: Settings, client: Optional[AsyncOpenAI] = None):
        self.model = settings.LLM_MODEL
        self._client = client
        if self._client is None and settings.LLM_API_KEY:
            self._client = AsyncOpenAI(
                api_key=settings.LLM_API_KEY,
                base_url=settings.LLM_BASE_URL,
                timeout=settings.LLM_TIMEOUT_SECONDS,
                max_retries=0,  # 재시도는 retry_async 한 곳에서만
            )
        self.complete = retry_async(
            settings.UPSTREAM_RETRY_ATTEMPTS, settings.UPSTREAM_RETRY_BASE_DELAY
        )(self._complete_once)

    async def _complete_once(self, prompt: str) -> str:
        if not prompt or not prompt.strip():
            raise InvalidInput("Prompt must not be empty")
        if self._client is None:
            raise UpstreamUnavailable("LLM_API_KEY not set", retryable=False)

        try:
            chat = await self._client.chat.completions.create(
                model=self.model,
                messages=[{"role": "user", "content": prompt}],
            )
        except openai.AuthenticationError as e:
            log.error("LLM authentication failed: %s", e)
            raise UpstreamUnavailable("Failed to generate response", retryable=False) from e
        except openai.APIError as e:
            # APIConnectionError/APITimeoutError/APIStatusError 모두 여기로
            log.exception("LLM completion failed: %s", e)
            raise UpstreamUnavailable("Failed to generate response") from e

        text = chat.choices[0].message.content if chat and chat.choices else None
        if not text:
            log.warning("LLM returned empty content (model=%s)", self.model)
            return NO_RESPONSE
        return text

    async def close(self) -> None:
        if self._client is not None:
            await self._client.close()
