from __future__ import annotations

import os
from typing import Optional, Sequence

from openai import AsyncOpenAI

from autonomy_gate.ai.types import ChatMessage


class OpenAIProvider:
    """Chat completions against OpenAI or any OpenAI-compatible endpoint (Groq)."""

    def __init__(
        self,
        model: str,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout_s: float = 30.0,
        max_retries: int = 2,
        max_output_tokens: int = 900,
    ):
        self.model = model
        self._max_output_tokens = max_output_tokens
        key = (api_key or os.getenv("OPENAI_API_KEY") or "").strip()
        if not key:
            raise RuntimeError("LLM API key is missing")

        self._client = AsyncOpenAI(
            api_key=key,
            base_url=(base_url or os.getenv("OPENAI_BASE_URL") or None),
            timeout=float(os.getenv("LLM_TIMEOUT_S", str(timeout_s))),
            max_retries=int(os.getenv("LLM_MAX_RETRIES", str(max_retries))),
        )

    async def complete_json(
        self, messages: Sequence[ChatMessage], *, temperature: float = 0.1
    ) -> str:
        payload = [{"role": m.role, "content": m.content} for m in messages]
        response = await self._client.chat.completions.create(
            model=self.model,
            messages=payload,
            temperature=temperature,
            response_format={"type": "json_object"},
            max_tokens=self._max_output_tokens,
        )
        if not response.choices:
            return ""
        return response.choices[0].message.content or ""
