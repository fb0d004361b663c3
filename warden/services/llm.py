"""LLM interaction helpers for Warden."""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union

from openai import AsyncOpenAI

logger = logging.getLogger(__name__)


class LLMUnavailable(RuntimeError):
    """Raised when an LLM request is made without configuration."""


class LLMClient:
    """Wrapper around OpenAI's async client with graceful fallbacks."""

    def __init__(
        self,
        api_key: Optional[str],
        model: str,
        base_url: Optional[str] = None,
        timeout: float = 30.0,
    ):
        self._model = model
        self._client: Optional[AsyncOpenAI] = None
        if api_key:
            self._client = AsyncOpenAI(api_key=api_key, base_url=base_url, timeout=timeout)

    @property
    def model(self) -> str:
        return self._model

    def is_configured(self) -> bool:
        return self._client is not None

    async def run(
        self,
        messages: Iterable[Dict[str, Any]],
        max_tokens: int = 1500,
        temperature: float = 0.4,
    ) -> Dict[str, Any]:
        """Execute a chat completion and return the first choice as a dict."""

        if self._client is None:
            raise LLMUnavailable(
                "LLM credentials not configured. Set OPENAI_API_KEY before enabling reasoning."
            )

        response = await self._client.chat.completions.create(
            model=self._model,
            messages=list(messages),
            max_tokens=max_tokens,
            temperature=temperature,
        )

        choice = response.choices[0]
        return choice.model_dump()

    async def generate(
        self,
        system_instruction: str,
        payload: Union[str, Mapping[str, Any]],
        max_tokens: int = 800,
    ) -> str:
        """Send one system/user exchange and return the raw text answer."""

        if isinstance(payload, str):
            user_content = payload
        else:
            user_content = json.dumps(payload, ensure_ascii=False, indent=2)

        choice = await self.run(
            [
                {"role": "system", "content": system_instruction},
                {"role": "user", "content": user_content},
            ],
            max_tokens=max_tokens,
        )
        return self.extract_text(choice)

    async def reply(
        self,
        system_instruction: str,
        history: Iterable[Mapping[str, str]],
        user_text: str,
        max_tokens: int = 1500,
    ) -> str:
        """Answer ``user_text`` given prior conversation turns."""

        messages: List[Dict[str, Any]] = [{"role": "system", "content": system_instruction}]
        for turn in history:
            messages.append({"role": turn["role"], "content": turn["text"]})
        messages.append({"role": "user", "content": user_text})

        choice = await self.run(messages, max_tokens=max_tokens, temperature=0.7)
        return self.extract_text(choice)

    @staticmethod
    def extract_text(choice: Mapping[str, Any]) -> str:
        content = (choice.get("message") or {}).get("content")
        return content.strip() if isinstance(content, str) else ""
