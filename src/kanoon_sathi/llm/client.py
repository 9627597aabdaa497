import logging
from typing import List, Dict, Any

import httpx

from ..config import settings
from ..core.errors import UpstreamServiceError

logger = logging.getLogger("kanoon.llm")


class LLMClient:
    def __init__(
        self,
        api_key: str | None = None,
        base_url: str | None = None,
        model: str | None = None,
        timeout: float | None = None,
    ):
        self.api_key = api_key or settings.openai_api_key.get_secret_value()
        self.base_url = (base_url or settings.llm_base_url).rstrip("/")
        self.model = model or settings.chat_model
        self.timeout = timeout or settings.llm_timeout_seconds

    async def chat(
        self,
        system_prompt: str,
        messages: List[Dict[str, Any]],
        tools: List[Dict[str, Any]] | None = None,
        temperature: float = 0.2,
        model: str | None = None,
    ) -> Dict[str, Any]:
        """
        Returns the raw message dict from the chat completions API, e.g.:
        {
            "role": "assistant",
            "content": "...",
            "tool_calls": [...]
        }
        """
        payload = {
            "model": model or self.model,
            "messages": [{"role": "system", "content": system_prompt}] + messages,
            "temperature": temperature,
        }
        if tools:
            payload["tools"] = tools

        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                resp = await client.post(
                    f"{self.base_url}/chat/completions",
                    json=payload,
                    headers={"Authorization": f"Bearer {self.api_key}"},
                )
            resp.raise_for_status()
        except httpx.HTTPError as exc:
            logger.error("Chat completion failed (%s): %s", type(exc).__name__, exc)
            raise UpstreamServiceError(
                f"Chat completion failed: {type(exc).__name__}"
            ) from exc

        try:
            data = resp.json()
            return data["choices"][0]["message"]
        except (ValueError, KeyError, IndexError, TypeError) as exc:
            raise UpstreamServiceError("Malformed chat completion response") from exc

    async def complete(
        self,
        system_prompt: str,
        prompt: str,
        temperature: float = 0.0,
        model: str | None = None,
    ) -> str:
        """Single-turn call without tools. Returns the text ('' if none)."""
        message = await self.chat(
            system_prompt,
            [{"role": "user", "content": prompt}],
            temperature=temperature,
            model=model,
        )
        return (message.get("content") or "").strip()
