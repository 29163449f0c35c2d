"""OpenRouter chat-completions adapter (OpenAI-compatible wire format)."""

from __future__ import annotations

from typing import Any

import httpx

from reelpicks.adapters.outbound.llm.base import HttpBackendAdapter, classify_status
from reelpicks.domain.enums import ProviderFamily
from reelpicks.shared.providers.types import AdapterResult

OPENROUTER_BASE_URL = "https://openrouter.ai/api/v1"


class OpenRouterAdapter(HttpBackendAdapter):
    """System + user messages with ``response_format=json_object``."""

    family = ProviderFamily.OPENROUTER

    async def _send(self, system_prompt: str, user_prompt: str, model: str) -> httpx.Response:
        return await self._client.post(
            f"{self._base_url}/chat/completions",
            headers={
                "Authorization": f"Bearer {self._api_key}",
                "Content-Type": "application/json",
            },
            json={
                "model": model,
                "messages": [
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": user_prompt},
                ],
                "response_format": {"type": "json_object"},
            },
        )

    def _extract_text(self, data: Any) -> str:
        try:
            content = data["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError):
            return ""
        if isinstance(content, list):
            # Multi-part content: keep the text parts only
            return "".join(
                part.get("text", "") for part in content if isinstance(part, dict)
            )
        return content if isinstance(content, str) else ""

    def _embedded_error(self, data: Any) -> AdapterResult | None:
        error = data.get("error") if isinstance(data, dict) else None
        if not isinstance(error, dict):
            return None
        code = error.get("code")
        status = code if isinstance(code, int) else 0
        return AdapterResult(
            classify_status(status),
            error=str(error.get("message") or "provider error"),
            status_code=status or None,
        )
