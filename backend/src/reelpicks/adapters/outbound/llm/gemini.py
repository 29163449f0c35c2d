"""Google Gemini ``generateContent`` adapter."""

from __future__ import annotations

from typing import Any

import httpx

from reelpicks.adapters.outbound.llm.base import HttpBackendAdapter
from reelpicks.application.prompts import RECOMMENDATIONS_SCHEMA
from reelpicks.domain.enums import ProviderFamily

GEMINI_BASE_URL = "https://generativelanguage.googleapis.com/v1beta"


class GeminiAdapter(HttpBackendAdapter):
    """Sends the prompt as a single user part with a JSON response schema."""

    family = ProviderFamily.GEMINI

    def __init__(
        self,
        api_key: str,
        *,
        base_url: str = GEMINI_BASE_URL,
        timeout: float = 60.0,
        client: httpx.AsyncClient | None = None,
        temperature: float = 0.8,
        max_output_tokens: int = 10 * 4096,
    ) -> None:
        super().__init__(api_key, base_url=base_url, timeout=timeout, client=client)
        self._temperature = temperature
        self._max_output_tokens = max_output_tokens

    def model_url(self, model: str) -> str:
        return f"{self._base_url}/models/{model}:generateContent"

    async def _send(self, system_prompt: str, user_prompt: str, model: str) -> httpx.Response:
        return await self._client.post(
            self.model_url(model),
            params={"key": self._api_key},
            headers={"Content-Type": "application/json"},
            json={
                "contents": [{"parts": [{"text": f"{system_prompt}\n\n{user_prompt}"}]}],
                "generationConfig": {
                    "temperature": self._temperature,
                    "topK": 40,
                    "topP": 0.95,
                    "maxOutputTokens": self._max_output_tokens,
                    "responseMimeType": "application/json",
                    "responseSchema": RECOMMENDATIONS_SCHEMA,
                },
            },
        )

    def _extract_text(self, data: Any) -> str:
        try:
            text = data["candidates"][0]["content"]["parts"][0]["text"]
        except (KeyError, IndexError, TypeError):
            return ""
        return text if isinstance(text, str) else ""
