"""Google Gemini generateContent adapter."""

from __future__ import annotations

from typing import Any

from polyvoice.core.catalog import ProviderId
from polyvoice.logging_config import get_logger
from polyvoice.services.base import HttpProviderAdapter, extract_text
from polyvoice.services.llm.exceptions import GenerationError
from polyvoice.services.llm.protocol import GenerationRequest

logger: Any = get_logger(__name__)

GEMINI_API_BASE = "https://generativelanguage.googleapis.com/v1beta/models"


class GeminiService(HttpProviderAdapter):
    provider = ProviderId.GEMINI
    error_cls = GenerationError

    async def invoke(self, request: GenerationRequest) -> str:
        response = await self._request(
            "POST",
            f"{GEMINI_API_BASE}/{self._settings.gemini_model}:generateContent",
            params={"key": self._secret("GEMINI_API_KEY")},
            json={
                "contents": [
                    {
                        "role": "user",
                        "parts": [{"text": f"User: {request.user_name}\nPrompt: {request.prompt}"}],
                    }
                ]
            },
        )
        data = self._json(response)
        return extract_text(data, "candidates", 0, "content", "parts", 0, "text")
