"""OpenAI chat completions adapter."""

from __future__ import annotations

from typing import Any

from polyvoice.core.catalog import ProviderId
from polyvoice.logging_config import get_logger
from polyvoice.services.base import HttpProviderAdapter, extract_text
from polyvoice.services.llm.exceptions import GenerationError
from polyvoice.services.llm.protocol import GenerationRequest

logger: Any = get_logger(__name__)

OPENAI_CHAT_URL = "https://api.openai.com/v1/chat/completions"


class OpenAIChatService(HttpProviderAdapter):
    """Single-turn chat completion: fixed system prompt plus the user's utterance."""

    provider = ProviderId.OPENAI_API
    error_cls = GenerationError

    def build_messages(self, request: GenerationRequest) -> list[dict[str, str]]:
        return [
            {"role": "system", "content": self._settings.openai_system_prompt},
            {
                "role": "user",
                "content": f"User name: {request.user_name}\nPrompt: {request.prompt}",
            },
        ]

    async def invoke(self, request: GenerationRequest) -> str:
        response = await self._request(
            "POST",
            OPENAI_CHAT_URL,
            headers={"Authorization": f"Bearer {self._secret('OPENAI_API_KEY')}"},
            json={
                "model": self._settings.openai_chat_model,
                "messages": self.build_messages(request),
            },
        )
        return extract_text(self._json(response), "choices", 0, "message", "content")
