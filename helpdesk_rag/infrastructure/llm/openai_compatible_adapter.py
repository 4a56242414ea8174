from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from importlib import import_module
from typing import Any, cast

from ...application.ports.llm_port import ChatMessage, LLMPort, LLMResponse
from ...domain.errors import GenerationBackendError

logger = logging.getLogger(__name__)


@dataclass
class OpenAICompatibleAdapter(LLMPort):
    """Chat completions against any OpenAI-compatible endpoint (Groq, vLLM, OpenAI)."""

    base_url: str = "https://api.groq.com/openai/v1"
    api_key: str | None = None
    model: str = "llama-3.3-70b-versatile"
    timeout_s: float = 60.0
    _client: Any | None = field(default=None, init=False, repr=False)

    def _ensure_client(self) -> Any:
        if not self.api_key:
            raise GenerationBackendError(
                "LLM_API_KEY is not configured. Please add it to your environment variables."
            )
        if self._client is None:
            # Import erst bei Bedarf, Tests laufen ohne openai
            try:
                module = import_module("openai")
            except Exception as ex:  # noqa: BLE001
                raise GenerationBackendError("openai package not installed") from ex
            self._client = module.OpenAI(
                base_url=self.base_url, api_key=self.api_key, timeout=self.timeout_s
            )
        return self._client

    def chat(
        self,
        messages: Sequence[ChatMessage],
        temperature: float = 0.2,
        max_tokens: int = 512,
        json_mode: bool = False,
    ) -> LLMResponse:
        client = self._ensure_client()
        kwargs: dict[str, Any] = {}
        if json_mode:
            kwargs["response_format"] = {"type": "json_object"}
        try:
            payload: Any = [{"role": m.role, "content": m.content} for m in messages]
            resp: Any = client.chat.completions.create(
                model=self.model,
                messages=cast(Any, payload),
                temperature=temperature,
                max_tokens=max_tokens,
                **kwargs,
            )
            choice = resp.choices[0]
            usage = getattr(resp, "usage", None)
            return LLMResponse(
                text=choice.message.content or "",
                finish_reason=choice.finish_reason or "stop",
                usage_tokens=getattr(usage, "total_tokens", None),
            )
        except Exception as ex:  # noqa: BLE001
            # Translate external errors to domain-specific errors
            raise GenerationBackendError(f"LLM communication failed: {ex}") from ex
