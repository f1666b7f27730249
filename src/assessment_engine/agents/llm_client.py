from __future__ import annotations

import os
from typing import Any, Dict, List, Optional

from openai import AsyncOpenAI

from assessment_engine.config.schema import ModelConfig


class LLMClient:
    """Minimal helper for issuing async chat completions."""

    def __init__(self, config: ModelConfig, api_key: Optional[str] = None, client: Optional[AsyncOpenAI] = None):
        self.config = config
        key = api_key or os.getenv("OPENAI_API_KEY")
        if not key and client is None:
            raise RuntimeError("OPENAI_API_KEY must be set or an OpenAI client provided.")
        self.client = client or AsyncOpenAI(api_key=key)

    async def generate(self, messages: List[Dict[str, Any]], **kwargs: Any) -> str:
        params = {
            "model": self.config.name,
            "temperature": self.config.temperature,
            "max_tokens": self.config.max_output_tokens,
        }
        params.update(kwargs)
        response = await self.client.chat.completions.create(messages=messages, **params)
        return response.choices[0].message.content or ""
