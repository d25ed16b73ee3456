from __future__ import annotations

try:
    from openai import OpenAI as _OpenAI
except ImportError:
    _OpenAI = None  # type: ignore[assignment,misc]

from complens_core.errors import UnexpectedResponseShape
from complens_core.providers.base import BaseProvider


class OpenAIProvider(BaseProvider):
    NAME = "openai"
    MODEL = "gpt-4o"

    def __init__(self, api_key: str, model: str | None = None, max_tokens: int | None = None, timeout: float = 120):
        if _OpenAI is None:
            raise ImportError(
                "The 'openai' package is required for this provider. Install it with: pip install openai"
            )
        super().__init__(model=model, max_tokens=max_tokens)
        self.client = _OpenAI(api_key=api_key, timeout=timeout)

    def complete(self, prompt: str, max_tokens: int) -> str:
        response = self.client.chat.completions.create(
            model=self.model,
            messages=[{"role": "user", "content": prompt}],
            max_tokens=max_tokens,
        )
        content = response.choices[0].message.content if response.choices else None
        if not isinstance(content, str):
            raise UnexpectedResponseShape("OpenAI", type(content).__name__)
        return content
