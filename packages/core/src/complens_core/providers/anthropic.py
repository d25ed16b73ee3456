from __future__ import annotations

from complens_core.errors import UnexpectedResponseShape
from complens_core.providers.base import BaseProvider


class AnthropicProvider(BaseProvider):
    NAME = "anthropic"
    MODEL = "claude-sonnet-4-20250514"

    def __init__(self, api_key: str, model: str | None = None, max_tokens: int | None = None, timeout: float = 120):
        try:
            from anthropic import Anthropic
        except ImportError:
            raise ImportError(
                "The 'anthropic' package is required for this provider. "
                "Install it with: pip install anthropic"
            )
        super().__init__(model=model, max_tokens=max_tokens)
        self.client = Anthropic(api_key=api_key, timeout=timeout)

    def complete(self, prompt: str, max_tokens: int) -> str:
        response = self.client.messages.create(
            model=self.model,
            max_tokens=max_tokens,
            messages=[{"role": "user", "content": prompt}],
        )
        # The first content block must be text; tool use or thinking blocks
        # mean the model did not answer in the requested format.
        if not response.content:
            raise UnexpectedResponseShape("Claude", "empty content")
        block = response.content[0]
        if block.type != "text":
            raise UnexpectedResponseShape("Claude", block.type)
        return block.text
