from __future__ import annotations

from complens_core.errors import UnexpectedResponseShape
from complens_core.providers.base import BaseProvider


class GeminiProvider(BaseProvider):
    NAME = "gemini"
    MODEL = "gemini-2.5-flash"

    def __init__(self, api_key: str, model: str | None = None, max_tokens: int | None = None, timeout: float = 120):
        try:
            from google import genai
            from google.genai import types
        except ImportError:
            raise ImportError(
                "The 'google-genai' package is required for this provider. "
                "Install it with: pip install 'complens[gemini]'"
            )
        super().__init__(model=model, max_tokens=max_tokens)
        self._types = types
        # google-genai takes the HTTP timeout in milliseconds.
        self.client = genai.Client(api_key=api_key, http_options=types.HttpOptions(timeout=int(timeout * 1000)))

    def complete(self, prompt: str, max_tokens: int) -> str:
        response = self.client.models.generate_content(
            model=self.model,
            contents=prompt,
            config=self._types.GenerateContentConfig(max_output_tokens=max_tokens),
        )
        # .text is None when the candidate carries no text parts (blocked,
        # function call only, or empty).
        text = response.text
        if not text:
            raise UnexpectedResponseShape("Gemini", "no text parts")
        return text
