from __future__ import annotations

try:
    from openai import OpenAI as _OpenAI
except ImportError:
    _OpenAI = None  # type: ignore[assignment,misc]

from adolens_core.providers.base import BaseReviewer


class OpenAIReviewer(BaseReviewer):
    MODEL = "gpt-4o"
    # Lower than Gemini's 0.3 to lean toward deterministic JSON output.
    TEMPERATURE = 0.2

    def __init__(self, api_key: str, **kwargs):
        super().__init__(**kwargs)
        if _OpenAI is None:
            raise ImportError(
                "The 'openai' package is required for this provider. " "Install it with: pip install 'adolens[openai]'"
            )
        self.client = _OpenAI(api_key=api_key, timeout=self.timeout)

    def _call_api(self, prompt: str, model: str) -> str:
        response = self.client.chat.completions.create(
            model=model,
            messages=[{"role": "user", "content": prompt}],
            temperature=self.TEMPERATURE,
            max_tokens=self.MAX_TOKENS,
        )
        return response.choices[0].message.content or ""
