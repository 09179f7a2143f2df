from __future__ import annotations

from adolens_core.providers.base import BaseReviewer


class AnthropicReviewer(BaseReviewer):
    MODEL = "claude-sonnet-4-20250514"
    TEMPERATURE = 0.3

    def __init__(self, api_key: str, **kwargs):
        super().__init__(**kwargs)
        try:
            from anthropic import Anthropic
        except ImportError:
            raise ImportError(
                "The 'anthropic' package is required for this provider. "
                "Install it with: pip install 'adolens[anthropic]'"
            )
        self.client = Anthropic(api_key=api_key, timeout=self.timeout)

    def _call_api(self, prompt: str, model: str) -> str:
        from anthropic.types import TextBlock

        response = self.client.messages.create(
            model=model,
            messages=[{"role": "user", "content": prompt}],
            temperature=self.TEMPERATURE,
            max_tokens=self.MAX_TOKENS,
        )
        text_blocks = [block.text for block in response.content if isinstance(block, TextBlock)]
        return "".join(text_blocks).strip()
