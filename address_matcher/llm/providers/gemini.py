from typing import Any

import google.generativeai as genai

from address_matcher.configuration import ConfigValue

from . import Providers
from .provider import LLMProvider


@Providers.register(key="gemini")
class GeminiProvider(LLMProvider):
    """Google Gemini API provider"""

    api_key_env: str = "GEMINI_API_KEY"

    def __init__(self, api_key: str | None = None, model: str | None = None) -> None:
        self.api_key: str = api_key or self.resolve_api_key()
        self.model: str = model or ConfigValue(f"llm.{self.key}.model", default="gemini-1.5-pro").resolve()
        self.timeout: int | None = ConfigValue(f"llm.{self.key}.timeout").resolve()
        self._client: genai.GenerativeModel | None = None

    @property
    def client(self) -> genai.GenerativeModel:
        if self._client is None:
            genai.configure(api_key=self.api_key)
            self._client = genai.GenerativeModel(self.model)
        return self._client

    async def complete(self, prompt: str, roles: dict[str, str] | None = None, **kwargs) -> str:
        # Gemini has no chat roles for a single-shot call, other roles are prepended to the prompt
        preamble: list[str] = [v for k, v in (roles or {}).items() if k != "user"]
        contents: str = "\n\n".join(preamble + [prompt])

        request_options: dict[str, Any] = {"timeout": self.timeout} if self.timeout else {}
        response = await self.client.generate_content_async(
            contents,
            generation_config=genai.types.GenerationConfig(**self.resolve_options(kwargs)),
            request_options=request_options or None,
        )
        return response.text

    def get_options_keys(self) -> list[tuple[str, Any]]:
        return [("temperature", 0.1), ("max_output_tokens", 1024)]
