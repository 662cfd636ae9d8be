from typing import Any

from openai import AsyncOpenAI
from openai.types.chat.chat_completion import ChatCompletion

from address_matcher.configuration import ConfigValue

from . import Providers
from .provider import LLMProvider


@Providers.register(key="openai")
class OpenAIProvider(LLMProvider):
    """OpenAI API provider"""

    api_key_env: str = "OPENAI_API_KEY"

    def __init__(self, api_key: str | None = None, model: str | None = None) -> None:
        self.api_key: str = api_key or self.resolve_api_key()
        self.model: str = model or ConfigValue(f"llm.{self.key}.model", default="gpt-4o-mini").resolve()
        self.timeout: float | None = ConfigValue(f"llm.{self.key}.timeout").resolve()
        self._client: AsyncOpenAI | None = None

    @property
    def client(self) -> AsyncOpenAI:
        if self._client is None:
            options: dict[str, Any] = {"timeout": self.timeout} if self.timeout else {}
            self._client = AsyncOpenAI(api_key=self.api_key, **options)
        return self._client

    async def complete(self, prompt: str, roles: dict[str, str] | None = None, **kwargs) -> str:
        opts: dict[str, Any] = self.resolve_options(kwargs)
        messages: list[dict[str, Any]] = self.generate_message_list(prompt, roles)
        response: ChatCompletion = await self.client.chat.completions.create(model=self.model, messages=messages, **opts)  # type: ignore
        content: str = response.choices[0].message.content or ""
        return content.strip().removeprefix("```json").removesuffix("```").strip()

    def get_options_keys(self) -> list[tuple[str, Any]]:
        return [("temperature", 0.1), ("max_tokens", 1024)]
