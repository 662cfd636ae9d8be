from typing import Any

import ollama

from address_matcher.configuration import ConfigValue

from . import Providers
from .provider import LLMProvider


@Providers.register(key="ollama")
class OllamaProvider(LLMProvider):
    """Ollama local LLM provider, needs no API key"""

    def __init__(self, host: str | None = None, model: str | None = None) -> None:
        self.host: str | None = host or ConfigValue(f"llm.{self.key}.host").resolve()
        self.model: str | None = model or ConfigValue(f"llm.{self.key}.model", default="llama3.1").resolve()
        self.timeout: int | None = ConfigValue(f"llm.{self.key}.timeout", default=30).resolve()
        self.client: ollama.AsyncClient = ollama.AsyncClient(host=self.host, timeout=self.timeout)

    async def complete(self, prompt: str, roles: dict[str, str] | None = None, **kwargs) -> str:
        messages: list[dict[str, Any]] = self.generate_message_list(prompt, roles)
        response: ollama.ChatResponse = await self.client.chat(
            model=self.model,
            messages=messages,
            options=self.resolve_options(kwargs),
            format="json",
            stream=False,
        )
        return response.message.content or ""

    def get_options_keys(self) -> list[tuple[str, Any]]:
        return [("temperature", 0.1), ("num_predict", 1024)]
