"""
LLM Client abstraction supporting multiple providers
"""

import os
from abc import ABC, abstractmethod
from typing import Any

from address_matcher.configuration import ConfigValue
from address_matcher.utility import Registry


class LLMProvider(ABC):
    """Abstract base class for LLM providers"""

    _registry_key: str = "undefined"

    # Name of the environment variable holding the credential, None if no credential is needed
    api_key_env: str | None = None

    @property
    def key(self) -> str:
        return getattr(self, "_registry_key", "undefined")

    @abstractmethod
    async def complete(self, prompt: str, roles: dict[str, str] | None = None, **kwargs) -> str:
        pass

    @abstractmethod
    def get_options_keys(self) -> list[tuple[str, Any]]:
        """Return a list of supported option keys and their default values"""

    @classmethod
    def resolve_api_key(cls) -> str:
        """Credential from `llm.<key>.api_key`, else from the environment variable named by `api_key_env`"""
        api_key: str = ConfigValue(f"llm.{cls._registry_key}.api_key").resolve() or ""
        if not api_key and cls.api_key_env:
            api_key = os.getenv(cls.api_key_env, "")
        return api_key

    @classmethod
    def is_configured(cls) -> bool:
        """True if the provider can be called, i.e. its credential (if any) is set"""
        if not cls.api_key_env:
            return True
        return bool(cls.resolve_api_key())

    def resolve_options(self, kwargs: dict[str, Any]) -> dict[str, Any]:
        opts: dict[str, Any] = dict(kwargs.get("options") or {})
        for k, default in self.get_options_keys():
            if k in opts:
                continue
            if k in kwargs:
                opts[k] = kwargs[k]
                continue
            opts[k] = ConfigValue(f"llm.{self.key}.options.{k},llm.options.{k}", default=default).resolve()
        return opts

    def generate_message_list(self, prompt: str, roles: dict[str, str] | None = None) -> list[dict[str, Any]]:
        messages: list[dict[str, str]] = [{"role": k, "content": v} for k, v in (roles or {}).items() if k != "user"] + [
            {
                "role": "user",
                "content": prompt,
            },
        ]

        return messages


class ProviderRegistry(Registry):

    items: dict[str, type[LLMProvider]] = {}
