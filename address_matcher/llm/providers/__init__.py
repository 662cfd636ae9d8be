import importlib
import pkgutil
from pathlib import Path

from loguru import logger

from address_matcher.configuration import ConfigValue

from .provider import LLMProvider, ProviderRegistry

DEFAULT_PROVIDER: str = "gemini"

Providers: ProviderRegistry = ProviderRegistry()


def get_provider_class(name: str | None = None) -> type[LLMProvider]:
    """Return the provider class registered under name, or the configured `llm.provider`"""
    name = name or ConfigValue("llm.provider", default=DEFAULT_PROVIDER).resolve()
    return Providers.get(name)


def create_provider(name: str | None = None, **kwargs) -> LLMProvider:
    return get_provider_class(name)(**kwargs)


package_dir = Path(__file__).parent

# Import all provider modules so that they register themselves
for module_info in pkgutil.iter_modules([str(package_dir)]):
    if module_info.name not in ["__init__", "provider"]:
        try:
            importlib.import_module(f".{module_info.name}", package=__name__)
        except ImportError as e:
            logger.warning(f"Could not import provider module {module_info.name}: {e}")
