import os
from typing import Any, Generator

import pytest

from address_matcher.configuration import Config, ConfigFactory, ConfigStore, MockConfigProvider, reset_config_provider

# pylint: disable=unused-argument, redefined-outer-name


def pytest_sessionstart(session) -> None:
    """Hook to run before any tests are executed."""
    os.environ["CONFIG_FILE"] = "./tests/config.yml"
    os.environ["ENV_FILE"] = "./tests/.env"


@pytest.fixture(autouse=True)
def setup_reset_config(monkeypatch: pytest.MonkeyPatch) -> Generator[None, Any, None]:
    """Reset Config Store and provider before each test, credentials come from tests/config.yml only"""
    for name in ("GEMINI_API_KEY", "OPENAI_API_KEY", "STUB_API_KEY"):
        monkeypatch.delenv(name, raising=False)
    ConfigStore.reset_instance()
    reset_config_provider()
    yield
    ConfigStore.reset_instance()
    reset_config_provider()


@pytest.fixture
def test_config() -> Config:
    """Provide test configuration"""
    factory: ConfigFactory = ConfigFactory()
    return factory.load(source="./tests/config.yml", context="default", env_filename="./tests/.env")


@pytest.fixture
def test_provider(test_config: Config) -> MockConfigProvider:
    """Provide MockConfigProvider with test configuration"""
    return MockConfigProvider(test_config)

