import os

import dotenv
from loguru import logger

from address_matcher.utility import configure_logging

from .config import Config
from .inject import ConfigStore

dotenv.load_dotenv(dotenv_path=os.getenv("ENV_FILE", ".env"))


async def setup_config_store(filename: str = "config.yml", configure_logs: bool = True) -> None:
    """Load the configuration into the store once. Log sinks from `logging.handlers` are installed unless `configure_logs` is False."""

    config_file: str = os.getenv("CONFIG_FILE", filename)
    store: ConfigStore = ConfigStore.get_instance()

    if store.is_configured():
        return

    store.configure_context(source=config_file, env_filename=os.getenv("ENV_FILE", ".env"), env_prefix="ADDRESS_MATCHER")

    assert store.is_configured(), "Config Store failed to configure properly"

    cfg: Config = store.config()
    if not cfg:
        raise ValueError("Config Store did not return a config")

    cfg.update({"runtime:config_file": config_file})

    if configure_logs:
        configure_logging(cfg.get("logging") or {})

    logger.debug(f"Configuration: {cfg.redacted()}")

    logger.info(f"Config Store initialized successfully from {config_file}.")
