from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger

from address_matcher.api.router import router
from address_matcher.configuration import ConfigProvider, get_config_provider, setup_config_store
from address_matcher.llm.providers import get_provider_class

app = FastAPI(title="Address Matcher")
app.add_middleware(CORSMiddleware, allow_origins=["*"], allow_methods=["*"], allow_headers=["*"])

app.include_router(router)


@app.on_event("startup")
async def startup():
    try:
        logger.info("Starting up application...")
        await setup_config_store()

        provider: ConfigProvider = get_config_provider()
        if not provider.is_configured():
            raise RuntimeError("Configuration setup failed")

        llm = get_provider_class()
        if not llm.is_configured():
            logger.warning(f"{llm.api_key_env} is not set, address comparisons will be rejected")

        logger.info("Application startup completed successfully")

    except Exception as e:
        logger.error(f"Failed to start application: {e}")
        raise
