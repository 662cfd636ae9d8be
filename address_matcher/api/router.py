"""
FastAPI router for the address comparison endpoints.
"""

from typing import Any

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from loguru import logger
from pydantic import ValidationError

from address_matcher.api.model import ComparisonRequest, ComparisonResult, ConfigStatus, ErrorResponse
from address_matcher.comparator import compare_addresses
from address_matcher.configuration import Config, get_config_provider, setup_config_store
from address_matcher.llm.providers import get_provider_class
from address_matcher.llm.providers.provider import LLMProvider

# pylint: disable=unused-argument


async def get_config_dependency() -> Config:
    if not get_config_provider().is_configured():
        logger.info("Config Store is not configured, setting up...")
        await setup_config_store()
    return get_config_provider().get_config()


def format_validation_errors(error: ValidationError) -> dict[str, Any]:
    """Group pydantic validation errors by field: {"address1": ["Field required"], ...}"""
    details: dict[str, list[str]] = {}
    for err in error.errors(include_url=False):
        field: str = ".".join(str(x) for x in err["loc"]) or "_root"
        details.setdefault(field, []).append(err["msg"])
    return details


router = APIRouter()


@router.get("/is_alive")
async def is_alive(config: Config = Depends(get_config_dependency)) -> dict[str, str]:
    """Health check endpoint"""
    return {"status": "alive"}


@router.get("/api/config", response_model=ConfigStatus)
async def config_status(config: Config = Depends(get_config_dependency)) -> ConfigStatus:
    """
    Tells the presentation layer whether the LLM credential is configured.

    The key itself is never returned.
    """
    provider_class: type[LLMProvider] = get_provider_class()
    return ConfigStatus(provider=provider_class._registry_key, has_api_key=provider_class.is_configured())  # pylint: disable=protected-access


@router.post(
    "/api/compare-addresses",
    response_model=ComparisonResult,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def compare(request: Request, config: Config = Depends(get_config_dependency)) -> ComparisonResult | JSONResponse:
    """
    Compare two addresses and tell if they refer to the same physical location.

    Request Body:
    -------------
    {
        "address1": "221B Baker Street, London",
        "address2": "221b Baker St., London NW1 6XE"
    }

    Response Format:
    ---------------
    {
        "match": true,
        "confidence": 0.95,
        "explanation": "Same street number and street, 'St.' abbreviates 'Street'"
    }

    Failures inside the comparison (model unreachable, unparsable reply) still
    return 200 with match=false, confidence=0 and the error in the explanation.

    Error Responses:
    ---------------
    - 400: Missing or empty address ("Invalid request" with field details)
    - 500: LLM credential not configured ("Configuration error")
    - 500: Anything unexpected, e.g. a body that is not JSON ("Failed to compare addresses")
    """
    try:
        body: Any = await request.json()

        try:
            payload: ComparisonRequest = ComparisonRequest.model_validate(body)
        except ValidationError as e:
            logger.info(f"Invalid comparison request: {e.error_count()} error(s)")
            return JSONResponse(
                ErrorResponse(error="Invalid request", details=format_validation_errors(e)).model_dump(exclude_none=True),
                status_code=400,
            )

        provider_class: type[LLMProvider] = get_provider_class()
        if not provider_class.is_configured():
            logger.error(f"{provider_class.api_key_env} is not configured")
            return JSONResponse(
                ErrorResponse(
                    error="Configuration error",
                    message=f"{provider_class.api_key_env} is not set in environment variables",
                ).model_dump(exclude_none=True),
                status_code=500,
            )

        return await compare_addresses(payload.address1, payload.address2)

    except Exception as e:  # pylint: disable=broad-exception-caught
        logger.exception(f"Exception in compare-addresses endpoint: {e}")
        return JSONResponse(
            ErrorResponse(error="Failed to compare addresses", message=str(e) or "Unknown error").model_dump(exclude_none=True),
            status_code=500,
        )
