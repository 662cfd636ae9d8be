"""
Address comparison delegated to an LLM.

The model is asked to judge whether two addresses denote the same physical
location and to answer with a single JSON object. The reply is untrusted free
text: the object is extracted, validated and returned as a ComparisonResult.
Any failure yields a degraded result instead of an exception.
"""

import json
from typing import Any

from jinja2 import BaseLoader, Environment
from loguru import logger
from pydantic import ValidationError

from address_matcher.api.model import ComparisonResult
from address_matcher.configuration import ConfigValue
from address_matcher.errors import ConfigurationError, ParseError, UpstreamError
from address_matcher.llm.providers import create_provider
from address_matcher.llm.providers.provider import LLMProvider

JINJA = Environment(loader=BaseLoader(), autoescape=False)

DEFAULT_PROMPT_TEMPLATE: str = """
I need to compare two addresses to determine if they refer to the same physical location.

Address 1: "{{ address1 }}"
Address 2: "{{ address2 }}"

Please analyze these addresses and provide a JSON response with the following structure:
{
  "match": boolean (true if they are the same location, false otherwise),
  "confidence": number (between 0 and 1, representing your confidence in the match assessment),
  "explanation": string (brief explanation of your reasoning)
}

Consider variations in formatting, abbreviations, missing apartment/unit numbers,
typos, and other common differences in address notation.

Provide ONLY the JSON response without any additional text.
"""


def extract_json_object(text: str) -> dict[str, Any]:
    """Extract the JSON object embedded in a free text reply.

    The greedy span from the first '{' to the last '}' is tried first. If it
    does not decode (e.g. the reply holds several objects) the first balanced
    object starting at the first '{' is used instead.
    """
    start: int = text.find("{")
    end: int = text.rfind("}")
    if start < 0 or end < start:
        raise ParseError("no JSON object found in response")

    try:
        data: Any = json.loads(text[start : end + 1])
    except json.JSONDecodeError:
        try:
            data, _ = json.JSONDecoder().raw_decode(text, start)
        except json.JSONDecodeError as e:
            raise ParseError(e.msg) from e

    if not isinstance(data, dict):
        raise ParseError(f"expected a JSON object, found {type(data).__name__}")

    return data


def parse_comparison_result(text: str) -> ComparisonResult:
    data: dict[str, Any] = extract_json_object(text)
    try:
        result: ComparisonResult = ComparisonResult.model_validate(data)
    except ValidationError as e:
        fields: str = ", ".join(".".join(str(x) for x in err["loc"]) for err in e.errors())
        raise ParseError(f"invalid or missing fields: {fields}") from e

    if not 0.0 <= result.confidence <= 1.0:
        logger.warning(f"Model reported confidence {result.confidence} outside [0, 1], clamping")
        result.confidence = min(1.0, max(0.0, result.confidence))

    return result


class AddressComparator:
    """Compares two addresses using the configured (or given) LLM provider"""

    def __init__(self, provider: LLMProvider | None = None, prompt_template: str | None = None) -> None:
        self._provider: LLMProvider | None = provider
        self._prompt_template: str | None = prompt_template

    @property
    def provider(self) -> LLMProvider:
        if self._provider is None:
            self._provider = create_provider()
        return self._provider

    @property
    def prompt_template(self) -> str:
        if self._prompt_template is None:
            self._prompt_template = ConfigValue("llm.prompts.address_comparison").resolve() or DEFAULT_PROMPT_TEMPLATE
        return self._prompt_template

    def generate_prompt(self, address1: str, address2: str) -> str:
        return JINJA.from_string(self.prompt_template).render(address1=address1, address2=address2)

    async def generate(self, prompt: str) -> str:
        provider: LLMProvider = self.provider
        try:
            return await provider.complete(prompt)
        except Exception as e:  # pylint: disable=broad-exception-caught
            raise UpstreamError(provider.key, e) from e

    async def compare(self, address1: str, address2: str) -> ComparisonResult:
        """Compare two addresses. Never raises, failures are returned as a degraded result."""
        try:
            if not self.provider.is_configured():
                raise ConfigurationError(self.provider.api_key_env)

            prompt: str = self.generate_prompt(address1, address2)
            logger.debug(f"Generated prompt length: {len(prompt)} characters")

            text: str = await self.generate(prompt)

            return parse_comparison_result(text)

        except Exception as e:  # pylint: disable=broad-exception-caught
            logger.error(f"Error comparing addresses: {e}")
            return ComparisonResult.degraded(str(e))


async def compare_addresses(address1: str, address2: str) -> ComparisonResult:
    return await AddressComparator().compare(address1, address2)
