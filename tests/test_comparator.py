"""
Unit tests for the LLM backed address comparator.
"""

import httpx
import pytest

from address_matcher.api.model import ComparisonResult
from address_matcher.comparator import (
    DEFAULT_PROMPT_TEMPLATE,
    AddressComparator,
    extract_json_object,
    parse_comparison_result,
)
from address_matcher.configuration import MockConfigProvider
from address_matcher.errors import ParseError
from tests.decorators import with_test_config
from tests.llm_stubs import KeyedStubProvider, StubProvider

# pylint: disable=unused-argument


class TestExtractJsonObject:

    def test_exact_object(self):
        assert extract_json_object('{"match": true}') == {"match": True}

    def test_object_wrapped_in_prose(self):
        text = 'Here is my answer: {"match": false, "confidence": 0.2, "explanation": "different cities"} Thanks!'
        assert extract_json_object(text) == {"match": False, "confidence": 0.2, "explanation": "different cities"}

    def test_markdown_fenced_object(self):
        text = '```json\n{"match": true, "confidence": 1, "explanation": "x"}\n```'
        assert extract_json_object(text)["confidence"] == 1

    def test_nested_object_is_kept_whole(self):
        text = 'Answer {"match": true, "meta": {"a": 1}} end'
        assert extract_json_object(text) == {"match": True, "meta": {"a": 1}}

    def test_several_objects_falls_back_to_first_balanced(self):
        text = 'First {"match": true, "confidence": 0.9, "explanation": "a"} and then {"other": 1}'
        assert extract_json_object(text) == {"match": True, "confidence": 0.9, "explanation": "a"}

    @pytest.mark.parametrize("text", ["I cannot determine this.", "", "} backwards {"])
    def test_no_object(self, text):
        with pytest.raises(ParseError, match="Failed to parse JSON response"):
            extract_json_object(text)

    def test_malformed_object(self):
        with pytest.raises(ParseError, match="Failed to parse JSON response"):
            extract_json_object("{match: yes, confidence: high}")


class TestParseComparisonResult:

    def test_valid_result(self):
        result = parse_comparison_result('{"match": true, "confidence": 0.95, "explanation": "same location"}')
        assert result == ComparisonResult(match=True, confidence=0.95, explanation="same location")

    def test_missing_field(self):
        with pytest.raises(ParseError, match="explanation"):
            parse_comparison_result('{"match": true, "confidence": 0.95}')

    def test_wrong_type(self):
        with pytest.raises(ParseError, match="confidence"):
            parse_comparison_result('{"match": true, "confidence": "very", "explanation": "x"}')

    @pytest.mark.parametrize("reported, expected", [(1.7, 1.0), (-0.3, 0.0), (0.0, 0.0), (1.0, 1.0)])
    def test_confidence_is_clamped(self, reported, expected):
        result = parse_comparison_result(f'{{"match": false, "confidence": {reported}, "explanation": "x"}}')
        assert result.confidence == expected


class TestAddressComparator:

    @pytest.mark.asyncio
    @with_test_config
    async def test_exact_reply_is_returned_unchanged(self, test_provider: MockConfigProvider):
        provider = StubProvider(reply='{"match": true, "confidence": 0.95, "explanation": "same location"}')

        result = await AddressComparator(provider=provider).compare("10 Main St", "10 Main Street")

        assert result.model_dump() == {"match": True, "confidence": 0.95, "explanation": "same location"}
        assert len(provider.prompts) == 1

    @pytest.mark.asyncio
    @with_test_config
    async def test_prose_wrapped_reply(self, test_provider: MockConfigProvider):
        provider = StubProvider(reply='Here is my answer: {"match": false, "confidence": 0.2, "explanation": "different cities"} Thanks!')

        result = await AddressComparator(provider=provider).compare("1 High St, Bath", "1 High St, Leeds")

        assert result == ComparisonResult(match=False, confidence=0.2, explanation="different cities")

    @pytest.mark.asyncio
    @with_test_config
    async def test_reply_without_object_is_degraded(self, test_provider: MockConfigProvider):
        provider = StubProvider(reply="I cannot determine this.")

        result = await AddressComparator(provider=provider).compare("a", "b")

        assert result.match is False
        assert result.confidence == 0
        assert result.explanation.startswith("Error processing comparison: ")
        assert "Failed to parse JSON response" in result.explanation

    @pytest.mark.asyncio
    @with_test_config
    async def test_network_failure_is_degraded(self, test_provider: MockConfigProvider):
        provider = StubProvider(error=httpx.ConnectError("connection refused"))

        result = await AddressComparator(provider=provider).compare("a", "b")

        assert result == ComparisonResult(match=False, confidence=0.0, explanation="Error processing comparison: connection refused")

    @pytest.mark.asyncio
    @with_test_config
    async def test_missing_credential_skips_the_call(self, test_provider: MockConfigProvider):
        provider = KeyedStubProvider(reply='{"match": true, "confidence": 1, "explanation": "x"}')

        result = await AddressComparator(provider=provider).compare("a", "b")

        assert provider.prompts == []
        assert result.match is False
        assert result.confidence == 0
        assert result.explanation == "Error processing comparison: STUB_API_KEY is not set in environment variables"

    @pytest.mark.asyncio
    @with_test_config
    async def test_configured_credential_allows_the_call(self, test_provider: MockConfigProvider):
        test_provider.get_config().update({"llm.stub.api_key": "secret"})
        provider = KeyedStubProvider(reply='{"match": true, "confidence": 1, "explanation": "x"}')

        result = await AddressComparator(provider=provider).compare("a", "b")

        assert len(provider.prompts) == 1
        assert result.match is True

    @pytest.mark.asyncio
    @with_test_config
    async def test_repeated_calls_are_identical(self, test_provider: MockConfigProvider):
        provider = StubProvider(reply='{"match": true, "confidence": 0.8, "explanation": "abbreviation"}')
        comparator = AddressComparator(provider=provider)

        first = await comparator.compare("5 Elm Ave", "5 Elm Avenue")
        second = await comparator.compare("5 Elm Ave", "5 Elm Avenue")

        assert first == second
        assert provider.prompts[0] == provider.prompts[1]

    @pytest.mark.asyncio
    @with_test_config
    async def test_unknown_provider_is_degraded(self, test_provider: MockConfigProvider):
        test_provider.get_config().update({"llm.provider": "no-such-provider"})

        result = await AddressComparator().compare("a", "b")

        assert result.match is False
        assert "no-such-provider" in result.explanation

    @with_test_config
    def test_prompt_uses_configured_template(self, test_provider: MockConfigProvider):
        prompt = AddressComparator(provider=StubProvider()).generate_prompt("Flat 2, 1 Rd", "1 Road")
        assert prompt.startswith("Same place?")
        assert 'Address 1: "Flat 2, 1 Rd"' in prompt
        assert 'Address 2: "1 Road"' in prompt

    @with_test_config
    def test_default_template_when_not_configured(self, test_provider: MockConfigProvider):
        test_provider.get_config().update({"llm.prompts.address_comparison": None})
        comparator = AddressComparator(provider=StubProvider())
        assert comparator.prompt_template == DEFAULT_PROMPT_TEMPLATE

    def test_default_prompt_content(self):
        prompt = AddressComparator(provider=StubProvider(), prompt_template=DEFAULT_PROMPT_TEMPLATE).generate_prompt(
            "Apt 4 <B>, 12 O'Hara St", "12 O'Hara Street"
        )
        # Addresses are embedded verbatim, no escaping
        assert "Address 1: \"Apt 4 <B>, 12 O'Hara St\"" in prompt
        assert '"match": boolean' in prompt
        assert '"confidence": number (between 0 and 1' in prompt
        assert '"explanation": string' in prompt
        assert "abbreviations, missing apartment/unit numbers" in prompt
        assert "Provide ONLY the JSON response" in prompt
