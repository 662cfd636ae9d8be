"""Failures raised inside an address comparison.

The comparator converts every one of these into a degraded result, they never
reach the HTTP layer as exceptions.
"""


class ComparisonError(Exception):
    """Base exception for all comparison errors."""


class ConfigurationError(ComparisonError):
    """The credential of the LLM provider is not configured."""

    def __init__(self, env_name: str):
        self.env_name = env_name
        super().__init__(f"{env_name} is not set in environment variables")


class UpstreamError(ComparisonError):
    """The call to the external model failed."""

    def __init__(self, provider: str, cause: Exception):
        self.provider = provider
        self.cause = cause
        super().__init__(str(cause) or cause.__class__.__name__)


class ParseError(ComparisonError):
    """The model reply did not contain a usable JSON object."""

    def __init__(self, detail: str | None = None):
        self.detail = detail
        message = "Failed to parse JSON response from model"
        super().__init__(f"{message}: {detail}" if detail else message)
