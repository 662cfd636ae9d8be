from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class ComparisonRequest(BaseModel):
    """Two free-form addresses to compare. Both are passed to the model verbatim."""

    address1: str = Field(..., min_length=1, description="First address", examples=["10 Downing St, London SW1A 2AA"])
    address2: str = Field(..., min_length=1, description="Second address", examples=["10 Downing Street, Westminster, London"])

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "address1": "221B Baker Street, London",
                "address2": "221b Baker St., London NW1 6XE",
            }
        }
    )


class ComparisonResult(BaseModel):
    """Verdict on whether two addresses denote the same physical location."""

    match: bool = Field(..., description="True if the addresses refer to the same location")
    confidence: float = Field(..., description="Confidence in the match assessment, between 0 and 1")
    explanation: str = Field(..., description="Brief explanation of the reasoning")

    @classmethod
    def degraded(cls, message: str) -> "ComparisonResult":
        """A 'no match, zero confidence' result carrying an error message"""
        return cls(match=False, confidence=0.0, explanation=f"Error processing comparison: {message}")


class ErrorResponse(BaseModel):
    """Body of every non-200 response"""

    error: str = Field(..., description="Error kind", examples=["Invalid request"])
    message: Optional[str] = Field(None, description="Human readable error message")
    details: Optional[dict[str, Any]] = Field(None, description="Field level validation errors")


class ConfigStatus(BaseModel):
    """Non-secret view of the LLM configuration"""

    provider: str = Field(..., description="Key of the active LLM provider", examples=["gemini"])
    has_api_key: bool = Field(..., description="True if the provider credential is configured")
