"""
Failure classification.

Only a handful of failures can reach a caller of the auto-builder:

- CommanderNotFound: a commander name did not resolve. Fatal for the build.
- ExternalApiError: an optional Scryfall call failed. Never fatal; the
  stage that made the call continues with zero results.

Everything else (thin collections, missing lands) is absorbed by the
builder and reported through counts on the result.
"""

from enum import Enum

from pydantic import BaseModel, Field


class FailureKind(str, Enum):
    """Classification of failure types."""

    # Input validation failures
    INVALID_INPUT = "invalid_input"
    MISSING_REQUIRED = "missing_required"

    # Resource failures
    COMMANDER_NOT_FOUND = "commander_not_found"

    # Service failures
    EXTERNAL_API_ERROR = "external_api_error"


class FailureDetail(BaseModel):
    """Detailed information about a failure."""

    kind: FailureKind = Field(
        ...,
        description="Classification of the failure",
    )
    message: str = Field(
        ...,
        description="User-appropriate explanation of what went wrong",
    )
    detail: str | None = Field(
        default=None,
        description="Additional technical detail (optional)",
    )
    suggestion: str | None = Field(
        default=None,
        description="Suggested action for the user",
    )


class KnownError(Exception):
    """
    Base class for exceptions that represent known, explainable failures.

    Subclass this for errors where the system knows exactly what went wrong.
    """

    def __init__(
        self,
        kind: FailureKind,
        message: str,
        detail: str | None = None,
        suggestion: str | None = None,
        status_code: int = 400,
    ):
        self.kind = kind
        self.message = message
        self.detail = detail
        self.suggestion = suggestion
        self.status_code = status_code
        super().__init__(message)

    def to_detail(self) -> FailureDetail:
        """Convert to a FailureDetail for API responses."""
        return FailureDetail(
            kind=self.kind,
            message=self.message,
            detail=self.detail,
            suggestion=self.suggestion,
        )


class CommanderNotFoundError(KnownError):
    """A commander name could not be resolved by the card provider."""

    def __init__(self, name: str, detail: str | None = None):
        self.name = name
        super().__init__(
            kind=FailureKind.COMMANDER_NOT_FOUND,
            message=f"Commander not found: {name}",
            detail=detail,
            suggestion="Check the spelling against the card's exact English name.",
            status_code=404,
        )


class CardProviderError(KnownError):
    """A request to the card metadata provider failed."""

    def __init__(self, message: str, detail: str | None = None):
        super().__init__(
            kind=FailureKind.EXTERNAL_API_ERROR,
            message=message,
            detail=detail,
            status_code=502,
        )
