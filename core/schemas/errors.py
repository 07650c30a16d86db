"""
Schemas & Canonicalization
File: errors.py

Purpose: Error taxonomy for descriptor canonicalization and commitments.
Defines both a Pydantic model for structured error reporting and the
Python exceptions raised by the core.

Every error here is terminal for the computation that raised it: the core
never retries, never logs, and never returns a root alongside an error.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


# =============================================================================
# Error Codes (Machine-Readable Constants)
# =============================================================================

class ErrorCodes:
    """Stable machine-readable error codes."""

    # Structural errors
    DUPLICATE_FIELD = "DUPLICATE_FIELD"
    MALFORMED_GROUP = "MALFORMED_GROUP"

    # Encoding errors
    ENCODING_ERROR = "ENCODING_ERROR"
    DECODING_ERROR = "DECODING_ERROR"

    # Lookup errors
    PATH_NOT_FOUND = "PATH_NOT_FOUND"

    # Precondition errors
    EMPTY_LEAF_SET = "EMPTY_LEAF_SET"

    # Verification input errors
    INVALID_ROOT = "INVALID_ROOT"


# =============================================================================
# Pydantic Error Model (Structured Communication)
# =============================================================================

class DescriptorError(BaseModel):
    """
    Error model for structured error reporting.

    Callers that translate failures into request-level responses use this
    model instead of passing exceptions around.
    """

    model_config = ConfigDict(
        extra="forbid",
        frozen=False,
        validate_assignment=True,
    )

    code: str = Field(
        ...,
        description="Stable machine-readable error code",
        examples=[ErrorCodes.DUPLICATE_FIELD],
    )
    message: str = Field(
        ...,
        description="Human-readable error message",
    )
    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional structured details about the error",
    )
    retryable: bool = Field(
        default=False,
        description="Whether the operation can be retried",
    )

    def to_exception(self) -> "DescriptorException":
        """Convert this error model to a raisable exception."""
        return DescriptorException(
            code=self.code,
            message=self.message,
            details=self.details,
            retryable=self.retryable,
        )


# =============================================================================
# Python Exceptions (Control Flow)
# =============================================================================

class DescriptorException(Exception):
    """
    Base exception for all descriptor commitment errors.

    Carries structured error information and converts to/from
    DescriptorError models.
    """

    def __init__(
        self,
        message: str,
        code: str = "DESCRIPTOR_ERROR",
        details: dict[str, Any] | None = None,
        retryable: bool = False,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.details = details or {}
        self.retryable = retryable

    def to_error_model(self) -> DescriptorError:
        """Convert this exception to a DescriptorError model."""
        return DescriptorError(
            code=self.code,
            message=self.message,
            details=self.details,
            retryable=self.retryable,
        )

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(code={self.code!r}, message={self.message!r})"


def _with_path(details: dict[str, Any] | None, path: Any) -> dict[str, Any]:
    full_details = dict(details or {})
    if path is not None:
        full_details["path"] = list(path)
    return full_details


class DuplicateFieldError(DescriptorException):
    """Raised when the same tag appears twice in one mapping level."""

    def __init__(
        self,
        message: str,
        path: Any = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            code=ErrorCodes.DUPLICATE_FIELD,
            details=_with_path(details, path),
            retryable=False,
        )


class MalformedGroupError(DescriptorException):
    """Raised when a repeating group or a field value has an invalid shape."""

    def __init__(
        self,
        message: str,
        path: Any = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            code=ErrorCodes.MALFORMED_GROUP,
            details=_with_path(details, path),
            retryable=False,
        )


class EncodingError(DescriptorException):
    """Raised when a tag or value cannot be canonically encoded."""

    def __init__(
        self,
        message: str,
        path: Any = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            code=ErrorCodes.ENCODING_ERROR,
            details=_with_path(details, path),
            retryable=False,
        )


class DecodingError(DescriptorException):
    """Raised when bytes are not a canonical descriptor encoding."""

    def __init__(
        self,
        message: str,
        offset: int | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        full_details = dict(details or {})
        if offset is not None:
            full_details["offset"] = offset
        super().__init__(
            message=message,
            code=ErrorCodes.DECODING_ERROR,
            details=full_details,
            retryable=False,
        )


class PathNotFoundError(DescriptorException):
    """Raised when a proof is requested for a path with no leaf."""

    def __init__(
        self,
        message: str,
        path: Any = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            code=ErrorCodes.PATH_NOT_FOUND,
            details=_with_path(details, path),
            retryable=False,
        )


class EmptyLeafSetError(DescriptorException):
    """Raised when an operation needs at least one leaf and got none."""

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            code=ErrorCodes.EMPTY_LEAF_SET,
            details=details,
            retryable=False,
        )
