"""
Schemas & Canonicalization
File: verification.py

Purpose: Itemized outcome of checking a proof record against a root, so a
caller can tell a malformed root from a proof that does not include the
field, instead of getting a bare boolean.
"""

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

from .errors import DescriptorError


CheckSeverity = Literal["info", "error"]


class CheckResult(BaseModel):
    """One named step of proof checking and whether it held."""

    model_config = ConfigDict(extra="forbid")

    check_id: str = Field(..., min_length=1, description="Stable name of the check, e.g. root_format")
    ok: bool
    severity: CheckSeverity
    message: str
    details: dict[str, Any] = Field(default_factory=dict)

    @property
    def is_error(self) -> bool:
        return self.severity == "error" and not self.ok

    @classmethod
    def passed(
        cls,
        check_id: str,
        message: str = "Check passed",
        details: dict[str, Any] | None = None,
    ) -> "CheckResult":
        return cls(check_id=check_id, ok=True, severity="info", message=message, details=details or {})

    @classmethod
    def failed(
        cls,
        check_id: str,
        message: str,
        details: dict[str, Any] | None = None,
    ) -> "CheckResult":
        return cls(check_id=check_id, ok=False, severity="error", message=message, details=details or {})


class VerificationResult(BaseModel):
    """
    Outcome of verifying one proof record.

    ok is False as soon as any check fails; checks stop at the first
    failure, so the last entry names what went wrong.
    """

    model_config = ConfigDict(extra="forbid")

    ok: bool
    checks: list[CheckResult] = Field(default_factory=list)
    error: DescriptorError | None = Field(
        default=None,
        description="Structured error when checking could not run at all",
    )

    @property
    def error_count(self) -> int:
        return len([check for check in self.checks if check.is_error])

    def get_error_messages(self) -> list[str]:
        """Messages of the failed checks, in check order."""
        return [check.message for check in self.checks if check.is_error]

    def get_check(self, check_id: str) -> CheckResult | None:
        return next((check for check in self.checks if check.check_id == check_id), None)

    @classmethod
    def success(cls, checks: list[CheckResult] | None = None) -> "VerificationResult":
        return cls(ok=True, checks=list(checks or []))

    @classmethod
    def failure(
        cls,
        checks: list[CheckResult] | None = None,
        error: DescriptorError | None = None,
    ) -> "VerificationResult":
        return cls(ok=False, checks=list(checks or []), error=error)
