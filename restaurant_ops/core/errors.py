"""
Error Taxonomy and Service Result Envelope

Every service operation returns a ``ServiceResult`` instead of raising for
expected business outcomes. The ``error`` field classifies failures so the
HTTP layer can pick a status code without inspecting messages.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Generic, Optional, TypeVar

T = TypeVar("T")


class ErrorKind(str, Enum):
    """Classification of a failed service operation."""
    NOT_FOUND = "not_found"
    VALIDATION = "validation"
    BUSINESS_RULE = "business_rule"
    AUTHORIZATION = "authorization"
    INFRASTRUCTURE = "infrastructure"


@dataclass
class ServiceResult(Generic[T]):
    """
    Uniform result envelope returned by every service operation.

    Attributes:
        success: Whether the operation succeeded
        message: Human-readable outcome, names the offending entity on failure
        data: Payload on success (may also carry a value on failure, e.g. False)
        errors: Detail lines (validation messages, diagnostic fault text)
        error: Failure classification, None on success
    """
    success: bool
    message: str = ""
    data: Optional[T] = None
    errors: list[str] = field(default_factory=list)
    error: Optional[ErrorKind] = None

    @classmethod
    def ok(cls, data: Optional[T] = None, message: str = "Operation successful") -> "ServiceResult[T]":
        return cls(success=True, message=message, data=data)

    @classmethod
    def fail(
        cls,
        kind: ErrorKind,
        message: str,
        errors: Optional[list[str]] = None,
        data: Optional[T] = None,
    ) -> "ServiceResult[T]":
        return cls(
            success=False,
            message=message,
            data=data,
            errors=list(errors or []),
            error=kind,
        )

    @classmethod
    def not_found(cls, entity: str, entity_id: int) -> "ServiceResult[T]":
        return cls.fail(ErrorKind.NOT_FOUND, f"{entity} with ID {entity_id} not found")

    def cast(self) -> "ServiceResult":
        """Re-type a failure so it can be returned from an operation with a different payload."""
        return ServiceResult(
            success=self.success,
            message=self.message,
            errors=list(self.errors),
            error=self.error,
        )
