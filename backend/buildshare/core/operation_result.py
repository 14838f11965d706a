"""Operation Result — uniform success/failure envelope returned by the build store.

Invariants:
    - success=True never carries an error; success=False always carries one
    - message is always human-readable
"""

from dataclasses import dataclass
from typing import Generic, TypeVar

from buildshare.core.errors import BuildShareError

T = TypeVar("T")


@dataclass(frozen=True)
class OperationResult(Generic[T]):
    """Result of a store operation."""

    success: bool
    message: str
    data: T | None = None
    error: BuildShareError | None = None

    @property
    def status(self) -> str:
        return "Success" if self.success else "Failed"

    @property
    def error_code(self) -> str | None:
        return self.error.code if self.error else None

    @classmethod
    def ok(cls, message: str, data: T | None = None) -> "OperationResult[T]":
        return cls(success=True, message=message, data=data)

    @classmethod
    def fail(cls, error: BuildShareError) -> "OperationResult[T]":
        return cls(success=False, message=error.message, error=error)
