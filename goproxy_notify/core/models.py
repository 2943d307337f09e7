from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Mapping


class Hook(str, Enum):
    """Release pipeline lifecycle points a host may invoke the plugin at."""
    PRE_INIT = "pre-init"
    POST_INIT = "post-init"
    PRE_PLAN = "pre-plan"
    POST_PLAN = "post-plan"
    PRE_VERSION = "pre-version"
    POST_VERSION = "post-version"
    PRE_NOTES = "pre-notes"
    POST_NOTES = "post-notes"
    PRE_APPROVE = "pre-approve"
    POST_APPROVE = "post-approve"
    PRE_PUBLISH = "pre-publish"
    POST_PUBLISH = "post-publish"
    ON_SUCCESS = "on-success"
    ON_ERROR = "on-error"


@dataclass(frozen=True)
class ReleaseContext:
    """Release metadata handed over by the host."""
    version: str = ""
    tag_name: str = ""

    @staticmethod
    def from_mapping(data: Mapping[str, Any] | None) -> "ReleaseContext":
        data = data or {}
        return ReleaseContext(
            version=str(data.get("version") or ""),
            tag_name=str(data.get("tag_name") or ""),
        )


@dataclass(frozen=True)
class FieldError:
    field: str
    message: str


@dataclass
class ValidationResult:
    """Field-level diagnostics for a raw configuration."""
    errors: list[FieldError] = field(default_factory=list)

    @property
    def valid(self) -> bool:
        return not self.errors

    def add(self, field_name: str, message: str) -> None:
        self.errors.append(FieldError(field_name, message))

    def to_dict(self) -> dict:
        return {
            "valid": self.valid,
            "errors": [{"field": item.field, "message": item.message} for item in self.errors],
        }


@dataclass
class ExecutionResult:
    """Outcome of a single hook invocation reported back to the host."""
    success: bool
    message: str = ""
    error: str = ""
    outputs: dict[str, Any] = field(default_factory=dict)

    @staticmethod
    def ok(message: str, outputs: dict[str, Any] | None = None) -> "ExecutionResult":
        return ExecutionResult(success=True, message=message, outputs=dict(outputs or {}))

    @staticmethod
    def failed(error: str) -> "ExecutionResult":
        return ExecutionResult(success=False, error=error)

    def to_dict(self) -> dict:
        return {
            "success": self.success,
            "message": self.message,
            "error": self.error,
            "outputs": self.outputs,
        }


@dataclass(frozen=True)
class ProxyRequest:
    """A single GET against the module proxy."""
    url: str
    headers: dict[str, str] = field(default_factory=dict)
    timeout_seconds: float = 30.0


@dataclass(frozen=True)
class ProxyResponse:
    status_code: int
    body: str = ""
