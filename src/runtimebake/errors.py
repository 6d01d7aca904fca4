"""Typed provisioning error model with stable, machine-readable error codes."""

from __future__ import annotations

from collections.abc import Mapping
from enum import StrEnum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from runtimebake.graph.ops import Operation


class ErrorCode(StrEnum):
    """Stable error identifiers used across API surfaces."""

    VALIDATION = "E_VALIDATION"
    CONFIG = "E_CONFIG"
    POLICY = "E_POLICY"
    FETCH = "E_FETCH"
    INTEGRITY = "E_INTEGRITY"
    EXTRACTION = "E_EXTRACTION"
    TOOL_INSTALL = "E_TOOL_INSTALL"
    CONFIG_WRITE = "E_CONFIG_WRITE"


class ProvisioningError(Exception):
    """Base error class that carries code, optional hint, and context."""

    code: str
    hint: str | None
    context: Mapping[str, str]

    def __init__(
        self,
        message: str,
        *,
        code: ErrorCode,
        hint: str | None = None,
        context: Mapping[str, str] | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code.value
        self.hint = hint
        self.context = dict(context or {})

    def __str__(self) -> str:
        parts = [super().__str__()]
        if self.hint:
            parts.append(f"Hint: {self.hint}")
        for k, v in self.context.items():
            if v:
                parts.append(f"  {k}: {v}")
        return "\n".join(parts)

    def to_dict(self) -> dict[str, object]:
        payload: dict[str, object] = {
            "code": self.code,
            "message": str(self),
            "context": dict(self.context),
        }
        if self.hint is not None:
            payload["hint"] = self.hint
        return payload


class _CodedError(ProvisioningError):
    error_code: ErrorCode

    def __init__(
        self,
        message: str,
        *,
        hint: str | None = None,
        context: Mapping[str, str] | None = None,
    ) -> None:
        super().__init__(message, code=self.error_code, hint=hint, context=context)


class ValidationError(_CodedError):
    error_code = ErrorCode.VALIDATION


class ConfigError(_CodedError):
    error_code = ErrorCode.CONFIG


class PolicyError(_CodedError):
    error_code = ErrorCode.POLICY


class FetchError(_CodedError):
    error_code = ErrorCode.FETCH


class IntegrityError(_CodedError):
    error_code = ErrorCode.INTEGRITY


class ExtractionError(_CodedError):
    error_code = ErrorCode.EXTRACTION


class ToolInstallError(_CodedError):
    error_code = ErrorCode.TOOL_INSTALL


class ConfigWriteError(_CodedError):
    error_code = ErrorCode.CONFIG_WRITE


_ERRORS_BY_CODE: dict[ErrorCode, type[_CodedError]] = {
    cls.error_code: cls
    for cls in (
        ValidationError,
        ConfigError,
        PolicyError,
        FetchError,
        IntegrityError,
        ExtractionError,
        ToolInstallError,
        ConfigWriteError,
    )
}


def error_for(
    operation: Operation,
    message: str,
    *,
    context: Mapping[str, str] | None = None,
) -> ProvisioningError:
    """Build the typed error an executor should raise when *operation* fails."""
    error_cls = _ERRORS_BY_CODE[operation.failure]
    merged = {"operation": operation.name}
    merged.update(context or {})
    return error_cls(
        message,
        hint="Provisioning aborted; no partial install is authoritative.",
        context=merged,
    )


__all__ = [
    "ConfigError",
    "ConfigWriteError",
    "ErrorCode",
    "ExtractionError",
    "FetchError",
    "IntegrityError",
    "PolicyError",
    "ProvisioningError",
    "ToolInstallError",
    "ValidationError",
    "error_for",
]
