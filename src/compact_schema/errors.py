"""Typed exception hierarchy with Problem Details support.

All compact-schema exceptions inherit from :class:`CompactSchemaError`, which
carries a stable error code, structured context, and an RFC 9457 Problem
Details mapping so callers at a process boundary can report failures in a
machine-readable form.

Examples
--------
>>> from compact_schema.errors import InvalidDeclarationError
>>> error = InvalidDeclarationError(
...     "expected a function", kind="record", declaration="TestUser"
... )
>>> error.to_problem_details()["code"]
'invalid-declaration'
"""

from __future__ import annotations

from enum import StrEnum
from typing import TYPE_CHECKING, TypedDict

if TYPE_CHECKING:
    from collections.abc import Mapping

__all__ = [
    "CompactSchemaError",
    "ConfigurationError",
    "DeclarationLoadError",
    "ErrorCode",
    "InvalidDeclarationError",
    "ProblemDetails",
]

_PROBLEM_BASE_URI = "https://compact-schema.dev/problems"


class ErrorCode(StrEnum):
    """Stable error codes surfaced in Problem Details payloads."""

    RUNTIME_ERROR = "runtime-error"
    INVALID_DECLARATION = "invalid-declaration"
    DECLARATION_LOAD_FAILED = "declaration-load-failed"
    CONFIGURATION_ERROR = "configuration-error"


class ProblemDetails(TypedDict, total=False):
    """RFC 9457 Problem Details envelope used for error reporting."""

    type: str
    title: str
    status: int
    detail: str
    instance: str
    code: str
    extensions: dict[str, object]


class CompactSchemaError(Exception):
    """Base exception for compact-schema failures.

    Parameters
    ----------
    message : str
        Human-readable error message.
    context : Mapping[str, object] | None, optional
        Structured details describing the failure. Defaults to None.

    Attributes
    ----------
    code : ErrorCode
        Error code reported in Problem Details payloads.
    status : int
        Status code reported in Problem Details payloads.
    """

    code: ErrorCode = ErrorCode.RUNTIME_ERROR
    status: int = 500

    def __init__(self, message: str, *, context: Mapping[str, object] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.context: dict[str, object] = dict(context) if context else {}

    def to_problem_details(
        self,
        instance: str | None = None,
        title: str | None = None,
    ) -> ProblemDetails:
        """Convert the error to an RFC 9457 Problem Details payload.

        Parameters
        ----------
        instance : str | None, optional
            URI identifying the specific occurrence. Defaults to None.
        title : str | None, optional
            Short summary. Defaults to the exception class name.

        Returns
        -------
        ProblemDetails
            Problem Details payload including the error code and context.
        """
        problem: ProblemDetails = {
            "type": f"{_PROBLEM_BASE_URI}/{self.code.value}",
            "title": title or self.__class__.__name__,
            "status": self.status,
            "detail": self.message,
            "instance": instance or f"urn:compact-schema:error:{self.code.value}",
            "code": self.code.value,
        }
        if self.context:
            problem["extensions"] = dict(self.context)
        return problem


class InvalidDeclarationError(CompactSchemaError):
    """Raised when a generator receives a declaration of the wrong kind."""

    code = ErrorCode.INVALID_DECLARATION
    status = 422

    def __init__(self, message: str, *, kind: str, declaration: str | None = None) -> None:
        context: dict[str, object] = {"kind": kind}
        if declaration is not None:
            context["declaration"] = declaration
        super().__init__(message, context=context)
        self.kind = kind
        self.declaration = declaration

    def __str__(self) -> str:
        return f"Invalid declaration: {self.message}"


class DeclarationLoadError(CompactSchemaError):
    """Raised when a declaration document cannot be read or decoded."""

    code = ErrorCode.DECLARATION_LOAD_FAILED
    status = 400


class ConfigurationError(CompactSchemaError):
    """Raised when settings fail validation or a config file is malformed."""

    code = ErrorCode.CONFIGURATION_ERROR
    status = 500
