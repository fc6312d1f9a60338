"""Extract and format compact function signatures."""

from __future__ import annotations

from typing import TYPE_CHECKING

from compact_schema.declarations import DeclarationKind, FunctionDecl
from compact_schema.errors import InvalidDeclarationError
from compact_schema.models import FunctionSignature, LabelPolicy, Parameter
from compact_schema.normalizer import normalize_type

if TYPE_CHECKING:
    from collections.abc import Iterable

    from compact_schema.declarations import Declaration
    from compact_schema.models import TypeDescriptor

__all__ = [
    "extract_signature",
    "format_parameters",
    "format_signature",
    "require_function",
    "signature_for",
]


def require_function(declaration: Declaration) -> FunctionDecl:
    """Return ``declaration`` if it is a function declaration.

    Raises
    ------
    InvalidDeclarationError
        If ``declaration`` is of any other kind.
    """
    if isinstance(declaration, FunctionDecl):
        return declaration
    kind = getattr(declaration, "kind", type(declaration).__name__)
    name = getattr(declaration, "name", None)
    message = (
        f"compact signatures can only be generated for {DeclarationKind.FUNCTION.value} "
        f"declarations, got {str(kind)!r}"
    )
    if name:
        message += f" ({name})"
    raise InvalidDeclarationError(message, kind=str(kind), declaration=name)


def extract_signature(declaration: Declaration) -> FunctionSignature:
    """Read name, parameters, effects and return type from ``declaration``.

    Internal parameter names are discarded; only the external label and the
    normalized type are kept. A missing return clause, ``Void`` or ``()``
    yields a ``None`` return type.

    Parameters
    ----------
    declaration : Declaration
        Function declaration to read.

    Returns
    -------
    FunctionSignature
        Extracted signature.

    Raises
    ------
    InvalidDeclarationError
        If ``declaration`` is not a function declaration.
    """
    function = require_function(declaration)
    parameters = tuple(
        Parameter(type=normalize_type(parameter.type), label=parameter.label)
        for parameter in function.parameters
    )
    return_type: TypeDescriptor | None = None
    if function.return_type is not None and function.return_type.strip():
        candidate = normalize_type(function.return_type)
        if not candidate.is_void:
            return_type = candidate
    return FunctionSignature(
        name=function.name,
        parameters=parameters,
        may_suspend=function.is_async,
        may_fail=function.is_throwing,
        return_type=return_type,
    )


def _format_parameter(parameter: Parameter, policy: LabelPolicy) -> str:
    rendered = parameter.type.render()
    if policy is LabelPolicy.LABELED and parameter.label is not None:
        return f"{parameter.label}: {rendered}"
    return rendered


def format_parameters(
    parameters: Iterable[Parameter],
    *,
    policy: LabelPolicy = LabelPolicy.LABELED,
) -> str:
    """Return the parenthesized, comma-separated parameter list."""
    return "(" + ", ".join(_format_parameter(parameter, policy) for parameter in parameters) + ")"


def format_signature(
    signature: FunctionSignature,
    *,
    policy: LabelPolicy = LabelPolicy.LABELED,
) -> str:
    """Render ``signature`` as ``name(params) async throws -> Return``.

    Parameters
    ----------
    signature : FunctionSignature
        Extracted signature.
    policy : LabelPolicy, optional
        Parameter label rendering policy. Defaults to ``LabelPolicy.LABELED``.

    Returns
    -------
    str
        Compact signature. Effect qualifiers appear suspend-first; the return
        clause is omitted for void functions.
    """
    parts = [signature.name, format_parameters(signature.parameters, policy=policy)]
    if signature.may_suspend:
        parts.append(" async")
    if signature.may_fail:
        parts.append(" throws")
    if signature.return_type is not None:
        parts.append(f" -> {signature.return_type.render()}")
    return "".join(parts)


def signature_for(
    declaration: Declaration,
    *,
    policy: LabelPolicy = LabelPolicy.LABELED,
) -> str:
    """Extract and format the compact signature of ``declaration``.

    Raises
    ------
    InvalidDeclarationError
        If ``declaration`` is not a function declaration.
    """
    return format_signature(extract_signature(declaration), policy=policy)
