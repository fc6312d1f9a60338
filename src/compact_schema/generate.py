"""Generation entry points and the sidecar attachment artifact.

Each declaration kind maps to the constants that would be attached to it:

* records and unions get ``compactSchema``;
* a function gets ``<name>Method``;
* a container gets ``compactMethods``, the signatures of its public and open
  members in declaration order.

The sidecar map groups those constants by declaration name and can be written
as a JSON build artifact. Generation is side-effect free; registering results
in :mod:`compact_schema.registry` is always a separate, explicit call.
"""

from __future__ import annotations

import time
from typing import TYPE_CHECKING, Final

import msgspec

from compact_schema.declarations import (
    ContainerDecl,
    DeclarationKind,
    FunctionDecl,
    RecordDecl,
    UnionDecl,
)
from compact_schema.errors import InvalidDeclarationError
from compact_schema.logging import get_logger, with_fields
from compact_schema.models import LabelPolicy
from compact_schema.schema import enum_schema, struct_schema
from compact_schema.signature import signature_for
from compact_schema.visibility import public_members

if TYPE_CHECKING:
    from collections.abc import Iterable
    from pathlib import Path

    from compact_schema.config import CompactSchemaSettings
    from compact_schema.declarations import Declaration

__all__ = [
    "METHODS_MEMBER",
    "SCHEMA_MEMBER",
    "GeneratedValue",
    "Sidecar",
    "compact_methods",
    "compact_schema",
    "compact_signature",
    "encode_sidecar",
    "generate_members",
    "generate_sidecar",
    "method_member_name",
    "write_sidecar",
]

LOGGER = get_logger(__name__)

SCHEMA_MEMBER: Final = "compactSchema"
METHODS_MEMBER: Final = "compactMethods"
_METHOD_SUFFIX: Final = "Method"

type GeneratedValue = str | list[str]
type Sidecar = dict[str, dict[str, GeneratedValue]]


def method_member_name(function_name: str) -> str:
    """Return the attached constant name for a function, e.g. ``getUserMethod``."""
    return f"{function_name}{_METHOD_SUFFIX}"


def compact_schema(
    declaration: Declaration,
    *,
    excluded: Iterable[str] | None = None,
) -> str:
    """Return the compact schema of a record or union declaration.

    Raises
    ------
    InvalidDeclarationError
        If ``declaration`` is neither a record nor a union.
    """
    if isinstance(declaration, RecordDecl):
        return struct_schema(declaration, excluded=excluded)
    if isinstance(declaration, UnionDecl):
        return enum_schema(declaration)
    message = (
        f"compact schemas can only be generated for {DeclarationKind.RECORD.value} or "
        f"{DeclarationKind.UNION.value} declarations, got {declaration.kind.value!r} "
        f"({declaration.name})"
    )
    raise InvalidDeclarationError(
        message, kind=declaration.kind.value, declaration=declaration.name
    )


def compact_signature(
    declaration: Declaration,
    *,
    policy: LabelPolicy = LabelPolicy.LABELED,
) -> str:
    """Return the compact signature of a function declaration.

    Raises
    ------
    InvalidDeclarationError
        If ``declaration`` is not a function.
    """
    return signature_for(declaration, policy=policy)


def compact_methods(
    container: ContainerDecl,
    *,
    policy: LabelPolicy = LabelPolicy.LABELED,
) -> list[str]:
    """Return signatures of the public and open members of ``container``."""
    return [signature_for(member, policy=policy) for member in public_members(container)]


def generate_members(
    declaration: Declaration,
    settings: CompactSchemaSettings | None = None,
) -> dict[str, GeneratedValue]:
    """Return the constants to attach to ``declaration``.

    Parameters
    ----------
    declaration : Declaration
        Any supported declaration.
    settings : CompactSchemaSettings | None, optional
        Label policy and exclusion overrides. Defaults apply when omitted.

    Returns
    -------
    dict[str, GeneratedValue]
        Mapping from constant name to generated string or string list.
    """
    policy = settings.label_policy if settings is not None else LabelPolicy.LABELED
    excluded = settings.excluded_properties if settings is not None else None
    logger = with_fields(LOGGER, declaration=declaration.name, kind=declaration.kind.value)
    start = time.perf_counter()
    members: dict[str, GeneratedValue]
    if isinstance(declaration, (RecordDecl, UnionDecl)):
        members = {SCHEMA_MEMBER: compact_schema(declaration, excluded=excluded)}
    elif isinstance(declaration, FunctionDecl):
        members = {
            method_member_name(declaration.name): compact_signature(declaration, policy=policy)
        }
    else:
        members = {METHODS_MEMBER: compact_methods(declaration, policy=policy)}
    logger.debug(
        "Generated %s",
        ", ".join(members),
        extra={
            "operation": "generate_members",
            "duration_ms": round((time.perf_counter() - start) * 1000, 3),
        },
    )
    return members


def generate_sidecar(
    declarations: Iterable[Declaration],
    settings: CompactSchemaSettings | None = None,
) -> Sidecar:
    """Return generated members keyed by declaration name.

    Declarations sharing a name (for example a type and an extension of it)
    have their members merged; later members of the same name win.
    """
    sidecar: Sidecar = {}
    for declaration in declarations:
        sidecar.setdefault(declaration.name, {}).update(generate_members(declaration, settings))
    return sidecar


def encode_sidecar(sidecar: Sidecar) -> bytes:
    """Return ``sidecar`` as indented JSON bytes with a trailing newline."""
    return msgspec.json.format(msgspec.json.encode(sidecar), indent=2) + b"\n"


def write_sidecar(path: Path, sidecar: Sidecar) -> Path:
    """Write ``sidecar`` to ``path`` as a JSON artifact, creating parents."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(encode_sidecar(sidecar))
    LOGGER.info(
        "Wrote sidecar for %d declaration(s) to %s",
        len(sidecar),
        path,
        extra={"operation": "write_sidecar"},
    )
    return path
