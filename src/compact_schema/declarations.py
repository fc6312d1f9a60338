"""Declaration model consumed by the compact schema engine.

An external parser produces these structs from source text. They are frozen
``msgspec`` structs tagged on ``kind`` so serialized declaration documents
decode directly into the matching variant (see :mod:`compact_schema.loader`).
"""

from __future__ import annotations

from enum import StrEnum

import msgspec

__all__ = [
    "CaseDecl",
    "ContainerDecl",
    "Declaration",
    "DeclarationKind",
    "FunctionDecl",
    "ParameterDecl",
    "PropertyDecl",
    "RecordDecl",
    "UnionDecl",
    "Visibility",
]


class DeclarationKind(StrEnum):
    """Normalized declaration-kind tags."""

    RECORD = "record"
    UNION = "union"
    FUNCTION = "function"
    CONTAINER = "container"


class Visibility(StrEnum):
    """Access levels, ordered ``private < internal < public < open``."""

    PRIVATE = "private"
    INTERNAL = "internal"
    PUBLIC = "public"
    OPEN = "open"

    @property
    def rank(self) -> int:
        return _VISIBILITY_RANKS[self]

    def at_least(self, other: Visibility) -> bool:
        """Return ``True`` when this level is ``other`` or more visible."""
        return self.rank >= other.rank


_VISIBILITY_RANKS: dict[Visibility, int] = {
    level: rank for rank, level in enumerate(Visibility)
}


class PropertyDecl(msgspec.Struct, frozen=True):
    """Member of a record declaration.

    ``computed`` marks accessors without backing storage.
    """

    name: str
    type: str
    computed: bool = False


class CaseDecl(msgspec.Struct, frozen=True):
    """Union case with its literal raw value text, if one was written."""

    name: str
    raw_value: str | None = None


class ParameterDecl(msgspec.Struct, frozen=True):
    """Function parameter.

    ``label`` is the external argument label as written (``"_"`` included);
    ``name`` is the internal name used inside the body.
    """

    type: str
    label: str | None = None
    name: str | None = None


class RecordDecl(msgspec.Struct, frozen=True, tag_field="kind", tag="record"):
    """Struct-like declaration with ordered members."""

    name: str
    members: tuple[PropertyDecl, ...] = ()

    @property
    def kind(self) -> DeclarationKind:
        return DeclarationKind.RECORD


class UnionDecl(msgspec.Struct, frozen=True, tag_field="kind", tag="union"):
    """Enum-like declaration with ordered cases."""

    name: str
    cases: tuple[CaseDecl, ...] = ()

    @property
    def kind(self) -> DeclarationKind:
        return DeclarationKind.UNION


class FunctionDecl(msgspec.Struct, frozen=True, tag_field="kind", tag="function"):
    """Function or method declaration.

    ``return_type`` is ``None`` when the declaration has no return clause.
    """

    name: str
    parameters: tuple[ParameterDecl, ...] = ()
    is_async: bool = False
    is_throwing: bool = False
    return_type: str | None = None
    visibility: Visibility = Visibility.INTERNAL

    @property
    def kind(self) -> DeclarationKind:
        return DeclarationKind.FUNCTION


class ContainerDecl(msgspec.Struct, frozen=True, tag_field="kind", tag="container"):
    """Class-like declaration holding function members in declaration order."""

    name: str
    members: tuple[FunctionDecl, ...] = ()

    @property
    def kind(self) -> DeclarationKind:
        return DeclarationKind.CONTAINER


Declaration = RecordDecl | UnionDecl | FunctionDecl | ContainerDecl
