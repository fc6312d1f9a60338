"""Derived structures produced while compacting declarations."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import Final

__all__ = [
    "VOID",
    "Case",
    "Field",
    "FunctionSignature",
    "LabelPolicy",
    "Parameter",
    "TypeDescriptor",
]

VOID: Final = "Void"


class LabelPolicy(StrEnum):
    """How parameters are rendered in compact signatures.

    ``labeled`` keeps external argument labels (``label: Type``) so that
    parameters sharing a type stay distinguishable; ``positional`` renders the
    type alone for every parameter.
    """

    LABELED = "labeled"
    POSITIONAL = "positional"


@dataclass(frozen=True, slots=True)
class TypeDescriptor:
    """Normalized type expression.

    Attributes
    ----------
    text : str
        Raw expression as written in the declaration.
    base_name : str
        Compact form with the outer optional layer removed.
    is_optional : bool
        Whether an outer optional layer was stripped.
    """

    text: str
    base_name: str
    is_optional: bool = False

    def render(self) -> str:
        """Return the compact form, suffixed with ``?`` when optional."""
        return f"{self.base_name}?" if self.is_optional else self.base_name

    def __str__(self) -> str:
        return self.render()

    @property
    def is_void(self) -> bool:
        return not self.is_optional and self.base_name in {VOID, "()"}


@dataclass(frozen=True, slots=True)
class Field:
    """Stored field of a record declaration."""

    name: str
    type: TypeDescriptor


@dataclass(frozen=True, slots=True)
class Case:
    """Union case; ``raw_value`` is the literal text echoed verbatim."""

    name: str
    raw_value: str | None = None


@dataclass(frozen=True, slots=True)
class Parameter:
    """Function parameter reduced to its external label and type."""

    type: TypeDescriptor
    label: str | None = None


@dataclass(frozen=True, slots=True)
class FunctionSignature:
    """Extracted call contract of a function declaration.

    A ``return_type`` of ``None`` denotes a void function.
    """

    name: str
    parameters: tuple[Parameter, ...] = ()
    may_suspend: bool = False
    may_fail: bool = False
    return_type: TypeDescriptor | None = None
