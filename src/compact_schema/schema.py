"""Compose compact struct and enum schemas."""

from __future__ import annotations

from typing import TYPE_CHECKING

from compact_schema.extract import extract_cases, extract_fields

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from compact_schema.declarations import RecordDecl, UnionDecl
    from compact_schema.models import Case, Field

__all__ = [
    "build_enum_schema",
    "build_struct_schema",
    "enum_schema",
    "format_case",
    "format_field",
    "struct_schema",
]

_INDENT = "  "
_CASE_SEPARATOR = " | "


def format_field(field: Field) -> str:
    """Return the ``name: Type`` line for ``field`` (``?`` when optional)."""
    return f"{field.name}: {field.type.render()}"


def format_case(case: Case) -> str:
    """Return ``name`` or ``name = rawValue`` for ``case``."""
    if case.raw_value is None:
        return case.name
    return f"{case.name} = {case.raw_value}"


def build_struct_schema(name: str, fields: Sequence[Field]) -> str:
    """Render a struct schema block.

    Parameters
    ----------
    name : str
        Record name.
    fields : Sequence[Field]
        Fields in declaration order.

    Returns
    -------
    str
        ``Name {`` followed by one two-space indented line per field and a
        closing brace. A record without fields renders as ``Name {\\n}``.
    """
    lines = [f"{name} {{"]
    lines.extend(_INDENT + format_field(field) for field in fields)
    lines.append("}")
    return "\n".join(lines)


def build_enum_schema(name: str, cases: Iterable[Case]) -> str:
    """Render ``enum Name: [case1 | case2 | ...]``."""
    rendered = _CASE_SEPARATOR.join(format_case(case) for case in cases)
    return f"enum {name}: [{rendered}]"


def struct_schema(record: RecordDecl, *, excluded: Iterable[str] | None = None) -> str:
    """Extract and render the compact schema of ``record``."""
    return build_struct_schema(record.name, extract_fields(record, excluded=excluded))


def enum_schema(union: UnionDecl) -> str:
    """Extract and render the compact schema of ``union``."""
    return build_enum_schema(union.name, extract_cases(union))
