"""Extract fields and cases from record and union declarations."""

from __future__ import annotations

from typing import TYPE_CHECKING, Final

from compact_schema.logging import get_logger
from compact_schema.models import Case, Field
from compact_schema.normalizer import normalize_type

if TYPE_CHECKING:
    from collections.abc import Iterable

    from compact_schema.declarations import RecordDecl, UnionDecl

__all__ = ["PROTOCOL_PROPERTIES", "extract_cases", "extract_fields"]

LOGGER = get_logger(__name__)

# Conformance artifacts of presentation protocols rather than data.
PROTOCOL_PROPERTIES: Final = frozenset({"description", "debugDescription", "hashValue"})


def extract_fields(
    record: RecordDecl,
    *,
    excluded: Iterable[str] | None = None,
) -> list[Field]:
    """Return the stored fields of ``record`` in declaration order.

    Computed accessors are dropped, as are stored fields whose name is in the
    exclusion set.

    Parameters
    ----------
    record : RecordDecl
        Record declaration to read.
    excluded : Iterable[str] | None, optional
        Property names to skip. Defaults to :data:`PROTOCOL_PROPERTIES`.

    Returns
    -------
    list[Field]
        Extracted fields with normalized types.
    """
    skip = PROTOCOL_PROPERTIES if excluded is None else frozenset(excluded)
    fields: list[Field] = []
    for member in record.members:
        if member.computed:
            continue
        if member.name in skip:
            LOGGER.debug(
                "Skipping protocol property %s.%s",
                record.name,
                member.name,
                extra={"operation": "extract_fields", "declaration": record.name},
            )
            continue
        fields.append(Field(name=member.name, type=normalize_type(member.type)))
    return fields


def extract_cases(union: UnionDecl) -> list[Case]:
    """Return the cases of ``union`` in declaration order.

    Raw values are kept verbatim, including quotes around string literals.
    """
    return [Case(name=case.name, raw_value=case.raw_value) for case in union.cases]
