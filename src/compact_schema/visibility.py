"""Select externally visible members for bulk signature generation."""

from __future__ import annotations

from typing import TYPE_CHECKING

from compact_schema.declarations import Visibility

if TYPE_CHECKING:
    from compact_schema.declarations import ContainerDecl, FunctionDecl

__all__ = ["is_exported", "public_members"]


def is_exported(function: FunctionDecl, *, minimum: Visibility = Visibility.PUBLIC) -> bool:
    return function.visibility.at_least(minimum)


def public_members(
    container: ContainerDecl,
    *,
    minimum: Visibility = Visibility.PUBLIC,
) -> list[FunctionDecl]:
    """Return members of ``container`` visible at ``minimum`` or above.

    Declaration order is preserved.
    """
    return [member for member in container.members if is_exported(member, minimum=minimum)]
