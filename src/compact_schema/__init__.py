"""Compact, token-efficient schemas and signatures for declarations.

The engine turns a declaration model (records, unions, functions and
containers of functions) into minimal textual summaries:

>>> from compact_schema import RecordDecl, PropertyDecl, compact_schema
>>> record = RecordDecl(
...     name="TestUser",
...     members=(PropertyDecl("id", "String"), PropertyDecl("email", "Optional<String>")),
... )
>>> print(compact_schema(record))
TestUser {
  id: String
  email: String?
}
"""

from __future__ import annotations

from collections.abc import Callable
from importlib import import_module
from typing import cast

from compact_schema.declarations import (
    CaseDecl,
    ContainerDecl,
    Declaration,
    DeclarationKind,
    FunctionDecl,
    ParameterDecl,
    PropertyDecl,
    RecordDecl,
    UnionDecl,
    Visibility,
)
from compact_schema.errors import (
    CompactSchemaError,
    ConfigurationError,
    DeclarationLoadError,
    InvalidDeclarationError,
)
from compact_schema.generate import (
    compact_methods,
    compact_schema,
    compact_signature,
    generate_members,
    generate_sidecar,
    write_sidecar,
)
from compact_schema.models import (
    Case,
    Field,
    FunctionSignature,
    LabelPolicy,
    Parameter,
    TypeDescriptor,
)
from compact_schema.normalizer import normalize_type
from compact_schema.registry import REGISTRY, DocumentationRegistry

__version__ = "1.0.0"

__all__ = [
    "REGISTRY",
    "Case",
    "CaseDecl",
    "CompactSchemaError",
    "ConfigurationError",
    "ContainerDecl",
    "Declaration",
    "DeclarationKind",
    "DeclarationLoadError",
    "DocumentationRegistry",
    "Field",
    "FunctionDecl",
    "FunctionSignature",
    "InvalidDeclarationError",
    "LabelPolicy",
    "Parameter",
    "ParameterDecl",
    "PropertyDecl",
    "RecordDecl",
    "TypeDescriptor",
    "UnionDecl",
    "Visibility",
    "__version__",
    "compact_methods",
    "compact_schema",
    "compact_signature",
    "generate_members",
    "generate_sidecar",
    "main",
    "normalize_type",
    "write_sidecar",
]


CliMain = Callable[[list[str] | None], int]


def main(argv: list[str] | None = None) -> int:
    """Dispatch to the CLI entry point without eagerly importing it."""
    cli_module = import_module("compact_schema.cli")
    cli_main = cast(CliMain, cli_module.main)
    return cli_main(argv)
