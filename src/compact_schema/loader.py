"""Decode declaration documents into the declaration model.

A document is either a list of declarations or a mapping whose
``declarations`` key holds that list. Each declaration carries a ``kind`` tag
(``record``, ``union``, ``function`` or ``container``):

.. code-block:: yaml

    declarations:
      - kind: record
        name: TestUser
        members:
          - {name: id, type: String}
          - {name: email, type: "String?"}
      - kind: function
        name: getUserInfo
        is_async: true
        is_throwing: true
        return_type: UserInfo
"""

from __future__ import annotations

from pathlib import Path
from typing import Final, Literal

import msgspec
import yaml

from compact_schema.declarations import Declaration
from compact_schema.errors import DeclarationLoadError
from compact_schema.logging import get_logger

__all__ = ["DocumentFormat", "decode_declarations", "load_declarations"]

LOGGER = get_logger(__name__)

type DocumentFormat = Literal["json", "yaml"]

_DOCUMENT_KEY: Final = "declarations"
_NULL_TAG: Final = "tag:yaml.org,2002:null"
_SUFFIX_FORMATS: Final[dict[str, DocumentFormat]] = {
    ".json": "json",
    ".yaml": "yaml",
    ".yml": "yaml",
}


class _DeclarationLoader(yaml.SafeLoader):
    """Safe loader that resolves only ``null`` implicitly.

    YAML 1.1 would read ``raw_value: 1`` as an int and cases named ``on`` or
    ``no`` as booleans; here such plain scalars stay strings and typed fields
    are coerced by ``msgspec.convert``.
    """


_DeclarationLoader.yaml_implicit_resolvers = {
    first: [(tag, pattern) for tag, pattern in resolvers if tag == _NULL_TAG]
    for first, resolvers in yaml.SafeLoader.yaml_implicit_resolvers.items()
}


def _parse(text: str | bytes, document_format: DocumentFormat) -> object:
    if document_format == "json":
        return msgspec.json.decode(text)
    return yaml.load(text, Loader=_DeclarationLoader)  # noqa: S506 - SafeLoader subclass


def decode_declarations(
    text: str | bytes,
    document_format: DocumentFormat = "yaml",
) -> list[Declaration]:
    """Decode declarations from ``text``.

    Parameters
    ----------
    text : str | bytes
        Document contents.
    document_format : DocumentFormat, optional
        ``"yaml"`` (default; also accepts JSON) or ``"json"``.

    Returns
    -------
    list[Declaration]
        Declarations in document order.

    Raises
    ------
    DeclarationLoadError
        If the document is malformed or does not match the declaration model.
    """
    try:
        raw = _parse(text, document_format)
    except (msgspec.DecodeError, yaml.YAMLError) as exc:
        message = f"Malformed {document_format} declaration document: {exc}"
        raise DeclarationLoadError(message) from exc

    if raw is None:
        return []
    if isinstance(raw, dict):
        if _DOCUMENT_KEY not in raw:
            message = f"Declaration document mapping has no {_DOCUMENT_KEY!r} key"
            raise DeclarationLoadError(message, context={"keys": sorted(map(str, raw))})
        raw = raw[_DOCUMENT_KEY] or []

    try:
        return msgspec.convert(raw, type=list[Declaration], strict=False)
    except msgspec.ValidationError as exc:
        message = f"Invalid declaration document: {exc}"
        raise DeclarationLoadError(message) from exc


def load_declarations(
    path: Path | str,
    document_format: DocumentFormat | None = None,
) -> list[Declaration]:
    """Read and decode the declaration document at ``path``.

    The format is inferred from the suffix when not given; unknown suffixes
    are read as YAML.

    Raises
    ------
    DeclarationLoadError
        If the file cannot be read or decoded.
    """
    source = Path(path)
    resolved_format = document_format or _SUFFIX_FORMATS.get(source.suffix.lower(), "yaml")
    try:
        data = source.read_bytes()
    except OSError as exc:
        message = f"Cannot read declaration document {source}"
        raise DeclarationLoadError(message, context={"path": str(source)}) from exc
    declarations = decode_declarations(data, resolved_format)
    LOGGER.debug(
        "Loaded %d declaration(s) from %s",
        len(declarations),
        source,
        extra={"operation": "load_declarations"},
    )
    return declarations
