"""Documentation registry aggregating compact signatures and schemas.

Nothing is registered implicitly: generating a schema or signature never
touches the registry. Consumers call :meth:`DocumentationRegistry.register_methods`
(or the module-level helpers bound to the process-wide :data:`REGISTRY`) after
each generation step, and read back snapshots or the combined document.

Examples
--------
>>> from compact_schema.registry import DocumentationRegistry
>>> registry = DocumentationRegistry()
>>> registry.get_all_methods()
()
>>> _ = registry.register_methods("UserAPI", ["getUserInfo() async throws -> UserInfo"])
>>> print(registry.get_complete_documentation())
# API Documentation
<BLANKLINE>
## Methods
getUserInfo() async throws -> UserInfo
<BLANKLINE>
## Data Models
"""

from __future__ import annotations

import threading
from dataclasses import dataclass
from types import MappingProxyType
from typing import TYPE_CHECKING

from jinja2 import Environment, StrictUndefined

from compact_schema.logging import get_logger

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

    from jinja2 import Template

__all__ = [
    "REGISTRY",
    "DocumentationRegistry",
    "RegistryEntry",
    "clear",
    "get_all_methods",
    "get_complete_documentation",
    "get_methods_by_category",
    "register_method",
    "register_methods",
    "register_schema",
]

LOGGER = get_logger(__name__)

_TEMPLATE = (
    "# API Documentation\n\n"
    "{% if methods %}## Methods\n"
    "{% for method in methods %}{{ method }}\n{% endfor %}\n"
    "{% endif %}## Data Models"
    "{% for schema in schemas %}\n{% if not loop.first %}\n{% endif %}{{ schema }}{% endfor %}"
)


def _build_environment() -> Environment:
    return Environment(
        undefined=StrictUndefined,
        autoescape=False,
        trim_blocks=False,
        lstrip_blocks=False,
        keep_trailing_newline=False,
    )


_ENV = _build_environment()
_TEMPLATE_OBJ: Template = _ENV.from_string(_TEMPLATE)


@dataclass(frozen=True, slots=True)
class RegistryEntry:
    """Ordered signatures registered under one category."""

    category: str
    signatures: tuple[str, ...] = ()


class DocumentationRegistry:
    """Category-organized collection of signatures plus data model schemas.

    Writers are serialized by a lock; readers receive immutable snapshots
    copied under the same lock, so a snapshot never observes a partial update.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._entries: dict[str, RegistryEntry] = {}
        self._schemas: dict[str, str] = {}

    def register_methods(self, category: str, signatures: Iterable[str]) -> RegistryEntry:
        """Set the signatures of ``category``.

        A category registered again keeps its original position; its
        signatures are replaced.

        Parameters
        ----------
        category : str
            Category name, typically the containing type.
        signatures : Iterable[str]
            Compact signatures in the order they should be listed.

        Returns
        -------
        RegistryEntry
            The stored entry.
        """
        entry = RegistryEntry(category=category, signatures=tuple(signatures))
        with self._lock:
            self._entries[category] = entry
        LOGGER.debug(
            "Registered %d signature(s) under %s",
            len(entry.signatures),
            category,
            extra={"operation": "register_methods"},
        )
        return entry

    def register_method(self, category: str, signature: str) -> RegistryEntry:
        """Append ``signature`` to ``category``, creating it when missing."""
        with self._lock:
            current = self._entries.get(category)
            existing = current.signatures if current is not None else ()
            entry = RegistryEntry(category=category, signatures=(*existing, signature))
            self._entries[category] = entry
        return entry

    def register_schema(self, name: str, schema: str) -> None:
        """Add or replace the data model schema registered as ``name``."""
        with self._lock:
            self._schemas[name] = schema
        LOGGER.debug("Registered schema %s", name, extra={"operation": "register_schema"})

    def get_entries(self) -> tuple[RegistryEntry, ...]:
        with self._lock:
            return tuple(self._entries.values())

    def get_all_methods(self) -> tuple[str, ...]:
        """Return every signature, category by category in registration order."""
        with self._lock:
            entries = tuple(self._entries.values())
        return tuple(signature for entry in entries for signature in entry.signatures)

    def get_methods_by_category(self) -> Mapping[str, tuple[str, ...]]:
        """Return a read-only snapshot mapping category to signatures."""
        with self._lock:
            snapshot = {name: entry.signatures for name, entry in self._entries.items()}
        return MappingProxyType(snapshot)

    def get_schemas(self) -> Mapping[str, str]:
        with self._lock:
            snapshot = dict(self._schemas)
        return MappingProxyType(snapshot)

    def get_complete_documentation(self) -> str:
        """Render the combined ``# API Documentation`` document.

        The ``## Methods`` section is omitted when no signature is registered;
        the ``## Data Models`` section is always present and lists registered
        schemas separated by blank lines.
        """
        with self._lock:
            methods = [sig for entry in self._entries.values() for sig in entry.signatures]
            schemas = list(self._schemas.values())
        return _TEMPLATE_OBJ.render(methods=methods, schemas=schemas)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
            self._schemas.clear()


REGISTRY = DocumentationRegistry()


def register_methods(category: str, signatures: Iterable[str]) -> RegistryEntry:
    """Register ``signatures`` under ``category`` in the process-wide registry."""
    return REGISTRY.register_methods(category, signatures)


def register_method(category: str, signature: str) -> RegistryEntry:
    """Append one signature to ``category`` in the process-wide registry."""
    return REGISTRY.register_method(category, signature)


def register_schema(name: str, schema: str) -> None:
    """Register a data model schema in the process-wide registry."""
    REGISTRY.register_schema(name, schema)


def get_all_methods() -> tuple[str, ...]:
    """Return all signatures from the process-wide registry."""
    return REGISTRY.get_all_methods()


def get_methods_by_category() -> Mapping[str, tuple[str, ...]]:
    """Return the category map of the process-wide registry."""
    return REGISTRY.get_methods_by_category()


def get_complete_documentation() -> str:
    """Render the combined document from the process-wide registry."""
    return REGISTRY.get_complete_documentation()


def clear() -> None:
    """Reset the process-wide registry."""
    REGISTRY.clear()
