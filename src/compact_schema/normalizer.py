"""Canonicalize type expressions into compact notation.

The normalizer parses a type expression into a small syntax tree and renders
it back in canonical form:

* an outer ``X?`` or ``Optional<X>`` layer is stripped and recorded as
  ``is_optional``;
* ``Array<X>`` becomes ``[X]`` and ``Dictionary<K, V>`` becomes ``[K: V]`` at
  every nesting depth;
* separators are rendered as ``", "`` and ``": "`` regardless of the input
  spacing.

Only one optional layer is stripped. ``String??`` normalizes to base
``String?`` and ``Optional<Optional<Int>>`` to base ``Optional<Int>``; inner
optionals are kept exactly as parsed. Expressions the grammar does not cover
are passed through unchanged.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from functools import lru_cache
from typing import Final, NoReturn

from compact_schema.logging import get_logger
from compact_schema.models import TypeDescriptor

__all__ = ["UnrecognizedTypeError", "normalize_type", "render_type"]

LOGGER = get_logger(__name__)

_TOKEN_RE: Final = re.compile(
    r"""
    \s*(?:
        (?P<arrow>->)
      | (?P<ellipsis>\.\.\.)
      | (?P<name>@?[A-Za-z_][A-Za-z0-9_]*(?:\.[A-Za-z_][A-Za-z0-9_]*)*)
      | (?P<punct>[<>\[\]():,?!&])
    )
    """,
    re.VERBOSE,
)

_SPECIFIERS: Final = frozenset(
    {"inout", "some", "any", "borrowing", "consuming", "sending", "__owned", "__shared"}
)
_EFFECTS: Final = frozenset({"async", "throws", "rethrows"})
_POSTFIX: Final = frozenset({"?", "!", "..."})


class UnrecognizedTypeError(ValueError):
    """Raised by the parser when an expression falls outside the grammar."""


# Syntax tree -----------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class _Named:
    name: str
    args: tuple[_Node, ...] | None = None


@dataclass(frozen=True, slots=True)
class _List:
    element: _Node


@dataclass(frozen=True, slots=True)
class _Map:
    key: _Node
    value: _Node


@dataclass(frozen=True, slots=True)
class _Tuple:
    elements: tuple[tuple[str | None, _Node], ...]


@dataclass(frozen=True, slots=True)
class _Function:
    params: _Tuple
    effects: tuple[str, ...]
    result: _Node


@dataclass(frozen=True, slots=True)
class _Postfix:
    inner: _Node
    marker: str


@dataclass(frozen=True, slots=True)
class _Prefixed:
    prefix: str
    inner: _Node


@dataclass(frozen=True, slots=True)
class _Composition:
    parts: tuple[_Node, ...]


type _Node = _Named | _List | _Map | _Tuple | _Function | _Postfix | _Prefixed | _Composition


# Tokenizer / parser ----------------------------------------------------------


def _tokenize(expression: str) -> list[str]:
    tokens: list[str] = []
    position = 0
    length = len(expression)
    while position < length:
        if expression[position:].strip() == "":
            break
        match = _TOKEN_RE.match(expression, position)
        if match is None or match.end() == position:
            message = f"Unexpected character at offset {position} in {expression!r}"
            raise UnrecognizedTypeError(message)
        tokens.append(match.group(match.lastgroup or 0))
        position = match.end()
    return tokens


class _Parser:
    """Recursive-descent parser over a token list."""

    def __init__(self, expression: str) -> None:
        self._expression = expression
        self._tokens = _tokenize(expression)
        self._index = 0

    def parse(self) -> _Node:
        if not self._tokens:
            message = "Empty type expression"
            raise UnrecognizedTypeError(message)
        node = self._parse_type()
        if self._index != len(self._tokens):
            self._fail(f"trailing token {self._peek()!r}")
        return node

    def _fail(self, reason: str) -> NoReturn:
        message = f"Cannot parse {self._expression!r}: {reason}"
        raise UnrecognizedTypeError(message)

    def _peek(self, offset: int = 0) -> str | None:
        index = self._index + offset
        return self._tokens[index] if index < len(self._tokens) else None

    def _next(self) -> str:
        token = self._peek()
        if token is None:
            self._fail("unexpected end of expression")
        self._index += 1
        return token

    def _accept(self, token: str) -> bool:
        if self._peek() == token:
            self._index += 1
            return True
        return False

    def _expect(self, token: str) -> None:
        if not self._accept(token):
            self._fail(f"expected {token!r}, found {self._peek()!r}")

    def _parse_type(self) -> _Node:
        prefixes: list[str] = []
        while (token := self._peek()) is not None and (
            token in _SPECIFIERS or token.startswith("@")
        ):
            prefixes.append(self._next())
        node = self._parse_composition()
        for prefix in reversed(prefixes):
            node = _Prefixed(prefix, node)
        return node

    def _parse_composition(self) -> _Node:
        parts = [self._parse_postfixed()]
        while self._accept("&"):
            parts.append(self._parse_postfixed())
        return parts[0] if len(parts) == 1 else _Composition(tuple(parts))

    def _parse_postfixed(self) -> _Node:
        node = self._parse_primary()
        if isinstance(node, _Tuple):
            effects: list[str] = []
            while self._peek() in _EFFECTS:
                effects.append(self._next())
            if self._accept("->"):
                return _Function(node, tuple(effects), self._parse_type())
            if effects:
                self._fail("effects without a function arrow")
        while self._peek() in _POSTFIX:
            node = _Postfix(node, self._next())
        return node

    def _parse_primary(self) -> _Node:
        token = self._next()
        if token == "[":
            element = self._parse_type()
            if self._accept(":"):
                value = self._parse_type()
                self._expect("]")
                return _Map(element, value)
            self._expect("]")
            return _List(element)
        if token == "(":
            return self._parse_tuple()
        if not _is_name(token) or token in _EFFECTS:
            self._fail(f"unexpected token {token!r}")
        if self._accept("<"):
            args = [self._parse_type()]
            while self._accept(","):
                args.append(self._parse_type())
            self._expect(">")
            return _Named(token, tuple(args))
        return _Named(token)

    def _parse_tuple(self) -> _Tuple:
        elements: list[tuple[str | None, _Node]] = []
        if self._accept(")"):
            return _Tuple(())
        while True:
            label: str | None = None
            token = self._peek()
            if token is not None and _is_name(token) and self._peek(1) == ":":
                label = self._next()
                self._next()
            elements.append((label, self._parse_type()))
            if self._accept(")"):
                return _Tuple(tuple(elements))
            self._expect(",")


def _is_name(token: str) -> bool:
    return token[0].isalpha() or token[0] == "_"


# Rendering -------------------------------------------------------------------


def _render(node: _Node) -> str:  # noqa: PLR0911 - one branch per node kind
    if isinstance(node, _Named):
        if node.args is None:
            return node.name
        args = [_render(arg) for arg in node.args]
        if node.name == "Array" and len(args) == 1:
            return f"[{args[0]}]"
        if node.name == "Dictionary" and len(args) == 2:  # noqa: PLR2004
            return f"[{args[0]}: {args[1]}]"
        return f"{node.name}<{', '.join(args)}>"
    if isinstance(node, _List):
        return f"[{_render(node.element)}]"
    if isinstance(node, _Map):
        return f"[{_render(node.key)}: {_render(node.value)}]"
    if isinstance(node, _Tuple):
        parts = [
            f"{label}: {_render(element)}" if label else _render(element)
            for label, element in node.elements
        ]
        return f"({', '.join(parts)})"
    if isinstance(node, _Function):
        effects = "".join(f" {effect}" for effect in node.effects)
        return f"{_render(node.params)}{effects} -> {_render(node.result)}"
    if isinstance(node, _Postfix):
        return f"{_render(node.inner)}{node.marker}"
    if isinstance(node, _Prefixed):
        return f"{node.prefix} {_render(node.inner)}"
    return " & ".join(_render(part) for part in node.parts)


def _strip_optional(node: _Node) -> tuple[_Node, bool]:
    if isinstance(node, _Postfix) and node.marker == "?":
        return node.inner, True
    if isinstance(node, _Named) and node.name == "Optional" and node.args and len(node.args) == 1:
        return node.args[0], True
    return node, False


def _is_optional_node(node: _Node) -> bool:
    return _strip_optional(node)[1]


def _degrade(expression: str) -> tuple[str, bool]:
    if expression.endswith("?"):
        return expression[:-1].rstrip(), True
    if expression.startswith("Optional<") and expression.endswith(">"):
        return expression[len("Optional<") : -1].strip(), True
    return expression, False


@lru_cache(maxsize=2048)
def _normalize_text(expression: str) -> tuple[str, bool]:
    stripped = expression.strip()
    try:
        root = _Parser(stripped).parse()
    except UnrecognizedTypeError as exc:
        LOGGER.debug(
            "Passing unrecognized type expression through unchanged: %s",
            exc,
            extra={"operation": "normalize_type", "status": "degraded"},
        )
        return _degrade(stripped)
    base, is_optional = _strip_optional(root)
    if is_optional and _is_optional_node(base):
        LOGGER.debug(
            "Nested optional in %r: only the outer layer is stripped",
            stripped,
            extra={"operation": "normalize_type"},
        )
    if is_optional and isinstance(base, (_Function, _Composition, _Prefixed)):
        # A trailing ``?`` would otherwise bind to the innermost operand.
        base = _Tuple(((None, base),))
    return _render(base), is_optional


def normalize_type(expression: str | TypeDescriptor) -> TypeDescriptor:
    """Return the compact descriptor for ``expression``.

    Parameters
    ----------
    expression : str | TypeDescriptor
        Raw type expression, or a descriptor to re-normalize from its rendered
        form. Re-normalizing a descriptor returns an equal descriptor.

    Returns
    -------
    TypeDescriptor
        Descriptor holding the original text, the compact base name and the
        optionality flag.
    """
    if isinstance(expression, TypeDescriptor):
        base_name, is_optional = _normalize_text(expression.render())
        return TypeDescriptor(expression.text, base_name, is_optional)
    base_name, is_optional = _normalize_text(expression)
    return TypeDescriptor(expression, base_name, is_optional)


def render_type(expression: str) -> str:
    """Return the compact rendering of ``expression`` including any ``?``."""
    return normalize_type(expression).render()
