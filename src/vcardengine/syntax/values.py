"""Structured-value grammar of property values.

Pure functions for escaping and for the three component shapes a value
can take:

- list: ``a,b,c`` (CATEGORIES, NICKNAME)
- semi-structured: ``a;b;c`` where a component holds one value (ORG, 2.1 ADR)
- structured: ``a;b1,b2;c`` where each component holds many values (ADR, N)

Splitting scans for unescaped delimiters; ``\\,`` and ``\\;`` never split.
Newline escaping is not done here: it depends on the target line syntax
and belongs to the raw line writer.

Python 3.13+. Zero external dependencies.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Sequence

__all__ = [
    "SemiStructuredValueIterator",
    "StructuredValueBuilder",
    "StructuredValueIterator",
    "escape",
    "parse_list",
    "parse_semistructured",
    "parse_structured",
    "unescape",
    "write_list",
    "write_semistructured",
    "write_structured",
]

_SPECIALS = frozenset("\\,;")


def escape(value: str, *, escape_commas: bool = True) -> str:
    """Backslash-escape backslashes, commas and semicolons.

    Args:
        value: Raw value
        escape_commas: Set False for vCard 2.1 components, which never
            treat commas as delimiters

    Example:
        >>> escape("Doe, John; Esq.")
        'Doe\\\\, John\\\\; Esq.'
    """
    if not any(ch in _SPECIALS for ch in value):
        return value
    out: list[str] = []
    for ch in value:
        if ch in _SPECIALS and (escape_commas or ch != ","):
            out.append("\\")
        out.append(ch)
    return "".join(out)


def unescape(value: str) -> str:
    """Reverse ``escape``.

    ``\\n`` and ``\\N`` become line breaks; any other escaped character
    stands for itself. A trailing lone backslash is kept.
    """
    if "\\" not in value:
        return value
    out: list[str] = []
    escaped = False
    for ch in value:
        if escaped:
            out.append("\n" if ch in "nN" else ch)
            escaped = False
        elif ch == "\\":
            escaped = True
        else:
            out.append(ch)
    if escaped:
        out.append("\\")
    return "".join(out)


def _split(value: str, delimiter: str, limit: int = -1) -> list[str]:
    """Split on unescaped delimiters, leaving escapes in place.

    Args:
        value: Escaped value
        delimiter: Single delimiter character
        limit: Maximum number of pieces; the last piece keeps the rest
    """
    pieces: list[str] = []
    start = 0
    escaped = False
    for index, ch in enumerate(value):
        if escaped:
            escaped = False
            continue
        if ch == "\\":
            escaped = True
            continue
        if ch == delimiter and (limit < 0 or len(pieces) < limit - 1):
            pieces.append(value[start:index])
            start = index + 1
    pieces.append(value[start:])
    return pieces


def _drop_trailing(pieces: list[str]) -> list[str]:
    end = len(pieces)
    while end > 0 and not pieces[end - 1]:
        end -= 1
    return pieces[:end]


# ============================================================================
# LIST
# ============================================================================


def parse_list(value: str) -> list[str]:
    """Parse a comma-separated list.

    Example:
        >>> parse_list("a,b\\\\,c")
        ['a', 'b,c']
    """
    if not value:
        return []
    return [unescape(piece) for piece in _split(value, ",")]


def write_list(values: Iterable[str | None]) -> str:
    """Write a comma-separated list (None is written as empty)."""
    return ",".join("" if value is None else escape(value) for value in values)


# ============================================================================
# SEMI-STRUCTURED
# ============================================================================


def parse_semistructured(value: str, limit: int = -1) -> list[str]:
    """Parse a semicolon-separated value whose components hold one value each.

    Args:
        value: Escaped value
        limit: Maximum number of components; the last keeps the remainder
    """
    if not value:
        return []
    return [unescape(piece) for piece in _split(value, ";", limit)]


def write_semistructured(
    values: Sequence[str | None],
    *,
    escape_commas: bool = True,
    include_trailing: bool = False,
) -> str:
    """Write a semicolon-separated value with one value per component.

    Args:
        values: Components; None is written as empty
        escape_commas: Set False for vCard 2.1
        include_trailing: Keep trailing empty components
    """
    pieces = ["" if value is None else escape(value, escape_commas=escape_commas) for value in values]
    if not include_trailing:
        pieces = _drop_trailing(pieces)
    return ";".join(pieces)


# ============================================================================
# STRUCTURED
# ============================================================================


def parse_structured(value: str) -> list[list[str]]:
    """Parse a semicolon-separated value whose components are comma lists.

    An empty component yields an empty list.

    Example:
        >>> parse_structured(";;123 Main St;Anytown")
        [[], [], ['123 Main St'], ['Anytown']]
    """
    if not value:
        return []
    return [parse_list(component) for component in _split(value, ";")]


def write_structured(
    components: Sequence[Sequence[str] | str | None],
    *,
    include_trailing: bool = False,
) -> str:
    """Write a semicolon-separated value whose components are comma lists.

    Args:
        components: Each component is a list of values, one value, or None
        include_trailing: Keep trailing empty components
    """
    pieces: list[str] = []
    for component in components:
        if component is None:
            pieces.append("")
        elif isinstance(component, str):
            pieces.append(escape(component))
        else:
            pieces.append(write_list(component))
    if not include_trailing:
        pieces = _drop_trailing(pieces)
    return ";".join(pieces)


class StructuredValueBuilder:
    """Accumulates components for ``write_structured``.

    Example:
        >>> builder = StructuredValueBuilder()
        >>> builder.append("Doe")
        >>> builder.append(["Mr", "Dr"])
        >>> builder.build()
        'Doe;Mr,Dr'
    """

    __slots__ = ("_components",)

    def __init__(self) -> None:
        """Initialize empty builder."""
        self._components: list[Sequence[str] | str | None] = []

    def append(self, component: Sequence[str] | str | None) -> None:
        """Add the next component."""
        self._components.append(component)

    def build(self, *, include_trailing: bool = False) -> str:
        """Write the accumulated components."""
        return write_structured(self._components, include_trailing=include_trailing)


class StructuredValueIterator:
    """Pull-style reader over parsed structured components.

    Running out of components is not an error: a missing component reads
    as empty.

    Example:
        >>> it = StructuredValueIterator.parse("Doe;John;;Mr,Dr")
        >>> it.next_value(), it.next_value(), it.next_component(), it.next_component()
        ('Doe', 'John', [], ['Mr', 'Dr'])
        >>> it.next_value() is None
        True
    """

    __slots__ = ("_iterator", "_remaining")

    def __init__(self, components: Sequence[Sequence[str]]) -> None:
        """Initialize over already-parsed components."""
        self._remaining = len(components)
        self._iterator: Iterator[Sequence[str]] = iter(components)

    @classmethod
    def parse(cls, value: str) -> StructuredValueIterator:
        """Parse an escaped structured value and iterate over it."""
        return cls(parse_structured(value))

    def next_component(self) -> list[str]:
        """All values of the next component (empty if absent)."""
        component = next(self._iterator, None)
        if component is None:
            return []
        self._remaining -= 1
        return list(component)

    def next_value(self) -> str | None:
        """First value of the next component, or None if empty or absent."""
        component = self.next_component()
        return component[0] if component else None

    def has_next(self) -> bool:
        """True while components remain."""
        return self._remaining > 0


class SemiStructuredValueIterator:
    """Pull-style reader over semi-structured components.

    Empty and missing components both read as None.
    """

    __slots__ = ("_iterator", "_remaining")

    def __init__(self, value: str, limit: int = -1) -> None:
        """Parse an escaped semi-structured value and iterate over it."""
        components = parse_semistructured(value, limit)
        self._remaining = len(components)
        self._iterator: Iterator[str] = iter(components)

    def next_value(self) -> str | None:
        """The next component, or None if empty or absent."""
        component = next(self._iterator, None)
        if component is None:
            return None
        self._remaining -= 1
        return component or None

    def has_next(self) -> bool:
        """True while components remain."""
        return self._remaining > 0
