"""Property values of the JSON syntax (jCard, RFC 7095).

A jCard property is ``[name, params, type, value...]``. The trailing
values take one of three shapes, which ``JCardValue`` normalizes:

- single: ``"Doe"``
- multi: ``"a", "b"`` (several trailing values)
- structured: ``["Doe", "John", "", ["Mr", "Dr"], ""]`` (one array)

Python 3.13+. Zero external dependencies.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass

__all__ = ["JCardValue", "JsonValue"]

type JsonValue = str | int | float | bool | None | list[JsonValue] | dict[str, JsonValue]


def _to_string(value: JsonValue) -> str:
    match value:
        case None:
            return ""
        case bool():
            return "true" if value else "false"
        case str():
            return value
        case list():
            return ",".join(_to_string(item) for item in value)
        case _:
            return str(value)


@dataclass(frozen=True, slots=True)
class JCardValue:
    """The value part of one jCard property.

    Attributes:
        values: JSON values following the type tag
    """

    values: tuple[JsonValue, ...]

    @classmethod
    def single(cls, value: JsonValue) -> JCardValue:
        """One scalar value."""
        return cls((value,))

    @classmethod
    def multi(cls, values: Iterable[JsonValue]) -> JCardValue:
        """Several scalar values."""
        return cls(tuple(values))

    @classmethod
    def structured(cls, components: Iterable[Sequence[str] | str | None]) -> JCardValue:
        """One array of components.

        An empty or absent component becomes ``""``; a one-value component
        is written as a plain string; longer components become arrays.
        """
        written: list[JsonValue] = []
        for component in components:
            if component is None:
                written.append("")
            elif isinstance(component, str):
                written.append(component)
            elif not component:
                written.append("")
            elif len(component) == 1:
                written.append(component[0])
            else:
                written.append(list(component))
        return cls((written,))

    def as_single(self) -> str:
        """The first value as a string ("" if there is none)."""
        if not self.values:
            return ""
        first = self.values[0]
        if isinstance(first, list):
            return _to_string(first[0]) if first else ""
        return _to_string(first)

    def as_multi(self) -> list[str]:
        """Every value as a string."""
        return [_to_string(value) for value in self.values]

    def as_structured(self) -> list[list[str]]:
        """Components of a structured value.

        A plain string component yields one value, ``""`` yields none.

        Example:
            >>> JCardValue((["Doe", "", ["Mr", "Dr"]],)).as_structured()
            [['Doe'], [], ['Mr', 'Dr']]
        """
        if not self.values:
            return []
        first = self.values[0]
        if not isinstance(first, list):
            text = _to_string(first)
            return [[text]] if text else []
        components: list[list[str]] = []
        for component in first:
            if isinstance(component, list):
                components.append([_to_string(item) for item in component])
            else:
                text = _to_string(component)
                components.append([text] if text else [])
        return components

    @property
    def is_structured(self) -> bool:
        """True if the first value is an array."""
        return bool(self.values) and isinstance(self.values[0], list)
