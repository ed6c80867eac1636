"""Property parameter multimap.

Parameter names are case-insensitive and may repeat; values keep their
insertion order. Names are stored upper-cased.

Python 3.13+.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from typing import ClassVar

from vcardengine.enums import Encoding, encoding_of

__all__ = ["VCardParameters"]


class VCardParameters:
    """Case-insensitive, ordered, multi-valued parameter map.

    Supports dict-like introspection:
        - __contains__: Check if a parameter is present (case-insensitive)
        - __iter__: Iterate over (name, value) pairs in insertion order
        - __len__: Count (name, value) pairs

    Example:
        >>> params = VCardParameters()
        >>> params.add("type", "home")
        >>> params.add("TYPE", "work")
        >>> params.get("Type")
        ['home', 'work']
    """

    ALTID: ClassVar[str] = "ALTID"
    CALSCALE: ClassVar[str] = "CALSCALE"
    CHARSET: ClassVar[str] = "CHARSET"
    ENCODING: ClassVar[str] = "ENCODING"
    GEO: ClassVar[str] = "GEO"
    LABEL: ClassVar[str] = "LABEL"
    LANGUAGE: ClassVar[str] = "LANGUAGE"
    MEDIATYPE: ClassVar[str] = "MEDIATYPE"
    PID: ClassVar[str] = "PID"
    PREF: ClassVar[str] = "PREF"
    SORT_AS: ClassVar[str] = "SORT-AS"
    TYPE: ClassVar[str] = "TYPE"
    TZ: ClassVar[str] = "TZ"
    VALUE: ClassVar[str] = "VALUE"

    __slots__ = ("_values",)

    def __init__(self, items: Iterable[tuple[str, str]] = ()) -> None:
        """Initialize from (name, value) pairs."""
        self._values: dict[str, list[str]] = {}
        for name, value in items:
            self.add(name, value)

    # ------------------------------------------------------------------
    # Multimap operations
    # ------------------------------------------------------------------

    def add(self, name: str, value: str) -> None:
        """Append a value to a parameter."""
        self._values.setdefault(name.upper(), []).append(value)

    def get(self, name: str) -> list[str]:
        """Return a copy of all values of a parameter (empty if absent)."""
        return list(self._values.get(name.upper(), ()))

    def first(self, name: str) -> str | None:
        """Return the first value of a parameter, or None."""
        values = self._values.get(name.upper())
        return values[0] if values else None

    def replace(self, name: str, value: str | None) -> None:
        """Replace all values of a parameter with one value (None removes it)."""
        key = name.upper()
        if value is None:
            self._values.pop(key, None)
        else:
            self._values[key] = [value]

    def remove_all(self, name: str) -> list[str]:
        """Remove a parameter and return the values it held."""
        return self._values.pop(name.upper(), [])

    def remove(self, name: str, value: str) -> bool:
        """Remove one value of a parameter.

        Returns:
            True if the value was present
        """
        key = name.upper()
        values = self._values.get(key)
        if not values or value not in values:
            return False
        values.remove(value)
        if not values:
            del self._values[key]
        return True

    def names(self) -> list[str]:
        """Return parameter names in insertion order."""
        return list(self._values)

    def grouped(self) -> list[tuple[str, list[str]]]:
        """Return (name, values) pairs in insertion order."""
        return [(name, list(values)) for name, values in self._values.items()]

    def copy(self) -> VCardParameters:
        """Return an independent copy."""
        clone = VCardParameters()
        clone._values = {name: list(values) for name, values in self._values.items()}
        return clone

    def clear(self) -> None:
        """Remove every parameter."""
        self._values.clear()

    # ------------------------------------------------------------------
    # Typed accessors
    # ------------------------------------------------------------------

    @property
    def types(self) -> list[str]:
        """TYPE values."""
        return self.get(self.TYPE)

    def set_type(self, value: str | None) -> None:
        """Replace every TYPE value with one value (None removes TYPE)."""
        self.replace(self.TYPE, value)

    @property
    def pref(self) -> int | None:
        """PREF value as an integer, None if absent or not a number."""
        value = self.first(self.PREF)
        if value is None:
            return None
        try:
            return int(value.strip())
        except ValueError:
            return None

    @property
    def encoding(self) -> Encoding | None:
        """ENCODING value, None if absent or unrecognized."""
        value = self.first(self.ENCODING)
        return None if value is None else encoding_of(value)

    def set_encoding(self, encoding: Encoding | None) -> None:
        """Set or remove the ENCODING parameter."""
        self.replace(self.ENCODING, None if encoding is None else str(encoding))

    @property
    def charset(self) -> str | None:
        """CHARSET value."""
        return self.first(self.CHARSET)

    @property
    def label(self) -> str | None:
        """LABEL value."""
        return self.first(self.LABEL)

    @property
    def media_type(self) -> str | None:
        """MEDIATYPE value."""
        return self.first(self.MEDIATYPE)

    # ------------------------------------------------------------------
    # Container protocol
    # ------------------------------------------------------------------

    def __contains__(self, name: object) -> bool:
        """Check whether a parameter is present (case-insensitive)."""
        return isinstance(name, str) and name.upper() in self._values

    def __iter__(self) -> Iterator[tuple[str, str]]:
        """Iterate over (name, value) pairs in insertion order."""
        for name, values in self._values.items():
            for value in values:
                yield name, value

    def __len__(self) -> int:
        """Count (name, value) pairs."""
        return sum(len(values) for values in self._values.values())

    def __bool__(self) -> bool:
        """True if any parameter is present."""
        return bool(self._values)

    def __eq__(self, other: object) -> bool:
        """Equal when the same names hold the same values in the same order."""
        if not isinstance(other, VCardParameters):
            return NotImplemented
        return self._values == other._values

    def __repr__(self) -> str:
        """Return string representation for debugging."""
        return f"VCardParameters({list(self)!r})"
