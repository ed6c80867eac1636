"""The vCard record.

Python 3.13+.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import TypeVar

from vcardengine.enums import VCardVersion

from .properties import FormattedName, RawProperty, VCardProperty

__all__ = ["VCard"]

P = TypeVar("P", bound=VCardProperty)


@dataclass(slots=True)
class VCard:
    """A contact record: an ordered sequence of properties plus a version.

    The version records what the record was read as; writers target their
    own configured version and ignore it.

    Example:
        >>> card = VCard()
        >>> card.add(FormattedName("John Doe"))
        >>> card.formatted_name
        'John Doe'
    """

    version: VCardVersion = VCardVersion.V3_0
    properties: list[VCardProperty] = field(default_factory=list)

    def add(self, prop: VCardProperty) -> None:
        """Append a property."""
        self.properties.append(prop)

    def get_properties(self, kind: type[P]) -> list[P]:
        """All properties of exactly the given kind, in record order."""
        return [prop for prop in self.properties if type(prop) is kind]  # type: ignore[misc]

    def get_property(self, kind: type[P]) -> P | None:
        """First property of the given kind, or None."""
        for prop in self.properties:
            if type(prop) is kind:
                return prop  # type: ignore[return-value]
        return None

    def remove_properties(self, kind: type[VCardProperty]) -> None:
        """Remove every property of the given kind."""
        self.properties = [prop for prop in self.properties if type(prop) is not kind]

    def get_extended_properties(self, name: str) -> list[RawProperty]:
        """Raw properties with the given name (case-insensitive)."""
        upper = name.upper()
        return [
            prop
            for prop in self.properties
            if isinstance(prop, RawProperty) and prop.name.upper() == upper
        ]

    @property
    def formatted_name(self) -> str | None:
        """Value of the first FN property."""
        prop = self.get_property(FormattedName)
        return None if prop is None else prop.value

    def __iter__(self) -> Iterator[VCardProperty]:
        """Iterate over properties in record order."""
        return iter(self.properties)

    def __len__(self) -> int:
        """Number of properties."""
        return len(self.properties)
