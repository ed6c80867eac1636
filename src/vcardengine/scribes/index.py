"""Scribe registry.

Two tiers: the built-in scribes, built once and shared read-only by every
index, and per-index extension scribes that are consulted first so a
caller can add kinds or shadow built-ins.

Each tier is indexed three ways:

- by upper-cased property name (text and JSON syntaxes)
- by property class (writing)
- by (namespace, local name) (XML syntax)

Thread Safety:
    The built-in tables are immutable. Registration mutates the index;
    synchronize externally if it can race with marshalling.

Python 3.13+.
"""

from __future__ import annotations

import functools
import logging
from collections.abc import Iterator, Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any

from vcardengine.constants import XCARD_NAMESPACE
from vcardengine.model import (
    Anniversary,
    Birthday,
    FormattedName,
    Key,
    Kind,
    Logo,
    Mailer,
    Nickname,
    Note,
    Photo,
    ProductId,
    RawProperty,
    Role,
    SortString,
    Sound,
    Source,
    Title,
    Uid,
    Url,
    VCardProperty,
    Xml,
)

from .base import VCardPropertyScribe
from .binary import BinaryPropertyScribe
from .dates import DateOrTimePropertyScribe
from .special import AgentScribe, RawPropertyScribe, XmlScribe
from .structured import AddressScribe, GeoScribe, OrganizationScribe, StructuredNameScribe
from .text import (
    CategoriesScribe,
    EmailScribe,
    LabelScribe,
    ListPropertyScribe,
    TelephoneScribe,
    TextPropertyScribe,
    UriPropertyScribe,
)

__all__ = ["ScribeIndex", "standard_scribes"]

logger = logging.getLogger(__name__)

type AnyScribe = VCardPropertyScribe[Any]
type QName = tuple[str, str]


def standard_scribes() -> list[AnyScribe]:
    """Create one instance of every built-in scribe."""
    return [
        TextPropertyScribe(FormattedName, "FN"),
        TextPropertyScribe(Note, "NOTE"),
        TextPropertyScribe(Title, "TITLE"),
        TextPropertyScribe(Role, "ROLE"),
        TextPropertyScribe(ProductId, "PRODID"),
        TextPropertyScribe(Mailer, "MAILER"),
        TextPropertyScribe(Kind, "KIND"),
        TextPropertyScribe(SortString, "SORT-STRING"),
        LabelScribe(),
        UriPropertyScribe(Url, "URL"),
        UriPropertyScribe(Source, "SOURCE"),
        UriPropertyScribe(Uid, "UID"),
        EmailScribe(),
        TelephoneScribe(),
        CategoriesScribe(),
        ListPropertyScribe(Nickname, "NICKNAME"),
        StructuredNameScribe(),
        AddressScribe(),
        OrganizationScribe(),
        GeoScribe(),
        BinaryPropertyScribe(Photo, "PHOTO"),
        BinaryPropertyScribe(Logo, "LOGO"),
        BinaryPropertyScribe(Sound, "SOUND"),
        BinaryPropertyScribe(Key, "KEY"),
        DateOrTimePropertyScribe(Birthday, "BDAY"),
        DateOrTimePropertyScribe(Anniversary, "ANNIVERSARY"),
        AgentScribe(),
        XmlScribe(),
    ]


@dataclass(frozen=True, slots=True)
class _Tables:
    by_name: Mapping[str, AnyScribe]
    by_class: Mapping[type[VCardProperty], AnyScribe]
    by_qname: Mapping[QName, AnyScribe]


@functools.cache
def _standard_tables() -> _Tables:
    scribes = standard_scribes()
    return _Tables(
        by_name=MappingProxyType({scribe.name: scribe for scribe in scribes}),
        by_class=MappingProxyType({scribe.property_class: scribe for scribe in scribes}),
        by_qname=MappingProxyType({scribe.qname: scribe for scribe in scribes}),
    )


class ScribeIndex:
    """Looks up the scribe of a property name, class or XML element name.

    Example:
        >>> index = ScribeIndex()
        >>> index.get_property_scribe("adr").name
        'ADR'
        >>> index.register(MyScribe())
        >>> "X-MINE" in index
        True
    """

    __slots__ = ("_by_class", "_by_name", "_by_qname")

    def __init__(self) -> None:
        """Initialize index with no extension scribes."""
        self._by_name: dict[str, AnyScribe] = {}
        self._by_class: dict[type[VCardProperty], AnyScribe] = {}
        self._by_qname: dict[QName, AnyScribe] = {}

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def get_property_scribe(self, name: str) -> AnyScribe | None:
        """Scribe registered for a property name, or None."""
        upper = name.upper()
        return self._by_name.get(upper) or _standard_tables().by_name.get(upper)

    def scribe_for_name(self, name: str) -> AnyScribe:
        """Scribe for a property name, a raw scribe if none is registered."""
        scribe = self.get_property_scribe(name)
        if scribe is None:
            return RawPropertyScribe(name)
        return scribe

    def get_property_scribe_for(self, prop: VCardProperty) -> AnyScribe | None:
        """Scribe for a property instance, or None if its class is unknown.

        Raw properties get a raw scribe named after them.
        """
        if isinstance(prop, RawProperty):
            return RawPropertyScribe(prop.name)
        kind = type(prop)
        return self._by_class.get(kind) or _standard_tables().by_class.get(kind)

    def get_property_scribe_by_qname(self, qname: QName) -> AnyScribe:
        """Scribe for an XML element name.

        Unknown elements in the xCard namespace are read as extension
        properties; elements in any other namespace are kept verbatim by
        the XML scribe.
        """
        scribe = self._by_qname.get(qname) or _standard_tables().by_qname.get(qname)
        if scribe is not None:
            return scribe
        namespace, local = qname
        if namespace == XCARD_NAMESPACE:
            return RawPropertyScribe(local)
        return _standard_tables().by_class[Xml]

    def has_property_scribe(self, kind: type[VCardProperty]) -> bool:
        """Check whether a property class has a scribe."""
        return kind in self._by_class or kind in _standard_tables().by_class

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    def register(self, scribe: AnyScribe) -> None:
        """Register an extension scribe under all three keys.

        A scribe for a name, class or XML name already registered
        replaces the earlier one; built-ins are shadowed, not removed.
        """
        self._by_name[scribe.name] = scribe
        self._by_class[scribe.property_class] = scribe
        self._by_qname[scribe.qname] = scribe
        logger.debug("Registered scribe %r", scribe)

    def unregister(self, scribe: AnyScribe) -> None:
        """Remove an extension scribe from all three keys."""
        if self._by_name.get(scribe.name) is scribe:
            del self._by_name[scribe.name]
        if self._by_class.get(scribe.property_class) is scribe:
            del self._by_class[scribe.property_class]
        if self._by_qname.get(scribe.qname) is scribe:
            del self._by_qname[scribe.qname]

    def copy(self) -> ScribeIndex:
        """Create an independent copy carrying the same extension scribes."""
        new = ScribeIndex()
        new._by_name = self._by_name.copy()
        new._by_class = self._by_class.copy()
        new._by_qname = self._by_qname.copy()
        return new

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    def __contains__(self, name: object) -> bool:
        """Check whether a property name has a scribe (built-in or extension)."""
        return isinstance(name, str) and self.get_property_scribe(name) is not None

    def __iter__(self) -> Iterator[str]:
        """Iterate over every known property name, extensions first."""
        seen = set(self._by_name)
        yield from self._by_name
        yield from (name for name in _standard_tables().by_name if name not in seen)

    def __len__(self) -> int:
        """Number of known property names."""
        return len(set(self._by_name) | set(_standard_tables().by_name))

    def __repr__(self) -> str:
        """Return index representation for debugging."""
        return f"ScribeIndex(extensions={sorted(self._by_name)})"
