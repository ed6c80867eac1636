"""Typed property classes.

Every property carries a parameter multimap and an optional group. The
concrete class is the property *kind*: the scribe registry maps each
class to the codec that marshals it. Extension properties without a
dedicated class are ``RawProperty`` instances carrying their own name.

Properties are mutable: a reader appends to them while it builds a
record (labels are attached to addresses after the record is complete).
Writers never mutate them.

Python 3.13+.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import TYPE_CHECKING, ClassVar
from xml.etree import ElementTree as ET

from vcardengine.enums import DataType, VCardVersion

from .dates import PartialDate
from .media import IMAGE_TYPES, KEY_TYPES, SOUND_TYPES, MediaType, MediaTypeTable
from .parameters import VCardParameters

if TYPE_CHECKING:
    from .vcard import VCard

__all__ = [
    "Address",
    "Agent",
    "Anniversary",
    "BinaryProperty",
    "Birthday",
    "Categories",
    "DateOrTimeProperty",
    "Email",
    "FormattedName",
    "Geo",
    "Key",
    "Kind",
    "Label",
    "ListProperty",
    "Logo",
    "Mailer",
    "Nickname",
    "Note",
    "Organization",
    "Photo",
    "ProductId",
    "RawProperty",
    "Role",
    "SortString",
    "Sound",
    "Source",
    "StructuredName",
    "Telephone",
    "TextProperty",
    "Title",
    "Uid",
    "Url",
    "VCardProperty",
    "Xml",
]

_ALL_VERSIONS = frozenset(VCardVersion)
_LEGACY = frozenset({VCardVersion.V2_1, VCardVersion.V3_0})
_MODERN = frozenset({VCardVersion.V3_0, VCardVersion.V4_0})
_V4_ONLY = frozenset({VCardVersion.V4_0})


@dataclass(slots=True, kw_only=True)
class VCardProperty:
    """Base of all properties.

    Attributes:
        parameters: Parameter multimap (TYPE, PREF, ...)
        group: Group label (the ``item1.`` prefix of the text syntax)
    """

    SUPPORTED_VERSIONS: ClassVar[frozenset[VCardVersion]] = _ALL_VERSIONS

    parameters: VCardParameters = field(default_factory=VCardParameters)
    group: str | None = None

    @property
    def types(self) -> list[str]:
        """TYPE parameter values."""
        return self.parameters.types

    @property
    def pref(self) -> int | None:
        """PREF parameter value."""
        return self.parameters.pref

    @classmethod
    def is_supported_by(cls, version: VCardVersion) -> bool:
        """Check whether the given version defines this property kind."""
        return version in cls.SUPPORTED_VERSIONS


# ============================================================================
# TEXT PROPERTIES
# ============================================================================


@dataclass(slots=True)
class TextProperty(VCardProperty):
    """Property holding a single string."""

    value: str | None = None


class FormattedName(TextProperty):
    """FN: the display name."""

    __slots__ = ()


class Note(TextProperty):
    """NOTE"""

    __slots__ = ()


class Title(TextProperty):
    """TITLE: job title."""

    __slots__ = ()


class Role(TextProperty):
    """ROLE"""

    __slots__ = ()


class Email(TextProperty):
    """EMAIL"""

    __slots__ = ()


class Telephone(TextProperty):
    """TEL: text in 2.1/3.0, text or ``tel:`` URI in 4.0."""

    __slots__ = ()


class Url(TextProperty):
    """URL"""

    __slots__ = ()


class Uid(TextProperty):
    """UID"""

    __slots__ = ()


class ProductId(TextProperty):
    """PRODID: the product that created the record (X-PRODID in 2.1)."""

    __slots__ = ()
    SUPPORTED_VERSIONS = _MODERN


class Mailer(TextProperty):
    """MAILER"""

    __slots__ = ()
    SUPPORTED_VERSIONS = _LEGACY


class Source(TextProperty):
    """SOURCE: where the record can be fetched from."""

    __slots__ = ()
    SUPPORTED_VERSIONS = _MODERN


class Kind(TextProperty):
    """KIND: individual, group, org, location."""

    __slots__ = ()
    SUPPORTED_VERSIONS = _V4_ONLY


class SortString(TextProperty):
    """SORT-STRING"""

    __slots__ = ()
    SUPPORTED_VERSIONS = frozenset({VCardVersion.V3_0})


class Label(TextProperty):
    """LABEL: mailing label of an address.

    Readers attach labels to the address with the same TYPE values; a
    label left over stays in the record as an orphan.
    """

    __slots__ = ()
    SUPPORTED_VERSIONS = _LEGACY


# ============================================================================
# LIST PROPERTIES
# ============================================================================


@dataclass(slots=True)
class ListProperty(VCardProperty):
    """Property holding a comma-separated list."""

    values: list[str] = field(default_factory=list)


class Categories(ListProperty):
    """CATEGORIES"""

    __slots__ = ()
    SUPPORTED_VERSIONS = _MODERN


class Nickname(ListProperty):
    """NICKNAME"""

    __slots__ = ()
    SUPPORTED_VERSIONS = _MODERN


# ============================================================================
# STRUCTURED PROPERTIES
# ============================================================================


@dataclass(slots=True)
class StructuredName(VCardProperty):
    """N: family name; given name; additional names; prefixes; suffixes."""

    family: str | None = None
    given: str | None = None
    additional_names: list[str] = field(default_factory=list)
    prefixes: list[str] = field(default_factory=list)
    suffixes: list[str] = field(default_factory=list)


@dataclass(slots=True)
class Address(VCardProperty):
    """ADR: seven positional components, each multi-valued.

    Attributes:
        label: Mailing label; a LABEL parameter in 4.0, a separate LABEL
            property in 2.1/3.0
    """

    po_boxes: list[str] = field(default_factory=list)
    extended_addresses: list[str] = field(default_factory=list)
    street_addresses: list[str] = field(default_factory=list)
    localities: list[str] = field(default_factory=list)
    regions: list[str] = field(default_factory=list)
    postal_codes: list[str] = field(default_factory=list)
    countries: list[str] = field(default_factory=list)
    label: str | None = None

    @property
    def components(self) -> list[list[str]]:
        """The seven components in wire order."""
        return [
            self.po_boxes,
            self.extended_addresses,
            self.street_addresses,
            self.localities,
            self.regions,
            self.postal_codes,
            self.countries,
        ]

    @property
    def street_address(self) -> str | None:
        """First street address."""
        return self.street_addresses[0] if self.street_addresses else None

    @property
    def locality(self) -> str | None:
        """First locality (city)."""
        return self.localities[0] if self.localities else None

    @property
    def region(self) -> str | None:
        """First region (state, province)."""
        return self.regions[0] if self.regions else None

    @property
    def postal_code(self) -> str | None:
        """First postal code."""
        return self.postal_codes[0] if self.postal_codes else None

    @property
    def country(self) -> str | None:
        """First country."""
        return self.countries[0] if self.countries else None


@dataclass(slots=True)
class Organization(VCardProperty):
    """ORG: organization name followed by unit names."""

    values: list[str] = field(default_factory=list)


@dataclass(slots=True)
class Geo(VCardProperty):
    """GEO: latitude and longitude in decimal degrees."""

    latitude: float | None = None
    longitude: float | None = None


# ============================================================================
# BINARY PROPERTIES
# ============================================================================


@dataclass(slots=True)
class BinaryProperty(VCardProperty):
    """Property whose value is either a URL or an inline payload.

    Attributes:
        url: Where the payload can be fetched from
        data: Inline payload bytes
        content_type: Payload format
    """

    MEDIA_TYPES: ClassVar[MediaTypeTable] = IMAGE_TYPES

    url: str | None = None
    data: bytes | None = None
    content_type: MediaType | None = None


class Photo(BinaryProperty):
    """PHOTO"""

    __slots__ = ()


class Logo(BinaryProperty):
    """LOGO"""

    __slots__ = ()


class Sound(BinaryProperty):
    """SOUND"""

    __slots__ = ()
    MEDIA_TYPES = SOUND_TYPES


class Key(BinaryProperty):
    """KEY: public key or certificate."""

    __slots__ = ()
    MEDIA_TYPES = KEY_TYPES


# ============================================================================
# DATE PROPERTIES
# ============================================================================


@dataclass(slots=True)
class DateOrTimeProperty(VCardProperty):
    """Date property holding exactly one of three representations.

    Attributes:
        date: Complete date (``date``) or date-time (``datetime``)
        partial_date: Reduced-precision value (4.0 only)
        text: Free text such as "circa 1800" (4.0 only)
    """

    date: date | datetime | None = None
    partial_date: PartialDate | None = None
    text: str | None = None

    @property
    def has_time(self) -> bool:
        """True if the complete date carries a time of day."""
        return isinstance(self.date, datetime)


class Birthday(DateOrTimeProperty):
    """BDAY"""

    __slots__ = ()


class Anniversary(DateOrTimeProperty):
    """ANNIVERSARY"""

    __slots__ = ()
    SUPPORTED_VERSIONS = _V4_ONLY


# ============================================================================
# SPECIAL PROPERTIES
# ============================================================================


@dataclass(slots=True)
class Agent(VCardProperty):
    """AGENT: someone acting on behalf of the record's subject.

    Holds either a URL or a complete embedded record.
    """

    SUPPORTED_VERSIONS = _LEGACY

    url: str | None = None
    vcard: VCard | None = None


@dataclass(slots=True)
class Xml(VCardProperty):
    """XML: an opaque XML element preserved for round-tripping (4.0 only)."""

    SUPPORTED_VERSIONS = _V4_ONLY

    element: ET.Element | None = None


@dataclass(slots=True)
class RawProperty(VCardProperty):
    """A property without a dedicated class, usually an ``X-`` extension.

    The value is kept exactly as it appeared on the wire.
    """

    name: str = ""
    value: str | None = None
    data_type: DataType | None = None
