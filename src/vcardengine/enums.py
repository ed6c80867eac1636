"""Enumerations for vcardengine type-safe constants.

Uses StrEnum (Python 3.11+) for automatic string conversion.
StrEnum members are strings themselves, so a parameter value read off the
wire compares equal to the matching member without any lookup.

Python 3.13+.
"""

from enum import StrEnum

from .constants import XCARD_NAMESPACE

__all__ = [
    "DataType",
    "Encoding",
    "VCardDataType",
    "VCardVersion",
    "data_type_of",
    "encoding_of",
]


class VCardVersion(StrEnum):
    """Version of the line-oriented vCard syntax.

    StrEnum provides automatic string conversion: str(VCardVersion.V3_0) == "3.0"
    """

    V2_1 = "2.1"
    """vCard 2.1 (versit consortium, 1996)"""

    V3_0 = "3.0"
    """vCard 3.0 (RFC 2426)"""

    V4_0 = "4.0"
    """vCard 4.0 (RFC 6350)"""

    @property
    def xml_namespace(self) -> str | None:
        """xCard namespace of this version (only 4.0 has an XML syntax)."""
        return XCARD_NAMESPACE if self is VCardVersion.V4_0 else None

    @property
    def is_legacy(self) -> bool:
        """True for the two versions that predate RFC 6350."""
        return self is not VCardVersion.V4_0

    @classmethod
    def parse(cls, value: str) -> "VCardVersion | None":
        """Look up a version by its VERSION property value.

        Args:
            value: Raw value, surrounding whitespace tolerated

        Returns:
            Matching version, or None if unrecognized
        """
        try:
            return cls(value.strip())
        except ValueError:
            return None


class VCardDataType(StrEnum):
    """Registered value data types (the VALUE parameter).

    Values not listed here are carried as plain lower-cased strings;
    see ``data_type_of``.
    """

    TEXT = "text"
    URI = "uri"
    URL = "url"
    CONTENT_ID = "content-id"
    BINARY = "binary"
    DATE = "date"
    TIME = "time"
    DATE_TIME = "date-time"
    DATE_AND_OR_TIME = "date-and-or-time"
    TIMESTAMP = "timestamp"
    BOOLEAN = "boolean"
    INTEGER = "integer"
    FLOAT = "float"
    UTC_OFFSET = "utc-offset"
    LANGUAGE_TAG = "language-tag"


class Encoding(StrEnum):
    """Value encodings (the ENCODING parameter, 2.1 and 3.0 only)."""

    QUOTED_PRINTABLE = "QUOTED-PRINTABLE"
    BASE64 = "BASE64"
    B = "B"
    EIGHT_BIT = "8BIT"
    SEVEN_BIT = "7BIT"


# A data type is either a registered member or an unregistered lower-cased name.
type DataType = VCardDataType | str


def data_type_of(name: str) -> DataType:
    """Resolve a VALUE parameter value to a data type.

    Matching is case-insensitive. Unregistered names are returned
    lower-cased so they still compare consistently.
    """
    lowered = name.strip().lower()
    try:
        return VCardDataType(lowered)
    except ValueError:
        return lowered


def encoding_of(name: str) -> Encoding | None:
    """Resolve an ENCODING parameter value, or None if unrecognized."""
    try:
        return Encoding(name.strip().upper())
    except ValueError:
        return None
