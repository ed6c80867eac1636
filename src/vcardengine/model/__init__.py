"""In-memory vCard model: records, properties, parameters.

Python 3.13+.
"""

from .dates import PartialDate, format_date, parse_date
from .media import IMAGE_TYPES, KEY_TYPES, SOUND_TYPES, MediaType, MediaTypeTable, file_extension
from .parameters import VCardParameters
from .properties import (
    Address,
    Agent,
    Anniversary,
    BinaryProperty,
    Birthday,
    Categories,
    DateOrTimeProperty,
    Email,
    FormattedName,
    Geo,
    Key,
    Kind,
    Label,
    ListProperty,
    Logo,
    Mailer,
    Nickname,
    Note,
    Organization,
    Photo,
    ProductId,
    RawProperty,
    Role,
    SortString,
    Sound,
    Source,
    StructuredName,
    Telephone,
    TextProperty,
    Title,
    Uid,
    Url,
    VCardProperty,
    Xml,
)
from .vcard import VCard

__all__ = [
    "IMAGE_TYPES",
    "KEY_TYPES",
    "SOUND_TYPES",
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
    "MediaType",
    "MediaTypeTable",
    "Nickname",
    "Note",
    "Organization",
    "PartialDate",
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
    "VCard",
    "VCardParameters",
    "VCardProperty",
    "Xml",
    "file_extension",
    "format_date",
    "parse_date",
]
