"""Property codecs ("scribes") and their registry.

Python 3.13+.
"""

from .base import (
    Decoded,
    Embedded,
    EmbeddedRecord,
    Failed,
    ParseContext,
    ParseOutcome,
    Skipped,
    VCardPropertyScribe,
    WriteContext,
    WriteOutcome,
    escape_for,
    handle_pref_parameter,
    jcard_value_to_string,
)
from .binary import BinaryPropertyScribe, DataUri
from .dates import DateOrTimePropertyScribe
from .index import ScribeIndex, standard_scribes
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

__all__ = [
    "AddressScribe",
    "AgentScribe",
    "BinaryPropertyScribe",
    "CategoriesScribe",
    "DataUri",
    "DateOrTimePropertyScribe",
    "Decoded",
    "EmailScribe",
    "Embedded",
    "EmbeddedRecord",
    "Failed",
    "GeoScribe",
    "LabelScribe",
    "ListPropertyScribe",
    "OrganizationScribe",
    "ParseContext",
    "ParseOutcome",
    "RawPropertyScribe",
    "ScribeIndex",
    "Skipped",
    "StructuredNameScribe",
    "TelephoneScribe",
    "TextPropertyScribe",
    "UriPropertyScribe",
    "VCardPropertyScribe",
    "WriteContext",
    "WriteOutcome",
    "XmlScribe",
    "escape_for",
    "handle_pref_parameter",
    "jcard_value_to_string",
    "standard_scribes",
]
