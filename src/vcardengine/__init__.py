"""vcardengine - vCard marshalling across text, JSON, XML and HTML.

Reads and writes contact records in the line-oriented vCard syntax
(versions 2.1, 3.0 and 4.0), jCard (JSON), xCard (XML), and reads the
hCard HTML microformat. Every property kind is handled by a scribe; the
scribe registry can be extended with custom kinds.

Per-property problems never abort a record: they are reported as
diagnostics on the reader or writer's ``warnings`` list. Only broken
stream framing, unwritable names and excessive nesting raise.

Public API:
    parse_text / write_text - Line-oriented syntax
    parse_json / write_json - jCard
    parse_xml / write_xml - xCard
    parse_html - hCard
    VCard - A contact record
    VCardVersion - 2.1, 3.0, 4.0
    ScribeIndex - Scribe registry (register extension scribes here)

Exceptions:
    VCardError - Base exception class
    VCardSyntaxError - Malformed JSON/XML framing
    VCardWriteError - Output the syntax cannot express
    DepthLimitExceededError - Embedded records nest too deeply

Submodules:
    vcardengine.model - Records, properties, parameters
    vcardengine.syntax - Value grammar, folding, raw lines
    vcardengine.scribes - Property codecs and their registry
    vcardengine.io - Readers and writers per syntax
    vcardengine.diagnostics - Diagnostic codes, templates and exceptions
"""

from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as _get_version

from .api import parse_html, parse_json, parse_text, parse_xml, write_json, write_text, write_xml
from .core import DepthLimitExceededError
from .diagnostics import VCardError, VCardSyntaxError, VCardWriteError
from .enums import VCardVersion
from .model import VCard
from .scribes import ScribeIndex

# Version information - Auto-populated from package metadata
# SINGLE SOURCE OF TRUTH: pyproject.toml [project] version
try:
    __version__ = _get_version("vcardengine")
except PackageNotFoundError:
    # Development mode: package not installed yet
    __version__ = "0.0.0+dev"

__all__ = [
    "DepthLimitExceededError",
    "ScribeIndex",
    "VCard",
    "VCardError",
    "VCardSyntaxError",
    "VCardVersion",
    "VCardWriteError",
    "__version__",
    "parse_html",
    "parse_json",
    "parse_text",
    "parse_xml",
    "write_json",
    "write_text",
    "write_xml",
]
