"""Stream orchestrators: one reader (and writer) per syntax.

- text: ``VCardReader`` / ``VCardWriter`` (2.1, 3.0, 4.0)
- JSON: ``JCardReader`` / ``JCardWriter``
- XML: ``XCardReader`` / ``XCardWriter``
- HTML: ``HCardParser`` (read only)

Python 3.13+.
"""

from .base import StreamReader, StreamWriter, assign_labels, product_id
from .hcard import HCardParser
from .jcard import JCardReader, JCardWriter
from .text import VCardReader, VCardWriter
from .xcard import PARAMETER_DATA_TYPES, XCardReader, XCardWriter

__all__ = [
    "PARAMETER_DATA_TYPES",
    "HCardParser",
    "JCardReader",
    "JCardWriter",
    "StreamReader",
    "StreamWriter",
    "VCardReader",
    "VCardWriter",
    "XCardReader",
    "XCardWriter",
    "assign_labels",
    "product_id",
]
