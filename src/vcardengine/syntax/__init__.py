"""Syntax-level building blocks.

Text grammar (value structure, line folding, raw content lines) and the
per-syntax property views handed to scribes (jCard values, xCard
elements, hCard elements).

Python 3.13+.
"""

from .folding import (
    FoldedLineReader,
    FoldedLineWriter,
    FoldingConfig,
    decode_quoted_printable,
    encode_quoted_printable,
)
from .hcard import HCardElement
from .jcard import JCardValue
from .raw import VCardRawLine, VCardRawReader, VCardRawWriter, parse_raw_line
from .values import (
    SemiStructuredValueIterator,
    StructuredValueBuilder,
    StructuredValueIterator,
    escape,
    parse_list,
    parse_semistructured,
    parse_structured,
    unescape,
    write_list,
    write_semistructured,
    write_structured,
)
from .xcard import XCardElement

__all__ = [
    "FoldedLineReader",
    "FoldedLineWriter",
    "FoldingConfig",
    "HCardElement",
    "JCardValue",
    "SemiStructuredValueIterator",
    "StructuredValueBuilder",
    "StructuredValueIterator",
    "VCardRawLine",
    "VCardRawReader",
    "VCardRawWriter",
    "XCardElement",
    "decode_quoted_printable",
    "encode_quoted_printable",
    "escape",
    "parse_list",
    "parse_raw_line",
    "parse_semistructured",
    "parse_structured",
    "unescape",
    "write_list",
    "write_semistructured",
    "write_structured",
]
