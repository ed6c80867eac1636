"""One-call marshalling helpers.

Each helper builds the matching reader or writer with its defaults,
runs it over the whole input and returns the result. Use the classes in
``vcardengine.io`` directly to inspect warnings or stream large inputs.

Python 3.13+.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import TextIO
from xml.etree import ElementTree as ET

from .enums import VCardVersion
from .io import (
    HCardParser,
    JCardReader,
    JCardWriter,
    VCardReader,
    VCardWriter,
    XCardReader,
    XCardWriter,
)
from .model import VCard
from .scribes import ScribeIndex
from .syntax import FoldingConfig

__all__ = [
    "parse_html",
    "parse_json",
    "parse_text",
    "parse_xml",
    "write_json",
    "write_text",
    "write_xml",
]


def _records(vcards: VCard | Iterable[VCard]) -> list[VCard]:
    return [vcards] if isinstance(vcards, VCard) else list(vcards)


def parse_text(source: str | TextIO, *, index: ScribeIndex | None = None) -> list[VCard]:
    """Read every record of a line-oriented document (any version).

    Example:
        >>> cards = parse_text("BEGIN:VCARD\\r\\nVERSION:3.0\\r\\nFN:Jo\\r\\nEND:VCARD\\r\\n")
        >>> cards[0].formatted_name
        'Jo'
    """
    return VCardReader(source, index=index).read_all()


def write_text(
    vcards: VCard | Iterable[VCard],
    *,
    version: VCardVersion = VCardVersion.V3_0,
    version_strict: bool = True,
    add_prodid: bool = True,
    include_trailing_semicolons: bool | None = None,
    caret_encoding: bool = False,
    folding: FoldingConfig | None = None,
    index: ScribeIndex | None = None,
) -> str:
    """Write records in the line-oriented syntax of the given version."""
    writer = VCardWriter(
        version=version,
        version_strict=version_strict,
        add_prodid=add_prodid,
        include_trailing_semicolons=include_trailing_semicolons,
        caret_encoding=caret_encoding,
        folding=folding,
        index=index,
    )
    writer.write_all(_records(vcards))
    return writer.getvalue()


def parse_json(source: str | TextIO, *, index: ScribeIndex | None = None) -> list[VCard]:
    """Read every record of a jCard document."""
    return JCardReader(source, index=index).read_all()


def write_json(
    vcards: VCard | Iterable[VCard],
    *,
    version_strict: bool = True,
    add_prodid: bool = True,
    indent: int | None = None,
    index: ScribeIndex | None = None,
) -> str:
    """Write records as a jCard document."""
    writer = JCardWriter(
        version_strict=version_strict,
        add_prodid=add_prodid,
        indent=indent,
        index=index,
    )
    writer.write_all(_records(vcards))
    return writer.getvalue()


def parse_xml(
    source: str | bytes | TextIO | ET.Element,
    *,
    index: ScribeIndex | None = None,
) -> list[VCard]:
    """Read every record of an xCard document."""
    return XCardReader(source, index=index).read_all()


def write_xml(
    vcards: VCard | Iterable[VCard],
    *,
    version_strict: bool = True,
    add_prodid: bool = True,
    indent: str | None = None,
    index: ScribeIndex | None = None,
) -> str:
    """Write records as an xCard document."""
    writer = XCardWriter(
        version_strict=version_strict,
        add_prodid=add_prodid,
        indent=indent,
        index=index,
    )
    writer.write_all(_records(vcards))
    return writer.getvalue()


def parse_html(
    html: str,
    page_url: str | None = None,
    *,
    index: ScribeIndex | None = None,
) -> list[VCard]:
    """Read every hCard record of an HTML page."""
    return HCardParser(html, page_url, index=index).read_all()
