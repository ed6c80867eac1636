"""Scribe of binary properties: PHOTO, LOGO, SOUND and KEY.

A binary property holds either a URL or inline bytes. The wire form
depends on the version:

- 2.1: ``ENCODING=BASE64;TYPE=JPEG:<base64>`` or ``VALUE=URL:<url>``
- 3.0: ``ENCODING=B;TYPE=JPEG:<base64>`` or ``VALUE=URI:<url>``
- 4.0: ``data:image/jpeg;base64,<base64>`` or a URL, with MEDIATYPE

The content type is taken from the TYPE (2.1/3.0) or MEDIATYPE (4.0)
parameter, a data URI, or the URL's file extension, in that order.

Python 3.13+.
"""

from __future__ import annotations

import base64
import binascii
import logging
import re
from typing import TypeVar
from urllib.parse import unquote_to_bytes

from vcardengine.enums import DataType, Encoding, VCardDataType, VCardVersion
from vcardengine.model import BinaryProperty, MediaType, VCardParameters, file_extension
from vcardengine.syntax import HCardElement, JCardValue, XCardElement, unescape

from .base import (
    Decoded,
    Failed,
    JsonWriteOutcome,
    ParseContext,
    ParseOutcome,
    Skipped,
    VCardPropertyScribe,
    WriteContext,
    WriteOutcome,
    XmlWriteOutcome,
)

__all__ = ["BinaryPropertyScribe", "DataUri"]

logger = logging.getLogger(__name__)

B = TypeVar("B", bound=BinaryProperty)

_DATA_URI = re.compile(r"data:([^,;]*)((?:;[^,;=]+=[^,;]*)*)(;base64)?,(.*)", re.IGNORECASE | re.DOTALL)
_FOLDING_WHITESPACE = re.compile(r"[ \t]")
_DEFAULT_MEDIA_TYPE = "application/octet-stream"
_EMPTY = Skipped("property has neither a URL nor inline data")


class DataUri:
    """Parse and write ``data:`` URIs (RFC 2397)."""

    __slots__ = ()

    @staticmethod
    def parse(value: str) -> tuple[str, bytes] | None:
        """Return (content type, payload), or None if not a data URI.

        Raises:
            binascii.Error: If a base64 payload is corrupt
        """
        match = _DATA_URI.fullmatch(value.strip())
        if match is None:
            return None
        content_type, _, is_base64, payload = match.groups()
        if is_base64:
            return content_type, base64.b64decode(_FOLDING_WHITESPACE.sub("", payload))
        return content_type, unquote_to_bytes(payload)

    @staticmethod
    def write(content_type: str, data: bytes) -> str:
        """Write a base64 data URI."""
        return f"data:{content_type};base64,{base64.b64encode(data).decode('ascii')}"


class BinaryPropertyScribe(VCardPropertyScribe[B]):
    """Scribe of a URL-or-bytes property.

    The content-type table comes from the property class
    (``MEDIA_TYPES``).
    """

    __slots__ = ()

    def default_data_type(self, version: VCardVersion) -> DataType | None:
        return VCardDataType.URI if version is VCardVersion.V4_0 else None

    def data_type(self, prop: B, version: VCardVersion) -> DataType | None:
        if prop.url is not None:
            return VCardDataType.URL if version is VCardVersion.V2_1 else VCardDataType.URI
        if prop.data is not None:
            return VCardDataType.URI if version is VCardVersion.V4_0 else None
        return self.default_data_type(version)

    def _prepare_parameters(
        self,
        prop: B,
        parameters: VCardParameters,
        context: WriteContext,
    ) -> None:
        content_type = prop.content_type or MediaType(value=None)
        version = context.version

        if prop.url is not None:
            parameters.set_encoding(None)
            if version is VCardVersion.V4_0:
                parameters.replace(VCardParameters.MEDIATYPE, content_type.media_type)
            else:
                parameters.set_type(content_type.value)
                parameters.replace(VCardParameters.MEDIATYPE, None)
            return

        if prop.data is not None:
            parameters.replace(VCardParameters.MEDIATYPE, None)
            match version:
                case VCardVersion.V2_1:
                    parameters.set_encoding(Encoding.BASE64)
                    parameters.set_type(content_type.value)
                case VCardVersion.V3_0:
                    parameters.set_encoding(Encoding.B)
                    parameters.set_type(content_type.value)
                case VCardVersion.V4_0:
                    # TYPE may hold "home" or "work" here; leave it.
                    parameters.set_encoding(None)

    # ------------------------------------------------------------------
    # Shared value logic
    # ------------------------------------------------------------------

    def _new_url(self, url: str, content_type: MediaType | None) -> B:
        return self.property_class(url=url, content_type=content_type)

    def _new_data(self, data: bytes, content_type: MediaType | None) -> B:
        return self.property_class(data=data, content_type=content_type)

    def _content_type(
        self,
        value: str,
        parameters: VCardParameters,
        version: VCardVersion,
    ) -> MediaType | None:
        table = self.property_class.MEDIA_TYPES
        if version is VCardVersion.V4_0:
            media_type = parameters.media_type
            if media_type is not None:
                return table.from_media_type(media_type)
        else:
            types = parameters.types
            if types:
                return table.from_type_parameter(types[0])
        extension = file_extension(value)
        return None if extension is None else table.from_extension(extension)

    def _write(self, prop: B, version: VCardVersion) -> str | Skipped:
        if prop.url is not None:
            return prop.url
        if prop.data is None:
            return _EMPTY
        if version is VCardVersion.V4_0:
            content_type = prop.content_type
            media_type = (
                content_type.media_type
                if content_type is not None and content_type.media_type is not None
                else _DEFAULT_MEDIA_TYPE
            )
            return DataUri.write(media_type, prop.data)
        return base64.b64encode(prop.data).decode("ascii")

    def _parse(
        self,
        value: str,
        data_type: DataType | None,
        parameters: VCardParameters,
        version: VCardVersion,
    ) -> ParseOutcome:
        if not value:
            return _EMPTY
        content_type = self._content_type(value, parameters, version)
        table = self.property_class.MEDIA_TYPES

        if version is VCardVersion.V4_0:
            try:
                data_uri = DataUri.parse(value)
            except binascii.Error as exc:
                return Failed(f"corrupt base64 payload in data URI: {exc}")
            if data_uri is not None:
                media_type, data = data_uri
                return Decoded(self._new_data(data, table.from_media_type(media_type)))
            return Decoded(self._new_url(value, content_type))

        if data_type in (VCardDataType.URL, VCardDataType.URI):
            return Decoded(self._new_url(value, content_type))

        encoding = parameters.encoding
        if encoding not in (Encoding.BASE64, Encoding.B) and value.lower().startswith("http"):
            return Decoded(self._new_url(value, content_type))
        try:
            data = base64.b64decode(_FOLDING_WHITESPACE.sub("", value))
        except binascii.Error as exc:
            return Failed(f"corrupt base64 payload: {exc}")
        return Decoded(self._new_data(data, content_type))

    # ------------------------------------------------------------------
    # Syntaxes
    # ------------------------------------------------------------------

    def write_text(self, prop: B, context: WriteContext) -> WriteOutcome:
        return self._write(prop, context.version)

    def parse_text(
        self,
        value: str,
        data_type: DataType | None,
        parameters: VCardParameters,
        context: ParseContext,
    ) -> ParseOutcome:
        return self._parse(unescape(value), data_type, parameters, context.version)

    def write_xml(self, prop: B, element: XCardElement) -> XmlWriteOutcome:
        written = self._write(prop, VCardVersion.V4_0)
        if isinstance(written, Skipped):
            return written
        element.append(VCardDataType.URI, written)
        return None

    def parse_xml(
        self,
        element: XCardElement,
        parameters: VCardParameters,
        context: ParseContext,
    ) -> ParseOutcome:
        value = element.first(VCardDataType.URI)
        if value is None:
            return Failed("property element has no uri value element")
        return self._parse(value, VCardDataType.URI, parameters, VCardVersion.V4_0)

    def write_json(self, prop: B) -> JsonWriteOutcome:
        written = self._write(prop, VCardVersion.V4_0)
        if isinstance(written, Skipped):
            return written
        return JCardValue.single(written)

    def parse_json(
        self,
        value: JCardValue,
        data_type: DataType | None,
        parameters: VCardParameters,
        context: ParseContext,
    ) -> ParseOutcome:
        return self._parse(value.as_single(), data_type, parameters, VCardVersion.V4_0)

    def parse_html(self, element: HCardElement, context: ParseContext) -> ParseOutcome:
        match element.tag_name:
            case "img":
                source = element.abs_url("src")
            case "object":
                source = element.abs_url("data")
            case other:
                return Failed(f"<{other}> elements cannot hold a {self.name} value")
        if not source:
            return _EMPTY

        table = self.property_class.MEDIA_TYPES
        try:
            data_uri = DataUri.parse(source)
        except binascii.Error as exc:
            return Failed(f"corrupt base64 payload in data URI: {exc}")
        if data_uri is not None:
            media_type, data = data_uri
            return Decoded(self._new_data(data, table.from_media_type(media_type)))

        declared = element.attr("type")
        if declared:
            content_type: MediaType | None = table.from_media_type(declared)
        else:
            extension = file_extension(source)
            content_type = None if extension is None else table.from_extension(extension)
        logger.debug("%s linked from <%s>: %s", self.name, element.tag_name, source)
        return Decoded(self._new_url(source, content_type))
