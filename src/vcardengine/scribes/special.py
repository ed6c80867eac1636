"""Scribes with unusual values: AGENT, XML and extension properties.

Python 3.13+.
"""

from __future__ import annotations

import copy
from collections.abc import Callable
from xml.etree import ElementTree as ET

from vcardengine.enums import DataType, VCardDataType, VCardVersion, data_type_of
from vcardengine.model import Agent, RawProperty, VCard, VCardParameters, Xml
from vcardengine.syntax import HCardElement, JCardValue, XCardElement, escape, unescape

from .base import (
    Decoded,
    Embedded,
    EmbeddedRecord,
    Failed,
    JsonWriteOutcome,
    ParseContext,
    ParseOutcome,
    Skipped,
    VCardPropertyScribe,
    WriteContext,
    WriteOutcome,
    XmlWriteOutcome,
    jcard_value_to_string,
)

__all__ = ["AgentScribe", "RawPropertyScribe", "XmlScribe"]


# ============================================================================
# AGENT
# ============================================================================


def _injector(prop: Agent) -> Callable[[VCard | None], None]:
    def inject(record: VCard | None) -> None:
        prop.vcard = record

    return inject


class AgentScribe(VCardPropertyScribe[Agent]):
    """AGENT: a URL, or an embedded record.

    Without a VALUE parameter the value is a record: 2.1 writes it as a
    nested BEGIN/END block after the property, 3.0 as an escaped inline
    string. Reading and writing the record itself is the orchestrator's
    job; this scribe only signals it.
    """

    __slots__ = ()

    def __init__(self) -> None:
        """Bind to AGENT."""
        super().__init__(Agent, "AGENT")

    def default_data_type(self, version: VCardVersion) -> DataType | None:
        return None

    def data_type(self, prop: Agent, version: VCardVersion) -> DataType | None:
        if prop.url is None:
            return None
        return VCardDataType.URL if version is VCardVersion.V2_1 else VCardDataType.URI

    def write_text(self, prop: Agent, context: WriteContext) -> WriteOutcome:
        if prop.url is not None:
            return prop.url
        if prop.vcard is not None:
            return EmbeddedRecord(prop.vcard)
        return Skipped("property has neither a URL nor an embedded record")

    def parse_text(
        self,
        value: str,
        data_type: DataType | None,
        parameters: VCardParameters,
        context: ParseContext,
    ) -> ParseOutcome:
        prop = Agent()
        if data_type is None:
            return Embedded(prop, _injector(prop))
        prop.url = unescape(value)
        return Decoded(prop)

    def parse_html(self, element: HCardElement, context: ParseContext) -> ParseOutcome:
        prop = Agent()
        if "vcard" in element.classes():
            return Embedded(prop, _injector(prop))
        prop.url = element.abs_url("href") or element.value()
        return Decoded(prop)


# ============================================================================
# XML
# ============================================================================


class XmlScribe(VCardPropertyScribe[Xml]):
    """XML: an element kept verbatim.

    In xCard the element itself is the property; elsewhere it travels as
    serialized XML text.
    """

    __slots__ = ()

    def __init__(self) -> None:
        """Bind to XML."""
        super().__init__(Xml, "XML")

    def write_text(self, prop: Xml, context: WriteContext) -> WriteOutcome:
        if prop.element is None:
            return Skipped("property holds no XML element")
        return escape(ET.tostring(prop.element, encoding="unicode"))

    def parse_text(
        self,
        value: str,
        data_type: DataType | None,
        parameters: VCardParameters,
        context: ParseContext,
    ) -> ParseOutcome:
        try:
            element = ET.fromstring(unescape(value))
        except ET.ParseError as exc:
            return Failed(f"value is not well-formed XML: {exc}")
        return Decoded(Xml(element=element))

    def write_xml(self, prop: Xml, element: XCardElement) -> XmlWriteOutcome:
        if prop.element is None:
            return Skipped("property holds no XML element")
        element.element.append(copy.deepcopy(prop.element))
        return None

    def parse_xml(
        self,
        element: XCardElement,
        parameters: VCardParameters,
        context: ParseContext,
    ) -> ParseOutcome:
        return Decoded(Xml(element=copy.deepcopy(element.element)))

    def write_json(self, prop: Xml) -> JsonWriteOutcome:
        if prop.element is None:
            return Skipped("property holds no XML element")
        return JCardValue.single(ET.tostring(prop.element, encoding="unicode"))


# ============================================================================
# EXTENSION PROPERTIES
# ============================================================================


class RawPropertyScribe(VCardPropertyScribe[RawProperty]):
    """Scribe of a property without a dedicated class.

    Created on demand for each unknown name; values pass through
    unchanged.
    """

    __slots__ = ()

    def __init__(self, name: str) -> None:
        """Bind to an extension property name."""
        super().__init__(RawProperty, name)

    def default_data_type(self, version: VCardVersion) -> DataType | None:
        return None

    def data_type(self, prop: RawProperty, version: VCardVersion) -> DataType | None:
        return prop.data_type

    def write_text(self, prop: RawProperty, context: WriteContext) -> WriteOutcome:
        return prop.value or ""

    def parse_text(
        self,
        value: str,
        data_type: DataType | None,
        parameters: VCardParameters,
        context: ParseContext,
    ) -> ParseOutcome:
        return Decoded(RawProperty(name=self.name, value=value, data_type=data_type))

    def write_xml(self, prop: RawProperty, element: XCardElement) -> XmlWriteOutcome:
        data_type = prop.data_type
        element.append(str(data_type) if data_type is not None else "unknown", prop.value or "")
        return None

    def parse_xml(
        self,
        element: XCardElement,
        parameters: VCardParameters,
        context: ParseContext,
    ) -> ParseOutcome:
        first = element.first_value()
        if first is None:
            return Decoded(RawProperty(name=self.name, value=element.text()))
        local, text = first
        data_type = None if local == "unknown" else data_type_of(local)
        return Decoded(RawProperty(name=self.name, value=text, data_type=data_type))

    def write_json(self, prop: RawProperty) -> JsonWriteOutcome:
        return JCardValue.single(prop.value or "")

    def parse_json(
        self,
        value: JCardValue,
        data_type: DataType | None,
        parameters: VCardParameters,
        context: ParseContext,
    ) -> ParseOutcome:
        text = jcard_value_to_string(value, escape_single=False)
        return Decoded(RawProperty(name=self.name, value=text, data_type=data_type))

    def parse_html(self, element: HCardElement, context: ParseContext) -> ParseOutcome:
        return Decoded(RawProperty(name=self.name, value=element.value()))
