"""XML vCard syntax (xCard, RFC 6351).

Document shape::

    <vcards xmlns="urn:ietf:params:xml:ns:vcard-4.0">
      <vcard>
        <fn><text>John Doe</text></fn>
        <group name="item1">
          <email>
            <parameters><type><text>work</text></type></parameters>
            <text>john@example.com</text>
          </email>
        </group>
      </vcard>
    </vcards>

Elements outside the xCard namespace are kept as XML properties.
xCard is always version 4.0 and cannot express embedded records.

Python 3.13+.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from types import TracebackType
from typing import TextIO
from xml.etree import ElementTree as ET

from vcardengine.constants import MAX_DEPTH, XCARD_NAMESPACE
from vcardengine.core import DepthGuard
from vcardengine.diagnostics import VCardSyntaxError
from vcardengine.diagnostics.templates import ErrorTemplate
from vcardengine.enums import DataType, VCardDataType, VCardVersion
from vcardengine.model import VCard, VCardParameters, VCardProperty, Xml
from vcardengine.scribes import (
    Decoded,
    Embedded,
    EmbeddedRecord,
    ScribeIndex,
    Skipped,
    WriteContext,
)
from vcardengine.scribes.base import XmlWriteOutcome
from vcardengine.syntax import XCardElement
from vcardengine.syntax.xcard import PARAMETERS, qualified, split_tag

from .base import StreamReader, StreamWriter

__all__ = ["PARAMETER_DATA_TYPES", "XCardReader", "XCardWriter"]

logger = logging.getLogger(__name__)

ET.register_namespace("", XCARD_NAMESPACE)

_SYNTAX = "xCard"
_VCARDS = qualified("vcards")
_VCARD = qualified("vcard")
_GROUP = qualified("group")
_PARAMETERS = qualified(PARAMETERS)

# Value element of each registered parameter; others are written as <unknown>.
PARAMETER_DATA_TYPES: dict[str, DataType] = {
    "altid": VCardDataType.TEXT,
    "calscale": VCardDataType.TEXT,
    "geo": VCardDataType.URI,
    "label": VCardDataType.TEXT,
    "language": VCardDataType.LANGUAGE_TAG,
    "mediatype": VCardDataType.TEXT,
    "pid": VCardDataType.TEXT,
    "pref": VCardDataType.INTEGER,
    "sort-as": VCardDataType.TEXT,
    "type": VCardDataType.TEXT,
    "tz": VCardDataType.URI,
}


def _framing_error(detail: str) -> VCardSyntaxError:
    return VCardSyntaxError(ErrorTemplate.malformed_document(_SYNTAX, detail))


def _read_parameters(element: ET.Element) -> VCardParameters:
    """Parameters of a property element (any value element is accepted)."""
    parameters = VCardParameters()
    container = element.find(_PARAMETERS)
    if container is None:
        return parameters
    for parameter in container:
        _, name = split_tag(parameter.tag)
        values = list(parameter)
        if not values:
            parameters.add(name.upper(), parameter.text or "")
        for value in values:
            parameters.add(name.upper(), value.text or "")
    return parameters


# ============================================================================
# READER
# ============================================================================


class XCardReader(StreamReader):
    """Reads records from an xCard document.

    Example:
        >>> reader = XCardReader(document_text)
        >>> for card in reader:
        ...     print(card.formatted_name)
    """

    __slots__ = ("_records", "_source")

    def __init__(
        self,
        source: str | bytes | TextIO | ET.Element,
        *,
        index: ScribeIndex | None = None,
        max_depth: int = MAX_DEPTH,
        guard: DepthGuard | None = None,
    ) -> None:
        """Initialize reader.

        Args:
            source: XML text, a text stream, or a parsed root element
            index: Scribe registry
            max_depth: Maximum embedded-record nesting
            guard: Depth guard shared with an enclosing reader
        """
        super().__init__(index=index, max_depth=max_depth, guard=guard)
        self._source = source
        self._records: Iterator[ET.Element] | None = None

    def _load(self) -> Iterator[ET.Element]:
        source = self._source
        if isinstance(source, ET.Element):
            root = source
        else:
            try:
                if isinstance(source, str | bytes):
                    root = ET.fromstring(source)
                else:
                    root = ET.parse(source).getroot()
            except ET.ParseError as exc:
                raise _framing_error(str(exc)) from exc

        if root.tag == _VCARD:
            return iter([root])
        if root.tag != _VCARDS:
            raise _framing_error(f"unexpected root element {root.tag}")
        return iter(root.findall(_VCARD))

    def _read_next(self) -> VCard | None:
        if self._records is None:
            self._records = self._load()
        element = next(self._records, None)
        if element is None:
            return None

        record = VCard(version=VCardVersion.V4_0)
        for child in element:
            if child.tag == _GROUP:
                group = child.get("name")
                for grouped in child:
                    self._read_property(record, grouped, group)
            else:
                self._read_property(record, child, None)
        return record

    def _read_property(self, record: VCard, element: ET.Element, group: str | None) -> None:
        namespace, local = split_tag(element.tag)
        scribe = self.index.get_property_scribe_by_qname((namespace or "", local))
        context = self._context(VCardVersion.V4_0, property_name=scribe.name)

        # Foreign elements are kept whole, parameters included.
        parameters = VCardParameters() if scribe.property_class is Xml else _read_parameters(element)
        outcome = scribe.parse_xml(XCardElement(element), parameters, context)
        match outcome:
            case Decoded(property=prop):
                prop.parameters = parameters
                prop.group = group
                record.add(prop)
            case Embedded():
                context.add_warning(ErrorTemplate.embedded_record_unsupported(_SYNTAX))
            case _:
                self._report(outcome, context)


# ============================================================================
# WRITER
# ============================================================================


class XCardWriter(StreamWriter):
    """Writes records as an xCard document.

    Every record becomes a ``<vcard>`` child of one ``<vcards>`` root.
    Properties sharing a group are written inside one ``<group>``
    element, placed where the group first occurs.

    Attributes:
        parameter_data_types: Value element of each parameter name
    """

    __slots__ = ("_root", "indent", "parameter_data_types", "sink")

    def __init__(
        self,
        sink: TextIO | None = None,
        *,
        version_strict: bool = True,
        add_prodid: bool = True,
        indent: str | None = None,
        index: ScribeIndex | None = None,
        max_depth: int = MAX_DEPTH,
    ) -> None:
        """Initialize writer.

        Args:
            sink: Text stream receiving the document on ``close``
            version_strict: Leave out kinds 4.0 does not define
            add_prodid: Replace any PRODID with this library's
            indent: Pretty-print indentation (default: none)
            index: Scribe registry
            max_depth: Maximum embedded-record nesting
        """
        super().__init__(
            index=index,
            version_strict=version_strict,
            add_prodid=add_prodid,
            max_depth=max_depth,
        )
        self.sink = sink
        self.indent = indent
        self.parameter_data_types: dict[str, DataType] = dict(PARAMETER_DATA_TYPES)
        self._root = ET.Element(_VCARDS)

    @property
    def target_version(self) -> VCardVersion:
        return VCardVersion.V4_0

    def register_parameter_data_type(self, name: str, data_type: DataType | None) -> None:
        """Set (or with None, clear) the value element of a parameter."""
        if data_type is None:
            self.parameter_data_types.pop(name.lower(), None)
        else:
            self.parameter_data_types[name.lower()] = data_type

    def _write(self, vcard: VCard, properties: list[VCardProperty]) -> None:
        context = WriteContext(VCardVersion.V4_0, vcard, include_trailing_semicolons=True)
        record = ET.SubElement(self._root, _VCARD)
        groups: dict[str, ET.Element] = {}

        for prop in properties:
            scribe = self._scribe(prop)
            parent = record
            if prop.group is not None:
                if prop.group not in groups:
                    groups[prop.group] = ET.SubElement(record, _GROUP, {"name": prop.group})
                parent = groups[prop.group]

            if isinstance(prop, Xml):
                outcome: XmlWriteOutcome = scribe.write_xml(prop, XCardElement(parent))
            else:
                namespace, local = scribe.qname
                element = ET.Element(qualified(local, namespace))
                self._write_parameters(element, scribe.prepare_parameters(prop, context))
                outcome = scribe.write_xml(prop, XCardElement(element))
                if outcome is None:
                    parent.append(element)

            if isinstance(outcome, Skipped):
                self._warn(ErrorTemplate.property_not_written(outcome.reason), prop)
            elif isinstance(outcome, EmbeddedRecord):
                self._warn(ErrorTemplate.embedded_record_rejected(_SYNTAX), prop)

        # A group whose only members were not written would be left empty.
        for name, element in groups.items():
            if len(element) == 0:
                record.remove(element)
                logger.debug("Dropped empty group %s", name)

    def _write_parameters(self, element: ET.Element, parameters: VCardParameters) -> None:
        parameters.remove_all(VCardParameters.VALUE)
        if not parameters:
            return
        container = ET.SubElement(element, _PARAMETERS)
        for name, values in parameters.grouped():
            lowered = name.lower()
            parameter = ET.SubElement(container, qualified(lowered))
            data_type = self.parameter_data_types.get(lowered)
            value_name = "unknown" if data_type is None else str(data_type)
            for value in values:
                ET.SubElement(parameter, qualified(value_name)).text = value

    def document(self) -> ET.Element:
        """Root ``<vcards>`` element of every record written so far."""
        return self._root

    def getvalue(self) -> str:
        """Serialize every record written so far."""
        if self.indent is not None:
            ET.indent(self._root, space=self.indent)
        return ET.tostring(self._root, encoding="unicode")

    def close(self) -> None:
        """Write the document, with an XML declaration, to the sink."""
        if self.sink is not None:
            self.sink.write('<?xml version="1.0" encoding="UTF-8"?>\n')
            self.sink.write(self.getvalue())

    def __enter__(self) -> XCardWriter:
        """Enter context manager."""
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        """Write the document unless the block raised."""
        if exc_type is None:
            self.close()
