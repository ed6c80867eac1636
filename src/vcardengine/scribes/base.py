"""Scribe base class, marshalling contexts and parse/write outcomes.

A scribe is the codec of one property kind across the four syntaxes.
Only the text-syntax pair (``write_text``/``parse_text``) is required;
the XML, JSON and HTML operations default to projections of the text
value and are overridden where a kind has richer structure.

Parsing never raises for bad data. Every parse returns one of:

- ``Decoded``: the property
- ``Skipped``: the property must not appear in the record
- ``Embedded``: the value is a nested record; the orchestrator reads it
  and hands it to ``inject``
- ``Failed``: the value has no meaning for this kind

Writing returns the value text, ``Skipped``, or ``EmbeddedRecord`` when
the value is a nested record the orchestrator must serialize itself.

Python 3.13+.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Generic, TypeVar

from vcardengine.constants import XCARD_NAMESPACE
from vcardengine.diagnostics import Diagnostic, DiagnosticCode
from vcardengine.enums import DataType, VCardDataType, VCardVersion, data_type_of
from vcardengine.model import VCard, VCardParameters, VCardProperty
from vcardengine.syntax import (
    HCardElement,
    JCardValue,
    XCardElement,
    escape,
    write_list,
    write_structured,
)

__all__ = [
    "Decoded",
    "Embedded",
    "EmbeddedRecord",
    "Failed",
    "ParseContext",
    "ParseOutcome",
    "Skipped",
    "VCardPropertyScribe",
    "WriteContext",
    "WriteOutcome",
    "escape_for",
    "handle_pref_parameter",
    "jcard_value_to_string",
]

logger = logging.getLogger(__name__)

P = TypeVar("P", bound=VCardProperty)


# ============================================================================
# OUTCOMES
# ============================================================================


@dataclass(frozen=True, slots=True)
class Decoded:
    """Parsed property."""

    property: VCardProperty


@dataclass(frozen=True, slots=True)
class Skipped:
    """Property deliberately left out (on read or write)."""

    reason: str


@dataclass(frozen=True, slots=True)
class Embedded:
    """Property whose value is a nested record still to be read.

    Attributes:
        property: Property to add once the nested record is read
        inject: Receives the nested record (None if none followed)
    """

    property: VCardProperty
    inject: Callable[[VCard | None], None]


@dataclass(frozen=True, slots=True)
class Failed:
    """Value could not be given any meaning."""

    reason: str
    code: DiagnosticCode = DiagnosticCode.PROPERTY_UNPARSEABLE


@dataclass(frozen=True, slots=True)
class EmbeddedRecord:
    """Write outcome: the value is this nested record."""

    record: VCard


type ParseOutcome = Decoded | Skipped | Embedded | Failed
type WriteOutcome = str | Skipped | EmbeddedRecord
type JsonWriteOutcome = JCardValue | Skipped | EmbeddedRecord
type XmlWriteOutcome = None | Skipped | EmbeddedRecord


# ============================================================================
# CONTEXTS
# ============================================================================


@dataclass(slots=True)
class WriteContext:
    """What a scribe knows while writing.

    Attributes:
        version: Target version
        vcard: Record being written (None when writing a lone property)
        include_trailing_semicolons: Keep trailing empty structured components
    """

    version: VCardVersion
    vcard: VCard | None = None
    include_trailing_semicolons: bool = False


@dataclass(slots=True)
class ParseContext:
    """What a scribe knows while parsing, plus the warning sink.

    Attributes:
        version: Version of the record being read
        warnings: Collected diagnostics, shared with the orchestrator
        line_number: Source line of the property (text syntax only)
        property_name: Name of the property being parsed
    """

    version: VCardVersion
    warnings: list[Diagnostic] = field(default_factory=list)
    line_number: int | None = None
    property_name: str | None = None

    def add_warning(self, diagnostic: Diagnostic) -> None:
        """Record a diagnostic at the current location."""
        located = diagnostic.located(line=self.line_number, property_name=self.property_name)
        logger.warning("%s", located)
        self.warnings.append(located)


# ============================================================================
# HELPERS
# ============================================================================


def escape_for(value: str, version: VCardVersion) -> str:
    """Escape a text value for the given version.

    2.1 has no escaping of single values.
    """
    if version is VCardVersion.V2_1:
        return value
    return escape(value)


def handle_pref_parameter(
    prop: VCardProperty,
    parameters: VCardParameters,
    context: WriteContext,
) -> None:
    """Translate preference between the PREF and TYPE=pref spellings.

    2.1 and 3.0 have no PREF parameter: the property of its kind with the
    lowest PREF in the record gets ``TYPE=pref`` instead. 4.0 turns a
    ``TYPE=pref`` marker into ``PREF=1``.

    Args:
        prop: Property being written
        parameters: Copy of its parameters, modified in place
        context: Write context
    """
    if context.version is VCardVersion.V4_0:
        for value in prop.parameters.types:
            if value.lower() == "pref":
                parameters.remove(VCardParameters.TYPE, value)
                parameters.replace(VCardParameters.PREF, "1")
                break
        return

    parameters.remove_all(VCardParameters.PREF)
    if context.vcard is None:
        return

    most_preferred: VCardProperty | None = None
    lowest: int | None = None
    for other in context.vcard.get_properties(type(prop)):
        pref = other.parameters.pref
        if pref is None:
            continue
        if lowest is None or pref < lowest:
            most_preferred = other
            lowest = pref

    if most_preferred is prop:
        parameters.add(VCardParameters.TYPE, "pref")


def jcard_value_to_string(value: JCardValue, *, escape_single: bool = True) -> str:
    """Project a jCard value onto the text syntax.

    Several values become a comma list, an array becomes a structured
    value with trailing components kept, anything else a single value.
    """
    if len(value.values) > 1:
        multi = value.as_multi()
        if multi:
            return write_list(multi)

    if value.is_structured:
        structured = value.as_structured()
        if structured:
            return write_structured(structured, include_trailing=True)

    single = value.as_single()
    return escape(single) if escape_single else single


# ============================================================================
# SCRIBE
# ============================================================================


class VCardPropertyScribe(ABC, Generic[P]):
    """Codec of one property kind.

    Attributes:
        property_class: Property kind handled
        name: Upper-cased property name of the text and JSON syntaxes
        qname: (namespace, local name) of the XML syntax
    """

    __slots__ = ("name", "property_class", "qname")

    def __init__(
        self,
        property_class: type[P],
        name: str,
        qname: tuple[str, str] | None = None,
    ) -> None:
        """Bind the scribe to a kind and its names."""
        self.property_class = property_class
        self.name = name.upper()
        self.qname = qname if qname is not None else (XCARD_NAMESPACE, name.lower())

    def __repr__(self) -> str:
        """Return scribe representation for debugging."""
        return f"{type(self).__name__}(name={self.name!r})"

    # ------------------------------------------------------------------
    # Data types
    # ------------------------------------------------------------------

    def default_data_type(self, version: VCardVersion) -> DataType | None:
        """Data type assumed when a property has no VALUE parameter."""
        return VCardDataType.TEXT

    def data_type(self, prop: P, version: VCardVersion) -> DataType | None:
        """Data type of a given property's value."""
        return self.default_data_type(version)

    # ------------------------------------------------------------------
    # Parameters
    # ------------------------------------------------------------------

    def prepare_parameters(self, prop: P, context: WriteContext) -> VCardParameters:
        """Return the parameters to write, leaving the property untouched."""
        parameters = prop.parameters.copy()
        self._prepare_parameters(prop, parameters, context)
        return parameters

    def _prepare_parameters(
        self,
        prop: P,
        parameters: VCardParameters,
        context: WriteContext,
    ) -> None:
        """Adjust a parameter copy before writing (default: nothing)."""

    # ------------------------------------------------------------------
    # Text syntax
    # ------------------------------------------------------------------

    @abstractmethod
    def write_text(self, prop: P, context: WriteContext) -> WriteOutcome:
        """Write the value in the text syntax, escaped."""

    @abstractmethod
    def parse_text(
        self,
        value: str,
        data_type: DataType | None,
        parameters: VCardParameters,
        context: ParseContext,
    ) -> ParseOutcome:
        """Parse an escaped text-syntax value.

        Scribes may consume parameters (remove them from ``parameters``);
        the orchestrator attaches what is left to the property.
        """

    # ------------------------------------------------------------------
    # XML syntax
    # ------------------------------------------------------------------

    def write_xml(self, prop: P, element: XCardElement) -> XmlWriteOutcome:
        """Append value children to a property element."""
        outcome = self.write_text(prop, WriteContext(VCardVersion.V4_0))
        if not isinstance(outcome, str):
            return outcome
        data_type = self.data_type(prop, VCardVersion.V4_0)
        element.append(str(data_type) if data_type is not None else "unknown", outcome)
        return None

    def parse_xml(
        self,
        element: XCardElement,
        parameters: VCardParameters,
        context: ParseContext,
    ) -> ParseOutcome:
        """Parse a property element (default: its first value child)."""
        first = element.first_value()
        if first is None:
            return self.parse_text(escape(element.text()), None, parameters, context)
        local, text = first
        data_type = None if local == "unknown" else data_type_of(local)
        return self.parse_text(escape(text), data_type, parameters, context)

    # ------------------------------------------------------------------
    # JSON syntax
    # ------------------------------------------------------------------

    def write_json(self, prop: P) -> JsonWriteOutcome:
        """Write the value as a jCard value."""
        outcome = self.write_text(prop, WriteContext(VCardVersion.V4_0))
        if not isinstance(outcome, str):
            return outcome
        return JCardValue.single(outcome)

    def parse_json(
        self,
        value: JCardValue,
        data_type: DataType | None,
        parameters: VCardParameters,
        context: ParseContext,
    ) -> ParseOutcome:
        """Parse a jCard value."""
        return self.parse_text(jcard_value_to_string(value), data_type, parameters, context)

    # ------------------------------------------------------------------
    # HTML microformat
    # ------------------------------------------------------------------

    def parse_html(self, element: HCardElement, context: ParseContext) -> ParseOutcome:
        """Parse an hCard element.

        The scribe builds the property's parameters itself; the element's
        ``type`` sub-elements are the only parameter source in hCard.
        """
        parameters = VCardParameters()
        outcome = self.parse_text(escape(element.value()), None, parameters, context)
        if isinstance(outcome, Decoded | Embedded):
            outcome.property.parameters = parameters
        return outcome
