"""Scribe of date properties: BDAY and ANNIVERSARY.

A value is a complete date or date-time, a reduced-precision date (4.0
only) or free text (4.0 only, ``VALUE=text``). 2.1 and 3.0 values that
are not complete dates are unparseable; 4.0 values fall back to a
partial date, then to text with a warning.

Python 3.13+.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import TypeVar

from vcardengine.diagnostics import ErrorTemplate
from vcardengine.enums import DataType, VCardDataType, VCardVersion
from vcardengine.model import DateOrTimeProperty, PartialDate, VCardParameters, format_date, parse_date
from vcardengine.syntax import HCardElement, JCardValue, XCardElement, escape, unescape

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

__all__ = ["DateOrTimePropertyScribe"]

D = TypeVar("D", bound=DateOrTimeProperty)


class DateOrTimePropertyScribe(VCardPropertyScribe[D]):
    """Scribe of a date, partial-date or text property."""

    __slots__ = ()

    def default_data_type(self, version: VCardVersion) -> DataType | None:
        return VCardDataType.DATE_AND_OR_TIME if version is VCardVersion.V4_0 else None

    def data_type(self, prop: D, version: VCardVersion) -> DataType | None:
        if version is not VCardVersion.V4_0:
            return None
        if prop.text is not None:
            return VCardDataType.TEXT
        if prop.date is not None:
            return VCardDataType.DATE_TIME if prop.has_time else VCardDataType.DATE
        if prop.partial_date is not None:
            if prop.partial_date.has_time_component:
                return VCardDataType.DATE_TIME
            return VCardDataType.DATE
        return VCardDataType.DATE_AND_OR_TIME

    # ------------------------------------------------------------------
    # Shared value logic
    # ------------------------------------------------------------------

    def _new(
        self,
        *,
        value: date | datetime | None = None,
        partial: PartialDate | None = None,
        text: str | None = None,
    ) -> D:
        return self.property_class(date=value, partial_date=partial, text=text)

    def _parse(self, value: str, context: ParseContext) -> ParseOutcome:
        try:
            return Decoded(self._new(value=parse_date(value)))
        except ValueError:
            pass
        if context.version is not VCardVersion.V4_0:
            return Failed(f'"{value}" is not a date or date-time')
        try:
            return Decoded(self._new(partial=PartialDate.parse(value)))
        except ValueError:
            context.add_warning(ErrorTemplate.value_kept_as_text(value))
            return Decoded(self._new(text=value))

    # ------------------------------------------------------------------
    # Syntaxes
    # ------------------------------------------------------------------

    def write_text(self, prop: D, context: WriteContext) -> WriteOutcome:
        version = context.version
        if prop.date is not None:
            return format_date(prop.date, extended=version is VCardVersion.V3_0)
        if version is VCardVersion.V4_0:
            if prop.text is not None:
                return escape(prop.text)
            if prop.partial_date is not None:
                return prop.partial_date.to_iso(extended=False)
            return ""
        if prop.text is not None or prop.partial_date is not None:
            return Skipped(f"vCard {version} only supports complete dates")
        return ""

    def parse_text(
        self,
        value: str,
        data_type: DataType | None,
        parameters: VCardParameters,
        context: ParseContext,
    ) -> ParseOutcome:
        value = unescape(value)
        if context.version is VCardVersion.V4_0 and data_type == VCardDataType.TEXT:
            return Decoded(self._new(text=value))
        return self._parse(value, context)

    def write_xml(self, prop: D, element: XCardElement) -> XmlWriteOutcome:
        if prop.date is not None:
            data_type = VCardDataType.DATE_TIME if prop.has_time else VCardDataType.DATE
            element.append(data_type, format_date(prop.date, extended=False))
            return None
        partial = prop.partial_date
        if partial is not None:
            if partial.has_date_component and partial.has_time_component:
                data_type = VCardDataType.DATE_TIME
            elif partial.has_time_component:
                data_type = VCardDataType.TIME
            elif partial.has_date_component:
                data_type = VCardDataType.DATE
            else:
                data_type = VCardDataType.DATE_AND_OR_TIME
            element.append(data_type, partial.to_iso(extended=False))
            return None
        if prop.text is not None:
            element.append(VCardDataType.TEXT, prop.text)
            return None
        element.append(VCardDataType.DATE_AND_OR_TIME, "")
        return None

    def parse_xml(
        self,
        element: XCardElement,
        parameters: VCardParameters,
        context: ParseContext,
    ) -> ParseOutcome:
        value = element.first(
            VCardDataType.DATE,
            VCardDataType.DATE_TIME,
            VCardDataType.DATE_AND_OR_TIME,
            VCardDataType.TIME,
        )
        if value is not None:
            return self._parse(value, context)
        text = element.first(VCardDataType.TEXT)
        if text is not None:
            return Decoded(self._new(text=text))
        return Failed("property element has no date, date-time, date-and-or-time or text value")

    def write_json(self, prop: D) -> JsonWriteOutcome:
        if prop.date is not None:
            return JCardValue.single(format_date(prop.date, extended=True))
        if prop.partial_date is not None:
            return JCardValue.single(prop.partial_date.to_iso(extended=True))
        return JCardValue.single(prop.text or "")

    def parse_json(
        self,
        value: JCardValue,
        data_type: DataType | None,
        parameters: VCardParameters,
        context: ParseContext,
    ) -> ParseOutcome:
        single = value.as_single()
        if data_type == VCardDataType.TEXT:
            return Decoded(self._new(text=single))
        return self._parse(single, context)

    def parse_html(self, element: HCardElement, context: ParseContext) -> ParseOutcome:
        value = ""
        if element.tag_name == "time":
            value = element.attr("datetime")
        if not value:
            value = element.value()
        return self._parse(value, context)
