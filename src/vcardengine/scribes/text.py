"""Scribes of single-text and comma-list properties.

Python 3.13+.
"""

from __future__ import annotations

import re
from typing import TypeVar
from urllib.parse import unquote, urlsplit

from vcardengine.enums import DataType, VCardDataType, VCardVersion
from vcardengine.model import (
    Categories,
    Email,
    Label,
    ListProperty,
    Telephone,
    TextProperty,
    VCardParameters,
)
from vcardengine.syntax import (
    HCardElement,
    JCardValue,
    XCardElement,
    parse_list,
    unescape,
    write_list,
)

from .base import (
    Decoded,
    Failed,
    JsonWriteOutcome,
    ParseContext,
    ParseOutcome,
    VCardPropertyScribe,
    WriteContext,
    WriteOutcome,
    XmlWriteOutcome,
    escape_for,
    handle_pref_parameter,
)

__all__ = [
    "CategoriesScribe",
    "EmailScribe",
    "LabelScribe",
    "ListPropertyScribe",
    "TelephoneScribe",
    "TextPropertyScribe",
    "UriPropertyScribe",
]

T = TypeVar("T", bound=TextProperty)
L = TypeVar("L", bound=ListProperty)

_MAILTO = re.compile(r"^mailto:([^?]*)", re.IGNORECASE)
_TEL = re.compile(r"^tel:([^;?]*)", re.IGNORECASE)


def _missing(*names: str) -> Failed:
    return Failed(f"property element has none of the value elements {list(names)}")


# ============================================================================
# TEXT
# ============================================================================


class TextPropertyScribe(VCardPropertyScribe[T]):
    """Scribe of a property holding one string."""

    __slots__ = ("_data_type",)

    def __init__(
        self,
        property_class: type[T],
        name: str,
        data_type: VCardDataType = VCardDataType.TEXT,
    ) -> None:
        """Bind the scribe to a text kind with the given value type."""
        super().__init__(property_class, name)
        self._data_type = data_type

    def default_data_type(self, version: VCardVersion) -> DataType | None:
        return self._data_type

    def _new(self, value: str) -> T:
        return self.property_class(value)

    def write_text(self, prop: T, context: WriteContext) -> WriteOutcome:
        return escape_for(prop.value or "", context.version)

    def parse_text(
        self,
        value: str,
        data_type: DataType | None,
        parameters: VCardParameters,
        context: ParseContext,
    ) -> ParseOutcome:
        return Decoded(self._new(unescape(value)))

    def write_xml(self, prop: T, element: XCardElement) -> XmlWriteOutcome:
        data_type = self.data_type(prop, VCardVersion.V4_0) or self._data_type
        element.append(str(data_type), prop.value or "")
        return None

    def parse_xml(
        self,
        element: XCardElement,
        parameters: VCardParameters,
        context: ParseContext,
    ) -> ParseOutcome:
        value = element.first(str(self._data_type))
        if value is None:
            return _missing(str(self._data_type))
        return Decoded(self._new(value))

    def write_json(self, prop: T) -> JsonWriteOutcome:
        return JCardValue.single(prop.value or "")

    def parse_json(
        self,
        value: JCardValue,
        data_type: DataType | None,
        parameters: VCardParameters,
        context: ParseContext,
    ) -> ParseOutcome:
        return Decoded(self._new(value.as_single()))


class UriPropertyScribe(TextPropertyScribe[T]):
    """Scribe of a text property whose value is a URI (URL, SOURCE, UID).

    In hCard the link target wins over the element text.
    """

    __slots__ = ()

    def __init__(self, property_class: type[T], name: str) -> None:
        """Bind the scribe to a URI-valued kind."""
        super().__init__(property_class, name, VCardDataType.URI)

    def parse_html(self, element: HCardElement, context: ParseContext) -> ParseOutcome:
        href = element.abs_url("href")
        return Decoded(self._new(href or element.value()))


class EmailScribe(TextPropertyScribe[Email]):
    """EMAIL: preference is translated between versions."""

    __slots__ = ()

    def __init__(self) -> None:
        """Bind to EMAIL."""
        super().__init__(Email, "EMAIL")

    def _prepare_parameters(
        self,
        prop: Email,
        parameters: VCardParameters,
        context: WriteContext,
    ) -> None:
        handle_pref_parameter(prop, parameters, context)

    def parse_html(self, element: HCardElement, context: ParseContext) -> ParseOutcome:
        match = _MAILTO.match(element.attr("href"))
        address = unquote(match.group(1)) if match else element.value()
        prop = Email(address)
        for value in element.types():
            prop.parameters.add(VCardParameters.TYPE, value)
        return Decoded(prop)


class LabelScribe(TextPropertyScribe[Label]):
    """LABEL: in hCard the ``type`` sub-elements pair it with an address."""

    __slots__ = ()

    def __init__(self) -> None:
        """Bind to LABEL."""
        super().__init__(Label, "LABEL")

    def parse_html(self, element: HCardElement, context: ParseContext) -> ParseOutcome:
        prop = Label(element.value())
        for value in element.types():
            prop.parameters.add(VCardParameters.TYPE, value)
        return Decoded(prop)


class TelephoneScribe(TextPropertyScribe[Telephone]):
    """TEL: text, or a ``tel:`` URI in 4.0."""

    __slots__ = ()

    def __init__(self) -> None:
        """Bind to TEL."""
        super().__init__(Telephone, "TEL")

    def data_type(self, prop: Telephone, version: VCardVersion) -> DataType | None:
        if version is VCardVersion.V4_0 and (prop.value or "").lower().startswith("tel:"):
            return VCardDataType.URI
        return VCardDataType.TEXT

    def _prepare_parameters(
        self,
        prop: Telephone,
        parameters: VCardParameters,
        context: WriteContext,
    ) -> None:
        handle_pref_parameter(prop, parameters, context)

    def write_text(self, prop: Telephone, context: WriteContext) -> WriteOutcome:
        value = prop.value or ""
        match = _TEL.match(value)
        if match and context.version is not VCardVersion.V4_0:
            # Older versions have no URI form; keep the number only.
            value = match.group(1)
        return escape_for(value, context.version)

    def parse_xml(
        self,
        element: XCardElement,
        parameters: VCardParameters,
        context: ParseContext,
    ) -> ParseOutcome:
        value = element.first(VCardDataType.TEXT, VCardDataType.URI)
        if value is None:
            return _missing(VCardDataType.TEXT, VCardDataType.URI)
        return Decoded(Telephone(value))

    def parse_html(self, element: HCardElement, context: ParseContext) -> ParseOutcome:
        match = _TEL.match(element.attr("href"))
        prop = Telephone(unquote(match.group(1)) if match else element.value())
        for value in element.types():
            prop.parameters.add(VCardParameters.TYPE, value)
        return Decoded(prop)


# ============================================================================
# LIST
# ============================================================================


class ListPropertyScribe(VCardPropertyScribe[L]):
    """Scribe of a property holding a comma-separated list."""

    __slots__ = ()

    def write_text(self, prop: L, context: WriteContext) -> WriteOutcome:
        return write_list(prop.values)

    def parse_text(
        self,
        value: str,
        data_type: DataType | None,
        parameters: VCardParameters,
        context: ParseContext,
    ) -> ParseOutcome:
        return Decoded(self.property_class(values=parse_list(value)))

    def write_xml(self, prop: L, element: XCardElement) -> XmlWriteOutcome:
        element.append_all(VCardDataType.TEXT, prop.values)
        return None

    def parse_xml(
        self,
        element: XCardElement,
        parameters: VCardParameters,
        context: ParseContext,
    ) -> ParseOutcome:
        values = element.all(VCardDataType.TEXT)
        if not values:
            return _missing(VCardDataType.TEXT)
        return Decoded(self.property_class(values=[value for value in values if value]))

    def write_json(self, prop: L) -> JsonWriteOutcome:
        if not prop.values:
            return JCardValue.single("")
        return JCardValue.multi(prop.values)

    def parse_json(
        self,
        value: JCardValue,
        data_type: DataType | None,
        parameters: VCardParameters,
        context: ParseContext,
    ) -> ParseOutcome:
        values = [item for item in value.as_multi() if item]
        return Decoded(self.property_class(values=values))

    def parse_html(self, element: HCardElement, context: ParseContext) -> ParseOutcome:
        value = element.value()
        return Decoded(self.property_class(values=[value] if value else []))


class CategoriesScribe(ListPropertyScribe[Categories]):
    """CATEGORIES; in hCard a ``rel="tag"`` link names the category by its URL."""

    __slots__ = ()

    def __init__(self) -> None:
        """Bind to CATEGORIES."""
        super().__init__(Categories, "CATEGORIES")

    def parse_html(self, element: HCardElement, context: ParseContext) -> ParseOutcome:
        value = ""
        if element.tag_name == "a" and "tag" in element.attr("rel").lower().split():
            path = urlsplit(element.attr("href")).path.rstrip("/")
            value = unquote(path.rpartition("/")[2])
        if not value:
            value = element.value()
        return Decoded(Categories(values=[value] if value else []))
