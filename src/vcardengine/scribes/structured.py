"""Scribes of structured properties: N, ADR, ORG and GEO.

vCard 2.1 has no multi-valued components and no comma escaping, so N
and ADR branch on the version: 2.1 writes each component as one
comma-joined value; 3.0 and 4.0 write comma lists.

Python 3.13+.
"""

from __future__ import annotations

import re
from collections.abc import Sequence

from vcardengine.enums import DataType, VCardDataType, VCardVersion
from vcardengine.model import Address, Geo, Organization, StructuredName, VCardParameters
from vcardengine.syntax import (
    HCardElement,
    JCardValue,
    SemiStructuredValueIterator,
    StructuredValueIterator,
    XCardElement,
    parse_semistructured,
    unescape,
    write_semistructured,
    write_structured,
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
    handle_pref_parameter,
)

__all__ = [
    "AddressScribe",
    "GeoScribe",
    "OrganizationScribe",
    "StructuredNameScribe",
]

_ADR_ELEMENTS = ("pobox", "ext", "street", "locality", "region", "code", "country")
_ADR_CLASSES = (
    "post-office-box",
    "extended-address",
    "street-address",
    "locality",
    "region",
    "postal-code",
    "country-name",
)


def _non_empty(values: Sequence[str]) -> list[str]:
    return [value for value in values if value]


def _optional(value: str | None) -> str | None:
    return value or None


def _legacy_component(values: Sequence[str]) -> str:
    return ",".join(values)


def _legacy_values(value: str | None) -> list[str]:
    return [] if value is None else [value]


# ============================================================================
# N
# ============================================================================


class StructuredNameScribe(VCardPropertyScribe[StructuredName]):
    """N: family; given; additional; prefixes; suffixes."""

    __slots__ = ()

    def __init__(self) -> None:
        """Bind to N."""
        super().__init__(StructuredName, "N")

    def write_text(self, prop: StructuredName, context: WriteContext) -> WriteOutcome:
        if context.version is VCardVersion.V2_1:
            return write_semistructured(
                [
                    prop.family,
                    prop.given,
                    _legacy_component(prop.additional_names),
                    _legacy_component(prop.prefixes),
                    _legacy_component(prop.suffixes),
                ],
                escape_commas=False,
                include_trailing=context.include_trailing_semicolons,
            )
        return write_structured(
            [prop.family, prop.given, prop.additional_names, prop.prefixes, prop.suffixes],
            include_trailing=context.include_trailing_semicolons,
        )

    def parse_text(
        self,
        value: str,
        data_type: DataType | None,
        parameters: VCardParameters,
        context: ParseContext,
    ) -> ParseOutcome:
        if context.version is VCardVersion.V2_1:
            legacy = SemiStructuredValueIterator(value)
            family = legacy.next_value()
            given = legacy.next_value()
            return Decoded(
                StructuredName(
                    family=family,
                    given=given,
                    additional_names=_split_legacy(legacy.next_value()),
                    prefixes=_split_legacy(legacy.next_value()),
                    suffixes=_split_legacy(legacy.next_value()),
                )
            )
        return Decoded(_name_from(StructuredValueIterator.parse(value)))

    def write_xml(self, prop: StructuredName, element: XCardElement) -> XmlWriteOutcome:
        element.append("surname", prop.family)
        element.append("given", prop.given)
        element.append_all("additional", prop.additional_names)
        element.append_all("prefix", prop.prefixes)
        element.append_all("suffix", prop.suffixes)
        return None

    def parse_xml(
        self,
        element: XCardElement,
        parameters: VCardParameters,
        context: ParseContext,
    ) -> ParseOutcome:
        return Decoded(
            StructuredName(
                family=_optional(element.first("surname")),
                given=_optional(element.first("given")),
                additional_names=_non_empty(element.all("additional")),
                prefixes=_non_empty(element.all("prefix")),
                suffixes=_non_empty(element.all("suffix")),
            )
        )

    def write_json(self, prop: StructuredName) -> JsonWriteOutcome:
        return JCardValue.structured(
            [prop.family, prop.given, prop.additional_names, prop.prefixes, prop.suffixes]
        )

    def parse_json(
        self,
        value: JCardValue,
        data_type: DataType | None,
        parameters: VCardParameters,
        context: ParseContext,
    ) -> ParseOutcome:
        return Decoded(_name_from(StructuredValueIterator(value.as_structured())))

    def parse_html(self, element: HCardElement, context: ParseContext) -> ParseOutcome:
        return Decoded(
            StructuredName(
                family=element.first_value("family-name"),
                given=element.first_value("given-name"),
                additional_names=element.all_values("additional-name"),
                prefixes=element.all_values("honorific-prefix"),
                suffixes=element.all_values("honorific-suffix"),
            )
        )


def _split_legacy(value: str | None) -> list[str]:
    if value is None:
        return []
    return [piece for piece in value.split(",") if piece]


def _name_from(components: StructuredValueIterator) -> StructuredName:
    return StructuredName(
        family=components.next_value(),
        given=components.next_value(),
        additional_names=components.next_component(),
        prefixes=components.next_component(),
        suffixes=components.next_component(),
    )


# ============================================================================
# ADR
# ============================================================================


class AddressScribe(VCardPropertyScribe[Address]):
    """ADR: seven positional components, each multi-valued.

    The mailing label travels as a LABEL parameter in 4.0 only; the text
    writer turns it into a LABEL property for older versions.
    """

    __slots__ = ()

    def __init__(self) -> None:
        """Bind to ADR."""
        super().__init__(Address, "ADR")

    def _prepare_parameters(
        self,
        prop: Address,
        parameters: VCardParameters,
        context: WriteContext,
    ) -> None:
        handle_pref_parameter(prop, parameters, context)
        if context.version is VCardVersion.V4_0:
            if prop.label is not None:
                parameters.replace(VCardParameters.LABEL, prop.label)
        else:
            parameters.remove_all(VCardParameters.LABEL)

    def write_text(self, prop: Address, context: WriteContext) -> WriteOutcome:
        if context.version is VCardVersion.V2_1:
            return write_semistructured(
                [_legacy_component(component) for component in prop.components],
                escape_commas=False,
                include_trailing=context.include_trailing_semicolons,
            )
        return write_structured(
            prop.components,
            include_trailing=context.include_trailing_semicolons,
        )

    def parse_text(
        self,
        value: str,
        data_type: DataType | None,
        parameters: VCardParameters,
        context: ParseContext,
    ) -> ParseOutcome:
        if context.version is VCardVersion.V2_1:
            legacy = SemiStructuredValueIterator(value)
            components = [_legacy_values(legacy.next_value()) for _ in _ADR_ELEMENTS]
        else:
            iterator = StructuredValueIterator.parse(value)
            components = [iterator.next_component() for _ in _ADR_ELEMENTS]
        return Decoded(_address_from(components, parameters))

    def write_xml(self, prop: Address, element: XCardElement) -> XmlWriteOutcome:
        for name, component in zip(_ADR_ELEMENTS, prop.components, strict=True):
            element.append_all(name, component)
        return None

    def parse_xml(
        self,
        element: XCardElement,
        parameters: VCardParameters,
        context: ParseContext,
    ) -> ParseOutcome:
        components = [_non_empty(element.all(name)) for name in _ADR_ELEMENTS]
        return Decoded(_address_from(components, parameters))

    def write_json(self, prop: Address) -> JsonWriteOutcome:
        return JCardValue.structured(prop.components)

    def parse_json(
        self,
        value: JCardValue,
        data_type: DataType | None,
        parameters: VCardParameters,
        context: ParseContext,
    ) -> ParseOutcome:
        iterator = StructuredValueIterator(value.as_structured())
        components = [iterator.next_component() for _ in _ADR_ELEMENTS]
        return Decoded(_address_from(components, parameters))

    def parse_html(self, element: HCardElement, context: ParseContext) -> ParseOutcome:
        components = [element.all_values(name) for name in _ADR_CLASSES]
        prop = _address_from(components, VCardParameters())
        for value in element.types():
            prop.parameters.add(VCardParameters.TYPE, value)
        return Decoded(prop)


def _address_from(components: list[list[str]], parameters: VCardParameters) -> Address:
    labels = parameters.remove_all(VCardParameters.LABEL)
    po_boxes, extended, streets, localities, regions, codes, countries = components
    return Address(
        po_boxes=po_boxes,
        extended_addresses=extended,
        street_addresses=streets,
        localities=localities,
        regions=regions,
        postal_codes=codes,
        countries=countries,
        label=labels[0] if labels else None,
    )


# ============================================================================
# ORG
# ============================================================================


class OrganizationScribe(VCardPropertyScribe[Organization]):
    """ORG: organization name, then units, one value per component."""

    __slots__ = ()

    def __init__(self) -> None:
        """Bind to ORG."""
        super().__init__(Organization, "ORG")

    def write_text(self, prop: Organization, context: WriteContext) -> WriteOutcome:
        return write_semistructured(
            prop.values,
            escape_commas=context.version is not VCardVersion.V2_1,
            include_trailing=context.include_trailing_semicolons,
        )

    def parse_text(
        self,
        value: str,
        data_type: DataType | None,
        parameters: VCardParameters,
        context: ParseContext,
    ) -> ParseOutcome:
        return Decoded(Organization(values=parse_semistructured(value)))

    def write_xml(self, prop: Organization, element: XCardElement) -> XmlWriteOutcome:
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
            return Failed("property element has no text value elements")
        return Decoded(Organization(values=values))

    def write_json(self, prop: Organization) -> JsonWriteOutcome:
        if not prop.values:
            return JCardValue.single("")
        if len(prop.values) == 1:
            return JCardValue.single(prop.values[0])
        return JCardValue.structured(prop.values)

    def parse_json(
        self,
        value: JCardValue,
        data_type: DataType | None,
        parameters: VCardParameters,
        context: ParseContext,
    ) -> ParseOutcome:
        if value.is_structured:
            values = [",".join(component) for component in value.as_structured()]
        else:
            single = value.as_single()
            values = [single] if single else []
        return Decoded(Organization(values=values))

    def parse_html(self, element: HCardElement, context: ParseContext) -> ParseOutcome:
        values: list[str] = []
        name = element.first_value("organization-name")
        if name is not None:
            values.append(name)
        unit = element.first_value("organization-unit")
        if unit is not None:
            values.append(unit)
        if not values:
            value = element.value()
            if value:
                values.append(value)
        return Decoded(Organization(values=values))


# ============================================================================
# GEO
# ============================================================================

_GEO_URI = re.compile(r"geo:([^,;]+),([^,;]+)(?:,[^;]*)?(?:;.*)?", re.IGNORECASE)


def _format_coordinate(value: float) -> str:
    text = f"{value:.6f}".rstrip("0")
    return text + "0" if text.endswith(".") else text


def _geo_uri(prop: Geo) -> str:
    return f"geo:{_format_coordinate(prop.latitude or 0.0)},{_format_coordinate(prop.longitude or 0.0)}"


def _parse_geo(value: str) -> Geo | Failed:
    """Read ``geo:lat,lon`` or the older ``lat;lon`` form."""
    text = value.strip()
    match = _GEO_URI.fullmatch(text)
    if match is not None:
        latitude, longitude = match.group(1), match.group(2)
    else:
        latitude, separator, longitude = text.partition(";")
        if not separator:
            return Failed(f'"{value}" is neither a geo URI nor "latitude;longitude"')
    try:
        return Geo(latitude=float(latitude), longitude=float(longitude))
    except ValueError:
        return Failed(f'"{value}" has a non-numeric coordinate')


class GeoScribe(VCardPropertyScribe[Geo]):
    """GEO: ``lat;lon`` in 2.1/3.0, a ``geo:`` URI in 4.0."""

    __slots__ = ()

    def __init__(self) -> None:
        """Bind to GEO."""
        super().__init__(Geo, "GEO")

    def default_data_type(self, version: VCardVersion) -> DataType | None:
        return VCardDataType.URI if version is VCardVersion.V4_0 else None

    def write_text(self, prop: Geo, context: WriteContext) -> WriteOutcome:
        if context.version is VCardVersion.V4_0:
            return _geo_uri(prop)
        latitude = _format_coordinate(prop.latitude or 0.0)
        longitude = _format_coordinate(prop.longitude or 0.0)
        return f"{latitude};{longitude}"

    def parse_text(
        self,
        value: str,
        data_type: DataType | None,
        parameters: VCardParameters,
        context: ParseContext,
    ) -> ParseOutcome:
        parsed = _parse_geo(unescape(value))
        return parsed if isinstance(parsed, Failed) else Decoded(parsed)

    def write_xml(self, prop: Geo, element: XCardElement) -> XmlWriteOutcome:
        element.append(VCardDataType.URI, _geo_uri(prop))
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
        parsed = _parse_geo(value)
        return parsed if isinstance(parsed, Failed) else Decoded(parsed)

    def write_json(self, prop: Geo) -> JsonWriteOutcome:
        return JCardValue.single(_geo_uri(prop))

    def parse_json(
        self,
        value: JCardValue,
        data_type: DataType | None,
        parameters: VCardParameters,
        context: ParseContext,
    ) -> ParseOutcome:
        parsed = _parse_geo(value.as_single())
        return parsed if isinstance(parsed, Failed) else Decoded(parsed)

    def parse_html(self, element: HCardElement, context: ParseContext) -> ParseOutcome:
        latitude = element.first_value("latitude")
        longitude = element.first_value("longitude")
        if latitude is None or longitude is None:
            return Failed("geo element needs latitude and longitude sub-elements")
        try:
            return Decoded(Geo(latitude=float(latitude), longitude=float(longitude)))
        except ValueError:
            return Failed(f'non-numeric coordinate "{latitude}", "{longitude}"')
