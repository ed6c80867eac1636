"""Tests for property scribes and the scribe registry.

Scribes are exercised directly with hand-built contexts; the
orchestrator tests cover them in place.
"""

from datetime import date

import pytest

from vcardengine import ScribeIndex, VCard, VCardVersion
from vcardengine.constants import XCARD_NAMESPACE
from vcardengine.diagnostics import DiagnosticCode
from vcardengine.enums import VCardDataType
from vcardengine.model import (
    Address,
    Agent,
    Birthday,
    Email,
    FormattedName,
    Geo,
    Organization,
    PartialDate,
    Photo,
    RawProperty,
    StructuredName,
    Telephone,
    TextProperty,
    VCardParameters,
    Xml,
)
from vcardengine.scribes import (
    AddressScribe,
    AgentScribe,
    BinaryPropertyScribe,
    DateOrTimePropertyScribe,
    Decoded,
    Embedded,
    EmailScribe,
    Failed,
    GeoScribe,
    OrganizationScribe,
    ParseContext,
    RawPropertyScribe,
    Skipped,
    StructuredNameScribe,
    TelephoneScribe,
    TextPropertyScribe,
    WriteContext,
    XmlScribe,
    jcard_value_to_string,
)
from vcardengine.syntax import JCardValue


class Skype(TextProperty):
    """X-SKYPE: an extension kind with its own class."""

    __slots__ = ()


def _decoded(outcome: object) -> object:
    assert isinstance(outcome, Decoded), outcome
    return outcome.property


def _parse(
    scribe: object,
    value: str,
    version: VCardVersion = VCardVersion.V3_0,
    parameters: VCardParameters | None = None,
    data_type: str | None = None,
) -> object:
    context = ParseContext(version)
    return scribe.parse_text(  # type: ignore[attr-defined]
        value, data_type, parameters if parameters is not None else VCardParameters(), context
    )


# ============================================================================
# REGISTRY
# ============================================================================


class TestScribeIndex:
    """Lookup and registration."""

    def test_lookup_by_name(self) -> None:
        """Names are case-insensitive."""
        index = ScribeIndex()
        scribe = index.get_property_scribe("adr")
        assert scribe is not None
        assert scribe.name == "ADR"
        assert "fn" in index
        assert "X-UNKNOWN" not in index

    def test_unknown_name_gets_raw_scribe(self) -> None:
        """Unknown names are read as raw properties."""
        scribe = ScribeIndex().scribe_for_name("x-skype")
        assert isinstance(scribe, RawPropertyScribe)
        assert scribe.name == "X-SKYPE"

    def test_lookup_for_instance(self) -> None:
        """Instances resolve by class; raw properties by their name."""
        index = ScribeIndex()
        fn = index.get_property_scribe_for(FormattedName("x"))
        assert fn is not None and fn.name == "FN"
        raw = index.get_property_scribe_for(RawProperty(name="X-A"))
        assert raw is not None and raw.name == "X-A"
        assert index.get_property_scribe_for(Skype("x")) is None

    def test_lookup_by_qname(self) -> None:
        """XML names resolve to kinds, raw scribes or the XML scribe."""
        index = ScribeIndex()
        assert index.get_property_scribe_by_qname((XCARD_NAMESPACE, "fn")).name == "FN"
        unknown = index.get_property_scribe_by_qname((XCARD_NAMESPACE, "x-mine"))
        assert isinstance(unknown, RawPropertyScribe)
        foreign = index.get_property_scribe_by_qname(("http://example.com", "note"))
        assert isinstance(foreign, XmlScribe)

    def test_register_extension(self) -> None:
        """Extension scribes are found under all three keys."""
        index = ScribeIndex()
        scribe = TextPropertyScribe(Skype, "X-SKYPE")
        index.register(scribe)
        assert index.get_property_scribe("x-skype") is scribe
        assert index.get_property_scribe_for(Skype("x")) is scribe
        assert index.get_property_scribe_by_qname((XCARD_NAMESPACE, "x-skype")) is scribe
        assert index.has_property_scribe(Skype)

        index.unregister(scribe)
        assert "X-SKYPE" not in index
        assert not index.has_property_scribe(Skype)

    def test_register_shadows_builtin(self) -> None:
        """An extension replaces a built-in without removing it."""
        index = ScribeIndex()
        shadow = TextPropertyScribe(FormattedName, "FN")
        index.register(shadow)
        assert index.get_property_scribe("FN") is shadow
        assert ScribeIndex().get_property_scribe("FN") is not shadow

    def test_copy_is_independent(self) -> None:
        """Registering on a copy leaves the original alone."""
        index = ScribeIndex()
        clone = index.copy()
        clone.register(TextPropertyScribe(Skype, "X-SKYPE"))
        assert "X-SKYPE" in clone
        assert "X-SKYPE" not in index
        assert len(clone) == len(index) + 1
        assert "X-SKYPE" in list(clone)


# ============================================================================
# TEXT AND LIST
# ============================================================================


class TestTextScribes:
    """Single-value kinds."""

    def test_text_escaping(self) -> None:
        """3.0 escapes the value, 2.1 does not."""
        scribe = TextPropertyScribe(FormattedName, "FN")
        prop = FormattedName("Doe, John")
        assert scribe.write_text(prop, WriteContext(VCardVersion.V3_0)) == "Doe\\, John"
        assert scribe.write_text(prop, WriteContext(VCardVersion.V2_1)) == "Doe, John"
        assert _decoded(_parse(scribe, "Doe\\, John")) == prop

    def test_telephone_uri(self) -> None:
        """A tel: URI is kept in 4.0 and reduced to the number before."""
        scribe = TelephoneScribe()
        prop = Telephone("tel:+1-555-555-5555")
        assert scribe.write_text(prop, WriteContext(VCardVersion.V3_0)) == "+1-555-555-5555"
        assert scribe.write_text(prop, WriteContext(VCardVersion.V4_0)) == "tel:+1-555-555-5555"
        assert scribe.data_type(prop, VCardVersion.V4_0) is VCardDataType.URI
        assert scribe.data_type(Telephone("555"), VCardVersion.V4_0) is VCardDataType.TEXT


class TestPreference:
    """PREF and TYPE=pref translation."""

    def test_lowest_pref_becomes_type_pref(self) -> None:
        """2.1 and 3.0 mark the most preferred property with TYPE=pref."""
        first = Email("a@example.com", parameters=VCardParameters([("PREF", "2")]))
        second = Email("b@example.com", parameters=VCardParameters([("PREF", "1")]))
        card = VCard(properties=[first, second])
        context = WriteContext(VCardVersion.V3_0, card)
        scribe = EmailScribe()

        assert scribe.prepare_parameters(first, context) == VCardParameters()
        assert scribe.prepare_parameters(second, context) == VCardParameters([("TYPE", "pref")])
        # The property itself is untouched.
        assert second.parameters.pref == 1

    def test_type_pref_becomes_pref(self) -> None:
        """4.0 turns TYPE=pref into PREF=1."""
        email = Email("a@example.com", parameters=VCardParameters([("TYPE", "work"), ("TYPE", "PREF")]))
        parameters = EmailScribe().prepare_parameters(email, WriteContext(VCardVersion.V4_0))
        assert parameters.types == ["work"]
        assert parameters.pref == 1


# ============================================================================
# STRUCTURED
# ============================================================================


class TestStructuredScribes:
    """N, ADR, ORG and GEO."""

    def test_name_write(self) -> None:
        """Components are comma lists; trailing empties are optional."""
        scribe = StructuredNameScribe()
        prop = StructuredName(family="Doe", given="John", prefixes=["Mr", "Dr"])
        assert scribe.write_text(prop, WriteContext(VCardVersion.V3_0)) == "Doe;John;;Mr,Dr"
        trailing = WriteContext(VCardVersion.V4_0, include_trailing_semicolons=True)
        assert scribe.write_text(prop, trailing) == "Doe;John;;Mr,Dr;"

    def test_name_parse(self) -> None:
        """Each component is read positionally."""
        prop = _decoded(_parse(StructuredNameScribe(), "Doe;John;;Mr,Dr;Jr."))
        assert prop == StructuredName(
            family="Doe", given="John", prefixes=["Mr", "Dr"], suffixes=["Jr."]
        )

    def test_name_legacy(self) -> None:
        """2.1 components hold comma-joined text."""
        scribe = StructuredNameScribe()
        prop = StructuredName(family="Doe", prefixes=["Mr", "Dr"])
        assert scribe.write_text(prop, WriteContext(VCardVersion.V2_1)) == "Doe;;;Mr,Dr"
        parsed = _decoded(_parse(scribe, "Doe;;;Mr,Dr", VCardVersion.V2_1))
        assert parsed == prop

    def test_address_parse_consumes_label(self) -> None:
        """The LABEL parameter becomes the address label."""
        parameters = VCardParameters([("TYPE", "work"), ("LABEL", "123 Main St\nAnytown")])
        prop = _decoded(
            _parse(
                AddressScribe(),
                ";;123 Main St;Anytown;CA;12345;USA",
                VCardVersion.V4_0,
                parameters,
            )
        )
        assert isinstance(prop, Address)
        assert prop.street_addresses == ["123 Main St"]
        assert prop.postal_code == "12345"
        assert prop.label == "123 Main St\nAnytown"
        assert "LABEL" not in parameters

    def test_address_label_parameter_by_version(self) -> None:
        """Only 4.0 writes the label as a parameter."""
        scribe = AddressScribe()
        prop = Address(localities=["Anytown"], label="Anytown")
        v4 = scribe.prepare_parameters(prop, WriteContext(VCardVersion.V4_0))
        v3 = scribe.prepare_parameters(prop, WriteContext(VCardVersion.V3_0))
        assert v4.label == "Anytown"
        assert v3.label is None

    def test_address_write(self) -> None:
        """Empty leading components are kept, trailing ones dropped."""
        prop = Address(street_addresses=["123 Main St"], localities=["Anytown"])
        written = AddressScribe().write_text(prop, WriteContext(VCardVersion.V3_0))
        assert written == ";;123 Main St;Anytown"

    def test_organization(self) -> None:
        """ORG components hold one value each."""
        scribe = OrganizationScribe()
        prop = _decoded(_parse(scribe, "Acme\\, Inc.;Sales"))
        assert prop == Organization(values=["Acme, Inc.", "Sales"])
        assert scribe.write_text(prop, WriteContext(VCardVersion.V3_0)) == "Acme\\, Inc.;Sales"
        assert scribe.write_text(prop, WriteContext(VCardVersion.V2_1)) == "Acme, Inc.;Sales"

    def test_geo_forms(self) -> None:
        """lat;lon before 4.0, a geo: URI in 4.0; both parse everywhere."""
        scribe = GeoScribe()
        prop = Geo(latitude=37.386013, longitude=-122.082932)
        assert scribe.write_text(prop, WriteContext(VCardVersion.V3_0)) == "37.386013;-122.082932"
        assert (
            scribe.write_text(prop, WriteContext(VCardVersion.V4_0))
            == "geo:37.386013,-122.082932"
        )
        assert _decoded(_parse(scribe, "geo:1.5,2;u=10", VCardVersion.V4_0)) == Geo(
            latitude=1.5, longitude=2.0
        )
        assert scribe.write_text(Geo(latitude=1.5, longitude=2.0), WriteContext(VCardVersion.V3_0)) == (
            "1.5;2.0"
        )

    @pytest.mark.parametrize("value", ["north", "geo:a,b", "1.0;x"])
    def test_geo_invalid(self, value: str) -> None:
        """Values without two numbers fail."""
        assert isinstance(_parse(GeoScribe(), value), Failed)


# ============================================================================
# BINARY AND DATES
# ============================================================================


class TestBinaryScribe:
    """URL-or-bytes kinds."""

    def test_inline_legacy(self) -> None:
        """Base64 payloads are decoded; TYPE names the format."""
        parameters = VCardParameters([("ENCODING", "b"), ("TYPE", "JPEG")])
        prop = _decoded(_parse(BinaryPropertyScribe(Photo, "PHOTO"), "aGVsbG8=", parameters=parameters))
        assert isinstance(prop, Photo)
        assert prop.data == b"hello"
        assert prop.content_type is not None
        assert prop.content_type.media_type == "image/jpeg"

    def test_inline_data_uri(self) -> None:
        """4.0 writes and reads data URIs."""
        scribe = BinaryPropertyScribe(Photo, "PHOTO")
        photo = Photo(data=b"hello", content_type=scribe.property_class.MEDIA_TYPES.from_extension("png"))
        written = scribe.write_text(photo, WriteContext(VCardVersion.V4_0))
        assert written == "data:image/png;base64,aGVsbG8="
        assert _decoded(_parse(scribe, str(written), VCardVersion.V4_0)) == photo

    def test_parameters_by_version(self) -> None:
        """ENCODING and TYPE before 4.0; nothing extra in 4.0."""
        scribe = BinaryPropertyScribe(Photo, "PHOTO")
        photo = Photo(data=b"x", content_type=scribe.property_class.MEDIA_TYPES.from_extension("jpg"))
        v21 = scribe.prepare_parameters(photo, WriteContext(VCardVersion.V2_1))
        assert v21 == VCardParameters([("ENCODING", "BASE64"), ("TYPE", "JPEG")])
        v30 = scribe.prepare_parameters(photo, WriteContext(VCardVersion.V3_0))
        assert v30 == VCardParameters([("ENCODING", "B"), ("TYPE", "JPEG")])
        assert not scribe.prepare_parameters(photo, WriteContext(VCardVersion.V4_0))

    def test_url(self) -> None:
        """URL values get a URL or URI data type; the extension names the format."""
        scribe = BinaryPropertyScribe(Photo, "PHOTO")
        prop = _decoded(
            _parse(scribe, "http://example.com/me.gif", data_type=VCardDataType.URI)
        )
        assert isinstance(prop, Photo)
        assert prop.url == "http://example.com/me.gif"
        assert prop.content_type is not None and prop.content_type.value == "GIF"
        assert scribe.data_type(prop, VCardVersion.V2_1) is VCardDataType.URL
        assert scribe.data_type(prop, VCardVersion.V3_0) is VCardDataType.URI

    def test_corrupt_payload(self) -> None:
        """Bad base64 fails instead of raising."""
        parameters = VCardParameters([("ENCODING", "b")])
        outcome = _parse(BinaryPropertyScribe(Photo, "PHOTO"), "abc", parameters=parameters)
        assert isinstance(outcome, Failed)

    def test_empty(self) -> None:
        """Neither URL nor data is skipped on both sides."""
        scribe = BinaryPropertyScribe(Photo, "PHOTO")
        assert isinstance(_parse(scribe, ""), Skipped)
        assert isinstance(scribe.write_text(Photo(), WriteContext(VCardVersion.V3_0)), Skipped)


class TestDateScribe:
    """BDAY and ANNIVERSARY."""

    def test_complete_date(self) -> None:
        """Complete dates parse in every version; 3.0 writes extended form."""
        scribe = DateOrTimePropertyScribe(Birthday, "BDAY")
        prop = _decoded(_parse(scribe, "19850412"))
        assert prop == Birthday(date=date(1985, 4, 12))
        assert scribe.write_text(prop, WriteContext(VCardVersion.V3_0)) == "1985-04-12"
        assert scribe.write_text(prop, WriteContext(VCardVersion.V4_0)) == "19850412"

    def test_partial_date_v4(self) -> None:
        """4.0 accepts reduced precision."""
        scribe = DateOrTimePropertyScribe(Birthday, "BDAY")
        prop = _decoded(_parse(scribe, "--0412", VCardVersion.V4_0))
        assert prop == Birthday(partial_date=PartialDate(month=4, day=12))
        assert scribe.data_type(prop, VCardVersion.V4_0) is VCardDataType.DATE

    def test_partial_date_legacy_fails(self) -> None:
        """3.0 has no reduced precision."""
        assert isinstance(_parse(DateOrTimePropertyScribe(Birthday, "BDAY"), "--0412"), Failed)

    def test_text_fallback_warns(self) -> None:
        """Unparseable 4.0 values are kept as text with a warning."""
        context = ParseContext(VCardVersion.V4_0, property_name="BDAY")
        outcome = DateOrTimePropertyScribe(Birthday, "BDAY").parse_text(
            "circa 1800", None, VCardParameters(), context
        )
        assert _decoded(outcome) == Birthday(text="circa 1800")
        assert [warning.code for warning in context.warnings] == [
            DiagnosticCode.VALUE_KEPT_AS_TEXT
        ]
        assert context.warnings[0].property_name == "BDAY"

    def test_text_value(self) -> None:
        """VALUE=text reads the value as text without a warning."""
        context = ParseContext(VCardVersion.V4_0)
        outcome = DateOrTimePropertyScribe(Birthday, "BDAY").parse_text(
            "circa 1800", VCardDataType.TEXT, VCardParameters(), context
        )
        assert _decoded(outcome) == Birthday(text="circa 1800")
        assert context.warnings == []

    def test_text_not_written_before_v4(self) -> None:
        """Older versions skip text and partial dates."""
        scribe = DateOrTimePropertyScribe(Birthday, "BDAY")
        outcome = scribe.write_text(Birthday(text="circa 1800"), WriteContext(VCardVersion.V3_0))
        assert isinstance(outcome, Skipped)


# ============================================================================
# SPECIAL
# ============================================================================


class TestSpecialScribes:
    """AGENT, XML and extension properties."""

    def test_agent_embedded(self) -> None:
        """Without VALUE the agent is a record handed over later."""
        outcome = _parse(AgentScribe(), "")
        assert isinstance(outcome, Embedded)
        record = VCard()
        outcome.inject(record)
        assert isinstance(outcome.property, Agent)
        assert outcome.property.vcard is record

    def test_agent_url(self) -> None:
        """VALUE=uri makes the value a URL."""
        prop = _decoded(_parse(AgentScribe(), "http://example.com/agent", data_type="uri"))
        assert prop == Agent(url="http://example.com/agent")

    def test_xml(self) -> None:
        """Well-formed XML is kept; anything else fails."""
        scribe = XmlScribe()
        prop = _decoded(_parse(scribe, '<a xmlns="http://example.com">b</a>', VCardVersion.V4_0))
        assert isinstance(prop, Xml)
        assert prop.element is not None
        assert isinstance(_parse(scribe, "<a>", VCardVersion.V4_0), Failed)

    def test_raw_passthrough(self) -> None:
        """Raw values are kept exactly as written."""
        scribe = RawPropertyScribe("X-A")
        prop = _decoded(_parse(scribe, "a\\,b;c", data_type="x-thing"))
        assert prop == RawProperty(name="X-A", value="a\\,b;c", data_type="x-thing")
        assert scribe.write_text(prop, WriteContext(VCardVersion.V3_0)) == "a\\,b;c"

    def test_jcard_projection(self) -> None:
        """jCard values project onto the text syntax."""
        assert jcard_value_to_string(JCardValue.multi(["a", "b,c"])) == "a,b\\,c"
        assert jcard_value_to_string(JCardValue.structured(["Doe", ["Mr", "Dr"], ""])) == (
            "Doe;Mr,Dr;"
        )
        assert jcard_value_to_string(JCardValue.single("a;b")) == "a\\;b"
        assert jcard_value_to_string(JCardValue.single("a;b"), escape_single=False) == "a;b"
