"""Tests for the jCard reader and writer."""

import io
import json
from datetime import date
from typing import Any

import pytest
from hypothesis import given

from tests.strategies import records
from vcardengine import VCard, VCardSyntaxError, VCardVersion, parse_json, write_json
from vcardengine.diagnostics import DiagnosticCode
from vcardengine.io import JCardReader, JCardWriter
from vcardengine.model import (
    Address,
    Agent,
    Birthday,
    Categories,
    Email,
    FormattedName,
    PartialDate,
    Photo,
    RawProperty,
    StructuredName,
    VCardParameters,
)

_VERSION = ["version", {}, "text", "4.0"]


def _record(*properties: list[Any]) -> list[Any]:
    return ["vcard", [_VERSION, *properties]]


def _read_one(document: list[Any]) -> tuple[VCard, JCardReader]:
    reader = JCardReader(json.dumps(document))
    card = reader.read_next()
    assert card is not None
    return card, reader


def _card(*properties: object) -> VCard:
    card = VCard(version=VCardVersion.V4_0)
    for prop in properties:
        card.add(prop)  # type: ignore[arg-type]
    return card


def _written(card: VCard, **options: object) -> Any:
    return json.loads(write_json(card, add_prodid=False, **options))  # type: ignore[arg-type]


class TestRead:
    """Reading records."""

    def test_structured_name(self) -> None:
        """One array holds the components; inner arrays hold several values."""
        card, reader = _read_one(
            _record(
                ["fn", {}, "text", "John Doe"],
                ["n", {}, "text", ["Doe", "John", "", ["Mr", "Dr"], ""]],
            )
        )
        assert card.version is VCardVersion.V4_0
        assert card.formatted_name == "John Doe"
        assert card.get_property(StructuredName) == StructuredName(
            family="Doe", given="John", prefixes=["Mr", "Dr"]
        )
        assert reader.warnings == []

    def test_group_and_parameters(self) -> None:
        """The group member is the group; array parameters hold several values."""
        card, _ = _read_one(
            _record(["email", {"group": "item1", "type": ["home", "work"]}, "text", "a@example.com"])
        )
        email = card.get_property(Email)
        assert email is not None
        assert email.group == "item1"
        assert email.types == ["home", "work"]
        assert "GROUP" not in email.parameters

    def test_multiple_values(self) -> None:
        """Several trailing values form a list."""
        card, _ = _read_one(_record(["categories", {}, "text", "a", "b,c"]))
        assert card.get_property(Categories) == Categories(values=["a", "b,c"])

    def test_address(self) -> None:
        """ADR components read positionally."""
        card, _ = _read_one(
            _record(["adr", {"label": "1 Main St"}, "text", ["", "", "1 Main St", "Town", "", "", ""]])
        )
        address = card.get_property(Address)
        assert address is not None
        assert address.street_address == "1 Main St"
        assert address.label == "1 Main St"

    def test_partial_date(self) -> None:
        """Reduced-precision dates are accepted in extended form."""
        card, _ = _read_one(_record(["bday", {}, "date-and-or-time", "--04-12"]))
        assert card.get_property(Birthday) == Birthday(partial_date=PartialDate(month=4, day=12))

    def test_unknown_property(self) -> None:
        """Unknown names become raw properties; "unknown" is no data type."""
        card, _ = _read_one(
            _record(["x-skype", {}, "unknown", "jdoe"], ["x-id", {}, "integer", 42])
        )
        skype, identifier = card.get_properties(RawProperty)
        assert skype == RawProperty(name="X-SKYPE", value="jdoe")
        assert identifier.value == "42"
        assert identifier.data_type == "integer"

    def test_embedded_record_unsupported(self) -> None:
        """jCard cannot carry an embedded record."""
        card, reader = _read_one(_record(["agent", {}, "unknown", ""]))
        assert card.get_property(Agent) is None
        assert [warning.code for warning in reader.warnings] == [
            DiagnosticCode.EMBEDDED_RECORD_UNSUPPORTED
        ]

    def test_unparseable_property(self) -> None:
        """A bad value is dropped with a warning naming the property."""
        card, reader = _read_one(_record(["geo", {}, "uri", "north"]))
        assert len(card) == 0
        (warning,) = reader.warnings
        assert warning.code is DiagnosticCode.PROPERTY_UNPARSEABLE
        assert warning.property_name == "GEO"

    def test_version_missing(self) -> None:
        """A record without VERSION is read with a warning."""
        reader = JCardReader('["vcard", [["fn", {}, "text", "Jo"]]]')
        card = reader.read_next()
        assert card is not None and card.formatted_name == "Jo"
        assert [warning.code for warning in reader.warnings] == [DiagnosticCode.VERSION_MISSING]

    def test_version_mismatch(self) -> None:
        """jCard is always 4.0; other versions are reported."""
        reader = JCardReader('["vcard", [["version", {}, "text", "3.0"]]]')
        card = reader.read_next()
        assert card is not None and card.version is VCardVersion.V4_0
        assert [warning.code for warning in reader.warnings] == [DiagnosticCode.VERSION_MISMATCH]

    @pytest.mark.parametrize(
        "document",
        [
            ["vcardstream", _record(["fn", {}, "text", "A"]), _record(["fn", {}, "text", "B"])],
            ["vcardstream", [_record(["fn", {}, "text", "A"]), _record(["fn", {}, "text", "B"])]],
            [_record(["fn", {}, "text", "A"]), _record(["fn", {}, "text", "B"])],
        ],
        ids=["stream", "stream-array", "plain-array"],
    )
    def test_several_records(self, document: list[Any]) -> None:
        """Every container form yields every record."""
        assert [card.formatted_name for card in parse_json(json.dumps(document))] == ["A", "B"]

    def test_decoded_document_and_stream(self) -> None:
        """Sources may be decoded JSON or a text stream."""
        document = _record(["fn", {}, "text", "Jo"])
        assert JCardReader(document).read_all()[0].formatted_name == "Jo"
        stream = io.StringIO(json.dumps(document))
        assert JCardReader(stream).read_all()[0].formatted_name == "Jo"

    @pytest.mark.parametrize(
        "source",
        [
            "not json",
            "{}",
            "[]",
            '["vcard", "x"]',
            '["vcard", [["fn", {}, "text"]]]',
            '["vcard", [["fn", [], "text", "Jo"]]]',
        ],
    )
    def test_broken_framing(self, source: str) -> None:
        """Malformed documents raise."""
        with pytest.raises(VCardSyntaxError):
            JCardReader(source).read_all()


class TestWrite:
    """Writing records."""

    def test_single_record(self) -> None:
        """One record is written as a vcard array starting with VERSION."""
        card = _card(FormattedName("John Doe"), StructuredName(family="Doe", given="John"))
        assert _written(card) == [
            "vcard",
            [
                _VERSION,
                ["fn", {}, "text", "John Doe"],
                ["n", {}, "text", ["Doe", "John", "", "", ""]],
            ],
        ]

    def test_several_records(self) -> None:
        """Several records are written as a vcardstream."""
        document = json.loads(write_json([_card(FormattedName("A")), _card(FormattedName("B"))]))
        assert document[0] == "vcardstream"
        assert len(document) == 3

    def test_parameters(self) -> None:
        """Parameters are lower-cased; several values become an array."""
        email = Email(
            "a@example.com",
            parameters=VCardParameters([("TYPE", "home"), ("TYPE", "work"), ("PREF", "1")]),
            group="item1",
        )
        (_, properties) = _written(_card(email))
        assert properties[1] == [
            "email",
            {"group": "item1", "type": ["home", "work"], "pref": "1"},
            "text",
            "a@example.com",
        ]

    def test_value_types(self) -> None:
        """The type tag follows the value."""
        card = _card(
            Birthday(date=date(1985, 4, 12)),
            Categories(values=["a", "b"]),
            Photo(url="http://example.com/me.jpg"),
        )
        (_, properties) = _written(card)
        assert properties[1] == ["bday", {}, "date", "1985-04-12"]
        assert properties[2] == ["categories", {}, "text", "a", "b"]
        assert properties[3][2:] == ["uri", "http://example.com/me.jpg"]

    def test_prodid(self) -> None:
        """PRODID follows VERSION."""
        document = json.loads(write_json(_card(FormattedName("Jo"))))
        prodid = document[1][1]
        assert prodid[0] == "prodid"
        assert prodid[3].startswith("vcardengine")

    def test_embedded_record_rejected(self) -> None:
        """An AGENT record cannot be written."""
        writer = JCardWriter(version_strict=False, add_prodid=False)
        writer.write(_card(Agent(vcard=_card(FormattedName("Assistant")))))
        assert json.loads(writer.getvalue()) == ["vcard", [_VERSION]]
        assert [warning.code for warning in writer.warnings] == [
            DiagnosticCode.EMBEDDED_RECORD_REJECTED
        ]

    def test_legacy_kind_dropped(self) -> None:
        """Version-strict writing leaves out 2.1/3.0-only kinds."""
        writer = JCardWriter(add_prodid=False)
        writer.write(_card(Agent(url="http://example.com")))
        assert [warning.code for warning in writer.warnings] == [
            DiagnosticCode.PROPERTY_UNSUPPORTED_BY_VERSION
        ]

    def test_sink_written_on_close(self) -> None:
        """The document reaches the sink when the context exits."""
        sink = io.StringIO()
        with JCardWriter(sink, add_prodid=False) as writer:
            writer.write(_card(FormattedName("Jo")))
            assert sink.getvalue() == ""
        assert json.loads(sink.getvalue())[1][1] == ["fn", {}, "text", "Jo"]

    def test_indent(self) -> None:
        """indent pretty-prints the document."""
        assert "\n" in write_json(_card(FormattedName("Jo")), indent=2)


class TestRoundTrip:
    """Write then read."""

    @given(records(VCardVersion.V4_0))
    def test_write_then_read(self, card: VCard) -> None:
        """Every generated record survives jCard."""
        (parsed,) = parse_json(write_json(card, add_prodid=False))
        assert list(parsed) == list(card)
