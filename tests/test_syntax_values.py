"""Tests for the structured-value grammar.

Covers escaping, comma lists, semi-structured and structured values and
the pull-style component iterators.
"""

from hypothesis import event, given
from hypothesis import strategies as st

from tests.strategies import non_empty_values, structured_components, text_values
from vcardengine.syntax import (
    SemiStructuredValueIterator,
    StructuredValueBuilder,
    StructuredValueIterator,
    escape,
    parse_list,
    parse_semistructured,
    parse_structured,
    unescape,
    write_list,
    write_semistructured,
    write_structured,
)


class TestEscape:
    """Backslash escaping of single values."""

    def test_escapes_specials(self) -> None:
        """Backslash, comma and semicolon get a backslash."""
        assert escape("a\\b,c;d") == "a\\\\b\\,c\\;d"

    def test_plain_text_unchanged(self) -> None:
        """Text without specials is returned as is."""
        assert escape("John Doe") == "John Doe"

    def test_newline_not_escaped(self) -> None:
        """Line breaks are left to the line writer."""
        assert escape("one\ntwo") == "one\ntwo"

    def test_commas_kept_for_legacy(self) -> None:
        """2.1 components never escape commas."""
        assert escape("a,b;c", escape_commas=False) == "a,b\\;c"

    def test_unescape_newlines(self) -> None:
        """Both \\n and \\N are line breaks."""
        assert unescape("one\\ntwo\\Nthree") == "one\ntwo\nthree"

    def test_unescape_other_characters_stand_for_themselves(self) -> None:
        """An escaped ordinary character is just that character."""
        assert unescape("\\a\\,\\;\\\\") == "a,;\\"

    def test_unescape_keeps_trailing_backslash(self) -> None:
        """A lone backslash at the end survives."""
        assert unescape("value\\") == "value\\"

    @given(text_values())
    def test_unescape_reverses_escape(self, value: str) -> None:
        """Escaping then unescaping is the identity (no line breaks involved)."""
        value = value.replace("\n", " ")
        assert unescape(escape(value)) == value


class TestList:
    """Comma-separated lists."""

    def test_parse_list(self) -> None:
        """Escaped commas do not split."""
        assert parse_list("a,b\\,c") == ["a", "b,c"]

    def test_parse_empty_list(self) -> None:
        """An empty value is an empty list."""
        assert parse_list("") == []

    def test_write_list(self) -> None:
        """None is written as an empty item."""
        assert write_list(["a,b", None, "c"]) == "a\\,b,,c"

    @given(st.lists(non_empty_values(), min_size=1, max_size=5))
    def test_list_roundtrip(self, values: list[str]) -> None:
        """Non-empty items survive writing and parsing."""
        values = [value.replace("\n", " ") for value in values]
        event(f"list_size={len(values)}")
        assert parse_list(write_list(values)) == values


class TestSemiStructured:
    """Semicolon-separated values with one value per component."""

    def test_parse(self) -> None:
        """Commas stay inside a component."""
        assert parse_semistructured("Acme, Inc.;Sales\\;Marketing") == [
            "Acme, Inc.",
            "Sales;Marketing",
        ]

    def test_parse_with_limit(self) -> None:
        """The last component keeps the remainder."""
        assert parse_semistructured("a;b;c;d", limit=2) == ["a", "b;c;d"]

    def test_write_drops_trailing_empty_components(self) -> None:
        """Trailing empty components are dropped by default."""
        assert write_semistructured(["a", None, "b", "", None]) == "a;;b"

    def test_write_keeps_trailing_when_asked(self) -> None:
        """include_trailing keeps every component."""
        assert write_semistructured(["a", None], include_trailing=True) == "a;"

    def test_write_legacy_commas(self) -> None:
        """escape_commas=False leaves commas bare."""
        assert write_semistructured(["a,b", "c"], escape_commas=False) == "a,b;c"

    def test_iterator_reads_empty_as_none(self) -> None:
        """Empty and missing components both read as None."""
        iterator = SemiStructuredValueIterator("a;;c")
        assert iterator.next_value() == "a"
        assert iterator.next_value() is None
        assert iterator.has_next()
        assert iterator.next_value() == "c"
        assert not iterator.has_next()
        assert iterator.next_value() is None


class TestStructured:
    """Semicolon-separated values whose components are comma lists."""

    def test_parse(self) -> None:
        """Empty components are empty lists."""
        assert parse_structured(";;123 Main St;Anytown;CA;12345;USA") == [
            [],
            [],
            ["123 Main St"],
            ["Anytown"],
            ["CA"],
            ["12345"],
            ["USA"],
        ]

    def test_parse_empty(self) -> None:
        """An empty value has no components."""
        assert parse_structured("") == []

    def test_write_mixed_components(self) -> None:
        """Components may be lists, single strings or None."""
        assert write_structured(["Doe", ["John"], None, ["Mr", "Dr"]]) == "Doe;John;;Mr,Dr"

    def test_write_trailing(self) -> None:
        """include_trailing keeps trailing empty components."""
        components: list[list[str]] = [["Doe"], [], []]
        assert write_structured(components) == "Doe"
        assert write_structured(components, include_trailing=True) == "Doe;;"

    def test_builder(self) -> None:
        """The builder accumulates components."""
        builder = StructuredValueBuilder()
        builder.append("Doe")
        builder.append(None)
        builder.append(["Mr", "Dr"])
        assert builder.build() == "Doe;;Mr,Dr"

    def test_iterator(self) -> None:
        """Missing components read as empty."""
        iterator = StructuredValueIterator.parse("Doe;John;;Mr,Dr")
        assert iterator.next_value() == "Doe"
        assert iterator.next_value() == "John"
        assert iterator.next_component() == []
        assert iterator.next_component() == ["Mr", "Dr"]
        assert not iterator.has_next()
        assert iterator.next_value() is None
        assert iterator.next_component() == []

    @given(structured_components())
    def test_structured_roundtrip(self, components: list[list[str]]) -> None:
        """Written with trailing components, a structured value parses back."""
        components = [[value.replace("\n", " ") for value in c] for c in components]
        written = write_structured(components, include_trailing=True)
        if components == [[]]:
            # A lone empty component is indistinguishable from no value.
            event("structured_lone_empty")
            assert parse_structured(written) == []
        else:
            assert parse_structured(written) == components
