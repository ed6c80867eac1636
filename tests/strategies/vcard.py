"""Hypothesis strategies for vCard values and records.

Event-Emitting Strategies (HypoFuzz-Optimized):
    These strategies emit hypothesis.event() calls for coverage-guided fuzzing:
    - vcard_text_specials: Escapable characters present (none|some)
    - vcard_line_width: Line length relative to the fold width (short|long)
    - vcard_component_shape: Structured component shape (empty|single|multi)
    - vcard_record_size: Number of properties in a generated record
"""

from __future__ import annotations

from hypothesis import event
from hypothesis import strategies as st

from vcardengine import VCard, VCardVersion
from vcardengine.model import (
    Categories,
    Email,
    FormattedName,
    Note,
    StructuredName,
    VCardParameters,
)

# Characters every syntax can carry: no control characters except the
# line feed, no surrogates, no unassigned or private code points.
_CHARACTERS = st.characters(
    codec="utf-8",
    exclude_categories=("Cc", "Cs", "Co", "Cn"),
    include_characters="\n\t",
)

# Characters of one content line; no line breaks.
_LINE_CHARACTERS = st.characters(
    codec="utf-8",
    exclude_categories=("Cc", "Cs", "Co", "Cn", "Zl", "Zp"),
)

_SPECIALS = frozenset("\\,;\n")

TYPE_VALUES = ("home", "work", "cell", "voice")


@st.composite
def text_values(draw: st.DrawFn, *, min_size: int = 0) -> str:
    """Free text, biased toward the characters escaping must handle.

    Events emitted:
    - vcard_text_specials={none|some}
    """
    alphabet = st.one_of(_CHARACTERS, st.sampled_from(sorted(_SPECIALS)))
    value = draw(st.text(alphabet, min_size=min_size, max_size=40))
    event(f"vcard_text_specials={'some' if _SPECIALS & set(value) else 'none'}")
    return value


def non_empty_values() -> st.SearchStrategy[str]:
    """Free text with at least one character."""
    return text_values(min_size=1)


@st.composite
def unfolded_lines(draw: st.DrawFn) -> str:
    """One logical content line that survives folding unchanged.

    Starts with a property name so the first physical line is never blank.

    Events emitted:
    - vcard_line_width={short|long}
    """
    name = draw(st.sampled_from(["NOTE", "FN", "X-LONG", "item1.NOTE"]))
    value = draw(st.text(_LINE_CHARACTERS, max_size=300))
    line = f"{name}:{value}"
    event(f"vcard_line_width={'long' if len(line) > 75 else 'short'}")
    return line


@st.composite
def structured_components(draw: st.DrawFn) -> list[list[str]]:
    """Components of a structured value, each a list of non-empty values.

    Events emitted:
    - vcard_component_shape={empty|single|multi}
    """
    components = draw(
        st.lists(st.lists(non_empty_values(), max_size=3), min_size=1, max_size=7)
    )
    for component in components:
        shape = "empty" if not component else "single" if len(component) == 1 else "multi"
        event(f"vcard_component_shape={shape}")
    return components


@st.composite
def type_parameters(draw: st.DrawFn) -> VCardParameters:
    """Parameters holding zero or more distinct TYPE values."""
    parameters = VCardParameters()
    for value in draw(st.lists(st.sampled_from(TYPE_VALUES), max_size=2, unique=True)):
        parameters.add(VCardParameters.TYPE, value)
    return parameters


@st.composite
def structured_names(draw: st.DrawFn) -> StructuredName:
    """N properties; absent family and given names are None, never empty."""
    optional = st.none() | non_empty_values()
    names = st.lists(non_empty_values(), max_size=2)
    return StructuredName(
        family=draw(optional),
        given=draw(optional),
        additional_names=draw(names),
        prefixes=draw(names),
        suffixes=draw(names),
    )


@st.composite
def records(draw: st.DrawFn, version: VCardVersion = VCardVersion.V3_0) -> VCard:
    """Records of kinds every syntax of 3.0 and 4.0 can express exactly.

    Events emitted:
    - vcard_record_size={n}
    """
    card = VCard(version=version)
    card.add(FormattedName(draw(text_values())))
    if draw(st.booleans()):
        card.add(draw(structured_names()))
    for _ in range(draw(st.integers(min_value=0, max_value=2))):
        card.add(Email(draw(text_values()), parameters=draw(type_parameters())))
    if draw(st.booleans()):
        card.add(Note(draw(text_values())))
    if draw(st.booleans()):
        card.add(Categories(values=draw(st.lists(non_empty_values(), min_size=1, max_size=3))))
    event(f"vcard_record_size={len(card)}")
    return card
