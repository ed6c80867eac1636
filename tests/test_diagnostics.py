"""Tests for diagnostics, exceptions and the depth guard."""

import logging
import sys

import pytest
from hypothesis import event, given
from hypothesis import strategies as st

from vcardengine import DepthLimitExceededError, VCardError, VCardSyntaxError, VCardWriteError
from vcardengine.core import DepthGuard, depth_clamp
from vcardengine.diagnostics import Diagnostic, DiagnosticCode, ErrorTemplate


class TestDiagnosticFormat:
    """Single-line rendering."""

    def test_full_location_and_hint(self) -> None:
        """Line, property name and hint all appear."""
        diagnostic = Diagnostic(
            code=DiagnosticCode.PROPERTY_UNPARSEABLE,
            message="bad date",
            line=7,
            property_name="BDAY",
            hint="use ISO 8601",
        )
        assert diagnostic.format() == (
            "warning[PROPERTY_UNPARSEABLE] line 7, BDAY: bad date (help: use ISO 8601)"
        )
        assert str(diagnostic) == diagnostic.format()

    def test_without_location(self) -> None:
        """No location leaves the prefix bare."""
        diagnostic = Diagnostic(code=DiagnosticCode.NO_SCRIBE, message="m", severity="error")
        assert diagnostic.format() == "error[NO_SCRIBE]: m"

    def test_property_name_only(self) -> None:
        """Non-text syntaxes have no line number."""
        diagnostic = Diagnostic(code=DiagnosticCode.PROPERTY_SKIPPED, message="m", property_name="FN")
        assert diagnostic.format() == "warning[PROPERTY_SKIPPED] FN: m"

    def test_located_copies(self) -> None:
        """located returns a new diagnostic; the template one is untouched."""
        template = ErrorTemplate.property_skipped("empty")
        located = template.located(line=3, property_name="NOTE")
        assert (located.line, located.property_name) == (3, "NOTE")
        assert template.line is None and template.property_name is None
        assert located.message == template.message

    @given(st.integers(min_value=1, max_value=10**6), st.text(min_size=1, max_size=20))
    def test_line_always_rendered(self, line: int, message: str) -> None:
        """Every line number shows up in the rendering."""
        event("multiline" if "\n" in message else "single line")
        diagnostic = Diagnostic(code=DiagnosticCode.MALFORMED_LINE, message=message, line=line)
        assert f"line {line}:" in diagnostic.format()


class TestTemplates:
    """Template codes and severities."""

    @pytest.mark.parametrize(
        ("diagnostic", "code"),
        [
            (ErrorTemplate.property_unparseable("x"), DiagnosticCode.PROPERTY_UNPARSEABLE),
            (ErrorTemplate.value_kept_as_text("soon"), DiagnosticCode.VALUE_KEPT_AS_TEXT),
            (ErrorTemplate.unknown_charset("x-foo", "utf-8"), DiagnosticCode.UNKNOWN_CHARSET),
            (ErrorTemplate.embedded_record_missing(), DiagnosticCode.EMBEDDED_RECORD_MISSING),
            (ErrorTemplate.embedded_record_orphaned(), DiagnosticCode.EMBEDDED_RECORD_ORPHANED),
            (ErrorTemplate.version_missing(), DiagnosticCode.VERSION_MISSING),
            (ErrorTemplate.property_not_written("x"), DiagnosticCode.PROPERTY_NOT_WRITTEN),
        ],
    )
    def test_warnings(self, diagnostic: Diagnostic, code: DiagnosticCode) -> None:
        """Per-property templates are warnings."""
        assert diagnostic.code is code
        assert diagnostic.severity == "warning"

    @pytest.mark.parametrize(
        "diagnostic",
        [
            ErrorTemplate.invalid_property_name("A:B"),
            ErrorTemplate.invalid_group_name("a.b"),
            ErrorTemplate.malformed_document("jCard", "not an array"),
            ErrorTemplate.depth_exceeded(5),
            ErrorTemplate.invalid_configuration("indent too wide"),
            ErrorTemplate.no_scribe("Skype"),
        ],
    )
    def test_errors(self, diagnostic: Diagnostic) -> None:
        """Raised templates are errors."""
        assert diagnostic.severity == "error"
        assert diagnostic.code.value >= 3000

    def test_malformed_line_preview(self) -> None:
        """Long lines are shortened in the message."""
        diagnostic = ErrorTemplate.malformed_line("x" * 100)
        assert "x" * 40 + "..." in diagnostic.message
        assert "x" * 41 not in diagnostic.message

    def test_nested_problem_keeps_code(self) -> None:
        """Nested warnings keep their code and mention their own location."""
        inner = ErrorTemplate.malformed_line("junk").located(line=4, property_name=None)
        outer = ErrorTemplate.nested_record_problem(inner)
        assert outer.code is DiagnosticCode.MALFORMED_LINE
        assert "line 4" in outer.message


class TestExceptions:
    """Exception hierarchy."""

    def test_diagnostic_attached(self) -> None:
        """A diagnostic becomes the message and stays attached."""
        diagnostic = ErrorTemplate.malformed_document("xCard", "no root")
        error = VCardSyntaxError(diagnostic)
        assert error.diagnostic is diagnostic
        assert str(error) == diagnostic.format()

    def test_plain_message(self) -> None:
        """A plain message has no diagnostic."""
        error = VCardWriteError("nope")
        assert error.diagnostic is None
        assert str(error) == "nope"

    def test_hierarchy(self) -> None:
        """Every raised error is a VCardError."""
        for cls in (VCardSyntaxError, VCardWriteError, DepthLimitExceededError):
            assert issubclass(cls, VCardError)


class TestDepthGuard:
    """Nesting limit."""

    def test_context_manager_counts(self) -> None:
        """Each with block is one level."""
        guard = DepthGuard(max_depth=3)
        with guard:
            assert guard.depth == 1
            with guard:
                assert guard.depth == 2
        assert guard.depth == 0

    def test_limit_raises(self) -> None:
        """Entering past the limit raises and leaves the count alone."""
        guard = DepthGuard(max_depth=2)
        guard.enter()
        guard.enter()
        with pytest.raises(DepthLimitExceededError) as excinfo:
            guard.enter()
        assert guard.depth == 2
        assert excinfo.value.diagnostic is not None
        assert excinfo.value.diagnostic.code is DiagnosticCode.MAX_DEPTH_EXCEEDED
        guard.leave()
        guard.leave()
        assert guard.depth == 0

    def test_level_left_on_error(self) -> None:
        """A level is left even when its body raises."""
        guard = DepthGuard(max_depth=2)
        with pytest.raises(ValueError, match="boom"), guard:
            raise ValueError("boom")
        assert guard.depth == 0

    def test_clamped(self, caplog: pytest.LogCaptureFixture) -> None:
        """Depths beyond the recursion limit are clamped with a warning."""
        with caplog.at_level(logging.WARNING, logger="vcardengine.core.depth_guard"):
            guard = DepthGuard(max_depth=10**6)
        assert guard.max_depth == (sys.getrecursionlimit() - 50) // 8
        assert "Clamping" in caplog.text

    def test_clamp_passes_small_depths(self) -> None:
        """Reasonable depths are returned as requested."""
        assert depth_clamp(5) == 5
