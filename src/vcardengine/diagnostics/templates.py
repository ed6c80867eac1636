"""Diagnostic message templates.

Centralized message templates for testable, consistent diagnostics.
Python 3.13+. Zero external dependencies.
"""

from .codes import Diagnostic, DiagnosticCode


class ErrorTemplate:
    """Centralized diagnostic templates.

    All warning and error messages are created here. NO f-strings in
    exception constructors! Templates return location-free diagnostics;
    callers attach line and property name.
    """

    # ------------------------------------------------------------------
    # Read warnings
    # ------------------------------------------------------------------

    @staticmethod
    def property_skipped(reason: str) -> Diagnostic:
        """A scribe asked for the property to be dropped.

        Args:
            reason: Why the scribe skipped it

        Returns:
            Diagnostic for PROPERTY_SKIPPED
        """
        msg = f"Property has been skipped: {reason}"
        return Diagnostic(code=DiagnosticCode.PROPERTY_SKIPPED, message=msg)

    @staticmethod
    def property_unparseable(reason: str) -> Diagnostic:
        """A value could not be given any meaning for its property kind.

        Args:
            reason: What was wrong with the value

        Returns:
            Diagnostic for PROPERTY_UNPARSEABLE
        """
        msg = f"Property value could not be parsed and was discarded: {reason}"
        return Diagnostic(code=DiagnosticCode.PROPERTY_UNPARSEABLE, message=msg)

    @staticmethod
    def value_kept_as_text(value: str) -> Diagnostic:
        """Date value fell back to free text."""
        msg = f'Date string "{value}" could not be parsed; keeping it as text'
        return Diagnostic(code=DiagnosticCode.VALUE_KEPT_AS_TEXT, message=msg)

    @staticmethod
    def malformed_line(line: str) -> Diagnostic:
        """Logical line has no name/value separator."""
        preview = line if len(line) <= 40 else line[:40] + "..."
        msg = f'Skipping malformed line "{preview}"'
        return Diagnostic(
            code=DiagnosticCode.MALFORMED_LINE,
            message=msg,
            hint="Every content line needs a colon between name and value",
        )

    @staticmethod
    def invalid_version(value: str) -> Diagnostic:
        """VERSION property holds an unknown version."""
        msg = f'Ignoring unrecognized version "{value}"'
        return Diagnostic(
            code=DiagnosticCode.INVALID_VERSION,
            message=msg,
            hint="Supported versions are 2.1, 3.0 and 4.0",
        )

    @staticmethod
    def unknown_charset(charset: str, fallback: str) -> Diagnostic:
        """CHARSET parameter names an unknown codec."""
        msg = f'Unknown charset "{charset}"; decoding with {fallback}'
        return Diagnostic(code=DiagnosticCode.UNKNOWN_CHARSET, message=msg)

    @staticmethod
    def quoted_printable_undecodable(charset: str) -> Diagnostic:
        """Quoted-printable bytes do not decode in the declared charset."""
        msg = f"Quoted-printable value could not be decoded as {charset}; keeping raw value"
        return Diagnostic(code=DiagnosticCode.QUOTED_PRINTABLE_UNDECODABLE, message=msg)

    @staticmethod
    def embedded_record_unsupported(syntax: str) -> Diagnostic:
        """Embedded records cannot appear in this syntax."""
        msg = f"Embedded records are not supported in {syntax}; property discarded"
        return Diagnostic(code=DiagnosticCode.EMBEDDED_RECORD_UNSUPPORTED, message=msg)

    @staticmethod
    def embedded_record_missing() -> Diagnostic:
        """Property announced a nested record that never started."""
        msg = "Expected a nested BEGIN:VCARD block after this property"
        return Diagnostic(code=DiagnosticCode.EMBEDDED_RECORD_MISSING, message=msg)

    @staticmethod
    def embedded_record_orphaned() -> Diagnostic:
        """Nested BEGIN:VCARD block with no property to hold it."""
        return Diagnostic(
            code=DiagnosticCode.EMBEDDED_RECORD_ORPHANED,
            message="Nested record does not follow an AGENT property; discarded",
        )

    @staticmethod
    def nested_record_problem(inner: Diagnostic) -> Diagnostic:
        """Wrap a diagnostic raised while reading a nested record."""
        msg = f"Problem in embedded record: {inner.format()}"
        return Diagnostic(code=inner.code, message=msg, severity=inner.severity)

    @staticmethod
    def version_missing() -> Diagnostic:
        """jCard record carries no VERSION property."""
        return Diagnostic(
            code=DiagnosticCode.VERSION_MISSING,
            message="Record has no version property; assuming 4.0",
        )

    @staticmethod
    def version_mismatch(value: str) -> Diagnostic:
        """jCard VERSION property is not 4.0."""
        msg = f'Version must be "4.0" in this syntax, found "{value}"'
        return Diagnostic(code=DiagnosticCode.VERSION_MISMATCH, message=msg)

    # ------------------------------------------------------------------
    # Write warnings
    # ------------------------------------------------------------------

    @staticmethod
    def unsupported_by_version(property_name: str, version: str) -> Diagnostic:
        """Version-strict writer dropped a property."""
        msg = f"{property_name} is not supported by vCard {version}; not written"
        return Diagnostic(
            code=DiagnosticCode.PROPERTY_UNSUPPORTED_BY_VERSION,
            message=msg,
            hint="Disable version_strict to write it anyway",
        )

    @staticmethod
    def property_not_written(reason: str) -> Diagnostic:
        """A scribe declined to write a property."""
        msg = f"Property not written: {reason}"
        return Diagnostic(code=DiagnosticCode.PROPERTY_NOT_WRITTEN, message=msg)

    @staticmethod
    def embedded_record_rejected(target: str) -> Diagnostic:
        """Embedded record cannot be written to this target."""
        msg = f"Embedded records cannot be written to {target}; property not written"
        return Diagnostic(code=DiagnosticCode.EMBEDDED_RECORD_REJECTED, message=msg)

    # ------------------------------------------------------------------
    # Errors
    # ------------------------------------------------------------------

    @staticmethod
    def invalid_property_name(name: str) -> Diagnostic:
        """Property name cannot be written."""
        msg = f'Property name "{name}" cannot be written'
        return Diagnostic(
            code=DiagnosticCode.INVALID_PROPERTY_NAME,
            message=msg,
            hint="Names must be non-empty and contain none of . ; : or line breaks",
            severity="error",
        )

    @staticmethod
    def invalid_group_name(group: str) -> Diagnostic:
        """Group name cannot be written."""
        msg = f'Group name "{group}" cannot be written'
        return Diagnostic(
            code=DiagnosticCode.INVALID_GROUP_NAME,
            message=msg,
            hint="Groups must contain none of . ; : or line breaks",
            severity="error",
        )

    @staticmethod
    def malformed_document(syntax: str, detail: str) -> Diagnostic:
        """Stream framing is broken."""
        msg = f"Malformed {syntax} document: {detail}"
        return Diagnostic(code=DiagnosticCode.MALFORMED_DOCUMENT, message=msg, severity="error")

    @staticmethod
    def depth_exceeded(max_depth: int) -> Diagnostic:
        """Embedded records nest too deeply."""
        msg = f"Embedded record nesting exceeds maximum depth ({max_depth})"
        return Diagnostic(
            code=DiagnosticCode.MAX_DEPTH_EXCEEDED,
            message=msg,
            hint="Input is likely adversarial; raise max_depth only for trusted data",
            severity="error",
        )

    @staticmethod
    def invalid_configuration(detail: str) -> Diagnostic:
        """Writer or folding configuration is inconsistent."""
        msg = f"Invalid configuration: {detail}"
        return Diagnostic(code=DiagnosticCode.INVALID_CONFIGURATION, message=msg, severity="error")

    @staticmethod
    def no_scribe(class_name: str) -> Diagnostic:
        """Property class has no registered scribe."""
        msg = f"No scribe is registered for property class {class_name}"
        return Diagnostic(
            code=DiagnosticCode.NO_SCRIBE,
            message=msg,
            hint="Register a scribe for the class with ScribeIndex.register",
            severity="error",
        )
