"""Diagnostic codes and data structures.

Defines warning/error codes and the diagnostic record accumulated by the
readers and writers.
Python 3.13+. Zero external dependencies.
"""

from dataclasses import dataclass, replace
from enum import Enum
from typing import Literal

__all__ = [
    "Diagnostic",
    "DiagnosticCode",
]


class DiagnosticCode(Enum):
    """Diagnostic codes with unique identifiers.

    Organized by category:
        1000-1999: Read warnings (one property occurrence dropped or degraded)
        2000-2999: Write warnings (one property left out of the output)
        3000-3999: Errors (raised to the caller)
    """

    # Read warnings (1000-1999)
    PROPERTY_SKIPPED = 1001
    PROPERTY_UNPARSEABLE = 1002
    VALUE_KEPT_AS_TEXT = 1003
    MALFORMED_LINE = 1004
    INVALID_VERSION = 1005
    UNKNOWN_CHARSET = 1006
    QUOTED_PRINTABLE_UNDECODABLE = 1007
    EMBEDDED_RECORD_UNSUPPORTED = 1008
    EMBEDDED_RECORD_MISSING = 1009
    VERSION_MISSING = 1010
    VERSION_MISMATCH = 1011
    EMBEDDED_RECORD_ORPHANED = 1012

    # Write warnings (2000-2999)
    PROPERTY_UNSUPPORTED_BY_VERSION = 2001
    PROPERTY_NOT_WRITTEN = 2002
    EMBEDDED_RECORD_REJECTED = 2003

    # Errors (3000-3999)
    INVALID_PROPERTY_NAME = 3001
    INVALID_GROUP_NAME = 3002
    MALFORMED_DOCUMENT = 3003
    MAX_DEPTH_EXCEEDED = 3004
    INVALID_CONFIGURATION = 3005
    NO_SCRIBE = 3006


@dataclass(frozen=True, slots=True)
class Diagnostic:
    """Structured diagnostic message.

    Templates build diagnostics without a location; the read and write
    contexts attach the line number and property name with ``located``.

    Attributes:
        code: Unique diagnostic code
        message: Human-readable description
        line: 1-indexed source line (text syntax only, None otherwise)
        property_name: Name of the offending property, if any
        hint: Suggestion for fixing the input
        severity: "warning" for per-property problems, "error" for raised ones
    """

    code: DiagnosticCode
    message: str
    line: int | None = None
    property_name: str | None = None
    hint: str | None = None
    severity: Literal["error", "warning"] = "warning"

    def __str__(self) -> str:
        """Return human-readable description with its location."""
        return self.format()

    def located(self, *, line: int | None, property_name: str | None) -> "Diagnostic":
        """Return a copy carrying the given source location."""
        return replace(self, line=line, property_name=property_name)

    def format(self) -> str:
        """Format as a single line.

        Example output:
            warning[PROPERTY_UNPARSEABLE] line 7, BDAY: Could not parse date "tomorrow"
        """
        location: list[str] = []
        if self.line is not None:
            location.append(f"line {self.line}")
        if self.property_name:
            location.append(self.property_name)
        where = f" {', '.join(location)}" if location else ""
        text = f"{self.severity}[{self.code.name}]{where}: {self.message}"
        if self.hint:
            text += f" (help: {self.hint})"
        return text
