"""Diagnostic system for vCard marshalling.

Provides structured diagnostics with codes, locations and hints, and the
small exception hierarchy for stream-level failures.

Python 3.13+. Zero external dependencies.
"""

from .codes import Diagnostic, DiagnosticCode
from .errors import VCardError, VCardSyntaxError, VCardWriteError
from .templates import ErrorTemplate

__all__ = [
    "Diagnostic",
    "DiagnosticCode",
    "ErrorTemplate",
    "VCardError",
    "VCardSyntaxError",
    "VCardWriteError",
]
