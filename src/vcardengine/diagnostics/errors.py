"""vCard exception hierarchy with structured diagnostics.

Only stream-level problems are raised. Problems confined to one property
occurrence are reported as warnings on the orchestrator instead.

Python 3.13+. Zero external dependencies.
"""

from .codes import Diagnostic


class VCardError(Exception):
    """Base exception for all vcardengine errors.

    Attributes:
        diagnostic: Structured diagnostic information (optional)
    """

    def __init__(self, message: str | Diagnostic) -> None:
        """Initialize VCardError.

        Args:
            message: Error message string OR Diagnostic object
        """
        if isinstance(message, Diagnostic):
            self.diagnostic: Diagnostic | None = message
            super().__init__(message.format())
        else:
            self.diagnostic = None
            super().__init__(message)


class VCardSyntaxError(VCardError):
    """Malformed stream framing.

    Raised when a JSON or XML document is not well-formed, or when a
    structural delimiter is missing (a jCard property that is not an
    array, an xCard root that is not ``vcards``). Never raised for a
    single bad property value.
    """


class VCardWriteError(VCardError):
    """The caller asked for output the syntax cannot express.

    Examples:
    - Property name containing a colon or line break
    - Group name containing a dot
    - Folding indent at least as wide as the line
    """
