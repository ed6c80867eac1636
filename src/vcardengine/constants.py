"""Shared constants for vcardengine.

Centralized configuration constants used across the syntax, scribe and
io packages. Placing constants here avoids circular imports and provides
a single source of truth.

Constants are grouped by domain:
- Depth limits: Recursion protection for embedded records
- Folding: Line transport defaults for the text syntax
- Namespaces: XML namespace of the xCard syntax
- Defaults: Charset and product identifier written by the writers

Python 3.13+. Zero external dependencies.
"""

# ruff: noqa: RUF022 - __all__ organized by category for readability
__all__ = [
    # Depth limits
    "MAX_DEPTH",
    # Folding
    "DEFAULT_LINE_LENGTH",
    "DEFAULT_INDENT",
    "CRLF",
    # Namespaces
    "XCARD_NAMESPACE",
    # Defaults
    "DEFAULT_CHARSET",
    "PRODUCT_NAME",
]

# ============================================================================
# DEPTH LIMITS
# ============================================================================
#
# Embedded records (the legacy AGENT property) may nest arbitrarily deep in
# hostile input: a 2.1 stream can open BEGIN:VCARD blocks forever and a 3.0
# value can hold an escaped record that holds another escaped record. Every
# orchestrator, reading and writing, counts nesting against this limit.
# Real address books nest at most one level.
MAX_DEPTH: int = 100

# ============================================================================
# FOLDING
# ============================================================================

# Maximum physical line width before folding. 75 leaves room for the CRLF
# inside the 77 octets some clients allow; 72 and 76 are also seen in the wild.
DEFAULT_LINE_LENGTH: int = 75

# Whitespace prefixed to each continuation line.
DEFAULT_INDENT: str = " "

# Line terminator mandated by every version of the text syntax.
CRLF: str = "\r\n"

# ============================================================================
# NAMESPACES
# ============================================================================

# Namespace of xCard documents (RFC 6351). Only vCard 4.0 has an XML syntax.
XCARD_NAMESPACE: str = "urn:ietf:params:xml:ns:vcard-4.0"

# ============================================================================
# DEFAULTS
# ============================================================================

# Charset used for quoted-printable values that do not name one.
DEFAULT_CHARSET: str = "UTF-8"

# Product name written into the PRODID property.
PRODUCT_NAME: str = "vcardengine"
