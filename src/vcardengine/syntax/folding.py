"""Line folding transport of the text syntax.

A logical line longer than the configured width is split over several
physical lines; each continuation starts with whitespace. The reader
undoes this, including one mail client's habit of folding
quoted-printable values with a bare trailing ``=`` instead.

Python 3.13+.
"""

from __future__ import annotations

import io
import logging
import quopri
import re
from dataclasses import dataclass
from typing import TextIO

from vcardengine.constants import CRLF, DEFAULT_CHARSET, DEFAULT_INDENT, DEFAULT_LINE_LENGTH
from vcardengine.diagnostics import VCardWriteError
from vcardengine.diagnostics.templates import ErrorTemplate

__all__ = [
    "FoldedLineReader",
    "FoldedLineWriter",
    "FoldingConfig",
    "decode_quoted_printable",
    "encode_quoted_printable",
]

logger = logging.getLogger(__name__)

# Heuristic for the quoted-printable continuation quirk: the encoding is
# named before the first colon and the physical line ends in "=". It can
# misfire on a value that merely mentions the encoding.
_QP_CONTINUATION = re.compile(r"[^:]*?QUOTED-PRINTABLE.*?:.*=", re.IGNORECASE)


# ============================================================================
# QUOTED-PRINTABLE
# ============================================================================


def encode_quoted_printable(text: str, charset: str = DEFAULT_CHARSET) -> str:
    """Quoted-printable encode without soft line breaks.

    Printable ASCII other than ``=``, plus space and tab, is written as is;
    every other byte becomes an ``=XX`` triplet. Line breaks are left to
    the folding writer, which is why ``quopri`` is not used here.
    """
    out: list[str] = []
    for byte in text.encode(charset):
        if byte in (9, 32) or (33 <= byte <= 126 and byte != 61):
            out.append(chr(byte))
        else:
            out.append(f"={byte:02X}")
    return "".join(out)


def decode_quoted_printable(value: str, charset: str = DEFAULT_CHARSET) -> str:
    """Decode a quoted-printable value.

    Raises:
        LookupError: If the charset is unknown
        UnicodeError: If the decoded bytes are invalid in the charset
    """
    return quopri.decodestring(value.encode(charset)).decode(charset)


# ============================================================================
# CONFIGURATION
# ============================================================================


@dataclass(frozen=True, slots=True)
class FoldingConfig:
    """Immutable folding configuration of a text writer.

    Attributes:
        line_length: Maximum physical line width; None or <= 0 disables folding
        indent: Whitespace starting each continuation line
        newline: Line terminator

    Example:
        >>> FoldingConfig(line_length=72).line_length
        72
    """

    line_length: int | None = DEFAULT_LINE_LENGTH
    indent: str = DEFAULT_INDENT
    newline: str = CRLF

    def __post_init__(self) -> None:
        """Validate configuration values at construction time.

        Raises:
            VCardWriteError: If the indent is empty, contains anything but
                spaces and tabs, or is not shorter than the line length.
        """
        if not self.indent or self.indent.strip(" \t"):
            raise VCardWriteError(
                ErrorTemplate.invalid_configuration("indent must be spaces or tabs")
            )
        if self.folds and len(self.indent) >= self.line_length:  # type: ignore[operator]
            raise VCardWriteError(
                ErrorTemplate.invalid_configuration("indent must be shorter than the line length")
            )

    @property
    def folds(self) -> bool:
        """True if folding is enabled."""
        return self.line_length is not None and self.line_length > 0


# ============================================================================
# READER
# ============================================================================


class FoldedLineReader:
    """Reads logical (unfolded) lines from a text source.

    Holds at most one physical line of lookahead: a line that turns out
    not to be a continuation starts the next logical line.

    Attributes:
        line_number: 1-indexed physical line where the last logical line began
    """

    __slots__ = ("_lookahead", "_lookahead_number", "_physical", "_source", "line_number")

    def __init__(self, source: str | TextIO) -> None:
        """Initialize reader.

        Args:
            source: Whole document, or a text stream
        """
        self._source: TextIO = io.StringIO(source, newline="") if isinstance(source, str) else source
        self._lookahead: str | None = None
        self._lookahead_number = 0
        self._physical = 0
        self.line_number = 0

    def _read_physical(self) -> str | None:
        raw = self._source.readline()
        if not raw:
            return None
        self._physical += 1
        return raw.rstrip("\r\n")

    def _read_non_blank(self) -> str | None:
        while (line := self._read_physical()) is not None:
            if line.strip():
                return line
        return None

    def read_line(self) -> str | None:
        """Read the next logical line.

        Returns:
            Unfolded line, or None at end of input
        """
        if self._lookahead is not None:
            line: str | None = self._lookahead
            self.line_number = self._lookahead_number
            self._lookahead = None
        else:
            line = self._read_non_blank()
            self.line_number = self._physical
        if line is None:
            return None

        if _QP_CONTINUATION.fullmatch(line):
            return self._read_quoted_printable_continuation(line[:-1])

        parts = [line]
        while (physical := self._read_non_blank()) is not None:
            if physical[0].isspace():
                parts.append(physical.lstrip())
                if physical.endswith("="):
                    # A folded header: the soft breaks start once the colon is in.
                    joined = "".join(parts)
                    if _QP_CONTINUATION.fullmatch(joined):
                        return self._read_quoted_printable_continuation(joined[:-1])
                continue
            self._lookahead = physical
            self._lookahead_number = self._physical
            break
        return "".join(parts)

    def _read_quoted_printable_continuation(self, head: str) -> str:
        # Raw lines, blank ones included, until one stops ending in "=".
        parts = [head]
        while (physical := self._read_physical()) is not None:
            physical = physical.lstrip()
            if physical.endswith("="):
                parts.append(physical[:-1])
                continue
            parts.append(physical)
            break
        return "".join(parts)

    def __iter__(self) -> FoldedLineReader:
        """Iterate over logical lines."""
        return self

    def __next__(self) -> str:
        """Return the next logical line."""
        line = self.read_line()
        if line is None:
            raise StopIteration
        return line


# ============================================================================
# WRITER
# ============================================================================


class FoldedLineWriter:
    """Writes text to a sink, folding lines at the configured width.

    Folding never splits a quoted-printable ``=XX`` triplet and never
    starts a continuation line with content whitespace; the current line
    runs past the width instead. Line breaks inside written text pass
    through and reset the column.

    Example:
        >>> writer = FoldedLineWriter(config=FoldingConfig(line_length=10))
        >>> writer.write("NOTE:The quick brown fox")
        >>> writer.writeln()
        >>> writer.getvalue()
        'NOTE:The q\\r\\n uick brow\\r\\n n fox\\r\\n'
    """

    __slots__ = ("_column", "_sink", "config")

    def __init__(self, sink: TextIO | None = None, *, config: FoldingConfig | None = None) -> None:
        """Initialize writer.

        Args:
            sink: Text stream to write to (default: in-memory buffer)
            config: Folding configuration (default: 75 columns, one space)
        """
        self._sink: TextIO = io.StringIO() if sink is None else sink
        self.config = FoldingConfig() if config is None else config
        self._column = 0

    def getvalue(self) -> str:
        """Return everything written so far (in-memory sink only)."""
        if not isinstance(self._sink, io.StringIO):
            msg = "getvalue() requires the default in-memory sink"
            raise TypeError(msg)
        return self._sink.getvalue()

    def writeln(self) -> None:
        """End the current logical line."""
        self._sink.write(self.config.newline)
        self._column = 0

    def write(
        self,
        text: str,
        *,
        quoted_printable: bool = False,
        charset: str = DEFAULT_CHARSET,
    ) -> None:
        """Write text, folding as needed.

        Args:
            text: Text to write
            quoted_printable: Encode the text first; folded lines then end in ``=``
            charset: Charset for quoted-printable encoding
        """
        if quoted_printable:
            text = encode_quoted_printable(text, charset)
        if not self.config.folds:
            self._sink.write(text)
            return

        limit: int = self.config.line_length  # type: ignore[assignment]
        if quoted_printable:
            limit -= 1
        indent = self.config.indent
        sink = self._sink
        length = len(text)
        start = 0
        index = 0
        # True once the current physical line holds something besides the indent.
        filled = self._column > 0

        while index < length:
            ch = text[index]
            if ch == "\n" or (ch == "\r" and (index + 1 == length or text[index + 1] != "\n")):
                sink.write(text[start : index + 1])
                index += 1
                start = index
                self._column = 0
                filled = False
                continue
            if ch == "\r":
                sink.write(text[start : index + 2])
                index += 2
                start = index
                self._column = 0
                filled = False
                continue

            if ch.isspace():
                end = index + 1
                while end < length and text[end].isspace() and text[end] not in "\r\n":
                    end += 1
            elif quoted_printable and ch == "=":
                end = min(index + 3, length)
            else:
                end = index + 1

            if self._column >= limit and filled and not ch.isspace():
                sink.write(text[start:index])
                if quoted_printable:
                    sink.write("=")
                sink.write(self.config.newline)
                sink.write(indent)
                self._column = len(indent)
                start = index

            self._column += end - index
            filled = True
            index = end

        sink.write(text[start:])
