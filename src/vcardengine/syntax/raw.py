"""Raw content lines of the text syntax.

A content line is ``[group.]NAME[;PARAM[=VALUE[,VALUE]]]*:VALUE``. This
module splits unfolded lines into their parts and writes parts back,
applying each version's parameter quoting rules:

- 2.1: no quoting; TYPE values may appear without a name (``;HOME``);
  backslash escapes ``\\;`` and ``\\\\``; multi-valued newlines need
  quoted-printable encoding
- 3.0/4.0: double quotes protect ``,:;``; commas separate values; caret
  escapes (``^^``, ``^n``, ``^'``) encode what quoting cannot

Python 3.13+.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import TextIO

from vcardengine.constants import DEFAULT_CHARSET
from vcardengine.diagnostics import VCardWriteError
from vcardengine.diagnostics.templates import ErrorTemplate
from vcardengine.enums import Encoding, VCardDataType, VCardVersion, encoding_of
from vcardengine.model.parameters import VCardParameters

from .folding import FoldedLineReader, FoldedLineWriter, FoldingConfig

__all__ = [
    "VCardRawLine",
    "VCardRawReader",
    "VCardRawWriter",
    "parse_raw_line",
]

logger = logging.getLogger(__name__)

_NEWLINES = re.compile(r"\r\n|\r|\n")
_INVALID_NAME_CHARS = frozenset(".;:\r\n")
# Characters 2.1 parameter values cannot carry at all.
_INVALID_OLD_PARAM_CHARS = frozenset(",.:=[]")


@dataclass(slots=True)
class VCardRawLine:
    """One unfolded content line split into its parts."""

    name: str
    value: str
    group: str | None = None
    parameters: VCardParameters = field(default_factory=VCardParameters)


def _resolve_nameless(value: str) -> str:
    """Pick the parameter a nameless 2.1 value belongs to."""
    upper = value.upper()
    if any(upper == member.upper() for member in VCardDataType):
        return VCardParameters.VALUE
    if encoding_of(upper) is not None:
        return VCardParameters.ENCODING
    return VCardParameters.TYPE


def parse_raw_line(
    line: str,
    version: VCardVersion,
    *,
    caret_decoding: bool = True,
) -> VCardRawLine | None:
    """Split an unfolded content line.

    Args:
        line: Unfolded line
        version: Version whose parameter syntax applies
        caret_decoding: Decode ``^^``, ``^n`` and ``^'`` in 3.0/4.0 values

    Returns:
        The parts, or None if the line has no name or no colon
    """
    legacy = version is VCardVersion.V2_1
    group: str | None = None
    buffer: list[str] = []
    index = 0
    length = len(line)

    # Group and name
    while index < length:
        ch = line[index]
        if ch == "." and group is None:
            group = "".join(buffer)
            buffer.clear()
        elif ch in ";:":
            break
        else:
            buffer.append(ch)
        index += 1
    if index == length:
        return None
    name = "".join(buffer).strip()
    if not name:
        return None
    if group is not None and not group:
        group = None

    parameters = VCardParameters()
    if line[index] == ":":
        return VCardRawLine(name=name, value=line[index + 1 :], group=group, parameters=parameters)
    index += 1

    # Parameters
    param_name: str | None = None
    values: list[str] = []
    buffer.clear()
    in_quotes = False
    value_start = False

    def finish_parameter() -> None:
        nonlocal param_name
        text = "".join(buffer)
        buffer.clear()
        if param_name is None:
            text = text.strip()
            if text:
                parameters.add(_resolve_nameless(text), text)
        else:
            values.append(text.rstrip() if legacy else text)
            for value in values:
                parameters.add(param_name, value)
        param_name = None
        values.clear()

    while index < length:
        ch = line[index]
        nxt = line[index + 1] if index + 1 < length else ""

        if ch == "\\" and nxt and param_name is not None:
            if nxt == "\\":
                buffer.append("\\")
            elif nxt in "nN":
                buffer.append("\n")
            elif nxt == '"' and not legacy:
                buffer.append('"')
            elif nxt == ";" and legacy:
                buffer.append(";")
            else:
                buffer.append(ch)
                buffer.append(nxt)
            index += 2
            continue

        if ch == "^" and nxt and not legacy and caret_decoding and param_name is not None:
            if nxt == "^":
                buffer.append("^")
            elif nxt == "n":
                buffer.append("\n")
            elif nxt == "'":
                buffer.append('"')
            else:
                buffer.append(ch)
                buffer.append(nxt)
            index += 2
            continue

        if ch == '"' and not legacy:
            in_quotes = not in_quotes
        elif in_quotes:
            buffer.append(ch)
        elif ch == ":":
            finish_parameter()
            return VCardRawLine(name=name, value=line[index + 1 :], group=group, parameters=parameters)
        elif ch == ";":
            finish_parameter()
        elif ch == "=" and param_name is None:
            param_name = "".join(buffer).strip()
            buffer.clear()
            value_start = legacy
        elif ch == "," and param_name is not None and not legacy:
            values.append("".join(buffer))
            buffer.clear()
        elif value_start and ch in " \t":
            pass
        else:
            buffer.append(ch)
            value_start = False
        index += 1

    # Parameter list never reached the value separator.
    return None


def _split_quoted_type_values(parameters: VCardParameters) -> None:
    # TYPE="home,work" arrives as one quoted value.
    types = parameters.types
    if not any("," in value for value in types):
        return
    parameters.remove_all(VCardParameters.TYPE)
    for value in types:
        for piece in value.split(","):
            if piece:
                parameters.add(VCardParameters.TYPE, piece)


class VCardRawReader:
    """Reads raw content lines from a text source.

    The parameter syntax follows the most recent VERSION line; callers
    update ``version`` when they see one.

    Attributes:
        version: Version whose parameter syntax applies
        caret_decoding: Decode caret escapes in 3.0/4.0 parameter values
    """

    __slots__ = ("_lines", "caret_decoding", "version")

    def __init__(
        self,
        source: str | TextIO,
        *,
        version: VCardVersion = VCardVersion.V2_1,
        caret_decoding: bool = True,
    ) -> None:
        """Initialize reader over a document or stream."""
        self._lines = FoldedLineReader(source)
        self.version = version
        self.caret_decoding = caret_decoding

    @property
    def line_number(self) -> int:
        """Line where the last returned content line began."""
        return self._lines.line_number

    def read_line(self) -> VCardRawLine | str | None:
        """Read the next content line.

        Returns:
            The parts; the unparseable text itself if the line is malformed;
            None at end of input
        """
        line = self._lines.read_line()
        if line is None:
            return None
        raw = parse_raw_line(line, self.version, caret_decoding=self.caret_decoding)
        if raw is None:
            return line
        _split_quoted_type_values(raw.parameters)
        return raw


class VCardRawWriter:
    """Writes raw content lines, applying the target version's rules.

    Example:
        >>> writer = VCardRawWriter(version=VCardVersion.V3_0)
        >>> writer.write_property(None, "NOTE", VCardParameters(), "line one\\nline two")
        >>> writer.getvalue()
        'NOTE:line one\\\\nline two\\r\\n'
    """

    __slots__ = ("_writer", "caret_encoding", "version")

    def __init__(
        self,
        sink: TextIO | None = None,
        *,
        version: VCardVersion = VCardVersion.V3_0,
        folding: FoldingConfig | None = None,
        caret_encoding: bool = False,
    ) -> None:
        """Initialize writer.

        Args:
            sink: Text stream (default: in-memory buffer)
            version: Target version
            folding: Folding configuration
            caret_encoding: Caret-encode 3.0/4.0 parameter values instead
                of substituting characters the syntax cannot carry
        """
        self._writer = FoldedLineWriter(sink, config=folding)
        self.version = version
        self.caret_encoding = caret_encoding

    @property
    def folding(self) -> FoldingConfig:
        """Folding configuration in use."""
        return self._writer.config

    def getvalue(self) -> str:
        """Return everything written so far (in-memory sink only)."""
        return self._writer.getvalue()

    def write_begin(self) -> None:
        """Write BEGIN:VCARD."""
        self.write_property(None, "BEGIN", VCardParameters(), "VCARD")

    def write_end(self) -> None:
        """Write END:VCARD."""
        self.write_property(None, "END", VCardParameters(), "VCARD")

    def write_version(self) -> None:
        """Write the VERSION line of the target version."""
        self.write_property(None, "VERSION", VCardParameters(), str(self.version))

    def write_property(
        self,
        group: str | None,
        name: str,
        parameters: VCardParameters,
        value: str,
    ) -> None:
        """Write one content line.

        Raises:
            VCardWriteError: If the group or name cannot be written
        """
        if not name or name[0].isspace() or any(ch in _INVALID_NAME_CHARS for ch in name):
            raise VCardWriteError(ErrorTemplate.invalid_property_name(name))
        if group is not None and (
            not group or group[0].isspace() or any(ch in _INVALID_NAME_CHARS for ch in group)
        ):
            raise VCardWriteError(ErrorTemplate.invalid_group_name(group))

        quoted_printable = parameters.encoding is Encoding.QUOTED_PRINTABLE
        has_newline = "\r" in value or "\n" in value
        if has_newline:
            if self.version is VCardVersion.V2_1:
                if not quoted_printable:
                    parameters = parameters.copy()
                    parameters.set_encoding(Encoding.QUOTED_PRINTABLE)
                    quoted_printable = True
            else:
                value = _NEWLINES.sub(r"\\n", value)

        charset = DEFAULT_CHARSET
        if quoted_printable:
            charset = parameters.charset or DEFAULT_CHARSET
            if parameters.charset is None:
                parameters = parameters.copy()
                parameters.add(VCardParameters.CHARSET, charset)

        head: list[str] = []
        if group:
            head.append(group)
            head.append(".")
        head.append(name)
        head.append(self._write_parameters(parameters))
        head.append(":")

        self._writer.write("".join(head))
        self._writer.write(value, quoted_printable=quoted_printable, charset=charset)
        self._writer.writeln()

    def _write_parameters(self, parameters: VCardParameters) -> str:
        out: list[str] = []
        if self.version is VCardVersion.V2_1:
            for name, values in parameters.grouped():
                for value in values:
                    sanitized = _sanitize_old_value(value)
                    if name == VCardParameters.TYPE:
                        out.append(f";{sanitized.upper()}")
                    else:
                        out.append(f";{name}={sanitized}")
            return "".join(out)

        for name, values in parameters.grouped():
            written = ",".join(self._sanitize_new_value(value) for value in values)
            out.append(f";{name}={written}")
        return "".join(out)

    def _sanitize_new_value(self, value: str) -> str:
        if self.caret_encoding:
            value = value.replace("^", "^^")
            value = _NEWLINES.sub("^n", value)
            value = value.replace('"', "^'")
        else:
            value = value.replace('"', "'")
            value = value.replace("\\", "\\\\")
            if self.version is VCardVersion.V3_0:
                value = _NEWLINES.sub(" ", value)
            else:
                value = _NEWLINES.sub(r"\\n", value)
        if any(ch in value for ch in ",:;"):
            value = f'"{value}"'
        return value


def _sanitize_old_value(value: str) -> str:
    value = _NEWLINES.sub(" ", value)
    cleaned: list[str] = []
    for ch in value:
        if ch in _INVALID_OLD_PARAM_CHARS or (ord(ch) < 32 and ch != "\t") or ord(ch) == 127:
            continue
        if ch in "\\;":
            cleaned.append("\\")
        cleaned.append(ch)
    return "".join(cleaned)
