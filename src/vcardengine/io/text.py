"""Line-oriented vCard syntax (2.1, 3.0, 4.0).

Reading:
    >>> reader = VCardReader("BEGIN:VCARD\\r\\nVERSION:3.0\\r\\nFN:John Doe\\r\\nEND:VCARD\\r\\n")
    >>> reader.read_next().formatted_name
    'John Doe'

Writing:
    >>> writer = VCardWriter(version=VCardVersion.V4_0, add_prodid=False)
    >>> writer.write(card)
    >>> text = writer.getvalue()

Embedded records (AGENT) are read and written in both legal shapes: a
nested BEGIN/END block directly after the property (2.1) and an escaped
inline value (3.0). 4.0 has no embedded records.

Python 3.13+.
"""

from __future__ import annotations

import codecs
import logging
from dataclasses import dataclass, field
from typing import TextIO

from vcardengine.constants import DEFAULT_CHARSET, MAX_DEPTH
from vcardengine.core import DepthGuard
from vcardengine.diagnostics.templates import ErrorTemplate
from vcardengine.enums import (
    DataType,
    Encoding,
    VCardDataType,
    VCardVersion,
    data_type_of,
)
from vcardengine.model import Label, VCard, VCardParameters, VCardProperty
from vcardengine.scribes import (
    Decoded,
    Embedded,
    EmbeddedRecord,
    ParseContext,
    ScribeIndex,
    Skipped,
    VCardPropertyScribe,
    WriteContext,
)
from vcardengine.syntax import (
    FoldingConfig,
    VCardRawLine,
    VCardRawReader,
    VCardRawWriter,
    decode_quoted_printable,
    escape,
    unescape,
)

from .base import StreamReader, StreamWriter, assign_labels

__all__ = ["VCardReader", "VCardWriter"]

logger = logging.getLogger(__name__)

_DATE_VALUE_TYPES = frozenset({VCardDataType.DATE, VCardDataType.DATE_TIME, VCardDataType.TIME})


# ============================================================================
# READER
# ============================================================================


@dataclass(slots=True)
class _Frame:
    """One record under construction."""

    record: VCard
    labels: list[Label] = field(default_factory=list)


class VCardReader(StreamReader):
    """Reads records from the line-oriented syntax.

    Attributes:
        default_version: Parameter syntax assumed until a VERSION line
    """

    __slots__ = ("_raw", "default_version")

    def __init__(
        self,
        source: str | TextIO,
        *,
        index: ScribeIndex | None = None,
        caret_decoding: bool = True,
        version: VCardVersion = VCardVersion.V2_1,
        max_depth: int = MAX_DEPTH,
        guard: DepthGuard | None = None,
    ) -> None:
        """Initialize reader.

        Args:
            source: Document text or text stream
            index: Scribe registry
            caret_decoding: Decode caret escapes in 3.0/4.0 parameter values
            version: Version assumed before the first VERSION line
            max_depth: Maximum embedded-record nesting
            guard: Depth guard shared with an enclosing reader
        """
        super().__init__(index=index, max_depth=max_depth, guard=guard)
        self.default_version = version
        self._raw = VCardRawReader(source, version=version, caret_decoding=caret_decoding)

    @property
    def caret_decoding(self) -> bool:
        """Whether caret escapes are decoded."""
        return self._raw.caret_decoding

    def _read_next(self) -> VCard | None:
        root: VCard | None = None
        stack: list[_Frame] = []
        pending: Embedded | None = None
        entered = 0

        try:
            while True:
                line = self._raw.read_line()
                if line is None:
                    break
                line_number = self._raw.line_number

                if isinstance(line, str):
                    if stack:
                        context = self._context(self._raw.version, line_number=line_number)
                        context.add_warning(ErrorTemplate.malformed_line(line))
                    continue

                name = line.name.upper()
                if name == "BEGIN" and line.value.strip().upper() == "VCARD":
                    if stack:
                        self._guard.enter()
                        entered += 1
                    else:
                        self._raw.version = self.default_version
                    record = VCard(version=self._raw.version)
                    if stack and pending is None:
                        context = self._context(
                            stack[-1].record.version,
                            line_number=line_number,
                            property_name="BEGIN",
                        )
                        context.add_warning(ErrorTemplate.embedded_record_orphaned())
                    stack.append(_Frame(record))
                    if root is None:
                        root = record
                    if pending is not None:
                        pending.inject(record)
                        pending = None
                    continue

                if not stack:
                    continue

                if name == "VERSION":
                    self._read_version(line, stack[-1].record, line_number)
                    continue

                if name == "END" and line.value.strip().upper() == "VCARD":
                    frame = stack.pop()
                    assign_labels(frame.record, frame.labels)
                    if not stack:
                        break
                    self._guard.leave()
                    entered -= 1
                    continue

                context = self._context(
                    stack[-1].record.version,
                    line_number=line_number,
                    property_name=name,
                )
                if pending is not None:
                    pending.inject(None)
                    pending = None
                    context.add_warning(ErrorTemplate.embedded_record_missing())

                pending = self._read_property(line, stack[-1], context)

            if pending is not None:
                pending.inject(None)
                self._context(self._raw.version).add_warning(ErrorTemplate.embedded_record_missing())
            # Records left open by a missing END are still returned.
            for frame in reversed(stack):
                assign_labels(frame.record, frame.labels)
        finally:
            for _ in range(entered):
                self._guard.leave()

        return root

    def _read_version(self, line: VCardRawLine, record: VCard, line_number: int) -> None:
        version = VCardVersion.parse(line.value)
        if version is None:
            context = self._context(record.version, line_number=line_number, property_name="VERSION")
            context.add_warning(ErrorTemplate.invalid_version(line.value))
            return
        self._raw.version = version
        record.version = version

    def _read_property(
        self,
        line: VCardRawLine,
        frame: _Frame,
        context: ParseContext,
    ) -> Embedded | None:
        """Parse one property into the frame's record.

        Returns:
            The embedded-record outcome if a nested BEGIN must follow
        """
        parameters = line.parameters
        value = self._decode_quoted_printable(line.value, parameters, context)
        scribe = self.index.scribe_for_name(line.name)

        data_type: DataType | None
        declared = parameters.remove_all(VCardParameters.VALUE)
        if declared:
            data_type = data_type_of(declared[0])
        else:
            data_type = scribe.default_data_type(context.version)

        outcome = scribe.parse_text(value, data_type, parameters, context)
        match outcome:
            case Decoded(property=prop):
                prop.parameters = parameters
                prop.group = line.group
                if isinstance(prop, Label):
                    frame.labels.append(prop)
                else:
                    frame.record.add(prop)
            case Embedded(property=prop):
                prop.parameters = parameters
                prop.group = line.group
                frame.record.add(prop)
                if not value or context.version is VCardVersion.V2_1:
                    return outcome
                self._read_inline(value, outcome, context)
            case _:
                self._report(outcome, context)
                logger.debug("Dropped %s at line %s", line.name, context.line_number)
        return None

    def _read_inline(self, value: str, outcome: Embedded, context: ParseContext) -> None:
        """Read a record carried as an escaped property value."""
        nested = VCardReader(
            unescape(value),
            index=self.index,
            caret_decoding=self.caret_decoding,
            version=self.default_version,
            guard=self._guard,
        )
        with self._guard:
            record = nested.read_next()
        for warning in nested.warnings:
            context.add_warning(ErrorTemplate.nested_record_problem(warning))
        if record is not None:
            outcome.inject(record)

    @staticmethod
    def _decode_quoted_printable(
        value: str,
        parameters: VCardParameters,
        context: ParseContext,
    ) -> str:
        """Decode a quoted-printable value and drop ENCODING and CHARSET."""
        if parameters.encoding is not Encoding.QUOTED_PRINTABLE:
            return value
        parameters.set_encoding(None)
        charsets = parameters.remove_all(VCardParameters.CHARSET)

        charset = DEFAULT_CHARSET
        if charsets:
            try:
                charset = codecs.lookup(charsets[0]).name
            except LookupError:
                context.add_warning(ErrorTemplate.unknown_charset(charsets[0], DEFAULT_CHARSET))

        try:
            return decode_quoted_printable(value, charset)
        except (UnicodeError, ValueError):
            context.add_warning(ErrorTemplate.quoted_printable_undecodable(charset))
            return value


# ============================================================================
# WRITER
# ============================================================================


class VCardWriter(StreamWriter):
    """Writes records in the line-oriented syntax.

    Attributes:
        include_trailing_semicolons: Keep trailing empty structured
            components (None: only for 4.0)
    """

    __slots__ = ("_raw", "include_trailing_semicolons")

    def __init__(
        self,
        sink: TextIO | None = None,
        *,
        version: VCardVersion = VCardVersion.V3_0,
        version_strict: bool = True,
        add_prodid: bool = True,
        include_trailing_semicolons: bool | None = None,
        caret_encoding: bool = False,
        folding: FoldingConfig | None = None,
        index: ScribeIndex | None = None,
        max_depth: int = MAX_DEPTH,
        guard: DepthGuard | None = None,
    ) -> None:
        """Initialize writer.

        Args:
            sink: Text stream (default: in-memory buffer, see ``getvalue``)
            version: Target version
            version_strict: Leave out kinds the target version does not define
            add_prodid: Replace any PRODID with this library's
            include_trailing_semicolons: Keep trailing empty structured
                components (default: only for 4.0)
            caret_encoding: Caret-encode 3.0/4.0 parameter values
            folding: Folding configuration (default: 75 columns, one space)
            index: Scribe registry
            max_depth: Maximum embedded-record nesting
            guard: Depth guard shared with an enclosing writer
        """
        super().__init__(
            index=index,
            version_strict=version_strict,
            add_prodid=add_prodid,
            max_depth=max_depth,
            guard=guard,
        )
        self.include_trailing_semicolons = include_trailing_semicolons
        self._raw = VCardRawWriter(
            sink,
            version=version,
            folding=folding,
            caret_encoding=caret_encoding,
        )

    @property
    def target_version(self) -> VCardVersion:
        return self._raw.version

    @property
    def caret_encoding(self) -> bool:
        """Whether 3.0/4.0 parameter values are caret-encoded."""
        return self._raw.caret_encoding

    def getvalue(self) -> str:
        """Return everything written so far (in-memory sink only)."""
        return self._raw.getvalue()

    def _write(self, vcard: VCard, properties: list[VCardProperty]) -> None:
        version = self.target_version
        trailing = self.include_trailing_semicolons
        if trailing is None:
            trailing = version is VCardVersion.V4_0
        context = WriteContext(version, vcard, trailing)

        self._raw.write_begin()
        self._raw.write_version()

        for prop in properties:
            scribe = self._scribe(prop)
            outcome = scribe.write_text(prop, context)
            if isinstance(outcome, Skipped):
                self._warn(ErrorTemplate.property_not_written(outcome.reason), prop)
                continue

            parameters = scribe.prepare_parameters(prop, context)
            if isinstance(outcome, EmbeddedRecord):
                self._write_embedded(prop, scribe, parameters, outcome.record)
                continue

            self._set_value_parameter(prop, scribe, parameters)
            if version is not VCardVersion.V2_1 and parameters.encoding is Encoding.QUOTED_PRINTABLE:
                parameters.set_encoding(None)
                parameters.remove_all(VCardParameters.CHARSET)

            self._raw.write_property(prop.group, scribe.name, parameters, outcome)

        self._raw.write_end()

    def _set_value_parameter(
        self,
        prop: VCardProperty,
        scribe: VCardPropertyScribe[VCardProperty],
        parameters: VCardParameters,
    ) -> None:
        """Write VALUE only when the data type differs from the default.

        A date, date-time or time value of a date-and-or-time property is
        implied by its shape and gets no VALUE either.
        """
        parameters.remove_all(VCardParameters.VALUE)
        version = self.target_version
        data_type = scribe.data_type(prop, version)
        if data_type is None:
            return
        default = scribe.default_data_type(version)
        if data_type == default:
            return
        if default == VCardDataType.DATE_AND_OR_TIME and data_type in _DATE_VALUE_TYPES:
            return
        logger.debug("Writing VALUE=%s for %s", data_type, scribe.name)
        parameters.replace(VCardParameters.VALUE, str(data_type))

    def _write_embedded(
        self,
        prop: VCardProperty,
        scribe: VCardPropertyScribe[VCardProperty],
        parameters: VCardParameters,
        record: VCard,
    ) -> None:
        match self.target_version:
            case VCardVersion.V2_1:
                self._raw.write_property(prop.group, scribe.name, parameters, "")
                add_prodid = self.add_prodid
                self.add_prodid = False
                try:
                    with self._guard:
                        self._write(record, self._prepare(record))
                finally:
                    self.add_prodid = add_prodid
            case VCardVersion.V3_0:
                nested = VCardWriter(
                    version=VCardVersion.V3_0,
                    version_strict=self.version_strict,
                    add_prodid=False,
                    include_trailing_semicolons=self.include_trailing_semicolons,
                    caret_encoding=self.caret_encoding,
                    folding=FoldingConfig(line_length=None),
                    index=self.index,
                    guard=self._guard,
                )
                with self._guard:
                    nested.write(record)
                self.warnings.extend(nested.warnings)
                self._raw.write_property(prop.group, scribe.name, parameters, escape(nested.getvalue()))
            case version:
                self._warn(ErrorTemplate.embedded_record_rejected(f"vCard {version}"), prop)
