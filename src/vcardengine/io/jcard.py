"""JSON vCard syntax (jCard, RFC 7095).

A record is ``["vcard", [property, ...]]`` and a property is
``[name, {params}, type, value...]``. Several records are read from a
plain array of records or a ``["vcardstream", ...]`` wrapper, and
written as the latter.

jCard is always version 4.0: the VERSION property is checked but not
stored, and embedded records cannot be expressed.

Python 3.13+.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Iterator
from types import TracebackType
from typing import Any, TextIO

from vcardengine.constants import MAX_DEPTH
from vcardengine.core import DepthGuard
from vcardengine.diagnostics import VCardSyntaxError
from vcardengine.diagnostics.templates import ErrorTemplate
from vcardengine.enums import VCardVersion, data_type_of
from vcardengine.model import VCard, VCardParameters, VCardProperty
from vcardengine.scribes import (
    Decoded,
    Embedded,
    EmbeddedRecord,
    ScribeIndex,
    Skipped,
    WriteContext,
)
from vcardengine.syntax import JCardValue
from vcardengine.syntax.jcard import JsonValue

from .base import StreamReader, StreamWriter

__all__ = ["JCardReader", "JCardWriter"]

logger = logging.getLogger(__name__)

_GROUP = "group"
_UNKNOWN = "unknown"
_SYNTAX = "jCard"


def _framing_error(detail: str) -> VCardSyntaxError:
    return VCardSyntaxError(ErrorTemplate.malformed_document(_SYNTAX, detail))


def _record_arrays(document: Any) -> list[list[Any]]:
    """Property lists of every record in a parsed document.

    Raises:
        VCardSyntaxError: If the document is not a record, a record array
            or a vcardstream
    """
    if not isinstance(document, list) or not document:
        raise _framing_error("expected a non-empty array")

    match document[0]:
        case "vcard":
            items: list[Any] = [document]
        case "vcardstream":
            rest = document[1:]
            # ["vcardstream", [record, ...]] or ["vcardstream", record, ...]
            if len(rest) == 1 and isinstance(rest[0], list) and rest[0] and rest[0][0] != "vcard":
                items = rest[0]
            else:
                items = rest
        case _:
            items = document

    records: list[list[Any]] = []
    for item in items:
        if (
            not isinstance(item, list)
            or len(item) < 2
            or item[0] != "vcard"
            or not isinstance(item[1], list)
        ):
            raise _framing_error('each record must be ["vcard", [properties]]')
        records.append(item[1])
    return records


class JCardReader(StreamReader):
    """Reads records from a jCard document.

    The document is parsed on the first read.

    Example:
        >>> reader = JCardReader('["vcard",[["fn",{},"text","John Doe"]]]')
        >>> reader.read_next().formatted_name
        'John Doe'
    """

    __slots__ = ("_records", "_source")

    def __init__(
        self,
        source: str | TextIO | list[Any],
        *,
        index: ScribeIndex | None = None,
        max_depth: int = MAX_DEPTH,
        guard: DepthGuard | None = None,
    ) -> None:
        """Initialize reader.

        Args:
            source: JSON text, a text stream, or an already decoded document
            index: Scribe registry
            max_depth: Maximum embedded-record nesting
            guard: Depth guard shared with an enclosing reader
        """
        super().__init__(index=index, max_depth=max_depth, guard=guard)
        self._source = source
        self._records: Iterator[list[Any]] | None = None

    def _load(self) -> Iterator[list[Any]]:
        source = self._source
        if isinstance(source, list):
            document: Any = source
        else:
            text = source if isinstance(source, str) else source.read()
            try:
                document = json.loads(text)
            except json.JSONDecodeError as exc:
                raise _framing_error(str(exc)) from exc
        return iter(_record_arrays(document))

    def _read_next(self) -> VCard | None:
        if self._records is None:
            self._records = self._load()
        properties = next(self._records, None)
        if properties is None:
            return None

        record = VCard(version=VCardVersion.V4_0)
        seen_version = False
        for item in properties:
            if (
                not isinstance(item, list)
                or len(item) < 4
                or not isinstance(item[0], str)
                or not isinstance(item[1], dict)
                or not isinstance(item[2], str)
            ):
                raise _framing_error("each property must be [name, {params}, type, value...]")
            name, params, type_name = item[0], item[1], item[2]
            value = JCardValue(tuple(item[3:]))

            if name.lower() == "version":
                seen_version = True
                if value.as_single() != str(VCardVersion.V4_0):
                    context = self._context(VCardVersion.V4_0, property_name="VERSION")
                    context.add_warning(ErrorTemplate.version_mismatch(value.as_single()))
                continue

            self._read_property(record, name, params, type_name, value)

        if not seen_version:
            self._context(VCardVersion.V4_0).add_warning(ErrorTemplate.version_missing())
        return record

    def _read_property(
        self,
        record: VCard,
        name: str,
        params: dict[str, JsonValue],
        type_name: str,
        value: JCardValue,
    ) -> None:
        context = self._context(VCardVersion.V4_0, property_name=name.upper())
        group: str | None = None
        parameters = VCardParameters()
        for key, raw in params.items():
            if key.lower() == _GROUP:
                group = str(raw)
                continue
            for item in raw if isinstance(raw, list) else [raw]:
                parameters.add(key.upper(), str(item))

        data_type = None if type_name.lower() == _UNKNOWN else data_type_of(type_name)
        scribe = self.index.scribe_for_name(name)
        outcome = scribe.parse_json(value, data_type, parameters, context)
        match outcome:
            case Decoded(property=prop):
                prop.parameters = parameters
                prop.group = group
                record.add(prop)
            case Embedded():
                context.add_warning(ErrorTemplate.embedded_record_unsupported(_SYNTAX))
            case _:
                self._report(outcome, context)


# ============================================================================
# WRITER
# ============================================================================


class JCardWriter(StreamWriter):
    """Writes records as a jCard document.

    Records are collected until ``getvalue`` or ``close``; one record is
    written as ``["vcard", ...]``, several as ``["vcardstream", ...]``.

    Example:
        >>> writer = JCardWriter(add_prodid=False)
        >>> writer.write(card)
        >>> writer.getvalue()
        '["vcard", [["version", {}, "text", "4.0"], ["fn", {}, "text", "John Doe"]]]'
    """

    __slots__ = ("_records", "indent", "sink")

    def __init__(
        self,
        sink: TextIO | None = None,
        *,
        version_strict: bool = True,
        add_prodid: bool = True,
        indent: int | None = None,
        index: ScribeIndex | None = None,
        max_depth: int = MAX_DEPTH,
    ) -> None:
        """Initialize writer.

        Args:
            sink: Text stream receiving the document on ``close``
            version_strict: Leave out kinds 4.0 does not define
            add_prodid: Replace any PRODID with this library's
            indent: Pretty-print indentation (default: compact)
            index: Scribe registry
            max_depth: Maximum embedded-record nesting
        """
        super().__init__(
            index=index,
            version_strict=version_strict,
            add_prodid=add_prodid,
            max_depth=max_depth,
        )
        self.sink = sink
        self.indent = indent
        self._records: list[JsonValue] = []

    @property
    def target_version(self) -> VCardVersion:
        return VCardVersion.V4_0

    def _write(self, vcard: VCard, properties: list[VCardProperty]) -> None:
        context = WriteContext(VCardVersion.V4_0, vcard, include_trailing_semicolons=True)
        written: list[JsonValue] = [["version", {}, "text", str(VCardVersion.V4_0)]]

        for prop in properties:
            scribe = self._scribe(prop)
            outcome = scribe.write_json(prop)
            if isinstance(outcome, Skipped):
                self._warn(ErrorTemplate.property_not_written(outcome.reason), prop)
                continue
            if isinstance(outcome, EmbeddedRecord):
                self._warn(ErrorTemplate.embedded_record_rejected(_SYNTAX), prop)
                continue

            parameters = scribe.prepare_parameters(prop, context)
            parameters.remove_all(VCardParameters.VALUE)
            params: dict[str, JsonValue] = {}
            if prop.group is not None:
                params[_GROUP] = prop.group
            for name, values in parameters.grouped():
                params[name.lower()] = values[0] if len(values) == 1 else list(values)

            data_type = scribe.data_type(prop, VCardVersion.V4_0)
            type_name = _UNKNOWN if data_type is None else str(data_type)
            written.append([scribe.name.lower(), params, type_name, *outcome.values])

        self._records.append(["vcard", written])

    def document(self) -> JsonValue:
        """The JSON document of every record written so far."""
        if len(self._records) == 1:
            return self._records[0]
        return ["vcardstream", *self._records]

    def getvalue(self) -> str:
        """Serialize every record written so far."""
        return json.dumps(self.document(), ensure_ascii=False, indent=self.indent)

    def close(self) -> None:
        """Write the document to the sink, if there is one."""
        if self.sink is not None:
            self.sink.write(self.getvalue())
            logger.debug("Wrote %d jCard record(s)", len(self._records))

    def __enter__(self) -> JCardWriter:
        """Enter context manager."""
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        """Write the document unless the block raised."""
        if exc_type is None:
            self.close()
