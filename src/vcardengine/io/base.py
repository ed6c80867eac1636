"""Reader and writer plumbing shared by every syntax.

Readers collect per-property problems as warnings and return whatever
they could make of each record. Writers apply the record-level policy
(PRODID injection, version-strict filtering, LABEL synthesis) before
handing each property to its scribe.

Thread Safety:
    Readers and writers hold per-call state (warnings, nesting depth) and
    must not be shared between threads. Several instances may share one
    ScribeIndex.

Python 3.13+.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Iterator
from importlib.metadata import PackageNotFoundError, version as package_version

from vcardengine.constants import MAX_DEPTH, PRODUCT_NAME
from vcardengine.core import DepthGuard
from vcardengine.diagnostics import Diagnostic, VCardWriteError
from vcardengine.diagnostics.templates import ErrorTemplate
from vcardengine.enums import VCardVersion
from vcardengine.model import (
    Address,
    Label,
    ProductId,
    RawProperty,
    VCard,
    VCardParameters,
    VCardProperty,
)
from vcardengine.scribes import (
    Failed,
    ParseContext,
    ScribeIndex,
    Skipped,
    VCardPropertyScribe,
)

__all__ = [
    "StreamReader",
    "StreamWriter",
    "assign_labels",
    "product_id",
]

logger = logging.getLogger(__name__)


def product_id() -> str:
    """PRODID value written by the writers."""
    try:
        return f"{PRODUCT_NAME} {package_version(PRODUCT_NAME)}"
    except PackageNotFoundError:
        return PRODUCT_NAME


def assign_labels(record: VCard, labels: list[Label]) -> None:
    """Attach LABEL properties to the addresses they describe.

    A label belongs to the first address without a label whose TYPE
    values are the same (ignoring case and order). Labels that match no
    address stay in the record as orphan LABEL properties.
    """
    addresses = record.get_properties(Address)
    for label in labels:
        wanted = {value.lower() for value in label.types}
        for address in addresses:
            if address.label is None and {value.lower() for value in address.types} == wanted:
                address.label = label.value
                logger.debug("Paired LABEL with ADR of types %s", sorted(wanted))
                break
        else:
            record.add(label)


# ============================================================================
# READER
# ============================================================================


class StreamReader(ABC):
    """Base of the record readers.

    Attributes:
        index: Scribes consulted for each property
        warnings: Diagnostics of the last ``read_next`` (or ``read_all``)
    """

    __slots__ = ("_guard", "index", "warnings")

    def __init__(
        self,
        *,
        index: ScribeIndex | None = None,
        max_depth: int = MAX_DEPTH,
        guard: DepthGuard | None = None,
    ) -> None:
        """Initialize reader.

        Args:
            index: Scribe registry (default: built-in scribes only)
            max_depth: Maximum embedded-record nesting
            guard: Depth guard shared with an enclosing reader
        """
        self.index = index if index is not None else ScribeIndex()
        self._guard = guard if guard is not None else DepthGuard(max_depth)
        self.warnings: list[Diagnostic] = []

    def register_scribe(self, scribe: VCardPropertyScribe[VCardProperty]) -> None:
        """Register an extension scribe with this reader's index."""
        self.index.register(scribe)

    def read_next(self) -> VCard | None:
        """Read the next record, or None when the input is exhausted.

        Raises:
            VCardSyntaxError: If the stream framing is broken
            DepthLimitExceededError: If embedded records nest too deeply
        """
        self.warnings = []
        return self._read_next()

    def read_all(self) -> list[VCard]:
        """Read every remaining record; ``warnings`` then covers them all."""
        records: list[VCard] = []
        collected: list[Diagnostic] = []
        while (record := self.read_next()) is not None:
            records.append(record)
            collected.extend(self.warnings)
        self.warnings = collected
        return records

    def __iter__(self) -> Iterator[VCard]:
        """Iterate over the remaining records."""
        while (record := self.read_next()) is not None:
            yield record

    @abstractmethod
    def _read_next(self) -> VCard | None:
        """Read one record into a fresh warning list."""

    # ------------------------------------------------------------------
    # Helpers for subclasses
    # ------------------------------------------------------------------

    def _context(
        self,
        version: VCardVersion,
        *,
        line_number: int | None = None,
        property_name: str | None = None,
    ) -> ParseContext:
        return ParseContext(
            version,
            self.warnings,
            line_number=line_number,
            property_name=property_name,
        )

    @staticmethod
    def _report(outcome: Skipped | Failed, context: ParseContext) -> None:
        """Turn a skipped or failed parse into a warning."""
        if isinstance(outcome, Skipped):
            context.add_warning(ErrorTemplate.property_skipped(outcome.reason))
        else:
            context.add_warning(ErrorTemplate.property_unparseable(outcome.reason))


# ============================================================================
# WRITER
# ============================================================================


class StreamWriter(ABC):
    """Base of the record writers.

    Attributes:
        index: Scribes consulted for each property
        version_strict: Leave out kinds the target version does not define
        add_prodid: Replace any PRODID with this library's
        warnings: Diagnostics of the last ``write``
    """

    __slots__ = ("_guard", "add_prodid", "index", "version_strict", "warnings")

    def __init__(
        self,
        *,
        index: ScribeIndex | None = None,
        version_strict: bool = True,
        add_prodid: bool = True,
        max_depth: int = MAX_DEPTH,
        guard: DepthGuard | None = None,
    ) -> None:
        """Initialize writer."""
        self.index = index if index is not None else ScribeIndex()
        self.version_strict = version_strict
        self.add_prodid = add_prodid
        self._guard = guard if guard is not None else DepthGuard(max_depth)
        self.warnings: list[Diagnostic] = []

    @property
    @abstractmethod
    def target_version(self) -> VCardVersion:
        """Version the output conforms to."""

    def register_scribe(self, scribe: VCardPropertyScribe[VCardProperty]) -> None:
        """Register an extension scribe with this writer's index."""
        self.index.register(scribe)

    def write(self, vcard: VCard) -> None:
        """Write one record.

        Raises:
            VCardWriteError: If a property has no scribe or a name is illegal
            DepthLimitExceededError: If embedded records nest too deeply
        """
        self.warnings = []
        self._write(vcard, self._prepare(vcard))

    def write_all(self, vcards: list[VCard]) -> None:
        """Write several records; ``warnings`` then covers them all."""
        collected: list[Diagnostic] = []
        for vcard in vcards:
            self.write(vcard)
            collected.extend(self.warnings)
        self.warnings = collected

    @abstractmethod
    def _write(self, vcard: VCard, properties: list[VCardProperty]) -> None:
        """Write the prepared property list of a record."""

    # ------------------------------------------------------------------
    # Policy
    # ------------------------------------------------------------------

    def _warn(self, diagnostic: Diagnostic, prop: VCardProperty | None = None) -> None:
        name = None if prop is None else self._name_of(prop)
        located = diagnostic.located(line=None, property_name=name)
        logger.warning("%s", located)
        self.warnings.append(located)

    def _name_of(self, prop: VCardProperty) -> str:
        scribe = self.index.get_property_scribe_for(prop)
        return type(prop).__name__ if scribe is None else scribe.name

    def _scribe(self, prop: VCardProperty) -> VCardPropertyScribe[VCardProperty]:
        """Scribe of a property.

        Raises:
            VCardWriteError: If the property class has no registered scribe
        """
        scribe = self.index.get_property_scribe_for(prop)
        if scribe is None:
            raise VCardWriteError(ErrorTemplate.no_scribe(type(prop).__name__))
        return scribe

    def _prepare(self, vcard: VCard) -> list[VCardProperty]:
        """Apply the record-level write policy.

        - PRODID first (``X-PRODID`` in 2.1), replacing the record's own
        - kinds the target version lacks dropped (version-strict mode)
        - a LABEL after each labelled address for 2.1 and 3.0
        """
        version = self.target_version
        prepared: list[VCardProperty] = []

        if self.add_prodid:
            if version is VCardVersion.V2_1:
                prepared.append(RawProperty(name="X-PRODID", value=product_id()))
            else:
                prepared.append(ProductId(product_id()))

        for prop in vcard:
            if self.add_prodid and isinstance(prop, ProductId):
                continue
            self._scribe(prop)
            if self.version_strict and not prop.is_supported_by(version):
                self._warn(ErrorTemplate.unsupported_by_version(self._name_of(prop), version), prop)
                continue
            prepared.append(prop)

            if isinstance(prop, Address) and prop.label is not None and version.is_legacy:
                label = Label(prop.label)
                for value in prop.types:
                    label.parameters.add(VCardParameters.TYPE, value)
                prepared.append(label)
                logger.debug("Synthesized LABEL for ADR of types %s", prop.types)

        return prepared
