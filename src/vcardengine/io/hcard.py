"""HTML microformat (hCard) parser.

Every element classed ``vcard`` that is not inside another one is a
record. Its descendants are scanned depth-first; each CSS class naming a
property kind is parsed by that kind's scribe. A nested ``vcard``
element is its own record: it is reached only through the property that
embeds it (``class="agent vcard"``), never by the enclosing scan.

hCard records are version 3.0. Reading only; there is no hCard writer.

Python 3.13+.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterator
from urllib.parse import urldefrag

from bs4 import BeautifulSoup, Tag

from vcardengine.constants import MAX_DEPTH
from vcardengine.core import DepthGuard
from vcardengine.diagnostics.templates import ErrorTemplate
from vcardengine.enums import VCardVersion
from vcardengine.model import Categories, Label, Nickname, Source, VCard, VCardProperty
from vcardengine.scribes import Decoded, Embedded, ParseContext, ScribeIndex
from vcardengine.syntax import HCardElement
from vcardengine.syntax.hcard import class_names

from .base import StreamReader, assign_labels

__all__ = ["HCardParser"]

logger = logging.getLogger(__name__)

_RECORD_CLASS = "vcard"
_MAILTO = re.compile(r"mailto:", re.IGNORECASE)
_TEL = re.compile(r"tel:", re.IGNORECASE)


def _outermost(elements: list[Tag]) -> list[Tag]:
    """Drop elements that sit inside another element of the list."""
    ids = {id(element) for element in elements}
    return [
        element
        for element in elements
        if not any(id(parent) in ids for parent in element.parents)
    ]


class HCardParser(StreamReader):
    """Reads records from an HTML page.

    Args:
        html: Page markup, or an already parsed BeautifulSoup tree/element
        page_url: Page URL; becomes a SOURCE property, resolves relative
            links, and a fragment restricts the search to that element

    Example:
        >>> parser = HCardParser('<div class="vcard"><span class="fn">John Doe</span></div>')
        >>> parser.read_next().formatted_name
        'John Doe'
    """

    __slots__ = (
        "_categories",
        "_elements",
        "_embedded",
        "_labels",
        "_nickname",
        "page_url",
    )

    def __init__(
        self,
        html: str | Tag,
        page_url: str | None = None,
        *,
        index: ScribeIndex | None = None,
        max_depth: int = MAX_DEPTH,
        guard: DepthGuard | None = None,
    ) -> None:
        """Initialize parser and locate the record elements."""
        super().__init__(index=index, max_depth=max_depth, guard=guard)
        self.page_url = page_url
        root = BeautifulSoup(html, "html.parser") if isinstance(html, str) else html

        if _RECORD_CLASS in class_names(root):
            elements = [root]
        else:
            search_under = root
            if page_url is not None:
                anchor = urldefrag(page_url).fragment
                found = root.find(id=anchor) if anchor else None
                if isinstance(found, Tag):
                    search_under = found
            elements = _outermost(
                [tag for tag in search_under.find_all(True) if _RECORD_CLASS in class_names(tag)]
            )
        logger.debug("Found %d hCard record element(s)", len(elements))

        self._elements: Iterator[Tag] = iter(elements)
        self._labels: list[Label] = []
        self._embedded: set[int] = set()
        self._nickname: Nickname | None = None
        self._categories: Categories | None = None

    def _read_next(self) -> VCard | None:
        element = next(self._elements, None)
        if element is None:
            return None

        self._labels = []
        self._nickname = None
        self._categories = None

        record = VCard(version=VCardVersion.V3_0)
        if self.page_url is not None:
            record.add(Source(self.page_url))

        for child in element.find_all(True, recursive=False):
            self._visit(child, record)

        assign_labels(record, self._labels)
        return record

    # ------------------------------------------------------------------
    # Scan
    # ------------------------------------------------------------------

    def _property_class(self, class_name: str, classes: list[str], element: Tag) -> str:
        """Map an hCard class name onto a property name."""
        if class_name == "url":
            href = str(element.get("href") or "")
            if _MAILTO.match(href) and "email" not in classes:
                return "email"
            if _TEL.match(href) and "tel" not in classes:
                return "tel"
        if class_name == "category":
            return "categories"
        return class_name

    def _visit(self, element: Tag, record: VCard) -> None:
        classes = class_names(element)
        visit_children = _RECORD_CLASS not in classes

        for class_name in classes:
            name = self._property_class(class_name, classes, element)
            scribe = self.index.get_property_scribe(name)
            if scribe is None:
                if not name.startswith("x-"):
                    continue
                scribe = self.index.scribe_for_name(name)

            context = self._context(VCardVersion.V3_0, property_name=scribe.name)
            outcome = scribe.parse_html(HCardElement(element, self.page_url), context)
            match outcome:
                case Decoded(property=prop):
                    self._add(prop, record)
                case Embedded(property=prop, inject=inject):
                    if id(element) in self._embedded:
                        continue
                    self._embedded.add(id(element))
                    inject(self._read_embedded(element, context))
                    record.add(prop)
                    visit_children = False
                case _:
                    self._report(outcome, context)

        if visit_children:
            for child in element.find_all(True, recursive=False):
                self._visit(child, record)

    def _add(self, prop: VCardProperty, record: VCard) -> None:
        """Add a property, merging NICKNAME and CATEGORIES values."""
        match prop:
            case Label():
                self._labels.append(prop)
            case Nickname():
                if self._nickname is None:
                    self._nickname = prop
                    record.add(prop)
                else:
                    self._nickname.values.extend(prop.values)
            case Categories():
                if self._categories is None:
                    self._categories = prop
                    record.add(prop)
                else:
                    self._categories.values.extend(prop.values)
            case _:
                record.add(prop)

    def _read_embedded(self, element: Tag, context: ParseContext) -> VCard | None:
        nested = HCardParser(element, self.page_url, index=self.index, guard=self._guard)
        with self._guard:
            record = nested.read_next()
        for warning in nested.warnings:
            context.add_warning(ErrorTemplate.nested_record_problem(warning))
        return record
