"""Property elements of the HTML microformat (hCard).

Values are extracted from BeautifulSoup elements following the hCard
value rules: ``abbr[title]`` wins, then ``value``-classed descendants,
then the element text without ``type``-classed descendants, with
``<br>`` read as a line break and ``<del>`` ignored.

Python 3.13+.
"""

from __future__ import annotations

import re
from urllib.parse import urljoin

from bs4 import Comment, NavigableString, Tag

__all__ = ["HCardElement", "class_names"]

_WHITESPACE = re.compile(r"\s+")


def class_names(tag: Tag) -> list[str]:
    """Lower-cased CSS classes of an element."""
    classes = tag.get("class") or []
    if isinstance(classes, str):
        classes = classes.split()
    return [name.lower() for name in classes]


def _has_class(tag: Tag, name: str) -> bool:
    return name in class_names(tag)


def _collect_text(tag: Tag, out: list[str]) -> None:
    for node in tag.children:
        if isinstance(node, Tag):
            if _has_class(node, "type") or node.name == "del":
                continue
            if node.name == "br":
                out.append("\n")
                continue
            _collect_text(node, out)
        elif isinstance(node, NavigableString) and not isinstance(node, Comment):
            out.append(_WHITESPACE.sub(" ", str(node)))


def _value_of(tag: Tag) -> str:
    if tag.name == "abbr" and tag.get("title"):
        return str(tag["title"]).strip()

    value_tags = [found for found in tag.find_all(True) if _has_class(found, "value")]
    out: list[str] = []
    if value_tags:
        for found in value_tags:
            # Nested value elements are covered by their outermost ancestor.
            if any(parent in value_tags for parent in found.parents):
                continue
            if found.name == "abbr" and found.get("title"):
                out.append(str(found["title"]))
            else:
                _collect_text(found, out)
    else:
        _collect_text(tag, out)
    return "".join(out).strip()


class HCardElement:
    """View of one property-classed element.

    Attributes:
        element: Wrapped BeautifulSoup element
        page_url: URL of the page, for resolving relative links
    """

    __slots__ = ("element", "page_url")

    def __init__(self, element: Tag, page_url: str | None = None) -> None:
        """Wrap an element."""
        self.element = element
        self.page_url = page_url

    @property
    def tag_name(self) -> str:
        """Lower-cased tag name."""
        return (self.element.name or "").lower()

    def classes(self) -> list[str]:
        """Lower-cased CSS classes."""
        return class_names(self.element)

    def attr(self, name: str) -> str:
        """Attribute value, "" if absent."""
        value = self.element.get(name)
        if value is None:
            return ""
        if isinstance(value, list):
            return " ".join(value)
        return str(value)

    def abs_url(self, name: str) -> str:
        """Attribute value resolved against the page URL, "" if absent."""
        value = self.attr(name)
        if value and self.page_url:
            return urljoin(self.page_url, value)
        return value

    def value(self) -> str:
        """The element's hCard value."""
        return _value_of(self.element)

    def all_values(self, class_name: str) -> list[str]:
        """Values of every descendant with the given class."""
        return [
            _value_of(found)
            for found in self.element.find_all(True)
            if _has_class(found, class_name)
        ]

    def first_value(self, class_name: str) -> str | None:
        """Value of the first descendant with the given class, or None."""
        for found in self.element.find_all(True):
            if _has_class(found, class_name):
                return _value_of(found)
        return None

    def types(self) -> list[str]:
        """Lower-cased values of ``type``-classed descendants."""
        return [value.lower() for value in self.all_values("type")]
