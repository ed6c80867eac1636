"""Property elements of the XML syntax (xCard, RFC 6351).

A property element holds typed value children::

    <adr>
      <parameters>...</parameters>
      <pobox/><ext/><street>123 Main St</street>...
    </adr>

``XCardElement`` reads and appends those children in the xCard
namespace, using ``xml.etree.ElementTree``.

Python 3.13+.
"""

from __future__ import annotations

from collections.abc import Iterable
from xml.etree import ElementTree as ET

from vcardengine.constants import XCARD_NAMESPACE

__all__ = ["PARAMETERS", "XCardElement", "qualified", "split_tag"]

# Local name of the element listing a property's parameters.
PARAMETERS = "parameters"


def qualified(local: str, namespace: str = XCARD_NAMESPACE) -> str:
    """ElementTree tag for a name in a namespace."""
    return f"{{{namespace}}}{local}"


def split_tag(tag: str) -> tuple[str | None, str]:
    """Split an ElementTree tag into (namespace, local name).

    Example:
        >>> split_tag("{urn:ietf:params:xml:ns:vcard-4.0}adr")
        ('urn:ietf:params:xml:ns:vcard-4.0', 'adr')
    """
    if tag.startswith("{"):
        namespace, _, local = tag[1:].partition("}")
        return namespace, local
    return None, tag


class XCardElement:
    """View of one property element.

    Attributes:
        element: Wrapped element
        namespace: Namespace of value children
    """

    __slots__ = ("element", "namespace")

    def __init__(self, element: ET.Element, namespace: str = XCARD_NAMESPACE) -> None:
        """Wrap a property element."""
        self.element = element
        self.namespace = namespace

    def _children(self) -> list[ET.Element]:
        return [child for child in self.element if child.tag != qualified(PARAMETERS, self.namespace)]

    def first(self, *names: str) -> str | None:
        """Text of the first child named any of ``names``, tried in order."""
        for name in names:
            child = self.element.find(qualified(name, self.namespace))
            if child is not None:
                return child.text or ""
        return None

    def all(self, name: str) -> list[str]:
        """Text of every child with the given name."""
        return [child.text or "" for child in self.element.iterfind(qualified(name, self.namespace))]

    def first_value(self) -> tuple[str, str] | None:
        """(local name, text) of the first value child in the namespace."""
        for child in self._children():
            namespace, local = split_tag(child.tag)
            if namespace == self.namespace:
                return local, child.text or ""
        return None

    def text(self) -> str:
        """Text content of the element, parameters excluded."""
        parts = [self.element.text or ""]
        for child in self._children():
            parts.append("".join(child.itertext()))
            parts.append(child.tail or "")
        return "".join(parts)

    def append(self, name: str, value: str | None) -> ET.Element:
        """Append one value child."""
        child = ET.SubElement(self.element, qualified(name, self.namespace))
        child.text = value or None
        return child

    def append_all(self, name: str, values: Iterable[str]) -> None:
        """Append one child per value, or one empty child if there are none."""
        values = list(values)
        if not values:
            self.append(name, "")
            return
        for value in values:
            self.append(name, value)
