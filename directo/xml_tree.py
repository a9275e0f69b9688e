# directo/xml_tree.py
"""
Immutable tagged tree built from XML text.

Provides:
- XmlNode: frozen (tag, attributes, children, text) value
- parse_xml(): text -> XmlNode using xml.etree.ElementTree

Names keep the prefix written in the document: <p:transport> has tag
'p:transport', xml:lang stays 'xml:lang'. Names in a default namespace
are unprefixed.
"""

import io
import xml.etree.ElementTree as ElT
from dataclasses import dataclass
from typing import Tuple, Optional, Dict, Iterator

XML_NAMESPACE = 'http://www.w3.org/XML/1998/namespace'


def qualified_name(name: str, prefixes: Dict[str, str]) -> str:
    """Turn an ElementTree '{uri}local' name back into 'prefix:local'."""
    if not name.startswith('{'):
        return name
    uri, local = name[1:].split('}', 1)
    prefix = prefixes.get(uri, '')
    return f"{prefix}:{local}" if prefix else local


@dataclass(frozen=True)
class XmlNode:
    """
    One XML element.

    Attributes:
        tag: Qualified element name (case preserved)
        attributes: (name, value) pairs in document order
        children: Child elements in document order (text nodes excluded)
        text: Full text content - own text plus all descendant text
    """

    tag: str
    attributes: Tuple[Tuple[str, str], ...] = ()
    children: Tuple['XmlNode', ...] = ()
    text: str = ''

    @property
    def attrib(self) -> Dict[str, str]:
        return dict(self.attributes)

    def has_attribute(self, name: str) -> bool:
        return any(key == name for key, _ in self.attributes)

    def get(self, name: str, default: Optional[str] = None) -> Optional[str]:
        for key, value in self.attributes:
            if key == name:
                return value
        return default

    def iter(self) -> Iterator['XmlNode']:
        """This node and every descendant, in document order."""
        yield self
        for child in self.children:
            yield from child.iter()

    @classmethod
    def from_element(cls, element: ElT.Element,
                     prefixes: Optional[Dict[str, str]] = None) -> 'XmlNode':
        """
        Args:
            element: ElementTree element
            prefixes: Namespace URI -> prefix; URIs not listed lose their prefix
        """
        if prefixes is None:
            prefixes = {XML_NAMESPACE: 'xml'}
        return cls(
            tag=qualified_name(element.tag, prefixes),
            attributes=tuple((qualified_name(k, prefixes), v) for k, v in element.attrib.items()),
            children=tuple(cls.from_element(child, prefixes) for child in element
                           if isinstance(child.tag, str)),
            text=''.join(element.itertext()),
        )


def parse_xml(text: str) -> XmlNode:
    """
    Parse a complete XML document and return its root element.

    A URI bound to several prefixes is shown with the first one declared.

    Raises:
        xml.etree.ElementTree.ParseError: If the text is not well-formed
    """
    prefixes = {XML_NAMESPACE: 'xml'}
    events = ElT.iterparse(io.StringIO(text), events=('start-ns',))
    for _event, (prefix, uri) in events:
        prefixes.setdefault(uri, prefix)
    return XmlNode.from_element(events.root, prefixes)
