# directo/response_parser.py
"""
Generic XML response parser.

Converts Directo XMLCore responses into lists of plain dict records
without any endpoint-specific code:
- Element names become keys, attributes become '@'-prefixed keys
- Repeated child elements become lists
- A child of its own plural container (rows/row) is always a list
- The record envelope (flat, <transport> with or without container,
  single record) is inferred from the document shape
"""

import xml.etree.ElementTree as ElT
from typing import Dict, Any, List, Optional, Union

from directo.exceptions import MalformedInputError, ErrorContext
from directo.logger import setup_logger
from directo.xml_tree import XmlNode, parse_xml

logger = setup_logger()

Record = Dict[str, Any]

TRANSPORT_TAG = 'transport'


def is_plural_container(parent_name: str, child_name: str) -> bool:
    """
    Check whether parent_name is the English plural of child_name.

    rows/row, prices/price and addresses/address match; status/statu and
    class/clas do not.
    """
    if not parent_name.endswith('s') or parent_name.endswith('ss'):
        return False
    if parent_name[:-1] == child_name:
        return True
    return parent_name.endswith('es') and parent_name[:-2] == child_name


def _all_same_tag(nodes: List[XmlNode]) -> bool:
    return all(node.tag == nodes[0].tag for node in nodes)


class XmlResponseParser:
    """
    Parses a response body into a list of records.

    Instances hold only their two normalization flags and can be shared
    between threads.
    """

    def __init__(self, treat_empty_as_null: bool = True, trim_strings: bool = True):
        """
        Args:
            treat_empty_as_null: Convert empty strings to None
            trim_strings: Strip surrounding whitespace from values
        """
        self.treat_empty_as_null = treat_empty_as_null
        self.trim_strings = trim_strings

    def parse(self, xml: str, context: Optional[Union[ErrorContext, Dict[str, Any]]] = None) -> List[Record]:
        """
        Parse XML response into a list of records.

        Args:
            xml: Raw XML response
            context: Context attached to a raised error

        Returns:
            List of records; empty for empty or whitespace-only input

        Raises:
            MalformedInputError: If the XML is not well-formed
        """
        if not xml or not xml.strip():
            return []

        try:
            root = parse_xml(xml)
        except ElT.ParseError as e:
            line, column = getattr(e, 'position', (None, None))
            logger.debug(f"❌ Response is not well-formed XML: {e}")
            raise MalformedInputError(
                'Failed to parse XML response',
                xml_errors=[{
                    'level': 'FATAL',
                    'line': line,
                    'column': column,
                    'code': getattr(e, 'code', None),
                    'message': str(e),
                }],
                raw_xml=xml,
                context=ErrorContext.coerce(context),
            ) from e

        return [self.element_to_record(node) for node in self.extract_record_nodes(root)]

    @staticmethod
    def extract_record_nodes(root: XmlNode) -> List[XmlNode]:
        """
        Pick the elements that represent records.

        For a <transport> root:
        - several children, all with one tag: each child is a record
        - one child with 2+ children of one tag: the child is a container
        - one child otherwise: the child is the record
        - children with mixed tags: the first child is a container
        Any other root: each direct child is a record.
        """
        if root.tag != TRANSPORT_TAG:
            return list(root.children)

        children = list(root.children)
        if not children:
            return []

        if _all_same_tag(children):
            if len(children) > 1:
                return children

            single = children[0]
            grandchildren = list(single.children)
            if len(grandchildren) > 1 and _all_same_tag(grandchildren):
                return grandchildren
            return [single]

        # Remaining top-level siblings are ignored
        return list(children[0].children)

    def element_to_record(self, node: XmlNode) -> Record:
        """Convert an element into a record, recursing into nested elements."""
        record: Record = {}

        for name, value in node.attributes:
            record[f'@{name}'] = self.normalize_value(value)

        grouped: Dict[str, List[XmlNode]] = {}
        for child in node.children:
            grouped.setdefault(child.tag, []).append(child)

        for name, children in grouped.items():
            values = [self.extract_value(child) for child in children]
            if len(values) == 1 and not is_plural_container(node.tag, name):
                record[name] = values[0]
            else:
                record[name] = values

        return record

    def extract_value(self, node: XmlNode) -> Any:
        """Nested record for elements with children or attributes, else normalized text."""
        if node.children or node.attributes:
            return self.element_to_record(node)
        return self.normalize_value(node.text)

    def normalize_value(self, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        if self.trim_strings:
            value = value.strip()
        if self.treat_empty_as_null and value == '':
            return None
        return value
