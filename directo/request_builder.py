# directo/request_builder.py
"""
Builds XML request bodies for put operations.

Serializes plain dicts into the shape Directo input schemas expect:

    <items>
      <item code="ITEM001">
        <name>Item Name</name>
        <class>CLASS1</class>
      </item>
    </items>

Provides:
- build(): one record
- build_batch(): several records under one root
- '@attributes' mapping support on any element
"""

import xml.etree.ElementTree as ElT
from typing import Dict, Any, List, Optional

XML_DECLARATION = '<?xml version="1.0" encoding="UTF-8"?>\n'
ATTRIBUTES_KEY = '@attributes'


def format_value(value: Any) -> str:
    """Render a scalar as XML text: booleans as 1/0, None as empty."""
    if isinstance(value, bool):
        return '1' if value else '0'
    if value is None:
        return ''
    return str(value)


class XmlRequestBuilder:
    """
    Record-to-XML serializer.

    Cardinality comes from the data only: a list or tuple renders as
    repeated sibling elements, a dict as one nested element.
    """

    def build(self, root_element: str, record_element: str,
              data: Dict[str, Any], key_attribute: Optional[str] = None) -> str:
        """
        Build XML for a single record.

        Args:
            root_element: Root element name (e.g. 'items')
            record_element: Record element name (e.g. 'item')
            data: Record fields
            key_attribute: Field rendered as an attribute of the record element

        Returns:
            XML document text
        """
        return self.build_batch(root_element, record_element, [data], key_attribute)

    def build_batch(self, root_element: str, record_element: str,
                    records: List[Dict[str, Any]], key_attribute: Optional[str] = None) -> str:
        """
        Build XML for multiple records.

        Args:
            root_element: Root element name
            record_element: Record element name
            records: Records in output order
            key_attribute: Field rendered as an attribute of each record element

        Returns:
            XML document text
        """
        root = ElT.Element(root_element)
        for data in records:
            root.append(self._build_record(record_element, data, key_attribute))
        return self._serialize(root)

    def _build_record(self, record_element: str, data: Dict[str, Any],
                      key_attribute: Optional[str]) -> ElT.Element:
        fields = dict(data)
        record = ElT.Element(record_element)
        if key_attribute is not None and fields.get(key_attribute) is not None:
            record.set(key_attribute, format_value(fields.pop(key_attribute)))
        self._add_elements(record, fields)
        return record

    def _add_elements(self, parent: ElT.Element, data: Dict[str, Any]) -> None:
        for key, value in data.items():
            if key == ATTRIBUTES_KEY:
                if isinstance(value, dict):
                    for name, attr_value in value.items():
                        parent.set(str(name), format_value(attr_value))
                continue

            if isinstance(value, (list, tuple)):
                if not value:
                    ElT.SubElement(parent, key)
                for item in value:
                    self._add_value(ElT.SubElement(parent, key), item)
            else:
                self._add_value(ElT.SubElement(parent, key), value)

    def _add_value(self, element: ElT.Element, value: Any) -> None:
        if isinstance(value, dict):
            self._add_elements(element, value)
        else:
            element.text = format_value(value)

    @staticmethod
    def _serialize(root: ElT.Element) -> str:
        ElT.indent(root, space='  ')
        return XML_DECLARATION + ElT.tostring(root, encoding='unicode') + '\n'
