"""Shared test fixtures."""

from typing import Dict, Any, List, Optional, Tuple

import pytest

from directo.config import Config
from directo.client import DirectoClient
from directo.exceptions import ErrorContext


# ── Sample responses ─────────────────────────────────────────────────────

ITEMS_XML = """\
<?xml version="1.0" encoding="UTF-8"?>
<results>
  <item code="I001" class="GOODS">
    <name>Widget</name>
    <price>9.90</price>
    <prices>
      <price currency="EUR">9.90</price>
    </prices>
  </item>
  <item code="I002" class="GOODS">
    <name>Gadget</name>
    <price>19.00</price>
    <barcode></barcode>
  </item>
</results>
"""

CUSTOMERS_TRANSPORT_XML = """\
<?xml version="1.0" encoding="UTF-8"?>
<transport>
  <customers>
    <customer code="C001"><name>Acme</name></customer>
    <customer code="C002"><name>Globex</name></customer>
  </customers>
</transport>
"""

RECEIPTS_TRANSPORT_XML = """\
<?xml version="1.0" encoding="UTF-8"?>
<transport>
  <receipt number="R1"><date>2024-01-05</date><rows><row><sum>10</sum></row></rows></receipt>
  <receipt number="R2"><date>2024-01-06</date></receipt>
</transport>
"""

SINGLE_CUSTOMER_TRANSPORT_XML = """\
<transport>
  <customer code="C001"><name>Acme</name><email>info@acme.test</email></customer>
</transport>
"""

PUT_RESULT_XML = """\
<?xml version="1.0" encoding="UTF-8"?>
<results>
  <result type="0" desc="OK" docid="I001"/>
</results>
"""

ERROR_ROOT_XML = '<error>Invalid API key</error>'
ERRORS_LIST_XML = '<results><errors><error>A</error><error>B</error></errors></results>'
ERROR_ATTRIBUTE_XML = '<results error="1" message="Access denied"/>'
UNAUTHORIZED_XML = '<result type="5" desc="Unauthorized"/>'
FALSE_POSITIVE_XML = '<results><customer><name>Error Handling Corp</name></customer></results>'


# ── Fakes ────────────────────────────────────────────────────────────────

class FakeTransport:
    """Records every call and replies with queued bodies."""

    def __init__(self, responses: Optional[List[str]] = None):
        self.responses = list(responses or [])
        self.calls: List[Tuple[Dict[str, Any], Optional[ErrorContext]]] = []

    def queue(self, body: str) -> None:
        self.responses.append(body)

    def post(self, form_params: Dict[str, Any], context: Optional[ErrorContext] = None) -> str:
        self.calls.append((dict(form_params), context))
        return self.responses.pop(0) if self.responses else ''

    @property
    def last_params(self) -> Dict[str, Any]:
        return self.calls[-1][0]

    @property
    def last_context(self) -> Optional[ErrorContext]:
        return self.calls[-1][1]


# ── Fixtures ─────────────────────────────────────────────────────────────

@pytest.fixture
def config():
    return Config(token='secret-token-123', base_url='https://directo.test/xmlcore.asp')


@pytest.fixture
def transport():
    return FakeTransport()


@pytest.fixture
def client(config, transport):
    return DirectoClient(config, transport=transport)


@pytest.fixture
def schema_dir(tmp_path):
    """Directory with a minimal input schema for items."""
    xsd = tmp_path / "xml_IN_artiklid.xsd"
    xsd.write_text(ITEMS_INPUT_XSD, encoding="utf-8")
    return tmp_path


@pytest.fixture
def response_schema_dir(schema_dir):
    """schema_dir plus the items list response schema."""
    (schema_dir / "ws_artiklid.xsd").write_text(ITEMS_RESPONSE_XSD, encoding="utf-8")
    return schema_dir


ITEMS_INPUT_XSD = """\
<?xml version="1.0" encoding="UTF-8"?>
<xs:schema xmlns:xs="http://www.w3.org/2001/XMLSchema">
  <xs:element name="items">
    <xs:complexType>
      <xs:sequence>
        <xs:element name="item" maxOccurs="unbounded">
          <xs:complexType>
            <xs:sequence>
              <xs:element name="name" type="xs:string"/>
              <xs:element name="price" type="xs:decimal" minOccurs="0"/>
            </xs:sequence>
            <xs:attribute name="code" type="xs:string" use="required"/>
          </xs:complexType>
        </xs:element>
      </xs:sequence>
    </xs:complexType>
  </xs:element>
</xs:schema>
"""

ITEMS_RESPONSE_XSD = """\
<?xml version="1.0" encoding="UTF-8"?>
<xs:schema xmlns:xs="http://www.w3.org/2001/XMLSchema">
  <xs:element name="results">
    <xs:complexType>
      <xs:sequence>
        <xs:element name="item" minOccurs="0" maxOccurs="unbounded">
          <xs:complexType>
            <xs:sequence>
              <xs:element name="name" type="xs:string"/>
              <xs:element name="price" type="xs:decimal"/>
              <xs:element name="prices" minOccurs="0">
                <xs:complexType>
                  <xs:sequence>
                    <xs:element name="price" maxOccurs="unbounded">
                      <xs:complexType>
                        <xs:simpleContent>
                          <xs:extension base="xs:decimal">
                            <xs:attribute name="currency" type="xs:string"/>
                          </xs:extension>
                        </xs:simpleContent>
                      </xs:complexType>
                    </xs:element>
                  </xs:sequence>
                </xs:complexType>
              </xs:element>
              <xs:element name="barcode" type="xs:string" minOccurs="0"/>
            </xs:sequence>
            <xs:attribute name="code" type="xs:string" use="required"/>
            <xs:attribute name="class" type="xs:string"/>
          </xs:complexType>
        </xs:element>
      </xs:sequence>
    </xs:complexType>
  </xs:element>
</xs:schema>
"""
