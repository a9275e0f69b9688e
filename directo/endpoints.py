# directo/endpoints.py
"""
Static metadata for each Directo resource.

An endpoint definition answers four questions and holds no behavior:
- what(): resource name sent as the "what" parameter
- allowed_filters(): filter keys accepted by list()
- xml_elements(): root/record/key element names used by put()
- schemas(): XSD file names for list responses and put requests
"""

from typing import Dict, List, Optional, Protocol


class EndpointDefinition(Protocol):
    """Read-only description of one resource type."""

    def what(self) -> str:
        ...

    def allowed_filters(self) -> List[str]:
        ...

    def xml_elements(self) -> Dict[str, Optional[str]]:
        ...

    def schemas(self) -> Dict[str, Optional[str]]:
        ...


class CustomersEndpoint:
    """Customers (kliendid)."""

    def what(self) -> str:
        return 'customer'

    def allowed_filters(self) -> List[str]:
        return [
            'code',         # customer code
            'loyaltycard',
            'regno',        # registration number
            'email',
            'phone',
            'closed',       # 0/1
            'ts',           # incremental sync timestamp
        ]

    def xml_elements(self) -> Dict[str, Optional[str]]:
        return {'root': 'customers', 'record': 'customer', 'key': 'code'}

    def schemas(self) -> Dict[str, Optional[str]]:
        return {'list': 'ws_kliendid.xsd', 'put': 'xml_IN_kliendid.xsd'}


class ItemsEndpoint:
    """Items (artiklid)."""

    def what(self) -> str:
        return 'item'

    def allowed_filters(self) -> List[str]:
        return [
            'class',
            'code',
            'type',
            'barcode',
            'supplier',
            'supplieritem',  # supplier's own item code
            'closed',
            'ts',
        ]

    def xml_elements(self) -> Dict[str, Optional[str]]:
        return {'root': 'items', 'record': 'item', 'key': 'code'}

    def schemas(self) -> Dict[str, Optional[str]]:
        return {'list': 'ws_artiklid.xsd', 'put': 'xml_IN_artiklid.xsd'}


class ReceiptsEndpoint:
    """Receipts (laekumised). Dates are YYYY-MM-DD."""

    def what(self) -> str:
        return 'receipt'

    def allowed_filters(self) -> List[str]:
        return ['number', 'date1', 'date2', 'ts']

    def xml_elements(self) -> Dict[str, Optional[str]]:
        return {'root': 'transport', 'record': 'receipt', 'key': 'number'}

    def schemas(self) -> Dict[str, Optional[str]]:
        # No input schema is published for receipts
        return {'list': 'ws_laekumised.xsd', 'put': None}


ENDPOINT_CLASSES = [CustomersEndpoint, ItemsEndpoint, ReceiptsEndpoint]
