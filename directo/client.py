# directo/client.py
"""
Entry point of the SDK.

Example:
    >>> from directo import DirectoClient, Config
    >>> client = DirectoClient(Config(token='your-api-token'))
    >>> items = client.items().list({'class': 'GOODS'})
    >>> client.customers().put({'code': 'C001', 'name': 'Acme'})
"""

from typing import Dict, Optional, Type

from directo.config import Config
from directo.endpoint_client import EndpointClient
from directo.endpoints import CustomersEndpoint, ItemsEndpoint, ReceiptsEndpoint, EndpointDefinition
from directo.logger import setup_logger
from directo.schema_registry import SchemaRegistry
from directo.transport import Transport, RequestsTransport

logger = setup_logger()


class DirectoClient:
    """
    Facade giving access to every endpoint.

    Endpoint clients are created on first use and reused afterwards.
    """

    def __init__(self, config: Config, transport: Optional[Transport] = None):
        """
        Args:
            config: SDK configuration
            transport: Custom transport (defaults to RequestsTransport)
        """
        self.config = config
        self.transport = transport if transport is not None else RequestsTransport(config)
        self.schema_registry = SchemaRegistry(config.get_schema_base_path(), config.schema_base_url)
        self._endpoints: Dict[Type, EndpointClient] = {}
        logger.debug(f"DirectoClient initialized for {config.base_url}")

    def customers(self) -> EndpointClient:
        return self._endpoint(CustomersEndpoint)

    def items(self) -> EndpointClient:
        return self._endpoint(ItemsEndpoint)

    def receipts(self) -> EndpointClient:
        return self._endpoint(ReceiptsEndpoint)

    def get_config(self) -> Config:
        return self.config

    def get_transport(self) -> Transport:
        return self.transport

    def get_schema_registry(self) -> SchemaRegistry:
        return self.schema_registry

    def _endpoint(self, definition_class: Type[EndpointDefinition]) -> EndpointClient:
        if definition_class not in self._endpoints:
            self._endpoints[definition_class] = EndpointClient(
                definition_class(),
                self.config,
                self.transport,
                self.schema_registry,
            )
        return self._endpoints[definition_class]

    def close(self) -> None:
        """Close the transport if it supports closing."""
        close = getattr(self.transport, 'close', None)
        if callable(close):
            close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
