"""Tests for the endpoint pipeline and the client facade."""

import datetime
import xml.etree.ElementTree as ElT
from decimal import Decimal

import pytest

from directo.client import DirectoClient
from directo.config import Config
from directo.endpoint_client import EndpointClient, is_valid_filter_value
from directo.endpoints import CustomersEndpoint, ItemsEndpoint, ReceiptsEndpoint, ENDPOINT_CLASSES
from directo.exceptions import ApiError, InvalidFilterError, SchemaValidationError, MalformedInputError
from directo.transport import RequestsTransport
from tests.conftest import (
    FakeTransport, ITEMS_XML, CUSTOMERS_TRANSPORT_XML, RECEIPTS_TRANSPORT_XML, PUT_RESULT_XML,
    ERROR_ROOT_XML, UNAUTHORIZED_XML
)


class TestEndpointDefinitions:

    @pytest.mark.parametrize("endpoint_class, what, root, record, key", [
        (CustomersEndpoint, 'customer', 'customers', 'customer', 'code'),
        (ItemsEndpoint, 'item', 'items', 'item', 'code'),
        (ReceiptsEndpoint, 'receipt', 'transport', 'receipt', 'number'),
    ])
    def test_metadata(self, endpoint_class, what, root, record, key):
        definition = endpoint_class()
        assert definition.what() == what
        assert definition.xml_elements() == {'root': root, 'record': record, 'key': key}

    def test_receipts_have_no_put_schema(self):
        assert ReceiptsEndpoint().schemas() == {'list': 'ws_laekumised.xsd', 'put': None}

    def test_all_endpoints_registered(self):
        assert ENDPOINT_CLASSES == [CustomersEndpoint, ItemsEndpoint, ReceiptsEndpoint]


class TestList:

    def test_form_params_and_records(self, client, transport):
        transport.queue(ITEMS_XML)
        records = client.items().list({'class': 'GOODS', 'closed': 0})

        assert transport.last_params == {'get': 1, 'what': 'item', 'class': 'GOODS', 'closed': '0'}
        assert [r['@code'] for r in records] == ['I001', 'I002']

    def test_no_filters(self, client, transport):
        transport.queue(CUSTOMERS_TRANSPORT_XML)
        assert len(client.customers().list()) == 2
        assert transport.last_params == {'get': 1, 'what': 'customer'}

    def test_receipts_transport_envelope(self, client, transport):
        transport.queue(RECEIPTS_TRANSPORT_XML)
        records = client.receipts().list({'date1': '2024-01-01', 'date2': datetime.date(2024, 1, 31)})
        assert [r['@number'] for r in records] == ['R1', 'R2']
        assert transport.last_params['date2'] == '2024-01-31'

    def test_boolean_filter_rendered_as_digit(self, client, transport):
        transport.queue(ITEMS_XML)
        client.items().list({'closed': True})
        assert transport.last_params['closed'] == '1'

    def test_context_never_contains_token(self, client, transport, config):
        transport.queue(ITEMS_XML)
        client.items().list({'code': 'I001'})
        context = transport.last_context
        assert context.operation == 'list'
        assert context.resource == 'item'
        assert context.endpoint == 'ItemsEndpoint'
        assert context.details == {'filters': {'code': 'I001'}}
        assert config.token not in repr(context.to_dict())

    def test_empty_response(self, client, transport):
        transport.queue('')
        assert client.items().list() == []

    def test_api_error_stops_pipeline(self, client, transport):
        transport.queue(ERROR_ROOT_XML)
        with pytest.raises(ApiError) as exc_info:
            client.items().list()
        assert exc_info.value.errors == ['Invalid API key']
        assert exc_info.value.context.resource == 'item'

    def test_unauthorized(self, client, transport):
        transport.queue(UNAUTHORIZED_XML)
        with pytest.raises(ApiError, match='Unauthorized'):
            client.customers().list()

    def test_malformed_response(self, client, transport):
        transport.queue('<results><item>')
        with pytest.raises(MalformedInputError):
            client.items().list()


class TestFilterValidation:

    def test_unknown_filter(self, client, transport):
        with pytest.raises(InvalidFilterError) as exc_info:
            client.items().list({'code': 'A', 'color': 'red', 'size': 'L'})

        error = exc_info.value
        assert 'color, size' in error.message
        assert 'for endpoint "item"' in error.message
        assert error.context.details['unknown_filters'] == ['color', 'size']
        assert error.context.details['allowed_filters'] == ItemsEndpoint().allowed_filters()
        assert transport.calls == []

    def test_invalid_value_type(self, client, transport):
        with pytest.raises(InvalidFilterError, match='"code"'):
            client.customers().list({'code': ['A', 'B']})
        assert transport.calls == []

    @pytest.mark.parametrize("value, expected", [
        ('x', True), (1, True), (1.5, True), (False, True),
        (Decimal('1.0'), True), (datetime.date(2024, 1, 1), True),
        (None, False), ([1], False), ({'a': 1}, False), (b'x', False), (object(), False),
    ])
    def test_value_types(self, value, expected):
        assert is_valid_filter_value(value) is expected


class TestPut:

    def test_put_single_record(self, client, transport):
        transport.queue(PUT_RESULT_XML)
        result = client.items().put({'code': 'I001', 'name': 'Widget'})

        params = transport.last_params
        assert params['put'] == 1
        assert params['what'] == 'item'
        item = ElT.fromstring(params['xmldata'].split('\n', 1)[1]).find('item')
        assert item.get('code') == 'I001'
        assert item.find('name').text == 'Widget'
        assert result == [{'@type': '0', '@desc': 'OK', '@docid': 'I001'}]

    def test_put_batch(self, client, transport):
        transport.queue(PUT_RESULT_XML)
        client.customers().put_batch([{'code': 'C1'}, {'code': 'C2'}])

        root = ElT.fromstring(transport.last_params['xmldata'].split('\n', 1)[1])
        assert root.tag == 'customers'
        assert [c.get('code') for c in root.findall('customer')] == ['C1', 'C2']
        assert transport.last_context.operation == 'put'
        assert transport.last_context.details == {'records': 2}

    def test_put_api_error(self, client, transport):
        transport.queue('<results><errors><error>Code missing</error><error>Name missing</error></errors></results>')
        with pytest.raises(ApiError) as exc_info:
            client.items().put({'name': 'x'})
        assert exc_info.value.message == 'Directo API returned 2 errors: Code missing; Name missing'


class TestSchemaValidation:

    def make_client(self, schema_dir, transport):
        config = Config(token='t', validate_schema=True, schema_base_path=str(schema_dir))
        return DirectoClient(config, transport=transport)

    def test_invalid_request_is_not_sent(self, schema_dir, transport):
        client = self.make_client(schema_dir, transport)
        with pytest.raises(SchemaValidationError) as exc_info:
            client.items().put({'code': 'I1', 'price': 'not-a-number'})
        assert exc_info.value.schema_path.endswith('xml_IN_artiklid.xsd')
        assert exc_info.value.validation_errors
        assert transport.calls == []

    def test_valid_request_is_sent(self, schema_dir, transport):
        client = self.make_client(schema_dir, transport)
        transport.queue(PUT_RESULT_XML)
        client.items().put({'code': 'I1', 'name': 'Widget', 'price': '9.90'})
        assert len(transport.calls) == 1

    def test_missing_schema_file(self, schema_dir, transport):
        client = self.make_client(schema_dir, transport)
        transport.queue(ITEMS_XML)
        with pytest.raises(FileNotFoundError, match='directo-schemas download'):
            client.items().list()

    def test_conforming_list_response(self, response_schema_dir, transport):
        client = self.make_client(response_schema_dir, transport)
        transport.queue(ITEMS_XML)
        records = client.items().list()
        assert [r['@code'] for r in records] == ['I001', 'I002']

    def test_nonconforming_list_response(self, response_schema_dir, transport):
        client = self.make_client(response_schema_dir, transport)
        transport.queue('<results><item code="I9"><name>X</name><price>abc</price></item></results>')
        with pytest.raises(SchemaValidationError) as exc_info:
            client.items().list()
        error = exc_info.value
        assert error.schema_path.endswith('ws_artiklid.xsd')
        assert error.context.operation == 'list'
        assert error.context.details['schema_file'] == 'ws_artiklid.xsd'

    def test_api_error_is_detected_before_validation(self, response_schema_dir, transport):
        client = self.make_client(response_schema_dir, transport)
        transport.queue(ERROR_ROOT_XML)
        with pytest.raises(ApiError) as exc_info:
            client.items().list()
        assert not isinstance(exc_info.value, SchemaValidationError)
        assert exc_info.value.errors == ['Invalid API key']

    def test_empty_list_response_fails_validation(self, response_schema_dir, transport):
        client = self.make_client(response_schema_dir, transport)
        transport.queue('')
        with pytest.raises(SchemaValidationError) as exc_info:
            client.items().list()
        assert 'not well-formed' in exc_info.value.validation_errors[0]['reason']

    def test_endpoint_without_put_schema_skips_validation(self, schema_dir, transport):
        client = self.make_client(schema_dir, transport)
        transport.queue(PUT_RESULT_XML)
        client.receipts().put({'number': 'R1', 'sum': '10'})
        assert len(transport.calls) == 1

    def test_validation_disabled_by_default(self, client, transport):
        transport.queue(PUT_RESULT_XML)
        client.items().put({'code': 'I1', 'price': 'not-a-number'})
        assert len(transport.calls) == 1


class TestDirectoClient:

    def test_endpoints_are_cached(self, client):
        assert client.items() is client.items()
        assert client.items() is not client.customers()
        assert isinstance(client.receipts(), EndpointClient)

    def test_accessors(self, client, config, transport):
        assert client.get_config() is config
        assert client.get_transport() is transport
        assert str(client.get_schema_registry().schema_base_path) == config.get_schema_base_path()

    def test_default_transport(self, config):
        with DirectoClient(config) as client:
            assert isinstance(client.get_transport(), RequestsTransport)

    def test_parser_follows_config(self, transport):
        client = DirectoClient(Config(token='t', treat_empty_as_null=False), transport=transport)
        transport.queue('<results><item><name/></item></results>')
        assert client.items().list() == [{'name': ''}]

    def test_fake_transport_independent_of_client(self):
        transport = FakeTransport([ITEMS_XML])
        client = DirectoClient(Config(token='t'), transport=transport)
        assert len(client.items().list()) == 2
