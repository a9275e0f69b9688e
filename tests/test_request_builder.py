"""Tests for the request XML builder."""

import xml.etree.ElementTree as ElT
from decimal import Decimal

import pytest

from directo.request_builder import XmlRequestBuilder, format_value
from directo.response_parser import XmlResponseParser


@pytest.fixture
def builder():
    return XmlRequestBuilder()


def root_of(xml):
    return ElT.fromstring(xml.split('\n', 1)[1])


class TestBuild:

    def test_declaration_and_structure(self, builder):
        xml = builder.build('items', 'item', {'name': 'Widget'})
        assert xml.startswith('<?xml version="1.0" encoding="UTF-8"?>\n<items>')
        root = root_of(xml)
        assert root.tag == 'items'
        assert root.find('item/name').text == 'Widget'

    def test_key_becomes_attribute(self, builder):
        root = root_of(builder.build('items', 'item', {'code': 'I1', 'name': 'N'}, 'code'))
        item = root.find('item')
        assert item.get('code') == 'I1'
        assert item.find('code') is None

    def test_missing_key_is_skipped(self, builder):
        item = root_of(builder.build('items', 'item', {'name': 'N'}, 'code')).find('item')
        assert item.attrib == {}

    def test_none_key_stays_an_element(self, builder):
        item = root_of(builder.build('items', 'item', {'code': None}, 'code')).find('item')
        assert item.attrib == {}
        assert item.find('code') is not None

    def test_input_is_not_modified(self, builder):
        data = {'code': 'I1', 'name': 'N'}
        builder.build('items', 'item', data, 'code')
        assert data == {'code': 'I1', 'name': 'N'}

    def test_scalar_rendering(self, builder):
        item = root_of(builder.build('items', 'item', {
            'active': True, 'closed': False, 'note': None, 'qty': 3, 'price': Decimal('9.90')
        })).find('item')
        assert item.find('active').text == '1'
        assert item.find('closed').text == '0'
        assert not item.find('note').text
        assert item.find('qty').text == '3'
        assert item.find('price').text == '9.90'

    def test_list_becomes_repeated_elements(self, builder):
        item = root_of(builder.build('items', 'item', {'barcode': ['111', '222']})).find('item')
        assert [e.text for e in item.findall('barcode')] == ['111', '222']

    def test_empty_list_becomes_one_empty_element(self, builder):
        item = root_of(builder.build('items', 'item', {'barcode': []})).find('item')
        assert len(item.findall('barcode')) == 1

    def test_nested_records(self, builder):
        data = {'rows': {'row': [{'item': 'A', 'qty': 1}, {'item': 'B', 'qty': 2}]}}
        item = root_of(builder.build('invoices', 'invoice', data)).find('invoice')
        assert [r.find('item').text for r in item.findall('rows/row')] == ['A', 'B']

    def test_attributes_key(self, builder):
        data = {'@attributes': {'lang': 'et', 'active': True}, 'price': {'@attributes': {'currency': 'EUR'}}}
        item = root_of(builder.build('items', 'item', data)).find('item')
        assert item.get('lang') == 'et'
        assert item.get('active') == '1'
        assert item.find('price').get('currency') == 'EUR'
        assert [child.tag for child in item] == ['price']

    def test_special_characters_are_escaped(self, builder):
        xml = builder.build('items', 'item', {'name': 'A & B <C>'})
        assert 'A &amp; B &lt;C&gt;' in xml
        assert root_of(xml).find('item/name').text == 'A & B <C>'

    def test_output_is_indented(self, builder):
        xml = builder.build('items', 'item', {'name': 'N'})
        assert '\n  <item>\n    <name>N</name>' in xml


class TestBuildBatch:

    def test_multiple_records(self, builder):
        records = [{'code': 'A', 'name': 'First'}, {'code': 'B', 'name': 'Second'}]
        root = root_of(builder.build_batch('items', 'item', records, 'code'))
        assert [i.get('code') for i in root.findall('item')] == ['A', 'B']

    def test_no_records(self, builder):
        root = root_of(builder.build_batch('items', 'item', []))
        assert len(root) == 0


class TestRoundTrip:

    def test_builder_output_parses_back(self, builder):
        xml = builder.build('artiklid', 'artikkel', {'kood': 'I1', 'nimetus': 'N'}, 'kood')
        assert XmlResponseParser().parse(xml) == [{'@kood': 'I1', 'nimetus': 'N'}]


@pytest.mark.parametrize("value, expected", [
    (True, '1'), (False, '0'), (None, ''), (0, '0'), (1.5, '1.5'), ('x', 'x'),
])
def test_format_value(value, expected):
    assert format_value(value) == expected
