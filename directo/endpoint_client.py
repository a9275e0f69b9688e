# directo/endpoint_client.py
"""
Request pipeline shared by all endpoints.

list():   validate filters -> post -> detect errors -> [validate XSD] -> parse
put():    build XML -> [validate XSD] -> post -> detect errors -> parse

The endpoint definition only supplies metadata; this class owns the behavior.
"""

from typing import Dict, Any, List, Optional

from directo.config import Config
from directo.endpoints import EndpointDefinition
from directo.error_detector import ErrorResponseDetector
from directo.exceptions import ErrorContext, InvalidFilterError
from directo.logger import setup_logger
from directo.request_builder import XmlRequestBuilder, format_value
from directo.response_parser import XmlResponseParser, Record
from directo.schema_registry import SchemaRegistry
from directo.transport import Transport, FormParams

logger = setup_logger()

SCALAR_FILTER_TYPES = (str, int, float, bool)


def is_valid_filter_value(value: Any) -> bool:
    """Scalars, or objects whose class defines its own __str__ (Decimal, date, ...)."""
    if isinstance(value, SCALAR_FILTER_TYPES):
        return True
    if value is None or isinstance(value, (bytes, list, tuple, set, dict)):
        return False
    return type(value).__str__ is not object.__str__


class EndpointClient:
    """Runs list/put requests for one endpoint definition."""

    def __init__(self, definition: EndpointDefinition,
                 config: Config,
                 transport: Transport,
                 schema_registry: SchemaRegistry,
                 parser: Optional[XmlResponseParser] = None,
                 detector: Optional[ErrorResponseDetector] = None,
                 builder: Optional[XmlRequestBuilder] = None):
        self.definition = definition
        self.config = config
        self.transport = transport
        self.schema_registry = schema_registry
        self.parser = parser or XmlResponseParser(treat_empty_as_null=config.treat_empty_as_null)
        self.detector = detector or ErrorResponseDetector()
        self.builder = builder or XmlRequestBuilder()

    @property
    def endpoint_name(self) -> str:
        return type(self.definition).__name__

    def list(self, filters: Optional[Dict[str, Any]] = None) -> List[Record]:
        """
        Fetch records.

        Args:
            filters: Filter key/values from the endpoint's allow-list

        Returns:
            Parsed records

        Raises:
            InvalidFilterError: Unknown filter key or unsupported value
            ApiError: Directo reported an error
            SchemaValidationError: Response failed XSD validation (if enabled)
            MalformedInputError: Response is not well-formed XML
            TransportError, HttpError: Request failed
        """
        filters = dict(filters or {})
        self.validate_filters(filters)

        form_params: FormParams = {'get': 1, 'what': self.definition.what()}
        for key, value in filters.items():
            form_params[key] = format_value(value)

        context = ErrorContext(
            operation='list',
            resource=self.definition.what(),
            endpoint=self.endpoint_name,
            details={'filters': {k: format_value(v) for k, v in filters.items()}}
        )

        logger.debug(f"[{self.definition.what()}] list with filters {list(filters)}")
        response_xml = self.transport.post(form_params, context)
        self.detector.detect_and_raise(response_xml, context)
        self._validate_schema(response_xml, 'list', context)

        records = self.parser.parse(response_xml, context)
        logger.info(f"[{self.definition.what()}] Retrieved {len(records)} record(s)")
        return records

    def put(self, data: Dict[str, Any]) -> List[Record]:
        """
        Create or update one record.

        Returns:
            Records parsed from the response (usually a result summary)
        """
        elements = self.definition.xml_elements()
        xml_data = self.builder.build(elements['root'], elements['record'], data, elements.get('key'))
        return self._send_put(xml_data, records=1)

    def put_batch(self, records: List[Dict[str, Any]]) -> List[Record]:
        """
        Create or update several records in one request.

        Returns:
            Records parsed from the response
        """
        elements = self.definition.xml_elements()
        xml_data = self.builder.build_batch(elements['root'], elements['record'], records, elements.get('key'))
        return self._send_put(xml_data, records=len(records))

    def validate_filters(self, filters: Dict[str, Any]) -> None:
        """
        Check filter keys against the allow-list and values against supported types.

        Raises:
            InvalidFilterError: On the first problem found
        """
        allowed = self.definition.allowed_filters()
        unknown = [key for key in filters if key not in allowed]
        if unknown:
            raise InvalidFilterError.unknown_filters(unknown, allowed, self.definition.what())

        for key, value in filters.items():
            if not is_valid_filter_value(value):
                raise InvalidFilterError.invalid_value_type(key, value, self.definition.what())

    def _send_put(self, xml_data: str, records: int) -> List[Record]:
        context = ErrorContext(
            operation='put',
            resource=self.definition.what(),
            endpoint=self.endpoint_name,
            details={'records': records}
        )

        self._validate_schema(xml_data, 'put', context)

        form_params: FormParams = {'put': 1, 'what': self.definition.what(), 'xmldata': xml_data}
        logger.debug(f"[{self.definition.what()}] put {records} record(s)")
        response_xml = self.transport.post(form_params, context)
        self.detector.detect_and_raise(response_xml, context)
        return self.parser.parse(response_xml, context)

    def _validate_schema(self, xml: str, operation: str, context: ErrorContext) -> None:
        if not self.config.validate_schema:
            return
        schema_file = self.definition.schemas().get(operation)
        if schema_file:
            self.schema_registry.validate_file(xml, schema_file, context)
