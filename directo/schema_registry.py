# directo/schema_registry.py
"""
Local XSD schema lookup and validation.

Provides:
- Local path and remote URL resolution for schema files
- Validation of request/response XML with xmlschema
- Structured diagnostics in SchemaValidationError

Schemas are loaded from disk on every validation; nothing is cached.
"""

from pathlib import Path
from typing import Dict, Any, List, Optional, Union
import xml.etree.ElementTree as ElT

import xmlschema

from directo.exceptions import ErrorContext, SchemaValidationError
from directo.logger import setup_logger

logger = setup_logger()


class SchemaRegistry:
    """Resolves schema files and validates XML against them."""

    def __init__(self, schema_base_path: Union[str, Path], schema_base_url: str):
        """
        Args:
            schema_base_path: Directory holding downloaded XSD files
            schema_base_url: Base URL the XSD files are published under
        """
        self.schema_base_path = Path(schema_base_path)
        self.schema_base_url = schema_base_url

    def get_schema_path(self, schema_file: str) -> Path:
        return self.schema_base_path / schema_file

    def get_schema_url(self, schema_file: str) -> str:
        return f"{self.schema_base_url}{schema_file}"

    def schema_file_exists(self, schema_file: str) -> bool:
        return self.get_schema_path(schema_file).is_file()

    def validate_file(self, xml: str, schema_file: str,
                      context: Optional[Union[ErrorContext, Dict[str, Any]]] = None) -> None:
        """
        Validate XML text against a local schema file.

        Args:
            xml: XML document text
            schema_file: Schema file name (e.g. 'ws_artiklid.xsd')
            context: Context attached to a raised error

        Raises:
            FileNotFoundError: If the schema file has not been downloaded
            SchemaValidationError: If the XML does not conform
        """
        schema_path = self.get_schema_path(schema_file)
        if not schema_path.is_file():
            raise FileNotFoundError(
                f"Schema file not found: {schema_path}. "
                f"Run \"directo-schemas download\" to download schemas."
            )

        context = (ErrorContext.coerce(context) or ErrorContext()).with_details(schema_file=schema_file)
        schema = xmlschema.XMLSchema(str(schema_path))

        errors = self._collect_errors(schema, xml)

        if errors:
            logger.debug(f"❌ XML does not conform to {schema_file}: {len(errors)} error(s)")
            raise SchemaValidationError(
                f"XML does not conform to schema: {schema_file}",
                validation_errors=errors,
                schema_path=str(schema_path),
                context=context
            )

        logger.debug(f"✅ XML conforms to {schema_file}")

    @staticmethod
    def _collect_errors(schema: xmlschema.XMLSchema, xml: str) -> List[Dict[str, Any]]:
        """Check well-formedness with ElementTree, then validate the parsed tree."""
        text = xml.strip()
        if not text:
            return [{'path': None, 'line': None, 'reason': "XML is not well-formed: document is empty"}]

        try:
            root = ElT.fromstring(text)
        except ElT.ParseError as e:
            line, _column = e.position
            return [{'path': None, 'line': line, 'reason': f"XML is not well-formed: {e}"}]

        return [
            {
                'path': error.path,
                'line': error.sourceline,
                'reason': error.reason or str(error),
            }
            for error in schema.iter_errors(root)
        ]
