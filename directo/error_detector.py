# directo/error_detector.py
"""
Detection of Directo error payloads inside HTTP 200 responses.

Directo XMLCore reports errors in several shapes, for example:
    <error>Invalid API key</error>
    <err>token required</err>
    <results><errors><error>A</error><error>B</error></errors></results>
    <results error="1" message="Access denied"/>
    <results><status code="error">Error description</status></results>
    <result type="5" desc="Unauthorized"/>

Provides:
- A cheap case-insensitive substring pre-filter
- Structural extraction as an ordered list of strategies
- ErrorResponseDetector.detect_and_raise() raising ApiError with all messages
"""

import xml.etree.ElementTree as ElT
from typing import Dict, Any, List, Optional, Callable, Iterable, Union

from directo.exceptions import ApiError, ErrorContext
from directo.logger import setup_logger
from directo.xml_tree import XmlNode, parse_xml

logger = setup_logger()

ERROR_ELEMENTS = ('error', 'errors', 'err', 'viga', 'veateade')
ERROR_ATTRIBUTES = ('error', 'errormessage', 'error_message', 'viga')
ERROR_FLAG_VALUES = ('1', 'true', 'yes')
MESSAGE_ATTRIBUTES = ('message', 'errormessage', 'error_message', 'msg', 'teade')
DESCRIPTION_ATTRIBUTES = ('desc', 'description', 'message', 'msg', 'teade', 'kirjeldus')
ERROR_STATUS_CODES = ('error', 'err', 'fail', 'failed', 'viga')
STATUS_TAGS = ('status', 'Status', 'STATUS')
ERROR_RESULT_TYPES = ('5', 'error', 'err')
RESULT_TAGS = ('result', 'Result', 'RESULT')
RESULT_MESSAGE_ATTRIBUTES = ('desc', 'description', 'message')

MAX_MESSAGES_IN_SUMMARY = 3

Strategy = Callable[[XmlNode], Optional[List[str]]]


def _unique(messages: Iterable[str]) -> List[str]:
    """Drop empty and repeated messages, keeping first-seen order."""
    return list(dict.fromkeys(m for m in messages if m))


def element_message(node: XmlNode) -> str:
    """Trimmed text, else the first non-empty description attribute, else ''."""
    text = node.text.strip()
    if text:
        return text
    for name in DESCRIPTION_ATTRIBUTES:
        value = (node.get(name) or '').strip()
        if value:
            return value
    return ''


# Short-circuit strategies: a non-None result ends detection

def root_error_element(root: XmlNode) -> Optional[List[str]]:
    """The whole document is an error element."""
    tag = root.tag.lower()
    if tag not in ERROR_ELEMENTS:
        return None
    if tag == 'errors':
        return _unique(child.text.strip() for child in root.children)
    text = root.text.strip()
    return [text] if text else []


def root_error_attributes(root: XmlNode) -> Optional[List[str]]:
    """Error flags or messages carried as attributes of the root element."""
    messages: List[str] = []
    for attribute in ERROR_ATTRIBUTES:
        if not root.has_attribute(attribute):
            continue
        value = root.get(attribute)
        if value in ERROR_FLAG_VALUES:
            for name in MESSAGE_ATTRIBUTES:
                if root.has_attribute(name):
                    messages.append(root.get(name).strip())
            if not messages and root.text.strip():
                messages.append(root.text.strip())
            if not messages:
                messages.append('An error occurred')
        else:
            messages.append(value.strip())

    messages = [m for m in messages if m]
    return messages or None


# Accumulating strategies: results are merged

def scan_error_elements(root: XmlNode) -> List[str]:
    """Error elements anywhere in the document, one pass per element name."""
    messages: List[str] = []
    for name in ERROR_ELEMENTS:
        for node in root.iter():
            if node.tag.lower() != name:
                continue
            targets = node.children if name == 'errors' else (node,)
            messages.extend(element_message(target) for target in targets)
    return messages


def scan_status_codes(root: XmlNode) -> List[str]:
    """<status code="error">...</status> and its case variants."""
    messages: List[str] = []
    for node in root.iter():
        if node.tag not in STATUS_TAGS or not node.has_attribute('code'):
            continue
        code = node.get('code').lower()
        if code in ERROR_STATUS_CODES:
            messages.append(node.text.strip() or f'Status code: {code}')
    return messages


def scan_result_types(root: XmlNode) -> List[str]:
    """<result type="5" desc="Unauthorized"/> and its case variants."""
    messages: List[str] = []
    for node in root.iter():
        if node.tag not in RESULT_TAGS or not node.has_attribute('type'):
            continue
        result_type = node.get('type').lower()
        if result_type not in ERROR_RESULT_TYPES:
            continue
        message = next(
            (value for value in ((node.get(name) or '').strip() for name in RESULT_MESSAGE_ATTRIBUTES) if value),
            ''
        )
        messages.append(message or node.text.strip() or f'Result type: {result_type}')
    return messages


SHORT_CIRCUIT_STRATEGIES: List[Strategy] = [root_error_element, root_error_attributes]
ACCUMULATING_STRATEGIES: List[Callable[[XmlNode], List[str]]] = [
    scan_error_elements,
    scan_status_codes,
    scan_result_types,
]


def build_message(errors: List[str]) -> str:
    """
    Compose the ApiError message.

    Args:
        errors: Extracted messages

    Returns:
        'Directo API error: ...' for one message, a summary of the first
        three for several, 'Unknown API error' for none
    """
    if not errors:
        return 'Unknown API error'
    if len(errors) == 1:
        return f'Directo API error: {errors[0]}'
    summary = '; '.join(errors[:MAX_MESSAGES_IN_SUMMARY])
    suffix = '...' if len(errors) > MAX_MESSAGES_IN_SUMMARY else ''
    return f'Directo API returned {len(errors)} errors: {summary}{suffix}'


class ErrorResponseDetector:
    """
    Classifies a response body as a Directo error or not.

    Stateless; a single instance can be shared between threads.
    """

    @staticmethod
    def may_contain_error(xml: str) -> bool:
        """Quick substring check deciding whether structural extraction is needed."""
        lowered = xml.lower()
        if any(f'<{name}' in lowered for name in ERROR_ELEMENTS):
            return True
        if any(f'{name}=' in lowered for name in ERROR_ATTRIBUTES):
            return True
        return '<status' in lowered or '<result' in lowered

    @staticmethod
    def extract_errors(xml: str) -> List[str]:
        """
        Extract all error messages from a response body.

        Args:
            xml: Raw response body

        Returns:
            Messages in document order; empty if the body is not an error
            or cannot be parsed
        """
        try:
            root = parse_xml(xml)
        except ElT.ParseError as e:
            logger.debug(f"Error pre-check matched but body is not well-formed XML: {e}")
            return []

        for strategy in SHORT_CIRCUIT_STRATEGIES:
            messages = strategy(root)
            if messages is not None:
                return messages

        collected: List[str] = []
        for strategy in ACCUMULATING_STRATEGIES:
            collected.extend(strategy(root))
        return _unique(collected)

    def detect_and_raise(self, xml: str,
                         context: Optional[Union[ErrorContext, Dict[str, Any]]] = None) -> None:
        """
        Raise ApiError if the body is a Directo error response.

        Args:
            xml: Raw response body
            context: Context attached to the raised error

        Raises:
            ApiError: With every extracted message and the raw body
        """
        if not xml or not xml.strip():
            return

        if not self.may_contain_error(xml):
            return

        errors = self.extract_errors(xml)
        if not errors:
            logger.debug("Error pre-check matched but no error messages were found")
            return

        message = build_message(errors)
        logger.debug(f"❌ {message}")
        raise ApiError(message, errors=errors, raw_xml=xml, context=ErrorContext.coerce(context))

    detect = detect_and_raise
