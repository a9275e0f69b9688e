# directo/transport.py
"""
HTTP transport for the Directo XMLCore API.

Provides:
- Transport protocol consumed by the endpoint client (easy to fake in tests)
- RequestsTransport: form-encoded POST over a requests.Session
- Token attached per request, never logged and never put in error contexts
"""

import time
from typing import Dict, Optional, Union, Protocol

import requests
from requests.adapters import HTTPAdapter

from directo.config import Config
from directo.exceptions import ErrorContext, HttpError, TransportError
from directo.logger import setup_logger

logger = setup_logger()

FormParams = Dict[str, Union[str, int]]

REDACTED = '[REDACTED]'
BODY_PREVIEW_LENGTH = 500
SLOW_REQUEST_SECONDS = 5.0

DEFAULT_HEADERS = {
    'Content-Type': 'application/x-www-form-urlencoded',
    'Accept': 'application/xml, text/xml',
}


class Transport(Protocol):
    """Anything that can POST form parameters and return the response body."""

    def post(self, form_params: FormParams,
             context: Optional[ErrorContext] = None) -> str:
        ...


class RequestsTransport:
    """
    requests-based transport.

    No retries: a failed request raises immediately and the caller decides.
    """

    def __init__(self, config: Config, session: Optional[requests.Session] = None):
        """
        Args:
            config: SDK configuration (URL, token, timeouts)
            session: Pre-built session, mainly for tests
        """
        self.config = config
        self._owns_session = session is None
        self.session = session if session is not None else self._create_session()

    @staticmethod
    def _create_session() -> requests.Session:
        session = requests.Session()
        session.headers.update(DEFAULT_HEADERS)
        adapter = HTTPAdapter(max_retries=0, pool_maxsize=10, pool_connections=10)
        session.mount("https://", adapter)
        session.mount("http://", adapter)
        return session

    def post(self, form_params: FormParams,
             context: Optional[ErrorContext] = None) -> str:
        """
        POST form parameters to the configured URL.

        Args:
            form_params: Request parameters without the token
            context: Diagnostics context for errors and logs

        Returns:
            Response body text

        Raises:
            HttpError: On a non-2xx status
            TransportError: On connection failures, timeouts and other client errors
        """
        context = context or ErrorContext()
        data = dict(form_params)
        data[self.config.token_param_name] = self.config.token

        safe_params = {**data, self.config.token_param_name: REDACTED}
        log_context = self._log_context(context)
        logger.debug(f"{log_context} Directo API request to {self.config.base_url}: {safe_params}")

        start = time.monotonic()
        try:
            response = self.session.post(
                self.config.base_url,
                data=data,
                headers=DEFAULT_HEADERS,
                timeout=(self.config.connect_timeout, self.config.timeout),
            )
        except requests.exceptions.ConnectionError as e:
            self._log_failure('Connection failed', e, start, log_context)
            raise TransportError(f"Connection failed: {e}", context=context) from e
        except requests.exceptions.Timeout as e:
            self._log_failure('Request timed out', e, start, log_context)
            raise TransportError(f"Request timed out: {e}", context=context) from e
        except requests.exceptions.RequestException as e:
            self._log_failure('Request failed', e, start, log_context)
            raise TransportError(f"Request failed: {e}", context=context) from e

        duration = time.monotonic() - start
        body = response.text

        if not 200 <= response.status_code < 300:
            logger.error(f"❌ {log_context} HTTP {response.status_code} after {duration * 1000:.0f}ms")
            raise HttpError(
                f"HTTP request failed with status {response.status_code}",
                status_code=response.status_code,
                response_body=body,
                context=context
            )

        preview = body[:BODY_PREVIEW_LENGTH] + ('...' if len(body) > BODY_PREVIEW_LENGTH else '')
        logger.debug(f"{log_context} Directo API response {response.status_code} in "
                     f"{duration * 1000:.0f}ms ({len(body)} chars): {preview}")

        if duration > SLOW_REQUEST_SECONDS:
            logger.warning(f"{log_context} Slow Directo API request: {duration:.1f}s")

        return body

    @staticmethod
    def _log_context(context: ErrorContext) -> str:
        parts = [p for p in (context.resource, context.operation) if p]
        return f"[{'/'.join(parts)}]" if parts else "[directo]"

    @staticmethod
    def _log_failure(what: str, error: Exception, start: float, log_context: str) -> None:
        duration = time.monotonic() - start
        logger.error(f"❌ {log_context} {what} after {duration * 1000:.0f}ms: {error}")

    def close(self) -> None:
        """Close the session if this transport created it."""
        if self._owns_session:
            self.session.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
