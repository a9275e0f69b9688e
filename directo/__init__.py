# directo/__init__.py
"""Directo XMLCore ERP client SDK."""

__version__ = '1.0.0'

# Convenience imports for the most common entry points
from .config import Config
from .config_loader import ConfigLoader
from .client import DirectoClient
from .logger import configure_logging, setup_logger
from .exceptions import (
    DirectoError,
    ApiError,
    MalformedInputError,
    SchemaValidationError,
    InvalidFilterError,
    TransportError,
    HttpError,
    ConfigurationError,
    HelpfulError,
)

__all__ = [
    'Config',
    'ConfigLoader',
    'DirectoClient',
    'setup_logger',
    'configure_logging',
    'DirectoError',
    'ApiError',
    'MalformedInputError',
    'SchemaValidationError',
    'InvalidFilterError',
    'TransportError',
    'HttpError',
    'ConfigurationError',
    'HelpfulError',
]
