# directo/config.py
"""
Immutable SDK configuration.

Holds everything needed to talk to the Directo XMLCore API. One Config is
passed by reference into every collaborator at construction - there is no
global instance.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Dict, Any

from directo.path_helpers import get_dir, Dir

DEFAULT_BASE_URL = 'https://login.directo.ee/xmlcore/cap_xml_direct/xmlcore.asp'
DEFAULT_SCHEMA_BASE_URL = 'https://login.directo.ee/xmlcore/cap_xml_direct/'
DEFAULT_TOKEN_PARAM = 'token'
DEFAULT_TIMEOUT = 30.0
DEFAULT_CONNECT_TIMEOUT = 10.0


@dataclass(frozen=True)
class Config:
    """
    SDK configuration container.

    Attributes:
        token: API token value (never logged, never shown in repr)
        base_url: Full URL requests are posted to
        token_param_name: Form parameter carrying the token
        timeout: Read timeout in seconds
        connect_timeout: Connection timeout in seconds
        validate_schema: Validate requests/responses against XSD files
        treat_empty_as_null: Convert empty strings to None in parsed records
        schema_base_path: Local XSD directory (None = bundled resources/xsd)
        schema_base_url: Base URL XSD files are downloaded from

    Example:
        >>> config = Config(token='your-api-token')
        >>> config = Config(token='your-api-token', validate_schema=True)
    """

    token: str = field(repr=False)
    base_url: str = DEFAULT_BASE_URL
    token_param_name: str = DEFAULT_TOKEN_PARAM
    timeout: float = DEFAULT_TIMEOUT
    connect_timeout: float = DEFAULT_CONNECT_TIMEOUT
    validate_schema: bool = False
    treat_empty_as_null: bool = True
    schema_base_path: Optional[str] = None
    schema_base_url: str = DEFAULT_SCHEMA_BASE_URL

    def __post_init__(self):
        if not self.token:
            raise ValueError('token is required')

    def get_schema_base_path(self) -> str:
        """Local XSD directory, falling back to the bundled one."""
        if self.schema_base_path is not None:
            return self.schema_base_path
        return str(get_dir(Dir.XSD))

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Config':
        """
        Build a Config from a kebab-case mapping (as found in JSON config files).

        Unknown keys are ignored; missing keys take their defaults.

        Args:
            data: Mapping such as {"token": "...", "base-url": "...", "timeout": 15}

        Returns:
            Config instance
        """
        kwargs = {}
        for name in cls.__dataclass_fields__:
            key = name.replace('_', '-')
            if key in data:
                kwargs[name] = data[key]
            elif name in data:
                kwargs[name] = data[name]

        if 'schema_base_path' in kwargs and kwargs['schema_base_path'] is not None:
            kwargs['schema_base_path'] = str(Path(kwargs['schema_base_path']))

        return cls(**kwargs)
