# directo/config_loader.py
"""
ConfigLoader with JSON Schema validation, secrets injection and caching.

Handles configuration and secrets with:
- JSON Schema validation of the config file
- Flat secrets file (the API token lives only there)
- Thread-safe cached loading
"""
import json
import threading
from pathlib import Path
from typing import Dict, Any, Optional, Union

import jsonschema

from directo.config import Config
from directo.exceptions import (
    ConfigurationError, ConfigValidationError, ErrorContext, HelpfulError
)
from directo.logger import setup_logger
from directo.path_helpers import get_path, Dir

logger = setup_logger()

CONFIG_SCHEMA_FILENAME = 'directo-config-schema.json'

EXAMPLE_CONFIG = """{
  "directo": {
    "base-url": "https://login.directo.ee/xmlcore/cap_xml_direct/xmlcore.asp",
    "timeout": 30,
    "validate-schema": false
  }
}"""


class ConfigLoader:
    """
    Configuration loader producing an immutable Config.

    The config file holds a "directo" section with kebab-case keys.
    The secrets file is a flat mapping and must provide "token".
    """

    __slots__ = ['config_path', 'secrets_path', '_config', '_raw', '_secrets', '_lock']

    def __init__(self, config_path: Union[str, Path],
                 secrets_path: Optional[Union[str, Path]] = None) -> None:
        """
        Args:
            config_path: Path of the JSON config file
            secrets_path: Path of the flat JSON secrets file (optional)
        """
        self.config_path = Path(config_path)
        self.secrets_path = Path(secrets_path) if secrets_path else None
        self._config: Optional[Config] = None
        self._raw: Optional[Dict[str, Any]] = None
        self._secrets: Optional[Dict[str, Any]] = None
        self._lock = threading.Lock()

    @staticmethod
    def _read_json(path: Path) -> Any:
        with open(path, 'r', encoding='utf-8') as f:
            return json.load(f)

    def _load_secrets(self) -> Dict[str, Any]:
        """
        Load flat key-value secrets file.

        Returns:
            Dictionary of secrets, or empty dict if no secrets file is set

        Raises:
            ConfigurationError: If secrets contain nested structures or are not JSON
        """
        if self.secrets_path is None:
            return {}

        try:
            secrets = self._read_json(self.secrets_path)
        except FileNotFoundError:
            logger.debug(f"No secrets file found: {self.secrets_path}")
            return {}
        except json.JSONDecodeError as e:
            raise ConfigurationError(f"Invalid JSON in secrets file {self.secrets_path}: {e}") from e

        if not isinstance(secrets, dict):
            raise ConfigurationError(f"Secrets file {self.secrets_path} must contain a JSON object")

        for key, value in secrets.items():
            if isinstance(value, (dict, list)):
                raise ConfigurationError(
                    "Secrets must be flat key-value pairs. "
                    f"Found complex value at key '{key}'",
                    config_key=key
                )

        logger.debug(f"Loaded secrets: {self.secrets_path.name}")
        return secrets

    def validate_schema(self, data: Dict[str, Any]) -> None:
        """
        Validate raw config data against the bundled JSON schema.

        Raises:
            ConfigurationError: If the schema file itself is missing
            ConfigValidationError: If the data does not conform
        """
        schema_path = get_path(Dir.CONFIG, CONFIG_SCHEMA_FILENAME)
        try:
            schema = self._read_json(schema_path)
        except FileNotFoundError as e:
            raise ConfigurationError(
                f"Schema file not found: {schema_path}",
                context=ErrorContext(operation="schema_validation", resource=CONFIG_SCHEMA_FILENAME)
            ) from e

        try:
            jsonschema.validate(instance=data, schema=schema)
            logger.debug(f"✅ Schema validation successful: {self.config_path.name}")
        except jsonschema.ValidationError as e:
            error_path = " > ".join(str(p) for p in e.absolute_path) if e.absolute_path else "root"
            logger.error(f"❌ Config validation failed at '{error_path}' - {e.message}")
            raise ConfigValidationError(
                f"Schema validation failed at '{error_path}': {e.message}",
                error_path=error_path,
                context=ErrorContext(
                    operation="schema_validation",
                    resource=self.config_path.name,
                    details={"schema_file": CONFIG_SCHEMA_FILENAME, "error_path": error_path}
                )
            ) from e

    def load_config(self, validate: bool = True,
                    include_secrets: bool = True,
                    force_reload: bool = False,
                    **overrides: Any) -> Config:
        """
        Load the configuration and build a Config.

        Args:
            validate: Whether to validate against the JSON schema
            include_secrets: Whether to read the token from the secrets file
            force_reload: Ignore the cached Config
            **overrides: Config field values taking precedence (e.g. token=...)

        Returns:
            Immutable Config

        Raises:
            HelpfulError: If the config file is missing or no token is available
            ConfigValidationError: If validation fails
        """
        with self._lock:
            if self._config is not None and not force_reload and not overrides:
                logger.debug(f"Returning cached config for {self.config_path.name}")
                return self._config

            try:
                self._raw = self._read_json(self.config_path)
            except FileNotFoundError:
                raise HelpfulError(
                    what_went_wrong=f"Configuration file '{self.config_path}' not found",
                    how_to_fix=f"Create '{self.config_path}' with a \"directo\" section",
                    example=EXAMPLE_CONFIG
                )
            except json.JSONDecodeError as e:
                raise HelpfulError(
                    what_went_wrong=f"Configuration file '{self.config_path}' is not valid JSON: {e}",
                    how_to_fix="Fix the JSON syntax",
                    example=EXAMPLE_CONFIG
                ) from e

            if validate:
                self.validate_schema(self._raw)

            settings = dict(self._raw.get("directo") or {})

            if include_secrets:
                self._secrets = self._load_secrets()
                if "token" in self._secrets:
                    settings["token"] = self._secrets["token"]

            settings.update(overrides)

            if not settings.get("token"):
                raise HelpfulError(
                    what_went_wrong="No API token available",
                    how_to_fix="Add \"token\" to your secrets file or pass token=... to load_config()",
                    example='{"token": "your-directo-api-token"}'
                )

            self._config = Config.from_dict(settings)
            logger.info(f"Loaded config: {self.config_path.name}")
            return self._config

    def clear_cache(self) -> None:
        """Clear cached configuration and secrets data."""
        with self._lock:
            self._config = None
            self._raw = None
            self._secrets = None

    def __repr__(self) -> str:
        return f"ConfigLoader(config_path='{self.config_path}')"
