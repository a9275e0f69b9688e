# directo/logger.py
"""
Package logger with MANDATORY token redaction.

Provides:
- TokenRedactionFilter: regex and keyword redaction rules read from
  log-redaction-patterns.json
- DirectoLogger: thread-safe singleton around the 'Directo' logger
- configure_logging(): console output from logging-config.json for
  scripts and the directo-schemas command

Importing the SDK only touches the 'Directo' logger: it gets the redaction
filter and a NullHandler. Handlers, filters and levels of the host
application are left alone until a script opts in with configure_logging().

SECURITY: a missing or invalid redaction file raises ConfigurationError.
There are no built-in fallback patterns.
"""

import json
import logging
import logging.config
import re
import threading
import time
from pathlib import Path
from typing import Any, Dict, List, Tuple

from directo.exceptions import ConfigurationError
from directo.path_helpers import get_path, Dir

LOGGER_NAME = 'Directo'
REDACTION_FILENAME = 'log-redaction-patterns.json'
LOGGING_CONFIG_FILENAME = 'logging-config.json'

# Keyword values end at whitespace, ; " ' & , } or end of text
KEYWORD_VALUE = r"[^\s;\"'&,}]*"


def _config_error(title: str, message: str, path: Path) -> ConfigurationError:
    return ConfigurationError(
        f"\n{'=' * 60}\n"
        f"{title}\n"
        f"{message}\n"
        f"File: {path}\n"
        f"{'=' * 60}"
    )


def _load_json_object(filename: str, title: str) -> Tuple[Dict[str, Any], Path]:
    """Read a bundled JSON config file that must hold an object."""
    path = get_path(Dir.CONFIG, filename)
    try:
        with open(path, 'r', encoding='utf-8') as f:
            data = json.load(f)
    except FileNotFoundError as e:
        raise _config_error(title, f"{filename} not found!", path) from e
    except json.JSONDecodeError as e:
        raise _config_error(title, f"Invalid JSON!\nError: {e}", path) from e
    except OSError as e:
        raise _config_error(title, f"Failed to read file!\nError: {e}", path) from e

    if not isinstance(data, dict):
        raise _config_error(title, "Configuration must be a JSON object (not array or scalar)", path)
    return data, path


class TokenRedactionFilter(logging.Filter):
    """
    Redacts tokens and secrets from log records.

    Two rule kinds are read from the 'redaction-patterns' object:
    - patterns: {name, pattern, replacement} regexes, matched case-insensitively
    - simple-patterns: {name, contains, replacement}; the value following any
      keyword in 'contains' is replaced

    Only string content is rewritten. Numeric and other arguments keep their
    type so '%d' style messages still format.
    """

    TITLE = "CRITICAL SECURITY ERROR"

    def __init__(self):
        super().__init__()
        config, self.config_path = _load_json_object(REDACTION_FILENAME, self.TITLE)

        section = config.get('redaction-patterns')
        if not isinstance(section, dict):
            self._fail("Missing or invalid top-level object: 'redaction-patterns'")

        self.patterns = [self._compile_regex(rule) for rule in self._rules(section, 'patterns', required=True)]
        self.simple_patterns = [
            compiled
            for rule in self._rules(section, 'simple-patterns', required=False)
            for compiled in self._compile_keywords(rule)
        ]

        if not self.patterns and not self.simple_patterns:
            self._fail("No redaction patterns loaded! At least one pattern is required.")

    def _fail(self, message: str) -> None:
        raise _config_error(self.TITLE, message, self.config_path)

    def _rules(self, section: Dict[str, Any], key: str, required: bool) -> List[Dict[str, Any]]:
        if key not in section:
            if required:
                self._fail(f"Missing required key: 'redaction-patterns.{key}'")
            return []

        rules = section[key]
        if not isinstance(rules, list):
            self._fail(f"'redaction-patterns.{key}' must be an array")
        for idx, rule in enumerate(rules):
            if not isinstance(rule, dict):
                self._fail(f"{key} entry {idx} must be an object")
            if not isinstance(rule.get('replacement'), str):
                self._fail(f"{key} entry {idx} needs a string 'replacement'")
        return rules

    def _compile_regex(self, rule: Dict[str, Any]) -> Tuple[re.Pattern, str]:
        name = rule.get('name', '?')
        if not isinstance(rule.get('pattern'), str):
            self._fail(f"Pattern '{name}' needs a string 'pattern'")
        try:
            return re.compile(rule['pattern'], re.IGNORECASE), rule['replacement']
        except re.error as e:
            self._fail(f"Invalid regex in pattern '{name}'\nRegex: {rule['pattern']}\nError: {e}")

    def _compile_keywords(self, rule: Dict[str, Any]) -> List[Tuple[re.Pattern, str]]:
        name = rule.get('name', '?')
        keywords = rule.get('contains')
        if not isinstance(keywords, list) or not keywords:
            self._fail(f"Simple pattern '{name}' needs a non-empty 'contains' array")
        if not all(isinstance(keyword, str) and keyword for keyword in keywords):
            self._fail(f"Simple pattern '{name}' contains an invalid keyword")

        replacement = rule['replacement'].replace('\\', r'\\')
        return [
            (re.compile(f"({re.escape(keyword)}){KEYWORD_VALUE}", re.IGNORECASE), f"\\1{replacement}")
            for keyword in keywords
        ]

    def redact(self, text: str) -> str:
        """Apply all redaction rules to a string."""
        for pattern, replacement in self.patterns:
            text = pattern.sub(replacement, text)
        for pattern, replacement in self.simple_patterns:
            text = pattern.sub(replacement, text)
        return text

    def _redact_arg(self, arg: Any) -> Any:
        return self.redact(arg) if isinstance(arg, str) else arg

    def filter(self, record: logging.LogRecord) -> bool:
        if isinstance(record.msg, str):
            record.msg = self.redact(record.msg)

        if isinstance(record.args, dict):
            record.args = {k: self._redact_arg(v) for k, v in record.args.items()}
        elif record.args:
            record.args = tuple(self._redact_arg(arg) for arg in record.args)

        return True


class UTCFormatter(logging.Formatter):
    """Formatter that uses UTC timestamps."""

    converter = time.gmtime


class DirectoLogger:
    """
    Thread-safe singleton around the 'Directo' logger.

    The redaction filter is attached to the package logger only; records
    propagate to whatever handlers the host application configured.
    """

    _instance = None
    _lock = threading.Lock()

    def __new__(cls):
        with cls._lock:
            if cls._instance is None:
                cls._instance = super().__new__(cls)
                cls._instance._initialized = False
        return cls._instance

    def __init__(self):
        with self._lock:
            if self._initialized:
                return

            # Raises ConfigurationError if the redaction file is missing/invalid
            self.token_filter = TokenRedactionFilter()

            self.logger = logging.getLogger(LOGGER_NAME)
            self.logger.addFilter(self.token_filter)
            self.logger.addHandler(logging.NullHandler())
            self._initialized = True

            self.logger.debug(f"DirectoLogger ready: {len(self.token_filter.patterns)} regex, "
                              f"{len(self.token_filter.simple_patterns)} keyword rules")

    def debug(self, msg: str, *args, **kwargs) -> None:
        self.logger.debug(msg, *args, **kwargs)

    def info(self, msg: str, *args, **kwargs) -> None:
        self.logger.info(msg, *args, **kwargs)

    def warning(self, msg: str, *args, **kwargs) -> None:
        self.logger.warning(msg, *args, **kwargs)

    def error(self, msg: str, *args, **kwargs) -> None:
        self.logger.error(msg, *args, **kwargs)


def setup_logger() -> DirectoLogger:
    """
    Get the package logger.

    Safe to call at import time: no handlers are installed and the host's
    logging configuration is untouched.

    Raises:
        ConfigurationError: If log-redaction-patterns.json is missing or invalid

    Example:
        >>> logger = setup_logger()
        >>> logger.info("Listing customers")
    """
    return DirectoLogger()


def configure_logging() -> DirectoLogger:
    """
    Apply the bundled logging-config.json (console handler, UTC timestamps).

    For scripts and the directo-schemas command, which own their process.
    dictConfig replaces existing handlers, so applications that embed the
    SDK should configure logging themselves instead.

    Returns:
        The package logger

    Raises:
        ConfigurationError: If logging-config.json is missing or invalid
    """
    title = "CRITICAL CONFIGURATION ERROR"
    config, path = _load_json_object(LOGGING_CONFIG_FILENAME, title)

    missing = [s for s in ('formatters', 'handlers', 'loggers') if s not in config]
    if missing:
        raise _config_error(title, f"Missing required sections: {', '.join(missing)}", path)
    if LOGGER_NAME not in config['loggers']:
        raise _config_error(title, f"'{LOGGER_NAME}' logger not configured!", path)

    for formatter in config['formatters'].values():
        formatter['()'] = UTCFormatter

    directo_logger = setup_logger()
    try:
        logging.config.dictConfig(config)
    except (ValueError, TypeError, AttributeError, ImportError) as e:
        raise _config_error(title, f"Failed to apply logging configuration!\nError: {e}", path) from e

    return directo_logger
