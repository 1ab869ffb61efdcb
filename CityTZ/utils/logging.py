"""
Centralized logging configuration for the CityTZ package.

All CityTZ modules log through the ``CityTZ`` package logger, which this module
configures once (handlers, level, JSON or text format). The root logger is left
alone so that applications embedding CityTZ keep control of their own logging.

Environment variables:
    CITYTZ_LOG_LEVEL: debug, info, warning, error or critical
    CITYTZ_LOG_FORMAT: 'json' or 'text'
    CITYTZ_LOG_FILE: optional path of a rotating log file
"""

import json
import logging
import os
import platform
import socket
import sys
import uuid
from logging.handlers import RotatingFileHandler
from typing import Optional, Dict, Any, Union, List

# Name of the package logger every module logger descends from
PACKAGE_LOGGER_NAME = 'CityTZ'

DEFAULT_LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
DEFAULT_JSON_FORMAT = False

LOG_LEVEL_ENV_VAR = 'CITYTZ_LOG_LEVEL'
LOG_FORMAT_ENV_VAR = 'CITYTZ_LOG_FORMAT'
LOG_FILE_ENV_VAR = 'CITYTZ_LOG_FILE'

LOG_LEVELS = {
    'debug': logging.DEBUG,
    'info': logging.INFO,
    'warning': logging.WARNING,
    'error': logging.ERROR,
    'critical': logging.CRITICAL,
}

_logging_configured = False

_service_info = {
    'service_name': 'citytz',
    'service_version': None,  # Filled in by configure_logging
    'hostname': socket.gethostname(),
    'os': platform.system(),
}

class JsonFormatter(logging.Formatter):
    """Format log records as single-line JSON documents."""

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            'timestamp': self.formatTime(record, '%Y-%m-%dT%H:%M:%S'),
            'level': record.levelname,
            'logger': record.name,
            'message': record.getMessage(),
        }

        for key, value in _service_info.items():
            if value is not None:
                log_data[key] = value

        if record.exc_info:
            log_data['exception'] = {
                'type': record.exc_info[0].__name__,
                'message': str(record.exc_info[1]),
                'traceback': self.formatException(record.exc_info),
            }

        # Structured fields attached by StructuredLoggerAdapter
        extras = getattr(record, 'extras', None)
        if extras:
            for key, value in extras.items():
                if key != 'extras':
                    log_data[key] = value

        return json.dumps(log_data, default=str)

class StructuredLoggerAdapter(logging.LoggerAdapter):
    """
    Adapter that attaches a fixed set of context fields to every record.

    Per-call fields passed with ``extra=`` are merged over the adapter's own
    fields and exposed to JsonFormatter through the record's ``extras``
    attribute.
    """

    def __init__(self, logger: logging.Logger, extra: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(logger, extra or {})

    def process(self, msg: str, kwargs: Dict[str, Any]) -> tuple:
        extras = dict(self.extra)
        if 'extra' in kwargs:
            extras.update(kwargs['extra'])

        kwargs_copy = kwargs.copy()
        kwargs_copy['extra'] = dict(extras, extras=extras)
        return msg, kwargs_copy

def _resolve_level(level: Optional[Union[int, str]]) -> int:
    if level is None:
        level = os.environ.get(LOG_LEVEL_ENV_VAR, 'info')
    if isinstance(level, str):
        return LOG_LEVELS.get(level.lower(), logging.INFO)
    return level

def configure_logging(level: Optional[Union[int, str]] = None,
                      format_str: Optional[str] = None,
                      use_json: Optional[bool] = None,
                      log_file: Optional[str] = None) -> None:
    """
    Configure the CityTZ package logger.

    Called implicitly by get_logger() with no arguments; calling it again with
    any argument reconfigures the handlers.

    Args:
        level: Log level (default: CITYTZ_LOG_LEVEL or INFO)
        format_str: Format string for text output
        use_json: Emit JSON documents instead of text (default: CITYTZ_LOG_FORMAT)
        log_file: Optional path to a rotating log file (default: CITYTZ_LOG_FILE)
    """
    global _logging_configured

    if _logging_configured and level is None and format_str is None and use_json is None and log_file is None:
        return

    resolved_level = _resolve_level(level)

    if use_json is None:
        env_format = os.environ.get(LOG_FORMAT_ENV_VAR, '').lower()
        use_json = env_format == 'json' if env_format else DEFAULT_JSON_FORMAT

    if log_file is None:
        log_file = os.environ.get(LOG_FILE_ENV_VAR)

    package_logger = logging.getLogger(PACKAGE_LOGGER_NAME)
    package_logger.setLevel(resolved_level)
    package_logger.propagate = False

    for handler in list(package_logger.handlers):
        package_logger.removeHandler(handler)
        handler.close()

    handlers: List[logging.Handler] = [logging.StreamHandler(sys.stderr)]

    if log_file:
        try:
            handlers.append(RotatingFileHandler(
                log_file,
                maxBytes=10 * 1024 * 1024,  # 10 MB
                backupCount=5
            ))
        except OSError as e:
            print(f"Warning: Could not create log file {log_file}: {e}", file=sys.stderr)

    formatter = JsonFormatter() if use_json else logging.Formatter(format_str or DEFAULT_LOG_FORMAT)
    for handler in handlers:
        handler.setFormatter(formatter)
        package_logger.addHandler(handler)

    _logging_configured = True

    try:
        from CityTZ import __version__
        _service_info['service_version'] = __version__
    except ImportError:
        pass

    package_logger.debug(
        f"Logging configured with level: {logging.getLevelName(resolved_level)}, "
        f"format: {'JSON structured' if use_json else 'text'}"
    )

def configure_from_config(config: Any) -> None:
    """
    Apply the ``logging`` section of a ConfigManager.

    Environment variables still take precedence over the configuration file,
    so an operator can raise verbosity without editing citytz.yml.
    """
    level = os.environ.get(LOG_LEVEL_ENV_VAR) or config.get("logging.level", "info")
    env_format = os.environ.get(LOG_FORMAT_ENV_VAR)
    log_format = (env_format or config.get("logging.format", "text")).lower()
    log_file = os.environ.get(LOG_FILE_ENV_VAR) or config.get("logging.file")

    configure_logging(level=level, use_json=log_format == 'json', log_file=log_file or None)

def set_log_level(level: Union[int, str]) -> None:
    """
    Set the log level for CityTZ loggers at runtime.

    Args:
        level: 'debug', 'info', 'warning', 'error', 'critical' or a logging constant

    Raises:
        ValueError: If a string level is not recognised

    Example:
        >>> from CityTZ.utils.logging import set_log_level
        >>> set_log_level('debug')
    """
    if isinstance(level, str):
        level_str = level.lower()
        if level_str not in LOG_LEVELS:
            valid_levels = ", ".join(LOG_LEVELS.keys())
            raise ValueError(f"Invalid log level: {level}. Valid levels are: {valid_levels}")
        level = LOG_LEVELS[level_str]

    configure_logging()
    package_logger = logging.getLogger(PACKAGE_LOGGER_NAME)
    package_logger.setLevel(level)
    package_logger.debug(f"Log level set to: {logging.getLevelName(level)}")

def get_logger(name: str, extra: Optional[Dict[str, Any]] = None) -> Union[logging.Logger, StructuredLoggerAdapter]:
    """
    Get a logger that follows CityTZ conventions.

    Returns a StructuredLoggerAdapter when extra context fields are supplied,
    otherwise the plain logger.

    Args:
        name: Logger name, typically __name__ of the calling module
        extra: Optional context fields attached to every record

    Example:
        >>> logger = get_logger(__name__, {'component': 'loader'})
        >>> logger.info("Loaded cities", extra={'city_count': 1000})
    """
    configure_logging()

    logger = logging.getLogger(name)
    if extra:
        return StructuredLoggerAdapter(logger, extra)
    return logger

def get_request_id() -> str:
    """Generate a unique request ID for tracing."""
    return str(uuid.uuid4())
