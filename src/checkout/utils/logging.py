"""Logging configuration for the checkout domain.

Everything logs through structlog with key-value events. Checkout events
routinely carry PayFast payloads, so a redaction processor masks merchant
credentials and signatures before any renderer sees them.
"""

import logging
import os
import sys
from collections.abc import MutableMapping
from typing import Any

import structlog

REDACTED = "***"

# Keys that must never reach a log sink in clear text
SENSITIVE_KEYS = frozenset({"merchant_key", "passphrase", "signature"})

_LEVELS_BY_ENV = {
    "production": "INFO",
    "staging": "INFO",
    "development": "DEBUG",
    "test": "WARNING",
}

_configured = False


def current_env() -> str:
    return (os.getenv("PROTEAN_ENV") or os.getenv("ENVIRONMENT") or "development").lower()


def get_log_level() -> str:
    """``LOG_LEVEL`` wins; otherwise the level follows the config environment."""
    return os.getenv("LOG_LEVEL", _LEVELS_BY_ENV.get(current_env(), "INFO")).upper()


def redact_secrets(logger: Any, method_name: str, event_dict: MutableMapping) -> MutableMapping:
    """structlog processor masking sensitive keys, one level into nested mappings."""
    for key, value in list(event_dict.items()):
        if key in SENSITIVE_KEYS and value:
            event_dict[key] = REDACTED
        elif isinstance(value, dict):
            event_dict[key] = {k: REDACTED if k in SENSITIVE_KEYS and v else v for k, v in value.items()}
    return event_dict


def _renderer(env: str):
    if env in ("production", "staging"):
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer(colors=False)


def configure_logging(force: bool = False) -> None:
    """Wire stdlib logging and structlog together. Safe to call repeatedly."""
    global _configured
    if _configured and not force:
        return

    level = get_log_level()
    env = current_env()

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)
    root = logging.getLogger()
    root.handlers = [handler]
    root.setLevel(level)

    # Framework and transport chatter
    for noisy in ("protean", "urllib3", "asyncio"):
        logging.getLogger(noisy).setLevel(logging.WARNING)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            redact_secrets,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            _renderer(env),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
    _configured = True


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)


def add_context(**kwargs: Any) -> None:
    """Bind values (e.g. the payment reference) to every log line of the current request."""
    structlog.contextvars.bind_contextvars(**kwargs)


def clear_context() -> None:
    structlog.contextvars.clear_contextvars()
