"""Logging setup for the Checkr Connect backend.

Access tokens must never reach a log line in plaintext or as stored
ciphertext.  Code here logs Checkr account ids and webhook types only, and
:class:`SecretRedactingFilter` on the root handlers catches what third-party
messages or exception text might still carry (Fernet tokens, Basic auth
headers, ``access_token`` / ``access_code`` / ``client_secret`` values).
"""

import logging
import re

from config import settings

REDACTED = "[REDACTED]"

# Fernet tokens are urlsafe base64 of a payload starting with version 0x80.
_FERNET_TOKEN = re.compile(r"gAAAAA[A-Za-z0-9_\-]+=*")
_BASIC_AUTH = re.compile(r"(Basic\s+)[A-Za-z0-9+/]+=*")
_SECRET_FIELD = re.compile(
    r"""(["']?(?:access_token|access_code|client_secret|encrypted_token|encryptedToken)["']?\s*[:=]\s*["']?)"""
    r"""[^"'\s,&}]+"""
)

_QUIET_LOGGERS = (
    "sqlalchemy.engine",
    "sqlalchemy.pool",
    "httpx",
    "httpcore",
    "urllib3",
)


def redact(message: str) -> str:
    """Mask token-shaped values in ``message``."""
    message = _FERNET_TOKEN.sub(REDACTED, message)
    message = _BASIC_AUTH.sub(rf"\g<1>{REDACTED}", message)
    return _SECRET_FIELD.sub(rf"\g<1>{REDACTED}", message)


class SecretRedactingFilter(logging.Filter):
    """Rewrites a record's message with :func:`redact` before it is emitted."""

    def filter(self, record: logging.LogRecord) -> bool:
        message = record.getMessage()
        cleaned = redact(message)
        if cleaned != message:
            record.msg = cleaned
            record.args = None
        return True


def setup_logging() -> None:
    """Configure the root logger from ``settings.LOG_LEVEL``.

    Every root handler gets a :class:`SecretRedactingFilter`.  SQLAlchemy
    and the HTTP client stack are held at WARNING: httpx logs each request
    URL at INFO and the engine echoes bound parameters at DEBUG.
    """
    logging.basicConfig(
        format="%(asctime)s %(levelname)-8s %(name)s  %(message)s",
        datefmt="%H:%M:%S",
        level=getattr(logging, settings.LOG_LEVEL),
        force=True,
    )
    for handler in logging.getLogger().handlers:
        handler.addFilter(SecretRedactingFilter())

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
