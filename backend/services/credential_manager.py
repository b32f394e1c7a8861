"""Keychain storage for the Checkr OAuth client credentials and token key.

``config.KeychainSettingsSource`` reads these at startup, ``token_cipher``
stores a generated ``TOKEN_ENCRYPTION_KEY`` on first run, and
``scripts/setup_checkr.py`` writes all three.  Nothing else is kept in the
keychain: the API URL, redirect URL and database URL are plain settings.

``keyring`` is imported on use, so a host without a usable keychain backend
simply falls through to environment variables.
"""

import logging

logger = logging.getLogger(__name__)

SERVICE_NAME = "checkr-connect"

CREDENTIAL_KEYS: frozenset[str] = frozenset(
    {
        "CHECKR_OAUTH_CLIENT_ID",
        "CHECKR_OAUTH_CLIENT_SECRET",
        "TOKEN_ENCRYPTION_KEY",
    }
)


def _keyring():
    try:
        import keyring
    except ImportError:
        return None
    return keyring


def get_credential(key: str) -> str | None:
    """Return the keychain value for ``key``, or ``None``.

    ``None`` covers "not stored", "no keyring" and "keychain locked or
    broken" alike; the caller then falls back to the environment.
    """
    backend = _keyring()
    if backend is None:
        return None
    try:
        return backend.get_password(SERVICE_NAME, key)
    except Exception:
        logger.debug("Keychain read of %s failed", key, exc_info=True)
        return None


def set_credential(key: str, value: str) -> bool:
    """Store a Checkr secret in the keychain.

    Only names in :data:`CREDENTIAL_KEYS` with a non-blank value are
    written.  The value itself is never logged.

    Returns:
        ``True`` once the keychain accepted the value.
    """
    if key not in CREDENTIAL_KEYS:
        logger.warning("Refusing to store %s: not a Checkr credential", key)
        return False
    if not value or not value.strip():
        logger.warning("Refusing to store an empty %s", key)
        return False

    backend = _keyring()
    if backend is None:
        logger.warning("keyring is not installed, %s was not stored", key)
        return False
    try:
        backend.set_password(SERVICE_NAME, key, value)
    except Exception:
        logger.warning("Keychain write of %s failed", key, exc_info=True)
        return False
    logger.info("Stored %s in keychain", key)
    return True
