"""Symmetric encryption for stored Checkr access tokens.

Access tokens are long-lived secrets, so they are only ever persisted as
Fernet ciphertext.  Fernet output is randomized (a fresh IV per call), which
means two encryptions of the same token never compare equal; matching a
token against stored rows has to decrypt them.
"""

import logging
from functools import lru_cache

from cryptography.fernet import Fernet, InvalidToken

from config import settings

logger = logging.getLogger(__name__)


class TokenDecryptionError(ValueError):
    """Ciphertext is malformed or was produced with a different key."""


class TokenCipher:
    """Encrypts and decrypts access tokens with a Fernet key."""

    def __init__(self, key: str | bytes):
        if isinstance(key, str):
            key = key.encode()
        try:
            self._fernet = Fernet(key)
        except ValueError as exc:
            raise ValueError(
                "Invalid TOKEN_ENCRYPTION_KEY, expected a url-safe base64 "
                "encoded 32-byte Fernet key"
            ) from exc

    def encrypt(self, plaintext: str) -> str:
        """Return the ciphertext for ``plaintext`` as a str."""
        return self._fernet.encrypt(plaintext.encode("utf-8")).decode("ascii")

    def decrypt(self, ciphertext: str) -> str:
        """Return the plaintext for ``ciphertext``.

        Raises:
            TokenDecryptionError: If the ciphertext can't be authenticated.
        """
        try:
            return self._fernet.decrypt(ciphertext.encode("ascii")).decode("utf-8")
        except (InvalidToken, UnicodeError) as exc:
            raise TokenDecryptionError("Access token ciphertext could not be decrypted") from exc


def _resolve_encryption_key() -> str:
    """Determine the Fernet key, generating one on first run.

    A generated key is stored in the keychain so tokens stay readable
    across restarts.  If the keychain is unavailable the key only lives
    for this process.
    """
    if settings.TOKEN_ENCRYPTION_KEY:
        return settings.TOKEN_ENCRYPTION_KEY

    key = Fernet.generate_key().decode("ascii")
    from services.credential_manager import set_credential

    if set_credential("TOKEN_ENCRYPTION_KEY", key):
        logger.info("Generated new TOKEN_ENCRYPTION_KEY and stored it in keychain")
    else:
        logger.warning(
            "Could not store TOKEN_ENCRYPTION_KEY in keychain, using an "
            "ephemeral key. Stored access tokens will be unreadable after "
            "restart; set TOKEN_ENCRYPTION_KEY in the environment."
        )
    return key


@lru_cache
def get_token_cipher() -> TokenCipher:
    """Get the application's token cipher (cached)."""
    return TokenCipher(_resolve_encryption_key())
