"""Checkr OAuth service - connecting and disconnecting partner accounts."""

import logging

from sqlalchemy.orm import Session

from database import acquire_write_lock
from integrations.checkr_client import CheckrClient
from models import CheckrAccount
from services.account_service import AccountService
from services.checkr_account_service import CheckrAccountService
from services.token_cipher import TokenCipher

logger = logging.getLogger(__name__)


class AccountNotFoundError(LookupError):
    """The OAuth ``state`` does not name an existing partner account."""


class CheckrOAuthService:
    """Runs the token exchange and deauthorization flows."""

    def __init__(self, client: CheckrClient, cipher: TokenCipher):
        self._client = client
        self._cipher = cipher

    def connect_account(self, db: Session, account_id: str, code: str) -> CheckrAccount:
        """Exchange ``code`` and attach the resulting token to the account.

        Args:
            db: Database session
            account_id: Partner account id, passed through Checkr as ``state``
            code: OAuth authorization code from the redirect

        Returns:
            The ``uncredentialed`` CheckrAccount for the partner account.

        Raises:
            AccountNotFoundError: ``account_id`` is unknown (checked before
                the code is spent).
            ProviderError: Any failure from :meth:`CheckrClient.exchange_authorization_code`.
        """
        if AccountService.get_account(db, account_id) is None:
            raise AccountNotFoundError(f"Account not found: {account_id}")

        grant = self._client.exchange_authorization_code(code)

        acquire_write_lock(db)
        try:
            account = AccountService.get_account(db, account_id)
            if account is None:
                raise AccountNotFoundError(f"Account not found: {account_id}")
            record = CheckrAccountService.attach_credentials(db, account, grant, self._cipher)
            db.commit()
        except Exception:
            db.rollback()
            raise
        return record

    def deauthorize(self, encrypted_token: str) -> None:
        """Ask Checkr to revoke a stored access token.

        Local state is left alone.  The record moves to ``disconnected``
        when the ``token.deauthorized`` webhook confirming the revocation
        arrives, which keeps the token matchable until then.

        Raises:
            TokenDecryptionError: ``encrypted_token`` isn't ours.
            ProviderError: Any failure from :meth:`CheckrClient.deauthorize`.
        """
        access_token = self._cipher.decrypt(encrypted_token)
        self._client.deauthorize(access_token)
