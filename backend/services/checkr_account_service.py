"""Checkr account service - lookup and state changes for CheckrAccount rows.

Mutators only flush; the caller owns the transaction.  Callers doing a
read-modify-write take the write lock first (``database.acquire_write_lock``)
and the lookups here add ``FOR UPDATE`` where the backend supports it.
"""

import hmac
import logging

from sqlalchemy.orm import Session

from integrations.checkr_client import CheckrTokenGrant
from models import Account, CheckrAccount, CheckrAccountState
from services.token_cipher import TokenCipher, TokenDecryptionError

logger = logging.getLogger(__name__)


class CheckrAccountService:
    """Service for finding and updating Checkr authorization records."""

    @staticmethod
    def find_by_account_id(db: Session, account_id: str) -> CheckrAccount | None:
        """Get the CheckrAccount attached to a partner account."""
        return (
            db.query(CheckrAccount)
            .filter(CheckrAccount.account_id == account_id)
            .with_for_update()
            .first()
        )

    @staticmethod
    def find_by_checkr_account_id(
        db: Session, checkr_account_id: str
    ) -> CheckrAccount | None:
        """Get the CheckrAccount Checkr knows as ``checkr_account_id``."""
        if not checkr_account_id:
            return None
        return (
            db.query(CheckrAccount)
            .filter(CheckrAccount.checkr_account_id == checkr_account_id)
            .with_for_update()
            .first()
        )

    @staticmethod
    def find_by_access_token(
        db: Session, cipher: TokenCipher, access_token: str
    ) -> CheckrAccount | None:
        """Get the CheckrAccount whose stored token decrypts to ``access_token``.

        Stored ciphertexts are randomized, so every connected row is
        decrypted and compared.  Rows that don't decrypt with the current
        key are skipped.
        """
        if not access_token:
            return None
        candidates = (
            db.query(CheckrAccount)
            .filter(CheckrAccount.encrypted_access_token.isnot(None))
            .with_for_update()
            .all()
        )
        expected = access_token.encode("utf-8")
        for record in candidates:
            try:
                stored = cipher.decrypt(record.encrypted_access_token)
            except TokenDecryptionError:
                logger.warning(
                    "Skipping CheckrAccount %s: stored token does not decrypt with the current key",
                    record.id,
                )
                continue
            if hmac.compare_digest(stored.encode("utf-8"), expected):
                return record
        return None

    @staticmethod
    def attach_credentials(
        db: Session,
        account: Account,
        grant: CheckrTokenGrant,
        cipher: TokenCipher,
    ) -> CheckrAccount:
        """Attach a freshly exchanged token to a partner account.

        Any previous authorization for the account is replaced wholesale and
        the record starts over as ``uncredentialed``.

        If another partner account still holds the same Checkr account, that
        record is disconnected first so a Checkr account id matches one row.
        """
        record = CheckrAccountService.find_by_account_id(db, account.id)
        if record is None:
            record = CheckrAccount(account_id=account.id)
            db.add(record)
        elif record.state != CheckrAccountState.disconnected.value:
            logger.info(
                "Replacing %s Checkr authorization %s for account %s",
                record.state,
                record.checkr_account_id,
                account.id,
            )

        previous = CheckrAccountService.find_by_checkr_account_id(
            db, grant.checkr_account_id
        )
        if previous is not None and previous.account_id != account.id:
            logger.warning(
                "Checkr account %s moves from account %s to account %s",
                grant.checkr_account_id,
                previous.account_id,
                account.id,
            )
            CheckrAccountService.mark_disconnected(db, previous)

        record.checkr_account_id = grant.checkr_account_id
        record.encrypted_access_token = cipher.encrypt(grant.access_token)
        record.state = CheckrAccountState.uncredentialed.value
        db.flush()
        logger.info(
            "Connected account %s to Checkr account %s",
            account.id,
            grant.checkr_account_id,
        )
        return record

    @staticmethod
    def mark_credentialed(db: Session, record: CheckrAccount) -> CheckrAccount:
        """Record that Checkr finished credentialing the account."""
        if record.state != CheckrAccountState.credentialed.value:
            record.state = CheckrAccountState.credentialed.value
            db.flush()
            logger.info("Checkr account %s is credentialed", record.checkr_account_id)
        return record

    @staticmethod
    def mark_disconnected(db: Session, record: CheckrAccount) -> CheckrAccount:
        """Record that the access token was revoked.

        Both the token and the Checkr account id are cleared; a new token
        exchange is the only way back.
        """
        logger.info(
            "Disconnecting Checkr account %s from account %s",
            record.checkr_account_id,
            record.account_id,
        )
        record.checkr_account_id = None
        record.encrypted_access_token = None
        record.state = CheckrAccountState.disconnected.value
        db.flush()
        return record
