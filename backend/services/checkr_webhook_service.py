"""Checkr webhook service - applies verified webhooks to CheckrAccount state.

State machine per CheckrAccount::

    uncredentialed --account.credentialed--> credentialed
    uncredentialed --token.deauthorized----> disconnected
    credentialed   --token.deauthorized----> disconnected

A disconnected record has no token or Checkr account id left, so later
webhooks can't match it.

Each handler takes the database write lock, looks the record up, and ends
the transaction itself: ``commit()`` after a state change, ``rollback()``
when there was nothing to change.
"""

import logging
from enum import Enum

from sqlalchemy.orm import Session

from database import acquire_write_lock
from schemas.checkr import (
    AccountCredentialedEvent,
    TokenDeauthorizedEvent,
    WebhookEvent,
)
from services.checkr_account_service import CheckrAccountService
from services.token_cipher import TokenCipher

logger = logging.getLogger(__name__)


class WebhookOutcome(str, Enum):
    """What happened to a verified webhook.

    ``ACCOUNT_NOT_FOUND`` asks Checkr to retry: ``account.credentialed`` can
    arrive before the token exchange that creates the record has finished.
    """

    CREDENTIALED = "credentialed"
    ACCOUNT_NOT_FOUND = "account_not_found"
    DEAUTHORIZED = "deauthorized"
    IGNORED = "ignored"


class CheckrWebhookService:
    """Dispatches decoded Checkr webhook events."""

    def __init__(self, cipher: TokenCipher):
        self._cipher = cipher

    def handle(self, db: Session, event: WebhookEvent) -> WebhookOutcome:
        """Apply ``event`` to the matching CheckrAccount, if any."""
        logger.info("Handling Checkr webhook: %s", event.type)
        try:
            if isinstance(event, AccountCredentialedEvent):
                return self._handle_account_credentialed(db, event)
            if isinstance(event, TokenDeauthorizedEvent):
                return self._handle_token_deauthorized(db, event)
        except Exception:
            db.rollback()
            raise

        logger.warning("Unhandled Checkr webhook type: %s", event.type)
        return WebhookOutcome.IGNORED

    def _handle_account_credentialed(
        self, db: Session, event: AccountCredentialedEvent
    ) -> WebhookOutcome:
        checkr_account_id = event.checkr_account_id
        acquire_write_lock(db)
        record = CheckrAccountService.find_by_checkr_account_id(db, checkr_account_id)
        if record is None:
            db.rollback()
            logger.info(
                "account.credentialed for unknown Checkr account %s, asking Checkr to retry",
                checkr_account_id,
            )
            return WebhookOutcome.ACCOUNT_NOT_FOUND

        CheckrAccountService.mark_credentialed(db, record)
        db.commit()
        return WebhookOutcome.CREDENTIALED

    def _handle_token_deauthorized(
        self, db: Session, event: TokenDeauthorizedEvent
    ) -> WebhookOutcome:
        # event.account_id is the partner's own account; match on the token.
        acquire_write_lock(db)
        record = CheckrAccountService.find_by_access_token(
            db, self._cipher, event.access_code
        )
        if record is None:
            db.rollback()
            logger.info("token.deauthorized for a token with no connected account, ignoring")
            return WebhookOutcome.DEAUTHORIZED

        CheckrAccountService.mark_disconnected(db, record)
        db.commit()
        return WebhookOutcome.DEAUTHORIZED
