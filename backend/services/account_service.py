"""Account management service."""

import logging

from sqlalchemy.orm import Session, joinedload

from models import Account

logger = logging.getLogger(__name__)


class AccountService:
    """Service for managing partner account CRUD operations."""

    @staticmethod
    def list_accounts(db: Session) -> list[Account]:
        """List all accounts with their Checkr connection loaded."""
        return (
            db.query(Account)
            .options(joinedload(Account.checkr_account))
            .order_by(Account.created_at)
            .all()
        )

    @staticmethod
    def get_account(db: Session, account_id: str) -> Account | None:
        """Get a specific account by ID."""
        return db.query(Account).filter(Account.id == account_id).first()

    @staticmethod
    def create_account(db: Session, name: str) -> Account:
        """Create a partner account.  The caller commits."""
        account = Account(name=name)
        db.add(account)
        db.flush()
        logger.info("Account created: %s (id=%s)", account.name, account.id)
        return account
